"""HTTP client for the event management backend.

Wraps the schedule list, session list, timezone lookup and bulk session
import endpoints. Failures are classified into TransientError (retried with
tenacity) and PermanentError subclasses (raised immediately).
"""

from pathlib import Path

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.planner.errors import (
    AuthenticationError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.planner.logging import get_logger
from src.planner.models import Schedule, TimezoneOption

log = get_logger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Keys under which list endpoints have wrapped their payloads
_LIST_KEYS = ("data", "results", "sessions", "schedules", "timezones", "items")

_retry_transient = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(TransientError),
    reraise=True,
)


def unwrap_list(payload) -> list:
    """Extract the record array from a list endpoint response."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _LIST_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
            if isinstance(value, dict):
                nested = unwrap_list(value)
                if nested:
                    return nested
    return []


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code}"
    if isinstance(data, dict):
        for key in ("message", "detail", "error"):
            if data.get(key):
                return str(data[key])
        if data.get("non_field_errors"):
            return ", ".join(str(e) for e in data["non_field_errors"])
    return f"HTTP {response.status_code}"


class EventApiClient:
    """Thin requests-based client for the event backend."""

    def __init__(
        self,
        base_url: str,
        token: str = "",
        organization: str = "",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()
        self.http.headers.update({"Accept": "application/json"})
        if token:
            self.http.headers["Authorization"] = f"Bearer {token}"
        if organization:
            self.http.headers["X-Organization"] = organization

    @classmethod
    def from_config(cls, config) -> "EventApiClient":
        return cls(
            config.eventhub_api_url,
            token=config.eventhub_token,
            organization=config.eventhub_organization,
            timeout=config.request_timeout,
        )

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except (requests.Timeout, requests.ConnectionError) as e:
            log.warning("api_unreachable", method=method, url=url, error=str(e))
            raise TransientError(f"{method} {path} failed: {e}") from e

        status = response.status_code
        if status == 429:
            raise RateLimitError(f"{method} {path}: rate limited")
        if status >= 500:
            log.warning("api_server_error", method=method, url=url, status=status)
            raise TransientError(f"{method} {path}: HTTP {status}")
        if status in (401, 403):
            raise AuthenticationError(f"{method} {path}: {_error_message(response)}")
        if status >= 400:
            raise PermanentError(f"{method} {path}: {_error_message(response)}")

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PermanentError(f"{method} {path}: response is not JSON") from e

    @_retry_transient
    def list_schedules(self, event_id: str) -> list[Schedule]:
        payload = self._request("GET", f"/api/events/{event_id}/schedules/")
        schedules = []
        for index, raw in enumerate(unwrap_list(payload)):
            if not isinstance(raw, dict):
                continue
            if raw.get("uuid") is None and raw.get("id") is None:
                raw = {**raw, "id": f"schedule-{index}"}
            schedules.append(Schedule.model_validate(raw))
        log.info("schedules_fetched", event_id=event_id, count=len(schedules))
        return schedules

    @_retry_transient
    def list_sessions(self, event_id: str, schedule_id: str | None = None) -> list[dict]:
        """Fetch raw session records; shape is left to the reconciliation pipeline."""
        params = {"schedule": schedule_id} if schedule_id else None
        payload = self._request("GET", f"/api/events/{event_id}/sessions/", params=params)
        records = unwrap_list(payload)
        log.info(
            "sessions_fetched",
            event_id=event_id,
            schedule_id=schedule_id,
            count=len(records),
        )
        return records

    @_retry_transient
    def list_timezones(self) -> list[TimezoneOption]:
        payload = self._request("GET", "/api/timezones/")
        options = []
        for raw in unwrap_list(payload):
            try:
                options.append(TimezoneOption.model_validate(raw))
            except ValueError:
                log.debug("timezone_entry_skipped", entry=raw)
        return options

    @_retry_transient
    def import_sessions(self, event_id: str, schedule_id: str, path: str | Path):
        """Upload a schedule sheet for bulk session creation."""
        path = Path(path)
        with open(path, "rb") as f:
            files = {"file": (path.name, f, XLSX_CONTENT_TYPE)}
            result = self._request(
                "POST",
                f"/api/events/{event_id}/schedules/{schedule_id}/sessions/import/",
                files=files,
                data={"event": event_id},
            )
        log.info("sessions_imported", event_id=event_id, schedule_id=schedule_id, file=path.name)
        return result
