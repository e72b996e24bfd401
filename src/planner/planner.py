"""SchedulePlanner - wires the reconciliation pipeline to its triggers.

Triggers: loading a schedule, uploading a sheet (parse, persist mapping,
upload, reload), and the event timezone becoming known (re-run over cached
records). Network failures are logged and leave the previously displayed
sessions untouched; nothing from a failed call is written into state.
"""

from pathlib import Path
from zipfile import BadZipFile

import requests
from openpyxl.utils.exceptions import InvalidFileException

from src.planner.client import EventApiClient
from src.planner.errors import PlannerError
from src.planner.importer import import_schedule_file
from src.planner.logging import get_logger
from src.planner.models import ImportedRowMapping, Schedule, Session
from src.planner.pipeline import reconcile_sessions
from src.planner.store import MappingStore
from src.planner.timezones import resolve_timezone

log = get_logger(__name__)

_NETWORK_ERRORS = (PlannerError, requests.RequestException)


class SchedulePlanner:
    """Holds the displayed schedules and sessions for one event."""

    def __init__(self, client: EventApiClient, store: MappingStore, event_id: str) -> None:
        self.client = client
        self.store = store
        self.event_id = event_id
        self.tz: str | None = None
        self.schedules: list[Schedule] = []
        self._raw: dict[str, list[dict]] = {}
        self._sessions: dict[str, list[Session]] = {}

    def sessions(self, schedule_id: str) -> list[Session]:
        """Currently displayed sessions for a schedule (empty until loaded)."""
        return list(self._sessions.get(schedule_id, []))

    def mappings(self, schedule_id: str) -> list[ImportedRowMapping]:
        return self.store.read(self.event_id, schedule_id)

    def _reconcile(self, schedule_id: str) -> list[Session]:
        sessions = reconcile_sessions(
            self._raw.get(schedule_id, []),
            schedule_id=schedule_id,
            mappings=self.mappings(schedule_id),
            tz=self.tz,
        )
        self._sessions[schedule_id] = sessions
        return sessions

    def load_schedules(self) -> list[Schedule]:
        try:
            self.schedules = self.client.list_schedules(self.event_id)
        except _NETWORK_ERRORS as e:
            log.warning("schedules_fetch_failed", event_id=self.event_id, error=str(e))
        return list(self.schedules)

    def load_schedule(self, schedule_id: str) -> list[Session]:
        """Fetch and reconcile a schedule's sessions.

        On failure the previous session list for the schedule is kept.
        """
        try:
            records = self.client.list_sessions(self.event_id, schedule_id)
        except _NETWORK_ERRORS as e:
            log.warning(
                "sessions_fetch_failed",
                event_id=self.event_id,
                schedule_id=schedule_id,
                error=str(e),
            )
            return self.sessions(schedule_id)

        self._raw[schedule_id] = list(records)
        return self._reconcile(schedule_id)

    def refresh_timezone(self, event_timezone: str | None) -> str | None:
        """Resolve the event's timezone and re-run every loaded schedule.

        Lookup failure means "use wall-clock values", never an error.
        """
        options = []
        if event_timezone:
            try:
                options = self.client.list_timezones()
            except _NETWORK_ERRORS as e:
                log.warning("timezones_fetch_failed", error=str(e))

        tz = resolve_timezone(event_timezone, options)
        if tz != self.tz:
            self.tz = tz
            log.info("timezone_resolved", event_id=self.event_id, tz=tz)
            for schedule_id in list(self._raw):
                self._reconcile(schedule_id)
        return self.tz

    def import_file(self, schedule_id: str, path: str | Path) -> list[Session]:
        """Handle a sheet upload for a schedule.

        The declared structure is stored before the upload so the reload that
        follows a successful upload can link parents and children. A failed
        upload keeps the current sessions.
        """
        try:
            rows = import_schedule_file(self.store, self.event_id, schedule_id, path, self.tz)
        except (OSError, BadZipFile, InvalidFileException) as e:
            log.warning("import_file_unreadable", schedule_id=schedule_id, error=str(e))
            return self.sessions(schedule_id)
        log.info("import_started", schedule_id=schedule_id, rows=len(rows), file=str(path))

        try:
            self.client.import_sessions(self.event_id, schedule_id, path)
        except _NETWORK_ERRORS as e:
            log.warning(
                "import_upload_failed",
                event_id=self.event_id,
                schedule_id=schedule_id,
                error=str(e),
            )
            return self.sessions(schedule_id)

        return self.load_schedule(schedule_id)
