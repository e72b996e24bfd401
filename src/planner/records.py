"""Tolerant extraction of Session models from loosely-typed backend records.

The session list endpoint has shipped several field-name variants over time
(snake_case, camelCase, *_at, *_datetime). Each logical field is read from an
ordered list of candidate keys; the first present, non-empty value wins.
"""

import math

from src.planner.logging import get_logger
from src.planner.models import Session
from src.planner.timeparse import add_minutes, normalize_date, normalize_time

log = get_logger(__name__)

ID_FIELDS = ("uuid", "id")
TITLE_FIELDS = ("title", "name")
START_FIELDS = (
    "start_time",
    "startTime",
    "start",
    "start_at",
    "startAt",
    "start_datetime",
    "startDateTime",
    "starts_at",
    "startsAt",
)
END_FIELDS = (
    "end_time",
    "endTime",
    "end",
    "end_at",
    "endAt",
    "end_datetime",
    "endDateTime",
    "ends_at",
    "endsAt",
)
DURATION_FIELDS = ("duration", "duration_minutes", "durationMinutes")
DATE_FIELDS = (
    "date",
    "day",
    "session_date",
    "sessionDate",
    "start_date",
    "startDate",
    "start_datetime",
    "startDateTime",
)
LOCATION_FIELDS = ("location", "room", "venue")
PARENT_ID_FIELDS = ("parent_uuid", "parentUuid", "parent_id", "parentId")
PARENT_TITLE_FIELDS = (
    "parent_session",
    "parentSession",
    "parent_session_title",
    "parentSessionTitle",
    "parent_title",
    "parentTitle",
    "parent",
)
ROLE_FIELDS = ("session_type", "sessionType")
SCHEDULE_FIELDS = ("schedule_uuid", "scheduleUuid", "schedule_id", "scheduleId", "schedule")


def first_present(record: dict, candidates: tuple[str, ...]):
    """Return the first candidate value that is present and not empty."""
    for key in candidates:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        # Nested references like {"uuid": ..., "title": ...}
        value = first_present(value, ID_FIELDS + TITLE_FIELDS)
    return str(value).strip() if value is not None else ""


def _tags(value) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple, set)):
        items = [item.get("name", "") if isinstance(item, dict) else item for item in value]
    else:
        return ()
    seen: dict[str, None] = {}
    for item in items:
        tag = str(item).strip()
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


def _duration(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        minutes = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(minutes) or minutes <= 0:
        return None
    return int(round(minutes))


def _parent_title(record: dict) -> str:
    value = first_present(record, PARENT_TITLE_FIELDS)
    if isinstance(value, dict):
        value = first_present(value, TITLE_FIELDS)
    return str(value).strip() if value is not None else ""


def session_from_record(
    record: dict, index: int, schedule_id: str = "", tz: str | None = None
) -> Session:
    """Build a Session from one backend record.

    Args:
        record: Raw record as decoded from the API.
        index: Position in the source array, used for a local id fallback.
        schedule_id: Schedule the record belongs to when it does not say.
        tz: Optional IANA timezone for projecting aware datetimes.

    Returns:
        Normalized Session. The role is taken from an explicit "parent"/"child"
        session type, otherwise derived from the presence of a parent reference.
    """
    session_id = _text(first_present(record, ID_FIELDS)) or f"session-{index}"
    title = _text(first_present(record, TITLE_FIELDS)) or "Session"

    start = normalize_time(first_present(record, START_FIELDS), tz)
    end_raw = first_present(record, END_FIELDS)
    duration = _duration(first_present(record, DURATION_FIELDS))
    if end_raw is None and duration is not None:
        end = add_minutes(start, duration)
    else:
        end = normalize_time(end_raw, tz)

    parent_id = _text(first_present(record, PARENT_ID_FIELDS)) or None
    parent_title = _parent_title(record) or None

    role = _text(first_present(record, ROLE_FIELDS)).lower()
    if role not in ("parent", "child"):
        role = "child" if (parent_id or parent_title) else "parent"

    return Session(
        id=session_id,
        schedule_id=_text(first_present(record, SCHEDULE_FIELDS)) or schedule_id,
        title=title,
        start_time=start,
        end_time=end,
        date=normalize_date(first_present(record, DATE_FIELDS), tz),
        location=_text(first_present(record, LOCATION_FIELDS)),
        session_type=role,
        parent_id=parent_id if role == "child" else None,
        parent_title=parent_title,
        tags=_tags(record.get("tags")),
    )


def normalize_records(
    records, schedule_id: str = "", tz: str | None = None
) -> list[Session]:
    """Normalize a raw session array for one schedule.

    Records that name a different schedule are skipped, as are entries that
    are not objects at all.
    """
    sessions: list[Session] = []
    skipped = 0
    for index, record in enumerate(records or []):
        if not isinstance(record, dict):
            skipped += 1
            continue
        session = session_from_record(record, index, schedule_id, tz)
        if schedule_id and session.schedule_id != schedule_id:
            skipped += 1
            continue
        sessions.append(session)

    if skipped:
        log.debug("records_skipped", schedule_id=schedule_id, skipped=skipped)
    return sessions
