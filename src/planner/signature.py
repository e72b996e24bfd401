"""Session signatures and de-duplication of repeated imports.

A signature is the stable key (day, title, location, start, end) used both to
collapse records that a repeated bulk import created twice and to match
backend records against rows of the uploaded sheet.
"""

from src.planner.logging import get_logger
from src.planner.models import ClockTime, Session
from src.planner.timeparse import day_key

log = get_logger(__name__)

SEPARATOR = "||"


def build_signature(
    day: str, title: str, location: str, start: ClockTime, end: ClockTime
) -> str:
    """Build the signature string for a session.

    Args:
        day: ISO day key (or "unknown-day").
        title: Session title; surrounding whitespace is ignored.
        location: Session location, may be empty.
        start: Start time.
        end: End time.
    """
    return SEPARATOR.join(
        [
            day,
            (title or "").strip(),
            (location or "").strip(),
            start.label(),
            end.label(),
        ]
    )


def session_signature(session: Session) -> str:
    return build_signature(
        day_key(session.date),
        session.title,
        session.location,
        session.start_time,
        session.end_time,
    )


def dedupe_sessions(sessions: list[Session]) -> list[Session]:
    """Drop exact repeats (same schedule, signature and role), keeping the first.

    References to a dropped parent are rewritten to the kept parent, so a
    re-fetch of identical data never grows the visible session count.
    """
    kept: list[Session] = []
    first_by_key: dict[str, Session] = {}
    remap: dict[str, str] = {}

    for session in sessions:
        key = "::".join(
            [session.schedule_id, session_signature(session), session.session_type.lower()]
        )
        original = first_by_key.get(key)
        if original is None:
            first_by_key[key] = session
            kept.append(session)
            continue
        if session.session_type == "parent" and session.id != original.id:
            remap[session.id] = original.id

    if remap:
        kept = [
            s.model_copy(update={"parent_id": remap[s.parent_id]})
            if s.parent_id in remap
            else s
            for s in kept
        ]

    dropped = len(sessions) - len(kept)
    if dropped:
        log.info("sessions_deduplicated", dropped=dropped, remapped_parents=len(remap))
    return kept
