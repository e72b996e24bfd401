"""Display ordering: parents by start time, each followed by its children."""

from src.planner.models import Session
from src.planner.timeparse import day_key


def sort_for_display(sessions: list[Session]) -> list[Session]:
    """Order sessions for rendering.

    Key: (day, group start, is child, own start, title, id). The group start
    is the linked parent's start for children and the session's own start for
    parents, so a parent always precedes its children. Undated sessions sort
    after dated days.
    """
    starts = {s.id: s.start_time.minutes for s in sessions if not s.is_child}

    def sort_key(session: Session) -> tuple:
        own_start = session.start_time.minutes
        group_start = own_start
        if session.is_child and session.parent_id in starts:
            group_start = starts[session.parent_id]
        return (
            day_key(session.date),
            group_start,
            session.is_child,
            own_start,
            session.title.casefold(),
            session.id,
        )

    return sorted(sessions, key=sort_key)
