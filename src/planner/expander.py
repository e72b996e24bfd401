"""Widen parent sessions so their displayed range covers all their children."""

from collections import defaultdict

from src.planner.logging import get_logger
from src.planner.models import Session
from src.planner.timeparse import MINUTES_PER_DAY, clock_from_minutes, interval_minutes

log = get_logger(__name__)


def _distance(minute: int, start: int, end: int) -> int:
    if minute < start:
        return start - minute
    return max(0, minute - end)


def _child_interval(child: Session, parent_start: int, parent_end: int) -> tuple[int, int]:
    start, end = interval_minutes(child.start_time, child.end_time)
    # Under a parent that crosses midnight, an early-morning child belongs to
    # the next day whenever that puts it nearer the parent
    if parent_end > MINUTES_PER_DAY and start < parent_start:
        shifted = start + MINUTES_PER_DAY
        if _distance(shifted, parent_start, parent_end) < _distance(start, parent_start, parent_end):
            start = shifted
            end += MINUTES_PER_DAY
    return start, end


def expand_parent_ranges(sessions: list[Session]) -> list[Session]:
    """Return sessions where each parent spans the union of itself and its children.

    A parent's interval only ever grows. Parents without children and all
    children are returned unchanged.
    """
    children: dict[str, list[Session]] = defaultdict(list)
    for session in sessions:
        if session.is_child and session.parent_id:
            children[session.parent_id].append(session)

    expanded = 0
    result: list[Session] = []
    for session in sessions:
        kids = children.get(session.id)
        if session.is_child or not kids:
            result.append(session)
            continue

        start, end = interval_minutes(session.start_time, session.end_time)
        new_start, new_end = start, end
        for child in kids:
            child_start, child_end = _child_interval(child, start, end)
            new_start = min(new_start, child_start)
            new_end = max(new_end, child_end)

        if (new_start, new_end) == (start, end):
            result.append(session)
            continue

        expanded += 1
        result.append(
            session.model_copy(
                update={
                    "start_time": clock_from_minutes(new_start),
                    "end_time": clock_from_minutes(new_end),
                }
            )
        )

    if expanded:
        log.debug("parents_expanded", count=expanded)
    return result
