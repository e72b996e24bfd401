"""Parent/child linking for a schedule's sessions.

Each session ends up either a parent or a child linked to an existing parent.
Two strategies are mutually exclusive per schedule:

- Mapping-driven: when the schedule has stored import mappings, the declared
  sheet structure is authoritative. Sessions are matched to sheet rows by
  signature, then by (day, title, start, end), then by (day, title, start).
  Unmatched sessions are left as they are.
- Heuristic: without mappings, sessions are grouped per (schedule, day),
  linked by explicit parent-title references, and remaining children are
  attached to the most recent preceding parent.

A time-containment pass always runs last. Any child still without a valid
parent is attached to a same-day parent whose interval encloses it, or is
demoted to a standalone parent. No dangling children leave this module.
"""

from collections import defaultdict
from typing import Iterable

from src.planner.logging import get_logger
from src.planner.models import ImportedRowMapping, Session
from src.planner.signature import session_signature
from src.planner.timeparse import day_key, interval_minutes

log = get_logger(__name__)


def title_key(value: str | None) -> str:
    """Case-insensitive title comparison key with collapsed whitespace."""
    return " ".join(str(value or "").split()).lower()


def _group_key(session: Session) -> tuple[str, str]:
    return session.schedule_id, day_key(session.date)


def _closest_preceding(candidates: list[Session], child: Session) -> Session | None:
    """Latest-starting candidate that starts no later than the child, else the first."""
    if not candidates:
        return None
    child_start = child.start_time.minutes
    best: Session | None = None
    for candidate in candidates:
        start = candidate.start_time.minutes
        if start <= child_start and (best is None or start > best.start_time.minutes):
            best = candidate
    return best or candidates[0]


def _as_parent(session: Session) -> Session:
    return session.model_copy(
        update={"session_type": "parent", "parent_id": None, "parent_title": None}
    )


def _as_child(session: Session, parent_id: str) -> Session:
    return session.model_copy(update={"session_type": "child", "parent_id": parent_id})


# ---------------------------------------------------------------------------
# Mapping-driven strategy
# ---------------------------------------------------------------------------
def _match_mappings(
    sessions: list[Session], mappings: Iterable[ImportedRowMapping]
) -> list[ImportedRowMapping | None]:
    by_signature: dict[str, ImportedRowMapping] = {}
    by_interval: dict[tuple, ImportedRowMapping] = {}
    by_start: dict[tuple, ImportedRowMapping] = {}
    for row in mappings:
        title = title_key(row.title)
        by_signature.setdefault(row.signature, row)
        by_interval.setdefault(
            (row.date_key, title, row.start.minutes, row.end.minutes), row
        )
        by_start.setdefault((row.date_key, title, row.start.minutes), row)

    matched: list[ImportedRowMapping | None] = []
    for session in sessions:
        day = day_key(session.date)
        title = title_key(session.title)
        start = session.start_time.minutes
        end = session.end_time.minutes
        row = (
            by_signature.get(session_signature(session))
            or by_interval.get((day, title, start, end))
            # Relaxed: tolerate end-time drift between sheet and backend
            or by_start.get((day, title, start))
        )
        matched.append(row)
    return matched


def _link_from_mappings(
    sessions: list[Session], mappings: list[ImportedRowMapping]
) -> tuple[list[Session], dict[str, int]]:
    matched = _match_mappings(sessions, mappings)
    stats = {"matched": 0, "linked": 0, "demoted": 0}

    # Force every matched session's role before resolving any parent
    forced: list[Session] = []
    for session, row in zip(sessions, matched):
        if row is None:
            forced.append(session)
            continue
        stats["matched"] += 1
        if row.session_type == "parent":
            forced.append(_as_parent(session))
        else:
            forced.append(
                session.model_copy(
                    update={
                        "session_type": "child",
                        "parent_id": None,
                        "parent_title": row.parent_title,
                    }
                )
            )

    result = list(forced)
    for index, (session, row) in enumerate(zip(forced, matched)):
        if row is None or row.session_type != "child" or not row.parent_title:
            continue
        wanted = title_key(row.parent_title)
        candidates = [
            other
            for other in forced
            if other.id != session.id
            and other.session_type == "parent"
            and _group_key(other) == _group_key(session)
            and title_key(other.title) == wanted
        ]
        parent = _closest_preceding(candidates, session)
        if parent is None:
            result[index] = _as_parent(session)
            stats["demoted"] += 1
            log.info(
                "child_demoted",
                session_id=session.id,
                title=session.title,
                parent_title=row.parent_title,
                reason="declared_parent_missing",
            )
        else:
            result[index] = _as_child(session, parent.id)
            stats["linked"] += 1

    return result, stats


# ---------------------------------------------------------------------------
# Heuristic strategy
# ---------------------------------------------------------------------------
def _link_heuristically(sessions: list[Session]) -> tuple[list[Session], dict[str, int]]:
    result = list(sessions)
    stats = {"linked": 0, "inferred": 0, "demoted": 0}

    groups: dict[tuple[str, str], list[int]] = defaultdict(list)
    for index, session in enumerate(result):
        groups[_group_key(session)].append(index)

    for indexes in groups.values():
        order = sorted(
            indexes, key=lambda i: (result[i].start_time.minutes, result[i].id)
        )

        # Title linking: explicit parent-title references
        for i in order:
            session = result[i]
            if session.parent_id or not session.parent_title:
                continue
            wanted = title_key(session.parent_title)
            titled = [
                j
                for j in order
                if j != i
                and title_key(result[j].title) == wanted
                and (
                    result[j].session_type == "parent"
                    or not (result[j].parent_id or result[j].parent_title)
                )
            ]
            typed_parents = [result[j] for j in titled if result[j].session_type == "parent"]
            parent = _closest_preceding(typed_parents, session) or _closest_preceding(
                [result[j] for j in titled], session
            )

            if parent is not None:
                if parent.session_type != "parent":
                    # Referenced by title, so it heads a group of its own
                    j = next(j for j in titled if result[j].id == parent.id)
                    result[j] = _as_parent(parent)
                result[i] = _as_child(session, parent.id)
                stats["linked"] += 1
            elif session.session_type == "child":
                result[i] = _as_parent(session)
                stats["demoted"] += 1
                log.info(
                    "child_demoted",
                    session_id=session.id,
                    title=session.title,
                    parent_title=session.parent_title,
                    reason="parent_title_not_found",
                )
            else:
                result[i] = session.model_copy(update={"parent_title": None})

        # Order inference: untagged children follow the last parent seen
        last_parent_id: str | None = None
        for i in order:
            session = result[i]
            if session.session_type == "parent":
                last_parent_id = session.id
                continue
            if session.parent_id or session.parent_title:
                continue
            if last_parent_id is not None:
                result[i] = _as_child(session, last_parent_id)
                stats["inferred"] += 1

    return result, stats


# ---------------------------------------------------------------------------
# Time-containment safety net
# ---------------------------------------------------------------------------
def _resolve_by_containment(sessions: list[Session]) -> tuple[list[Session], dict[str, int]]:
    stats = {"contained": 0, "demoted": 0}
    parent_ids = {s.id for s in sessions if s.session_type == "parent"}
    parents_by_group: dict[tuple[str, str], list[Session]] = defaultdict(list)
    for session in sessions:
        if session.session_type == "parent":
            parents_by_group[_group_key(session)].append(session)

    result: list[Session] = []
    for session in sessions:
        if session.session_type == "parent":
            if session.parent_id or session.parent_title:
                session = _as_parent(session)
            result.append(session)
            continue
        if session.parent_id in parent_ids and session.parent_id != session.id:
            result.append(session)
            continue

        child_start, child_end = interval_minutes(session.start_time, session.end_time)
        best: Session | None = None
        best_start = -1
        for parent in parents_by_group.get(_group_key(session), []):
            if parent.id == session.id:
                continue
            start, end = interval_minutes(parent.start_time, parent.end_time)
            if start <= child_start and child_end <= end and start > best_start:
                best = parent
                best_start = start

        if best is not None:
            result.append(_as_child(session, best.id))
            stats["contained"] += 1
        else:
            result.append(_as_parent(session))
            stats["demoted"] += 1
            log.info(
                "child_demoted",
                session_id=session.id,
                title=session.title,
                reason="no_containing_parent",
            )
    return result, stats


def link_sessions(
    sessions: list[Session], mappings: Iterable[ImportedRowMapping] = ()
) -> list[Session]:
    """Assign parent/child roles and parent ids.

    Args:
        sessions: De-duplicated sessions of one schedule.
        mappings: Stored import mappings for the schedule; any rows select the
            mapping-driven strategy.

    Returns:
        New sessions in input order. Every child references an existing parent.
    """
    rows = list(mappings)
    if rows:
        linked, stats = _link_from_mappings(list(sessions), rows)
        strategy = "mapping"
    else:
        linked, stats = _link_heuristically(list(sessions))
        strategy = "heuristic"

    result, safety = _resolve_by_containment(linked)
    log.info(
        "sessions_linked",
        strategy=strategy,
        sessions=len(result),
        children=sum(1 for s in result if s.is_child),
        **stats,
        contained=safety["contained"],
        orphans_demoted=safety["demoted"],
    )
    return result
