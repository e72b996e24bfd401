from datetime import date

from src.planner.models import ClockTime, Session
from src.planner.signature import build_signature, dedupe_sessions, session_signature

NINE = ClockTime(time="09:00", period="AM")
TEN = ClockTime(time="10:00", period="AM")


def make_session(session_id, title="Keynote", **fields):
    values = {
        "id": session_id,
        "schedule_id": "sch-1",
        "title": title,
        "start_time": NINE,
        "end_time": TEN,
        "date": date(2025, 1, 13),
        "location": "Main Hall",
    }
    values.update(fields)
    return Session(**values)


def test_build_signature_format():
    signature = build_signature("2025-01-13", "  Keynote ", " Main Hall ", NINE, TEN)
    assert signature == "2025-01-13||Keynote||Main Hall||09:00 AM||10:00 AM"


def test_session_signature_uses_unknown_day_bucket():
    session = make_session("a", date=None, location="")
    assert session_signature(session) == "unknown-day||Keynote||||09:00 AM||10:00 AM"


def test_dedupe_keeps_first_occurrence():
    sessions = [make_session("a"), make_session("b"), make_session("c", title="Lunch")]
    assert [s.id for s in dedupe_sessions(sessions)] == ["a", "c"]


def test_dedupe_remaps_references_to_dropped_parent():
    sessions = [
        make_session("p1"),
        make_session("p2"),
        make_session(
            "c1",
            title="Q&A",
            session_type="child",
            parent_id="p2",
            start_time=ClockTime(time="09:30", period="AM"),
        ),
    ]
    result = dedupe_sessions(sessions)
    assert [s.id for s in result] == ["p1", "c1"]
    assert result[1].parent_id == "p1"


def test_dedupe_respects_role_and_schedule():
    sessions = [
        make_session("a"),
        make_session("b", session_type="child", parent_id="x"),
        make_session("c", schedule_id="sch-2"),
    ]
    assert len(dedupe_sessions(sessions)) == 3


def test_dedupe_does_not_mutate_input():
    first = make_session("p1")
    child = make_session("c1", title="Talk", session_type="child", parent_id="p2")
    sessions = [first, make_session("p2"), child]
    dedupe_sessions(sessions)
    assert child.parent_id == "p2"
    assert len(sessions) == 3
