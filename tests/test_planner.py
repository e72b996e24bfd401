from src.planner.errors import PermanentError, TransientError
from src.planner.models import Schedule, TimezoneOption
from src.planner.planner import SchedulePlanner

BACKEND_WORKSHOP = [
    {"uuid": "s1", "title": "Opening", "date": "2025-01-13", "start_time": "09:00", "end_time": "10:00", "location": "Main Hall"},
    {"uuid": "s2", "title": "Workshops", "date": "2025-01-13", "start_time": "13:00", "end_time": "15:00", "location": "Hall 1"},
    {"uuid": "s3", "title": "Data Room", "date": "2025-01-13", "start_time": "13:00", "end_time": "14:00", "location": "Room A"},
    {"uuid": "s4", "title": "Web Room", "date": "2025-01-13", "start_time": "13:30", "end_time": "15:30", "location": "Room B"},
]


class StubClient:
    """In-process stand-in for EventApiClient."""

    def __init__(self, sessions=None, timezones=None):
        self.sessions = list(sessions or [])
        self.timezones = list(timezones or [])
        self.fail_sessions = None
        self.fail_upload = None
        self.uploads = []

    def list_schedules(self, event_id):
        return [Schedule(id="sch-1", name="Day 1")]

    def list_sessions(self, event_id, schedule_id=None):
        if self.fail_sessions:
            raise self.fail_sessions
        return list(self.sessions)

    def list_timezones(self):
        return list(self.timezones)

    def import_sessions(self, event_id, schedule_id, path):
        if self.fail_upload:
            raise self.fail_upload
        self.uploads.append((event_id, schedule_id, str(path)))
        self.sessions = list(BACKEND_WORKSHOP)
        return None


def test_load_schedules():
    planner = SchedulePlanner(StubClient(), None, "evt-1")
    assert [s.name for s in planner.load_schedules()] == ["Day 1"]


def test_load_schedule_without_mapping_uses_heuristics(store):
    planner = SchedulePlanner(StubClient(BACKEND_WORKSHOP), store, "evt-1")
    sessions = planner.load_schedule("sch-1")
    assert len(sessions) == 4
    # Order inference has nothing to attach: every backend record is a parent
    assert all(s.session_type == "parent" for s in sessions)


def test_failed_reload_keeps_previous_sessions(store):
    client = StubClient(BACKEND_WORKSHOP)
    planner = SchedulePlanner(client, store, "evt-1")
    before = planner.load_schedule("sch-1")

    client.fail_sessions = TransientError("backend down")
    assert planner.load_schedule("sch-1") == before
    assert planner.sessions("sch-1") == before


def test_first_load_failure_shows_nothing(store):
    client = StubClient()
    client.fail_sessions = PermanentError("HTTP 404")
    planner = SchedulePlanner(client, store, "evt-1")
    assert planner.load_schedule("sch-1") == []


def test_import_file_links_declared_children(store, workshop_sheet):
    client = StubClient()
    planner = SchedulePlanner(client, store, "evt-1")
    planner.load_schedule("sch-1")

    sessions = planner.import_file("sch-1", workshop_sheet)

    assert client.uploads == [("evt-1", "sch-1", str(workshop_sheet))]
    assert len(planner.mappings("sch-1")) == 4
    assert [s.id for s in sessions] == ["s1", "s2", "s3", "s4"]
    workshops = sessions[1]
    assert workshops.end_time.label() == "03:30 PM"
    assert [s.parent_id for s in sessions[2:]] == ["s2", "s2"]


def test_failed_upload_keeps_sessions_but_stores_mapping(store, workshop_sheet):
    client = StubClient(BACKEND_WORKSHOP[:1])
    client.fail_upload = PermanentError("HTTP 400")
    planner = SchedulePlanner(client, store, "evt-1")
    before = planner.load_schedule("sch-1")

    assert planner.import_file("sch-1", workshop_sheet) == before
    assert len(planner.mappings("sch-1")) == 4


def test_unreadable_file_is_ignored(store, tmp_path):
    client = StubClient(BACKEND_WORKSHOP)
    planner = SchedulePlanner(client, store, "evt-1")
    before = planner.load_schedule("sch-1")

    not_a_workbook = tmp_path / "notes.xlsx"
    not_a_workbook.write_text("just text", encoding="utf-8")

    assert planner.import_file("sch-1", not_a_workbook) == before
    assert planner.import_file("sch-1", tmp_path / "missing.xlsx") == before
    assert client.uploads == []


def test_refresh_timezone_reruns_loaded_schedules(store):
    records = [
        {"uuid": "a", "title": "Call", "start_datetime": "2025-01-13T23:30:00+00:00", "end_datetime": "2025-01-14T00:30:00+00:00"},
    ]
    client = StubClient(records, [TimezoneOption(identifier="tz-1", iana_name="Asia/Tokyo")])
    planner = SchedulePlanner(client, store, "evt-1")

    (before,) = planner.load_schedule("sch-1")
    assert before.start_time.label() == "11:30 PM"

    assert planner.refresh_timezone("tz-1") == "Asia/Tokyo"
    (after,) = planner.sessions("sch-1")
    assert after.start_time.label() == "08:30 AM"
    assert after.date.isoformat() == "2025-01-14"


def test_refresh_timezone_lookup_failure_is_not_fatal(store):
    def unreachable():
        raise TransientError("timeout")

    client = StubClient()
    client.list_timezones = unreachable
    planner = SchedulePlanner(client, store, "evt-1")
    assert planner.refresh_timezone("tz-1") is None
