"""Session import and reconciliation engine for the schedule planner.

Takes a backend session list plus an optional uploaded sheet of sessions and
their parent sessions, and produces a deduplicated, nested and ordered
session list for display.
"""

from src.planner.client import EventApiClient
from src.planner.importer import import_schedule_file, parse_import_file
from src.planner.models import ClockTime, ImportedRowMapping, Schedule, Session
from src.planner.pipeline import reconcile_sessions
from src.planner.planner import SchedulePlanner
from src.planner.store import InMemoryMappingStore, JsonFileMappingStore
from src.planner.timeparse import add_minutes, normalize_date, normalize_time

__all__ = [
    "ClockTime",
    "EventApiClient",
    "ImportedRowMapping",
    "InMemoryMappingStore",
    "JsonFileMappingStore",
    "Schedule",
    "SchedulePlanner",
    "Session",
    "add_minutes",
    "import_schedule_file",
    "normalize_date",
    "normalize_time",
    "parse_import_file",
    "reconcile_sessions",
]
