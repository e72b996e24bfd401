"""
Shared configuration and factories for Scheduling planner scripts.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.planner.client import EventApiClient  # noqa: E402
from src.planner.config import get_config  # noqa: E402
from src.planner.logging import setup_logging  # noqa: E402
from src.planner.planner import SchedulePlanner  # noqa: E402
from src.planner.store import JsonFileMappingStore  # noqa: E402


def log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def build_planner(event_id: str) -> SchedulePlanner:
    """Configure logging and build a planner wired to the configured backend."""
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)
    if not config.eventhub_token:
        log("  Warning: EVENTHUB_TOKEN is not set; requests are unauthenticated.")
    client = EventApiClient.from_config(config)
    store = JsonFileMappingStore(config.state_dir)
    return SchedulePlanner(client, store, event_id)


def format_table(sessions) -> str:
    """Render reconciled sessions as a plain-text table, children indented."""
    if not sessions:
        return "  (no sessions)"
    lines = [f"  {'Date':<12} {'Start':<9} {'End':<9} {'Title':<40} Location"]
    lines.append("  " + "-" * 86)
    for s in sessions:
        day = s.date.isoformat() if s.date else "-"
        title = ("  - " + s.title) if s.is_child else s.title
        lines.append(
            f"  {day:<12} {s.start_time.label():<9} {s.end_time.label():<9} "
            f"{title[:40]:<40} {s.location}"
        )
    return "\n".join(lines)


def sessions_as_json(sessions) -> list[dict]:
    return [s.model_dump(mode="json") for s in sessions]
