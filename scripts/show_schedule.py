"""Fetch a schedule's sessions and print the reconciled list as JSON or table.

Run with: python scripts/show_schedule.py EVENT_ID
One:      python scripts/show_schedule.py EVENT_ID --schedule SCHEDULE_ID
Table:    python scripts/show_schedule.py EVENT_ID --table
Timezone: python scripts/show_schedule.py EVENT_ID --timezone Europe/Zurich

Without --schedule every schedule of the event is shown.

Exit codes:
  0 = success (JSON or table on stdout)
  1 = error (message on stderr)
"""

import argparse
import json
import sys

from config import build_planner, format_table, log, sessions_as_json


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Show reconciled schedule sessions for an event.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("event_id", help="Event UUID.")
    parser.add_argument(
        "--schedule",
        type=str,
        default=None,
        help="Schedule UUID (default: all schedules of the event).",
    )
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="Event timezone identifier or IANA name used for display.",
    )
    parser.add_argument(
        "--table",
        action="store_true",
        help="Output a human-readable table instead of JSON.",
    )
    return parser.parse_args()


def main(args: argparse.Namespace) -> None:
    planner = build_planner(args.event_id)

    if args.schedule:
        schedule_ids = [(args.schedule, args.schedule)]
    else:
        schedule_ids = [(s.id, s.name) for s in planner.load_schedules()]
        if not schedule_ids:
            raise RuntimeError(f"No schedules found for event {args.event_id}")

    for schedule_id, _ in schedule_ids:
        planner.load_schedule(schedule_id)
    planner.refresh_timezone(args.timezone)

    if args.table:
        for schedule_id, name in schedule_ids:
            sessions = planner.sessions(schedule_id)
            print(f"{name} ({len(sessions)} sessions)")
            print(format_table(sessions))
            print()
    else:
        output = {
            schedule_id: sessions_as_json(planner.sessions(schedule_id))
            for schedule_id, _ in schedule_ids
        }
        print(json.dumps(output, indent=2, ensure_ascii=False))

    log("show_schedule: done")


if __name__ == "__main__":
    args = _parse_args()
    try:
        main(args)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
