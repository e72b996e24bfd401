"""Import a schedule sheet (.xlsx) into an event schedule.

Parses the sheet's declared parent/child structure, stores it for the
schedule, uploads the file for bulk session creation, then reloads and
prints the reconciled sessions.

Run with: python scripts/import_sessions.py EVENT_ID SCHEDULE_ID sessions.xlsx
Dry run:  python scripts/import_sessions.py EVENT_ID SCHEDULE_ID sessions.xlsx --dry-run
Table:    python scripts/import_sessions.py EVENT_ID SCHEDULE_ID sessions.xlsx --table

Sheet columns: Title | Parent Session | Date | Start Time | End Time | Location

Exit codes:
  0 = success
  1 = error (message on stderr)
"""

import argparse
import json
import sys
from pathlib import Path

from config import build_planner, format_table, log, sessions_as_json

from src.planner.importer import parse_import_file


def _parse_args() -> argparse.Namespace:
    """Parse CLI arguments using argparse."""
    parser = argparse.ArgumentParser(
        description="Import a schedule sheet and show the reconciled sessions.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("event_id", help="Event UUID.")
    parser.add_argument("schedule_id", help="Schedule UUID to import into.")
    parser.add_argument("sheet", type=Path, help="Path to the .xlsx file.")
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="Event timezone identifier or IANA name.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse the sheet and print its rows without storing or uploading.",
    )
    parser.add_argument(
        "--table",
        action="store_true",
        help="Output a human-readable table instead of JSON.",
    )
    return parser.parse_args()


def main(args: argparse.Namespace) -> None:
    if not args.sheet.exists():
        raise FileNotFoundError(f"Sheet not found: {args.sheet}")

    planner = build_planner(args.event_id)
    planner.refresh_timezone(args.timezone)

    if args.dry_run:
        rows = parse_import_file(args.sheet, planner.tz)
        log(f"  Parsed {len(rows)} rows from {args.sheet.name} (dry run)")
        print(json.dumps([r.model_dump(mode="json") for r in rows], indent=2, ensure_ascii=False))
        return

    before = len(planner.mappings(args.schedule_id))
    sessions = planner.import_file(args.schedule_id, args.sheet)
    after = len(planner.mappings(args.schedule_id))
    log(f"  Stored mapping rows: {before} -> {after}")
    log(f"  {len(sessions)} sessions after reload")

    if args.table:
        print(format_table(sessions))
    else:
        print(json.dumps(sessions_as_json(sessions), indent=2, ensure_ascii=False))

    log("import_sessions: done")


if __name__ == "__main__":
    args = _parse_args()
    try:
        main(args)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
