"""Tabular import parser for uploaded schedule sheets.

Reads the first worksheet of an .xlsx upload and turns every titled row into
an ImportedRowMapping. The backend accepts the same file for bulk creation
but does not keep the "Parent Session" column, so the mappings are persisted
separately and replayed by the linker on every reload.

Expected header row (case and whitespace insensitive):

    Title | Parent Session | Date | Start Time | End Time | Location

Parent Session and Location are optional columns.
"""

from pathlib import Path
from typing import IO, Iterable

import openpyxl

from src.planner.errors import ImportFormatError
from src.planner.logging import get_logger
from src.planner.models import ImportedRowMapping
from src.planner.signature import build_signature
from src.planner.store import MappingStore
from src.planner.timeparse import day_key, normalize_date, normalize_time

log = get_logger(__name__)

REQUIRED_COLUMNS = ("title", "date", "start time", "end time")
OPTIONAL_COLUMNS = ("parent session", "location")


def _header_name(value) -> str:
    return " ".join(str(value or "").split()).lower()


def read_sheet_rows(source: str | Path | IO[bytes]) -> list[tuple]:
    """Read the first worksheet of a workbook as a grid of cell values."""
    workbook = openpyxl.load_workbook(source, read_only=True, data_only=True)
    try:
        sheet = workbook.worksheets[0]
        return [tuple(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def locate_columns(header: Iterable) -> dict[str, int]:
    """Map known column names to their index in the header row.

    Raises:
        ImportFormatError: If any required column is absent.
    """
    positions: dict[str, int] = {}
    for index, cell in enumerate(header):
        name = _header_name(cell)
        if name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS and name not in positions:
            positions[name] = index

    missing = [name for name in REQUIRED_COLUMNS if name not in positions]
    if missing:
        raise ImportFormatError(missing)
    return positions


def _cell(row: tuple, positions: dict[str, int], name: str):
    index = positions.get(name)
    if index is None or index >= len(row):
        return None
    return row[index]


def _cell_text(row: tuple, positions: dict[str, int], name: str) -> str:
    value = _cell(row, positions, name)
    return str(value).strip() if value is not None else ""


def parse_import_rows(rows: list[tuple], tz: str | None = None) -> list[ImportedRowMapping]:
    """Build import mappings from a header row plus data rows.

    Args:
        rows: Grid of cell values; the first row is the header.
        tz: Optional IANA timezone used when normalizing dates and times.

    Returns:
        One mapping per data row with a non-empty title.

    Raises:
        ImportFormatError: If required columns are missing from the header.
    """
    if not rows:
        raise ImportFormatError(list(REQUIRED_COLUMNS))

    positions = locate_columns(rows[0])
    mappings: list[ImportedRowMapping] = []

    for row in rows[1:]:
        title = _cell_text(row, positions, "title")
        if not title:
            continue

        day = day_key(normalize_date(_cell(row, positions, "date"), tz))
        start = normalize_time(_cell(row, positions, "start time"), tz)
        end = normalize_time(_cell(row, positions, "end time"), tz)
        location = _cell_text(row, positions, "location")
        parent_title = _cell_text(row, positions, "parent session") or None

        mappings.append(
            ImportedRowMapping(
                signature=build_signature(day, title, location, start, end),
                title=title,
                date_key=day,
                location=location,
                start_time=start.time,
                start_period=start.period,
                end_time=end.time,
                end_period=end.period,
                session_type="child" if parent_title else "parent",
                parent_title=parent_title,
                crosses_midnight=end.minutes < start.minutes,
            )
        )

    return mappings


def _read_mappings(
    source: str | Path | IO[bytes], tz: str | None
) -> list[ImportedRowMapping] | None:
    """Parse an uploaded sheet; None means its header is unusable."""
    rows = read_sheet_rows(source)
    try:
        mappings = parse_import_rows(rows, tz)
    except ImportFormatError as e:
        log.warning("import_columns_missing", missing=e.missing)
        return None

    log.info(
        "import_parsed",
        rows=len(mappings),
        children=sum(1 for m in mappings if m.session_type == "child"),
    )
    return mappings


def parse_import_file(
    source: str | Path | IO[bytes], tz: str | None = None
) -> list[ImportedRowMapping]:
    """Parse an uploaded sheet, returning [] when its header is unusable.

    A sheet without the required columns is an authoring mistake, not a
    failure: the linker falls back to its heuristics for that schedule.
    """
    return _read_mappings(source, tz) or []


def import_schedule_file(
    store: MappingStore,
    event_id: str,
    schedule_id: str,
    source: str | Path | IO[bytes],
    tz: str | None = None,
) -> list[ImportedRowMapping]:
    """Parse an upload and replace the stored mapping for (event, schedule).

    A sheet without the required columns writes nothing, so a broken
    re-upload does not wipe a previously good mapping. A well-formed sheet
    always replaces it, even when it has no session rows.
    """
    mappings = _read_mappings(source, tz)
    if mappings is None:
        return []
    store.write(event_id, schedule_id, mappings)
    log.info(
        "import_mapping_saved",
        event_id=event_id,
        schedule_id=schedule_id,
        rows=len(mappings),
    )
    return mappings
