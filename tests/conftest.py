from datetime import date, time

import openpyxl
import pytest

from src.planner.store import InMemoryMappingStore

HEADER = ["Title", "Parent Session", "Date", "Start Time", "End Time", "Location"]


@pytest.fixture
def store():
    return InMemoryMappingStore()


@pytest.fixture
def write_sheet(tmp_path):
    """Write rows (header first) to an .xlsx file and return its path."""

    def _write(rows, name="sessions.xlsx"):
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        for row in rows:
            sheet.append(list(row))
        path = tmp_path / name
        workbook.save(path)
        return path

    return _write


@pytest.fixture
def workshop_sheet(write_sheet):
    day = date(2025, 1, 13)
    return write_sheet(
        [
            HEADER,
            ["Opening", None, day, time(9, 0), time(10, 0), "Main Hall"],
            ["Workshops", None, day, time(13, 0), time(15, 0), "Hall 1"],
            ["Data Room", "Workshops", day, time(13, 0), time(14, 0), "Room A"],
            ["Web Room", "Workshops", day, time(13, 30), time(15, 30), "Room B"],
        ]
    )

