from datetime import date, datetime, time, timedelta, timezone

import pytest

from src.planner.models import ClockTime
from src.planner.timeparse import (
    add_minutes,
    to_minutes,
    day_key,
    interval_minutes,
    normalize_date,
    normalize_time,
)


def clock(text: str) -> ClockTime:
    value, period = text.split()
    return ClockTime(time=value, period=period)


@pytest.mark.parametrize(
    "value",
    [None, "", "   ", "not-a-time", True, float("nan"), float("inf"), -5, "25:99:xx", 10**400],
)
def test_unparseable_time_falls_back_to_midnight(value):
    assert normalize_time(value) == ClockTime(time="00:00", period="AM")


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.5, "12:00 PM"),
        (0.041666, "01:00 AM"),
        (1 / 24, "01:00 AM"),
        (0.75, "06:00 PM"),
        (0, "12:00 AM"),
        (570, "09:30 AM"),
        (1439, "11:59 PM"),
        (45670.75, "06:00 PM"),
    ],
)
def test_numeric_times(value, expected):
    assert normalize_time(value) == clock(expected)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("9:05 pm", "09:05 PM"),
        ("12:15 AM", "12:15 AM"),
        ("12:40PM", "12:40 PM"),
        ("13:05", "01:05 PM"),
        ("09:00:00", "09:00 AM"),
        ("00:30", "12:30 AM"),
        ("18:45:00.000000", "06:45 PM"),
        ("2025-01-13T14:30:00", "02:30 PM"),
    ],
)
def test_string_times(value, expected):
    assert normalize_time(value) == clock(expected)


def test_date_like_objects():
    assert normalize_time(time(18, 45)) == clock("06:45 PM")
    assert normalize_time(timedelta(hours=9, minutes=30)) == clock("09:30 AM")
    assert normalize_time(datetime(2025, 1, 13, 8, 15)) == clock("08:15 AM")


def test_aware_values_are_projected_into_timezone():
    moment = datetime(2025, 1, 13, 15, 0, tzinfo=timezone.utc)
    assert normalize_time(moment, "America/New_York") == clock("10:00 AM")
    assert normalize_time("2025-01-13T09:00:00+00:00", "Asia/Tokyo") == clock("06:00 PM")
    assert normalize_time("2025-01-13T09:00:00Z", "UTC") == clock("09:00 AM")


def test_epoch_milliseconds():
    assert normalize_time(1736758800000, "UTC") == clock("09:00 AM")


def test_unknown_timezone_keeps_wall_clock():
    assert normalize_time(datetime(2025, 1, 13, 7, 0), "Not/AZone") == clock("07:00 AM")


def test_add_minutes_wraps_around_midnight():
    assert add_minutes(clock("11:30 PM"), 45) == clock("12:15 AM")
    assert add_minutes(clock("12:10 AM"), -20) == clock("11:50 PM")
    assert add_minutes(clock("09:00 AM"), 90) == clock("10:30 AM")
    assert add_minutes(clock("11:00 AM"), 60) == clock("12:00 PM")


def test_clock_minutes_accepts_both_hour_styles():
    assert clock("00:00 AM").minutes == 0
    assert clock("12:00 AM").minutes == 0
    assert clock("12:00 PM").minutes == 720
    assert clock("01:05 PM").minutes == 785
    assert clock("13:05 PM").minutes == 785


def test_to_minutes():
    assert to_minutes(clock("12:00 AM")) == 0
    assert to_minutes(clock("09:30 PM")) == 1290


def test_interval_crossing_midnight():
    assert interval_minutes(clock("11:00 PM"), clock("01:00 AM")) == (1380, 1500)
    assert interval_minutes(clock("09:00 AM"), clock("10:00 AM")) == (540, 600)


def test_normalize_date_variants():
    assert normalize_date("2025-01-13") == date(2025, 1, 13)
    assert normalize_date(date(2025, 1, 13)) == date(2025, 1, 13)
    assert normalize_date(datetime(2025, 1, 13, 23, 59)) == date(2025, 1, 13)
    assert normalize_date(45670) == date(2025, 1, 13)
    assert normalize_date("2025-01-13T10:00:00") == date(2025, 1, 13)


def test_normalize_date_projects_aware_values():
    late_evening = "2025-01-13T23:30:00-05:00"
    assert normalize_date(late_evening, "Europe/Paris") == date(2025, 1, 14)
    assert normalize_date(late_evening, "America/New_York") == date(2025, 1, 13)


def test_plain_day_string_is_never_shifted():
    assert normalize_date("2025-01-13", "Pacific/Kiritimati") == date(2025, 1, 13)


@pytest.mark.parametrize("value", [None, "", "garbage", "2025-13-45", 0, float("inf"), 10**400])
def test_unparseable_dates(value):
    assert normalize_date(value) is None


def test_day_key():
    assert day_key(date(2025, 1, 13)) == "2025-01-13"
    assert day_key(None) == "unknown-day"
