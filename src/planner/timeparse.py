"""Time and date normalization for loosely-typed session values.

Backend records and uploaded sheets carry times as datetime objects,
spreadsheet serials, minute counts, ISO strings, or 12/24-hour text. Everything
is reduced to a ClockTime ("HH:MM" + AM/PM) and a day-precision date. Nothing
in this module raises on bad input: unparseable times fall back to
00:00 AM and unparseable dates to None.
"""

import math
import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.planner.logging import get_logger
from src.planner.models import ClockTime

log = get_logger(__name__)

MINUTES_PER_DAY = 24 * 60
UNKNOWN_DAY = "unknown-day"

FALLBACK_TIME = ClockTime(time="00:00", period="AM")

# Numbers above this are epoch milliseconds rather than spreadsheet values
_EPOCH_MS_THRESHOLD = 1e10

# Spreadsheet day zero (1900 date system, including the Lotus leap-year bug)
_SHEET_EPOCH = date(1899, 12, 30)

_AMPM_RE = re.compile(
    r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?\s*(AM|PM)$", re.IGNORECASE
)
_H24_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?$")
_ISO_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _zone(tz: str | None) -> ZoneInfo | None:
    if not tz:
        return None
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        log.debug("timezone_unknown", tz=tz)
        return None


def _project(value: datetime, tz: str | None) -> datetime:
    """Re-express an aware datetime in tz; naive values are wall-clock and kept."""
    zone = _zone(tz)
    if zone is None or value.tzinfo is None:
        return value
    return value.astimezone(zone)


def clock_from_minutes(total: int) -> ClockTime:
    """Build a 12-hour ClockTime from minutes since midnight (wrapping at 24h)."""
    total = total % MINUTES_PER_DAY
    hour24, minute = divmod(total, 60)
    period = "PM" if hour24 >= 12 else "AM"
    hour12 = hour24 % 12 or 12
    return ClockTime(time=f"{hour12:02d}:{minute:02d}", period=period)


def _from_clock_fields(hour: int, minute: int) -> ClockTime:
    return clock_from_minutes((hour % 24) * 60 + (minute % 60))


def _from_number(value: float, tz: str | None) -> ClockTime | None:
    if not math.isfinite(value) or value < 0:
        return None
    if value >= _EPOCH_MS_THRESHOLD:
        try:
            moment = datetime.fromtimestamp(value / 1000, tz=_zone(tz))
        except (OverflowError, OSError, ValueError):
            return None
        return _from_clock_fields(moment.hour, moment.minute)
    if value < 1:
        # Fraction of a day
        return clock_from_minutes(round(value * MINUTES_PER_DAY))
    if value < MINUTES_PER_DAY:
        return clock_from_minutes(round(value))
    # Spreadsheet serial: whole days plus a fraction of a day
    return clock_from_minutes(round((value % 1) * MINUTES_PER_DAY))


def _from_string(text: str, tz: str | None) -> ClockTime | None:
    if "T" in text:
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            moment = None
        if moment is not None:
            moment = _project(moment, tz)
            return _from_clock_fields(moment.hour, moment.minute)

    match = _AMPM_RE.match(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        period = match.group(3).upper()
        if period == "PM" and hour != 12:
            hour += 12
        if period == "AM" and hour == 12:
            hour = 0
        return _from_clock_fields(hour, minute)

    match = _H24_RE.match(text)
    if match:
        return _from_clock_fields(int(match.group(1)), int(match.group(2)))

    return None


def normalize_time(value, tz: str | None = None) -> ClockTime:
    """Convert an arbitrary time-like value into a canonical ClockTime.

    Interpretations are tried in order: datetime/time/timedelta objects,
    numbers (epoch ms, fraction of day, minutes since midnight, spreadsheet
    serial), ISO datetime strings, "H:MM AM/PM", then "HH:MM[:SS]".

    Args:
        value: Any time-like value, possibly None or empty.
        tz: Optional IANA timezone name. Aware datetimes are projected into it.

    Returns:
        ClockTime, or the 00:00 AM fallback when nothing matches.
    """
    if value is None:
        return FALLBACK_TIME

    if isinstance(value, datetime):
        moment = _project(value, tz)
        return _from_clock_fields(moment.hour, moment.minute)
    if isinstance(value, time):
        return _from_clock_fields(value.hour, value.minute)
    if isinstance(value, timedelta):
        return clock_from_minutes(round(value.total_seconds() / 60))

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            number = float(value)
        except OverflowError:
            return FALLBACK_TIME
        return _from_number(number, tz) or FALLBACK_TIME

    text = str(value).strip()
    if not text:
        return FALLBACK_TIME
    return _from_string(text, tz) or FALLBACK_TIME


def to_minutes(value: ClockTime) -> int:
    """Minutes since midnight for a ClockTime."""
    return value.minutes


def add_minutes(value: ClockTime, minutes: int) -> ClockTime:
    """Shift a ClockTime by a number of minutes with 24-hour wraparound."""
    return clock_from_minutes(value.minutes + int(minutes))


def interval_minutes(start: ClockTime, end: ClockTime) -> tuple[int, int]:
    """Return (start, end) in minutes; an end before the start crosses midnight."""
    start_min = to_minutes(start)
    end_min = to_minutes(end)
    if end_min < start_min:
        end_min += MINUTES_PER_DAY
    return start_min, end_min


def normalize_date(value, tz: str | None = None) -> date | None:
    """Convert a date-like value into a calendar day.

    Plain dates and "YYYY-MM-DD" strings are taken literally. Aware datetimes
    (and ISO strings carrying an offset) are first re-expressed in tz so the
    day matches what an attendee in that timezone sees.

    Returns:
        The calendar day, or None if the value cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _project(value, tz).date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Spreadsheet day serial
        try:
            serial = float(value)
        except OverflowError:
            return None
        if not math.isfinite(serial) or serial < 1 or serial >= 2958466:
            return None
        return _SHEET_EPOCH + timedelta(days=int(serial))

    text = str(value).strip()
    if not text:
        return None
    if _ISO_DAY_RE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        log.debug("date_unparseable", value=text)
        return None
    return _project(moment, tz).date()


def day_key(value: date | None) -> str:
    """ISO day string used for grouping; undated sessions share one bucket."""
    return value.isoformat() if value else UNKNOWN_DAY
