"""Resolve an event's stored timezone identifier to an IANA name."""

from typing import Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.planner.logging import get_logger
from src.planner.models import TimezoneOption

log = get_logger(__name__)


def _is_known_zone(name: str) -> bool:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def resolve_timezone(
    identifier: str | None, options: Iterable[TimezoneOption]
) -> str | None:
    """Find the IANA name for a backend timezone identifier.

    The identifier may already be an IANA name. Returns None (use wall-clock
    values) when nothing matches or the name is unknown to zoneinfo.
    """
    if not identifier:
        return None
    wanted = str(identifier).strip()

    for option in options:
        if wanted in (option.identifier, option.iana_name):
            if _is_known_zone(option.iana_name):
                return option.iana_name
            log.warning("timezone_not_iana", identifier=wanted, name=option.iana_name)
            return None

    if _is_known_zone(wanted):
        return wanted
    log.info("timezone_unresolved", identifier=wanted)
    return None
