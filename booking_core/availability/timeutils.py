"""
Time and date parsing helpers for configuration documents.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Any, List, Optional, Union

from .base import ConfigurationError


_TWELVE_HOUR = re.compile(r"^(\d{1,2}):(\d{2})\s?(AM|PM)$", re.IGNORECASE)
_TWENTY_FOUR_HOUR = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time(
    value: Union[time, timedelta, str, None],
    strict: bool = False,
) -> Optional[time]:
    """
    Convert a configuration value to a time of day.

    Accepts ``time`` objects, ``timedelta`` offsets from midnight, and
    strings in ``HH:MM``, ``HH:MM:SS`` or ``h:MM AM/PM`` form.

    Args:
        value: Raw value
        strict: Raise ConfigurationError instead of returning None

    Returns:
        Parsed time, or None when the value cannot be parsed
    """
    result = _parse_time(value)
    if result is None and strict:
        raise ConfigurationError(f"Cannot parse time of day: {value!r}")
    return result


def _parse_time(value: Any) -> Optional[time]:
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
        if seconds < 0 or seconds >= 24 * 3600:
            return None
        return (datetime.min + value).time()
    if not isinstance(value, str):
        return None

    text = value.strip()

    match = _TWELVE_HOUR.match(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        period = match.group(3).upper()
        if not 1 <= hours <= 12 or minutes > 59:
            return None
        if period == "PM" and hours != 12:
            hours += 12
        if period == "AM" and hours == 12:
            hours = 0
        return time(hours, minutes)

    match = _TWENTY_FOUR_HOUR.match(text)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2))
        seconds = int(match.group(3) or 0)
        if hours == 24 and minutes == 0 and seconds == 0:
            return time.max
        if hours > 23 or minutes > 59 or seconds > 59:
            return None
        return time(hours, minutes, seconds)

    return None


def parse_date(value: Union[date, str, None], strict: bool = False) -> Optional[date]:
    """Convert ``YYYY-MM-DD`` strings (or datetimes) to a date."""
    result: Optional[date] = None
    if isinstance(value, datetime):
        result = value.date()
    elif isinstance(value, date):
        result = value
    elif isinstance(value, str):
        try:
            result = date.fromisoformat(value.strip()[:10])
        except ValueError:
            result = None
    if result is None and strict:
        raise ConfigurationError(f"Cannot parse date: {value!r}")
    return result


def parse_duration(
    value: Any,
    default: int = 30,
) -> int:
    """
    Total minutes from a duration value.

    The dashboard stores durations either as plain minutes or as
    ``{"hours": "1", "minutes": "30"}`` with string parts.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    if isinstance(value, dict):
        hours = _to_int(value.get("hours", 0))
        minutes = _to_int(value.get("minutes", default))
        total = hours * 60 + minutes
        return total if total > 0 else default
    return default


def _to_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def week_dates(anchor: date) -> List[date]:
    """The Monday-to-Sunday week containing ``anchor``."""
    monday = anchor - timedelta(days=anchor.weekday())
    return [monday + timedelta(days=i) for i in range(7)]


def date_range(start: date, end: date) -> List[date]:
    """Inclusive list of dates from start to end."""
    days = []
    current = start
    while current <= end:
        days.append(current)
        current += timedelta(days=1)
    return days


__all__ = [
    "parse_time",
    "parse_date",
    "parse_duration",
    "week_dates",
    "date_range",
]
