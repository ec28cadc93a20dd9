"""
Date Gate

Day-granularity admission: decides whether a calendar date can be selected
at all, before any time of day is considered.
"""

from datetime import date, timedelta
from typing import List, Optional

import structlog

from .base import AvailabilitySnapshot, Weekday, WeeklySchedule
from .resolver import resolve_day_schedule
from .timeutils import date_range


logger = structlog.get_logger(__name__)


def is_date_admissible(
    snapshot: AvailabilitySnapshot,
    day: date,
    today: date,
    fallback: Optional[WeeklySchedule] = None,
) -> bool:
    """
    Check whether a date is eligible for booking.

    Rejects past dates, dates beyond the booking window, dates inside a
    blackout range, and dates whose weekday resolves disabled. Special date
    overrides and minimum notice are not consulted here.
    """
    if day < today:
        return False

    window_days = snapshot.offering.constraints.booking_window_days
    if window_days is not None and day > today + timedelta(days=window_days):
        return False

    for blackout in snapshot.blackout_ranges:
        if blackout.covers(day):
            logger.debug(
                "date_blacked_out",
                offering_id=snapshot.offering.id,
                date=day.isoformat(),
            )
            return False

    return resolve_day_schedule(snapshot, Weekday.of(day), fallback).enabled


def list_admissible_dates(
    snapshot: AvailabilitySnapshot,
    start: date,
    end: date,
    today: date,
    fallback: Optional[WeeklySchedule] = None,
) -> List[date]:
    """Admissible dates in the inclusive range, in order."""
    return [
        d for d in date_range(start, end)
        if is_date_admissible(snapshot, d, today, fallback)
    ]


__all__ = [
    "is_date_admissible",
    "list_admissible_dates",
]
