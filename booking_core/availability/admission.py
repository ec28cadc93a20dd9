"""
Slot Admission Filter

Per-slot re-validation of generated, managed and custom candidates: the
effective window, breaks, minimum notice, administrator blocks, existing
bookings with buffers, and booking caps.
"""

from datetime import date, datetime, time, timedelta
from typing import List, Optional

import structlog

from .base import (
    AvailabilitySnapshot,
    ExistingBooking,
    Weekday,
    WeeklySchedule,
    intervals_overlap,
    time_to_minutes,
)
from .resolver import resolve_breaks, resolve_effective_window
from .slots import overlaps_any_break
from .timeutils import week_dates


logger = structlog.get_logger(__name__)


# =============================================================================
# Booking Caps
# =============================================================================


def _bookings_between(bookings: List[ExistingBooking], first: date, last: date) -> int:
    return sum(1 for b in bookings if first <= b.date <= last)


def cap_reached(
    snapshot: AvailabilitySnapshot,
    day: date,
    customer_id: Optional[str] = None,
) -> Optional[str]:
    """
    Check the per-day, per-week, per-month and per-customer caps.

    Only active bookings count. Weeks run Monday to Sunday.

    Returns:
        Name of the first cap reached, or None
    """
    constraints = snapshot.offering.constraints
    bookings = snapshot.active_bookings()

    if constraints.max_per_day is not None:
        if _bookings_between(bookings, day, day) >= constraints.max_per_day:
            return "max_per_day"

    if constraints.max_per_week is not None:
        week = week_dates(day)
        if _bookings_between(bookings, week[0], week[-1]) >= constraints.max_per_week:
            return "max_per_week"

    if constraints.max_per_month is not None:
        in_month = sum(1 for b in bookings if (b.date.year, b.date.month) == (day.year, day.month))
        if in_month >= constraints.max_per_month:
            return "max_per_month"

    if constraints.max_per_customer is not None and customer_id:
        mine = sum(1 for b in bookings if b.customer_id == customer_id)
        if mine >= constraints.max_per_customer:
            return "max_per_customer"

    return None


def conflicts_with_booking(
    snapshot: AvailabilitySnapshot,
    day: date,
    start_minutes: int,
    end_minutes: int,
) -> bool:
    """Check a candidate, padded by the offering's buffers, against active bookings."""
    constraints = snapshot.offering.constraints
    padded_start = start_minutes - (constraints.buffer_before_mins or 0)
    padded_end = end_minutes + (constraints.buffer_after_mins or 0)

    for booking in snapshot.active_bookings():
        if booking.date != day:
            continue
        if intervals_overlap(padded_start, padded_end, booking.start_minutes, booking.end_minutes):
            return True
    return False


# =============================================================================
# Admission
# =============================================================================


def is_slot_admissible(
    snapshot: AvailabilitySnapshot,
    day: date,
    candidate_start: time,
    now: datetime,
    customer_id: Optional[str] = None,
    fallback: Optional[WeeklySchedule] = None,
    duration_minutes: Optional[int] = None,
    check_window: bool = True,
    check_bookings: bool = True,
) -> bool:
    """
    Decide whether one candidate start may be offered.

    All checks must pass:

    - The ``[start, start + duration)`` interval lies within the effective
      window (the special date override for ``day`` if any, else the
      resolved weekly window) and clears every resolved break. Skipped for
      administrator-added custom slots via ``check_window=False``.
    - The start is at least ``min_notice_hours`` after ``now``. The notice
      term is skipped when ``min_notice_hours`` is zero or absent, but even
      then a start earlier than ``now`` is never offered. An aware ``now``
      reads the day and start in its own timezone.
    - No slot block sits on this start.
    - The padded interval does not overlap an active booking. Skipped for
      managed slots via ``check_bookings=False``, whose occupancy is carried
      by their capacity counters.
    - No booking cap has been reached.

    Args:
        snapshot: Configuration snapshot for the offering
        day: Calendar date of the candidate
        candidate_start: Start time of the candidate
        now: Current time, naive local or timezone-aware
        customer_id: Requesting customer, for the per-customer cap
        fallback: Fallback weekly layer
        duration_minutes: Interval length; defaults to the offering duration

    Returns:
        True if the candidate can be offered
    """
    offering = snapshot.offering
    duration = offering.duration_minutes if duration_minutes is None else duration_minutes
    if duration <= 0:
        return False

    start = time_to_minutes(candidate_start)
    end = start + duration

    if check_window:
        window = resolve_effective_window(snapshot, day, fallback)
        if window is None:
            return False
        if start < time_to_minutes(window[0]) or end > time_to_minutes(window[1]):
            return False
        if overlaps_any_break(start, end, resolve_breaks(snapshot, Weekday.of(day))):
            return False

    earliest = now + timedelta(hours=offering.constraints.min_notice_hours or 0)
    if datetime.combine(day, candidate_start, tzinfo=now.tzinfo) < earliest:
        return False

    for block in snapshot.slot_blocks:
        if block.date == day and block.start_time == candidate_start:
            return False

    if check_bookings and conflicts_with_booking(snapshot, day, start, end):
        return False

    reached = cap_reached(snapshot, day, customer_id)
    if reached:
        logger.debug(
            "booking_cap_reached",
            offering_id=offering.id,
            date=day.isoformat(),
            cap=reached,
        )
        return False

    return True


__all__ = [
    "cap_reached",
    "conflicts_with_booking",
    "is_slot_admissible",
]
