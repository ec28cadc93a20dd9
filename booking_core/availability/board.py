"""
Slot Board

Administrative view of a range of days: every computed, managed and custom
slot with its booked/blocked/available status. Unlike customer listings,
no notice or cap filtering applies here.
"""

from datetime import date, time
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .base import (
    AvailabilitySnapshot,
    ExistingBooking,
    SlotBoardEntry,
    SlotSource,
    SlotStatus,
    Weekday,
    WeeklySchedule,
    minutes_to_time,
    time_to_minutes,
)
from .resolver import resolve_breaks, resolve_effective_window
from .slots import generate_slots


def _day_candidates(
    snapshot: AvailabilitySnapshot,
    day: date,
    fallback: Optional[WeeklySchedule],
) -> List[Tuple[time, int, SlotSource]]:
    offering = snapshot.offering
    duration = offering.duration_minutes
    weekday = Weekday.of(day)
    breaks = resolve_breaks(snapshot, weekday)

    candidates: List[Tuple[time, int, SlotSource]] = []
    if offering.use_managed_slots:
        # Full managed slots stay on the board; only inactive ones are hidden.
        for slot in snapshot.managed_slots:
            if slot.day_of_week == weekday and slot.is_active:
                candidates.append((slot.start_time, duration, SlotSource.MANAGED))
        candidates.sort(key=lambda c: c[0])
    else:
        window = resolve_effective_window(snapshot, day, fallback)
        if window is not None:
            for start in generate_slots(window[0], window[1], duration, breaks):
                candidates.append((start, duration, SlotSource.SCHEDULE))

    for custom in snapshot.custom_slots:
        if custom.date == day:
            candidates.append(
                (custom.start_time, custom.duration_minutes(duration), SlotSource.CUSTOM)
            )
    return candidates


def build_slot_board(
    snapshot: AvailabilitySnapshot,
    days: Iterable[date],
    fallback: Optional[WeeklySchedule] = None,
) -> List[SlotBoardEntry]:
    """
    List every slot for the given days with its status.

    A slot is ``booked`` when an active booking starts at it (or, for managed
    slots, when the record is at capacity), ``blocked`` when a slot block sits
    on it, and ``available`` otherwise. Blacked-out days contribute nothing.
    Duplicate starts on one day keep the first source.
    """
    bookings: Dict[Tuple[date, time], ExistingBooking] = {}
    for booking in snapshot.active_bookings():
        bookings.setdefault((booking.date, booking.start_time), booking)
    blocks: Set[Tuple[date, time]] = {(b.date, b.start_time) for b in snapshot.slot_blocks}
    full_managed = {
        (slot.day_of_week, slot.start_time)
        for slot in snapshot.managed_slots
        if slot.is_active and not slot.has_capacity
    }

    entries: List[SlotBoardEntry] = []
    for day in days:
        if any(blackout.covers(day) for blackout in snapshot.blackout_ranges):
            continue

        seen: Set[time] = set()
        for start, duration, source in _day_candidates(snapshot, day, fallback):
            if start in seen:
                continue
            seen.add(start)

            booking = bookings.get((day, start))
            if booking is not None:
                status = SlotStatus.BOOKED
            elif (day, start) in blocks:
                status = SlotStatus.BLOCKED
            elif source == SlotSource.MANAGED and (Weekday.of(day), start) in full_managed:
                status = SlotStatus.BOOKED
            else:
                status = SlotStatus.AVAILABLE

            entries.append(SlotBoardEntry(
                date=day,
                start_time=start,
                end_time=minutes_to_time(time_to_minutes(start) + duration),
                status=status,
                source=source,
                booking=booking,
            ))

    entries.sort(key=lambda e: (e.date, e.start_time))
    return entries


def summarize_slots(entries: Iterable[SlotBoardEntry]) -> Dict[str, int]:
    """Count board entries by status."""
    summary = {"total": 0, "booked": 0, "blocked": 0, "available": 0}
    for entry in entries:
        summary["total"] += 1
        summary[entry.status.value] += 1
    return summary


__all__ = [
    "build_slot_board",
    "summarize_slots",
]
