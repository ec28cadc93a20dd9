"""
Slot Generation

Enumerates fixed-duration candidate start times inside a window, or maps
managed slot inventory to candidates when an offering uses it.
"""

from datetime import time
from typing import List, Sequence

from .base import (
    BreakWindow,
    ManagedSlot,
    Weekday,
    minutes_to_time,
    time_to_minutes,
)


def overlaps_any_break(start_minutes: int, end_minutes: int, breaks: Sequence[BreakWindow]) -> bool:
    """Check a candidate interval against every break."""
    return any(b.overlaps(start_minutes, end_minutes) for b in breaks)


def generate_slots(
    window_start: time,
    window_end: time,
    duration_minutes: int,
    breaks: Sequence[BreakWindow] = (),
) -> List[time]:
    """
    Generate candidate start times for one window.

    Slots are aligned to the window start and step by exactly the meeting
    duration, so back-to-back slots tile the window. A candidate whose
    ``[start, start + duration)`` interval touches any break is skipped.

    Args:
        window_start: Opening time
        window_end: Closing time; no slot may run past it
        duration_minutes: Meeting length
        breaks: Break windows for the day

    Returns:
        Ordered start times (empty for a non-positive duration or empty window)
    """
    if duration_minutes <= 0:
        return []

    start = time_to_minutes(window_start)
    end = time_to_minutes(window_end)
    if start >= end:
        return []

    slots = []
    current = start
    while current + duration_minutes <= end:
        if not overlaps_any_break(current, current + duration_minutes, breaks):
            slots.append(minutes_to_time(current))
        current += duration_minutes

    return slots


def managed_slot_candidates(
    managed_slots: Sequence[ManagedSlot],
    weekday: Weekday,
    duration_minutes: int,
    breaks: Sequence[BreakWindow] = (),
) -> List[ManagedSlot]:
    """
    Managed slot records usable as candidates on a weekday.

    Keeps active records for the weekday that still have capacity and whose
    ``[start, start + duration)`` interval is clear of breaks.
    """
    if duration_minutes <= 0:
        return []

    candidates = []
    for slot in managed_slots:
        if slot.day_of_week != weekday or not slot.is_active:
            continue
        if not slot.has_capacity:
            continue
        start = time_to_minutes(slot.start_time)
        if overlaps_any_break(start, start + duration_minutes, breaks):
            continue
        candidates.append(slot)

    candidates.sort(key=lambda s: s.start_time)
    return candidates


__all__ = [
    "overlaps_any_break",
    "generate_slots",
    "managed_slot_candidates",
]
