"""
Schedule Resolver

Picks the single authoritative weekly-hours entry and break list for an
offering on a given weekday, and the effective window for a calendar date.
"""

from datetime import date, time
from typing import List, Optional, Tuple

import structlog

from .base import (
    DEFAULT_WEEKLY_SCHEDULE,
    AvailabilitySnapshot,
    BreakWindow,
    DaySchedule,
    ResolvedWindow,
    ScheduleLayer,
    Weekday,
    WeeklySchedule,
)


logger = structlog.get_logger(__name__)


def _layers(
    snapshot: AvailabilitySnapshot,
    fallback: WeeklySchedule,
) -> List[Tuple[ScheduleLayer, Optional[WeeklySchedule]]]:
    resource_hours = snapshot.resource_hours if snapshot.offering.resource_id else None
    return [
        (ScheduleLayer.RESOURCE, resource_hours),
        (ScheduleLayer.OFFERING, snapshot.offering.hours),
        (ScheduleLayer.ORGANIZATION, snapshot.organization_hours),
        (ScheduleLayer.DEFAULT, fallback),
    ]


def resolve_day_schedule(
    snapshot: AvailabilitySnapshot,
    weekday: Weekday,
    fallback: Optional[WeeklySchedule] = None,
) -> ResolvedWindow:
    """
    Resolve the weekly hours for one weekday.

    Layers are checked resource, offering, organization, then the fallback.
    The first layer that has an entry for the weekday wins outright, even if
    that entry disables the day; lower layers are never consulted for
    enabledness. A winning entry whose window is empty resolves disabled.

    Args:
        snapshot: Configuration snapshot for the offering
        weekday: Day of week to resolve
        fallback: Layer used when nothing else mentions the day

    Returns:
        ResolvedWindow (``enabled=False`` means the day is unavailable)
    """
    fallback = fallback or DEFAULT_WEEKLY_SCHEDULE

    for layer, schedule in _layers(snapshot, fallback):
        if schedule is None or not schedule.has_entry(weekday):
            continue
        entry: DaySchedule = schedule.get(weekday)
        enabled = entry.enabled and entry.is_valid
        logger.debug(
            "day_schedule_resolved",
            offering_id=snapshot.offering.id,
            weekday=weekday.value,
            source=layer.value,
            enabled=enabled,
        )
        if not enabled:
            return ResolvedWindow(weekday, False, None, None, layer)
        return ResolvedWindow(weekday, True, entry.start, entry.end, layer)

    # The fallback may itself omit the day.
    return ResolvedWindow(weekday, False, None, None, ScheduleLayer.DEFAULT)


def resolve_breaks(snapshot: AvailabilitySnapshot, weekday: Weekday) -> List[BreakWindow]:
    """Offering breaks for the weekday when any exist, else organization breaks."""
    offering_breaks = snapshot.offering.breaks.for_day(weekday) if snapshot.offering.breaks else []
    if offering_breaks:
        return offering_breaks
    if snapshot.organization_breaks is None:
        return []
    return snapshot.organization_breaks.for_day(weekday)


def resolve_effective_window(
    snapshot: AvailabilitySnapshot,
    day: date,
    fallback: Optional[WeeklySchedule] = None,
) -> Optional[Tuple[time, time]]:
    """
    The one window used for both generation and admission on a date.

    A special date override replaces the weekly window for its date.
    Otherwise the resolved weekly window applies when enabled.

    Returns:
        (start, end), or None when the date has no window
    """
    override = snapshot.special_date_for(day)
    if override is not None:
        return override.start_time, override.end_time

    resolved = resolve_day_schedule(snapshot, Weekday.of(day), fallback)
    if not resolved.enabled:
        return None
    return resolved.start, resolved.end


__all__ = [
    "resolve_day_schedule",
    "resolve_breaks",
    "resolve_effective_window",
]
