"""
Availability Module

This module resolves which dates and time slots an offering can be booked
in, from layered weekly hours, breaks, date overrides and guardrails.

Features:
- Schedule Resolution: Resource, offering, organization and default hours
- Date Gate: Past dates, booking window, blackouts, disabled weekdays
- Slot Generation: Duration-stepped slots or managed slot inventory
- Slot Admission: Breaks, minimum notice, blocks, buffers and caps
- Slot Board: Booked/blocked/available view for administrators
- Document Parsing: Raw dashboard documents with fail-closed repair

Example usage:

    from booking_core.availability import (
        AvailabilityService,
        ScheduleStore,
        Weekday,
    )
    from datetime import date

    store = ScheduleStore()

    await store.put_raw_organization("org_123", {
        "availability": {
            "Monday": {"enabled": True, "start": "09:00", "end": "17:00"},
            "Saturday": {"enabled": False},
        },
        "breaks": {
            "Monday": [{"id": "lunch", "startTime": "12:00", "endTime": "13:00"}],
        },
    })

    await store.put_raw_offering({
        "id": "intro-call",
        "name": "Intro Call",
        "organizationId": "org_123",
        "duration": {"hours": 0, "minutes": 30},
        "constraints": {"minNoticeHours": 24, "bookingWindowDays": 30},
        "blackoutDates": [{"startDate": "2026-12-24", "endDate": "2026-12-26"}],
    })

    service = AvailabilityService(store)

    # Dates a customer can pick
    dates = await service.get_admissible_dates("intro-call")

    # Slots on one date
    slots = await service.get_bookable_slots("intro-call", date(2026, 10, 20))

    # Administrative view of a week
    board = await service.get_slot_board("intro-call", date(2026, 10, 19))
"""

from .base import (
    # Enums
    Weekday,
    WEEKDAYS,
    ScheduleLayer,
    SlotSource,
    SlotStatus,
    BookingStatus,
    # Schedule types
    DaySchedule,
    WeeklySchedule,
    default_weekly_schedule,
    DEFAULT_WEEKLY_SCHEDULE,
    BreakWindow,
    BreakMap,
    # Date overrides
    SpecialDateOverride,
    BlackoutRange,
    # Offering types
    BookingConstraints,
    ManagedSlot,
    Offering,
    # Inventory types
    SlotBlock,
    CustomSlot,
    ExistingBooking,
    # Resolution types
    AvailabilitySnapshot,
    ResolvedWindow,
    BookableSlot,
    SlotBoardEntry,
    # Exceptions
    AvailabilityError,
    ConfigurationError,
    OfferingNotFoundError,
)

from .timeutils import (
    parse_time,
    parse_date,
    parse_duration,
    week_dates,
)

from .documents import (
    parse_weekly_schedule,
    parse_break_map,
    parse_constraints,
    parse_offering,
    parse_special_dates,
    parse_blackout_ranges,
    parse_managed_slots,
    parse_slot_blocks,
    parse_custom_slots,
    parse_bookings,
)

from .resolver import (
    resolve_day_schedule,
    resolve_breaks,
    resolve_effective_window,
)

from .gate import (
    is_date_admissible,
    list_admissible_dates,
)

from .slots import (
    generate_slots,
    managed_slot_candidates,
)

from .admission import (
    is_slot_admissible,
)

from .board import (
    build_slot_board,
    summarize_slots,
)

from .service import (
    list_bookable_slots,
    AvailabilityEngine,
    ScheduleStore,
    AvailabilityService,
)


__all__ = [
    # Enums
    "Weekday",
    "WEEKDAYS",
    "ScheduleLayer",
    "SlotSource",
    "SlotStatus",
    "BookingStatus",
    # Schedule types
    "DaySchedule",
    "WeeklySchedule",
    "default_weekly_schedule",
    "DEFAULT_WEEKLY_SCHEDULE",
    "BreakWindow",
    "BreakMap",
    # Date overrides
    "SpecialDateOverride",
    "BlackoutRange",
    # Offering types
    "BookingConstraints",
    "ManagedSlot",
    "Offering",
    # Inventory types
    "SlotBlock",
    "CustomSlot",
    "ExistingBooking",
    # Resolution types
    "AvailabilitySnapshot",
    "ResolvedWindow",
    "BookableSlot",
    "SlotBoardEntry",
    # Exceptions
    "AvailabilityError",
    "ConfigurationError",
    "OfferingNotFoundError",
    # Parsing
    "parse_time",
    "parse_date",
    "parse_duration",
    "week_dates",
    "parse_weekly_schedule",
    "parse_break_map",
    "parse_constraints",
    "parse_offering",
    "parse_special_dates",
    "parse_blackout_ranges",
    "parse_managed_slots",
    "parse_slot_blocks",
    "parse_custom_slots",
    "parse_bookings",
    # Resolution
    "resolve_day_schedule",
    "resolve_breaks",
    "resolve_effective_window",
    "is_date_admissible",
    "list_admissible_dates",
    "generate_slots",
    "managed_slot_candidates",
    "is_slot_admissible",
    "list_bookable_slots",
    "build_slot_board",
    "summarize_slots",
    # Services
    "AvailabilityEngine",
    "ScheduleStore",
    "AvailabilityService",
]
