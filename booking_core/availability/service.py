"""
Availability Service Module

This module composes the resolver, date gate, slot generator and admission
filter into bookable slot listings, and provides the async configuration
store and service facade used by the booking dashboard.
"""

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Set,
)

import structlog

from ..config import Settings, get_settings
from .admission import is_slot_admissible
from .base import (
    AvailabilitySnapshot,
    BlackoutRange,
    BookableSlot,
    BreakMap,
    CustomSlot,
    ExistingBooking,
    ManagedSlot,
    Offering,
    OfferingNotFoundError,
    ResolvedWindow,
    SlotBlock,
    SlotBoardEntry,
    SlotSource,
    SpecialDateOverride,
    Weekday,
    WeeklySchedule,
)
from .board import build_slot_board, summarize_slots
from .documents import (
    parse_blackout_ranges,
    parse_break_map,
    parse_bookings,
    parse_custom_slots,
    parse_managed_slots,
    parse_offering,
    parse_slot_blocks,
    parse_special_dates,
    parse_weekly_schedule,
)
from .gate import is_date_admissible, list_admissible_dates
from .resolver import resolve_breaks, resolve_day_schedule, resolve_effective_window
from .slots import generate_slots, managed_slot_candidates
from .timeutils import week_dates


logger = structlog.get_logger(__name__)


# =============================================================================
# Slot Listing
# =============================================================================


def list_bookable_slots(
    snapshot: AvailabilitySnapshot,
    day: date,
    now: datetime,
    customer_id: Optional[str] = None,
    fallback: Optional[WeeklySchedule] = None,
) -> List[BookableSlot]:
    """
    List the slots a customer may book on one date.

    The date gate runs first. Candidates then come from managed slot
    inventory when the offering uses it, else from the effective window;
    administrator custom slots for the date are added on top. Every
    candidate passes the admission filter. Custom slots skip the window and
    break checks; managed slots skip the booking overlap check since their
    counters already carry occupancy.

    Args:
        snapshot: Configuration snapshot for the offering
        day: Date to list
        now: Current time, naive local or timezone-aware
        customer_id: Requesting customer, for the per-customer cap
        fallback: Fallback weekly layer

    Returns:
        Slots ordered by start time, one per start (may be empty)
    """
    today = now.date()
    if not is_date_admissible(snapshot, day, today, fallback):
        return []

    offering = snapshot.offering
    duration = offering.duration_minutes
    weekday = Weekday.of(day)
    breaks = resolve_breaks(snapshot, weekday)

    slots: List[BookableSlot] = []
    if offering.use_managed_slots:
        for managed in managed_slot_candidates(snapshot.managed_slots, weekday, duration, breaks):
            if is_slot_admissible(
                snapshot, day, managed.start_time, now,
                customer_id=customer_id,
                fallback=fallback,
                check_bookings=False,
            ):
                slots.append(BookableSlot(
                    date=day,
                    start_time=managed.start_time,
                    duration_minutes=duration,
                    source=SlotSource.MANAGED,
                    capacity_remaining=managed.capacity_remaining,
                ))
    else:
        window = resolve_effective_window(snapshot, day, fallback)
        if window is not None:
            for start in generate_slots(window[0], window[1], duration, breaks):
                if is_slot_admissible(
                    snapshot, day, start, now,
                    customer_id=customer_id,
                    fallback=fallback,
                ):
                    slots.append(BookableSlot(day, start, duration))

    for custom in snapshot.custom_slots:
        if custom.date != day:
            continue
        custom_duration = custom.duration_minutes(duration)
        if is_slot_admissible(
            snapshot, day, custom.start_time, now,
            customer_id=customer_id,
            fallback=fallback,
            duration_minutes=custom_duration,
            check_window=False,
        ):
            slots.append(BookableSlot(
                date=day,
                start_time=custom.start_time,
                duration_minutes=custom_duration,
                source=SlotSource.CUSTOM,
            ))

    seen: Set[time] = set()
    unique: List[BookableSlot] = []
    for slot in slots:
        if slot.start_time in seen:
            continue
        seen.add(slot.start_time)
        unique.append(slot)
    unique.sort(key=lambda s: s.start_time)

    logger.debug(
        "bookable_slots_listed",
        offering_id=offering.id,
        date=day.isoformat(),
        count=len(unique),
    )
    return unique


# =============================================================================
# Availability Engine
# =============================================================================


class AvailabilityEngine:
    """
    Resolution operations with the clock and fallback hours bound.

    The engine holds no per-offering state; every call resolves against the
    snapshot it is given.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or get_settings()
        self.fallback = self.settings.default_weekly_schedule()
        self._clock = clock or datetime.now

    def now(self) -> datetime:
        """Current local time from the bound clock."""
        return self._clock()

    def today(self) -> date:
        return self.now().date()

    def resolve_day_schedule(
        self,
        snapshot: AvailabilitySnapshot,
        weekday: Weekday,
    ) -> ResolvedWindow:
        """Resolve the weekly hours for one weekday."""
        return resolve_day_schedule(snapshot, weekday, self.fallback)

    def is_date_admissible(self, snapshot: AvailabilitySnapshot, day: date) -> bool:
        """Check whether a date can be selected at all."""
        return is_date_admissible(snapshot, day, self.today(), self.fallback)

    def is_slot_admissible(
        self,
        snapshot: AvailabilitySnapshot,
        day: date,
        candidate_start: time,
        customer_id: Optional[str] = None,
    ) -> bool:
        """Check one candidate start against the admission rules."""
        return is_slot_admissible(
            snapshot, day, candidate_start, self.now(),
            customer_id=customer_id,
            fallback=self.fallback,
        )

    def list_bookable_slots(
        self,
        snapshot: AvailabilitySnapshot,
        day: date,
        customer_id: Optional[str] = None,
    ) -> List[BookableSlot]:
        """List bookable slots for one date."""
        return list_bookable_slots(snapshot, day, self.now(), customer_id, self.fallback)

    def list_admissible_dates(
        self,
        snapshot: AvailabilitySnapshot,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[date]:
        """
        List admissible dates from ``start`` (default today) to ``end``.

        Without an explicit end the listing stops at the booking window, or
        after ``max_listing_days`` when the offering has none.
        """
        today = self.today()
        start = start or today
        if end is None:
            window_days = snapshot.offering.constraints.booking_window_days
            if window_days is None:
                window_days = self.settings.max_listing_days
            end = today + timedelta(days=window_days)
        return list_admissible_dates(snapshot, start, end, today, self.fallback)

    def build_slot_board(
        self,
        snapshot: AvailabilitySnapshot,
        days: List[date],
    ) -> List[SlotBoardEntry]:
        """Build the administrative slot board for the given days."""
        return build_slot_board(snapshot, days, self.fallback)


# =============================================================================
# Schedule Store
# =============================================================================


class ScheduleStore:
    """
    In-memory configuration store.

    Weekly hours and breaks are keyed by organization, personal hours by
    resource, and everything else by offering. Getters return None or an
    empty list when nothing is stored.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._offerings: Dict[str, Offering] = {}
        self._organization_hours: Dict[str, WeeklySchedule] = {}
        self._organization_breaks: Dict[str, BreakMap] = {}
        self._resource_hours: Dict[str, WeeklySchedule] = {}
        self._special_dates: Dict[str, List[SpecialDateOverride]] = defaultdict(list)
        self._blackouts: Dict[str, List[BlackoutRange]] = defaultdict(list)
        self._managed_slots: Dict[str, List[ManagedSlot]] = defaultdict(list)
        self._slot_blocks: Dict[str, List[SlotBlock]] = defaultdict(list)
        self._custom_slots: Dict[str, List[CustomSlot]] = defaultdict(list)
        self._bookings: Dict[str, List[ExistingBooking]] = defaultdict(list)

    # -------------------------------------------------------------------------
    # Typed writes
    # -------------------------------------------------------------------------

    async def put_offering(self, offering: Offering) -> Offering:
        """Store or replace an offering."""
        self._offerings[offering.id] = offering
        logger.info("offering_stored", offering_id=offering.id, name=offering.name)
        return offering

    async def put_organization_hours(
        self,
        organization_id: str,
        hours: Optional[WeeklySchedule],
        breaks: Optional[BreakMap] = None,
    ) -> None:
        """Store the organization's weekly hours and breaks."""
        if hours is not None:
            self._organization_hours[organization_id] = hours
        else:
            self._organization_hours.pop(organization_id, None)
        if breaks is not None:
            self._organization_breaks[organization_id] = breaks
        else:
            self._organization_breaks.pop(organization_id, None)
        logger.info("organization_hours_stored", organization_id=organization_id)

    async def put_resource_hours(self, resource_id: str, hours: Optional[WeeklySchedule]) -> None:
        """Store a resource's personal weekly hours."""
        if hours is None:
            self._resource_hours.pop(resource_id, None)
        else:
            self._resource_hours[resource_id] = hours
        logger.info("resource_hours_stored", resource_id=resource_id)

    async def set_date_overrides(
        self,
        offering_id: str,
        special_dates: Optional[List[SpecialDateOverride]] = None,
        blackouts: Optional[List[BlackoutRange]] = None,
    ) -> None:
        """Replace special dates and/or blackout ranges for an offering."""
        if special_dates is not None:
            self._special_dates[offering_id] = list(special_dates)
        if blackouts is not None:
            self._blackouts[offering_id] = list(blackouts)
        logger.info(
            "date_overrides_stored",
            offering_id=offering_id,
            special_dates=len(self._special_dates[offering_id]),
            blackouts=len(self._blackouts[offering_id]),
        )

    async def set_managed_slots(self, offering_id: str, slots: List[ManagedSlot]) -> None:
        """Replace the managed slot inventory for an offering."""
        self._managed_slots[offering_id] = list(slots)
        logger.info("managed_slots_stored", offering_id=offering_id, count=len(slots))

    async def add_slot_block(self, offering_id: str, block: SlotBlock) -> None:
        """Block one slot start on one date."""
        self._slot_blocks[offering_id].append(block)
        logger.info(
            "slot_blocked",
            offering_id=offering_id,
            date=block.date.isoformat(),
            start_time=block.start_time.strftime("%H:%M"),
        )

    async def remove_slot_block(self, offering_id: str, block: SlotBlock) -> bool:
        """Unblock a slot. Returns False when no such block exists."""
        blocks = self._slot_blocks[offering_id]
        if block not in blocks:
            return False
        blocks.remove(block)
        logger.info(
            "slot_unblocked",
            offering_id=offering_id,
            date=block.date.isoformat(),
            start_time=block.start_time.strftime("%H:%M"),
        )
        return True

    async def add_custom_slot(self, offering_id: str, slot: CustomSlot) -> None:
        """Add an administrator one-off slot."""
        self._custom_slots[offering_id].append(slot)
        logger.info(
            "custom_slot_added",
            offering_id=offering_id,
            date=slot.date.isoformat(),
            start_time=slot.start_time.strftime("%H:%M"),
        )

    async def set_bookings(self, offering_id: str, bookings: List[ExistingBooking]) -> None:
        """Replace the bookings read-model for an offering."""
        self._bookings[offering_id] = list(bookings)
        logger.info("bookings_stored", offering_id=offering_id, count=len(bookings))

    # -------------------------------------------------------------------------
    # Raw dashboard documents
    # -------------------------------------------------------------------------

    async def put_raw_offering(self, raw: Mapping[str, Any]) -> Offering:
        """
        Parse and store an offering document.

        ``specialDates`` and ``blackoutDates`` carried on the document replace
        the offering's date overrides.
        """
        offering = parse_offering(raw, default_duration=self.settings.default_duration_minutes)
        await self.put_offering(offering)
        if "specialDates" in raw or "blackoutDates" in raw:
            await self.put_raw_date_overrides(offering.id, raw)
        return offering

    async def put_raw_organization(self, organization_id: str, raw: Mapping[str, Any]) -> None:
        """Parse and store an organization's ``availability`` and ``breaks`` maps."""
        await self.put_organization_hours(
            organization_id,
            parse_weekly_schedule(raw.get("availability")),
            parse_break_map(raw.get("breaks")),
        )

    async def put_raw_resource_hours(self, resource_id: str, raw: Optional[Mapping[str, Any]]) -> None:
        """Parse and store a resource's availability map."""
        await self.put_resource_hours(resource_id, parse_weekly_schedule(raw))

    async def put_raw_date_overrides(self, offering_id: str, raw: Mapping[str, Any]) -> None:
        """Parse ``specialDates`` and ``blackoutDates`` lists."""
        await self.set_date_overrides(
            offering_id,
            special_dates=(
                parse_special_dates(raw.get("specialDates")) if "specialDates" in raw else None
            ),
            blackouts=(
                parse_blackout_ranges(raw.get("blackoutDates")) if "blackoutDates" in raw else None
            ),
        )

    async def put_raw_managed_slots(self, offering_id: str, items: List[Any]) -> None:
        """Parse and store managed slot records."""
        await self.set_managed_slots(offering_id, parse_managed_slots(items))

    async def put_raw_slot_blocks(self, offering_id: str, items: List[Any]) -> None:
        """Parse and append slot blocks."""
        for block in parse_slot_blocks(items):
            await self.add_slot_block(offering_id, block)

    async def put_raw_custom_slots(self, offering_id: str, items: List[Any]) -> None:
        """Parse and append custom slots."""
        for slot in parse_custom_slots(items):
            await self.add_custom_slot(offering_id, slot)

    async def put_raw_bookings(self, offering_id: str, items: List[Any]) -> None:
        """Parse and store appointment records as the bookings read-model."""
        offering = self._offerings.get(offering_id)
        default = offering.duration_minutes if offering else self.settings.default_duration_minutes
        await self.set_bookings(offering_id, parse_bookings(items, default_duration=default))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_offering(self, offering_id: str) -> Optional[Offering]:
        """Get offering by ID."""
        return self._offerings.get(offering_id)

    async def get_organization_hours(self, organization_id: Optional[str]) -> Optional[WeeklySchedule]:
        if not organization_id:
            return None
        return self._organization_hours.get(organization_id)

    async def get_organization_breaks(self, organization_id: Optional[str]) -> Optional[BreakMap]:
        if not organization_id:
            return None
        return self._organization_breaks.get(organization_id)

    async def get_resource_hours(self, resource_id: Optional[str]) -> Optional[WeeklySchedule]:
        if not resource_id:
            return None
        return self._resource_hours.get(resource_id)

    async def get_special_dates(self, offering_id: str) -> List[SpecialDateOverride]:
        return list(self._special_dates.get(offering_id, []))

    async def get_blackouts(self, offering_id: str) -> List[BlackoutRange]:
        return list(self._blackouts.get(offering_id, []))

    async def get_managed_slots(self, offering_id: str) -> List[ManagedSlot]:
        return list(self._managed_slots.get(offering_id, []))

    async def get_slot_blocks(self, offering_id: str) -> List[SlotBlock]:
        return list(self._slot_blocks.get(offering_id, []))

    async def get_custom_slots(self, offering_id: str) -> List[CustomSlot]:
        return list(self._custom_slots.get(offering_id, []))

    async def get_bookings(self, offering_id: str) -> List[ExistingBooking]:
        return list(self._bookings.get(offering_id, []))


# =============================================================================
# Availability Service
# =============================================================================


class AvailabilityService:
    """
    Unified availability service.

    Provides:
    - Snapshot loading from the store
    - Bookable slot listings
    - Admissible date listings
    - The administrative slot board
    """

    def __init__(
        self,
        store: ScheduleStore,
        engine: Optional[AvailabilityEngine] = None,
    ):
        self.store = store
        self.engine = engine or AvailabilityEngine(settings=store.settings)

    async def load_snapshot(self, offering_id: str) -> AvailabilitySnapshot:
        """
        Read everything resolution needs for one offering.

        Raises:
            OfferingNotFoundError: If the offering is not stored
        """
        offering = await self.store.get_offering(offering_id)
        if not offering:
            raise OfferingNotFoundError(f"Offering {offering_id} not found")

        return AvailabilitySnapshot(
            offering=offering,
            organization_hours=await self.store.get_organization_hours(offering.organization_id),
            organization_breaks=await self.store.get_organization_breaks(offering.organization_id),
            resource_hours=await self.store.get_resource_hours(offering.resource_id),
            special_dates=await self.store.get_special_dates(offering_id),
            blackout_ranges=await self.store.get_blackouts(offering_id),
            managed_slots=await self.store.get_managed_slots(offering_id),
            slot_blocks=await self.store.get_slot_blocks(offering_id),
            custom_slots=await self.store.get_custom_slots(offering_id),
            bookings=await self.store.get_bookings(offering_id),
        )

    async def get_day_schedule(self, offering_id: str, weekday: Weekday) -> ResolvedWindow:
        """Resolve the weekly hours for one weekday."""
        snapshot = await self.load_snapshot(offering_id)
        return self.engine.resolve_day_schedule(snapshot, weekday)

    async def get_bookable_slots(
        self,
        offering_id: str,
        day: date,
        customer_id: Optional[str] = None,
    ) -> List[BookableSlot]:
        """Get bookable slots for one date."""
        snapshot = await self.load_snapshot(offering_id)
        slots = self.engine.list_bookable_slots(snapshot, day, customer_id)

        logger.info(
            "bookable_slots_served",
            offering_id=offering_id,
            date=day.isoformat(),
            count=len(slots),
        )
        return slots

    async def get_admissible_dates(
        self,
        offering_id: str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[date]:
        """Get the dates a customer can pick."""
        snapshot = await self.load_snapshot(offering_id)
        return self.engine.list_admissible_dates(snapshot, start, end)

    async def get_slot_board(self, offering_id: str, week_of: date) -> Dict[str, Any]:
        """Get the Monday-to-Sunday slot board with status counts."""
        snapshot = await self.load_snapshot(offering_id)
        days = week_dates(week_of)
        entries = self.engine.build_slot_board(snapshot, days)

        return {
            "offering": snapshot.offering.to_dict(),
            "week_start": days[0].isoformat(),
            "week_end": days[-1].isoformat(),
            "slots": [e.to_dict() for e in entries],
            "summary": summarize_slots(entries),
        }


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    "list_bookable_slots",
    "AvailabilityEngine",
    "ScheduleStore",
    "AvailabilityService",
]
