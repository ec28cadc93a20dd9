"""
Configuration Document Parsing

Converts the raw camelCase documents persisted by the admin dashboard into
the availability model. Parsing never raises: malformed entries are repaired
so that they grant less access, never more, and each repair is logged.
"""

from datetime import date, time
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .base import (
    BlackoutRange,
    BookingConstraints,
    BookingStatus,
    BreakMap,
    BreakWindow,
    CustomSlot,
    DaySchedule,
    ExistingBooking,
    ManagedSlot,
    Offering,
    SlotBlock,
    SpecialDateOverride,
    Weekday,
    WeeklySchedule,
)
from .timeutils import parse_date, parse_duration, parse_time


logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

WHOLE_DAY = (time(0, 0), time.max)


def _optional_time(value: Any) -> Optional[time]:
    if value is None or value == "":
        return None
    return parse_time(value, strict=True)


class DocumentModel(BaseModel):
    """Base for raw dashboard documents."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DatedDocument(DocumentModel):
    """A document keyed by one calendar date."""

    day: date = Field(validation_alias=AliasChoices("date", "day"))

    @field_validator("day", mode="before")
    @classmethod
    def parse_day(cls, value: Any) -> date:
        return parse_date(value, strict=True)


# =============================================================================
# Weekly Hours
# =============================================================================


class DayHoursDocument(DocumentModel):
    """One weekday entry of an availability map."""

    enabled: bool = True
    start: Optional[time] = Field(None, validation_alias=AliasChoices("start", "startTime"))
    end: Optional[time] = Field(None, validation_alias=AliasChoices("end", "endTime"))

    @field_validator("start", "end", mode="before")
    @classmethod
    def parse_times(cls, value: Any) -> Optional[time]:
        return _optional_time(value)

    def to_day_schedule(self) -> DaySchedule:
        entry = DaySchedule(
            enabled=self.enabled,
            start=self.start or time(9, 0),
            end=self.end or time(17, 0),
        )
        if entry.enabled and not entry.is_valid:
            logger.warning(
                "day_hours_inverted",
                start=entry.start.isoformat(),
                end=entry.end.isoformat(),
            )
            return DaySchedule(enabled=False, start=entry.start, end=entry.end)
        return entry


def parse_weekly_schedule(raw: Optional[Mapping[str, Any]]) -> Optional[WeeklySchedule]:
    """
    Parse an availability map such as
    ``{"Monday": {"enabled": true, "start": "09:00", "end": "17:00"}}``.

    A weekday entry that fails validation is kept as a disabled entry so it
    still takes precedence over lower layers.

    Returns:
        WeeklySchedule, or None when no map is configured
    """
    if not isinstance(raw, Mapping):
        return None

    days: Dict[Weekday, DaySchedule] = {}
    for key, value in raw.items():
        try:
            weekday = Weekday.parse(key)
        except ValueError:
            logger.warning("unknown_weekday_ignored", key=key)
            continue

        if not isinstance(value, Mapping):
            logger.warning("day_hours_malformed", weekday=weekday.value)
            days[weekday] = DaySchedule(enabled=False)
            continue

        try:
            days[weekday] = DayHoursDocument.model_validate(value).to_day_schedule()
        except ValidationError as e:
            logger.warning(
                "day_hours_malformed",
                weekday=weekday.value,
                errors=e.error_count(),
            )
            days[weekday] = DaySchedule(enabled=False)

    return WeeklySchedule(days=days)


# =============================================================================
# Breaks
# =============================================================================


class BreakDocument(DocumentModel):
    """One break window."""

    id: str = ""
    start_time: time = Field(validation_alias=AliasChoices("startTime", "start", "start_time"))
    end_time: time = Field(validation_alias=AliasChoices("endTime", "end", "end_time"))

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_times(cls, value: Any) -> time:
        return parse_time(value, strict=True)


def parse_break_map(raw: Optional[Mapping[str, Any]]) -> Optional[BreakMap]:
    """
    Parse ``{"Monday": [{"id": "b1", "startTime": "12:30", "endTime": "13:00"}]}``.

    A break that cannot be parsed, or whose end is not after its start,
    becomes a whole-day break for that weekday.
    """
    if not isinstance(raw, Mapping):
        return None

    days: Dict[Weekday, List[BreakWindow]] = {}
    for key, entries in raw.items():
        try:
            weekday = Weekday.parse(key)
        except ValueError:
            logger.warning("unknown_weekday_ignored", key=key)
            continue

        if not isinstance(entries, list):
            entries = [entries]

        windows: List[BreakWindow] = []
        for index, entry in enumerate(entries):
            fallback_id = f"{weekday.value}-{index}"
            try:
                doc = BreakDocument.model_validate(entry)
            except ValidationError:
                doc = None

            if doc is None or doc.start_time >= doc.end_time:
                logger.warning("break_malformed", weekday=weekday.value, index=index)
                windows.append(BreakWindow(fallback_id, *WHOLE_DAY))
                continue

            windows.append(BreakWindow(doc.id or fallback_id, doc.start_time, doc.end_time))

        windows.sort(key=lambda b: (b.start_time, b.end_time))
        days[weekday] = windows

    return BreakMap(days=days)


# =============================================================================
# Offering
# =============================================================================


class ConstraintsDocument(DocumentModel):
    """Guardrail fields; negative values fail validation."""

    min_notice_hours: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("minNoticeHours", "min_notice_hours")
    )
    booking_window_days: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("bookingWindowDays", "booking_window_days")
    )
    buffer_before_mins: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("bufferBeforeMins", "buffer_before_mins")
    )
    buffer_after_mins: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("bufferAfterMins", "buffer_after_mins")
    )
    max_per_day: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("maxPerDay", "max_per_day")
    )
    max_per_week: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("maxPerWeek", "max_per_week")
    )
    max_per_month: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("maxPerMonth", "max_per_month")
    )
    max_per_customer: Optional[int] = Field(
        None, ge=0, validation_alias=AliasChoices("maxPerCustomer", "max_per_customer")
    )


def parse_constraints(raw: Optional[Mapping[str, Any]]) -> BookingConstraints:
    """Parse a constraints block, dropping fields that fail validation."""
    if not isinstance(raw, Mapping):
        return BookingConstraints()

    try:
        doc = ConstraintsDocument.model_validate(raw)
        return BookingConstraints(**doc.model_dump())
    except ValidationError:
        pass

    values: Dict[str, Any] = {}
    dropped: List[str] = []
    for name, info in ConstraintsDocument.model_fields.items():
        for alias in info.validation_alias.choices:
            if alias in raw:
                try:
                    single = ConstraintsDocument.model_validate({alias: raw[alias]})
                    values[name] = getattr(single, name)
                except ValidationError:
                    dropped.append(alias)
                break

    logger.warning("constraints_fields_dropped", fields=dropped)
    return BookingConstraints(**values)


def parse_offering(raw: Mapping[str, Any], default_duration: int = 30) -> Offering:
    """
    Parse an offering ("sales call") document.

    Accepts the dashboard's shape: ``availability`` and ``breaks`` maps,
    ``duration`` as ``{"hours", "minutes"}`` or ``durationMinutes``,
    constraints either nested under ``constraints`` or at the top level, and
    the schedule owner as ``resourceId`` or the first of
    ``assignedSalespersons``.
    """
    if "durationMinutes" in raw:
        duration = parse_duration(raw.get("durationMinutes"), default=default_duration)
    else:
        duration = parse_duration(raw.get("duration"), default=default_duration)

    resource_id = raw.get("resourceId")
    if not resource_id:
        assigned = raw.get("assignedSalespersons")
        if isinstance(assigned, list) and assigned:
            resource_id = assigned[0]

    constraints_raw = raw.get("constraints")
    if not isinstance(constraints_raw, Mapping):
        constraints_raw = raw

    return Offering(
        id=str(raw.get("id", "")),
        name=str(raw.get("name") or ""),
        organization_id=raw.get("organizationId") or raw.get("workspaceId"),
        duration_minutes=duration,
        hours=parse_weekly_schedule(raw.get("availability")),
        breaks=parse_break_map(raw.get("breaks")),
        constraints=parse_constraints(constraints_raw),
        use_managed_slots=bool(raw.get("useManagedSlots", False)),
        resource_id=resource_id or None,
    )


# =============================================================================
# Date Overrides and Inventory
# =============================================================================


class SpecialDateDocument(DatedDocument):
    start_time: time = Field(validation_alias=AliasChoices("startTime", "start"))
    end_time: time = Field(validation_alias=AliasChoices("endTime", "end"))

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_times(cls, value: Any) -> time:
        return parse_time(value, strict=True)


class BlackoutDocument(DocumentModel):
    start_date: date = Field(validation_alias=AliasChoices("startDate", "start", "date"))
    end_date: Optional[date] = Field(None, validation_alias=AliasChoices("endDate", "end"))

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start(cls, value: Any) -> date:
        return parse_date(value, strict=True)

    @field_validator("end_date", mode="before")
    @classmethod
    def parse_end(cls, value: Any) -> Optional[date]:
        if value is None or value == "":
            return None
        return parse_date(value, strict=True)


class ManagedSlotDocument(DocumentModel):
    id: Optional[str] = None
    day_of_week: Weekday = Field(validation_alias=AliasChoices("dayOfWeek", "day", "day_of_week"))
    start_time: time = Field(validation_alias=AliasChoices("startTime", "start", "start_time"))
    end_time: time = Field(validation_alias=AliasChoices("endTime", "end", "end_time"))
    max_bookings: int = Field(1, ge=0, validation_alias=AliasChoices("maxBookings", "max_bookings"))
    current_bookings: int = Field(
        0, ge=0, validation_alias=AliasChoices("currentBookings", "current_bookings")
    )
    is_active: bool = Field(True, validation_alias=AliasChoices("isActive", "is_active"))

    @field_validator("day_of_week", mode="before")
    @classmethod
    def parse_weekday(cls, value: Any) -> Weekday:
        return Weekday.parse(value)

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_times(cls, value: Any) -> time:
        return parse_time(value, strict=True)


class SlotBlockDocument(DatedDocument):
    start_time: time = Field(validation_alias=AliasChoices("startTime", "start"))

    @field_validator("start_time", mode="before")
    @classmethod
    def parse_start(cls, value: Any) -> time:
        return parse_time(value, strict=True)


class CustomSlotDocument(DatedDocument):
    start_time: time = Field(validation_alias=AliasChoices("startTime", "start"))
    end_time: Optional[time] = Field(None, validation_alias=AliasChoices("endTime", "end"))
    note: str = ""

    @field_validator("start_time", mode="before")
    @classmethod
    def parse_start(cls, value: Any) -> time:
        return parse_time(value, strict=True)

    @field_validator("end_time", mode="before")
    @classmethod
    def parse_end(cls, value: Any) -> Optional[time]:
        return _optional_time(value)


class BookingDocument(DatedDocument):
    start_time: time = Field(validation_alias=AliasChoices("time", "startTime", "start_time"))
    duration_minutes: Optional[int] = Field(
        None, validation_alias=AliasChoices("durationMinutes", "duration_minutes")
    )
    customer_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("customerId", "customer_id", "customerEmail")
    )
    status: Optional[str] = Field(None, validation_alias=AliasChoices("status", "appointmentStatus"))

    @field_validator("start_time", mode="before")
    @classmethod
    def parse_start(cls, value: Any) -> time:
        return parse_time(value, strict=True)


def _parse_items(
    model: Type[M],
    items: Optional[List[Any]],
    kind: str,
    convert: Callable[[M], T],
) -> List[T]:
    if not isinstance(items, list):
        return []

    results: List[T] = []
    for index, item in enumerate(items):
        try:
            doc = model.model_validate(item)
        except ValidationError as e:
            logger.warning("document_dropped", kind=kind, index=index, errors=e.error_count())
            continue
        results.append(convert(doc))
    return results


def parse_special_dates(items: Optional[List[Any]]) -> List[SpecialDateOverride]:
    """Parse special date overrides; inverted windows are kept and admit nothing."""
    return _parse_items(
        SpecialDateDocument,
        items,
        "special_date",
        lambda d: SpecialDateOverride(d.day, d.start_time, d.end_time),
    )


def _to_blackout(doc: BlackoutDocument) -> BlackoutRange:
    start, end = doc.start_date, doc.end_date or doc.start_date
    if end < start:
        logger.warning("blackout_inverted", start=start.isoformat(), end=end.isoformat())
        start, end = end, start
    return BlackoutRange(start, end)


def parse_blackout_ranges(items: Optional[List[Any]]) -> List[BlackoutRange]:
    """Parse blackout ranges; a single date may omit ``endDate``."""
    return _parse_items(BlackoutDocument, items, "blackout", _to_blackout)


def parse_managed_slots(items: Optional[List[Any]]) -> List[ManagedSlot]:
    """Parse managed slot inventory records."""
    return _parse_items(
        ManagedSlotDocument,
        items,
        "managed_slot",
        lambda d: ManagedSlot(
            day_of_week=d.day_of_week,
            start_time=d.start_time,
            end_time=d.end_time,
            max_bookings=d.max_bookings,
            current_bookings=d.current_bookings,
            is_active=d.is_active,
            id=d.id,
        ),
    )


def parse_slot_blocks(items: Optional[List[Any]]) -> List[SlotBlock]:
    """Parse per-date slot blocks."""
    return _parse_items(
        SlotBlockDocument, items, "slot_block", lambda d: SlotBlock(d.day, d.start_time)
    )


def parse_custom_slots(items: Optional[List[Any]]) -> List[CustomSlot]:
    """Parse administrator-added custom slots."""
    return _parse_items(
        CustomSlotDocument,
        items,
        "custom_slot",
        lambda d: CustomSlot(d.day, d.start_time, d.end_time, d.note),
    )


def _to_booking(doc: BookingDocument, default_duration: int) -> ExistingBooking:
    try:
        status = BookingStatus((doc.status or "confirmed").strip().lower())
    except ValueError:
        status = BookingStatus.CONFIRMED
    return ExistingBooking(
        date=doc.day,
        start_time=doc.start_time,
        duration_minutes=doc.duration_minutes or default_duration,
        customer_id=doc.customer_id,
        status=status,
    )


def parse_bookings(items: Optional[List[Any]], default_duration: int = 30) -> List[ExistingBooking]:
    """
    Parse appointment records into the bookings read-model.

    Unknown statuses count as active bookings.
    """
    return _parse_items(
        BookingDocument,
        items,
        "booking",
        lambda d: _to_booking(d, default_duration),
    )


__all__ = [
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
]
