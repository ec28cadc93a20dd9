"""
Availability Base Types Module

This module defines the core types for availability resolution: layered
weekly schedules, breaks, date overrides, booking constraints, managed slot
inventory and the snapshot bundle the engine resolves against.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
)


MINUTES_PER_DAY = 24 * 60


# =============================================================================
# Enums
# =============================================================================


class Weekday(str, Enum):
    """Days of the week."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, d: date) -> "Weekday":
        """Get the weekday of a calendar date."""
        return WEEKDAYS[d.weekday()]

    @classmethod
    def parse(cls, value: Any) -> "Weekday":
        """Parse a weekday from a name or 3-letter abbreviation."""
        if isinstance(value, Weekday):
            return value
        key = str(value).strip().lower()
        for day in WEEKDAYS:
            if key == day.value or key == day.value[:3]:
                return day
        raise ValueError(f"Unknown weekday: {value!r}")

    @property
    def label(self) -> str:
        """Display label, e.g. ``Monday``."""
        return self.value.capitalize()


WEEKDAYS = list(Weekday)


class ScheduleLayer(str, Enum):
    """Layer that supplied a resolved day schedule."""

    RESOURCE = "resource"
    OFFERING = "offering"
    ORGANIZATION = "organization"
    DEFAULT = "default"


class SlotSource(str, Enum):
    """Where a bookable slot candidate came from."""

    SCHEDULE = "schedule"
    MANAGED = "managed"
    CUSTOM = "custom"


class SlotStatus(str, Enum):
    """Status of a slot on the administrative slot board."""

    AVAILABLE = "available"
    BOOKED = "booked"
    BLOCKED = "blocked"


class BookingStatus(str, Enum):
    """Status of an existing booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# =============================================================================
# Time Helpers
# =============================================================================


def time_to_minutes(t: time) -> int:
    """Minutes from midnight; ``time.max`` maps to 1440 (end of day)."""
    minutes = t.hour * 60 + t.minute
    if t.second or t.microsecond:
        minutes += 1
    return minutes


def minutes_to_time(minutes: int) -> time:
    """Inverse of time_to_minutes; 1440 and beyond clamp to ``time.max``."""
    if minutes >= MINUTES_PER_DAY:
        return time.max
    minutes = max(0, minutes)
    return time(minutes // 60, minutes % 60)


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open overlap test on minute intervals."""
    return start_a < end_b and end_a > start_b


# =============================================================================
# Schedule Types
# =============================================================================


@dataclass(frozen=True)
class DaySchedule:
    """Opening window for one weekday in one schedule layer."""

    enabled: bool
    start: time = time(9, 0)
    end: time = time(17, 0)

    @property
    def is_valid(self) -> bool:
        """Check that the window is non-empty."""
        return self.start < self.end

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "enabled": self.enabled,
            "start": self.start.strftime("%H:%M"),
            "end": self.end.strftime("%H:%M"),
        }


@dataclass
class WeeklySchedule:
    """Weekly hours for one layer; absent weekdays have no entry."""

    days: Dict[Weekday, DaySchedule] = field(default_factory=dict)

    def get(self, weekday: Weekday) -> Optional[DaySchedule]:
        """Get the entry for a weekday, or None when absent."""
        return self.days.get(weekday)

    def has_entry(self, weekday: Weekday) -> bool:
        """Check whether this layer mentions the weekday at all."""
        return weekday in self.days

    def is_enabled(self, weekday: Weekday) -> bool:
        """Absent entries count as disabled."""
        entry = self.days.get(weekday)
        return entry is not None and entry.enabled and entry.is_valid

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {day.label: entry.to_dict() for day, entry in self.days.items()}


def default_weekly_schedule(
    open_time: time = time(9, 0),
    close_time: time = time(17, 0),
    open_days: Optional[List[Weekday]] = None,
) -> WeeklySchedule:
    """Build the fallback layer: weekdays open, weekends closed."""
    if open_days is None:
        open_days = WEEKDAYS[:5]
    return WeeklySchedule(days={
        day: DaySchedule(enabled=day in open_days, start=open_time, end=close_time)
        for day in WEEKDAYS
    })


DEFAULT_WEEKLY_SCHEDULE = default_weekly_schedule()


@dataclass(frozen=True)
class BreakWindow:
    """A sub-interval of a day during which no slot may run."""

    id: str
    start_time: time
    end_time: time

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    def overlaps(self, start_minutes: int, end_minutes: int) -> bool:
        """Check if a candidate interval runs into this break."""
        if self.start_minutes >= self.end_minutes:
            # Inverted break closes the whole day
            return start_minutes < end_minutes
        return intervals_overlap(start_minutes, end_minutes, self.start_minutes, self.end_minutes)

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "startTime": self.start_time.strftime("%H:%M"),
            "endTime": self.end_time.strftime("%H:%M"),
        }


@dataclass
class BreakMap:
    """Breaks grouped per weekday."""

    days: Dict[Weekday, List[BreakWindow]] = field(default_factory=dict)

    def for_day(self, weekday: Weekday) -> List[BreakWindow]:
        """Get breaks for a weekday (possibly empty)."""
        return list(self.days.get(weekday, []))


# =============================================================================
# Date Override Types
# =============================================================================


@dataclass(frozen=True)
class SpecialDateOverride:
    """One-off replacement of the weekly window for one date."""

    date: date
    start_time: time
    end_time: time

    def contains(self, start_minutes: int, end_minutes: int) -> bool:
        """Check that a candidate interval lies within the override window."""
        return (
            time_to_minutes(self.start_time) <= start_minutes
            and end_minutes <= time_to_minutes(self.end_time)
        )


@dataclass(frozen=True)
class BlackoutRange:
    """Inclusive date range during which nothing can be booked."""

    start_date: date
    end_date: date

    def covers(self, d: date) -> bool:
        """Check if a date falls inside the range."""
        return self.start_date <= d <= self.end_date


# =============================================================================
# Offering Types
# =============================================================================


@dataclass
class BookingConstraints:
    """Per-offering guardrails; None means unconstrained."""

    min_notice_hours: Optional[float] = None
    booking_window_days: Optional[int] = None
    buffer_before_mins: Optional[int] = None
    buffer_after_mins: Optional[int] = None
    max_per_day: Optional[int] = None
    max_per_week: Optional[int] = None
    max_per_month: Optional[int] = None
    max_per_customer: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "min_notice_hours": self.min_notice_hours,
            "booking_window_days": self.booking_window_days,
            "buffer_before_mins": self.buffer_before_mins,
            "buffer_after_mins": self.buffer_after_mins,
            "max_per_day": self.max_per_day,
            "max_per_week": self.max_per_week,
            "max_per_month": self.max_per_month,
            "max_per_customer": self.max_per_customer,
        }


@dataclass
class ManagedSlot:
    """A pre-provisioned, capacity-limited slot record."""

    day_of_week: Weekday
    start_time: time
    end_time: time
    max_bookings: int = 1
    current_bookings: int = 0
    is_active: bool = True
    id: Optional[str] = None

    @property
    def has_capacity(self) -> bool:
        """Check if the slot can take another booking."""
        return self.current_bookings < self.max_bookings

    @property
    def capacity_remaining(self) -> int:
        return max(0, self.max_bookings - self.current_bookings)


@dataclass
class Offering:
    """A bookable meeting type."""

    id: str
    name: str = ""
    organization_id: Optional[str] = None
    duration_minutes: int = 30

    # Offering-level overrides
    hours: Optional[WeeklySchedule] = None
    breaks: Optional[BreakMap] = None

    constraints: BookingConstraints = field(default_factory=BookingConstraints)
    use_managed_slots: bool = False

    # Schedule owner
    resource_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "organization_id": self.organization_id,
            "duration_minutes": self.duration_minutes,
            "hours": self.hours.to_dict() if self.hours else None,
            "constraints": self.constraints.to_dict(),
            "use_managed_slots": self.use_managed_slots,
            "resource_id": self.resource_id,
        }


# =============================================================================
# Inventory Types
# =============================================================================


@dataclass(frozen=True)
class SlotBlock:
    """An administrator block on one slot start for one date."""

    date: date
    start_time: time


@dataclass(frozen=True)
class CustomSlot:
    """An administrator-added one-off slot."""

    date: date
    start_time: time
    end_time: Optional[time] = None
    note: str = ""

    def duration_minutes(self, default: int) -> int:
        """Length from start to end, or ``default`` without a later end."""
        if self.end_time is not None and self.end_time > self.start_time:
            return time_to_minutes(self.end_time) - time_to_minutes(self.start_time)
        return default


@dataclass
class ExistingBooking:
    """Read-model of a booking already made for the offering."""

    date: date
    start_time: time
    duration_minutes: int
    customer_id: Optional[str] = None
    status: BookingStatus = BookingStatus.CONFIRMED

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + max(0, self.duration_minutes)


# =============================================================================
# Resolution Types
# =============================================================================


@dataclass
class AvailabilitySnapshot:
    """Everything one resolution call reads, loaded up front."""

    offering: Offering

    organization_hours: Optional[WeeklySchedule] = None
    organization_breaks: Optional[BreakMap] = None
    resource_hours: Optional[WeeklySchedule] = None

    special_dates: List[SpecialDateOverride] = field(default_factory=list)
    blackout_ranges: List[BlackoutRange] = field(default_factory=list)

    managed_slots: List[ManagedSlot] = field(default_factory=list)
    slot_blocks: List[SlotBlock] = field(default_factory=list)
    custom_slots: List[CustomSlot] = field(default_factory=list)
    bookings: List[ExistingBooking] = field(default_factory=list)

    def special_date_for(self, d: date) -> Optional[SpecialDateOverride]:
        """Get the override for a date; the last one written wins."""
        found = None
        for override in self.special_dates:
            if override.date == d:
                found = override
        return found

    def active_bookings(self) -> List[ExistingBooking]:
        return [b for b in self.bookings if b.is_active]


@dataclass(frozen=True)
class ResolvedWindow:
    """Outcome of schedule resolution for one weekday."""

    weekday: Weekday
    enabled: bool
    start: Optional[time]
    end: Optional[time]
    source: ScheduleLayer

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "weekday": self.weekday.value,
            "enabled": self.enabled,
            "start": self.start.strftime("%H:%M") if self.start else None,
            "end": self.end.strftime("%H:%M") if self.end else None,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class BookableSlot:
    """A start time offered to a customer."""

    date: date
    start_time: time
    duration_minutes: int
    source: SlotSource = SlotSource.SCHEDULE
    capacity_remaining: Optional[int] = None

    @property
    def start_datetime(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end_datetime(self) -> datetime:
        return self.start_datetime + timedelta(minutes=self.duration_minutes)

    @property
    def end_time(self) -> time:
        return minutes_to_time(time_to_minutes(self.start_time) + self.duration_minutes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "duration_minutes": self.duration_minutes,
            "source": self.source.value,
            "capacity_remaining": self.capacity_remaining,
        }


@dataclass(frozen=True)
class SlotBoardEntry:
    """A slot as shown on the administrative slot board."""

    date: date
    start_time: time
    end_time: time
    status: SlotStatus
    source: SlotSource
    booking: Optional[ExistingBooking] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "status": self.status.value,
            "source": self.source.value,
            "customer_id": self.booking.customer_id if self.booking else None,
        }


# =============================================================================
# Exceptions
# =============================================================================


class AvailabilityError(Exception):
    """Base exception for availability errors."""
    pass


class ConfigurationError(AvailabilityError, ValueError):
    """A configuration value could not be parsed."""
    pass


class OfferingNotFoundError(AvailabilityError):
    """Offering not found."""
    pass


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    # Enums
    "Weekday",
    "WEEKDAYS",
    "ScheduleLayer",
    "SlotSource",
    "SlotStatus",
    "BookingStatus",
    # Helpers
    "MINUTES_PER_DAY",
    "time_to_minutes",
    "minutes_to_time",
    "intervals_overlap",
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
]
