"""Unit tests for bookable slot listings."""

from datetime import date, time

from booking_core.availability import (
    BlackoutRange,
    CustomSlot,
    ExistingBooking,
    ManagedSlot,
    SlotSource,
    SpecialDateOverride,
    Weekday,
    list_bookable_slots,
)


MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
SATURDAY = date(2026, 10, 24)


class TestListBookableSlots:
    """Tests for the composed listing."""

    def test_default_day(self, snapshot, now):
        """Test an unconfigured weekday tiles the default hours."""
        slots = list_bookable_slots(snapshot, TUESDAY, now)

        assert [s.start_time for s in slots] == [time(h, 0) for h in range(9, 17)]
        assert all(s.duration_minutes == 60 for s in slots)
        assert all(s.source == SlotSource.SCHEDULE for s in slots)

    def test_today_skips_past_starts(self, snapshot, now):
        """Test starts before now are not offered."""
        slots = list_bookable_slots(snapshot, MONDAY, now)

        assert slots[0].start_time == time(10, 0)
        assert len(slots) == 7

    def test_notice(self, snapshot, now):
        """Test minimum notice trims the next day."""
        snapshot.offering.constraints.min_notice_hours = 24

        slots = list_bookable_slots(snapshot, TUESDAY, now)

        assert slots[0].start_time == time(10, 0)
        assert time(9, 0) not in [s.start_time for s in slots]

    def test_closed_day(self, snapshot, now):
        """Test a closed weekday lists nothing, even with a special date."""
        snapshot.special_dates.append(SpecialDateOverride(SATURDAY, time(10, 0), time(12, 0)))

        assert list_bookable_slots(snapshot, SATURDAY, now) == []

    def test_blackout(self, snapshot, now):
        """Test a blacked-out date lists nothing."""
        snapshot.blackout_ranges.append(BlackoutRange(TUESDAY, TUESDAY))
        snapshot.custom_slots.append(CustomSlot(TUESDAY, time(18, 0)))

        assert list_bookable_slots(snapshot, TUESDAY, now) == []

    def test_special_date(self, snapshot, now):
        """Test a special date replaces the window for generation."""
        snapshot.special_dates.append(SpecialDateOverride(TUESDAY, time(11, 0), time(13, 0)))

        slots = list_bookable_slots(snapshot, TUESDAY, now)

        assert [s.start_time for s in slots] == [time(11, 0), time(12, 0)]

    def test_degenerate_duration(self, snapshot, now):
        """Test a zero-length offering lists nothing."""
        snapshot.offering.duration_minutes = 0

        assert list_bookable_slots(snapshot, TUESDAY, now) == []

    def test_bookings_remove_slots(self, snapshot, now):
        """Test booked intervals are not offered."""
        snapshot.bookings.append(ExistingBooking(TUESDAY, time(12, 0), 60))

        starts = [s.start_time for s in list_bookable_slots(snapshot, TUESDAY, now)]

        assert time(12, 0) not in starts
        assert len(starts) == 7

    def test_idempotent(self, snapshot, now):
        """Test repeated calls give the same result."""
        snapshot.offering.constraints.min_notice_hours = 2
        snapshot.custom_slots.append(CustomSlot(TUESDAY, time(18, 0), time(18, 30)))

        first = list_bookable_slots(snapshot, TUESDAY, now)
        second = list_bookable_slots(snapshot, TUESDAY, now)

        assert first == second


class TestManagedMode:
    """Tests for managed slot inventory."""

    def test_replaces_generation(self, snapshot, now):
        """Test managed inventory replaces computed slots."""
        snapshot.offering.use_managed_slots = True
        snapshot.managed_slots.extend([
            ManagedSlot(Weekday.TUESDAY, time(14, 0), time(15, 0), max_bookings=3, current_bookings=1),
            ManagedSlot(Weekday.TUESDAY, time(9, 0), time(10, 0), max_bookings=1, current_bookings=1),
            ManagedSlot(Weekday.TUESDAY, time(10, 0), time(11, 0)),
        ])

        slots = list_bookable_slots(snapshot, TUESDAY, now)

        assert [s.start_time for s in slots] == [time(10, 0), time(14, 0)]
        assert all(s.source == SlotSource.MANAGED for s in slots)
        assert slots[1].capacity_remaining == 2

    def test_empty_inventory(self, snapshot, now):
        """Test managed mode without records lists nothing."""
        snapshot.offering.use_managed_slots = True

        assert list_bookable_slots(snapshot, TUESDAY, now) == []

    def test_window_still_applies(self, snapshot, now):
        """Test managed records outside the effective window are dropped."""
        snapshot.offering.use_managed_slots = True
        snapshot.managed_slots.append(ManagedSlot(Weekday.TUESDAY, time(18, 0), time(19, 0)))

        assert list_bookable_slots(snapshot, TUESDAY, now) == []

    def test_counters_carry_occupancy(self, snapshot, now):
        """Test bookings do not double count against managed capacity."""
        snapshot.offering.use_managed_slots = True
        snapshot.managed_slots.append(
            ManagedSlot(Weekday.TUESDAY, time(11, 0), time(12, 0), max_bookings=2, current_bookings=1)
        )
        snapshot.bookings.append(ExistingBooking(TUESDAY, time(11, 0), 60))

        (slot,) = list_bookable_slots(snapshot, TUESDAY, now)

        assert slot.start_time == time(11, 0)
        assert slot.capacity_remaining == 1


class TestCustomSlots:
    """Tests for administrator custom slots."""

    def test_outside_window(self, snapshot, now):
        """Test custom slots may sit outside the weekly window."""
        snapshot.custom_slots.append(CustomSlot(TUESDAY, time(17, 30), time(18, 0)))

        slots = list_bookable_slots(snapshot, TUESDAY, now)

        assert slots[-1].start_time == time(17, 30)
        assert slots[-1].duration_minutes == 30
        assert slots[-1].source == SlotSource.CUSTOM

    def test_duplicate_start(self, snapshot, now):
        """Test a computed slot wins over a custom slot at the same start."""
        snapshot.custom_slots.append(CustomSlot(TUESDAY, time(9, 0)))

        slots = list_bookable_slots(snapshot, TUESDAY, now)

        assert len(slots) == 8
        assert slots[0].source == SlotSource.SCHEDULE

    def test_other_checks_apply(self, snapshot, now):
        """Test notice still applies to custom slots."""
        snapshot.offering.constraints.min_notice_hours = 48
        snapshot.custom_slots.append(CustomSlot(TUESDAY, time(18, 0)))

        assert list_bookable_slots(snapshot, TUESDAY, now) == []

    def test_other_day_ignored(self, snapshot, now):
        """Test custom slots only apply to their own date."""
        snapshot.custom_slots.append(CustomSlot(MONDAY, time(18, 0)))

        starts = [s.start_time for s in list_bookable_slots(snapshot, TUESDAY, now)]

        assert time(18, 0) not in starts
