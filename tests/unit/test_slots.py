"""Unit tests for slot generation."""

from datetime import time

import pytest

from booking_core.availability import (
    BreakWindow,
    ManagedSlot,
    Weekday,
    generate_slots,
    managed_slot_candidates,
)


class TestGenerateSlots:
    """Tests for duration-stepped generation."""

    def test_tiles_window(self):
        """Test a 9-17 window with one-hour meetings yields 8 slots."""
        slots = generate_slots(time(9, 0), time(17, 0), 60)

        assert slots == [time(h, 0) for h in range(9, 17)]

    def test_partial_tail_dropped(self):
        """Test a slot that would run past closing is not offered."""
        slots = generate_slots(time(9, 0), time(17, 0), 45)

        assert len(slots) == 10
        assert slots[0] == time(9, 0)
        assert slots[1] == time(9, 45)
        assert slots[-1] == time(15, 45)

    def test_break_removes_overlapping_slot_only(self):
        """Test a 13-14 break removes only the 13:00 slot."""
        lunch = BreakWindow("lunch", time(13, 0), time(14, 0))

        slots = generate_slots(time(9, 0), time(17, 0), 60, [lunch])

        assert time(13, 0) not in slots
        assert time(12, 0) in slots
        assert time(14, 0) in slots
        assert len(slots) == 7

    def test_break_inside_slot(self):
        """Test a break partway through a slot removes that slot."""
        coffee = BreakWindow("coffee", time(12, 30), time(12, 45))

        slots = generate_slots(time(9, 0), time(17, 0), 60, [coffee])

        assert time(12, 0) not in slots
        assert time(13, 0) in slots
        assert len(slots) == 7

    def test_slots_stay_aligned_after_break(self):
        """Test stepping is not shifted by a skipped slot."""
        coffee = BreakWindow("coffee", time(9, 30), time(9, 40))

        slots = generate_slots(time(9, 0), time(11, 0), 30, [coffee])

        assert slots == [time(9, 0), time(10, 0), time(10, 30)]

    def test_whole_day_break(self):
        """Test a whole-day break leaves nothing."""
        whole_day = BreakWindow("x", time(0, 0), time.max)

        assert generate_slots(time(9, 0), time(17, 0), 30, [whole_day]) == []

    def test_inverted_break_closes_day(self):
        """Test a break ending before it starts blocks every slot."""
        inverted = BreakWindow("b", time(14, 0), time(13, 0))
        empty = BreakWindow("e", time(12, 0), time(12, 0))

        assert inverted.overlaps(0, 30) is True
        assert generate_slots(time(9, 0), time(17, 0), 60, [inverted]) == []
        assert generate_slots(time(9, 0), time(17, 0), 60, [empty]) == []

    @pytest.mark.parametrize("duration", [0, -30])
    def test_degenerate_duration(self, duration):
        """Test non-positive durations yield no slots."""
        assert generate_slots(time(9, 0), time(17, 0), duration) == []

    def test_empty_window(self):
        """Test an empty or inverted window yields no slots."""
        assert generate_slots(time(9, 0), time(9, 0), 30) == []
        assert generate_slots(time(17, 0), time(9, 0), 30) == []

    def test_window_until_end_of_day(self):
        """Test a window closing at midnight includes the last hour."""
        slots = generate_slots(time(22, 0), time.max, 60)

        assert slots == [time(22, 0), time(23, 0)]

    def test_duration_longer_than_window(self):
        """Test a meeting longer than the window yields nothing."""
        assert generate_slots(time(9, 0), time(9, 30), 60) == []


class TestManagedSlotCandidates:
    """Tests for managed slot inventory."""

    def test_filters_inventory(self):
        """Test only active, matching, non-full records remain."""
        slots = [
            ManagedSlot(Weekday.MONDAY, time(11, 0), time(12, 0), id="late"),
            ManagedSlot(Weekday.MONDAY, time(9, 0), time(10, 0), id="early"),
            ManagedSlot(Weekday.MONDAY, time(10, 0), time(11, 0), is_active=False, id="inactive"),
            ManagedSlot(Weekday.MONDAY, time(14, 0), time(15, 0), max_bookings=2, current_bookings=2, id="full"),
            ManagedSlot(Weekday.TUESDAY, time(9, 0), time(10, 0), id="tuesday"),
        ]

        candidates = managed_slot_candidates(slots, Weekday.MONDAY, 60)

        assert [c.id for c in candidates] == ["early", "late"]

    def test_break_excludes_record(self):
        """Test a record running into a break is dropped."""
        slots = [
            ManagedSlot(Weekday.MONDAY, time(12, 0), time(13, 0), id="noon"),
            ManagedSlot(Weekday.MONDAY, time(13, 0), time(14, 0), id="one"),
        ]
        lunch = BreakWindow("lunch", time(12, 30), time(13, 0))

        candidates = managed_slot_candidates(slots, Weekday.MONDAY, 60, [lunch])

        assert [c.id for c in candidates] == ["one"]

    def test_inverted_break_excludes_all(self):
        """Test an inverted break drops every record for the day."""
        slots = [ManagedSlot(Weekday.MONDAY, time(9, 0), time(10, 0), id="early")]
        inverted = BreakWindow("b", time(14, 0), time(13, 0))

        assert managed_slot_candidates(slots, Weekday.MONDAY, 60, [inverted]) == []

    def test_capacity(self):
        """Test remaining capacity is reported."""
        slot = ManagedSlot(Weekday.MONDAY, time(9, 0), time(10, 0), max_bookings=3, current_bookings=1)

        assert slot.has_capacity is True
        assert slot.capacity_remaining == 2

    def test_degenerate_duration(self):
        """Test a non-positive duration yields no candidates."""
        slots = [ManagedSlot(Weekday.MONDAY, time(9, 0), time(10, 0))]

        assert managed_slot_candidates(slots, Weekday.MONDAY, 0) == []
