"""Unit tests for schedule resolution."""

import itertools
from datetime import date, time

import pytest

from booking_core.availability import (
    WEEKDAYS,
    AvailabilitySnapshot,
    BreakMap,
    BreakWindow,
    DaySchedule,
    Offering,
    ScheduleLayer,
    SpecialDateOverride,
    Weekday,
    WeeklySchedule,
    default_weekly_schedule,
    resolve_breaks,
    resolve_day_schedule,
    resolve_effective_window,
)


SATURDAY = date(2026, 10, 24)
MONDAY = date(2026, 10, 19)

LAYER_WINDOWS = {
    ScheduleLayer.RESOURCE: (time(8, 0), time(12, 0)),
    ScheduleLayer.OFFERING: (time(10, 0), time(16, 0)),
    ScheduleLayer.ORGANIZATION: (time(9, 0), time(17, 0)),
}

# None: no entry for the weekday; True/False: entry with that enabled flag
LAYER_STATES = [None, True, False]


def _layer(layer: ScheduleLayer, weekday: Weekday, state) -> WeeklySchedule:
    if state is None:
        return WeeklySchedule()
    start, end = LAYER_WINDOWS[layer]
    return WeeklySchedule(days={weekday: DaySchedule(enabled=state, start=start, end=end)})


class TestResolveDaySchedule:
    """Tests for layered weekly hours."""

    @pytest.mark.parametrize("weekday", WEEKDAYS, ids=lambda d: d.value)
    @pytest.mark.parametrize(
        "resource,offering_layer,organization",
        list(itertools.product(LAYER_STATES, repeat=3)),
    )
    def test_first_layer_with_entry_wins(self, weekday, resource, offering_layer, organization):
        """Test the first layer mentioning a weekday decides it outright."""
        offering = Offering(
            id="o1",
            resource_id="rep_1",
            hours=_layer(ScheduleLayer.OFFERING, weekday, offering_layer),
        )
        snapshot = AvailabilitySnapshot(
            offering=offering,
            resource_hours=_layer(ScheduleLayer.RESOURCE, weekday, resource),
            organization_hours=_layer(ScheduleLayer.ORGANIZATION, weekday, organization),
        )

        resolved = resolve_day_schedule(snapshot, weekday)

        states = [
            (ScheduleLayer.RESOURCE, resource),
            (ScheduleLayer.OFFERING, offering_layer),
            (ScheduleLayer.ORGANIZATION, organization),
        ]
        winner = next(((layer, s) for layer, s in states if s is not None), None)

        if winner is None:
            assert resolved.source == ScheduleLayer.DEFAULT
            assert resolved.enabled == (weekday in WEEKDAYS[:5])
        else:
            layer, state = winner
            assert resolved.source == layer
            assert resolved.enabled is state
            if state:
                assert (resolved.start, resolved.end) == LAYER_WINDOWS[layer]
            else:
                assert resolved.start is None and resolved.end is None

    def test_resource_hours_ignored_without_resource(self, weekly):
        """Test personal hours only apply when the offering has a resource."""
        snapshot = AvailabilitySnapshot(
            offering=Offering(id="o1"),
            resource_hours=weekly(monday=("06:00", "07:00")),
        )

        resolved = resolve_day_schedule(snapshot, Weekday.MONDAY)

        assert resolved.source == ScheduleLayer.DEFAULT
        assert resolved.start == time(9, 0)

    def test_disabled_top_layer_blocks_lower_layers(self, weekly):
        """Test a disabled offering entry is not rescued by the organization."""
        snapshot = AvailabilitySnapshot(
            offering=Offering(id="o1", hours=weekly(monday=None)),
            organization_hours=weekly(monday=("09:00", "17:00")),
        )

        resolved = resolve_day_schedule(snapshot, Weekday.MONDAY)

        assert resolved.enabled is False
        assert resolved.source == ScheduleLayer.OFFERING

    def test_inverted_entry_resolves_disabled(self):
        """Test an enabled entry with start after end fails closed."""
        hours = WeeklySchedule(days={
            Weekday.MONDAY: DaySchedule(enabled=True, start=time(17, 0), end=time(9, 0)),
        })
        snapshot = AvailabilitySnapshot(offering=Offering(id="o1", hours=hours))

        resolved = resolve_day_schedule(snapshot, Weekday.MONDAY)

        assert resolved.enabled is False
        assert resolved.source == ScheduleLayer.OFFERING

    def test_default_fallback_disables_weekends(self, snapshot):
        """Test unconfigured weekends resolve through the fallback as closed."""
        assert resolve_day_schedule(snapshot, Weekday.SATURDAY).enabled is False
        assert resolve_day_schedule(snapshot, Weekday.SUNDAY).enabled is False
        assert resolve_day_schedule(snapshot, Weekday.FRIDAY).enabled is True

    def test_custom_fallback(self, snapshot):
        """Test a supplied fallback replaces the built-in default."""
        fallback = default_weekly_schedule(
            open_time=time(10, 0),
            close_time=time(14, 0),
            open_days=[Weekday.SATURDAY],
        )

        saturday = resolve_day_schedule(snapshot, Weekday.SATURDAY, fallback)
        monday = resolve_day_schedule(snapshot, Weekday.MONDAY, fallback)

        assert saturday.enabled is True
        assert (saturday.start, saturday.end) == (time(10, 0), time(14, 0))
        assert monday.enabled is False

    def test_fallback_missing_day(self, snapshot):
        """Test a fallback with no entry for the weekday resolves disabled."""
        resolved = resolve_day_schedule(snapshot, Weekday.MONDAY, WeeklySchedule())

        assert resolved.enabled is False
        assert resolved.source == ScheduleLayer.DEFAULT

    def test_to_dict(self, snapshot):
        """Test resolved window serialization."""
        data = resolve_day_schedule(snapshot, Weekday.MONDAY).to_dict()

        assert data == {
            "weekday": "monday",
            "enabled": True,
            "start": "09:00",
            "end": "17:00",
            "source": "default",
        }


class TestResolveBreaks:
    """Tests for break resolution."""

    def test_offering_breaks_win(self):
        """Test offering breaks replace organization breaks for the day."""
        offering_break = BreakWindow("b1", time(12, 0), time(12, 30))
        org_break = BreakWindow("b2", time(13, 0), time(14, 0))
        snapshot = AvailabilitySnapshot(
            offering=Offering(id="o1", breaks=BreakMap(days={Weekday.MONDAY: [offering_break]})),
            organization_breaks=BreakMap(days={
                Weekday.MONDAY: [org_break],
                Weekday.TUESDAY: [org_break],
            }),
        )

        assert resolve_breaks(snapshot, Weekday.MONDAY) == [offering_break]
        assert resolve_breaks(snapshot, Weekday.TUESDAY) == [org_break]

    def test_no_breaks(self, snapshot):
        """Test an unconfigured day has no breaks."""
        assert resolve_breaks(snapshot, Weekday.MONDAY) == []


class TestResolveEffectiveWindow:
    """Tests for the per-date effective window."""

    def test_weekly_window(self, snapshot):
        """Test the weekly window applies without an override."""
        assert resolve_effective_window(snapshot, MONDAY) == (time(9, 0), time(17, 0))

    def test_disabled_day_has_no_window(self, snapshot):
        """Test a closed weekday has no window."""
        assert resolve_effective_window(snapshot, SATURDAY) is None

    def test_special_date_replaces_window(self, snapshot):
        """Test a special date override replaces the weekly window."""
        snapshot.special_dates.append(SpecialDateOverride(MONDAY, time(11, 0), time(13, 0)))

        assert resolve_effective_window(snapshot, MONDAY) == (time(11, 0), time(13, 0))

    def test_special_date_on_closed_day(self, snapshot):
        """Test an override supplies a window even on a closed weekday."""
        snapshot.special_dates.append(SpecialDateOverride(SATURDAY, time(10, 0), time(12, 0)))

        assert resolve_effective_window(snapshot, SATURDAY) == (time(10, 0), time(12, 0))

    def test_last_special_date_wins(self, snapshot):
        """Test the last override written for a date is used."""
        snapshot.special_dates.extend([
            SpecialDateOverride(MONDAY, time(10, 0), time(11, 0)),
            SpecialDateOverride(MONDAY, time(14, 0), time(15, 0)),
        ])

        assert resolve_effective_window(snapshot, MONDAY) == (time(14, 0), time(15, 0))
