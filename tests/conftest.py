"""Shared pytest fixtures for testing."""

from datetime import datetime, time

import pytest

from booking_core.availability import (
    AvailabilityEngine,
    AvailabilityService,
    AvailabilitySnapshot,
    DaySchedule,
    Offering,
    ScheduleStore,
    Weekday,
    WeeklySchedule,
)
from booking_core.config import Settings


# Monday 2026-10-19 10:00 local time
NOW = datetime(2026, 10, 19, 10, 0)


def _build_weekly(**days) -> WeeklySchedule:
    entries = {}
    for name, window in days.items():
        if window is None:
            entries[Weekday(name)] = DaySchedule(enabled=False)
        else:
            start, end = (time.fromisoformat(v) for v in window)
            entries[Weekday(name)] = DaySchedule(enabled=True, start=start, end=end)
    return WeeklySchedule(days=entries)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(_env_file=None, environment="test")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def weekly():
    """Builder for weekly layers: ``weekly(monday=("08:00", "12:00"), sunday=None)``.

    ``None`` gives a present-but-disabled entry.
    """
    return _build_weekly


# =============================================================================
# Domain Fixtures
# =============================================================================


@pytest.fixture
def offering() -> Offering:
    """A one-hour offering with no overrides."""
    return Offering(
        id="intro-call",
        name="Intro Call",
        organization_id="org_1",
        duration_minutes=60,
    )


@pytest.fixture
def snapshot(offering) -> AvailabilitySnapshot:
    """Snapshot with only the default fallback hours in play."""
    return AvailabilitySnapshot(offering=offering)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def engine(settings) -> AvailabilityEngine:
    return AvailabilityEngine(settings=settings, clock=lambda: NOW)


@pytest.fixture
def store(settings) -> ScheduleStore:
    return ScheduleStore(settings=settings)


@pytest.fixture
def service(store, engine) -> AvailabilityService:
    return AvailabilityService(store, engine)
