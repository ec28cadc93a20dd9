"""
Configuration module for the booking availability engine.

Settings are read from environment variables prefixed with ``BOOKING_``.
"""
from datetime import time
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Any, List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

if TYPE_CHECKING:
    from booking_core.availability.base import WeeklySchedule


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "pretty"] = "pretty"

    # Fallback hours used when no schedule layer mentions a weekday
    default_open_time: time = time(9, 0)
    default_close_time: time = time(17, 0)
    default_open_days: Annotated[List[str], NoDecode] = [
        "monday",
        "tuesday",
        "wednesday",
        "thursday",
        "friday",
    ]

    # Meeting length assumed when a stored offering has no usable duration
    default_duration_minutes: int = 30

    # Upper bound for date listings when an offering has no booking window
    max_listing_days: int = 60

    @field_validator("default_open_days", mode="before")
    @classmethod
    def split_days(cls, value: Any) -> List[str]:
        # availability imports this module, so its types load lazily
        from booking_core.availability.base import Weekday

        if isinstance(value, str):
            value = value.split(",")
        return [Weekday.parse(day).value for day in value if str(day).strip()]

    def default_weekly_schedule(self) -> "WeeklySchedule":
        """Build the fallback weekly layer from the default hours."""
        from booking_core.availability.base import Weekday, default_weekly_schedule

        return default_weekly_schedule(
            open_time=self.default_open_time,
            close_time=self.default_close_time,
            open_days=[Weekday.parse(day) for day in self.default_open_days],
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
