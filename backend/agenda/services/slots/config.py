# backend/agenda/services/slots/config.py
"""
Booking configuration for slots calculation.

Times inside the engine are minutes since midnight; "HH:MM" strings only
appear at the edges.
"""

from dataclasses import dataclass
from functools import lru_cache

from ...config import settings
from ...utils.times import (  # noqa: F401
    minutes_to_time_str,
    time_str_to_minutes,
)


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the availability engine.

    Attributes:
        slot_step_minutes: Cursor step when scanning for start times
        default_duration_minutes: Duration assumed for bookings/services without one
        horizon_days: How many days ahead the calendar is shown
        cache_ttl_seconds: Redis TTL for resolved open ranges
    """
    slot_step_minutes: int = 10
    default_duration_minutes: int = 30
    horizon_days: int = 60
    cache_ttl_seconds: int = 86400

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes <= 0 or 60 % self.slot_step_minutes:
            raise ValueError(
                f"slot_step_minutes must be a positive divisor of 60, got {self.slot_step_minutes}"
            )
        if self.default_duration_minutes <= 0:
            raise ValueError(
                f"default_duration_minutes must be > 0, got {self.default_duration_minutes}"
            )
        if self.horizon_days < 1:
            raise ValueError(f"horizon_days must be >= 1, got {self.horizon_days}")

    def duration_or_default(self, duration: int | None) -> int:
        """Missing or non-positive durations fall back to the default."""
        if not duration or duration <= 0:
            return self.default_duration_minutes
        return duration


@lru_cache
def get_booking_config() -> BookingConfig:
    """Booking configuration built from application settings (singleton)."""
    return BookingConfig(
        slot_step_minutes=settings.slot_step_minutes,
        default_duration_minutes=settings.default_duration_minutes,
        horizon_days=settings.horizon_days,
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )
