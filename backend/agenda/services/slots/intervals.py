# backend/agenda/services/slots/intervals.py
"""
Busy intervals of bookings.

A booking occupies the half-open interval [time, time + duration).
Two intervals overlap iff start_a < end_b and end_a > start_b, so
09:00-09:30 and 09:30-10:00 do not overlap.
"""

import logging
from dataclasses import dataclass, replace

from .config import BookingConfig, get_booking_config, time_str_to_minutes

logger = logging.getLogger(__name__)

APPROVED = "approved"


@dataclass(frozen=True)
class BookingSnapshot:
    """Immutable view of a booking, detached from the session."""
    id: int | None
    location_id: int
    date: str
    time: str
    duration_minutes: int | None
    status: str
    version: int = 0

    @classmethod
    def from_row(cls, row) -> "BookingSnapshot":
        return cls(
            id=row.id,
            location_id=row.location_id,
            date=row.date,
            time=row.time,
            duration_minutes=row.duration_minutes,
            status=row.status,
            version=row.version or 0,
        )

    def with_time(self, time: str) -> "BookingSnapshot":
        return replace(self, time=time)


def busy_interval(
    booking: BookingSnapshot,
    config: BookingConfig | None = None,
) -> tuple[int, int]:
    """[start, end) of a booking in minutes. Raises ValueError on a bad time."""
    config = config or get_booking_config()
    start = time_str_to_minutes(booking.time)
    return start, start + config.duration_or_default(booking.duration_minutes)


def busy_intervals(
    bookings,
    config: BookingConfig | None = None,
    exclude_id: int | None = None,
) -> list[tuple[int, int]]:
    """Busy intervals of approved bookings, skipping unparsable ones."""
    config = config or get_booking_config()
    result = []
    for booking in bookings:
        if booking.status != APPROVED:
            continue
        if exclude_id is not None and booking.id == exclude_id:
            continue
        try:
            result.append(busy_interval(booking, config))
        except ValueError:
            logger.warning(f"Skipping booking {booking.id} with bad time {booking.time!r}")
    return result


def overlaps(start: int, end: int, busy_start: int, busy_end: int) -> bool:
    return start < busy_end and end > busy_start


def is_blocked(start: int, end: int, busy: list[tuple[int, int]]) -> bool:
    return any(overlaps(start, end, b_start, b_end) for b_start, b_end in busy)
