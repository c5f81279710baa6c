# backend/agenda/services/slots/conflicts.py
"""
Conflict detection and next-slot suggestion at approval time.

A conflict is another approved booking at the same location and date whose
busy interval overlaps the one being approved.
"""

import logging

from ...schemas.schedule import TimeRange
from .config import BookingConfig, get_booking_config, minutes_to_time_str
from .intervals import APPROVED, BookingSnapshot, busy_interval, busy_intervals, is_blocked, overlaps
from .schedule import day_end_minutes

logger = logging.getLogger(__name__)


def find_conflict(
    target: BookingSnapshot,
    bookings: list[BookingSnapshot],
    config: BookingConfig | None = None,
) -> BookingSnapshot | None:
    """First approved booking overlapping `target`, or None."""
    config = config or get_booking_config()
    start, end = busy_interval(target, config)

    for other in bookings:
        if other.id == target.id:
            continue
        if other.status != APPROVED:
            continue
        if other.location_id != target.location_id or other.date != target.date:
            continue
        try:
            other_start, other_end = busy_interval(other, config)
        except ValueError:
            logger.warning(f"Skipping booking {other.id} with bad time {other.time!r}")
            continue
        if overlaps(start, end, other_start, other_end):
            return other

    return None


def suggest_next_slot(
    target: BookingSnapshot,
    conflicting: BookingSnapshot,
    approved_bookings: list[BookingSnapshot],
    open_ranges: list[TimeRange],
    config: BookingConfig | None = None,
) -> str | None:
    """
    Nearest free start time after the conflicting booking, same day.

    Scans from the conflicting booking's end in slot steps. The candidate
    must finish by the location's closing time for that date (latest end of
    `open_ranges`); with no open ranges nothing is suggested. Gaps between
    ranges and the current time are not checked.
    """
    config = config or get_booking_config()
    day_end = day_end_minutes(open_ranges)
    if day_end is None:
        return None

    duration = config.duration_or_default(target.duration_minutes)
    busy = busy_intervals(approved_bookings, config, exclude_id=target.id)
    _, t = busy_interval(conflicting, config)

    while t + duration <= day_end:
        if not is_blocked(t, t + duration, busy):
            return minutes_to_time_str(t)
        t += config.slot_step_minutes

    return None
