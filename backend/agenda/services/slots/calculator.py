# backend/agenda/services/slots/calculator.py
"""
Availability calculator: open ranges + service duration + approved bookings
-> bookable start times ("HH:MM").

For each open range a cursor walks in slot_step_minutes steps. A start time t
is offered when:
✓ t + duration fits before the range closes
✓ t is strictly after `now`
✓ [t, t + duration) overlaps no approved booking

Pending bookings never block.
"""

from datetime import date, datetime, timedelta

from ...schemas.schedule import LocationSchedule, TimeRange
from .config import BookingConfig, get_booking_config, minutes_to_time_str
from .intervals import BookingSnapshot, busy_intervals, is_blocked
from .schedule import resolve_open_ranges


def compute_slots(
    target_date: date,
    schedule: LocationSchedule,
    duration_minutes: int | None,
    approved_bookings: list[BookingSnapshot],
    now: datetime,
    config: BookingConfig | None = None,
) -> list[str]:
    """
    Bookable start times for a location on a date.

    Returns:
        Sorted, duplicate-free list of "HH:MM". Empty list = nothing to offer.
    """
    ranges = resolve_open_ranges(schedule, target_date)
    return slots_in_ranges(target_date, ranges, duration_minutes, approved_bookings, now, config)


def slots_in_ranges(
    target_date: date,
    ranges: list[TimeRange],
    duration_minutes: int | None,
    approved_bookings: list[BookingSnapshot],
    now: datetime,
    config: BookingConfig | None = None,
) -> list[str]:
    """Same as compute_slots, for already resolved open ranges."""
    config = config or get_booking_config()
    duration = config.duration_or_default(duration_minutes)
    step = config.slot_step_minutes
    busy = busy_intervals(approved_bookings, config)
    day_start = datetime.combine(target_date, datetime.min.time())

    slots: set[str] = set()

    for time_range in ranges:
        range_start = time_range.start_minutes
        range_end = time_range.end_minutes

        t = range_start
        while t < range_end:
            proposed_end = t + duration

            if proposed_end > range_end:
                # Later cursor positions only end later
                break

            if day_start + timedelta(minutes=t) > now and not is_blocked(t, proposed_end, busy):
                slots.add(minutes_to_time_str(t))

            t += step

    # Zero-padded "HH:MM" sorts chronologically as strings
    return sorted(slots)
