# backend/agenda/services/slots/__init__.py
"""
Availability & conflict engine.

Schedule resolver: weekly template + exceptions -> open ranges for a date
Calculator: open ranges + duration + approved bookings -> start times
Conflicts: overlap detection and next free slot suggestion at approval

The functions here are pure; store access lives in services.booking_store
and services.slots.availability.
"""

from .config import BookingConfig, get_booking_config
from .schedule import resolve_open_ranges, is_open_on, open_days
from .calculator import compute_slots, slots_in_ranges
from .conflicts import find_conflict, suggest_next_slot
from .intervals import BookingSnapshot, busy_interval
from .redis_store import RangesRedisStore
from .invalidator import invalidate_location_cache

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "resolve_open_ranges",
    "is_open_on",
    "open_days",
    "compute_slots",
    "slots_in_ranges",
    "find_conflict",
    "suggest_next_slot",
    "BookingSnapshot",
    "busy_interval",
    "RangesRedisStore",
    "invalidate_location_cache",
]
