# backend/agenda/services/slots/invalidator.py
"""
Cache invalidation for location open ranges.

Triggers:
✓ Location schedule changed (weekly template or exceptions) → all dates
✓ Location deactivated → all dates

Does NOT trigger:
✗ Booking created/approved/cancelled (slots are computed on the fly)
"""

import logging
from datetime import date
from redis import Redis, RedisError

from .redis_store import RangesRedisStore

logger = logging.getLogger(__name__)


def invalidate_location_cache(
    redis: Redis | None,
    location_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached ranges for location.

    Returns:
        Number of deleted cache keys (0 without Redis or on Redis errors)
    """
    if redis is None:
        return 0
    store = RangesRedisStore(redis)
    try:
        return store.delete_day_ranges(location_id, dates)
    except RedisError:
        logger.exception(f"Failed to invalidate ranges cache for location {location_id}")
        return 0
