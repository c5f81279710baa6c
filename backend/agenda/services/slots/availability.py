# backend/agenda/services/slots/availability.py
"""
Service availability for a location and day.

Level 1: open ranges of the location for the date (cached in Redis)
Level 2: start times for the service duration against approved bookings
         (always computed on the fly)
"""

import logging
from datetime import date, datetime

from redis import Redis, RedisError

from ...models.generated import Locations
from ...schemas.schedule import TimeRange, parse_location_schedule
from ..booking_store import BookingStore, service_offered_at
from ..errors import NotFoundError
from .calculator import slots_in_ranges
from .config import BookingConfig, get_booking_config
from .redis_store import RangesRedisStore
from .schedule import date_range, open_days, resolve_open_ranges

logger = logging.getLogger(__name__)


def calculate_service_slots(
    store: BookingStore,
    location_id: int,
    service_id: int,
    target_date: date,
    now: datetime,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> dict:
    """
    Calculate bookable start times for a service.

    Returns:
        Dict for SlotsDayResponse.
    """
    config = config or get_booking_config()

    location = store.get_location(location_id)
    if location is None:
        raise NotFoundError(f"Location {location_id} not found")
    service = store.get_service(service_id)
    if service is None:
        raise NotFoundError(f"Service {service_id} not found")

    duration = config.duration_or_default(service.duration_minutes)
    result = {
        "location_id": location_id,
        "service_id": service_id,
        "date": target_date,
        "duration_minutes": duration,
        "service_offered": True,
        "open_ranges": [],
        "available_times": [],
    }

    if not service_offered_at(service, location_id):
        result["service_offered"] = False
        return result

    ranges = get_open_ranges(location, target_date, config, redis)
    result["open_ranges"] = ranges
    if not ranges:
        return result

    approved = store.approved_bookings(location_id, target_date.isoformat())
    result["available_times"] = slots_in_ranges(
        target_date, ranges, duration, approved, now, config
    )
    return result


def calculate_open_days(
    store: BookingStore,
    location_id: int,
    start_date: date,
    end_date: date,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> dict[date, list[TimeRange]]:
    """Open ranges for each date of [start_date, end_date], cache first."""
    config = config or get_booking_config()

    location = store.get_location(location_id)
    if location is None:
        raise NotFoundError(f"Location {location_id} not found")

    schedule = parse_location_schedule(location.schedule)
    if redis is None:
        return open_days(schedule, start_date, end_date)

    dates = date_range(start_date, end_date)
    try:
        cached = RangesRedisStore(redis, config).mget_days(location_id, dates)
    except RedisError:
        logger.warning(f"Ranges cache unavailable for location {location_id}, resolving directly")
        return open_days(schedule, start_date, end_date)

    days: dict[date, list[TimeRange]] = {}
    to_store: dict[date, list[TimeRange]] = {}
    for dt in dates:
        ranges = cached.get(dt)
        if ranges is None:
            ranges = resolve_open_ranges(schedule, dt)
            to_store[dt] = ranges
        days[dt] = ranges

    if to_store:
        try:
            RangesRedisStore(redis, config).store_multiple_days(location_id, to_store)
        except RedisError:
            logger.warning(f"Failed to cache ranges for location {location_id}")

    return days


def get_open_ranges(
    location: Locations,
    target_date: date,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> list[TimeRange]:
    """Open ranges of a location for a date, using Redis cache when available."""
    if redis is not None:
        store = RangesRedisStore(redis, config)
        try:
            cached = store.get_day_ranges(location.id, target_date)
            if cached is not None:
                return cached

            # Cache miss: resolve and store
            ranges = resolve_open_ranges(parse_location_schedule(location.schedule), target_date)
            store.store_day_ranges(location.id, target_date, ranges)
            return ranges
        except RedisError:
            logger.warning(f"Ranges cache unavailable for location {location.id}, resolving directly")

    # No Redis: resolve on the fly
    return resolve_open_ranges(parse_location_schedule(location.schedule), target_date)
