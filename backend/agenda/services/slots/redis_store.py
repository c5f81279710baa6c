# backend/agenda/services/slots/redis_store.py
"""
Redis storage for resolved open ranges.

Key format: ranges:day:{location_id}:{date}
Value: JSON list of [start, end] pairs ("HH:MM"). "[]" marks a closed day,
so EXISTS distinguishes "calculated, closed" from a cache miss.

Bookings are never cached: slots are recomputed against the live approved set.
"""

import json
from datetime import date
from redis import Redis

from ...schemas.schedule import TimeRange
from .config import BookingConfig, get_booking_config


class RangesRedisStore:
    """Redis storage wrapper for per-day open ranges."""

    KEY_PREFIX = "ranges:day"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, location_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{location_id}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_ranges(
        self,
        location_id: int,
        dt: date,
        ranges: list[TimeRange],
    ) -> None:
        payload = json.dumps([[r.start, r.end] for r in ranges])
        self.redis.set(self._key(location_id, dt), payload, ex=self.config.cache_ttl_seconds)

    def store_multiple_days(
        self,
        location_id: int,
        days_ranges: dict[date, list[TimeRange]],
    ) -> None:
        """Batch store ranges for multiple days via pipeline."""
        if not days_ranges:
            return

        pipe = self.redis.pipeline()
        for dt, ranges in days_ranges.items():
            payload = json.dumps([[r.start, r.end] for r in ranges])
            pipe.set(self._key(location_id, dt), payload, ex=self.config.cache_ttl_seconds)
        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_day_ranges(self, location_id: int, dt: date) -> list[TimeRange] | None:
        """Cached ranges, or None on cache miss."""
        raw = self.redis.get(self._key(location_id, dt))
        if raw is None:
            return None
        return _decode(raw)

    def mget_days(
        self,
        location_id: int,
        dates: list[date],
    ) -> dict[date, list[TimeRange] | None]:
        if not dates:
            return {}
        values = self.redis.mget([self._key(location_id, dt) for dt in dates])
        return {
            dt: (_decode(raw) if raw is not None else None)
            for dt, raw in zip(dates, values)
        }

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_ranges(
        self,
        location_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached ranges.

        Args:
            location_id: Location ID
            dates: Specific dates, or None to delete all for location.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = [self._key(location_id, dt) for dt in dates]
        else:
            pattern = f"{self.KEY_PREFIX}:{location_id}:*"
            keys = list(self.redis.scan_iter(match=pattern))

        if not keys:
            return 0

        return self.redis.delete(*keys)


def _decode(raw) -> list[TimeRange]:
    if isinstance(raw, bytes):
        raw = raw.decode()
    return [TimeRange(start=start, end=end) for start, end in json.loads(raw)]
