"""Helpers for "HH:MM" time strings. Engine times are minutes since midnight."""

import logging
import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def is_time_str(value) -> bool:
    return isinstance(value, str) and _TIME_RE.match(value) is not None


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time string: {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def local_now(tz_name: str) -> datetime:
    """Current wall-clock time at the business, as a naive datetime."""
    try:
        tz = ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        logger.warning(f"Unknown timezone {tz_name!r}, using UTC")
        tz = timezone.utc
    return datetime.now(tz).replace(tzinfo=None)
