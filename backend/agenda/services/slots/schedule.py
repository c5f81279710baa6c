# backend/agenda/services/slots/schedule.py
"""
Schedule resolver: weekly template + exceptions -> open ranges for a date.

Precedence:
  1. exception for the date (closed -> nothing, custom -> its ranges)
  2. weekly template entry for the weekday (inactive -> nothing)
"""

from datetime import date, timedelta

from ...schemas.schedule import LocationSchedule, TimeRange, weekday_key


def resolve_open_ranges(schedule: LocationSchedule, target_date: date) -> list[TimeRange]:
    """
    Open time ranges of a location for one date.

    Returns ranges in stored order. Empty list = closed.
    """
    exception = schedule.exception_for(target_date)
    if exception is not None:
        if exception.type == "custom":
            # Replaces the weekly template entirely, no merging
            return list(exception.ranges)
        return []

    day = schedule.weekly.get(weekday_key(target_date))
    if day is None or not day.active:
        return []
    return list(day.ranges)


def is_open_on(schedule: LocationSchedule, target_date: date) -> bool:
    return bool(resolve_open_ranges(schedule, target_date))


def open_days(
    schedule: LocationSchedule,
    start_date: date,
    end_date: date,
) -> dict[date, list[TimeRange]]:
    """Resolved ranges for every date in [start_date, end_date]."""
    return {dt: resolve_open_ranges(schedule, dt) for dt in date_range(start_date, end_date)}


def date_range(start_date: date, end_date: date) -> list[date]:
    """Dates in [start_date, end_date], inclusive."""
    dates = []
    current = start_date
    while current <= end_date:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def day_end_minutes(ranges: list[TimeRange]) -> int | None:
    """Latest closing time among ranges, or None when closed."""
    if not ranges:
        return None
    return max(r.end_minutes for r in ranges)
