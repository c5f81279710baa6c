# backend/agenda/schemas/schedule.py
"""
Location schedule schemas.

Stored schedules come in several historical shapes. Everything is normalized
here, at the boundary, so the engine only ever sees one canonical form:

    {
        "weekly": {"mon": {"active": true, "ranges": [{"start": "08:00", "end": "18:00"}]}, ...},
        "exceptions": [{"date": "2025-12-25", "type": "closed", "ranges": []}, ...]
    }

Legacy shapes accepted:
- day entries with bare "start"/"end" instead of "ranges"
- Portuguese weekday keys ("dom", "seg", ..., "sab")
- exceptions given as a bare "YYYY-MM-DD" string (= closed that day)

Malformed ranges are dropped with a warning, never raised.
"""

import json
import logging
from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from ..utils.times import is_time_str, time_str_to_minutes

logger = logging.getLogger(__name__)

# Sunday..Saturday
WEEKDAY_KEYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")

_WEEKDAY_ALIASES = {
    "dom": "sun",
    "seg": "mon",
    "ter": "tue",
    "qua": "wed",
    "qui": "thu",
    "sex": "fri",
    "sab": "sat",
}


def weekday_key(target_date: date) -> str:
    """Weekday key for a date ("sun".."sat")."""
    # date.weekday(): Monday = 0
    return WEEKDAY_KEYS[(target_date.weekday() + 1) % 7]


def _is_valid_range(raw) -> bool:
    if not isinstance(raw, dict):
        return False
    start, end = raw.get("start"), raw.get("end")
    if not (is_time_str(start) and is_time_str(end)):
        return False
    return time_str_to_minutes(start) < time_str_to_minutes(end)


def _clean_ranges(raw_ranges, context: str) -> list:
    if not isinstance(raw_ranges, (list, tuple)):
        return []
    cleaned = []
    for raw in raw_ranges:
        if isinstance(raw, TimeRange):
            cleaned.append(raw)
        elif _is_valid_range(raw):
            cleaned.append(raw)
        else:
            logger.warning(f"Skipping malformed range {raw!r} in {context}")
    return cleaned


class TimeRange(BaseModel):
    """Half-open opening window [start, end)."""
    start: str
    end: str

    model_config = ConfigDict(frozen=True)

    @field_validator("start", "end")
    @classmethod
    def _check_time(cls, value: str) -> str:
        time_str_to_minutes(value)
        return value

    @model_validator(mode="after")
    def _check_order(self):
        if time_str_to_minutes(self.start) >= time_str_to_minutes(self.end):
            raise ValueError(f"start must be before end: {self.start}-{self.end}")
        return self

    @property
    def start_minutes(self) -> int:
        return time_str_to_minutes(self.start)

    @property
    def end_minutes(self) -> int:
        return time_str_to_minutes(self.end)


class DaySchedule(BaseModel):
    active: bool = False
    ranges: tuple[TimeRange, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("ranges") is None:
            # Legacy records: single window in bare start/end fields
            if data.get("start") or data.get("end"):
                data["ranges"] = [{"start": data.get("start"), "end": data.get("end")}]
            else:
                data["ranges"] = []
        data["ranges"] = _clean_ranges(data["ranges"], "weekly schedule")
        data.pop("start", None)
        data.pop("end", None)
        return data


class ScheduleException(BaseModel):
    """Date-specific override: closed, or custom hours replacing the weekly template."""
    date: str
    type: Literal["closed", "custom"] = "closed"
    ranges: tuple[TimeRange, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize_legacy(cls, data):
        if isinstance(data, str):
            return {"date": data, "type": "closed"}
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("type") not in ("closed", "custom"):
            # Unknown override kinds close the day
            data["type"] = "closed"
        data["ranges"] = _clean_ranges(data.get("ranges"), f"exception {data.get('date')!r}")
        return data

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value


class LocationSchedule(BaseModel):
    weekly: dict[str, DaySchedule] = {}
    exceptions: tuple[ScheduleException, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize_shape(cls, data):
        if not isinstance(data, dict):
            return data
        data = dict(data)

        weekly = {}
        raw_weekly = data.get("weekly")
        if isinstance(raw_weekly, dict):
            for key, value in raw_weekly.items():
                canonical = _WEEKDAY_ALIASES.get(str(key).lower(), str(key).lower())
                if canonical not in WEEKDAY_KEYS:
                    logger.warning(f"Skipping unknown weekday key {key!r}")
                    continue
                try:
                    weekly[canonical] = DaySchedule.model_validate(value)
                except ValidationError:
                    # Only this weekday closes
                    logger.warning(f"Skipping malformed weekday entry {key!r}: {value!r}")
        data["weekly"] = weekly

        exceptions = []
        raw_exceptions = data.get("exceptions")
        if isinstance(raw_exceptions, (list, tuple)):
            for raw in raw_exceptions:
                try:
                    exceptions.append(ScheduleException.model_validate(raw))
                except ValidationError:
                    # No usable date: it can never match a day
                    logger.warning(f"Skipping unparsable schedule exception {raw!r}")
        data["exceptions"] = exceptions
        return data

    def exception_for(self, target_date: date) -> ScheduleException | None:
        date_str = target_date.isoformat()
        for exc in self.exceptions:
            if exc.date == date_str:
                return exc
        return None

    def to_json(self) -> str:
        return self.model_dump_json()


def parse_location_schedule(raw) -> LocationSchedule:
    """
    Parse a stored schedule (JSON text or dict) into the canonical form.

    Unparsable data yields an empty schedule, i.e. no availability.
    """
    if isinstance(raw, LocationSchedule):
        return raw
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw else {}
        except json.JSONDecodeError:
            logger.warning("Location schedule is not valid JSON, treating as closed")
            raw = {}
    if not isinstance(raw, dict):
        return LocationSchedule()
    try:
        return LocationSchedule.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Location schedule is malformed, treating as closed: {e}")
        return LocationSchedule()
