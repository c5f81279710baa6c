# backend/agenda/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from pydantic import BaseModel, Field

from .schedule import TimeRange


class SlotsDayResponse(BaseModel):
    """Bookable start times for a service on a day."""
    location_id: int
    service_id: int
    date: date
    duration_minutes: int
    service_offered: bool = True
    open_ranges: list[TimeRange] = []
    available_times: list[str] = Field(description='Sorted "HH:MM" start times')

    model_config = {"from_attributes": True}


class SlotsDayStatus(BaseModel):
    """Status of a single day in calendar."""
    date: date
    is_open: bool
    ranges: list[TimeRange] = []

    model_config = {"from_attributes": True}


class SlotsCalendarResponse(BaseModel):
    """Response with calendar of open days."""
    location_id: int
    start_date: date
    end_date: date
    days: list[SlotsDayStatus]

    # Metadata
    horizon_days: int
    slot_step_minutes: int = Field(description="Cursor step in minutes")

    model_config = {"from_attributes": True}
