# backend/agenda/schemas/locations.py

from typing import Optional
from pydantic import BaseModel, field_validator

from .schedule import LocationSchedule, TimeRange, parse_location_schedule


class LocationCreate(BaseModel):
    name: str
    address: str = ""
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    color: Optional[str] = None

    schedule: LocationSchedule = LocationSchedule()

    model_config = {"from_attributes": True}


class LocationUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    color: Optional[str] = None
    schedule: Optional[LocationSchedule] = None

    model_config = {"from_attributes": True}


class LocationRead(BaseModel):
    id: int
    name: str
    address: str
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    color: Optional[str] = None

    is_active: bool
    schedule: LocationSchedule

    created_at: Optional[str] = None

    model_config = {"from_attributes": True}

    @field_validator("schedule", mode="before")
    @classmethod
    def _parse_schedule(cls, value):
        # Stored as JSON text
        return parse_location_schedule(value)


class OpenRangesResponse(BaseModel):
    location_id: int
    date: str
    is_open: bool
    ranges: list[TimeRange]
