# backend/agenda/schemas/bookings.py

import datetime as dt
from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field

from ..services.slots.intervals import BookingSnapshot

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

BookingStatus = Literal["pending_approval", "approved", "rejected", "completed", "cancelled"]


class BookingCreate(BaseModel):
    location_id: int
    service_id: int
    client_name: str = Field(min_length=1)
    client_phone: Optional[str] = None

    date: date
    time: str = Field(pattern=TIME_PATTERN)

    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingUpdate(BaseModel):
    """Manual edit of a pending booking."""
    location_id: Optional[int] = None
    service_id: Optional[int] = None
    date: Optional[dt.date] = None
    time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    client_name: Optional[str] = Field(default=None, min_length=1)
    client_phone: Optional[str] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingRead(BaseModel):
    id: int

    location_id: int
    service_id: Optional[int] = None
    service_name: Optional[str] = None

    client_name: str
    client_phone: Optional[str] = None

    date: str
    time: str
    duration_minutes: Optional[int] = None

    status: str
    version: int
    notes: Optional[str] = None

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = {"from_attributes": True}


class BookingStatusChange(BaseModel):
    status: BookingStatus


class ConflictResolve(BaseModel):
    action: Literal["force", "suggest", "manual"]
    # For "suggest": the time shown to the operator; recomputed when omitted
    time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)


class BookingInterval(BaseModel):
    id: Optional[int] = None
    time: str
    duration_minutes: Optional[int] = None
    status: str

    @classmethod
    def from_snapshot(cls, snapshot: BookingSnapshot) -> "BookingInterval":
        return cls(
            id=snapshot.id,
            time=snapshot.time,
            duration_minutes=snapshot.duration_minutes,
            status=snapshot.status,
        )


class ConflictInfo(BaseModel):
    requested_time: str
    conflicting: BookingInterval
    suggestion: Optional[str] = None


class ApprovalResponse(BaseModel):
    outcome: Literal["approved", "conflict", "manual_edit", "status_changed"]
    booking: BookingRead
    conflict: Optional[ConflictInfo] = None
