# backend/agenda/schemas/services.py

import json
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ServiceCreate(BaseModel):
    name: str
    duration_minutes: int = Field(default=30, gt=0)
    price: float = 0
    display_price: bool = True
    description: Optional[str] = None
    allowed_location_ids: list[int] = []  # empty = every location

    model_config = {"from_attributes": True}


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    price: Optional[float] = None
    display_price: Optional[bool] = None
    description: Optional[str] = None
    allowed_location_ids: Optional[list[int]] = None
    is_active: Optional[bool] = None

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: int
    name: str
    duration_minutes: int
    price: float
    display_price: bool
    description: Optional[str] = None
    allowed_location_ids: list[int]
    is_active: bool

    model_config = {"from_attributes": True}

    @field_validator("allowed_location_ids", mode="before")
    @classmethod
    def _parse_ids(cls, value):
        if isinstance(value, str):
            try:
                value = json.loads(value or "[]")
            except json.JSONDecodeError:
                return []
        return value if isinstance(value, list) else []
