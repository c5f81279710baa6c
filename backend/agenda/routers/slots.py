# backend/agenda/routers/slots.py
"""
Slots API endpoints.

Level 1: GET /slots/calendar - Open days of a location (ranges per day)
Level 2: GET /slots/day - Bookable start times for a service on a day
"""

from datetime import date, timedelta
from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..redis_client import get_redis
from ..schemas.slots import (
    SlotsCalendarResponse,
    SlotsDayStatus,
    SlotsDayResponse,
)
from ..services.booking_store import BookingStore
from ..services.slots import get_booking_config, invalidate_location_cache
from ..services.slots.availability import calculate_open_days, calculate_service_slots
from ..utils.times import local_now


router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/calendar", response_model=SlotsCalendarResponse)
def get_slots_calendar(
    location_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Get calendar of open days for a location (Level 1)."""
    config = get_booking_config()
    today = local_now(settings.timezone).date()
    max_date = today + timedelta(days=config.horizon_days)

    if start_date is None or start_date < today:
        start_date = today
    if end_date is None or end_date > max_date:
        end_date = max_date
    if end_date < start_date:
        end_date = start_date

    open_days = calculate_open_days(
        BookingStore(db), location_id, start_date, end_date, config, redis
    )

    days = [
        SlotsDayStatus(date=dt, is_open=bool(ranges), ranges=ranges)
        for dt, ranges in open_days.items()
    ]

    return SlotsCalendarResponse(
        location_id=location_id,
        start_date=start_date,
        end_date=end_date,
        days=days,
        horizon_days=config.horizon_days,
        slot_step_minutes=config.slot_step_minutes,
    )


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    location_id: int,
    service_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Get bookable start times for a service on a specific day (Level 2)."""
    config = get_booking_config()
    now = local_now(settings.timezone)

    max_date = now.date() + timedelta(days=config.horizon_days)
    if target_date > max_date:
        raise HTTPException(
            status_code=400,
            detail=f"Date cannot be more than {config.horizon_days} days ahead",
        )

    # Past dates are not rejected: they simply have no slots
    result = calculate_service_slots(
        BookingStore(db),
        location_id=location_id,
        service_id=service_id,
        target_date=target_date,
        now=now,
        config=config,
        redis=redis,
    )

    return SlotsDayResponse(**result)


@router.post("/invalidate")
def invalidate_slots_cache(
    location_id: int,
    dates: list[date] | None = None,
    redis: Redis | None = Depends(get_redis),
):
    """Manually invalidate open-ranges cache for location (admin endpoint)."""
    deleted = invalidate_location_cache(redis, location_id, dates)

    return {
        "location_id": location_id,
        "deleted_keys": deleted,
        "dates": [d.isoformat() for d in dates] if dates else "all",
    }
