# backend/agenda/routers/locations.py
# PATCH = ALLOWED, DELETE = soft-delete (is_active)

from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import Locations as DBLocations
from ..schemas.locations import (
    LocationCreate,
    LocationUpdate,
    LocationRead,
    OpenRangesResponse,
)
from ..services.slots import get_booking_config, invalidate_location_cache
from ..services.slots.availability import get_open_ranges

router = APIRouter(prefix="/locations", tags=["locations"])


def _get_active(db: Session, id: int) -> DBLocations:
    obj = db.get(DBLocations, id)
    if not obj or not obj.is_active:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/", response_model=list[LocationRead])
def list_locations(db: Session = Depends(get_db)):
    return (
        db.query(DBLocations)
        .filter(DBLocations.is_active == 1)
        .order_by(DBLocations.id)
        .all()
    )


@router.get("/{id}", response_model=LocationRead)
def get_location(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBLocations, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
def create_location(
    data: LocationCreate,
    db: Session = Depends(get_db),
):
    fields = data.model_dump(exclude={"schedule"})
    obj = DBLocations(**fields, schedule=data.schedule.to_json())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}", response_model=LocationRead)
def update_location(
    id: int,
    data: LocationUpdate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = db.get(DBLocations, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    changes = data.model_dump(exclude_unset=True, exclude={"schedule"})
    for field, value in changes.items():
        setattr(obj, field, value)

    schedule_changed = "schedule" in data.model_fields_set and data.schedule is not None
    if schedule_changed:
        obj.schedule = data.schedule.to_json()

    db.commit()
    db.refresh(obj)

    # Resolved ranges are cached per day
    if schedule_changed or "is_active" in changes:
        invalidate_location_cache(redis, id)

    return obj


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(
    id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    obj = db.get(DBLocations, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")

    obj.is_active = 0
    db.commit()

    invalidate_location_cache(redis, id)


@router.get("/{id}/open-ranges", response_model=OpenRangesResponse)
def get_location_open_ranges(
    id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Resolved open ranges of a location for a date (weekly hours + exceptions)."""
    obj = _get_active(db, id)
    ranges = get_open_ranges(obj, target_date, get_booking_config(), redis)
    return OpenRangesResponse(
        location_id=id,
        date=target_date.isoformat(),
        is_open=bool(ranges),
        ranges=ranges,
    )
