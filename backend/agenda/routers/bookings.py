# backend/agenda/routers/bookings.py
# DELETE = 405: bookings are cancelled or rejected, never removed

from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, status
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..redis_client import get_redis
from ..models.generated import Bookings as DBBookings
from ..schemas.bookings import (
    ApprovalResponse,
    BookingCreate,
    BookingInterval,
    BookingRead,
    BookingStatusChange,
    BookingUpdate,
    ConflictInfo,
    ConflictResolve,
)
from ..services.approval import ApprovalResult, ApprovalService, ResolveAction
from ..services.booking_store import BookingStore
from ..services.bookings import create_booking as create_pending_booking
from ..services.bookings import edit_booking
from ..services.slots import get_booking_config
from ..utils.times import local_now

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _approval_service(db: Session, redis: Redis | None) -> ApprovalService:
    return ApprovalService(BookingStore(db), get_booking_config(), redis)


def _to_response(result: ApprovalResult) -> ApprovalResponse:
    conflict = None
    if result.conflict is not None:
        conflict = ConflictInfo(
            requested_time=result.conflict.target.time,
            conflicting=BookingInterval.from_snapshot(result.conflict.conflicting),
            suggestion=result.conflict.suggestion,
        )
    return ApprovalResponse(
        outcome=result.outcome.value,
        booking=BookingRead.model_validate(result.booking),
        conflict=conflict,
    )


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    location_id: int | None = None,
    booking_date: date | None = Query(None, alias="date"),
    booking_status: str | None = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    query = db.query(DBBookings)
    if location_id is not None:
        query = query.filter(DBBookings.location_id == location_id)
    if booking_date is not None:
        query = query.filter(DBBookings.date == booking_date.isoformat())
    if booking_status is not None:
        query = query.filter(DBBookings.status == booking_status)
    return query.order_by(DBBookings.date, DBBookings.time, DBBookings.id).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Create a pending booking at one of the currently offered start times."""
    return create_pending_booking(
        BookingStore(db),
        data,
        now=local_now(settings.timezone),
        config=get_booking_config(),
        redis=redis,
    )


@router.patch("/{id}", response_model=BookingRead)
def update_booking(
    id: int,
    data: BookingUpdate,
    db: Session = Depends(get_db),
):
    """Manual edit of a pending booking (location, date, time, service, client)."""
    return edit_booking(BookingStore(db), id, data, get_booking_config())


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


# ── Approval ─────────────────────────────────────────────────────────────


@router.post("/{id}/approve", response_model=ApprovalResponse)
def approve_booking(
    id: int,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """
    Approve a pending booking.

    An overlap with an approved booking is not an error: the response has
    outcome "conflict" with the conflicting booking and a suggested time.
    """
    result = _approval_service(db, redis).request_approval(id)
    return _to_response(result)


@router.post("/{id}/resolve", response_model=ApprovalResponse)
def resolve_booking_conflict(
    id: int,
    data: ConflictResolve,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    result = _approval_service(db, redis).resolve_conflict(
        id, ResolveAction(data.action), data.time
    )
    return _to_response(result)


@router.post("/{id}/status", response_model=ApprovalResponse)
def change_booking_status(
    id: int,
    data: BookingStatusChange,
    db: Session = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    result = _approval_service(db, redis).change_status(id, data.status)
    return _to_response(result)
