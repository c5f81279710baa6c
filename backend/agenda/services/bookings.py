"""
Booking creation and manual edit.

New bookings are created as pending_approval and only at a time the
calculator currently offers. Manual edit is free-form (location, date, time,
service) and allowed only while the booking is pending; the next approval
runs the conflict check again.
"""

import logging
from datetime import date, datetime

from redis import Redis

from ..models.generated import Bookings
from ..schemas.bookings import BookingCreate, BookingUpdate
from .booking_store import BookingStore, service_offered_at
from .errors import NotEditableError, NotFoundError, ServiceNotOfferedError, SlotUnavailableError
from .events import booking_payload, emit_event
from .slots.availability import get_open_ranges
from .slots.calculator import slots_in_ranges
from .slots.config import BookingConfig, get_booking_config
from .slots.intervals import BookingSnapshot

logger = logging.getLogger(__name__)

PENDING = "pending_approval"


def create_booking(
    store: BookingStore,
    data: BookingCreate,
    now: datetime,
    config: BookingConfig | None = None,
    redis: Redis | None = None,
) -> Bookings:
    config = config or get_booking_config()

    location = store.get_location(data.location_id)
    if location is None:
        raise NotFoundError(f"Location {data.location_id} not found")
    service = store.get_service(data.service_id)
    if service is None:
        raise NotFoundError(f"Service {data.service_id} not found")
    if not service_offered_at(service, location.id):
        raise ServiceNotOfferedError(
            f"Service {service.id} is not offered at location {location.id}"
        )

    duration = config.duration_or_default(service.duration_minutes)
    ranges = get_open_ranges(location, data.date, config, redis)
    approved = store.approved_bookings(location.id, data.date.isoformat())
    offered = slots_in_ranges(data.date, ranges, duration, approved, now, config)
    if data.time not in offered:
        raise SlotUnavailableError(f"{data.date.isoformat()} {data.time} is not available")

    booking = store.add_booking(
        location_id=location.id,
        service_id=service.id,
        service_name=service.name,
        client_name=data.client_name,
        client_phone=data.client_phone,
        date=data.date.isoformat(),
        time=data.time,
        duration_minutes=duration,
        status=PENDING,
        notes=data.notes,
    )
    logger.info(
        f"Booking {booking.id} requested: location {location.id}, "
        f"{booking.date} {booking.time} ({duration} min)"
    )
    emit_event(redis, "booking_created", booking_payload(booking))
    return booking


def edit_booking(
    store: BookingStore,
    booking_id: int,
    data: BookingUpdate,
    config: BookingConfig | None = None,
) -> Bookings:
    """Reassign location/date/time/service of a pending booking."""
    config = config or get_booking_config()

    booking = store.get_booking(booking_id)
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found")
    current = BookingSnapshot.from_row(booking)
    if current.status != PENDING:
        raise NotEditableError(
            f"Booking {booking_id} is {current.status}; only pending bookings can be edited"
        )

    changes = data.model_dump(exclude_unset=True)
    if isinstance(changes.get("date"), date):
        changes["date"] = changes["date"].isoformat()

    location_id = changes.get("location_id", current.location_id)
    if "location_id" in changes and store.get_location(location_id) is None:
        raise NotFoundError(f"Location {location_id} not found")

    service_id = changes.get("service_id", booking.service_id)
    if service_id is not None and ("service_id" in changes or "location_id" in changes):
        service = store.get_service(service_id)
        if service is None:
            raise NotFoundError(f"Service {service_id} not found")
        if not service_offered_at(service, location_id):
            raise ServiceNotOfferedError(
                f"Service {service_id} is not offered at location {location_id}"
            )
        changes["service_name"] = service.name
        changes["duration_minutes"] = config.duration_or_default(service.duration_minutes)

    if not changes:
        return booking

    updated = store.update_fields(current, changes)
    logger.info(f"Booking {booking_id} edited: {sorted(changes)}")
    return updated
