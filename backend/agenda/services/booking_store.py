"""
Record store boundary for the booking engine.

Reads hand the engine detached snapshots; writes are conditional:

- a booking row is updated only if its status and version are still the ones
  that were read (compare-and-swap on bookings.version),
- a transition to "approved" also bumps booking_days.version for the
  booking's (location, date), conditionally on the version read together
  with the approved set.

If either condition fails the transaction is rolled back and
StaleSnapshotError is raised. There is no automatic retry.
"""

import json
import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.generated import BookingDays, Bookings, Locations, Services
from .errors import StaleSnapshotError, StoreReadError, StoreWriteError
from .slots.intervals import APPROVED, BookingSnapshot

logger = logging.getLogger(__name__)


def _now_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def allowed_location_ids(service: Services) -> list[int]:
    try:
        ids = json.loads(service.allowed_location_ids or "[]")
    except json.JSONDecodeError:
        logger.warning(f"Service {service.id} has malformed allowed_location_ids")
        return []
    return [int(i) for i in ids] if isinstance(ids, list) else []


def service_offered_at(service: Services, location_id: int) -> bool:
    """Empty allow-list = offered everywhere."""
    allowed = allowed_location_ids(service)
    return not allowed or location_id in allowed


class BookingStore:
    """SQLAlchemy-backed store used by the approval flow."""

    def __init__(self, db: Session):
        self.db = db

    # ── Read ─────────────────────────────────────────────────────────────

    def get_location(self, location_id: int) -> Locations | None:
        try:
            return (
                self.db.query(Locations)
                .filter(Locations.id == location_id, Locations.is_active == 1)
                .first()
            )
        except SQLAlchemyError as e:
            raise StoreReadError(f"Could not load location {location_id}") from e

    def get_service(self, service_id: int) -> Services | None:
        try:
            return (
                self.db.query(Services)
                .filter(Services.id == service_id, Services.is_active == 1)
                .first()
            )
        except SQLAlchemyError as e:
            raise StoreReadError(f"Could not load service {service_id}") from e

    def get_booking(self, booking_id: int) -> Bookings | None:
        try:
            return self.db.get(Bookings, booking_id)
        except SQLAlchemyError as e:
            raise StoreReadError(f"Could not load booking {booking_id}") from e

    def approved_bookings(self, location_id: int, date_str: str) -> list[BookingSnapshot]:
        try:
            rows = (
                self.db.query(Bookings)
                .filter(
                    Bookings.location_id == location_id,
                    Bookings.date == date_str,
                    Bookings.status == APPROVED,
                )
                .order_by(Bookings.time, Bookings.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreReadError(
                f"Could not load bookings for location {location_id} on {date_str}"
            ) from e
        return [BookingSnapshot.from_row(row) for row in rows]

    def approved_snapshot(self, location_id: int, date_str: str) -> tuple[list[BookingSnapshot], int]:
        """Approved set for (location, date) plus the version it was read at."""
        version = self.day_version(location_id, date_str)
        return self.approved_bookings(location_id, date_str), version

    def day_version(self, location_id: int, date_str: str) -> int:
        try:
            day = self.db.get(BookingDays, (location_id, date_str))
            if day is not None:
                return day.version
            self.db.add(BookingDays(location_id=location_id, date=date_str, version=0))
            self.db.commit()
            return 0
        except IntegrityError:
            # Created concurrently
            self.db.rollback()
            day = self.db.get(BookingDays, (location_id, date_str))
            return day.version
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreReadError(
                f"Could not load day version for location {location_id} on {date_str}"
            ) from e

    # ── Write ────────────────────────────────────────────────────────────

    def add_booking(self, **fields) -> Bookings:
        obj = Bookings(**fields)
        try:
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to create booking")
            raise StoreWriteError("Could not save booking") from e
        return obj

    def transition(
        self,
        expected: BookingSnapshot,
        to_status: str,
        *,
        time: str | None = None,
        day_version: int | None = None,
    ) -> Bookings:
        """
        Conditionally move a booking to `to_status`, optionally rewriting time.

        `expected` is the snapshot the decision was based on; `day_version`
        is required when approving.
        """
        values = {
            "status": to_status,
            "version": Bookings.version + 1,
            "updated_at": _now_str(),
        }
        if time is not None:
            values["time"] = time
        return self._conditional_update(
            expected, values, approving=to_status == APPROVED, day_version=day_version
        )

    def update_fields(self, expected: BookingSnapshot, changes: dict) -> Bookings:
        """Conditionally rewrite editable fields of a booking."""
        values = dict(changes)
        values["version"] = Bookings.version + 1
        values["updated_at"] = _now_str()
        return self._conditional_update(expected, values)

    def _conditional_update(
        self,
        booking: BookingSnapshot,
        values: dict,
        approving: bool = False,
        day_version: int | None = None,
    ) -> Bookings:
        booking_id = booking.id
        try:
            result = self.db.execute(
                update(Bookings)
                .where(
                    Bookings.id == booking_id,
                    Bookings.status == booking.status,
                    Bookings.version == booking.version,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise StaleSnapshotError(f"Booking {booking_id} changed since it was read")

            if approving:
                if day_version is None:
                    raise ValueError("day_version is required when approving")
                result = self.db.execute(
                    update(BookingDays)
                    .where(
                        BookingDays.location_id == booking.location_id,
                        BookingDays.date == booking.date,
                        BookingDays.version == day_version,
                    )
                    .values(version=BookingDays.version + 1)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise StaleSnapshotError(
                        f"Approved bookings for location {booking.location_id} "
                        f"on {booking.date} changed since they were read"
                    )

            self.db.commit()
        except StaleSnapshotError:
            self.db.rollback()
            logger.warning(f"Stale write rejected for booking {booking_id}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to save booking {booking_id}")
            raise StoreWriteError("Could not save booking") from e

        self.db.expire_all()
        return self.db.get(Bookings, booking_id)
