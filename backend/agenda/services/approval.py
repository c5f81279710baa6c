"""
Booking status transitions and the approval conflict path.

    pending_approval ──approve──▶ approved ──▶ completed
          │                          └──────▶ cancelled
          └──────reject────────▶ rejected

Approving re-checks the booking against the approved set of its
(location, date). A conflict does not fail the request: it returns a report
with a suggested time, and staff pick one of:

- force:   approve at the requested time anyway (intentional double booking)
- suggest: approve at the suggested time
- manual:  keep the booking pending and hand it to the editor
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum

from redis import Redis

from ..models.generated import Bookings
from ..schemas.schedule import TimeRange, parse_location_schedule
from .booking_store import BookingStore
from .errors import InvalidTransitionError, NotFoundError, SlotUnavailableError
from .events import booking_payload, emit_event
from .slots.config import BookingConfig, get_booking_config
from .slots.conflicts import find_conflict, suggest_next_slot
from .slots.intervals import APPROVED, BookingSnapshot, busy_interval
from .slots.schedule import resolve_open_ranges

logger = logging.getLogger(__name__)

PENDING = "pending_approval"
REJECTED = "rejected"
COMPLETED = "completed"
CANCELLED = "cancelled"

STATUSES = (PENDING, APPROVED, REJECTED, COMPLETED, CANCELLED)

ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    PENDING: (APPROVED, REJECTED),
    APPROVED: (COMPLETED, CANCELLED),
    REJECTED: (),
    COMPLETED: (),
    CANCELLED: (),
}


class ApprovalOutcome(str, Enum):
    APPROVED = "approved"
    CONFLICT = "conflict"
    MANUAL_EDIT = "manual_edit"
    STATUS_CHANGED = "status_changed"


class ResolveAction(str, Enum):
    FORCE = "force"
    SUGGEST = "suggest"
    MANUAL = "manual"


@dataclass(frozen=True)
class ConflictReport:
    target: BookingSnapshot
    conflicting: BookingSnapshot
    suggestion: str | None


@dataclass(frozen=True)
class ApprovalResult:
    outcome: ApprovalOutcome
    booking: Bookings
    conflict: ConflictReport | None = None


class ApprovalService:
    """Runs status transitions against a BookingStore."""

    def __init__(
        self,
        store: BookingStore,
        config: BookingConfig | None = None,
        redis: Redis | None = None,
    ):
        self.store = store
        self.config = config or get_booking_config()
        self.redis = redis

    # ── Approval ─────────────────────────────────────────────────────────

    def request_approval(self, booking_id: int) -> ApprovalResult:
        """Approve a pending booking unless it overlaps an approved one."""
        booking, target = self._load_pending(booking_id)

        approved, day_version = self.store.approved_snapshot(target.location_id, target.date)
        conflicting = find_conflict(target, approved, self.config)
        if conflicting is not None:
            logger.info(
                f"Booking {booking_id} conflicts with booking {conflicting.id} "
                f"at location {target.location_id} on {target.date}"
            )
            return self._conflict(booking, target, conflicting, approved)

        return self._approve(target, day_version)

    def resolve_conflict(
        self,
        booking_id: int,
        action: ResolveAction,
        suggested_time: str | None = None,
    ) -> ApprovalResult:
        """
        Apply the operator's choice for a conflicting approval.

        For SUGGEST without an explicit time the suggestion is recomputed; an
        explicit time must fit inside one of the day's open ranges.
        The chosen time is re-checked against the current approved set; if it
        was taken meanwhile a fresh conflict report is returned.
        """
        booking, target = self._load_pending(booking_id)

        if action == ResolveAction.MANUAL:
            logger.info(f"Booking {booking_id} handed to manual edit")
            return ApprovalResult(outcome=ApprovalOutcome.MANUAL_EDIT, booking=booking)

        approved, day_version = self.store.approved_snapshot(target.location_id, target.date)

        if action == ResolveAction.FORCE:
            logger.info(f"Booking {booking_id} force-approved at {target.time}")
            return self._approve(target, day_version)

        if suggested_time is None:
            conflicting = find_conflict(target, approved, self.config)
            if conflicting is None:
                return self._approve(target, day_version)
            suggested_time = self._suggest(target, conflicting, approved)
            if suggested_time is None:
                return ApprovalResult(
                    outcome=ApprovalOutcome.CONFLICT,
                    booking=booking,
                    conflict=ConflictReport(target, conflicting, None),
                )
        elif not self._fits_open_hours(target.with_time(suggested_time)):
            raise SlotUnavailableError(
                f"{target.date} {suggested_time} is outside opening hours"
            )

        moved = target.with_time(suggested_time)
        conflicting = find_conflict(moved, approved, self.config)
        if conflicting is not None:
            return self._conflict(booking, moved, conflicting, approved)

        logger.info(f"Booking {booking_id} moved {target.time} → {suggested_time} and approved")
        return self._approve(target, day_version, time=suggested_time)

    # ── Other transitions ────────────────────────────────────────────────

    def change_status(self, booking_id: int, status: str) -> ApprovalResult:
        """
        Move a booking to `status`.

        Transitions to "approved" go through the conflict check.
        """
        if status == APPROVED:
            return self.request_approval(booking_id)

        booking = self._load(booking_id)
        current = BookingSnapshot.from_row(booking)
        if status not in ALLOWED_TRANSITIONS.get(current.status, ()):
            raise InvalidTransitionError(
                f"Cannot change booking {booking_id} from {current.status} to {status}"
            )

        updated = self.store.transition(current, status)
        logger.info(f"Booking {booking_id}: {current.status} → {status}")
        emit_event(self.redis, "booking_status_changed", booking_payload(updated))
        return ApprovalResult(outcome=ApprovalOutcome.STATUS_CHANGED, booking=updated)

    # ── Helpers ──────────────────────────────────────────────────────────

    def _load(self, booking_id: int) -> Bookings:
        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def _load_pending(self, booking_id: int) -> tuple[Bookings, BookingSnapshot]:
        booking = self._load(booking_id)
        target = BookingSnapshot.from_row(booking)
        if target.status != PENDING:
            raise InvalidTransitionError(
                f"Cannot approve booking {booking_id} with status {target.status}"
            )
        return booking, target

    def _approve(
        self,
        target: BookingSnapshot,
        day_version: int,
        time: str | None = None,
    ) -> ApprovalResult:
        updated = self.store.transition(target, APPROVED, time=time, day_version=day_version)
        logger.info(f"Booking {updated.id} approved at {updated.time}")
        emit_event(self.redis, "booking_approved", booking_payload(updated))
        return ApprovalResult(outcome=ApprovalOutcome.APPROVED, booking=updated)

    def _conflict(
        self,
        booking: Bookings,
        target: BookingSnapshot,
        conflicting: BookingSnapshot,
        approved: list[BookingSnapshot],
    ) -> ApprovalResult:
        return ApprovalResult(
            outcome=ApprovalOutcome.CONFLICT,
            booking=booking,
            conflict=ConflictReport(
                target=target,
                conflicting=conflicting,
                suggestion=self._suggest(target, conflicting, approved),
            ),
        )

    def _suggest(
        self,
        target: BookingSnapshot,
        conflicting: BookingSnapshot,
        approved: list[BookingSnapshot],
    ) -> str | None:
        open_ranges = self._open_ranges(target)
        return suggest_next_slot(target, conflicting, approved, open_ranges, self.config)

    def _open_ranges(self, target: BookingSnapshot) -> list[TimeRange]:
        location = self.store.get_location(target.location_id)
        if location is None:
            return []
        return resolve_open_ranges(
            parse_location_schedule(location.schedule),
            date.fromisoformat(target.date),
        )

    def _fits_open_hours(self, target: BookingSnapshot) -> bool:
        """[time, time + duration) lies inside a single open range."""
        start, end = busy_interval(target, self.config)
        return any(
            r.start_minutes <= start and end <= r.end_minutes
            for r in self._open_ranges(target)
        )
