"""
backend/agenda/services/events.py

Event emitter: pushes booking events to a Redis queue for an external
notifier (messaging links, reminders). Delivery itself is not handled here.

Queue:
- events:p2p: booking notifications (created, approved, status changed)
"""

import json
import time
import logging

from redis import Redis, RedisError

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(redis: Redis | None, event_type: str, payload: dict) -> None:
    """
    Emit a p2p event.

    Failures are logged and swallowed: the booking write already happened.
    """
    if redis is None:
        logger.debug(f"Event {event_type} dropped: Redis disabled")
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        redis.rpush(P2P_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")


def booking_payload(booking) -> dict:
    return {
        "booking_id": booking.id,
        "location_id": booking.location_id,
        "date": booking.date,
        "time": booking.time,
        "status": booking.status,
        "client_name": booking.client_name,
        "client_phone": booking.client_phone,
    }
