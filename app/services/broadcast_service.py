"""Seat availability push.

The lifecycle functions receive a ``SeatBroadcaster`` and call ``notify``
after a seat-affecting transition has committed. Delivery is best effort:
a failed publish is logged and never fails the request.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone

import redis

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class SeatUpdate:
    seat_number: str
    status: str  # booked | occupied
    booking_reference: str
    action: str  # booking_confirmed | ticket_validated
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return asdict(self)


def seat_updates(seats: list[str], *, status: str, booking_reference: str, action: str) -> list[SeatUpdate]:
    ts = datetime.now(timezone.utc).isoformat()
    return [
        SeatUpdate(seat_number=s, status=status, booking_reference=booking_reference, action=action, timestamp=ts)
        for s in seats
    ]


class SeatBroadcaster:
    def notify(self, showtime_id: int, updates: list[SeatUpdate]) -> None:
        raise NotImplementedError


class NullBroadcaster(SeatBroadcaster):
    def notify(self, showtime_id: int, updates: list[SeatUpdate]) -> None:
        logger.debug("seat broadcast disabled; dropping %d updates for showtime %s", len(updates), showtime_id)


class RedisSeatBroadcaster(SeatBroadcaster):
    """Publishes one JSON message per notify() on ``<prefix>:<showtime_id>``."""

    def __init__(self, client: redis.Redis, channel_prefix: str = "seats"):
        self.client = client
        self.channel_prefix = channel_prefix

    def channel(self, showtime_id: int) -> str:
        return f"{self.channel_prefix}:{showtime_id}"

    def notify(self, showtime_id: int, updates: list[SeatUpdate]) -> None:
        if not updates:
            return
        message = json.dumps({
            "type": "seat_update",
            "showtime_id": showtime_id,
            "updates": [u.to_dict() for u in updates],
        })
        try:
            receivers = self.client.publish(self.channel(showtime_id), message)
        except redis.RedisError as e:
            logger.warning("seat broadcast to %s failed: %s", self.channel(showtime_id), e)
            return
        logger.info("broadcast %d seat updates for showtime %s to %s subscribers", len(updates), showtime_id, receivers)


def build_broadcaster() -> SeatBroadcaster:
    if settings.SEAT_BROADCAST_ENABLED:
        # redis-py connects lazily, on the first publish
        client = redis.Redis.from_url(settings.REDIS_URL, socket_connect_timeout=5, socket_timeout=2)
        return RedisSeatBroadcaster(client, settings.SEAT_CHANNEL_PREFIX)
    return NullBroadcaster()


broadcaster = build_broadcaster()


def get_broadcaster() -> SeatBroadcaster:
    """FastAPI dependency; tests override it with a recording fake."""
    return broadcaster
