import json

import redis

from app.core.config import settings
from app.services import broadcast_service
from app.services.broadcast_service import (
    NullBroadcaster, RedisSeatBroadcaster, build_broadcaster, get_broadcaster, seat_updates,
)


class FakeRedis:
    def __init__(self, error=None):
        self.published = []
        self.error = error

    def publish(self, channel, message):
        if self.error:
            raise self.error
        self.published.append((channel, message))
        return 1


def test_seat_updates_share_one_timestamp():
    updates = seat_updates(["A1", "A2"], status="booked", booking_reference="BK1", action="booking_confirmed")

    assert [u.seat_number for u in updates] == ["A1", "A2"]
    assert updates[0].timestamp == updates[1].timestamp
    assert updates[0].to_dict() == {
        "seat_number": "A1",
        "status": "booked",
        "booking_reference": "BK1",
        "action": "booking_confirmed",
        "timestamp": updates[0].timestamp,
    }


def test_redis_broadcaster_publishes_per_showtime_channel():
    client = FakeRedis()
    RedisSeatBroadcaster(client, "seats").notify(
        5, seat_updates(["A1"], status="occupied", booking_reference="BK1", action="ticket_validated"),
    )

    [(channel, message)] = client.published
    assert channel == "seats:5"
    body = json.loads(message)
    assert body["type"] == "seat_update"
    assert body["showtime_id"] == 5
    assert body["updates"][0]["seat_number"] == "A1"
    assert body["updates"][0]["status"] == "occupied"


def test_empty_update_list_is_not_published():
    client = FakeRedis()
    RedisSeatBroadcaster(client).notify(5, [])
    assert client.published == []


def test_publish_failure_does_not_raise():
    client = FakeRedis(error=redis.ConnectionError("connection refused"))
    RedisSeatBroadcaster(client).notify(
        5, seat_updates(["A1"], status="booked", booking_reference="BK1", action="booking_confirmed"),
    )


def test_broadcast_disabled_gives_null_broadcaster(monkeypatch):
    monkeypatch.setattr(settings, "SEAT_BROADCAST_ENABLED", False)
    assert isinstance(build_broadcaster(), NullBroadcaster)


def test_broadcast_enabled_uses_redis(monkeypatch):
    monkeypatch.setattr(settings, "SEAT_BROADCAST_ENABLED", True)
    monkeypatch.setattr(settings, "SEAT_CHANNEL_PREFIX", "cinema-seats")

    b = build_broadcaster()
    assert isinstance(b, RedisSeatBroadcaster)
    assert b.channel(9) == "cinema-seats:9"


def test_dependency_hands_out_one_instance():
    assert get_broadcaster() is get_broadcaster() is broadcast_service.broadcaster
