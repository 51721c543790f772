"""Booking status state machine."""
from enum import Enum

from app.core.errors import InvalidStateError


class BookingStatus(str, Enum):
    PENDING = "pending"
    WAITING_VERIFICATION = "waiting_verification"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    REGULAR = "regular"
    BUNDLE = "bundle"


BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
        BookingStatus.WAITING_VERIFICATION,
    },
    BookingStatus.WAITING_VERIFICATION: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: set(),
    BookingStatus.CANCELLED: set(),
}


def can_transition(current: str, target: str) -> bool:
    try:
        cur = BookingStatus(current)
        tgt = BookingStatus(target)
    except ValueError:
        return False
    return tgt in BOOKING_TRANSITIONS[cur]


def assert_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidStateError(f"Booking cannot move from {current} to {BookingStatus(target).value}")
