from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.services.booking_state import BookingStatus, OrderType
from app.services.seat_codec import decode_seats


def occupied_seats(db: Session, showtime_id: int, movie_title: str) -> list[str]:
    """Seats held by confirmed bookings of one screening.

    Pending bookings reserve nothing: a seat only becomes unavailable once
    its booking is confirmed.
    """
    rows = db.execute(
        select(Booking.seat_numbers).where(
            Booking.showtime_id == showtime_id,
            Booking.movie_title == movie_title,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.order_type == OrderType.REGULAR.value,
        )
    ).scalars()

    seen: dict[str, None] = {}
    for raw in rows:
        for seat in decode_seats(raw):
            seen.setdefault(seat, None)
    return list(seen)
