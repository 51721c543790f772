from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.services.seat_codec import MAX_SEAT_ID_LENGTH

class BookingSeat(Base):
    """A seat held by a confirmed booking. One row per (screening, seat)."""
    __tablename__ = "booking_seats"
    __table_args__ = (
        UniqueConstraint("showtime_id", "movie_title", "seat_number", name="uq_booking_seats_showtime_seat"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_id: Mapped[int] = mapped_column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), index=True)
    showtime_id: Mapped[int] = mapped_column(Integer)
    movie_title: Mapped[str] = mapped_column(String(255))
    seat_number: Mapped[str] = mapped_column(String(MAX_SEAT_ID_LENGTH))
