from sqlalchemy import String, Integer, DateTime, Boolean, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from decimal import Decimal
from app.db.session import Base

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    booking_reference: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    verification_code: Mapped[str] = mapped_column(String(50), unique=True)

    showtime_id: Mapped[int] = mapped_column(Integer, nullable=True, index=True)  # NULL for bundle orders
    movie_title: Mapped[str] = mapped_column(String(255))  # bundle orders store the bundle name

    customer_name: Mapped[str] = mapped_column(String(100), index=True)
    customer_email: Mapped[str] = mapped_column(String(100), index=True)
    customer_phone: Mapped[str] = mapped_column(String(20), nullable=True)

    # canonical JSON array text, written only through app.services.seat_codec
    seat_numbers: Mapped[str] = mapped_column(Text, default="[]")
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    status: Mapped[str] = mapped_column(String(30), default="pending", index=True)  # pending, waiting_verification, confirmed, cancelled
    payment_status: Mapped[str] = mapped_column(String(20), default="unpaid")  # unpaid, pending, paid

    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verified_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)

    payment_proof: Mapped[str] = mapped_column(String(255), nullable=True)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
    qr_code_data: Mapped[str] = mapped_column(Text, nullable=True)

    order_type: Mapped[str] = mapped_column(String(12), default="regular")  # regular|bundle
    bundle_id: Mapped[str] = mapped_column(String(64), nullable=True)
    bundle_name: Mapped[str] = mapped_column(String(255), nullable=True)
    bundle_description: Mapped[str] = mapped_column(Text, nullable=True)
    original_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=True)
    savings: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=True)

    booking_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
