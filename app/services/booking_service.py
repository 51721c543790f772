"""Booking lifecycle: creation, lookup, payment proof, confirmation, ticket scan, cancellation.

Status changes are conditional updates (``WHERE status = <observed>`` /
``WHERE is_verified = false``); zero affected rows means another request
already moved the booking and is reported as a domain error, never as a
second success. Seat ownership among confirmed bookings is enforced by the
``booking_seats`` unique constraint, written in the same transaction as the
confirmation.
"""
from __future__ import annotations

import logging
import random
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy import select, update, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import (
    ValidationError, NotFoundError, ConflictError, AlreadyConfirmedError,
    InvalidStateError, SeatConflictError,
)
from app.models.booking import Booking
from app.models.booking_seat import BookingSeat
from app.services.audit_service import log_audit
from app.services.availability_service import occupied_seats
from app.services.booking_state import BookingStatus, OrderType, assert_transition
from app.services.broadcast_service import SeatBroadcaster, seat_updates
from app.services.seat_codec import decode_seats, encode_seats, parse_seat_selection
from app.services.ticket_service import build_qr_payload

logger = logging.getLogger(__name__)

REF_ATTEMPTS = 10


def make_booking_reference(prefix: str = "BK") -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=5))
    return f"{prefix}{int(time.time() * 1000)}{suffix}"


def make_verification_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def allocate_identifiers(db: Session, prefix: str = "BK", reference: str | None = None) -> tuple[str, str]:
    """Pick an unused (booking_reference, verification_code) pair.

    A caller-supplied reference that already exists is a conflict; generated
    ones are retried.
    """
    if reference:
        if db.query(Booking.id).filter(Booking.booking_reference == reference).first():
            raise ConflictError(f"Reference {reference} already exists")

    for _ in range(REF_ATTEMPTS):
        ref = reference or make_booking_reference(prefix)
        code = make_verification_code()
        clash = db.execute(
            select(Booking.id).where(or_(Booking.booking_reference == ref, Booking.verification_code == code))
        ).first()
        if not clash:
            return ref, code
    raise ConflictError("could not allocate booking reference")


def parse_amount(value, label: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{label} must be a number")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError(f"{label} must be greater than zero")
    return amount


def commit_new(db: Session, booking: Booking) -> Booking:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("insert of booking %s collided: %s", booking.booking_reference, e.orig)
        raise ConflictError("Booking reference collision, please retry") from e
    db.refresh(booking)
    return booking


def create_booking(db: Session, *, showtime_id: int | None, movie_title: str | None,
                   customer_name: str | None, customer_email: str | None, customer_phone: str | None = None,
                   seat_numbers=None, total_amount=None) -> Booking:
    required = {
        "showtime_id": showtime_id,
        "movie_title": (movie_title or "").strip(),
        "customer_name": (customer_name or "").strip(),
        "customer_email": (customer_email or "").strip(),
        "total_amount": total_amount,
    }
    missing = [k for k, v in required.items() if v is None or v == ""]
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing))

    seats = parse_seat_selection(seat_numbers)
    amount = parse_amount(total_amount, "total_amount")
    ref, code = allocate_identifiers(db, "BK")

    booking = Booking(
        booking_reference=ref,
        verification_code=code,
        showtime_id=showtime_id,
        movie_title=required["movie_title"],
        customer_name=required["customer_name"],
        customer_email=required["customer_email"],
        customer_phone=(customer_phone or "").strip() or None,
        seat_numbers=encode_seats(seats),
        total_amount=amount,
        status=BookingStatus.PENDING.value,
        payment_status="unpaid",
        is_verified=False,
        order_type=OrderType.REGULAR.value,
    )
    db.add(booking)
    log_audit(db, actor=booking.customer_email, action="booking_created", entity_type="booking",
              entity_id=ref, details={"showtime_id": showtime_id, "seats": seats})
    commit_new(db, booking)
    logger.info("booking %s created for showtime %s seats=%s", ref, showtime_id, seats)
    return booking


def find_by_reference(db: Session, reference: str, order_type: str | None = None) -> Booking | None:
    q = db.query(Booking).filter(Booking.booking_reference == reference)
    if order_type:
        q = q.filter(Booking.order_type == order_type)
    return q.first()


def get_booking(db: Session, reference: str, order_type: str | None = None) -> Booking:
    b = find_by_reference(db, reference, order_type) if reference else None
    if not b:
        raise NotFoundError("Bundle order not found" if order_type == OrderType.BUNDLE.value else "Booking not found")
    return b


def booking_seats(b: Booking) -> list[str]:
    """Stored seats, first occurrence kept; older rows may repeat a seat."""
    return list(dict.fromkeys(decode_seats(b.seat_numbers)))


def list_bookings(db: Session) -> list[Booking]:
    return db.query(Booking).order_by(Booking.id.desc()).all()


def list_by_customer(db: Session, name_or_email: str | None) -> list[Booking]:
    key = (name_or_email or "").strip().lower()
    if not key:
        raise ValidationError("Username is required")
    return (
        db.query(Booking)
        .filter(or_(func.lower(Booking.customer_name) == key, func.lower(Booking.customer_email) == key))
        .order_by(Booking.booking_date.desc(), Booking.id.desc())
        .all()
    )


def list_with_payment_proof(db: Session) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.payment_proof.isnot(None))
        .order_by(Booking.booking_date.desc(), Booking.id.desc())
        .all()
    )


def attach_payment_proof(db: Session, reference: str, file_name: str, order_type: str | None = None) -> Booking:
    b = get_booking(db, reference, order_type)
    if b.status == BookingStatus.CANCELLED.value:
        raise InvalidStateError("Booking is cancelled")

    b.payment_proof = file_name
    b.payment_date = datetime.now(timezone.utc)
    if b.payment_status != "paid":
        b.payment_status = "pending"
    # bundle orders wait for an admin to check the proof; regular bookings stay pending until confirm-payment
    if b.order_type == OrderType.BUNDLE.value and b.status == BookingStatus.PENDING.value:
        assert_transition(b.status, BookingStatus.WAITING_VERIFICATION)
        b.status = BookingStatus.WAITING_VERIFICATION.value

    log_audit(db, actor=b.customer_email, action="payment_proof_uploaded", entity_type=_entity_type(b),
              entity_id=b.booking_reference, details={"file": file_name})
    db.commit()
    db.refresh(b)
    logger.info("payment proof %s attached to %s", file_name, b.booking_reference)
    return b


def confirm_payment(db: Session, reference: str, broadcaster: SeatBroadcaster, actor: str = "admin") -> Booking:
    if not reference:
        raise ValidationError("Booking reference is required")
    b = get_booking(db, reference)
    current = b.status
    if current == BookingStatus.CONFIRMED.value:
        raise AlreadyConfirmedError("Booking has already been confirmed")
    assert_transition(current, BookingStatus.CONFIRMED)

    seats = booking_seats(b)
    is_regular = b.order_type != OrderType.BUNDLE.value
    if is_regular and not seats:
        raise InvalidStateError("Booking has no seats")
    if is_regular:
        # rows written before seat ids were length-checked
        parse_seat_selection(seats)
        taken = set(occupied_seats(db, b.showtime_id, b.movie_title)) & set(seats)
        if taken:
            taken_sorted = sorted(taken)
            logger.warning("confirm %s rejected, seats already booked: %s", reference, taken_sorted)
            raise SeatConflictError("Seats already booked: " + ", ".join(taken_sorted), taken_sorted)

    qr = build_qr_payload(b, seats)
    res = db.execute(
        update(Booking)
        .where(Booking.id == b.id, Booking.status == current)
        .values(status=BookingStatus.CONFIRMED.value, payment_status="paid", qr_code_data=qr)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        db.rollback()
        now_status = _current_status(db, b.id)
        if now_status == BookingStatus.CONFIRMED.value:
            raise AlreadyConfirmedError("Booking has already been confirmed")
        raise InvalidStateError(f"Booking cannot be confirmed (status is {now_status})")

    if is_regular:
        db.add_all([
            BookingSeat(booking_id=b.id, showtime_id=b.showtime_id, movie_title=b.movie_title, seat_number=s)
            for s in seats
        ])
    log_audit(db, actor=actor, action="payment_confirmed", entity_type=_entity_type(b),
              entity_id=b.booking_reference, details={"from": current, "seats": seats})
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("confirm %s lost a seat race: %s", reference, e.orig)
        raise SeatConflictError("One or more seats were booked by another customer", seats) from e
    db.refresh(b)
    logger.info("payment confirmed for %s", reference)

    if is_regular and b.showtime_id is not None:
        broadcaster.notify(b.showtime_id, seat_updates(
            seats, status="booked", booking_reference=b.booking_reference, action="booking_confirmed",
        ))
    return b


@dataclass
class ScanResult:
    valid: bool
    message: str
    booking: Booking | None = None
    seats: list[str] = field(default_factory=list)
    used_at: datetime | None = None


def scan_ticket(db: Session, reference: str, verification_code: str, broadcaster: SeatBroadcaster) -> ScanResult:
    """Admit a ticket once. Invalid tickets are a normal result, not an error."""
    b = find_by_reference(db, reference)
    if not b or b.status != BookingStatus.CONFIRMED.value:
        return ScanResult(False, "Ticket is not valid or was not found")
    if b.verification_code != str(verification_code).strip():
        return ScanResult(False, "Verification code does not match")
    if b.is_verified:
        return ScanResult(False, "Ticket has already been used", booking=b, used_at=b.verified_at)

    res = db.execute(
        update(Booking)
        .where(Booking.id == b.id, Booking.status == BookingStatus.CONFIRMED.value, Booking.is_verified.is_(False))
        .values(is_verified=True, verified_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        # a concurrent scan won
        db.rollback()
        used_at = db.execute(select(Booking.verified_at).where(Booking.id == b.id)).scalar()
        return ScanResult(False, "Ticket has already been used", booking=b, used_at=used_at)

    log_audit(db, actor="scanner", action="ticket_verified", entity_type="booking", entity_id=b.booking_reference)
    db.commit()
    db.refresh(b)
    seats = booking_seats(b)
    logger.info("ticket %s verified", reference)

    if seats and b.showtime_id is not None:
        broadcaster.notify(b.showtime_id, seat_updates(
            seats, status="occupied", booking_reference=b.booking_reference, action="ticket_validated",
        ))
    return ScanResult(True, "Ticket valid, please enter", booking=b, seats=seats)


def cancel_booking(db: Session, reference: str, actor: str = "customer") -> Booking:
    if not reference:
        raise ValidationError("Booking reference is required")
    b = get_booking(db, reference)
    current = b.status
    assert_transition(current, BookingStatus.CANCELLED)

    res = db.execute(
        update(Booking)
        .where(Booking.id == b.id, Booking.status == current)
        .values(status=BookingStatus.CANCELLED.value)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount == 0:
        db.rollback()
        raise InvalidStateError(f"Booking cannot be cancelled (status is {_current_status(db, b.id)})")

    log_audit(db, actor=actor, action="booking_cancelled", entity_type=_entity_type(b),
              entity_id=b.booking_reference, details={"from": current})
    db.commit()
    db.refresh(b)
    logger.info("booking %s cancelled", reference)
    return b


def _current_status(db: Session, booking_id: int) -> str | None:
    return db.execute(select(Booking.status).where(Booking.id == booking_id)).scalar()


def _entity_type(b: Booking) -> str:
    return "bundle_order" if b.order_type == OrderType.BUNDLE.value else "booking"
