"""Bundle orders: merchandise/ticket packages stored as ``bookings`` rows with order_type=bundle."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.errors import ValidationError, InvalidStateError
from app.models.booking import Booking
from app.services.audit_service import log_audit
from app.services.booking_service import allocate_identifiers, commit_new, get_booking, parse_amount
from app.services.booking_state import BookingStatus, OrderType, assert_transition

logger = logging.getLogger(__name__)


def create_bundle_order(db: Session, *, bundle_name: str | None, customer_name: str | None,
                        customer_email: str | None, customer_phone: str | None, total_price=None,
                        order_reference: str | None = None, bundle_id: str | None = None,
                        bundle_description: str | None = None, bundle_price=None, original_price=None,
                        savings=None, quantity: int | None = None) -> Booking:
    required = {
        "bundle_name": (bundle_name or "").strip(),
        "customer_name": (customer_name or "").strip(),
        "customer_phone": (customer_phone or "").strip(),
        "customer_email": (customer_email or "").strip(),
    }
    missing = [k for k, v in required.items() if not v]
    if total_price is None or total_price == "":
        missing.append("total_price")
    if missing:
        raise ValidationError("Missing required fields: " + ", ".join(missing))

    total = parse_amount(total_price, "total_price")
    if quantity is not None and quantity < 1:
        raise ValidationError("quantity must be >= 1")
    orig = original_price if original_price not in (None, "") else bundle_price
    ref, code = allocate_identifiers(db, "BN", (order_reference or "").strip() or None)

    order = Booking(
        booking_reference=ref,
        verification_code=code,
        showtime_id=None,
        movie_title=required["bundle_name"],
        customer_name=required["customer_name"],
        customer_email=required["customer_email"],
        customer_phone=required["customer_phone"],
        seat_numbers="[]",
        total_amount=total,
        status=BookingStatus.PENDING.value,
        payment_status="unpaid",
        is_verified=False,
        order_type=OrderType.BUNDLE.value,
        bundle_id=bundle_id or None,
        bundle_name=required["bundle_name"],
        bundle_description=bundle_description or None,
        original_price=parse_amount(orig, "original_price") if orig not in (None, "") else None,
        savings=Decimal(str(savings)) if savings not in (None, "") else Decimal("0"),
        quantity=quantity or 1,
    )
    db.add(order)
    log_audit(db, actor=order.customer_email, action="bundle_order_created", entity_type="bundle_order",
              entity_id=ref, details={"bundle_id": bundle_id, "quantity": order.quantity})
    commit_new(db, order)
    logger.info("bundle order %s created (%s x%s)", ref, order.bundle_name, order.quantity)
    return order


def submit_bundle_payment(db: Session, reference: str) -> Booking:
    """Customer reports payment: pending -> waiting_verification. Repeat calls are no-ops."""
    if not reference:
        raise ValidationError("Order reference is required")
    order = get_booking(db, reference, OrderType.BUNDLE.value)
    if order.status == BookingStatus.WAITING_VERIFICATION.value:
        return order
    if order.status != BookingStatus.PENDING.value:
        raise InvalidStateError(f"Bundle order cannot accept payment (status is {order.status})")
    assert_transition(order.status, BookingStatus.WAITING_VERIFICATION)

    order.status = BookingStatus.WAITING_VERIFICATION.value
    order.payment_status = "pending"
    order.payment_date = datetime.now(timezone.utc)
    log_audit(db, actor=order.customer_email, action="bundle_payment_submitted", entity_type="bundle_order",
              entity_id=order.booking_reference)
    db.commit()
    db.refresh(order)
    logger.info("bundle order %s waiting for payment verification", reference)
    return order


def list_bundle_orders(db: Session) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.order_type == OrderType.BUNDLE.value)
        .order_by(Booking.booking_date.desc(), Booking.id.desc())
        .all()
    )
