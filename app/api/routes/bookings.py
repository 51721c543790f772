from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session

from app.api.deps import customer_key, get_broadcaster
from app.core.config import settings
from app.core.errors import ValidationError, ConflictError
from app.db.session import get_db
from app.models.booking import Booking
from app.schemas.booking import BookingCreate, BookingReferenceIn, ScanTicketIn
from app.services.availability_service import occupied_seats
from app.services.booking_service import (
    create_booking, get_booking, booking_seats, list_bookings, list_by_customer,
    list_with_payment_proof, attach_payment_proof, confirm_payment, scan_ticket, cancel_booking,
)
from app.services.booking_state import BookingStatus
from app.services.broadcast_service import SeatBroadcaster
from app.services.seat_codec import format_seats
from app.services.ticket_service import parse_qr_payload, render_ticket_pdf_bytes, build_qr_payload
from app.services.upload_service import store_payment_proof

router = APIRouter(tags=["bookings"])

STATUS_LABELS = {
    "pending": "Pending Payment",
    "waiting_verification": "Waiting Verification",
    "confirmed": "Confirmed",
    "cancelled": "Cancelled",
}


def booking_out(b: Booking) -> dict:
    return {
        "id": b.id,
        "booking_reference": b.booking_reference,
        "verification_code": b.verification_code,
        "customer_name": b.customer_name,
        "customer_email": b.customer_email,
        "customer_phone": b.customer_phone,
        "total_amount": b.total_amount,
        "seat_numbers": booking_seats(b),
        "status": b.status,
        "payment_status": b.payment_status,
        "booking_date": b.booking_date,
        "movie_title": b.movie_title,
        "showtime_id": b.showtime_id,
        "is_verified": b.is_verified,
        "verified_at": b.verified_at,
        "payment_proof": b.payment_proof,
        "order_type": b.order_type,
    }


@router.get("/bookings/occupied-seats")
def get_occupied_seats(showtime_id: int | None = None, movie_title: str | None = None, db: Session = Depends(get_db)):
    if showtime_id is None or not movie_title:
        raise ValidationError("Showtime ID and Movie Title are required")
    return {"success": True, "data": occupied_seats(db, showtime_id, movie_title)}


@router.post("/bookings", status_code=201)
def create_new_booking(body: BookingCreate, db: Session = Depends(get_db)):
    b = create_booking(
        db,
        showtime_id=body.showtime_id,
        movie_title=body.movie_title,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        customer_phone=body.customer_phone,
        seat_numbers=body.seat_numbers,
        total_amount=body.total_amount,
    )
    return {"success": True, "message": "Booking created successfully", "data": booking_out(b)}


@router.get("/bookings")
def list_all_bookings(db: Session = Depends(get_db)):
    # admin table shows seats as one "A1, A2" string
    return {"success": True, "data": [{**booking_out(b), "seat_numbers": format_seats(b.seat_numbers)} for b in list_bookings(db)]}


@router.post("/bookings/confirm-payment")
def confirm_booking_payment(body: BookingReferenceIn, db: Session = Depends(get_db),
                            broadcaster: SeatBroadcaster = Depends(get_broadcaster)):
    b = confirm_payment(db, (body.booking_reference or "").strip(), broadcaster)
    return {
        "success": True,
        "message": "Payment confirmed. Your ticket is now active.",
        "data": {**booking_out(b), "qr_code_data": b.qr_code_data},
    }


@router.post("/bookings/scan-ticket")
def scan_booking_ticket(body: ScanTicketIn, db: Session = Depends(get_db),
                        broadcaster: SeatBroadcaster = Depends(get_broadcaster)):
    try:
        if body.qr_data not in (None, ""):
            ref, code = parse_qr_payload(body.qr_data)
        elif body.booking_reference not in (None, "") and body.verification_code not in (None, ""):
            ref, code = str(body.booking_reference).strip(), str(body.verification_code).strip()
        else:
            raise ValidationError("QR data is required")
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"valid": False, "message": e.message})

    result = scan_ticket(db, ref, code, broadcaster)
    if not result.valid:
        out = {"valid": False, "message": result.message}
        if result.used_at is not None:
            out["used_at"] = result.used_at
        return out

    b = result.booking
    return {
        "valid": True,
        "message": result.message,
        "ticket_info": {
            "movie": b.movie_title,
            "booking_reference": b.booking_reference,
            "showtime_id": b.showtime_id,
            "seats": result.seats,
            "customer": b.customer_name,
            "total_paid": b.total_amount,
            "status": "VERIFIED",
            "verified_at": b.verified_at,
            "verification_code": b.verification_code,
        },
    }


@router.post("/bookings/cancel")
def cancel_existing_booking(body: BookingReferenceIn, db: Session = Depends(get_db)):
    b = cancel_booking(db, (body.booking_reference or "").strip())
    return {"success": True, "message": "Booking cancelled", "data": booking_out(b)}


@router.get("/bookings/my-bookings")
def my_bookings(username: str | None = Depends(customer_key), db: Session = Depends(get_db)):
    bookings = list_by_customer(db, username)
    data = []
    for b in bookings:
        data.append({
            **booking_out(b),
            "status_text": STATUS_LABELS.get(b.status, b.status),
            "status_class": b.status if b.status in STATUS_LABELS else "unknown",
            "qr_code_data": b.qr_code_data,
        })
    return {
        "success": True,
        "data": data,
        "summary": {
            "total": len(data),
            "confirmed": sum(1 for b in bookings if b.status == BookingStatus.CONFIRMED.value),
            "pending": sum(1 for b in bookings if b.status == BookingStatus.PENDING.value),
            "cancelled": sum(1 for b in bookings if b.status == BookingStatus.CANCELLED.value),
        },
    }


@router.post("/bookings/upload-payment")
def upload_payment(booking_reference: str = Form(""), payment_proof: UploadFile | None = File(None),
                   db: Session = Depends(get_db)):
    if payment_proof is None or not payment_proof.filename:
        raise ValidationError("No file uploaded")
    if not booking_reference.strip():
        raise ValidationError("Booking reference is required")

    content = payment_proof.file.read(settings.MAX_UPLOAD_BYTES + 1)
    stored = store_payment_proof(content=content, original_name=payment_proof.filename,
                                 content_type=payment_proof.content_type)
    b = attach_payment_proof(db, booking_reference.strip(), stored.file_name)
    return {
        "success": True,
        "message": "Payment proof uploaded successfully",
        "fileName": stored.file_name,
        "filePath": stored.file_path,
        "originalName": payment_proof.filename,
        "bookingReference": b.booking_reference,
    }


@router.get("/bookings/uploaded-payments")
def uploaded_payments(db: Session = Depends(get_db)):
    rows = list_with_payment_proof(db)
    return {
        "success": True,
        "count": len(rows),
        "data": [{
            "booking_reference": b.booking_reference,
            "customer_name": b.customer_name,
            "movie_title": b.movie_title,
            "total_amount": b.total_amount,
            "payment_proof": b.payment_proof,
            "payment_status": b.payment_status,
            "status": b.status,
            "order_type": b.order_type,
            "booking_date": b.booking_date,
        } for b in rows],
    }


@router.get("/bookings/{booking_reference}")
def get_booking_by_reference(booking_reference: str, db: Session = Depends(get_db)):
    return {"success": True, "data": booking_out(get_booking(db, booking_reference))}


@router.get("/bookings/{booking_reference}/ticket")
def download_ticket(booking_reference: str, db: Session = Depends(get_db)):
    b = get_booking(db, booking_reference)
    if b.status != BookingStatus.CONFIRMED.value:
        raise ConflictError("Ticket is only available after payment confirmation")
    seats = booking_seats(b)
    pdf = render_ticket_pdf_bytes(
        booking_reference=b.booking_reference,
        customer_name=b.customer_name,
        movie_title=b.movie_title,
        showtime_id=b.showtime_id,
        seats=seats,
        total_amount=str(b.total_amount),
        verification_code=b.verification_code,
        qr_payload=b.qr_code_data or build_qr_payload(b, seats),
    )
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{b.booking_reference}.pdf"'},
    )
