from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ValidationError
from app.db.session import get_db
from app.models.booking import Booking
from app.schemas.booking import BundleOrderCreate, OrderReferenceIn
from app.services.booking_service import attach_payment_proof
from app.services.booking_state import OrderType
from app.services.bundle_service import create_bundle_order, submit_bundle_payment, list_bundle_orders
from app.services.upload_service import store_payment_proof

router = APIRouter(tags=["bundles"])


def bundle_out(o: Booking) -> dict:
    return {
        "id": o.id,
        "booking_reference": o.booking_reference,
        "bundle_id": o.bundle_id,
        "bundle_name": o.bundle_name,
        "bundle_description": o.bundle_description,
        "total_amount": o.total_amount,
        "original_price": o.original_price,
        "savings": o.savings,
        "quantity": o.quantity,
        "customer_name": o.customer_name,
        "customer_phone": o.customer_phone,
        "customer_email": o.customer_email,
        "payment_proof": o.payment_proof,
        "payment_status": o.payment_status,
        "status": o.status,
        "order_date": o.booking_date,
        "payment_date": o.payment_date,
    }


@router.post("/bookings/bundle-order")
def create_bundle(body: BundleOrderCreate, db: Session = Depends(get_db)):
    o = create_bundle_order(db, **body.model_dump())
    return {
        "success": True,
        "message": "Bundle order created successfully",
        "orderId": o.id,
        "orderReference": o.booking_reference,
        "data": bundle_out(o),
    }


@router.post("/bookings/bundle-order/upload-payment")
def upload_bundle_payment(order_reference: str = Form(""), payment_proof: UploadFile | None = File(None),
                          db: Session = Depends(get_db)):
    if payment_proof is None or not payment_proof.filename:
        raise ValidationError("No file uploaded")
    if not order_reference.strip():
        raise ValidationError("Order reference is required")

    content = payment_proof.file.read(settings.MAX_UPLOAD_BYTES + 1)
    stored = store_payment_proof(content=content, original_name=payment_proof.filename,
                                 content_type=payment_proof.content_type)
    o = attach_payment_proof(db, order_reference.strip(), stored.file_name, order_type=OrderType.BUNDLE.value)
    return {
        "success": True,
        "message": "Bundle payment proof uploaded successfully",
        "fileName": stored.file_name,
        "filePath": stored.file_path,
        "originalName": payment_proof.filename,
        "orderReference": o.booking_reference,
    }


@router.post("/bookings/bundle-order/confirm-payment")
def confirm_bundle_payment(body: OrderReferenceIn, db: Session = Depends(get_db)):
    o = submit_bundle_payment(db, (body.order_reference or "").strip())
    return {"success": True, "message": "Bundle payment submitted, waiting for verification", "data": bundle_out(o)}


@router.get("/bookings/bundle-orders")
def get_bundle_orders(db: Session = Depends(get_db)):
    orders = list_bundle_orders(db)
    return {"success": True, "count": len(orders), "data": [bundle_out(o) for o in orders]}
