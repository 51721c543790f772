from pydantic import BaseModel
from decimal import Decimal
from typing import Any, List, Optional, Union

# Field names match what the existing web/mobile clients send (snake_case).

class BookingCreate(BaseModel):
    showtime_id: Optional[int] = None
    movie_title: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None  # plain str, clients send placeholder addresses
    customer_phone: Optional[str] = None
    # list of seat ids, or legacy string forms ("A1,A2", '["A1"]')
    seat_numbers: Union[List[Any], str, None] = None
    total_amount: Optional[Decimal] = None

class BookingReferenceIn(BaseModel):
    booking_reference: Optional[str] = None

class ScanTicketIn(BaseModel):
    # either the raw QR text, or the two fields typed in by staff
    # scanners send the QR text, the decoded object, or typed digits; checked in the route
    qr_data: Optional[Any] = None
    booking_reference: Optional[Union[str, int]] = None
    verification_code: Optional[Union[str, int]] = None

class BundleOrderCreate(BaseModel):
    order_reference: Optional[str] = None
    bundle_id: Optional[str] = None
    bundle_name: Optional[str] = None
    bundle_description: Optional[str] = None
    bundle_price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None
    savings: Optional[Decimal] = None
    quantity: Optional[int] = None
    total_price: Optional[Decimal] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None

class OrderReferenceIn(BaseModel):
    order_reference: Optional[str] = None
