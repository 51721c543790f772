import json
from decimal import Decimal

import pytest

from app.core.errors import ValidationError
from app.models.booking import Booking
from app.services.ticket_service import build_qr_payload, parse_qr_payload, render_ticket_pdf_bytes


@pytest.fixture
def booking():
    return Booking(
        booking_reference="BK1700000000000ABCDE",
        verification_code="482913",
        showtime_id=5,
        movie_title="Dune",
        customer_name="Budi",
        total_amount=Decimal("50000.00"),
    )


def test_qr_payload_carries_ticket_identity(booking):
    payload = json.loads(build_qr_payload(booking, ["A1", "A2"]))

    assert payload["type"] == "CINEMA_TICKET"
    assert payload["booking_reference"] == "BK1700000000000ABCDE"
    assert payload["verification_code"] == "482913"
    assert payload["movie"] == "Dune"
    assert payload["seats"] == ["A1", "A2"]
    assert payload["showtime_id"] == 5
    assert payload["total_paid"] == "50000.00"
    assert payload["timestamp"]


def test_scanner_reads_back_the_payload(booking):
    assert parse_qr_payload(build_qr_payload(booking, ["A1"])) == ("BK1700000000000ABCDE", "482913")


def test_parse_accepts_decoded_object():
    assert parse_qr_payload({"booking_reference": " BK1 ", "verification_code": 123456}) == ("BK1", "123456")


@pytest.mark.parametrize(
    "qr_data",
    ["not json", "[1, 2]", '"BK1"', '{"booking_reference": "BK1"}', '{"verification_code": "1"}', None, {}],
)
def test_parse_rejects_malformed_payloads(qr_data):
    with pytest.raises(ValidationError, match="Invalid QR code format"):
        parse_qr_payload(qr_data)


def test_ticket_pdf(booking):
    pdf = render_ticket_pdf_bytes(
        booking_reference=booking.booking_reference,
        customer_name=booking.customer_name,
        movie_title=booking.movie_title,
        showtime_id=booking.showtime_id,
        seats=["A1", "A2"],
        total_amount="50000.00",
        verification_code=booking.verification_code,
        qr_payload=build_qr_payload(booking, ["A1", "A2"]),
    )

    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000
