from __future__ import annotations

import io
import json
from datetime import datetime, timezone

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.core.errors import ValidationError
from app.models.booking import Booking

QR_TYPE = "CINEMA_TICKET"


def build_qr_payload(booking: Booking, seats: list[str]) -> str:
    """JSON text encoded in the e-ticket QR code and checked at scan time."""
    return json.dumps({
        "type": QR_TYPE,
        "booking_reference": booking.booking_reference,
        "verification_code": booking.verification_code,
        "movie": booking.movie_title,
        "seats": seats,
        "showtime_id": booking.showtime_id,
        "total_paid": str(booking.total_amount) if booking.total_amount is not None else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


def parse_qr_payload(qr_data) -> tuple[str, str]:
    """Return (booking_reference, verification_code) from scanned QR text."""
    if isinstance(qr_data, dict):
        info = qr_data
    else:
        try:
            info = json.loads(qr_data)
        except (TypeError, ValueError):
            raise ValidationError("Invalid QR code format")
    if not isinstance(info, dict):
        raise ValidationError("Invalid QR code format")
    ref = str(info.get("booking_reference") or "").strip()
    code = str(info.get("verification_code") or "").strip()
    if not ref or not code:
        raise ValidationError("Invalid QR code format")
    return ref, code


def _qr_drawing(payload: str, size: float) -> Drawing:
    widget = QrCodeWidget(payload)
    x0, y0, x1, y1 = widget.getBounds()
    w, h = x1 - x0, y1 - y0
    d = Drawing(size, size, transform=[size / w, 0, 0, size / h, 0, 0])
    d.add(widget)
    return d


def render_ticket_pdf_bytes(*, booking_reference: str, customer_name: str, movie_title: str,
                            showtime_id, seats: list[str], total_amount: str,
                            verification_code: str, qr_payload: str) -> bytes:
    """Return an A4 PDF bytes. Pure function."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    _, h = A4

    # Header
    c.setFont("Helvetica-Bold", 18)
    c.drawString(40, h - 60, "Cinema E-Ticket")
    c.setFont("Helvetica", 11)
    c.drawString(40, h - 80, f"Booking Reference: {booking_reference}")
    c.drawString(40, h - 96, f"Verification Code: {verification_code}")

    # Customer block
    c.setFont("Helvetica-Bold", 12)
    c.drawString(40, h - 130, "Customer")
    c.setFont("Helvetica", 11)
    c.drawString(40, h - 148, customer_name or "(Not provided)")

    # Screening block
    c.setFont("Helvetica-Bold", 12)
    c.drawString(40, h - 185, "Screening")
    c.setFont("Helvetica", 11)
    c.drawString(40, h - 203, f"Movie:    {movie_title}")
    c.drawString(40, h - 219, f"Showtime: {showtime_id}")
    c.drawString(40, h - 235, f"Seats:    {', '.join(seats)}")
    c.drawString(40, h - 251, f"Paid:     {total_amount}")

    renderPDF.draw(_qr_drawing(qr_payload, 160), c, 40, h - 450)

    # Footer
    c.setFont("Helvetica", 9)
    c.drawString(40, 40, "Show this QR code at the entrance. Each ticket is admitted once.")
    c.drawString(40, 26, f"Generated: {datetime.now(timezone.utc).isoformat()}")

    c.showPage()
    c.save()
    return buf.getvalue()
