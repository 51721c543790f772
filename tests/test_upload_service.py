import re

import pytest

from app.core.config import settings
from app.core.errors import ValidationError
from app.services.upload_service import is_allowed_content_type, make_proof_filename, store_payment_proof


def test_proof_filename_keeps_extension():
    assert re.fullmatch(r"payment-\d+-\d{9}\.png", make_proof_filename("Transfer BCA.PNG"))
    assert re.fullmatch(r"payment-\d+-\d{9}", make_proof_filename(""))


@pytest.mark.parametrize("content_type, allowed", [
    ("image/png", True),
    ("image/jpeg", True),
    ("application/pdf", True),
    ("text/plain", False),
    ("application/x-msdownload", False),
    (None, False),
])
def test_allowed_content_types(content_type, allowed):
    assert is_allowed_content_type(content_type) is allowed


def test_store_writes_under_upload_dir(upload_dir):
    stored = store_payment_proof(content=b"\x89PNG fake", original_name="proof.png", content_type="image/png")

    assert (upload_dir / stored.file_name).read_bytes() == b"\x89PNG fake"
    assert stored.file_path == f"/uploads/payments/{stored.file_name}"


def test_rejects_wrong_type(upload_dir):
    with pytest.raises(ValidationError, match="Only images and PDF"):
        store_payment_proof(content=b"hello", original_name="proof.txt", content_type="text/plain")
    assert not upload_dir.exists()


def test_rejects_empty_file(upload_dir):
    with pytest.raises(ValidationError, match="empty"):
        store_payment_proof(content=b"", original_name="proof.png", content_type="image/png")


def test_rejects_oversized_file(upload_dir, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)
    with pytest.raises(ValidationError, match="too large"):
        store_payment_proof(content=b"0123456789", original_name="proof.png", content_type="image/png")
