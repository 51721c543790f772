from __future__ import annotations

import logging
import os
import random
import time
from dataclasses import dataclass

from app.core.config import settings
from app.core.errors import ValidationError, StorageError

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    file_name: str
    file_path: str  # public URL path
    disk_path: str


def is_allowed_content_type(content_type: str | None) -> bool:
    ct = (content_type or "").lower()
    return ct.startswith("image/") or ct == "application/pdf"


def make_proof_filename(original_name: str) -> str:
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"payment-{int(time.time() * 1000)}-{random.randint(0, 10**9 - 1):09d}{ext}"


def store_payment_proof(*, content: bytes, original_name: str, content_type: str | None) -> StoredFile:
    """Write an uploaded payment proof to UPLOAD_DIR.

    The file lands before any booking row is touched; if the caller's
    update fails afterwards the file is left behind.
    """
    if not is_allowed_content_type(content_type):
        raise ValidationError("Only images and PDF files are allowed")
    if not content:
        raise ValidationError("Uploaded file is empty")
    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(f"File too large (max {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB)")

    base = settings.UPLOAD_DIR or "./public/uploads/payments"
    file_name = make_proof_filename(original_name)
    disk_path = os.path.join(base, file_name)
    try:
        os.makedirs(base, exist_ok=True)
        with open(disk_path, "wb") as f:
            f.write(content)
    except OSError as e:
        logger.exception("could not store payment proof %s", file_name)
        raise StorageError("Could not store uploaded file") from e

    prefix = settings.UPLOAD_URL_PREFIX.rstrip("/")
    return StoredFile(file_name=file_name, file_path=f"{prefix}/{file_name}", disk_path=disk_path)
