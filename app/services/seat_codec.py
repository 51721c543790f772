"""Seat-set codec.

Every read and write of ``bookings.seat_numbers`` goes through this module.
Rows written by older clients hold JSON arrays, comma-joined strings,
bracketed-but-unquoted lists or a single bare seat; ``decode_seats`` accepts
all of them and never raises.
"""
from __future__ import annotations

import json
import re
from typing import Any, Iterable

from app.core.errors import ValidationError

_STRIP_CHARS = re.compile(r'[\[\]"]')

# width of booking_seats.seat_number
MAX_SEAT_ID_LENGTH = 20


def _clean(items: Iterable[Any]) -> list[str]:
    out = []
    for item in items:
        # bool is an int subclass; a true/false entry is never a seat
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            continue
        s = str(item).strip()
        if s:
            out.append(s)
    return out


def decode_seats(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return _clean(raw)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    text = str(raw).strip()
    if not text:
        return []

    try:
        parsed = json.loads(text)
    except ValueError:
        return _clean(_STRIP_CHARS.sub("", text).split(","))

    if isinstance(parsed, list):
        return _clean(parsed)
    if isinstance(parsed, (str, int)) and not isinstance(parsed, bool):
        return _clean([parsed])
    return []


def _validated(seats: list[str]) -> list[str]:
    if not seats:
        raise ValidationError("At least one seat must be selected")
    seen = set()
    for s in seats:
        if s in seen:
            raise ValidationError(f"Seat {s} selected more than once")
        if len(s) > MAX_SEAT_ID_LENGTH:
            raise ValidationError(f"Seat {s[:MAX_SEAT_ID_LENGTH]}... is longer than {MAX_SEAT_ID_LENGTH} characters")
        seen.add(s)
    return seats


def encode_seats(seats: Iterable[Any]) -> str:
    """Canonical JSON-array text for a non-empty, duplicate-free selection."""
    if isinstance(seats, (str, bytes)):
        raise TypeError("encode_seats expects a sequence of seat identifiers")
    return json.dumps(_validated(_clean(seats)))


def parse_seat_selection(raw: Any) -> list[str]:
    """Turn a client-supplied selection (list or string) into validated seat ids."""
    if isinstance(raw, (list, tuple)):
        seats = _clean(raw)
    else:
        seats = decode_seats(raw)
    return _validated(seats)


def format_seats(raw: Any) -> str:
    return ", ".join(decode_seats(raw))
