"""
Assisted-registration requests (bookings).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from core.db.base import DocumentStore, utcnow_iso
from core.db.ops import read_operation, write_operation
from core.db.paths import BOOKINGS
from core.errors import InvalidRecordError
from core.validation import validate_fee

log = logging.getLogger("store.bookings")

BOOKING_STATUSES = ("pending", "processing", "completed", "cancelled")
REQUIRED_FIELDS = ("job_id", "job_title", "user_id", "user_name", "user_email")


def _check_booking(data: Mapping[str, Any]) -> Dict[str, Any]:
    errors: Dict[str, str] = {}
    clean: Dict[str, Any] = {}
    for name in REQUIRED_FIELDS:
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            errors[name] = f"{name} is required"
        else:
            clean[name] = value.strip()

    fee = validate_fee(data.get("fee"))
    if not fee.valid:
        errors["fee"] = fee.error or "Invalid fee"
    else:
        clean["fee"] = fee.sanitized

    if errors:
        raise InvalidRecordError(errors)
    return clean


@write_operation
def create_booking(store: DocumentStore, data: Mapping[str, Any]) -> str:
    """
    Insert a booking request and return its id.

    The id and created_at are assigned here and status always starts as
    "pending", whatever the caller sent.
    """
    booking = _check_booking(data)
    now = utcnow_iso()
    booking.update({"status": "pending", "created_at": now, "updated_at": now})
    booking_id = store.add(BOOKINGS, booking)
    log.info("Booking created id=%s job=%s user=%s", booking_id, booking["job_id"], booking["user_id"])
    return booking_id


@read_operation(default=list)
def get_user_bookings(store: DocumentStore, uid: str) -> List[Dict]:
    if not uid:
        return []
    return store.query(BOOKINGS, where={"user_id": uid}, order_by="created_at", descending=True)


@read_operation(default=list)
def get_all_bookings(store: DocumentStore, status: str | None = None) -> List[Dict]:
    """All bookings newest first, optionally only those with `status`."""
    where = {"status": status} if status else None
    return store.query(BOOKINGS, where=where, order_by="created_at", descending=True)


@write_operation
def update_booking_status(store: DocumentStore, booking_id: str, status: str) -> None:
    normalized = (status or "").strip().lower()
    if normalized not in BOOKING_STATUSES:
        raise InvalidRecordError({"status": f"Status must be one of: {', '.join(BOOKING_STATUSES)}"})
    store.update(BOOKINGS, booking_id, {"status": normalized, "updated_at": utcnow_iso()})
    log.info("Booking %s -> %s", booking_id, normalized)


@write_operation
def delete_booking(store: DocumentStore, booking_id: str) -> None:
    store.delete(BOOKINGS, booking_id)


@read_operation(default=lambda: {status: 0 for status in ("all",) + BOOKING_STATUSES})
def count_bookings_by_status(store: DocumentStore) -> Dict[str, int]:
    counts = {status: 0 for status in BOOKING_STATUSES}
    bookings = store.query(BOOKINGS)
    for booking in bookings:
        status = booking.get("status")
        if status in counts:
            counts[status] += 1
    return {"all": len(bookings), **counts}


__all__ = [
    "BOOKING_STATUSES",
    "create_booking",
    "get_user_bookings",
    "get_all_bookings",
    "update_booking_status",
    "delete_booking",
    "count_bookings_by_status",
]
