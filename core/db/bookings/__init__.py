"""
Booking storage re-exports.
"""
from core.db.bookings.bookings_store import (
    BOOKING_STATUSES,
    count_bookings_by_status,
    create_booking,
    delete_booking,
    get_all_bookings,
    get_user_bookings,
    update_booking_status,
)

__all__ = [
    "BOOKING_STATUSES",
    "count_bookings_by_status",
    "create_booking",
    "delete_booking",
    "get_all_bookings",
    "get_user_bookings",
    "update_booking_status",
]
