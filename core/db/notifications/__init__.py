"""
Notification read-tracking re-exports.
"""
from core.db.notifications.read_store import (
    get_notification_feed,
    get_read_notifications,
    get_unread_notification_count,
    mark_notification_as_read,
)

__all__ = [
    "get_notification_feed",
    "get_read_notifications",
    "get_unread_notification_count",
    "mark_notification_as_read",
]
