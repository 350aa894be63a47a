"""
Facade over core.db: store construction plus the helpers pages import.
"""
from __future__ import annotations

from core.config import Settings
from core.db.base import DocumentStore, PostgresDocumentStore
from core.db.bookings import (
    BOOKING_STATUSES,
    count_bookings_by_status,
    create_booking,
    delete_booking,
    get_all_bookings,
    get_user_bookings,
    update_booking_status,
)
from core.db.jobs import (
    add_job_note,
    count_jobs_by_state,
    create_job,
    delete_job,
    get_all_jobs,
    get_job_by_id,
    get_job_notes,
    get_notes_for_saved_jobs,
    get_published_jobs,
    get_saved_job_ids,
    get_saved_jobs,
    is_job_saved,
    set_job_published,
    subscribe_to_job_notes,
    subscribe_to_jobs,
    subscribe_to_saved_jobs,
    toggle_saved_job,
    update_job,
)
from core.db.memory import MemoryDocumentStore
from core.db.notifications import (
    get_notification_feed,
    get_read_notifications,
    get_unread_notification_count,
    mark_notification_as_read,
)
from core.db.schema import init_db, migrate_contract_types, seed_sample_jobs
from core.db.users import (
    create_account,
    create_session,
    create_user_profile,
    delete_session,
    get_account,
    get_account_by_email,
    get_session,
    get_user_profile,
    hash_password,
    is_user_admin,
    list_users,
    promote_user_to_admin,
    touch_session,
    update_user_profile,
    verify_password,
)


def create_store(settings: Settings) -> DocumentStore:
    """Build the store handle for the configured backend."""
    if settings.store_backend == "memory":
        return MemoryDocumentStore()
    return PostgresDocumentStore(settings.database_url)


__all__ = [
    "create_store",
    "init_db",
    "migrate_contract_types",
    "seed_sample_jobs",
    "BOOKING_STATUSES",
    "count_bookings_by_status",
    "create_booking",
    "delete_booking",
    "get_all_bookings",
    "get_user_bookings",
    "update_booking_status",
    "add_job_note",
    "count_jobs_by_state",
    "create_job",
    "delete_job",
    "get_all_jobs",
    "get_job_by_id",
    "get_job_notes",
    "get_notes_for_saved_jobs",
    "get_published_jobs",
    "get_saved_job_ids",
    "get_saved_jobs",
    "is_job_saved",
    "set_job_published",
    "subscribe_to_job_notes",
    "subscribe_to_jobs",
    "subscribe_to_saved_jobs",
    "toggle_saved_job",
    "update_job",
    "get_notification_feed",
    "get_read_notifications",
    "get_unread_notification_count",
    "mark_notification_as_read",
    "create_account",
    "create_session",
    "create_user_profile",
    "delete_session",
    "get_account",
    "get_account_by_email",
    "get_session",
    "get_user_profile",
    "hash_password",
    "is_user_admin",
    "list_users",
    "promote_user_to_admin",
    "touch_session",
    "update_user_profile",
    "verify_password",
]
