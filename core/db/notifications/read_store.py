"""
Per-user read tracking for job notes, and the notification feed built on it.
"""
from __future__ import annotations

from typing import Dict, List, Set

from core.db.base import DocumentStore, utcnow_iso
from core.db.jobs.notes_store import get_notes_for_saved_jobs
from core.db.ops import read_operation, write_operation
from core.db.paths import JOBS, read_notifications_collection


@write_operation
def mark_notification_as_read(store: DocumentStore, uid: str, note_id: str) -> None:
    store.set(read_notifications_collection(uid), note_id, {"read_at": utcnow_iso()})


@read_operation(default=set)
def get_read_notifications(store: DocumentStore, uid: str) -> Set[str]:
    if not uid:
        return set()
    return set(store.list_ids(read_notifications_collection(uid)))


@read_operation(default=lambda: 0)
def get_unread_notification_count(store: DocumentStore, uid: str) -> int:
    """Notes across the user's saved jobs minus the ones they have read."""
    notes = get_notes_for_saved_jobs(store, uid)
    read_ids = get_read_notifications(store, uid)
    return sum(1 for note in notes if note["id"] not in read_ids)


@read_operation(default=list)
def get_notification_feed(store: DocumentStore, uid: str) -> List[Dict]:
    """Notes for saved jobs, newest first, each with `read` and `job_title`."""
    notes = get_notes_for_saved_jobs(store, uid)
    read_ids = get_read_notifications(store, uid)
    titles: Dict[str, str] = {}
    feed = []
    for note in notes:
        job_id = note.get("job_id", "")
        if job_id not in titles:
            job = store.get(JOBS, job_id) if job_id else None
            titles[job_id] = job.get("title", "") if job else ""
        feed.append({**note, "job_title": titles[job_id], "read": note["id"] in read_ids})
    return feed


__all__ = [
    "mark_notification_as_read",
    "get_read_notifications",
    "get_unread_notification_count",
    "get_notification_feed",
]
