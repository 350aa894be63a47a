"""
Job notes: admin-authored updates under jobs/<job_id>/notes.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from core.db.base import DocumentStore, utcnow_iso
from core.db.jobs.saved_store import get_saved_job_ids
from core.db.ops import read_operation, write_operation
from core.db.paths import notes_collection
from core.db.realtime import Subscription, open_subscription
from core.errors import InvalidRecordError
from core.validation import validate_note_message


@write_operation
def add_job_note(store: DocumentStore, job_id: str, message: str) -> str:
    """Validate and append a note. Returns the note id."""
    result = validate_note_message(message)
    if not result.valid:
        raise InvalidRecordError({"message": result.error or "Invalid message"})
    return store.add(
        notes_collection(job_id),
        {"job_id": job_id, "message": result.sanitized, "created_at": utcnow_iso()},
    )


@read_operation(default=list)
def get_job_notes(store: DocumentStore, job_id: str) -> List[Dict]:
    """Notes for one job, newest first."""
    notes = store.query(notes_collection(job_id), order_by="created_at", descending=True)
    for note in notes:
        note.setdefault("job_id", job_id)
    return notes


@read_operation(default=list)
def get_notes_for_saved_jobs(store: DocumentStore, uid: str) -> List[Dict]:
    """Notes across every job the user saved, newest first."""
    notes: List[Dict] = []
    for job_id in get_saved_job_ids(store, uid):
        notes.extend(get_job_notes(store, job_id))
    return sorted(notes, key=lambda n: str(n.get("created_at") or ""), reverse=True)


def subscribe_to_job_notes(
    store: DocumentStore,
    job_id: str,
    callback: Optional[Callable[[List[Dict]], None]] = None,
) -> Subscription:
    """Live notes for one job (newest first)."""
    return open_subscription(
        store, notes_collection(job_id), lambda: get_job_notes(store, job_id), callback
    )


__all__ = [
    "add_job_note",
    "get_job_notes",
    "get_notes_for_saved_jobs",
    "subscribe_to_job_notes",
]
