"""
Saved jobs: users/<uid>/savedJobs/<job_id>, existence means saved.
"""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from core.db.base import DocumentStore, utcnow_iso
from core.db.ops import read_operation, write_operation
from core.db.paths import JOBS, saved_jobs_collection
from core.db.realtime import Subscription, open_subscription


@read_operation(default=list)
def get_saved_job_ids(store: DocumentStore, uid: str) -> List[str]:
    if not uid:
        return []
    return store.list_ids(saved_jobs_collection(uid))


@write_operation
def toggle_saved_job(store: DocumentStore, uid: str, job_id: str) -> bool:
    """Flip membership and return the new state (True = now saved)."""
    collection = saved_jobs_collection(uid)
    if store.exists(collection, job_id):
        store.delete(collection, job_id)
        return False
    store.set(collection, job_id, {"saved_at": utcnow_iso()})
    return True


@read_operation(default=lambda: False)
def is_job_saved(store: DocumentStore, uid: str, job_id: str) -> bool:
    if not uid or not job_id:
        return False
    return store.exists(saved_jobs_collection(uid), job_id)


@read_operation(default=list)
def get_saved_jobs(store: DocumentStore, uid: str) -> List[Dict]:
    """Saved jobs that still exist, most recently saved first."""
    saved = store.query(saved_jobs_collection(uid), order_by="saved_at", descending=True)
    jobs = []
    for entry in saved:
        job = store.get(JOBS, entry["id"])
        if job is not None:
            jobs.append(job)
    return jobs


def subscribe_to_saved_jobs(
    store: DocumentStore,
    uid: str,
    callback: Optional[Callable[[List[str]], None]] = None,
) -> Subscription:
    """Live set of saved job ids for one user."""
    return open_subscription(
        store, saved_jobs_collection(uid), lambda: get_saved_job_ids(store, uid), callback
    )


__all__ = [
    "get_saved_job_ids",
    "toggle_saved_job",
    "is_job_saved",
    "get_saved_jobs",
    "subscribe_to_saved_jobs",
]
