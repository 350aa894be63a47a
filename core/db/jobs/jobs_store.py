"""
Job postings storage helpers.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from core.db.base import DocumentStore, utcnow_iso
from core.db.jobs.notes_store import add_job_note
from core.db.ops import read_operation, write_operation
from core.db.paths import JOBS, notes_collection
from core.db.realtime import Subscription, open_subscription
from core.errors import InvalidRecordError, NotFoundError
from core.validation import validate_job_data

log = logging.getLogger("store.jobs")


def _validated(data: Mapping[str, Any], today: date | None = None) -> Dict[str, Any]:
    result = validate_job_data(data, today=today)
    if not result.valid:
        raise InvalidRecordError(result.errors)
    return dict(result.sanitized_data or {})


@read_operation(default=list)
def get_all_jobs(store: DocumentStore) -> List[Dict]:
    """All jobs (drafts included), newest first. Admin view."""
    return store.query(JOBS, order_by="created_at", descending=True)


@read_operation(default=list)
def get_published_jobs(store: DocumentStore) -> List[Dict]:
    """Published jobs only, newest first."""
    return store.query(JOBS, where={"published": True}, order_by="created_at", descending=True)


@read_operation(default=lambda: None)
def get_job_by_id(store: DocumentStore, job_id: str) -> Optional[Dict]:
    if not job_id:
        return None
    return store.get(JOBS, job_id)


@write_operation
def create_job(
    store: DocumentStore,
    data: Mapping[str, Any],
    published: bool = False,
    today: date | None = None,
) -> str:
    """Validate and insert a job. Returns the new job id."""
    job = _validated(data, today=today)
    now = utcnow_iso()
    job.update({"published": bool(published), "created_at": now, "last_updated": now})
    job_id = store.add(JOBS, job)
    log.info("Job created id=%s published=%s", job_id, job["published"])
    return job_id


@write_operation
def update_job(
    store: DocumentStore,
    job_id: str,
    data: Mapping[str, Any],
    published: bool = False,
    today: date | None = None,
) -> None:
    """
    Validate and replace an existing job's fields.

    created_at is kept; last_updated is refreshed and a note announcing the
    change is added so users who saved the job are notified.
    """
    existing = store.get(JOBS, job_id)
    if existing is None:
        raise NotFoundError(JOBS, job_id)

    job = _validated(data, today=today)
    job.update(
        {
            "published": bool(published),
            "created_at": existing.get("created_at") or utcnow_iso(),
            "last_updated": utcnow_iso(),
        }
    )
    store.set(JOBS, job_id, job)
    add_job_note(store, job_id, f"Job details updated: {job['title']}")
    log.info("Job updated id=%s", job_id)


@write_operation
def set_job_published(store: DocumentStore, job_id: str, published: bool) -> None:
    store.update(JOBS, job_id, {"published": bool(published), "last_updated": utcnow_iso()})


@write_operation
def delete_job(store: DocumentStore, job_id: str) -> None:
    """Delete a job and its notes."""
    removed_notes = store.delete_collection(notes_collection(job_id))
    store.delete(JOBS, job_id)
    log.info("Job deleted id=%s notes_removed=%s", job_id, removed_notes)


def count_jobs_by_state(jobs: List[Dict]) -> Dict[str, int]:
    published = sum(1 for job in jobs if job.get("published"))
    return {"total": len(jobs), "published": published, "draft": len(jobs) - published}


def subscribe_to_jobs(
    store: DocumentStore,
    callback: Optional[Callable[[List[Dict]], None]] = None,
) -> Subscription:
    """Live list of published jobs (newest first)."""
    return open_subscription(store, JOBS, lambda: get_published_jobs(store), callback)


__all__ = [
    "get_all_jobs",
    "get_published_jobs",
    "get_job_by_id",
    "create_job",
    "update_job",
    "set_job_published",
    "delete_job",
    "count_jobs_by_state",
    "subscribe_to_jobs",
]
