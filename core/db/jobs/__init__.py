"""
Jobs, saved jobs and job notes storage re-exports.
"""
from core.db.jobs.jobs_store import (
    count_jobs_by_state,
    create_job,
    delete_job,
    get_all_jobs,
    get_job_by_id,
    get_published_jobs,
    set_job_published,
    subscribe_to_jobs,
    update_job,
)
from core.db.jobs.notes_store import (
    add_job_note,
    get_job_notes,
    get_notes_for_saved_jobs,
    subscribe_to_job_notes,
)
from core.db.jobs.saved_store import (
    get_saved_job_ids,
    get_saved_jobs,
    is_job_saved,
    subscribe_to_saved_jobs,
    toggle_saved_job,
)

__all__ = [
    "count_jobs_by_state",
    "create_job",
    "delete_job",
    "get_all_jobs",
    "get_job_by_id",
    "get_published_jobs",
    "set_job_published",
    "subscribe_to_jobs",
    "update_job",
    "add_job_note",
    "get_job_notes",
    "get_notes_for_saved_jobs",
    "subscribe_to_job_notes",
    "get_saved_job_ids",
    "get_saved_jobs",
    "is_job_saved",
    "subscribe_to_saved_jobs",
    "toggle_saved_job",
]
