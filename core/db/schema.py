"""
Schema, seed data and migration helpers for the document store.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List

from core.db.base import DocumentStore, utcnow_iso
from core.db.jobs.jobs_store import create_job
from core.db.paths import JOBS
from core.validation import LEGACY_CONTRACT_TYPES

log = logging.getLogger("store.schema")


def _sample_jobs(today: date) -> List[Dict]:
    """A few postings with dates relative to `today` so they always validate."""
    return [
        {
            "title": "Junior Assistant, District Collectorate",
            "short": "Clerical post at the district office.",
            "location": "Ernakulam",
            "location_type": "local",
            "district": "Ernakulam",
            "state": "Kerala",
            "sector": "government",
            "contract_type": "permanent",
            "fee": 500,
            "apply_by": (today + timedelta(days=30)).isoformat(),
            "exam_date": (today + timedelta(days=75)).isoformat(),
            "description": "<p>Graduates with typing skills may apply.</p><ul><li>Age 18-36</li></ul>",
            "registration_link": "https://example.org/apply/junior-assistant",
        },
        {
            "title": "Staff Nurse, State Health Mission",
            "short": "Contract nursing posts across the state.",
            "location": "Thiruvananthapuram",
            "location_type": "state",
            "district": "",
            "state": "Kerala",
            "sector": "government",
            "contract_type": "contract",
            "fee": 250,
            "apply_by": (today + timedelta(days=20)).isoformat(),
            "exam_date": "",
            "description": "<p>BSc Nursing with state council registration.</p>",
            "registration_link": "https://example.org/apply/staff-nurse",
        },
        {
            "title": "Graduate Trainee, Private Bank",
            "short": "Nationwide trainee intake.",
            "location": "Mumbai",
            "location_type": "national",
            "district": "",
            "state": "Maharashtra",
            "sector": "private",
            "contract_type": "temporary",
            "fee": 0,
            "apply_by": (today + timedelta(days=14)).isoformat(),
            "exam_date": "",
            "description": "<p>Six month paid traineeship.</p>",
            "registration_link": "",
        },
    ]


def seed_sample_jobs(store: DocumentStore, today: date | None = None) -> int:
    """Insert sample published jobs when the jobs collection is empty (idempotent)."""
    if store.query(JOBS):
        return 0
    day = today or date.today()
    jobs = _sample_jobs(day)
    for job in jobs:
        create_job(store, job, published=True, today=day)
    log.info("Seeded %s sample jobs", len(jobs))
    return len(jobs)


def migrate_contract_types(store: DocumentStore) -> int:
    """Rewrite legacy contract types (e.g. part-time) to their canonical value."""
    migrated = 0
    for job in store.query(JOBS):
        current = str(job.get("contract_type") or "").strip().lower()
        replacement = LEGACY_CONTRACT_TYPES.get(current)
        if replacement:
            store.update(JOBS, job["id"], {"contract_type": replacement, "last_updated": utcnow_iso()})
            migrated += 1
    if migrated:
        log.info("Migrated contract_type on %s jobs", migrated)
    return migrated


def init_db(store: DocumentStore, seed: bool = False) -> None:
    """Create backing tables, run migrations and optionally seed sample jobs."""
    store.ensure_schema()
    migrate_contract_types(store)
    if seed:
        seed_sample_jobs(store)


__all__ = [
    "init_db",
    "seed_sample_jobs",
    "migrate_contract_types",
]
