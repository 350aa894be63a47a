"""
Insert a few sample published jobs into an empty store.
Usage:
  DATABASE_URL=... python scripts/seed_jobs.py
"""
from __future__ import annotations

from dotenv import load_dotenv

from core.config import Settings
from core.database import create_store, seed_sample_jobs


def main() -> None:
    load_dotenv(override=True)
    store = create_store(Settings.from_env())
    try:
        store.ensure_schema()
        inserted = seed_sample_jobs(store)
    finally:
        store.close()
    print(f"Inserted {inserted} sample job(s)." if inserted else "Jobs already present; nothing seeded.")


if __name__ == "__main__":
    main()
