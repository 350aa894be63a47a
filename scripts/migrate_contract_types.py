"""
One-off migration rewriting legacy contract types (part-time -> temporary).
Usage:
  DATABASE_URL=... python scripts/migrate_contract_types.py
"""
from __future__ import annotations

from dotenv import load_dotenv

from core.config import Settings
from core.database import create_store, migrate_contract_types


def main() -> None:
    load_dotenv(override=True)
    store = create_store(Settings.from_env())
    try:
        store.ensure_schema()
        migrated = migrate_contract_types(store)
    finally:
        store.close()
    if migrated:
        print(f"Migrated {migrated} job(s).")
    else:
        print("No legacy contract types found; no migration needed.")


if __name__ == "__main__":
    main()
