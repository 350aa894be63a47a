"""
Quick helper to inspect the documents table (DATABASE_URL required).

Usage:
  DATABASE_URL=... python scripts/db_shell.py                  # document counts per collection
  DATABASE_URL=... python scripts/db_shell.py jobs             # documents in one collection
"""
from __future__ import annotations

import json
import os
import sys

import psycopg
from psycopg.rows import dict_row


def resolve_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        raise SystemExit("DATABASE_URL must be set for Postgres usage")
    if url.startswith("postgres://") or url.startswith("postgresql://"):
        return url
    raise SystemExit("DATABASE_URL must start with postgres:// or postgresql://")


def main() -> None:
    collection = " ".join(sys.argv[1:]).strip()
    if collection:
        query = "SELECT id, data FROM documents WHERE collection = %s ORDER BY id"
        params: tuple = (collection,)
    else:
        query = "SELECT collection, COUNT(*) AS count FROM documents GROUP BY collection ORDER BY collection"
        params = ()

    try:
        with psycopg.connect(resolve_database_url(), row_factory=dict_row) as conn:
            cur = conn.cursor()
            cur.execute(query, params)
            for row in cur.fetchall():
                print(json.dumps(row, default=str))
    except psycopg.Error as exc:
        raise SystemExit(f"Error running query: {exc}") from exc


if __name__ == "__main__":
    main()
