import os

import pytest

from core.db.base import PostgresDocumentStore
from core.errors import NotFoundError

DATABASE_URL = os.environ.get("DATABASE_URL")


def test_requires_database_url():
    with pytest.raises(RuntimeError):
        PostgresDocumentStore(None)
    with pytest.raises(RuntimeError):
        PostgresDocumentStore("mysql://localhost/db")


@pytest.fixture
def pg_store():
    if not DATABASE_URL:
        pytest.skip("DATABASE_URL not set")
    store = PostgresDocumentStore(DATABASE_URL)
    store.ensure_schema()
    store.delete_collection("test_jobs")
    yield store
    store.delete_collection("test_jobs")


def test_postgres_round_trip(pg_store):
    pg_store.set("test_jobs", "a", {"published": True, "created_at": "2026-01-01"})
    pg_store.set("test_jobs", "b", {"published": False, "created_at": "2026-01-02"})
    pg_store.set("test_jobs", "c", {"published": True, "created_at": "2026-01-03"})

    assert pg_store.get("test_jobs", "a") == {"published": True, "created_at": "2026-01-01", "id": "a"}
    rows = pg_store.query("test_jobs", where={"published": True}, order_by="created_at", descending=True)
    assert [r["id"] for r in rows] == ["c", "a"]

    pg_store.update("test_jobs", "a", {"published": False})
    assert pg_store.get("test_jobs", "a")["published"] is False
    with pytest.raises(NotFoundError):
        pg_store.update("test_jobs", "missing", {"x": 1})

    pg_store.set("test_jobs", "a", {"fee": 10}, merge=True)
    assert pg_store.get("test_jobs", "a")["created_at"] == "2026-01-01"

    assert pg_store.delete_collection("test_jobs") == 3
