"""
Document store client (collection paths -> JSON documents).

DocumentStore is the handle every data-access helper receives. It is built
once at startup (see core.database.create_store) and passed in explicitly.
PostgresDocumentStore keeps all documents in a single JSONB table.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from core.db.realtime import ChangeBus
from core.errors import NotFoundError, StoreError

log = logging.getLogger("store")


def utcnow_iso() -> str:
    """Server-side timestamp; fixed-width so ISO strings sort chronologically."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


def _convert_qmarks(sql: str) -> str:
    if "?" not in sql:
        return sql
    return sql.replace("?", "%s")


def matches_where(doc: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    if not where:
        return True
    return all(doc.get(key) == value for key, value in where.items())


def sort_documents(docs: List[Dict], order_by: str | None, descending: bool) -> List[Dict]:
    if not order_by:
        return docs
    # Documents missing the field sort as "" (oldest).
    return sorted(docs, key=lambda d: str(d.get(order_by) or ""), reverse=descending)


class DocumentStore:
    """
    Abstract store handle.

    Documents live in collections addressed by slash-separated paths such as
    "jobs" or "users/<uid>/savedJobs". Reads return plain dicts with the
    document id under "id". Every write publishes the collection path so
    subscriptions can refresh.
    """

    def __init__(self) -> None:
        self._bus = ChangeBus()

    # -------- backend primitives --------
    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        raise NotImplementedError

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], merge: bool = False) -> None:
        raise NotImplementedError

    def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        """Shallow-merge `data` into an existing document; NotFoundError if missing."""
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def delete_collection(self, collection: str) -> int:
        raise NotImplementedError

    def query(
        self,
        collection: str,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> List[Dict]:
        raise NotImplementedError

    def ensure_schema(self) -> None:
        """Create backing tables if the backend needs any."""

    def close(self) -> None:
        """Release backend resources."""

    # -------- shared helpers --------
    def add(self, collection: str, data: Mapping[str, Any]) -> str:
        """Insert under a store-assigned id and return it."""
        doc_id = new_document_id()
        self.set(collection, doc_id, data)
        return doc_id

    def exists(self, collection: str, doc_id: str) -> bool:
        return self.get(collection, doc_id) is not None

    def list_ids(self, collection: str) -> List[str]:
        return [doc["id"] for doc in self.query(collection)]

    def watch(self, collection: str, listener: Callable[[str], None]) -> Callable[[], None]:
        return self._bus.watch(collection, listener)

    def _changed(self, collection: str) -> None:
        self._bus.publish(collection)


class PostgresDocumentStore(DocumentStore):
    """All collections in one `documents` table, one connection per call."""

    def __init__(self, database_url: str | None):
        super().__init__()
        if not database_url:
            raise RuntimeError("DATABASE_URL must be set for Postgres usage")
        if not (database_url.startswith("postgres://") or database_url.startswith("postgresql://")):
            raise RuntimeError("DATABASE_URL must start with postgres:// or postgresql://")
        self.database_url = database_url

    def _connect(self):
        try:
            return psycopg.connect(self.database_url, row_factory=dict_row)
        except psycopg.Error as exc:
            raise StoreError(f"Could not connect to Postgres: {exc}") from exc

    def _execute(self, sql: str, params: Iterable = (), fetch: str | None = None) -> Any:
        conn = self._connect()
        try:
            with conn.cursor() as cur:
                cur.execute(_convert_qmarks(sql), tuple(params))
                if fetch == "one":
                    result = cur.fetchone()
                elif fetch == "all":
                    result = cur.fetchall()
                else:
                    result = cur.rowcount
            conn.commit()
            return result
        except psycopg.Error as exc:
            log.error("Postgres error: %s", exc)
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        self._execute(
            """
            CREATE TABLE IF NOT EXISTS documents(
                collection TEXT NOT NULL,
                id TEXT NOT NULL,
                data JSONB NOT NULL,
                PRIMARY KEY (collection, id)
            )
            """
        )
        self._execute("CREATE INDEX IF NOT EXISTS documents_data_idx ON documents USING GIN (data)")

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        row = self._execute(
            "SELECT id, data FROM documents WHERE collection = ? AND id = ?",
            (collection, doc_id),
            fetch="one",
        )
        if not row:
            return None
        return {**row["data"], "id": row["id"]}

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], merge: bool = False) -> None:
        payload = {k: v for k, v in data.items() if k != "id"}
        on_conflict = "documents.data || EXCLUDED.data" if merge else "EXCLUDED.data"
        self._execute(
            f"""
            INSERT INTO documents (collection, id, data)
            VALUES (?, ?, ?)
            ON CONFLICT (collection, id) DO UPDATE SET data = {on_conflict}
            """,
            (collection, doc_id, Jsonb(payload)),
        )
        self._changed(collection)

    def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        payload = {k: v for k, v in data.items() if k != "id"}
        updated = self._execute(
            "UPDATE documents SET data = data || ? WHERE collection = ? AND id = ?",
            (Jsonb(payload), collection, doc_id),
        )
        if not updated:
            raise NotFoundError(collection, doc_id)
        self._changed(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        self._execute("DELETE FROM documents WHERE collection = ? AND id = ?", (collection, doc_id))
        self._changed(collection)

    def delete_collection(self, collection: str) -> int:
        removed = self._execute("DELETE FROM documents WHERE collection = ?", (collection,))
        self._changed(collection)
        return int(removed or 0)

    def query(
        self,
        collection: str,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> List[Dict]:
        sql = "SELECT id, data FROM documents WHERE collection = ?"
        params: List[Any] = [collection]
        if where:
            sql += " AND data @> ?"
            params.append(Jsonb(dict(where)))
        if order_by:
            sql += f" ORDER BY data->>? {'DESC' if descending else 'ASC'}, id"
            params.append(order_by)
        rows = self._execute(sql, params, fetch="all")
        return [{**row["data"], "id": row["id"]} for row in rows]


__all__ = [
    "DocumentStore",
    "PostgresDocumentStore",
    "matches_where",
    "new_document_id",
    "sort_documents",
    "utcnow_iso",
]
