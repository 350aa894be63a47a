"""
In-process document store for local runs and tests.
"""
from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Mapping, Optional

from core.db.base import DocumentStore, matches_where, sort_documents
from core.errors import NotFoundError


class MemoryDocumentStore(DocumentStore):
    """Same contract as the Postgres store; data is deep-copied in and out."""

    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def get(self, collection: str, doc_id: str) -> Optional[Dict]:
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                return None
            return {**copy.deepcopy(doc), "id": doc_id}

    def set(self, collection: str, doc_id: str, data: Mapping[str, Any], merge: bool = False) -> None:
        payload = {k: copy.deepcopy(v) for k, v in data.items() if k != "id"}
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            if merge and doc_id in docs:
                docs[doc_id].update(payload)
            else:
                docs[doc_id] = payload
        self._changed(collection)

    def update(self, collection: str, doc_id: str, data: Mapping[str, Any]) -> None:
        payload = {k: copy.deepcopy(v) for k, v in data.items() if k != "id"}
        with self._lock:
            doc = self._collections.get(collection, {}).get(doc_id)
            if doc is None:
                raise NotFoundError(collection, doc_id)
            doc.update(payload)
        self._changed(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(doc_id, None)
        self._changed(collection)

    def delete_collection(self, collection: str) -> int:
        with self._lock:
            removed = len(self._collections.pop(collection, {}))
        self._changed(collection)
        return removed

    def query(
        self,
        collection: str,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> List[Dict]:
        with self._lock:
            docs = [
                {**copy.deepcopy(doc), "id": doc_id}
                for doc_id, doc in self._collections.get(collection, {}).items()
            ]
        docs = [doc for doc in docs if matches_where(doc, where)]
        return sort_documents(docs, order_by, descending)


__all__ = ["MemoryDocumentStore"]
