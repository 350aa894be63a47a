"""
Document store client and data-access helpers.
"""
from core.db.base import DocumentStore, PostgresDocumentStore
from core.db.memory import MemoryDocumentStore
from core.db.schema import init_db

__all__ = ["DocumentStore", "PostgresDocumentStore", "MemoryDocumentStore", "init_db"]
