"""
Exception types shared by the store client and data-access helpers.
"""
from __future__ import annotations

from typing import Dict


class StoreError(RuntimeError):
    """The document store failed to serve a request."""


class NotFoundError(StoreError):
    """An update targeted a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"No document {doc_id!r} in {collection!r}")
        self.collection = collection
        self.doc_id = doc_id


class InvalidRecordError(ValueError):
    """A write was rejected by validation. `errors` maps field -> message."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()) or "Invalid record")
        self.errors = dict(errors)


class RoleAssignmentError(PermissionError):
    """A caller tried to set the `role` field through a profile write."""


class AuthorizationError(PermissionError):
    """The acting user lacks the role required for an operation."""


__all__ = [
    "StoreError",
    "NotFoundError",
    "InvalidRecordError",
    "RoleAssignmentError",
    "AuthorizationError",
]
