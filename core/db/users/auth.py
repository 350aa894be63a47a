"""
Sign-in accounts: bcrypt hashing and the `accounts` collection.

An account exists from sign-up; the user profile (users/<uid>) only appears
once the profile is completed.
"""
from __future__ import annotations

from typing import Dict, Optional

import bcrypt

from core.db.base import DocumentStore, new_document_id, utcnow_iso
from core.db.ops import read_operation, write_operation
from core.db.paths import ACCOUNTS
from core.errors import InvalidRecordError


def hash_password(raw_password: str) -> str:
    return bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(raw_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


@read_operation(default=lambda: None)
def get_account(store: DocumentStore, uid: str) -> Optional[Dict]:
    return store.get(ACCOUNTS, uid)


@read_operation(default=lambda: None)
def get_account_by_email(store: DocumentStore, email: str) -> Optional[Dict]:
    matches = store.query(ACCOUNTS, where={"email": (email or "").strip().lower()})
    return matches[0] if matches else None


@write_operation
def create_account(store: DocumentStore, email: str, raw_password: str) -> str:
    """Create credentials for a new email and return the uid."""
    email_normalized = (email or "").strip().lower()
    if get_account_by_email(store, email_normalized):
        raise InvalidRecordError({"email": "An account already exists for that email"})

    uid = new_document_id()
    store.set(
        ACCOUNTS,
        uid,
        {
            "uid": uid,
            "email": email_normalized,
            "password_hash": hash_password(raw_password),
            "created_at": utcnow_iso(),
        },
    )
    return uid


__all__ = [
    "hash_password",
    "verify_password",
    "get_account",
    "get_account_by_email",
    "create_account",
]
