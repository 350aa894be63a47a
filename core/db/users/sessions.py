"""
Session storage helpers.
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from core.db.base import DocumentStore
from core.db.ops import read_operation, write_operation
from core.db.paths import SESSIONS

SESSION_TIMEOUT_MINUTES = 30  # inactivity timeout


def _now() -> datetime:
    return datetime.now(timezone.utc)


@write_operation
def create_session(store: DocumentStore, uid: str, timeout_minutes: int = SESSION_TIMEOUT_MINUTES) -> str:
    """Create a new login session for the given uid and return the session token."""
    token = secrets.token_urlsafe(32)
    now = _now()
    store.set(
        SESSIONS,
        token,
        {
            "uid": uid,
            "created_at": now.isoformat(timespec="seconds"),
            "last_seen_at": now.isoformat(timespec="seconds"),
            "expires_at": (now + timedelta(minutes=timeout_minutes)).isoformat(timespec="seconds"),
        },
    )
    return token


@write_operation
def delete_session(store: DocumentStore, token: str) -> None:
    """Remove a session (logout)."""
    if not token:
        return
    store.delete(SESSIONS, token)


@read_operation(default=lambda: None)
def get_session(store: DocumentStore, token: str) -> Optional[Dict]:
    """
    Look up a session by token.
    - Returns None if it does not exist or has expired.
    - If expired, it is removed.
    """
    if not token:
        return None

    session = store.get(SESSIONS, token)
    if not session:
        return None

    try:
        expires_at = datetime.fromisoformat(session["expires_at"])
    except (KeyError, TypeError, ValueError):
        store.delete(SESSIONS, token)
        return None

    if expires_at < _now():
        store.delete(SESSIONS, token)
        return None

    return session


@write_operation
def touch_session(store: DocumentStore, token: str, timeout_minutes: int = SESSION_TIMEOUT_MINUTES) -> None:
    """Extend a session's expiry based on current time (sliding window)."""
    if not token:
        return

    now = _now()
    store.update(
        SESSIONS,
        token,
        {
            "last_seen_at": now.isoformat(timespec="seconds"),
            "expires_at": (now + timedelta(minutes=timeout_minutes)).isoformat(timespec="seconds"),
        },
    )


__all__ = [
    "SESSION_TIMEOUT_MINUTES",
    "create_session",
    "delete_session",
    "get_session",
    "touch_session",
]
