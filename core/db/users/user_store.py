"""
User profiles, role assignment and admin promotion.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from core.db.base import DocumentStore, utcnow_iso
from core.db.ops import read_operation, write_operation
from core.db.paths import USERS
from core.errors import AuthorizationError, InvalidRecordError, RoleAssignmentError
from core.validation import validate_profile_data

log = logging.getLogger("store.users")

ROLES = ("user", "admin")
PROFILE_FIELDS = ("name", "phone", "district", "state", "email")


def is_user_admin(email: str | None, admin_emails: Iterable[str]) -> bool:
    """Allow-list check used when a profile is first completed."""
    if not email:
        return False
    return email.strip().lower() in {e.strip().lower() for e in admin_emails}


@write_operation
def create_user_profile(
    store: DocumentStore,
    uid: str,
    data: Mapping[str, Any],
    admin_emails: Iterable[str] = (),
) -> Dict:
    """
    Complete a profile. The caller never chooses the role: it is "admin" when
    the email is on the allow-list and "user" otherwise.
    """
    if "role" in data:
        raise RoleAssignmentError("role cannot be set through a profile write")

    result = validate_profile_data(data)
    if not result.valid:
        raise InvalidRecordError(result.errors)

    now = utcnow_iso()
    profile = {
        "uid": uid,
        **result.sanitized_data,
        "role": "admin" if is_user_admin(result.sanitized_data["email"], admin_emails) else "user",
        "created_at": now,
        "updated_at": now,
    }
    store.set(USERS, uid, profile)
    log.info("Profile completed uid=%s role=%s", uid, profile["role"])
    return {**profile, "id": uid}


@read_operation(default=lambda: None)
def get_user_profile(store: DocumentStore, uid: str) -> Optional[Dict]:
    if not uid:
        return None
    return store.get(USERS, uid)


@read_operation(default=list)
def list_users(store: DocumentStore) -> List[Dict]:
    return store.query(USERS, order_by="created_at", descending=True)


@write_operation
def update_user_profile(store: DocumentStore, uid: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Partial update of the provided profile fields. `role` is always dropped."""
    if "role" in data:
        log.warning("Dropped role from profile update uid=%s", uid)
    changes = {k: v for k, v in data.items() if k in PROFILE_FIELDS}

    result = validate_profile_data(changes, partial=True)
    if not result.valid:
        raise InvalidRecordError(result.errors)

    payload = {**(result.sanitized_data or {}), "updated_at": utcnow_iso()}
    store.update(USERS, uid, payload)
    return payload


@write_operation
def promote_user_to_admin(store: DocumentStore, actor_uid: str, target_uid: str) -> None:
    """Only an existing admin may promote another user."""
    actor = store.get(USERS, actor_uid)
    if not actor or actor.get("role") != "admin":
        raise AuthorizationError("Only admins can promote users")

    store.update(USERS, target_uid, {"role": "admin", "updated_at": utcnow_iso()})
    log.info("User promoted to admin uid=%s by=%s", target_uid, actor_uid)


__all__ = [
    "ROLES",
    "PROFILE_FIELDS",
    "is_user_admin",
    "create_user_profile",
    "get_user_profile",
    "list_users",
    "update_user_profile",
    "promote_user_to_admin",
]
