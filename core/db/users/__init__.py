"""
User-related storage helpers, split by responsibility.
"""
from core.db.users.auth import (
    create_account,
    get_account,
    get_account_by_email,
    hash_password,
    verify_password,
)
from core.db.users.user_store import (
    create_user_profile,
    get_user_profile,
    is_user_admin,
    list_users,
    promote_user_to_admin,
    update_user_profile,
)
from core.db.users.sessions import (
    create_session,
    delete_session,
    get_session,
    touch_session,
    SESSION_TIMEOUT_MINUTES,
)

__all__ = [
    "hash_password",
    "verify_password",
    "create_account",
    "get_account",
    "get_account_by_email",
    "create_user_profile",
    "get_user_profile",
    "is_user_admin",
    "list_users",
    "promote_user_to_admin",
    "update_user_profile",
    "create_session",
    "delete_session",
    "get_session",
    "touch_session",
    "SESSION_TIMEOUT_MINUTES",
]
