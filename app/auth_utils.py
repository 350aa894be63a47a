"""
Helpers for session cookies, current-user lookup and admin gating.
"""
from __future__ import annotations

import enum
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from fastapi import Request
from fastapi.responses import RedirectResponse, Response

from app.layout import read_flash, render_page, set_flash
from core.config import Settings
from core.database import (
    delete_session,
    get_account,
    get_session,
    get_unread_notification_count,
    get_user_profile,
    touch_session,
)
from core.db.base import DocumentStore

SESSION_COOKIE_NAME = "session_id"


class SessionState(str, enum.Enum):
    SIGNED_OUT = "signed_out"
    INCOMPLETE_PROFILE = "incomplete_profile"
    COMPLETE = "complete"


@dataclass
class CurrentUser:
    state: SessionState = SessionState.SIGNED_OUT
    account: Optional[Dict] = None
    profile: Optional[Dict] = None
    token: Optional[str] = None

    @property
    def uid(self) -> Optional[str]:
        return self.account["id"] if self.account else None

    @property
    def email(self) -> str:
        if self.profile and self.profile.get("email"):
            return self.profile["email"]
        return self.account.get("email", "") if self.account else ""

    @property
    def is_signed_in(self) -> bool:
        return self.state is not SessionState.SIGNED_OUT

    @property
    def is_complete(self) -> bool:
        return self.state is SessionState.COMPLETE

    @property
    def is_admin(self) -> bool:
        return bool(self.profile and self.profile.get("role") == "admin")


SIGNED_OUT = CurrentUser()


class ProfileCache:
    """Short-lived profile cache keyed by uid. Missing profiles are not cached."""

    def __init__(self, ttl_seconds: float = 60.0):
        self.ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._entries: Dict[str, Tuple[float, Dict]] = {}

    def get(self, store: DocumentStore, uid: str) -> Optional[Dict]:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(uid)
            if entry and entry[0] > now:
                return dict(entry[1])

        profile = get_user_profile(store, uid)
        if profile is not None:
            with self._lock:
                self._entries[uid] = (now + self.ttl_seconds, dict(profile))
        return profile

    def invalidate(self, uid: str | None = None) -> None:
        with self._lock:
            if uid is None:
                self._entries.clear()
            else:
                self._entries.pop(uid, None)


def get_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Document store is not initialised")
    return store


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or Settings()


def get_profile_cache(request: Request) -> ProfileCache:
    return request.app.state.profile_cache


def get_current_user(request: Request) -> CurrentUser:
    """
    Read the session cookie and resolve it to a CurrentUser.
    Refreshes the inactivity timeout when the session is valid.
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        return SIGNED_OUT

    store = get_store(request)
    session = get_session(store, token)
    if not session:
        return CurrentUser(token=token)

    account = get_account(store, session["uid"])
    if not account:
        delete_session(store, token)
        return CurrentUser(token=token)

    touch_session(store, token, get_settings(request).session_timeout_minutes)
    # The cookie is re-issued on the way out so its expiry slides with the session.
    request.state.session_token = token
    profile = get_profile_cache(request).get(store, account["id"])
    state = SessionState.COMPLETE if profile else SessionState.INCOMPLETE_PROFILE
    return CurrentUser(state=state, account=account, profile=profile, token=token)


def require_admin(current: CurrentUser) -> Optional[RedirectResponse]:
    """
    Gate for every admin page and action. Returns None when allowed, else a
    redirect carrying a warning toast.
    """
    if not current.is_signed_in:
        response = RedirectResponse(url="/login", status_code=303)
        set_flash(response, "Please sign in to continue.", level="warning")
        return response
    if not current.is_admin:
        response = RedirectResponse(url="/", status_code=303)
        set_flash(response, "Access denied. Admins only.", level="warning")
        return response
    return None


def require_profile(current: CurrentUser) -> Optional[RedirectResponse]:
    """Gate for pages that need a signed-in user with a completed profile."""
    if not current.is_signed_in:
        response = RedirectResponse(url="/login", status_code=303)
        set_flash(response, "Please sign in to continue.", level="warning")
        return response
    if not current.is_complete:
        response = RedirectResponse(url="/profile", status_code=303)
        set_flash(response, "Complete your profile to continue.", level="info")
        return response
    return None


def render_user_page(request: Request, current: CurrentUser, title: str, body: str, status_code: int = 200):
    """render_page with the pending toast and the unread badge for `current`."""
    unread = 0
    if current.is_complete:
        unread = get_unread_notification_count(get_store(request), current.uid)
    response = render_page(title, body, user=current, unread_count=unread, flash=read_flash(request))
    response.status_code = status_code
    return response


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=settings.session_timeout_minutes * 60,
        samesite="lax",
        secure=settings.secure_cookies,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME)


__all__ = [
    "SESSION_COOKIE_NAME",
    "SessionState",
    "CurrentUser",
    "ProfileCache",
    "get_store",
    "get_settings",
    "get_profile_cache",
    "get_current_user",
    "require_admin",
    "require_profile",
    "render_user_page",
    "set_session_cookie",
    "clear_session_cookie",
]
