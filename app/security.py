"""
Lightweight CSRF + rate limit helpers.
"""
from __future__ import annotations

import hmac
import secrets
import threading
import time
from typing import Dict, List, Tuple

CSRF_COOKIE_NAME = "csrf_token"
CSRF_FORM_FIELD = "csrf_token"


def issue_csrf_token(existing: str | None = None) -> str:
    """Return a CSRF token (re-use existing if provided, else create a new one)."""
    return existing or secrets.token_urlsafe(16)


def attach_csrf_cookie(response, token: str, secure: bool = False) -> None:
    """
    Attach the CSRF token as a non-HTTPOnly cookie (double-submit pattern).
    secure should be True when the site is served over HTTPS.
    """
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=False,
        samesite="lax",
        secure=secure,
    )


def csrf_token_for(request) -> str:
    """Token for forms rendered in this request (set by the CSRF middleware)."""
    state = getattr(request, "state", None)
    token = getattr(state, "csrf_token", None) if state is not None else None
    return token or issue_csrf_token(request.cookies.get(CSRF_COOKIE_NAME))


def csrf_input(request) -> str:
    return f'<input type="hidden" name="{CSRF_FORM_FIELD}" value="{csrf_token_for(request)}" />'


def validate_csrf(request, form_token: str | None) -> bool:
    """Compare the submitted token with the cookie value using constant-time compare."""
    cookie_token = request.cookies.get(CSRF_COOKIE_NAME) or ""
    form_token = form_token or ""
    if not cookie_token or not form_token:
        return False
    return hmac.compare_digest(cookie_token, form_token)


# -------- Rate limiting (in-memory) --------
_rate_lock = threading.Lock()
_rate_state: Dict[str, List[float]] = {}


def allow_request(key: str, limit: int = 5, window_seconds: int = 60) -> bool:
    """
    Simple sliding-window rate limit stored in memory.
    Returns True if under limit, False otherwise.
    """
    allowed, _ = allow_request_with_remaining(key, limit=limit, window_seconds=window_seconds)
    return allowed


def allow_request_with_remaining(key: str, limit: int = 5, window_seconds: int = 60) -> Tuple[bool, int]:
    """
    Sliding-window rate limit with remaining-count feedback.
    Returns (allowed, remaining_after).
    """
    now = time.time()
    window_start = now - window_seconds
    with _rate_lock:
        history = [t for t in _rate_state.get(key, []) if t > window_start]
        if len(history) >= limit:
            _rate_state[key] = history
            return False, 0
        history.append(now)
        _rate_state[key] = history
        return True, max(0, limit - len(history))


def reset_rate_limits() -> None:
    with _rate_lock:
        _rate_state.clear()


def client_ip(request) -> str:
    return request.client.host if request is not None and request.client else "unknown"


__all__ = [
    "CSRF_COOKIE_NAME",
    "CSRF_FORM_FIELD",
    "issue_csrf_token",
    "attach_csrf_cookie",
    "csrf_token_for",
    "csrf_input",
    "validate_csrf",
    "allow_request",
    "allow_request_with_remaining",
    "reset_rate_limits",
    "client_ip",
]
