"""
Error policy for data-access helpers.

Reads that hit a StoreError log it and fall back to a safe default so pages
still render; writes log and re-raise so the caller can show a failure toast.
Validation and permission errors are never caught here.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from core.errors import StoreError

log = logging.getLogger("store.ops")


def read_operation(default: Callable[[], Any]):
    """
    Decorator for read helpers.

    Args:
        default: zero-arg factory for the fallback value (list, lambda: None, ...)
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except StoreError as exc:
                log.error("Error in %s: %s", func.__name__, exc)
                return default()

        return wrapper

    return decorator


def write_operation(func: Callable) -> Callable:
    """Decorator for write helpers: log store failures and re-raise."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreError as exc:
            log.error("Error in %s: %s", func.__name__, exc)
            raise

    return wrapper


__all__ = ["read_operation", "write_operation"]
