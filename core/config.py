"""
Environment-driven settings.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional


def _flag(value: str | None, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes")


def _split_emails(raw: str | None) -> FrozenSet[str]:
    return frozenset(e.strip().lower() for e in (raw or "").split(",") if e.strip())


@dataclass(frozen=True)
class Settings:
    store_backend: str = "postgres"
    database_url: Optional[str] = None
    admin_emails: FrozenSet[str] = field(default_factory=frozenset)
    secure_cookies: bool = False
    session_timeout_minutes: int = 30
    log_level: str = "INFO"
    seed_sample_jobs: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        backend = (env.get("STORE_BACKEND") or "postgres").strip().lower()
        if backend not in ("postgres", "memory"):
            raise RuntimeError("STORE_BACKEND must be 'postgres' or 'memory'")

        secure = _flag(env.get("COOKIE_SECURE")) or (env.get("PUBLIC_BASE_URL") or "").lower().startswith(
            "https://"
        )
        return cls(
            store_backend=backend,
            database_url=env.get("DATABASE_URL") or None,
            admin_emails=_split_emails(env.get("ADMIN_EMAILS")),
            secure_cookies=secure,
            session_timeout_minutes=int(env.get("SESSION_TIMEOUT_MINUTES") or 30),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            seed_sample_jobs=_flag(env.get("SEED_SAMPLE_JOBS")),
        )


__all__ = ["Settings"]
