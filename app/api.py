import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from dotenv import load_dotenv

from app.auth_utils import SESSION_COOKIE_NAME, ProfileCache, get_settings, set_session_cookie
from app.routes import account, admin, auth, notifications, profile, public, saved
from app.security import CSRF_COOKIE_NAME, attach_csrf_cookie, issue_csrf_token
from core.config import Settings
from core.database import create_store, init_db
from core.db.base import DocumentStore

# Ensure .env values are loaded even if uvicorn is launched without `dotenv run`.
# Use override=True so editing `.env` (and restarting uvicorn) reliably takes effect even if
# older values exist in the environment from a previous shell/session.
load_dotenv(override=True)

log = logging.getLogger("app")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault(
        "Content-Security-Policy",
        "default-src 'self'; img-src 'self' https: data:; style-src 'self' 'unsafe-inline'; "
        "script-src 'self' 'unsafe-inline'; font-src 'self' data:; connect-src 'self';",
    )
    return response


async def ensure_csrf_cookie(request: Request, call_next):
    """Give every visitor a CSRF token; forms read it from request.state."""
    existing = request.cookies.get(CSRF_COOKIE_NAME)
    token = issue_csrf_token(existing)
    request.state.csrf_token = token
    response = await call_next(request)
    if existing != token:
        settings = getattr(request.app.state, "settings", None) or Settings()
        attach_csrf_cookie(response, token, secure=settings.secure_cookies)
    return response


async def refresh_session_cookie(request: Request, call_next):
    """Re-issue the session cookie for a session touched during this request."""
    response = await call_next(request)
    token = getattr(request.state, "session_token", None)
    if not token:
        return response
    # Login and logout already wrote the cookie.
    if any(h.startswith(f"{SESSION_COOKIE_NAME}=") for h in response.headers.getlist("set-cookie")):
        return response
    set_session_cookie(response, token, get_settings(request))
    return response


def create_app(settings: Settings | None = None, store: DocumentStore | None = None) -> FastAPI:
    """
    Build the application. When `store` is given it is used as is (tests);
    otherwise the store is created from settings at startup.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.store is None
        if owned:
            app.state.store = create_store(settings)
        init_db(app.state.store, seed=settings.seed_sample_jobs)
        log.info("Store ready backend=%s", settings.store_backend)
        yield
        if owned:
            app.state.store.close()
            app.state.store = None

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.profile_cache = ProfileCache()

    # Admin routes first so they take precedence over the user pages.
    app.include_router(admin.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(public.router)
    app.include_router(saved.router)
    app.include_router(notifications.router)
    app.include_router(account.router)

    app.middleware("http")(refresh_session_cookie)
    app.middleware("http")(ensure_csrf_cookie)
    app.middleware("http")(add_security_headers)
    return app


_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)
