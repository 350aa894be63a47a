import itertools
from datetime import date, timedelta

import pytest

from app import security
from core.config import Settings
from core.db.bookings import bookings_store
from core.db.jobs import jobs_store, notes_store, saved_store
from core.db.memory import MemoryDocumentStore
from core.db.notifications import read_store
from core.db.users import create_account, create_user_profile, user_store

PASSWORD = "Passw0rd1"
ADMIN_EMAIL = "admin@example.com"


def valid_job(**overrides):
    today = date.today()
    job = {
        "title": "Junior Assistant, District Office",
        "short": "Clerical post",
        "location": "Ernakulam",
        "location_type": "state",
        "district": "",
        "state": "Kerala",
        "sector": "government",
        "contract_type": "permanent",
        "fee": 500,
        "apply_by": (today + timedelta(days=30)).isoformat(),
        "exam_date": (today + timedelta(days=60)).isoformat(),
        "description": "<p>Graduates may apply.</p>",
        "registration_link": "https://example.org/apply",
    }
    job.update(overrides)
    return job


def profile_data(email, **overrides):
    data = {
        "name": "Asha Menon",
        "phone": "9876543210",
        "district": "Ernakulam",
        "state": "Kerala",
        "email": email,
    }
    data.update(overrides)
    return data


def register(store, email, complete=True, **profile_overrides):
    """Create an account (and by default a completed profile). Returns the uid."""
    uid = create_account(store, email, PASSWORD)
    if complete:
        create_user_profile(store, uid, profile_data(email, **profile_overrides), admin_emails={ADMIN_EMAIL})
    return uid


def csrf_token(client):
    client.get("/login")
    return client.cookies.get(security.CSRF_COOKIE_NAME)


def login(client, email, password=PASSWORD):
    token = csrf_token(client)
    resp = client.post(
        "/login",
        data={"email": email, "password": password, "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    return token


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    security.reset_rate_limits()
    yield
    security.reset_rate_limits()


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def settings():
    return Settings(store_backend="memory", admin_emails=frozenset({ADMIN_EMAIL}))


@pytest.fixture
def app(store, settings):
    from app.api import create_app

    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


@pytest.fixture
def clock(monkeypatch):
    """Strictly increasing timestamps so ordering by created_at is deterministic."""
    ticks = itertools.count(1)

    def fake_now():
        n = next(ticks)
        return f"2026-01-01T{n // 3600:02d}:{n // 60 % 60:02d}:{n % 60:02d}.000000+00:00"

    for module in (jobs_store, notes_store, saved_store, bookings_store, read_store, user_store):
        monkeypatch.setattr(module, "utcnow_iso", fake_now)
    return fake_now
