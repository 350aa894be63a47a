import types

from app import security
from app.auth_utils import SIGNED_OUT
from app.routes import auth

from conftest import PASSWORD, csrf_token, login, register


def _dummy_request():
    return types.SimpleNamespace(
        client=types.SimpleNamespace(host="127.0.0.1"),
        cookies={security.CSRF_COOKIE_NAME: "cookie-token"},
    )


def test_login_rate_limit(monkeypatch):
    # Force rate limit to deny after 1 attempt
    calls = {"count": 0}

    def fake_allow_request_with_remaining(key, limit=5, window_seconds=60):
        calls["count"] += 1
        allowed = calls["count"] < 2
        return allowed, (1 if allowed else 0)

    monkeypatch.setattr(auth, "allow_request_with_remaining", fake_allow_request_with_remaining)
    dummy_req = _dummy_request()

    # first call passes limit check but fails CSRF -> 403
    resp1 = auth.login(dummy_req, email="user@example.com", password="bad", csrf_token="wrong")
    # second call exceeds limit -> 429
    resp2 = auth.login(dummy_req, email="user@example.com", password="bad", csrf_token="wrong")
    assert resp1.status_code == 403
    assert resp2.status_code == 429


def test_signup_rate_limit(monkeypatch):
    calls = {"count": 0}

    def fake_allow_request(key, limit=5, window_seconds=60):
        calls["count"] += 1
        return calls["count"] < 2

    monkeypatch.setattr(auth, "allow_request", fake_allow_request)
    dummy_req = _dummy_request()

    resp1 = auth.signup(dummy_req, email="user@example.com", password=PASSWORD, password2=PASSWORD, csrf_token="wrong")
    resp2 = auth.signup(dummy_req, email="user@example.com", password=PASSWORD, password2=PASSWORD, csrf_token="wrong")
    assert resp1.status_code == 403
    assert resp2.status_code == 429


def test_logout_without_session(monkeypatch):
    monkeypatch.setattr(auth, "get_current_user", lambda req: SIGNED_OUT)

    class DummyReq:
        cookies = {}
        client = types.SimpleNamespace(host="127.0.0.1")

    resp = auth.logout(DummyReq())
    assert resp.status_code == 303


def test_sliding_window_counts_remaining():
    assert security.allow_request_with_remaining("k", limit=2, window_seconds=60) == (True, 1)
    assert security.allow_request_with_remaining("k", limit=2, window_seconds=60) == (True, 0)
    assert security.allow_request_with_remaining("k", limit=2, window_seconds=60) == (False, 0)
    assert security.allow_request("other", limit=2, window_seconds=60)


def test_post_without_csrf_is_rejected(client, store):
    register(store, "person@example.com")
    csrf_token(client)
    resp = client.post("/login", data={"email": "person@example.com", "password": PASSWORD})
    assert resp.status_code == 403
    assert "session_id" not in client.cookies


def test_login_errors_are_specific(client, store):
    register(store, "person@example.com")
    token = csrf_token(client)

    missing = client.post("/login", data={"email": "nobody@example.com", "password": PASSWORD, "csrf_token": token})
    assert "Account does not exist for that email." in missing.text

    wrong = client.post("/login", data={"email": "person@example.com", "password": "Wrong1234", "csrf_token": token})
    assert "Incorrect password. Please try again." in wrong.text
    assert "Attempts left: 8" in wrong.text


def test_login_is_rate_limited_per_client(client, store):
    token = csrf_token(client)
    data = {"email": "nobody@example.com", "password": PASSWORD, "csrf_token": token}
    for _ in range(10):
        assert client.post("/login", data=data).status_code == 200
    assert client.post("/login", data=data).status_code == 429


def test_login_redirects_by_profile_state(client, store):
    register(store, "person@example.com")
    register(store, "fresh@example.com", complete=False)

    token = csrf_token(client)
    resp = client.post(
        "/login",
        data={"email": "fresh@example.com", "password": PASSWORD, "csrf_token": token},
        follow_redirects=False,
    )
    assert resp.headers["location"] == "/profile"

    client.get("/logout")
    login(client, "person@example.com")
    assert client.get("/saved").status_code == 200


def test_logout_ends_session(client, store):
    register(store, "person@example.com")
    login(client, "person@example.com")
    client.get("/logout")
    resp = client.get("/saved", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"


def test_expired_session_is_signed_out(client, store):
    register(store, "person@example.com")
    login(client, "person@example.com")
    for session in store.query("sessions"):
        store.update("sessions", session["id"], {"expires_at": "2000-01-01T00:00:00+00:00"})
    resp = client.get("/more", follow_redirects=False)
    assert resp.headers["location"] == "/login"
    assert store.query("sessions") == []
