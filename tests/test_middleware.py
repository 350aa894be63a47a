import asyncio

from starlette.requests import Request
from starlette.responses import Response

from app.api import add_security_headers
from app.auth_utils import SESSION_COOKIE_NAME
from app.security import CSRF_COOKIE_NAME

from conftest import login, register


def test_pages_carry_security_headers(client, store):
    register(store, "person@example.com")
    for path in ("/", "/login", "/signup"):
        resp = client.get(path)
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"
        csp = resp.headers["Content-Security-Policy"]
        assert "default-src 'self'" in csp
        assert "img-src 'self' https: data:" in csp


def test_redirects_carry_security_headers(client):
    resp = client.get("/saved", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_handler_csp_is_kept():
    async def call_next(_request):
        resp = Response()
        resp.headers["Content-Security-Policy"] = "default-src 'none'"
        return resp

    request = Request({"type": "http", "method": "GET", "path": "/", "headers": [], "query_string": b""})
    resp = asyncio.run(add_security_headers(request, call_next))
    assert resp.headers["Content-Security-Policy"] == "default-src 'none'"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_csrf_cookie_issued_once_and_rendered_in_forms(client):
    first = client.get("/login")
    token = first.cookies.get(CSRF_COOKIE_NAME)
    assert token
    assert f'name="csrf_token" value="{token}"' in first.text

    second = client.get("/signup")
    assert CSRF_COOKIE_NAME not in second.cookies
    assert f'value="{token}"' in second.text


def test_active_session_cookie_is_refreshed(client, store):
    register(store, "person@example.com")
    login(client, "person@example.com")
    token = client.cookies.get(SESSION_COOKIE_NAME)

    resp = client.get("/more")
    assert resp.status_code == 200
    assert resp.cookies.get(SESSION_COOKIE_NAME) == token
    refreshed = [h for h in resp.headers.get_list("set-cookie") if h.startswith(f"{SESSION_COOKIE_NAME}=")]
    assert len(refreshed) == 1
    assert "Max-Age=1800" in refreshed[0]


def test_signed_out_requests_get_no_session_cookie(client):
    resp = client.get("/")
    assert SESSION_COOKIE_NAME not in resp.cookies


def test_logout_is_not_undone_by_refresh(client, store):
    register(store, "person@example.com")
    login(client, "person@example.com")
    resp = client.get("/logout", follow_redirects=False)
    cookies = [h for h in resp.headers.get_list("set-cookie") if h.startswith(f"{SESSION_COOKIE_NAME}=")]
    assert len(cookies) == 1
    assert SESSION_COOKIE_NAME not in client.cookies
