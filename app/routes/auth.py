import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth_utils import (
    clear_session_cookie,
    get_current_user,
    get_profile_cache,
    get_settings,
    get_store,
    render_user_page,
    set_session_cookie,
)
from app.layout import esc, set_flash
from app.security import (
    allow_request,
    allow_request_with_remaining,
    client_ip,
    csrf_input,
    validate_csrf,
)
from core.database import (
    create_account,
    create_session,
    delete_session,
    get_account_by_email,
    verify_password,
)
from core.errors import InvalidRecordError, StoreError
from core.validation import validate_email, validate_password

log = logging.getLogger("app.auth")

router = APIRouter()


def _login_form(request: Request, email: str = "", error: str = "", attempts_left: int | None = None) -> str:
    error_html = f'<p class="error">{esc(error)}</p>' if error else ""
    attempts_html = f"<p class='muted'>Attempts left: {attempts_left}</p>" if attempts_left is not None else ""
    return f"""
    <div class="card form-card">
      <p class="muted">Log in to see new postings and updates on jobs you saved.</p>
      {error_html}
      {attempts_html}
      <form method="post" action="/login">
        <label>Email</label>
        <input type="email" name="email" required maxlength="254" value="{esc(email)}" />

        <label>Password</label>
        <input type="password" name="password" required maxlength="25" />

        {csrf_input(request)}
        <button type="submit">Login</button>
      </form>
      <p class="muted">No account yet? <a href="/signup">Sign up</a></p>
    </div>
    """


def _signup_form(request: Request, email: str = "", errors: dict | None = None) -> str:
    errors = errors or {}

    def err(name: str) -> str:
        return f'<div class="error">{esc(errors[name])}</div>' if name in errors else ""

    return f"""
    <div class="card form-card">
      <p class="muted">Create an account, then complete your profile.</p>
      <form method="post" action="/signup">
        <label>Email</label>
        <input type="email" name="email" required maxlength="254" value="{esc(email)}" />
        {err("email")}

        <label>Password</label>
        <input type="password" name="password" required maxlength="25" />
        {err("password")}

        <label>Confirm password</label>
        <input type="password" name="password2" required maxlength="25" />
        {err("password2")}

        {csrf_input(request)}
        <button type="submit">Sign up</button>
      </form>
      <p class="muted">Already registered? <a href="/login">Log in</a></p>
    </div>
    """


def _after_login_url(request: Request, uid: str) -> str:
    profile = get_profile_cache(request).get(get_store(request), uid)
    return "/" if profile else "/profile"


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request):
    current = get_current_user(request)
    if current.is_signed_in:
        return RedirectResponse(url="/", status_code=303)
    return render_user_page(request, current, "Login – JobNotify", _login_form(request))


@router.post("/login", response_class=HTMLResponse)
def login(
    request: Request,
    email: str = Form(..., max_length=254),
    password: str = Form(..., max_length=25),
    csrf_token: str = Form(""),
):
    allowed, remaining = allow_request_with_remaining(f"login:{client_ip(request)}", limit=10, window_seconds=300)
    if not allowed:
        return HTMLResponse("Too many login attempts. Please try again later.", status_code=429)

    if not validate_csrf(request, csrf_token):
        return HTMLResponse("Invalid or missing CSRF token.", status_code=403)

    store = get_store(request)
    current = get_current_user(request)
    account = get_account_by_email(store, email)

    if not account:
        body = _login_form(request, email, "Account does not exist for that email.", remaining)
        return render_user_page(request, current, "Login – JobNotify", body)

    if not verify_password(password, account["password_hash"]):
        body = _login_form(request, email, "Incorrect password. Please try again.", remaining)
        return render_user_page(request, current, "Login – JobNotify", body)

    settings = get_settings(request)
    token = create_session(store, account["id"], settings.session_timeout_minutes)
    response = RedirectResponse(url=_after_login_url(request, account["id"]), status_code=303)
    set_session_cookie(response, token, settings)
    return response


@router.get("/signup", response_class=HTMLResponse)
def signup_form(request: Request):
    current = get_current_user(request)
    if current.is_signed_in:
        return RedirectResponse(url="/", status_code=303)
    return render_user_page(request, current, "Sign up – JobNotify", _signup_form(request))


@router.post("/signup", response_class=HTMLResponse)
def signup(
    request: Request,
    email: str = Form(..., max_length=254),
    password: str = Form(..., max_length=25),
    password2: str = Form(..., max_length=25),
    csrf_token: str = Form(""),
):
    if not allow_request(f"signup:{client_ip(request)}", limit=5, window_seconds=300):
        return HTMLResponse("Too many sign-up attempts. Please try again later.", status_code=429)

    if not validate_csrf(request, csrf_token):
        return HTMLResponse("Invalid or missing CSRF token.", status_code=403)

    current = get_current_user(request)
    errors = {}
    email_result = validate_email(email)
    if not email_result.valid:
        errors["email"] = email_result.error
    password_result = validate_password(password)
    if not password_result.valid:
        errors["password"] = password_result.error
    elif password != password2:
        errors["password2"] = "Passwords do not match"

    if errors:
        body = _signup_form(request, email, errors)
        return render_user_page(request, current, "Sign up – JobNotify", body, status_code=400)

    store = get_store(request)
    settings = get_settings(request)
    try:
        uid = create_account(store, email_result.sanitized, password)
        token = create_session(store, uid, settings.session_timeout_minutes)
    except InvalidRecordError as exc:
        body = _signup_form(request, email, exc.errors)
        return render_user_page(request, current, "Sign up – JobNotify", body, status_code=400)
    except StoreError:
        response = RedirectResponse(url="/signup", status_code=303)
        set_flash(response, "Could not create your account. Please try again.", level="error")
        return response

    log.info("Account created uid=%s", uid)
    response = RedirectResponse(url="/profile", status_code=303)
    set_session_cookie(response, token, settings)
    set_flash(response, "Account created. Complete your profile to continue.", level="success")
    return response


@router.get("/logout")
def logout(request: Request):
    current = get_current_user(request)
    if current.token:
        delete_session(get_store(request), current.token)
    response = RedirectResponse(url="/", status_code=303)
    clear_session_cookie(response)
    return response
