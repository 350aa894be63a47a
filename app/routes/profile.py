from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth_utils import (
    get_current_user,
    get_profile_cache,
    get_settings,
    get_store,
    render_user_page,
)
from app.layout import esc, set_flash
from app.security import csrf_input, validate_csrf
from core.database import create_user_profile, update_user_profile
from core.errors import InvalidRecordError, StoreError

router = APIRouter()


def _profile_form(request: Request, values: dict, errors: dict, completing: bool) -> str:
    def field(name: str, label: str, maxlength: int) -> str:
        error = f'<div class="error">{esc(errors[name])}</div>' if name in errors else ""
        return f"""
        <label>{label}</label>
        <input type="text" name="{name}" maxlength="{maxlength}" value="{esc(values.get(name, ''))}" required />
        {error}
        """

    intro = (
        "Tell us where you are so we can show local and state jobs for you."
        if completing
        else "Update your contact details."
    )
    return f"""
    <div class="card form-card">
      <p class="muted">{intro}</p>
      <form method="post" action="/profile">
        {field("name", "Full name", 100)}
        {field("phone", "Mobile number", 15)}
        {field("district", "District", 50)}
        {field("state", "State", 50)}
        {csrf_input(request)}
        <button type="submit">{"Complete profile" if completing else "Save changes"}</button>
      </form>
    </div>
    """


@router.get("/profile", response_class=HTMLResponse)
def profile_form(request: Request):
    current = get_current_user(request)
    if not current.is_signed_in:
        return RedirectResponse(url="/login", status_code=303)

    values = current.profile or {}
    body = _profile_form(request, values, {}, completing=not current.is_complete)
    return render_user_page(request, current, "Your profile – JobNotify", body)


@router.post("/profile", response_class=HTMLResponse)
def save_profile(
    request: Request,
    name: str = Form("", max_length=200),
    phone: str = Form("", max_length=30),
    district: str = Form("", max_length=100),
    state: str = Form("", max_length=100),
    csrf_token: str = Form(""),
):
    current = get_current_user(request)
    if not current.is_signed_in:
        return RedirectResponse(url="/login", status_code=303)
    if not validate_csrf(request, csrf_token):
        return HTMLResponse("Invalid or missing CSRF token.", status_code=403)

    store = get_store(request)
    values = {"name": name, "phone": phone, "district": district, "state": state}
    completing = not current.is_complete
    try:
        if completing:
            create_user_profile(
                store,
                current.uid,
                {**values, "email": current.email},
                get_settings(request).admin_emails,
            )
        else:
            update_user_profile(store, current.uid, values)
    except InvalidRecordError as exc:
        body = _profile_form(request, values, exc.errors, completing)
        return render_user_page(request, current, "Your profile – JobNotify", body, status_code=400)
    except StoreError:
        response = RedirectResponse(url="/profile", status_code=303)
        set_flash(response, "Could not save your profile. Please try again.", level="error")
        return response

    get_profile_cache(request).invalidate(current.uid)
    response = RedirectResponse(url="/" if completing else "/more", status_code=303)
    set_flash(response, "Profile saved.", level="success")
    return response
