import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth_utils import (
    get_current_user,
    get_profile_cache,
    get_store,
    render_user_page,
    require_admin,
)
from app.layout import esc, set_flash
from app.security import csrf_input, validate_csrf
from core.database import (
    BOOKING_STATUSES,
    add_job_note,
    count_bookings_by_status,
    count_jobs_by_state,
    create_job,
    delete_booking,
    delete_job,
    get_all_bookings,
    get_all_jobs,
    get_job_by_id,
    get_job_notes,
    list_users,
    promote_user_to_admin,
    set_job_published,
    update_booking_status,
    update_job,
)
from core.errors import AuthorizationError, InvalidRecordError, NotFoundError, StoreError
from core.validation import CONTRACT_TYPES, LOCATION_TYPES, SECTORS

log = logging.getLogger("app.admin")

router = APIRouter()

NEW_JOB_ID = "new"


def _format_dt(dt_str: str | None) -> str:
    """Render ISO timestamp as local human-readable string."""
    if not dt_str:
        return ""
    try:
        dt = datetime.fromisoformat(dt_str)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone().strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return dt_str or ""


def _csrf_failed() -> HTMLResponse:
    return HTMLResponse("Invalid or missing CSRF token.", status_code=403)


def _redirect(url: str, message: str | None = None, level: str = "success") -> RedirectResponse:
    response = RedirectResponse(url=url, status_code=303)
    if message:
        set_flash(response, message, level=level)
    return response


# -------- jobs --------


@router.get("/admin", response_class=HTMLResponse)
def admin_jobs(request: Request):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied

    jobs = get_all_jobs(get_store(request))
    counts = count_jobs_by_state(jobs)

    rows_html = ""
    for job in jobs:
        published = bool(job.get("published"))
        rows_html += f"""
        <tr>
          <td><a href="/admin/job/{esc(job['id'])}">{esc(job.get('title'))}</a></td>
          <td>{esc(job.get('location_type'))}</td>
          <td>{esc(job.get('apply_by'))}</td>
          <td>{"Published" if published else "Draft"}</td>
          <td>{_format_dt(job.get('last_updated'))}</td>
          <td>
            <form method="post" action="/admin/job/{esc(job['id'])}/publish" class="inline">
              {csrf_input(request)}
              <input type="hidden" name="published" value="{"0" if published else "1"}" />
              <button type="submit" class="secondary">{"Unpublish" if published else "Publish"}</button>
            </form>
            <form method="post" action="/admin/job/{esc(job['id'])}/delete" class="inline"
                  onsubmit="return confirm('Delete this job and its updates?');">
              {csrf_input(request)}
              <button type="submit" class="danger">Delete</button>
            </form>
          </td>
        </tr>
        """
    if not jobs:
        rows_html = '<tr><td colspan="6">No jobs yet.</td></tr>'

    body = f"""
    <div class="stats">
      <div class="stat"><div class="label">Total</div><div class="value">{counts['total']}</div></div>
      <div class="stat"><div class="label">Published</div><div class="value">{counts['published']}</div></div>
      <div class="stat"><div class="label">Drafts</div><div class="value">{counts['draft']}</div></div>
    </div>
    <div class="card">
      <p>
        <a href="/admin/job/{NEW_JOB_ID}">➕ New job</a> ·
        <a href="/admin/bookings">Bookings</a> ·
        <a href="/admin/users">Users</a>
      </p>
      <table>
        <thead>
          <tr>
            <th>Title</th>
            <th>Scope</th>
            <th>Apply by</th>
            <th>Status</th>
            <th>Last updated</th>
            <th>Actions</th>
          </tr>
        </thead>
        <tbody>
          {rows_html}
        </tbody>
      </table>
    </div>
    """
    return render_user_page(request, current, "Admin – JobNotify", body)


def _options(choices, selected: str) -> str:
    return "".join(
        f'<option value="{c}"{" selected" if c == selected else ""}>{c.title()}</option>' for c in choices
    )


def _job_form(request: Request, job_id: str, values: Dict, errors: Dict[str, str]) -> str:
    def err(name: str) -> str:
        return f'<div class="error">{esc(errors[name])}</div>' if name in errors else ""

    def text(name: str, label: str, input_type: str = "text") -> str:
        return f"""
        <label>{label}</label>
        <input type="{input_type}" name="{name}" value="{esc(values.get(name, ''))}" />
        {err(name)}
        """

    checked = " checked" if values.get("published") else ""
    return f"""
    <div class="card form-card">
      <form method="post" action="/admin/job/{esc(job_id)}">
        {text("title", "Title")}
        {text("short", "Short description")}
        {text("location", "Location")}
        <label>Location type</label>
        <select name="location_type">{_options(LOCATION_TYPES, values.get("location_type", ""))}</select>
        {err("location_type")}
        {text("district", "District (required for local jobs)")}
        {text("state", "State")}
        <label>Sector</label>
        <select name="sector">{_options(SECTORS, values.get("sector", ""))}</select>
        {err("sector")}
        <label>Contract type</label>
        <select name="contract_type">{_options(CONTRACT_TYPES, values.get("contract_type", ""))}</select>
        {err("contract_type")}
        {text("fee", "Fee", "number")}
        {text("apply_by", "Apply by", "date")}
        {text("exam_date", "Exam date (optional)", "date")}
        <label>Description (HTML allowed)</label>
        <textarea name="description" rows="10">{esc(values.get("description", ""))}</textarea>
        {err("description")}
        {text("registration_link", "Registration link (https)", "url")}
        <label><input type="checkbox" name="published" value="1"{checked} /> Published</label>
        {csrf_input(request)}
        <button type="submit">Save job</button>
      </form>
    </div>
    """


def _notes_panel(request: Request, job_id: str) -> str:
    notes = get_job_notes(get_store(request), job_id)
    items = "".join(
        f"<li>{esc(n.get('message'))} <span class='muted'>{_format_dt(n.get('created_at'))}</span></li>"
        for n in notes
    )
    return f"""
    <div class="card form-card">
      <h3 style="margin-top:0;">Updates for users who saved this job</h3>
      <form method="post" action="/admin/job/{esc(job_id)}/notes">
        <label>New update</label>
        <textarea name="message" rows="3" maxlength="500" required></textarea>
        {csrf_input(request)}
        <button type="submit">Add update</button>
      </form>
      <ul>{items or "<li class='muted'>No updates yet.</li>"}</ul>
    </div>
    """


@router.get("/admin/job/{job_id}", response_class=HTMLResponse)
def edit_job_form(job_id: str, request: Request):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied

    if job_id == NEW_JOB_ID:
        body = _job_form(request, job_id, {"fee": 0}, {})
        return render_user_page(request, current, "New job – JobNotify", body)

    job = get_job_by_id(get_store(request), job_id)
    if not job:
        return _redirect("/admin", "Job not found.", level="error")
    body = _job_form(request, job_id, job, {}) + _notes_panel(request, job_id)
    return render_user_page(request, current, "Edit job – JobNotify", body)


@router.post("/admin/job/{job_id}", response_class=HTMLResponse)
def save_job(
    job_id: str,
    request: Request,
    title: str = Form(""),
    short: str = Form(""),
    location: str = Form(""),
    location_type: str = Form(""),
    district: str = Form(""),
    state: str = Form(""),
    sector: str = Form(""),
    contract_type: str = Form(""),
    fee: str = Form(""),
    apply_by: str = Form(""),
    exam_date: str = Form(""),
    description: str = Form(""),
    registration_link: str = Form(""),
    published: Optional[str] = Form(None),
    csrf_token: str = Form(""),
):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return _csrf_failed()

    data = {
        "title": title,
        "short": short,
        "location": location,
        "location_type": location_type,
        "district": district,
        "state": state,
        "sector": sector,
        "contract_type": contract_type,
        "fee": fee,
        "apply_by": apply_by,
        "exam_date": exam_date,
        "description": description,
        "registration_link": registration_link,
    }
    published = bool(published)
    store = get_store(request)
    try:
        if job_id == NEW_JOB_ID:
            job_id = create_job(store, data, published=published)
            message = "Job created."
        else:
            update_job(store, job_id, data, published=published)
            message = "Job updated."
    except InvalidRecordError as exc:
        body = _job_form(request, job_id, {**data, "published": published}, exc.errors)
        return render_user_page(request, current, "Edit job – JobNotify", body, status_code=400)
    except NotFoundError:
        return _redirect("/admin", "Job not found.", level="error")
    except StoreError:
        return _redirect(f"/admin/job/{job_id}", "Could not save the job. Please try again.", level="error")

    log.info("Admin %s saved job %s", current.uid, job_id)
    return _redirect("/admin", message)


@router.post("/admin/job/{job_id}/publish")
def publish_job(job_id: str, request: Request, published: str = Form("1"), csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return _csrf_failed()

    try:
        set_job_published(get_store(request), job_id, published == "1")
    except NotFoundError:
        return _redirect("/admin", "Job not found.", level="error")
    except StoreError:
        return _redirect("/admin", "Could not update the job. Please try again.", level="error")
    return _redirect("/admin", "Job published." if published == "1" else "Job moved to drafts.")


@router.post("/admin/job/{job_id}/delete")
def remove_job(job_id: str, request: Request, csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return _csrf_failed()

    try:
        delete_job(get_store(request), job_id)
    except StoreError:
        return _redirect("/admin", "Could not delete the job. Please try again.", level="error")
    return _redirect("/admin", "Job deleted.")


@router.post("/admin/job/{job_id}/notes")
def add_note(job_id: str, request: Request, message: str = Form("", max_length=2000), csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return _csrf_failed()

    store = get_store(request)
    if not get_job_by_id(store, job_id):
        return _redirect("/admin", "Job not found.", level="error")
    try:
        add_job_note(store, job_id, message)
    except InvalidRecordError as exc:
        return _redirect(f"/admin/job/{job_id}", exc.errors.get("message", "Invalid update"), level="error")
    except StoreError:
        return _redirect(f"/admin/job/{job_id}", "Could not add the update. Please try again.", level="error")
    return _redirect(f"/admin/job/{job_id}", "Update added.")


# -------- bookings --------


@router.get("/admin/bookings", response_class=HTMLResponse)
def admin_bookings(request: Request, status: Optional[str] = None):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied

    status = status if status in BOOKING_STATUSES else None
    store = get_store(request)
    bookings = get_all_bookings(store, status)
    counts = count_bookings_by_status(store)

    tabs_html = f'<a class="{"" if status else "active"}" href="/admin/bookings">All ({counts["all"]})</a>'
    for name in BOOKING_STATUSES:
        tabs_html += (
            f'<a class="{"active" if name == status else ""}" '
            f'href="/admin/bookings?status={name}">{name.title()} ({counts.get(name, 0)})</a>'
        )

    rows_html = ""
    for booking in bookings:
        rows_html += f"""
        <tr>
          <td><a href="/jobs/{esc(booking.get('job_id'))}">{esc(booking.get('job_title'))}</a></td>
          <td>{esc(booking.get('user_name'))}<br /><span class="muted">{esc(booking.get('user_email'))}</span></td>
          <td>{esc(booking.get('fee'))}</td>
          <td>{_format_dt(booking.get('created_at'))}</td>
          <td>
            <form method="post" action="/admin/bookings/{esc(booking['id'])}/status" class="inline">
              <select name="status">{_options(BOOKING_STATUSES, booking.get("status", ""))}</select>
              {csrf_input(request)}
              <button type="submit" class="secondary">Update</button>
            </form>
            <form method="post" action="/admin/bookings/{esc(booking['id'])}/delete" class="inline"
                  onsubmit="return confirm('Delete this booking?');">
              {csrf_input(request)}
              <button type="submit" class="danger">Delete</button>
            </form>
          </td>
        </tr>
        """
    if not bookings:
        rows_html = '<tr><td colspan="5">No bookings.</td></tr>'

    body = f"""
    <div class="tabs">{tabs_html}</div>
    <div class="card">
      <table>
        <thead>
          <tr><th>Job</th><th>User</th><th>Fee</th><th>Requested</th><th>Status</th></tr>
        </thead>
        <tbody>
          {rows_html}
        </tbody>
      </table>
    </div>
    """
    return render_user_page(request, current, "Bookings – JobNotify", body)


@router.post("/admin/bookings/{booking_id}/status")
def change_booking_status(
    booking_id: str,
    request: Request,
    status: str = Form(...),
    csrf_token: str = Form(""),
):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return _csrf_failed()

    try:
        update_booking_status(get_store(request), booking_id, status)
    except InvalidRecordError as exc:
        return _redirect("/admin/bookings", exc.errors.get("status", "Invalid status"), level="error")
    except NotFoundError:
        return _redirect("/admin/bookings", "Booking not found.", level="error")
    except StoreError:
        return _redirect("/admin/bookings", "Could not update the booking. Please try again.", level="error")
    return _redirect("/admin/bookings", "Booking updated.")


@router.post("/admin/bookings/{booking_id}/delete")
def remove_booking(booking_id: str, request: Request, csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return _csrf_failed()

    try:
        delete_booking(get_store(request), booking_id)
    except StoreError:
        return _redirect("/admin/bookings", "Could not delete the booking. Please try again.", level="error")
    return _redirect("/admin/bookings", "Booking deleted.")


# -------- users --------


@router.get("/admin/users", response_class=HTMLResponse)
def admin_users(request: Request):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied

    users = list_users(get_store(request))
    rows_html = ""
    for user in users:
        action = ""
        if user.get("role") != "admin":
            action = f"""
            <form method="post" action="/admin/users/{esc(user['id'])}/promote" class="inline"
                  onsubmit="return confirm('Make this user an admin?');">
              {csrf_input(request)}
              <button type="submit" class="secondary">Make admin</button>
            </form>
            """
        rows_html += f"""
        <tr>
          <td>{esc(user.get('name'))}</td>
          <td>{esc(user.get('email'))}</td>
          <td>{esc(user.get('district'))}, {esc(user.get('state'))}</td>
          <td>{esc(user.get('role'))}</td>
          <td>{action}</td>
        </tr>
        """
    if not users:
        rows_html = '<tr><td colspan="5">No users yet.</td></tr>'

    body = f"""
    <div class="card">
      <table>
        <thead>
          <tr><th>Name</th><th>Email</th><th>Location</th><th>Role</th><th></th></tr>
        </thead>
        <tbody>
          {rows_html}
        </tbody>
      </table>
    </div>
    """
    return render_user_page(request, current, "Users – JobNotify", body)


@router.post("/admin/users/{uid}/promote")
def promote_user(uid: str, request: Request, csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_admin(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return _csrf_failed()

    try:
        promote_user_to_admin(get_store(request), current.uid, uid)
    except AuthorizationError:
        return _redirect("/", "Access denied. Admins only.", level="warning")
    except NotFoundError:
        return _redirect("/admin/users", "User not found.", level="error")
    except StoreError:
        return _redirect("/admin/users", "Could not promote the user. Please try again.", level="error")

    get_profile_cache(request).invalidate(uid)
    log.info("Admin %s promoted %s", current.uid, uid)
    return _redirect("/admin/users", "User promoted to admin.")
