from typing import Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth_utils import get_current_user, get_store, render_user_page, require_profile
from app.layout import esc, set_flash
from app.security import csrf_input, validate_csrf
from core.database import (
    create_booking,
    get_job_by_id,
    get_job_notes,
    get_published_jobs,
    get_saved_job_ids,
    is_job_saved,
    toggle_saved_job,
)
from core.errors import InvalidRecordError, StoreError
from core.validation import CONTRACT_TYPES, LOCATION_TYPES, SECTORS

router = APIRouter()

DEFAULT_LOCATION_TAB = "state"


def job_matches_filters(
    job: Dict,
    search: str = "",
    location_tab: str = DEFAULT_LOCATION_TAB,
    sector: str = "all",
    contract_type: str = "all",
    profile: Optional[Dict] = None,
) -> bool:
    """
    Home page filter. Local jobs are narrowed to the user's district and state
    jobs to the user's state when a profile is known.
    """
    needle = (search or "").strip().lower()
    if needle:
        haystacks = (str(job.get("title") or "").lower(), str(job.get("location") or "").lower())
        if not any(needle in h for h in haystacks):
            return False

    if job.get("location_type") != location_tab:
        return False

    profile = profile or {}
    if location_tab == "local" and profile.get("district"):
        if str(job.get("district") or "").lower() != profile["district"].lower():
            return False
    if location_tab == "state" and profile.get("state"):
        if str(job.get("state") or "").lower() != profile["state"].lower():
            return False

    if sector != "all" and job.get("sector") != sector:
        return False
    if contract_type != "all" and job.get("contract_type") != contract_type:
        return False
    return True


def _fee_label(fee) -> str:
    return "Free" if not fee else f"₹{float(fee):,.2f}"


def _job_card(job: Dict, saved: bool) -> str:
    star = "⭐" if saved else ""
    exam = f" · Exam {esc(job['exam_date'])}" if job.get("exam_date") else ""
    return f"""
    <div class="card">
      <h3 style="margin:0;"><a href="/jobs/{esc(job['id'])}">{esc(job.get('title'))}</a> {star}</h3>
      <p class="muted">{esc(job.get('location'))} · {esc(job.get('sector'))} · {esc(job.get('contract_type'))}</p>
      <p>{esc(job.get('short'))}</p>
      <p class="muted">Apply by {esc(job.get('apply_by'))}{exam} · Fee {_fee_label(job.get('fee'))}</p>
    </div>
    """


def _select(name: str, current: str, choices) -> str:
    options = ['<option value="all">All</option>']
    for choice in choices:
        selected = " selected" if choice == current else ""
        options.append(f'<option value="{choice}"{selected}>{choice.title()}</option>')
    return f'<select name="{name}">{"".join(options)}</select>'


@router.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    q: str = "",
    tab: str = DEFAULT_LOCATION_TAB,
    sector: str = "all",
    contract: str = "all",
):
    current = get_current_user(request)
    store = get_store(request)

    tab = tab if tab in LOCATION_TYPES else DEFAULT_LOCATION_TAB
    sector = sector if sector in SECTORS else "all"
    contract = contract if contract in CONTRACT_TYPES else "all"

    jobs = [
        job
        for job in get_published_jobs(store)
        if job_matches_filters(job, q, tab, sector, contract, current.profile)
    ]
    saved_ids = set(get_saved_job_ids(store, current.uid)) if current.is_complete else set()

    filters = {"q": q, "sector": sector, "contract": contract}
    tabs_html = "".join(
        f'<a class="{"active" if t == tab else ""}" '
        f'href="/?{esc(urlencode({"tab": t, **filters}))}">{t.title()}</a>'
        for t in LOCATION_TYPES
    )
    cards_html = "".join(_job_card(job, job["id"] in saved_ids) for job in jobs)
    if not jobs:
        cards_html = """
        <div class="card">
          <p>No jobs found.</p>
          <p class="muted">Try adjusting your filters or search query.</p>
        </div>
        """

    body = f"""
    <div class="card">
      <form method="get" action="/">
        <input type="hidden" name="tab" value="{tab}" />
        <label>Search by title or location</label>
        <input type="search" name="q" value="{esc(q)}" maxlength="100" />
        <label>Sector</label>
        {_select("sector", sector, SECTORS)}
        <label>Contract type</label>
        {_select("contract", contract, CONTRACT_TYPES)}
        <button type="submit" class="secondary">Apply filters</button>
      </form>
    </div>
    <div class="tabs">{tabs_html}</div>
    {cards_html}
    """
    return render_user_page(request, current, "JobNotify", body)


@router.get("/jobs/{job_id}", response_class=HTMLResponse)
def job_detail(job_id: str, request: Request):
    current = get_current_user(request)
    store = get_store(request)
    job = get_job_by_id(store, job_id)
    if not job or (not job.get("published") and not current.is_admin):
        body = '<div class="card"><p>Job not found.</p><p><a href="/">Back to jobs</a></p></div>'
        return render_user_page(request, current, "Job not found – JobNotify", body, status_code=404)

    actions = ""
    if current.is_complete:
        saved = is_job_saved(store, current.uid, job_id)
        actions = f"""
        <form method="post" action="/jobs/{esc(job_id)}/save" class="inline">
          {csrf_input(request)}
          <button type="submit" class="secondary">{"Remove from saved" if saved else "Save job"}</button>
        </form>
        <form method="post" action="/jobs/{esc(job_id)}/book" class="inline">
          {csrf_input(request)}
          <button type="submit">Request assisted registration</button>
        </form>
        """
    elif not current.is_signed_in:
        actions = '<p class="muted"><a href="/login">Log in</a> to save this job or request registration help.</p>'

    link = job.get("registration_link")
    link_html = (
        f'<p><a href="{esc(link)}" target="_blank" rel="noopener noreferrer">Official registration page</a></p>'
        if link
        else ""
    )
    notes_html = "".join(
        f"<li>{esc(note.get('message'))} <span class='muted'>{esc(note.get('created_at', '')[:10])}</span></li>"
        for note in get_job_notes(store, job_id)
    )
    body = f"""
    <div class="card">
      <h2 style="margin-top:0;">{esc(job.get('title'))}</h2>
      <p class="muted">
        {esc(job.get('location'))} ({esc(job.get('location_type'))}) · {esc(job.get('sector'))}
        · {esc(job.get('contract_type'))}
      </p>
      <p>Apply by <strong>{esc(job.get('apply_by'))}</strong>
         {f"· Exam {esc(job.get('exam_date'))}" if job.get('exam_date') else ""}
         · Fee {_fee_label(job.get('fee'))}</p>
      <div>{job.get('description') or ''}</div>
      {link_html}
      {actions}
    </div>
    <div class="card">
      <h3 style="margin-top:0;">Updates</h3>
      <ul>{notes_html or "<li class='muted'>No updates yet.</li>"}</ul>
    </div>
    """
    return render_user_page(request, current, f"{job.get('title')} – JobNotify", body)


@router.post("/jobs/{job_id}/save")
def toggle_save(job_id: str, request: Request, csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_profile(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return HTMLResponse("Invalid or missing CSRF token.", status_code=403)

    store = get_store(request)
    response = RedirectResponse(url=f"/jobs/{job_id}", status_code=303)
    job = get_job_by_id(store, job_id)
    if not job or not job.get("published"):
        set_flash(response, "Job not found.", level="error")
        return response
    try:
        saved = toggle_saved_job(store, current.uid, job_id)
    except StoreError:
        set_flash(response, "Could not update saved jobs. Please try again.", level="error")
        return response
    set_flash(response, "Job saved." if saved else "Job removed from saved.", level="success")
    return response


@router.post("/jobs/{job_id}/book")
def request_booking(job_id: str, request: Request, csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_profile(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return HTMLResponse("Invalid or missing CSRF token.", status_code=403)

    store = get_store(request)
    job = get_job_by_id(store, job_id)
    if not job or not job.get("published"):
        response = RedirectResponse(url="/", status_code=303)
        set_flash(response, "Job not found.", level="error")
        return response

    profile = current.profile or {}
    try:
        create_booking(
            store,
            {
                "job_id": job_id,
                "job_title": job.get("title", ""),
                "user_id": current.uid,
                "user_name": profile.get("name", ""),
                "user_email": current.email,
                "fee": job.get("fee", 0),
            },
        )
    except (InvalidRecordError, StoreError):
        response = RedirectResponse(url=f"/jobs/{job_id}", status_code=303)
        set_flash(response, "Could not submit your request. Please try again.", level="error")
        return response

    response = RedirectResponse(url="/more", status_code=303)
    set_flash(response, "Registration request submitted. We will contact you soon.", level="success")
    return response
