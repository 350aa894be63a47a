from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth_utils import get_current_user, get_store, render_user_page, require_profile
from app.layout import esc, set_flash
from app.security import csrf_input, validate_csrf
from core.database import get_notification_feed, mark_notification_as_read
from core.errors import StoreError

router = APIRouter()


@router.get("/notifications", response_class=HTMLResponse)
def notifications(request: Request):
    current = get_current_user(request)
    denied = require_profile(current)
    if denied:
        return denied

    feed = get_notification_feed(get_store(request), current.uid)
    items_html = ""
    for note in feed:
        mark_form = ""
        if not note["read"]:
            mark_form = f"""
            <form method="post" action="/notifications/{esc(note['id'])}/read" class="inline">
              {csrf_input(request)}
              <button type="submit" class="secondary">Mark as read</button>
            </form>
            """
        items_html += f"""
        <div class="card {'unread' if not note['read'] else ''}">
          <p style="margin:0;"><a href="/jobs/{esc(note.get('job_id'))}">{esc(note.get('job_title') or 'Job')}</a></p>
          <p>{esc(note.get('message'))}</p>
          <p class="muted">{esc(str(note.get('created_at', ''))[:16].replace('T', ' '))}</p>
          {mark_form}
        </div>
        """
    if not feed:
        items_html = '<div class="card"><p class="muted">No notifications. Save jobs to receive their updates.</p></div>'

    mark_all = ""
    if any(not note["read"] for note in feed):
        mark_all = f"""
        <form method="post" action="/notifications/read-all">
          {csrf_input(request)}
          <button type="submit" class="secondary">Mark all as read</button>
        </form>
        """
    body = f"{mark_all}{items_html}"
    return render_user_page(request, current, "Notifications – JobNotify", body)


@router.post("/notifications/read-all")
def mark_all_read(request: Request, csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_profile(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return HTMLResponse("Invalid or missing CSRF token.", status_code=403)

    store = get_store(request)
    response = RedirectResponse(url="/notifications", status_code=303)
    try:
        for note in get_notification_feed(store, current.uid):
            if not note["read"]:
                mark_notification_as_read(store, current.uid, note["id"])
    except StoreError:
        set_flash(response, "Could not update notifications. Please try again.", level="error")
    return response


@router.post("/notifications/{note_id}/read")
def mark_read(note_id: str, request: Request, csrf_token: str = Form("")):
    current = get_current_user(request)
    denied = require_profile(current)
    if denied:
        return denied
    if not validate_csrf(request, csrf_token):
        return HTMLResponse("Invalid or missing CSRF token.", status_code=403)

    response = RedirectResponse(url="/notifications", status_code=303)
    try:
        mark_notification_as_read(get_store(request), current.uid, note_id)
    except StoreError:
        set_flash(response, "Could not update notifications. Please try again.", level="error")
    return response
