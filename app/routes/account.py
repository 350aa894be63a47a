from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from app.auth_utils import get_current_user, get_store, render_user_page, require_profile
from app.layout import esc
from core.database import get_user_bookings

router = APIRouter()


@router.get("/more", response_class=HTMLResponse)
def more(request: Request):
    current = get_current_user(request)
    denied = require_profile(current)
    if denied:
        return denied

    profile = current.profile or {}
    bookings = get_user_bookings(get_store(request), current.uid)
    rows_html = ""
    for booking in bookings:
        rows_html += f"""
        <tr>
          <td><a href="/jobs/{esc(booking.get('job_id'))}">{esc(booking.get('job_title'))}</a></td>
          <td>{esc(booking.get('status'))}</td>
          <td>{esc(str(booking.get('created_at', ''))[:10])}</td>
        </tr>
        """
    if not bookings:
        rows_html = '<tr><td colspan="3">No registration requests yet.</td></tr>'

    admin_html = '<p><a href="/admin">Open admin panel</a></p>' if current.is_admin else ""
    body = f"""
    <div class="card">
      <h2 style="margin-top:0;">{esc(profile.get('name'))}</h2>
      <p class="muted">{esc(current.email)} · {esc(profile.get('phone'))}</p>
      <p class="muted">{esc(profile.get('district'))}, {esc(profile.get('state'))}</p>
      <p><a href="/profile">Edit profile</a></p>
      {admin_html}
    </div>
    <div class="card">
      <h3 style="margin-top:0;">My registration requests</h3>
      <table>
        <thead>
          <tr><th>Job</th><th>Status</th><th>Requested</th></tr>
        </thead>
        <tbody>
          {rows_html}
        </tbody>
      </table>
    </div>
    <div class="card">
      <p><a href="/logout">Logout</a></p>
    </div>
    """
    return render_user_page(request, current, "More – JobNotify", body)
