from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from app.auth_utils import get_current_user, get_store, render_user_page, require_profile
from app.layout import esc
from core.database import get_saved_jobs

router = APIRouter()


@router.get("/saved", response_class=HTMLResponse)
def saved_jobs(request: Request):
    current = get_current_user(request)
    denied = require_profile(current)
    if denied:
        return denied

    jobs = get_saved_jobs(get_store(request), current.uid)
    rows_html = ""
    for job in jobs:
        rows_html += f"""
        <tr>
          <td><a href="/jobs/{esc(job['id'])}">{esc(job.get('title'))}</a></td>
          <td>{esc(job.get('location'))}</td>
          <td>{esc(job.get('apply_by'))}</td>
        </tr>
        """
    if not jobs:
        rows_html = '<tr><td colspan="3">No saved jobs yet. Save jobs to get their updates here.</td></tr>'

    body = f"""
    <div class="card">
      <h2 style="margin-top:0;">Saved jobs</h2>
      <table>
        <thead>
          <tr><th>Title</th><th>Location</th><th>Apply by</th></tr>
        </thead>
        <tbody>
          {rows_html}
        </tbody>
      </table>
    </div>
    """
    return render_user_page(request, current, "Saved – JobNotify", body)
