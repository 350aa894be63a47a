"""
Shared HTML layout, styling and toast helpers.
"""
import base64
import html
import json

from fastapi.responses import HTMLResponse

FLASH_COOKIE_NAME = "flash"
_TOAST_COLOURS = {
    "info": "#38bdf8",
    "success": "#22c55e",
    "warning": "#fbbf24",
    "error": "#f97373",
}


def set_flash(response, message: str, level: str = "info") -> None:
    """Queue a toast for the next rendered page."""
    payload = json.dumps({"message": message, "level": level}).encode("utf-8")
    response.set_cookie(
        key=FLASH_COOKIE_NAME,
        value=base64.urlsafe_b64encode(payload).decode("ascii"),
        httponly=True,
        samesite="lax",
        max_age=60,
    )


def read_flash(request) -> dict | None:
    raw = request.cookies.get(FLASH_COOKIE_NAME) if request is not None else None
    if not raw:
        return None
    try:
        data = json.loads(base64.urlsafe_b64decode(raw.encode("ascii")))
    except (ValueError, TypeError):
        return None
    if not isinstance(data, dict) or not data.get("message"):
        return None
    return data


def esc(value) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def _toast_html(flash: dict | None) -> str:
    if not flash:
        return ""
    level = flash.get("level") if flash.get("level") in _TOAST_COLOURS else "info"
    return (
        f'<div class="toast" role="status" style="border-color:{_TOAST_COLOURS[level]};">'
        f"{esc(flash.get('message'))}</div>"
    )


def render_page(
    title: str,
    body: str,
    user=None,
    unread_count: int = 0,
    flash: dict | None = None,
) -> HTMLResponse:
    """
    Shared layout: dark background, nav bar, toast and optional 'signed in as' line.
    `user` is an app.auth_utils.CurrentUser (or None when signed out).
    """
    signed_in = bool(user and user.is_signed_in)
    if signed_in:
        badge = f' <span class="badge">{unread_count}</span>' if unread_count else ""
        user_links = f"""
          <a href="/saved">⭐ Saved</a>
          <a href="/notifications">🔔 Notifications{badge}</a>
          <a href="/more">☰ More</a>
        """
        auth_links = '<a href="/logout">Logout</a>'
        signed_in_text = f"Signed in as <strong>{esc(user.email)}</strong>"
    else:
        user_links = ""
        auth_links = '<a href="/login">Login</a> <a href="/signup">Sign up</a>'
        signed_in_text = "Not signed in"

    admin_links = ""
    if user is not None and user.is_admin:
        admin_links = """
              <a href="/admin">🛠 Admin</a>
        """

    html_doc = f"""
    <!DOCTYPE html>
    <html>
      <head>
        <meta charset="utf-8" />
        <meta name="viewport" content="width=device-width, initial-scale=1" />
        <title>{esc(title)}</title>
        <style>
          :root {{ color-scheme: dark; }}
          * {{ box-sizing: border-box; }}
          body {{
            font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
            margin: 0;
            background: #020617;
            color: #e5e7eb;
          }}
          .page {{ max-width: 960px; margin: 0 auto; padding: 1.5rem 1rem 3rem; }}
          header {{
            display: flex;
            flex-wrap: wrap;
            justify-content: space-between;
            align-items: center;
            gap: 0.75rem;
            padding: 0.75rem 1rem;
            background: linear-gradient(90deg, rgba(56,189,248,0.08), rgba(34,197,94,0.08));
            border: 1px solid #1f2937;
            border-radius: 0.75rem;
          }}
          header h1 {{ font-size: 1.3rem; margin: 0; }}
          nav {{ display: flex; flex-wrap: wrap; gap: 0.5rem; }}
          nav a {{
            text-decoration: none;
            color: #e5e7eb;
            font-size: 0.95rem;
            padding: 6px 10px;
            border-radius: 8px;
            background: rgba(255,255,255,0.04);
          }}
          nav a:hover {{ color: #38bdf8; }}
          .badge {{
            background: #f97373;
            color: #020617;
            border-radius: 999px;
            padding: 0 0.45rem;
            font-size: 0.75rem;
            font-weight: 700;
          }}
          .signed-in, .muted {{ font-size: 0.85rem; color: #9ca3af; }}
          main {{ margin-top: 1rem; }}
          a {{ color: #38bdf8; }}
          .card {{
            border-radius: 0.75rem;
            border: 1px solid #1f2937;
            padding: 1rem 1.25rem;
            margin-bottom: 1rem;
            box-shadow: 0 10px 30px rgba(15, 23, 42, 0.5);
          }}
          .form-card {{ max-width: 760px; margin: 0 auto; }}
          label {{ display: block; margin-top: 1rem; font-size: 0.95rem; }}
          input:not([type="checkbox"]), select, textarea {{
            width: 100%;
            padding: 0.5rem;
            margin-top: 0.25rem;
            border-radius: 0.375rem;
            border: 1px solid #4b5563;
            background: #020617;
            color: #e5e7eb;
          }}
          button {{
            margin-top: 1rem;
            padding: 0.6rem 1.2rem;
            border-radius: 0.5rem;
            border: none;
            background: #22c55e;
            color: #022c22;
            font-weight: 600;
            cursor: pointer;
          }}
          button.secondary {{ background: #1f2937; color: #e5e7eb; }}
          button.danger {{ background: #f97373; color: #450a0a; }}
          .inline {{ display: inline; }}
          .error {{ color: #f97373; font-size: 0.85rem; }}
          .toast {{
            margin-top: 1rem;
            padding: 0.6rem 1rem;
            border: 1px solid;
            border-radius: 0.5rem;
            background: #0f172a;
          }}
          table {{ width: 100%; border-collapse: collapse; margin-top: 1rem; font-size: 0.9rem; }}
          th, td {{ border: 1px solid #1f2937; padding: 0.4rem 0.6rem; vertical-align: top; }}
          th {{ background: #111827; text-align: left; }}
          .stats, .tabs {{ display: flex; gap: 0.75rem; margin-bottom: 1rem; flex-wrap: wrap; }}
          .stat {{ padding: 0.6rem 0.8rem; border-radius: 0.75rem; border: 1px solid #1f2937; }}
          .stat .label {{ font-size: 0.75rem; color: #9ca3af; }}
          .stat .value {{ font-size: 1.2rem; font-weight: 600; }}
          .tabs a.active {{ color: #22c55e; font-weight: 600; }}
          .unread {{ border-left: 3px solid #38bdf8; }}
          footer {{
            margin-top: 2.5rem;
            padding: 1rem 0;
            border-top: 1px solid #1f2937;
            text-align: center;
            font-size: 0.9rem;
          }}
        </style>
      </head>
      <body>
        <div class="page">
          <header>
            <div>
              <h1>{esc(title)}</h1>
              <div class="signed-in">{signed_in_text}</div>
            </div>
            <nav>
              <a href="/">🏠 Home</a>
              {user_links}
              {admin_links}
              {auth_links}
            </nav>
          </header>
          {_toast_html(flash)}
          <main>
            {body}
          </main>
          <footer>
            <div><strong>JobNotify</strong> · government and private job updates</div>
          </footer>
        </div>
      </body>
    </html>
    """
    response = HTMLResponse(content=html_doc)
    if flash:
        response.delete_cookie(FLASH_COOKIE_NAME)
    return response


__all__ = ["FLASH_COOKIE_NAME", "esc", "read_flash", "render_page", "set_flash"]
