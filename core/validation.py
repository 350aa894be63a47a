"""
Field validators and HTML sanitization for everything users and admins submit.

Validators never raise on bad input. Each returns a FieldResult; the aggregate
helpers (validate_job_data, validate_profile_data) run every field validator,
collect a field -> message map and only hand back sanitized data when all of
them passed.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import PreformattedString
from email_validator import EmailNotValidError, validate_email as _check_email
from password_strength import PasswordPolicy

LOCATION_TYPES = ("local", "state", "national")
SECTORS = ("government", "private")
CONTRACT_TYPES = ("permanent", "contract", "temporary")
# Older postings used "part-time"; it was folded into "temporary".
LEGACY_CONTRACT_TYPES = {"part-time": "temporary"}

MAX_FEE = 100000
MAX_DESCRIPTION_LENGTH = 50000
MAX_SHORT_LENGTH = 200
MAX_NOTE_LENGTH = 500
MAX_EMAIL_LENGTH = 254
FUTURE_DATE_YEARS = 5

_NAME_RE = re.compile(r"[A-Za-z\s'-]+")
_LOCATION_RE = re.compile(r"[A-Za-z\s-]+")
_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
_NON_DIGITS_RE = re.compile(r"[^0-9]")

_password_policy = PasswordPolicy.from_names(length=8, numbers=1)


@dataclass
class FieldResult:
    valid: bool
    error: Optional[str] = None
    sanitized: Any = None


@dataclass
class RecordResult:
    valid: bool
    errors: Dict[str, str] = field(default_factory=dict)
    sanitized_data: Optional[Dict[str, Any]] = None


def _ok(sanitized: Any) -> FieldResult:
    return FieldResult(valid=True, sanitized=sanitized)


def _fail(error: str) -> FieldResult:
    return FieldResult(valid=False, error=error)


# ==================== HTML SANITIZATION ====================

ALLOWED_TAGS = frozenset(
    [
        "h1", "h2", "h3", "h4", "h5", "h6",
        "p", "br", "hr",
        "strong", "b", "em", "i", "u",
        "ul", "ol", "li",
        "a", "img",
        "table", "thead", "tbody", "tr", "th", "td",
        "div", "span",
        "blockquote", "pre", "code",
    ]
)
ALLOWED_ATTRIBUTES = frozenset(["href", "title", "alt", "src", "class", "id"])
URI_ATTRIBUTES = frozenset(["href", "src"])

# Removed together with everything inside them; other unknown tags are unwrapped.
_DROP_WITH_CONTENT = sorted(
    [
        "script", "style", "iframe", "frame", "frameset", "object", "embed",
        "applet", "noscript", "noembed", "noframes", "template", "svg", "math",
        "textarea", "select", "xmp", "plaintext", "title", "head",
    ]
)

_SAFE_URI_RE = re.compile(
    r"^(?:(?:(?:f|ht)tps?|mailto|tel|callto|sms|cid|xmpp):|[^a-z]|[a-z+.\-]+(?:[^a-z+.\-:]|$))",
    re.IGNORECASE,
)
_URI_WHITESPACE_RE = re.compile(r"[\u0000-\u0020\u00a0\u1680\u180e\u2000-\u2029\u205f\u3000]")
# Inline images may embed their bytes; no other tag may use data: URIs.
_DATA_IMAGE_RE = re.compile(r"^data:image/", re.IGNORECASE)


def _keep_attribute(tag_name: str, name: str, value: Any) -> bool:
    if name not in ALLOWED_ATTRIBUTES:
        return False
    if name in URI_ATTRIBUTES:
        compact = _URI_WHITESPACE_RE.sub("", str(value))
        if tag_name == "img" and name == "src" and _DATA_IMAGE_RE.match(compact):
            return True
        return bool(_SAFE_URI_RE.match(compact))
    return True


def sanitize_html(markup: Any) -> str:
    """
    Reduce markup to the allow-listed tags and attributes.
    Script-like elements go with their content, unknown tags are unwrapped,
    comments/doctypes are dropped and links must use a safe scheme.
    """
    if not markup or not isinstance(markup, str):
        return ""

    soup = BeautifulSoup(markup, "html.parser")

    for node in soup.find_all(string=lambda text: isinstance(text, PreformattedString)):
        node.extract()

    for tag in soup.find_all(_DROP_WITH_CONTENT):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
            continue
        tag.attrs = {
            name: value for name, value in tag.attrs.items() if _keep_attribute(tag.name, name, value)
        }

    return str(soup)


# ==================== INPUT VALIDATION ====================


def validate_name(name: Any) -> FieldResult:
    if not name or not isinstance(name, str):
        return _fail("Name is required")

    trimmed = name.strip()
    if len(trimmed) < 2:
        return _fail("Name must be at least 2 characters")
    if len(trimmed) > 100:
        return _fail("Name must be at most 100 characters")
    if not _NAME_RE.fullmatch(trimmed):
        return _fail("Name can only contain letters, spaces, hyphens, and apostrophes")
    return _ok(trimmed)


def validate_phone(phone: Any) -> FieldResult:
    """Indian mobile numbers: 10 digits starting with 6-9, separators ignored."""
    if not phone or not isinstance(phone, str):
        return _fail("Phone number is required")

    cleaned = _NON_DIGITS_RE.sub("", phone)
    if len(cleaned) != 10:
        return _fail("Phone number must be exactly 10 digits")
    if cleaned[0] not in "6789":
        return _fail("Phone number must start with 6, 7, 8, or 9")
    return _ok(cleaned)


def validate_location(location: Any, field_name: str) -> FieldResult:
    if not location or not isinstance(location, str):
        return _fail(f"{field_name} is required")

    trimmed = location.strip()
    if len(trimmed) < 2:
        return _fail(f"{field_name} must be at least 2 characters")
    if len(trimmed) > 50:
        return _fail(f"{field_name} must be at most 50 characters")
    if not _LOCATION_RE.fullmatch(trimmed):
        return _fail(f"{field_name} can only contain letters, spaces, and hyphens")
    return _ok(trimmed)


def validate_email(email: Any) -> FieldResult:
    if not email or not isinstance(email, str):
        return _fail("Email is required")

    trimmed = email.strip().lower()
    if not _EMAIL_RE.fullmatch(trimmed):
        return _fail("Invalid email format")
    if len(trimmed) > MAX_EMAIL_LENGTH:
        return _fail("Email is too long")
    try:
        _check_email(trimmed, check_deliverability=False)
    except EmailNotValidError:
        return _fail("Invalid email format")
    return _ok(trimmed)


def validate_password(password: Any) -> FieldResult:
    """8-25 chars, no whitespace, at least one letter and one number."""
    if not password or not isinstance(password, str):
        return _fail("Password is required")
    if any(ch.isspace() for ch in password):
        return _fail("Password cannot contain spaces")
    if len(password) < 8 or len(password) > 25:
        return _fail("Password must be 8-25 characters")
    if not (re.search(r"[A-Za-z]", password) and re.search(r"[0-9]", password)):
        return _fail("Password needs at least one letter and one number")
    if _password_policy.test(password):
        return _fail("Password is too weak")
    return _ok(password)


# ==================== JOB DATA VALIDATION ====================


def validate_job_title(title: Any) -> FieldResult:
    if not title or not isinstance(title, str):
        return _fail("Job title is required")

    trimmed = title.strip()
    if len(trimmed) < 5:
        return _fail("Job title must be at least 5 characters")
    if len(trimmed) > 200:
        return _fail("Job title must be at most 200 characters")
    return _ok(trimmed)


_FEE_TEXT_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")


def validate_fee(fee: Any) -> FieldResult:
    """
    Accept numbers or numeric strings in [0, 100000].
    The bound is checked before rounding; the result is rounded half-up to 2 decimals.
    """
    if fee is None or isinstance(fee, bool):
        return _fail("Fee must be a valid number")
    if isinstance(fee, str) and not _FEE_TEXT_RE.match(fee.strip()):
        return _fail("Fee must be a valid number")

    try:
        amount = Decimal(str(fee).strip())
    except InvalidOperation:
        return _fail("Fee must be a valid number")
    if not amount.is_finite():
        return _fail("Fee must be a valid number")

    if amount < 0:
        return _fail("Fee cannot be negative")
    if amount > MAX_FEE:
        return _fail("Fee cannot exceed ₹100,000")

    rounded = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return _ok(float(rounded))


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # Feb 29 -> Feb 28
        return day.replace(year=day.year + years, day=28)


def validate_future_date(value: Any, field_name: str, today: date | None = None) -> FieldResult:
    """
    Accept dates from today up to today + 5 years, both ends inclusive.
    Sanitized to YYYY-MM-DD.
    """
    if not value or not isinstance(value, (str, date)):
        return _fail(f"{field_name} is required")

    parsed = _parse_date(value)
    if parsed is None:
        return _fail(f"{field_name} is not a valid date")

    today = today or date.today()
    if parsed < today:
        return _fail(f"{field_name} must be in the future")
    if parsed > _add_years(today, FUTURE_DATE_YEARS):
        return _fail(f"{field_name} cannot be more than {FUTURE_DATE_YEARS} years in the future")
    return _ok(parsed.isoformat())


def validate_url(url: Any) -> FieldResult:
    """Optional link; when present it must be an absolute https URL."""
    if not url or not isinstance(url, str):
        return _ok("")

    trimmed = url.strip()
    if not trimmed:
        return _ok("")
    if any(ch.isspace() for ch in trimmed):
        return _fail("Invalid URL format")

    try:
        parts = urlsplit(trimmed)
        hostname = parts.hostname
        port = parts.port
    except ValueError:
        return _fail("Invalid URL format")

    if not parts.scheme:
        return _fail("Invalid URL format")
    if parts.scheme.lower() != "https":
        return _fail("URL must use HTTPS protocol")
    if not hostname:
        return _fail("Invalid URL format")

    host = f"[{hostname}]" if ":" in hostname else hostname
    if port is not None and port != 443:
        host = f"{host}:{port}"
    userinfo = parts.netloc.rpartition("@")[0]
    netloc = f"{userinfo}@{host}" if userinfo else host
    href = urlunsplit(("https", netloc, parts.path or "/", parts.query, parts.fragment))
    return _ok(href)


def validate_short_description(short: Any) -> FieldResult:
    if not short or not isinstance(short, str):
        return _ok("")

    trimmed = short.strip()
    if len(trimmed) > MAX_SHORT_LENGTH:
        return _fail(f"Short description must be at most {MAX_SHORT_LENGTH} characters")
    return _ok(trimmed)


def validate_job_description(description: Any) -> FieldResult:
    if not description or not isinstance(description, str):
        return _ok("")

    trimmed = description.strip()
    if len(trimmed) > MAX_DESCRIPTION_LENGTH:
        return _fail("Description is too long (max 50,000 characters)")

    sanitized = sanitize_html(trimmed)
    if len(sanitized) > MAX_DESCRIPTION_LENGTH:
        return _fail("Description is too long (max 50,000 characters)")
    return _ok(sanitized)


def _validate_choice(
    value: Any,
    allowed: Iterable[str],
    label: str,
    message: str,
    aliases: Mapping[str, str] | None = None,
) -> FieldResult:
    if not value or not isinstance(value, str):
        return _fail(f"{label} is required")

    normalized = value.strip().lower()
    normalized = (aliases or {}).get(normalized, normalized)
    if normalized not in allowed:
        return _fail(message)
    return _ok(normalized)


def validate_location_type(location_type: Any) -> FieldResult:
    return _validate_choice(
        location_type, LOCATION_TYPES, "Location type", "Location type must be local, state, or national"
    )


def validate_sector(sector: Any) -> FieldResult:
    return _validate_choice(sector, SECTORS, "Sector", "Sector must be government or private")


def validate_contract_type(contract_type: Any) -> FieldResult:
    return _validate_choice(
        contract_type,
        CONTRACT_TYPES,
        "Contract type",
        "Contract type must be permanent, contract, or temporary",
        aliases=LEGACY_CONTRACT_TYPES,
    )


def validate_district(district: Any, location_type: Any) -> FieldResult:
    """District is required only for local jobs."""
    kind = location_type.strip().lower() if isinstance(location_type, str) else ""
    text = district.strip() if isinstance(district, str) else ""

    if kind != "local":
        return _ok(text)

    if not text:
        return _fail("District is required for local jobs")
    if len(text) < 2:
        return _fail("District name must be at least 2 characters")
    if len(text) > 50:
        return _fail("District name must be at most 50 characters")
    return _ok(text)


def validate_state(state: Any) -> FieldResult:
    if not state or not isinstance(state, str):
        return _fail("State is required")

    trimmed = state.strip()
    if len(trimmed) < 2:
        return _fail("State name must be at least 2 characters")
    if len(trimmed) > 50:
        return _fail("State name must be at most 50 characters")
    return _ok(trimmed)


def validate_note_message(message: Any) -> FieldResult:
    if not message or not isinstance(message, str) or not message.strip():
        return _fail("Message is required")

    trimmed = message.strip()
    if len(trimmed) > MAX_NOTE_LENGTH:
        return _fail(f"Message must be at most {MAX_NOTE_LENGTH} characters")
    return _ok(trimmed)


# ==================== AGGREGATE VALIDATION ====================


def _collect(results: Mapping[str, FieldResult]) -> RecordResult:
    errors = {name: result.error or "Invalid value" for name, result in results.items() if not result.valid}
    if errors:
        return RecordResult(valid=False, errors=errors)
    return RecordResult(
        valid=True,
        sanitized_data={name: result.sanitized for name, result in results.items()},
    )


def validate_job_data(data: Mapping[str, Any], today: date | None = None) -> RecordResult:
    """Validate a full job form. Every field is checked so all errors surface together."""
    fee = data.get("fee")
    if fee is None or fee == "":
        fee = 0

    results: Dict[str, FieldResult] = {
        "title": validate_job_title(data.get("title")),
        "short": validate_short_description(data.get("short")),
        "location": validate_location(data.get("location"), "Location"),
        "location_type": validate_location_type(data.get("location_type")),
        "district": validate_district(data.get("district"), data.get("location_type")),
        "state": validate_state(data.get("state")),
        "sector": validate_sector(data.get("sector")),
        "contract_type": validate_contract_type(data.get("contract_type")),
        "fee": validate_fee(fee),
        "apply_by": validate_future_date(data.get("apply_by"), "Apply by date", today=today),
        "exam_date": (
            validate_future_date(data.get("exam_date"), "Exam date", today=today)
            if data.get("exam_date")
            else _ok("")
        ),
        "description": validate_job_description(data.get("description")),
        "registration_link": validate_url(data.get("registration_link")),
    }
    return _collect(results)


_PROFILE_VALIDATORS: Dict[str, Callable[[Any], FieldResult]] = {
    "name": validate_name,
    "phone": validate_phone,
    "district": lambda value: validate_location(value, "District"),
    "state": lambda value: validate_location(value, "State"),
    "email": validate_email,
}


def validate_profile_data(data: Mapping[str, Any], partial: bool = False) -> RecordResult:
    """
    Validate profile fields. With partial=True only the fields present in
    `data` are checked (used for profile edits).
    """
    fields = [name for name in _PROFILE_VALIDATORS if not partial or name in data]
    return _collect({name: _PROFILE_VALIDATORS[name](data.get(name)) for name in fields})


__all__ = [
    "ALLOWED_TAGS",
    "ALLOWED_ATTRIBUTES",
    "CONTRACT_TYPES",
    "LEGACY_CONTRACT_TYPES",
    "LOCATION_TYPES",
    "SECTORS",
    "FieldResult",
    "RecordResult",
    "sanitize_html",
    "validate_name",
    "validate_phone",
    "validate_location",
    "validate_email",
    "validate_password",
    "validate_job_title",
    "validate_fee",
    "validate_future_date",
    "validate_url",
    "validate_short_description",
    "validate_job_description",
    "validate_location_type",
    "validate_sector",
    "validate_contract_type",
    "validate_district",
    "validate_state",
    "validate_note_message",
    "validate_job_data",
    "validate_profile_data",
]
