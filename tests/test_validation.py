from datetime import date

import pytest

from core.validation import (
    sanitize_html,
    validate_contract_type,
    validate_district,
    validate_email,
    validate_fee,
    validate_future_date,
    validate_job_data,
    validate_job_description,
    validate_job_title,
    validate_location,
    validate_name,
    validate_note_message,
    validate_password,
    validate_phone,
    validate_profile_data,
    validate_sector,
    validate_url,
)

from conftest import profile_data, valid_job

TODAY = date(2026, 1, 15)


@pytest.mark.parametrize(
    "phone,expected",
    [
        ("98-765 43210", "9876543210"),
        ("9876543210", "9876543210"),
        ("600 000 0000", "6000000000"),
        ("(700) 000-0000", "7000000000"),
    ],
)
def test_phone_accepts_ten_digits_starting_6_to_9(phone, expected):
    result = validate_phone(phone)
    assert result.valid
    assert result.sanitized == expected


@pytest.mark.parametrize("phone", ["5123456789", "987654321", "98765432100", "", None, "abcdefghij"])
def test_phone_rejects(phone):
    assert not validate_phone(phone).valid


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Asha Menon", True),
        ("  O'Brien-Smith  ", True),
        ("A", False),
        ("", False),
        ("R2D2", False),
        ("x" * 101, False),
    ],
)
def test_validate_name(name, expected):
    assert validate_name(name).valid is expected


def test_name_is_trimmed():
    assert validate_name("  Asha  ").sanitized == "Asha"


def test_location_messages_use_field_name():
    result = validate_location("", "District")
    assert not result.valid
    assert result.error == "District is required"
    assert validate_location("Thrissur-North", "District").sanitized == "Thrissur-North"
    assert not validate_location("Zone 5", "District").valid


@pytest.mark.parametrize(
    "email,expected",
    [
        ("user@example.com", True),
        ("User.Name+tag@example.co.uk", True),
        ("  user@example.com  ", True),
        ("bademail", False),
        ("", False),
        ("user@no-tld", False),
        ("user @example.com", False),
        ("@gmail.com", False),
        ("user..name@example.com", False),
        ("a" * 250 + "@example.com", False),
    ],
)
def test_validate_email(email, expected):
    assert validate_email(email).valid is expected


def test_email_is_normalised():
    assert validate_email("  User@Example.COM ").sanitized == "user@example.com"


@pytest.mark.parametrize(
    "pw,expected",
    [
        ("Passw0rd", True),
        ("abc12345", True),
        ("A" * 23 + "1a", True),
        ("short1", False),
        ("pass word1", False),
        ("Passw0rd\n", False),
        ("lettersOnly", False),
        ("12345678", False),
        ("", False),
        ("a" * 26 + "1", False),
    ],
)
def test_validate_password(pw, expected):
    assert validate_password(pw).valid is expected


def test_job_title_length():
    assert validate_job_title("Clerk").valid
    assert not validate_job_title("Dev").valid
    assert not validate_job_title("x" * 201).valid


@pytest.mark.parametrize(
    "fee,expected",
    [
        (0, 0.0),
        ("250", 250.0),
        (99.995, 100.0),
        (99.999, 100.0),
        (10.125, 10.13),
        (10.124, 10.12),
        (100000, 100000.0),
    ],
)
def test_fee_rounds_half_up(fee, expected):
    result = validate_fee(fee)
    assert result.valid
    assert result.sanitized == expected


@pytest.mark.parametrize(
    "fee",
    [-1, "-0.01", 100000.001, "abc", "", None, True, float("nan"), float("inf"), "1_000", "1e3", "NaN"],
)
def test_fee_rejects(fee):
    assert not validate_fee(fee).valid


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2026-01-15", True),  # today
        ("2026-01-14", False),  # yesterday
        ("2031-01-15", True),  # today + 5y
        ("2031-01-16", False),
        ("2026-06-01T10:00:00", True),
        (date(2027, 3, 1), True),
        ("not-a-date", False),
        ("", False),
    ],
)
def test_future_date_window_is_inclusive(value, expected):
    assert validate_future_date(value, "Apply by date", today=TODAY).valid is expected


def test_future_date_sanitised_to_iso_date():
    assert validate_future_date("2026-06-01T10:00:00", "Exam date", today=TODAY).sanitized == "2026-06-01"


def test_future_date_leap_day_clamps():
    leap = date(2028, 2, 29)
    assert validate_future_date("2033-02-28", "Exam date", today=leap).valid
    assert not validate_future_date("2033-03-01", "Exam date", today=leap).valid


def test_future_date_error_names_field():
    result = validate_future_date("2020-01-01", "Exam date", today=TODAY)
    assert result.error == "Exam date must be in the future"


def test_url_optional():
    result = validate_url("")
    assert result.valid
    assert result.sanitized == ""
    assert validate_url(None).sanitized == ""


def test_url_requires_https():
    result = validate_url("http://x.com")
    assert not result.valid
    assert result.error == "URL must use HTTPS protocol"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://x.com/a", "https://x.com/a"),
        ("https://X.com", "https://x.com/"),
        ("HTTPS://x.com:443/a?b=1", "https://x.com/a?b=1"),
        ("https://x.com:8443/a", "https://x.com:8443/a"),
    ],
)
def test_url_normalised(url, expected):
    result = validate_url(url)
    assert result.valid
    assert result.sanitized == expected


@pytest.mark.parametrize("url", ["not a url", "x.com/a", "https://", "https:///path"])
def test_url_invalid_format(url):
    result = validate_url(url)
    assert not result.valid
    assert result.error == "Invalid URL format"


def test_district_required_only_for_local():
    local = validate_district("", "local")
    assert not local.valid
    assert local.error == "District is required for local jobs"

    national = validate_district("", "national")
    assert national.valid
    assert national.sanitized == ""

    assert validate_district(" Ernakulam ", " LOCAL ").sanitized == "Ernakulam"


def test_enums_are_case_insensitive():
    assert validate_sector(" Government ").sanitized == "government"
    assert validate_contract_type("PERMANENT").sanitized == "permanent"
    assert not validate_sector("ngo").valid


def test_part_time_is_legacy_alias_for_temporary():
    assert validate_contract_type("Part-Time").sanitized == "temporary"
    assert not validate_contract_type("freelance").valid


def test_sanitize_html_strips_scripts_and_handlers():
    out = sanitize_html(
        '<p onclick="x()">Hello<script>alert(1)</script></p>'
        '<a href="javascript:alert(1)">bad</a>'
        '<a href="https://example.org" title="ok">good</a>'
    )
    assert "<script" not in out
    assert "alert(1)" not in out
    assert "onclick" not in out
    assert "javascript:" not in out
    assert '<a href="https://example.org" title="ok">good</a>' in out
    assert "<p>Hello</p>" in out


def test_sanitize_html_unwraps_unknown_tags_and_drops_iframes():
    out = sanitize_html("<custom>kept text</custom><iframe src='https://evil'>gone</iframe><!-- note -->")
    assert out == "kept text"


def test_sanitize_html_obfuscated_scheme_removed():
    out = sanitize_html('<a href="java\tscript:alert(1)">x</a><img src="/logo.png" onerror="x()" />')
    assert "script:" not in out
    assert 'src="/logo.png"' in out
    assert "onerror" not in out


def test_sanitize_html_keeps_tables_and_lists():
    markup = "<table><tr><td>1</td></tr></table><ul><li>a</li></ul>"
    assert sanitize_html(markup) == markup


def test_description_length_cap():
    assert not validate_job_description("x" * 50001).valid
    assert validate_job_description("").sanitized == ""


def test_note_message():
    assert validate_note_message("  Admit cards out  ").sanitized == "Admit cards out"
    assert not validate_note_message("   ").valid
    assert not validate_note_message("x" * 501).valid


def test_validate_job_data_sanitises_every_field():
    data = valid_job(
        description="<p>Eligibility</p><script>steal()</script>",
        contract_type="Part-Time",
        fee="99.995",
    )
    result = validate_job_data(data)
    assert result.valid
    assert result.errors == {}
    clean = result.sanitized_data
    assert set(clean) == {
        "title",
        "short",
        "location",
        "location_type",
        "district",
        "state",
        "sector",
        "contract_type",
        "fee",
        "apply_by",
        "exam_date",
        "description",
        "registration_link",
    }
    assert "<script" not in clean["description"]
    assert clean["contract_type"] == "temporary"
    assert clean["fee"] == 100.0
    assert clean["registration_link"] == "https://example.org/apply"


def test_validate_job_data_collects_all_errors():
    result = validate_job_data(
        valid_job(title="Dev", location_type="local", district="", registration_link="http://x.com", fee=-5),
    )
    assert not result.valid
    assert result.sanitized_data is None
    assert set(result.errors) == {"title", "district", "registration_link", "fee"}


def test_validate_job_data_optional_fields_default():
    result = validate_job_data(valid_job(fee="", exam_date="", registration_link="", short=""))
    assert result.valid
    assert result.sanitized_data["fee"] == 0.0
    assert result.sanitized_data["exam_date"] == ""


def test_validate_profile_data():
    ok = validate_profile_data(profile_data("USER@example.com", phone="98765 43210"))
    assert ok.valid
    assert ok.sanitized_data["email"] == "user@example.com"
    assert ok.sanitized_data["phone"] == "9876543210"

    bad = validate_profile_data({"name": "A", "email": "nope"})
    assert not bad.valid
    assert set(bad.errors) == {"name", "phone", "district", "state", "email"}


def test_validate_profile_data_partial_checks_only_present_fields():
    result = validate_profile_data({"phone": "9123456789"}, partial=True)
    assert result.valid
    assert result.sanitized_data == {"phone": "9123456789"}
    assert not validate_profile_data({"phone": "123"}, partial=True).valid


def test_sanitize_html_inline_images_only():
    out = sanitize_html(
        '<img src="data:image/png;base64,iVBORw0KGgo=" alt="logo" />'
        '<a href="data:text/html;base64,PHNjcmlwdD4=">x</a>'
        '<img src="data:text/html,hi" />'
    )
    assert 'src="data:image/png;base64,iVBORw0KGgo="' in out
    assert "data:text/html" not in out
