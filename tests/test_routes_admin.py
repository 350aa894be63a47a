from core.db.bookings import create_booking, get_all_bookings
from core.db.jobs import create_job, get_all_jobs, get_job_by_id, get_job_notes
from core.db.users import get_user_profile

from conftest import ADMIN_EMAIL, login, register, valid_job


def _admin_client(client, store):
    register(store, ADMIN_EMAIL)
    return login(client, ADMIN_EMAIL)


def _job_form(token, **overrides):
    data = {k: str(v) for k, v in valid_job(**overrides).items()}
    data["csrf_token"] = token
    return data


def test_admin_pages_require_admin(client, store):
    resp = client.get("/admin", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/login"

    register(store, "person@example.com")
    login(client, "person@example.com")
    for path in ("/admin", "/admin/job/new", "/admin/bookings", "/admin/users"):
        resp = client.get(path, follow_redirects=False)
        assert resp.headers["location"] == "/"
    assert "Access denied. Admins only." in client.get("/admin").text


def test_non_admin_cannot_post_admin_actions(client, store):
    job_id = create_job(store, valid_job())
    register(store, "person@example.com")
    token = login(client, "person@example.com")
    resp = client.post(f"/admin/job/{job_id}/delete", data={"csrf_token": token}, follow_redirects=False)
    assert resp.headers["location"] == "/"
    assert get_job_by_id(store, job_id) is not None


def test_create_job_as_draft_and_publish(client, store):
    token = _admin_client(client, store)

    resp = client.post("/admin/job/new", data=_job_form(token, title="Village Officer posting"))
    assert resp.status_code == 200
    assert "Job created." in resp.text
    assert "Village Officer posting" in resp.text

    (job,) = get_all_jobs(store)
    assert job["published"] is False

    client.post(f"/admin/job/{job['id']}/publish", data={"published": "1", "csrf_token": token})
    assert get_job_by_id(store, job["id"])["published"] is True

    client.post(f"/admin/job/{job['id']}/publish", data={"published": "0", "csrf_token": token})
    assert get_job_by_id(store, job["id"])["published"] is False


def test_create_published_job(client, store):
    token = _admin_client(client, store)
    client.post("/admin/job/new", data={**_job_form(token), "published": "on"})
    (job,) = get_all_jobs(store)
    assert job["published"] is True


def test_invalid_job_rerenders_with_errors(client, store):
    token = _admin_client(client, store)
    resp = client.post("/admin/job/new", data=_job_form(token, registration_link="http://insecure.example"))
    assert resp.status_code == 400
    assert "URL must use HTTPS protocol" in resp.text
    assert get_all_jobs(store) == []


def test_edit_job_adds_update_note(client, store):
    token = _admin_client(client, store)
    job_id = create_job(store, valid_job(), published=True)

    assert "Junior Assistant" in client.get(f"/admin/job/{job_id}").text

    resp = client.post(f"/admin/job/{job_id}", data={**_job_form(token, title="Senior Assistant"), "published": "on"})
    assert "Job updated." in resp.text
    assert get_job_by_id(store, job_id)["title"] == "Senior Assistant"
    assert [n["message"] for n in get_job_notes(store, job_id)] == ["Job details updated: Senior Assistant"]


def test_edit_missing_job(client, store):
    token = _admin_client(client, store)
    assert "Job not found." in client.get("/admin/job/missing").text
    assert "Job not found." in client.post("/admin/job/missing", data=_job_form(token)).text


def test_add_note_and_delete_job(client, store):
    token = _admin_client(client, store)
    job_id = create_job(store, valid_job(), published=True)

    resp = client.post(f"/admin/job/{job_id}/notes", data={"message": "Admit cards out", "csrf_token": token})
    assert "Update added." in resp.text
    assert "Admit cards out" in resp.text

    resp = client.post(f"/admin/job/{job_id}/notes", data={"message": "   ", "csrf_token": token})
    assert len(get_job_notes(store, job_id)) == 1

    resp = client.post(f"/admin/job/{job_id}/delete", data={"csrf_token": token})
    assert "Job deleted." in resp.text
    assert get_job_by_id(store, job_id) is None
    assert get_job_notes(store, job_id) == []


def test_admin_actions_check_csrf(client, store):
    _admin_client(client, store)
    job_id = create_job(store, valid_job())
    resp = client.post(f"/admin/job/{job_id}/delete", data={"csrf_token": "forged"})
    assert resp.status_code == 403
    assert get_job_by_id(store, job_id) is not None


def test_booking_management(client, store):
    token = _admin_client(client, store)
    booking_id = create_booking(
        store,
        {
            "job_id": "job1",
            "job_title": "Junior Assistant",
            "user_id": "u1",
            "user_name": "Asha Menon",
            "user_email": "asha@example.com",
            "fee": 500,
        },
    )

    page = client.get("/admin/bookings")
    assert "Asha Menon" in page.text
    assert "Pending (1)" in page.text

    resp = client.post(f"/admin/bookings/{booking_id}/status", data={"status": "completed", "csrf_token": token})
    assert "Booking updated." in resp.text
    assert get_all_bookings(store)[0]["status"] == "completed"
    assert "Asha Menon" in client.get("/admin/bookings?status=completed").text
    assert "No bookings." in client.get("/admin/bookings?status=pending").text

    resp = client.post(f"/admin/bookings/{booking_id}/status", data={"status": "lost", "csrf_token": token})
    assert "Status must be one of" in resp.text

    resp = client.post("/admin/bookings/missing/status", data={"status": "completed", "csrf_token": token})
    assert "Booking not found." in resp.text

    client.post(f"/admin/bookings/{booking_id}/delete", data={"csrf_token": token})
    assert get_all_bookings(store) == []


def test_promote_user(client, store):
    token = _admin_client(client, store)
    uid = register(store, "person@example.com")

    assert "person@example.com" in client.get("/admin/users").text
    resp = client.post(f"/admin/users/{uid}/promote", data={"csrf_token": token})
    assert "User promoted to admin." in resp.text
    assert get_user_profile(store, uid)["role"] == "admin"
