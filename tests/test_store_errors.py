import pytest

from app.api import create_app
from core.db.base import DocumentStore
from core.db.bookings import create_booking, get_all_bookings
from core.db.jobs import create_job, get_job_by_id, get_published_jobs, is_job_saved
from core.db.notifications import get_unread_notification_count
from core.errors import InvalidRecordError, StoreError

from conftest import valid_job


class FailingStore(DocumentStore):
    """Every backend call fails as if the database were unreachable."""

    def _fail(self, *args, **kwargs):
        raise StoreError("connection refused")

    get = set = update = delete = delete_collection = query = _fail


def test_reads_fall_back_to_defaults():
    store = FailingStore()
    assert get_published_jobs(store) == []
    assert get_job_by_id(store, "job1") is None
    assert is_job_saved(store, "u1", "job1") is False
    assert get_unread_notification_count(store, "u1") == 0
    assert get_all_bookings(store) == []


def test_writes_propagate_store_errors():
    with pytest.raises(StoreError):
        create_job(FailingStore(), valid_job())


def test_validation_errors_win_over_store_errors():
    with pytest.raises(InvalidRecordError):
        create_booking(FailingStore(), {"job_id": "job1"})


def test_home_page_renders_when_store_is_down(settings):
    from fastapi.testclient import TestClient

    client = TestClient(create_app(settings=settings, store=FailingStore()))
    resp = client.get("/")
    assert resp.status_code == 200
    assert "No jobs found." in resp.text
