import pytest

from core.db.base import _convert_qmarks, matches_where, sort_documents
from core.errors import NotFoundError


def test_set_get_includes_id(store):
    store.set("jobs", "a", {"title": "One", "id": "ignored"})
    assert store.get("jobs", "a") == {"title": "One", "id": "a"}
    assert store.get("jobs", "missing") is None


def test_set_replaces_unless_merge(store):
    store.set("jobs", "a", {"title": "One", "fee": 1})
    store.set("jobs", "a", {"title": "Two"})
    assert store.get("jobs", "a") == {"title": "Two", "id": "a"}

    store.set("jobs", "a", {"fee": 5}, merge=True)
    assert store.get("jobs", "a") == {"title": "Two", "fee": 5, "id": "a"}


def test_update_requires_existing_document(store):
    with pytest.raises(NotFoundError) as excinfo:
        store.update("jobs", "nope", {"title": "x"})
    assert excinfo.value.collection == "jobs"
    assert excinfo.value.doc_id == "nope"


def test_returned_documents_are_copies(store):
    store.set("jobs", "a", {"tags": ["x"]})
    doc = store.get("jobs", "a")
    doc["tags"].append("y")
    assert store.get("jobs", "a")["tags"] == ["x"]


def test_query_filters_and_orders(store):
    store.set("jobs", "a", {"published": True, "created_at": "2026-01-01"})
    store.set("jobs", "b", {"published": False, "created_at": "2026-01-03"})
    store.set("jobs", "c", {"published": True, "created_at": "2026-01-02"})

    newest = store.query("jobs", where={"published": True}, order_by="created_at", descending=True)
    assert [d["id"] for d in newest] == ["c", "a"]
    assert [d["id"] for d in store.query("jobs", order_by="created_at")] == ["a", "c", "b"]


def test_add_assigns_ids_and_collections_are_separate(store):
    first = store.add("jobs/1/notes", {"message": "hi"})
    second = store.add("jobs/1/notes", {"message": "there"})
    assert first != second
    assert sorted(store.list_ids("jobs/1/notes")) == sorted([first, second])
    assert store.list_ids("jobs/2/notes") == []


def test_delete_and_delete_collection(store):
    store.set("users/u1/savedJobs", "j1", {})
    store.set("users/u1/savedJobs", "j2", {})
    store.delete("users/u1/savedJobs", "j1")
    assert not store.exists("users/u1/savedJobs", "j1")
    assert store.delete_collection("users/u1/savedJobs") == 1
    assert store.delete_collection("users/u1/savedJobs") == 0


def test_writes_notify_watchers(store):
    seen = []
    unwatch = store.watch("jobs", seen.append)
    store.set("jobs", "a", {})
    store.set("bookings", "b", {})
    store.delete("jobs", "a")
    unwatch()
    store.set("jobs", "c", {})
    assert seen == ["jobs", "jobs"]


def test_helpers():
    assert _convert_qmarks("SELECT ? , ?") == "SELECT %s , %s"
    assert _convert_qmarks("SELECT 1") == "SELECT 1"
    assert matches_where({"a": 1, "b": 2}, {"a": 1})
    assert not matches_where({"a": 1}, {"a": 2})
    assert matches_where({"a": 1}, None)
    docs = [{"k": "2"}, {"k": None}, {"k": "1"}]
    assert [d["k"] for d in sort_documents(docs, "k", False)] == [None, "1", "2"]
