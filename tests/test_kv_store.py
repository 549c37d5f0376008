from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from cityfix.exceptions import StorageError
from cityfix.kv_store import KVStore


def test_set_get_and_overwrite(db_session):
    kv = KVStore(db_session)
    assert kv.get("report:1") is None

    kv.set("report:1", {"id": "1", "status": "pending"})
    assert kv.get("report:1") == {"id": "1", "status": "pending"}

    kv.set("report:1", {"id": "1", "status": "resolved"})
    assert kv.get("report:1") == {"id": "1", "status": "resolved"}


def test_overwrite_is_visible_to_a_new_session(db_session):
    from cityfix.database import SessionLocal

    kv = KVStore(db_session)
    kv.set("report:1", {"id": "1", "status": "pending"})
    kv.set("report:1", {"id": "1", "status": "in-progress"})

    other = SessionLocal()
    try:
        assert KVStore(other).get("report:1")["status"] == "in-progress"
    finally:
        other.close()


def test_delete_missing_key_is_a_noop(db_session):
    kv = KVStore(db_session)
    kv.set("report:1", {"id": "1"})

    kv.delete("report:1")
    kv.delete("report:1")
    kv.delete("never-existed")

    assert kv.get("report:1") is None


def test_get_by_prefix_returns_wrapped_entries(db_session):
    kv = KVStore(db_session)
    kv.mset([
        ("report:1", {"id": "1"}),
        ("report:2", {"id": "2"}),
        ("session:1", {"id": "s"}),
    ])

    entries = kv.get_by_prefix("report:")

    assert sorted(e["key"] for e in entries) == ["report:1", "report:2"]
    assert {e["value"]["id"] for e in entries} == {"1", "2"}


def test_get_by_prefix_treats_wildcards_literally(db_session):
    kv = KVStore(db_session)
    kv.set("a_b:1", {"id": "literal"})
    kv.set("axb:1", {"id": "wildcard"})
    kv.set("100%:1", {"id": "percent"})

    assert [e["value"]["id"] for e in kv.get_by_prefix("a_b:")] == ["literal"]
    assert [e["value"]["id"] for e in kv.get_by_prefix("100%")] == ["percent"]


def test_substrate_errors_surface_as_storage_error(db_session, monkeypatch):
    kv = KVStore(db_session)

    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db_session, "query", broken_query)

    with pytest.raises(StorageError):
        kv.get_by_prefix("report:")
    with pytest.raises(StorageError):
        kv.delete("report:1")
