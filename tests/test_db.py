"""Tests for the key-value store."""
from skill_coach.db import KeyValueStore, get_connection, init_db


def test_init_db_creates_table(tmp_db):
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "kv_store" in tables
    conn.close()


def test_init_db_is_idempotent(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)  # should not raise


def test_get_missing_key_returns_default(tmp_db):
    store = KeyValueStore(tmp_db)
    assert store.get("nothing") is None
    assert store.get("nothing", []) == []


def test_set_and_get_json_document(tmp_db):
    store = KeyValueStore(tmp_db)
    store.set("ratings", {"swe": {"databases": {"mean": 6.0, "count": 1}}})
    assert store.get("ratings") == {"swe": {"databases": {"mean": 6.0, "count": 1}}}


def test_set_overwrites_existing_key(tmp_db):
    store = KeyValueStore(tmp_db)
    store.set("daily_plans", [1, 2])
    store.set("daily_plans", [3])
    assert store.get("daily_plans") == [3]
    assert store.keys() == ["daily_plans"]


def test_values_survive_new_store_instance(tmp_db):
    KeyValueStore(tmp_db).set("quiz_history", [{"id": "a"}])
    assert KeyValueStore(tmp_db).get("quiz_history") == [{"id": "a"}]


def test_delete(tmp_db):
    store = KeyValueStore(tmp_db)
    store.set("k", "v")
    store.delete("k")
    assert store.get("k") is None
    store.delete("k")  # deleting a missing key is fine
