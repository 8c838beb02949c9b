"""Contract tests run against every key-value store implementation."""

import pytest

from palettefs.core.config import Settings, StoreBackend
from palettefs.database import make_engine
from palettefs.repositories import MemoryKeyValueStore, SqlKeyValueStore, build_store


@pytest.fixture(params=["memory", "sql"])
def kv(request):
    if request.param == "memory":
        return MemoryKeyValueStore()
    config = Settings(store_backend=StoreBackend.SQL)
    return build_store(config, engine=make_engine("sqlite://"))


class TestStoreContract:

    def test_get_missing_is_none(self, kv):
        assert kv.get("absent") is None

    def test_set_then_get(self, kv):
        kv.set("a", "1")
        assert kv.get("a") == "1"

    def test_set_replaces(self, kv):
        kv.set("a", "1")
        kv.set("a", "2")
        assert kv.get("a") == "2"

    def test_remove(self, kv):
        kv.set("a", "1")
        kv.remove("a")
        assert kv.get("a") is None

    def test_remove_missing_is_noop(self, kv):
        kv.remove("never-set")

    def test_keys_sorted_and_filtered(self, kv):
        for key in ["file_2", "file_10", "fileSystem", "other"]:
            kv.set(key, "x")
        assert kv.keys("file_") == ["file_10", "file_2"]
        assert kv.keys() == ["fileSystem", "file_10", "file_2", "other"]

    def test_underscore_in_prefix_is_literal(self, kv):
        kv.set("fileX3", "x")
        kv.set("file_3", "x")
        assert kv.keys("file_") == ["file_3"]

    def test_percent_in_prefix_is_literal(self, kv):
        kv.set("100%done", "x")
        kv.set("100-done", "x")
        assert kv.keys("100%") == ["100%done"]

    def test_compare_and_set_insert_only_when_absent(self, kv):
        assert kv.compare_and_set("counter", None, "1")
        assert not kv.compare_and_set("counter", None, "9")
        assert kv.get("counter") == "1"

    def test_compare_and_set_requires_expected_value(self, kv):
        kv.set("counter", "1")
        assert not kv.compare_and_set("counter", "0", "5")
        assert kv.get("counter") == "1"
        assert kv.compare_and_set("counter", "1", "2")
        assert kv.get("counter") == "2"

    def test_ping(self, kv):
        assert kv.ping()


class TestBuildStore:

    def test_memory_backend(self):
        store = build_store(Settings(store_backend=StoreBackend.MEMORY))
        assert isinstance(store, MemoryKeyValueStore)

    def test_sql_backend_creates_table(self):
        store = build_store(Settings(store_backend=StoreBackend.SQL), engine=make_engine("sqlite://"))
        assert isinstance(store, SqlKeyValueStore)
        assert store.keys() == []

    def test_sql_store_shared_across_sessions(self):
        engine = make_engine("sqlite://")
        first = build_store(Settings(store_backend=StoreBackend.SQL), engine=engine)
        second = build_store(Settings(store_backend=StoreBackend.SQL), engine=engine)
        first.set("fileSystem", '{"nextId": 4}')
        assert second.get("fileSystem") == '{"nextId": 4}'
