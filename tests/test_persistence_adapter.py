"""Unit tests for PersistenceAdapter: counter handling, records, and reload."""

import json

import pytest

from palettefs.exceptions import FileRecordNotFoundError, InvalidArgumentError, PersistenceError
from palettefs.models import FileRecord
from palettefs.repositories import MemoryKeyValueStore
from palettefs.services import PersistenceAdapter


def _stored(store, file_id):
    return json.loads(store.get(f"file_{file_id}"))


class TestLoadMetadata:

    def test_missing_metadata_starts_at_one(self, store):
        adapter = PersistenceAdapter(store)
        assert adapter.load_metadata() == 1

    def test_reads_stored_counter(self, store):
        store.set("fileSystem", json.dumps({"nextId": 12}))
        assert PersistenceAdapter(store).load_metadata() == 12

    @pytest.mark.parametrize("raw", ["{broken", "[]", '{"nextId": "7"}', '{"nextId": 0}', '{"nextId": true}'])
    def test_corrupt_metadata_resets(self, store, raw):
        store.set("fileSystem", raw)
        assert PersistenceAdapter(store).load_metadata() == 1

    def test_corrupt_metadata_never_reuses_stored_ids(self, store):
        store.set("fileSystem", "{broken")
        store.set("file_4", json.dumps({"name": "a.json", "folderPath": "Photos", "content": "{}"}))
        assert PersistenceAdapter(store).load_metadata() == 5

    def test_counter_behind_records_is_advanced(self, store):
        store.set("fileSystem", json.dumps({"nextId": 2}))
        store.set("file_3", json.dumps({"name": "a.json", "folderPath": "Photos", "content": "{}"}))
        assert PersistenceAdapter(store).load_metadata() == 4

    def test_custom_key_names(self):
        store = MemoryKeyValueStore({"meta": json.dumps({"nextId": 3})})
        adapter = PersistenceAdapter(store, metadata_key="meta", file_key_prefix="rec:")
        assert adapter.load_metadata() == 3
        assert adapter.file_key(3) == "rec:3"


class TestPersistNewFile:

    def test_assigns_id_and_writes_counter_and_record(self, store):
        adapter = PersistenceAdapter(store)
        adapter.load_metadata()
        record = adapter.persist_new_file("Photos", FileRecord(name="sunset.png", content="AAA="))

        assert record.id == 1
        assert record.folder_path == "Photos"
        assert json.loads(store.get("fileSystem")) == {"nextId": 2}
        assert _stored(store, 1) == {"name": "sunset.png", "folderPath": "Photos", "content": "AAA="}

    def test_ids_strictly_increase(self, store):
        adapter = PersistenceAdapter(store)
        ids = [adapter.persist_new_file("Photos", FileRecord(name=f"{i}.png")).id for i in range(5)]
        assert ids == [1, 2, 3, 4, 5]

    def test_two_adapters_on_one_store_never_collide(self, store):
        first = PersistenceAdapter(store)
        second = PersistenceAdapter(store)
        first.load_metadata()
        second.load_metadata()

        a = first.persist_new_file("Photos", FileRecord(name="a.png"))
        b = second.persist_new_file("Photos", FileRecord(name="b.png"))

        assert a.id != b.id
        assert _stored(store, a.id)["name"] == "a.png"
        assert _stored(store, b.id)["name"] == "b.png"

    def test_rejects_empty_folder_path(self, store):
        with pytest.raises(InvalidArgumentError):
            PersistenceAdapter(store).persist_new_file("", FileRecord(name="a.png"))

    def test_rejects_already_persisted_record(self, store):
        with pytest.raises(InvalidArgumentError):
            PersistenceAdapter(store).persist_new_file("Photos", FileRecord(name="a.png", id=3))

    def test_gives_up_when_counter_keeps_moving(self, store):
        class ContendedStore(MemoryKeyValueStore):
            def compare_and_set(self, key, expected, value):
                return False

        adapter = PersistenceAdapter(ContendedStore(), id_allocation_retries=3)
        with pytest.raises(PersistenceError):
            adapter.persist_new_file("Photos", FileRecord(name="a.png"))


class TestOverwriteAndErase:

    def test_overwrite_keeps_id_and_counter(self, store):
        adapter = PersistenceAdapter(store)
        record = adapter.persist_new_file("Photos", FileRecord(name="a.json", content="{}"))
        record.content = '{"x": 1}'
        adapter.overwrite(record)

        assert _stored(store, record.id)["content"] == '{"x": 1}'
        assert json.loads(store.get("fileSystem")) == {"nextId": 2}

    def test_erase_leaves_counter(self, store):
        adapter = PersistenceAdapter(store)
        record = adapter.persist_new_file("Photos", FileRecord(name="a.png"))
        adapter.erase(record)

        assert store.get("file_1") is None
        assert json.loads(store.get("fileSystem")) == {"nextId": 2}

    @pytest.mark.parametrize("file_id", [0, -1])
    def test_builtin_records_rejected(self, store, file_id):
        adapter = PersistenceAdapter(store)
        with pytest.raises(InvalidArgumentError):
            adapter.erase(FileRecord(name="Logo", id=file_id))
        with pytest.raises(InvalidArgumentError):
            adapter.overwrite(FileRecord(name="Logo", id=file_id))

    def test_overwrite_after_erase_rejected(self, store):
        adapter = PersistenceAdapter(store)
        record = adapter.persist_new_file("Photos", FileRecord(name="a.json", content="{}"))
        adapter.erase(record)

        with pytest.raises(FileRecordNotFoundError):
            adapter.overwrite(record)
        assert store.get("file_1") is None

    def test_overwrite_unallocated_id_rejected(self, store):
        adapter = PersistenceAdapter(store)
        adapter.persist_new_file("Photos", FileRecord(name="a.json", content="{}"))

        with pytest.raises(FileRecordNotFoundError):
            adapter.overwrite(FileRecord(name="b.json", id=1000, folder_path="Photos", content="{}"))
        assert store.get("file_1000") is None
        assert adapter.load_metadata() == 2

    def test_load_file_by_id(self, store):
        adapter = PersistenceAdapter(store)
        adapter.persist_new_file("Photos", FileRecord(name="a.png", content="AAA="))
        loaded = adapter.load_file_by_id(1)
        assert loaded.name == "a.png"
        assert loaded.content == "AAA="
        assert adapter.load_file_by_id(2) is None
        assert adapter.load_file_by_id(0) is None

    def test_load_file_by_id_corrupt_returns_none(self, store):
        store.set("file_1", "not json")
        assert PersistenceAdapter(store).load_file_by_id(1) is None


class TestReload:

    def test_builtin_tree_only_on_empty_store(self, store, catalog):
        tree = PersistenceAdapter(store).reload(catalog)
        assert [r.name for r in tree.roots] == ["Named Colors", "Custom Palettes", "Photos"]
        assert tree.file_count() == 5

    def test_user_files_attached_to_their_folders(self, store, catalog):
        adapter = PersistenceAdapter(store)
        adapter.persist_new_file("Named Colors/Modern", FileRecord(name="mine.json", content="[]"))

        tree = adapter.reload(catalog)
        modern = tree.resolve("Named Colors/Modern")
        assert [f.name for f in modern.files] == ["Web Colors", "Pantone", "mine.json"]
        assert modern.get_file("mine.json").id == 1

    def test_deleted_ids_skipped(self, store, catalog):
        adapter = PersistenceAdapter(store)
        first = adapter.persist_new_file("Photos", FileRecord(name="a.png"))
        adapter.persist_new_file("Photos", FileRecord(name="b.png"))
        adapter.erase(first)

        tree = adapter.reload(catalog)
        assert [f.name for f in tree.resolve("Photos").files] == ["b.png"]

    def test_unknown_folder_is_recreated(self, store, catalog):
        adapter = PersistenceAdapter(store)
        adapter.persist_new_file("Gradients/Warm", FileRecord(name="g.json", content="{}"))

        tree = adapter.reload(catalog)
        warm = tree.resolve("Gradients/Warm")
        assert warm is not None
        assert warm.parent.name == "Gradients"
        assert warm.get_file("g.json") is not None

    def test_unresolvable_folder_falls_back_to_first_root(self, store, catalog):
        adapter = PersistenceAdapter(store, recreate_missing_folders=False)
        adapter.persist_new_file("Gradients/Warm", FileRecord(name="g.json", content="{}"))

        tree = adapter.reload(catalog)
        assert tree.resolve("Gradients") is None
        first = tree.roots[0]
        orphan = first.get_file("g.json")
        assert orphan is not None
        assert orphan.folder_path == "Named Colors"

    def test_blank_folder_path_falls_back_to_first_root(self, store, catalog):
        store.set("fileSystem", json.dumps({"nextId": 2}))
        store.set("file_1", json.dumps({"name": "lost.png", "folderPath": "", "content": "AAA="}))

        tree = PersistenceAdapter(store).reload(catalog)
        assert tree.roots[0].get_file("lost.png") is not None

    def test_unreadable_record_skipped_rest_loaded(self, store, catalog):
        store.set("fileSystem", json.dumps({"nextId": 3}))
        store.set("file_1", "{not json")
        store.set("file_2", json.dumps({"name": "ok.png", "folderPath": "Photos", "content": "AAA="}))

        tree = PersistenceAdapter(store).reload(catalog)
        assert [f.name for f in tree.resolve("Photos").files] == ["ok.png"]

    def test_parents_consistent_after_reload(self, store, catalog):
        adapter = PersistenceAdapter(store)
        adapter.persist_new_file("A/B/C", FileRecord(name="deep.json", content="{}"))
        tree = adapter.reload(catalog)
        for root in tree.roots:
            assert root.parent is None
        for folder in tree.flatten():
            for child in folder.children:
                assert child.parent is folder

    def test_reload_builds_fresh_nodes(self, store, catalog):
        adapter = PersistenceAdapter(store)
        first = adapter.reload(catalog)
        second = adapter.reload(catalog)
        assert first.roots[0] is not second.roots[0]

    def test_empty_catalog_orphans_go_to_uncategorized(self, store):
        adapter = PersistenceAdapter(store, recreate_missing_folders=False)
        adapter.persist_new_file("Photos", FileRecord(name="a.png"))
        tree = adapter.reload(lambda: [])
        assert tree.roots[0].name == "Uncategorized"
        assert tree.roots[0].get_file("a.png") is not None
