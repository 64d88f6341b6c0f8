"""Tests for the key-value stores backing the history."""

from runtime.store.kv_store import FileKeyValueStore, InMemoryKeyValueStore


class TestInMemory:

    def test_roundtrip_and_delete(self):
        store = InMemoryKeyValueStore()
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        store.delete("k")
        assert store.get("k") is None

    def test_delete_missing_is_noop(self):
        InMemoryKeyValueStore().delete("nothing")


class TestFileStore:

    def test_set_creates_directory(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path / "storage"))
        store.set("thansin.chat.history.v2", "[]")
        assert (tmp_path / "storage" / "thansin.chat.history.v2.json").read_text(encoding="utf-8") == "[]"

    def test_unicode_survives(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path))
        store.set("k", "မောင် ❤️")
        assert FileKeyValueStore(str(tmp_path)).get("k") == "မောင် ❤️"

    def test_overwrite_leaves_no_temp_file(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path))
        store.set("k", "a")
        store.set("k", "b")
        assert store.get("k") == "b"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]

    def test_unsafe_key_is_sanitized(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path / "s"))
        store.set("../escape", "x")
        assert store.get("../escape") == "x"
        assert not (tmp_path / "escape.json").exists()

    def test_delete(self, tmp_path):
        store = FileKeyValueStore(str(tmp_path))
        store.set("k", "v")
        store.delete("k")
        store.delete("k")
        assert store.get("k") is None
