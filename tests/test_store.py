"""Tests for the in-memory and JSON file record stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from skillswap.store import InMemoryRecordStore, JsonFileRecordStore, StoreError


class TestInMemoryRecordStore:
    """Tests for InMemoryRecordStore."""

    def test_insert_assigns_id_and_timestamp(self) -> None:
        row = InMemoryRecordStore().insert("skills", {"title": "x"})
        assert row["id"]
        assert row["created_at"]

    def test_select_newest_first(self) -> None:
        store = InMemoryRecordStore()
        ids = [store.insert("skills", {"n": i})["id"] for i in range(5)]
        assert [r["id"] for r in store.select("skills")] == list(reversed(ids))

    def test_ties_keep_newest_first(self) -> None:
        store = InMemoryRecordStore(
            {"skills": [{"id": "old", "created_at": "t"}, {"id": "new", "created_at": "t"}]}
        )
        assert [r["id"] for r in store.select("skills")] == ["new", "old"]

    def test_select_filters_by_equality(self) -> None:
        store = InMemoryRecordStore()
        store.insert("skills", {"user_id": "u1", "is_active": True})
        store.insert("skills", {"user_id": "u1", "is_active": False})
        store.insert("skills", {"user_id": "u2", "is_active": True})
        assert len(store.select("skills", {"user_id": "u1"})) == 2
        assert len(store.select("skills", {"user_id": "u1", "is_active": True})) == 1

    def test_select_returns_copies(self) -> None:
        store = InMemoryRecordStore()
        store.insert("skills", {"title": "x"})
        store.select("skills")[0]["title"] = "changed"
        assert store.select("skills")[0]["title"] == "x"

    def test_select_in(self) -> None:
        store = InMemoryRecordStore()
        for user in ("u1", "u2", "u3"):
            store.insert("profiles", {"user_id": user})
        assert {r["user_id"] for r in store.select_in("profiles", "user_id", ["u1", "u3", "u9"])} == {"u1", "u3"}

    def test_update_missing_row_raises(self) -> None:
        with pytest.raises(StoreError):
            InMemoryRecordStore().update("skills", "nope", {"is_active": False})

    def test_upsert_requires_key(self) -> None:
        with pytest.raises(StoreError):
            InMemoryRecordStore().upsert("profiles", "user_id", {"username": "x"})


class TestJsonFileRecordStore:
    """Tests for JsonFileRecordStore."""

    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "data.json"
        first = JsonFileRecordStore(path)
        row = first.insert("skills", {"title": "Guitar"})
        assert path.exists()

        second = JsonFileRecordStore(path)
        assert second.select("skills") == [row]

    def test_timestamps_stay_increasing_after_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        older = JsonFileRecordStore(path).insert("skills", {"title": "a"})
        newer = JsonFileRecordStore(path).insert("skills", {"title": "b"})
        assert newer["created_at"] > older["created_at"]

    def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            JsonFileRecordStore(path)

    def test_non_mapping_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        path.write_text(json.dumps([1, 2]), encoding="utf-8")
        with pytest.raises(StoreError):
            JsonFileRecordStore(path)


class _DiskFullStore(JsonFileRecordStore):
    """File store whose saves fail once ``full`` is set."""

    full = False

    def _written(self) -> None:
        if self.full:
            raise StoreError("disk full")
        super()._written()


class TestFailedWrites:
    """A write that cannot be saved leaves the in-memory tables unchanged."""

    @pytest.fixture()
    def disk_full(self, tmp_path: Path) -> _DiskFullStore:
        store = _DiskFullStore(tmp_path / "data.json")
        store.insert("skills", {"id": "s1", "title": "Guitar", "is_active": True})
        store.upsert("profiles", "user_id", {"user_id": "u1", "username": "alice"})
        store.full = True
        return store

    def test_insert_rolled_back(self, disk_full: _DiskFullStore) -> None:
        with pytest.raises(StoreError):
            disk_full.insert("skills", {"title": "Piano"})
        assert [r["id"] for r in disk_full.select("skills")] == ["s1"]

    def test_update_rolled_back(self, disk_full: _DiskFullStore) -> None:
        with pytest.raises(StoreError):
            disk_full.update("skills", "s1", {"is_active": False, "note": "x"})
        row = disk_full.select("skills")[0]
        assert row["is_active"] is True
        assert "note" not in row

    def test_upsert_existing_rolled_back(self, disk_full: _DiskFullStore) -> None:
        with pytest.raises(StoreError):
            disk_full.upsert("profiles", "user_id", {"user_id": "u1", "username": "alice2"})
        assert disk_full.select("profiles")[0]["username"] == "alice"

    def test_upsert_new_rolled_back(self, disk_full: _DiskFullStore) -> None:
        with pytest.raises(StoreError):
            disk_full.upsert("profiles", "user_id", {"user_id": "u2", "username": "bob"})
        assert [r["user_id"] for r in disk_full.select("profiles")] == ["u1"]

    def test_file_keeps_last_saved_state(self, disk_full: _DiskFullStore) -> None:
        with pytest.raises(StoreError):
            disk_full.insert("skills", {"title": "Piano"})
        assert [r["id"] for r in JsonFileRecordStore(disk_full.path).select("skills")] == ["s1"]

    def test_unwritable_path_raises_store_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonFileRecordStore(blocker / "data.json")
        with pytest.raises(StoreError):
            store.insert("skills", {"title": "Guitar"})
        assert store.select("skills") == []
