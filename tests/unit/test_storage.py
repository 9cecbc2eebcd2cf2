"""Unit tests for albumaudit.core.storage."""

import os
from pathlib import Path, PurePosixPath
from unittest.mock import patch

import pytest

from albumaudit.core.storage import (
    EntryKind,
    LocalStorageBackend,
    MemoryStorageBackend,
    StorageError,
)


class TestLocalStorageBackend:
    """Tests for LocalStorageBackend."""

    @pytest.fixture
    def root(self, tmp_path: Path) -> Path:
        root = tmp_path / "root"
        album = root / "20200615 Trip"
        album.mkdir(parents=True)
        (album / "b.jpg").write_bytes(b"bbb")
        (album / "a.jpg").write_bytes(b"a")
        (album / ".DS_Store").write_bytes(b"junk")
        (album / "sub").mkdir()
        return root

    def test_identity_is_resolved_root(self, root):
        storage = LocalStorageBackend(root)

        assert storage.identity == str(root.resolve())

    def test_list_entries_sorted_and_hidden_skipped(self, root):
        storage = LocalStorageBackend(root)

        entries = storage.list_entries(root / "20200615 Trip")

        assert [entry.name for entry in entries] == ["a.jpg", "b.jpg", "sub"]
        assert entries[1].size == 3
        assert entries[2].kind == EntryKind.DIR
        assert entries[0].extension == ".jpg"

    def test_list_entries_includes_hidden_when_asked(self, root):
        storage = LocalStorageBackend(root, ignore_hidden=False)

        names = [entry.name for entry in storage.list_entries(root / "20200615 Trip")]

        assert ".DS_Store" in names

    def test_list_missing_dir_raises(self, root):
        with pytest.raises(StorageError):
            LocalStorageBackend(root).list_entries(root / "nope")

    def test_read_missing_raises(self, root):
        with pytest.raises(StorageError):
            LocalStorageBackend(root).read_bytes(root / "nope.jpg")

    def test_write_replaces_content(self, root):
        storage = LocalStorageBackend(root)
        target = root / "20200615 Trip" / "a.jpg"

        storage.write_bytes(target, b"new content")

        assert target.read_bytes() == b"new content"
        leftovers = [name for name in os.listdir(target.parent) if name.endswith(".tmp")]
        assert leftovers == []

    def test_failed_write_keeps_original(self, root):
        storage = LocalStorageBackend(root)
        target = root / "20200615 Trip" / "a.jpg"

        with patch("albumaudit.core.storage.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError, match="disk full"):
                storage.write_bytes(target, b"new content")

        assert target.read_bytes() == b"a"
        leftovers = [name for name in os.listdir(target.parent) if name.endswith(".tmp")]
        assert leftovers == []

    def test_delete_file(self, root):
        storage = LocalStorageBackend(root)
        album = root / "20200615 Trip"

        storage.delete_entry(album, "a.jpg")

        assert not (album / "a.jpg").exists()

    def test_delete_dir_requires_recursive(self, root):
        storage = LocalStorageBackend(root)

        with pytest.raises(StorageError):
            storage.delete_entry(root, "20200615 Trip")

        storage.delete_entry(root, "20200615 Trip", recursive=True)
        assert not (root / "20200615 Trip").exists()

    def test_rename(self, root):
        storage = LocalStorageBackend(root)

        new_ref = storage.rename_entry(root, "20200615 Trip", "20200620 Trip")

        assert new_ref == root / "20200620 Trip"
        assert (root / "20200620 Trip" / "a.jpg").exists()
        assert not (root / "20200615 Trip").exists()

    def test_rename_refuses_existing_target(self, root):
        (root / "20200620 Trip").mkdir()
        storage = LocalStorageBackend(root)

        with pytest.raises(StorageError, match="already exists"):
            storage.rename_entry(root, "20200615 Trip", "20200620 Trip")

        assert (root / "20200615 Trip" / "a.jpg").exists()

    def test_rename_missing_source(self, root):
        with pytest.raises(StorageError, match="Not found"):
            LocalStorageBackend(root).rename_entry(root, "nope", "other")


class TestMemoryStorageBackend:
    """Tests for MemoryStorageBackend."""

    def test_add_file_creates_parents(self, memory_storage):
        ref = memory_storage.add_file(PurePosixPath("/memory/A/b/c.jpg"), b"x")

        assert memory_storage.exists(ref)
        assert memory_storage.exists(PurePosixPath("/memory/A/b"))
        assert [e.name for e in memory_storage.list_entries(PurePosixPath("/memory"))] == ["A"]

    def test_list_entries_sorted(self, trip_storage):
        entries = trip_storage.list_entries(PurePosixPath("/memory/20200615 Trip"))

        assert [entry.name for entry in entries] == ["a.jpg", "b.jpg", "c.jpg", "d.png", "sub"]
        assert entries[-1].is_dir

    def test_read_write(self, memory_storage):
        ref = memory_storage.add_file(PurePosixPath("/memory/A/a.jpg"), b"old")

        memory_storage.write_bytes(ref, b"new")

        assert memory_storage.read_bytes(ref) == b"new"

    def test_write_into_missing_dir_raises(self, memory_storage):
        with pytest.raises(StorageError):
            memory_storage.write_bytes(PurePosixPath("/memory/nope/a.jpg"), b"x")

    def test_read_missing_raises(self, memory_storage):
        with pytest.raises(StorageError):
            memory_storage.read_bytes(PurePosixPath("/memory/a.jpg"))

    def test_delete_album_recursive(self, trip_storage):
        root = PurePosixPath("/memory")

        with pytest.raises(StorageError):
            trip_storage.delete_entry(root, "20200615 Trip")
        trip_storage.delete_entry(root, "20200615 Trip", recursive=True)

        assert trip_storage.list_entries(root) == []
        assert not trip_storage.exists(root / "20200615 Trip" / "sub")

    def test_rename_dir_moves_children(self, trip_storage):
        root = PurePosixPath("/memory")

        new_ref = trip_storage.rename_entry(root, "20200615 Trip", "20200620 Trip")

        assert trip_storage.exists(new_ref / "a.jpg")
        assert trip_storage.exists(new_ref / "sub")
        assert not trip_storage.exists(root / "20200615 Trip")

    def test_rename_refuses_existing_target(self, trip_storage):
        root = PurePosixPath("/memory")
        trip_storage.add_dir(root / "Other")

        with pytest.raises(StorageError, match="already exists"):
            trip_storage.rename_entry(root, "20200615 Trip", "Other")
