"""Unit tests for albumaudit.core.reconciler."""

from dataclasses import replace
from datetime import date, datetime
from pathlib import PurePosixPath
from unittest.mock import MagicMock, patch

import pytest

from albumaudit.core.exif_codec import ExifCodec, TagEncodeError
from albumaudit.core.models import Classification
from albumaudit.core.photo_auditor import PhotoAuditor
from albumaudit.core.reconciler import (
    ReconciliationEngine,
    UnsupportedFormatError,
    WriteError,
    compute_target_datetime,
)
from albumaudit.core.storage import StorageError

ALBUM = PurePosixPath("/memory/20200615 Trip")
ALBUM_DATE = date(2020, 6, 15)


@pytest.fixture
def trip_photos(trip_storage):
    """Audited records of every photo in the trip album, keyed by name."""
    auditor = PhotoAuditor(trip_storage)
    return {
        entry.name: auditor.audit(entry, ALBUM, ALBUM_DATE)
        for entry in trip_storage.list_entries(ALBUM)
        if not entry.is_dir
    }


class TestComputeTargetDatetime:
    """Tests for compute_target_datetime."""

    def test_keeps_time_of_day(self):
        existing = datetime(2020, 6, 20, 9, 12, 33)

        assert compute_target_datetime(ALBUM_DATE, existing) == datetime(2020, 6, 15, 9, 12, 33)

    def test_noon_without_existing(self):
        assert compute_target_datetime(ALBUM_DATE) == datetime(2020, 6, 15, 12, 0, 0)


class TestBackupRef:
    """Tests for backup naming."""

    def test_first_backup(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)

        assert engine.backup_ref_for(trip_photos["b.jpg"]) == ALBUM / "b.jpg.bak"

    def test_numbered_when_taken(self, trip_storage, trip_photos):
        trip_storage.add_file(ALBUM / "b.jpg.bak", b"old")
        trip_storage.add_file(ALBUM / "b.jpg_001.bak", b"older")
        engine = ReconciliationEngine(trip_storage)

        assert engine.backup_ref_for(trip_photos["b.jpg"]) == ALBUM / "b.jpg_002.bak"

    def test_custom_suffix(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage, backup_suffix=".orig")

        assert engine.backup_ref_for(trip_photos["b.jpg"]) == ALBUM / "b.jpg.orig"


class TestFixOne:
    """Tests for ReconciliationEngine.fix_one."""

    def test_later_photo_fixed(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)
        original = trip_storage.read_bytes(ALBUM / "b.jpg")

        updated = engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        assert updated.classification == Classification.CORRECT
        assert updated.best_capture_date == datetime(2020, 6, 15, 9, 0)
        assert trip_storage.read_bytes(ALBUM / "b.jpg.bak") == original
        tags = ExifCodec().decode(trip_storage.read_bytes(ALBUM / "b.jpg"))
        assert tags.date_original == datetime(2020, 6, 15, 9, 0)
        assert tags.date_digitized == datetime(2020, 6, 15, 9, 0)
        assert tags.date_modified == datetime(2020, 6, 15, 9, 0)

    def test_missing_date_gets_noon(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)

        updated = engine.fix_one(trip_photos["c.jpg"], ALBUM_DATE)

        assert updated.best_capture_date == datetime(2020, 6, 15, 12, 0)
        assert updated.classification == Classification.CORRECT
        assert updated.warnings == ()

    def test_time_of_day_read_from_file_when_record_has_none(self, trip_storage, trip_photos):
        photo = replace(trip_photos["b.jpg"], best_capture_date=None)
        engine = ReconciliationEngine(trip_storage)

        updated = engine.fix_one(photo, ALBUM_DATE)

        assert updated.best_capture_date == datetime(2020, 6, 15, 9, 0)

    def test_fixing_twice_keeps_both_backups(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)
        first_original = trip_storage.read_bytes(ALBUM / "b.jpg")

        updated = engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)
        after_first = trip_storage.read_bytes(ALBUM / "b.jpg")
        again = engine.fix_one(updated, ALBUM_DATE)

        assert again.classification == Classification.CORRECT
        assert again.best_capture_date == updated.best_capture_date
        assert trip_storage.read_bytes(ALBUM / "b.jpg.bak") == first_original
        assert trip_storage.read_bytes(ALBUM / "b.jpg_001.bak") == after_first

    def test_unsupported_does_no_io(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)

        with patch.object(trip_storage, "read_bytes") as read, \
                patch.object(trip_storage, "write_bytes") as write:
            with pytest.raises(UnsupportedFormatError):
                engine.fix_one(trip_photos["d.png"], ALBUM_DATE)

        read.assert_not_called()
        write.assert_not_called()

    def test_no_album_date(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)

        with pytest.raises(WriteError, match="no valid date"):
            engine.fix_one(trip_photos["b.jpg"], None)

    def test_read_failure(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)

        with patch.object(trip_storage, "read_bytes", side_effect=StorageError("gone")):
            with pytest.raises(WriteError) as exc_info:
                engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        assert isinstance(exc_info.value.__cause__, StorageError)

    def test_encode_failure_leaves_original(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)
        original = trip_storage.read_bytes(ALBUM / "b.jpg")

        with patch.object(engine.codec, "encode", side_effect=TagEncodeError("bad")):
            with pytest.raises(WriteError):
                engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        assert trip_storage.read_bytes(ALBUM / "b.jpg") == original
        assert not trip_storage.exists(ALBUM / "b.jpg.bak")

    def test_write_failure_leaves_original(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)
        original = trip_storage.read_bytes(ALBUM / "b.jpg")
        real_write = trip_storage.write_bytes

        def fail_on_original(ref, data):
            if ref == ALBUM / "b.jpg":
                raise StorageError("disk full")
            real_write(ref, data)

        with patch.object(trip_storage, "write_bytes", side_effect=fail_on_original):
            with pytest.raises(WriteError, match="cannot write updated file"):
                engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        assert trip_storage.read_bytes(ALBUM / "b.jpg") == original
        assert trip_storage.read_bytes(ALBUM / "b.jpg.bak") == original

    def test_backup_failure_skips_write(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)
        original = trip_storage.read_bytes(ALBUM / "b.jpg")

        with patch.object(trip_storage, "write_bytes", side_effect=StorageError("read-only")) as write:
            with pytest.raises(WriteError, match="backup"):
                engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        assert write.call_count == 1
        assert trip_storage.read_bytes(ALBUM / "b.jpg") == original

    def test_cache_invalidated_after_write(self, trip_storage, trip_photos):
        cache = MagicMock()
        engine = ReconciliationEngine(trip_storage, cache=cache)

        engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        cache.invalidate.assert_called_once()

    def test_cache_invalidated_even_when_write_fails(self, trip_storage, trip_photos):
        cache = MagicMock()
        engine = ReconciliationEngine(trip_storage, cache=cache)
        real_write = trip_storage.write_bytes

        def fail_on_original(ref, data):
            if ref == ALBUM / "b.jpg":
                raise StorageError("disk full")
            real_write(ref, data)

        with patch.object(trip_storage, "write_bytes", side_effect=fail_on_original):
            with pytest.raises(WriteError):
                engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        cache.invalidate.assert_called_once()

    def test_dry_run_writes_nothing(self, trip_storage, trip_photos):
        cache = MagicMock()
        engine = ReconciliationEngine(trip_storage, cache=cache, dry_run=True)
        original = trip_storage.read_bytes(ALBUM / "b.jpg")

        updated = engine.fix_one(trip_photos["b.jpg"], ALBUM_DATE)

        assert updated == trip_photos["b.jpg"]
        assert trip_storage.read_bytes(ALBUM / "b.jpg") == original
        assert not trip_storage.exists(ALBUM / "b.jpg.bak")
        cache.invalidate.assert_not_called()


class TestFixAll:
    """Tests for ReconciliationEngine.fix_all."""

    def test_skips_read_only_photos(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)

        outcomes = engine.fix_all(trip_photos.values(), ALBUM_DATE)

        assert [o.photo.name for o in outcomes] == ["a.jpg", "b.jpg", "c.jpg"]
        assert all(o.succeeded for o in outcomes)
        assert all(o.updated.classification == Classification.CORRECT for o in outcomes)
        assert outcomes[1].backup_ref == ALBUM / "b.jpg.bak"
        assert outcomes[1].target_date == datetime(2020, 6, 15, 9, 0)

    def test_continues_past_failures(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage)
        real_read = trip_storage.read_bytes

        def flaky_read(ref):
            if ref == ALBUM / "a.jpg":
                raise StorageError("io error")
            return real_read(ref)

        with patch.object(trip_storage, "read_bytes", side_effect=flaky_read):
            outcomes = engine.fix_all(trip_photos.values(), ALBUM_DATE)

        assert [o.succeeded for o in outcomes] == [False, True, True]
        assert isinstance(outcomes[0].error, WriteError)
        assert outcomes[0].updated is None

    def test_dry_run_reports_targets(self, trip_storage, trip_photos):
        engine = ReconciliationEngine(trip_storage, dry_run=True)

        outcomes = engine.fix_all(trip_photos.values(), ALBUM_DATE)

        assert [o.target_date for o in outcomes] == [
            datetime(2020, 6, 15, 10, 0),
            datetime(2020, 6, 15, 9, 0),
            datetime(2020, 6, 15, 12, 0),
        ]
        assert all(o.backup_ref is None for o in outcomes)
