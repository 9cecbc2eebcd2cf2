"""Reconciliation: rewrite capture dates so photos match their album date."""

import logging
from datetime import datetime, time
from pathlib import PurePath, PurePosixPath
from typing import Iterable, Optional

from albumaudit.core.cache import AlbumCache
from albumaudit.core.exif_codec import CaptureTags, ExifCodec, TagDecodeError, TagEncodeError
from albumaudit.core.models import CalendarDate, FixOutcome, PhotoRecord
from albumaudit.core.photo_auditor import PhotoAuditor
from albumaudit.core.storage import StorageBackend, StorageError
from albumaudit.utils.constants import BACKUP_SUFFIX, DEFAULT_FIX_HOUR
from albumaudit.utils.logging import SUCCESS

logger = logging.getLogger(__name__)


class ReconcileError(Exception):
    """Base error for photo date fixes."""

    pass


class UnsupportedFormatError(ReconcileError):
    """The photo's format cannot carry writable capture tags."""

    pass


class WriteError(ReconcileError):
    """A fix failed; the underlying cause is chained."""

    pass


def compute_target_datetime(
    album_date: CalendarDate,
    existing: Optional[datetime] = None,
) -> datetime:
    """
    Date-time to write for a photo in an album.

    Keeps the existing time of day when one is known, so the order of shots
    within the album survives the fix; otherwise uses noon.
    """
    if existing is not None:
        return datetime.combine(album_date, existing.time())
    return datetime.combine(album_date, time(DEFAULT_FIX_HOUR, 0, 0))


class ReconciliationEngine:
    """Rewrites capture dates in place, keeping a backup of every original."""

    MAX_BACKUPS = 9999

    def __init__(
        self,
        storage: StorageBackend,
        codec: Optional[ExifCodec] = None,
        photo_auditor: Optional[PhotoAuditor] = None,
        cache: Optional[AlbumCache] = None,
        backup_suffix: str = BACKUP_SUFFIX,
        dry_run: bool = False,
    ):
        """
        Initialize the engine.

        Args:
            storage: Storage backend holding the photos
            codec: Tag codec (shared with the auditor when not given)
            photo_auditor: Auditor used to verify what landed on disk
            cache: Album cache to invalidate after every write
            backup_suffix: Suffix appended to the original name for backups
            dry_run: If True, compute targets but write nothing
        """
        self.storage = storage
        self.photo_auditor = photo_auditor or PhotoAuditor(storage, codec)
        self.codec = codec or self.photo_auditor.codec
        self.cache = cache
        self.backup_suffix = backup_suffix
        self.dry_run = dry_run

    def backup_ref_for(self, photo: PhotoRecord) -> PurePath:
        """
        First free backup name for a photo.

        "IMG_1.jpg" -> "IMG_1.jpg.bak", then "IMG_1.jpg_001.bak", ...
        Existing backups are never reused.
        """
        candidate = self.storage.child_ref(photo.album_ref, f"{photo.name}{self.backup_suffix}")
        if not self.storage.exists(candidate):
            return candidate

        base = PurePosixPath(f"{photo.name}{self.backup_suffix}")
        for counter in range(1, self.MAX_BACKUPS + 1):
            name = f"{base.stem}_{counter:03d}{base.suffix}"
            candidate = self.storage.child_ref(photo.album_ref, name)
            if not self.storage.exists(candidate):
                return candidate

        raise WriteError(f"Cannot find a free backup name for {photo.name}")

    def fix_one(self, photo: PhotoRecord, album_date: Optional[CalendarDate]) -> PhotoRecord:
        """
        Rewrite a photo's capture dates to the album date.

        Sequence: read, decode, compute the target, encode, write a backup,
        overwrite the original, then re-read and re-audit what is on disk.

        Args:
            photo: Photo to fix (its best capture date supplies the time of day)
            album_date: Date of the album holding the photo

        Returns:
            PhotoRecord built from the bytes actually written

        Raises:
            UnsupportedFormatError: If the photo cannot be written (no I/O done)
            WriteError: If any step fails
        """
        return self._fix(photo, album_date).updated

    def fix_all(
        self,
        photos: Iterable[PhotoRecord],
        album_date: Optional[CalendarDate],
    ) -> list[FixOutcome]:
        """
        Fix every writable photo, one after another.

        Failures are captured per photo and never stop the batch.

        Returns:
            One FixOutcome per writable photo, in input order
        """
        outcomes: list[FixOutcome] = []
        for photo in photos:
            if not photo.is_writable:
                continue
            try:
                outcomes.append(self._fix(photo, album_date))
            except ReconcileError as e:
                logger.error(f"Failed to fix {photo.name}: {e}")
                outcomes.append(FixOutcome(photo=photo, error=e))

        fixed = sum(1 for outcome in outcomes if outcome.succeeded)
        failed = len(outcomes) - fixed
        if self.dry_run:
            logger.info(f"[DRY RUN] Would fix {fixed} of {len(outcomes)} photos ({failed} failed)")
        else:
            level = SUCCESS if not failed else logging.WARNING
            logger.log(level, f"Fixed {fixed} of {len(outcomes)} photos ({failed} failed)")
        return outcomes

    def _fix(self, photo: PhotoRecord, album_date: Optional[CalendarDate]) -> FixOutcome:
        if not photo.is_writable:
            raise UnsupportedFormatError(
                f"{photo.name}: format {photo.extension or '(none)'} cannot be rewritten"
            )
        if album_date is None:
            raise WriteError(f"{photo.name}: album has no valid date")

        try:
            original = self.storage.read_bytes(photo.ref)
        except StorageError as e:
            raise WriteError(f"{photo.name}: cannot read original") from e

        existing = photo.best_capture_date
        try:
            existing = existing or self.codec.decode(original).best_date
        except TagDecodeError:
            logger.debug(f"{photo.name}: no existing capture tags, creating new ones")

        target = compute_target_datetime(album_date, existing)
        updates = CaptureTags(date_original=target, date_digitized=target, date_modified=target)

        try:
            updated_bytes = self.codec.encode(original, updates)
        except TagEncodeError as e:
            raise WriteError(f"{photo.name}: cannot encode new dates") from e

        if self.dry_run:
            logger.info(f"[DRY RUN] Would set {photo.name} to {target:%Y-%m-%d %H:%M:%S}")
            return FixOutcome(photo=photo, updated=photo, target_date=target)

        backup_ref = self.backup_ref_for(photo)
        try:
            self.storage.write_bytes(backup_ref, original)
        except StorageError as e:
            raise WriteError(f"{photo.name}: cannot write backup") from e

        try:
            self.storage.write_bytes(photo.ref, updated_bytes)
        except StorageError as e:
            raise WriteError(f"{photo.name}: cannot write updated file") from e
        finally:
            if self.cache is not None:
                self.cache.invalidate()

        try:
            written = self.storage.read_bytes(photo.ref)
        except StorageError as e:
            raise WriteError(f"{photo.name}: written but cannot be re-read for verification") from e

        inspection = self.photo_auditor.inspect(photo.name, written, album_date)
        verified = PhotoAuditor.apply_inspection(photo, inspection, len(written))

        logger.log(
            SUCCESS,
            f"Fixed {photo.name}: {target:%Y-%m-%d %H:%M:%S} ({verified.classification.value})",
            extra={"detail": f"backup: {backup_ref.name}"},
        )
        return FixOutcome(photo=photo, updated=verified, backup_ref=backup_ref, target_date=target)
