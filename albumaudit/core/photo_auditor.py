"""Per-photo audit: best capture date and its relationship to the album date."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import PurePath
from typing import Optional

from albumaudit.core.date_rules import calendar_dates_equal, day_gap
from albumaudit.core.exif_codec import ExifCodec, TagDecodeError, extension_of
from albumaudit.core.models import CalendarDate, Classification, PhotoRecord
from albumaudit.core.storage import Entry, StorageBackend, StorageError

logger = logging.getLogger(__name__)

UNSUPPORTED_WARNING = "unsupported file type for metadata"
DECODE_FAILED_WARNING = "failed to read capture metadata"


@dataclass(frozen=True)
class PhotoInspection:
    """Metadata-derived part of a PhotoRecord."""

    best_capture_date: Optional[datetime]
    classification: Classification
    warnings: tuple[str, ...] = ()
    camera: Optional[str] = None
    lens: Optional[str] = None


def classify(
    album_date: Optional[CalendarDate],
    capture_date: Optional[datetime],
) -> Classification:
    """
    Classify a capture date against an album date (date-only).

    Args:
        album_date: Date parsed from the album name, None for invalid names
        capture_date: Best capture date of the photo

    Returns:
        UNKNOWN without an album date, MISSING_DATE without a capture date,
        otherwise CORRECT, LATER_THAN_ALBUM or EARLIER_THAN_ALBUM.
    """
    if album_date is None:
        return Classification.UNKNOWN
    if capture_date is None:
        return Classification.MISSING_DATE
    if calendar_dates_equal(album_date, capture_date):
        return Classification.CORRECT
    if day_gap(capture_date, album_date) > 0:
        return Classification.LATER_THAN_ALBUM
    return Classification.EARLIER_THAN_ALBUM


class PhotoAuditor:
    """Reads a photo's capture metadata and classifies it.

    Holds no per-photo state, so distinct photos can be audited from
    several threads at once.
    """

    def __init__(self, storage: StorageBackend, codec: Optional[ExifCodec] = None):
        self.storage = storage
        self.codec = codec or ExifCodec()

    def inspect(
        self,
        name: str,
        data: bytes,
        album_date: Optional[CalendarDate],
    ) -> PhotoInspection:
        """
        Derive the best capture date and classification from raw bytes.

        Args:
            name: File name (used for format detection)
            data: File content
            album_date: Album date, or None for albums without a valid date

        Returns:
            PhotoInspection
        """
        if not self.codec.can_decode(name, data):
            return PhotoInspection(
                best_capture_date=None,
                classification=Classification.UNSUPPORTED,
                warnings=(UNSUPPORTED_WARNING,),
            )

        try:
            tags = self.codec.decode(data)
        except TagDecodeError as e:
            logger.debug(f"No capture metadata in {name}: {e}")
            return PhotoInspection(
                best_capture_date=None,
                classification=classify(album_date, None),
                warnings=(DECODE_FAILED_WARNING,),
            )

        best = tags.best_date
        return PhotoInspection(
            best_capture_date=best,
            classification=classify(album_date, best),
            camera=tags.camera,
            lens=tags.lens_model,
        )

    def audit(
        self,
        entry: Entry,
        album_ref: PurePath,
        album_date: Optional[CalendarDate],
    ) -> PhotoRecord:
        """
        Read a photo through the storage backend and build its record.

        A read failure is recorded as a warning on the returned record.

        Args:
            entry: Directory entry of the photo
            album_ref: Reference of the album holding it
            album_date: Album date, or None

        Returns:
            PhotoRecord
        """
        record = PhotoRecord(
            ref=entry.ref,
            album_ref=album_ref,
            name=entry.name,
            size_bytes=entry.size,
            extension=extension_of(entry.name),
            is_writable=self.codec.can_encode(entry.name),
        )

        try:
            data = self.storage.read_bytes(entry.ref)
        except StorageError as e:
            logger.warning(f"Cannot read {entry.name}: {e}")
            return replace(
                record,
                classification=classify(album_date, None),
                warnings=(f"failed to read file: {e}",),
            )

        return self.apply_inspection(record, self.inspect(entry.name, data, album_date), len(data))

    @staticmethod
    def apply_inspection(
        record: PhotoRecord,
        inspection: PhotoInspection,
        size_bytes: Optional[int] = None,
    ) -> PhotoRecord:
        """Build a new record from ``record`` with freshly read metadata."""
        return PhotoRecord(
            ref=record.ref,
            album_ref=record.album_ref,
            name=record.name,
            size_bytes=record.size_bytes if size_bytes is None else size_bytes,
            extension=record.extension,
            is_writable=record.is_writable,
            best_capture_date=inspection.best_capture_date,
            classification=inspection.classification,
            warnings=inspection.warnings,
            camera=inspection.camera,
            lens=inspection.lens,
        )
