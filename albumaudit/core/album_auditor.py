"""Album-level audit: structure checks and photo breakdown aggregation."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePath
from typing import Iterable, Optional

from albumaudit.core.date_rules import day_gap, parse_album_name
from albumaudit.core.exif_codec import ExifCodec, extension_of
from albumaudit.core.models import (
    AlbumAnalysis,
    AlbumRecord,
    AlbumStatusBreakdown,
    CalendarDate,
    Classification,
    PhotoRecord,
    Severity,
)
from albumaudit.core.photo_auditor import PhotoAuditor, classify
from albumaudit.core.storage import Entry, StorageBackend
from albumaudit.utils.constants import (
    ALL_IMAGE_EXTENSIONS,
    ERROR_GAP_DAYS,
    WARNING_GAP_DAYS,
)

logger = logging.getLogger(__name__)

INVALID_NAME_WARNING = "Album name does not start with a valid YYYYMMDD date"


def compute_severity(
    max_earlier_day_gap: int,
    max_later_day_gap: int,
    missing_count: int,
    warning_gap_days: int = WARNING_GAP_DAYS,
    error_gap_days: int = ERROR_GAP_DAYS,
) -> Severity:
    """
    Album severity from the worst day gaps and missing dates.

    ERROR if either gap exceeds ``error_gap_days``; WARNING if either gap
    exceeds ``warning_gap_days`` or any photo lacks a date; GOOD otherwise.
    """
    worst = max(max_earlier_day_gap, max_later_day_gap)
    if worst > error_gap_days:
        return Severity.ERROR
    if worst > warning_gap_days or missing_count > 0:
        return Severity.WARNING
    return Severity.GOOD


def accumulate(
    album_date: CalendarDate,
    photos: Iterable[PhotoRecord],
    warning_gap_days: int = WARNING_GAP_DAYS,
    error_gap_days: int = ERROR_GAP_DAYS,
) -> AlbumStatusBreakdown:
    """
    Aggregate photo classifications into an album breakdown.

    Every photo is counted exactly once, so the four counters always sum to
    ``total_analyzed``. Photos classified UNSUPPORTED or UNKNOWN are
    re-derived from their capture date so the invariant holds for any input.
    """
    correct = earlier = later = missing = total = 0
    earliest: Optional[datetime] = None
    latest: Optional[datetime] = None
    max_earlier = max_later = 0

    for photo in photos:
        total += 1
        classification = photo.classification
        if classification in (Classification.UNSUPPORTED, Classification.UNKNOWN):
            classification = classify(album_date, photo.best_capture_date)

        if classification == Classification.CORRECT:
            correct += 1
            continue
        if classification == Classification.MISSING_DATE or photo.best_capture_date is None:
            missing += 1
            continue

        captured = photo.best_capture_date
        gap = abs(day_gap(captured, album_date))
        if classification == Classification.LATER_THAN_ALBUM:
            later += 1
            max_later = max(max_later, gap)
        else:
            earlier += 1
            max_earlier = max(max_earlier, gap)

        if earliest is None or captured < earliest:
            earliest = captured
        if latest is None or captured > latest:
            latest = captured

    return AlbumStatusBreakdown(
        correct_count=correct,
        earlier_count=earlier,
        later_count=later,
        missing_count=missing,
        total_analyzed=total,
        earliest_capture_date=earliest,
        latest_capture_date=latest,
        max_earlier_day_gap=max_earlier,
        max_later_day_gap=max_later,
        severity=compute_severity(
            max_earlier, max_later, missing,
            warning_gap_days=warning_gap_days,
            error_gap_days=error_gap_days,
        ),
    )


def album_sort_key(album: AlbumRecord) -> tuple:
    """Dated albums first, newest first (ties by name); then the rest by name."""
    if album.date is not None:
        return (0, -album.date.toordinal(), album.name)
    return (1, 0, album.name)


def sort_albums(albums: Iterable[AlbumRecord]) -> list[AlbumRecord]:
    """Order albums by parsed date descending, falling back to name."""
    return sorted(albums, key=album_sort_key)


@dataclass(frozen=True)
class AlbumContents:
    """Directory entries of an album, split by role."""

    photos: tuple[Entry, ...] = ()
    writable: tuple[Entry, ...] = ()
    nested_folders: tuple[str, ...] = ()


class AlbumAuditor:
    """Audits one album folder."""

    def __init__(
        self,
        storage: StorageBackend,
        photo_auditor: Optional[PhotoAuditor] = None,
        image_extensions: Optional[set[str]] = None,
        warning_gap_days: int = WARNING_GAP_DAYS,
        error_gap_days: int = ERROR_GAP_DAYS,
    ):
        """
        Initialize the album auditor.

        Args:
            storage: Storage backend holding the albums
            photo_auditor: PhotoAuditor instance
            image_extensions: Extensions that count as photos
            warning_gap_days: Day gap above which an album is a warning
            error_gap_days: Day gap above which an album is an error
        """
        self.storage = storage
        self.photo_auditor = photo_auditor or PhotoAuditor(storage)
        self.image_extensions = image_extensions or ALL_IMAGE_EXTENSIONS
        self.warning_gap_days = warning_gap_days
        self.error_gap_days = error_gap_days

    @property
    def codec(self) -> ExifCodec:
        return self.photo_auditor.codec

    def list_contents(self, album_ref: PurePath) -> AlbumContents:
        """
        Split an album listing into photos, writable photos and sub-folders.

        Photos are returned in lexical order by name.

        Raises:
            StorageError: If the album cannot be listed
        """
        photos: list[Entry] = []
        nested: list[str] = []
        for entry in self.storage.list_entries(album_ref):
            if entry.is_dir:
                nested.append(entry.name)
            elif extension_of(entry.name) in self.image_extensions:
                photos.append(entry)

        photos.sort(key=lambda entry: entry.name)
        writable = [entry for entry in photos if self.codec.can_encode(entry.name)]
        return AlbumContents(
            photos=tuple(photos),
            writable=tuple(writable),
            nested_folders=tuple(sorted(nested)),
        )

    def survey(self, album_ref: PurePath, name: str) -> AlbumRecord:
        """
        Build the structural record of an album (no metadata decoding).

        Args:
            album_ref: Reference of the album folder
            name: Album folder name

        Returns:
            AlbumRecord without a status breakdown

        Raises:
            StorageError: If the album cannot be listed
        """
        name_parse = parse_album_name(name)
        contents = self.list_contents(album_ref)

        photo_count = len(contents.photos)
        supported = len(contents.writable)
        unsupported = photo_count - supported

        warnings: list[str] = []
        if not name_parse.is_valid:
            warnings.append(INVALID_NAME_WARNING)
        if contents.nested_folders:
            warnings.append(
                f"Contains nested folders: {', '.join(contents.nested_folders)}"
            )
        if unsupported:
            noun = "file" if unsupported == 1 else "files"
            warnings.append(f"{unsupported} {noun} not supported for date fixing")

        for warning in warnings:
            logger.warning(f"{name}: {warning}")

        return AlbumRecord(
            ref=album_ref,
            name=name,
            name_parse=name_parse,
            photo_count=photo_count,
            supported_photo_count=supported,
            unsupported_photo_count=unsupported,
            nested_folder_names=contents.nested_folders,
            structural_warnings=tuple(warnings),
        )

    def analyze(self, album: AlbumRecord, include_read_only: bool = False) -> AlbumAnalysis:
        """
        Audit every writable photo of an album and aggregate the breakdown.

        The breakdown is only computed when the album name is valid and at
        least one writable photo exists. With ``include_read_only``, the other
        image files are audited too and returned for display, but they never
        count toward the breakdown.

        Args:
            album: Structural album record
            include_read_only: Also audit photos that cannot be fixed

        Returns:
            AlbumAnalysis

        Raises:
            StorageError: If the album cannot be listed
        """
        contents = self.list_contents(album.ref)
        targets = contents.photos if include_read_only else contents.writable

        records = [self._audit_photo(entry, album) for entry in targets]

        breakdown = None
        if album.name_parse.is_valid and contents.writable:
            breakdown = accumulate(
                album.date,
                [record for record in records if record.is_writable],
                warning_gap_days=self.warning_gap_days,
                error_gap_days=self.error_gap_days,
            )
            logger.info(
                f"{album.name}: {breakdown.total_analyzed} photos analyzed, "
                f"{breakdown.correct_count} correct, {breakdown.mismatched_count} mismatched, "
                f"{breakdown.missing_count} without date ({breakdown.severity.value})"
            )

        return AlbumAnalysis(album_name=album.name, breakdown=breakdown, photos=tuple(records))

    def _audit_photo(self, entry: Entry, album: AlbumRecord) -> PhotoRecord:
        """Audit one photo; any failure becomes a warning on its record."""
        try:
            return self.photo_auditor.audit(entry, album.ref, album.date)
        except Exception as e:
            logger.warning(f"Failed to audit {album.name}/{entry.name}: {e}")
            return PhotoRecord(
                ref=entry.ref,
                album_ref=album.ref,
                name=entry.name,
                size_bytes=entry.size,
                extension=extension_of(entry.name),
                is_writable=self.codec.can_encode(entry.name),
                classification=(
                    Classification.MISSING_DATE
                    if album.date is not None
                    else Classification.UNKNOWN
                ),
                warnings=(f"audit failed: {e}",),
            )
