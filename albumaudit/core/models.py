"""Data models for AlbumAudit."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import PurePath
from typing import Optional

# A year/month/day value with no time component
CalendarDate = date

# Warning prefix for an album whose contents could not be read
ALBUM_READ_FAILED_WARNING = "failed to read album"


class Classification(Enum):
    """Relationship between a photo's capture date and its album's date."""

    CORRECT = "correct"
    LATER_THAN_ALBUM = "later_than_album"
    EARLIER_THAN_ALBUM = "earlier_than_album"
    MISSING_DATE = "missing_date"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"  # album itself has no valid date


class Severity(Enum):
    """Album-level aggregate risk."""

    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class AlbumNameParse:
    """Result of parsing an album folder name."""

    date: Optional[CalendarDate] = None
    raw_date_prefix: Optional[str] = None
    is_valid: bool = False


@dataclass(frozen=True)
class PhotoRecord:
    """One image file inside an album.

    Records are replaced, never mutated, whenever metadata is re-read.
    """

    ref: PurePath
    album_ref: PurePath
    name: str
    size_bytes: int
    extension: str
    is_writable: bool
    best_capture_date: Optional[datetime] = None
    classification: Classification = Classification.UNKNOWN
    warnings: tuple[str, ...] = ()
    camera: Optional[str] = None
    lens: Optional[str] = None


@dataclass(frozen=True)
class AlbumStatusBreakdown:
    """Aggregated photo classifications for one album."""

    correct_count: int = 0
    earlier_count: int = 0
    later_count: int = 0
    missing_count: int = 0
    total_analyzed: int = 0
    earliest_capture_date: Optional[datetime] = None
    latest_capture_date: Optional[datetime] = None
    max_earlier_day_gap: int = 0
    max_later_day_gap: int = 0
    severity: Severity = Severity.GOOD

    @property
    def mismatched_count(self) -> int:
        """Photos whose date disagrees with the album in either direction."""
        return self.earlier_count + self.later_count


@dataclass(frozen=True)
class AlbumRecord:
    """One album: an immediate sub-folder of the chosen root."""

    ref: PurePath
    name: str
    name_parse: AlbumNameParse
    photo_count: int = 0
    supported_photo_count: int = 0
    unsupported_photo_count: int = 0
    nested_folder_names: tuple[str, ...] = ()
    structural_warnings: tuple[str, ...] = ()
    status_breakdown: Optional[AlbumStatusBreakdown] = None

    @property
    def date(self) -> Optional[CalendarDate]:
        """Album date parsed from the folder name."""
        return self.name_parse.date

    @property
    def severity(self) -> Severity:
        """Album severity.

        Uses the photo breakdown when one has been computed. Without one, an
        album whose name cannot be parsed is a warning only if it actually
        holds photos; an empty badly-named album stays good and relies on its
        structural warning. An album that could not be read is at least a
        warning.
        """
        if self.status_breakdown is not None:
            severity = self.status_breakdown.severity
        elif not self.name_parse.is_valid and self.photo_count > 0:
            severity = Severity.WARNING
        else:
            severity = Severity.GOOD
        if severity == Severity.GOOD and self.read_failed:
            return Severity.WARNING
        return severity

    @property
    def read_failed(self) -> bool:
        return any(
            warning.startswith(ALBUM_READ_FAILED_WARNING)
            for warning in self.structural_warnings
        )

    @property
    def has_problems(self) -> bool:
        return self.severity != Severity.GOOD


@dataclass(frozen=True)
class AlbumAnalysis:
    """Photo-level results for one album."""

    album_name: str
    breakdown: Optional[AlbumStatusBreakdown] = None
    photos: tuple[PhotoRecord, ...] = ()


@dataclass(frozen=True)
class CacheEntry:
    """The last full audit of a root folder."""

    root_identity: str
    albums: tuple[AlbumRecord, ...]
    captured_at: float
    generation: int = 0


@dataclass
class ScanResult:
    """Result of scanning a root folder for albums."""

    root_identity: str
    albums: list[AlbumRecord] = field(default_factory=list)
    errors: list[tuple[str, str]] = field(default_factory=list)  # album name, message
    scan_duration_seconds: float = 0.0
    scan_timestamp: datetime = field(default_factory=datetime.now)

    @property
    def total_photos(self) -> int:
        return sum(album.photo_count for album in self.albums)

    @property
    def albums_with_problems(self) -> list[AlbumRecord]:
        return [album for album in self.albums if album.has_problems]

    def add_error(self, album_name: str, error: str) -> None:
        """Record an album-level failure."""
        self.errors.append((album_name, error))


@dataclass
class FixOutcome:
    """Result of reconciling one photo."""

    photo: PhotoRecord
    updated: Optional[PhotoRecord] = None
    error: Optional[Exception] = None
    backup_ref: Optional[PurePath] = None
    target_date: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None
