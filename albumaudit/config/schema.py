"""Configuration schema definitions for AlbumAudit."""

from dataclasses import dataclass, field
from typing import Optional

from albumaudit.utils.constants import (
    BACKUP_SUFFIX,
    CACHE_TTL_SECONDS,
    ERROR_GAP_DAYS,
    IMAGE_EXTENSIONS,
    RAW_EXTENSIONS,
    WARNING_GAP_DAYS,
    WRITABLE_EXTENSIONS,
)


@dataclass
class GeneralConfig:
    """General configuration settings."""

    root: Optional[str] = None  # Folder holding the albums
    ignore_hidden_files: bool = True
    background_analysis: bool = True
    max_workers: int = 4


@dataclass
class AlbumsConfig:
    """Which files inside an album count as photos."""

    image_extensions: list[str] = field(
        default_factory=lambda: sorted(IMAGE_EXTENSIONS)
    )
    raw_extensions: list[str] = field(
        default_factory=lambda: sorted(RAW_EXTENSIONS)
    )
    writable_extensions: list[str] = field(
        default_factory=lambda: sorted(WRITABLE_EXTENSIONS)
    )


@dataclass
class SeverityConfig:
    """Day gaps that turn an album into a warning or an error."""

    warning_gap_days: int = WARNING_GAP_DAYS
    error_gap_days: int = ERROR_GAP_DAYS


@dataclass
class CacheConfig:
    """Album cache settings."""

    enabled: bool = True
    ttl_seconds: int = CACHE_TTL_SECONDS


@dataclass
class FixConfig:
    """Date fix settings."""

    dry_run_default: bool = False
    backup_suffix: str = BACKUP_SUFFIX
    confirm: bool = True  # Ask before rewriting files from the CLI


@dataclass
class ExportConfig:
    """Export configuration."""

    include_photos: bool = True
    include_statistics: bool = True
    pretty_print: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration settings."""

    level: str = "info"
    color_output: bool = True
    log_to_file: bool = False
    file_path: str = ".albumaudit/albumaudit.log"
    activity_entries: int = 100


@dataclass
class AlbumAuditConfig:
    """Root configuration object for AlbumAudit."""

    version: str = "1.0"
    general: GeneralConfig = field(default_factory=GeneralConfig)
    albums: AlbumsConfig = field(default_factory=AlbumsConfig)
    severity: SeverityConfig = field(default_factory=SeverityConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    fix: FixConfig = field(default_factory=FixConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def all_image_extensions(self) -> set[str]:
        """Extensions that count as photos."""
        return {
            ext.lower()
            for ext in (*self.albums.image_extensions, *self.albums.raw_extensions)
        }

    @property
    def writable_extensions(self) -> set[str]:
        """Extensions whose capture dates can be rewritten."""
        return {ext.lower() for ext in self.albums.writable_extensions}
