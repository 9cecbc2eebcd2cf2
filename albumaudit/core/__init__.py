"""Core modules for AlbumAudit."""

from albumaudit.core.models import (
    AlbumAnalysis,
    AlbumRecord,
    Classification,
    FixOutcome,
    PhotoRecord,
    ScanResult,
    Severity,
)

__all__ = [
    "AlbumAnalysis",
    "AlbumRecord",
    "Classification",
    "FixOutcome",
    "PhotoRecord",
    "ScanResult",
    "Severity",
]
