"""Export of audit results to JSON and CSV."""

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from albumaudit.core.models import (
    AlbumAnalysis,
    AlbumRecord,
    PhotoRecord,
    ScanResult,
    Severity,
)
from albumaudit.utils.json_utils import dumps_json

ALBUM_CSV_HEADERS = [
    "album",
    "album_date",
    "name_valid",
    "severity",
    "photo_count",
    "supported_photo_count",
    "unsupported_photo_count",
    "correct_count",
    "earlier_count",
    "later_count",
    "missing_count",
    "max_earlier_day_gap",
    "max_later_day_gap",
    "earliest_capture_date",
    "latest_capture_date",
    "warnings",
]

PHOTO_CSV_HEADERS = [
    "album",
    "album_date",
    "filename",
    "path",
    "size_bytes",
    "extension",
    "writable",
    "capture_date",
    "classification",
    "camera",
    "lens",
    "warnings",
]


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Exporter:
    """Exports audit results to various formats."""

    def __init__(
        self,
        include_statistics: bool = True,
        pretty_print: bool = True,
    ):
        """Initialize exporter.

        Args:
            include_statistics: Include summary statistics in export.
            pretty_print: Format JSON output with indentation.
        """
        self.include_statistics = include_statistics
        self.pretty_print = pretty_print

    def to_json(
        self,
        scan_result: ScanResult,
        analyses: Optional[Mapping[str, AlbumAnalysis]] = None,
        output_path: Optional[Path] = None,
    ) -> str:
        """Export audit results to JSON.

        Args:
            scan_result: Albums to export.
            analyses: Photo-level analyses keyed by album name.
            output_path: Optional path to write JSON file.

        Returns:
            JSON string representation.
        """
        json_str = dumps_json(self.to_dict(scan_result, analyses), pretty=self.pretty_print)
        if output_path:
            self._write(output_path, json_str)
        return json_str

    def albums_to_csv(
        self,
        scan_result: ScanResult,
        output_path: Optional[Path] = None,
    ) -> str:
        """Export one CSV row per album.

        Args:
            scan_result: Albums to export.
            output_path: Optional path to write CSV file.

        Returns:
            CSV string representation.
        """
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(ALBUM_CSV_HEADERS)
        for album in scan_result.albums:
            writer.writerow(self._album_to_csv_row(album))

        csv_str = output.getvalue()
        if output_path:
            self._write(output_path, csv_str)
        return csv_str

    def photos_to_csv(
        self,
        scan_result: ScanResult,
        analyses: Mapping[str, AlbumAnalysis],
        output_path: Optional[Path] = None,
    ) -> str:
        """Export one CSV row per audited photo, in album display order.

        Args:
            scan_result: Albums to export.
            analyses: Photo-level analyses keyed by album name.
            output_path: Optional path to write CSV file.

        Returns:
            CSV string representation.
        """
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(PHOTO_CSV_HEADERS)
        for album in scan_result.albums:
            analysis = analyses.get(album.name)
            if analysis is None:
                continue
            for photo in analysis.photos:
                writer.writerow(self._photo_to_csv_row(album, photo))

        csv_str = output.getvalue()
        if output_path:
            self._write(output_path, csv_str)
        return csv_str

    def to_dict(
        self,
        scan_result: ScanResult,
        analyses: Optional[Mapping[str, AlbumAnalysis]] = None,
    ) -> dict[str, Any]:
        """Convert audit results to a dictionary.

        Args:
            scan_result: Albums to convert.
            analyses: Photo-level analyses keyed by album name.

        Returns:
            Dictionary ready for serialization.
        """
        albums = []
        for album in scan_result.albums:
            album_dict = self._album_to_dict(album)
            if analyses is not None and album.name in analyses:
                album_dict["photos"] = [
                    self._photo_to_dict(photo) for photo in analyses[album.name].photos
                ]
            albums.append(album_dict)

        data: dict[str, Any] = {
            "export_timestamp": datetime.now().isoformat(),
            "root": scan_result.root_identity,
            "scan_timestamp": scan_result.scan_timestamp.isoformat(),
            "album_count": len(scan_result.albums),
            "albums": albums,
            "errors": [
                {"album": name, "message": message}
                for name, message in scan_result.errors
            ],
        }

        if self.include_statistics:
            data["statistics"] = self._compute_statistics(scan_result)

        return data

    def _album_to_dict(self, album: AlbumRecord) -> dict[str, Any]:
        breakdown = album.status_breakdown
        return {
            "name": album.name,
            "path": str(album.ref),
            "date": album.date.isoformat() if album.date else None,
            "name_valid": album.name_parse.is_valid,
            "severity": album.severity.value,
            "photo_count": album.photo_count,
            "supported_photo_count": album.supported_photo_count,
            "unsupported_photo_count": album.unsupported_photo_count,
            "nested_folders": list(album.nested_folder_names),
            "warnings": list(album.structural_warnings),
            "breakdown": None if breakdown is None else {
                "correct": breakdown.correct_count,
                "earlier": breakdown.earlier_count,
                "later": breakdown.later_count,
                "missing": breakdown.missing_count,
                "total_analyzed": breakdown.total_analyzed,
                "earliest_capture_date": _iso(breakdown.earliest_capture_date),
                "latest_capture_date": _iso(breakdown.latest_capture_date),
                "max_earlier_day_gap": breakdown.max_earlier_day_gap,
                "max_later_day_gap": breakdown.max_later_day_gap,
            },
        }

    def _photo_to_dict(self, photo: PhotoRecord) -> dict[str, Any]:
        return {
            "filename": photo.name,
            "path": str(photo.ref),
            "size_bytes": photo.size_bytes,
            "extension": photo.extension,
            "writable": photo.is_writable,
            "capture_date": _iso(photo.best_capture_date),
            "classification": photo.classification.value,
            "camera": photo.camera,
            "lens": photo.lens,
            "warnings": list(photo.warnings),
        }

    def _album_to_csv_row(self, album: AlbumRecord) -> list[Any]:
        breakdown = album.status_breakdown
        counts: list[Any] = [""] * 8
        if breakdown is not None:
            counts = [
                breakdown.correct_count,
                breakdown.earlier_count,
                breakdown.later_count,
                breakdown.missing_count,
                breakdown.max_earlier_day_gap,
                breakdown.max_later_day_gap,
                _iso(breakdown.earliest_capture_date) or "",
                _iso(breakdown.latest_capture_date) or "",
            ]
        return [
            album.name,
            album.date.isoformat() if album.date else "",
            album.name_parse.is_valid,
            album.severity.value,
            album.photo_count,
            album.supported_photo_count,
            album.unsupported_photo_count,
            *counts,
            "; ".join(album.structural_warnings),
        ]

    def _photo_to_csv_row(self, album: AlbumRecord, photo: PhotoRecord) -> list[Any]:
        return [
            album.name,
            album.date.isoformat() if album.date else "",
            photo.name,
            str(photo.ref),
            photo.size_bytes,
            photo.extension,
            photo.is_writable,
            _iso(photo.best_capture_date) or "",
            photo.classification.value,
            photo.camera or "",
            photo.lens or "",
            "; ".join(photo.warnings),
        ]

    def _compute_statistics(self, scan_result: ScanResult) -> dict[str, Any]:
        """Compute summary statistics for the albums.

        Args:
            scan_result: The albums to analyze.

        Returns:
            Dictionary of statistics.
        """
        albums = scan_result.albums
        by_severity = {severity.value: 0 for severity in Severity}
        for album in albums:
            by_severity[album.severity.value] += 1

        analyzed = [a.status_breakdown for a in albums if a.status_breakdown is not None]
        return {
            "total_albums": len(albums),
            "total_photos": scan_result.total_photos,
            "invalid_album_names": sum(1 for a in albums if not a.name_parse.is_valid),
            "albums_by_severity": by_severity,
            "analyzed_albums": len(analyzed),
            "photos_correct": sum(b.correct_count for b in analyzed),
            "photos_mismatched": sum(b.mismatched_count for b in analyzed),
            "photos_missing_date": sum(b.missing_count for b in analyzed),
        }

    def _write(self, output_path: Path, text: str) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)


def export_to_json(
    scan_result: ScanResult,
    analyses: Optional[Mapping[str, AlbumAnalysis]] = None,
    output_path: Optional[Path] = None,
    include_statistics: bool = True,
    pretty_print: bool = True,
) -> str:
    """Convenience function to export audit results to JSON."""
    exporter = Exporter(
        include_statistics=include_statistics,
        pretty_print=pretty_print,
    )
    return exporter.to_json(scan_result, analyses, output_path)
