"""Pytest configuration and shared fixtures for AlbumAudit tests."""

import io
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Callable, Optional

import piexif
import pytest

from albumaudit.config.schema import AlbumAuditConfig, GeneralConfig
from albumaudit.core.date_rules import parse_album_name
from albumaudit.core.models import (
    AlbumRecord,
    Classification,
    PhotoRecord,
)
from albumaudit.core.storage import MemoryStorageBackend


# Smallest byte sequence piexif and exifread accept as a JPEG:
# SOI, a JFIF APP0 segment, a start-of-scan marker and EOI.
BARE_JPEG = (
    b"\xFF\xD8"
    b"\xFF\xE0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    b"\xFF\xDA\x00\x08\x01\x01\x00\x00\x3F\x00"
    b"\x00\x00"
    b"\xFF\xD9"
)


def build_jpeg(
    date_original: Optional[datetime] = None,
    date_digitized: Optional[datetime] = None,
    date_modified: Optional[datetime] = None,
    make: Optional[str] = None,
    model: Optional[str] = None,
) -> bytes:
    """Build JPEG bytes carrying the given EXIF tags (none: a bare JPEG)."""
    zeroth: dict = {}
    exif: dict = {}
    if date_modified:
        zeroth[piexif.ImageIFD.DateTime] = date_modified.strftime("%Y:%m:%d %H:%M:%S").encode()
    if make:
        zeroth[piexif.ImageIFD.Make] = make.encode()
    if model:
        zeroth[piexif.ImageIFD.Model] = model.encode()
    if date_original:
        exif[piexif.ExifIFD.DateTimeOriginal] = date_original.strftime("%Y:%m:%d %H:%M:%S").encode()
    if date_digitized:
        exif[piexif.ExifIFD.DateTimeDigitized] = date_digitized.strftime("%Y:%m:%d %H:%M:%S").encode()

    if not zeroth and not exif:
        return BARE_JPEG

    exif_bytes = piexif.dump({"0th": zeroth, "Exif": exif, "GPS": {}, "1st": {}, "thumbnail": None})
    output = io.BytesIO()
    piexif.insert(exif_bytes, BARE_JPEG, output)
    return output.getvalue()


# =============================================================================
# Test Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_working_directory(tmp_path, monkeypatch):
    """Automatically isolate all tests in a temporary directory.

    This prevents tests from picking up an albumaudit.yaml (or creating
    .albumaudit/) in the project directory. All tests run with tmp_path as cwd.
    """
    monkeypatch.chdir(tmp_path)


# =============================================================================
# Image Fixtures
# =============================================================================


@pytest.fixture
def make_jpeg() -> Callable[..., bytes]:
    """Factory for JPEG bytes with chosen EXIF dates."""
    return build_jpeg


@pytest.fixture
def bare_jpeg() -> bytes:
    """JPEG bytes without any EXIF segment."""
    return BARE_JPEG


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def memory_storage() -> MemoryStorageBackend:
    """Empty in-memory storage rooted at /memory."""
    return MemoryStorageBackend()


@pytest.fixture
def trip_storage(memory_storage: MemoryStorageBackend) -> MemoryStorageBackend:
    """
    In-memory library with one album.

    Structure:
        /memory/
            20200615 Trip/
                a.jpg     captured 2020-06-15 10:00
                b.jpg     captured 2020-06-20 09:00
                c.jpg     no EXIF
                d.png     not writable
                sub/      nested folder
    """
    album = PurePosixPath("/memory/20200615 Trip")
    memory_storage.add_file(album / "a.jpg", build_jpeg(date_original=datetime(2020, 6, 15, 10, 0)))
    memory_storage.add_file(album / "b.jpg", build_jpeg(date_original=datetime(2020, 6, 20, 9, 0)))
    memory_storage.add_file(album / "c.jpg", BARE_JPEG)
    memory_storage.add_file(album / "d.png", b"\x89PNG\r\n\x1a\n")
    memory_storage.add_dir(album / "sub")
    return memory_storage


@pytest.fixture
def photo_library(tmp_path: Path) -> Path:
    """
    Local album library on disk.

    Structure:
        library/
            20200615 Trip/
                a.jpg     captured 2020-06-15 10:00
                b.jpg     captured 2020-06-20 09:00
            20210101 New Year/
                fireworks.jpg   captured 2020-12-31 23:50
            Misc/
                x.jpg     no EXIF
    """
    root = tmp_path / "library"
    trip = root / "20200615 Trip"
    trip.mkdir(parents=True)
    (trip / "a.jpg").write_bytes(build_jpeg(date_original=datetime(2020, 6, 15, 10, 0)))
    (trip / "b.jpg").write_bytes(build_jpeg(date_original=datetime(2020, 6, 20, 9, 0)))

    new_year = root / "20210101 New Year"
    new_year.mkdir()
    (new_year / "fireworks.jpg").write_bytes(build_jpeg(date_original=datetime(2020, 12, 31, 23, 50)))

    misc = root / "Misc"
    misc.mkdir()
    (misc / "x.jpg").write_bytes(BARE_JPEG)
    return root


# =============================================================================
# Record Fixtures
# =============================================================================


@pytest.fixture
def make_photo() -> Callable[..., PhotoRecord]:
    """Factory for PhotoRecords inside /memory/album."""

    def _make(
        name: str = "IMG_0001.jpg",
        captured: Optional[datetime] = None,
        classification: Classification = Classification.UNKNOWN,
        writable: bool = True,
    ) -> PhotoRecord:
        album_ref = PurePosixPath("/memory/album")
        return PhotoRecord(
            ref=album_ref / name,
            album_ref=album_ref,
            name=name,
            size_bytes=100,
            extension=PurePosixPath(name).suffix.lower(),
            is_writable=writable,
            best_capture_date=captured,
            classification=classification,
        )

    return _make


@pytest.fixture
def make_album() -> Callable[..., AlbumRecord]:
    """Factory for structural AlbumRecords."""

    def _make(name: str, photo_count: int = 0, **kwargs) -> AlbumRecord:
        return AlbumRecord(
            ref=PurePosixPath("/memory") / name,
            name=name,
            name_parse=kwargs.pop("name_parse", parse_album_name(name)),
            photo_count=photo_count,
            **kwargs,
        )

    return _make


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def default_config() -> AlbumAuditConfig:
    """Default configuration."""
    return AlbumAuditConfig()


@pytest.fixture
def inline_config() -> AlbumAuditConfig:
    """Configuration with background analysis off (deterministic tests)."""
    return AlbumAuditConfig(general=GeneralConfig(background_analysis=False))
