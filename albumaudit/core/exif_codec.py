"""EXIF metadata codec for AlbumAudit.

Decoding goes through exifread, which understands every format in
``DECODABLE_EXTENSIONS``. Encoding uses piexif and is limited to JPEG.
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Optional

import exifread
import piexif

from albumaudit.utils.constants import (
    DECODABLE_EXTENSIONS,
    EXIF_DATE_FORMAT,
    EXIF_DATE_FORMATS,
    WRITABLE_EXTENSIONS,
)

logger = logging.getLogger(__name__)

JPEG_SIGNATURE = b"\xFF\xD8"


class TagDecodeError(Exception):
    """Capture metadata is missing or unreadable."""

    pass


class TagEncodeError(Exception):
    """Capture metadata could not be written into the image bytes."""

    pass


@dataclass
class CaptureTags:
    """Capture-related EXIF information."""

    date_original: Optional[datetime] = None
    date_digitized: Optional[datetime] = None
    date_modified: Optional[datetime] = None
    camera_make: Optional[str] = None
    camera_model: Optional[str] = None
    lens_model: Optional[str] = None
    raw_tags: dict[str, Any] = field(default_factory=dict)

    @property
    def best_date(self) -> Optional[datetime]:
        """First present date: original, then digitized, then modified."""
        return self.date_original or self.date_digitized or self.date_modified

    @property
    def camera(self) -> Optional[str]:
        """Make and model, when both are known."""
        if self.camera_make and self.camera_model:
            return f"{self.camera_make} {self.camera_model}"
        return None


def extension_of(name: str) -> str:
    """File extension (lowercase, with dot)."""
    return PurePosixPath(name).suffix.lower()


def format_exif_date(value: datetime) -> str:
    """Format a datetime the way EXIF stores it (YYYY:MM:DD HH:MM:SS)."""
    return value.strftime(EXIF_DATE_FORMAT)


class ExifCodec:
    """Decodes and encodes capture dates in image bytes."""

    def __init__(
        self,
        decodable_extensions: Optional[set[str]] = None,
        writable_extensions: Optional[set[str]] = None,
    ):
        """
        Initialize the codec.

        Args:
            decodable_extensions: Extensions whose capture tags can be read
            writable_extensions: Extensions whose capture tags can be rewritten
        """
        self.decodable_extensions = decodable_extensions or DECODABLE_EXTENSIONS
        self.writable_extensions = writable_extensions or WRITABLE_EXTENSIONS

    def can_decode(self, name: str, data: Optional[bytes] = None) -> bool:
        """
        Whether capture tags can be read from this file.

        The extension must be decodable; when bytes are given, a file named
        as a JPEG must also carry the JPEG signature.
        """
        ext = extension_of(name)
        if ext not in self.decodable_extensions:
            return False
        if data is not None and ext in self.writable_extensions:
            return data[:2] == JPEG_SIGNATURE
        return True

    def can_encode(self, name: str) -> bool:
        """Whether capture tags can be rewritten for this file."""
        return extension_of(name) in self.writable_extensions

    def decode(self, data: bytes) -> CaptureTags:
        """
        Decode capture tags from raw image bytes.

        Args:
            data: Image file content

        Returns:
            CaptureTags

        Raises:
            TagDecodeError: If the bytes carry no readable EXIF
        """
        try:
            tags = exifread.process_file(io.BytesIO(data), details=False)
        except Exception as e:
            raise TagDecodeError(f"Cannot parse EXIF: {e}") from e

        if not tags:
            raise TagDecodeError("No EXIF data found")

        return self._parse_tags(tags)

    def encode(self, data: bytes, updates: CaptureTags) -> bytes:
        """
        Write the dates of ``updates`` into JPEG bytes.

        Only dates that are set in ``updates`` are written; all other
        existing tags are kept. Missing EXIF is created from scratch.

        Args:
            data: Original JPEG content
            updates: Dates to write

        Returns:
            New JPEG content

        Raises:
            TagEncodeError: If the bytes are not a JPEG or EXIF cannot be rebuilt
        """
        if data[:2] != JPEG_SIGNATURE:
            raise TagEncodeError("Only JPEG data can be rewritten")

        try:
            exif_dict = piexif.load(data)
        except Exception as e:
            logger.debug(f"Existing EXIF unreadable, starting fresh: {e}")
            exif_dict = {"0th": {}, "Exif": {}, "GPS": {}, "Interop": {}, "1st": {}, "thumbnail": None}

        exif_dict.setdefault("0th", {})
        exif_dict.setdefault("Exif", {})

        if updates.date_original:
            exif_dict["Exif"][piexif.ExifIFD.DateTimeOriginal] = format_exif_date(updates.date_original).encode()
        if updates.date_digitized:
            exif_dict["Exif"][piexif.ExifIFD.DateTimeDigitized] = format_exif_date(updates.date_digitized).encode()
        if updates.date_modified:
            exif_dict["0th"][piexif.ImageIFD.DateTime] = format_exif_date(updates.date_modified).encode()

        try:
            exif_bytes = piexif.dump(exif_dict)
            output = io.BytesIO()
            piexif.insert(exif_bytes, data, output)
        except Exception as e:
            raise TagEncodeError(f"Cannot write EXIF: {e}") from e

        return output.getvalue()

    def _parse_tags(self, tags: dict[str, Any]) -> CaptureTags:
        """Parse exifread tags into CaptureTags."""
        result = CaptureTags()
        result.raw_tags = {str(k): str(v) for k, v in tags.items()}

        if "EXIF DateTimeOriginal" in tags:
            result.date_original = self._parse_date(str(tags["EXIF DateTimeOriginal"]))
        if "EXIF DateTimeDigitized" in tags:
            result.date_digitized = self._parse_date(str(tags["EXIF DateTimeDigitized"]))
        if "Image DateTime" in tags:
            result.date_modified = self._parse_date(str(tags["Image DateTime"]))

        if "Image Make" in tags:
            result.camera_make = str(tags["Image Make"]).strip() or None
        if "Image Model" in tags:
            result.camera_model = str(tags["Image Model"]).strip() or None
        if "EXIF LensModel" in tags:
            result.lens_model = str(tags["EXIF LensModel"]).strip() or None

        return result

    def _parse_date(self, date_str: str) -> Optional[datetime]:
        """
        Parse an EXIF date string into a datetime object.

        Args:
            date_str: Date string from EXIF tags

        Returns:
            datetime object or None if parsing fails
        """
        if not date_str or date_str.strip() in ("", "0000:00:00 00:00:00"):
            return None

        date_str = date_str.strip().rstrip("\x00")

        for fmt in EXIF_DATE_FORMATS:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue

        logger.debug(f"Could not parse EXIF date: {date_str}")
        return None
