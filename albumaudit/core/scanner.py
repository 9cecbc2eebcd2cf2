"""Root scanner for AlbumAudit."""

import logging
import time
from pathlib import PurePath
from typing import Optional

from albumaudit.core.album_auditor import AlbumAuditor, sort_albums
from albumaudit.core.date_rules import parse_album_name
from albumaudit.core.models import ALBUM_READ_FAILED_WARNING, AlbumRecord, ScanResult
from albumaudit.core.storage import Entry, StorageBackend, StorageError

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """The root folder cannot be enumerated."""

    pass


class AlbumScanner:
    """Lists the albums under a root and surveys each one."""

    def __init__(
        self,
        storage: StorageBackend,
        album_auditor: Optional[AlbumAuditor] = None,
        ignore_hidden: bool = True,
    ):
        """
        Initialize the scanner.

        Args:
            storage: Storage backend holding the albums
            album_auditor: AlbumAuditor instance
            ignore_hidden: Whether to skip folders starting with a dot
        """
        self.storage = storage
        self.album_auditor = album_auditor or AlbumAuditor(storage)
        self.ignore_hidden = ignore_hidden

    def scan(self, root_ref: Optional[PurePath] = None) -> ScanResult:
        """
        Survey every immediate sub-folder of the root as an album.

        Files directly under the root are ignored. A failure on one album
        becomes a warning on its record and never stops the scan.

        Args:
            root_ref: Root to scan (defaults to the backend root)

        Returns:
            ScanResult with albums in display order

        Raises:
            ScanError: If the root cannot be listed
        """
        root_ref = root_ref if root_ref is not None else self.storage.root
        logger.info(f"Scanning {root_ref}")
        start_time = time.time()

        try:
            entries = self.storage.list_entries(root_ref)
        except StorageError as e:
            raise ScanError(f"Cannot read root folder {root_ref}: {e}") from e

        result = ScanResult(root_identity=self.storage.identity)
        albums: list[AlbumRecord] = []

        for entry in entries:
            if not entry.is_dir:
                continue
            if self.ignore_hidden and entry.name.startswith("."):
                continue

            try:
                albums.append(self.album_auditor.survey(entry.ref, entry.name))
            except Exception as e:
                logger.error(f"Error reading album {entry.name}: {e}")
                result.add_error(entry.name, str(e))
                albums.append(self._failed_album(entry, e))

        result.albums = sort_albums(albums)
        result.scan_duration_seconds = time.time() - start_time

        logger.info(
            f"Scan complete: {len(result.albums)} albums, {result.total_photos} photos, "
            f"{len(result.errors)} errors in {result.scan_duration_seconds:.2f}s"
        )

        return result

    def _failed_album(self, entry: Entry, error: Exception) -> AlbumRecord:
        """Record for an album whose listing failed."""
        return AlbumRecord(
            ref=entry.ref,
            name=entry.name,
            name_parse=parse_album_name(entry.name),
            structural_warnings=(f"{ALBUM_READ_FAILED_WARNING}: {error}",),
        )
