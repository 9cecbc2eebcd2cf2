"""Audit session: one root folder, its cache, and the operations on it."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import Any, Iterable, Optional

from albumaudit.config.schema import AlbumAuditConfig
from albumaudit.core.album_auditor import AlbumAuditor
from albumaudit.core.album_ops import AlbumOperations
from albumaudit.core.cache import AlbumCache
from albumaudit.core.exif_codec import ExifCodec
from albumaudit.core.models import (
    AlbumAnalysis,
    AlbumRecord,
    AlbumStatusBreakdown,
    CalendarDate,
    FixOutcome,
    ScanResult,
)
from albumaudit.core.photo_auditor import PhotoAuditor
from albumaudit.core.reconciler import ReconciliationEngine
from albumaudit.core.scanner import ALBUM_READ_FAILED_WARNING, AlbumScanner
from albumaudit.core.storage import StorageBackend

logger = logging.getLogger(__name__)


class AlbumNotFoundError(LookupError):
    """No album with the requested name exists under the root."""

    pass


class AuditSession:
    """Audits and fixes the albums under one storage root.

    Album listings come from the cache while it is fresh. A new scan stores
    the structural records first and patches each album's breakdown in as
    its analysis completes. Results from a superseded scan are dropped from
    both the cache and the albums returned to the caller.
    """

    def __init__(
        self,
        storage: StorageBackend,
        config: Optional[AlbumAuditConfig] = None,
        cache: Optional[AlbumCache] = None,
    ):
        """
        Initialize the session.

        Args:
            storage: Storage backend holding the albums
            config: Configuration (defaults when not given)
            cache: Album cache (a new one from the config when not given)
        """
        self.storage = storage
        self.config = config or AlbumAuditConfig()

        self.codec = ExifCodec(writable_extensions=self.config.writable_extensions)
        self.photo_auditor = PhotoAuditor(storage, self.codec)
        self.album_auditor = AlbumAuditor(
            storage,
            photo_auditor=self.photo_auditor,
            image_extensions=self.config.all_image_extensions,
            warning_gap_days=self.config.severity.warning_gap_days,
            error_gap_days=self.config.severity.error_gap_days,
        )
        self.scanner = AlbumScanner(
            storage,
            album_auditor=self.album_auditor,
            ignore_hidden=self.config.general.ignore_hidden_files,
        )
        self.cache = cache or AlbumCache(ttl_seconds=self.config.cache.ttl_seconds)
        self.operations = AlbumOperations(storage, cache=self.cache)

        self.last_scan: Optional[ScanResult] = None
        self._updates: dict[str, dict[str, Any]] = {}
        self._scan_generation = 0
        self._updates_lock = threading.Lock()
        self._futures: list[Future] = []
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> "AuditSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Wait for background analysis and release the thread pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._futures.clear()

    def engine(self, dry_run: bool = False) -> ReconciliationEngine:
        """Reconciliation engine bound to this session's cache."""
        return ReconciliationEngine(
            self.storage,
            codec=self.codec,
            photo_auditor=self.photo_auditor,
            cache=self.cache,
            backup_suffix=self.config.fix.backup_suffix,
            dry_run=dry_run,
        )

    def load_albums(self, refresh: bool = False, wait: bool = True) -> list[AlbumRecord]:
        """
        Albums under the root, in display order.

        Args:
            refresh: Ignore the cache and scan again
            wait: Block until every album's breakdown is computed

        Returns:
            Album records; with ``wait=False`` some may not have a breakdown yet

        Raises:
            ScanError: If the root cannot be listed
        """
        identity = self.storage.identity
        if self.config.cache.enabled and not refresh:
            cached = self.cache.lookup(identity)
            if cached is not None:
                logger.debug(f"Using cached albums for {identity}")
                return cached

        generation = self.cache.begin_scan()
        result = self.scanner.scan(self.storage.root)
        self.last_scan = result
        with self._updates_lock:
            self._updates = {}
            self._scan_generation = generation
        self.cache.store(identity, result.albums, generation)

        to_analyze = [album for album in result.albums if album.supported_photo_count]
        if self.config.general.background_analysis and to_analyze:
            executor = self._get_executor()
            for album in to_analyze:
                self._futures.append(executor.submit(self._analyze_album, album, generation))
            if not wait:
                return list(result.albums)
            self.wait()
        else:
            for album in to_analyze:
                self._analyze_album(album, generation)

        return self._merged(result.albums)

    def wait(self) -> None:
        """Block until all pending background analysis has finished."""
        futures, self._futures = self._futures, []
        for future in futures:
            future.result()

    def find_album(self, name: str) -> AlbumRecord:
        """
        Look up an album by folder name.

        Raises:
            AlbumNotFoundError: If no album has that name
        """
        for album in self.load_albums():
            if album.name == name:
                return album
        raise AlbumNotFoundError(f"Album not found: {name}")

    def album_detail(self, name: str) -> AlbumAnalysis:
        """
        Photo-level audit of one album, including read-only photos.

        The fresh breakdown is patched into the cache.
        """
        album = self.find_album(name)
        analysis = self.album_auditor.analyze(album, include_read_only=True)
        self.cache.patch(album.name, {"status_breakdown": analysis.breakdown})
        return analysis

    def fix_album(
        self,
        name: str,
        photo_names: Optional[Iterable[str]] = None,
        dry_run: bool = False,
    ) -> list[FixOutcome]:
        """
        Rewrite capture dates of an album's photos to the album date.

        Args:
            name: Album folder name
            photo_names: Only fix these photos (all writable photos if None)
            dry_run: Report targets without writing

        Returns:
            One FixOutcome per writable photo attempted
        """
        album = self.find_album(name)
        analysis = self.album_auditor.analyze(album)
        photos = list(analysis.photos)

        if photo_names is not None:
            wanted = set(photo_names)
            missing = wanted - {photo.name for photo in photos}
            for photo_name in sorted(missing):
                logger.warning(f"{name}: no writable photo named {photo_name}")
            photos = [photo for photo in photos if photo.name in wanted]

        return self.engine(dry_run=dry_run).fix_all(photos, album.date)

    def delete_photo(self, album_name: str, photo_name: str) -> None:
        """Delete one photo from an album."""
        self.operations.delete_photo(self.find_album(album_name), photo_name)

    def delete_album(self, album_name: str) -> None:
        """Delete an album with everything in it."""
        self.find_album(album_name)
        self.operations.delete_album(self.storage.root, album_name)

    def rename_album(self, album_name: str, new_date: CalendarDate) -> str:
        """Change the date prefix of an album; returns the new name."""
        self.find_album(album_name)
        return self.operations.rename_album(self.storage.root, album_name, new_date)

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.general.max_workers,
                thread_name_prefix="albumaudit",
            )
        return self._executor

    def _analyze_album(
        self,
        album: AlbumRecord,
        generation: int,
    ) -> Optional[AlbumStatusBreakdown]:
        """Analyze one album and patch the result into the cache.

        A failure leaves the album without a breakdown and adds a warning.
        """
        try:
            breakdown = self.album_auditor.analyze(album).breakdown
            fields: dict[str, Any] = {"status_breakdown": breakdown}
        except Exception as e:
            logger.warning(f"Failed to analyze album {album.name}: {e}")
            breakdown = None
            fields = {
                "structural_warnings": album.structural_warnings
                + (f"{ALBUM_READ_FAILED_WARNING}: {e}",),
            }

        with self._updates_lock:
            if generation == self._scan_generation:
                self._updates[album.name] = fields
        if not self.cache.patch(album.name, fields, generation):
            logger.debug(f"Discarded analysis of {album.name} from an older scan")
        return breakdown

    def _merged(self, albums: list[AlbumRecord]) -> list[AlbumRecord]:
        """Scan order with the analysis results gathered so far."""
        with self._updates_lock:
            updates = dict(self._updates)
        return [
            replace(album, **updates[album.name]) if album.name in updates else album
            for album in albums
        ]
