"""Short-lived cache of the last full audit of a root folder."""

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Iterable, Optional

from albumaudit.core.models import AlbumRecord, CacheEntry
from albumaudit.utils.constants import CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


class AlbumCache:
    """Time-bounded memo of the last album scan, keyed by root identity.

    Every scan takes a generation token from ``begin_scan``. Stores and
    patches carrying a token older than the current generation are dropped,
    so a superseded scan can never overwrite newer results. ``invalidate``
    also advances the generation.

    Records are frozen dataclasses and lookups return fresh lists, so callers
    cannot change cached state except through ``store`` and ``patch``.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Maximum age of a cached scan
            clock: Wall clock returning seconds (injectable for tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        """Current generation; tokens below it are stale."""
        with self._lock:
            return self._generation

    def begin_scan(self) -> int:
        """Start a new scan and return its generation token."""
        with self._lock:
            self._generation += 1
            return self._generation

    def lookup(self, root_identity: str) -> Optional[list[AlbumRecord]]:
        """
        Return cached albums for a root, or None on a miss.

        A hit requires the same root, an entry younger than the TTL and at
        least one album.
        """
        with self._lock:
            entry = self._entry
            if entry is None or entry.root_identity != root_identity:
                return None
            if self._clock() - entry.captured_at >= self.ttl_seconds:
                logger.debug(f"Cache expired for {root_identity}")
                return None
            if not entry.albums:
                return None
            return list(entry.albums)

    def store(
        self,
        root_identity: str,
        albums: Iterable[AlbumRecord],
        generation: Optional[int] = None,
    ) -> bool:
        """
        Replace the cached entry.

        Args:
            root_identity: Root the albums belong to
            albums: Albums in display order
            generation: Token from ``begin_scan``; None starts a new generation

        Returns:
            False if the token was stale and nothing was stored
        """
        with self._lock:
            if generation is None:
                self._generation += 1
                generation = self._generation
            elif generation != self._generation:
                logger.debug(f"Dropping stale scan result (generation {generation})")
                return False
            self._entry = CacheEntry(
                root_identity=root_identity,
                albums=tuple(albums),
                captured_at=self._clock(),
                generation=generation,
            )
            return True

    def patch(
        self,
        album_name: str,
        fields: dict[str, Any],
        generation: Optional[int] = None,
    ) -> bool:
        """
        Merge fields into one cached album.

        The album is replaced by a new record; the old one is left untouched.
        Unknown album names, an empty cache and stale tokens are ignored.

        Args:
            album_name: Name of the album to update
            fields: AlbumRecord field values to set
            generation: Token of the scan producing the fields

        Returns:
            True if an album was updated
        """
        with self._lock:
            entry = self._entry
            if entry is None:
                return False
            if generation is not None and generation != entry.generation:
                logger.debug(f"Dropping stale patch for {album_name}")
                return False
            if generation is not None and generation != self._generation:
                return False

            albums = list(entry.albums)
            for index, album in enumerate(albums):
                if album.name == album_name:
                    albums[index] = replace(album, **fields)
                    self._entry = replace(entry, albums=tuple(albums))
                    return True
            return False

    def invalidate(self) -> None:
        """Drop the cached entry and retire all outstanding tokens."""
        with self._lock:
            self._entry = None
            self._generation += 1
        logger.debug("Album cache invalidated")
