"""Destructive album operations: delete photos and albums, re-date albums."""

import logging
from pathlib import PurePath
from typing import Optional

from albumaudit.core.cache import AlbumCache
from albumaudit.core.date_rules import replace_date_prefix
from albumaudit.core.models import AlbumRecord, CalendarDate
from albumaudit.core.storage import StorageBackend, StorageError
from albumaudit.utils.logging import SUCCESS

logger = logging.getLogger(__name__)


class AlbumOperationError(Exception):
    """A delete or rename could not be carried out."""

    pass


class AlbumOperations:
    """Deletes and renames entries under the root.

    Every successful operation invalidates the album cache before returning,
    so no caller can observe cached state that predates the change.
    """

    def __init__(
        self,
        storage: StorageBackend,
        cache: Optional[AlbumCache] = None,
        dry_run: bool = False,
    ):
        self.storage = storage
        self.cache = cache
        self.dry_run = dry_run

    def delete_photo(self, album: AlbumRecord, photo_name: str) -> None:
        """
        Delete one photo from an album.

        Raises:
            AlbumOperationError: If the photo does not exist or cannot be deleted
        """
        ref = self.storage.child_ref(album.ref, photo_name)
        if not self.storage.exists(ref):
            raise AlbumOperationError(f"Photo not found: {album.name}/{photo_name}")

        if self.dry_run:
            logger.info(f"[DRY RUN] Would delete photo {album.name}/{photo_name}")
            return

        try:
            self.storage.delete_entry(album.ref, photo_name)
        except StorageError as e:
            raise AlbumOperationError(f"Cannot delete {album.name}/{photo_name}: {e}") from e
        finally:
            self._invalidate()

        logger.log(SUCCESS, f"Deleted photo {album.name}/{photo_name}")

    def delete_album(self, root_ref: PurePath, album_name: str) -> None:
        """
        Delete an album folder and everything in it.

        Raises:
            AlbumOperationError: If the album does not exist or cannot be deleted
        """
        ref = self.storage.child_ref(root_ref, album_name)
        if not self.storage.exists(ref):
            raise AlbumOperationError(f"Album not found: {album_name}")

        if self.dry_run:
            logger.info(f"[DRY RUN] Would delete album {album_name}")
            return

        try:
            self.storage.delete_entry(root_ref, album_name, recursive=True)
        except StorageError as e:
            raise AlbumOperationError(f"Cannot delete album {album_name}: {e}") from e
        finally:
            self._invalidate()

        logger.log(SUCCESS, f"Deleted album {album_name}")

    def rename_album(
        self,
        root_ref: PurePath,
        album_name: str,
        new_date: CalendarDate,
    ) -> str:
        """
        Change the date prefix of an album, keeping its label.

        Args:
            root_ref: Folder holding the album
            album_name: Current album name
            new_date: Date to put in the prefix

        Returns:
            The new album name (unchanged if the date already matches)

        Raises:
            AlbumOperationError: If the album is missing or the new name is taken
        """
        new_name = replace_date_prefix(album_name, new_date)
        if new_name == album_name:
            logger.info(f"Album {album_name} already carries that date")
            return album_name

        if not self.storage.exists(self.storage.child_ref(root_ref, album_name)):
            raise AlbumOperationError(f"Album not found: {album_name}")
        if self.storage.exists(self.storage.child_ref(root_ref, new_name)):
            raise AlbumOperationError(f"An entry named {new_name} already exists")

        if self.dry_run:
            logger.info(f"[DRY RUN] Would rename album {album_name} -> {new_name}")
            return new_name

        try:
            self.storage.rename_entry(root_ref, album_name, new_name)
        except StorageError as e:
            raise AlbumOperationError(f"Cannot rename {album_name}: {e}") from e
        finally:
            self._invalidate()

        logger.log(SUCCESS, f"Renamed album {album_name} -> {new_name}")
        return new_name

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate()
