"""Storage backends for AlbumAudit.

The core never touches the filesystem directly; it goes through a
``StorageBackend`` holding an already-authorized root. References are
``PurePath`` objects so that local and in-memory backends share a shape.
"""

import logging
import os
import shutil
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath, PurePosixPath

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Error enumerating, reading or writing through a storage backend."""

    pass


class EntryKind(Enum):
    """Kind of directory entry."""

    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class Entry:
    """One entry of a directory listing."""

    name: str
    kind: EntryKind
    ref: PurePath
    size: int = 0

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIR

    @property
    def extension(self) -> str:
        """File extension (lowercase, with dot)."""
        return PurePosixPath(self.name).suffix.lower()


class StorageBackend(ABC):
    """Capability to list, read, write and delete under a granted root."""

    def __init__(self, root: PurePath):
        self.root = root

    @property
    def identity(self) -> str:
        """Stable identity of the root, used as the cache key."""
        return str(self.root)

    def child_ref(self, dir_ref: PurePath, name: str) -> PurePath:
        """Reference to an entry named ``name`` inside ``dir_ref``."""
        return dir_ref / name

    @abstractmethod
    def list_entries(self, dir_ref: PurePath) -> list[Entry]:
        """List a directory, sorted by name."""

    @abstractmethod
    def read_bytes(self, file_ref: PurePath) -> bytes:
        """Read a whole file."""

    @abstractmethod
    def write_bytes(self, file_ref: PurePath, data: bytes) -> None:
        """Write a whole file, replacing any existing content."""

    @abstractmethod
    def delete_entry(self, dir_ref: PurePath, name: str, recursive: bool = False) -> None:
        """Delete a file, or a directory when ``recursive`` is set."""

    @abstractmethod
    def rename_entry(self, dir_ref: PurePath, old_name: str, new_name: str) -> PurePath:
        """Rename an entry within the same directory; returns the new ref."""

    @abstractmethod
    def exists(self, ref: PurePath) -> bool:
        """Whether an entry exists at ``ref``."""


class LocalStorageBackend(StorageBackend):
    """Storage backend over the local filesystem."""

    def __init__(self, root: Path, ignore_hidden: bool = True):
        """
        Initialize the backend.

        Args:
            root: Root folder holding the albums
            ignore_hidden: Skip entries whose name starts with a dot
        """
        super().__init__(Path(root).resolve())
        self.ignore_hidden = ignore_hidden

    def list_entries(self, dir_ref: PurePath) -> list[Entry]:
        path = Path(dir_ref)
        entries: list[Entry] = []
        try:
            with os.scandir(path) as it:
                for item in it:
                    if self.ignore_hidden and item.name.startswith("."):
                        continue
                    if item.is_dir():
                        entries.append(Entry(item.name, EntryKind.DIR, path / item.name))
                    elif item.is_file():
                        size = item.stat().st_size
                        entries.append(Entry(item.name, EntryKind.FILE, path / item.name, size))
        except OSError as e:
            raise StorageError(f"Cannot list {path}: {e}") from e
        return sorted(entries, key=lambda entry: entry.name)

    def read_bytes(self, file_ref: PurePath) -> bytes:
        try:
            return Path(file_ref).read_bytes()
        except OSError as e:
            raise StorageError(f"Cannot read {file_ref}: {e}") from e

    def write_bytes(self, file_ref: PurePath, data: bytes) -> None:
        """Write via a temporary file and an atomic replace.

        A failed write leaves the previous content of ``file_ref`` intact.
        """
        path = Path(file_ref)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            if path.exists():
                shutil.copymode(path, tmp_name)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Cannot write {path}: {e}") from e

    def delete_entry(self, dir_ref: PurePath, name: str, recursive: bool = False) -> None:
        path = Path(dir_ref) / name
        try:
            if path.is_dir():
                if not recursive:
                    raise StorageError(f"{path} is a directory; pass recursive=True")
                shutil.rmtree(path)
            else:
                path.unlink()
        except OSError as e:
            raise StorageError(f"Cannot delete {path}: {e}") from e
        logger.debug(f"Deleted {path}")

    def rename_entry(self, dir_ref: PurePath, old_name: str, new_name: str) -> PurePath:
        source = Path(dir_ref) / old_name
        target = Path(dir_ref) / new_name
        if not source.exists():
            raise StorageError(f"Not found: {source}")
        if target.exists():
            raise StorageError(f"Destination already exists: {target}")
        try:
            source.rename(target)
        except OSError as e:
            raise StorageError(f"Cannot rename {source} to {new_name}: {e}") from e
        return target

    def exists(self, ref: PurePath) -> bool:
        return Path(ref).exists()


class MemoryStorageBackend(StorageBackend):
    """In-memory storage backend, for tests and previews."""

    def __init__(self, root: PurePath = PurePosixPath("/memory")):
        super().__init__(PurePosixPath(root))
        self._files: dict[PurePosixPath, bytes] = {}
        self._dirs: set[PurePosixPath] = {self.root}
        self._lock = threading.Lock()

    def add_dir(self, ref: PurePath) -> PurePosixPath:
        """Create a directory (and its parents)."""
        path = PurePosixPath(ref)
        with self._lock:
            for parent in [path, *path.parents]:
                self._dirs.add(parent)
        return path

    def add_file(self, ref: PurePath, data: bytes) -> PurePosixPath:
        """Create a file (and its parent directories)."""
        path = PurePosixPath(ref)
        self.add_dir(path.parent)
        with self._lock:
            self._files[path] = bytes(data)
        return path

    def list_entries(self, dir_ref: PurePath) -> list[Entry]:
        path = PurePosixPath(dir_ref)
        with self._lock:
            if path not in self._dirs:
                raise StorageError(f"Cannot list {path}: no such directory")
            entries = [
                Entry(d.name, EntryKind.DIR, d)
                for d in self._dirs
                if d.parent == path and d != path
            ]
            entries += [
                Entry(f.name, EntryKind.FILE, f, len(data))
                for f, data in self._files.items()
                if f.parent == path
            ]
        return sorted(entries, key=lambda entry: entry.name)

    def read_bytes(self, file_ref: PurePath) -> bytes:
        path = PurePosixPath(file_ref)
        with self._lock:
            if path not in self._files:
                raise StorageError(f"Cannot read {path}: no such file")
            return self._files[path]

    def write_bytes(self, file_ref: PurePath, data: bytes) -> None:
        path = PurePosixPath(file_ref)
        with self._lock:
            if path.parent not in self._dirs:
                raise StorageError(f"Cannot write {path}: no such directory")
            if path in self._dirs:
                raise StorageError(f"Cannot write {path}: is a directory")
            self._files[path] = bytes(data)

    def delete_entry(self, dir_ref: PurePath, name: str, recursive: bool = False) -> None:
        path = PurePosixPath(dir_ref) / name
        with self._lock:
            if path in self._files:
                del self._files[path]
                return
            if path not in self._dirs:
                raise StorageError(f"Cannot delete {path}: not found")
            if not recursive:
                raise StorageError(f"{path} is a directory; pass recursive=True")
            self._dirs = {d for d in self._dirs if d != path and path not in d.parents}
            self._files = {
                f: data for f, data in self._files.items() if path not in f.parents
            }

    def rename_entry(self, dir_ref: PurePath, old_name: str, new_name: str) -> PurePath:
        source = PurePosixPath(dir_ref) / old_name
        target = PurePosixPath(dir_ref) / new_name
        with self._lock:
            if target in self._files or target in self._dirs:
                raise StorageError(f"Destination already exists: {target}")
            if source in self._files:
                self._files[target] = self._files.pop(source)
                return target
            if source not in self._dirs:
                raise StorageError(f"Not found: {source}")
            self._dirs = {
                target / d.relative_to(source) if d == source or source in d.parents else d
                for d in self._dirs
            }
            self._files = {
                (target / f.relative_to(source) if source in f.parents else f): data
                for f, data in self._files.items()
            }
        return target

    def exists(self, ref: PurePath) -> bool:
        path = PurePosixPath(ref)
        with self._lock:
            return path in self._files or path in self._dirs
