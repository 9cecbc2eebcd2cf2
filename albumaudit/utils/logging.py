"""Logging setup for AlbumAudit."""

import logging
import sys
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Narration level for completed user actions (between INFO and WARNING)
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")


@dataclass(frozen=True)
class ActivityEntry:
    """One user-visible log line."""

    level: str
    message: str
    detail: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


class ActivityLog(logging.Handler):
    """Keeps the most recent narration entries for display.

    Attached to the ``albumaudit`` logger; entries are appended as records
    flow through and the oldest are dropped once ``max_entries`` is reached.
    A record may carry an optional ``detail`` via ``extra={"detail": ...}``.
    """

    LEVEL_NAMES = {
        logging.DEBUG: "info",
        logging.INFO: "info",
        SUCCESS: "success",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def __init__(self, max_entries: int = 100, level: int = logging.INFO):
        super().__init__(level=level)
        self._entries: deque[ActivityEntry] = deque(maxlen=max_entries)
        self._entries_lock = threading.Lock()

    def emit(self, record: logging.LogRecord) -> None:
        entry = ActivityEntry(
            level=self.LEVEL_NAMES.get(record.levelno, "info"),
            message=record.getMessage(),
            detail=getattr(record, "detail", None),
            timestamp=datetime.fromtimestamp(record.created),
        )
        with self._entries_lock:
            self._entries.append(entry)

    @property
    def entries(self) -> list[ActivityEntry]:
        """Snapshot of the retained entries, oldest first."""
        with self._entries_lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._entries_lock:
            self._entries.clear()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    use_colors: bool = True,
    activity_log: Optional[ActivityLog] = None,
) -> logging.Logger:
    """
    Set up logging for AlbumAudit.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for logging
        use_colors: Whether to use rich console output
        activity_log: Optional narration handler to attach

    Returns:
        Root logger for albumaudit
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if use_colors:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        formatter = logging.Formatter("%(message)s")
    else:
        handler = logging.StreamHandler(sys.stderr)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    handler.setLevel(numeric_level)

    logger = logging.getLogger("albumaudit")
    logger.setLevel(min(numeric_level, logging.INFO) if activity_log else numeric_level)
    logger.handlers.clear()
    logger.addHandler(handler)

    if activity_log is not None:
        logger.addHandler(activity_log)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(numeric_level)
        logger.addHandler(file_handler)

    return logger

