"""CLI helper functions and component factories for AlbumAudit.

This module provides shared utilities to reduce code duplication across CLI commands.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from albumaudit.config.schema import AlbumAuditConfig
from albumaudit.core.models import Classification, Severity
from albumaudit.core.session import AuditSession
from albumaudit.core.storage import LocalStorageBackend
from albumaudit.utils.logging import ActivityLog

SEVERITY_STYLES = {
    Severity.GOOD: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}

CLASSIFICATION_STYLES = {
    Classification.CORRECT: "green",
    Classification.LATER_THAN_ALBUM: "red",
    Classification.EARLIER_THAN_ALBUM: "red",
    Classification.MISSING_DATE: "yellow",
    Classification.UNSUPPORTED: "dim",
    Classification.UNKNOWN: "dim",
}


def resolve_root(root: Optional[Path], cfg: AlbumAuditConfig, console: Console) -> Path:
    """Pick the album root: CLI value, then config, then the current folder.

    Args:
        root: Root given on the command line (None if not provided)
        cfg: AlbumAudit configuration
        console: Rich console for error output

    Returns:
        Resolved Path of an existing directory

    Raises:
        typer.Exit: If the folder doesn't exist or is not a directory
    """
    if root is None:
        root = Path(cfg.general.root) if cfg.general.root else Path.cwd()

    resolved = root.resolve()

    if not resolved.exists():
        console.print(f"[red]Error:[/red] Root folder not found: {resolved}")
        raise typer.Exit(1)

    if not resolved.is_dir():
        console.print(f"[red]Error:[/red] Root is not a directory: {resolved}")
        raise typer.Exit(1)

    return resolved


def create_session(root: Path, cfg: AlbumAuditConfig) -> AuditSession:
    """Create an AuditSession over a local folder.

    Args:
        root: Resolved album root
        cfg: AlbumAudit configuration

    Returns:
        Configured AuditSession
    """
    storage = LocalStorageBackend(root, ignore_hidden=cfg.general.ignore_hidden_files)
    return AuditSession(storage, config=cfg)


def parse_date_arg(value: str, console: Console) -> date:
    """Parse a YYYYMMDD or YYYY-MM-DD command line date.

    Raises:
        typer.Exit: If the value is not a valid date
    """
    for fmt in ("%Y%m%d", "%Y-%m-%d"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    console.print(f"[red]Error:[/red] Invalid date: {value} (expected YYYYMMDD or YYYY-MM-DD)")
    raise typer.Exit(1)


def format_datetime(value: Optional[datetime]) -> str:
    """Short display form of a capture date."""
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def error_exit(console: Console, message: str, code: int = 1) -> None:
    """Print an error message and exit.

    Args:
        console: Rich console for output
        message: Error message to display
        code: Exit code (default: 1)

    Raises:
        typer.Exit: Always raises with the given code
    """
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code)


def resolve_bool(cli_value: Optional[bool], config_value: bool) -> bool:
    """Resolve boolean value: CLI overrides config if explicitly set.

    Args:
        cli_value: Value from CLI (None if not provided)
        config_value: Default value from config

    Returns:
        CLI value if provided, otherwise config value
    """
    return config_value if cli_value is None else cli_value


ACTIVITY_STYLES = {
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


def print_activity(console: Console, activity: ActivityLog) -> None:
    """Show the success, warning and error narration of this run.

    Args:
        console: Rich console for output
        activity: Narration handler attached by the CLI callback
    """
    entries = [entry for entry in activity.entries if entry.level in ACTIVITY_STYLES]
    if not entries:
        return

    table = Table(title="Activity")
    table.add_column("Time", style="dim")
    table.add_column("Level")
    table.add_column("Message")
    table.add_column("Detail", style="dim")

    for entry in entries:
        style = ACTIVITY_STYLES[entry.level]
        table.add_row(
            entry.timestamp.strftime("%H:%M:%S"),
            f"[{style}]{entry.level}[/{style}]",
            escape(entry.message),
            escape(entry.detail) if entry.detail else "-",
        )

    console.print(table)
