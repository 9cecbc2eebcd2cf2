"""Shared state and utilities for CLI commands.

This module centralizes common CLI dependencies for the command modules
(audit_cmd, fix_cmd, etc.).
"""

from rich.console import Console

from albumaudit.config import ConfigLoader
from albumaudit.utils.logging import ActivityLog


# Initialize console (shared across all commands)
console = Console()

# Status output for commands whose stdout carries data (CSV export)
err_console = Console(stderr=True)

# Load config at module level to generate dynamic help text
# This allows --help to show actual defaults from config (or built-in if no config)
_default_cfg = ConfigLoader.load(None)
_has_config_file = any(p.exists() for p in ConfigLoader.DEFAULT_CONFIG_PATHS)
_cfg_note = " via config" if _has_config_file else ""

# Recent narration (fixes, deletes, renames) kept for display
activity_log = ActivityLog(max_entries=_default_cfg.logging.activity_entries)


def bool_show_default(value: bool, true_word: str, false_word: str) -> str:
    """Generate show_default string for boolean flags.

    Args:
        value: The boolean value to display
        true_word: Word to show when value is True (e.g., "dry-run")
        false_word: Word to show when value is False (e.g., "no-dry-run")

    Returns:
        String like "dry-run via config" or "no-dry-run"
    """
    return f"{true_word if value else false_word}{_cfg_note}"
