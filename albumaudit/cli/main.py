"""Main CLI application for AlbumAudit.

This module serves as the orchestrator that registers all CLI commands.
Individual commands are implemented in separate modules for maintainability.
"""

from pathlib import Path

import typer

from albumaudit.cli._common import _default_cfg, activity_log
from albumaudit.utils.logging import setup_logging

# Import command registration functions
from albumaudit.cli.audit_cmd import register_audit
from albumaudit.cli.fix_cmd import register_fix
from albumaudit.cli.manage_cmd import register_manage
from albumaudit.cli.version_cmd import register_version
from albumaudit.cli.config_cmd import create_config_app
from albumaudit.cli.export_cmd import create_export_app


# Create main app
app = typer.Typer(
    name="albumaudit",
    help="AlbumAudit: check that your photos carry the date of their album.",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """AlbumAudit: check that your photos carry the date of their album."""
    log_cfg = _default_cfg.logging
    log_level = "DEBUG" if verbose else log_cfg.level.upper()
    activity_log.clear()
    setup_logging(
        level=log_level,
        log_file=Path(log_cfg.file_path) if log_cfg.log_to_file else None,
        use_colors=log_cfg.color_output,
        activity_log=activity_log,
    )


# Register top-level commands
register_audit(app)
register_fix(app)
register_manage(app)
register_version(app)

# Add sub-apps
app.add_typer(create_config_app(), name="config")
app.add_typer(create_export_app(), name="export")


if __name__ == "__main__":
    app()
