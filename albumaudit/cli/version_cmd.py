"""Version command for AlbumAudit CLI."""

import typer

from albumaudit import __version__
from albumaudit.cli._common import console


def register_version(app: typer.Typer) -> None:
    """Register the version command with the Typer app."""

    @app.command()
    def version():
        """Show AlbumAudit version."""
        console.print(f"AlbumAudit v{__version__}")
