"""Shared CLI option definitions."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from albumaudit.cli._common import _default_cfg, bool_show_default

RootArg = Annotated[
    Optional[Path],
    typer.Argument(help="Folder holding the albums (default: general.root or current folder)"),
]
RootOpt = Annotated[
    Optional[Path],
    typer.Option("--root", "-r", help="Folder holding the albums (default: general.root or current folder)"),
]
AlbumArg = Annotated[str, typer.Argument(help="Album folder name")]
ConfigOpt = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Config file path"),
]
DryRunOpt = Annotated[
    Optional[bool],
    typer.Option(
        "--dry-run/--no-dry-run",
        help="Show what would change without writing",
        show_default=bool_show_default(_default_cfg.fix.dry_run_default, "dry-run", "no-dry-run"),
    ),
]
YesOpt = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Skip confirmation"),
]
