"""Rename and delete commands for AlbumAudit CLI."""

from typing import Optional

import typer
from rich.markup import escape

from albumaudit.cli._common import activity_log, console
from albumaudit.cli.helpers import (
    create_session,
    error_exit,
    parse_date_arg,
    print_activity,
    resolve_root,
)
from albumaudit.cli.options import AlbumArg, ConfigOpt, RootOpt, YesOpt
from albumaudit.config import ConfigLoader
from albumaudit.core.album_ops import AlbumOperationError
from albumaudit.core.scanner import ScanError
from albumaudit.core.session import AlbumNotFoundError


def register_manage(app: typer.Typer) -> None:
    """Register the rename and delete commands with the Typer app."""

    @app.command()
    def rename(
        name: AlbumArg,
        new_date: str = typer.Argument(..., help="New album date (YYYYMMDD or YYYY-MM-DD)"),
        root: RootOpt = None,
        dry_run: bool = typer.Option(False, "--dry-run", help="Show the new name without renaming"),
        config: ConfigOpt = None,
    ):
        """
        Change the date prefix of an album folder, keeping its label.
        """
        cfg = ConfigLoader.load(config)
        root = resolve_root(root, cfg, console)
        target_date = parse_date_arg(new_date, console)

        with create_session(root, cfg) as session:
            session.operations.dry_run = dry_run
            try:
                new_name = session.rename_album(name, target_date)
            except (ScanError, AlbumNotFoundError, AlbumOperationError) as e:
                error_exit(console, str(e))

        if new_name == name:
            console.print(f"[dim]{escape(name)} already carries that date[/dim]")
        elif dry_run:
            console.print(f"[yellow]Would rename:[/yellow] {escape(name)} -> {escape(new_name)}")
        else:
            console.print(f"[green]Renamed:[/green] {escape(name)} -> {escape(new_name)}")
        print_activity(console, activity_log)

    @app.command()
    def delete(
        name: AlbumArg,
        photo: Optional[str] = typer.Option(
            None, "--photo", "-p",
            help="Delete only this photo from the album",
        ),
        root: RootOpt = None,
        yes: YesOpt = False,
        config: ConfigOpt = None,
    ):
        """
        Delete an album folder, or a single photo with --photo.
        """
        cfg = ConfigLoader.load(config)
        root = resolve_root(root, cfg, console)

        label = f"{name}/{photo}" if photo else name
        target = label if photo else f"album {name} and everything in it"
        if not yes:
            confirm = typer.confirm(f"This will permanently delete {target}. Continue?")
            if not confirm:
                console.print("[yellow]Aborted.[/yellow]")
                raise typer.Exit(0)

        with create_session(root, cfg) as session:
            try:
                if photo:
                    session.delete_photo(name, photo)
                else:
                    session.delete_album(name)
            except (ScanError, AlbumNotFoundError, AlbumOperationError) as e:
                error_exit(console, str(e))

        console.print(f"[green]Deleted:[/green] {escape(label)}")
        print_activity(console, activity_log)
