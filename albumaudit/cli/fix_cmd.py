"""Fix command for AlbumAudit CLI."""

from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from albumaudit.cli._common import activity_log, console
from albumaudit.cli.helpers import (
    create_session,
    error_exit,
    format_datetime,
    print_activity,
    resolve_bool,
    resolve_root,
)
from albumaudit.cli.options import AlbumArg, ConfigOpt, DryRunOpt, RootOpt, YesOpt
from albumaudit.config import ConfigLoader
from albumaudit.core.scanner import ScanError
from albumaudit.core.session import AlbumNotFoundError


def register_fix(app: typer.Typer) -> None:
    """Register the fix command with the Typer app."""

    @app.command()
    def fix(
        name: AlbumArg,
        photos: Optional[list[str]] = typer.Option(
            None, "--photo", "-p",
            help="Only fix this photo (repeatable)",
        ),
        root: RootOpt = None,
        dry_run: DryRunOpt = None,
        yes: YesOpt = False,
        config: ConfigOpt = None,
    ):
        """
        Set the capture dates of an album's photos to the album date.

        Only JPEG photos are rewritten. The time of day already recorded in
        a photo is kept; photos without one get 12:00. Each original is
        saved next to the photo as <name>.bak before it is overwritten.
        """
        cfg = ConfigLoader.load(config)
        root = resolve_root(root, cfg, console)
        use_dry_run = resolve_bool(dry_run, cfg.fix.dry_run_default)

        with create_session(root, cfg) as session:
            try:
                album = session.find_album(name)
            except (ScanError, AlbumNotFoundError) as e:
                error_exit(console, str(e))

            if album.date is None:
                error_exit(console, f"Album name does not start with a valid date: {name}")

            if use_dry_run:
                console.print("[yellow]DRY RUN MODE[/yellow] - No files will be changed")
            elif cfg.fix.confirm and not yes:
                count = len(photos) if photos else album.supported_photo_count
                confirm = typer.confirm(
                    f"This will rewrite capture dates of {count} photo(s) in {name}. Continue?"
                )
                if not confirm:
                    console.print("[yellow]Aborted.[/yellow]")
                    raise typer.Exit(0)

            outcomes = session.fix_album(name, photo_names=photos, dry_run=use_dry_run)

        if not outcomes:
            console.print("[yellow]No writable photos to fix.[/yellow]")
            return

        table = Table(title=f"Fix: {escape(name)}")
        table.add_column("Photo", style="cyan", max_width=40)
        table.add_column("Was")
        table.add_column("Now")
        table.add_column("Result")
        table.add_column("Backup", style="dim")

        failed = 0
        for outcome in outcomes:
            if outcome.succeeded:
                result = "[yellow]would fix[/yellow]" if use_dry_run else "[green]fixed[/green]"
                now = format_datetime(outcome.target_date)
            else:
                failed += 1
                result = f"[red]failed: {escape(str(outcome.error))}[/red]"
                now = "-"
            table.add_row(
                escape(outcome.photo.name),
                format_datetime(outcome.photo.best_capture_date),
                now,
                result,
                escape(outcome.backup_ref.name) if outcome.backup_ref else "-",
            )

        console.print(table)
        console.print()

        succeeded = len(outcomes) - failed
        verb = "Would fix" if use_dry_run else "Fixed"
        console.print(f"{verb} {succeeded} of {len(outcomes)} photos")
        print_activity(console, activity_log)
        if failed:
            console.print(f"[red]{failed} photo(s) could not be fixed[/red]")
            raise typer.Exit(1)
