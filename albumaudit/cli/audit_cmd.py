"""Audit and album commands for AlbumAudit CLI."""

import typer
from rich.markup import escape
from rich.table import Table

from albumaudit.cli._common import console
from albumaudit.cli.helpers import (
    CLASSIFICATION_STYLES,
    SEVERITY_STYLES,
    create_session,
    error_exit,
    format_datetime,
    resolve_root,
)
from albumaudit.cli.options import AlbumArg, ConfigOpt, RootArg, RootOpt
from albumaudit.config import ConfigLoader
from albumaudit.core.scanner import ScanError
from albumaudit.core.session import AlbumNotFoundError


def register_audit(app: typer.Typer) -> None:
    """Register the audit and album commands with the Typer app."""

    @app.command()
    def audit(
        root: RootArg = None,
        config: ConfigOpt = None,
        problems_only: bool = typer.Option(
            False, "--problems-only", "-p",
            help="Only list albums that need attention",
        ),
    ):
        """
        Audit every album under the root folder.

        Each sub-folder is an album whose name starts with its date
        (YYYYMMDD). Photos whose capture date disagrees with that date are
        counted, and each album gets a severity.
        """
        cfg = ConfigLoader.load(config)
        root = resolve_root(root, cfg, console)

        console.print(f"[blue]Auditing:[/blue] {root}")
        if config:
            console.print(f"[dim]Config: {config}[/dim]")
        console.print()

        with create_session(root, cfg) as session:
            try:
                with console.status("[bold blue]Reading albums..."):
                    albums = session.load_albums(refresh=True)
            except ScanError as e:
                error_exit(console, str(e))
            result = session.last_scan

        shown = [album for album in albums if album.has_problems] if problems_only else albums

        table = Table(title="Albums")
        table.add_column("Album", style="cyan", max_width=40)
        table.add_column("Photos", justify="right")
        table.add_column("Correct", justify="right")
        table.add_column("Earlier", justify="right")
        table.add_column("Later", justify="right")
        table.add_column("No date", justify="right")
        table.add_column("Severity")
        table.add_column("Warnings", style="yellow")

        for album in shown:
            breakdown = album.status_breakdown
            style = SEVERITY_STYLES[album.severity]
            counts = (
                [str(breakdown.correct_count), str(breakdown.earlier_count),
                 str(breakdown.later_count), str(breakdown.missing_count)]
                if breakdown is not None
                else ["-"] * 4
            )
            table.add_row(
                escape(album.name),
                str(album.photo_count),
                *counts,
                f"[{style}]{album.severity.value}[/{style}]",
                escape("\n".join(album.structural_warnings)) or "-",
            )

        if problems_only and not shown:
            console.print("[green]No albums need attention.[/green]")
        else:
            console.print(table)
        console.print()

        summary = Table(title="Audit Summary")
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="white")
        summary.add_row("Albums", str(len(albums)))
        summary.add_row("Photos", str(sum(album.photo_count for album in albums)))
        summary.add_row("Albums needing attention", str(sum(1 for a in albums if a.has_problems)))
        if result is not None:
            summary.add_row("Scan duration", f"{result.scan_duration_seconds:.2f}s")
        console.print(summary)

        if result is not None and result.errors:
            console.print()
            console.print(f"[yellow]Errors ({len(result.errors)}):[/yellow]")
            for name, message in result.errors[:5]:
                console.print(f"  - {escape(name)}: {escape(message)}")
            if len(result.errors) > 5:
                console.print(f"  ... and {len(result.errors) - 5} more")

    @app.command()
    def album(
        name: AlbumArg,
        root: RootOpt = None,
        config: ConfigOpt = None,
    ):
        """
        Show every photo of one album with its capture date and status.
        """
        cfg = ConfigLoader.load(config)
        root = resolve_root(root, cfg, console)

        with create_session(root, cfg) as session:
            try:
                record = session.find_album(name)
                analysis = session.album_detail(name)
            except (ScanError, AlbumNotFoundError) as e:
                error_exit(console, str(e))

        date_str = record.date.isoformat() if record.date else "[red]invalid[/red]"
        console.print(f"[bold]{escape(record.name)}[/bold]  (album date: {date_str})")
        for warning in record.structural_warnings:
            console.print(f"[yellow]  ! {escape(warning)}[/yellow]")
        console.print()

        table = Table(show_header=True)
        table.add_column("Photo", style="cyan", max_width=40)
        table.add_column("Captured")
        table.add_column("Status")
        table.add_column("Camera", style="dim")
        table.add_column("Notes", style="yellow")

        for photo in analysis.photos:
            style = CLASSIFICATION_STYLES[photo.classification]
            name_cell = escape(photo.name) if photo.is_writable else f"{escape(photo.name)} [dim](read-only)[/dim]"
            table.add_row(
                name_cell,
                format_datetime(photo.best_capture_date),
                f"[{style}]{photo.classification.value}[/{style}]",
                escape(photo.camera or "-"),
                escape("; ".join(photo.warnings)) or "-",
            )

        console.print(table)

        breakdown = analysis.breakdown
        if breakdown is not None:
            console.print()
            style = SEVERITY_STYLES[breakdown.severity]
            console.print(
                f"{breakdown.total_analyzed} analyzed: {breakdown.correct_count} correct, "
                f"{breakdown.earlier_count} earlier, {breakdown.later_count} later, "
                f"{breakdown.missing_count} without date  "
                f"[{style}]{breakdown.severity.value}[/{style}]"
            )
