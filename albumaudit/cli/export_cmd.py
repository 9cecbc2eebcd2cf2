"""Export commands for AlbumAudit CLI."""

from pathlib import Path
from typing import Optional

import typer

from albumaudit.cli._common import console, err_console, _default_cfg, bool_show_default
from albumaudit.cli.helpers import create_session, error_exit, resolve_bool, resolve_root
from albumaudit.cli.options import ConfigOpt, RootArg
from albumaudit.config import ConfigLoader
from albumaudit.config.schema import AlbumAuditConfig
from albumaudit.core.exporter import Exporter
from albumaudit.core.models import AlbumAnalysis, ScanResult
from albumaudit.core.scanner import ScanError


def _perform_audit(
    root: Optional[Path],
    cfg: AlbumAuditConfig,
    include_photos: bool,
) -> tuple[ScanResult, Optional[dict[str, AlbumAnalysis]]]:
    """Audit the root and return the albums (and photo analyses). Used by export commands."""
    root = resolve_root(root, cfg, console)

    with create_session(root, cfg) as session:
        try:
            with console.status("[bold blue]Auditing albums..."):
                albums = session.load_albums(refresh=True)
                analyses = None
                if include_photos:
                    analyses = {
                        album.name: session.album_auditor.analyze(album, include_read_only=True)
                        for album in albums
                        if album.photo_count
                    }
        except ScanError as e:
            error_exit(console, str(e))

        result = session.last_scan or ScanResult(root_identity=session.storage.identity)
        result.albums = albums

    return result, analyses


def create_export_app() -> typer.Typer:
    """Create and return the export sub-app with all commands registered."""

    export_app = typer.Typer(
        name="export",
        help="Export audit results to various formats.",
        no_args_is_help=True,
    )

    @export_app.command("json")
    def export_json(
        root: RootArg = None,
        output: Optional[Path] = typer.Option(
            None, "--output", "-o",
            help="Output file path (default: stdout)",
        ),
        photos: Optional[bool] = typer.Option(
            None, "--photos/--no-photos",
            help="Include every photo of every album",
            show_default=bool_show_default(_default_cfg.export.include_photos, "photos", "no-photos"),
        ),
        statistics: Optional[bool] = typer.Option(
            None, "--statistics/--no-statistics",
            help="Include summary statistics",
            show_default=bool_show_default(_default_cfg.export.include_statistics, "statistics", "no-statistics"),
        ),
        pretty: Optional[bool] = typer.Option(
            None, "--pretty/--compact",
            help="Pretty print JSON output",
            show_default=bool_show_default(_default_cfg.export.pretty_print, "pretty", "compact"),
        ),
        config: ConfigOpt = None,
    ):
        """
        Export audit results to JSON format.

        Audits the root folder and exports the results to JSON.
        By default outputs to stdout; use --output to write to a file.
        """
        cfg = ConfigLoader.load(config)
        include_photos = resolve_bool(photos, cfg.export.include_photos)

        result, analyses = _perform_audit(root, cfg, include_photos)

        exporter = Exporter(
            include_statistics=resolve_bool(statistics, cfg.export.include_statistics),
            pretty_print=resolve_bool(pretty, cfg.export.pretty_print),
        )
        json_str = exporter.to_json(result, analyses, output)

        if output:
            console.print(f"[green]Exported to:[/green] {output}")
            console.print(f"[dim]Albums: {len(result.albums)}[/dim]")
        else:
            # Output to stdout (without rich formatting)
            print(json_str)

    @export_app.command("csv")
    def export_csv(
        root: RootArg = None,
        output: Optional[Path] = typer.Option(
            None, "--output", "-o",
            help="Output file path (default: stdout)",
        ),
        photos: bool = typer.Option(
            False, "--photos",
            help="One row per photo instead of one row per album",
        ),
        config: ConfigOpt = None,
    ):
        """
        Export audit results to CSV format.

        Audits the root folder and exports one row per album (or per photo
        with --photos). By default outputs to stdout; use --output to write
        to a file.
        """
        cfg = ConfigLoader.load(config)

        result, analyses = _perform_audit(root, cfg, photos)

        exporter = Exporter()
        if photos:
            csv_str = exporter.photos_to_csv(result, analyses or {}, output)
        else:
            csv_str = exporter.albums_to_csv(result, output)

        if output:
            err_console.print(f"[green]Exported to:[/green] {output}")
            err_console.print(f"[dim]Albums: {len(result.albums)}[/dim]")
        else:
            print(csv_str, end="")

    return export_app
