"""Config commands for AlbumAudit CLI."""

from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer
import yaml

from albumaudit.cli._common import console
from albumaudit.cli.helpers import error_exit
from albumaudit.cli.options import ConfigOpt
from albumaudit.config import ConfigError, ConfigLoader
from albumaudit.config.templates import get_config_template


def _active_config_source(config: Optional[Path]) -> str:
    """Describe which file the effective configuration comes from."""
    if config:
        return str(config)
    for search_path in ConfigLoader.DEFAULT_CONFIG_PATHS:
        if search_path.exists():
            return str(search_path)
    return "built-in defaults"


def create_config_app() -> typer.Typer:
    """Create and return the config sub-app with all commands registered."""

    config_app = typer.Typer(
        name="config",
        help="Configuration management commands.",
        no_args_is_help=True,
    )

    @config_app.command("init")
    def config_init(
        output: Path = typer.Option(
            Path("albumaudit.yaml"),
            "--output", "-o",
            help="Output file path",
        ),
        full: bool = typer.Option(
            False,
            "--full",
            help="Generate full config with all options (default: minimal)",
        ),
        force: bool = typer.Option(
            False,
            "--force", "-f",
            help="Overwrite existing config file",
        ),
    ):
        """
        Initialize a new configuration file.

        Creates an albumaudit.yaml file in the current directory (or specified path).
        Use --full to generate a complete config with all options documented.
        """
        output = output.resolve()

        if output.exists() and not force:
            console.print(f"[yellow]Config file already exists:[/yellow] {output}")
            console.print("Use --force to overwrite.")
            raise typer.Exit(1)

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(get_config_template(full=full), encoding="utf-8")
        except OSError as e:
            error_exit(console, f"Cannot write config file: {e}")

        console.print(f"[green]Created config file:[/green] {output}")
        if full:
            console.print("[dim]Full configuration with all options documented.[/dim]")
        else:
            console.print("[dim]Minimal configuration. Edit to customize.[/dim]")

        console.print()
        console.print("Next steps:")
        console.print(f"  1. Edit {output.name} and set general.root")
        console.print("  2. Run: albumaudit audit")

    @config_app.command("show")
    def config_show(
        config: ConfigOpt = None,
        section: Optional[str] = typer.Option(
            None,
            "--section", "-s",
            help="Show only specific section (e.g., 'severity', 'fix')",
        ),
    ):
        """
        Show current configuration.

        Displays the effective configuration from config file merged with defaults.
        """
        try:
            cfg = ConfigLoader.load(config)
        except ConfigError as e:
            error_exit(console, str(e))

        config_dict = asdict(cfg)

        if section:
            if section not in config_dict:
                console.print(f"[red]Unknown section:[/red] {section}")
                console.print(f"Available sections: {', '.join(config_dict.keys())}")
                raise typer.Exit(1)
            config_dict = {section: config_dict[section]}

        console.print("[bold]AlbumAudit Configuration[/bold]")
        console.print()
        console.print(f"[dim]Source: {_active_config_source(config)}[/dim]")
        console.print()

        console.print(yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=False))

    @config_app.command("validate")
    def config_validate(config: ConfigOpt = None):
        """
        Check a configuration file for errors.
        """
        try:
            cfg = ConfigLoader.load(config)
        except ConfigError as e:
            error_exit(console, str(e))

        source = _active_config_source(config)
        errors = ConfigLoader.validate(cfg)
        if errors:
            console.print(f"[red]Invalid configuration[/red] ({source}):")
            for error in errors:
                console.print(f"  - {error}")
            raise typer.Exit(1)

        console.print(f"[green]Configuration is valid[/green] ({source})")

    @config_app.command("path")
    def config_path():
        """
        Show where AlbumAudit looks for config files.
        """
        console.print("[bold]Config file search paths:[/bold]")
        console.print()

        found = False
        for i, search_path in enumerate(ConfigLoader.DEFAULT_CONFIG_PATHS, 1):
            exists = search_path.exists()
            if exists and not found:
                status = "[green]ACTIVE[/green]"
                found = True
            elif exists:
                status = "[yellow]exists (not used)[/yellow]"
            else:
                status = "[dim]not found[/dim]"

            console.print(f"  {i}. {search_path} {status}")

        if not found:
            console.print()
            console.print("[dim]No config file found. Using built-in defaults.[/dim]")
            console.print("Run 'albumaudit config init' to create one.")

    return config_app
