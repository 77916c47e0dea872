"""CLI config subcommands for managing wal-catalog configuration."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.syntax import Syntax

from wal_catalog.core.models import StorageType

config_app = typer.Typer(no_args_is_help=True, rich_markup_mode="rich")
console = Console()


@config_app.command("init")
def config_init(
        path: Path | None = typer.Option(
            None, "--path", help="Custom config file location."
        ),
) -> None:
    """Create or update the configuration file interactively.

    If no --path is given, writes to the default location:
      macOS:  ~/Library/Application Support/wal-catalog/config.toml
      Linux:  ~/.config/wal-catalog/config.toml
    """
    from wal_catalog.core.config import CONFIG_FILE, save_config_file
    from wal_catalog.core.models import AppConfig, LoggingConfig, StorageConfig

    target = path or CONFIG_FILE

    if target.exists():
        overwrite = typer.confirm(f"Config already exists at {target}. Overwrite?")
        if not overwrite:
            console.print("[yellow]Aborted.[/yellow]")
            raise typer.Exit()

    console.print("[bold]wal-catalog configuration wizard[/bold]\n")

    # ── Storage ──
    console.print("[bold blue]Object Store[/bold blue]")
    storage_type = typer.prompt(
        "Storage type",
        type=typer.Choice([t.value for t in StorageType]),
        default="s3",
    )
    storage_kwargs: dict = {"type": StorageType(storage_type)}

    if storage_type == "local":
        storage_kwargs["local_path"] = Path(
            typer.prompt("Directory holding bucket mirrors", default="./objects")
        )
    else:
        storage_kwargs["region"] = typer.prompt("AWS region", default="us-east-1")
        endpoint = typer.prompt("Endpoint URL (leave empty for AWS)", default="")
        if endpoint:
            storage_kwargs["endpoint_url"] = endpoint

    storage_kwargs["bucket"] = typer.prompt("Bucket name")
    storage_kwargs["server"] = typer.prompt("Server namespace (leave empty for none)", default="")
    storage_kwargs["base_prefix"] = typer.prompt("Backup prefix", default="basebackups_005")
    storage_kwargs["wal_prefix"] = typer.prompt("WAL prefix", default="wal_005")

    config = AppConfig(storage=StorageConfig(**storage_kwargs), logging=LoggingConfig())

    saved_path = save_config_file(config, target)
    console.print(f"\n[green]✓[/green] Config saved to: {saved_path}")
    console.print("  File permissions set to 600 (owner-only read/write).")


@config_app.command("show")
def config_show(
        path: Path | None = typer.Option(
            None, "--path", help="Custom config file location."
        ),
) -> None:
    """Display the current configuration file."""
    from wal_catalog.core.config import CONFIG_FILE

    target = path or CONFIG_FILE

    if not target.exists():
        console.print(
            f"[yellow]No config file found at {target}.[/yellow]\n"
            f"Run [bold]wal-catalog config init[/bold] to create one."
        )
        raise typer.Exit()

    content = target.read_text()
    syntax = Syntax(content, "toml", theme="monokai", line_numbers=True)
    console.print(f"[bold]Config: {target}[/bold]\n")
    console.print(syntax)


@config_app.command("path")
def config_path() -> None:
    """Show config file paths."""
    from wal_catalog.core.config import CONFIG_DIR, CONFIG_FILE

    console.print("[bold]wal-catalog paths:[/bold]")
    console.print(f"  Config dir:    {CONFIG_DIR}")
    console.print(f"  Config file:   {CONFIG_FILE}")
