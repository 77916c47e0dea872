"""CLI backup subcommands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from wal_catalog.cli.context import (
    EXIT_ABSENT,
    LATEST,
    console,
    err_console,
    get_config,
    open_catalog,
    report_existence,
    reported_errors,
    resolve_backup,
)

backup_app = typer.Typer(no_args_is_help=True, rich_markup_mode="rich")


@backup_app.command("latest")
def backup_latest(ctx: typer.Context) -> None:
    """Print the name of the most recent backup."""
    with reported_errors("Latest backup lookup"):
        name = open_catalog(get_config(ctx)).get_latest()
    typer.echo(name)


@backup_app.command("list")
def backup_list(ctx: typer.Context) -> None:
    """List backups, newest first."""
    with reported_errors("Backup listing"):
        catalog = open_catalog(get_config(ctx))
        backups = catalog.list_backups()

    if not backups:
        console.print("[yellow]No backups found.[/yellow]")
        return

    table = Table(title=f"Backups in {catalog.prefix.bucket}/{catalog.path}", show_lines=True)
    table.add_column("Name", style="cyan")
    table.add_column("Last Modified", style="magenta")

    for b in backups:
        table.add_row(b.name, b.last_modified.isoformat())

    console.print(table)


@backup_app.command("keys")
def backup_keys(
        ctx: typer.Context,
        name: str = typer.Argument(..., help=f"Backup name, or {LATEST}."),
) -> None:
    """Print the tar partition keys of a backup, one per line."""
    with reported_errors("Key listing"):
        catalog = open_catalog(get_config(ctx))
        keys = catalog.get_keys(resolve_backup(catalog, name))
    for key in keys:
        typer.echo(key)


@backup_app.command("exists")
def backup_exists(
        ctx: typer.Context,
        name: str = typer.Argument(..., help="Backup name."),
) -> None:
    """Check a backup's sentinel object.

    Exit code 0 if it exists, 1 if it is absent, 2 if the store gave no answer.
    """
    with reported_errors("Existence check"):
        backup = open_catalog(get_config(ctx)).get_backup(name)
        result = backup.check_existence()
    report_existence(f"Backup {name}", result.status, result.error)


@backup_app.command("fetch")
def backup_fetch(
        ctx: typer.Context,
        name: str = typer.Argument(..., help=f"Backup name, or {LATEST}."),
        dest: Path = typer.Argument(..., help="Directory to write partitions into."),
) -> None:
    """Download a backup's tar partitions, as stored, into DEST."""
    with reported_errors("Backup fetch"):
        catalog = open_catalog(get_config(ctx))
        backup = resolve_backup(catalog, name)
        if not backup.exists():
            err_console.print(f"[red]Backup {backup.name} has no sentinel; refusing to fetch.[/red]")
            raise typer.Exit(code=EXIT_ABSENT)
        with console.status(f"[bold blue]Fetching {backup.name}..."):
            files = backup.fetch(dest)

    console.print(f"[green]✓[/green] Fetched {backup.name}: {len(files)} file(s) into {dest}")

