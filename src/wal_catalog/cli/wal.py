"""CLI WAL archive subcommands."""

from __future__ import annotations

from pathlib import Path

import typer

from wal_catalog.cli.context import (
    console,
    get_config,
    open_archive,
    report_existence,
    reported_errors,
)

wal_app = typer.Typer(no_args_is_help=True, rich_markup_mode="rich")


@wal_app.command("exists")
def wal_exists(
        ctx: typer.Context,
        segment: str = typer.Argument(..., help="WAL file name, e.g. 000000010000000000000002.lz4"),
) -> None:
    """Check whether a WAL segment is archived.

    Exit code 0 if it exists, 1 if it is absent, 2 if the store gave no answer.
    """
    with reported_errors("Existence check"):
        result = open_archive(get_config(ctx), segment).check_existence()
    report_existence(f"WAL segment {segment}", result.status, result.error)


@wal_app.command("fetch")
def wal_fetch(
        ctx: typer.Context,
        segment: str = typer.Argument(..., help="WAL file name under the WAL prefix."),
        dest: Path = typer.Argument(..., help="File to write the segment to."),
) -> None:
    """Download a WAL segment, as stored, to DEST."""
    with reported_errors("WAL fetch"):
        archive = open_archive(get_config(ctx), segment)
        archive.fetch(dest)
    console.print(f"[green]✓[/green] Fetched {archive.key} to {dest}")
