"""Helpers shared by CLI subcommands."""

from __future__ import annotations

import contextlib
from collections.abc import Iterator

import typer
from rich.console import Console

from wal_catalog.catalog import Archive, Backup, BackupCatalog, Prefix
from wal_catalog.core.exceptions import WalCatalogError
from wal_catalog.core.models import AppConfig, ExistenceStatus
from wal_catalog.logging import get_logger

# Keyword accepted wherever a backup name is expected
LATEST = "LATEST"

# Exit codes for `exists` checks
EXIT_EXISTS = 0
EXIT_ABSENT = 1
EXIT_INDETERMINATE = 2

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)
log = get_logger("cli")


def get_config(ctx: typer.Context) -> AppConfig:
    """Return the AppConfig stored by the top-level callback."""
    config = ctx.find_root().obj
    if not isinstance(config, AppConfig):
        config = AppConfig()
    return config


def open_prefix(config: AppConfig) -> Prefix:
    from wal_catalog.storage import get_store

    return Prefix.from_config(config.storage, get_store(config.storage))


def open_catalog(config: AppConfig) -> BackupCatalog:
    return BackupCatalog(open_prefix(config), base_prefix=config.storage.base_prefix)


def resolve_backup(catalog: BackupCatalog, name: str) -> Backup:
    """Map a name, or the LATEST keyword, to a Backup handle."""
    if name == LATEST:
        return catalog.get_latest_backup()
    return catalog.get_backup(name)


def open_archive(config: AppConfig, segment: str) -> Archive:
    """Build an Archive for a WAL segment file name under the configured WAL prefix."""
    return Archive(open_prefix(config), f"{config.storage.wal_path}{segment}")


@contextlib.contextmanager
def reported_errors(action: str) -> Iterator[None]:
    """Turn catalog errors and rejected names into a red message and exit code 1."""
    try:
        yield
    except (WalCatalogError, ValueError) as exc:
        err_console.print(f"[bold red]✗ {action} failed: {exc}[/bold red]")
        log.error("command_failed", action=action, error=str(exc))
        raise typer.Exit(code=1) from exc


def report_existence(label: str, status: ExistenceStatus, error: Exception | None) -> None:
    """Print an existence verdict and exit with the matching code unless it exists."""
    if status == ExistenceStatus.EXISTS:
        console.print(f"[green]✓[/green] {label} exists")
        return
    if status == ExistenceStatus.ABSENT:
        console.print(f"[yellow]✗ {label} not found[/yellow]")
        raise typer.Exit(code=EXIT_ABSENT)
    err_console.print(f"[bold red]? {label}: could not determine existence: {error}[/bold red]")
    raise typer.Exit(code=EXIT_INDETERMINATE)
