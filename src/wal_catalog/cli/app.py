"""Main Typer application entry point for the wal-catalog CLI."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

from wal_catalog import __version__
from wal_catalog.cli.backup import backup_app
from wal_catalog.cli.config_cmd import config_app
from wal_catalog.cli.context import err_console
from wal_catalog.cli.wal import wal_app
from wal_catalog.core.models import StorageConfig, StorageType

app = typer.Typer(
    name="wal-catalog",
    help="Find, check and fetch database backups and WAL archives in an object store.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=True,
)

# Register sub-command groups
app.add_typer(backup_app, name="backup", help="Base backup catalog")
app.add_typer(wal_app, name="wal", help="WAL archive lookups")
app.add_typer(config_app, name="config", help="Configuration management")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"wal-catalog {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
        ctx: typer.Context,
        version: bool = typer.Option(
            False,
            "--version",
            "-V",
            help="Show version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Enable verbose (DEBUG) logging.",
        ),
        log_json: bool = typer.Option(
            False,
            "--log-json",
            help="Output logs in JSON format.",
        ),
        config_path: Path | None = typer.Option(
            None, "--config", help="Config file to read instead of the default."
        ),
        storage: StorageType | None = typer.Option(
            None, "--storage", "-s", help="Object store backend."
        ),
        bucket: str | None = typer.Option(None, "--bucket", "-b", help="Bucket name."),
        server: str | None = typer.Option(
            None, "--server", help="Server namespace inside the bucket."
        ),
        local_path: Path | None = typer.Option(
            None, "--local-path", help="Directory holding bucket mirrors (local storage)."
        ),
        region: str | None = typer.Option(None, "--region", help="AWS region."),
        endpoint_url: str | None = typer.Option(
            None, "--endpoint-url", help="S3-compatible endpoint URL."
        ),
) -> None:
    """wal-catalog: read-side catalog for backups and WAL archives."""
    from wal_catalog.core.config import load_config
    from wal_catalog.core.exceptions import ConfigError
    from wal_catalog.core.models import LogFormat
    from wal_catalog.logging import setup_logging

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        err_console.print(f"[bold red]✗ {exc}[/bold red]")
        raise typer.Exit(code=1) from exc

    overrides = {
        "type": storage,
        "bucket": bucket,
        "server": server,
        "local_path": local_path,
        "region": region,
        "endpoint_url": endpoint_url,
    }
    try:
        storage_config = StorageConfig(
            **{
                **config.storage.model_dump(),
                **{k: v for k, v in overrides.items() if v is not None},
            }
        )
    except ValidationError as exc:
        err_console.print(f"[bold red]✗ Invalid storage options: {exc}[/bold red]")
        raise typer.Exit(code=1) from exc

    log_updates: dict = {}
    if verbose:
        log_updates["level"] = "DEBUG"
    if log_json:
        log_updates["format"] = LogFormat.JSON
    logging_config = config.logging.model_copy(update=log_updates)

    setup_logging(logging_config)
    ctx.obj = config.model_copy(update={"storage": storage_config, "logging": logging_config})


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
