"""Tests for the CLI interface."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from conftest import BUCKET, put_local, ts
from typer.testing import CliRunner

from wal_catalog.cli.app import app

runner = CliRunner()

BASE = "srv/basebackups_005"


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo the handlers each invocation installs on the runner's streams."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture()
def cli_args(local_root: Path, tmp_path: Path) -> list[str]:
    """Global options pointing the CLI at the local test bucket."""
    return [
        "--config", str(tmp_path / "nonexistent.toml"),
        "--storage", "local",
        "--local-path", str(local_root),
        "--bucket", BUCKET,
        "--server", "srv",
    ]


@pytest.fixture()
def populated(local_root: Path) -> Path:
    put_local(local_root, f"{BASE}/base_0001_backup_stop_sentinel.json", mtime=ts(2024, 1, 1))
    put_local(local_root, f"{BASE}/base_0003_backup_stop_sentinel.json", mtime=ts(2024, 3, 1))
    put_local(local_root, f"{BASE}/base_0002_backup_stop_sentinel.json", mtime=ts(2024, 2, 1))
    put_local(local_root, f"{BASE}/base_0003/tar_partitions/part_1.tar.lz4", body=b"p1")
    put_local(local_root, f"{BASE}/base_0003/tar_partitions/part_2.tar.lz4", body=b"p2")
    put_local(local_root, "srv/wal_005/000000010000000000000002.lz4", body=b"wal")
    return local_root


class TestMainApp:
    def test_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "backup" in result.output.lower()

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_no_args(self) -> None:
        result = runner.invoke(app)
        # Typer returns exit code 2 when showing help via no_args_is_help
        assert result.exit_code == 2

    def test_missing_bucket(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("WAL_CATALOG_BUCKET", raising=False)
        monkeypatch.delenv("WALE_S3_PREFIX", raising=False)
        result = runner.invoke(app, [
            "--config", str(tmp_path / "nonexistent.toml"),
            "--storage", "local",
            "--local-path", str(tmp_path),
            "backup", "latest",
        ])
        assert result.exit_code == 1
        assert "Bucket name is required" in result.output


class TestBackupSubcommand:
    def test_backup_help(self) -> None:
        result = runner.invoke(app, ["backup", "--help"])
        assert result.exit_code == 0
        assert "latest" in result.output.lower()
        assert "keys" in result.output.lower()

    def test_latest(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "latest"])
        assert result.exit_code == 0, result.output
        assert "base_0003" in result.output.splitlines()

    def test_latest_empty(self, cli_args: list[str]) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "latest"])
        assert result.exit_code == 1
        assert "No backups found" in result.output

    def test_list(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "list"])
        assert result.exit_code == 0, result.output
        out = result.output
        assert out.index("base_0003") < out.index("base_0002") < out.index("base_0001")

    def test_keys_latest(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "keys", "LATEST"])
        assert result.exit_code == 0, result.output
        assert [line for line in result.output.splitlines() if line.startswith(BASE)] == [
            f"{BASE}/base_0003/tar_partitions/part_1.tar.lz4",
            f"{BASE}/base_0003/tar_partitions/part_2.tar.lz4",
        ]

    def test_exists(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "exists", "base_0001"])
        assert result.exit_code == 0
        assert "exists" in result.output

    def test_absent(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "exists", "base_9999"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_indeterminate(self, tmp_path: Path) -> None:
        """A store that cannot answer must not be reported as exists or absent."""
        result = runner.invoke(app, [
            "--config", str(tmp_path / "nonexistent.toml"),
            "--storage", "local",
            "--local-path", str(tmp_path / "nowhere"),
            "--bucket", BUCKET,
            "backup", "exists", "base_0001",
        ])
        assert result.exit_code == 2

    def test_exists_rejects_nested_name(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "exists", "base_0001/x"])
        assert result.exit_code == 1
        assert "Invalid backup name" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_fetch(self, cli_args: list[str], populated: Path, tmp_path: Path) -> None:
        dest = tmp_path / "restore"
        result = runner.invoke(app, [*cli_args, "backup", "fetch", "LATEST", str(dest)])
        assert result.exit_code == 0, result.output
        assert (dest / "tar_partitions" / "part_2.tar.lz4").read_bytes() == b"p2"

    def test_fetch_without_sentinel(
            self, cli_args: list[str], populated: Path, tmp_path: Path,
    ) -> None:
        result = runner.invoke(app, [*cli_args, "backup", "fetch", "base_9999", str(tmp_path / "r")])
        assert result.exit_code == 1
        assert not (tmp_path / "r").exists()


class TestWalSubcommand:
    def test_exists(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "wal", "exists", "000000010000000000000002.lz4"])
        assert result.exit_code == 0

    def test_absent(self, cli_args: list[str], populated: Path) -> None:
        result = runner.invoke(app, [*cli_args, "wal", "exists", "000000010000000000000009.lz4"])
        assert result.exit_code == 1

    def test_fetch(self, cli_args: list[str], populated: Path, tmp_path: Path) -> None:
        dest = tmp_path / "pg_wal" / "000000010000000000000002"
        result = runner.invoke(app, [
            *cli_args, "wal", "fetch", "000000010000000000000002.lz4", str(dest),
        ])
        assert result.exit_code == 0, result.output
        assert dest.read_bytes() == b"wal"

    def test_fetch_missing(self, cli_args: list[str], populated: Path, tmp_path: Path) -> None:
        dest = tmp_path / "000000010000000000000009"
        result = runner.invoke(app, [*cli_args, "wal", "fetch", "000000010000000000000009.lz4", str(dest)])
        assert result.exit_code == 1
        assert not dest.exists()

    def test_fetch_missing_keeps_existing_file(
            self, cli_args: list[str], populated: Path, tmp_path: Path,
    ) -> None:
        dest = tmp_path / "000000010000000000000009"
        dest.write_bytes(b"user data")
        result = runner.invoke(app, [*cli_args, "wal", "fetch", "000000010000000000000009.lz4", str(dest)])
        assert result.exit_code == 1
        assert dest.read_bytes() == b"user data"


class TestConfigSubcommand:
    def test_config_help(self) -> None:
        result = runner.invoke(app, ["config", "--help"])
        assert result.exit_code == 0
        assert "init" in result.output.lower()
        assert "show" in result.output.lower()

    def test_config_path(self) -> None:
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert "Config dir" in result.output

    def test_config_show_missing(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["config", "show", "--path", str(tmp_path / "none.toml")])
        assert result.exit_code == 0
        assert "No config file found" in result.output
