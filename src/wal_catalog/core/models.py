"""Pydantic models for wal-catalog configuration and catalog entries."""

from __future__ import annotations

import enum
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from wal_catalog.core.exceptions import StorageError

# ──────────────────────── Enums ──────────────────────────


class StorageType(enum.StrEnum):
    """Supported object store backends."""

    LOCAL = "local"
    S3 = "s3"


class LogFormat(enum.StrEnum):
    """Structured log output format."""

    CONSOLE = "console"
    JSON = "json"


class ExistenceStatus(enum.StrEnum):
    """Outcome of a metadata probe against the store."""

    EXISTS = "exists"
    ABSENT = "absent"
    INDETERMINATE = "indeterminate"


# ──────────────────── Config Models ──────────────────────


class StorageConfig(BaseModel):
    """Object store location and client settings."""

    type: StorageType = StorageType.S3
    local_path: Path = Path("./objects")

    bucket: str | None = None
    server: str = ""
    base_prefix: str = "basebackups_005"
    wal_prefix: str = "wal_005"

    # S3 client settings
    region: str = "us-east-1"
    endpoint_url: str | None = None
    max_attempts: int = 3
    connect_timeout: float = 10.0
    read_timeout: float = 60.0

    @field_validator("server", "base_prefix", "wal_prefix")
    @classmethod
    def strip_slashes(cls, v: str) -> str:
        return v.strip("/")

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)
        return v

    @property
    def backup_path(self) -> str:
        """Key prefix under which backup sentinels live, with trailing slash."""
        parts = [p for p in (self.server, self.base_prefix) if p]
        return "/".join(parts) + "/"

    @property
    def wal_path(self) -> str:
        """Key prefix under which WAL segments live, with trailing slash."""
        parts = [p for p in (self.server, self.wal_prefix) if p]
        return "/".join(parts) + "/"


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    log_file: Path | None = None
    format: LogFormat = LogFormat.CONSOLE


class AppConfig(BaseModel):
    """Top-level application configuration."""

    storage: StorageConfig = StorageConfig()
    logging: LoggingConfig = LoggingConfig()


# ──────────────────── Catalog Models ─────────────────────


class ObjectInfo(BaseModel):
    """A single entry returned by a listing or a metadata probe."""

    model_config = ConfigDict(frozen=True)

    key: str
    last_modified: datetime
    size: int = 0


class BackupTime(BaseModel):
    """A backup name paired with the modification time of its sentinel."""

    model_config = ConfigDict(frozen=True)

    name: str
    last_modified: datetime


class ExistenceResult(BaseModel):
    """Three-way answer to "does this object exist"."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    status: ExistenceStatus
    error: StorageError | None = None

    @property
    def exists(self) -> bool:
        """Return True/False, or raise the probe error when indeterminate."""
        if self.status == ExistenceStatus.INDETERMINATE:
            raise self.error or StorageError(f"Existence of {self.key} is unknown", key=self.key)
        return self.status == ExistenceStatus.EXISTS
