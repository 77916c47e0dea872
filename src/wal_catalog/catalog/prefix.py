"""Storage location shared by every backup and archive handle."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from wal_catalog.core.exceptions import ConfigError
from wal_catalog.core.models import StorageConfig
from wal_catalog.storage.base import ObjectStore


class Prefix(BaseModel):
    """A bucket, an optional server namespace, and the store to reach them through."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    store: ObjectStore
    bucket: str
    server: str = ""

    @field_validator("bucket")
    @classmethod
    def bucket_not_empty(cls, v: str) -> str:
        if not v:
            msg = "bucket must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("server")
    @classmethod
    def strip_server(cls, v: str) -> str:
        return v.strip("/")

    @classmethod
    def from_config(cls, config: StorageConfig, store: ObjectStore) -> Prefix:
        """Build a Prefix for the bucket and server named in *config*.

        Raises:
            ConfigError: If no bucket is configured.
        """
        if not config.bucket:
            raise ConfigError("Bucket name is required (--bucket or WAL_CATALOG_BUCKET)")
        return cls(store=store, bucket=config.bucket, server=config.server)

    def __str__(self) -> str:
        return f"{self.bucket}/{self.server}" if self.server else self.bucket
