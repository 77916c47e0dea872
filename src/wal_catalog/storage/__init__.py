"""Object store backend registry."""

from __future__ import annotations

from wal_catalog.core.exceptions import StorageError
from wal_catalog.core.models import StorageConfig, StorageType
from wal_catalog.storage.base import ObjectStore


def get_store(config: StorageConfig) -> ObjectStore:
    """Instantiate the object store backend described by *config*.

    Raises:
        StorageError: If the storage type is not supported.
    """
    if config.type == StorageType.LOCAL:
        from wal_catalog.storage.local import LocalObjectStore

        return LocalObjectStore(base_path=config.local_path)

    if config.type == StorageType.S3:
        from wal_catalog.storage.s3 import S3ObjectStore

        return S3ObjectStore(
            region=config.region,
            endpoint_url=config.endpoint_url,
            max_attempts=config.max_attempts,
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )

    raise StorageError(f"Unsupported storage type: {config.type}")


__all__ = ["ObjectStore", "get_store"]
