"""Local filesystem object store, one directory per bucket."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from wal_catalog.core.exceptions import ObjectNotFoundError, StorageError
from wal_catalog.core.models import ObjectInfo
from wal_catalog.logging import get_logger
from wal_catalog.storage.base import ObjectStore

log = get_logger(__name__)


class LocalObjectStore(ObjectStore):
    """Serve objects from a directory tree laid out as ``<base>/<bucket>/<key>``.

    Useful for working against a local mirror of a bucket (e.g. one synced with
    ``aws s3 sync``) and for tests.
    """

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path.expanduser().resolve()

    def _bucket_dir(self, bucket: str) -> Path:
        path = self.base_path / bucket
        if not path.is_dir():
            raise StorageError(f"Bucket directory not found: {path}")
        return path

    def _full_path(self, bucket: str, key: str) -> Path:
        return self._bucket_dir(bucket) / key

    @staticmethod
    def _info(key: str, path: Path) -> ObjectInfo:
        stat = path.stat()
        return ObjectInfo(
            key=key,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
            size=stat.st_size,
        )

    def list_objects(
            self,
            bucket: str,
            prefix: str,
            delimiter: str | None = None,
    ) -> Iterator[ObjectInfo]:
        """Walk the bucket directory and yield files whose key matches *prefix*."""
        root = self._bucket_dir(bucket)
        try:
            for file_path in sorted(root.rglob("*")):
                if not file_path.is_file():
                    continue
                key = file_path.relative_to(root).as_posix()
                if not key.startswith(prefix):
                    continue
                if delimiter and delimiter in key[len(prefix):]:
                    continue
                yield self._info(key, file_path)
        except OSError as exc:
            raise StorageError(f"Failed to list {root}: {exc}", key=prefix) from exc

    def head_object(self, bucket: str, key: str) -> ObjectInfo:
        path = self._full_path(bucket, key)
        if not path.is_file():
            raise ObjectNotFoundError(f"Object not found: {key}", key=key)
        try:
            return self._info(key, path)
        except OSError as exc:
            raise StorageError(f"Failed to stat {path}: {exc}", key=key) from exc

    def get_object(self, bucket: str, key: str) -> BinaryIO:
        """Open the file backing *key* for binary reading."""
        path = self._full_path(bucket, key)
        try:
            return open(path, "rb")  # noqa: SIM115
        except (FileNotFoundError, IsADirectoryError) as exc:
            raise ObjectNotFoundError(f"Object not found: {key}", key=key) from exc
        except OSError as exc:
            raise StorageError(f"Failed to open {path}: {exc}", key=key) from exc

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={self.base_path}>"
