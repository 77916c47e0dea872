"""Query handles for backups and WAL archives stored under a Prefix."""

from __future__ import annotations

import abc
from pathlib import Path
from typing import BinaryIO

from wal_catalog.catalog.naming import sentinel_key, tar_partitions_prefix
from wal_catalog.catalog.prefix import Prefix
from wal_catalog.catalog.readers import ObjectReaderMaker
from wal_catalog.core.exceptions import MalformedKeyError, ObjectNotFoundError, StorageError
from wal_catalog.core.models import ExistenceResult, ExistenceStatus
from wal_catalog.logging import get_logger

log = get_logger(__name__)


class ExistenceChecker(abc.ABC):
    """Something that can be looked up in the store with a HEAD request."""

    prefix: Prefix

    @property
    @abc.abstractmethod
    def probe_key(self) -> str:
        """Key whose presence decides existence."""

    def check_existence(self) -> ExistenceResult:
        """Probe the store and report exists, absent, or indeterminate.

        Only a not-found answer counts as absent. Any other failure (denied,
        throttled, unreachable) is reported as indeterminate with the error
        attached.
        """
        key = self.probe_key
        try:
            self.prefix.store.head_object(self.prefix.bucket, key)
        except ObjectNotFoundError:
            log.debug("existence_absent", key=key)
            return ExistenceResult(key=key, status=ExistenceStatus.ABSENT)
        except StorageError as exc:
            log.warning("existence_indeterminate", key=key, error=str(exc))
            return ExistenceResult(key=key, status=ExistenceStatus.INDETERMINATE, error=exc)

        log.debug("existence_confirmed", key=key)
        return ExistenceResult(key=key, status=ExistenceStatus.EXISTS)

    def exists(self) -> bool:
        """Return whether the object exists.

        Raises:
            StorageError: If the store could not give a definite answer.
        """
        return self.check_existence().exists


class Backup(ExistenceChecker):
    """One full backup: a sentinel object plus its tar partitions."""

    def __init__(
            self,
            prefix: Prefix,
            path: str,
            name: str,
            js: str | None = None,
    ) -> None:
        if not name or "/" in name:
            raise ValueError(f"Invalid backup name: {name!r}")
        self.prefix = prefix
        self._path = path
        self._name = name
        self._js = js or sentinel_key(path, name)

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        return self._name

    @property
    def js(self) -> str:
        """Key of the sentinel object marking this backup complete."""
        return self._js

    @property
    def probe_key(self) -> str:
        return self._js

    @property
    def partitions_prefix(self) -> str:
        return tar_partitions_prefix(self._path, self._name)

    def get_keys(self) -> list[str]:
        """Return the key of every tar partition in this backup, across all pages."""
        prefix = self.partitions_prefix
        keys = [
            obj.key
            for obj in self.prefix.store.list_objects(self.prefix.bucket, prefix)
            if obj.key.startswith(prefix)
        ]
        log.debug("backup_keys_listed", backup=self._name, count=len(keys))
        return keys

    def reader_makers(self) -> list[ObjectReaderMaker]:
        """One reader maker per tar partition."""
        return [ObjectReaderMaker(self.prefix, key) for key in self.get_keys()]

    def sentinel_reader(self) -> ObjectReaderMaker:
        return ObjectReaderMaker(self.prefix, self._js)

    def fetch(self, dest_dir: Path) -> list[Path]:
        """Download every partition into *dest_dir*, keeping the layout below the backup.

        Partitions are written as stored; nothing is decompressed or unpacked.
        """
        base = f"{self._path}{self._name}/"
        root = dest_dir.resolve()
        targets: list[tuple[ObjectReaderMaker, Path]] = []
        for maker in self.reader_makers():
            relative = maker.path[len(base):] if maker.path.startswith(base) else maker.path
            if not (root / relative).resolve().is_relative_to(root):
                raise MalformedKeyError(maker.path, f"resolves outside {dest_dir}")
            targets.append((maker, dest_dir / relative))

        written = [maker.download(target) for maker, target in targets]
        log.info("backup_fetched", backup=self._name, files=len(written), destination=str(dest_dir))
        return written

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Backup):
            return NotImplemented
        return (self.prefix, self._path, self._name, self._js) == (
            other.prefix, other._path, other._name, other._js,
        )

    def __hash__(self) -> int:
        return hash((self.prefix, self._path, self._name, self._js))

    def __repr__(self) -> str:
        return f"<Backup name={self._name} prefix={self.prefix}>"


class Archive(ExistenceChecker):
    """A single WAL segment (or other single-object archive)."""

    def __init__(self, prefix: Prefix, key: str) -> None:
        if not key:
            raise ValueError("Archive key must not be empty")
        self.prefix = prefix
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    @property
    def probe_key(self) -> str:
        return self._key

    def reader_maker(self) -> ObjectReaderMaker:
        return ObjectReaderMaker(self.prefix, self._key)

    def get_archive(self) -> BinaryIO:
        """Open a fresh stream over the archive. The caller closes it.

        Raises:
            ObjectNotFoundError: If the archive is not in the store.
        """
        return self.reader_maker().reader()

    def fetch(self, dest: Path) -> Path:
        """Download the archive, as stored, to *dest*."""
        return self.reader_maker().download(dest)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Archive):
            return NotImplemented
        return (self.prefix, self._key) == (other.prefix, other._key)

    def __hash__(self) -> int:
        return hash((self.prefix, self._key))

    def __repr__(self) -> str:
        return f"<Archive key={self._key} prefix={self.prefix}>"
