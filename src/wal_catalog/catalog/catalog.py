"""Backup listing and latest-backup selection."""

from __future__ import annotations

from wal_catalog.catalog.entities import Backup
from wal_catalog.catalog.naming import backup_root, strip_name
from wal_catalog.catalog.prefix import Prefix
from wal_catalog.core.exceptions import NoBackupsFoundError
from wal_catalog.core.models import BackupTime
from wal_catalog.logging import get_logger

log = get_logger(__name__)

DEFAULT_BASE_PREFIX = "basebackups_005"


class BackupCatalog:
    """The set of backups stored under ``<server>/<base_prefix>/`` in a bucket."""

    def __init__(self, prefix: Prefix, base_prefix: str = DEFAULT_BASE_PREFIX) -> None:
        self.prefix = prefix
        self.path = backup_root(prefix.server, base_prefix)

    def _scan(self) -> list[BackupTime]:
        """List top-level backup entries and pair each name with its newest timestamp.

        The "/" delimiter keeps tar partitions out of the listing so only the
        entries directly under the backup root are parsed.
        """
        segment = self.path.count("/")
        newest: dict[str, BackupTime] = {}
        for obj in self.prefix.store.list_objects(self.prefix.bucket, self.path, delimiter="/"):
            name = strip_name(obj.key, segment=segment)
            seen = newest.get(name)
            if seen is None or obj.last_modified > seen.last_modified:
                newest[name] = BackupTime(name=name, last_modified=obj.last_modified)
        log.debug("backup_scan_complete", path=self.path, backups=len(newest))
        return list(newest.values())

    def list_backups(self) -> list[BackupTime]:
        """Return every backup, newest first."""
        return sorted(self._scan(), key=_recency, reverse=True)

    def get_latest(self) -> str:
        """Return the name of the most recently modified backup.

        Equal timestamps are broken by name so the answer is deterministic.

        Raises:
            NoBackupsFoundError: If there is no backup under the root.
            MalformedKeyError: If an entry does not follow the naming layout.
            StorageError: If the listing fails.
        """
        entries = self._scan()
        if not entries:
            raise NoBackupsFoundError(f"No backups found under {self.prefix.bucket}/{self.path}")

        latest = max(entries, key=_recency)
        log.info(
            "backup_latest_selected",
            name=latest.name,
            last_modified=latest.last_modified.isoformat(),
            candidates=len(entries),
        )
        return latest.name

    def get_backup(self, name: str) -> Backup:
        """Return a handle for the backup called *name*; existence is not checked."""
        return Backup(self.prefix, self.path, name)

    def get_latest_backup(self) -> Backup:
        return self.get_backup(self.get_latest())

    def get_keys(self, backup: Backup) -> list[str]:
        """Return the tar partition keys of *backup*."""
        return backup.get_keys()

    def __repr__(self) -> str:
        return f"<BackupCatalog bucket={self.prefix.bucket} path={self.path}>"


def _recency(entry: BackupTime) -> tuple:
    return (entry.last_modified, entry.name)
