"""Backup catalog: naming, existence probes, listings and readers."""

from __future__ import annotations

from wal_catalog.catalog.catalog import BackupCatalog
from wal_catalog.catalog.entities import Archive, Backup, ExistenceChecker
from wal_catalog.catalog.naming import strip_name
from wal_catalog.catalog.prefix import Prefix
from wal_catalog.catalog.readers import ObjectReaderMaker, ReaderMaker

__all__ = [
    "Archive",
    "Backup",
    "BackupCatalog",
    "ExistenceChecker",
    "ObjectReaderMaker",
    "Prefix",
    "ReaderMaker",
    "strip_name",
]
