"""Mapping between logical backup names and object keys.

A backup called ``base_000000010000000000000002`` living under server
``pg-main`` is laid out as::

    pg-main/basebackups_005/base_000000010000000000000002_backup_stop_sentinel.json
    pg-main/basebackups_005/base_000000010000000000000002/tar_partitions/part_1.tar.lz4
    ...

:func:`strip_name` parses the first form, the remaining helpers build keys
from a name.
"""

from __future__ import annotations

from wal_catalog.core.exceptions import MalformedKeyError

BACKUP_MARKER = "_backup"
SENTINEL_SUFFIX = "_backup_stop_sentinel.json"
TAR_PARTITIONS = "tar_partitions"

# Segment index of the backup entry in "<server>/<base>/<entry>"
_NAME_SEGMENT = 2

# Known file extensions and the format name reported for them
FORMATS: dict[str, str] = {
    ".lz4": "lz4",
    ".lzma": "lzma",
    ".zst": "zstd",
    ".br": "brotli",
    ".gz": "gzip",
    ".tar": "tar",
    ".json": "json",
}


def strip_name(key: str, segment: int = _NAME_SEGMENT) -> str:
    """Return the backup name encoded in *key*.

    Args:
        key: A key such as ``srv/basebackups_005/base_0001_backup_stop_sentinel.json``.
        segment: Index of the slash-delimited segment holding the entry.

    Raises:
        MalformedKeyError: If the segment is missing, lacks the ``_backup``
            marker, or the name before the marker is empty.
    """
    parts = key.split("/")
    if len(parts) <= segment:
        raise MalformedKeyError(key, f"expected at least {segment + 1} path segments")

    entry = parts[segment]
    if BACKUP_MARKER not in entry:
        raise MalformedKeyError(key, f"segment {entry!r} lacks the {BACKUP_MARKER!r} marker")

    name = entry.split(BACKUP_MARKER, 1)[0]
    if not name:
        raise MalformedKeyError(key, "empty backup name")
    return name


def backup_root(server: str, base_prefix: str) -> str:
    """Return the key prefix holding backup entries, with trailing slash."""
    parts = [p.strip("/") for p in (server, base_prefix) if p.strip("/")]
    return "/".join(parts) + "/"


def sentinel_key(path: str, name: str) -> str:
    return f"{path}{name}{SENTINEL_SUFFIX}"


def tar_partitions_prefix(path: str, name: str) -> str:
    return f"{path}{name}/{TAR_PARTITIONS}"


def detect_format(key: str) -> str:
    """Guess the file format from the key's extension; empty if unknown."""
    basename = key.rsplit("/", 1)[-1].lower()
    for ext, fmt in FORMATS.items():
        if basename.endswith(ext):
            return fmt
    return ""
