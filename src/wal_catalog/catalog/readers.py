"""On-demand byte streams over stored objects."""

from __future__ import annotations

import abc
import contextlib
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

from wal_catalog.catalog.naming import detect_format
from wal_catalog.catalog.prefix import Prefix
from wal_catalog.core.exceptions import StorageError
from wal_catalog.logging import get_logger

log = get_logger(__name__)

# Buffer size for streaming downloads (256 KB)
_CHUNK_SIZE = 256 * 1024


class ReaderMaker(abc.ABC):
    """Produces a new stream over one object every time it is asked.

    Nothing is held open between calls, so a maker can be kept around and
    handed to other threads; the streams themselves are single-owner.
    """

    @abc.abstractmethod
    def reader(self) -> BinaryIO:
        """Open a fresh stream over the whole object. The caller closes it."""

    @property
    @abc.abstractmethod
    def path(self) -> str:
        """Key of the object this maker reads."""

    @property
    def format(self) -> str:
        return detect_format(self.path)

    @contextlib.contextmanager
    def open(self) -> Iterator[BinaryIO]:
        """Yield a stream from :meth:`reader` and close it on every exit path."""
        stream = self.reader()
        try:
            yield stream
        finally:
            stream.close()

    def download(self, dest: Path) -> Path:
        """Stream the object into *dest*.

        Bytes go to a ``.part`` sibling that replaces *dest* only once the whole
        object has been read, so a failed fetch leaves an existing *dest* untouched.
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        partial = dest.with_name(dest.name + ".part")
        written = 0
        try:
            with self.open() as stream, open(partial, "wb") as fout:
                for chunk in iter(lambda: stream.read(_CHUNK_SIZE), b""):
                    fout.write(chunk)
                    written += len(chunk)
            partial.replace(dest)
        except StorageError:
            partial.unlink(missing_ok=True)
            raise
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise StorageError(f"Failed to download {self.path}: {exc}", key=self.path) from exc

        log.info("object_downloaded", key=self.path, destination=str(dest), size=written)
        return dest

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} path={self.path}>"


class ObjectReaderMaker(ReaderMaker):
    """Reads one key from the store behind a :class:`Prefix`."""

    def __init__(self, prefix: Prefix, key: str, file_format: str | None = None) -> None:
        self.prefix = prefix
        self._key = key
        self._format = file_format

    @property
    def path(self) -> str:
        return self._key

    @property
    def format(self) -> str:
        if self._format is not None:
            return self._format
        return super().format

    def reader(self) -> BinaryIO:
        log.debug("object_open", bucket=self.prefix.bucket, key=self._key)
        return self.prefix.store.get_object(self.prefix.bucket, self._key)
