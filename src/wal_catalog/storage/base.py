"""Abstract base class for object store backends."""

from __future__ import annotations

import abc
from collections.abc import Iterator
from typing import BinaryIO

from wal_catalog.core.models import ObjectInfo


class ObjectStore(abc.ABC):
    """Read-side interface to a bucket-oriented object store.

    Implementations own credentials, retries and error classification. Every
    failure surfaces as a :class:`~wal_catalog.core.exceptions.StorageError`
    subclass: ``ObjectNotFoundError`` when the object is absent,
    ``TransientStorageError`` when the store could not be reached in time.
    """

    @abc.abstractmethod
    def list_objects(
            self,
            bucket: str,
            prefix: str,
            delimiter: str | None = None,
    ) -> Iterator[ObjectInfo]:
        """Yield every object whose key starts with *prefix*.

        Args:
            bucket: Bucket to list.
            prefix: Key prefix to filter by.
            delimiter: When set, keys containing the delimiter after the
                prefix are grouped away and not yielded.

        Yields:
            One ObjectInfo per object, across all result pages.
        """

    @abc.abstractmethod
    def head_object(self, bucket: str, key: str) -> ObjectInfo:
        """Fetch object metadata without transferring the body.

        Raises:
            ObjectNotFoundError: If no object exists under *key*.
        """

    @abc.abstractmethod
    def get_object(self, bucket: str, key: str) -> BinaryIO:
        """Open a fresh stream over the full body of *key*.

        The caller owns the returned stream and must close it.

        Raises:
            ObjectNotFoundError: If no object exists under *key*.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
