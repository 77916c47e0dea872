"""AWS S3 (and S3-compatible) object store backend."""

from __future__ import annotations

import io
from collections.abc import Iterator
from typing import Any, BinaryIO

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    HTTPClientError,
    IncompleteReadError,
    ResponseStreamingError,
)
from botocore.exceptions import (
    ConnectionError as BotoConnectionError,
)

from wal_catalog.core.exceptions import (
    ObjectNotFoundError,
    StorageError,
    TransientStorageError,
)
from wal_catalog.core.models import ObjectInfo
from wal_catalog.logging import get_logger
from wal_catalog.storage.base import ObjectStore

log = get_logger(__name__)

# HEAD responses carry no body, so botocore reports the bare status code.
_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})

_TRANSIENT_CODES = frozenset({
    "500",
    "502",
    "503",
    "504",
    "InternalError",
    "RequestTimeout",
    "RequestTimeoutException",
    "ServiceUnavailable",
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
})


def classify_error(exc: Exception, key: str | None = None) -> StorageError:
    """Translate a botocore failure into the wal-catalog error taxonomy."""
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = str(error.get("Code", ""))
        status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)
        if code in _NOT_FOUND_CODES:
            return ObjectNotFoundError(f"Object not found: {key}", key=key)
        if code in _TRANSIENT_CODES or status >= 500:
            return TransientStorageError(f"S3 temporarily unavailable ({code}): {exc}", key=key)
        return StorageError(f"S3 request failed ({code}): {exc}", key=key)

    if isinstance(exc, (ResponseStreamingError, IncompleteReadError)):
        return TransientStorageError(f"S3 response body interrupted: {exc}", key=key)

    if isinstance(exc, (BotoConnectionError, HTTPClientError)):
        return TransientStorageError(f"Could not reach S3: {exc}", key=key)

    return StorageError(f"S3 client error: {exc}", key=key)


class _S3Body(io.RawIOBase):
    """Readable view of a GET response body that raises typed storage errors."""

    def __init__(self, body: Any, key: str) -> None:
        self._body = body
        self._key = key

    def readable(self) -> bool:
        return True

    def read(self, size: int | None = -1) -> bytes:
        try:
            return self._body.read(None if size is None or size < 0 else size)
        except (ClientError, BotoCoreError) as exc:
            raise classify_error(exc, key=self._key) from exc

    def readinto(self, buffer: Any) -> int:
        data = self.read(len(buffer))
        buffer[:len(data)] = data
        return len(data)

    def close(self) -> None:
        if not self.closed:
            self._body.close()
        super().close()


class S3ObjectStore(ObjectStore):
    """Read objects from AWS S3 or any S3-compatible endpoint."""

    def __init__(
            self,
            region: str = "us-east-1",
            endpoint_url: str | None = None,
            max_attempts: int = 3,
            connect_timeout: float = 10.0,
            read_timeout: float = 60.0,
            client: Any | None = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url

        if client is not None:
            self._client = client
            return

        boto_config = BotoConfig(
            region_name=region,
            retries={"max_attempts": max_attempts, "mode": "adaptive"},
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
        )

        client_kwargs: dict[str, Any] = {"config": boto_config}
        if endpoint_url:
            client_kwargs["endpoint_url"] = endpoint_url

        self._session = boto3.Session()
        self._client = self._session.client("s3", **client_kwargs)

    @property
    def client(self) -> Any:
        """The underlying boto3 S3 client."""
        return self._client

    def list_objects(
            self,
            bucket: str,
            prefix: str,
            delimiter: str | None = None,
    ) -> Iterator[ObjectInfo]:
        """Yield objects under *prefix*, following continuation tokens to the end."""
        params: dict[str, str] = {"Bucket": bucket, "Prefix": prefix}
        if delimiter:
            params["Delimiter"] = delimiter

        log.debug("s3_list_start", bucket=bucket, prefix=prefix, delimiter=delimiter)
        pages = 0
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                pages += 1
                for obj in page.get("Contents", []):
                    yield ObjectInfo(
                        key=obj["Key"],
                        last_modified=obj["LastModified"],
                        size=obj.get("Size", 0),
                    )
        except (ClientError, BotoCoreError) as exc:
            raise classify_error(exc, key=prefix) from exc

        log.debug("s3_list_complete", bucket=bucket, prefix=prefix, pages=pages)

    def head_object(self, bucket: str, key: str) -> ObjectInfo:
        """Probe object metadata with a HEAD request."""
        try:
            response = self._client.head_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise classify_error(exc, key=key) from exc

        return ObjectInfo(
            key=key,
            last_modified=response["LastModified"],
            size=response.get("ContentLength", 0),
        )

    def get_object(self, bucket: str, key: str) -> BinaryIO:
        """Issue a GET and hand back the streaming body."""
        log.debug("s3_get_start", bucket=bucket, key=key)
        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise classify_error(exc, key=key) from exc
        return _S3Body(response["Body"], key)

    def __repr__(self) -> str:
        endpoint = self.endpoint_url or f"s3.{self.region}"
        return f"<{self.__class__.__name__} endpoint={endpoint}>"
