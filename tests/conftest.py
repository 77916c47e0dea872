"""Shared pytest fixtures."""

from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from wal_catalog.catalog import Prefix
from wal_catalog.core.models import ObjectInfo
from wal_catalog.storage.base import ObjectStore
from wal_catalog.storage.local import LocalObjectStore
from wal_catalog.storage.s3 import S3ObjectStore

BUCKET = "test-bucket"
SERVER = "srv"


def ts(year: int, month: int, day: int) -> datetime:
    """Timezone-aware timestamp at midnight UTC."""
    return datetime(year, month, day, tzinfo=UTC)


@pytest.fixture()
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Fake credentials so botocore never looks for real ones."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture()
def s3_client(aws_credentials: None) -> Iterator:
    """A moto-backed S3 client with an empty test bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


@pytest.fixture()
def s3_store(s3_client) -> S3ObjectStore:
    return S3ObjectStore(client=s3_client)


@pytest.fixture()
def s3_prefix(s3_store: S3ObjectStore) -> Prefix:
    return Prefix(store=s3_store, bucket=BUCKET, server=SERVER)


@pytest.fixture()
def mock_store() -> MagicMock:
    """A store double whose responses each test scripts."""
    return MagicMock(spec=ObjectStore)


@pytest.fixture()
def mock_prefix(mock_store: MagicMock) -> Prefix:
    return Prefix(store=mock_store, bucket=BUCKET, server=SERVER)


def listing(*entries: tuple[str, datetime]) -> object:
    """Build a list_objects side effect that yields *entries* on every call."""
    objects = [ObjectInfo(key=key, last_modified=when) for key, when in entries]

    def _list(bucket: str, prefix: str, delimiter: str | None = None) -> Iterator[ObjectInfo]:
        return iter(objects)

    return _list


@pytest.fixture()
def local_root(tmp_path: Path) -> Path:
    """Directory holding bucket mirrors, with an empty test bucket."""
    root = tmp_path / "objects"
    (root / BUCKET).mkdir(parents=True)
    return root


@pytest.fixture()
def local_store(local_root: Path) -> LocalObjectStore:
    return LocalObjectStore(local_root)


def put_local(root: Path, key: str, body: bytes = b"data", mtime: datetime | None = None) -> Path:
    """Write an object into the local test bucket, optionally pinning its mtime."""
    path = root / BUCKET / key
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(body)
    if mtime is not None:
        stamp = mtime.timestamp()
        os.utime(path, (stamp, stamp))
    return path
