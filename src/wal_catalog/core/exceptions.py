"""Custom exceptions for wal-catalog."""


class WalCatalogError(Exception):
    """Base exception for all wal-catalog errors."""


class ConfigError(WalCatalogError):
    """Raised when configuration is invalid or missing."""


class StorageError(WalCatalogError):
    """Raised when an object store operation fails."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist in the store."""


class TransientStorageError(StorageError):
    """Raised when the store is unreachable, throttling, or timing out.

    The client has already exhausted its own retries by the time this is raised.
    """


class MalformedKeyError(WalCatalogError):
    """Raised when an object key does not follow the backup naming layout."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Malformed backup key {key!r}: {reason}")
        self.key = key
        self.reason = reason


class NoBackupsFoundError(WalCatalogError):
    """Raised when a latest-backup query runs against an empty backup set."""
