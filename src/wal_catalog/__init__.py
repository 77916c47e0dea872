"""wal-catalog: read-side catalog for database backups and WAL archives in object storage."""

__version__ = "0.1.0"
