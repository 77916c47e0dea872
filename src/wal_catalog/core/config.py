"""Configuration loading and management for wal-catalog.

Configuration sources (highest to lowest priority):
  1. CLI arguments (passed directly)
  2. Environment variables (WAL_CATALOG_* prefix, then WALE_S3_PREFIX)
  3. Config file (~/.config/wal-catalog/config.toml)
  4. Defaults
"""

from __future__ import annotations

import contextlib
import os
import sys
import tomllib
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import tomli_w
from pydantic import ValidationError

from wal_catalog.core.exceptions import ConfigError
from wal_catalog.core.models import (
    AppConfig,
    LogFormat,
    LoggingConfig,
    StorageConfig,
    StorageType,
)

# ──────────────────── Paths ──────────────────────────────

_APP_NAME = "wal-catalog"


def _get_config_dir() -> Path:
    """Return the platform-appropriate config directory."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    elif sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / _APP_NAME


CONFIG_DIR = _get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.toml"

# ──────────────────── Environment Loading ────────────────

_ENV_PREFIX = "WAL_CATALOG_"

# Location variable understood by WAL-E and WAL-G, e.g. s3://bucket/pg-main
_WALE_PREFIX_VAR = "WALE_S3_PREFIX"


def _env(key: str, default: str | None = None) -> str | None:
    """Read an environment variable with the WAL_CATALOG_ prefix."""
    return os.environ.get(f"{_ENV_PREFIX}{key}", default)


def parse_s3_prefix(url: str) -> dict[str, str]:
    """Split an ``s3://bucket/server`` URL into bucket and server.

    Raises:
        ConfigError: If the URL is not an s3:// URL with a bucket.
    """
    parsed = urlparse(url)
    if parsed.scheme != "s3" or not parsed.netloc:
        raise ConfigError(f"Invalid S3 prefix {url!r}, expected s3://bucket/server")
    return {"bucket": parsed.netloc, "server": parsed.path.strip("/")}


def _load_storage_from_env() -> dict[str, Any]:
    """Load storage config overrides from environment."""
    overrides: dict[str, Any] = {}
    if wale := os.environ.get(_WALE_PREFIX_VAR):
        overrides.update(parse_s3_prefix(wale))
        overrides["type"] = StorageType.S3

    try:
        if st := _env("STORAGE_TYPE"):
            overrides["type"] = StorageType(st.lower())
        if lp := _env("LOCAL_PATH"):
            overrides["local_path"] = Path(lp)
        if b := _env("BUCKET"):
            overrides["bucket"] = b
        if s := _env("SERVER"):
            overrides["server"] = s
        if bp := _env("BASE_PREFIX"):
            overrides["base_prefix"] = bp
        if wp := _env("WAL_PREFIX"):
            overrides["wal_prefix"] = wp
        if r := _env("REGION"):
            overrides["region"] = r
        if e := _env("ENDPOINT_URL"):
            overrides["endpoint_url"] = e
        if ma := _env("MAX_ATTEMPTS"):
            overrides["max_attempts"] = int(ma)
        if ct := _env("CONNECT_TIMEOUT"):
            overrides["connect_timeout"] = float(ct)
        if rt := _env("READ_TIMEOUT"):
            overrides["read_timeout"] = float(rt)
    except ValueError as exc:
        raise ConfigError(f"Invalid storage config in environment: {exc}") from exc
    return overrides


def _load_logging_from_env() -> dict[str, Any]:
    """Load logging config overrides from environment."""
    overrides: dict[str, Any] = {}
    if ll := _env("LOG_LEVEL"):
        overrides["level"] = ll.upper()
    if lf := _env("LOG_FILE"):
        overrides["log_file"] = Path(lf)
    if fmt := _env("LOG_FORMAT"):
        try:
            overrides["format"] = LogFormat(fmt.lower())
        except ValueError as exc:
            raise ConfigError(f"Invalid log format in environment: {fmt}") from exc
    return overrides


# ──────────────────── TOML File Loading ──────────────────


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load and return the raw TOML config dict. Returns empty dict if file missing."""
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {config_path}: {exc}") from exc


def save_config_file(config: AppConfig, path: Path | None = None) -> Path:
    """Save AppConfig to a TOML file readable only by its owner."""
    config_path = path or CONFIG_FILE
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(_config_to_toml_dict(config), f)

    # Restrict file permissions (Unix only)
    with contextlib.suppress(OSError):
        config_path.chmod(0o600)

    return config_path


def _config_to_toml_dict(config: AppConfig) -> dict[str, Any]:
    """Convert an AppConfig to a TOML-serialisable dict (TOML has no null)."""
    storage = config.storage.model_dump(mode="json", exclude_none=True)
    logging_ = config.logging.model_dump(mode="json", exclude_none=True)
    return {"storage": storage, "logging": logging_}


# ──────────────────── Main Loader ────────────────────────


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the full application config (file + env overrides).

    Raises:
        ConfigError: If the file or environment holds invalid values.
    """
    raw = load_config_file(config_path)

    storage_data = dict(raw.get("storage", {}))
    storage_data.update(_load_storage_from_env())

    log_data = dict(raw.get("logging", {}))
    log_data.update(_load_logging_from_env())

    try:
        return AppConfig(
            storage=StorageConfig(**storage_data),
            logging=LoggingConfig(**log_data),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
