"""Configuration management with XDG paths, atomic writes, and credential fallback.

This module handles all persistent configuration for tumblrkit:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.tumblrkit/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_cache_dir`.
* **Credential config** -- a single JSON file holding the blog hostname and
  login credentials, deserialised into :class:`~tumblrkit.models.Credentials`.
* **Precedence resolution** -- :func:`resolve_credentials` merges explicit
  constructor arguments, ``TUMBLR_*`` environment variables, and the config
  file, in that order.

All file writes use an atomic temp-file-then-rename strategy
(:func:`atomic_write`); the response cache relies on the same helper.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from tumblrkit.exceptions import ConfigurationError
from tumblrkit.models import Credentials

_APP_NAME = "tumblrkit"
_CONFIG_FILENAME = "config.json"

ENV_HOSTNAME = "TUMBLR_HOSTNAME"
ENV_EMAIL = "TUMBLR_EMAIL"
ENV_PASSWORD = "TUMBLR_PASSWORD"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/tumblrkit/`` (default ``~/.config/tumblrkit/``).
    On macOS/Windows: ``~/.tumblrkit/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the default response cache directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/tumblrkit/`` (default ``~/.cache/tumblrkit/``).
    On macOS/Windows: ``~/.tumblrkit/cache/``.

    Cached responses can be deleted at any time.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary."""
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created next to *path* (``.<name>.<random>.tmp``)
    so that ``os.replace`` is an atomic rename on POSIX systems. Readers see
    either the previous file or the complete new one. On any failure the
    temp file is removed and the error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Credential config file ---


def config_path() -> Path:
    """Path to the credential config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_config() -> Credentials:
    """Load credentials from the config file.

    Returns:
        The stored :class:`~tumblrkit.models.Credentials`, or an empty
        instance when the file does not exist.

    Raises:
        ConfigurationError: If the file exists but is not valid JSON or
            does not match the expected shape.
    """
    path = config_path()
    if not path.is_file():
        return Credentials()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Credentials.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid config at {path}: {exc}") from exc


def save_config(credentials: Credentials) -> None:
    """Persist credentials atomically to the config file."""
    data = credentials.model_dump(mode="json", exclude_none=True)
    atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


# --- Precedence resolution ---


def _from_environment() -> dict[str, str]:
    values = {
        "hostname": os.environ.get(ENV_HOSTNAME),
        "email": os.environ.get(ENV_EMAIL),
        "password": os.environ.get(ENV_PASSWORD),
    }
    return {k: v for k, v in values.items() if v}


def resolve_credentials(
    hostname: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> Credentials:
    """Resolve credentials with full precedence chain.

    Precedence (high to low):
        1. Explicit arguments
        2. Environment variables (``TUMBLR_HOSTNAME``, ``TUMBLR_EMAIL``,
           ``TUMBLR_PASSWORD``)
        3. Config file (``~/.config/tumblrkit/config.json``)

    The config file is only consulted when at least one explicit value is
    missing. A missing hostname alone is not an error here; the composer
    reports it when a request is built.

    Raises:
        ConfigurationError: If no hostname, email, or password could be
            resolved from any source.
    """
    explicit = {
        k: v
        for k, v in {"hostname": hostname, "email": email, "password": password}.items()
        if v
    }
    if len(explicit) == 3:
        return Credentials(**explicit)

    stored = load_config()
    merged = stored.model_dump()
    merged.update({k: v for k, v in _from_environment().items() if k not in explicit})
    merged.update(explicit)
    credentials = Credentials.model_validate(merged)

    if credentials.is_empty():
        raise ConfigurationError(
            "No Tumblr hostname or credentials were given and none were found in "
            f"{ENV_HOSTNAME}/{ENV_EMAIL}/{ENV_PASSWORD} or {config_path()}"
        )
    return credentials
