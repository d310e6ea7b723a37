"""File-backed response cache with a time-to-live.

Each cached response lives in its own JSON file under the cache directory,
named from a SHA-256 hash of the request URL and body. Writes go to a
temporary file next to the entry and are renamed into place with
``os.replace`` (see :func:`~tumblrkit.config.atomic_write`), so a reader
running in another process sees either the previous entry or the new one,
never a partial file. No other locking is used.

Freshness is judged from the ``written_at`` timestamp stored inside the
entry. Stale entries are left on disk until the next successful write for
the same request replaces them, or until :meth:`ResponseCache.purge_expired`
is called.

See Also:
    :class:`~tumblrkit.models.CacheSettings` -- the model that carries
    ``enabled``, ``ttl_seconds`` and ``directory`` on a client view.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Optional

from tumblrkit.config import atomic_write
from tumblrkit.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_FILE_PREFIX = "tumblrkit_"
_FILE_SUFFIX = ".cache"


def check_cache_dir(directory: str | Path) -> Path:
    """Return *directory* as a Path if it exists and is writable.

    Raises:
        ConfigurationError: If the directory is missing or not writable.
    """
    path = Path(directory)
    if not path.is_dir() or not os.access(path, os.W_OK | os.X_OK):
        raise ConfigurationError(f"Cache directory doesn't exist or isn't writable: {path}")
    return path


class ResponseCache:
    """Disk-backed cache for decoded API responses.

    Args:
        directory: Existing, writable directory for cache files.
        ttl_seconds: Maximum age of a usable entry.
        clock: Returns the current time in seconds; defaults to
            :func:`time.time`. Tests inject a fake clock.

    Raises:
        ConfigurationError: If *directory* does not exist or is not writable.

    Example::

        cache = ResponseCache("/tmp/tumblr-cache", ttl_seconds=3600)
        key = cache.make_key("http://example.tumblr.com/api/v2/posts/read", "")
        cache.put(key, {"posts": []}, url="http://example.tumblr.com/api/v2/posts/read")
        cache.get(key)
    """

    def __init__(
        self,
        directory: str | Path,
        ttl_seconds: int = 3600,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._directory = check_cache_dir(directory)
        self._ttl = ttl_seconds
        self._clock = clock or time.time

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    @staticmethod
    def make_key(url: str, body: str = "") -> str:
        """Derive the cache key for a request from its URL and body."""
        return hashlib.sha256(f"{url}{body}".encode("utf-8")).hexdigest()

    def path_for(self, key: str) -> Path:
        """Return the entry file path for *key*."""
        return self._directory / f"{_FILE_PREFIX}{key}{_FILE_SUFFIX}"

    def get(self, key: str) -> Optional[dict[str, Any]]:
        """Look up a fresh entry.

        Returns:
            The stored entry (``key``, ``url``, ``status_code``,
            ``written_at``, ``payload``) when it exists and is younger than
            the TTL, otherwise ``None``. Unreadable entries count as misses.
        """
        entry = self._read(self.path_for(key))
        if entry is None:
            logger.debug("Cache miss: %s", key)
            return None
        age = self._clock() - entry["written_at"]
        if age >= self._ttl:
            logger.debug("Cache stale: %s (age %.0fs, ttl %ds)", key, age, self._ttl)
            return None
        logger.debug("Cache hit: %s", key)
        return entry

    def put(
        self,
        key: str,
        payload: Any,
        *,
        url: str = "",
        status_code: int = 200,
    ) -> Path:
        """Store *payload* under *key*, replacing any previous entry atomically.

        The payload must be JSON-serialisable.

        Returns:
            The path of the written entry.
        """
        entry = {
            "key": key,
            "url": url,
            "status_code": status_code,
            "written_at": self._clock(),
            "payload": payload,
        }
        path = self.path_for(key)
        atomic_write(path, json.dumps(entry, ensure_ascii=False))
        logger.debug("Cache write: %s -> %s", key, path.name)
        return path

    def invalidate(self, key: str) -> bool:
        """Remove the entry for *key*. Returns True if a file was removed."""
        try:
            self.path_for(key).unlink()
        except FileNotFoundError:
            return False
        return True

    def clear(self) -> int:
        """Remove every cache entry. Returns the number of files removed."""
        removed = 0
        for path in self._entries():
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        return removed

    def purge_expired(self) -> int:
        """Remove stale and unreadable entries. Returns the number removed."""
        removed = 0
        now = self._clock()
        for path in self._entries():
            entry = self._read(path)
            if entry is not None and now - entry["written_at"] < self._ttl:
                continue
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        return removed

    def stats(self) -> dict[str, Any]:
        """Return ``enabled``, ``size``, ``directory`` and ``ttl_seconds``."""
        return {
            "enabled": True,
            "size": sum(1 for _ in self._entries()),
            "directory": str(self._directory),
            "ttl_seconds": self._ttl,
        }

    def _entries(self):
        return self._directory.glob(f"{_FILE_PREFIX}*{_FILE_SUFFIX}")

    def _read(self, path: Path) -> Optional[dict[str, Any]]:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.debug("Cache read failed for %s: %s", path.name, exc)
            return None
        try:
            entry = json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Ignoring corrupt cache entry %s", path.name)
            return None
        if not _is_valid_entry(entry):
            logger.debug("Ignoring malformed cache entry %s", path.name)
            return None
        return entry


def _is_valid_entry(entry: Any) -> bool:
    if not isinstance(entry, dict) or "payload" not in entry:
        return False
    written_at = entry.get("written_at")
    status_code = entry.get("status_code", 200)
    return (
        isinstance(written_at, (int, float))
        and not isinstance(written_at, bool)
        and isinstance(status_code, int)
        and not isinstance(status_code, bool)
    )
