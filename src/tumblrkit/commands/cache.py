"""Cache commands -- inspect and clean the response cache.

Provides the ``tumblrkit cache`` group operating on a cache directory
(the XDG cache directory unless ``--cache-dir`` is given).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from tumblrkit.output import format_response, success

cache_app = typer.Typer(no_args_is_help=True)

_DIR_OPTION = typer.Option(None, "--cache-dir", help="Cache directory.")


def _open_cache(cache_dir: Optional[Path], ttl: int = 3600):
    from tumblrkit.cache import ResponseCache
    from tumblrkit.config import get_cache_dir

    return ResponseCache(cache_dir or get_cache_dir(), ttl_seconds=ttl)


@cache_app.command("stats")
def cache_stats(
    cache_dir: Optional[Path] = _DIR_OPTION,
    ttl: int = typer.Option(3600, "--ttl", help="TTL used to judge freshness."),
) -> None:
    """Show the number of entries and the cache location."""
    format_response(_open_cache(cache_dir, ttl).stats())


@cache_app.command("clear")
def cache_clear(cache_dir: Optional[Path] = _DIR_OPTION) -> None:
    """Delete every cached response."""
    removed = _open_cache(cache_dir).clear()
    success(f"Removed {removed} cache entries")


@cache_app.command("purge")
def cache_purge(
    cache_dir: Optional[Path] = _DIR_OPTION,
    ttl: int = typer.Option(3600, "--ttl", help="Entries older than this are removed."),
) -> None:
    """Delete stale and unreadable cache entries."""
    removed = _open_cache(cache_dir, ttl).purge_expired()
    success(f"Removed {removed} expired cache entries")
