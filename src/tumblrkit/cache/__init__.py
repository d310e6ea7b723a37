"""File-backed response caching for tumblrkit.

This package provides :class:`ResponseCache`, the read-through /
write-through layer between the request composer and the transport.
Entries are JSON files written with a temp-file-then-rename discipline and
expire after a configurable TTL.

The cache is consumed by :class:`~tumblrkit.client.resolver.ResponseResolver`
and switched on per client view with
:meth:`~tumblrkit.client.builder.Tumblr.cache_mode`.
"""

from tumblrkit.cache.cache import ResponseCache, check_cache_dir

__all__ = ["ResponseCache", "check_cache_dir"]
