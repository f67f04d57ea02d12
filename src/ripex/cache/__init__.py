"""In-memory response caching for ripex.

This package provides :class:`ResponseCache`, a URL-keyed store for
decoded RIPEstat responses with TTL-aware lookups and pickled on-disk
snapshots, plus the :data:`NOT_FOUND` sentinel returned on a miss.

A single cache is shared per process: :func:`get_cache` creates it on
first use and :func:`set_cache` installs one configured at startup by
:func:`ripex.app.main_callback`.  The cache is consumed by
:class:`~ripex.client.stat_client.StatClient`.
"""

from ripex.cache.cache import (
    NOT_FOUND,
    CacheEntry,
    ResponseCache,
    get_cache,
    reset_cache,
    set_cache,
)

__all__ = [
    "NOT_FOUND",
    "CacheEntry",
    "ResponseCache",
    "get_cache",
    "reset_cache",
    "set_cache",
]
