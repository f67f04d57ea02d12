"""In-memory response cache with TTL lookups and on-disk snapshots.

Decoded RIPEstat responses are stored under the fully qualified request
URL (query string included), so two parameterizations of the same data
call never collide.  Every entry records the :func:`time.monotonic` clock
at insertion; :meth:`ResponseCache.get_with_ttl` uses that stamp to treat
old entries as absent.

The whole cache can be written to a single pickled snapshot with
:meth:`ResponseCache.save` and loaded back with :meth:`ResponseCache.read`.
Snapshots live in one fixed directory (the package ``data/`` directory
unless another one is configured) and are addressed by bare file name.

Lookups never raise on a miss: they return the :data:`NOT_FOUND` sentinel,
which keeps "absent" apart from cached values such as ``None``, ``[]`` or
``0``.

See Also:
    :class:`~ripex.client.stat_client.StatClient` -- the consumer that
    checks the cache before each request and fills it afterwards.
"""

from __future__ import annotations

import pickle
import threading
from dataclasses import dataclass
from pathlib import Path
from time import monotonic
from typing import Any, Iterator, Optional

from ripex.config import atomic_write
from ripex.exceptions import CacheError, InvalidUsageError
from ripex.output import debug

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
"""Package-private directory holding cache snapshots."""


class _NotFound:
    """Type of the :data:`NOT_FOUND` sentinel."""

    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()
"""Returned by lookups when no (fresh) entry exists for a key."""


@dataclass
class CacheEntry:
    """A single cached response.

    Attributes:
        key: The request URL the value was fetched from.
        value: The decoded payload, stored as-is.
        created_at: :func:`time.monotonic` reading taken at insertion.
    """

    key: str
    value: Any
    created_at: float

    def age(self) -> float:
        """Seconds elapsed since the entry was stored."""
        return monotonic() - self.created_at


class ResponseCache:
    """Key-value store for decoded responses, keyed by request URL.

    The backing table is created lazily: every public method starts with an
    initialize-if-absent guard, so a cache that was never used (or whose
    table was dropped) simply behaves as empty.  Individual operations run
    under an internal lock and never expose a half-written entry.
    :meth:`read` and :meth:`save` are bulk operations and are *not*
    serialized against each other.

    Args:
        data_dir: Directory holding snapshot files.  Defaults to
            :data:`DATA_DIR`.

    Example::

        cache = ResponseCache()
        url = "https://stat.ripe.net/data/network-info/data.json?resource=1.1.1.1"
        data = cache.get(url)
        if data is NOT_FOUND:
            data = cache.put(fetch(url), url)
    """

    def __init__(self, data_dir: Optional[str | Path] = None) -> None:
        self._data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
        self._lock = threading.RLock()
        self._table: Optional[dict[str, CacheEntry]] = None

    @property
    def data_dir(self) -> Path:
        """Directory that snapshot file names are resolved against."""
        return self._data_dir

    # ------------------------------------------------------------------ #
    # Per-key operations
    # ------------------------------------------------------------------ #

    def get(self, key: str) -> Any:
        """Return the value stored under *key*, or :data:`NOT_FOUND`."""
        with self._lock:
            entry = self._ensure_table().get(key)
        if entry is None:
            return NOT_FOUND
        return entry.value

    def get_with_ttl(self, key: str, ttl_seconds: int) -> Any:
        """Return the value under *key* unless it is older than *ttl_seconds*.

        A negative TTL makes every entry stale, which callers use to force
        a refresh.  Stale entries are not removed.
        """
        with self._lock:
            entry = self._ensure_table().get(key)
        if entry is None or entry.age() > ttl_seconds:
            return NOT_FOUND
        return entry.value

    def put(self, value: Any, key: str) -> Any:
        """Store *value* under *key*, replacing any previous entry.

        The entry is stamped with the current monotonic time.  Returns
        *value* unchanged so calls can be chained::

            return cache.put(decode(response), url)
        """
        entry = CacheEntry(key=key, value=value, created_at=monotonic())
        with self._lock:
            self._ensure_table()[key] = entry
        return value

    def delete(self, key: str) -> bool:
        """Remove the entry for *key*.  Succeeds whether or not it existed."""
        with self._lock:
            self._ensure_table().pop(key, None)
        return True

    def clear(self) -> bool:
        """Remove all entries."""
        with self._lock:
            self._ensure_table().clear()
        return True

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #

    def read(self, filename: str) -> bool:
        """Replace the cache contents with the snapshot in *filename*.

        The cache is cleared first, also when the snapshot does not exist,
        in which case ``False`` is returned and the cache stays empty.
        Loaded entries go through :meth:`put` and therefore get a fresh
        timestamp: the ages recorded in the snapshot are discarded.

        Every triple is unpacked before the first one is stored, so a
        snapshot that turns out to be corrupt leaves the cache empty.

        Raises:
            InvalidUsageError: If *filename* is not a bare file name.
            CacheError: If the snapshot cannot be read or unpickled.
        """
        self.clear()
        path = self.snapshot_path(filename)
        if not path.is_file():
            debug(f"Cache snapshot not found: {path}")
            return False

        try:
            entries = [(key, value) for key, value, _created_at in pickle.loads(path.read_bytes())]
        except OSError as exc:
            raise CacheError(f"Cannot read cache snapshot {path}: {exc}") from exc
        except Exception as exc:
            # Unpickling garbage can raise nearly any exception type.
            raise CacheError(f"Corrupt cache snapshot {path}: {exc}") from exc

        for key, value in entries:
            self.put(value, key)
        debug(f"Loaded {len(self)} cache entries from {path}")
        return True

    def save(self, filename: str) -> bool:
        """Write all entries to *filename*, overwriting an existing snapshot.

        The snapshot is a pickled list of ``(key, value, created_at)``
        tuples.

        Raises:
            InvalidUsageError: If *filename* is not a bare file name.
            CacheError: If the snapshot cannot be serialized or written.
        """
        path = self.snapshot_path(filename)
        with self._lock:
            triples = [
                (entry.key, entry.value, entry.created_at)
                for entry in self._ensure_table().values()
            ]

        try:
            blob = pickle.dumps(triples, protocol=pickle.HIGHEST_PROTOCOL)
            atomic_write(path, blob)
        except OSError as exc:
            raise CacheError(f"Cannot write cache snapshot {path}: {exc}") from exc
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise CacheError(f"Cannot serialize cache to {path}: {exc}") from exc

        debug(f"Saved {len(triples)} cache entries to {path}")
        return True

    def snapshot_path(self, filename: str) -> Path:
        """Resolve *filename* against :attr:`data_dir`.

        Raises:
            InvalidUsageError: If *filename* is empty, ``.``/``..``, or
                contains a path separator.
        """
        if not filename or filename in (".", "..") or "/" in filename or "\\" in filename:
            raise InvalidUsageError(
                f"Invalid snapshot name {filename!r}: use a plain file name"
            )
        return self._data_dir / filename

    # ------------------------------------------------------------------ #
    # Inspection
    # ------------------------------------------------------------------ #

    def keys(self) -> list[str]:
        """Return the cached keys, sorted."""
        with self._lock:
            return sorted(self._ensure_table())

    def stats(self) -> dict[str, Any]:
        """Return the number of entries and the snapshot directory."""
        return {"size": len(self), "directory": str(self._data_dir)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._ensure_table())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._ensure_table()

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def _ensure_table(self) -> dict[str, CacheEntry]:
        # Callers hold self._lock.
        if self._table is None:
            self._table = {}
        return self._table


# ------------------------------------------------------------------ #
# Process-wide cache handle
# ------------------------------------------------------------------ #

_cache: Optional[ResponseCache] = None
_cache_lock = threading.Lock()


def get_cache() -> ResponseCache:
    """Return the process-wide :class:`ResponseCache`, creating it on first use."""
    global _cache
    with _cache_lock:
        if _cache is None:
            _cache = ResponseCache()
        return _cache


def set_cache(cache: ResponseCache) -> None:
    """Install *cache* as the process-wide instance (done once at startup)."""
    global _cache
    with _cache_lock:
        _cache = cache


def reset_cache() -> None:
    """Drop the process-wide instance.  Primarily used for test isolation."""
    global _cache
    with _cache_lock:
        _cache = None
