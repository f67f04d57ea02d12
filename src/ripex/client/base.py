"""Plumbing shared by the RIPEstat and RIPE Database clients.

:class:`CachingClient` owns the :class:`httpx.Client` lifecycle, the
URL-keyed cache lookup and the mapping of transport failures to
:class:`~ripex.exceptions.ConnectionError_`.  Subclasses build URLs and
decide how a response body is decoded.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

import httpx

from ripex import __version__
from ripex.cache import NOT_FOUND, ResponseCache
from ripex.exceptions import ConnectionError_
from ripex.models import RequestConfig
from ripex.output import debug

_C = TypeVar("_C", bound="CachingClient")


class CachingClient:
    """Blocking HTTP client that checks a :class:`ResponseCache` first.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        config: Base URLs, ``sourceapp`` and timeout settings.
        cache: Response cache to consult and fill.  ``None`` disables
            caching.
        ttl_seconds: When set, cached entries older than this are ignored
            (see :meth:`~ripex.cache.ResponseCache.get_with_ttl`).
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        cache: Optional[ResponseCache] = None,
        ttl_seconds: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self: _C) -> _C:
        self._client = httpx.Client(
            timeout=self._config.timeout,
            follow_redirects=True,
            headers={"Accept": "application/json", "User-Agent": f"ripex/{__version__}"},
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def _get(self, url: str, decode: Callable[[httpx.Response], Any]) -> Any:
        """Return the cached value for *url*, or GET it, *decode* it and cache it."""
        cached = self._cache_get(url)
        if cached is not NOT_FOUND:
            debug(f"Cache hit: {url}")
            return cached

        data = decode(self._send(url))
        if self._cache is not None:
            return self._cache.put(data, url)
        return data

    def _cache_get(self, url: str) -> Any:
        if self._cache is None:
            return NOT_FOUND
        if self._ttl_seconds is None:
            return self._cache.get(url)
        return self._cache.get_with_ttl(url, self._ttl_seconds)

    def _send(self, url: str) -> httpx.Response:
        assert self._client is not None, "Client not initialised -- use as context manager"

        debug(f"GET {url}")
        try:
            response = self._client.get(url)
        except httpx.TimeoutException as exc:
            raise ConnectionError_(
                f"Timeout after {self._config.timeout}s: {url} "
                "(maybe try a larger --timeout)"
            ) from exc
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Connection failed: {url}: {exc}") from exc

        debug(f"HTTP {response.status_code} for {url}")
        return response
