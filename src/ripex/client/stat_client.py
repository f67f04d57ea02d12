"""Synchronous RIPEstat Data API client with response caching.

This module provides :class:`StatClient`, the blocking HTTP client used by
the endpoint wrappers in :mod:`ripex.stat`.  It wraps :class:`httpx.Client`
and layers on:

- **URL construction** -- ``<base>/<endpoint>/data.json?sourceapp=..&..``;
  the resulting URL doubles as the cache key.
- **Response caching** -- the shared :class:`~ripex.cache.ResponseCache`
  is consulted before every request and filled with the decoded ``data``
  block afterwards.
- **Error mapping** -- HTTP and RIPEstat-level failures become
  :class:`~ripex.exceptions.RipexError` subclasses carrying the first
  relevant RIPEstat message.

See https://stat.ripe.net/docs/02.data-api/ for the data calls.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from ripex.client.base import CachingClient
from ripex.exceptions import EndpointError, NotFoundError, ServerError


class StatClient(CachingClient):
    """Synchronous client for RIPEstat data calls.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Example::

        with StatClient(cache=get_cache()) as client:
            data = client.fetch("network-info", resource="193.0.6.139")
    """

    def url(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> str:
        """Build the full data call URL.

        ``sourceapp`` always comes first, followed by *params* in the given
        order.  Slashes and colons are left unescaped so prefixes such as
        ``2001:db8::/32`` stay readable in the cache.
        """
        query = [("sourceapp", self._config.sourceapp)]
        query.extend((k, str(v)) for k, v in (params or {}).items() if v is not None)
        base = self._config.base_url.rstrip("/")
        return f"{base}/{endpoint}/data.json?{urlencode(query, safe='/:')}"

    def fetch(self, endpoint: str, **params: Any) -> Any:
        """Return the decoded ``data`` block of a data call.

        Cached data is returned without network traffic.  Otherwise the
        call is made, decoded, and stored in the cache under its URL.

        Args:
            endpoint: Data call name, e.g. ``"as-routing-consistency"``.
            **params: Query parameters, e.g. ``resource="AS3333"``.

        Raises:
            ConnectionError_: On timeouts or network failures.
            NotFoundError: On HTTP 404.
            ServerError: On HTTP 5xx.
            EndpointError: On any other failure reported by RIPEstat.
        """
        return self._get(
            self.url(endpoint, params),
            lambda response: decode_response(response, endpoint),
        )


def decode_response(response: httpx.Response, endpoint: str) -> Any:
    """Return the ``data`` block of a RIPEstat response or raise.

    A successful data call has HTTP status 200 and body ``status`` ``"ok"``.
    """
    try:
        body = response.json()
    except ValueError:
        body = {}

    status = response.status_code
    if status == 200:
        if not isinstance(body, dict):
            raise EndpointError(f"{endpoint}: unexpected response body", endpoint, status)
        body_status = body.get("status")
        if body_status == "ok":
            return body.get("data")
        raise EndpointError(
            f"{endpoint}: {message_by_tag(str(body_status), body)}",
            endpoint,
            body_status,
        )

    detail = message_by_tag("error", body)
    if status == 404:
        raise NotFoundError(f"HTTP 404 for {endpoint}: {detail}")
    if status >= 500:
        raise ServerError(f"HTTP {status} for {endpoint}: {detail}")
    raise EndpointError(f"HTTP {status} for {endpoint}: {detail}", endpoint, status)


def message_by_tag(tag: str, body: Any) -> str:
    """Return ``"<tag> - <message>"`` for the first RIPEstat message tagged *tag*.

    RIPEstat bodies carry ``messages`` as ``[[tag, text], ...]``.  Tags are
    matched case-insensitively by prefix; without a match the last message
    is used.
    """
    messages = body.get("messages") if isinstance(body, dict) else None
    pairs = [m for m in (messages or []) if isinstance(m, (list, tuple)) and len(m) == 2]
    if not pairs:
        return f"{tag} - no message info found"

    wanted = tag.lower()
    for msg_tag, text in pairs:
        if str(msg_tag).lower().startswith(wanted):
            return f"{str(msg_tag).lower()} - {text}"
    msg_tag, text = pairs[-1]
    return f"{msg_tag} - {text}"
