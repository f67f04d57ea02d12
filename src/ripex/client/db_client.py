"""Synchronous RIPE Database REST API client with response caching.

:class:`DbClient` talks to ``rest.db.ripe.net`` through the same cache as
:class:`~ripex.client.stat_client.StatClient`: the full request URL is the
key and the decoded JSON body is the value.  Reshaping the body into
something readable is left to :mod:`ripex.db`.

Failed queries carry their reason either as a list of templated
``errormessages`` (lookup, search) or as a single ``message`` (abuse
contact, templates); :func:`db_error_message` handles both.

See https://apps.db.ripe.net/docs/11.How-to-Query-the-RIPE-Database/03-RESTful-API-Queries.html
"""

from __future__ import annotations

from typing import Any, Iterable, Optional
from urllib.parse import quote, urlencode

import httpx

from ripex.client.base import CachingClient
from ripex.exceptions import EndpointError, NotFoundError, ServerError


class DbClient(CachingClient):
    """Synchronous client for RIPE Database queries.

    Example::

        with DbClient(cache=get_cache()) as client:
            body = client.fetch("ripe/aut-num/AS3333")
    """

    def url(
        self,
        path: str,
        params: Optional[Iterable[tuple[str, Any]]] = None,
        flags: Iterable[str] = (),
    ) -> str:
        """Build ``<base>/<path>.json?<params>&<flags>``.

        *params* keep their order and may repeat a name.  *flags* are bare
        query words such as ``unfiltered``.  Spaces in *path* are escaped;
        slashes and colons stay readable.
        """
        base = self._config.db_base_url.rstrip("/")
        query = [urlencode([(k, str(v)) for k, v in params or []], safe="/:"), *flags]
        query_string = "&".join(part for part in query if part)
        url = f"{base}/{quote(path, safe='/:')}.json"
        return f"{url}?{query_string}" if query_string else url

    def fetch(
        self,
        path: str,
        params: Optional[Iterable[tuple[str, Any]]] = None,
        flags: Iterable[str] = (),
    ) -> dict[str, Any]:
        """Return the decoded JSON body for *path*, from the cache if possible.

        Raises:
            ConnectionError_: On timeouts or network failures.
            NotFoundError: On HTTP 404 (no such object or template).
            ServerError: On HTTP 5xx.
            EndpointError: On any other failure.
        """
        return self._get(self.url(path, params, flags), lambda r: decode_db_response(r, path))


def decode_db_response(response: httpx.Response, path: str) -> dict[str, Any]:
    """Return the JSON body of a successful query or raise."""
    try:
        body = response.json()
    except ValueError:
        body = {}

    status = response.status_code
    if status == 200:
        if not isinstance(body, dict):
            raise EndpointError(f"{path}: unexpected response body", path, status)
        return body

    detail = db_error_message(body)
    if status == 404:
        raise NotFoundError(f"HTTP 404 for {path}: {detail}")
    if status >= 500:
        raise ServerError(f"HTTP {status} for {path}: {detail}")
    raise EndpointError(f"HTTP {status} for {path}: {detail}", path, status)


def db_error_message(body: Any) -> str:
    """Return the reason a query failed, or ``"unknown error"``."""
    if not isinstance(body, dict):
        return "unknown error"
    errors = (body.get("errormessages") or {}).get("errormessage") or []
    if errors:
        return "; ".join(decode_error(item) for item in errors)
    return str(body.get("message") or "unknown error")


def decode_error(item: dict[str, Any]) -> str:
    """Fill the ``%s`` placeholders of one error message with its args.

    Example::

        >>> decode_error({"text": "No entries found in source %s.", "args": [{"value": "RIPE"}]})
        'No entries found in source RIPE.'
    """
    text = str(item.get("text", ""))
    for arg in item.get("args") or []:
        text = text.replace("%s", str(arg.get("value", "")), 1)
    return text.strip()
