"""HTTP client module for ripex.

Provides :class:`StatClient` for the RIPEstat Data API and
:class:`DbClient` for the RIPE Database REST API.  Both are blocking
clients backed by :class:`httpx.Client` that share one URL-keyed response
cache and map failures to :class:`~ripex.exceptions.RipexError` subclasses.

Example::

    from ripex.cache import get_cache
    from ripex.client import StatClient

    with StatClient(cache=get_cache()) as client:
        data = client.fetch("prefix-overview", resource="193.0.0.0/21")
"""

from ripex.client.db_client import DbClient, db_error_message, decode_db_response, decode_error
from ripex.client.stat_client import StatClient, decode_response, message_by_tag

__all__ = [
    "DbClient",
    "StatClient",
    "db_error_message",
    "decode_db_response",
    "decode_error",
    "decode_response",
    "message_by_tag",
]
