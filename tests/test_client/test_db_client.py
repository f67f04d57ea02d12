"""Tests for the RIPE Database client: URLs, caching and error messages."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from ripex.cache import ResponseCache
from ripex.client import DbClient, db_error_message, decode_error
from ripex.exceptions import EndpointError, NotFoundError, ServerError
from ripex.models import RequestConfig
from ripex.output import OutputManager, reset_output, set_output


BASE = "https://db.example.net/"


def _make_config() -> RequestConfig:
    return RequestConfig(db_base_url=BASE, timeout=5)


class _Recorder:
    def __init__(self, body: Any = None, status_code: int = 200) -> None:
        self.body = {"objects": {"object": []}} if body is None else body
        self.status_code = status_code
        self.urls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def _clean_output():
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# URL construction
# ---------------------------------------------------------------------------


class TestURL:
    def test_plain_path(self) -> None:
        url = DbClient(_make_config()).url("ripe/aut-num/AS3333")
        assert url == "https://db.example.net/ripe/aut-num/AS3333.json"

    def test_default_base(self) -> None:
        url = DbClient().url("metadata/templates/route")
        assert url == "https://rest.db.ripe.net/metadata/templates/route.json"

    def test_prefix_and_range_keys(self) -> None:
        client = DbClient(_make_config())
        assert client.url("ripe/route/193.0.0.0/21AS3333").endswith(
            "/ripe/route/193.0.0.0/21AS3333.json"
        )
        assert client.url("ripe/inetnum/91.123.16.0 - 91.123.31.255").endswith(
            "/ripe/inetnum/91.123.16.0%20-%2091.123.31.255.json"
        )

    def test_repeated_params_then_flags(self) -> None:
        url = DbClient(_make_config()).url(
            "search",
            [("type-filter", "inetnum"), ("type-filter", "inet6num"), ("query-string", "X")],
            flags=["abuse-contact"],
        )
        assert url == (
            "https://db.example.net/search.json"
            "?type-filter=inetnum&type-filter=inet6num&query-string=X&abuse-contact"
        )

    def test_flags_only(self) -> None:
        url = DbClient(_make_config()).url("ripe/person/X-RIPE", flags=["unfiltered"])
        assert url.endswith("/ripe/person/X-RIPE.json?unfiltered")


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------


class TestCaching:
    def test_second_fetch_is_cached(self, cache: ResponseCache) -> None:
        handler = _Recorder()
        with DbClient(_make_config(), cache=cache, transport=handler.transport) as client:
            first = client.fetch("ripe/aut-num/AS3333")
            second = client.fetch("ripe/aut-num/AS3333")
        assert first == second == {"objects": {"object": []}}
        assert len(handler.urls) == 1
        assert cache.keys() == [handler.urls[0]]

    def test_shares_cache_with_ttl(self, cache: ResponseCache) -> None:
        handler = _Recorder()
        with DbClient(
            _make_config(), cache=cache, ttl_seconds=-1, transport=handler.transport
        ) as client:
            client.fetch("ripe/aut-num/AS3333")
            client.fetch("ripe/aut-num/AS3333")
        assert len(handler.urls) == 2

    def test_errors_are_not_cached(self, cache: ResponseCache) -> None:
        handler = _Recorder({"message": "boom"}, status_code=502)
        with DbClient(_make_config(), cache=cache, transport=handler.transport) as client:
            with pytest.raises(ServerError, match="boom"):
                client.fetch("abuse-contact/AS3333")
        assert len(cache) == 0


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


NO_ENTRIES = {
    "errormessages": {
        "errormessage": [
            {
                "severity": "Error",
                "text": "ERROR:101: no entries found\n\nNo entries found in source %s.\n",
                "args": [{"value": "RIPE"}],
            }
        ]
    }
}


class TestErrors:
    def test_404_with_error_messages(self) -> None:
        handler = _Recorder(NO_ENTRIES, status_code=404)
        with DbClient(_make_config(), transport=handler.transport) as client:
            with pytest.raises(NotFoundError, match="No entries found in source RIPE"):
                client.fetch("ripe/aut-num/AS64496")

    def test_400_with_message(self) -> None:
        handler = _Recorder({"message": "Invalid argument: 1.1.1.x"}, status_code=400)
        with DbClient(_make_config(), transport=handler.transport) as client:
            with pytest.raises(EndpointError, match="Invalid argument: 1.1.1.x") as exc_info:
                client.fetch("abuse-contact/1.1.1.x")
        assert exc_info.value.status == 400

    def test_non_json_error_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="<whois-resources/>")

        with DbClient(_make_config(), transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(NotFoundError, match="unknown error"):
                client.fetch("ripe/aut-num/AS64496")

    def test_non_dict_success_body(self) -> None:
        handler = _Recorder(["not", "an", "object"])
        with DbClient(_make_config(), transport=handler.transport) as client:
            with pytest.raises(EndpointError, match="unexpected response body"):
                client.fetch("search")


class TestErrorMessages:
    def test_placeholders_filled_in_order(self) -> None:
        item = {"text": "%s is not a valid %s", "args": [{"value": "X"}, {"value": "route"}]}
        assert decode_error(item) == "X is not a valid route"

    def test_without_args(self) -> None:
        assert decode_error({"text": "  plain  "}) == "plain"

    def test_several_messages_joined(self) -> None:
        body = {"errormessages": {"errormessage": [{"text": "a"}, {"text": "b"}]}}
        assert db_error_message(body) == "a; b"

    @pytest.mark.parametrize("body", [{}, None, [], {"message": ""}])
    def test_unknown(self, body: Any) -> None:
        assert db_error_message(body) == "unknown error"
