"""Wrappers around individual RIPEstat data calls.

Each function takes an open :class:`~ripex.client.StatClient`, issues one
data call (or several, for :func:`rpki`) and reshapes the ``data`` block
into the form the CLI and reports use.  The client caches the raw block,
so reshaping is repeated on every call and cached data is never mutated.

See https://stat.ripe.net/docs/02.data-api/ for the upstream formats.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Any

from ripex.client import StatClient
from ripex.exceptions import InvalidUsageError
from ripex.stat.transform import map_by_key, remove, rename

_ASN_RE = re.compile(r"^(?:as)?(\d+)$", re.IGNORECASE)

_QUERY_TIMES = ("query_starttime", "query_endtime")


# ------------------------------------------------------------------ #
# Resource helpers
# ------------------------------------------------------------------ #


def normalize_asn(value: str | int) -> str:
    """Return the bare AS number for ``"AS3333"``, ``"as3333"``, ``"3333"`` or ``3333``.

    Raises:
        InvalidUsageError: If *value* is not an AS number.
    """
    match = _ASN_RE.match(str(value).strip())
    if match is None:
        raise InvalidUsageError(f"Not an AS number: {value!r}")
    return match.group(1)


def is_ip_resource(value: str) -> bool:
    """Return True if *value* is an IPv4/IPv6 address or prefix."""
    try:
        ipaddress.ip_network(value, strict=False)
    except ValueError:
        return False
    return True


# ------------------------------------------------------------------ #
# Data calls
# ------------------------------------------------------------------ #


def network_info(client: StatClient, resource: str) -> dict[str, Any]:
    """Return the covering prefix and origin ASNs of an IP address."""
    return client.fetch("network-info", resource=resource)


def ip_to_asns(client: StatClient, resource: str) -> list[str]:
    """Return the ASNs originating the prefix that covers *resource*."""
    data = network_info(client, resource) or {}
    return [str(asn) for asn in data.get("asns", [])]


def prefix_overview(client: StatClient, resource: str) -> dict[str, Any]:
    """Return announcement status, holder and origin ASNs of a prefix."""
    data = client.fetch("prefix-overview", resource=resource)
    return rename(data, {"resource": "prefix"})


def as_overview(client: StatClient, asn: str | int) -> dict[str, Any]:
    """Return holder name and announcement status of an AS."""
    data = client.fetch("as-overview", resource=normalize_asn(asn))
    return remove(rename(data, {"resource": "asn"}), _QUERY_TIMES)


def announced_prefixes(client: StatClient, asn: str | int) -> dict[str, Any]:
    """Return the prefixes announced by an AS, flattened to strings."""
    data = client.fetch("announced-prefixes", resource=normalize_asn(asn)) or {}
    prefixes = [p["prefix"] for p in data.get("prefixes", []) if "prefix" in p]
    return {"resource": data.get("resource"), "prefixes": prefixes, "count": len(prefixes)}


def abuse_contact(client: StatClient, resource: str) -> dict[str, Any]:
    """Return the abuse contact addresses registered for a resource."""
    data = client.fetch("abuse-contact-finder", resource=resource) or {}
    return {
        "resource": data.get("parameters", {}).get("resource", resource),
        "abuse-contacts": data.get("abuse_contacts", []),
    }


def as_routing_consistency(client: StatClient, asn: str | int) -> dict[str, Any]:
    """Compare BGP routing with the RIPE Database for an AS.

    ``prefixes`` is promoted to a dict keyed by prefix; ``imports`` and
    ``exports`` remain lists of peer records.
    """
    data = client.fetch("as-routing-consistency", resource=normalize_asn(asn)) or {}
    data = remove(rename(data, {"resource": "asn"}), (*_QUERY_TIMES, "cache", "query_time"))
    data.setdefault("asn", normalize_asn(asn))
    data["prefixes"] = map_by_key(data.get("prefixes", []), "prefix")
    data.setdefault("imports", [])
    data.setdefault("exports", [])
    return data


def rpki_validation(client: StatClient, asn: str | int, prefix: str) -> dict[str, Any]:
    """Return the RPKI status of *prefix* originated by *asn*, with the validating ROAs."""
    data = client.fetch("rpki-validation", resource=normalize_asn(asn), prefix=prefix) or {}
    return remove(rename(data, {"resource": "asn"}), ("validator",))


def rpki(client: StatClient, asn: str | int) -> dict[str, Any]:
    """Routing consistency of an AS with RPKI validation per prefix.

    Each entry of ``prefixes`` gains ``rpki`` (the validation status) and
    ``roas`` (the validating ROAs).
    """
    asn = normalize_asn(asn)
    result = as_routing_consistency(client, asn)
    for prefix, record in result["prefixes"].items():
        validation = rpki_validation(client, asn, prefix)
        record["rpki"] = validation.get("status", "unknown")
        record["roas"] = validation.get("validating_roas", [])
    return result
