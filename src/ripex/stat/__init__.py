"""RIPEstat data call wrappers and JSON reshaping helpers.

:mod:`ripex.stat.endpoints` holds one function per data call plus the
composed :func:`~ripex.stat.endpoints.rpki` lookup;
:mod:`ripex.stat.transform` holds the generic ``rename``/``remove``/
``map_by_key`` helpers they are built from.
"""

from ripex.stat.endpoints import (
    abuse_contact,
    announced_prefixes,
    as_overview,
    as_routing_consistency,
    ip_to_asns,
    is_ip_resource,
    network_info,
    normalize_asn,
    prefix_overview,
    rpki,
    rpki_validation,
)
from ripex.stat.transform import map_by_key, remove, rename

__all__ = [
    "abuse_contact",
    "announced_prefixes",
    "as_overview",
    "as_routing_consistency",
    "ip_to_asns",
    "is_ip_resource",
    "map_by_key",
    "network_info",
    "normalize_asn",
    "prefix_overview",
    "remove",
    "rename",
    "rpki",
    "rpki_validation",
]
