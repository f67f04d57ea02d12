"""RIPE Database queries: abuse contact, lookup, search and templates.

The REST API wraps every RPSL object as::

    {"type": "aut-num",
     "primary-key": {"attribute": [{"name": "aut-num", "value": "AS3333"}]},
     "attributes": {"attribute": [{"name": "as-name", "value": "RIPE-NCC-AS"}, ...]}}

:func:`decode_object` flattens that into ``{"as-name": ["RIPE-NCC-AS"], ...}``
with every attribute mapped to the list of its values (attributes such as
``mnt-by`` or ``remarks`` repeat) plus a ``primary_key`` string.

The client caches the raw body; reshaping happens on every call.
"""

from __future__ import annotations

from typing import Any, Optional

from ripex.client import DbClient
from ripex.exceptions import NotFoundError
from ripex.stat.transform import map_by_key

_DROPPED = ("attributes", "primary-key", "link")

_KEY_KINDS = {
    "primary_keys": "PRIMARY_KEY",
    "lookup_keys": "LOOKUP_KEY",
    "inverse_keys": "INVERSE_KEY",
}


def decode_object(obj: dict[str, Any]) -> dict[str, Any]:
    """Flatten one RPSL object from a lookup or search answer.

    Attribute values are collected per name in document order.  The
    ``primary_key`` is the concatenation of the primary key attribute
    values, e.g. ``"193.0.0.0/21AS3333"`` for a route object.
    """
    attrs: dict[str, list[Any]] = {}
    for attr in (obj.get("attributes") or {}).get("attribute") or []:
        if "name" in attr:
            attrs.setdefault(attr["name"], []).append(attr.get("value"))

    key_parts = (obj.get("primary-key") or {}).get("attribute") or []
    primary_key = "".join(str(part.get("value", "")) for part in key_parts)

    result = {k: v for k, v in obj.items() if k not in _DROPPED}
    result.update(attrs)
    result["primary_key"] = primary_key
    return result


def _version(body: dict[str, Any]) -> Optional[str]:
    return (body.get("version") or {}).get("version")


def abuse_contact(client: DbClient, resource: str) -> dict[str, Any]:
    """Return the abuse contact of an AS number, prefix or IP address.

    A resource without a contact still succeeds, with empty ``email`` and
    ``key`` fields.
    """
    body = client.fetch(f"abuse-contact/{resource}")
    result = dict(body.get("abuse-contacts") or {})
    result["primary_key"] = (
        ((body.get("parameters") or {}).get("primary-key") or {}).get("value", resource)
    )
    return result


def lookup(
    client: DbClient,
    object_type: str,
    key: str,
    unfiltered: bool = False,
    unformatted: bool = False,
    source: str = "ripe",
) -> dict[str, Any]:
    """Return the single object of *object_type* whose primary key is *key*.

    Objects with a composite primary key are looked up by the joined key
    values, e.g. ``lookup(client, "route", "193.0.0.0/21AS3333")``.

    Args:
        unfiltered: Keep e-mail and notify attributes.
        unformatted: Keep the original formatting of attribute values.
        source: ``ripe``, ``test`` or a GRS source name.

    Raises:
        NotFoundError: If no such object exists.
    """
    flags = [name for name, on in (("unfiltered", unfiltered), ("unformatted", unformatted)) if on]
    body = client.fetch(f"{source}/{object_type}/{key}", flags=flags)
    objects = (body.get("objects") or {}).get("object") or []
    if not objects:
        raise NotFoundError(f"No {object_type} object {key!r} in {source}")

    return {"type": object_type, "version": _version(body), **decode_object(objects[0])}


def search(
    client: DbClient,
    query: str,
    inverse_attributes: tuple[str, ...] = (),
    type_filters: tuple[str, ...] = (),
    flags: tuple[str, ...] = (),
    sources: tuple[str, ...] = (),
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    abuse_contact: bool = False,
    resource_holder: bool = False,
) -> dict[str, Any]:
    """Run a whois-style search and return every matching object.

    With no options this finds objects whose primary key matches *query*
    or whose lookup keys (partially) match it.  ``flags=("r",)`` stops the
    server from adding referenced contact objects, which count against the
    daily limit on personal data.

    Example::

        # route(6) objects originated by AS3333
        search(client, "AS3333", inverse_attributes=("origin",), flags=("r",))
    """
    params: list[tuple[str, Any]] = []
    params += [("source", s) for s in sources]
    params += [("inverse-attribute", a) for a in inverse_attributes]
    params += [("type-filter", t) for t in type_filters]
    params += [("flags", f) for f in flags]
    params += [(name, n) for name, n in (("limit", limit), ("offset", offset)) if n is not None]
    params.append(("query-string", query))
    extra = [
        name
        for name, on in (("abuse-contact", abuse_contact), ("resource-holder", resource_holder))
        if on
    ]

    body = client.fetch("search", params=params, flags=extra)
    objects = (body.get("objects") or {}).get("object") or []
    return {
        "query": query,
        "version": _version(body),
        "objects": [decode_object(obj) for obj in objects],
    }


def template(client: DbClient, object_type: str) -> dict[str, Any]:
    """Describe the attributes of an RPSL object type.

    ``attributes`` maps each attribute name, in template order, to its
    ``cardinality``, ``requirement`` and (when indexed) ``keys``.
    ``primary_keys``, ``lookup_keys`` and ``inverse_keys`` list the
    attribute names usable for each kind of query; the order of
    ``primary_keys`` is the order in which composite keys are joined.

    Raises:
        NotFoundError: If *object_type* is not an RPSL type.
    """
    body = client.fetch(f"metadata/templates/{object_type}")
    templates = (body.get("templates") or {}).get("template") or []
    if not templates:
        raise NotFoundError(f"No template for {object_type!r}")

    found = templates[0]
    attrs = map_by_key((found.get("attributes") or {}).get("attribute"), "name")
    result: dict[str, Any] = {
        "type": found.get("type", object_type),
        "rir": (found.get("source") or {}).get("id"),
    }
    for field, kind in _KEY_KINDS.items():
        result[field] = [name for name, spec in attrs.items() if kind in spec.get("keys", [])]
    result["attributes"] = attrs
    return result
