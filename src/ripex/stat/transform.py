"""Reshaping helpers for decoded RIPEstat JSON.

RIPEstat answers with deeply nested dicts and lists whose key names vary
between data calls.  The helpers here rename and drop keys recursively and
promote a list of similar records into a dict keyed by one of their fields.
All of them return new objects and leave their input untouched.
"""

from __future__ import annotations

from typing import Any, Iterable


def rename(data: Any, keymap: dict[str, str]) -> Any:
    """Rename dict keys in *data* using *keymap*, recursively.

    Recurses into dict values and list elements; scalars are returned as-is.

    Example::

        >>> rename({"resource": "3333", "x": [{"resource": 1}]}, {"resource": "asn"})
        {'asn': '3333', 'x': [{'asn': 1}]}
    """
    if isinstance(data, dict):
        return {keymap.get(k, k): rename(v, keymap) for k, v in data.items()}
    if isinstance(data, list):
        return [rename(item, keymap) for item in data]
    return data


def remove(data: Any, keys: Iterable[str]) -> Any:
    """Drop the given *keys* from every dict in *data*, recursively."""
    drop = set(keys)
    return _remove(data, drop)


def _remove(data: Any, drop: set[str]) -> Any:
    if isinstance(data, dict):
        return {k: _remove(v, drop) for k, v in data.items() if k not in drop}
    if isinstance(data, list):
        return [_remove(item, drop) for item in data]
    return data


def map_by_key(items: Any, key: str) -> dict[Any, dict[str, Any]]:
    """Turn a list of dicts into a dict keyed by ``item[key]``.

    *key* itself is dropped from each record and records without it are
    skipped.  Later records win on duplicate keys.

    Example::

        >>> map_by_key([{"prefix": "10.0.0.0/8", "in_bgp": True}], "prefix")
        {'10.0.0.0/8': {'in_bgp': True}}
    """
    result: dict[Any, dict[str, Any]] = {}
    for item in items or []:
        if isinstance(item, dict) and key in item:
            result[item[key]] = {k: v for k, v in item.items() if k != key}
    return result
