"""RIPE Database REST API queries.

:mod:`ripex.db.objects` wraps the abuse-contact, lookup, search and
metadata-template calls and flattens RPSL objects with
:func:`~ripex.db.objects.decode_object`.
"""

from ripex.db.objects import abuse_contact, decode_object, lookup, search, template

__all__ = ["abuse_contact", "decode_object", "lookup", "search", "template"]
