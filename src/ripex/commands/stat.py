"""Stat commands -- print the decoded result of a single RIPEstat data call.

Provides the ``ripex stat`` sub-command group.  Every command opens a
:class:`~ripex.client.StatClient` on the shared cache, calls one wrapper
from :mod:`ripex.stat.endpoints` and renders the result in the active
output format (``--json``, ``--plain`` or Rich).
"""

from __future__ import annotations

from typing import Any, Callable

import typer

from ripex.commands import open_client
from ripex.output import format_response
from ripex.stat import endpoints


stat_app = typer.Typer(no_args_is_help=True)


def _show(ctx: typer.Context, call: Callable[..., Any], *args: str) -> None:
    with open_client(ctx) as client:
        format_response(call(client, *args))


@stat_app.command("network-info")
def network_info(
    ctx: typer.Context,
    resource: str = typer.Argument(help="IP address or prefix."),
) -> None:
    """Show the covering prefix and origin ASNs of an IP address.

    Example::

        ripex stat network-info 193.0.6.139
    """
    _show(ctx, endpoints.network_info, resource)


@stat_app.command("prefix-overview")
def prefix_overview(
    ctx: typer.Context,
    resource: str = typer.Argument(help="IP prefix."),
) -> None:
    """Show announcement status, holder and origin ASNs of a prefix."""
    _show(ctx, endpoints.prefix_overview, resource)


@stat_app.command("as-overview")
def as_overview(
    ctx: typer.Context,
    asn: str = typer.Argument(help="AS number, e.g. AS3333 or 3333."),
) -> None:
    """Show holder and announcement status of an AS."""
    _show(ctx, endpoints.as_overview, asn)


@stat_app.command("announced-prefixes")
def announced_prefixes(
    ctx: typer.Context,
    asn: str = typer.Argument(help="AS number, e.g. AS3333 or 3333."),
) -> None:
    """List the prefixes announced by an AS."""
    _show(ctx, endpoints.announced_prefixes, asn)


@stat_app.command("abuse-contact")
def abuse_contact(
    ctx: typer.Context,
    resource: str = typer.Argument(help="IP address, prefix or AS number."),
) -> None:
    """Show the abuse contact addresses of a resource."""
    _show(ctx, endpoints.abuse_contact, resource)


@stat_app.command("routing-consistency")
def routing_consistency(
    ctx: typer.Context,
    asn: str = typer.Argument(help="AS number, e.g. AS3333 or 3333."),
) -> None:
    """Compare BGP routing of an AS with its RIPE Database registrations."""
    _show(ctx, endpoints.as_routing_consistency, asn)


@stat_app.command("rpki-validation")
def rpki_validation(
    ctx: typer.Context,
    asn: str = typer.Argument(help="Origin AS number."),
    prefix: str = typer.Argument(help="Announced prefix."),
) -> None:
    """Show the RPKI validation status of a prefix/origin pair.

    Example::

        ripex stat rpki-validation AS3333 193.0.0.0/21
    """
    _show(ctx, endpoints.rpki_validation, asn, prefix)
