"""RIPE Database commands -- look up, search and describe RPSL objects.

Provides the ``ripex db`` group.  Results go through the shared response
cache like the RIPEstat calls, so ``--snapshot`` warm starts cover them
too::

    ripex db lookup aut-num AS3333
    ripex db lookup route 193.0.0.0/21AS3333
    ripex db search AS3333 --inverse origin --flag r
    ripex db template route
    ripex db abuse-contact 193.0.6.139
"""

from __future__ import annotations

from typing import Optional

import typer

from ripex.commands import open_db_client
from ripex.db import objects
from ripex.output import format_response


db_app = typer.Typer(no_args_is_help=True)


@db_app.command("lookup")
def lookup(
    ctx: typer.Context,
    object_type: str = typer.Argument(help="RPSL object type, e.g. aut-num, inetnum, route."),
    key: str = typer.Argument(help="Primary key; join composite keys, e.g. 193.0.0.0/21AS3333."),
    unfiltered: bool = typer.Option(False, "--unfiltered", help="Keep e-mail attributes."),
    unformatted: bool = typer.Option(
        False, "--unformatted", help="Keep the original formatting of values."
    ),
    source: str = typer.Option("ripe", "--source", help="ripe, test or a GRS source."),
) -> None:
    """Show the one object of a type with an exact primary key."""
    with open_db_client(ctx) as client:
        format_response(
            objects.lookup(client, object_type, key, unfiltered, unformatted, source)
        )


@db_app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument(help="Search term."),
    inverse: Optional[list[str]] = typer.Option(
        None, "--inverse", "-i", help="Search this inverse attribute, e.g. origin or mnt-by."
    ),
    object_type: Optional[list[str]] = typer.Option(
        None, "--type", "-T", help="Only return objects of this type."
    ),
    flag: Optional[list[str]] = typer.Option(
        None, "--flag", "-F", help="Query flag, e.g. r (no contact objects) or M (more specifics)."
    ),
    source: Optional[list[str]] = typer.Option(None, "--source", help="Source to search."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Return at most this many objects."),
    offset: Optional[int] = typer.Option(None, "--offset", help="Skip this many objects."),
    abuse: bool = typer.Option(False, "--abuse-contact", help="Add the abuse-c e-mail."),
    holder: bool = typer.Option(False, "--resource-holder", help="Add the resource holder."),
) -> None:
    """Find objects by primary, lookup or inverse key.

    Example::

        ripex db search RIPE-NCC-MNT -i mnt-by -T inetnum -T inet6num -F r
    """
    with open_db_client(ctx) as client:
        format_response(
            objects.search(
                client,
                query,
                inverse_attributes=tuple(inverse or ()),
                type_filters=tuple(object_type or ()),
                flags=tuple(flag or ()),
                sources=tuple(source or ()),
                limit=limit,
                offset=offset,
                abuse_contact=abuse,
                resource_holder=holder,
            )
        )


@db_app.command("template")
def template(
    ctx: typer.Context,
    object_type: str = typer.Argument(help="RPSL object type, e.g. route."),
) -> None:
    """Show the attributes and key attributes of an object type."""
    with open_db_client(ctx) as client:
        format_response(objects.template(client, object_type))


@db_app.command("abuse-contact")
def abuse_contact(
    ctx: typer.Context,
    resource: str = typer.Argument(help="AS number, prefix or IP address."),
) -> None:
    """Show the abuse contact registered for a resource."""
    with open_db_client(ctx) as client:
        format_response(objects.abuse_contact(client, resource))
