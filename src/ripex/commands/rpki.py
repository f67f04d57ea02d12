"""RPKI command -- routing consistency and RPKI validity report per AS.

``ripex rpki TARGET...`` accepts AS numbers (``AS3333`` or ``3333``), IP
addresses or prefixes (resolved to their origin ASNs via network-info) and
host names (resolved via DNS first).  The report goes to stdout as
Markdown, or as CSV with ``--csv``.

A failure for one AS is rendered inline and the report continues with the
next one.
"""

from __future__ import annotations

import socket

import typer

from ripex.client import StatClient
from ripex.commands import open_client
from ripex.exceptions import InvalidUsageError, RipexError
from ripex.output import debug, print_data, warning
from ripex.report import build_csv, build_report
from ripex.report.rpki import AsResult
from ripex.stat import ip_to_asns, is_ip_resource, normalize_asn, rpki


def resolve_targets(client: StatClient, targets: list[str]) -> list[str]:
    """Turn AS numbers, IPs, prefixes and host names into unique ASNs.

    Order of first appearance is kept.

    Raises:
        InvalidUsageError: If a host name does not resolve.
    """
    asns: list[str] = []
    for target in targets:
        try:
            found = [normalize_asn(target)]
        except InvalidUsageError:
            found = _resolve_resource(client, target)
        for asn in found:
            if asn not in asns:
                asns.append(asn)
    return asns


def _resolve_resource(client: StatClient, target: str) -> list[str]:
    if is_ip_resource(target):
        return ip_to_asns(client, target)

    try:
        infos = socket.getaddrinfo(target, None, proto=socket.IPPROTO_TCP)
    except socket.gaierror as exc:
        raise InvalidUsageError(f"Cannot resolve {target!r}: {exc}") from exc

    asns: list[str] = []
    for ip in sorted({info[4][0] for info in infos}):
        debug(f"{target} resolves to {ip}")
        asns.extend(ip_to_asns(client, ip))
    if not asns:
        warning(f"No origin AS found for {target}")
    return asns


def rpki_command(
    ctx: typer.Context,
    targets: list[str] = typer.Argument(
        help="AS numbers, IP addresses/prefixes or host names."
    ),
    peers: bool = typer.Option(
        False, "--peers", "-P", help="Also report on import/export peers."
    ),
    csv_output: bool = typer.Option(
        False, "--csv", help="Emit prefix rows as CSV instead of Markdown."
    ),
) -> None:
    """Report on routing consistency and RPKI validity of ASes.

    Example::

        ripex rpki AS3333 193.0.6.139 > rpki.md
        ripex --timeout 60 rpki --peers 1136
    """
    with open_client(ctx) as client:
        asns = resolve_targets(client, targets)
        results: list[tuple[str, AsResult]] = []
        for asn in asns:
            outcome: AsResult
            try:
                outcome = rpki(client, asn)
            except RipexError as exc:
                warning(f"AS{asn}: {exc}")
                outcome = exc
            results.append((asn, outcome))

    if csv_output:
        print_data(build_csv(results))
    else:
        print_data(build_report(results, verbose=peers))
