"""Markdown report on routing consistency and RPKI validity per AS.

The report is plain Markdown meant for pandoc: a YAML metadata block,
then per AS a prefixes table (BGP vs. RIPE Database vs. RPKI) with a
frequency table, and optionally the import/export peer tables.  Tables
use the pandoc *simple table* layout produced by :func:`table`.
:func:`build_csv` renders the same prefix rows as CSV.
"""

from __future__ import annotations

import csv
import io
from collections import Counter
from datetime import date
from typing import Any, Iterable, Optional, Union

from ripex.exceptions import RipexError

AsResult = Union[dict[str, Any], RipexError]
"""Either the :func:`ripex.stat.rpki` data of an AS or the error it raised."""


def cell(value: Any) -> str:
    """Render a JSON scalar the way the tables show it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def column_widths(rows: list[list[str]]) -> list[int]:
    """Return the widest cell of every column."""
    widths: list[int] = []
    for row in rows:
        for idx, text in enumerate(row):
            if idx == len(widths):
                widths.append(0)
            widths[idx] = max(widths[idx], len(text))
    return widths


def aligned(rows: list[list[str]]) -> list[str]:
    """Pad every cell to its column width plus one space, one string per row."""
    widths = column_widths(rows)
    return ["".join(text.ljust(widths[idx] + 1) for idx, text in enumerate(row)) for row in rows]


def table(rows: list[list[str]]) -> str:
    """Render *rows* (header first) as a pandoc simple table.

    The separator under the header has one dash run per column, as wide as
    the column, so the table reads the same in a terminal and in pandoc.
    """
    lines = [line.rstrip() for line in aligned(rows)]
    separator = " ".join("-" * w for w in column_widths(rows))
    return "\n".join([lines[0], separator, *lines[1:]]) + "\n"


def front_matter(today: Optional[date] = None) -> str:
    """Return the pandoc YAML metadata block."""
    today = today or date.today()
    return f"---\ntitle: RPKI check\nauthor: ripex\ndate: {today.isoformat()}\n...\n\n"


def roa_summary(roas: Iterable[dict[str, Any]]) -> str:
    """Summarize ROAs as ``prefix-maxlength-origin`` words."""
    return " ".join(
        f"{roa.get('prefix')}-{roa.get('max_length')}-{roa.get('origin')}" for roa in roas
    )


def routes_section(data: dict[str, Any]) -> str:
    """Prefixes table plus frequency stats for one AS."""
    asn = data.get("asn")
    prefixes = data.get("prefixes", {})

    rows = sorted(
        [
            prefix,
            cell(rec.get("in_bgp")),
            cell(rec.get("in_whois")),
            cell(rec.get("rpki")),
            roa_summary(rec.get("roas", [])),
        ]
        for prefix, rec in prefixes.items()
    )
    counts = Counter(
        (cell(rec.get("in_bgp")), cell(rec.get("in_whois")), cell(rec.get("rpki")))
        for rec in prefixes.values()
    )
    stats = sorted([str(n), *combo] for combo, n in counts.items())

    return (
        f"## AS{asn} prefixes\n\n"
        + table([["prefix", "bgp", "whois", "rpki", "roas"], *rows])
        + "\nTable: as routing consistency\n\n\n"
        + table([["count", "bgp", "whois", "rpki"], *stats])
        + "\nTable: consistency stats.\n\n\n"
    )


def peers_section(data: dict[str, Any], kind: str) -> str:
    """Peer table plus frequency stats for ``"imports"`` or ``"exports"``."""
    if kind not in ("imports", "exports"):
        raise ValueError(f"kind must be 'imports' or 'exports', not {kind!r}")

    asn = data.get("asn")
    peers = data.get(kind, [])
    if not peers:
        return f"\n## AS{asn} {kind}\n\nNo peers found.\n\n"

    rows = sorted(
        [cell(p.get("peer")), cell(p.get("in_bgp")), cell(p.get("in_whois"))] for p in peers
    )
    counts = Counter((cell(p.get("in_bgp")), cell(p.get("in_whois"))) for p in peers)
    stats = sorted([str(n), *combo] for combo, n in counts.items())

    return (
        f"\n## AS{asn} {kind}\n\n"
        + table([["peer", "bgp", "whois"], *rows])
        + f"\nTable: peer {kind}.\n\n\n"
        + table([["count", "bgp", "whois"], *stats])
        + f"\nTable: {kind} stats.\n\n\n"
    )


def as_section(asn: str, result: AsResult, verbose: bool = False) -> str:
    """Report section for one AS, or an inline error block."""
    if isinstance(result, RipexError):
        return f"# AS{asn}\n\nError: {result}\n\n"

    parts = [f"# AS{asn}\n\n", routes_section(result)]
    if verbose:
        parts.append(peers_section(result, "imports"))
        parts.append(peers_section(result, "exports"))
    return "".join(parts)


def build_report(
    results: list[tuple[str, AsResult]],
    verbose: bool = False,
    today: Optional[date] = None,
) -> str:
    """Assemble the full Markdown report.

    Args:
        results: ``(asn, data_or_error)`` pairs in report order.
        verbose: Also include the peer import/export tables.
        today: Date for the metadata block (defaults to today).
    """
    return front_matter(today) + "".join(as_section(asn, res, verbose) for asn, res in results)


CSV_FIELDS = ["asn", "prefix", "bgp", "whois", "rpki", "roas", "error"]


def build_csv(results: list[tuple[str, AsResult]]) -> str:
    """Render the prefix rows of all ASes as CSV, one line per prefix.

    An AS that failed contributes a single row with only ``asn`` and
    ``error`` filled in.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_FIELDS)
    for asn, result in results:
        if isinstance(result, RipexError):
            writer.writerow([asn, "", "", "", "", "", str(result)])
            continue
        for prefix, rec in sorted(result.get("prefixes", {}).items()):
            writer.writerow([
                asn,
                prefix,
                cell(rec.get("in_bgp")),
                cell(rec.get("in_whois")),
                cell(rec.get("rpki")),
                roa_summary(rec.get("roas", [])),
                "",
            ])
    return buf.getvalue()
