"""ripex -- reports and queries on RIPE NCC network information.

This package wraps the RIPEstat Data API (https://stat.ripe.net/data/) with
a caching HTTP client, small reshaping helpers for the returned JSON, and a
Typer CLI that composes several data calls into Markdown reports.

Typical workflow::

    ripex stat network-info 193.0.6.139
    ripex --snapshot warm.cache rpki AS3333 > rpki.md

Modules:
    app: Typer application and CLI entry point.
    cache: In-memory response cache with TTL lookups and snapshots.
    client: RIPEstat HTTP client.
    stat: Endpoint wrappers and reshaping helpers.
    report: Markdown report builders.
    config: XDG-aware configuration management.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
