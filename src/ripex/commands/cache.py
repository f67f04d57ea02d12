"""Cache commands -- inspect and manage response cache snapshots.

Provides the ``ripex cache`` sub-command group.  The cache lives in memory
for one invocation, so these commands are mostly useful together with
the global ``--snapshot NAME`` flag, which loads the snapshot before the
command runs and saves it back afterwards::

    ripex --snapshot warm.cache rpki AS3333     # fill the snapshot
    ripex --snapshot warm.cache cache keys      # list what is in it
    ripex --snapshot warm.cache cache delete URL

Snapshot names are bare file names inside the snapshot directory.
"""

from __future__ import annotations

import typer

from ripex.commands import get_config, get_context_cache
from ripex.exit_codes import EXIT_NOT_FOUND
from ripex.output import error, format_response, info, print_data, success


cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("show")
def cache_show(ctx: typer.Context) -> None:
    """Show the number of cached entries and cache settings."""
    config = get_config(ctx)
    stats = get_context_cache(ctx).stats()
    stats["enabled"] = config.cache.enabled
    stats["ttl_seconds"] = config.cache.ttl_seconds
    stats["snapshot"] = config.cache.snapshot
    format_response(stats)


@cache_app.command("keys")
def cache_keys(ctx: typer.Context) -> None:
    """List the cached request URLs, one per line."""
    for key in get_context_cache(ctx).keys():
        print_data(key)


@cache_app.command("save")
def cache_save(
    ctx: typer.Context,
    name: str = typer.Argument(help="Snapshot file name (no directories)."),
) -> None:
    """Write the current cache contents to a snapshot."""
    cache = get_context_cache(ctx)
    cache.save(name)
    success(f"Saved {len(cache)} entries to {cache.snapshot_path(name)}")


@cache_app.command("load")
def cache_load(
    ctx: typer.Context,
    name: str = typer.Argument(help="Snapshot file name (no directories)."),
) -> None:
    """Replace the cache contents with a snapshot.

    The cache is emptied even when the snapshot does not exist.
    """
    cache = get_context_cache(ctx)
    if not cache.read(name):
        error(f"Snapshot not found: {cache.snapshot_path(name)}")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    success(f"Loaded {len(cache)} entries from {cache.snapshot_path(name)}")


@cache_app.command("delete")
def cache_delete(
    ctx: typer.Context,
    url: str = typer.Argument(help="Cached request URL."),
) -> None:
    """Remove one entry.  Succeeds whether or not the URL was cached."""
    cache = get_context_cache(ctx)
    if url not in cache:
        info(f"Not cached: {url}")
    cache.delete(url)
    success(f"Deleted {url}")


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Remove all entries."""
    cache = get_context_cache(ctx)
    count = len(cache)
    cache.clear()
    success(f"Cleared {count} entries.")
