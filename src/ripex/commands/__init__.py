"""Built-in CLI command groups for ripex.

Each sub-module defines a Typer app (or a single command) that
:func:`ripex.app.main` registers on the root application:

* :mod:`~ripex.commands.stat` -- ``ripex stat <data call> RESOURCE``.
* :mod:`~ripex.commands.rpki` -- ``ripex rpki TARGET...`` report.
* :mod:`~ripex.commands.db` -- ``ripex db lookup|search|template|abuse-contact``.
* :mod:`~ripex.commands.cache` -- ``ripex cache show|keys|save|load|delete|clear``.
* :mod:`~ripex.commands.config` -- ``ripex config show|set|reset``.

The commands share the configuration and cache installed by
:func:`ripex.app.main_callback` through ``ctx.obj``.
"""

from __future__ import annotations

from typing import Any

import typer

from ripex.cache import ResponseCache, get_cache
from ripex.client import DbClient, StatClient
from ripex.config import resolve_config
from ripex.models import GlobalConfig


def get_config(ctx: typer.Context) -> GlobalConfig:
    """Return the resolved config stored by the root callback (or resolve it now)."""
    obj = ctx.find_root().obj or {}
    config = obj.get("config")
    if config is None:
        config = resolve_config()
    return config


def get_context_cache(ctx: typer.Context) -> ResponseCache:
    """Return the cache installed by the root callback (or the process-wide one)."""
    obj = ctx.find_root().obj or {}
    cache = obj.get("cache")
    return cache if cache is not None else get_cache()


def _client_options(ctx: typer.Context) -> dict[str, Any]:
    obj = ctx.find_root().obj or {}
    config = get_config(ctx)
    return {
        "config": config.request,
        "cache": get_context_cache(ctx) if config.cache.enabled else None,
        "ttl_seconds": config.cache.ttl_seconds,
        "transport": obj.get("transport"),
    }


def open_client(ctx: typer.Context) -> StatClient:
    """Create a :class:`StatClient` wired to the active config and cache.

    Returns an unopened client; use it as a context manager.  An httpx
    transport stored under ``ctx.obj["transport"]`` is passed through.
    """
    return StatClient(**_client_options(ctx))


def open_db_client(ctx: typer.Context) -> DbClient:
    """Like :func:`open_client`, for RIPE Database queries."""
    return DbClient(**_client_options(ctx))
