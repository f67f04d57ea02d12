"""Pydantic configuration models shared across ripex modules.

The models are serialised as JSON in the user's config directory and
resolved by :func:`ripex.config.resolve_config`:

    :class:`RequestConfig`, :class:`OutputConfig`, :class:`CacheConfig`,
    and the top-level :class:`GlobalConfig`.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://stat.ripe.net/data/"
DEFAULT_SOURCEAPP = "github-ripex"
DEFAULT_DB_BASE_URL = "https://rest.db.ripe.net/"


class RequestConfig(BaseModel):
    """HTTP settings for RIPEstat data calls and RIPE Database queries."""

    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="RIPEstat Data API base URL"
    )
    sourceapp: str = Field(
        default=DEFAULT_SOURCEAPP,
        description="Value of the sourceapp query parameter sent with every call",
    )
    db_base_url: str = Field(
        default=DEFAULT_DB_BASE_URL, description="RIPE Database REST API base URL"
    )
    timeout: int = Field(default=10, description="Request timeout in seconds")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class CacheConfig(BaseModel):
    """Response cache settings stored in :class:`GlobalConfig`.

    ``ttl_seconds`` of ``None`` means entries never go stale; any integer
    (including a negative one, which forces a refresh) switches lookups to
    :meth:`~ripex.cache.ResponseCache.get_with_ttl`.
    """

    enabled: bool = Field(default=True, description="Enable response caching")
    ttl_seconds: Optional[int] = Field(
        default=None, description="Maximum entry age in seconds (none: no expiry)"
    )
    directory: Optional[str] = Field(
        default=None,
        description="Snapshot directory (default: the package data directory)",
    )
    snapshot: Optional[str] = Field(
        default=None,
        description="Snapshot loaded before and saved after every command",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/ripex/config.json``.

    Loaded and saved by :func:`~ripex.config.load_global_config` and
    :func:`~ripex.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by environment variables or
    CLI flags. See :func:`~ripex.config.resolve_config` for the full
    precedence chain.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
