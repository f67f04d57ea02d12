"""Config commands -- read and change the stored settings.

Provides the ``ripex config`` group.  Settings live in ``config.json`` as a
:class:`~ripex.models.GlobalConfig` and are addressed as ``section.field``::

    ripex config set request.timeout 60
    ripex config set cache.ttl_seconds 3600
    ripex config set cache.directory ~/.cache/ripex
    ripex config set cache.snapshot warm.cache

Environment variables and command-line flags override these values per
invocation; ``config show`` prints only what is stored.
"""

from __future__ import annotations

from typing import Any

import typer

from ripex.config import get_config_dir, load_global_config, save_global_config
from ripex.exit_codes import EXIT_INVALID_USAGE
from ripex.models import GlobalConfig
from ripex.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

# Optional fields whose current value may be None but which hold integers.
_OPTIONAL_INT_FIELDS = {"cache.ttl_seconds"}


@config_app.command("show")
def config_show() -> None:
    """Print the stored settings."""
    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Setting as section.field, e.g. request.timeout."),
    value: str = typer.Argument(help="New value; 'none' clears an optional setting."),
) -> None:
    """Change one setting.

    The value is converted to the type of the current one (bool, int or
    str) and the whole config is validated again before it is written.
    """
    data = load_global_config().model_dump(mode="json")
    section, _, field = key.partition(".")
    fields = data.get(section)
    if not isinstance(fields, dict) or field not in fields:
        _usage_error(f"Unknown config key: {key}")

    fields[field] = _coerce(key, fields[field], value)
    try:
        config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        _usage_error(f"Invalid value for {key}: {exc}")

    save_global_config(config)
    success(f"{key} = {fields[field]}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Restore all settings to their defaults (asks first unless --force)."""
    force = (ctx.find_root().obj or {}).get("force", False)
    if not force and not typer.confirm("Restore default settings?"):
        info("Nothing changed.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Settings restored to defaults.")


def _coerce(key: str, current: Any, value: str) -> Any:
    optional_int = key in _OPTIONAL_INT_FIELDS
    if value.lower() == "none" and (current is None or optional_int):
        return None
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes", "on")
    if isinstance(current, int) or optional_int:
        try:
            return int(value)
        except ValueError:
            _usage_error(f"{key} takes an integer, not {value!r}")
    return value


def _usage_error(message: str) -> None:
    error(message)
    raise typer.Exit(code=EXIT_INVALID_USAGE)
