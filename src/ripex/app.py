"""The ``ripex`` command.

Sub-commands live in :mod:`ripex.commands`; this module owns the root
options.  Before any sub-command runs, :func:`main_callback`:

1. resolves the effective :class:`~ripex.models.GlobalConfig`,
2. installs the :class:`~ripex.output.OutputManager`,
3. creates the :class:`~ripex.cache.ResponseCache` for this invocation,
4. with a snapshot configured, loads it and arranges for it to be saved
   once the sub-command has finished.

:func:`main` is the console-script entry point.  It turns
:class:`~ripex.exceptions.RipexError` into an error line and its exit
code; anything else leaves a traceback in ``<data dir>/logs/``.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import typer

from ripex import __version__
from ripex.exit_codes import EXIT_GENERIC_FAILURE

if TYPE_CHECKING:
    from ripex.cache import ResponseCache
    from ripex.models import GlobalConfig


app = typer.Typer(
    name="ripex",
    help="Query RIPEstat and the RIPE Database; report on routing and RPKI validity.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from ripex.commands.cache import cache_app  # noqa: E402
from ripex.commands.config import config_app  # noqa: E402
from ripex.commands.db import db_app  # noqa: E402
from ripex.commands.rpki import rpki_command  # noqa: E402
from ripex.commands.stat import stat_app  # noqa: E402

app.add_typer(stat_app, name="stat", help="Run a single RIPEstat data call.")
app.command("rpki")(rpki_command)
app.add_typer(db_app, name="db", help="Query the RIPE Database.")
app.add_typer(cache_app, name="cache", help="Inspect the response cache and its snapshots.")
app.add_typer(config_app, name="config", help="Show or change stored settings.")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"ripex {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Print the version."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print data as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="No colours or styling."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Also print requests and cache activity."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write data to this file instead of stdout."
    ),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", "-t", help="Seconds to wait for each RIPEstat call."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Always query RIPEstat, bypassing the cache."
    ),
    snapshot: Optional[str] = typer.Option(
        None,
        "--snapshot",
        "-s",
        help="Load the cache from this snapshot first and save it back afterwards.",
    ),
) -> None:
    """Query RIPEstat and report on RIPE NCC network information."""
    from ripex.config import resolve_config

    fmt = "json" if json_output else "plain" if plain_output else None
    config = resolve_config(
        cli_format=fmt, cli_timeout=timeout, cli_snapshot=snapshot, no_cache=no_cache
    )
    _install_output(config, no_color, quiet, verbose, output_file)
    cache = _install_cache(config)

    ctx.ensure_object(dict)
    ctx.obj.update(config=config, cache=cache, force=force)

    if config.cache.snapshot:
        _warm_start(ctx, cache, config.cache.snapshot)


def _install_output(
    config: GlobalConfig,
    no_color: bool,
    quiet: bool,
    verbose: bool,
    output_file: Optional[str],
) -> None:
    from ripex.exceptions import ConfigError
    from ripex.output import OutputFormat, OutputManager, set_output

    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        raise ConfigError(f"Invalid output format: {config.output.format!r}") from None

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )


def _install_cache(config: GlobalConfig) -> ResponseCache:
    from ripex.cache import ResponseCache, set_cache
    from ripex.config import get_snapshot_dir

    cache = ResponseCache(get_snapshot_dir(config))
    set_cache(cache)
    return cache


def _warm_start(ctx: typer.Context, cache: ResponseCache, name: str) -> None:
    """Load *name* into *cache* and schedule saving it when the command ends.

    A missing snapshot is not an error: the command starts with an empty
    cache and the snapshot is created on save.

    When the command itself failed, a failing save is only reported so the
    original error still decides the exit code.
    """
    from ripex.exceptions import CacheError
    from ripex.output import debug, error

    if not cache.read(name):
        debug(f"No snapshot {name!r} yet, starting with an empty cache")

    def _save() -> None:
        pending = sys.exc_info()[1]
        try:
            cache.save(name)
        except CacheError as exc:
            if pending is None:
                raise
            error(f"Snapshot {name!r} not saved: {exc}")

    ctx.call_on_close(_save)


def _on_sigint(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    sys.exit(130)


def _write_crash_log(exc: Exception) -> str:
    """Save the traceback of *exc* under ``<data dir>/logs`` and return the path."""
    from ripex.config import get_data_dir

    log_path = get_data_dir() / "logs" / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_path.write_text("".join(traceback.format_exception(exc)), encoding="utf-8")
    return str(log_path)


def main() -> None:
    """Entry point of the ``ripex`` console script."""
    from ripex.exceptions import RipexError
    from ripex.output import error

    signal.signal(signal.SIGINT, _on_sigint)
    try:
        app()
    except KeyboardInterrupt:
        _on_sigint(signal.SIGINT, None)
    except RipexError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
