"""Output layer: data on stdout, diagnostics on stderr.

Reports and endpoint payloads are the only things written to stdout, so
``ripex rpki AS3333 | pandoc -o rpki.pdf`` works unchanged.  Everything
else (cache hits, requests, warnings, errors) goes to stderr.

The format is picked once per invocation:

* ``json`` -- indented JSON, suitable for ``jq``.
* ``plain`` -- ``key<TAB>value`` lines, one list element per line.
* ``rich`` -- syntax-highlighted JSON on an interactive terminal.
* ``auto`` -- ``rich`` on a colour-capable TTY, ``plain`` otherwise.

``NO_COLOR`` (any value), ``TERM=dumb`` and ``--no-color`` turn off all
styling.  :func:`~ripex.app.main_callback` builds one
:class:`OutputManager` and installs it with :func:`set_output`; the rest of
the code calls the module-level helpers (:func:`info`, :func:`debug`, ...).
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """Output formats selectable with ``--json``/``--plain`` or config."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Writes data and diagnostics for one CLI invocation.

    Args:
        format: Requested format; ``AUTO`` is resolved immediately.
        no_color: Disable styling even on a terminal.
        quiet: Drop ``info`` and ``success`` messages.
        verbose: Show ``debug`` messages.
        output_file: Write data to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file
        self._format = _resolve_format(format, self._no_color)

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data (stdout or --output file)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any) -> None:
        """Render a decoded payload in the active format.

        With ``--output`` the file is replaced by the payload: strings are
        written as-is, anything else as JSON.
        """
        if self._output_file:
            text = data if isinstance(data, str) else _to_json(data)
            _write_file(self._output_file, text, mode="w")
        elif self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.RICH and isinstance(data, (dict, list)):
            self._stdout.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
        elif self._format == OutputFormat.RICH:
            self._stdout.print(str(data))
        else:
            for line in _plain_lines(data):
                self.print_data(line)

    def print_data(self, text: str) -> None:
        """Write *text* verbatim (appending to the ``--output`` file if set)."""
        if self._output_file:
            _write_file(self._output_file, text, mode="a")
        else:
            print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit(message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit(message, style="green")

    def warning(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._emit(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._emit(message, label="Error:", style="bold red")

    def debug(self, message: str) -> None:
        """Shown only with ``--verbose``."""
        if self._verbose:
            self._emit(message, label="[debug]", style="dim")

    def _emit(self, message: str, label: str = "", style: str = "") -> None:
        if self._no_color:
            print(f"{label} {message}" if label else message, file=sys.stderr, flush=True)
            return
        if label:
            # "[debug]" would otherwise be read as a markup tag.
            tag = label.replace("[", "\\[")
            self._stderr.print(f"[{style}]{tag}[/{style}] {message}")
        elif style:
            self._stderr.print(f"[{style}]{message}[/{style}]")
        else:
            self._stderr.print(message)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _plain_lines(data: Any) -> list[str]:
    """Flatten a payload into tab-separated lines.

    Nested values of a dict are kept on their line as compact JSON.
    """
    if isinstance(data, dict):
        return [
            f"{key}\t{json.dumps(value, ensure_ascii=False, default=str)}"
            if isinstance(value, (dict, list))
            else f"{key}\t{value}"
            for key, value in data.items()
        ]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _write_file(path: str, text: str, mode: str) -> None:
    with open(path, mode, encoding="utf-8") as f:
        f.write(text)
        if not text.endswith("\n"):
            f.write("\n")


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager` (a default one if none is)."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; tests call this between runs."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
