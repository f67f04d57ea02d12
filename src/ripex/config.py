"""Persistent settings: where ripex keeps files and how settings combine.

Files:

* ``config.json`` in the config directory, holding a
  :class:`~ripex.models.GlobalConfig`.
* crash logs under ``logs/`` in the data directory.
* cache snapshots in the package ``data/`` directory, or in
  ``cache.directory`` when that is configured.

On Linux and the BSDs the config and data directories follow XDG
(``$XDG_CONFIG_HOME/ripex``, ``$XDG_DATA_HOME/ripex``); elsewhere both live
under ``~/.ripex``.

Every write goes through :func:`atomic_write`, so a crash never leaves a
truncated config file or snapshot behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional, Union

from ripex.exceptions import ConfigError
from ripex.models import GlobalConfig

_APP_NAME = "ripex"
_CONFIG_FILE = "config.json"

# XDG variable and its default below $HOME, per directory kind.
_XDG_DIRS = {
    "config": ("XDG_CONFIG_HOME", (".config",)),
    "data": ("XDG_DATA_HOME", (".local", "share")),
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    if _is_xdg_platform():
        env_var, fallback = _XDG_DIRS[kind]
        root = Path(os.environ.get(env_var) or Path.home().joinpath(*fallback))
        path = root / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if kind != "config":
            path = path / kind
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory holding ``config.json`` (created on demand)."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory holding crash logs (created on demand)."""
    return _app_dir("data")


def get_snapshot_dir(config: GlobalConfig) -> Optional[Path]:
    """Return the configured snapshot directory, or ``None`` for the package default."""
    if config.cache.directory:
        return Path(config.cache.directory).expanduser()
    return None


# --- Writing ---


def atomic_write(path: Path, data: Union[str, bytes]) -> None:
    """Replace *path* with *data* in one step.

    The data goes to a hidden temp file next to *path*, is fsynced, and is
    then renamed over the target.  ``str`` is written as UTF-8.  Parent
    directories are created.  On failure the temp file is removed and the
    original exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = data.encode("utf-8") if isinstance(data, str) else data

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


# --- Global config ---


def _config_path() -> Path:
    return get_config_dir() / _CONFIG_FILE


def load_global_config() -> GlobalConfig:
    """Read ``config.json``; defaults when the file does not exist.

    Raises:
        ConfigError: If the file is not valid JSON or does not validate.
    """
    path = _config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except ValueError as exc:
        # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors.
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    atomic_write(_config_path(), text)


# --- Effective settings ---

_ENV_OVERRIDES = (
    ("RIPEX_BASE_URL", "base_url"),
    ("RIPEX_DB_BASE_URL", "db_base_url"),
    ("RIPEX_SOURCEAPP", "sourceapp"),
)


def resolve_config(
    cli_format: Optional[str] = None,
    cli_timeout: Optional[int] = None,
    cli_snapshot: Optional[str] = None,
    no_cache: bool = False,
) -> GlobalConfig:
    """Combine the stored config with environment and command-line overrides.

    Later sources win: ``config.json``, then the ``RIPEX_*`` variables in
    :data:`_ENV_OVERRIDES`, then the ``--json``/``--plain``, ``--timeout``,
    ``--snapshot`` and ``--no-cache`` flags.  Empty environment variables
    are ignored.
    """
    config = load_global_config()

    for env_var, field in _ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if value:
            setattr(config.request, field, value)

    if cli_format is not None:
        config.output.format = cli_format
    if cli_timeout is not None:
        config.request.timeout = cli_timeout
    if cli_snapshot is not None:
        config.cache.snapshot = cli_snapshot
    if no_cache:
        config.cache.enabled = False
    return config
