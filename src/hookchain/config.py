"""Where hookchain keeps its settings, and how the layers are combined.

Settings live in a :class:`~hookchain.models.GlobalConfig`. It is assembled
from, lowest precedence first:

1. model defaults;
2. the user file ``config.json`` in :func:`get_config_dir`;
3. ``hookchain.json`` in the working directory (merged key by key);
4. ``HOOKCHAIN_*`` environment variables;
5. command-line flags.

On Linux and the BSDs the directories follow XDG (``$XDG_CONFIG_HOME`` and
``$XDG_DATA_HOME``); elsewhere everything sits under ``~/.hookchain``. The
user file is replaced atomically on save.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from hookchain.exceptions import ConfigError
from hookchain.models import GlobalConfig

_APP_NAME = "hookchain"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "hookchain.json"

ENV_LOG_LEVEL = "HOOKCHAIN_LOG_LEVEL"
ENV_PLUGINS = "HOOKCHAIN_PLUGINS"
ENV_PLUGINS_MODULE = "HOOKCHAIN_PLUGINS_MODULE"

# kind -> (XDG variable, default location under $HOME, subdirectory of ~/.hookchain)
_DIRS: dict[str, tuple[str, tuple[str, ...], str]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), ""),
    "data": ("XDG_DATA_HOME", (".local", "share"), "data"),
}


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_segments, fallback_sub = _DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var) or str(Path.home().joinpath(*home_segments))
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback_sub:
            path = path / fallback_sub
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory of the user config file, created on demand."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Directory for crash logs, created on demand."""
    return _app_dir("data")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* without ever leaving a half-written file.

    The content goes to a sibling temp file first, which is then renamed
    over *path*. The temp file is removed if anything fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


def load_global_config() -> GlobalConfig:
    """Read the user config file; defaults when it does not exist.

    Raises:
        ConfigError: The file is not JSON or does not match the model.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(_read_json(path, "global config"))
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    _atomic_write(global_config_path(), json.dumps(config.model_dump(mode="json"), indent=2) + "\n")


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./hookchain.json`` if present.

    Raises:
        ConfigError: The file is not JSON or not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if os.environ.get(ENV_LOG_LEVEL):
        overrides["log_level"] = os.environ[ENV_LOG_LEVEL]
    if os.environ.get(ENV_PLUGINS):
        names = [name.strip() for name in os.environ[ENV_PLUGINS].split(",")]
        overrides["plugins"] = {"enabled": [name for name in names if name]}
    if os.environ.get(ENV_PLUGINS_MODULE):
        overrides["default_plugin_module"] = os.environ[ENV_PLUGINS_MODULE]
    return overrides


def resolve_config(
    cli_plugins_module: Optional[str] = None,
    cli_log_level: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Combine every configuration layer into one :class:`GlobalConfig`.

    ``None`` CLI arguments leave the lower layers untouched.

    Raises:
        ConfigError: A file is invalid or the merged result fails validation.
    """
    data = load_global_config().model_dump(mode="json")
    data = _merge(data, load_project_config() or {})
    data = _merge(data, _env_overrides())

    cli: dict[str, Any] = {}
    if cli_plugins_module is not None:
        cli["default_plugin_module"] = cli_plugins_module
    if cli_log_level is not None:
        cli["log_level"] = cli_log_level
    if cli_format is not None:
        cli["output"] = {"format": cli_format}
    data = _merge(data, cli)

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
