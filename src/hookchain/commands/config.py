"""``hookchain config`` -- read and edit the user configuration file."""

from __future__ import annotations

from typing import Any

import typer

from hookchain.exit_codes import EXIT_INVALID_USAGE
from hookchain.output import error, format_response, get_output, info, success


config_app = typer.Typer(no_args_is_help=True)

_TRUE_WORDS = ("true", "1", "yes", "on")


@config_app.command("show")
def config_show() -> None:
    """Print the user configuration (defaults filled in)."""
    from hookchain.config import get_config_dir, load_global_config

    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("path")
def config_path() -> None:
    """Print the location of the user config file."""
    from hookchain.config import global_config_path

    get_output().print_data(str(global_config_path()))


def _coerce(current: Any, raw: str) -> Any:
    if isinstance(current, bool):
        return raw.strip().lower() in _TRUE_WORDS
    if isinstance(current, list):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return raw


def _fail(message: str) -> None:
    error(message)
    raise typer.Exit(code=EXIT_INVALID_USAGE)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted key, e.g. 'plugins.disabled'."),
    value: str = typer.Argument(help="New value; list keys take comma-separated items."),
) -> None:
    """Change one setting in the user config file.

    The value takes the type of the setting it replaces. Booleans accept
    true/1/yes/on, lists are comma-separated.

    Example::

        hookchain config set warn_inline_hooks false
        hookchain config set plugins.enabled example,audit
        hookchain config set default_plugin_module my_host.plugins
    """
    from pydantic import ValidationError

    from hookchain.config import load_global_config, save_global_config
    from hookchain.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")
    *parents, leaf = key.split(".")

    section = data
    for name in parents:
        section = section.get(name)
        if not isinstance(section, dict):
            _fail(f"Invalid config key: {key}")

    if leaf not in section or isinstance(section[leaf], dict):
        _fail(f"Unknown config key: {key}")

    section[leaf] = _coerce(section[leaf], value)
    try:
        updated = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        _fail(f"Validation error: {exc}")

    save_global_config(updated)
    success(f"Set {key} = {section[leaf]}")
