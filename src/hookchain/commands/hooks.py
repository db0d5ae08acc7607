"""Hook commands -- inspect handler order and exercise the config hooks.

``hookchain hooks handlers CATEGORY HOOK`` shows the order in which the
engine would call the handlers of one hook. ``hookchain hooks check-config
FILE`` runs the ``config`` hooks of every plugin against a JSON user config.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer

from hookchain.commands.plugins import load_plugin_manager
from hookchain.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INVALID_USAGE
from hookchain.output import error, get_output, info, success


hooks_app = typer.Typer(no_args_is_help=True)


@hooks_app.command("handlers")
def hooks_handlers(
    ctx: typer.Context,
    category: str = typer.Argument(help="Hook category, e.g. 'network'."),
    hook: str = typer.Argument(help="Hook name within the category."),
) -> None:
    """Show the handlers of CATEGORY.HOOK in dispatch order.

    Loading a category imports the plugin modules that provide it, so
    broken hook sources surface here.

    Example::

        hookchain hooks handlers config validate_user_config
    """
    from hookchain.exceptions import HookchainError
    from hookchain.hooks.handlers import handler_name

    hook_manager = load_plugin_manager(ctx).get_hook_manager()
    try:
        refs = asyncio.run(hook_manager.describe_handlers(category, hook))
    except HookchainError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not refs:
        info(f"No handlers for {category}.{hook}.")
        return

    headers = ["Order", "Contributor", "Handler"]
    rows = [
        [str(order), ref.contributor, handler_name(ref.handler)]
        for order, ref in enumerate(refs)
    ]
    get_output().print_table(headers, rows, title=f"{category}.{hook}")


async def _check_user_config(hook_manager: Any, user_config: Any) -> tuple[Any, list[str]]:
    async def identity(config: Any) -> Any:
        return config

    extended = await hook_manager.run_handler_chain(
        "config", "extend_user_config", [user_config], identity
    )
    results = await hook_manager.run_sequential_handlers(
        "config", "validate_user_config", [extended]
    )
    errors = [message for result in results for message in (result or [])]
    return extended, errors


@hooks_app.command("check-config")
def hooks_check_config(
    ctx: typer.Context,
    path: Path = typer.Argument(help="JSON file holding the user config."),
) -> None:
    """Run every plugin's config hooks against a user config file.

    The config is passed through the ``extend_user_config`` chain and the
    result is validated by every ``validate_user_config`` handler. Exits
    non-zero when any handler reports an error.

    Example::

        hookchain hooks check-config ./user-config.json
    """
    from hookchain.exceptions import HookchainError

    try:
        user_config = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        error(f"Cannot read {path}: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    hook_manager = load_plugin_manager(ctx).get_hook_manager()
    try:
        extended, errors = asyncio.run(_check_user_config(hook_manager, user_config))
    except HookchainError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if errors:
        for message in errors:
            error(message)
        raise typer.Exit(code=EXIT_GENERIC_FAILURE)

    success("User config is valid.")
    get_output().format_response(extended)
