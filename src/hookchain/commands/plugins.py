"""Plugin commands -- list the plugins handed to the hook engine.

Also home to :func:`load_plugin_manager`, which the other command modules
use to resolve configuration and discover plugins the same way.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import typer

from hookchain.output import error, get_output

if TYPE_CHECKING:
    from hookchain.plugins import PluginManager


plugins_app = typer.Typer(no_args_is_help=True)


def load_plugin_manager(ctx: Optional[typer.Context]) -> PluginManager:
    """Resolve configuration and discover plugins for a CLI command.

    Reads ``plugins_module`` from the root callback's ``ctx.obj``.

    Returns:
        A :class:`~hookchain.plugins.PluginManager` with plugins loaded.

    Raises:
        typer.Exit: With the error's exit code when configuration or
            discovery fails.
    """
    from hookchain.config import resolve_config
    from hookchain.exceptions import HookchainError
    from hookchain.plugins import PluginManager

    obj = (ctx.obj if ctx is not None else None) or {}
    try:
        config = resolve_config(cli_plugins_module=obj.get("plugins_module"))
        manager = PluginManager(warn_inline_hooks=config.warn_inline_hooks)
        manager.discover(config)
    except HookchainError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    return manager


@plugins_app.command("list")
def plugins_list(ctx: typer.Context) -> None:
    """List plugins in declaration order.

    The last plugin listed is the first one consulted when hooks run.

    Example::

        hookchain plugins list
        hookchain --plugins-module my_host.plugins plugins list
    """
    manager = load_plugin_manager(ctx)

    headers = ["Position", "Id", "Categories", "Sources", "Description"]
    rows: list[list[str]] = []
    for position, entry in enumerate(manager.list_plugins()):
        rows.append([
            str(position),
            entry["id"],
            entry["categories"] or "-",
            entry["sources"] or "-",
            entry["description"] or "-",
        ])

    get_output().print_table(headers, rows, title=f"Plugins ({len(rows)})")
