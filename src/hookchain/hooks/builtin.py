"""The host's built-in plugin.

It is always first in the plugin list, so its handlers run after every
other plugin's. Its categories are provided inline, which is why the loader
does not warn about them.

Config hooks contributed here:

* ``extend_user_config(config, next)`` -- terminal link of the chain; hands
  the config on unchanged.
* ``validate_user_config(config)`` -- structural checks on the user config,
  returning a list of error strings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Awaitable, Callable

from hookchain.models import BUILTIN_PLUGIN_ID, CONFIG_CATEGORY, HookPlugin


async def extend_user_config(
    config: dict[str, Any], next_: Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]
) -> dict[str, Any]:
    return await next_(config)


async def validate_user_config(config: Any) -> list[str]:
    if not isinstance(config, Mapping):
        return [f"User config must be an object, got {type(config).__name__}"]

    errors: list[str] = []
    plugins = config.get("plugins")
    if plugins is not None and not isinstance(plugins, list):
        errors.append("'plugins' must be a list of plugin ids")
    elif plugins:
        for index, plugin_id in enumerate(plugins):
            if not isinstance(plugin_id, str) or not plugin_id:
                errors.append(f"'plugins[{index}]' must be a non-empty string")
    return errors


def _config_handlers() -> dict[str, Callable[..., Any]]:
    return {
        "extend_user_config": extend_user_config,
        "validate_user_config": validate_user_config,
    }


builtin_plugin = HookPlugin(
    id=BUILTIN_PLUGIN_ID,
    description="Built-in hook handlers of the host application",
    hook_handlers={CONFIG_CATEGORY: _config_handlers},
)
