"""Example hook plugin that tags outgoing requests and checks its config key.

Both categories live in sibling modules and are referenced by locator, the
way a distributed plugin should ship them. Point the CLI at this module to
try it::

    hookchain --plugins-module plugins.example_plugin.plugin plugins list
"""

from __future__ import annotations

from hookchain.models import HookPlugin

plugin = HookPlugin(
    id="example",
    description="Tags outgoing requests and validates the 'example' config key",
    hook_handlers={
        "config": "module://plugins.example_plugin.config",
        "network": "module://plugins.example_plugin.network:create_handlers",
    },
)

PLUGINS = [plugin]
