"""Plugin discovery for hookchain.

Third-party packages register hook plugins by declaring an entry point in
the ``hookchain.plugins`` group. :class:`PluginManager` discovers them,
applies the enabled/disabled lists from the configuration and builds the
:class:`~hookchain.hooks.manager.HookManager`.

Example::

    from hookchain.plugins import PluginManager

    manager = PluginManager()
    manager.discover(global_config)
    hooks = manager.get_hook_manager()
"""

from hookchain.plugins.manager import ENTRY_POINT_GROUP, PluginManager, coerce_plugin

__all__ = ["ENTRY_POINT_GROUP", "PluginManager", "coerce_plugin"]
