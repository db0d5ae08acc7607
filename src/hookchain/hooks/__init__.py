"""The hook engine.

* :class:`HookManager` -- handler collection and dispatch.
* :class:`CategoryLoader` -- lazy, memoized loading of plugin categories.
* :class:`StaticCategoryStore` / :class:`DynamicRegistry` -- category storage.
* :class:`HandlerRef` -- a handler paired with its contributor.
* :data:`builtin_plugin` -- the host's own plugin.

Example::

    from hookchain.hooks import HookManager, builtin_plugin

    manager = HookManager([builtin_plugin, *discovered_plugins])
    errors = await manager.run_sequential_handlers(
        "config", "validate_user_config", [user_config]
    )
"""

from hookchain.hooks.builtin import builtin_plugin
from hookchain.hooks.handlers import HandlerRef
from hookchain.hooks.loader import CategoryLoader
from hookchain.hooks.manager import HookManager
from hookchain.hooks.store import DynamicRegistry, StaticCategoryStore

__all__ = [
    "CategoryLoader",
    "DynamicRegistry",
    "HandlerRef",
    "HookManager",
    "StaticCategoryStore",
    "builtin_plugin",
]
