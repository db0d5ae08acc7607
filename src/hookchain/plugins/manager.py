"""Plugin manager -- discovery and ordering of hook plugins.

This module contains :class:`PluginManager`, which assembles the ordered
plugin list that a :class:`~hookchain.hooks.manager.HookManager` is built
from. Plugins come from one of two places:

* Python entry points in the ``hookchain.plugins`` group. Third-party
  packages register plugins by declaring an entry point in their
  ``pyproject.toml``::

      [project.entry-points."hookchain.plugins"]
      my-plugin = "my_package.plugin:plugin"

* A plugin module, named by ``default_plugin_module`` in the configuration
  or ``--plugins-module`` on the command line, whose ``PLUGINS`` attribute
  is a list of plugins.

An entry point (or ``PLUGINS`` item) may be a
:class:`~hookchain.models.HookPlugin`, a mapping validated into one, or a
zero-argument callable returning either.

The built-in plugin is always placed first, so its handlers are consulted
last.
"""

from __future__ import annotations

import importlib
import importlib.metadata
import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from hookchain.exceptions import PluginError
from hookchain.hooks.builtin import builtin_plugin
from hookchain.hooks.manager import HookManager
from hookchain.models import BUILTIN_PLUGIN_ID, GlobalConfig, HookPlugin

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "hookchain.plugins"
"""The entry-point group name used for plugin discovery."""

PLUGINS_ATTRIBUTE = "PLUGINS"
"""Attribute holding the plugin list in a plugin module."""


def coerce_plugin(obj: Any) -> HookPlugin:
    """Turn an entry-point target into a :class:`HookPlugin`.

    Raises:
        PluginError: If *obj* is not a plugin, a mapping describing one, or
            a callable returning either.
    """
    if callable(obj) and not isinstance(obj, (HookPlugin, type)):
        obj = obj()
    if isinstance(obj, HookPlugin):
        return obj
    if isinstance(obj, Mapping):
        try:
            return HookPlugin.model_validate(dict(obj))
        except ValidationError as exc:
            raise PluginError(f"Invalid plugin definition: {exc}") from exc
    raise PluginError(f"Expected a HookPlugin, got {type(obj).__name__}")


class PluginManager:
    """Discovers plugins and builds the hook manager from them.

    The *enabled* and *disabled* lists in
    :class:`~hookchain.models.PluginsConfig` act as an allowlist/blocklist.
    When *enabled* is non-empty only those plugins are loaded, in the order
    the list gives; otherwise all discovered plugins that are **not** in
    *disabled* are loaded in discovery order.

    Example:
        Typical usage::

            manager = PluginManager()
            manager.discover(global_config)
            hooks = manager.get_hook_manager()
    """

    def __init__(self, warn_inline_hooks: bool = True) -> None:
        self._plugins: dict[str, HookPlugin] = {}
        self._hook_manager: Optional[HookManager] = None
        self._warn_inline_hooks = warn_inline_hooks

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, config: GlobalConfig, plugins_module: Optional[str] = None) -> list[str]:
        """Discover and load plugins.

        Uses *plugins_module* (or ``config.default_plugin_module``) when
        given, entry points otherwise.

        Args:
            config: Supplies the enabled/disabled lists and the inline hook
                warning setting.
            plugins_module: Dotted module path overriding discovery.

        Returns:
            The ids of the plugins that were loaded, in order. Entry points
            that fail to load are logged as warnings and skipped; a plugin
            module that fails to import raises :class:`PluginError`.
        """
        self._warn_inline_hooks = config.warn_inline_hooks
        module_path = plugins_module or config.default_plugin_module
        if module_path:
            candidates = self._candidates_from_module(module_path)
        else:
            candidates = self._candidates_from_entry_points()

        enabled = config.plugins.enabled
        disabled = set(config.plugins.disabled)
        if enabled:
            by_id = {plugin.id: plugin for plugin in candidates}
            for plugin_id in enabled:
                if plugin_id not in by_id:
                    logger.warning("Enabled plugin '%s' was not found", plugin_id)
            candidates = [by_id[plugin_id] for plugin_id in enabled if plugin_id in by_id]

        loaded: list[str] = []
        for plugin in candidates:
            if plugin.id in disabled:
                logger.debug("Plugin '%s' is disabled, skipping", plugin.id)
                continue
            self.load_plugin(plugin)
            loaded.append(plugin.id)
        return loaded

    def _candidates_from_entry_points(self) -> list[HookPlugin]:
        entry_points = importlib.metadata.entry_points()
        if hasattr(entry_points, "select"):
            eps = entry_points.select(group=ENTRY_POINT_GROUP)
        else:
            eps = entry_points.get(ENTRY_POINT_GROUP, [])  # type: ignore[union-attr]

        plugins: list[HookPlugin] = []
        for ep in eps:
            try:
                plugins.append(coerce_plugin(ep.load()))
            except Exception as exc:
                logger.warning("Failed to load plugin '%s': %s", ep.name, exc)
        return plugins

    def _candidates_from_module(self, module_path: str) -> list[HookPlugin]:
        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            raise PluginError(f"Cannot import plugin module '{module_path}': {exc}") from exc

        items = getattr(module, PLUGINS_ATTRIBUTE, None)
        if not isinstance(items, (list, tuple)):
            raise PluginError(f"Plugin module '{module_path}' has no {PLUGINS_ATTRIBUTE} list")
        return [coerce_plugin(item) for item in items]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_plugin(self, plugin: HookPlugin) -> None:
        """Append *plugin* to the plugin list.

        Invalidates the cached :class:`HookManager`, since its plugin list
        is fixed at construction.

        Raises:
            PluginError: If a plugin with the same id is already loaded, or
                the plugin claims the built-in id.
        """
        if plugin.id == BUILTIN_PLUGIN_ID:
            raise PluginError(f"Plugin id '{BUILTIN_PLUGIN_ID}' is reserved")
        if plugin.id in self._plugins:
            raise PluginError(f"Plugin '{plugin.id}' is already loaded")

        self._plugins[plugin.id] = plugin
        self._hook_manager = None
        logger.info("Loaded plugin '%s'", plugin.id)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_plugin(self, plugin_id: str) -> HookPlugin:
        """Retrieve a loaded plugin by id.

        Raises:
            PluginError: If no plugin with the given id is loaded.
        """
        if plugin_id == BUILTIN_PLUGIN_ID:
            return builtin_plugin
        try:
            return self._plugins[plugin_id]
        except KeyError:
            raise PluginError(f"Plugin '{plugin_id}' is not loaded") from None

    def plugin_list(self) -> list[HookPlugin]:
        """All plugins in declaration order, built-in first."""
        return [builtin_plugin, *self._plugins.values()]

    def list_plugins(self) -> list[dict[str, str]]:
        """Describe every plugin, built-in included, in declaration order.

        Returns:
            One dict per plugin with ``"id"``, ``"description"``,
            ``"categories"`` and ``"sources"`` keys.
        """
        return [
            {
                "id": plugin.id,
                "description": plugin.description,
                "categories": ", ".join(plugin.hook_handlers),
                "sources": ", ".join(
                    f"{name}={source.kind}" for name, source in plugin.hook_handlers.items()
                ),
            }
            for plugin in self.plugin_list()
        ]

    # ------------------------------------------------------------------
    # Hook manager
    # ------------------------------------------------------------------

    def get_hook_manager(self) -> HookManager:
        """Return the :class:`HookManager` for the current plugin list.

        Created on first access and cached until another plugin is loaded.
        """
        if self._hook_manager is None:
            self._hook_manager = HookManager(
                self.plugin_list(), warn_inline_hooks=self._warn_inline_hooks
            )
        return self._hook_manager
