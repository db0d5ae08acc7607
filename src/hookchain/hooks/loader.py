"""Lazy materialization of plugin hook categories.

:class:`CategoryLoader` turns the hook source a plugin declares for a
category into a live category object, the first time that category is
needed:

1. Validate the plugin's dependencies (once per plugin, on first use).
2. Call the inline factory, or resolve the locator to a module and call
   the factory it exports.
3. Store the result in the :class:`~hookchain.hooks.store.StaticCategoryStore`.

Concurrent first loads of the same ``(plugin, category)`` share one
in-flight task, so a factory runs at most once per engine. A failed load is
not cached; the next call tries again.
"""

from __future__ import annotations

import asyncio
import logging
from types import ModuleType
from typing import Any, Awaitable, Callable, Hashable, Optional, Union

from hookchain.exceptions import InvalidHookFactoryResult, InvalidHookSourceReference
from hookchain.hooks.handlers import is_category_like, maybe_await
from hookchain.hooks.sources import ParsedLocator, load_module, parse_locator
from hookchain.hooks.store import StaticCategoryStore
from hookchain.hooks.validation import DependencyValidator, validate_plugin_dependencies
from hookchain.models import BUILTIN_PLUGIN_ID, ExternalHookSource, HookPlugin, HookSource

logger = logging.getLogger(__name__)

ModuleResolver = Callable[[ParsedLocator], Union[ModuleType, Awaitable[ModuleType]]]


class CategoryLoader:
    """Loads, validates and caches plugin hook categories.

    Args:
        store: Where materialized categories are cached.
        validator: Async dependency validator, called at most once per
            plugin that successfully validates.
        module_resolver: Turns a parsed locator into a module. Defaults to
            :func:`~hookchain.hooks.sources.load_module`.
        warn_inline_hooks: Log a warning when a plugin other than the
            built-in one provides an inline factory.
    """

    def __init__(
        self,
        store: StaticCategoryStore,
        validator: DependencyValidator = validate_plugin_dependencies,
        module_resolver: ModuleResolver = load_module,
        warn_inline_hooks: bool = True,
    ) -> None:
        self._store = store
        self._validator = validator
        self._resolve_module = module_resolver
        self._warn_inline_hooks = warn_inline_hooks
        self._validated: set[str] = set()
        self._in_flight: dict[Hashable, asyncio.Future[Any]] = {}

    def is_validated(self, plugin_id: str) -> bool:
        return plugin_id in self._validated

    async def load(self, plugin: HookPlugin, category: str) -> Optional[Any]:
        """Return *plugin*'s materialized *category*, loading it if needed.

        Returns:
            The hook category, or ``None`` when the plugin declares no
            source for *category*.

        Raises:
            DependencyValidationError: The plugin's dependencies are missing.
            InvalidHookSourceReference: The locator is malformed or its
                module cannot be imported.
            InvalidHookFactoryResult: The module has no callable factory,
                or the factory returned ``None`` or a scalar.
        """
        if self._store.contains(plugin.id, category):
            return self._store.get(plugin.id, category)

        source = plugin.hook_handlers.get(category)
        if source is None:
            return None

        return await self._once(
            ("category", plugin.id, category),
            lambda: self._materialize(plugin, category, source),
        )

    async def _once(self, key: Hashable, make: Callable[[], Awaitable[Any]]) -> Any:
        future = self._in_flight.get(key)
        if future is None:
            future = asyncio.ensure_future(make())
            self._in_flight[key] = future
            future.add_done_callback(lambda done: self._forget(key, done))
        return await future

    def _forget(self, key: Hashable, done: asyncio.Future[Any]) -> None:
        if self._in_flight.get(key) is done:
            del self._in_flight[key]

    async def _ensure_validated(self, plugin: HookPlugin) -> None:
        if plugin.id in self._validated:
            return
        await self._once(("validation", plugin.id), lambda: maybe_await(self._validator(plugin)))
        if plugin.id not in self._validated:
            self._validated.add(plugin.id)
            logger.debug("Validated dependencies of plugin '%s'", plugin.id)

    async def _materialize(self, plugin: HookPlugin, category: str, source: HookSource) -> Any:
        await self._ensure_validated(plugin)

        if isinstance(source, ExternalHookSource):
            hook_category = await self._load_external(plugin.id, category, source.locator)
        else:
            hook_category = await maybe_await(source.factory())
            if self._warn_inline_hooks and plugin.id != BUILTIN_PLUGIN_ID:
                logger.warning(
                    'Inline hooks found in plugin "%s", category "%s". '
                    "Use module locators in distributed plugins.",
                    plugin.id,
                    category,
                )

        self._store.put(plugin.id, category, hook_category)
        logger.debug("Loaded hook category '%s' of plugin '%s'", category, plugin.id)
        return hook_category

    async def _load_external(self, plugin_id: str, category: str, locator: str) -> Any:
        try:
            parsed = parse_locator(locator)
        except ValueError as exc:
            raise InvalidHookSourceReference(
                f"Plugin {plugin_id} hook factory for {category} is not a valid locator: {exc}",
                plugin_id,
                category,
                locator,
            ) from exc

        try:
            module = await maybe_await(self._resolve_module(parsed))
        except ImportError as exc:
            raise InvalidHookSourceReference(
                f"Plugin {plugin_id} hook module for {category} can't be imported from {locator}: {exc}",
                plugin_id,
                category,
                locator,
            ) from exc

        factory = getattr(module, parsed.attribute, None)
        if not callable(factory):
            raise InvalidHookFactoryResult(
                f"Plugin {plugin_id} doesn't export a hook factory "
                f"'{parsed.attribute}' for category {category} in {locator}",
                plugin_id,
                category,
                locator,
            )

        hook_category = await maybe_await(factory())
        if not is_category_like(hook_category):
            raise InvalidHookFactoryResult(
                f"Plugin {plugin_id} doesn't export a valid factory for category "
                f"{category} in {locator}, it returned {type(hook_category).__name__}",
                plugin_id,
                category,
                locator,
            )
        return hook_category
