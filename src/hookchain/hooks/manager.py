"""The hook manager -- handler collection and the three dispatch strategies.

:class:`HookManager` owns one engine instance's state:

* the plugin list, kept in reverse so the last declared plugin is
  consulted first;
* the :class:`~hookchain.hooks.store.StaticCategoryStore` filled lazily by
  the :class:`~hookchain.hooks.loader.CategoryLoader`;
* the :class:`~hookchain.hooks.store.DynamicRegistry` of runtime
  registrations;
* the hook context, which starts unset.

Handler order for a ``(category, hook)`` pair is always::

    [dynamic registrations, newest first] + [plugins, last declared first]

Every handler of a category other than ``config`` receives the context as
its first positional argument. Config hooks run without it, because they are
what the host uses to build the context.

Dispatch strategies:

* :meth:`HookManager.run_handler_chain` -- chain of responsibility. Each
  handler gets a trailing ``next`` callable; calling it runs the rest of the
  chain and, after the last handler, the default implementation.
* :meth:`HookManager.run_sequential_handlers` -- run every handler, one
  after the other, collecting results.
* :meth:`HookManager.run_parallel_handlers` -- run every handler
  concurrently, collecting results in handler order.

Example::

    manager = HookManager(plugins)
    manager.set_context(context)

    async def send(context, request):
        return await transport.send(request)

    response = await manager.run_handler_chain(
        "network", "on_request", [request], send
    )
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Sequence

from hookchain.exceptions import ContextNotSetError, PluginError
from hookchain.hooks.handlers import (
    DYNAMIC_CONTRIBUTOR,
    HandlerRef,
    lookup_handler,
    maybe_await,
)
from hookchain.hooks.loader import CategoryLoader, ModuleResolver
from hookchain.hooks.sources import load_module
from hookchain.hooks.store import DynamicRegistry, StaticCategoryStore
from hookchain.hooks.validation import DependencyValidator, validate_plugin_dependencies
from hookchain.models import CONFIG_CATEGORY, HookPlugin, category_key

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class HookManager:
    """Collects hook handlers from plugins and runtime registrations and runs them.

    Args:
        plugins: Ordered plugin list. It is fixed for the manager's lifetime;
            the last plugin's handlers run first.
        validator: Async dependency validator, called once per plugin before
            its first category is loaded.
        module_resolver: Resolves external hook locators to modules.
        warn_inline_hooks: Warn when a non-builtin plugin uses an inline
            hook factory.

    Raises:
        PluginError: If two plugins share the same id.
    """

    def __init__(
        self,
        plugins: Sequence[HookPlugin],
        validator: DependencyValidator = validate_plugin_dependencies,
        module_resolver: ModuleResolver = load_module,
        warn_inline_hooks: bool = True,
    ) -> None:
        seen: set[str] = set()
        for plugin in plugins:
            if plugin.id in seen:
                raise PluginError(f"Duplicate plugin id '{plugin.id}'")
            seen.add(plugin.id)

        self._plugins = list(plugins)
        self._plugins_in_reverse_order = list(reversed(self._plugins))
        self._store = StaticCategoryStore()
        self._registry = DynamicRegistry()
        self._loader = CategoryLoader(
            self._store,
            validator=validator,
            module_resolver=module_resolver,
            warn_inline_hooks=warn_inline_hooks,
        )
        self._context: Any = _UNSET

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    @property
    def plugins(self) -> list[HookPlugin]:
        """The plugins in declaration order."""
        return list(self._plugins)

    @property
    def has_context(self) -> bool:
        return self._context is not _UNSET

    def set_context(self, context: Any) -> None:
        """Set (or replace) the context passed to non-config handlers.

        There is no way back to the unset state.
        """
        self._context = context

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    async def get_handlers(self, category: str, hook: str) -> list[Callable[..., Any]]:
        """Return the handlers for ``category.hook`` in dispatch order.

        Plugin categories that were not loaded yet are loaded here, which
        may raise the loader's errors.
        """
        return [ref.handler for ref in await self.describe_handlers(category, hook)]

    async def describe_handlers(self, category: str, hook: str) -> list[HandlerRef]:
        """Like :meth:`get_handlers`, but keeps track of who contributed each handler."""
        category = category_key(category)
        plugin_refs = await self._get_plugin_handlers(category, hook)
        dynamic_refs = self._get_dynamic_handlers(category, hook)
        return dynamic_refs + plugin_refs

    def register_handlers(self, category: str, handlers: Any) -> None:
        """Register a (partial) hook category at runtime.

        The new handlers run before everything registered earlier and
        before all plugin handlers. Keep a reference to *handlers*:
        :meth:`unregister_handlers` matches by identity.
        """
        category = category_key(category)
        self._registry.register(category, handlers)

    def unregister_handlers(self, category: str, handlers: Any) -> None:
        """Remove a category previously passed to :meth:`register_handlers`.

        Every registration of that exact object is removed; unknown
        objects are ignored.
        """
        category = category_key(category)
        self._registry.unregister(category, handlers)

    def _get_dynamic_handlers(self, category: str, hook: str) -> list[HandlerRef]:
        refs: list[HandlerRef] = []
        for hook_category in self._registry.snapshot(category):
            handler = lookup_handler(hook_category, hook)
            if handler is not None:
                refs.append(HandlerRef(DYNAMIC_CONTRIBUTOR, handler))
        return refs

    async def _get_plugin_handlers(self, category: str, hook: str) -> list[HandlerRef]:
        plugins = self._plugins_in_reverse_order
        categories = await asyncio.gather(
            *(self._loader.load(plugin, category) for plugin in plugins)
        )
        refs: list[HandlerRef] = []
        for plugin, hook_category in zip(plugins, categories):
            handler = lookup_handler(hook_category, hook)
            if handler is not None:
                refs.append(HandlerRef(plugin.id, handler))
        return refs

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _handler_params(self, category: str, hook: str, params: Sequence[Any]) -> list[Any]:
        category = category_key(category)
        if category == CONFIG_CATEGORY:
            return list(params)
        if self._context is _UNSET:
            raise ContextNotSetError(category, hook)
        return [self._context, *params]

    async def run_handler_chain(
        self,
        category: str,
        hook: str,
        params: Sequence[Any],
        default_implementation: Callable[..., Any],
    ) -> Any:
        """Run the handlers of ``category.hook`` as a chain of responsibility.

        The first handler is called as ``handler(*params, next)``. Calling
        ``await next(*params)`` runs the following handler in the same way,
        and after the last handler calls ``default_implementation(*params)``.
        A handler that returns without calling ``next`` short-circuits the
        rest of the chain.

        Each ``next`` is bound to its position in the chain. Calling it more
        than once runs the remainder of the chain again.

        Returns:
            Whatever the first handler (or, with no handlers, the default
            implementation) returns.
        """
        handlers = await self.get_handlers(category, hook)
        handler_params = self._handler_params(category, hook, params)

        def make_next(index: int) -> Callable[..., Any]:
            async def next_(*next_params: Any) -> Any:
                if index < len(handlers):
                    return await maybe_await(handlers[index](*next_params, make_next(index + 1)))
                return await maybe_await(default_implementation(*next_params))

            return next_

        return await make_next(0)(*handler_params)

    async def run_sequential_handlers(
        self, category: str, hook: str, params: Sequence[Any]
    ) -> list[Any]:
        """Run every handler of ``category.hook`` in order, one at a time.

        An exception from a handler stops the run and propagates; later
        handlers do not run.

        Returns:
            The handlers' results, in call order.
        """
        handlers = await self.get_handlers(category, hook)
        handler_params = self._handler_params(category, hook, params)

        results: list[Any] = []
        for handler in handlers:
            results.append(await maybe_await(handler(*handler_params)))
        return results

    async def run_parallel_handlers(
        self, category: str, hook: str, params: Sequence[Any]
    ) -> list[Any]:
        """Run every handler of ``category.hook`` concurrently.

        All handlers are scheduled before any of them is awaited. The first
        failure propagates as soon as it is observed; the remaining handlers
        keep running and their outcomes are discarded.

        Returns:
            The handlers' results, in handler order (not completion order).
        """
        handlers = await self.get_handlers(category, hook)
        handler_params = self._handler_params(category, hook, params)

        tasks = [asyncio.ensure_future(_call(handler, handler_params)) for handler in handlers]
        if not tasks:
            return []

        try:
            await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
            failed = _first_failure(tasks)
            if failed is not None:
                raise failed
            return [task.result() for task in tasks]
        finally:
            for task in tasks:
                if not task.done():
                    task.add_done_callback(_discard_outcome)


async def _call(handler: Callable[..., Any], params: Sequence[Any]) -> Any:
    return await maybe_await(handler(*params))


def _first_failure(tasks: Sequence[asyncio.Future[Any]]) -> Optional[BaseException]:
    failures = [
        task.exception() for task in tasks if task.done() and not task.cancelled()
    ]
    return next((exc for exc in failures if exc is not None), None)


def _discard_outcome(task: asyncio.Future[Any]) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Discarded late handler failure: %r", task.exception())
