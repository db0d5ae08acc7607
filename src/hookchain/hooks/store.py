"""In-memory storage for hook categories.

* :class:`StaticCategoryStore` -- the materialized categories of each plugin,
  keyed by plugin id and category name. Entries are written once and never
  invalidated for the lifetime of the owning engine.
* :class:`DynamicRegistry` -- categories registered at runtime, kept as one
  stack per category name with the most recent registration first.

Neither class does any locking: both are used from a single event loop.
The registry replaces its per-category lists instead of mutating them, so a
caller still iterating a list returned by :meth:`DynamicRegistry.snapshot`
never observes a concurrent ``register``/``unregister``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StaticCategoryStore:
    """Two-level cache: plugin id -> category name -> materialized category."""

    def __init__(self) -> None:
        self._categories: dict[str, dict[str, Any]] = {}

    def get(self, plugin_id: str, category: str) -> Optional[Any]:
        """Return the cached category, or ``None`` if it was never stored."""
        return self._categories.get(plugin_id, {}).get(category)

    def contains(self, plugin_id: str, category: str) -> bool:
        return category in self._categories.get(plugin_id, {})

    def put(self, plugin_id: str, category: str, hook_category: Any) -> None:
        self._categories.setdefault(plugin_id, {})[category] = hook_category

    def loaded_categories(self, plugin_id: str) -> list[str]:
        """Names of the categories already materialized for *plugin_id*."""
        return list(self._categories.get(plugin_id, {}))


class DynamicRegistry:
    """Runtime-registered hook categories, newest registration first."""

    def __init__(self) -> None:
        self._stacks: dict[str, list[Any]] = {}

    def register(self, category: str, hook_category: Any) -> None:
        """Push *hook_category* in front of everything already registered.

        Registering the same object twice yields two entries, and therefore
        two invocations of each of its handlers.
        """
        self._stacks[category] = [hook_category, *self._stacks.get(category, [])]
        logger.debug(
            "Registered dynamic handlers for '%s' (%d active)",
            category,
            len(self._stacks[category]),
        )

    def unregister(self, category: str, hook_category: Any) -> None:
        """Remove every entry that *is* ``hook_category``.

        Matching is by identity, so callers must pass the exact object they
        registered. Removing something that isn't registered is a no-op.
        """
        stack = self._stacks.get(category)
        if stack is None:
            return
        self._stacks[category] = [c for c in stack if c is not hook_category]

    def snapshot(self, category: str) -> list[Any]:
        """Return the current stack for *category* (newest first)."""
        return self._stacks.get(category, [])
