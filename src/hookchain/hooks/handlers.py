"""Small helpers for working with hook categories and their handlers.

A hook category is usually a mapping from hook name to handler, but any
object exposing its handlers as attributes works too (a module, a class
instance, a :class:`types.SimpleNamespace`). Handlers may be plain functions
or coroutine functions; the engine awaits whatever they return when it is
awaitable.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional

_SCALARS = (str, bytes, bytearray, int, float, complex, bool, list, tuple, set, frozenset)


async def maybe_await(value: Any) -> Any:
    """Return *value*, awaiting it first if it is awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def is_category_like(value: Any) -> bool:
    """Whether *value* can serve as a hook category.

    Mappings are accepted, as are arbitrary objects. ``None``, scalars and
    plain sequences are rejected.
    """
    if value is None:
        return False
    if isinstance(value, Mapping):
        return True
    return not isinstance(value, _SCALARS)


def lookup_handler(hook_category: Any, hook_name: str) -> Optional[Callable[..., Any]]:
    """Return the handler for *hook_name* in *hook_category*, if any."""
    if hook_category is None:
        return None
    if isinstance(hook_category, Mapping):
        return hook_category.get(hook_name)
    return getattr(hook_category, hook_name, None)


def handler_name(handler: Callable[..., Any]) -> str:
    """A readable dotted name for *handler*, for listings and log lines."""
    module = getattr(handler, "__module__", None) or ""
    qualname = getattr(handler, "__qualname__", None) or repr(handler)
    return f"{module}.{qualname}" if module else qualname


@dataclass(frozen=True)
class HandlerRef:
    """A handler together with the contributor it came from.

    Attributes:
        contributor: The plugin id for static handlers, or ``"dynamic"``
            for runtime registrations.
        handler: The handler callable itself.
    """

    contributor: str
    handler: Callable[..., Any]

    @property
    def is_dynamic(self) -> bool:
        return self.contributor == DYNAMIC_CONTRIBUTOR


DYNAMIC_CONTRIBUTOR = "dynamic"
