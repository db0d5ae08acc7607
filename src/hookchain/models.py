"""Canonical Pydantic models shared across all hookchain modules.

The models fall into two groups:

**Plugin models** -- describe what the hook engine consumes:
    :class:`HookCategory`, :class:`InlineHookSource`,
    :class:`ExternalHookSource`, and :class:`HookPlugin`.

**Configuration models** -- serialised as JSON in the user's config
directory: :class:`PluginsConfig`, :class:`OutputConfig`, and
:class:`GlobalConfig`.

All models use Pydantic v2.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Hook categories ---


class HookCategory(str, enum.Enum):
    """Well-known hook category names.

    Categories are plain strings as far as the engine is concerned, so
    plugins may introduce their own; these members only name the ones the
    host application ships with. Being a ``str`` enum, a member compares
    equal to its value and can be passed anywhere a category name is
    expected.
    """

    CONFIG = "config"
    CONFIGURATION_VARIABLES = "configuration_variables"
    USER_INTERRUPTIONS = "user_interruptions"
    NETWORK = "network"
    TASKS = "tasks"


CONFIG_CATEGORY = HookCategory.CONFIG.value
"""The one category whose handlers run without the hook context.

Config hooks are used to build the context in the first place, so they
cannot depend on it.
"""

BUILTIN_PLUGIN_ID = "builtin"
"""Id of the host's own plugin; its inline hook sources are not warned about."""


def category_key(category: Any) -> str:
    """Normalise a category name (plain string or :class:`HookCategory`) to a string."""
    if isinstance(category, enum.Enum):
        return str(category.value)
    return str(category)


# --- Hook sources ---


class InlineHookSource(BaseModel):
    """A hook category provided by a zero-argument factory in the plugin itself.

    The factory may be a plain function or a coroutine function. Inline
    sources are meant for the host's built-in functionality; third-party
    plugins should ship their categories as separate modules.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline"] = "inline"
    factory: Callable[[], Any]

    def describe(self) -> str:
        return getattr(self.factory, "__qualname__", repr(self.factory))


class ExternalHookSource(BaseModel):
    """A hook category provided by a module, addressed by a locator string.

    Recognised locators are ``file:///path/to/module.py`` and
    ``module://dotted.module.path``, each optionally followed by
    ``:attribute`` naming the factory (``default`` when omitted).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["external"] = "external"
    locator: str

    def describe(self) -> str:
        return self.locator


HookSource = Union[InlineHookSource, ExternalHookSource]


def as_hook_source(value: Any) -> HookSource:
    """Coerce a raw ``hook_handlers`` value into a :data:`HookSource`.

    Strings become :class:`ExternalHookSource`, callables become
    :class:`InlineHookSource`; existing sources are returned unchanged.

    Raises:
        ValueError: If *value* is none of the above.
    """
    if isinstance(value, (InlineHookSource, ExternalHookSource)):
        return value
    if isinstance(value, str):
        return ExternalHookSource(locator=value)
    if callable(value):
        return InlineHookSource(factory=value)
    raise ValueError(
        f"Hook source must be a locator string or a factory callable, got {type(value).__name__}"
    )


# --- Plugins ---


class HookPlugin(BaseModel):
    """A plugin as seen by the hook engine.

    Plugins are handed to :class:`~hookchain.hooks.manager.HookManager` once,
    as an ordered list. The last plugin in that list is consulted first.

    Example::

        HookPlugin(
            id="my-plugin",
            hook_handlers={
                "config": "module://my_plugin.hook_handlers.config",
                "network": "file:///opt/plugins/my_plugin/network.py:create",
            },
            dependencies=["httpx"],
        )
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Unique plugin identifier")
    hook_handlers: dict[str, HookSource] = Field(
        default_factory=dict,
        description="Hook category name -> inline factory or module locator",
    )
    dependencies: list[str] = Field(
        default_factory=list,
        description="Distribution names that must be installed before any hook loads",
    )
    description: str = ""

    @field_validator("hook_handlers", mode="before")
    @classmethod
    def _coerce_sources(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {category_key(name): as_hook_source(source) for name, source in value.items()}
        return value


# --- Configuration ---


class PluginsConfig(BaseModel):
    """Explicit plugin allow/deny lists stored in :class:`GlobalConfig`.

    When ``enabled`` is non-empty it also fixes the order in which
    discovered plugins are handed to the hook engine.
    """

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/hookchain/config.json``.

    Loaded and saved by :func:`~hookchain.config.load_global_config` and
    :func:`~hookchain.config.save_global_config`. See
    :func:`~hookchain.config.resolve_config` for the full precedence chain.
    """

    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
    warn_inline_hooks: bool = Field(
        default=True,
        description="Log a warning when a non-builtin plugin uses inline hook factories",
    )
    log_level: str = Field(default="WARNING", description="Root log level for the CLI")
    output: OutputConfig = Field(default_factory=OutputConfig)
    default_plugin_module: Optional[str] = Field(
        default=None,
        description="Module whose PLUGINS list is used instead of entry-point discovery",
    )
