"""Exception hierarchy for hookchain.

All exceptions inherit from :class:`HookchainError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`hookchain.exit_codes`.
The CLI entry point in :func:`hookchain.app.main` catches ``HookchainError``
and exits with the appropriate code.

None of the hook engine errors are retried internally; they surface to the
caller of the dispatch or collection operation that triggered them.

Subclass hierarchy::

    HookchainError (exit 1)
    +-- ContextNotSetError          (exit 3)
    +-- HookSourceError             (exit 4)
    |   +-- InvalidHookSourceReference
    |   +-- InvalidHookFactoryResult
    +-- DependencyValidationError   (exit 5)
    +-- PluginError                 (exit 10)
    +-- ConfigError                 (exit 1)
"""

from __future__ import annotations

from hookchain.exit_codes import (
    EXIT_CONTEXT_ERROR,
    EXIT_DEPENDENCY_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_HOOK_SOURCE_ERROR,
    EXIT_PLUGIN_ERROR,
)


class HookchainError(Exception):
    """Base exception for all hookchain errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ContextNotSetError(HookchainError):
    """Raised when a non-config hook is dispatched before ``set_context``."""

    exit_code = EXIT_CONTEXT_ERROR

    def __init__(self, category: str, hook: str) -> None:
        super().__init__(
            f"Context must be set before running non-config hooks "
            f"(tried to run '{category}.{hook}')"
        )
        self.category = category
        self.hook = hook


class HookSourceError(HookchainError):
    """Common base for problems with a plugin's declared hook source.

    Attributes:
        plugin_id: Id of the plugin that declared the source.
        category: Hook category the source was declared for.
        source: The offending locator string (or factory repr).
    """

    exit_code = EXIT_HOOK_SOURCE_ERROR

    def __init__(self, message: str, plugin_id: str, category: str, source: str) -> None:
        super().__init__(message)
        self.plugin_id = plugin_id
        self.category = category
        self.source = source


class InvalidHookSourceReference(HookSourceError):
    """Raised when a hook source locator is malformed or cannot be imported."""


class InvalidHookFactoryResult(HookSourceError):
    """Raised when a hook module doesn't export a usable factory, or the
    factory returns ``None`` or a non-object value."""


class DependencyValidationError(HookchainError):
    """Raised when a plugin's declared dependencies are not installed."""

    exit_code = EXIT_DEPENDENCY_ERROR

    def __init__(self, plugin_id: str, missing: list[str]) -> None:
        super().__init__(
            f"Plugin '{plugin_id}' requires missing dependencies: {', '.join(missing)}"
        )
        self.plugin_id = plugin_id
        self.missing = missing


class PluginError(HookchainError):
    """Raised when a plugin fails to load or the plugin list is inconsistent."""

    exit_code = EXIT_PLUGIN_ERROR


class ConfigError(HookchainError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
