"""Numeric process exit codes used by the ``hookchain`` CLI.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~hookchain.exceptions.HookchainError` subclass.
Wrapper scripts can inspect the exit code to tell a missing context from a
broken plugin without parsing stderr.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONTEXT_ERROR = 3
"""A non-config hook was dispatched before the hook context was set."""

EXIT_HOOK_SOURCE_ERROR = 4
"""A plugin declared a hook source that could not be resolved or loaded."""

EXIT_DEPENDENCY_ERROR = 5
"""A plugin's declared dependencies are not installed."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to load or the plugin list is inconsistent."""
