"""hookchain -- hook orchestration engine for plugin-based host applications.

Plugins contribute *hook categories* (mappings from hook name to handler),
either inline or as references to modules that are loaded on first use.
Runtime callers can register additional categories on the fly. The
:class:`~hookchain.hooks.manager.HookManager` collects the handlers for a
``(category, hook)`` pair and runs them under one of three composition
strategies: chained, sequential, or parallel.

Typical usage::

    from hookchain.hooks import HookManager
    from hookchain.models import HookPlugin

    manager = HookManager([HookPlugin(id="my-plugin", hook_handlers={...})])
    manager.set_context(context)
    result = await manager.run_handler_chain("network", "on_request", [req], send)

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
    hooks: The hook engine itself.
    plugins: Entry-point plugin discovery.
"""

__version__ = "0.1.0"
