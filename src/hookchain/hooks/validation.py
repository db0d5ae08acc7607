"""Default dependency validator for plugins.

Before the first hook category of a plugin is loaded, the engine checks that
every distribution listed in :attr:`HookPlugin.dependencies
<hookchain.models.HookPlugin.dependencies>` is installed. Version specifiers
are not interpreted; ``"httpx>=0.27"`` only checks that ``httpx`` is present.
"""

from __future__ import annotations

import importlib.metadata
import logging
import re
from typing import Awaitable, Callable

from hookchain.exceptions import DependencyValidationError
from hookchain.models import HookPlugin

logger = logging.getLogger(__name__)

DependencyValidator = Callable[[HookPlugin], Awaitable[None]]
"""Signature of a validator: raise to reject the plugin, return to accept it."""

_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def distribution_name(requirement: str) -> str:
    """Strip extras, markers and version specifiers from *requirement*."""
    match = _NAME_RE.match(requirement)
    if match is None:
        return requirement.strip()
    return match.group(1)


async def validate_plugin_dependencies(plugin: HookPlugin) -> None:
    """Check that all of *plugin*'s dependencies are installed.

    Raises:
        DependencyValidationError: Naming the plugin and every missing
            distribution.
    """
    missing: list[str] = []
    for requirement in plugin.dependencies:
        name = distribution_name(requirement)
        try:
            version = importlib.metadata.version(name)
        except importlib.metadata.PackageNotFoundError:
            missing.append(name)
            continue
        logger.debug("Plugin '%s' dependency %s %s found", plugin.id, name, version)

    if missing:
        raise DependencyValidationError(plugin.id, missing)
