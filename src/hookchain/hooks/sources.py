"""Resolution of external hook source locators to live modules.

A plugin may declare a hook category as a locator string instead of an
inline factory. Two schemes are understood:

* ``file:///abs/path/to/handlers.py`` -- the file is executed as a fresh
  module via :func:`importlib.util.spec_from_file_location`.
* ``module://package.handlers`` -- the module is imported normally via
  :func:`importlib.import_module`.

Either form may end in ``:attribute`` to name the factory function inside
the module. Without it the factory is looked up as ``default``.

This module knows nothing about plugins or categories; the
:class:`~hookchain.hooks.loader.CategoryLoader` turns the ``ValueError`` and
``ImportError`` raised here into the engine's own exceptions.
"""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

logger = logging.getLogger(__name__)

FILE_SCHEME = "file"
MODULE_SCHEME = "module"
SUPPORTED_SCHEMES = (FILE_SCHEME, MODULE_SCHEME)

DEFAULT_FACTORY_ATTRIBUTE = "default"
"""Name of the factory looked up when a locator has no ``:attribute`` suffix."""


@dataclass(frozen=True)
class ParsedLocator:
    """A locator split into its scheme, target and factory attribute."""

    scheme: str
    target: str
    attribute: str = DEFAULT_FACTORY_ATTRIBUTE


def _split_attribute(rest: str) -> tuple[str, str]:
    head, sep, tail = rest.rpartition(":")
    # "C:/x" style drive letters leave a tail that is not an identifier.
    if sep and head and tail.isidentifier():
        return head, tail
    return rest, DEFAULT_FACTORY_ATTRIBUTE


def parse_locator(locator: str) -> ParsedLocator:
    """Split *locator* into a :class:`ParsedLocator`.

    Raises:
        ValueError: If the locator does not use a supported scheme or has
            an empty target, or if a file locator names a host other than
            ``localhost``.
    """
    scheme, sep, rest = locator.partition("://")
    if not sep or scheme not in SUPPORTED_SCHEMES:
        raise ValueError(
            f"expected one of {', '.join(s + '://' for s in SUPPORTED_SCHEMES)}, got {locator!r}"
        )

    target, attribute = _split_attribute(rest)

    if scheme == FILE_SCHEME:
        url = urlparse(f"file://{target}")
        if url.netloc not in ("", "localhost"):
            raise ValueError(
                f"file locator must be absolute (file:///...), got host {url.netloc!r} in {locator!r}"
            )
        path = url2pathname(unquote(url.path))
        if not path:
            raise ValueError(f"file locator has no path: {locator!r}")
        return ParsedLocator(FILE_SCHEME, path, attribute)

    if not target or not all(part.isidentifier() for part in target.split(".")):
        raise ValueError(f"not a dotted module path: {target!r}")
    return ParsedLocator(MODULE_SCHEME, target, attribute)


def _module_name_for_file(path: Path) -> str:
    digest = hashlib.sha256(str(path).encode("utf-8")).hexdigest()[:12]
    return f"hookchain_hooks_{path.stem}_{digest}"


def load_module(parsed: ParsedLocator) -> ModuleType:
    """Import the module a :class:`ParsedLocator` points at.

    File modules are registered in :data:`sys.modules` under a name derived
    from their absolute path, so loading the same file twice reuses the
    first module.

    Raises:
        ImportError: If the file does not exist or the module cannot be
            imported. Errors raised while executing the module propagate.
    """
    if parsed.scheme == MODULE_SCHEME:
        return importlib.import_module(parsed.target)

    path = Path(parsed.target).resolve()
    name = _module_name_for_file(path)
    if name in sys.modules:
        return sys.modules[name]
    if not path.is_file():
        raise ImportError(f"No hook module at {path}")

    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot create an import spec for {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[name]
        raise
    logger.debug("Loaded hook module %s from %s", name, path)
    return module
