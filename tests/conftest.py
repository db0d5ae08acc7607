"""Shared test fixtures for hookchain.

Provides plugin builders, an isolated config environment, output state
management, and a CLI runner. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from hookchain.models import HookPlugin
from hookchain.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the CLI's log handlers after every test.

    The OutputManager and the Rich log handler cache references to
    sys.stdout/sys.stderr. When Typer's CliRunner redirects those streams
    the cached references go stale once the test finishes.
    """
    yield
    reset_output()
    logger = logging.getLogger("hookchain")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Plugin builders
# ---------------------------------------------------------------------------


class RecordingValidator:
    """Dependency validator that accepts every plugin and records the calls."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def __call__(self, plugin: HookPlugin) -> None:
        self.calls.append(plugin.id)


@pytest.fixture
def validator() -> RecordingValidator:
    return RecordingValidator()


@pytest.fixture
def make_plugin() -> Callable[..., HookPlugin]:
    """Build a plugin whose categories are inline factories returning *categories*.

    Usage::

        make_plugin("base", {"network": {"on_request": handler}})
    """

    def _make(plugin_id: str, categories: dict[str, dict[str, Any]]) -> HookPlugin:
        def factory_for(category: dict[str, Any]) -> Callable[[], dict[str, Any]]:
            return lambda: category

        return HookPlugin(
            id=plugin_id,
            hook_handlers={name: factory_for(cat) for name, cat in categories.items()},
        )

    return _make


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch real user config, clears all HOOKCHAIN_*
    environment variables, and changes the working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("hookchain.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "HOOKCHAIN_LOG_LEVEL",
        "HOOKCHAIN_PLUGINS",
        "HOOKCHAIN_PLUGINS_MODULE",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
