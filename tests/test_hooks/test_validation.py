"""Tests for the default plugin dependency validator."""

from __future__ import annotations

import importlib.metadata
from unittest.mock import patch

import pytest

from hookchain.exceptions import DependencyValidationError
from hookchain.exit_codes import EXIT_DEPENDENCY_ERROR
from hookchain.hooks.validation import distribution_name, validate_plugin_dependencies
from hookchain.models import HookPlugin

VERSION = "hookchain.hooks.validation.importlib.metadata.version"


def _fake_version(installed: dict[str, str]):
    def version(name: str) -> str:
        try:
            return installed[name]
        except KeyError:
            raise importlib.metadata.PackageNotFoundError(name) from None

    return version


@pytest.mark.parametrize(
    "requirement, expected",
    [
        ("httpx", "httpx"),
        ("httpx>=0.27", "httpx"),
        ("typing_extensions ; python_version<'3.11'", "typing_extensions"),
        ("uvicorn[standard]==0.30", "uvicorn"),
        ("  rich  ", "rich"),
    ],
)
def test_distribution_name(requirement: str, expected: str) -> None:
    assert distribution_name(requirement) == expected


@pytest.mark.asyncio
async def test_all_dependencies_installed() -> None:
    plugin = HookPlugin(id="p", dependencies=["rich>=13", "typer"])

    with patch(VERSION, side_effect=_fake_version({"rich": "13.7.0", "typer": "0.12.0"})):
        await validate_plugin_dependencies(plugin)


@pytest.mark.asyncio
async def test_no_dependencies() -> None:
    with patch(VERSION) as version:
        await validate_plugin_dependencies(HookPlugin(id="p"))
    version.assert_not_called()


@pytest.mark.asyncio
async def test_missing_dependencies_are_all_reported() -> None:
    plugin = HookPlugin(id="needs-stuff", dependencies=["rich", "absent-one", "absent-two>=1"])

    with patch(VERSION, side_effect=_fake_version({"rich": "13.7.0"})):
        with pytest.raises(DependencyValidationError) as exc_info:
            await validate_plugin_dependencies(plugin)

    error = exc_info.value
    assert error.plugin_id == "needs-stuff"
    assert error.missing == ["absent-one", "absent-two"]
    assert error.exit_code == EXIT_DEPENDENCY_ERROR
    assert "needs-stuff" in str(error)
    assert "absent-one, absent-two" in str(error)
