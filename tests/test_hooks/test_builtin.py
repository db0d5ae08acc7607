"""Tests for the built-in plugin's config hooks."""

from __future__ import annotations

from typing import Any

import pytest

from hookchain.hooks.builtin import builtin_plugin, extend_user_config, validate_user_config
from hookchain.models import BUILTIN_PLUGIN_ID, CONFIG_CATEGORY


def test_builtin_plugin_shape() -> None:
    assert builtin_plugin.id == BUILTIN_PLUGIN_ID
    assert list(builtin_plugin.hook_handlers) == [CONFIG_CATEGORY]
    assert builtin_plugin.hook_handlers[CONFIG_CATEGORY].kind == "inline"


@pytest.mark.asyncio
async def test_extend_user_config_passes_through() -> None:
    async def next_(config: dict[str, Any]) -> dict[str, Any]:
        return {**config, "seen": True}

    assert await extend_user_config({"a": 1}, next_) == {"a": 1, "seen": True}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "config",
    [{}, {"plugins": []}, {"plugins": ["a", "b"]}, {"other": 1}],
)
async def test_valid_configs(config: Any) -> None:
    assert await validate_user_config(config) == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "config, expected",
    [
        ([], ["User config must be an object, got list"]),
        ({"plugins": "a"}, ["'plugins' must be a list of plugin ids"]),
        ({"plugins": ["a", "", 3]}, ["'plugins[1]' must be a non-empty string", "'plugins[2]' must be a non-empty string"]),
    ],
)
async def test_invalid_configs(config: Any, expected: list[str]) -> None:
    assert await validate_user_config(config) == expected
