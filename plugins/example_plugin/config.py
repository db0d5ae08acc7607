"""Config hooks of the example plugin."""

from __future__ import annotations

from typing import Any, Awaitable, Callable


async def extend_user_config(
    config: dict[str, Any], next_: Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]
) -> dict[str, Any]:
    extended = await next_(config)
    return {"example": {"tag": "example"}, **extended}


async def validate_user_config(config: dict[str, Any]) -> list[str]:
    section = config.get("example")
    if section is None:
        return []
    if not isinstance(section, dict) or not isinstance(section.get("tag"), str):
        return ["'example.tag' must be a string"]
    return []


def default() -> dict[str, Callable[..., Any]]:
    return {
        "extend_user_config": extend_user_config,
        "validate_user_config": validate_user_config,
    }
