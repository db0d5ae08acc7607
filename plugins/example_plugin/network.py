"""Network hooks of the example plugin."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


async def on_request(
    context: Any,
    request: dict[str, Any],
    next_: Callable[[Any, dict[str, Any]], Awaitable[Any]],
) -> Any:
    headers = {**request.get("headers", {}), "X-Example-Plugin": "1"}
    logger.debug("Tagging request to %s", request.get("url"))
    return await next_(context, {**request, "headers": headers})


def create_handlers() -> dict[str, Callable[..., Any]]:
    return {"on_request": on_request}
