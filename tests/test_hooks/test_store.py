"""Tests for the category stores and handler lookup helpers."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from hookchain.hooks.handlers import (
    HandlerRef,
    handler_name,
    is_category_like,
    lookup_handler,
    maybe_await,
)
from hookchain.hooks.store import DynamicRegistry, StaticCategoryStore


class TestStaticCategoryStore:
    def test_get_missing(self) -> None:
        store = StaticCategoryStore()
        assert store.get("p", "network") is None
        assert not store.contains("p", "network")

    def test_put_and_get(self) -> None:
        store = StaticCategoryStore()
        category = {"on_request": print}
        store.put("p", "network", category)

        assert store.get("p", "network") is category
        assert store.contains("p", "network")
        assert not store.contains("p", "tasks")
        assert not store.contains("other", "network")

    def test_loaded_categories(self) -> None:
        store = StaticCategoryStore()
        store.put("p", "network", {})
        store.put("p", "tasks", {})

        assert store.loaded_categories("p") == ["network", "tasks"]
        assert store.loaded_categories("q") == []


class TestDynamicRegistry:
    def test_newest_first(self) -> None:
        registry = DynamicRegistry()
        first, second = {"X": 1}, {"X": 2}
        registry.register("Y", first)
        registry.register("Y", second)

        assert registry.snapshot("Y") == [second, first]
        assert registry.snapshot("Z") == []

    def test_snapshot_is_not_mutated_by_later_changes(self) -> None:
        registry = DynamicRegistry()
        first, second = {"X": 1}, {"X": 2}
        registry.register("Y", first)
        snapshot = registry.snapshot("Y")

        registry.register("Y", second)
        registry.unregister("Y", first)

        assert snapshot == [first]
        assert registry.snapshot("Y") == [second]

    def test_unregister_matches_identity(self) -> None:
        registry = DynamicRegistry()
        registered = {"X": 1}
        registry.register("Y", registered)

        registry.unregister("Y", {"X": 1})

        assert registry.snapshot("Y") == [registered]

    def test_unregister_unknown_category(self) -> None:
        DynamicRegistry().unregister("never", {})


class TestHandlerHelpers:
    @pytest.mark.asyncio
    async def test_maybe_await(self) -> None:
        async def coro() -> int:
            return 2

        assert await maybe_await(1) == 1
        assert await maybe_await(coro()) == 2

    @pytest.mark.parametrize(
        "value, expected",
        [
            ({}, True),
            (SimpleNamespace(x=1), True),
            (object(), True),
            (None, False),
            ("text", False),
            (1, False),
            (True, False),
            ([1], False),
            ((1,), False),
        ],
    )
    def test_is_category_like(self, value, expected) -> None:
        assert is_category_like(value) is expected

    def test_lookup_in_mapping_and_object(self) -> None:
        assert lookup_handler({"on_x": print}, "on_x") is print
        assert lookup_handler(SimpleNamespace(on_x=print), "on_x") is print
        assert lookup_handler({"on_x": print}, "on_y") is None
        assert lookup_handler(SimpleNamespace(), "on_y") is None
        assert lookup_handler(None, "on_x") is None

    def test_handler_name(self) -> None:
        def local_handler() -> None:
            pass

        assert handler_name(local_handler).endswith("test_handler_name.<locals>.local_handler")
        assert handler_name(print) == "builtins.print"

    def test_handler_ref(self) -> None:
        assert HandlerRef("dynamic", print).is_dynamic
        assert not HandlerRef("plugin", print).is_dynamic
