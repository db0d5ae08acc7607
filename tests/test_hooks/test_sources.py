"""Tests for locator parsing and hook module loading."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from hookchain.hooks.sources import (
    DEFAULT_FACTORY_ATTRIBUTE,
    FILE_SCHEME,
    MODULE_SCHEME,
    ParsedLocator,
    load_module,
    parse_locator,
)


class TestParseLocator:
    def test_module_locator(self) -> None:
        assert parse_locator("module://pkg.hooks.network") == ParsedLocator(
            MODULE_SCHEME, "pkg.hooks.network", DEFAULT_FACTORY_ATTRIBUTE
        )

    def test_module_locator_with_attribute(self) -> None:
        parsed = parse_locator("module://pkg.hooks:create_handlers")
        assert parsed.target == "pkg.hooks"
        assert parsed.attribute == "create_handlers"

    def test_file_locator(self) -> None:
        parsed = parse_locator("file:///opt/plugins/network.py")
        assert parsed.scheme == FILE_SCHEME
        assert parsed.target == "/opt/plugins/network.py"
        assert parsed.attribute == "default"

    def test_file_locator_with_attribute(self) -> None:
        parsed = parse_locator("file:///opt/plugins/network.py:create")
        assert parsed.target == "/opt/plugins/network.py"
        assert parsed.attribute == "create"

    def test_file_locator_is_unquoted(self) -> None:
        assert parse_locator("file:///opt/my%20plugins/hooks.py").target == "/opt/my plugins/hooks.py"

    @pytest.mark.parametrize(
        "locator",
        [
            "pkg.hooks",
            "http://example.com/hooks.py",
            "module://",
            "module://pkg/hooks",
            "module://pkg..hooks",
            "file://",
            "file://hooks/network.py",
            "file://example.com/opt/hooks.py",
        ],
    )
    def test_invalid(self, locator: str) -> None:
        with pytest.raises(ValueError):
            parse_locator(locator)

    def test_file_locator_localhost(self) -> None:
        assert parse_locator("file://localhost/opt/plugins/network.py").target == "/opt/plugins/network.py"


class TestLoadModule:
    def test_imports_dotted_module(self) -> None:
        module = load_module(ParsedLocator(MODULE_SCHEME, "hookchain.exit_codes"))
        assert module.EXIT_SUCCESS == 0

    def test_missing_dotted_module(self) -> None:
        with pytest.raises(ImportError):
            load_module(ParsedLocator(MODULE_SCHEME, "hookchain_missing_module"))

    def test_loads_file_once(self, tmp_path: Path) -> None:
        path = tmp_path / "counted.py"
        path.write_text("LOADS = 1\n", encoding="utf-8")
        parsed = ParsedLocator(FILE_SCHEME, str(path))

        first = load_module(parsed)
        second = load_module(parsed)

        assert first is second
        assert first.LOADS == 1
        assert first.__name__ in sys.modules
        assert first.__name__.startswith("hookchain_hooks_counted_")

    def test_same_stem_different_directories(self, tmp_path: Path) -> None:
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "a" / "hooks.py").write_text("NAME = 'a'\n", encoding="utf-8")
        (tmp_path / "b" / "hooks.py").write_text("NAME = 'b'\n", encoding="utf-8")

        a = load_module(ParsedLocator(FILE_SCHEME, str(tmp_path / "a" / "hooks.py")))
        b = load_module(ParsedLocator(FILE_SCHEME, str(tmp_path / "b" / "hooks.py")))

        assert (a.NAME, b.NAME) == ("a", "b")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImportError, match="No hook module"):
            load_module(ParsedLocator(FILE_SCHEME, str(tmp_path / "absent.py")))

    def test_failing_module_is_not_registered(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.py"
        path.write_text("raise RuntimeError('broken at import')\n", encoding="utf-8")
        before = set(sys.modules)

        with pytest.raises(RuntimeError, match="broken at import"):
            load_module(ParsedLocator(FILE_SCHEME, str(path)))

        assert set(sys.modules) - before == set()
