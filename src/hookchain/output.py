"""Console output for the hookchain CLI.

Data (plugin tables, handler listings, the extended user config) goes to
stdout; everything else -- status lines, warnings, errors and log records --
goes to stderr, so ``hookchain --json ... | jq`` always sees clean JSON.

:class:`OutputManager` holds the resolved format and the two Rich consoles.
One instance is installed per CLI invocation by
:func:`~hookchain.app.main_callback`; the module-level helpers
(:func:`info`, :func:`error`, :func:`print_table`, ...) forward to it.

Colour is disabled by ``--no-color``, ``NO_COLOR`` (any value) or
``TERM=dumb``. In ``AUTO`` mode Rich formatting is used only when stdout is
a terminal.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

LOGGER_NAME = "hookchain"


class OutputFormat(str, Enum):
    """How data written to stdout is rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


class OutputManager:
    """Renders CLI data and diagnostics.

    Args:
        format: Requested format; ``AUTO`` becomes ``RICH`` on a colour
            terminal and ``PLAIN`` otherwise.
        no_color: Strip colour and markup from both streams.
        quiet: Drop ``info`` and ``success`` messages.
        verbose: Show ``debug`` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        rich_stdout = self._format == OutputFormat.RICH
        self._out = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_stdout)
        self._err = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """The stderr console; :func:`setup_logging` attaches log records to it."""
        return self._err

    # -- stdout --------------------------------------------------------

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_response(self, data: Any) -> None:
        """Write *data* (mapping, list or scalar) to stdout in the active format."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data))
        elif self._format == OutputFormat.RICH:
            if isinstance(data, (dict, list)):
                self._out.print(Syntax(_to_json(data), "json", theme="monokai", word_wrap=True))
            else:
                self._out.print(str(data))
        else:
            for line in _plain_lines(data):
                self.print_data(line)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write a table to stdout.

        JSON mode emits one object per row keyed by header; plain mode emits
        tab-separated lines with a header line and no title.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json([dict(zip(headers, row)) for row in rows]))
            return
        if self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._out.print(table)

    # -- stderr --------------------------------------------------------

    def _diagnostic(self, message: str, plain_prefix: str, markup: str) -> None:
        if self._no_color:
            print(f"{plain_prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._err.print(markup.format(message=message))

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, "", "{message}")

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, "", "[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic(message, "Warning: ", "[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Shown even with ``--quiet``."""
        self._diagnostic(message, "Error: ", "[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(message, "[debug] ", "[dim]\\[debug] {message}[/dim]")


def _plain_lines(data: Any) -> list[str]:
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


def setup_logging(level: str, output: Optional[OutputManager] = None) -> None:
    """Route records of the ``hookchain`` logger tree to the stderr console.

    Replaces any handler installed by an earlier call. Unknown level names
    fall back to ``WARNING``.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for existing in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(existing)

    console = (output or get_output()).stderr_console
    logger.addHandler(RichHandler(console=console, show_time=False, show_path=False))
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))


# -- global instance ---------------------------------------------------

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)
