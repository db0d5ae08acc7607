"""The ``hookchain`` command line.

The root :data:`app` carries the global options (output format, colour,
verbosity, plugin module) and mounts three command groups: ``plugins``,
``hooks`` and ``config``. :func:`main` is the console-script entry point;
it maps :class:`~hookchain.exceptions.HookchainError` to its exit code and
writes a traceback file for anything unexpected.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from hookchain import __version__
from hookchain.commands.config import config_app
from hookchain.commands.hooks import hooks_app
from hookchain.commands.plugins import plugins_app
from hookchain.exit_codes import EXIT_GENERIC_FAILURE

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="hookchain",
    help="Inspect and exercise plugin hook handlers.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(plugins_app, name="plugins", help="Discovered plugins.")
app.add_typer(hooks_app, name="hooks", help="Handler order and config hooks.")
app.add_typer(config_app, name="config", help="User configuration.")


def _print_version(value: bool) -> None:
    if not value:
        return
    typer.echo(f"hookchain {__version__}")
    raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Print the version."
    ),
    plugins_module: Optional[str] = typer.Option(
        None,
        "--plugins-module",
        "-m",
        help="Take plugins from this module's PLUGINS list instead of entry points.",
    ),
    json_output: bool = typer.Option(False, "--json", help="Write data as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Write data as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Never use colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print debug messages and logs."),
) -> None:
    """Set up output, configuration and logging for the sub-command."""
    from hookchain.config import resolve_config
    from hookchain.exceptions import ConfigError
    from hookchain.output import OutputFormat, OutputManager, error, set_output, setup_logging

    if json_output:
        cli_format: Optional[str] = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value
    else:
        cli_format = None

    # Provisional output so a broken config file can still be reported.
    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    try:
        config = resolve_config(
            cli_plugins_module=plugins_module,
            cli_log_level="DEBUG" if verbose else None,
            cli_format=cli_format,
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = OutputManager(
        format=OutputFormat(config.output.format),
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    setup_logging(config.log_level, output)

    ctx.ensure_object(dict)
    ctx.obj.update(plugins_module=plugins_module, verbose=verbose)


def _on_sigint(signum: int, frame: Any) -> None:
    sys.stderr.write("\nInterrupted.\n")
    sys.exit(EXIT_INTERRUPTED)


def _setup_signal_handlers() -> None:
    signal.signal(signal.SIGINT, _on_sigint)


def _write_crash_log(exc: Exception) -> Path:
    """Save the current traceback under ``<data dir>/logs`` and return its path."""
    from hookchain.config import get_data_dir

    log_dir = get_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    path = log_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.write_text(traceback.format_exc(), encoding="utf-8")
    return path


def main() -> None:
    """Console-script entry point."""
    from hookchain.exceptions import HookchainError
    from hookchain.output import error

    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nInterrupted.\n")
        sys.exit(EXIT_INTERRUPTED)
    except HookchainError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error, traceback saved to {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
