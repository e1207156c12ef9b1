"""Typer application and CLI entry point for ogrelay.

This module wires together the top-level Typer application and registers the
built-in commands (``login``, ``fetch``, ``endpoints``, ``serve``) and
sub-groups (``account``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~ogrelay.exceptions.OgRelayError` failures exit with their own exit
code; anything else is written to a crash log under the data directory.

See Also:
    :mod:`ogrelay.config`: Account and global configuration resolution.
    :mod:`ogrelay.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from ogrelay import __version__
from ogrelay.commands.account import account_app
from ogrelay.commands.config import config_app
from ogrelay.commands.serve import serve_command
from ogrelay.commands.session import endpoints_command, fetch_command, login_command
from ogrelay.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="ogrelay",
    help="Remote client and relay for OGame universes.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.command("login")(login_command)
app.command("fetch")(fetch_command)
app.command("endpoints")(endpoints_command)
app.command("serve")(serve_command)
app.add_typer(account_app, name="account", help="Account management.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ogrelay {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    account: Optional[str] = typer.Option(
        None, "--account", "-a", help="Account name to use."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~ogrelay.output.OutputManager` from CLI
    flags and stores shared options (``account``, ``force``, ``verbose``) in
    the Typer context so that sub-commands can read them via ``ctx.obj``.
    """
    from ogrelay.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["account"] = account
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from ogrelay.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``ogrelay`` console script.

    Unhandled :class:`~ogrelay.exceptions.OgRelayError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from ogrelay.exceptions import OgRelayError
        from ogrelay.output import error

        if isinstance(exc, OgRelayError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
