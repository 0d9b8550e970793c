"""Command line interface for shellout."""

from __future__ import annotations

import sys

import typer
from rich.console import Console

from shellout.arguments import Argument, SafeString, Verbatim, build_invocation, quoted
from shellout.config import get_settings
from shellout.errors import ProcessSpawnError, ShellOutError, UnsafeCommandError
from shellout.logging_utils import configure_logging
from shellout.runner import ShellRunner

USAGE_ERROR_EXIT_CODE = 2

app = typer.Typer(
    name="shellout",
    help="Run a command through bash with safely quoted arguments.",
    add_completion=False,
    rich_markup_mode="rich",
)
_err_console = Console(stderr=True)


@app.callback()
def main_callback(
    log_level: str | None = typer.Option(None, "--log-level", help="Log level, defaults to SHELLOUT_LOG_LEVEL"),
) -> None:
    configure_logging(log_level or get_settings().log_level)


def _compose(name: str, arguments: list[str] | None, raw: list[str] | None, at: str) -> str:
    try:
        command = SafeString(name)
    except UnsafeCommandError as exc:
        _err_console.print(f"[red]error:[/red] {exc}", markup=True, highlight=False)
        raise typer.Exit(USAGE_ERROR_EXIT_CODE) from exc
    tokens: list[Argument] = quoted(*(arguments or []))
    tokens.extend(Verbatim(text) for text in raw or [])
    return build_invocation(command, tokens, at)


def _exit_status(status: int) -> int:
    return status if 0 < status < 256 else 1


@app.command()
def run(
    name: str = typer.Argument(..., help="Program to run"),
    arguments: list[str] | None = typer.Argument(None, help="Arguments, quoted before reaching the shell"),
    raw: list[str] | None = typer.Option(None, "--verbatim", "-v", help="Argument appended without quoting"),
    at: str = typer.Option(".", "--at", "-a", help="Directory to run the command in"),
    tee: bool = typer.Option(False, "--tee/--no-tee", help="Stream output while the command runs"),
) -> None:
    """Run one command and print its output."""
    command_line = _compose(name, arguments, raw, at)
    runner = ShellRunner()
    output_sink = sys.stdout.buffer if tee else None
    error_sink = sys.stderr.buffer if tee else None
    try:
        output = runner.run(command_line, output_sink=output_sink, error_sink=error_sink)
    except ShellOutError as exc:
        if tee:
            _err_console.print(f"Status code: {exc.termination_status}", markup=False, highlight=False)
        else:
            _err_console.print(str(exc), markup=False, highlight=False)
        raise typer.Exit(_exit_status(exc.termination_status)) from exc
    except ProcessSpawnError as exc:
        _err_console.print(f"[red]error:[/red] {exc}", markup=True, highlight=False)
        raise typer.Exit(USAGE_ERROR_EXIT_CODE) from exc

    if not tee and output:
        typer.echo(output)


@app.command()
def show(
    name: str = typer.Argument(..., help="Program to run"),
    arguments: list[str] | None = typer.Argument(None, help="Arguments, quoted before reaching the shell"),
    raw: list[str] | None = typer.Option(None, "--verbatim", "-v", help="Argument appended without quoting"),
    at: str = typer.Option(".", "--at", "-a", help="Directory to run the command in"),
) -> None:
    """Print the command line that ``run`` would execute."""
    typer.echo(_compose(name, arguments, raw, at))
