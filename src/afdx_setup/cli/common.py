"""Shared console and error rendering for the afdx_setup CLI."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from afdx_setup.pipeline.exceptions import CommandExecutionError, PipelineAbortedError

console = Console()


def _command_details(error: CommandExecutionError) -> list[Table | Text]:
    """Build the command, exit code and captured output rows."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("Command", escape(error.command))
    table.add_row("Exit code", "-" if error.return_code is None else str(error.return_code))
    parts: list[Table | Text] = [table]
    if error.render_stdio:
        if error.stdout.strip():
            parts.append(Text(f"\nstdout:\n{error.stdout.rstrip()}"))
        if error.stderr.strip():
            parts.append(Text(f"\nstderr:\n{error.stderr.rstrip()}", style="red"))
    return parts


def render_error(error: BaseException) -> None:
    """Print an error as a red panel.

    Pipeline aborts show the failing task and, for command failures,
    the command text, exit code and captured output when requested.

    Args:
        error: The exception to render.
    """
    if isinstance(error, PipelineAbortedError):
        cause = error.__cause__
        headline = Text.assemble(("Task: ", "bold"), error.task_name)
        if isinstance(cause, CommandExecutionError):
            body = Group(headline, *_command_details(cause))
        else:
            body = Group(headline, Text(error.reason))
        console.print(Panel(body, title="Setup failed", style="red"))
        return
    console.print(Panel(Text(str(error)), title=type(error).__name__, style="red"))


def exit_error(message: str, code: int = 1) -> NoReturn:
    """Print an error message and exit."""
    console.print(f"[red]{escape(message)}[/]")
    raise typer.Exit(code=code)


__all__ = [
    "console",
    "exit_error",
    "render_error",
]
