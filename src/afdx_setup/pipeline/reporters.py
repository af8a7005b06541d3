"""Progress reporting for pipeline runs.

The runner notifies a reporter before and after every task. Two
implementations are provided:

- LoggingReporter: writes progress through ``logging`` (default)
- ConsoleReporter: live ``rich`` output with a spinner per running task
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

from afdx_setup.pipeline.models import TaskStatus

if TYPE_CHECKING:
    from rich.status import Status

    from afdx_setup.pipeline.base import Task
    from afdx_setup.pipeline.models import PipelineResult, TaskResult

logger = logging.getLogger(__name__)

_STATUS_MARKS: dict[TaskStatus, str] = {
    TaskStatus.SUCCESS: "[green]✓[/]",
    TaskStatus.SUPPRESSED: "[yellow]⚠[/]",
    TaskStatus.FAILED: "[red]✗[/]",
    TaskStatus.TIMEOUT: "[red]✗[/]",
    TaskStatus.SKIPPED: "[dim]-[/]",
}


@runtime_checkable
class TaskReporter(Protocol):
    """Protocol for objects that render pipeline progress."""

    def pipeline_started(self, name: str, task_count: int) -> None:
        """Called once before the first task."""
        ...

    def task_started(self, task: Task) -> None:
        """Called right before a task executes."""
        ...

    def task_finished(self, task: Task, result: TaskResult) -> None:
        """Called once a task has a result (including skipped tasks)."""
        ...

    def pipeline_finished(self, result: PipelineResult) -> None:
        """Called after the last task, also when the pipeline aborts."""
        ...


class LoggingReporter:
    """Report pipeline progress through the ``logging`` module."""

    def pipeline_started(self, name: str, task_count: int) -> None:
        logger.info("Pipeline '%s' started (%d tasks)", name, task_count)

    def task_started(self, task: Task) -> None:
        logger.info("Task '%s' started: %s", task.name, task.status_line)

    def task_finished(self, task: Task, result: TaskResult) -> None:
        level = logging.WARNING if result.status in (TaskStatus.FAILED, TaskStatus.TIMEOUT) else logging.INFO
        logger.log(
            level,
            "Task '%s' -> %s (%.3fs)",
            result.name,
            result.status.value,
            result.duration,
        )

    def pipeline_finished(self, result: PipelineResult) -> None:
        logger.info(
            "Pipeline '%s' finished in %.3fs (success=%s, suppressed=%d)",
            result.name,
            result.duration,
            result.success,
            len(result.suppressed_tasks),
        )


class ConsoleReporter:
    """Render pipeline progress live on a ``rich`` console.

    A spinner shows the running task; each finished task is printed as a
    single line whose mark distinguishes success, suppressed failure,
    fatal failure and skipped tasks.

    Args:
        console: Rich console to print to (a new one when omitted).
        show_suppressed_errors: Print the error text under suppressed tasks.
    """

    def __init__(self, console: Console | None = None, *, show_suppressed_errors: bool = True) -> None:
        self.console = console or Console()
        self.show_suppressed_errors = show_suppressed_errors
        self._status: Status | None = None

    def pipeline_started(self, name: str, task_count: int) -> None:
        self.console.print(f"[bold]{escape(name)}[/] [dim]({task_count} tasks)[/]")

    def task_started(self, task: Task) -> None:
        self._stop_spinner()
        self._status = self.console.status(escape(task.status_line))
        self._status.start()

    def task_finished(self, task: Task, result: TaskResult) -> None:
        self._stop_spinner()
        mark = _STATUS_MARKS.get(result.status, "?")
        line = escape(result.status_line or task.status_line)
        if result.status == TaskStatus.SKIPPED:
            line = f"[dim]{line}[/]"
        elif result.status == TaskStatus.SUPPRESSED:
            line = f"{line} [yellow](failed, ignored)[/]"
        self.console.print(f"  {mark} {line}")
        if result.status == TaskStatus.SUPPRESSED and self.show_suppressed_errors and result.error:
            self.console.print(f"      [dim]{escape(result.error.splitlines()[0])}[/]")

    def pipeline_finished(self, result: PipelineResult) -> None:
        self._stop_spinner()
        style = "green" if result.success else "red"
        outcome = "completed" if result.success else "failed"
        self.console.print(f"[{style}]{escape(result.name)} {outcome}[/] [dim]in {result.duration:.1f}s[/]")

    def _stop_spinner(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None


__all__ = [
    "ConsoleReporter",
    "LoggingReporter",
    "TaskReporter",
]
