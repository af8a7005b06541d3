"""Pipeline runner for sequential task execution.

Provides the ``TaskPipeline`` class that executes an ordered list of
tasks against one shared context. Tasks run strictly one after the other:
later tasks routinely depend on values, files, or org state produced by
earlier ones. The first unsuppressed failure aborts the run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from afdx_setup.pipeline.base import Task
from afdx_setup.pipeline.exceptions import (
    PipelineAbortedError,
    PipelineConfigError,
    TaskError,
    TaskTimeoutError,
)
from afdx_setup.pipeline.models import (
    PipelineResult,
    TaskResult,
    TaskStatus,
)
from afdx_setup.pipeline.reporters import LoggingReporter
from afdx_setup.pipeline.tasks.function import FunctionTask
from afdx_setup.pipeline.validators import MAX_PIPELINE_TASKS, validate_pipeline_size

if TYPE_CHECKING:
    from afdx_setup.pipeline.models import PipelineContext
    from afdx_setup.pipeline.reporters import TaskReporter

logger = logging.getLogger(__name__)


class TaskPipeline:
    """Execute a list of tasks sequentially with a shared context.

    Args:
        name: Pipeline name used in progress output and errors.
        context: Shared mutable context (a new dict when omitted).
        default_timeout: Timeout in seconds for shell tasks without their own.
        reporter: Progress reporter (``LoggingReporter`` when omitted).

    Examples:
        >>> from afdx_setup.pipeline.tasks import ShellCommandTask
        >>> pipeline = TaskPipeline("demo")
        >>> _ = pipeline.add_task(ShellCommandTask("Say hello", "echo hello"))
        >>> _ = pipeline.add_task({"title": "Remember", "task": lambda ctx, task: ctx.update(seen=True)})
        >>> result = pipeline.run()  # doctest: +SKIP
    """

    def __init__(
        self,
        name: str,
        *,
        context: PipelineContext | None = None,
        default_timeout: float | None = None,
        reporter: TaskReporter | None = None,
    ) -> None:
        if default_timeout is not None and default_timeout <= 0:
            raise PipelineConfigError(f"Pipeline default_timeout must be positive, got {default_timeout}")
        self._name = name
        self._context: PipelineContext = context if context is not None else {}
        self._tasks: list[Task] = []
        self._default_timeout = default_timeout
        self._reporter: TaskReporter = reporter or LoggingReporter()
        self._has_run = False

    @property
    def name(self) -> str:
        """Return the pipeline name."""
        return self._name

    @property
    def context(self) -> PipelineContext:
        """Return the shared context."""
        return self._context

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Return the registered tasks in execution order."""
        return tuple(self._tasks)

    def add_task(self, task: Task | Mapping[str, Any]) -> Task:
        """Append a task to the pipeline.

        Args:
            task: A Task instance, or a ``{"title": ..., "task": ...}``
                mapping whose ``task`` is called with ``(context, task)``.

        Returns:
            The registered Task.

        Raises:
            PipelineConfigError: If the task is malformed, already used,
                or the pipeline is full.
        """
        if self._has_run:
            raise PipelineConfigError(f"Pipeline '{self._name}' has already run")
        if isinstance(task, Mapping):
            task = FunctionTask.from_descriptor(task)
        elif not isinstance(task, Task):
            raise PipelineConfigError(f"Unsupported task type: {type(task).__name__}")

        if task.status != TaskStatus.PENDING:
            raise PipelineConfigError(f"Task '{task.name}' has already been executed")
        if any(existing is task for existing in self._tasks):
            raise PipelineConfigError(f"Task '{task.name}' is already registered")
        if any(existing.name == task.name for existing in self._tasks):
            raise PipelineConfigError(f"Duplicate task name: {task.name!r}")
        if len(self._tasks) >= MAX_PIPELINE_TASKS:
            raise PipelineConfigError(f"Too many tasks (max {MAX_PIPELINE_TASKS})")

        self._tasks.append(task)
        logger.debug("Pipeline '%s': registered task '%s'", self._name, task.name)
        return task

    def run(self, *, dry_run: bool = False) -> PipelineResult:
        """Execute every task in registration order.

        Args:
            dry_run: If True, simulate execution without side effects.

        Returns:
            PipelineResult with all task results. Suppressed failures are
            recorded with SUPPRESSED status.

        Raises:
            PipelineConfigError: If the pipeline is empty or has already run.
            PipelineAbortedError: On the first unsuppressed task failure.
        """
        if self._has_run:
            raise PipelineConfigError(f"Pipeline '{self._name}' has already run")
        validate_pipeline_size(len(self._tasks))
        self._has_run = True

        pipeline_result = PipelineResult(name=self._name)
        start = time.monotonic()

        logger.debug(
            "Pipeline '%s' started (%d tasks%s)",
            self._name,
            len(self._tasks),
            ", dry_run=True" if dry_run else "",
        )
        self._reporter.pipeline_started(self._name, len(self._tasks))

        for index, task in enumerate(self._tasks):
            task.status = TaskStatus.RUNNING
            self._reporter.task_started(task)
            try:
                result = task.execute(
                    self._context,
                    dry_run=dry_run,
                    default_timeout=self._default_timeout,
                )
            except TaskError as exc:
                status = TaskStatus.TIMEOUT if isinstance(exc, TaskTimeoutError) else TaskStatus.FAILED
                task.status = status
                failed = TaskResult(
                    name=task.name,
                    status=status,
                    status_line=task.status_line,
                    error=exc.reason,
                )
                pipeline_result.results.append(failed)
                self._reporter.task_finished(task, failed)
                self._skip_remaining(index + 1, pipeline_result)
                pipeline_result.duration = time.monotonic() - start
                self._reporter.pipeline_finished(pipeline_result)
                logger.info("Pipeline '%s' aborted at task '%s': %s", self._name, task.name, exc.reason)
                raise PipelineAbortedError(task.name, exc.reason, pipeline_result) from exc

            pipeline_result.results.append(result)
            self._reporter.task_finished(task, result)
            logger.debug(
                "Task '%s' -> %s (%.3fs)",
                result.name,
                result.status.value,
                result.duration,
            )

        pipeline_result.duration = time.monotonic() - start
        self._reporter.pipeline_finished(pipeline_result)
        logger.debug(
            "Pipeline '%s' completed in %.3fs (success=%s)",
            self._name,
            pipeline_result.duration,
            pipeline_result.success,
        )
        return pipeline_result

    def _skip_remaining(self, first: int, pipeline_result: PipelineResult) -> None:
        """Record every task from ``first`` onwards as skipped."""
        for task in self._tasks[first:]:
            task.status = TaskStatus.SKIPPED
            skipped = TaskResult(name=task.name, status=TaskStatus.SKIPPED, status_line=task.status_line)
            pipeline_result.results.append(skipped)
            self._reporter.task_finished(task, skipped)


__all__ = [
    "TaskPipeline",
]
