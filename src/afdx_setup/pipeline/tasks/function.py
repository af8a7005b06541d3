"""Function task for pipeline.

Calls a Python function with the shared context and the task itself.
Used for small synchronous steps that stage input for a later command,
such as patching a JSON file.

Note:
    Function tasks have no timeout and no suppression policy. Any
    exception they raise aborts the pipeline.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from afdx_setup.pipeline.base import Task
from afdx_setup.pipeline.exceptions import PipelineConfigError, TaskError
from afdx_setup.pipeline.models import TaskResult, TaskStatus

if TYPE_CHECKING:
    from afdx_setup.pipeline.models import PipelineContext

logger = logging.getLogger(__name__)

#: Signature of a function task body.
TaskFunction = Callable[["PipelineContext", "FunctionTask"], Any]


class FunctionTask(Task):
    """Run ``func(context, task)`` as a pipeline task.

    The return value is captured in ``TaskResult.return_value``.

    Examples:
        >>> def stage(ctx, task):
        ...     ctx["staged"] = True
        >>> task = FunctionTask("Stage input", stage)
        >>> task.name
        'stage-input'
    """

    def __init__(self, title: str, func: TaskFunction, *, name: str | None = None) -> None:
        if not callable(func):
            raise PipelineConfigError(f"Task '{title}': 'task' must be callable")
        super().__init__(title, name=name)
        self.func = func

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, Any]) -> FunctionTask:
        """Build a task from a ``{"title": ..., "task": ...}`` mapping.

        An optional ``name`` key sets the task identity.

        Args:
            descriptor: Mapping with ``title`` and ``task`` keys.

        Returns:
            The corresponding FunctionTask.

        Raises:
            PipelineConfigError: If a required key is missing.
        """
        missing = [key for key in ("title", "task") if key not in descriptor]
        if missing:
            raise PipelineConfigError(f"Task descriptor missing {', '.join(repr(k) for k in missing)}")
        return cls(str(descriptor["title"]), descriptor["task"], name=descriptor.get("name"))

    def execute(
        self,
        context: PipelineContext,
        *,
        dry_run: bool = False,
        default_timeout: float | None = None,
    ) -> TaskResult:
        """Call the wrapped function.

        Args:
            context: Shared pipeline context.
            dry_run: If True, log the call without executing it.
            default_timeout: Ignored, function tasks have no timeout.

        Returns:
            TaskResult with return_value, duration, and status.

        Raises:
            TaskError: If the function raises.
        """
        target = getattr(self.func, "__qualname__", repr(self.func))
        logger.debug("FunctionTask '%s': target=%s", self.name, target)

        if dry_run:
            logger.info("[DRY RUN] FunctionTask '%s': %s", self.name, target)
            self.status = TaskStatus.SKIPPED
            return TaskResult(
                name=self.name,
                status=TaskStatus.SKIPPED,
                status_line=self.status_line,
                error=f"[dry-run] would call: {target}",
            )

        start = time.monotonic()
        try:
            return_value = self.func(context, self)
        except Exception as exc:
            logger.exception("FunctionTask '%s' execution error", self.name)
            self.status = TaskStatus.FAILED
            raise TaskError(self.name, str(exc) or type(exc).__name__) from exc

        duration = time.monotonic() - start
        logger.debug("FunctionTask '%s' completed in %.3fs", self.name, duration)
        self.status = TaskStatus.SUCCESS
        return TaskResult(
            name=self.name,
            status=TaskStatus.SUCCESS,
            status_line=self.status_line,
            return_value=return_value,
            duration=duration,
        )


__all__ = [
    "FunctionTask",
    "TaskFunction",
]
