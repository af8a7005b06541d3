"""Base class for pipeline tasks.

A task has a stable ``name`` (its identity inside a pipeline), an
immutable ``title`` and a mutable ``status_line`` used for progress
output. Tasks execute exactly once.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from afdx_setup.pipeline.models import TaskStatus
from afdx_setup.pipeline.validators import slugify_title, validate_task_name, validate_title

if TYPE_CHECKING:
    from afdx_setup.pipeline.models import PipelineContext, TaskResult


class Task(ABC):
    """Base class for a unit of pipeline work.

    Subclasses implement :meth:`execute`. A fatal failure is signalled by
    raising a :class:`~afdx_setup.pipeline.exceptions.TaskError`; any other
    outcome (success, suppressed failure, dry run) is returned as a
    :class:`~afdx_setup.pipeline.models.TaskResult`.

    Args:
        title: Display title shown in progress output.
        name: Stable task identity. Derived from the title when omitted.
    """

    def __init__(self, title: str, *, name: str | None = None) -> None:
        self._title = validate_title(title)
        self._name = validate_task_name(name) if name else slugify_title(title)
        self.status_line = title
        self.status = TaskStatus.PENDING

    @property
    def name(self) -> str:
        """Return the stable task name."""
        return self._name

    @property
    def title(self) -> str:
        """Return the title the task was created with."""
        return self._title

    @abstractmethod
    def execute(
        self,
        context: PipelineContext,
        *,
        dry_run: bool = False,
        default_timeout: float | None = None,
    ) -> TaskResult:
        """Execute the task.

        Args:
            context: Shared pipeline context, mutable.
            dry_run: If True, simulate execution without side effects.
            default_timeout: Pipeline timeout used when the task sets none.

        Returns:
            TaskResult describing a non-fatal outcome.

        Raises:
            TaskError: On an unsuppressed failure.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, status={self.status.value!r})"


__all__ = [
    "Task",
]
