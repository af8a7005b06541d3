"""Data models for the afdx_setup.pipeline module.

This module defines the core data structures used by the pipeline module:

- TaskStatus: Enum for task result status
- SuppressPolicy: Tagged failure-suppression policy (always, never, predicate)
- ShellTaskOptions: Frozen options record for shell command tasks
- CommandOutput: Captured result of one external command
- TaskResult: Mutable result of a single task execution
- PipelineResult: Mutable aggregate result of a pipeline execution
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from afdx_setup.pipeline.exceptions import PipelineConfigError

if TYPE_CHECKING:
    from afdx_setup.pipeline.base import Task

#: Shared mutable state passed to every task of a pipeline run.
PipelineContext = dict[str, Any]

#: Callback invoked after a shell command exits with code 0.
SuccessCallback = Callable[["CommandOutput", PipelineContext, "Task"], None]


class TaskStatus(str, Enum):
    """Result status of a pipeline task.

    Attributes:
        PENDING: Task registered but not started.
        RUNNING: Task currently executing.
        SUCCESS: Task completed successfully.
        FAILED: Task failed and the failure was not suppressed.
        SUPPRESSED: Task failed but its policy allowed the pipeline to continue.
        SKIPPED: Task did not run (abort or dry run).
        TIMEOUT: Task exceeded its timeout.
    """

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SUPPRESSED = "suppressed"
    SKIPPED = "skipped"
    TIMEOUT = "timeout"


# ============================================================================
# Suppression policies
# ============================================================================


class SuppressPolicy(ABC):
    """Decide whether a failed command may be ignored.

    Use one of the concrete policies: :class:`AlwaysSuppress`,
    :class:`NeverSuppress` or :class:`SuppressIf`.
    """

    @abstractmethod
    def should_suppress(self, output: CommandOutput) -> bool:
        """Return True if the failure described by ``output`` is non-fatal."""

    @staticmethod
    def coerce(value: bool | Callable[[CommandOutput], bool] | SuppressPolicy | None) -> SuppressPolicy:
        """Build a policy from a boolean, a predicate, or an existing policy.

        Args:
            value: ``True``/``False``, a predicate taking a CommandOutput,
                a SuppressPolicy, or None (never suppress).

        Returns:
            The matching SuppressPolicy.

        Raises:
            PipelineConfigError: If the value has an unsupported type.

        Examples:
            >>> SuppressPolicy.coerce(True)
            AlwaysSuppress()
            >>> SuppressPolicy.coerce(None)
            NeverSuppress()
        """
        if isinstance(value, SuppressPolicy):
            return value
        if value is None or value is False:
            return NeverSuppress()
        if value is True:
            return AlwaysSuppress()
        if callable(value):
            return SuppressIf(value)
        raise PipelineConfigError(f"Invalid suppress_errors value: {value!r}")


@dataclass(frozen=True, slots=True)
class AlwaysSuppress(SuppressPolicy):
    """Every failure is non-fatal."""

    def should_suppress(self, output: CommandOutput) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class NeverSuppress(SuppressPolicy):
    """Every failure aborts the pipeline."""

    def should_suppress(self, output: CommandOutput) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class SuppressIf(SuppressPolicy):
    """Suppress a failure when ``predicate(output)`` is true.

    Attributes:
        predicate: Callable receiving the failed CommandOutput.
    """

    predicate: Callable[[CommandOutput], bool]

    def should_suppress(self, output: CommandOutput) -> bool:
        return bool(self.predicate(output))


# ============================================================================
# Options and results
# ============================================================================


@dataclass(frozen=True, slots=True)
class ShellTaskOptions:
    """Options for a shell command task.

    Attributes:
        suppress_errors: Failure policy. Booleans and predicates are
            coerced to a SuppressPolicy.
        render_stdio_on_error: Include captured stdout/stderr in the raised error.
        on_success: Called with ``(output, context, task)`` after exit code 0.
        timeout: Timeout in seconds (None uses the pipeline default).
        env: Extra environment variables for the child process.
        working_dir: Working directory for the child process.

    Examples:
        >>> options = ShellTaskOptions(suppress_errors=True)
        >>> options.suppress_errors
        AlwaysSuppress()
    """

    suppress_errors: Any = field(default_factory=NeverSuppress)
    render_stdio_on_error: bool = False
    on_success: SuccessCallback | None = None
    timeout: float | None = None
    env: dict[str, str] = field(default_factory=dict)
    working_dir: str | None = None

    def __post_init__(self) -> None:
        """Normalize the suppress policy and validate values.

        Raises:
            PipelineConfigError: If any option value is invalid.
        """
        object.__setattr__(self, "suppress_errors", SuppressPolicy.coerce(self.suppress_errors))
        if self.timeout is not None and self.timeout <= 0:
            raise PipelineConfigError(f"timeout must be positive, got {self.timeout}")
        if self.on_success is not None and not callable(self.on_success):
            raise PipelineConfigError("on_success must be callable")


@dataclass(slots=True)
class CommandOutput:
    """Captured result of one external command.

    Attributes:
        command: Command text that was executed.
        return_code: Process exit code (None if the process never started).
        stdout: Standard output.
        stderr: Standard error.
        stdout_json: Parsed stdout when it is valid JSON, else None.
        duration: Execution time in seconds.
    """

    command: str
    return_code: int | None
    stdout: str = ""
    stderr: str = ""
    stdout_json: Any = None
    duration: float = 0.0

    @property
    def succeeded(self) -> bool:
        """Whether the command exited with code 0."""
        return self.return_code == 0

    @classmethod
    def from_process(
        cls,
        command: str,
        return_code: int | None,
        stdout: str,
        stderr: str,
        duration: float,
    ) -> CommandOutput:
        """Build an output record, parsing stdout as JSON when possible."""
        return cls(
            command=command,
            return_code=return_code,
            stdout=stdout,
            stderr=stderr,
            stdout_json=parse_json_output(stdout),
            duration=duration,
        )


def parse_json_output(text: str) -> Any:
    """Parse command output as JSON.

    Args:
        text: Raw standard output.

    Returns:
        The decoded value, or None when the text is empty or not JSON.

    Examples:
        >>> parse_json_output('{"status": 0}')
        {'status': 0}
        >>> parse_json_output("plain text") is None
        True
    """
    stripped = text.strip()
    if not stripped:
        return None
    try:
        return json.loads(stripped)
    except ValueError:
        return None


@dataclass(slots=True)
class TaskResult:
    """Result of a single pipeline task execution.

    Attributes:
        name: Task name.
        status: Execution result status.
        status_line: Display line at the end of the task.
        output: Captured command output (shell tasks).
        return_value: Return value (function tasks).
        duration: Execution duration in seconds.
        error: Error message if the task failed or was suppressed.

    Examples:
        >>> result = TaskResult(name="deploy", status=TaskStatus.SUCCESS)
        >>> result.status
        <TaskStatus.SUCCESS: 'success'>
    """

    name: str
    status: TaskStatus
    status_line: str = ""
    output: CommandOutput | None = None
    return_value: object = None
    duration: float = 0.0
    error: str | None = None


@dataclass(slots=True)
class PipelineResult:
    """Aggregate result of a pipeline execution.

    Attributes:
        name: Pipeline name.
        results: Ordered list of task results.
        duration: Total pipeline execution duration in seconds.

    Examples:
        >>> result = PipelineResult(name="org-env")
        >>> result.success
        True
    """

    name: str
    results: list[TaskResult] = field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        """Whether no task failed fatally.

        Suppressed failures do not count as failures.
        """
        return not self.failed_tasks

    @property
    def failed_tasks(self) -> list[TaskResult]:
        """Tasks that failed or timed out."""
        return [r for r in self.results if r.status in (TaskStatus.FAILED, TaskStatus.TIMEOUT)]

    @property
    def suppressed_tasks(self) -> list[TaskResult]:
        """Tasks whose failure was suppressed."""
        return [r for r in self.results if r.status == TaskStatus.SUPPRESSED]

    @property
    def skipped_tasks(self) -> list[TaskResult]:
        """Tasks that were skipped."""
        return [r for r in self.results if r.status == TaskStatus.SKIPPED]


__all__ = [
    "AlwaysSuppress",
    "CommandOutput",
    "NeverSuppress",
    "PipelineContext",
    "PipelineResult",
    "ShellTaskOptions",
    "SuccessCallback",
    "SuppressIf",
    "SuppressPolicy",
    "TaskResult",
    "TaskStatus",
    "parse_json_output",
]
