"""Specialized exceptions raised by the afdx_setup.pipeline module.

Exception hierarchy::

    AfdxSetupError
        PipelineError (base for all pipeline errors)
            PipelineConfigError (invalid pipeline assembly, also ValueError)
            PipelineAbortedError (unsuppressed task failure)
            TaskError (task execution error)
                CommandExecutionError (shell command exited nonzero)
                    TaskTimeoutError (command exceeded its timeout)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from afdx_setup.exceptions import AfdxSetupError

if TYPE_CHECKING:
    from afdx_setup.pipeline.models import PipelineResult


class PipelineError(AfdxSetupError):
    """Base exception for all pipeline module errors.

    All pipeline-specific exceptions inherit from this class,
    allowing for easy catching of any pipeline error.
    """


class PipelineConfigError(PipelineError, ValueError):
    """Pipeline assembly is invalid.

    Raised when a task is malformed, registered twice, or when
    the pipeline exceeds its hard limits.
    """


class PipelineAbortedError(PipelineError):
    """Pipeline execution was aborted by an unsuppressed task failure.

    The remaining tasks are recorded as skipped in ``result``.

    Attributes:
        task_name: Name of the task that caused the abort.
        reason: Description of why the task failed.
        result: Partial pipeline result, including the skipped tasks.
    """

    def __init__(
        self,
        task_name: str,
        reason: str,
        result: PipelineResult | None = None,
    ) -> None:
        """Initialize PipelineAbortedError.

        Args:
            task_name: Name of the task that caused the abort.
            reason: Description of why the task failed.
            result: Partial pipeline result at the time of the abort.
        """
        super().__init__(f"Pipeline aborted at task '{task_name}': {reason}")
        self.task_name = task_name
        self.reason = reason
        self.result = result


class TaskError(PipelineError):
    """A pipeline task failed during execution.

    Attributes:
        task_name: Name of the task that failed.
        reason: Description of the failure.
    """

    def __init__(self, task_name: str, reason: str) -> None:
        """Initialize TaskError.

        Args:
            task_name: Name of the task that failed.
            reason: Description of the failure.
        """
        super().__init__(f"Task '{task_name}' failed: {reason}")
        self.task_name = task_name
        self.reason = reason


class CommandExecutionError(TaskError):
    """An external command failed.

    Attributes:
        command: The command text that was executed.
        return_code: Process exit code, or None if the process never ran.
        stdout: Captured standard output.
        stderr: Captured standard error.
        render_stdio: Whether captured output belongs in the rendered message.
    """

    def __init__(  # noqa: PLR0913
        self,
        task_name: str,
        command: str,
        return_code: int | None,
        *,
        stdout: str = "",
        stderr: str = "",
        render_stdio: bool = False,
        reason: str | None = None,
    ) -> None:
        """Initialize CommandExecutionError.

        Args:
            task_name: Name of the task that ran the command.
            command: The command text.
            return_code: Process exit code (None if it could not start).
            stdout: Captured standard output.
            stderr: Captured standard error.
            render_stdio: Include captured output in the error message.
            reason: Override for the failure description.
        """
        if reason is None:
            reason = f"command exited with code {return_code}"
        message = f"{reason} ({command})"
        if render_stdio:
            message = _append_stdio(message, stdout, stderr)
        super().__init__(task_name, message)
        self.command = command
        self.return_code = return_code
        self.stdout = stdout
        self.stderr = stderr
        self.render_stdio = render_stdio


class TaskTimeoutError(CommandExecutionError):
    """A command exceeded its timeout and was killed.

    Attributes:
        timeout: The timeout value in seconds.
    """

    def __init__(self, task_name: str, command: str, timeout: float) -> None:
        """Initialize TaskTimeoutError.

        Args:
            task_name: Name of the task that timed out.
            command: The command text.
            timeout: The timeout value in seconds.
        """
        super().__init__(
            task_name,
            command,
            None,
            reason=f"exceeded timeout of {timeout}s",
        )
        self.timeout = timeout


def _append_stdio(message: str, stdout: str, stderr: str) -> str:
    """Append non-empty captured streams to an error message."""
    parts = [message]
    if stdout.strip():
        parts.append(f"stdout:\n{stdout.rstrip()}")
    if stderr.strip():
        parts.append(f"stderr:\n{stderr.rstrip()}")
    return "\n".join(parts)


__all__ = [
    "CommandExecutionError",
    "PipelineAbortedError",
    "PipelineConfigError",
    "PipelineError",
    "TaskError",
    "TaskTimeoutError",
]
