"""Sequential task pipeline for afdx_setup.

Runs an ordered list of tasks against one shared, mutable context.
Tasks are shell commands (with JSON output capture, success callbacks and
failure-suppression policies) or plain Python functions. Execution is
strictly sequential; the first unsuppressed failure aborts the run.

Examples:
    >>> from afdx_setup.pipeline import ShellCommandTask, TaskPipeline
    >>> pipeline = TaskPipeline("demo")
    >>> _ = pipeline.add_task(
    ...     ShellCommandTask("Delete old org", "sf org delete scratch -p -o demo", suppress_errors=True)
    ... )
    >>> _ = pipeline.add_task(ShellCommandTask("Say hello", "echo hello"))
    >>> result = pipeline.run()  # doctest: +SKIP
"""

from afdx_setup.pipeline.base import Task
from afdx_setup.pipeline.exceptions import (
    CommandExecutionError,
    PipelineAbortedError,
    PipelineConfigError,
    PipelineError,
    TaskError,
    TaskTimeoutError,
)
from afdx_setup.pipeline.models import (
    AlwaysSuppress,
    CommandOutput,
    NeverSuppress,
    PipelineContext,
    PipelineResult,
    ShellTaskOptions,
    SuppressIf,
    SuppressPolicy,
    TaskResult,
    TaskStatus,
)
from afdx_setup.pipeline.reporters import ConsoleReporter, LoggingReporter, TaskReporter
from afdx_setup.pipeline.runner import TaskPipeline
from afdx_setup.pipeline.tasks import FunctionTask, ShellCommandTask

__all__ = [
    "AlwaysSuppress",
    "CommandExecutionError",
    "CommandOutput",
    "ConsoleReporter",
    "FunctionTask",
    "LoggingReporter",
    "NeverSuppress",
    "PipelineAbortedError",
    "PipelineConfigError",
    "PipelineContext",
    "PipelineError",
    "PipelineResult",
    "ShellCommandTask",
    "ShellTaskOptions",
    "SuppressIf",
    "SuppressPolicy",
    "Task",
    "TaskError",
    "TaskPipeline",
    "TaskReporter",
    "TaskResult",
    "TaskStatus",
    "TaskTimeoutError",
]
