"""Shell command task for pipeline.

Executes a command string through the shell in its own process group. The string
is passed as-is, so callers can hand over composite commands with several
flags, pipes, or redirections without any quoting being applied.

Standard output is parsed as JSON when possible and exposed to the
``on_success`` callback through ``CommandOutput.stdout_json``.
"""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from typing import TYPE_CHECKING, Any

from afdx_setup.pipeline.base import Task
from afdx_setup.pipeline.exceptions import CommandExecutionError, TaskError, TaskTimeoutError
from afdx_setup.pipeline.models import (
    AlwaysSuppress,
    CommandOutput,
    ShellTaskOptions,
    TaskResult,
    TaskStatus,
)
from afdx_setup.pipeline.validators import validate_command

if TYPE_CHECKING:
    from afdx_setup.pipeline.models import PipelineContext

logger = logging.getLogger(__name__)


class ShellCommandTask(Task):
    """Execute a shell command as a pipeline task.

    Args:
        title: Display title.
        command: Fully formed command text.
        options: Task options, or None for defaults.
        name: Stable task name (derived from the title when omitted).
        **option_kwargs: Shortcut for building ``options`` inline.

    Examples:
        >>> task = ShellCommandTask(
        ...     "Deploy project source",
        ...     "sf project deploy start",
        ...     render_stdio_on_error=True,
        ... )
        >>> task.name
        'deploy-project-source'
    """

    def __init__(
        self,
        title: str,
        command: str,
        options: ShellTaskOptions | None = None,
        *,
        name: str | None = None,
        **option_kwargs: Any,
    ) -> None:
        super().__init__(title, name=name)
        self.command = validate_command(command)
        if options is None:
            options = ShellTaskOptions(**option_kwargs)
        elif option_kwargs:
            raise TypeError("Pass either 'options' or option keywords, not both")
        self.options = options

    def build_command(self) -> str:
        """Return the command text handed to the shell."""
        return self.command

    def execute(
        self,
        context: PipelineContext,
        *,
        dry_run: bool = False,
        default_timeout: float | None = None,
    ) -> TaskResult:
        """Run the command and apply the success and suppression policy.

        Args:
            context: Shared pipeline context, passed to ``on_success``.
            dry_run: If True, log the command without executing it.
            default_timeout: Timeout used when the options set none.

        Returns:
            TaskResult with SUCCESS, SUPPRESSED or SKIPPED status.

        Raises:
            CommandExecutionError: Nonzero exit that the policy does not suppress,
                or a suppression predicate that raised.
            TaskTimeoutError: The command exceeded its timeout.
            TaskError: The ``on_success`` callback raised.
        """
        command = self.build_command()
        logger.debug("ShellCommandTask '%s': command=%r", self.name, command)

        if dry_run:
            logger.info("[DRY RUN] ShellCommandTask '%s': %s", self.name, command)
            self.status = TaskStatus.SKIPPED
            return TaskResult(
                name=self.name,
                status=TaskStatus.SKIPPED,
                status_line=self.status_line,
                error=f"[dry-run] would execute: {command}",
            )

        timeout = self.options.timeout if self.options.timeout is not None else default_timeout
        output = self._run(command, timeout)

        if output.succeeded:
            return self._succeed(output, context)
        return self._fail(output)

    def _run(self, command: str, timeout: float | None) -> CommandOutput:
        """Run the child process and capture its output."""
        env = {**os.environ, **self.options.env} if self.options.env else None
        workdir = os.path.expandvars(self.options.working_dir) if self.options.working_dir else None

        start = time.monotonic()
        try:
            proc = _run_shell(command, timeout=timeout, env=env, cwd=workdir)
        except subprocess.TimeoutExpired as exc:
            logger.warning(
                "ShellCommandTask '%s' timed out after %.1fs",
                self.name,
                timeout,
            )
            output = CommandOutput(
                command=command,
                return_code=None,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr),
                duration=time.monotonic() - start,
            )
            if isinstance(self.options.suppress_errors, AlwaysSuppress):
                return output
            self.status = TaskStatus.TIMEOUT
            raise TaskTimeoutError(self.name, command, timeout or 0.0) from exc
        except OSError as exc:
            logger.exception("ShellCommandTask '%s' OS error", self.name)
            self.status = TaskStatus.FAILED
            raise CommandExecutionError(self.name, command, None, reason=str(exc)) from exc

        return CommandOutput.from_process(
            command,
            proc.returncode,
            proc.stdout,
            proc.stderr,
            time.monotonic() - start,
        )

    def _succeed(self, output: CommandOutput, context: PipelineContext) -> TaskResult:
        """Invoke ``on_success`` and report success."""
        if self.options.on_success is not None:
            try:
                self.options.on_success(output, context, self)
            except Exception as exc:
                logger.exception("ShellCommandTask '%s' on_success callback error", self.name)
                self.status = TaskStatus.FAILED
                raise TaskError(self.name, f"on_success callback failed: {exc}") from exc

        logger.debug("ShellCommandTask '%s' completed in %.3fs", self.name, output.duration)
        self.status = TaskStatus.SUCCESS
        return TaskResult(
            name=self.name,
            status=TaskStatus.SUCCESS,
            status_line=self.status_line,
            output=output,
            duration=output.duration,
        )

    def _fail(self, output: CommandOutput) -> TaskResult:
        """Suppress the failure or raise CommandExecutionError."""
        if output.return_code is None:
            error = "command did not complete"
        else:
            error = output.stderr.strip() or f"exit code {output.return_code}"
        try:
            suppress = self.options.suppress_errors.should_suppress(output)
        except Exception as exc:
            logger.exception("ShellCommandTask '%s' suppress predicate error", self.name)
            self.status = TaskStatus.FAILED
            raise CommandExecutionError(
                self.name,
                output.command,
                output.return_code,
                stdout=output.stdout,
                stderr=output.stderr,
                render_stdio=self.options.render_stdio_on_error,
                reason=f"suppress predicate failed: {exc}",
            ) from exc
        if suppress:
            logger.info(
                "ShellCommandTask '%s' failure suppressed (rc=%s): %s",
                self.name,
                output.return_code,
                error,
            )
            self.status = TaskStatus.SUPPRESSED
            return TaskResult(
                name=self.name,
                status=TaskStatus.SUPPRESSED,
                status_line=self.status_line,
                output=output,
                duration=output.duration,
                error=error,
            )

        logger.warning(
            "ShellCommandTask '%s' failed (rc=%s): %s",
            self.name,
            output.return_code,
            error,
        )
        self.status = TaskStatus.FAILED
        raise CommandExecutionError(
            self.name,
            output.command,
            output.return_code,
            stdout=output.stdout,
            stderr=output.stderr,
            render_stdio=self.options.render_stdio_on_error,
        )


def _run_shell(
    command: str,
    *,
    timeout: float | None,
    env: dict[str, str] | None,
    cwd: str | None,
) -> subprocess.CompletedProcess[str]:
    """Run ``command`` through the shell in its own process group.

    On timeout the whole group is killed, so children started by the
    shell (the ``sf`` node process) do not outlive the task.

    Raises:
        subprocess.TimeoutExpired: With the output captured before the kill.
        OSError: If the process cannot be started.
    """
    proc = subprocess.Popen(  # noqa: S602
        command,
        shell=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        env=env,
        cwd=cwd,
        start_new_session=True,
    )
    with proc:
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            _kill_group(proc)
            stdout, stderr = proc.communicate()
            raise subprocess.TimeoutExpired(command, exc.timeout, output=stdout, stderr=stderr) from exc
    return subprocess.CompletedProcess(command, proc.returncode, stdout, stderr)


def _kill_group(proc: subprocess.Popen[str]) -> None:
    """Kill the process group led by ``proc``."""
    if not hasattr(os, "killpg"):
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        logger.debug("Process group %d already gone", proc.pid)


def _as_text(value: str | bytes | None) -> str:
    """Normalize partial output captured from a timed out process."""
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return value


__all__ = [
    "ShellCommandTask",
]
