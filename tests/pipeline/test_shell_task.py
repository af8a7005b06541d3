"""Tests for the afdx_setup.pipeline.tasks.shell module."""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Any

import pytest

from afdx_setup.pipeline.base import Task
from afdx_setup.pipeline.exceptions import CommandExecutionError, TaskError, TaskTimeoutError
from afdx_setup.pipeline.models import CommandOutput, ShellTaskOptions, TaskStatus
from afdx_setup.pipeline.tasks.shell import ShellCommandTask


def _py(code: str) -> str:
    """Build a shell command running a Python snippet."""
    return f'{sys.executable} -c "{code}"'


class TestShellCommandTaskExecute:
    """Tests for ShellCommandTask.execute method."""

    def test_simple_echo(self) -> None:
        """Execute a simple echo command."""
        task = ShellCommandTask("Greet", "echo hello")
        result = task.execute({})
        assert result.status == TaskStatus.SUCCESS
        assert task.status == TaskStatus.SUCCESS
        assert result.output is not None
        assert "hello" in result.output.stdout
        assert result.output.return_code == 0
        assert result.duration > 0

    def test_json_stdout_parsed(self) -> None:
        """JSON stdout is available as stdout_json."""
        task = ShellCommandTask("Emit", _py("import json; print(json.dumps({'status': 0, 'result': [1, 2]}))"))
        result = task.execute({})
        assert result.output is not None
        assert result.output.stdout_json == {"status": 0, "result": [1, 2]}

    def test_command_with_stderr(self) -> None:
        """Capture stderr from a successful command."""
        task = ShellCommandTask("Warn", _py("import sys; sys.stderr.write('warn\\n')"))
        result = task.execute({})
        assert result.status == TaskStatus.SUCCESS
        assert result.output is not None
        assert "warn" in result.output.stderr

    def test_failing_command_raises(self) -> None:
        """Nonzero exit without suppression raises CommandExecutionError."""
        task = ShellCommandTask("Fail", _py("import sys; sys.exit(3)"))
        with pytest.raises(CommandExecutionError) as exc_info:
            task.execute({})
        assert exc_info.value.return_code == 3
        assert exc_info.value.task_name == "fail"
        assert task.status == TaskStatus.FAILED

    def test_render_stdio_on_error(self) -> None:
        """Captured output is part of the error when requested."""
        code = "import sys; print('deploy log'); sys.stderr.write('error msg\\n'); sys.exit(2)"
        task = ShellCommandTask("Deploy", _py(code), render_stdio_on_error=True)
        with pytest.raises(CommandExecutionError) as exc_info:
            task.execute({})
        assert "deploy log" in exc_info.value.reason
        assert "error msg" in exc_info.value.reason
        assert exc_info.value.render_stdio is True

    def test_always_suppress(self) -> None:
        """Suppressed failures return a SUPPRESSED result."""
        code = "import sys; sys.stderr.write('no such org\\n'); sys.exit(1)"
        task = ShellCommandTask("Delete org", _py(code), suppress_errors=True)
        result = task.execute({})
        assert result.status == TaskStatus.SUPPRESSED
        assert result.error == "no such org"
        assert task.status == TaskStatus.SUPPRESSED

    def test_predicate_suppress(self) -> None:
        """A predicate receives the failed output and decides."""
        seen: list[CommandOutput] = []

        def only_duplicates(output: CommandOutput) -> bool:
            seen.append(output)
            return "Duplicate" in output.stderr

        dup = ShellCommandTask("Dup", _py("import sys; sys.stderr.write('Duplicate'); sys.exit(1)"),
                               suppress_errors=only_duplicates)
        assert dup.execute({}).status == TaskStatus.SUPPRESSED

        other = ShellCommandTask("Other", _py("import sys; sys.stderr.write('Auth'); sys.exit(1)"),
                                 suppress_errors=only_duplicates)
        with pytest.raises(CommandExecutionError):
            other.execute({})
        assert [o.return_code for o in seen] == [1, 1]

    def test_on_success_mutates_context_and_status_line(self) -> None:
        """on_success can write context and rewrite the status line."""

        def on_success(output: CommandOutput, ctx: dict[str, Any], task: Task) -> None:
            ctx["profile_id"] = output.stdout_json["Id"]
            task.status_line = f"Found ({ctx['profile_id']})"

        task = ShellCommandTask(
            "Find",
            _py("import json; print(json.dumps({'Id': '00e123'}))"),
            on_success=on_success,
        )
        ctx: dict[str, Any] = {}
        result = task.execute(ctx)
        assert ctx == {"profile_id": "00e123"}
        assert task.title == "Find"
        assert task.status_line == "Found (00e123)"
        assert result.status_line == "Found (00e123)"

    def test_on_success_error_is_fatal(self) -> None:
        """An exception in on_success fails the task."""

        def on_success(output: CommandOutput, ctx: dict[str, Any], task: Task) -> None:
            raise LookupError("no records")

        task = ShellCommandTask("Find", "echo plain", on_success=on_success)
        with pytest.raises(TaskError, match="no records"):
            task.execute({})
        assert task.status == TaskStatus.FAILED

    def test_on_success_not_called_on_suppressed_failure(self) -> None:
        """on_success only runs after exit code 0."""
        calls: list[int] = []
        task = ShellCommandTask(
            "Fail",
            _py("import sys; sys.exit(1)"),
            suppress_errors=True,
            on_success=lambda output, ctx, task: calls.append(1),
        )
        task.execute({})
        assert calls == []

    def test_timeout(self) -> None:
        """Commands exceeding the timeout raise TaskTimeoutError."""
        task = ShellCommandTask("Slow", _py("import time; time.sleep(5)"), timeout=0.5)
        with pytest.raises(TaskTimeoutError) as exc_info:
            task.execute({})
        assert exc_info.value.timeout == 0.5
        assert task.status == TaskStatus.TIMEOUT

    def test_default_timeout_used(self) -> None:
        """The pipeline default applies when the task sets no timeout."""
        task = ShellCommandTask("Slow", _py("import time; time.sleep(5)"))
        with pytest.raises(TaskTimeoutError):
            task.execute({}, default_timeout=0.5)

    def test_timeout_suppressed_by_always(self) -> None:
        """AlwaysSuppress also covers timeouts."""
        task = ShellCommandTask("Slow", _py("import time; time.sleep(5)"), timeout=0.5, suppress_errors=True)
        result = task.execute({})
        assert result.status == TaskStatus.SUPPRESSED
        assert result.error == "command did not complete"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX process groups")
    def test_timeout_kills_child_processes(self, tmp_path: Path) -> None:
        """Processes started by the shell die with it on timeout."""
        marker = tmp_path / "late.txt"
        task = ShellCommandTask("Spawn", f"(sleep 1.5; echo late > {marker}) & sleep 5", timeout=0.5)
        with pytest.raises(TaskTimeoutError):
            task.execute({})
        time.sleep(2.5)
        assert not marker.exists()

    def test_raising_predicate_is_fatal(self) -> None:
        """A predicate that raises fails the task with a command error."""

        def broken(output: CommandOutput) -> bool:
            return output.stdout_json["result"]

        task = ShellCommandTask("Assign", _py("import sys; sys.exit(1)"), suppress_errors=broken)
        with pytest.raises(CommandExecutionError, match="suppress predicate failed") as exc_info:
            task.execute({})
        assert exc_info.value.return_code == 1
        assert isinstance(exc_info.value.__cause__, TypeError)
        assert task.status == TaskStatus.FAILED

    def test_with_env(self) -> None:
        """Pass environment variables to the command."""
        task = ShellCommandTask(
            "Env",
            _py("import os; print(os.environ['AFDX_TEST_VAR'])"),
            env={"AFDX_TEST_VAR": "hello_pipeline"},
        )
        result = task.execute({})
        assert result.output is not None
        assert "hello_pipeline" in result.output.stdout

    def test_invalid_working_dir(self) -> None:
        """An invalid working directory is a command failure."""
        task = ShellCommandTask("Bad dir", "echo hello", working_dir="/nonexistent/path/that/does/not/exist")
        with pytest.raises(CommandExecutionError) as exc_info:
            task.execute({})
        assert exc_info.value.return_code is None

    def test_dry_run(self) -> None:
        """Dry run does not execute the command."""
        task = ShellCommandTask("Dangerous", "echo should_not_run")
        result = task.execute({}, dry_run=True)
        assert result.status == TaskStatus.SKIPPED
        assert result.output is None
        assert result.error is not None
        assert "should_not_run" in result.error


class TestShellCommandTaskInit:
    """Tests for ShellCommandTask construction."""

    def test_base_task_is_abstract(self) -> None:
        """Task subclasses must implement execute."""
        with pytest.raises(TypeError):
            Task("Abstract")  # type: ignore[abstract]

    def test_name_derived_from_title(self) -> None:
        """The name is a slug of the title."""
        task = ShellCommandTask("Deploy project source", "sf project deploy start")
        assert task.name == "deploy-project-source"
        assert task.status_line == "Deploy project source"
        assert task.status == TaskStatus.PENDING

    def test_explicit_name(self) -> None:
        """An explicit name overrides the slug."""
        task = ShellCommandTask("Create agent user (x@y.z)", "sf data import tree", name="create-agent-user")
        assert task.name == "create-agent-user"

    def test_options_object(self) -> None:
        """Options may be passed as a ShellTaskOptions instance."""
        options = ShellTaskOptions(render_stdio_on_error=True)
        task = ShellCommandTask("Deploy", "sf project deploy start", options)
        assert task.options is options

    def test_options_and_keywords_conflict(self) -> None:
        """Passing both options and option keywords is an error."""
        with pytest.raises(TypeError):
            ShellCommandTask("Deploy", "sf project deploy start", ShellTaskOptions(), render_stdio_on_error=True)

    def test_command_kept_verbatim(self) -> None:
        """The command is not quoted or rewritten."""
        command = "sf data query -q \"SELECT Id FROM Profile WHERE Name='Einstein Agent User'\""
        task = ShellCommandTask("Query", command)
        assert task.command == command
        assert task.build_command() == command
