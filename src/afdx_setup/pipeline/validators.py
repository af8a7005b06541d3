"""Input validation for afdx_setup.pipeline module.

Task names are the stable identity of a task inside a pipeline; titles are
free text shown to the user. Commands are passed to the shell verbatim, so
only structural checks are applied here.
"""

from __future__ import annotations

import re

from afdx_setup.pipeline.exceptions import PipelineConfigError

# ============================================================================
# Constants - Hard Limits
# ============================================================================

#: Maximum task name length.
MAX_TASK_NAME_LENGTH = 64

#: Pattern for valid task names.
TASK_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")

#: Maximum number of tasks in a single pipeline.
MAX_PIPELINE_TASKS = 50

#: Maximum length of a shell command string.
MAX_COMMAND_LENGTH = 8192

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


# ============================================================================
# Validation Functions
# ============================================================================


def validate_task_name(name: str) -> str:
    """Validate and return a task name.

    Rules:
    - Cannot be empty
    - Max 64 characters (hard limit)
    - Must start with a letter
    - Only alphanumeric, underscore, hyphen allowed

    Args:
        name: Task name to validate.

    Returns:
        The validated task name (unchanged).

    Raises:
        PipelineConfigError: If name is invalid.

    Examples:
        >>> validate_task_name("deploy-source")
        'deploy-source'
        >>> validate_task_name("")
        Traceback (most recent call last):
            ...
        afdx_setup.pipeline.exceptions.PipelineConfigError: Task name cannot be empty
    """
    if not name:
        raise PipelineConfigError("Task name cannot be empty")
    if len(name) > MAX_TASK_NAME_LENGTH:
        raise PipelineConfigError(f"Task name too long (max {MAX_TASK_NAME_LENGTH} chars)")
    if not TASK_NAME_PATTERN.match(name):
        raise PipelineConfigError(
            "Task name must start with a letter and contain only alphanumeric, underscore, or hyphen characters"
        )
    return name


def validate_title(title: str) -> str:
    """Validate a task display title.

    Args:
        title: Title to validate.

    Returns:
        The validated title (unchanged).

    Raises:
        PipelineConfigError: If the title is empty or blank.
    """
    if not title or not title.strip():
        raise PipelineConfigError("Task title cannot be empty")
    return title


def validate_command(command: str) -> str:
    """Validate a shell command string.

    The command is not quoted or rewritten; composite commands with
    several flags are expected.

    Args:
        command: Command text to validate.

    Returns:
        The validated command (unchanged).

    Raises:
        PipelineConfigError: If the command is empty, too long, or contains NUL bytes.

    Examples:
        >>> validate_command("sf org assign permset -n AFDX_User_Perms")
        'sf org assign permset -n AFDX_User_Perms'
    """
    if not command or not command.strip():
        raise PipelineConfigError("Command cannot be empty")
    if len(command) > MAX_COMMAND_LENGTH:
        raise PipelineConfigError(f"Command too long (max {MAX_COMMAND_LENGTH} chars)")
    if "\x00" in command:
        raise PipelineConfigError("Command cannot contain NUL bytes")
    return command


def slugify_title(title: str) -> str:
    """Derive a valid task name from a display title.

    Args:
        title: Free-text task title.

    Returns:
        Lowercase, hyphen-separated name truncated to the name limit.

    Examples:
        >>> slugify_title('Assign "AFDX_User_Perms" to admin user')
        'assign-afdx-user-perms-to-admin-user'
        >>> slugify_title("42 things")
        'task-42-things'
    """
    slug = _SLUG_STRIP.sub("-", title.lower()).strip("-")
    if not slug or not slug[0].isalpha():
        slug = f"task-{slug}" if slug else "task"
    return slug[:MAX_TASK_NAME_LENGTH].rstrip("-")


def validate_pipeline_size(task_count: int) -> None:
    """Validate the number of tasks in a pipeline.

    Args:
        task_count: Number of registered tasks.

    Raises:
        PipelineConfigError: If the pipeline is empty or too large.
    """
    if task_count == 0:
        raise PipelineConfigError("Pipeline must have at least one task")
    if task_count > MAX_PIPELINE_TASKS:
        raise PipelineConfigError(f"Too many tasks (max {MAX_PIPELINE_TASKS})")


__all__ = [
    "MAX_COMMAND_LENGTH",
    "MAX_PIPELINE_TASKS",
    "MAX_TASK_NAME_LENGTH",
    "TASK_NAME_PATTERN",
    "slugify_title",
    "validate_command",
    "validate_pipeline_size",
    "validate_task_name",
    "validate_title",
]
