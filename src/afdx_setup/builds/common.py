"""Tasks shared by the org and scratch org build scripts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from afdx_setup.pipeline.runner import TaskPipeline
from afdx_setup.pipeline.tasks.function import FunctionTask
from afdx_setup.sfdx.task import SfdxTask
from afdx_setup.sfdx.user_json import patch_user_json

if TYPE_CHECKING:
    from afdx_setup.builds.settings import SetupSettings
    from afdx_setup.pipeline.base import Task
    from afdx_setup.pipeline.models import CommandOutput, PipelineContext
    from afdx_setup.pipeline.reporters import TaskReporter

logger = logging.getLogger(__name__)

#: Profile assigned to the agent user.
AGENT_PROFILE_NAME = "Einstein Agent User"

#: Context key holding the queried profile ID.
PROFILE_ID_KEY = "profile_id"

PROMPT_TEMPLATE_PERMSETS_COMMAND = (
    "sf org assign permset -n EinsteinGPTPromptTemplateManager -n EinsteinGPTPromptTemplateUser"
)
PROFILE_QUERY_COMMAND = f"sf data query -q \"SELECT Id FROM Profile WHERE Name='{AGENT_PROFILE_NAME}'\""
PROFILE_QUERY_TITLE = f"Query for {AGENT_PROFILE_NAME} profile ID"


def new_pipeline(name: str, settings: SetupSettings, reporter: TaskReporter | None) -> TaskPipeline:
    """Create an empty pipeline with a fresh context."""
    return TaskPipeline(
        name,
        context={},
        default_timeout=settings.task_timeout,
        reporter=reporter,
    )


def sfdx_task(settings: SetupSettings, title: str, command: str, **options: Any) -> SfdxTask:
    """Create an ``sf`` task that runs in the project directory."""
    return SfdxTask(title, command, working_dir=str(settings.project_dir), **options)


def store_profile_id(output: CommandOutput, ctx: PipelineContext, task: Task) -> None:
    """Save the queried profile ID in the context and show it in the status line.

    Raises:
        LookupError: If the query returned no profile.
    """
    try:
        profile_id = output.stdout_json["result"]["records"][0]["Id"]
    except (KeyError, IndexError, TypeError):
        raise LookupError(f"Profile '{AGENT_PROFILE_NAME}' not found in the target org") from None
    ctx[PROFILE_ID_KEY] = profile_id
    task.status_line = f"{PROFILE_QUERY_TITLE} ({profile_id})"
    logger.debug("Profile ID: %s", profile_id)


def assign_prompt_template_permsets(settings: SetupSettings, suppress_errors: Any) -> SfdxTask:
    """Assign the Prompt Template perm sets to the default user.

    These must be in place before deployment, otherwise the authoring
    bundle fails validation because the prompt template metadata is not
    visible to the deploying user.
    """
    return sfdx_task(
        settings,
        "Assign Prompt Template perm sets",
        PROMPT_TEMPLATE_PERMSETS_COMMAND,
        suppress_errors=suppress_errors,
        render_stdio_on_error=True,
    )


def query_profile_id(settings: SetupSettings) -> SfdxTask:
    return sfdx_task(
        settings,
        PROFILE_QUERY_TITLE,
        PROFILE_QUERY_COMMAND,
        suppress_errors=False,
        render_stdio_on_error=True,
        on_success=store_profile_id,
    )


def update_user_json(settings: SetupSettings) -> FunctionTask:
    """Write the profile ID and the unique username into the records file."""

    def _patch(ctx: PipelineContext, task: FunctionTask) -> None:
        patch_user_json(
            settings.user_json_file,
            profile_id=ctx.get(PROFILE_ID_KEY, ""),
            username=settings.agent_username,
            nickname=settings.agent_nickname,
        )

    return FunctionTask(
        f"Update User.json ({settings.agent_username})",
        _patch,
        name="update-user-json",
    )


def create_agent_user(settings: SetupSettings) -> SfdxTask:
    return sfdx_task(
        settings,
        f"Create agent user ({settings.agent_username})",
        f"sf data import tree --files {settings.user_json_path}",
        suppress_errors=False,
        render_stdio_on_error=True,
        name="create-agent-user",
    )


def assign_user_perms(settings: SetupSettings, suppress_errors: Any) -> SfdxTask:
    return sfdx_task(
        settings,
        'Assign "AFDX_User_Perms" to admin user',
        "sf org assign permset -n AFDX_User_Perms",
        suppress_errors=suppress_errors,
        render_stdio_on_error=True,
    )


def assign_agent_perms(settings: SetupSettings, suppress_errors: Any) -> SfdxTask:
    return sfdx_task(
        settings,
        f'Assign "AFDX_Agent_Perms" to {settings.agent_username}',
        f"sf org assign permset -n AFDX_Agent_Perms -b {settings.agent_username}",
        suppress_errors=suppress_errors,
        render_stdio_on_error=True,
        name="assign-agent-perms",
    )


__all__ = [
    "AGENT_PROFILE_NAME",
    "PROFILE_ID_KEY",
    "PROFILE_QUERY_COMMAND",
    "PROMPT_TEMPLATE_PERMSETS_COMMAND",
    "assign_agent_perms",
    "assign_prompt_template_permsets",
    "assign_user_perms",
    "create_agent_user",
    "new_pipeline",
    "query_profile_id",
    "sfdx_task",
    "store_profile_id",
    "update_user_json",
]
