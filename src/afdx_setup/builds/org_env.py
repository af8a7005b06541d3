"""Set up an existing org (Developer Edition, sandbox) for the project.

Deploys project source, creates the agent user and assigns the agent
permissions. The org is the CLI's default target org.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from afdx_setup.builds.common import (
    assign_agent_perms,
    assign_prompt_template_permsets,
    assign_user_perms,
    create_agent_user,
    new_pipeline,
    query_profile_id,
    sfdx_task,
    update_user_json,
)

if TYPE_CHECKING:
    from afdx_setup.builds.settings import SetupSettings
    from afdx_setup.pipeline.models import PipelineResult
    from afdx_setup.pipeline.reporters import TaskReporter
    from afdx_setup.pipeline.runner import TaskPipeline

logger = logging.getLogger(__name__)

PIPELINE_NAME = "Build org environment"


def assemble_org_env(settings: SetupSettings, *, reporter: TaskReporter | None = None) -> TaskPipeline:
    """Register the existing-org setup tasks on a new pipeline.

    Args:
        settings: Values interpolated into the commands.
        reporter: Progress reporter for the pipeline.

    Returns:
        The pipeline, not yet run.
    """
    pipeline = new_pipeline(PIPELINE_NAME, settings, reporter)

    pipeline.add_task(assign_prompt_template_permsets(settings, suppress_errors=True))
    pipeline.add_task(
        sfdx_task(
            settings,
            "Deploy project source",
            "sf project deploy start --source-dir force-app",
            suppress_errors=False,
            render_stdio_on_error=True,
        )
    )
    pipeline.add_task(query_profile_id(settings))
    pipeline.add_task(update_user_json(settings))
    pipeline.add_task(create_agent_user(settings))
    pipeline.add_task(assign_user_perms(settings, suppress_errors=False))
    pipeline.add_task(assign_agent_perms(settings, suppress_errors=False))

    logger.debug("Assembled '%s' with %d tasks", PIPELINE_NAME, len(pipeline.tasks))
    return pipeline


def build_org_env(
    settings: SetupSettings,
    *,
    reporter: TaskReporter | None = None,
    dry_run: bool = False,
) -> PipelineResult:
    """Set up an existing org for the project.

    Args:
        settings: Values interpolated into the commands.
        reporter: Progress reporter for the pipeline.
        dry_run: Show the tasks without running them.

    Returns:
        Result of the pipeline run.

    Raises:
        PipelineAbortedError: If a task fails and its failure is not suppressed.
    """
    return assemble_org_env(settings, reporter=reporter).run(dry_run=dry_run)


__all__ = [
    "PIPELINE_NAME",
    "assemble_org_env",
    "build_org_env",
]
