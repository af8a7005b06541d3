"""Build a scratch org based development environment.

Replaces the project's development scratch org with a new one, then
deploys source, creates the agent user and assigns permissions. Duplicate
permission set assignments are ignored so the flow can be rerun.
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
from afdx_setup.sfdx.task import is_duplicate_permset_assignment

if TYPE_CHECKING:
    from afdx_setup.builds.settings import SetupSettings
    from afdx_setup.pipeline.models import PipelineResult
    from afdx_setup.pipeline.reporters import TaskReporter
    from afdx_setup.pipeline.runner import TaskPipeline

logger = logging.getLogger(__name__)

PIPELINE_NAME = "Build scratch org environment"


def assemble_scratch_env(settings: SetupSettings, *, reporter: TaskReporter | None = None) -> TaskPipeline:
    """Register the scratch org setup tasks on a new pipeline.

    Args:
        settings: Values interpolated into the commands.
        reporter: Progress reporter for the pipeline.

    Returns:
        The pipeline, not yet run.
    """
    pipeline = new_pipeline(PIPELINE_NAME, settings, reporter)

    # A missing scratch org is not an error.
    pipeline.add_task(
        sfdx_task(
            settings,
            "Delete existing scratch org",
            f"sf org delete scratch -p -o {settings.dev_org_alias}",
            suppress_errors=True,
        )
    )
    pipeline.add_task(
        sfdx_task(
            settings,
            "Create new scratch org",
            f"sf org create scratch -d -a {settings.dev_org_alias} -f config/{settings.dev_org_config_file}",
            suppress_errors=False,
            render_stdio_on_error=True,
        )
    )
    pipeline.add_task(assign_prompt_template_permsets(settings, suppress_errors=is_duplicate_permset_assignment))
    pipeline.add_task(
        sfdx_task(
            settings,
            "Open the Deployment Status page",
            f"sf org open -b {settings.alternative_browser} -p {settings.deployment_status_page}",
            suppress_errors=False,
        )
    )
    pipeline.add_task(
        sfdx_task(
            settings,
            "Deploy project source",
            "sf project deploy start",
            suppress_errors=False,
            render_stdio_on_error=True,
        )
    )
    pipeline.add_task(query_profile_id(settings))
    pipeline.add_task(update_user_json(settings))
    pipeline.add_task(create_agent_user(settings))
    pipeline.add_task(assign_user_perms(settings, suppress_errors=is_duplicate_permset_assignment))
    pipeline.add_task(assign_agent_perms(settings, suppress_errors=is_duplicate_permset_assignment))

    logger.debug("Assembled '%s' with %d tasks", PIPELINE_NAME, len(pipeline.tasks))
    return pipeline


def build_scratch_env(
    settings: SetupSettings,
    *,
    reporter: TaskReporter | None = None,
    dry_run: bool = False,
) -> PipelineResult:
    """Create a new scratch org and set it up for the project.

    Args:
        settings: Values interpolated into the commands.
        reporter: Progress reporter for the pipeline.
        dry_run: Show the tasks without running them.

    Returns:
        Result of the pipeline run.

    Raises:
        PipelineAbortedError: If a task fails and its failure is not suppressed.
    """
    return assemble_scratch_env(settings, reporter=reporter).run(dry_run=dry_run)


__all__ = [
    "PIPELINE_NAME",
    "assemble_scratch_env",
    "build_scratch_env",
]
