"""Command line entry point for afdx-setup.

Routes to the existing-org build by default, or to the scratch org build
with ``--scratch-org``.

Examples:
    # Set up the CLI's default org (Developer Edition, sandbox)
    afdx-setup

    # Create and set up a new scratch org
    afdx-setup --scratch-org

    # Show debug output for selected namespaces
    afdx-setup --debug "Setup,UTIL:SFDX"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import typer

from afdx_setup import meta
from afdx_setup.builds import SetupSettings, build_org_env, build_scratch_env
from afdx_setup.cli.common import console, exit_error, render_error
from afdx_setup.config import ConfigFormatError, load_config
from afdx_setup.exceptions import AfdxSetupError
from afdx_setup.logging import init_logging
from afdx_setup.pipeline.reporters import ConsoleReporter

logger = logging.getLogger(__name__)

app = typer.Typer(
    name=meta.__app_name__,
    help=meta.__description__,
    add_completion=False,
    no_args_is_help=False,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{meta.__app_name__} {meta.__version__}")
        raise typer.Exit()


@app.command()
def setup(
    scratch_org: Annotated[
        bool,
        typer.Option(
            "--scratch-org",
            help="Create a new scratch org instead of using the default org.",
        ),
    ] = False,
    project_dir: Annotated[
        Path | None,
        typer.Option(
            "--project-dir",
            "-p",
            help="SFDX project root (default: current directory).",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Configuration file (default: afdx.conf.yml in the project root).",
        ),
    ] = None,
    debug: Annotated[
        str | None,
        typer.Option(
            "--debug",
            help="Comma-separated debug namespaces, e.g. 'Setup,UTIL:SFDX'.",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="List the tasks without running any command.",
        ),
    ] = False,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            help="Timeout in seconds for each command (0 disables).",
            min=0,
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Set up an org for the AFDX Pro-Code Testdrive project.

    Exit codes: 0 (success), 1 (a task failed or setup could not start).
    """
    if project_dir is not None and not project_dir.is_dir():
        exit_error(f"Project directory not found: {project_dir}")

    overrides: dict[str, Any] = {}
    if timeout is not None:
        overrides["setup"] = {"task_timeout": timeout}

    try:
        config = load_config(project_dir, config_file=config_file, overrides=overrides)
        try:
            init_logging(config.logging.level, debug)
        except (TypeError, ValueError) as exc:
            raise ConfigFormatError(f"Invalid logging.level: {exc}") from exc
        settings = SetupSettings.from_config(config, project_dir)
        logger.debug("Agent username: %s", settings.agent_username)

        build = build_scratch_env if scratch_org else build_org_env
        logger.debug("Running %s", build.__name__)
        build(settings, reporter=ConsoleReporter(console), dry_run=dry_run)
    except AfdxSetupError as exc:
        render_error(exc)
        raise typer.Exit(code=1) from exc


def main() -> None:
    """Run the CLI application."""
    app()


__all__ = [
    "app",
    "main",
]
