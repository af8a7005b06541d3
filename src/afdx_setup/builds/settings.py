"""Settings shared by the build assemblers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from afdx_setup.config.exceptions import ConfigFormatError
from afdx_setup.sfdx.project import get_sfdx_project_json, get_sfdx_project_name
from afdx_setup.sfdx.usernames import create_unique_nickname, create_unique_username

if TYPE_CHECKING:
    from box import Box

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SetupSettings:
    """Values interpolated into the setup commands.

    Attributes:
        project_dir: Root of the SFDX project; commands run there.
        project_name: Name from ``sfdx-project.json``.
        dev_org_alias: Alias of the development scratch org.
        dev_org_config_file: Scratch org definition under ``config/``.
        alternative_browser: Browser used to open the scratch org.
        deployment_status_page: Setup page opened while deploying.
        agent_username: Unique username of the agent user.
        agent_nickname: Unique community nickname of the agent user.
        user_json_path: Records file used to create the agent user, relative to ``project_dir``.
        task_timeout: Timeout in seconds for each command (None disables).
    """

    project_dir: Path
    project_name: str
    dev_org_alias: str
    dev_org_config_file: str
    alternative_browser: str
    deployment_status_page: str
    agent_username: str
    agent_nickname: str
    user_json_path: str = "data-import/User.json"
    task_timeout: float | None = None

    @classmethod
    def from_config(cls, config: Box, project_dir: Path | None = None) -> SetupSettings:
        """Build settings from loaded configuration and the project descriptor.

        A new agent username is generated on every call.

        Args:
            config: Configuration returned by ``load_config``.
            project_dir: Root of the SFDX project (cwd when omitted).

        Returns:
            The settings for one setup run.

        Raises:
            SfdxProjectError: If ``sfdx-project.json`` cannot be read.
            ConfigFormatError: If a setup value cannot be used.
        """
        project_dir = (project_dir or Path.cwd()).resolve()
        setup = config.setup
        project_name = get_sfdx_project_name(get_sfdx_project_json(project_dir))
        try:
            agent_username = create_unique_username(str(setup.agent_base_username))
        except ValueError as exc:
            raise ConfigFormatError(f"Invalid setup.agent_base_username: {exc}") from exc
        timeout = _coerce_timeout(setup.task_timeout)

        settings = cls(
            project_dir=project_dir,
            project_name=project_name,
            dev_org_alias=f"SCRATCH:{project_name}",
            dev_org_config_file=setup.dev_org_config_file,
            alternative_browser=setup.alternative_browser,
            deployment_status_page=setup.deployment_status_page,
            agent_username=agent_username,
            agent_nickname=create_unique_nickname(agent_username),
            user_json_path=setup.user_json_path,
            task_timeout=timeout,
        )
        logger.debug("Setup settings: %s", settings)
        return settings

    @property
    def user_json_file(self) -> Path:
        """Absolute location of the agent user records file."""
        return self.project_dir / self.user_json_path


def _coerce_timeout(value: object) -> float | None:
    """Convert the configured task timeout to seconds; 0 or empty disables it."""
    if value is None or value == "" or value is False:
        return None
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigFormatError(f"Invalid setup.task_timeout: {value!r} is not a number") from exc
    if timeout < 0:
        raise ConfigFormatError(f"Invalid setup.task_timeout: {value!r} must not be negative")
    return timeout or None


__all__ = [
    "SetupSettings",
]
