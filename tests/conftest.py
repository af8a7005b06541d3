"""Shared pytest fixtures for afdx_setup test suite."""

from __future__ import annotations

# Disable Rich colors and force wide terminal BEFORE any imports
# Rich checks these at import time
import os

os.environ["NO_COLOR"] = "1"
os.environ["TERM"] = "dumb"
os.environ["FORCE_COLOR"] = "0"
os.environ["COLUMNS"] = "200"  # Prevent text wrapping in CLI output

import json
import logging
import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from afdx_setup.builds.settings import SetupSettings

# pylint: disable=redefined-outer-name

SAMPLE_USER_RECORD: dict[str, Any] = {
    "attributes": {"type": "User", "referenceId": "UserRef1"},
    "LastName": "Agent",
    "FirstName": "AFDX",
    "Alias": "afdxagt",
    "Email": "afdx-agent@testdrive.org",
    "ProfileId": None,
    "Username": "afdx-agent@testdrive.org",
    "CommunityNickname": "afdx-agent",
    "TimeZoneSidKey": "America/Los_Angeles",
    "LocaleSidKey": "en_US",
    "EmailEncodingKey": "UTF-8",
    "LanguageLocaleKey": "en_US",
}


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo handler and level changes made by init_logging."""
    yield
    package_logger = logging.getLogger("afdx_setup")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("afdx_setup."):
            logging.getLogger(name).setLevel(logging.NOTSET)


@pytest.fixture
def sfdx_project(tmp_path: Path) -> Path:
    """Create a minimal SFDX project with an agent user records file."""
    project = tmp_path / "afdx-project"
    (project / "data-import").mkdir(parents=True)
    (project / "config").mkdir()
    (project / "sfdx-project.json").write_text(
        json.dumps({"name": "afdx-pro-code-testdrive", "packageDirectories": [{"path": "force-app"}]}),
        encoding="utf-8",
    )
    (project / "data-import" / "User.json").write_text(
        json.dumps({"records": [dict(SAMPLE_USER_RECORD)]}, indent=2),
        encoding="utf-8",
    )
    return project


@pytest.fixture
def user_json(sfdx_project: Path) -> Path:
    """Return the records file of the sample project."""
    return sfdx_project / "data-import" / "User.json"


PROFILE_QUERY_STDOUT = json.dumps(
    {
        "status": 0,
        "result": {
            "records": [{"attributes": {"type": "Profile"}, "Id": "00e5g000000AgNt"}],
            "totalSize": 1,
            "done": True,
        },
    }
)

DUPLICATE_STDOUT = json.dumps(
    {
        "status": 1,
        "result": {
            "successes": [],
            "failures": [{"name": "admin", "message": "Duplicate PermissionSetAssignment: Assignee, PermissionSet"}],
        },
    }
)


class FakeSf:
    """Stand-in for the shell runner recording every ``sf`` call.

    Commands succeed with ``{"status": 0}`` unless a response is registered
    for a prefix of the command.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.responses: list[tuple[str, int, str, str]] = [("sf data query", 0, PROFILE_QUERY_STDOUT, "")]

    def respond(self, prefix: str, returncode: int, stdout: str = "", stderr: str = "") -> None:
        """Register a response; later registrations win."""
        self.responses.insert(0, (prefix, returncode, stdout, stderr))

    def respond_duplicate(self, prefix: str) -> None:
        """Make a permset assignment fail because it already exists."""
        self.respond(prefix, 1, DUPLICATE_STDOUT)

    @property
    def commands(self) -> list[str]:
        return [call["command"] for call in self.calls]

    def __call__(self, command: str, **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append({"command": command, **kwargs})
        for prefix, returncode, stdout, stderr in self.responses:
            if command.startswith(prefix):
                return subprocess.CompletedProcess(command, returncode, stdout, stderr)
        return subprocess.CompletedProcess(command, 0, '{"status": 0}', "")


@pytest.fixture
def fake_sf(monkeypatch: pytest.MonkeyPatch) -> FakeSf:
    """Replace process execution in shell tasks with a recorder."""
    fake = FakeSf()
    monkeypatch.setattr("afdx_setup.pipeline.tasks.shell._run_shell", fake)
    return fake


@pytest.fixture
def make_settings(sfdx_project: Path) -> Callable[..., SetupSettings]:
    """Build settings for the sample project with a fixed agent username."""

    def _make(**overrides: Any) -> SetupSettings:
        values: dict[str, Any] = {
            "project_dir": sfdx_project,
            "project_name": "afdx-pro-code-testdrive",
            "dev_org_alias": "SCRATCH:afdx-pro-code-testdrive",
            "dev_org_config_file": "afdx-scratch-def.json",
            "alternative_browser": "firefox",
            "deployment_status_page": "lightning/setup/DeployStatus/home",
            "agent_username": "afdx-agent.k1@testdrive.org",
            "agent_nickname": "afdx-agent.k1",
        }
        values.update(overrides)
        return SetupSettings(**values)

    return _make
