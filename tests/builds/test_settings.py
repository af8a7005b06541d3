"""Tests for the afdx_setup.builds.settings module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from afdx_setup.builds.settings import SetupSettings
from afdx_setup.config import ConfigFormatError, load_config
from afdx_setup.sfdx.exceptions import SfdxProjectError


class TestSetupSettingsFromConfig:
    """Tests for SetupSettings.from_config."""

    def test_defaults(self, sfdx_project: Path) -> None:
        """Defaults and the project name fill every field."""
        settings = SetupSettings.from_config(load_config(sfdx_project), sfdx_project)
        assert settings.project_dir == sfdx_project.resolve()
        assert settings.project_name == "afdx-pro-code-testdrive"
        assert settings.dev_org_alias == "SCRATCH:afdx-pro-code-testdrive"
        assert settings.dev_org_config_file == "afdx-scratch-def.json"
        assert settings.alternative_browser == "firefox"
        assert settings.deployment_status_page == "lightning/setup/DeployStatus/home"
        assert settings.task_timeout == 1800.0
        assert settings.user_json_file == sfdx_project.resolve() / "data-import" / "User.json"

    def test_unique_username(self, sfdx_project: Path) -> None:
        """Each call generates a new username from the base."""
        config = load_config(sfdx_project)
        first = SetupSettings.from_config(config, sfdx_project)
        second = SetupSettings.from_config(config, sfdx_project)
        assert first.agent_username != second.agent_username
        assert first.agent_username.startswith("afdx-agent.")
        assert first.agent_username.endswith("@testdrive.org")
        assert first.agent_nickname == first.agent_username.partition("@")[0]

    def test_default_project_name(self, sfdx_project: Path) -> None:
        """A project without a name uses the default alias."""
        (sfdx_project / "sfdx-project.json").write_text(json.dumps({"packageDirectories": []}), encoding="utf-8")
        settings = SetupSettings.from_config(load_config(sfdx_project), sfdx_project)
        assert settings.dev_org_alias == "SCRATCH:packaging-project"

    def test_timeout_disabled(self, sfdx_project: Path) -> None:
        """A zero timeout disables it."""
        config = load_config(sfdx_project, overrides={"setup": {"task_timeout": 0}})
        assert SetupSettings.from_config(config, sfdx_project).task_timeout is None

    def test_config_file_values(self, sfdx_project: Path) -> None:
        """Values from afdx.conf.yml reach the settings."""
        (sfdx_project / "afdx.conf.yml").write_text(
            "setup:\n  alternative_browser: chrome\n  agent_base_username: bot@example.com\n",
            encoding="utf-8",
        )
        settings = SetupSettings.from_config(load_config(sfdx_project), sfdx_project)
        assert settings.alternative_browser == "chrome"
        assert settings.agent_username.endswith("@example.com")

    @pytest.mark.parametrize("value", ["soon", -5, [1]])
    def test_invalid_timeout(self, sfdx_project: Path, value: object) -> None:
        """A timeout that is not a non-negative number is a config error."""
        config = load_config(sfdx_project, overrides={"setup": {"task_timeout": value}})
        with pytest.raises(ConfigFormatError, match="setup.task_timeout"):
            SetupSettings.from_config(config, sfdx_project)

    def test_numeric_string_timeout(self, sfdx_project: Path) -> None:
        """A quoted number from YAML is accepted."""
        config = load_config(sfdx_project, overrides={"setup": {"task_timeout": "90"}})
        assert SetupSettings.from_config(config, sfdx_project).task_timeout == 90.0

    def test_invalid_base_username(self, sfdx_project: Path) -> None:
        """A base username without a domain is a config error."""
        config = load_config(sfdx_project, overrides={"setup": {"agent_base_username": "agent"}})
        with pytest.raises(ConfigFormatError, match="setup.agent_base_username"):
            SetupSettings.from_config(config, sfdx_project)

    def test_missing_project_file(self, tmp_path: Path) -> None:
        """Running outside a project fails early."""
        with pytest.raises(SfdxProjectError):
            SetupSettings.from_config(load_config(tmp_path), tmp_path)

    def test_frozen(self, sfdx_project: Path) -> None:
        """Settings are immutable."""
        settings = SetupSettings.from_config(load_config(sfdx_project), sfdx_project)
        with pytest.raises(AttributeError):
            settings.project_name = "other"  # type: ignore[misc]
