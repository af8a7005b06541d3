"""Tests for the afdx_setup.builds.org_env module."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from afdx_setup.builds.org_env import PIPELINE_NAME, assemble_org_env, build_org_env
from afdx_setup.builds.settings import SetupSettings
from afdx_setup.pipeline.exceptions import CommandExecutionError, PipelineAbortedError
from afdx_setup.pipeline.models import TaskStatus

EXPECTED_COMMANDS = [
    "sf org assign permset -n EinsteinGPTPromptTemplateManager -n EinsteinGPTPromptTemplateUser --json",
    "sf project deploy start --source-dir force-app --json",
    "sf data query -q \"SELECT Id FROM Profile WHERE Name='Einstein Agent User'\" --json",
    "sf data import tree --files data-import/User.json --json",
    "sf org assign permset -n AFDX_User_Perms --json",
    "sf org assign permset -n AFDX_Agent_Perms -b afdx-agent.k1@testdrive.org --json",
]


class TestAssembleOrgEnv:
    """Tests for assemble_org_env function."""

    def test_task_order(self, make_settings: Callable[..., SetupSettings]) -> None:
        """Seven tasks in setup order."""
        pipeline = assemble_org_env(make_settings())
        assert pipeline.name == PIPELINE_NAME
        assert [task.name for task in pipeline.tasks] == [
            "assign-prompt-template-perm-sets",
            "deploy-project-source",
            "query-for-einstein-agent-user-profile-id",
            "update-user-json",
            "create-agent-user",
            "assign-afdx-user-perms-to-admin-user",
            "assign-agent-perms",
        ]

    def test_titles_include_username(self, make_settings: Callable[..., SetupSettings]) -> None:
        """User-facing titles show the generated username."""
        titles = [task.title for task in assemble_org_env(make_settings()).tasks]
        assert "Create agent user (afdx-agent.k1@testdrive.org)" in titles
        assert 'Assign "AFDX_Agent_Perms" to afdx-agent.k1@testdrive.org' in titles

    def test_timeout_from_settings(self, make_settings: Callable[..., SetupSettings]) -> None:
        """The pipeline uses the configured timeout."""
        pipeline = assemble_org_env(make_settings(task_timeout=42.0))
        assert pipeline._default_timeout == 42.0


class TestBuildOrgEnv:
    """Tests for build_org_env with stubbed sf commands."""

    def test_happy_path(self, fake_sf, make_settings: Callable[..., SetupSettings], user_json: Path) -> None:
        """All commands run in order from the project directory."""
        settings = make_settings()
        result = build_org_env(settings)

        assert result.success is True
        assert fake_sf.commands == EXPECTED_COMMANDS
        assert all(call["cwd"] == str(settings.project_dir) for call in fake_sf.calls)
        assert all(call["timeout"] is None for call in fake_sf.calls)

        record = json.loads(user_json.read_text(encoding="utf-8"))["records"][0]
        assert record["ProfileId"] == "00e5g000000AgNt"
        assert record["Username"] == "afdx-agent.k1@testdrive.org"
        assert record["CommunityNickname"] == "afdx-agent.k1"

    def test_profile_id_in_status_line(self, fake_sf, make_settings: Callable[..., SetupSettings]) -> None:
        """The query task reports the profile ID."""
        result = build_org_env(make_settings())
        query = next(r for r in result.results if r.name == "query-for-einstein-agent-user-profile-id")
        assert query.status_line == "Query for Einstein Agent User profile ID (00e5g000000AgNt)"

    def test_prompt_template_failure_suppressed(
        self, fake_sf, make_settings: Callable[..., SetupSettings]
    ) -> None:
        """Any failure of the first assignment is ignored."""
        fake_sf.respond("sf org assign permset -n EinsteinGPT", 1, stderr="Permission set not found")
        result = build_org_env(make_settings())
        assert result.success is True
        assert result.results[0].status == TaskStatus.SUPPRESSED
        assert len(fake_sf.calls) == 6

    def test_deploy_failure_aborts(self, fake_sf, make_settings: Callable[..., SetupSettings]) -> None:
        """A failed deploy stops before the agent user is created."""
        fake_sf.respond("sf project deploy start", 1, stdout='{"status": 1}', stderr="Deploy failed")
        with pytest.raises(PipelineAbortedError) as exc_info:
            build_org_env(make_settings())

        assert exc_info.value.task_name == "deploy-project-source"
        cause = exc_info.value.__cause__
        assert isinstance(cause, CommandExecutionError)
        assert cause.render_stdio is True
        assert cause.command == "sf project deploy start --source-dir force-app --json"
        assert len(fake_sf.calls) == 2
        statuses = [r.status for r in exc_info.value.result.results]
        assert statuses == [TaskStatus.SUCCESS, TaskStatus.FAILED] + [TaskStatus.SKIPPED] * 5

    def test_duplicate_assignment_is_fatal(self, fake_sf, make_settings: Callable[..., SetupSettings]) -> None:
        """The org flow does not ignore duplicate assignments."""
        fake_sf.respond_duplicate("sf org assign permset -n AFDX_User_Perms")
        with pytest.raises(PipelineAbortedError) as exc_info:
            build_org_env(make_settings())
        assert exc_info.value.task_name == "assign-afdx-user-perms-to-admin-user"

    def test_missing_profile_aborts(self, fake_sf, make_settings: Callable[..., SetupSettings], user_json: Path) -> None:
        """An empty profile query fails the query task."""
        fake_sf.respond("sf data query", 0, json.dumps({"status": 0, "result": {"records": [], "totalSize": 0}}))
        original = user_json.read_text(encoding="utf-8")
        with pytest.raises(PipelineAbortedError, match="Einstein Agent User") as exc_info:
            build_org_env(make_settings())
        assert exc_info.value.task_name == "query-for-einstein-agent-user-profile-id"
        assert user_json.read_text(encoding="utf-8") == original

    def test_dry_run(self, fake_sf, make_settings: Callable[..., SetupSettings], user_json: Path) -> None:
        """Dry run runs nothing and leaves User.json alone."""
        original = user_json.read_text(encoding="utf-8")
        result = build_org_env(make_settings(), dry_run=True)
        assert fake_sf.calls == []
        assert all(r.status == TaskStatus.SKIPPED for r in result.results)
        assert user_json.read_text(encoding="utf-8") == original
