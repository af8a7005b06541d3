"""Salesforce CLI helpers for afdx_setup.

Provides the ``sf``-aware task type, project descriptor reading, unique
username generation, failure predicates and the agent user file patcher.
"""

from afdx_setup.sfdx.exceptions import SfdxError, SfdxProjectError, UserJsonError
from afdx_setup.sfdx.project import (
    DEFAULT_PROJECT_NAME,
    get_sfdx_project_json,
    get_sfdx_project_name,
)
from afdx_setup.sfdx.task import SfdxTask, is_duplicate_permset_assignment
from afdx_setup.sfdx.user_json import patch_user_json, read_user_json
from afdx_setup.sfdx.usernames import create_unique_nickname, create_unique_username

__all__ = [
    "DEFAULT_PROJECT_NAME",
    "SfdxError",
    "SfdxProjectError",
    "SfdxTask",
    "UserJsonError",
    "create_unique_nickname",
    "create_unique_username",
    "get_sfdx_project_json",
    "get_sfdx_project_name",
    "is_duplicate_permset_assignment",
    "patch_user_json",
    "read_user_json",
]
