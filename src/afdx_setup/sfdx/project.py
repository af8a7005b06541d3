"""Helpers for the SFDX project in the working directory."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from afdx_setup.sfdx.exceptions import SfdxProjectError

logger = logging.getLogger(__name__)

#: Name of the SFDX project descriptor.
SFDX_PROJECT_FILE = "sfdx-project.json"

#: Project name used when ``sfdx-project.json`` has no ``name`` key.
DEFAULT_PROJECT_NAME = "packaging-project"


def get_sfdx_project_json(project_dir: Path | None = None) -> dict[str, Any]:
    """Read and parse ``sfdx-project.json``.

    Args:
        project_dir: Directory holding the project file (cwd when omitted).

    Returns:
        Parsed project descriptor.

    Raises:
        SfdxProjectError: If the file is missing, not JSON, or not an object.
    """
    path = (project_dir or Path.cwd()) / SFDX_PROJECT_FILE
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SfdxProjectError(path, "file not found; run setup from the project root") from None
    except OSError as exc:
        raise SfdxProjectError(path, str(exc)) from exc

    try:
        data = json.loads(text)
    except ValueError as exc:
        raise SfdxProjectError(path, f"invalid JSON ({exc})") from exc

    if not isinstance(data, dict):
        raise SfdxProjectError(path, f"expected a JSON object, got {type(data).__name__}")
    logger.debug("Loaded %s: %s", path, data)
    return data


def get_sfdx_project_name(project_json: dict[str, Any]) -> str:
    """Return the project name, or ``packaging-project`` when undefined.

    Examples:
        >>> get_sfdx_project_name({"name": "afdx-pro-code-testdrive"})
        'afdx-pro-code-testdrive'
        >>> get_sfdx_project_name({})
        'packaging-project'
    """
    name = project_json.get("name")
    if not isinstance(name, str) or not name.strip():
        return DEFAULT_PROJECT_NAME
    return name.strip()


__all__ = [
    "DEFAULT_PROJECT_NAME",
    "SFDX_PROJECT_FILE",
    "get_sfdx_project_json",
    "get_sfdx_project_name",
]
