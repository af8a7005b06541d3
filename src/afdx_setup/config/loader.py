"""Configuration loading for afdx_setup.

Settings come from three layers, later layers winning:

1. Built-in defaults (:data:`DEFAULT_CONFIG`)
2. ``afdx.conf.yml`` in the project directory, or an explicit file
3. Overrides passed by the caller (CLI flags)

The merged result is returned as a :class:`box.Box` for attribute access.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from box import Box

from afdx_setup.config.exceptions import ConfigFileNotFoundError, ConfigFormatError

log = logging.getLogger(__name__)

#: Name of the optional configuration file looked up in the project directory.
CONFIG_FILENAME = "afdx.conf.yml"

DEFAULT_CONFIG: dict[str, Any] = {
    "setup": {
        "dev_org_config_file": "afdx-scratch-def.json",
        "alternative_browser": "firefox",
        "deployment_status_page": "lightning/setup/DeployStatus/home",
        "agent_base_username": "afdx-agent@testdrive.org",
        "user_json_path": "data-import/User.json",
        "task_timeout": 1800,
    },
    "logging": {
        "level": "WARNING",
    },
}


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base`` in place.

    Nested mappings are merged; any other value in ``override`` replaces
    the one in ``base``.

    Args:
        base: Dictionary to update.
        override: Values to apply.

    Returns:
        The updated ``base``.

    Examples:
        >>> deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        {'a': {'x': 1, 'y': 3}}
    """
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def load_from_file(path: Path) -> dict[str, Any]:
    """Read one YAML configuration file.

    Args:
        path: File to read.

    Returns:
        Parsed mapping (empty for an empty file).

    Raises:
        ConfigFileNotFoundError: If the file does not exist.
        ConfigFormatError: If the file is not valid YAML or not a mapping.
    """
    if not path.is_file():
        raise ConfigFileNotFoundError(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigFormatError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFormatError(f"Invalid config format in {path}: expected a mapping, got {type(data).__name__}")
    return data


def load_config(
    project_dir: Path | None = None,
    *,
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Box:
    """Load the effective configuration.

    Args:
        project_dir: Directory searched for ``afdx.conf.yml`` (cwd when omitted).
        config_file: Explicit configuration file. Must exist when given.
        overrides: Highest-priority values, typically from CLI flags.

    Returns:
        Merged configuration as a Box.

    Raises:
        ConfigFileNotFoundError: If ``config_file`` does not exist.
        ConfigFormatError: If a configuration file is malformed or a
            known section is not a mapping.
    """
    data = copy.deepcopy(DEFAULT_CONFIG)

    if config_file is not None:
        source: Path | None = config_file
    else:
        candidate = (project_dir or Path.cwd()) / CONFIG_FILENAME
        source = candidate if candidate.is_file() else None

    if source is not None:
        log.debug("Loading configuration from %s", source)
        deep_merge(data, load_from_file(source))
    else:
        log.debug("No %s found, using defaults", CONFIG_FILENAME)

    for section in DEFAULT_CONFIG:
        if not isinstance(data.get(section), dict):
            raise ConfigFormatError(
                f"Invalid config section '{section}': expected a mapping, got {type(data.get(section)).__name__}"
            )

    if overrides:
        deep_merge(data, overrides)

    return Box(data)


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "deep_merge",
    "load_config",
    "load_from_file",
]
