"""Exceptions raised while loading afdx_setup configuration."""

from __future__ import annotations

from pathlib import Path

from afdx_setup.exceptions import AfdxSetupError


class ConfigError(AfdxSetupError):
    """Base exception for configuration errors."""


class ConfigFileNotFoundError(ConfigError, FileNotFoundError):
    """An explicitly requested configuration file does not exist.

    Attributes:
        path: The missing file.
    """

    def __init__(self, path: Path) -> None:
        """Initialize ConfigFileNotFoundError.

        Args:
            path: The missing file.
        """
        super().__init__(f"Config file not found: {path}")
        self.path = path


class ConfigFormatError(ConfigError, ValueError):
    """A configuration file is not valid YAML or has the wrong shape."""


__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
]
