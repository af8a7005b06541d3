"""Exceptions raised by the afdx_setup.sfdx module."""

from __future__ import annotations

from pathlib import Path

from afdx_setup.exceptions import AfdxSetupError


class SfdxError(AfdxSetupError):
    """Base exception for Salesforce project helpers."""


class SfdxProjectError(SfdxError):
    """``sfdx-project.json`` is missing or malformed.

    Attributes:
        path: Location of the project file.
    """

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize SfdxProjectError.

        Args:
            path: Location of the project file.
            reason: Description of the problem.
        """
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class UserJsonError(SfdxError):
    """The agent user import file cannot be patched.

    Attributes:
        path: Location of the records file.
        reason: Description of the problem.
    """

    def __init__(self, path: Path, reason: str) -> None:
        """Initialize UserJsonError.

        Args:
            path: Location of the records file.
            reason: Description of the problem.
        """
        super().__init__(f"Cannot update {path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "SfdxError",
    "SfdxProjectError",
    "UserJsonError",
]
