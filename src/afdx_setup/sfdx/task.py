"""Salesforce CLI task and failure predicates.

:class:`SfdxTask` is a shell command task that asks ``sf`` for JSON
output, so ``on_success`` callbacks and suppression predicates can read
``CommandOutput.stdout_json`` instead of scraping text.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from afdx_setup.pipeline.tasks.shell import ShellCommandTask

if TYPE_CHECKING:
    from afdx_setup.pipeline.models import CommandOutput

logger = logging.getLogger(__name__)

#: Flag that makes ``sf`` print a JSON document on stdout.
JSON_FLAG = "--json"

_JSON_FLAG_PATTERN = re.compile(r"(^|\s)--json(\s|$)")
_DUPLICATE_PATTERN = re.compile(r"duplicate\s+permissionsetassignment", re.IGNORECASE)


class SfdxTask(ShellCommandTask):
    """Run an ``sf`` command with JSON output.

    The command given by the caller is stored verbatim in ``command``;
    ``--json`` is appended only when the command is built for execution.

    Examples:
        >>> task = SfdxTask("Deploy project source", "sf project deploy start")
        >>> task.build_command()
        'sf project deploy start --json'
    """

    def build_command(self) -> str:
        """Return the command with ``--json`` appended when missing."""
        if _JSON_FLAG_PATTERN.search(self.command):
            return self.command
        return f"{self.command} {JSON_FLAG}"


def _failure_messages(payload: Any) -> list[str]:
    """Collect failure messages from an ``sf`` JSON document."""
    if not isinstance(payload, dict):
        return []
    messages: list[str] = []
    for section in ("result", "data"):
        body = payload.get(section)
        if isinstance(body, dict):
            for failure in body.get("failures") or []:
                if isinstance(failure, dict) and failure.get("message"):
                    messages.append(str(failure["message"]))
    if not messages and payload.get("message"):
        messages.append(str(payload["message"]))
    return messages


def is_duplicate_permset_assignment(output: CommandOutput) -> bool:
    """Return True when a permset assignment failed only on duplicates.

    ``sf org assign permset`` exits nonzero when the user already holds
    a permission set. Rerunning a setup therefore hits this failure, which
    is safe to ignore; any other failure is not.

    Args:
        output: Captured output of the failed command.

    Returns:
        True if every reported failure is a duplicate assignment.
    """
    messages = _failure_messages(output.stdout_json)
    if messages:
        duplicate = all(_DUPLICATE_PATTERN.search(message) for message in messages)
    else:
        duplicate = bool(_DUPLICATE_PATTERN.search(f"{output.stdout}\n{output.stderr}"))
    logger.debug("Duplicate permset assignment check for %r: %s", output.command, duplicate)
    return duplicate


__all__ = [
    "JSON_FLAG",
    "SfdxTask",
    "is_duplicate_permset_assignment",
]
