"""Patching of the agent user import file.

``data-import/User.json`` follows the ``sf data import tree`` records
shape::

    {"records": [{"attributes": {...}, "ProfileId": ..., "Username": ..., ...}]}

Only ``ProfileId``, ``Username`` and ``CommunityNickname`` of the first
record are rewritten; every other field is preserved.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from afdx_setup.sfdx.exceptions import UserJsonError

logger = logging.getLogger(__name__)

#: Indentation used when writing the records file back.
JSON_INDENT = 4


def read_user_json(path: Path) -> dict[str, Any]:
    """Read a records file and check its shape.

    Args:
        path: Records file to read.

    Returns:
        Parsed document.

    Raises:
        UserJsonError: If the file is missing, not JSON, or has no records.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise UserJsonError(path, "file not found") from None
    except ValueError as exc:
        raise UserJsonError(path, f"invalid JSON ({exc})") from exc

    if not isinstance(data, dict):
        raise UserJsonError(path, "expected a JSON object")
    records = data.get("records")
    if not isinstance(records, list) or not records:
        raise UserJsonError(path, "'records' must be a non-empty array")
    if not isinstance(records[0], dict):
        raise UserJsonError(path, "first record must be a JSON object")
    return data


def write_user_json(path: Path, data: dict[str, Any]) -> None:
    """Write a records file with stable indentation and a trailing newline."""
    path.write_text(json.dumps(data, indent=JSON_INDENT) + "\n", encoding="utf-8")


def patch_user_json(
    path: Path,
    *,
    profile_id: str,
    username: str,
    nickname: str,
) -> dict[str, Any]:
    """Stage the agent user record for import.

    Args:
        path: Records file to update in place.
        profile_id: ID of the profile the agent user gets.
        username: Unique agent username.
        nickname: Unique community nickname.

    Returns:
        The document as written.

    Raises:
        UserJsonError: If the file cannot be read or has the wrong shape.
    """
    if not profile_id:
        raise UserJsonError(path, "no profile ID available")

    data = read_user_json(path)
    record = data["records"][0]
    record["ProfileId"] = profile_id
    record["Username"] = username
    record["CommunityNickname"] = nickname
    write_user_json(path, data)

    logger.debug("Patched %s: ProfileId=%s Username=%s CommunityNickname=%s", path, profile_id, username, nickname)
    return data


__all__ = [
    "JSON_INDENT",
    "patch_user_json",
    "read_user_json",
    "write_user_json",
]
