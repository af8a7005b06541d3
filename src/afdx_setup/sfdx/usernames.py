"""Unique username and nickname generation.

Salesforce usernames must be unique across every org, so the agent user
gets a fresh username on each run: the base username's local part plus a
time-based token.
"""

from __future__ import annotations

import secrets
import time

#: Salesforce limit on username length.
MAX_USERNAME_LENGTH = 80

#: Salesforce limit on community nickname length.
MAX_NICKNAME_LENGTH = 40

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    """Encode a non-negative integer in base 36.

    Examples:
        >>> _to_base36(0)
        '0'
        >>> _to_base36(1295)
        'zz'
    """
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def make_unique_token(*, timestamp_ms: int | None = None, entropy: str | None = None) -> str:
    """Build a short token that is unique per call.

    Args:
        timestamp_ms: Milliseconds since the epoch (now when omitted).
        entropy: Random suffix (4 hex chars when omitted).

    Returns:
        Base-36 timestamp followed by the random suffix.

    Examples:
        >>> make_unique_token(timestamp_ms=1295, entropy="ab12")
        'zzab12'
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    if entropy is None:
        entropy = secrets.token_hex(2)
    return f"{_to_base36(timestamp_ms)}{entropy}"


def create_unique_username(base_username: str, *, token: str | None = None) -> str:
    """Create a unique username from a base username.

    The token is inserted before the ``@``; the local part is shortened
    when the result would exceed the Salesforce username limit.

    Args:
        base_username: Username in email form, e.g. ``afdx-agent@testdrive.org``.
        token: Unique token (generated when omitted).

    Returns:
        Username such as ``afdx-agent.lx2k9p4f3a@testdrive.org``.

    Raises:
        ValueError: If the base username is not in ``local@domain`` form.

    Examples:
        >>> create_unique_username("afdx-agent@testdrive.org", token="abc123")
        'afdx-agent.abc123@testdrive.org'
    """
    local, sep, domain = base_username.strip().rpartition("@")
    if not sep or not local or not domain:
        raise ValueError(f"Base username must look like an email address: {base_username!r}")
    if token is None:
        token = make_unique_token()

    suffix = f".{token}@{domain}"
    room = MAX_USERNAME_LENGTH - len(suffix)
    if room < 1:
        raise ValueError(f"Domain too long for a unique username: {domain!r}")
    return f"{local[:room]}{suffix}"


def create_unique_nickname(username: str) -> str:
    """Derive a community nickname from a unique username.

    The unique token is kept intact; the descriptive prefix is shortened
    to respect the nickname limit.

    Args:
        username: Username produced by :func:`create_unique_username`.

    Returns:
        Nickname such as ``afdx-agent.abc123``.

    Examples:
        >>> create_unique_nickname("afdx-agent.abc123@testdrive.org")
        'afdx-agent.abc123'
    """
    local = username.partition("@")[0]
    if len(local) <= MAX_NICKNAME_LENGTH:
        return local
    prefix, sep, token = local.rpartition(".")
    if not sep or len(token) >= MAX_NICKNAME_LENGTH:
        return local[:MAX_NICKNAME_LENGTH]
    return f"{prefix[: MAX_NICKNAME_LENGTH - len(token) - 1]}.{token}"


__all__ = [
    "MAX_NICKNAME_LENGTH",
    "MAX_USERNAME_LENGTH",
    "create_unique_nickname",
    "create_unique_username",
    "make_unique_token",
]
