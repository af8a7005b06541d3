"""Root exception for afdx_setup.

Every error raised by this package derives from :class:`AfdxSetupError`,
so the CLI can catch a single type and render it.
"""

from __future__ import annotations


class AfdxSetupError(Exception):
    """Base exception for all afdx_setup errors."""


__all__ = [
    "AfdxSetupError",
]
