"""Logging setup for afdx_setup.

Installs a ``rich`` handler on the package logger and turns on DEBUG output
for selected *debug namespaces*. A namespace is either one of the aliases
in :data:`DEBUG_NAMESPACES` or a dotted logger name relative to the
package (``pipeline.tasks.shell``).

Examples:
    >>> resolve_namespaces("Setup, TaskRunner")
    ['afdx_setup.cli', 'afdx_setup.pipeline']
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

#: Root logger name of the package.
PACKAGE_LOGGER = "afdx_setup"

#: Friendly debug namespaces mapped to package loggers.
DEBUG_NAMESPACES: dict[str, str] = {
    "Setup": "afdx_setup.cli",
    "BuildOrgEnv": "afdx_setup.builds.org_env",
    "BuildScratchEnv": "afdx_setup.builds.scratch_env",
    "TaskRunner": "afdx_setup.pipeline",
    "UTIL:SFDX": "afdx_setup.sfdx",
    "Config": "afdx_setup.config",
}

_HANDLER_NAME = "afdx_setup.rich"


def resolve_namespaces(namespaces: str | None) -> list[str]:
    """Translate a comma-separated namespace list into logger names.

    Args:
        namespaces: Namespaces such as ``"Setup,UTIL:SFDX"`` or ``"pipeline.runner"``.

    Returns:
        Logger names, in the given order, without duplicates.
    """
    if not namespaces:
        return []
    names: list[str] = []
    for raw in namespaces.split(","):
        namespace = raw.strip()
        if not namespace:
            continue
        if namespace in DEBUG_NAMESPACES:
            name = DEBUG_NAMESPACES[namespace]
        elif namespace == PACKAGE_LOGGER or namespace.startswith(f"{PACKAGE_LOGGER}."):
            name = namespace
        else:
            name = f"{PACKAGE_LOGGER}.{namespace}"
        if name not in names:
            names.append(name)
    return names


def init_logging(
    level: str | int = "WARNING",
    debug_namespaces: str | None = None,
    *,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Calling this again replaces the handler installed by a previous call.

    Args:
        level: Base level for the package logger.
        debug_namespaces: Comma-separated namespaces to log at DEBUG.
        console: Console the handler writes to (stderr when omitted).

    Returns:
        The package logger.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    for name in resolve_namespaces(debug_namespaces):
        namespace_logger = logging.getLogger(name)
        namespace_logger.setLevel(logging.DEBUG)
        namespace_logger.debug("Debugging initialized for %s", name)

    return package_logger


__all__ = [
    "DEBUG_NAMESPACES",
    "PACKAGE_LOGGER",
    "init_logging",
    "resolve_namespaces",
]
