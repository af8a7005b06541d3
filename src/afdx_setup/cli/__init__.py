"""Command line interface for afdx_setup."""

from afdx_setup.cli.app import app, main

__all__ = [
    "app",
    "main",
]
