"""Configuration loading for afdx_setup.

Examples:
    >>> from afdx_setup.config import load_config
    >>> config = load_config()  # doctest: +SKIP
    >>> config.setup.alternative_browser  # doctest: +SKIP
    'firefox'
"""

from afdx_setup.config.exceptions import ConfigError, ConfigFileNotFoundError, ConfigFormatError
from afdx_setup.config.loader import CONFIG_FILENAME, DEFAULT_CONFIG, deep_merge, load_config, load_from_file

__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "deep_merge",
    "load_config",
    "load_from_file",
]
