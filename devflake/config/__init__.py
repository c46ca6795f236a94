"""Configuration module for devflake.

This module provides YAML descriptor parsing for devflake.yaml, the source
registry built from its ``inputs`` section, and the devflake.lock file.
"""

from devflake.config.parser import (
    ShellConfig,
    DescriptorConfig,
    ConfigError,
    parse_config,
    parse_descriptor,
)
from devflake.config.sources import (
    Locator,
    SourceReference,
    SourceRegistry,
    parse_locator,
)
from devflake.config.lockfile import (
    LockedSource,
    LockFile,
    LockFileManager,
)

__all__ = [
    "ShellConfig",
    "DescriptorConfig",
    "ConfigError",
    "parse_config",
    "parse_descriptor",
    "Locator",
    "SourceReference",
    "SourceRegistry",
    "parse_locator",
    "LockedSource",
    "LockFile",
    "LockFileManager",
]
