"""
devflake - reproducible development shells from pinned sources.

A descriptor names pinned external sources, composes them through overlays
into a package set per platform, and projects development shells exposing a
toolchain, native libraries and a derived runtime library search path.
"""

from devflake.config import DescriptorConfig, ShellConfig, SourceRegistry, parse_config
from devflake.outputs import FlakeOutputs, evaluate
from devflake.shell import EnvironmentSpec

__version__ = "0.1.0"

__all__ = [
    "DescriptorConfig",
    "ShellConfig",
    "SourceRegistry",
    "parse_config",
    "FlakeOutputs",
    "evaluate",
    "EnvironmentSpec",
    "__version__",
]
