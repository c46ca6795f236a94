"""
Core functionality for devflake.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    DevFlakeError,
    SourceError,
    DuplicateSourceError,
    UnresolvableSourceError,
    ResolverError,
    PackageNotFoundError,
    DescriptorError,
    OutputNotFoundError,
    LockFileError,
)

from .platform import (
    PlatformIdentifier,
    DEFAULT_SYSTEMS,
    parse_systems,
    detect_system,
    is_supported_platform,
    clear_platform_cache,
)

from .locking import exclusive_file_lock

__all__ = [
    "DevFlakeError",
    "SourceError",
    "DuplicateSourceError",
    "UnresolvableSourceError",
    "ResolverError",
    "PackageNotFoundError",
    "DescriptorError",
    "OutputNotFoundError",
    "LockFileError",
    "PlatformIdentifier",
    "DEFAULT_SYSTEMS",
    "parse_systems",
    "detect_system",
    "is_supported_platform",
    "clear_platform_cache",
    "exclusive_file_lock",
]
