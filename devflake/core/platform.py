"""
Platform identifiers for devflake.

A platform identifier is an architecture/OS pair written as ``<arch>-<os>``
(for example ``x86_64-linux`` or ``aarch64-darwin``). Outputs are produced once
per identifier in a descriptor's system enumeration; the identifier itself is
used as an iteration and lookup key only.

Usage:
    from devflake.core.platform import PlatformIdentifier, detect_system

    system = detect_system()
    print(f"Evaluating for {system}")
    print(system.path_separator)
"""

import functools
import platform
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from devflake.core.exceptions import DescriptorError


@dataclass(frozen=True)
class PlatformIdentifier:
    """
    Target platform identifier.

    Attributes:
        arch: CPU architecture ('x86_64', 'aarch64', 'i686', 'armv7l', 'riscv64')
        os: Operating system kernel ('linux', 'darwin', 'windows')
    """

    arch: str
    os: str

    @classmethod
    def parse(cls, value: Union[str, "PlatformIdentifier"]) -> "PlatformIdentifier":
        """
        Parse an ``<arch>-<os>`` string.

        Args:
            value: Platform string or an existing identifier

        Returns:
            PlatformIdentifier

        Raises:
            DescriptorError: If the string is not of the form ``<arch>-<os>``

        Example:
            >>> PlatformIdentifier.parse("aarch64-darwin").os
            'darwin'
        """
        if isinstance(value, PlatformIdentifier):
            return value

        arch, sep, os_name = str(value).strip().partition("-")
        if not sep or not arch or not os_name:
            raise DescriptorError(
                f"Invalid system identifier: {value!r} (expected <arch>-<os>)"
            )
        return cls(arch=arch, os=os_name)

    @property
    def path_separator(self) -> str:
        """Separator used when joining search-path variables."""
        return ";" if self.os == "windows" else ":"

    def __str__(self) -> str:
        return f"{self.arch}-{self.os}"


DEFAULT_SYSTEMS = (
    PlatformIdentifier("x86_64", "linux"),
    PlatformIdentifier("aarch64", "linux"),
    PlatformIdentifier("x86_64", "darwin"),
    PlatformIdentifier("aarch64", "darwin"),
)


def parse_systems(values: Optional[Iterable[str]]) -> List[PlatformIdentifier]:
    """
    Parse a list of system strings, falling back to DEFAULT_SYSTEMS.

    Order is preserved. Duplicates are rejected.
    """
    if values is None:
        return list(DEFAULT_SYSTEMS)

    systems: List[PlatformIdentifier] = []
    for value in values:
        system = PlatformIdentifier.parse(value)
        if system in systems:
            raise DescriptorError(f"Duplicate system in enumeration: {system}")
        systems.append(system)
    return systems


@functools.lru_cache(maxsize=1)
def detect_system() -> PlatformIdentifier:
    """
    Detect the identifier of the host platform.

    This function is cached - it only runs detection once per process.

    Example:
        >>> str(detect_system())
        'x86_64-linux'
    """
    return PlatformIdentifier(arch=_detect_architecture(), os=_detect_os())


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'linux', 'darwin', 'windows'

    Raises:
        RuntimeError: If OS is not supported
    """
    system = platform.system().lower()

    if system in ("linux", "darwin", "windows"):
        return system
    raise RuntimeError(f"Unsupported operating system: {system}")


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x86_64', 'aarch64', 'i686', 'armv7l'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x86_64"
    elif machine in ("aarch64", "arm64"):
        return "aarch64"
    elif machine in ("i386", "i686", "x86"):
        return "i686"
    elif machine.startswith("armv7"):
        return "armv7l"
    else:
        # Return original for unknown architectures
        return machine


def is_supported_platform(
    system: Optional[PlatformIdentifier] = None,
    systems: Iterable[PlatformIdentifier] = DEFAULT_SYSTEMS,
) -> bool:
    """
    Check whether outputs exist for a platform.

    Args:
        system: Identifier to check. If None, detects the host platform.
        systems: Enumeration to check against (default: DEFAULT_SYSTEMS)

    Returns:
        True if the platform is part of the enumeration
    """
    if system is None:
        system = detect_system()
    return system in tuple(systems)


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_system() to re-detect.
    """
    detect_system.cache_clear()


__all__ = [
    "PlatformIdentifier",
    "DEFAULT_SYSTEMS",
    "parse_systems",
    "detect_system",
    "is_supported_platform",
    "clear_platform_cache",
]
