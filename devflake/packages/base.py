"""
Package model and resolver abstraction for devflake.

devflake does not build or fetch anything. A Resolver is the external
collaborator that turns pinned sources into a PackageSet for one platform and
knows where each package keeps its libraries. Everything in this module is
read-only once constructed.

Classes:
    Package: A resolved package and its output paths
    PackageSet: Immutable mapping from attribute path to Package
    Resolver: Abstract base class for package resolvers
"""

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from devflake.config.sources import SourceReference, SourceRegistry
from devflake.core.exceptions import PackageNotFoundError
from devflake.core.platform import PlatformIdentifier

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r'"([^"]*)"|([^."]+)')


# =============================================================================
# Attribute paths
# =============================================================================


def split_attribute_path(path: str) -> Tuple[str, ...]:
    """
    Split an attribute path into its segments.

    Segments containing dots must be quoted.

    Example:
        >>> split_attribute_path('rust-bin.stable."1.80.1".default')
        ('rust-bin', 'stable', '1.80.1', 'default')
    """
    segments = []
    position = 0
    path = path.strip()
    while position < len(path):
        match = _SEGMENT_RE.match(path, position)
        if match is None:
            raise PackageNotFoundError(path)
        quoted, bare = match.groups()
        segments.append(quoted if quoted is not None else bare)
        position = match.end()
        if position < len(path):
            if path[position] != ".":
                raise PackageNotFoundError(path)
            position += 1
    if not segments:
        raise PackageNotFoundError(path)
    return tuple(segments)


def format_attribute_path(segments: Sequence[str]) -> str:
    """Join segments back into a canonical attribute path."""
    return ".".join(f'"{s}"' if "." in s or not s else s for s in segments)


def canonical_attribute(path: str) -> str:
    return format_attribute_path(split_attribute_path(path))


# =============================================================================
# Package
# =============================================================================


@dataclass(frozen=True)
class Package:
    """
    A resolved package.

    Attributes:
        attribute: Attribute path the package is published under
        name: Package name (e.g. 'freetype')
        version: Package version
        outputs: Output name -> store path; always contains 'out'
        provides_libraries: False for packages that ship no shared libraries
        selected_output: Output chosen by the attribute path ('out' by default)
    """

    attribute: str
    name: str
    version: str
    outputs: Dict[str, str] = field(default_factory=dict)
    provides_libraries: bool = True
    selected_output: str = "out"

    def __post_init__(self):
        if "out" not in self.outputs:
            raise ValueError(f"Package {self.attribute} has no 'out' output")
        if self.selected_output not in self.outputs:
            raise ValueError(
                f"Package {self.attribute} has no output '{self.selected_output}'"
            )

    def __hash__(self) -> int:
        return hash((self.attribute, self.version, self.store_path))

    @property
    def store_path(self) -> str:
        """Path of the selected output."""
        return self.outputs[self.selected_output]

    @property
    def out(self) -> str:
        return self.outputs["out"]

    def output(self, name: str) -> "Package":
        """Return this package with another output selected."""
        if name not in self.outputs:
            raise PackageNotFoundError(f"{self.attribute}.{name}")
        return replace(self, selected_output=name, outputs=dict(self.outputs))

    @property
    def library_output(self) -> Optional[str]:
        """
        Store path holding the package's shared libraries.

        An explicitly selected output is used as is. Otherwise the 'lib'
        output when the package has one, else 'out'. None for packages that
        provide no libraries.
        """
        if not self.provides_libraries:
            return None
        if self.selected_output != "out":
            return self.store_path
        return self.outputs.get("lib", self.outputs["out"])

    def to_dict(self) -> dict:
        return {
            "attribute": self.attribute,
            "name": self.name,
            "version": self.version,
            "output": self.selected_output,
            "path": self.store_path,
        }


# =============================================================================
# PackageSet
# =============================================================================


class PackageSet(Mapping):
    """
    Immutable mapping from canonical attribute path to Package.

    ``lookup`` additionally resolves a trailing output name, so that
    ``freetype.dev`` selects the ``dev`` output of ``freetype``.
    """

    def __init__(
        self,
        packages: Optional[Mapping] = None,
        platform: Optional[PlatformIdentifier] = None,
    ):
        self._packages: Dict[str, Package] = {
            canonical_attribute(name): package
            for name, package in (packages or {}).items()
        }
        self.platform = platform

    def __getitem__(self, attribute: str) -> Package:
        try:
            key = canonical_attribute(attribute)
        except PackageNotFoundError:
            raise KeyError(attribute) from None
        return self._packages[key]

    def __contains__(self, attribute) -> bool:
        try:
            return canonical_attribute(attribute) in self._packages
        except PackageNotFoundError:
            return False

    def __iter__(self) -> Iterator[str]:
        return iter(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def __repr__(self) -> str:
        return f"PackageSet({len(self)} packages, platform={self.platform})"

    def lookup(self, attribute: str) -> Package:
        """
        Look up a package by attribute path, with optional output selection.

        Raises:
            PackageNotFoundError: If no package matches
        """
        segments = split_attribute_path(attribute)
        key = format_attribute_path(segments)
        if key in self._packages:
            return self._packages[key]

        if len(segments) > 1:
            prefix = format_attribute_path(segments[:-1])
            package = self._packages.get(prefix)
            if package is not None and segments[-1] in package.outputs:
                return package.output(segments[-1])

        raise PackageNotFoundError(attribute, str(self.platform or ""))

    def merged(self, patch: Mapping) -> "PackageSet":
        """
        Return a new set with ``patch`` applied.

        Entries in the patch replace entries of the same name.
        """
        packages = dict(self._packages)
        for name, package in patch.items():
            packages[canonical_attribute(name)] = package
        return PackageSet(packages, platform=self.platform)


Overlay = Callable[[PackageSet], Mapping]


# =============================================================================
# Resolver
# =============================================================================


class Resolver(ABC):
    """
    Abstract base class for package resolvers.

    A resolver is the external package database. devflake hands it the
    pinned sources and overlays and reads back a PackageSet; failures are
    raised by the resolver and propagate unchanged.
    """

    @abstractmethod
    def resolve(
        self,
        registry: SourceRegistry,
        overlays: Sequence[Overlay],
        platform: PlatformIdentifier,
        base: str = "nixpkgs",
    ) -> PackageSet:
        """
        Resolve the package set of ``base`` for one platform.

        Args:
            registry: Pinned sources
            overlays: Overlays to apply, in order
            platform: Target platform
            base: Identifier of the input providing the package collection

        Returns:
            Resolved package set with overlays applied
        """

    @abstractmethod
    def overlays_for(
        self, registry: SourceRegistry, names: Sequence[str]
    ) -> List[Overlay]:
        """Return the overlay published by each named input, in order."""

    @abstractmethod
    def lock_revision(self, reference: SourceReference) -> str:
        """Return the exact revision ``reference`` currently resolves to."""

    def library_output_path(self, package: Package) -> Optional[str]:
        """
        Directory containing a package's shared libraries.

        Returns:
            Library directory, or None if the package has no library output
        """
        output = package.library_output
        if output is None:
            return None
        return f"{output}/lib"
