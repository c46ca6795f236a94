"""Source registry: named external sources consumed by a descriptor.

A descriptor's ``inputs`` section names every external source (package
collection, utility library, toolchain overlay) together with where it comes
from and, optionally, the revision it is pinned to. The registry is built once
when the descriptor is loaded and is never modified afterwards; pinning
produces a new registry.

Locator reachability and revision existence are not checked here. They are the
resolver's concern and fail there.

Example:
    >>> registry = SourceRegistry.from_mapping({
    ...     "nixpkgs": "github:NixOS/nixpkgs/nixpkgs-unstable",
    ...     "rust-overlay": {
    ...         "url": "github:oxalica/rust-overlay",
    ...         "inputs": {"nixpkgs": {"follows": "nixpkgs"}},
    ...     },
    ... })
    >>> registry["nixpkgs"].parse_locator().ref
    'nixpkgs-unstable'
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Iterator, Optional
from urllib.parse import parse_qs, urlsplit, urlunsplit

from devflake.core.exceptions import DuplicateSourceError, SourceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Locator:
    """Parsed form of a source locator.

    Attributes:
        scheme: Fetcher kind ('github', 'git+https', 'path', 'https', 'indirect')
        location: Scheme-specific location (e.g. 'NixOS/nixpkgs', '/src/dir')
        ref: Branch or tag named in the locator, if any
    """

    scheme: str
    location: str
    ref: Optional[str] = None


def parse_locator(locator: str) -> Locator:
    """Split a locator string into scheme, location and ref.

    Args:
        locator: Locator such as ``github:owner/repo/ref``

    Returns:
        Parsed Locator. Unknown schemes are kept verbatim.
    """
    if ":" not in locator:
        # Bare names refer to a registry entry of the external resolver
        return Locator(scheme="indirect", location=locator)

    scheme, _, rest = locator.partition(":")

    if scheme in ("github", "gitlab", "sourcehut"):
        parts = rest.strip("/").split("/")
        ref = "/".join(parts[2:]) or None
        return Locator(scheme=scheme, location="/".join(parts[:2]), ref=ref)

    if scheme.startswith("git+") or scheme in ("http", "https"):
        split = urlsplit(locator.partition("+")[2] if "+" in scheme else locator)
        query = parse_qs(split.query)
        ref = query.get("ref", [None])[0]
        location = urlunsplit((split.scheme, split.netloc, split.path, "", ""))
        return Locator(scheme=scheme, location=location, ref=ref)

    return Locator(scheme=scheme, location=rest)


@dataclass(frozen=True)
class SourceReference:
    """A named external source.

    Attributes:
        identifier: Unique name of the source within the registry
        locator: Where the source comes from (URI-like string)
        revision: Exact revision the source is pinned to, if any
        follows: Nested input name -> identifier of the top-level input it
            is replaced by
    """

    identifier: str
    locator: str
    revision: Optional[str] = None
    follows: Dict[str, str] = field(default_factory=dict)

    @property
    def pinned(self) -> bool:
        return self.revision is not None

    def parse_locator(self) -> Locator:
        return parse_locator(self.locator)

    def with_revision(self, revision: Optional[str]) -> "SourceReference":
        """Return a copy of this reference pinned to ``revision``."""
        return replace(self, revision=revision, follows=dict(self.follows))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.locator}
        if self.revision is not None:
            data["rev"] = self.revision
        if self.follows:
            data["inputs"] = {
                name: {"follows": target} for name, target in self.follows.items()
            }
        return data

    # Dict fields are not hashable; identity is the identifier + pin.
    def __hash__(self) -> int:
        return hash((self.identifier, self.locator, self.revision))


def _parse_reference(identifier: str, data: Any) -> SourceReference:
    """Parse one ``inputs`` entry."""
    if isinstance(data, str):
        return SourceReference(identifier=identifier, locator=data)

    if not isinstance(data, dict):
        raise SourceError(
            f"Input '{identifier}' must be a locator string or a mapping"
        )

    locator = data.get("url", data.get("locator"))
    if not locator:
        raise SourceError(f"Input '{identifier}' missing required field: url")

    follows_data = data.get("follows") or {}
    if not isinstance(follows_data, dict):
        raise SourceError(
            f"Input '{identifier}' follows must be a mapping of nested input "
            f"to input name"
        )
    nested_inputs = data.get("inputs") or {}
    if not isinstance(nested_inputs, dict):
        raise SourceError(
            f"Input '{identifier}' inputs must be a mapping of nested input names"
        )

    follows: Dict[str, str] = {
        str(name): str(target) for name, target in follows_data.items()
    }
    for nested_name, nested in nested_inputs.items():
        if isinstance(nested, dict) and "follows" in nested:
            follows[nested_name] = nested["follows"]

    revision = data.get("rev", data.get("revision"))
    return SourceReference(
        identifier=identifier,
        locator=str(locator),
        revision=str(revision) if revision is not None else None,
        follows=follows,
    )


class SourceRegistry(Mapping):
    """Immutable mapping from identifier to SourceReference.

    Iteration follows declaration order.
    """

    def __init__(self, references: Iterable[SourceReference] = ()):
        by_id: Dict[str, SourceReference] = {}
        for reference in references:
            if reference.identifier in by_id:
                raise DuplicateSourceError(reference.identifier)
            by_id[reference.identifier] = reference

        for reference in by_id.values():
            for nested_name, target in reference.follows.items():
                if target not in by_id:
                    raise SourceError(
                        f"Input '{reference.identifier}' has nested input "
                        f"'{nested_name}' following undefined input: {target}"
                    )

        self._references = by_id

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "SourceRegistry":
        """Build a registry from a descriptor's ``inputs`` section."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise SourceError("inputs must be a mapping of identifier to source")
        return cls(_parse_reference(str(name), entry) for name, entry in data.items())

    def __getitem__(self, identifier: str) -> SourceReference:
        return self._references[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._references)

    def __len__(self) -> int:
        return len(self._references)

    def __repr__(self) -> str:
        return f"SourceRegistry({list(self._references.values())!r})"

    def unpinned(self) -> list:
        """Identifiers of sources without a revision pin."""
        return [ref.identifier for ref in self._references.values() if not ref.pinned]

    def with_pins(self, pins: Dict[str, Optional[str]]) -> "SourceRegistry":
        """Return a new registry with revisions taken from ``pins``.

        Identifiers in ``pins`` that are not declared are ignored.
        """
        references = []
        for reference in self._references.values():
            if reference.identifier in pins:
                reference = reference.with_revision(pins[reference.identifier])
            references.append(reference)

        unknown = sorted(set(pins) - set(self._references))
        if unknown:
            logger.debug(f"Ignoring pins for undeclared inputs: {', '.join(unknown)}")

        return SourceRegistry(references)

    def to_dict(self) -> Dict[str, Any]:
        return {name: ref.to_dict() for name, ref in self._references.items()}
