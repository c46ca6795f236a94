"""
Catalog-backed resolver.

CatalogResolver stands in for a real package database by reading one YAML
catalog per input from a directory::

    catalog/
      nixpkgs.yaml
      rust-overlay.yaml

A catalog lists the packages an input publishes and, for overlay inputs, the
patch its overlay applies::

    revision: 5e0ca22929f3342b19569b21b2f3462f053e497b
    packages:
      pkg-config: 0.29.2
      freetype: {version: 2.13.2, outputs: [out, dev]}
      rust-analyzer: {version: 2024-08-12, libraries: false}
      wayland: {version: 1.23.0, systems: [x86_64-linux, aarch64-linux]}
    overlay:
      rust-bin.stable."1.80.1".default: {name: rust-default, version: 1.80.1}
      lld: {overrides: lld, version: 18.1.8}

Store paths are derived deterministically from the pinned sources, the
platform and the package, so repeated evaluations give identical paths.
"""

import hashlib
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from devflake.config.sources import SourceReference, SourceRegistry
from devflake.core.exceptions import UnresolvableSourceError
from devflake.core.platform import PlatformIdentifier
from devflake.packages.base import (
    Overlay,
    Package,
    PackageSet,
    Resolver,
    split_attribute_path,
)
from devflake.packages.overlays import apply_overlays, named_overlay

logger = logging.getLogger(__name__)

STORE_DIR = "/nix/store"


class CatalogResolver(Resolver):
    """
    Resolver reading package catalogs from YAML files.

    Attributes:
        catalog_dir: Directory containing ``<input>.yaml`` catalogs
        store_dir: Prefix of generated store paths
    """

    def __init__(self, catalog_dir: Path, store_dir: str = STORE_DIR):
        self.catalog_dir = Path(catalog_dir)
        self.store_dir = store_dir.rstrip("/")
        self._catalogs: Dict[str, Dict[str, Any]] = {}

    # ------------------------------------------------------------------------
    # Resolver interface
    # ------------------------------------------------------------------------

    def resolve(
        self,
        registry: SourceRegistry,
        overlays: Sequence[Overlay],
        platform: PlatformIdentifier,
        base: str = "nixpkgs",
    ) -> PackageSet:
        if base not in registry:
            raise UnresolvableSourceError(base, "input not declared")

        catalog = self._load_catalog(registry[base])
        source_key = self._source_key(registry, base)
        packages = self._packages_for(
            catalog.get("packages") or {}, source_key, platform
        )
        logger.debug(f"Resolved {len(packages)} packages from {base} for {platform}")

        return apply_overlays(PackageSet(packages, platform=platform), overlays)

    def overlays_for(
        self, registry: SourceRegistry, names: Sequence[str]
    ) -> List[Overlay]:
        return [self._catalog_overlay(registry, name) for name in names]

    def lock_revision(self, reference: SourceReference) -> str:
        if reference.revision is not None:
            return reference.revision

        revision = self._load_catalog(reference).get("revision")
        if revision is None:
            raise UnresolvableSourceError(
                reference.identifier, "catalog does not record a revision"
            )
        return str(revision)

    # ------------------------------------------------------------------------
    # Internal Methods
    # ------------------------------------------------------------------------

    def _load_catalog(self, reference: SourceReference) -> Dict[str, Any]:
        """Load and cache the catalog of an input."""
        identifier = reference.identifier
        if identifier in self._catalogs:
            return self._catalogs[identifier]

        catalog_file = self.catalog_dir / f"{identifier}.yaml"
        if not catalog_file.exists():
            raise UnresolvableSourceError(
                identifier, f"no catalog for {reference.locator} at {catalog_file}"
            )

        try:
            with open(catalog_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise UnresolvableSourceError(identifier, f"invalid catalog: {e}") from e

        self._catalogs[identifier] = data
        return data

    def _effective_revision(self, reference: SourceReference) -> str:
        """Revision used for store paths; unpinned inputs fall back to their ref."""
        if reference.revision is not None:
            return reference.revision

        revision = self._load_catalog(reference).get("revision")
        if revision is not None:
            return str(revision)

        logger.debug(f"Input {reference.identifier} is unpinned, using locator ref")
        return reference.parse_locator().ref or "HEAD"

    def _source_key(self, registry: SourceRegistry, identifier: str) -> str:
        """Identity of an input including the inputs it follows."""
        reference = registry[identifier]
        parts = [f"{reference.locator}@{self._effective_revision(reference)}"]
        for nested_name in sorted(reference.follows):
            target = registry[reference.follows[nested_name]]
            parts.append(
                f"{nested_name}={target.locator}@{self._effective_revision(target)}"
            )
        return ";".join(parts)

    def _catalog_overlay(self, registry: SourceRegistry, identifier: str) -> Overlay:
        """Build the overlay function published by an input."""
        if identifier not in registry:
            raise UnresolvableSourceError(identifier, "input not declared")

        section = self._load_catalog(registry[identifier]).get("overlay")
        if not section:
            raise UnresolvableSourceError(identifier, "input publishes no overlay")

        source_key = self._source_key(registry, identifier)

        def overlay(previous: PackageSet) -> Mapping[str, Package]:
            platform = previous.platform
            patch = {}
            for attribute, entry in section.items():
                entry = _normalize_entry(entry)
                if not _available(entry, platform):
                    continue
                if "overrides" in entry:
                    original = previous.lookup(entry["overrides"])
                    entry = {
                        "name": original.name,
                        "version": original.version,
                        "outputs": list(original.outputs),
                        "libraries": original.provides_libraries,
                        **entry,
                    }
                patch[attribute] = self._make_package(
                    attribute, entry, source_key, platform
                )
            return patch

        return named_overlay(identifier, overlay)

    def _packages_for(
        self,
        section: Mapping[str, Any],
        source_key: str,
        platform: PlatformIdentifier,
    ) -> Dict[str, Package]:
        packages = {}
        for attribute, entry in section.items():
            entry = _normalize_entry(entry)
            if _available(entry, platform):
                packages[attribute] = self._make_package(
                    attribute, entry, source_key, platform
                )
        return packages

    def _make_package(
        self,
        attribute: str,
        entry: Dict[str, Any],
        source_key: str,
        platform: Optional[PlatformIdentifier],
    ) -> Package:
        name = str(entry.get("name") or split_attribute_path(attribute)[-1])
        version = str(entry.get("version", "0"))
        output_names = entry.get("outputs") or ["out"]
        if "out" not in output_names:
            output_names = ["out", *output_names]

        outputs = {
            output: self._store_path(
                source_key, platform, attribute, name, version, output
            )
            for output in output_names
        }
        return Package(
            attribute=attribute,
            name=name,
            version=version,
            outputs=outputs,
            provides_libraries=bool(entry.get("libraries", True)),
        )

    def _store_path(
        self,
        source_key: str,
        platform: Optional[PlatformIdentifier],
        attribute: str,
        name: str,
        version: str,
        output: str,
    ) -> str:
        material = "|".join(
            [source_key, str(platform), attribute, name, version, output]
        )
        digest = hashlib.sha256(material.encode("utf-8")).hexdigest()[:32]
        suffix = "" if output == "out" else f"-{output}"
        return f"{self.store_dir}/{digest}-{name}-{version}{suffix}"


def _normalize_entry(entry: Any) -> Dict[str, Any]:
    """Catalog entries may be a bare version string."""
    if entry is None:
        return {}
    if isinstance(entry, dict):
        return dict(entry)
    return {"version": str(entry)}


def _available(entry: Dict[str, Any], platform: Optional[PlatformIdentifier]) -> bool:
    systems = entry.get("systems")
    if not systems or platform is None:
        return True
    return str(platform) in [str(s) for s in systems]
