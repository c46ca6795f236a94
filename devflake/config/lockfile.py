"""
Lock file generation and verification for devflake.

The lock file records the exact revision every input resolved to, so that the
same descriptor evaluates to the same package sets on every machine. The
revisions themselves come from the resolver; this module only stores them and
applies them back onto a source registry.

Example:
    >>> from pathlib import Path
    >>> from devflake.config.lockfile import LockFileManager
    >>>
    >>> manager = LockFileManager(Path('/path/to/project'))
    >>> lock = manager.generate(registry, {"nixpkgs": "5e0ca22929f3..."})
    >>> manager.save(lock)
    >>>
    >>> lock = manager.load()
    >>> verified, issues = manager.verify(lock, registry)
    >>> pinned = manager.apply(lock, registry)
"""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from devflake.config.sources import SourceRegistry
from devflake.core.exceptions import LockFileError
from devflake.core.locking import exclusive_file_lock

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = "devflake.lock"


@dataclass
class LockedSource:
    """
    A locked input.

    Attributes:
        locator: Locator the input was declared with when locked
        revision: Exact revision the input resolved to
    """

    locator: str
    revision: str

    def to_dict(self) -> dict:
        """Convert to dictionary for YAML serialization."""
        return {"locator": self.locator, "revision": self.revision}

    @staticmethod
    def from_dict(data: dict) -> "LockedSource":
        """Create from dictionary loaded from YAML."""
        return LockedSource(locator=data["locator"], revision=str(data["revision"]))


@dataclass
class LockFile:
    """
    Complete lock file structure.

    Attributes:
        version: Lock file format version (currently 1)
        generated: ISO 8601 timestamp of generation
        sources: Dict of input identifier -> LockedSource
        metadata: Additional metadata
    """

    version: int = 1
    generated: Optional[str] = None
    sources: Dict[str, LockedSource] = field(default_factory=dict)
    metadata: dict = field(default_factory=dict)

    def pins(self) -> Dict[str, str]:
        """Identifier -> revision mapping."""
        return {name: source.revision for name, source in self.sources.items()}

    def to_dict(self) -> dict:
        """Convert to dictionary for YAML serialization."""
        return {
            "version": self.version,
            "generated": self.generated,
            "sources": {
                name: source.to_dict() for name, source in self.sources.items()
            },
            "metadata": self.metadata,
        }

    @staticmethod
    def from_dict(data: dict) -> "LockFile":
        """Create from dictionary loaded from YAML."""
        sources = {}
        for name, source_data in (data.get("sources") or {}).items():
            sources[name] = LockedSource.from_dict(source_data)

        return LockFile(
            version=data.get("version", 1),
            generated=data.get("generated"),
            sources=sources,
            metadata=data.get("metadata") or {},
        )


class LockFileManager:
    """
    Manages devflake.lock file generation, loading and verification.

    Attributes:
        project_root: Project root directory
        lock_file_path: Path to devflake.lock file
    """

    def __init__(self, project_root: Path):
        """
        Initialize lock file manager.

        Args:
            project_root: Project root directory

        Raises:
            LockFileError: If project_root is not a valid directory
        """
        project_root = Path(project_root)

        if not project_root.is_dir():
            raise LockFileError(
                f"Project root is not a directory: {project_root}. "
                f"Expected a valid directory path."
            )

        self.project_root = project_root.resolve()
        self.lock_file_path = self.project_root / LOCK_FILE_NAME

    def generate(
        self, registry: SourceRegistry, revisions: Dict[str, str]
    ) -> LockFile:
        """
        Generate a lock file from a registry and resolved revisions.

        Args:
            registry: Source registry of the descriptor
            revisions: Identifier -> revision as resolved by the resolver

        Returns:
            Generated lock file

        Raises:
            LockFileError: If a declared input has no resolved revision
        """
        missing = [name for name in registry if name not in revisions]
        if missing:
            raise LockFileError(f"No resolved revision for: {', '.join(missing)}")

        lock = LockFile(version=1, generated=datetime.now().isoformat())
        for name, reference in registry.items():
            lock.sources[name] = LockedSource(
                locator=reference.locator, revision=revisions[name]
            )
            logger.debug(f"Locked {name} at {revisions[name]}")

        lock.metadata = {
            "generator": "devflake",
            "inputs_hash": self._compute_inputs_hash(registry),
        }

        logger.info(f"Generated lock file with {len(lock.sources)} inputs")
        return lock

    def save(self, lock: LockFile, timeout: float = 30):
        """
        Save lock file to disk in YAML format.

        The write is guarded by an exclusive file lock.
        """
        data = lock.to_dict()

        with exclusive_file_lock(self.lock_file_path, timeout=timeout):
            with open(self.lock_file_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Lock file saved: {self.lock_file_path}")

    def load(self) -> Optional[LockFile]:
        """
        Load lock file from disk.

        Returns:
            Loaded lock file, or None if doesn't exist

        Raises:
            LockFileError: If lock file is corrupted
        """
        if not self.lock_file_path.exists():
            logger.debug(f"Lock file not found: {self.lock_file_path}")
            return None

        try:
            with open(self.lock_file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)

            lock = LockFile.from_dict(data or {})
            logger.debug(f"Loaded lock file: {self.lock_file_path}")
            return lock

        except (yaml.YAMLError, TypeError, KeyError, AttributeError) as e:
            raise LockFileError(
                f"Failed to load lock file {self.lock_file_path}: {e}. "
                f"The lock file may be corrupted or in an invalid format."
            ) from e

    def verify(
        self, lock: LockFile, registry: SourceRegistry
    ) -> Tuple[bool, List[str]]:
        """
        Check that a lock file still matches the declared inputs.

        Args:
            lock: Lock file to verify
            registry: Current source registry

        Returns:
            Tuple of (verified: bool, issues: list[str])
        """
        issues = []

        for name, reference in registry.items():
            locked = lock.sources.get(name)
            if locked is None:
                issues.append(f"Input not locked: {name}")
                continue
            if locked.locator != reference.locator:
                issues.append(
                    f"Input locator changed: {name}\n"
                    f"  Locked: {locked.locator}\n"
                    f"  Declared: {reference.locator}"
                )
            if reference.pinned and reference.revision != locked.revision:
                issues.append(
                    f"Input revision mismatch: {name}\n"
                    f"  Locked: {locked.revision}\n"
                    f"  Declared: {reference.revision}"
                )

        for name in lock.sources:
            if name not in registry:
                issues.append(f"Locked input no longer declared: {name}")

        verified = len(issues) == 0
        if verified:
            logger.info("Lock file verification passed")
        else:
            logger.warning(f"Lock file verification failed with {len(issues)} issues")

        return verified, issues

    def apply(self, lock: LockFile, registry: SourceRegistry) -> SourceRegistry:
        """
        Pin a registry to the revisions recorded in a lock file.

        Inputs that already declare a revision keep it. Locked entries whose
        locator no longer matches the declaration are not applied.
        """
        pins = {}
        for name, reference in registry.items():
            locked = lock.sources.get(name)
            if locked is None or reference.pinned:
                continue
            if locked.locator != reference.locator:
                logger.warning(
                    f"Ignoring stale lock entry for {name}: locator changed"
                )
                continue
            pins[name] = locked.revision
        return registry.with_pins(pins)

    def diff(self, old_lock: LockFile, new_lock: LockFile) -> dict:
        """
        Compute differences between two lock files.

        Returns:
            Dict with keys: added, removed, modified
        """
        old_ids = set(old_lock.sources)
        new_ids = set(new_lock.sources)

        modified = []
        for name in sorted(old_ids & new_ids):
            old_rev = old_lock.sources[name].revision
            new_rev = new_lock.sources[name].revision
            if old_rev != new_rev:
                modified.append(
                    {"name": name, "old_revision": old_rev, "new_revision": new_rev}
                )

        return {
            "added": sorted(new_ids - old_ids),
            "removed": sorted(old_ids - new_ids),
            "modified": modified,
        }

    def _compute_inputs_hash(self, registry: SourceRegistry) -> str:
        """Hash of the declared locators, used to spot edited descriptors."""
        digest = hashlib.sha256()
        for name, reference in registry.items():
            digest.update(f"{name}={reference.locator}\n".encode("utf-8"))
        return digest.hexdigest()
