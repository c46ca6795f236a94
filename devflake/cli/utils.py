"""
Shared utilities for CLI commands.

Provides common functionality used across multiple CLI commands to
eliminate duplication and ensure consistent behavior.
"""

import logging
from pathlib import Path
from typing import Optional

from devflake.config.lockfile import LockFileManager
from devflake.config.parser import DescriptorConfig, parse_config
from devflake.config.sources import SourceRegistry
from devflake.core.platform import PlatformIdentifier, detect_system
from devflake.packages.catalog import CatalogResolver

logger = logging.getLogger(__name__)

DESCRIPTOR_FILE_NAME = "devflake.yaml"


# ============================================================================
# Descriptor and resolver
# ============================================================================


def get_project_root(args) -> Path:
    """Resolved project root from parsed arguments."""
    return Path(getattr(args, "project_root", None) or Path.cwd()).resolve()


def get_descriptor_path(args) -> Path:
    """Descriptor path: --config, or devflake.yaml in the project root."""
    config = getattr(args, "config", None)
    if config:
        return Path(config)
    return get_project_root(args) / DESCRIPTOR_FILE_NAME


def load_descriptor(args) -> DescriptorConfig:
    """
    Load the descriptor selected by the command-line arguments.

    Raises:
        ConfigError: If the descriptor is missing or invalid
    """
    path = get_descriptor_path(args)
    logger.debug(f"Loading descriptor from {path}")
    return parse_config(path)


def get_catalog_dir(args) -> Path:
    catalog = getattr(args, "catalog", None)
    if catalog:
        return Path(catalog)
    return get_project_root(args) / ".devflake" / "catalog"


def create_resolver(args) -> CatalogResolver:
    """Resolver backed by the catalog directory."""
    catalog_dir = get_catalog_dir(args)
    logger.debug(f"Using package catalog: {catalog_dir}")
    return CatalogResolver(catalog_dir)


def load_registry(args, descriptor: DescriptorConfig) -> SourceRegistry:
    """
    Source registry for evaluation.

    Applies devflake.lock unless --no-lock was given or no lock file exists.
    """
    if getattr(args, "no_lock", False):
        return descriptor.registry

    manager = LockFileManager(get_project_root(args))
    lock = manager.load()
    if lock is None:
        return descriptor.registry

    verified, issues = manager.verify(lock, descriptor.registry)
    if not verified:
        for issue in issues:
            logger.warning(f"  {issue}")
        logger.warning('Run "devflake lock" to update devflake.lock')
    return manager.apply(lock, descriptor.registry)


def get_system(args) -> PlatformIdentifier:
    """Platform from --system, or the current platform."""
    system: Optional[str] = getattr(args, "system", None)
    if system:
        return PlatformIdentifier.parse(system)
    return detect_system()
