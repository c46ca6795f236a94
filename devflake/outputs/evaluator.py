"""
Descriptor evaluation.

Evaluation is a single synchronous pass from declared inputs to outputs:

1. take the descriptor's source registry (optionally pinned by a lock file)
2. ask the resolver for the overlay each overlay input publishes
3. for every platform, resolve the package set and project every shell
4. aggregate the shells into FlakeOutputs

Resolver errors propagate unchanged and abort the evaluation; no partial
output is returned.

Example:
    >>> from devflake.config import parse_config
    >>> from devflake.packages import CatalogResolver
    >>> from devflake.outputs import evaluate
    >>> descriptor = parse_config(Path("devflake.yaml"))
    >>> outputs = evaluate(descriptor, CatalogResolver(Path("catalog")))
    >>> outputs.get("x86_64-linux").variables["LD_LIBRARY_PATH"]
"""

import logging
from typing import Dict, Iterable, Optional

from devflake.config.parser import DescriptorConfig
from devflake.config.sources import SourceRegistry
from devflake.core.platform import PlatformIdentifier
from devflake.outputs.aggregator import FlakeOutputs, aggregate
from devflake.outputs.selector import for_each_system
from devflake.packages.base import Resolver
from devflake.shell.projector import EnvironmentSpec, project_environment

logger = logging.getLogger(__name__)


def evaluate(
    descriptor: DescriptorConfig,
    resolver: Resolver,
    registry: Optional[SourceRegistry] = None,
    systems: Optional[Iterable[PlatformIdentifier]] = None,
) -> FlakeOutputs:
    """
    Evaluate a descriptor into per-platform development shells.

    Args:
        descriptor: Parsed descriptor
        resolver: External package resolver
        registry: Source registry to use instead of the descriptor's own
            (e.g. one pinned from a lock file)
        systems: Platforms to evaluate instead of the descriptor's enumeration

    Returns:
        Evaluated outputs
    """
    registry = registry if registry is not None else descriptor.registry
    systems = list(systems) if systems is not None else list(descriptor.systems)

    unpinned = registry.unpinned()
    if unpinned:
        logger.debug(f"Evaluating with unpinned inputs: {', '.join(unpinned)}")

    overlays = resolver.overlays_for(registry, descriptor.overlays)

    def shells_for(platform: PlatformIdentifier) -> Dict[str, EnvironmentSpec]:
        package_set = resolver.resolve(
            registry, overlays, platform, base=descriptor.packages
        )
        return {
            name: project_environment(package_set, shell, resolver, platform)
            for name, shell in descriptor.shells.items()
        }

    outputs = aggregate(for_each_system(systems, shells_for))
    logger.info(
        f"Evaluated {len(descriptor.shells)} shell(s) for {len(outputs)} system(s)"
    )
    return outputs
