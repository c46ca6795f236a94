"""Overlay application.

An overlay is a pure function from a package set to a patch: a mapping of
attribute paths to packages that add to, or replace, entries of the set it
receives. Overlays are applied as a left fold in declaration order, each one
seeing the result of all overlays before it. When two overlays define the same
attribute, the later one wins.

Example:
    >>> from devflake.packages.overlays import apply_overlays, static_overlay
    >>> pkgs = apply_overlays(base, [static_overlay({"lld": lld_18})])
    >>> pkgs["lld"] is lld_18
    True
"""

import logging
from functools import reduce
from typing import Mapping, Sequence

from devflake.packages.base import Overlay, Package, PackageSet

logger = logging.getLogger(__name__)


def overlay_name(overlay: Overlay) -> str:
    """Readable name of an overlay for log messages."""
    return getattr(overlay, "overlay_name", None) or getattr(
        overlay, "__name__", repr(overlay)
    )


def _apply_one(previous: PackageSet, overlay: Overlay) -> PackageSet:
    # Exceptions raised by the overlay propagate unchanged
    patch = overlay(previous)
    shadowed = sorted(name for name in patch if name in previous)
    logger.debug(
        f"Applied overlay {overlay_name(overlay)}: {len(patch)} entries"
        + (f", shadowing {', '.join(shadowed)}" if shadowed else "")
    )
    return previous.merged(patch)


def apply_overlays(base: PackageSet, overlays: Sequence[Overlay]) -> PackageSet:
    """
    Apply overlays to a base package set.

    Args:
        base: Package set before any overlay; not modified
        overlays: Overlays in declaration order

    Returns:
        Derived package set
    """
    return reduce(_apply_one, overlays, base)


def named_overlay(name: str, overlay: Overlay) -> Overlay:
    """Attach a readable name to an overlay function."""

    def wrapper(previous: PackageSet) -> Mapping:
        return overlay(previous)

    wrapper.overlay_name = name  # type: ignore[attr-defined]
    return wrapper


def static_overlay(packages: Mapping[str, Package], name: str = "static") -> Overlay:
    """Build an overlay that always returns the same patch."""
    patch = dict(packages)
    return named_overlay(name, lambda previous: patch)
