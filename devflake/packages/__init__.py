"""
Package sets, overlays and resolvers for devflake.

The resolver is the external package database; devflake only composes its
results. CatalogResolver is a file-backed implementation used by the CLI and
the tests.
"""

from devflake.packages.base import (
    Overlay,
    Package,
    PackageSet,
    Resolver,
    split_attribute_path,
    format_attribute_path,
)
from devflake.packages.overlays import (
    apply_overlays,
    named_overlay,
    static_overlay,
)
from devflake.packages.catalog import CatalogResolver

__all__ = [
    "Overlay",
    "Package",
    "PackageSet",
    "Resolver",
    "split_attribute_path",
    "format_attribute_path",
    "apply_overlays",
    "named_overlay",
    "static_overlay",
    "CatalogResolver",
]
