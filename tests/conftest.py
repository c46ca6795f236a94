"""
Pytest configuration and shared fixtures for devflake tests.
"""

import textwrap
from pathlib import Path
from typing import Callable, Dict, Optional

import pytest

from devflake.core.platform import clear_platform_cache
from devflake.packages.base import Package


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as fast unit tests")
    config.addinivalue_line(
        "markers",
        "integration: marks tests evaluating complete descriptors end to end",
    )


NIXPKGS_REVISION = "1111111111111111111111111111111111111111"
RUST_OVERLAY_REVISION = "2222222222222222222222222222222222222222"
FLAKE_UTILS_REVISION = "3333333333333333333333333333333333333333"

NIXPKGS_CATALOG = f"""\
revision: {NIXPKGS_REVISION}
packages:
  pkg-config: {{version: 0.29.2, libraries: false}}
  lld: {{version: 18.1.8, outputs: [out, lib]}}
  expat: 2.6.2
  freetype: {{version: 2.13.2, outputs: [out, dev]}}
  xorg.libX11: {{version: 1.8.9, outputs: [out, dev]}}
  wayland:
    version: 1.23.0
    systems: [x86_64-linux, aarch64-linux]
"""

RUST_OVERLAY_CATALOG = f"""\
revision: {RUST_OVERLAY_REVISION}
overlay:
  rust-bin.stable."1.80.1".default:
    name: rust-default
    version: 1.80.1
  lld:
    overrides: lld
    version: 19.1.0
"""

FLAKE_UTILS_CATALOG = f"""\
revision: {FLAKE_UTILS_REVISION}
"""

DESCRIPTOR = """\
version: 1
description: Test shell
inputs:
  nixpkgs: github:NixOS/nixpkgs/nixpkgs-unstable
  flake-utils: github:numtide/flake-utils
  rust-overlay:
    url: github:oxalica/rust-overlay
    inputs:
      nixpkgs:
        follows: nixpkgs
overlays: [rust-overlay]
systems: [x86_64-linux, aarch64-darwin]
devShells:
  default:
    nativeBuildInputs: [pkg-config, lld]
    buildInputs:
      - rust-bin.stable."1.80.1".default
      - expat
      - freetype
      - freetype.dev
      - xorg.libX11
    env:
      RUST_BACKTRACE: "1"
"""


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_platform_cache():
    """Platform detection is cached per process."""
    clear_platform_cache()
    yield
    clear_platform_cache()


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """Catalog directory with nixpkgs, rust-overlay and flake-utils."""
    catalog = tmp_path / "catalog"
    catalog.mkdir()
    (catalog / "nixpkgs.yaml").write_text(NIXPKGS_CATALOG)
    (catalog / "rust-overlay.yaml").write_text(RUST_OVERLAY_CATALOG)
    (catalog / "flake-utils.yaml").write_text(FLAKE_UTILS_CATALOG)
    return catalog


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project with devflake.yaml and a catalog in .devflake/catalog."""
    project = tmp_path / "project"
    catalog = project / ".devflake" / "catalog"
    catalog.mkdir(parents=True)
    (catalog / "nixpkgs.yaml").write_text(NIXPKGS_CATALOG)
    (catalog / "rust-overlay.yaml").write_text(RUST_OVERLAY_CATALOG)
    (catalog / "flake-utils.yaml").write_text(FLAKE_UTILS_CATALOG)
    (project / "devflake.yaml").write_text(DESCRIPTOR)
    return project


@pytest.fixture
def descriptor_file(project_dir: Path) -> Path:
    return project_dir / "devflake.yaml"


@pytest.fixture
def write_descriptor(tmp_path: Path) -> Callable[[str], Path]:
    """Write descriptor text to tmp_path/devflake.yaml."""

    def _write(content: str) -> Path:
        path = tmp_path / "devflake.yaml"
        path.write_text(textwrap.dedent(content))
        return path

    return _write


@pytest.fixture
def make_package() -> Callable[..., Package]:
    """Factory for Package instances with predictable store paths."""

    def _make(
        attribute: str,
        version: str = "1.0",
        outputs: Optional[Dict[str, str]] = None,
        provides_libraries: bool = True,
    ) -> Package:
        name = attribute.split(".")[-1]
        if outputs is None:
            outputs = {"out": f"/nix/store/{name}-{version}"}
        return Package(
            attribute=attribute,
            name=name,
            version=version,
            outputs=outputs,
            provides_libraries=provides_libraries,
        )

    return _make


@pytest.fixture
def catalog_revisions() -> Dict[str, str]:
    """Revisions recorded in the test catalogs, by input."""
    return {
        "nixpkgs": NIXPKGS_REVISION,
        "rust-overlay": RUST_OVERLAY_REVISION,
        "flake-utils": FLAKE_UTILS_REVISION,
    }
