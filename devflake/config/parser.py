"""YAML descriptor parser for devflake.

This module provides parsing and validation for devflake.yaml descriptor files.

A descriptor looks like::

    version: 1
    description: A basic flake with a shell
    inputs:
      nixpkgs: github:NixOS/nixpkgs/nixpkgs-unstable
      flake-utils: github:numtide/flake-utils
      rust-overlay: github:oxalica/rust-overlay
    overlays: [rust-overlay]
    devShells:
      default:
        nativeBuildInputs: [pkg-config, rust-analyzer, lld]
        buildInputs: [expat, fontconfig, xorg.libX11]
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from devflake.config.sources import SourceRegistry
from devflake.core.exceptions import DevFlakeError
from devflake.core.platform import PlatformIdentifier, parse_systems


DEFAULT_LIBRARY_PATH_VARIABLE = "LD_LIBRARY_PATH"

_VARIABLE_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class ConfigError(DevFlakeError):
    """Descriptor parsing or validation error."""

    pass


@dataclass
class ShellConfig:
    """Configuration for a single development shell."""

    name: str
    native_build_inputs: List[str] = field(default_factory=list)
    build_inputs: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    library_path_variable: str = DEFAULT_LIBRARY_PATH_VARIABLE


@dataclass
class DescriptorConfig:
    """Complete devflake descriptor."""

    version: int
    description: str = ""
    registry: SourceRegistry = field(default_factory=SourceRegistry)
    packages: str = "nixpkgs"  # input providing the base package set
    overlays: List[str] = field(default_factory=list)
    systems: List[PlatformIdentifier] = field(default_factory=list)
    shells: Dict[str, ShellConfig] = field(default_factory=dict)
    path: Optional[Path] = None


def parse_config(config_path: Path) -> DescriptorConfig:
    """
    Parse devflake.yaml descriptor file.

    Args:
        config_path: Path to devflake.yaml

    Returns:
        Parsed and validated descriptor

    Raises:
        ConfigError: If descriptor is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    descriptor = parse_descriptor(data)
    descriptor.path = config_path
    return descriptor


def parse_descriptor(data: Dict[str, Any]) -> DescriptorConfig:
    """Parse and validate descriptor data already loaded from YAML."""
    if not isinstance(data, dict):
        raise ConfigError("Descriptor must be a mapping")

    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if type(data["version"]) is not int or data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    if "inputs" not in data or not data["inputs"]:
        raise ConfigError("At least one input must be defined")

    # Source errors are re-raised with the configuration error type
    try:
        registry = SourceRegistry.from_mapping(data["inputs"])
        systems = parse_systems(data.get("systems"))
    except DevFlakeError as e:
        raise ConfigError(str(e)) from e

    packages = data.get("packages", "nixpkgs")
    if packages not in registry:
        raise ConfigError(f"packages references undefined input: {packages}")

    overlays = data.get("overlays") or []
    if not isinstance(overlays, list):
        raise ConfigError("overlays must be a list of input names")
    for overlay in overlays:
        if overlay not in registry:
            raise ConfigError(f"overlays references undefined input: {overlay}")

    shells = _parse_shells(data.get("devShells") or {})
    if not shells:
        raise ConfigError("At least one devShell must be defined")

    return DescriptorConfig(
        version=data["version"],
        description=str(data.get("description", "")),
        registry=registry,
        packages=packages,
        overlays=list(overlays),
        systems=systems,
        shells=shells,
    )


def _parse_shells(data: Dict[str, Any]) -> Dict[str, ShellConfig]:
    """Parse the devShells section."""
    if not isinstance(data, dict):
        raise ConfigError("devShells must be a mapping of shell name to shell")

    shells = {}
    for name, shell_data in data.items():
        shells[str(name)] = _parse_shell(str(name), shell_data or {})
    return shells


def _parse_shell(name: str, data: Dict[str, Any]) -> ShellConfig:
    """Parse a single devShell."""
    if not isinstance(data, dict):
        raise ConfigError(f"devShells.{name} must be a mapping")

    for list_field in ("nativeBuildInputs", "buildInputs"):
        value = data.get(list_field, [])
        if not isinstance(value, list):
            raise ConfigError(f"devShells.{name}.{list_field} must be a list")

    env = data.get("env") or {}
    if not isinstance(env, dict):
        raise ConfigError(f"devShells.{name}.env must be a dictionary")

    variable = data.get("libraryPathVariable", DEFAULT_LIBRARY_PATH_VARIABLE)
    for key in [variable, *env]:
        if not isinstance(key, str) or not _VARIABLE_NAME_RE.fullmatch(key):
            raise ConfigError(
                f"Invalid environment variable name in devShells.{name}: {key!r}"
            )
    if variable in env:
        raise ConfigError(
            f"devShells.{name}.env sets {variable}, which is derived from buildInputs"
        )

    return ShellConfig(
        name=name,
        native_build_inputs=[str(item) for item in data.get("nativeBuildInputs", [])],
        build_inputs=[str(item) for item in data.get("buildInputs", [])],
        env={str(key): str(value) for key, value in env.items()},
        library_path_variable=variable,
    )
