"""Environment projection.

Turns a shell declaration and a resolved package set into an EnvironmentSpec:
the tools needed while using the shell (nativeBuildInputs), the dependencies of
whatever is developed inside it (buildInputs), and the environment variables
the shell exports. The runtime library search path is derived from
buildInputs:

    buildInputs = [X, Y, Z]   X -> /x/lib, Y -> (none), Z -> /z/lib
    LD_LIBRARY_PATH = "/x/lib:/z/lib"

Entries keep declaration order and duplicates are not removed. Nothing here
touches the filesystem.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Tuple

from devflake.config.parser import ShellConfig
from devflake.core.platform import PlatformIdentifier
from devflake.packages.base import Package, PackageSet, Resolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvironmentSpec:
    """
    A projected development shell for one platform.

    Attributes:
        name: Shell name ('default')
        platform: Platform the shell was projected for
        native_build_inputs: Tools available while using the shell
        build_inputs: Dependencies of the code developed in the shell
        variables: Environment variables exported by the shell
    """

    name: str
    platform: PlatformIdentifier
    native_build_inputs: Tuple[Package, ...] = ()
    build_inputs: Tuple[Package, ...] = ()
    variables: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.name,
            "system": str(self.platform),
            "nativeBuildInputs": [p.store_path for p in self.native_build_inputs],
            "buildInputs": [p.store_path for p in self.build_inputs],
            "variables": dict(sorted(self.variables.items())),
        }


def make_library_path(
    packages: Iterable[Package],
    library_output_path: Callable[[Package], Optional[str]],
    separator: str = ":",
) -> str:
    """
    Join the library directories of ``packages`` into a search path.

    Packages for which ``library_output_path`` returns None are skipped.

    Args:
        packages: Packages in declaration order
        library_output_path: Maps a package to its library directory
        separator: Path separator of the target platform

    Returns:
        The search path; an empty string when no package contributes
    """
    directories = []
    for package in packages:
        directory = library_output_path(package)
        if directory is None:
            logger.debug(f"{package.attribute} has no library output, skipping")
            continue
        directories.append(directory)
    return separator.join(directories)


def project_environment(
    package_set: PackageSet,
    shell: ShellConfig,
    resolver: Resolver,
    platform: PlatformIdentifier,
) -> EnvironmentSpec:
    """
    Project a shell declaration onto a resolved package set.

    Args:
        package_set: Package set of ``platform`` with overlays applied
        shell: Shell declaration
        resolver: Resolver providing library output locations
        platform: Target platform

    Returns:
        EnvironmentSpec for the shell

    Raises:
        PackageNotFoundError: If an input does not name a package in the set
    """
    native_build_inputs = tuple(
        package_set.lookup(attribute) for attribute in shell.native_build_inputs
    )
    build_inputs = tuple(
        package_set.lookup(attribute) for attribute in shell.build_inputs
    )

    variables = dict(shell.env)
    variables[shell.library_path_variable] = make_library_path(
        build_inputs, resolver.library_output_path, platform.path_separator
    )

    logger.debug(
        f"Projected devShells.{platform}.{shell.name}: "
        f"{len(native_build_inputs)} native, {len(build_inputs)} build inputs"
    )

    return EnvironmentSpec(
        name=shell.name,
        platform=platform,
        native_build_inputs=native_build_inputs,
        build_inputs=build_inputs,
        variables=variables,
    )
