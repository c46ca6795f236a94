"""Unit tests for environment projection."""

import pytest

from devflake.config.parser import ShellConfig
from devflake.core.exceptions import PackageNotFoundError
from devflake.core.platform import PlatformIdentifier
from devflake.packages.base import PackageSet, Resolver
from devflake.shell.projector import (
    EnvironmentSpec,
    make_library_path,
    project_environment,
)

LINUX = PlatformIdentifier("x86_64", "linux")
WINDOWS = PlatformIdentifier("x86_64", "windows")


class StoreResolver(Resolver):
    """Resolver that only answers library locations."""

    def resolve(self, registry, overlays, platform, base="nixpkgs"):
        raise NotImplementedError

    def overlays_for(self, registry, names):
        return []

    def lock_revision(self, reference):
        return "0" * 40


@pytest.fixture
def packages(make_package):
    return {
        "x": make_package("x", outputs={"out": "/x"}),
        "y": make_package("y", outputs={"out": "/y"}, provides_libraries=False),
        "z": make_package("z", outputs={"out": "/z"}),
        "freetype": make_package(
            "freetype", outputs={"out": "/freetype", "dev": "/freetype-dev"}
        ),
        "lld": make_package("lld", outputs={"out": "/lld", "lib": "/lld-lib"}),
        "pkg-config": make_package("pkg-config", provides_libraries=False),
    }


@pytest.fixture
def package_set(packages):
    return PackageSet(packages, platform=LINUX)


@pytest.mark.unit
class TestMakeLibraryPath:
    """Test search path construction."""

    def test_skips_packages_without_libraries(self, packages):
        resolver = StoreResolver()
        result = make_library_path(
            [packages["x"], packages["y"], packages["z"]], resolver.library_output_path
        )

        assert result == "/x/lib:/z/lib"

    def test_empty(self):
        assert make_library_path([], StoreResolver().library_output_path) == ""

    def test_only_packages_without_libraries(self, packages):
        result = make_library_path([packages["y"]], StoreResolver().library_output_path)

        assert result == ""

    def test_preserves_order_and_duplicates(self, packages):
        resolver = StoreResolver()
        result = make_library_path(
            [packages["z"], packages["x"], packages["z"]], resolver.library_output_path
        )

        assert result == "/z/lib:/x/lib:/z/lib"

    def test_prefers_lib_output(self, packages):
        result = make_library_path([packages["lld"]], StoreResolver().library_output_path)

        assert result == "/lld-lib/lib"

    def test_separator(self, packages):
        resolver = StoreResolver()
        result = make_library_path(
            [packages["x"], packages["z"]], resolver.library_output_path, ";"
        )

        assert result == "/x/lib;/z/lib"


@pytest.mark.unit
class TestProjectEnvironment:
    """Test projecting shell declarations."""

    def test_projects_inputs(self, package_set):
        shell = ShellConfig(
            name="default",
            native_build_inputs=["pkg-config"],
            build_inputs=["x", "y", "z"],
        )

        spec = project_environment(package_set, shell, StoreResolver(), LINUX)

        assert spec.name == "default"
        assert spec.platform == LINUX
        assert [p.attribute for p in spec.native_build_inputs] == ["pkg-config"]
        assert [p.attribute for p in spec.build_inputs] == ["x", "y", "z"]
        assert spec.variables == {"LD_LIBRARY_PATH": "/x/lib:/z/lib"}

    def test_native_inputs_not_on_library_path(self, package_set):
        shell = ShellConfig(name="default", native_build_inputs=["x"], build_inputs=[])

        spec = project_environment(package_set, shell, StoreResolver(), LINUX)

        assert spec.variables["LD_LIBRARY_PATH"] == ""

    def test_selected_output(self, package_set):
        shell = ShellConfig(name="default", build_inputs=["freetype", "freetype.dev"])

        spec = project_environment(package_set, shell, StoreResolver(), LINUX)

        assert [p.store_path for p in spec.build_inputs] == [
            "/freetype",
            "/freetype-dev",
        ]
        assert spec.variables["LD_LIBRARY_PATH"] == "/freetype/lib:/freetype-dev/lib"

    def test_custom_variable_and_env(self, package_set):
        shell = ShellConfig(
            name="default",
            build_inputs=["x"],
            env={"RUST_BACKTRACE": "1"},
            library_path_variable="DYLD_LIBRARY_PATH",
        )

        spec = project_environment(package_set, shell, StoreResolver(), LINUX)

        assert spec.variables == {
            "RUST_BACKTRACE": "1",
            "DYLD_LIBRARY_PATH": "/x/lib",
        }

    def test_platform_separator(self, packages):
        shell = ShellConfig(name="default", build_inputs=["x", "z"])
        package_set = PackageSet(packages, platform=WINDOWS)

        spec = project_environment(package_set, shell, StoreResolver(), WINDOWS)

        assert spec.variables["LD_LIBRARY_PATH"] == "/x/lib;/z/lib"

    def test_missing_package(self, package_set):
        shell = ShellConfig(name="default", build_inputs=["x", "wayland"])

        with pytest.raises(PackageNotFoundError, match="wayland"):
            project_environment(package_set, shell, StoreResolver(), LINUX)


@pytest.mark.unit
def test_environment_spec_to_dict(make_package):
    spec = EnvironmentSpec(
        name="default",
        platform=LINUX,
        native_build_inputs=(make_package("lld", outputs={"out": "/lld"}),),
        build_inputs=(make_package("expat", outputs={"out": "/expat"}),),
        variables={"LD_LIBRARY_PATH": "/expat/lib", "A": "1"},
    )

    assert spec.to_dict() == {
        "name": "default",
        "system": "x86_64-linux",
        "nativeBuildInputs": ["/lld"],
        "buildInputs": ["/expat"],
        "variables": {"A": "1", "LD_LIBRARY_PATH": "/expat/lib"},
    }
    assert list(spec.to_dict()["variables"]) == ["A", "LD_LIBRARY_PATH"]
