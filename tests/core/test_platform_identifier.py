"""Unit tests for platform identifiers and detection."""

import pytest

from devflake.core import platform as platform_module
from devflake.core.exceptions import DescriptorError
from devflake.core.platform import (
    DEFAULT_SYSTEMS,
    PlatformIdentifier,
    detect_system,
    is_supported_platform,
    parse_systems,
)


@pytest.mark.unit
class TestPlatformIdentifier:
    """Test PlatformIdentifier parsing and formatting."""

    def test_parse_linux(self):
        system = PlatformIdentifier.parse("x86_64-linux")

        assert system.arch == "x86_64"
        assert system.os == "linux"
        assert str(system) == "x86_64-linux"

    def test_parse_returns_existing_identifier(self):
        system = PlatformIdentifier("aarch64", "darwin")

        assert PlatformIdentifier.parse(system) is system

    @pytest.mark.parametrize("value", ["x86_64", "-linux", "x86_64-", ""])
    def test_parse_invalid(self, value):
        with pytest.raises(DescriptorError, match="Invalid system identifier"):
            PlatformIdentifier.parse(value)

    def test_path_separator(self):
        assert PlatformIdentifier("x86_64", "linux").path_separator == ":"
        assert PlatformIdentifier("aarch64", "darwin").path_separator == ":"
        assert PlatformIdentifier("x86_64", "windows").path_separator == ";"

    def test_identifiers_are_hashable_and_comparable(self):
        a = PlatformIdentifier.parse("x86_64-linux")
        b = PlatformIdentifier("x86_64", "linux")

        assert a == b
        assert len({a, b}) == 1


@pytest.mark.unit
class TestParseSystems:
    """Test system enumeration parsing."""

    def test_default_systems(self):
        systems = parse_systems(None)

        assert [str(s) for s in systems] == [
            "x86_64-linux",
            "aarch64-linux",
            "x86_64-darwin",
            "aarch64-darwin",
        ]
        assert tuple(systems) == DEFAULT_SYSTEMS

    def test_order_preserved(self):
        systems = parse_systems(["aarch64-darwin", "x86_64-linux"])

        assert [str(s) for s in systems] == ["aarch64-darwin", "x86_64-linux"]

    def test_duplicate_rejected(self):
        with pytest.raises(DescriptorError, match="Duplicate system"):
            parse_systems(["x86_64-linux", "x86_64-linux"])


@pytest.mark.unit
class TestDetectSystem:
    """Test host platform detection."""

    @pytest.mark.parametrize(
        "system,machine,expected",
        [
            ("Linux", "x86_64", "x86_64-linux"),
            ("Linux", "aarch64", "aarch64-linux"),
            ("Darwin", "arm64", "aarch64-darwin"),
            ("Windows", "AMD64", "x86_64-windows"),
            ("Linux", "armv7l", "armv7l-linux"),
        ],
    )
    def test_detect(self, monkeypatch, system, machine, expected):
        monkeypatch.setattr(platform_module.platform, "system", lambda: system)
        monkeypatch.setattr(platform_module.platform, "machine", lambda: machine)

        assert str(detect_system()) == expected

    def test_unsupported_os(self, monkeypatch):
        monkeypatch.setattr(platform_module.platform, "system", lambda: "Plan9")
        monkeypatch.setattr(platform_module.platform, "machine", lambda: "x86_64")

        with pytest.raises(RuntimeError, match="Unsupported operating system"):
            detect_system()

    def test_detection_is_cached(self, monkeypatch):
        calls = []

        def fake_system():
            calls.append(1)
            return "Linux"

        monkeypatch.setattr(platform_module.platform, "system", fake_system)
        monkeypatch.setattr(platform_module.platform, "machine", lambda: "x86_64")

        detect_system()
        detect_system()

        assert len(calls) == 1


@pytest.mark.unit
def test_is_supported_platform():
    assert is_supported_platform(PlatformIdentifier("aarch64", "darwin"))
    assert not is_supported_platform(PlatformIdentifier("riscv64", "linux"))
    assert is_supported_platform(
        PlatformIdentifier("riscv64", "linux"),
        systems=[PlatformIdentifier("riscv64", "linux")],
    )
