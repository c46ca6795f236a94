"""Unit tests for overlay application."""

import pytest

from devflake.core.exceptions import PackageNotFoundError
from devflake.packages.base import PackageSet
from devflake.packages.overlays import (
    apply_overlays,
    named_overlay,
    overlay_name,
    static_overlay,
)


@pytest.fixture
def base(make_package):
    return PackageSet({"expat": make_package("expat"), "lld": make_package("lld", "17")})


@pytest.mark.unit
class TestApplyOverlays:
    """Test left-fold overlay application."""

    def test_no_overlays(self, base):
        result = apply_overlays(base, [])

        assert dict(result) == dict(base)

    def test_overlay_adds_packages(self, base, make_package):
        result = apply_overlays(base, [static_overlay({"rustc": make_package("rustc")})])

        assert set(result) == {"expat", "lld", "rustc"}

    def test_later_overlay_wins(self, base, make_package):
        first = make_package("p", "1")
        second = make_package("p", "2")

        result = apply_overlays(
            base, [static_overlay({"p": first}), static_overlay({"p": second})]
        )

        assert result["p"] is second

    def test_overlay_shadows_base(self, base, make_package):
        result = apply_overlays(base, [static_overlay({"lld": make_package("lld", "18")})])

        assert result["lld"].version == "18"
        assert base["lld"].version == "17"

    def test_overlay_sees_previous_overlays(self, base, make_package):
        seen = []

        def second(previous):
            seen.append(previous["p"].version)
            return {}

        apply_overlays(base, [static_overlay({"p": make_package("p", "1")}), second])

        assert seen == ["1"]

    def test_overlay_derives_from_previous(self, base, make_package):
        def bump_lld(previous):
            lld = previous.lookup("lld")
            return {"lld": make_package("lld", lld.version + ".1")}

        result = apply_overlays(base, [bump_lld, bump_lld])

        assert result["lld"].version == "17.1.1"

    def test_failing_overlay_propagates(self, base):
        error = RuntimeError("overlay exploded")

        def broken(previous):
            raise error

        with pytest.raises(RuntimeError) as exc_info:
            apply_overlays(base, [broken])

        assert exc_info.value is error

    def test_missing_base_package_propagates(self, base):
        def needs_gcc(previous):
            return {"gcc-wrapper": previous.lookup("gcc")}

        with pytest.raises(PackageNotFoundError, match="gcc"):
            apply_overlays(base, [needs_gcc])


@pytest.mark.unit
def test_overlay_names():
    def rust_overlay(previous):
        return {}

    assert overlay_name(rust_overlay) == "rust_overlay"
    assert overlay_name(named_overlay("rust-overlay", rust_overlay)) == "rust-overlay"
    assert overlay_name(static_overlay({}, name="pins")) == "pins"
