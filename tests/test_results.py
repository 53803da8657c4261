"""
Tests for winosver.results module.

Tests the public result types including:
- Composite version rendering
- Status code rendering (invalid, shortfall, success)
- Tuple unpacking and raise_for_status()
"""

from __future__ import annotations

import pytest

from winosver.exceptions import ConfigError, ShortfallError, WinOSVerError
from winosver.results import CompositeVersion, ReconcileResult, ReconcileStatus
from winosver.versioning import VersionComponents


def _composite(values, tiers):
    return CompositeVersion(
        values=dict(zip(("major", "minor", "build", "revision"), values)),
        tiers=dict(zip(("major", "minor", "build", "revision"), tiers)),
    )


class TestCompositeVersion:
    """Tests for CompositeVersion."""

    def test_empty(self):
        """Test the composite before any source is folded in."""
        empty = CompositeVersion.empty()
        assert empty.version_string == ""
        assert empty.tier("major") == -1
        assert empty.components == VersionComponents()

    def test_version_string_stops_at_untrusted(self):
        """Test that rendering stops at the first component below tier 1."""
        v = _composite((10, 0, 19045, 3570), (7, 7, 0, 4))
        assert v.version_string == "10.0"
        assert str(v) == "10.0"
        assert v.components.render() == "10.0.19045.3570"

    def test_version_string_stops_at_missing(self):
        """Test that rendering stops at the first absent component."""
        v = _composite((10, 0, None, 3570), (7, 7, -1, 4))
        assert v.version_string == "10.0"
        assert v.components.render() == "10.0"


class TestReconcileStatus:
    """Tests for ReconcileStatus and its integer code."""

    def test_invalid_code(self):
        """Test the invalid-requirements code."""
        status = ReconcileStatus(achieved={}, errors=("major and minor must be required together",))
        assert status.code == -1
        assert status.invalid
        assert "invalid requirements" in status.describe()

    @pytest.mark.parametrize(
        "shortfalls, code",
        [
            ({"major", "minor"}, -0x10C),
            ({"build"}, -0x102),
            ({"revision"}, -0x101),
            ({"major", "minor", "build", "revision"}, -0x10F),
        ],
    )
    def test_shortfall_codes(self, shortfalls, code):
        """Test one bit per short component under the shortfall flag."""
        status = ReconcileStatus(
            achieved={"major": -1, "minor": -1, "build": -1, "revision": -1},
            shortfalls=frozenset(shortfalls),
        )
        assert status.code == code
        assert not status.ok

    def test_success_code_nibbles(self):
        """Test that each nibble holds the achieved tier plus one."""
        status = ReconcileStatus(
            achieved={"major": 7, "minor": 7, "build": 5, "revision": 4}
        )
        assert status.ok
        assert status.code == 0x8865

    def test_success_code_with_unset_components(self):
        """Test that never-set components contribute a zero nibble."""
        status = ReconcileStatus(
            achieved={"major": 1, "minor": 1, "build": -1, "revision": -1}
        )
        assert status.code == 0x2200
        assert ReconcileStatus(achieved={}).code == 0

    def test_describe_shortfall(self):
        """Test the human-readable shortfall summary."""
        status = ReconcileStatus(
            achieved={"major": 7, "minor": 7, "build": 5, "revision": -1},
            required={"major": 1, "minor": 1, "build": 6, "revision": None},
            shortfalls=frozenset({"build"}),
        )
        text = status.describe()
        assert "build (needs 6)" in text
        assert "build=5" in text


class TestReconcileResult:
    """Tests for ReconcileResult."""

    def test_unpacks_as_pair(self):
        """Test tuple-style unpacking."""
        result = ReconcileResult(
            version=CompositeVersion.empty(), status=ReconcileStatus(achieved={})
        )
        version, status = result
        assert version is result.version
        assert status is result.status

    def test_raise_for_status_ok(self):
        """Test that a met requirement returns the result itself."""
        result = ReconcileResult(
            version=CompositeVersion.empty(), status=ReconcileStatus(achieved={})
        )
        assert result.raise_for_status() is result

    def test_raise_for_status_shortfall(self):
        """Test that a shortfall raises with the status attached."""
        status = ReconcileStatus(achieved={}, shortfalls=frozenset({"build"}))
        result = ReconcileResult(version=CompositeVersion.empty(), status=status)
        with pytest.raises(ShortfallError) as exc_info:
            result.raise_for_status()
        assert exc_info.value.status is status
        assert isinstance(exc_info.value, WinOSVerError)

    def test_raise_for_status_invalid(self):
        """Test that invalid requirements raise ConfigError."""
        status = ReconcileStatus(achieved={}, errors=("bad",))
        result = ReconcileResult(version=CompositeVersion.empty(), status=status)
        with pytest.raises(ConfigError, match="bad"):
            result.raise_for_status()
