"""
Tests for winosver.core module.

Tests the detect_os_version() orchestration including:
- Explicit provider mappings and the global registry
- Requirements as RequiredTiers, mappings, or config defaults
- Overlay configuration
- Progress logging
"""

from __future__ import annotations

import pytest

from winosver import detect_os_version
from winosver.exceptions import ConfigError, ShortfallError
from winosver.reconcile import RequiredTiers
from winosver.sources import register_provider
from winosver.versioning import VersionComponents


class TestDetectOSVersion:
    """Tests for detect_os_version()."""

    def test_explicit_providers(self, make_provider, recording_logger):
        """Test a Windows 10 machine with three providers available."""
        providers = {
            "kernel_file": make_provider("10.0.19041.3570"),
            "wmi": make_provider("10.0.19045"),
            "ver_command": make_provider("10.0.19045.3570"),
        }

        result = detect_os_version(
            RequiredTiers(major=5, minor=5, build=5),
            providers=providers,
            logger=recording_logger,
        )

        assert result.version.version_string == "10.0.19045.3570"
        assert result.status.ok
        assert providers["ver_command"].calls == 0
        assert recording_logger.steps == [
            "[1/3] Loading source table...",
            "[2/3] Binding providers...",
            "[3/3] Reconciling readings...",
        ]

    def test_registered_providers(self, empty_registry, make_provider):
        """Test that the global registry is used by default."""
        registry_provider = make_provider(VersionComponents(10, 0, 22631, 2861))
        register_provider("registry", registry_provider)

        version, status = detect_os_version({"major": 2, "minor": 2, "build": 2})

        assert version.version_string == "10.0.22631.2861"
        assert status.ok
        assert registry_provider.calls == 1

    def test_default_requirements(self, make_provider):
        """Test that the config requirements apply when none are passed."""
        version, status = detect_os_version(
            providers={"environment": make_provider("6.2.9200")}
        )
        assert version.version_string == "6.2.9200"
        assert status.ok
        assert status.required["build"] == 1

    def test_nothing_available(self, empty_registry):
        """Test a machine where no provider is available."""
        result = detect_os_version()
        assert result.version.version_string == ""
        assert result.status.shortfalls == frozenset({"major", "minor", "build"})
        with pytest.raises(ShortfallError):
            result.raise_for_status()

    @pytest.mark.parametrize(
        "required",
        [
            {"major": 1},
            {"major": 1, "minor": 1, "patch": 1},
            RequiredTiers(build=1, revision=1),
        ],
    )
    def test_invalid_requirements_reported(self, make_provider, required):
        """Test that invalid requirements give code -1 without probing."""
        provider = make_provider("10.0.19045")
        result = detect_os_version(required, providers={"wmi": provider})
        assert result.status.code == -1
        assert provider.calls == 0

    def test_overlay(self, create_yaml_file, make_provider):
        """Test promoting a source through an overlay file."""
        path = create_yaml_file(
            "overlay.yaml",
            {"sources": {"environment": {"tiers": {"major": 6, "minor": 6, "build": 6}}}},
        )
        providers = {
            "wmi": make_provider("10.0.19045"),
            "environment": make_provider("10.0.22000"),
        }

        version, _ = detect_os_version(
            RequiredTiers(major=1, minor=1, build=6),
            providers=providers,
            config_path=path,
        )

        assert version.values["build"] == 22000
        assert version.sources["build"] == "environment"

    def test_malformed_overlay_raises(self, create_yaml_file):
        """Test that configuration problems are raised, not reported."""
        path = create_yaml_file("overlay.yaml", {"apiVersion": "winosver/v2"})
        with pytest.raises(ConfigError, match="Unsupported apiVersion"):
            detect_os_version(providers={}, config_path=path)
