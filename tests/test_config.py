"""
Tests for winosver.config.loader module.

Tests configuration loading including:
- Packaged defaults
- Overlay merging (deep merge, list replacement, source removal)
- Validation errors for malformed source tables and requirements
"""

from __future__ import annotations

import pytest

from winosver.config import load_detector_config, parse_detector_config
from winosver.config.loader import _deep_merge_dicts
from winosver.exceptions import ConfigError
from winosver.reconcile import RequiredTiers
from winosver.sources.base import TierCondition, TierRule


def _doc(**sources):
    return {
        "apiVersion": "winosver/v1",
        "required": {"major": 1, "minor": 1},
        "sources": sources,
    }


class TestDefaults:
    """Tests for the packaged source table."""

    def test_source_order(self):
        """Test that sources come back sorted by priority."""
        config = load_detector_config()
        assert [p.name for p in config.profiles] == [
            "kernel_file",
            "wmi",
            "ver_command",
            "registry",
            "environment",
        ]
        assert config.overlay_path is None

    def test_default_required(self):
        """Test the shipped default requirements."""
        config = load_detector_config()
        assert config.required == RequiredTiers(major=1, minor=1, build=1)

    def test_kernel_build_rules(self):
        """Test the conditional build tier of the kernel file."""
        kernel = load_detector_config().profile("kernel_file")
        assert kernel.rules["build"] == (
            TierRule(3, TierCondition(major=10, minor=0, min_build=18362)),
            TierRule(7),
        )
        assert kernel.rules["revision"] == (TierRule(4),)

    def test_registry_is_components_kind(self):
        """Test that the registry source returns structured components."""
        assert load_detector_config().profile("registry").kind == "components"

    def test_unknown_profile(self):
        """Test looking up a source that does not exist."""
        with pytest.raises(ConfigError, match="Unknown source"):
            load_detector_config().profile("nonexistent")


class TestOverlay:
    """Tests for overlay files."""

    def test_priority_override(self, create_yaml_file):
        """Test moving a source ahead of the others."""
        path = create_yaml_file(
            "overlay.yaml", {"sources": {"environment": {"priority": 1}}}
        )
        config = load_detector_config(path)
        assert config.profiles[0].name == "environment"
        assert config.profiles[0].rules["major"] == (TierRule(1),)
        assert config.overlay_path == path.resolve()

    def test_null_removes_source(self, create_yaml_file):
        """Test disabling a source."""
        path = create_yaml_file("overlay.yaml", {"sources": {"environment": None}})
        names = [p.name for p in load_detector_config(path).profiles]
        assert "environment" not in names
        assert len(names) == 4

    def test_rule_list_replaced(self, create_yaml_file):
        """Test that an overlay rule list replaces the default list."""
        path = create_yaml_file(
            "overlay.yaml",
            {"sources": {"kernel_file": {"tiers": {"build": [{"tier": 6}]}}}},
        )
        kernel = load_detector_config(path).profile("kernel_file")
        assert kernel.rules["build"] == (TierRule(6),)
        assert kernel.rules["major"] == (TierRule(7),)

    def test_new_source(self, create_yaml_file):
        """Test adding a site-specific source."""
        path = create_yaml_file(
            "overlay.yaml",
            {"sources": {"inventory": {"priority": 60, "tiers": {"build": 2}}}},
        )
        config = load_detector_config(path)
        assert config.profiles[-1].name == "inventory"
        assert config.profiles[-1].components == ("build",)

    def test_required_override(self, create_yaml_file):
        """Test changing the default requirements."""
        path = create_yaml_file(
            "overlay.yaml", {"required": {"build": 5, "revision": 3}}
        )
        assert load_detector_config(path).required == RequiredTiers(1, 1, 5, 3)

    def test_inconsistent_required(self, create_yaml_file):
        """Test that overlay requirements are validated."""
        path = create_yaml_file("overlay.yaml", {"required": {"minor": None}})
        with pytest.raises(ConfigError, match="required together"):
            load_detector_config(path)

    def test_missing_file(self, tmp_test_dir):
        """Test a path that does not exist."""
        with pytest.raises(ConfigError, match="file not found"):
            load_detector_config(tmp_test_dir / "missing.yaml")

    def test_empty_file(self, tmp_test_dir):
        """Test an empty overlay."""
        path = tmp_test_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError, match="empty"):
            load_detector_config(path)

    def test_invalid_yaml(self, tmp_test_dir):
        """Test an overlay with a syntax error."""
        path = tmp_test_dir / "bad.yaml"
        path.write_text("sources: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_detector_config(path)

    def test_non_mapping(self, tmp_test_dir):
        """Test an overlay whose top level is a list."""
        path = tmp_test_dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_detector_config(path)


class TestParseDetectorConfig:
    """Tests for validation of merged documents."""

    def test_minimal(self):
        """Test a one-source document."""
        config = parse_detector_config(
            _doc(wmi={"priority": 1, "tiers": {"major": 5, "minor": 5}})
        )
        assert config.profile("wmi").kind == "string"
        assert config.profile("wmi").components == ("major", "minor")

    def test_bad_api_version(self):
        """Test an unsupported apiVersion."""
        doc = _doc()
        doc["apiVersion"] = "winosver/v0"
        with pytest.raises(ConfigError, match="Unsupported apiVersion"):
            parse_detector_config(doc)

    @pytest.mark.parametrize(
        "settings, message",
        [
            ({"tiers": {"major": 1}}, "priority"),
            ({"priority": 1, "kind": "binary", "tiers": {"major": 1}}, "unknown kind"),
            ({"priority": 1, "tiers": {}}, "non-empty"),
            ({"priority": 1, "tiers": {"patch": 1}}, "unknown component"),
            ({"priority": 1, "tiers": {"major": 9}}, "0..7"),
            ({"priority": 1, "tiers": {"major": "high"}}, "must be an integer"),
            ({"priority": 1, "tiers": {"build": []}}, "rule list is empty"),
            ({"priority": 1, "tiers": {"build": [{"when": {"major": 10}}]}}, "'tier'"),
            (
                {"priority": 1, "tiers": {"build": [{"tier": 3, "when": {"edition": 1}}]}},
                "unknown condition key",
            ),
            (
                {"priority": 1, "tiers": {"build": [{"tier": 3, "when": {}}]}},
                "at least one condition",
            ),
            (
                {"priority": 1, "tiers": {"build": [{"tier": 3, "when": {"major": -1}}]}},
                "non-negative",
            ),
        ],
    )
    def test_invalid_source(self, settings, message):
        """Test malformed source settings."""
        with pytest.raises(ConfigError, match=message):
            parse_detector_config(_doc(broken=settings))

    def test_unknown_required_key(self):
        """Test requirements naming an unknown component."""
        doc = _doc()
        doc["required"] = {"major": 1, "minor": 1, "patch": 1}
        with pytest.raises(ConfigError, match="patch"):
            parse_detector_config(doc)


class TestDeepMerge:
    """Tests for _deep_merge_dicts."""

    def test_nested_merge(self):
        """Test that nested dicts merge and lists replace."""
        base = {"a": {"x": 1, "y": [1, 2]}, "b": 1}
        overlay = {"a": {"y": [3]}, "c": 2}
        merged = _deep_merge_dicts(base, overlay)
        assert merged == {"a": {"x": 1, "y": [3]}, "b": 1, "c": 2}
        assert base["a"]["y"] == [1, 2]
