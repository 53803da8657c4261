"""
Pytest configuration and shared fixtures for winosver tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from winosver.sources import base
from winosver.sources.base import SourceProfile, TierCondition, TierRule
from winosver.versioning import COMPONENTS


class RecordingLogger:
    """Logger that keeps every message for assertions."""

    def __init__(self) -> None:
        self.steps: list[str] = []
        self.verbose_messages: list[tuple[str, str]] = []
        self.debug_messages: list[tuple[str, str]] = []

    def step(self, step: int, total: int, message: str) -> None:
        self.steps.append(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        self.verbose_messages.append((prefix, message))

    def debug(self, prefix: str, message: str) -> None:
        self.debug_messages.append((prefix, message))

    def text(self) -> str:
        lines = [f"[{p}] {m}" for p, m in self.verbose_messages + self.debug_messages]
        return "\n".join(lines)


class CountingProvider:
    """Provider returning a fixed value and counting calls."""

    def __init__(self, value: Any = None, error: Exception | None = None) -> None:
        self.value = value
        self.error = error
        self.calls = 0

    def __call__(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.value


# Build rule used by the kernel file source: untrusted once enablement
# packages exist (Windows 10 19H1 and later).
KERNEL_BUILD_RULES = (
    TierRule(3, TierCondition(major=10, minor=0, min_build=18362)),
    TierRule(7),
)


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def make_profile() -> Callable[..., SourceProfile]:
    """
    Factory fixture for SourceProfile instances.

    Usage:
        profile = make_profile("wmi", 20, major=5, minor=5, build=5)
        profile = make_profile("kernel_file", 10, build=KERNEL_BUILD_RULES)
    """

    def _make(
        name: str, priority: int, kind: str = "string", **tiers: Any
    ) -> SourceProfile:
        rules = {}
        for c in COMPONENTS:
            if c not in tiers:
                continue
            value = tiers[c]
            rules[c] = tuple(value) if isinstance(value, tuple) else (TierRule(value),)
        return SourceProfile(name=name, priority=priority, kind=kind, rules=rules)

    return _make


@pytest.fixture
def windows_profiles(make_profile) -> list[SourceProfile]:
    """Profiles mirroring the shipped source table."""
    return [
        make_profile(
            "kernel_file", 10, major=7, minor=7, build=KERNEL_BUILD_RULES, revision=4
        ),
        make_profile("wmi", 20, major=5, minor=5, build=5),
        make_profile("ver_command", 30, major=3, minor=3, build=3, revision=3),
        make_profile(
            "registry", 40, kind="components", major=2, minor=2, build=2, revision=2
        ),
        make_profile("environment", 50, major=1, minor=1, build=1),
    ]


@pytest.fixture
def empty_registry(monkeypatch) -> dict:
    """Replace the global provider registry with an empty one."""
    registry: dict = {}
    monkeypatch.setattr(base, "_PROVIDER_REGISTRY", registry)
    return registry


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("overlay.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def make_provider() -> Callable[..., CountingProvider]:
    """
    Factory fixture for providers that count their calls.

    Usage:
        provider = make_provider("10.0.19045")
        failing = make_provider(error=OSError("access denied"))
    """
    return CountingProvider
