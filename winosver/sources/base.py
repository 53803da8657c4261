# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Source protocol, trust tier table and provider registry for winosver.

This module defines the foundational components for the source system:

- Trust tiers: how tamper-resistant a source's reading of one component is
- TierRule/TierCondition: declarative, possibly conditional tier entries
- SourceProfile: one row of the source table (priority, kind, tier rules)
- SourceReading: what one source supplied during one reconciliation
- VersionSource protocol: interface the reconciler consumes
- Provider registry: register_provider() and get_provider()

A *provider* is the thin OS-specific collaborator behind a source: a
zero-argument callable returning a raw version string (for "string"
sources) or VersionComponents (for "components" sources), or None when it
has nothing to say. Providers live outside this package; they are bound to
profiles by name.

Trust Tiers:
    0 means unknown/untrusted, 7 means most tamper-resistant. The composite
    starts every component at UNKNOWN_TIER (-1) so that even a tier 0
    reading is recorded.

Conditional Tiers:
    A component's rules are tried in order and the first matching rule
    wins. A rule without a condition always matches. For example the kernel
    file's build number is only trustworthy before enablement packages
    appeared:

        build:
          - tier: 3
            when: {major: 10, minor: 0, min_build: 18362}
          - tier: 7

Example:
    Registering a provider:
        ```python
        from winosver.sources.base import register_provider

        def ver_command() -> str | None:
            ...  # run `cmd /c ver` and extract "10.0.19045.3570"

        register_provider("ver_command", ver_command)
        ```

"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Literal, Protocol

from winosver.exceptions import ConfigError
from winosver.versioning import (
    COMPONENTS,
    Component,
    ParseOutcome,
    VersionComponents,
)

SourceKind = Literal["string", "components"]

MIN_TIER = 0
MAX_TIER = 7
UNKNOWN_TIER = -1

PartialVersion = Mapping[Component, int | None]
Provider = Callable[[], str | VersionComponents | None]


# -------------------------------
# Tier table
# -------------------------------


@dataclass(frozen=True)
class TierCondition:
    """Condition on values already known for the version.

    Every constraint that is set must hold. Each component is judged by the
    first of the partial versions given that knows it, so a value already
    accepted into the composite takes precedence over a candidate reading
    (e.g. major from the composite, build from the candidate when the
    composite has no build yet). A constraint on a component that no
    partial knows does not hold.

    Attributes:
        major: Required major value.
        minor: Required minor value.
        min_build: Smallest build value (inclusive).
        max_build: Largest build value (inclusive).

    """

    major: int | None = None
    minor: int | None = None
    min_build: int | None = None
    max_build: int | None = None

    def matches(self, *partials: PartialVersion) -> bool:
        def known(component: Component) -> int | None:
            for p in partials:
                value = p.get(component)
                if value is not None:
                    return value
            return None

        if self.major is not None and known("major") != self.major:
            return False
        if self.minor is not None and known("minor") != self.minor:
            return False
        build = known("build")
        if self.min_build is not None and (build is None or build < self.min_build):
            return False
        if self.max_build is not None and (build is None or build > self.max_build):
            return False
        return True

    @property
    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.major, self.minor, self.min_build, self.max_build)
        )


@dataclass(frozen=True)
class TierRule:
    """A tier, optionally guarded by a condition."""

    tier: int
    when: TierCondition | None = None

    def applies(self, *partials: PartialVersion) -> bool:
        return self.when is None or self.when.matches(*partials)


@dataclass(frozen=True)
class SourceProfile:
    """One row of the source table.

    Attributes:
        name: Source name; also the provider name it binds to.
        priority: Lower runs first.
        kind: "string" (provider returns a raw version string) or
            "components" (provider returns VersionComponents).
        rules: Ordered tier rules per component the source can supply.
        description: Free-form note for humans.

    """

    name: str
    priority: int
    kind: SourceKind = "string"
    rules: Mapping[Component, tuple[TierRule, ...]] = field(default_factory=dict)
    description: str = ""

    @property
    def components(self) -> tuple[Component, ...]:
        """Components this source is capable of supplying, in order."""
        return tuple(c for c in COMPONENTS if self.rules.get(c))

    def tier_for(self, component: Component, *partials: PartialVersion) -> int:
        """Tier of the first rule that applies to any of the partials."""
        for rule in self.rules.get(component, ()):
            if rule.applies(*partials):
                return rule.tier
        return MIN_TIER

    def declared_tiers(self, *partials: PartialVersion) -> dict[Component, int]:
        """Tiers for every capable component given what is already known.

        Args:
            *partials: Known values, typically the composite accumulated so
                far and this source's own candidate reading, in order of
                precedence (see TierCondition).

        Returns:
            Component name to tier, for each component in `components`.

        """
        return {c: self.tier_for(c, *partials) for c in self.components}


# -------------------------------
# Readings
# -------------------------------


@dataclass(frozen=True)
class SourceReading:
    """What a source supplied during one reconciliation.

    Attributes:
        source: Name of the source.
        values: Supplied component values (only components the source is
            capable of and actually reported).
        tiers: The source's tiers for those components, evaluated against
            its own values.
        raw: Raw string returned by the provider, for string sources.
        outcome: Flexible parse outcome of `raw`, for string sources.

    """

    source: str
    values: Mapping[Component, int]
    tiers: Mapping[Component, int] = field(default_factory=dict)
    raw: str | None = None
    outcome: ParseOutcome | None = None

    @property
    def components(self) -> VersionComponents:
        """Contiguous-from-the-left projection of the supplied values."""
        leading: list[int] = []
        for c in COMPONENTS:
            value = self.values.get(c)
            if value is None:
                break
            leading.append(value)
        return VersionComponents.from_values(leading)


class VersionSource(Protocol):
    """Protocol for sources consumed by the reconciler.

    Sources are consulted one at a time in ascending priority; the
    reconciler may skip a source entirely when it cannot improve anything.
    """

    @property
    def name(self) -> str: ...

    @property
    def priority(self) -> int: ...

    @property
    def components(self) -> tuple[Component, ...]:
        """Components the source is capable of supplying."""
        ...

    def declared_tiers(self, *partials: PartialVersion) -> dict[Component, int]:
        """Tiers per capable component given already-known values."""
        ...

    def try_read(self) -> SourceReading | None:
        """Read the source; None when it has nothing to supply.

        Must not raise for expected I/O failures; an unavailable source is
        simply a None reading.
        """
        ...


# -------------------------------
# Provider Registry
# -------------------------------

_PROVIDER_REGISTRY: dict[str, Provider] = {}


def register_provider(name: str, provider: Provider) -> None:
    """Register a provider by name in the global registry.

    Registering the same name twice overwrites the previous registration
    (allows monkey-patching for tests).

    Args:
        name: Provider name; must match a source name in the source table
            (e.g., "kernel_file", "ver_command").
        provider: Zero-argument callable returning a raw string,
            VersionComponents, or None.

    """
    _PROVIDER_REGISTRY[name] = provider


def unregister_provider(name: str) -> None:
    """Remove a provider; unknown names are ignored."""
    _PROVIDER_REGISTRY.pop(name, None)


def get_provider(name: str) -> Provider:
    """Get a registered provider by name.

    Raises:
        ConfigError: If the provider name is not registered. The error
            message lists the available providers.

    """
    if name not in _PROVIDER_REGISTRY:
        available = ", ".join(_PROVIDER_REGISTRY.keys())
        raise ConfigError(
            f"Unknown version provider: {name!r}. Available: {available or '(none)'}"
        )
    return _PROVIDER_REGISTRY[name]


def registered_providers() -> dict[str, Provider]:
    """Snapshot of the registry."""
    return dict(_PROVIDER_REGISTRY)
