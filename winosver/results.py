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

"""Public API return types for winosver.

This module defines the dataclasses returned by reconcile() and
detect_os_version(). All dataclasses are frozen (immutable) to prevent
accidental mutation of return values.

Status Codes:
    ReconcileStatus is an explicit struct; `code` renders it to the legacy
    integer form for callers that need a single number:

    - -1: the RequiredTiers were inconsistent, no source was consulted
    - -(0x100 | mask): at least one required component fell short; mask has
      one bit per component (major=8, minor=4, build=2, revision=1)
    - >= 0: success; one nibble per component (major in the highest
      nibble), each holding achieved tier + 1 (0 means never set)

Example:
    Using result types:
        ```python
        from winosver.core import detect_os_version

        version, status = detect_os_version()
        if status.ok:
            print(version.version_string)  # 10.0.19045.3570
        else:
            print(f"Short on: {sorted(status.shortfalls)} (code {status.code})")
        ```

Note:
    Only public API return types belong in this module. Domain types (like
    VersionComponents or SourceReading) remain co-located with their
    related logic.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from winosver.exceptions import ConfigError, ShortfallError
from winosver.sources.base import UNKNOWN_TIER
from winosver.versioning import COMPONENTS, Component, VersionComponents

INVALID_REQUIREMENTS_CODE = -1
SHORTFALL_FLAG = 0x100

# Bit per component in a shortfall code, and nibble shift in a success code
_SHORTFALL_BITS: dict[Component, int] = {
    "major": 8,
    "minor": 4,
    "build": 2,
    "revision": 1,
}
_NIBBLE_SHIFTS: dict[Component, int] = {
    "major": 12,
    "minor": 8,
    "build": 4,
    "revision": 0,
}


@dataclass(frozen=True)
class CompositeVersion:
    """The reconciled version with the trust tier achieved per component.

    Attributes:
        values: Accepted value per component (None when never supplied).
        tiers: Achieved tier per component (-1 when never set).
        sources: Name of the source whose value was accepted, per component.

    """

    values: Mapping[Component, int | None]
    tiers: Mapping[Component, int]
    sources: Mapping[Component, str] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> CompositeVersion:
        return cls(
            values={c: None for c in COMPONENTS},
            tiers={c: UNKNOWN_TIER for c in COMPONENTS},
        )

    def tier(self, component: Component) -> int:
        return self.tiers.get(component, UNKNOWN_TIER)

    @property
    def components(self) -> VersionComponents:
        """Accepted values, contiguous from the left."""
        leading: list[int] = []
        for c in COMPONENTS:
            value = self.values.get(c)
            if value is None:
                break
            leading.append(value)
        return VersionComponents.from_values(leading)

    @property
    def version_string(self) -> str:
        """Dotted version, stopping at the first component below tier 1.

        Returns:
            e.g. "10.0.19045.3570", "10.0" or "" when even major is not
                known with tier 1 or better.

        """
        parts: list[str] = []
        for c in COMPONENTS:
            value = self.values.get(c)
            if value is None or self.tier(c) < 1:
                break
            parts.append(str(value))
        return ".".join(parts)

    def __str__(self) -> str:
        return self.version_string


@dataclass(frozen=True)
class ReconcileStatus:
    """Outcome of a reconciliation against the caller's requirements.

    Attributes:
        achieved: Achieved tier per component (-1 when never set).
        required: Required minimum tier per component (None = not required).
        shortfalls: Required components whose achieved tier is too low.
        errors: Requirement validation errors; non-empty means no source
            was consulted.

    """

    achieved: Mapping[Component, int]
    required: Mapping[Component, int | None] = field(default_factory=dict)
    shortfalls: frozenset[Component] = frozenset()
    errors: tuple[str, ...] = ()

    @property
    def invalid(self) -> bool:
        return bool(self.errors)

    @property
    def ok(self) -> bool:
        return not self.errors and not self.shortfalls

    @property
    def shortfall_mask(self) -> int:
        return sum(_SHORTFALL_BITS[c] for c in self.shortfalls)

    @property
    def code(self) -> int:
        """Legacy integer form (see module docstring)."""
        if self.errors:
            return INVALID_REQUIREMENTS_CODE
        if self.shortfalls:
            return -(SHORTFALL_FLAG | self.shortfall_mask)
        code = 0
        for c in COMPONENTS:
            nibble = max(self.achieved.get(c, UNKNOWN_TIER), UNKNOWN_TIER) + 1
            code |= (nibble & 0xF) << _NIBBLE_SHIFTS[c]
        return code

    def describe(self) -> str:
        """One-line human-readable summary."""
        if self.errors:
            return "invalid requirements: " + "; ".join(self.errors)
        tiers = ", ".join(f"{c}={self.achieved.get(c, UNKNOWN_TIER)}" for c in COMPONENTS)
        if self.shortfalls:
            short = ", ".join(
                f"{c} (needs {self.required.get(c)})"
                for c in COMPONENTS
                if c in self.shortfalls
            )
            return f"shortfall on {short}; achieved {tiers}"
        return f"ok; achieved {tiers}"


@dataclass(frozen=True)
class ReconcileResult:
    """Composite version plus status; unpacks as `(version, status)`.

    Attributes:
        version: The best-effort composite, returned even on shortfall.
        status: Whether the requirements were met.

    """

    version: CompositeVersion
    status: ReconcileStatus

    def __iter__(self) -> Iterator[CompositeVersion | ReconcileStatus]:
        yield self.version
        yield self.status

    def raise_for_status(self) -> ReconcileResult:
        """Return self, or raise when the requirements were not met.

        Raises:
            ConfigError: If the requirements were inconsistent.
            ShortfallError: If a required component fell short.

        """
        if self.status.errors:
            raise ConfigError(self.status.describe())
        if self.status.shortfalls:
            raise ShortfallError(self.status.describe(), status=self.status)
        return self
