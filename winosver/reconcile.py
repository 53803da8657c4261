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

"""Multi-source version reconciliation for winosver.

This module merges the readings of several sources into one composite
version, component by component, keeping for each component the value of
the most trustworthy source that supplied it.

Reconciliation Flow:

1. Validate RequiredTiers. Inconsistent requirements fail fast with status
   code -1 and no source is consulted.
2. For each source in ascending priority:
   - Skip it when every component it can supply is already at or above
     the tier it would offer (saves expensive probes).
   - Otherwise read it. A None reading (unavailable source) is absorbed.
   - Evaluate its tiers against the composite so far and its own
     candidate values (conditional tiers).
   - Per component: a higher tier replaces the composite value; an equal
     tier keeps the larger value; a lower tier is ignored.
3. Compare achieved tiers with the requirements and build the status.

Sources are consulted strictly one after another: the skip decision for a
source depends on the tiers accumulated from every source before it.

Requirement Rules:

- major and minor are required together or not at all
- without major/minor, exactly one of build or revision must be required
- with major/minor, revision cannot be required unless build is
- tiers are integers in 0..7

Example:
    Reconcile two sources:
        ```python
        from winosver.reconcile import RequiredTiers, reconcile

        result = reconcile(sources, RequiredTiers(major=5, minor=5, build=3))
        version, status = result
        print(version.version_string, status.code)
        ```

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any

from winosver.logging import Logger, get_global_logger
from winosver.results import CompositeVersion, ReconcileResult, ReconcileStatus
from winosver.sources.base import MAX_TIER, MIN_TIER, UNKNOWN_TIER, VersionSource
from winosver.versioning import COMPONENTS, Component


@dataclass(frozen=True)
class RequiredTiers:
    """Minimum tier per component; None means the component is not required."""

    major: int | None = None
    minor: int | None = None
    build: int | None = None
    revision: int | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> RequiredTiers:
        """Build from a mapping such as the `required` section of the config.

        Raises:
            ValueError: If the mapping has keys other than component names.

        """
        unknown = sorted(set(data) - set(COMPONENTS))
        if unknown:
            raise ValueError(f"unknown component(s) in requirements: {', '.join(unknown)}")
        return cls(**dict(data))

    def get(self, component: Component) -> int | None:
        return getattr(self, component)

    def as_dict(self) -> dict[Component, int | None]:
        return asdict(self)  # type: ignore[return-value]

    def validate(self) -> list[str]:
        """Check the cross-component consistency rules.

        Returns:
            Human-readable error messages; empty when the requirements are
                valid.

        """
        errors: list[str] = []
        for c in COMPONENTS:
            tier = self.get(c)
            if tier is None:
                continue
            if isinstance(tier, bool) or not isinstance(tier, int):
                errors.append(f"{c} tier must be an integer, got {tier!r}")
            elif not MIN_TIER <= tier <= MAX_TIER:
                errors.append(f"{c} tier must be in {MIN_TIER}..{MAX_TIER}, got {tier}")

        needs_major = self.major is not None
        needs_minor = self.minor is not None
        needs_build = self.build is not None
        needs_revision = self.revision is not None

        if needs_major != needs_minor:
            errors.append("major and minor must be required together")
        elif not needs_major:
            if not needs_build and not needs_revision:
                errors.append(
                    "at least one of build or revision must be required "
                    "when major and minor are not"
                )
            elif needs_build and needs_revision:
                errors.append(
                    "build and revision cannot both be required "
                    "without major and minor"
                )
        elif needs_revision and not needs_build:
            errors.append("revision cannot be required unless build is required")
        return errors


def reconcile(
    sources: Iterable[VersionSource],
    required: RequiredTiers,
    *,
    logger: Logger | None = None,
) -> ReconcileResult:
    """Merge source readings into one composite version.

    Args:
        sources: Sources to consult; they are ordered by ascending priority
            (stable for equal priorities) before the run.
        required: Minimum tiers the caller needs per component.
        logger: Logger for skip/adopt decisions. Defaults to the global
            logger.

    Returns:
        ReconcileResult with the best-effort composite and its status. The
            composite is returned even when requirements fall short.

    Example:
        Require a trustworthy major/minor/build:
            ```python
            result = reconcile(sources, RequiredTiers(major=5, minor=5, build=5))
            if not result.status.ok:
                print(result.status.describe())
            ```

    """
    if logger is None:
        logger = get_global_logger()

    errors = required.validate()
    if errors:
        for error in errors:
            logger.verbose("RECONCILE", f"Invalid requirements: {error}")
        empty = CompositeVersion.empty()
        return ReconcileResult(
            version=empty,
            status=ReconcileStatus(
                achieved=dict(empty.tiers),
                required=required.as_dict(),
                errors=tuple(errors),
            ),
        )

    values: dict[Component, int | None] = {c: None for c in COMPONENTS}
    tiers: dict[Component, int] = {c: UNKNOWN_TIER for c in COMPONENTS}
    origin: dict[Component, str] = {}

    for source in sorted(sources, key=lambda s: s.priority):
        offered = source.declared_tiers(values)
        if all(tiers[c] >= tier for c, tier in offered.items()):
            logger.verbose("RECONCILE", f"{source.name}: skipped, nothing to improve")
            continue

        reading = source.try_read()
        if reading is None:
            logger.verbose("RECONCILE", f"{source.name}: supplied nothing")
            continue

        candidate = dict(reading.values)
        effective = source.declared_tiers(values, candidate)
        for c in COMPONENTS:
            if c not in candidate or c not in effective:
                continue
            value, tier = candidate[c], effective[c]
            current = values[c]
            if tier > tiers[c]:
                logger.verbose(
                    "RECONCILE",
                    f"{source.name}: adopted {c}={value} (tier {tier} > {tiers[c]})",
                )
            elif tier == tiers[c] and (current is None or value > current):
                logger.verbose(
                    "RECONCILE",
                    f"{source.name}: adopted larger {c}={value} (tier {tier})",
                )
            else:
                logger.debug(
                    "RECONCILE",
                    f"{source.name}: ignored {c}={value} (tier {tier}, have {tiers[c]})",
                )
                continue
            values[c] = value
            tiers[c] = tier
            origin[c] = source.name

    composite = CompositeVersion(values=values, tiers=tiers, sources=origin)

    shortfalls = frozenset(
        c
        for c in COMPONENTS
        if required.get(c) is not None and tiers[c] < required.get(c)  # type: ignore[operator]
    )
    status = ReconcileStatus(
        achieved=dict(tiers),
        required=required.as_dict(),
        shortfalls=shortfalls,
    )
    logger.verbose(
        "RECONCILE", f"Result {composite.version_string or '(none)'}: {status.describe()}"
    )
    return ReconcileResult(version=composite, status=status)
