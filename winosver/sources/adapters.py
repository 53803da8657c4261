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

"""Source adapters binding a SourceProfile to a provider.

Two kinds of providers exist:

- STRING providers (kernel file version resource, `ver` output, WMI
  Version property) return a raw version string. StringSource runs it
  through parse_flexible() and keeps whatever could be salvaged.
- COMPONENTS providers (registry values read one by one) already return
  VersionComponents. ComponentSource passes them through.

In both cases only components the profile has tier rules for are kept,
and any exception raised by the provider (missing file, `ver` timeout, WMI
COM error) is absorbed as "nothing supplied".

Example:
    Wrap a `ver` probe:
        ```python
        from winosver.sources import StringSource
        from winosver.sources.base import SourceProfile, TierRule

        profile = SourceProfile(
            name="ver_command",
            priority=30,
            rules={c: (TierRule(3),) for c in ("major", "minor", "build", "revision")},
        )
        source = StringSource(profile, lambda: "10.0.19045.3570")
        reading = source.try_read()
        reading.values  # {"major": 10, "minor": 0, "build": 19045, "revision": 3570}
        ```

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from winosver.logging import Logger, get_global_logger
from winosver.versioning import (
    COMPONENTS,
    Component,
    ParseOutcome,
    VersionComponents,
    parse_flexible,
)

from .base import PartialVersion, Provider, SourceProfile, SourceReading


class ProfiledSource:
    """Common plumbing for sources described by a SourceProfile."""

    def __init__(
        self,
        profile: SourceProfile,
        provider: Provider,
        logger: Logger | None = None,
    ) -> None:
        self.profile = profile
        self.provider = provider
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def priority(self) -> int:
        return self.profile.priority

    @property
    def components(self) -> tuple[Component, ...]:
        return self.profile.components

    def declared_tiers(self, *partials: PartialVersion) -> dict[Component, int]:
        return self.profile.declared_tiers(*partials)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, priority={self.priority})"

    def _call_provider(self) -> object:
        try:
            return self.provider()
        except Exception as err:
            self.logger.verbose(
                "SOURCE", f"{self.name}: unavailable ({type(err).__name__}: {err})"
            )
            return None

    def _reading(
        self,
        components: VersionComponents,
        raw: str | None = None,
        outcome: ParseOutcome | None = None,
    ) -> SourceReading | None:
        values = {
            c: v
            for c, v in zip(COMPONENTS, components.as_list())
            if v is not None and c in self.components
        }
        if not values:
            self.logger.verbose("SOURCE", f"{self.name}: nothing usable in reading")
            return None
        tiers = {c: t for c, t in self.declared_tiers(values).items() if c in values}
        self.logger.verbose(
            "SOURCE",
            f"{self.name}: {', '.join(f'{c}={values[c]}' for c in values)}",
        )
        return SourceReading(
            source=self.name, values=values, tiers=tiers, raw=raw, outcome=outcome
        )


class StringSource(ProfiledSource):
    """Source whose provider returns a raw version string."""

    def try_read(self) -> SourceReading | None:
        raw = self._call_provider()
        if raw is None:
            self.logger.verbose("SOURCE", f"{self.name}: no value")
            return None
        if not isinstance(raw, str):
            raise TypeError(
                f"provider for {self.name!r} must return str or None, "
                f"got {type(raw).__name__}"
            )
        outcome = parse_flexible(raw, logger=self.logger)
        if not outcome.ok or outcome.components is None:
            self.logger.verbose("SOURCE", f"{self.name}: unparseable {raw!r}")
            return None
        if not outcome.is_clean:
            self.logger.debug(
                "SOURCE",
                f"{self.name}: {raw!r} parsed as {outcome.kind}, "
                f"leftovers {outcome.leftovers}",
            )
        return self._reading(outcome.components, raw=raw, outcome=outcome)


class ComponentSource(ProfiledSource):
    """Source whose provider returns VersionComponents."""

    def try_read(self) -> SourceReading | None:
        components = self._call_provider()
        if components is None:
            self.logger.verbose("SOURCE", f"{self.name}: no value")
            return None
        if not isinstance(components, VersionComponents):
            raise TypeError(
                f"provider for {self.name!r} must return VersionComponents or None, "
                f"got {type(components).__name__}"
            )
        return self._reading(components)


_SOURCE_CLASSES: dict[str, type[ProfiledSource]] = {
    "string": StringSource,
    "components": ComponentSource,
}


def build_sources(
    profiles: Iterable[SourceProfile],
    providers: Mapping[str, Provider],
    logger: Logger | None = None,
) -> list[ProfiledSource]:
    """Bind profiles to providers by name, in priority order.

    Profiles without a provider are skipped; the reconciler treats a
    missing technique exactly like one that answered nothing.

    Args:
        profiles: Source table rows.
        providers: Provider callables keyed by source name.
        logger: Logger passed on to each source.

    Returns:
        Sources sorted by ascending priority (stable for equal priorities).

    """
    if logger is None:
        logger = get_global_logger()
    sources: list[ProfiledSource] = []
    for profile in sorted(profiles, key=lambda p: p.priority):
        provider = providers.get(profile.name)
        if provider is None:
            logger.verbose("SOURCE", f"{profile.name}: no provider registered, skipping")
            continue
        sources.append(_SOURCE_CLASSES[profile.kind](profile, provider, logger))
    return sources
