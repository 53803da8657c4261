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

"""Configuration loading and merging for winosver.

The source table (which techniques exist, in what order they run and how
far each can be trusted per component) is data, not code: it is derived
from observed OS behaviour and has to change when new Windows releases
change that behaviour.

Configuration Layers:

1. **Packaged defaults** (winosver/defaults/sources.yaml)
    - Always loaded
    - Defines the shipped source table and default requirements

2. **Overlay file** (optional path passed by the caller)
    - Site-specific overrides (e.g., a new conditional tier)
    - Overrides packaged defaults

Merge Behavior:

The loader performs deep merging with "last wins" semantics:

- **Dicts**: Recursively merged (keys from overlay override base)
- **Lists**: Completely replaced (NOT appended/extended)
- **Scalars**: Overwritten (strings, numbers, booleans)
- **null source**: A source set to null in the overlay is removed

Document Shape:

    apiVersion: winosver/v1
    required: {major: 1, minor: 1, build: 1}
    sources:
      kernel_file:
        priority: 10
        kind: string            # or "components"
        tiers:
          major: 7              # unconditional tier
          build:                # ordered conditional rules, first match wins
            - tier: 3
              when: {major: 10, minor: 0, min_build: 18362}
            - tier: 7

Example:
    Load the defaults with a site overlay:
        ```python
        from pathlib import Path
        from winosver.config import load_detector_config

        config = load_detector_config(Path("winosver.yaml"))
        for profile in config.profiles:
            print(profile.name, profile.priority)
        ```

"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from winosver.exceptions import ConfigError
from winosver.reconcile import RequiredTiers
from winosver.sources.base import (
    MAX_TIER,
    MIN_TIER,
    SourceProfile,
    TierCondition,
    TierRule,
)
from winosver.versioning import COMPONENTS

DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "defaults" / "sources.yaml"

SUPPORTED_API_VERSIONS = ("winosver/v1",)

_SOURCE_KINDS = ("string", "components")
_CONDITION_KEYS = ("major", "minor", "min_build", "max_build")


# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class DetectorConfig:
    """Validated configuration.

    Attributes:
        profiles: Source table rows sorted by ascending priority.
        required: Default requirements for detect_os_version().
        overlay_path: Overlay file merged over the defaults, if any.

    """

    profiles: tuple[SourceProfile, ...]
    required: RequiredTiers
    overlay_path: Path | None = None

    def profile(self, name: str) -> SourceProfile:
        for p in self.profiles:
            if p.name == name:
                return p
        raise ConfigError(f"Unknown source: {name!r}")


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """Loads a YAML file and returns the parsed Python object.

    Raises:
        ConfigError: When the file does not exist, is invalid YAML, or is
            empty.
    """
    if not p.exists():
        raise ConfigError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"YAML file is empty: {p}")
    return data


def _print_yaml_content(data: dict[str, Any]) -> None:
    """Print YAML content line by line for debug mode."""
    from winosver.logging import get_global_logger

    logger = get_global_logger()
    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
    for line in yaml_str.split("\n"):
        if line.strip():
            logger.debug("CONFIG", line)


# -------------------------------
# Merge logic
# -------------------------------


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep-merges two dicts with "overlay wins" semantics.

    - dict + dict -> deep merge
    - list + list -> overlay REPLACES base (not concatenated)
    - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = v
    return result


# -------------------------------
# Validation
# -------------------------------


def _parse_tier(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: tier must be an integer, got {value!r}")
    if not MIN_TIER <= value <= MAX_TIER:
        raise ConfigError(f"{where}: tier must be in {MIN_TIER}..{MAX_TIER}, got {value}")
    return value


def _parse_condition(value: Any, where: str) -> TierCondition:
    if not isinstance(value, dict):
        raise ConfigError(f"{where}: 'when' must be a mapping")
    unknown = sorted(set(value) - set(_CONDITION_KEYS))
    if unknown:
        raise ConfigError(
            f"{where}: unknown condition key(s) {', '.join(unknown)}; "
            f"expected {', '.join(_CONDITION_KEYS)}"
        )
    for key, v in value.items():
        if isinstance(v, bool) or not isinstance(v, int) or v < 0:
            raise ConfigError(f"{where}: {key} must be a non-negative integer")
    condition = TierCondition(**value)
    if condition.is_empty:
        raise ConfigError(f"{where}: 'when' must set at least one condition")
    return condition


def _parse_rules(value: Any, where: str) -> tuple[TierRule, ...]:
    """Accept a bare tier or an ordered list of {tier, when} rules."""
    if not isinstance(value, list):
        return (TierRule(_parse_tier(value, where)),)
    if not value:
        raise ConfigError(f"{where}: rule list is empty")
    rules = []
    for i, item in enumerate(value):
        item_where = f"{where}[{i}]"
        if not isinstance(item, dict) or "tier" not in item:
            raise ConfigError(f"{item_where}: rule must be a mapping with 'tier'")
        extra = sorted(set(item) - {"tier", "when"})
        if extra:
            raise ConfigError(f"{item_where}: unknown key(s) {', '.join(extra)}")
        when = item.get("when")
        rules.append(
            TierRule(
                tier=_parse_tier(item["tier"], item_where),
                when=None if when is None else _parse_condition(when, item_where),
            )
        )
    return tuple(rules)


def _parse_profile(name: str, data: Any) -> SourceProfile:
    where = f"sources.{name}"
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: must be a mapping")

    priority = data.get("priority")
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise ConfigError(f"{where}: 'priority' must be an integer")

    kind = data.get("kind", "string")
    if kind not in _SOURCE_KINDS:
        raise ConfigError(
            f"{where}: unknown kind {kind!r}; expected one of {', '.join(_SOURCE_KINDS)}"
        )

    tiers = data.get("tiers")
    if not isinstance(tiers, dict) or not tiers:
        raise ConfigError(f"{where}: 'tiers' must be a non-empty mapping")
    unknown = sorted(set(tiers) - set(COMPONENTS))
    if unknown:
        raise ConfigError(f"{where}.tiers: unknown component(s) {', '.join(unknown)}")

    rules = {
        c: _parse_rules(tiers[c], f"{where}.tiers.{c}") for c in COMPONENTS if c in tiers
    }
    return SourceProfile(
        name=name,
        priority=priority,
        kind=kind,
        rules=rules,
        description=str(data.get("description", "")),
    )


def _parse_required(data: Any) -> RequiredTiers:
    if not isinstance(data, dict):
        raise ConfigError("required: must be a mapping of component to tier")
    try:
        required = RequiredTiers.from_mapping(data)
    except (TypeError, ValueError) as err:
        raise ConfigError(f"required: {err}") from err
    errors = required.validate()
    if errors:
        raise ConfigError("required: " + "; ".join(errors))
    return required


def parse_detector_config(data: dict[str, Any]) -> DetectorConfig:
    """Validate a merged configuration mapping.

    Args:
        data: Parsed and merged YAML document.

    Returns:
        The validated DetectorConfig.

    Raises:
        ConfigError: On an unsupported apiVersion, malformed sources or
            inconsistent default requirements.

    """
    api_version = data.get("apiVersion")
    if api_version not in SUPPORTED_API_VERSIONS:
        raise ConfigError(
            f"Unsupported apiVersion: {api_version!r}. "
            f"Supported: {', '.join(SUPPORTED_API_VERSIONS)}"
        )

    sources = data.get("sources")
    if not isinstance(sources, dict):
        raise ConfigError("'sources' must be a mapping of source name to settings")

    profiles = [
        _parse_profile(str(name), settings)
        for name, settings in sources.items()
        if settings is not None
    ]
    profiles.sort(key=lambda p: p.priority)

    return DetectorConfig(
        profiles=tuple(profiles),
        required=_parse_required(data.get("required", {})),
    )


# -------------------------------
# Public API
# -------------------------------


def load_detector_config(overlay_path: Path | None = None) -> DetectorConfig:
    """Loads the source table, merging an optional overlay over the defaults.

    Performs the following operations:

    1. Read the packaged defaults (winosver/defaults/sources.yaml)
    2. Read the overlay file if given (must be a mapping)
    3. Merge: defaults -> overlay (dicts deep-merge, lists replace)
    4. Drop sources set to null and validate the rest

    Args:
        overlay_path: Optional YAML file with site-specific overrides.

    Returns:
        The validated DetectorConfig with profiles sorted by priority.

    Raises:
        ConfigError: On YAML parse errors, empty or missing files, invalid
            structure, or inconsistent requirements.

    """
    from winosver.logging import get_global_logger

    logger = get_global_logger()

    logger.verbose("CONFIG", f"Loading defaults: {DEFAULTS_PATH.name}")
    merged = _load_yaml_file(DEFAULTS_PATH)
    layers_merged = 1

    if overlay_path is not None:
        overlay_path = overlay_path.resolve()
        logger.verbose("CONFIG", f"Loading overlay: {overlay_path}")
        overlay = _load_yaml_file(overlay_path)
        if not isinstance(overlay, dict):
            raise ConfigError(f"top-level YAML must be a mapping (dict): {overlay_path}")
        logger.debug("CONFIG", f"--- Content from {overlay_path.name} ---")
        _print_yaml_content(overlay)
        merged = _deep_merge_dicts(merged, overlay)
        layers_merged += 1

    logger.verbose("CONFIG", f"Deep merging {layers_merged} layer(s)")
    logger.debug("CONFIG", "--- Final Merged Configuration ---")
    _print_yaml_content(merged)

    config = parse_detector_config(merged)
    logger.verbose(
        "CONFIG",
        f"Source order: {', '.join(p.name for p in config.profiles) or '(none)'}",
    )
    return DetectorConfig(
        profiles=config.profiles,
        required=config.required,
        overlay_path=overlay_path,
    )
