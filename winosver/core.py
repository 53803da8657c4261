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

"""Core orchestration for winosver.

This module ties the pieces together for the common case: load the source
table, bind the available providers to it, and reconcile.

Design Principles:

- The OS probes are providers owned by the host application; this module
    never touches the OS itself
- Configuration is immutable once loaded
- Functions return structured data (dataclasses) for easy testing
- Data problems are reported in the result; only configuration problems
    raise

Example:
    Programmatic usage:
        ```python
        from winosver.core import detect_os_version
        from winosver.reconcile import RequiredTiers

        result = detect_os_version(
            RequiredTiers(major=5, minor=5, build=5),
            providers={
                "kernel_file": read_kernel_file_version,
                "wmi": query_wmi_version,
                "ver_command": run_ver,
            },
        )
        print(result.version.version_string)  # 10.0.19045.3570
        print(result.status.code)
        ```

"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from winosver.config import load_detector_config
from winosver.logging import Logger, get_global_logger
from winosver.reconcile import RequiredTiers, reconcile
from winosver.results import ReconcileResult
from winosver.sources import build_sources, registered_providers
from winosver.sources.base import Provider


def detect_os_version(
    required: RequiredTiers | Mapping[str, Any] | None = None,
    *,
    providers: Mapping[str, Provider] | None = None,
    config_path: Path | None = None,
    logger: Logger | None = None,
) -> ReconcileResult:
    """Detect the OS version from every available provider.

    Workflow:

    1. Load the source table (packaged defaults + optional overlay)
    2. Bind providers to sources by name (explicit mapping or the registry)
    3. Reconcile in priority order against the requirements

    Args:
        required: Minimum tiers per component. A mapping is converted with
            RequiredTiers.from_mapping(). Defaults to the `required` section
            of the configuration.
        providers: Provider callables keyed by source name. Defaults to the
            providers registered with register_provider().
        config_path: Optional overlay YAML merged over the packaged source
            table.
        logger: Logger for progress and decisions. Defaults to the global
            logger.

    Returns:
        ReconcileResult with the composite version and its status. Invalid
            requirements are reported through the status (code -1), not
            raised.

    Raises:
        ConfigError: If the source table or overlay file is malformed.

    Example:
        Make a shortfall fatal:
            ```python
            try:
                version = detect_os_version().raise_for_status().version
            except ShortfallError as e:
                print(f"Untrusted version: {e}")
            ```

    """
    if logger is None:
        logger = get_global_logger()

    logger.step(1, 3, "Loading source table...")
    config = load_detector_config(config_path)

    if required is None:
        required = config.required
    elif not isinstance(required, RequiredTiers):
        try:
            required = RequiredTiers.from_mapping(required)
        except ValueError as err:
            logger.verbose("RECONCILE", f"Invalid requirements: {err}")
            required = RequiredTiers()

    logger.step(2, 3, "Binding providers...")
    if providers is None:
        providers = registered_providers()
    sources = build_sources(config.profiles, providers, logger=logger)
    logger.verbose(
        "SOURCE",
        f"{len(sources)} of {len(config.profiles)} source(s) have a provider",
    )

    logger.step(3, 3, "Reconciling readings...")
    return reconcile(sources, required, logger=logger)
