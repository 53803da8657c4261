"""
winosver - best-effort Windows OS version detection

A Python library that learns the running Windows version
(Major.Minor.Build.Revision) from several independent techniques and
combines what each yields into one answer, annotated with how trustworthy
each component is.

winosver provides:
  - A flexible version parser that salvages messy, suffixed or overflowing
    version strings and reports what it discarded
  - A declarative, YAML-configurable trust tier table per source and
    component, including tiers conditional on values already observed
  - A reconciler that merges source readings in priority order, skips
    sources that cannot improve the result, and reports per-component trust
    against caller requirements

The OS probes themselves (WMI, kernel file metadata, `cmd /c ver`, the
registry) are providers supplied by the host application.

Package Structure
-----------------
versioning : package
    VersionComponents, strict and flexible parsing, staged numerics.
sources : package
    Source table types, provider registry and source adapters.
reconcile : module
    RequiredTiers and the reconciliation loop.
results : module
    CompositeVersion, ReconcileStatus and ReconcileResult.
config : package
    YAML source table loading and merging.
core : module
    detect_os_version() orchestration.

Public API
----------
    from winosver import detect_os_version, parse_flexible, RequiredTiers
    from winosver.sources import register_provider

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Best-effort Windows OS version detection with trust tiers"

# Re-export commonly used functions for convenience
from winosver.config import load_detector_config
from winosver.core import detect_os_version
from winosver.exceptions import ConfigError, ShortfallError, WinOSVerError
from winosver.reconcile import RequiredTiers, reconcile
from winosver.results import CompositeVersion, ReconcileResult, ReconcileStatus
from winosver.versioning import ParseOutcome, VersionComponents, parse_flexible

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "detect_os_version",
    "load_detector_config",
    "reconcile",
    "parse_flexible",
    "RequiredTiers",
    "CompositeVersion",
    "ReconcileResult",
    "ReconcileStatus",
    "ParseOutcome",
    "VersionComponents",
    "WinOSVerError",
    "ConfigError",
    "ShortfallError",
]
