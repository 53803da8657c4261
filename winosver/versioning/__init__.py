"""
Version parsing utilities for winosver.

This package turns version strings reported by OS probes into four-part
component values. It never talks to the OS itself.

Modules
-------
components : module
    VersionComponents model, strict parsing and rendering.
numeric : module
    Staged int32/int64/bigint/float parsing of overflowing digit runs.
flexible : module
    Right-to-left salvage parser reporting leftovers per component.

Public API
----------
VersionComponents : dataclass
    Up to four contiguous components in 0..2147483647.
ParseOutcome : dataclass
    Tagged parse result ("exact", "truncated", "excess_only", "unparseable").
LeftoverCapture : dataclass
    Discarded text per component plus the excess tail.
parse_flexible : function
    Best-effort parse of any string.
strict_parse : function
    Parse only well-formed Major.Minor[.Build[.Revision]] strings.

Examples
--------
    >>> from winosver.versioning import parse_flexible
    >>> parse_flexible("1.2.3.4.5").kind
    'excess_only'
    >>> parse_flexible("1").kind
    'unparseable'
"""

from .components import (
    COMPONENTS,
    MAX_COMPONENT,
    Component,
    VersionComponents,
    strict_parse,
)
from .flexible import LeftoverCapture, ParseOutcome, parse_flexible
from .numeric import StagedNumber, stage_numeric

__all__ = [
    "COMPONENTS",
    "MAX_COMPONENT",
    "Component",
    "VersionComponents",
    "strict_parse",
    "LeftoverCapture",
    "ParseOutcome",
    "parse_flexible",
    "StagedNumber",
    "stage_numeric",
]
