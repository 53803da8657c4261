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

"""Staged numeric parsing for overflowing version components.

When a version segment is made of digits but does not fit a component,
the flexible parser still wants to know how far past the ceiling it is.
Attempts are tried in order, each returning a value or None:

1. int32: fits the component range (0..2147483647)
2. int64: fits a signed 64-bit integer
3. bigint: arbitrary precision int (may fail beyond the interpreter's
   integer string conversion limit)
4. float: approximate, rejected when not finite

Example:
    Stage an overflowing build number:
        ```python
        from winosver.versioning.numeric import stage_numeric

        staged = stage_numeric("2147483700")
        staged.stage      # "int64"
        staged.remainder  # 53
        ```
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import math
from typing import Literal

from .components import MAX_COMPONENT

Stage = Literal["int32", "int64", "bigint", "float"]

MAX_INT64 = 2**63 - 1


@dataclass(frozen=True)
class StagedNumber:
    """Result of staging a digit string.

    Attributes:
        stage: The first attempt that succeeded.
        value: The parsed value (float only for the "float" stage).
        remainder: value - 2147483647; zero or negative for "int32".

    """

    stage: Stage
    value: int | float
    remainder: int | float

    @property
    def overflowed(self) -> bool:
        return self.stage != "int32"

    def remainder_text(self) -> str:
        """Render the remainder the way it is kept as a leftover."""
        if isinstance(self.remainder, float):
            return repr(self.remainder)
        return str(self.remainder)


def _try_int(digits: str) -> int | None:
    try:
        return int(digits.lstrip("0") or "0")
    except ValueError:
        return None


def _as_int32(digits: str) -> int | None:
    if len(digits.lstrip("0")) > len(str(MAX_COMPONENT)):
        return None
    value = _try_int(digits)
    return value if value is not None and value <= MAX_COMPONENT else None


def _as_int64(digits: str) -> int | None:
    if len(digits.lstrip("0")) > len(str(MAX_INT64)):
        return None
    value = _try_int(digits)
    return value if value is not None and value <= MAX_INT64 else None


def _as_bigint(digits: str) -> int | None:
    return _try_int(digits)


def _as_float(digits: str) -> float | None:
    try:
        value = float(digits)
    except (ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


_LADDER: tuple[tuple[Stage, Callable[[str], int | float | None]], ...] = (
    ("int32", _as_int32),
    ("int64", _as_int64),
    ("bigint", _as_bigint),
    ("float", _as_float),
)


def stage_numeric(digits: str) -> StagedNumber | None:
    """Parse an all-digit string through the int32/int64/bigint/float ladder.

    Args:
        digits: A non-empty string of ASCII digits.

    Returns:
        The first successful stage, or None if every stage failed (or the
            input is not an all-ASCII-digit string).

    """
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    for stage, attempt in _LADDER:
        value = attempt(digits)
        if value is not None:
            return StagedNumber(stage=stage, value=value, remainder=value - MAX_COMPONENT)
    return None
