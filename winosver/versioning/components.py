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

"""Four-part version model and strict parsing for winosver.

This module is format-agnostic: it does NOT query the OS. It only models
a Major.Minor[.Build[.Revision]] value and parses strings that are already
well formed. Salvage parsing of messy strings lives in flexible.py.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Literal

Component = Literal["major", "minor", "build", "revision"]

COMPONENTS: tuple[Component, ...] = ("major", "minor", "build", "revision")

# Largest value a single component may hold (signed 32-bit maximum)
MAX_COMPONENT = 2_147_483_647

_STRICT_RE = re.compile(r"[0-9]+(?:\.[0-9]+){1,3}")


@dataclass(frozen=True)
class VersionComponents:
    """Up to four version components, contiguous from the left.

    Attributes:
        major: Major version, or None when absent.
        minor: Minor version; only present when major is present.
        build: Build number; only present when minor is present.
        revision: Revision; only present when build is present.

    Raises:
        ValueError: If a component is outside 0..2147483647 or a component
            is present while the one to its left is absent.

    """

    major: int | None = None
    minor: int | None = None
    build: int | None = None
    revision: int | None = None

    def __post_init__(self) -> None:
        values = self.as_list()
        for name, value in zip(COMPONENTS, values):
            if value is not None and not 0 <= value <= MAX_COMPONENT:
                raise ValueError(
                    f"{name} component {value!r} outside 0..{MAX_COMPONENT}"
                )
        for left, right, value_left, value_right in zip(
            COMPONENTS, COMPONENTS[1:], values, values[1:]
        ):
            if value_right is not None and value_left is None:
                raise ValueError(f"{right} is present but {left} is absent")

    @classmethod
    def from_values(cls, values: list[int] | tuple[int, ...]) -> VersionComponents:
        """Build from the leading values of a sequence (at most four)."""
        padded = list(values[:4]) + [None] * (4 - min(len(values), 4))
        return cls(*padded)

    def as_list(self) -> list[int | None]:
        return [self.major, self.minor, self.build, self.revision]

    def as_tuple(self) -> tuple[int, int, int, int]:
        """Return all four values with -1 for absent components."""
        return tuple(-1 if v is None else v for v in self.as_list())  # type: ignore[return-value]

    def get(self, component: Component) -> int | None:
        return getattr(self, component)

    @property
    def count(self) -> int:
        """Number of present components."""
        return sum(1 for v in self.as_list() if v is not None)

    def render(self) -> str:
        """Render present components as a dotted string ("" when empty)."""
        return ".".join(str(v) for v in self.as_list() if v is not None)

    def __str__(self) -> str:
        return self.render()


def parse_component(text: str) -> int | None:
    """Parse one all-ASCII-digit segment within the component range."""
    if not text or not text.isascii() or not text.isdigit():
        return None
    # More than ten significant digits can never fit
    significant = text.lstrip("0") or "0"
    if len(significant) > len(str(MAX_COMPONENT)):
        return None
    value = int(significant)
    return value if value <= MAX_COMPONENT else None


def strict_parse(text: str) -> VersionComponents | None:
    """Strictly parse Major.Minor[.Build[.Revision]].

    Accepts two to four dot-separated segments made only of ASCII digits,
    each within 0..2147483647. Anything else (signs, whitespace, empty
    segments, letters) is rejected.

    Args:
        text: Candidate version string.

    Returns:
        The parsed components, or None if the string is not strictly valid.

    Example:
        Parse a Windows build string:
            ```python
            strict_parse("10.0.19045")    # VersionComponents(10, 0, 19045, None)
            strict_parse("10.0.19045a")   # None
            ```

    """
    if not _STRICT_RE.fullmatch(text):
        return None
    values = []
    for segment in text.split("."):
        value = parse_component(segment)
        if value is None:
            return None
        values.append(value)
    return VersionComponents.from_values(values)
