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

"""Best-effort parsing of messy version strings.

Version strings reported by the OS are untrusted: `ver` output may carry a
trailing bracket, file version resources may carry a branch suffix, and a
tampered value may overflow a component. parse_flexible() salvages as many
leading components as possible and reports precisely what it had to throw
away.

Salvage Algorithm:

1. Strict parse (2-4 all-digit segments within 0..2147483647) -> "exact".
2. Fewer than two dot segments -> "unparseable".
3. Five or more segments: everything from the fifth segment on is the
   excess tail. If the first four strictly parse -> "excess_only".
4. Walk right to left with k (0-based segment index) starting at
   min(3, segments - 1). The segments before k must strictly parse (at
   k == 1 the lone major segment must be a valid component). When they
   do, segment k is the offending segment:

   - No leading digits: segment k and the segments right of it become
     leftovers verbatim.
   - Leading digits that fit: they become component k, the rest of the
     segment is its leftover.
   - Leading digits that overflow: component k is clamped to 2147483647
     and the leftover starts with the amount of overflow.

   Otherwise k is decremented and the walk continues.
5. Nothing salvageable -> "unparseable".

Leftover Slots:

Slots 1-4 belong to major, minor, build and revision; slot 5 keeps the
excess tail. A slot is only non-empty when its component was not parsed
cleanly.

Example:
    Salvage a suffixed revision:
        ```python
        from winosver.versioning import parse_flexible

        outcome = parse_flexible("1.2.3.4-beta3")
        outcome.kind                # "truncated"
        outcome.truncated_at        # 4
        outcome.components.render() # "1.2.3.4"
        outcome.leftovers.revision  # "-beta3"
        ```

    Clamp an overflowing build:
        ```python
        outcome = parse_flexible("1.2.2147483700.4")
        outcome.components.as_tuple()  # (1, 2, 2147483647, -1)
        outcome.leftovers.build        # "53"
        outcome.leftovers.revision     # "4"
        ```

Note:
    Only ASCII digits count as digits; locale-specific numerals and
    separators are never consulted. parse_flexible() never raises for a
    string input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Literal

from winosver.logging import Logger, get_global_logger

from .components import (
    COMPONENTS,
    MAX_COMPONENT,
    VersionComponents,
    parse_component,
    strict_parse,
)
from .numeric import stage_numeric

OutcomeKind = Literal["exact", "truncated", "excess_only", "unparseable"]

_LEADING_DIGITS = re.compile(r"[0-9]*")


@dataclass(frozen=True)
class LeftoverCapture:
    """Text that could not be absorbed into a component.

    Attributes:
        major: Leftover of the major segment.
        minor: Leftover of the minor segment.
        build: Leftover of the build segment.
        revision: Leftover of the revision segment.
        excess: Dot-joined segments beyond the fourth.

    """

    major: str = ""
    minor: str = ""
    build: str = ""
    revision: str = ""
    excess: str = ""

    @classmethod
    def from_slots(cls, slots: list[str], excess: str = "") -> LeftoverCapture:
        return cls(*slots[:4], excess=excess)

    def slot(self, index: int) -> str:
        """Return leftover slot 1..5 (5 is the excess tail)."""
        if not 1 <= index <= 5:
            raise IndexError(f"leftover slot must be 1..5, got {index}")
        if index == 5:
            return self.excess
        return getattr(self, COMPONENTS[index - 1])

    @property
    def is_empty(self) -> bool:
        return not any(self.slot(i) for i in range(1, 6))


@dataclass(frozen=True)
class ParseOutcome:
    """Result of parse_flexible().

    Attributes:
        kind: "exact", "truncated", "excess_only" or "unparseable".
        components: Best-effort components; None only when unparseable.
        leftovers: Discarded text per slot.
        truncated_at: 1-based index of the component where salvage
            stopped; only set for "truncated".

    """

    kind: OutcomeKind
    components: VersionComponents | None = None
    leftovers: LeftoverCapture = field(default_factory=LeftoverCapture)
    truncated_at: int | None = None

    @property
    def ok(self) -> bool:
        return self.kind != "unparseable"

    @property
    def is_clean(self) -> bool:
        return self.kind == "exact"


UNPARSEABLE = ParseOutcome(kind="unparseable")


def _parse_prefix(segments: list[str], k: int) -> list[int] | None:
    """Strictly parse the segments before index k."""
    if k == 1:
        # A lone major is not a version on its own; only check the segment.
        major = parse_component(segments[0])
        return None if major is None else [major]
    prefix = strict_parse(".".join(segments[:k]))
    if prefix is None:
        return None
    return [v for v in prefix.as_list() if v is not None]


def _salvage(
    text: str,
    segments: list[str],
    prefix: list[int],
    k: int,
    excess: str,
    logger: Logger,
) -> ParseOutcome:
    """Close off segment k given a valid prefix of k components."""
    segment = segments[k]
    digits = _LEADING_DIGITS.match(segment).group(0)  # type: ignore[union-attr]
    trailing = segment[len(digits) :]

    slots = [""] * 4
    for i in range(k + 1, min(4, len(segments))):
        slots[i] = segments[i]

    if digits:
        value = parse_component(digits)
        if value is not None:
            slots[k] = trailing
            return ParseOutcome(
                kind="truncated",
                components=VersionComponents.from_values(prefix + [value]),
                leftovers=LeftoverCapture.from_slots(slots, excess),
                truncated_at=k + 1,
            )

        staged = stage_numeric(digits)
        if staged is not None:
            logger.debug(
                "PARSE",
                f"{COMPONENTS[k]} in {text!r} overflows by "
                f"{staged.remainder_text()} (staged as {staged.stage})",
            )
            slots[k] = staged.remainder_text() + trailing
            return ParseOutcome(
                kind="truncated",
                components=VersionComponents.from_values(prefix + [MAX_COMPONENT]),
                leftovers=LeftoverCapture.from_slots(slots, excess),
                truncated_at=k + 1,
            )

        # Digits already proven; a failed stage is an internal fault
        logger.debug(
            "PARSE",
            f"Could not stage {len(digits)} digit(s) of {COMPONENTS[k]} in "
            f"{text!r}; treating segment as non-numeric",
        )

    if k == 1:
        # A major-only result would not re-parse strictly, so "10.abc" and
        # "1..3" are unparseable rather than truncated at the minor.
        logger.debug("PARSE", f"{text!r}: minor has no usable leading digits")
        return UNPARSEABLE

    slots[k] = segment
    return ParseOutcome(
        kind="truncated",
        components=VersionComponents.from_values(prefix),
        leftovers=LeftoverCapture.from_slots(slots, excess),
        truncated_at=k + 1,
    )


def parse_flexible(text: str, *, logger: Logger | None = None) -> ParseOutcome:
    """Parse a version string, salvaging what a strict parse would reject.

    Args:
        text: Arbitrary dot-delimited version string.
        logger: Logger for salvage diagnostics. Defaults to the global
            logger.

    Returns:
        A ParseOutcome. "exact" and "excess_only" carry up to four clean
            components; "truncated" carries the components salvaged up to
            and including truncated_at; "unparseable" carries none.

    Example:
        Handle every outcome:
            ```python
            outcome = parse_flexible(raw)
            if not outcome.ok:
                return None
            if not outcome.is_clean:
                print(f"Discarded: {outcome.leftovers}")
            return outcome.components
            ```

    """
    if logger is None:
        logger = get_global_logger()

    exact = strict_parse(text)
    if exact is not None:
        return ParseOutcome(kind="exact", components=exact)

    segments = text.split(".")
    if len(segments) < 2:
        logger.debug("PARSE", f"{text!r}: fewer than two segments")
        return UNPARSEABLE

    excess = ""
    if len(segments) >= 5:
        excess = ".".join(segments[4:])
        head = strict_parse(".".join(segments[:4]))
        if head is not None:
            logger.debug("PARSE", f"{text!r}: discarding excess {excess!r}")
            return ParseOutcome(
                kind="excess_only",
                components=head,
                leftovers=LeftoverCapture(excess=excess),
            )

    k = min(3, len(segments) - 1)
    while k > 0:
        prefix = _parse_prefix(segments, k)
        if prefix is not None:
            outcome = _salvage(text, segments, prefix, k, excess, logger)
            if outcome.ok:
                logger.debug(
                    "PARSE",
                    f"{text!r}: salvaged {outcome.components} "
                    f"(truncated at component {outcome.truncated_at})",
                )
            return outcome
        k -= 1

    logger.debug("PARSE", f"{text!r}: no salvageable prefix")
    return UNPARSEABLE
