"""Bidirectional text reordering.

The Unicode Bidirectional Algorithm itself comes from python-bidi
(``bidi.algorithm``); this module turns its resolved embedding levels into
reorder segments and a logical -> visual index permutation.

Reorder segments are applied, in the order the engine returns them, to the
*working* permutation. Segments are emitted from the highest embedding level
down to the lowest odd level (UAX#9 rule L2), so every segment also covers a
contiguous range of logical indices and nested segments (numbers inside
right-to-left text) compose correctly.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from svg_laser_text.exceptions import DependencyUnavailableError, ReorderError
from svg_laser_text.models import Direction

log = logging.getLogger(__name__)

Segment = tuple[int, int]

# Reset to the paragraph level by rule L1 when trailing or before a separator.
_L1_SEPARATORS = frozenset({"B", "S"})
_L1_WHITESPACE = frozenset(
    {"WS", "FSI", "LRI", "RLI", "PDI", "BN", "LRE", "RLE", "LRO", "RLO", "PDF"}
)


class BidiEngine(Protocol):
    """What the reorderer needs from a bidi implementation."""

    def embedding_levels(self, text: str, direction: Direction) -> list[int]: ...

    def reorder_segments(self, text: str, levels: Sequence[int]) -> list[Segment]: ...


class PythonBidiEngine:
    """Bidi engine backed by python-bidi's resolution phases."""

    def __init__(self) -> None:
        try:
            from bidi import algorithm
        except ImportError as e:
            raise DependencyUnavailableError(
                "python-bidi is required for bidirectional text. Install with: pip install python-bidi"
            ) from e
        self._algorithm = algorithm

    def base_level(self, text: str, direction: Direction) -> int:
        direction = Direction(direction)
        if direction is Direction.LTR:
            return 0
        if direction is Direction.RTL:
            return 1
        # P2/P3: first strong character decides, LTR when there is none
        return self._algorithm.get_base_level(text)

    def embedding_levels(self, text: str, direction: Direction) -> list[int]:
        if not text:
            return []
        alg = self._algorithm
        base = self.base_level(text, direction)

        storage = alg.get_empty_storage()
        storage["base_level"] = base
        storage["base_dir"] = ("L", "R")[base]
        alg.get_embedding_levels(text, storage)
        chars = list(storage["chars"])
        if len(chars) != len(text):
            raise ReorderError(
                f"bidi engine returned {len(chars)} entries for {len(text)} characters"
            )

        alg.explicit_embed_and_overrides(storage, False)
        alg.resolve_weak_types(storage, False)
        alg.resolve_neutral_types(storage, False)
        alg.resolve_implicit_levels(storage, False)

        # Characters dropped by rule X9 take the level of their predecessor.
        kept = {id(ch) for ch in storage["chars"]}
        levels = []
        previous = base
        for ch in chars:
            if id(ch) in kept:
                previous = ch["level"]
            levels.append(previous)

        _apply_rule_l1(text, levels, base)
        return levels

    def reorder_segments(self, text: str, levels: Sequence[int]) -> list[Segment]:
        segments: list[Segment] = []
        for line_start, line_end in _line_ranges(text, len(levels)):
            line_levels = levels[line_start:line_end]
            if not line_levels:
                continue
            highest = max(line_levels)
            lowest_odd = min(level | 1 for level in line_levels)
            for level in range(highest, lowest_odd - 1, -1):
                i = line_start
                while i < line_end:
                    if levels[i] >= level:
                        start = i
                        while i + 1 < line_end and levels[i + 1] >= level:
                            i += 1
                        if i > start:
                            segments.append((start, i))
                    i += 1
        return segments


def _line_ranges(text: str, length: int) -> list[tuple[int, int]]:
    """Half-open index ranges of each line; the separator ends its line."""
    ranges = []
    start = 0
    for i, ch in enumerate(text[:length]):
        if unicodedata.bidirectional(ch) == "B":
            ranges.append((start, i + 1))
            start = i + 1
    if start < length:
        ranges.append((start, length))
    return ranges


def _apply_rule_l1(text: str, levels: list[int], base: int) -> None:
    trailing = True
    for i in range(len(text) - 1, -1, -1):
        bidi_class = unicodedata.bidirectional(text[i])
        if bidi_class in _L1_SEPARATORS:
            levels[i] = base
            trailing = True
        elif trailing and bidi_class in _L1_WHITESPACE:
            levels[i] = base
        else:
            trailing = False


def apply_segments(length: int, segments: Sequence[Segment]) -> list[int]:
    """Reverse each inclusive ``(start, end)`` range of an identity permutation."""
    order = list(range(length))
    for segment in segments:
        start, end = segment
        if not (0 <= start <= end < length):
            raise ReorderError(f"reorder segment {segment!r} outside 0..{length - 1}")
        order[start:end + 1] = order[start:end + 1][::-1]
    return order


def visual_text(text: str, order: Sequence[int]) -> str:
    """Rebuild the display string. Display-only; never used for positioning."""
    return "".join(text[i] for i in order)


def logical_text(visual: str, order: Sequence[int]) -> str:
    """Invert :func:`visual_text`."""
    chars = [""] * len(order)
    for visual_index, logical_index in enumerate(order):
        chars[logical_index] = visual[visual_index]
    return "".join(chars)


@dataclass(frozen=True)
class ReorderResult:
    order: tuple[int, ...]
    segments: tuple[Segment, ...] = ()
    warning: str | None = None

    @property
    def failed(self) -> bool:
        return self.warning is not None

    @property
    def is_identity(self) -> bool:
        return all(i == v for i, v in enumerate(self.order))


class BidiReorderer:
    """Logical text + paragraph direction -> visual index permutation.

    Engine failures never abort a render: the identity order is returned
    together with a warning.
    """

    def __init__(self, engine: BidiEngine) -> None:
        self.engine = engine

    def reorder(self, text: str, direction: Direction | str) -> list[int]:
        return list(self.analyze(text, direction).order)

    def analyze(self, text: str, direction: Direction | str) -> ReorderResult:
        direction = Direction(direction)
        if not text:
            return ReorderResult(order=())
        try:
            levels = self.engine.embedding_levels(text, direction)
            if len(levels) != len(text):
                raise ReorderError(f"expected {len(text)} embedding levels, got {len(levels)}")
            segments = tuple((int(s), int(e)) for s, e in self.engine.reorder_segments(text, levels))
            order = apply_segments(len(text), segments)
        except Exception as e:
            message = f"Bidirectional reordering failed, showing text in logical order ({e})."
            log.warning(message)
            return ReorderResult(order=tuple(range(len(text))), warning=message)

        log.debug("bidi %r dir=%s segments=%s order=%s", text, direction.value, segments, order)
        return ReorderResult(order=tuple(order), segments=segments)
