"""Tests for bidi reordering.

Segments are applied in engine order to the working permutation; the
python-bidi adapter emits them from the highest level down so every segment
is also a contiguous logical range.
"""

import logging

import pytest

from svg_laser_text.exceptions import ReorderError
from svg_laser_text.models import Direction
from svg_laser_text.shaping.bidi import (
    BidiReorderer,
    PythonBidiEngine,
    apply_segments,
    logical_text,
    visual_text,
)

HEBREW = "שלום"


@pytest.fixture(scope="module")
def engine() -> PythonBidiEngine:
    return PythonBidiEngine()


@pytest.fixture
def reorderer(engine: PythonBidiEngine) -> BidiReorderer:
    return BidiReorderer(engine)


class ExplodingEngine:
    def embedding_levels(self, text, direction):
        raise RuntimeError("engine crashed")

    def reorder_segments(self, text, levels):
        return []


class BadSegmentEngine:
    def embedding_levels(self, text, direction):
        return [0] * len(text)

    def reorder_segments(self, text, levels):
        return [(0, len(text) + 5)]


class FixedEngine:
    """Returns canned segments so application order can be checked."""

    def __init__(self, segments):
        self.segments = segments

    def embedding_levels(self, text, direction):
        return [0] * len(text)

    def reorder_segments(self, text, levels):
        return self.segments


class TestPythonBidiEngine:
    """Embedding levels and segments from python-bidi."""

    def test_ltr_text_is_level_zero(self, engine: PythonBidiEngine) -> None:
        assert engine.embedding_levels("Hello", Direction.LTR) == [0] * 5

    def test_hebrew_rtl_is_level_one(self, engine: PythonBidiEngine) -> None:
        assert engine.embedding_levels(HEBREW, Direction.RTL) == [1] * 4

    def test_auto_direction_uses_first_strong_character(self, engine: PythonBidiEngine) -> None:
        assert engine.base_level("Hi שלום", Direction.AUTO) == 0
        assert engine.base_level("שלום Hi", Direction.AUTO) == 1
        assert engine.base_level("123", Direction.AUTO) == 0

    def test_mixed_text_levels(self, engine: PythonBidiEngine) -> None:
        assert engine.embedding_levels("Hi שלום", Direction.AUTO) == [0, 0, 0, 1, 1, 1, 1]

    def test_numbers_inside_rtl_get_level_two(self, engine: PythonBidiEngine) -> None:
        assert engine.embedding_levels("שלום 123", Direction.RTL) == [1, 1, 1, 1, 1, 2, 2, 2]

    def test_trailing_whitespace_resets_to_paragraph_level(self, engine: PythonBidiEngine) -> None:
        levels = engine.embedding_levels("Hi שלום ", Direction.AUTO)
        assert levels[-1] == 0

    def test_segments_emitted_highest_level_first(self, engine: PythonBidiEngine) -> None:
        levels = [1, 1, 1, 1, 1, 2, 2, 2]
        assert engine.reorder_segments("שלום 123", levels) == [(5, 7), (0, 7)]

    def test_even_levels_only_produce_no_segments(self, engine: PythonBidiEngine) -> None:
        assert engine.reorder_segments("Hello", [2] * 5) == []

    def test_segments_do_not_cross_lines(self, engine: PythonBidiEngine) -> None:
        text = "שש\u2029שש"
        levels = [1, 1, 1, 1, 1]
        assert engine.reorder_segments(text, levels) == [(0, 2), (3, 4)]


class TestScenarios:
    """Reference scenarios for reordering."""

    def test_scenario_a_hello_ltr_is_identity(self, reorderer: BidiReorderer) -> None:
        assert reorderer.reorder("Hello", Direction.LTR) == [0, 1, 2, 3, 4]

    def test_scenario_b_hebrew_rtl_single_segment(self, reorderer: BidiReorderer) -> None:
        result = reorderer.analyze(HEBREW, Direction.RTL)
        assert result.segments == ((0, 3),)
        assert list(result.order) == [3, 2, 1, 0]

    def test_scenario_c_mixed_auto(self, reorderer: BidiReorderer) -> None:
        """The Latin run stays in place and the Hebrew run (3..6) is reversed."""
        result = reorderer.analyze("Hi שלום", Direction.AUTO)
        assert result.segments == ((3, 6),)
        assert list(result.order) == [0, 1, 2, 6, 5, 4, 3]
        assert visual_text("Hi שלום", result.order) == "Hi םולש"

    def test_nested_number_in_rtl(self, reorderer: BidiReorderer) -> None:
        result = reorderer.analyze("שלום 123", Direction.RTL)
        assert list(result.order) == [5, 6, 7, 4, 3, 2, 1, 0]
        assert visual_text("שלום 123", result.order) == "123 םולש"

    def test_latin_under_rtl_paragraph_stays_in_order(self, reorderer: BidiReorderer) -> None:
        assert reorderer.reorder("Hello", Direction.RTL) == [0, 1, 2, 3, 4]


class TestOrderProperties:
    @pytest.mark.parametrize("text", ["Hello world", "abc def 123", "The quick brown fox"])
    def test_pure_ltr_is_identity(self, reorderer: BidiReorderer, text: str) -> None:
        assert reorderer.reorder(text, Direction.LTR) == list(range(len(text)))

    @pytest.mark.parametrize(
        ("text", "direction"),
        [
            ("Hi שלום", Direction.AUTO),
            ("שלום 123", Direction.RTL),
            ("abc שלום def", Direction.LTR),
            ("שלום abc עולם", Direction.RTL),
        ],
    )
    def test_round_trip_is_stable(self, reorderer: BidiReorderer, text: str, direction: Direction) -> None:
        """Rebuilding the logical text from the visual one yields the same order again."""
        order = reorderer.reorder(text, direction)
        assert sorted(order) == list(range(len(text)))
        rebuilt = logical_text(visual_text(text, order), order)
        assert rebuilt == text
        assert reorderer.reorder(rebuilt, direction) == order

    def test_empty_text(self, reorderer: BidiReorderer) -> None:
        assert reorderer.reorder("", Direction.AUTO) == []


class TestApplySegments:
    def test_segments_apply_to_working_permutation(self) -> None:
        assert apply_segments(8, [(5, 7), (0, 7)]) == [5, 6, 7, 4, 3, 2, 1, 0]

    def test_segment_order_matters(self) -> None:
        assert apply_segments(4, [(0, 3), (0, 1)]) != apply_segments(4, [(0, 1), (0, 3)])

    def test_reversing_twice_restores_order(self) -> None:
        assert apply_segments(5, [(1, 3), (1, 3)]) == [0, 1, 2, 3, 4]

    def test_out_of_range_segment_raises(self) -> None:
        with pytest.raises(ReorderError):
            apply_segments(3, [(1, 3)])


class TestFailOpen:
    """Engine failures fall back to logical order with a warning."""

    def test_engine_exception_returns_identity(self, caplog: pytest.LogCaptureFixture) -> None:
        reorderer = BidiReorderer(ExplodingEngine())
        with caplog.at_level(logging.WARNING, logger="svg_laser_text"):
            result = reorderer.analyze(HEBREW, Direction.RTL)
        assert list(result.order) == [0, 1, 2, 3]
        assert result.failed
        assert "engine crashed" in result.warning
        assert "Bidirectional reordering failed" in caplog.text

    def test_malformed_segments_return_identity(self) -> None:
        result = BidiReorderer(BadSegmentEngine()).analyze("abc", Direction.LTR)
        assert list(result.order) == [0, 1, 2]
        assert result.failed

    def test_canned_segments_are_used_in_order(self) -> None:
        reorderer = BidiReorderer(FixedEngine([(0, 1), (0, 3)]))
        assert reorderer.reorder("abcd", Direction.LTR) == [3, 2, 0, 1]
