"""Tests for advance-only glyph positioning."""

import logging

import pytest

from svg_laser_text.fonts import FontCache, FontCacheMetrics
from svg_laser_text.layout.positioner import GlyphPositioner, line_width


@pytest.fixture
def metrics(font_cache: FontCache) -> FontCacheMetrics:
    return FontCacheMetrics(font_cache)


@pytest.fixture
def positioner() -> GlyphPositioner:
    return GlyphPositioner(placeholder_advance=0.5)


class TestPosition:
    def test_hello_advances_and_baseline(self, positioner: GlyphPositioner, metrics: FontCacheMetrics) -> None:
        """600 units at 1000 upem and size 30 is an 18 unit advance."""
        glyphs = positioner.position("Hello", range(5), 30.0, 0.0, metrics)
        assert [g.x for g in glyphs] == pytest.approx([0, 18, 36, 54, 72])
        assert all(g.y == pytest.approx(36.0) for g in glyphs)
        assert all(g.advance_width == pytest.approx(18.0) for g in glyphs)
        assert [g.script_tag for g in glyphs] == ["latin"] * 5

    def test_letter_spacing_added_after_each_glyph(
        self, positioner: GlyphPositioner, metrics: FontCacheMetrics
    ) -> None:
        glyphs = positioner.position("AB", range(2), 30.0, 2.0, metrics)
        assert glyphs[1].x == pytest.approx(20.0)
        assert line_width(glyphs, 2.0) == pytest.approx(40.0)

    def test_walks_visual_order(self, positioner: GlyphPositioner, metrics: FontCacheMetrics) -> None:
        order = [0, 1, 2, 6, 5, 4, 3]
        glyphs = positioner.position("Hi שלום", order, 30.0, 0.0, metrics)
        assert [g.logical_index for g in glyphs] == order
        assert [g.visual_index for g in glyphs] == list(range(7))
        assert [g.char for g in glyphs] == list("Hi םולש")

    def test_per_script_fonts(self, positioner: GlyphPositioner, metrics: FontCacheMetrics) -> None:
        """Hebrew letters use the Hebrew font's 500 unit advance."""
        glyphs = positioner.position("Aש", range(2), 30.0, 0.0, metrics)
        assert glyphs[0].advance_width == pytest.approx(18.0)
        assert glyphs[1].advance_width == pytest.approx(15.0)
        assert glyphs[1].script_tag == "hebrew"

    def test_outlines_are_glyph_relative(self, positioner: GlyphPositioner, metrics: FontCacheMetrics) -> None:
        glyphs = positioner.position("AB", range(2), 30.0, 0.0, metrics, with_outlines=True)
        for glyph in glyphs:
            assert glyph.outline
            assert glyph.ink_box == pytest.approx((1.5, -21.0, 16.5, 0.0))
            assert glyph.outline[0] == ("moveTo", ((pytest.approx(1.5), pytest.approx(0.0)),))

    def test_space_has_no_ink(self, positioner: GlyphPositioner, metrics: FontCacheMetrics) -> None:
        (glyph,) = positioner.position(" ", [0], 30.0, 0.0, metrics, with_outlines=True)
        assert glyph.ink_box is None
        assert glyph.advance_width == pytest.approx(7.5)
        assert not glyph.missing

    def test_missing_character_gets_placeholder(
        self, positioner: GlyphPositioner, metrics: FontCacheMetrics, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="svg_laser_text"):
            glyphs = positioner.position("AกB", range(3), 30.0, 0.0, metrics, with_outlines=True)
        missing = glyphs[1]
        assert missing.missing
        assert missing.outline is None
        assert missing.advance_width == pytest.approx(15.0)
        assert glyphs[2].x == pytest.approx(33.0)
        assert "placeholder" in caplog.text


class TestLineWidth:
    def test_empty_line(self) -> None:
        assert line_width([], 5.0) == 0

    @pytest.mark.parametrize("text", ["A", "Hello", "Hi שלום"])
    def test_strictly_increasing_in_letter_spacing(
        self, positioner: GlyphPositioner, metrics: FontCacheMetrics, text: str
    ) -> None:
        widths = []
        for spacing in (-1.0, 0.0, 0.5, 3.0):
            glyphs = positioner.position(text, range(len(text)), 30.0, spacing, metrics)
            widths.append(line_width(glyphs, spacing))
        assert widths == sorted(widths)
        assert len(set(widths)) == len(widths)
