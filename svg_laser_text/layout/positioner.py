"""Advance-only glyph positioning (no kerning, no shaping)."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from svg_laser_text.exceptions import GlyphUnavailableError
from svg_laser_text.layout.aligner import baseline_y
from svg_laser_text.models import PositionedGlyph, ScriptTag
from svg_laser_text.shaping.scripts import classify

if TYPE_CHECKING:
    from svg_laser_text.fonts.metrics import MetricsResolver

log = logging.getLogger(__name__)


class GlyphPositioner:
    """Walks a visual order and lays glyphs out left to right.

    Each glyph advances the cursor by ``advance + letter_spacing`` where
    ``advance = advance_units * font_size / units_per_em``.
    """

    def __init__(
        self,
        placeholder_advance: float = 0.5,
        classifier: Callable[[str], ScriptTag] = classify,
    ) -> None:
        self.placeholder_advance = placeholder_advance
        self.classifier = classifier

    def position(
        self,
        text: str,
        visual_order: Sequence[int],
        font_size: float,
        letter_spacing: float,
        metrics: MetricsResolver,
        *,
        line: int = 0,
        with_outlines: bool = False,
    ) -> list[PositionedGlyph]:
        y = baseline_y(font_size)
        x = 0.0
        glyphs = []

        for visual_index, logical_index in enumerate(visual_order):
            char = text[logical_index]
            tag = self.classifier(char)
            try:
                provider = metrics.metrics_for(char)
                cp = ord(char)
                scale = font_size / provider.units_per_em
                advance = provider.advance_width(cp) * scale
            except GlyphUnavailableError:
                log.warning("No font covers %r (U+%04X); using placeholder advance", char, ord(char))
                advance = font_size * self.placeholder_advance
                glyphs.append(PositionedGlyph(
                    logical_index=logical_index,
                    visual_index=visual_index,
                    char=char,
                    x=x,
                    y=y,
                    advance_width=advance,
                    script_tag=tag,
                    line=line,
                    missing=True,
                ))
                x += advance + letter_spacing
                continue

            outline = None
            ink_box = None
            if with_outlines:
                outline = provider.outline(cp, 0.0, 0.0, font_size)
                extents = provider.extents(cp)
                if extents is not None:
                    x_min, y_min, x_max, y_max = extents
                    ink_box = (x_min * scale, -y_max * scale, x_max * scale, -y_min * scale)

            glyphs.append(PositionedGlyph(
                logical_index=logical_index,
                visual_index=visual_index,
                char=char,
                x=x,
                y=y,
                advance_width=advance,
                script_tag=tag,
                glyph_id=provider.glyph_id(cp),
                outline=outline,
                ink_box=ink_box,
                line=line,
            ))
            x += advance + letter_spacing

        return glyphs


def line_width(glyphs: Iterable[PositionedGlyph], letter_spacing: float) -> float:
    """Typographic width of a line: every glyph's advance plus spacing."""
    return sum(glyph.advance_width + letter_spacing for glyph in glyphs)
