"""Typographic (advance) and ink (outline) bounds of a render."""

from __future__ import annotations

from collections.abc import Sequence

from svg_laser_text.models import Bounds, LayoutFrame, PositionedGlyph

ASCENT_RATIO = 0.8
DESCENT_RATIO = 0.2


class BoundsCalculator:
    def bounds(
        self,
        glyphs: Sequence[PositionedGlyph],
        frame: LayoutFrame,
        font_size: float,
        line_widths: Sequence[float] | None = None,
        origin: tuple[float, float] = (0.0, 0.0),
    ) -> Bounds:
        """Compute bounds for placed glyphs.

        Glyphs without extents get an estimated box of ``0.8 * font_size``
        above and ``0.2 * font_size`` below the baseline. Whitespace without
        ink contributes nothing. With no contributing glyph the result is a
        zero box at ``origin``.
        """
        if not glyphs or frame.is_empty:
            return Bounds.zero(origin)

        if line_widths:
            typographic_width = max(line_widths)
        else:
            typographic_width = sum(glyph.advance_width for glyph in glyphs)
        line_count = max(frame.line_count, 1)
        typographic_height = font_size * line_count

        boxes = []
        for glyph in glyphs:
            if glyph.ink_box is not None:
                x_min, y_min, x_max, y_max = glyph.ink_box
                boxes.append((glyph.x + x_min, glyph.y + y_min, glyph.x + x_max, glyph.y + y_max))
            elif glyph.is_blank:
                continue
            else:
                boxes.append((
                    glyph.x,
                    glyph.y - font_size * ASCENT_RATIO,
                    glyph.x + glyph.advance_width,
                    glyph.y + font_size * DESCENT_RATIO,
                ))

        if not boxes:
            ox, oy = origin
            return Bounds(typographic_width, typographic_height, ox, ox, oy, oy)

        return Bounds(
            typographic_width=typographic_width,
            typographic_height=typographic_height,
            actual_min_x=min(box[0] for box in boxes),
            actual_min_y=min(box[1] for box in boxes),
            actual_max_x=max(box[2] for box in boxes),
            actual_max_y=max(box[3] for box in boxes),
        )
