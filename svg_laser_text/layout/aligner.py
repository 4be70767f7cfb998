"""Canvas frame and centering shared by every rendering backend.

All multipliers are fixed fractions of the font size and never derived from
font ascent/descent, so live text and outlines land on the same baseline.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from svg_laser_text.models import LayoutFrame, PositionedGlyph, RenderSettings

BASELINE_RATIO = 1.2
CANVAS_HEIGHT_RATIO = 1.5
LINE_HEIGHT_RATIO = 1.2


def baseline_y(font_size: float) -> float:
    return font_size * BASELINE_RATIO


class LayoutAligner:
    """Computes the :class:`LayoutFrame` and centers lines inside it.

    The font size is never adjusted to fit the canvas; only the canvas grows.
    """

    def __init__(self, padding: float = 0.0, minimum_width: float = 1.0) -> None:
        self.padding = padding
        self.minimum_width = minimum_width

    def frame(
        self, settings: RenderSettings, typographic_width: float, line_count: int | None = None
    ) -> LayoutFrame:
        if line_count is None:
            line_count = len(settings.lines)
        if not settings.text or line_count <= 0:
            return LayoutFrame.empty()

        font_size = settings.font_size
        line_pitch = font_size * LINE_HEIGHT_RATIO
        return LayoutFrame(
            baseline_y=baseline_y(font_size),
            canvas_width=max(typographic_width + self.padding, self.minimum_width),
            canvas_height=font_size * CANVAS_HEIGHT_RATIO + (line_count - 1) * line_pitch,
            line_pitch=line_pitch,
            line_count=line_count,
        )

    @staticmethod
    def center_offset(frame: LayoutFrame, line_width: float) -> float:
        return (frame.canvas_width - line_width) / 2

    def place(
        self,
        glyphs: Iterable[PositionedGlyph],
        frame: LayoutFrame,
        line_widths: Sequence[float],
    ) -> list[PositionedGlyph]:
        """Center each line on the canvas and drop it to its own baseline.

        Glyphs arrive with ``x`` relative to their line start and ``y`` on the
        first baseline.
        """
        placed = []
        for glyph in glyphs:
            width = line_widths[glyph.line] if glyph.line < len(line_widths) else 0.0
            placed.append(glyph.moved(self.center_offset(frame, width), glyph.line * frame.line_pitch))
        return placed
