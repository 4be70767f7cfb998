"""Glyph layout for svg-laser-text.

This subpackage provides:
- Advance-only glyph positioning
- The shared canvas frame and line centering
- Typographic and ink bounds

Render modes live in :mod:`svg_laser_text.layout.modes`.
"""

from svg_laser_text.layout.aligner import LayoutAligner, baseline_y
from svg_laser_text.layout.bounds import BoundsCalculator
from svg_laser_text.layout.positioner import GlyphPositioner, line_width

__all__ = ["LayoutAligner", "baseline_y", "BoundsCalculator", "GlyphPositioner", "line_width"]
