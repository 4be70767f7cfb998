"""SVG reading and writing for svg-laser-text.

This subpackage provides:
- Physical-unit SVG output (live text, combined outline, per-glyph groups)
- Pen recording to path data serialization
- Safe SVG parsing with XXE protection (defusedxml)
"""

from svg_laser_text.svg.parser import (
    CanvasInfo,
    find_glyph_paths,
    find_text_elements,
    parse_svg,
    parse_svg_string,
    read_canvas,
)
from svg_laser_text.svg.path import format_number, outline_to_path_data
from svg_laser_text.svg.writer import SVGAssembler

__all__ = [
    "CanvasInfo",
    "SVGAssembler",
    "find_glyph_paths",
    "find_text_elements",
    "format_number",
    "outline_to_path_data",
    "parse_svg",
    "parse_svg_string",
    "read_canvas",
]
