"""SVG output in physical units.

The root carries ``width``/``height`` in a real-world unit and a matching
``viewBox``, so one user unit is one unit of that measure. Glyph placement
uses translation only.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Sequence

from svg_laser_text.models import LayoutFrame, PositionedGlyph, RenderSettings
from svg_laser_text.svg.path import format_number, outline_to_path_data

SVG_NS = "http://www.w3.org/2000/svg"
XML_NS = "http://www.w3.org/XML/1998/namespace"

STYLES = ("text", "combined", "glyphs")

ET.register_namespace("", SVG_NS)


def _tag(name: str) -> str:
    return f"{{{SVG_NS}}}{name}"


class SVGAssembler:
    """Serialize placed glyphs into an SVG document string."""

    def __init__(self, precision: int = 3, unit: str = "mm", font_family: str = "LaserText") -> None:
        self.precision = precision
        self.unit = unit
        self.font_family = font_family

    def _num(self, value: float) -> str:
        return format_number(value, self.precision)

    def root(self, frame: LayoutFrame) -> ET.Element:
        width = self._num(frame.canvas_width)
        height = self._num(frame.canvas_height)
        return ET.Element(
            _tag("svg"),
            {
                "width": f"{width}{self.unit}",
                "height": f"{height}{self.unit}",
                "viewBox": f"0 0 {width} {height}",
            },
        )

    def _paint(self, settings: RenderSettings) -> dict[str, str]:
        attrs = {"fill": settings.fill_color}
        if settings.stroke_color and settings.stroke_color != "none" and settings.stroke_width > 0:
            attrs["stroke"] = settings.stroke_color
            attrs["stroke-width"] = self._num(settings.stroke_width)
        return attrs

    def assemble(
        self,
        glyphs: Sequence[PositionedGlyph],
        frame: LayoutFrame,
        settings: RenderSettings,
        style: str = "text",
    ) -> str:
        """Build the document. An empty frame yields ``""`` (nothing to render)."""
        if style not in STYLES:
            raise ValueError(f"Unknown SVG style '{style}', expected one of {', '.join(STYLES)}")
        if frame.is_empty:
            return ""

        root = self.root(frame)
        visible = [g for g in glyphs if not g.missing and not g.is_blank]

        if style == "text":
            self._emit_text(root, visible, settings)
        elif style == "combined":
            self._emit_combined(root, visible, settings)
        else:
            self._emit_glyphs(root, visible, settings)

        return ET.tostring(root, encoding="unicode")

    def _emit_text(self, root: ET.Element, glyphs: Sequence[PositionedGlyph], settings: RenderSettings) -> None:
        for glyph in glyphs:
            attrs = {
                "x": self._num(glyph.x),
                "y": self._num(glyph.y),
                "font-family": self.font_family,
                "font-size": self._num(settings.font_size),
                f"{{{XML_NS}}}space": "preserve",
            }
            attrs.update(self._paint(settings))
            elem = ET.SubElement(root, _tag("text"), attrs)
            elem.text = glyph.char

    def _emit_combined(self, root: ET.Element, glyphs: Sequence[PositionedGlyph], settings: RenderSettings) -> None:
        parts = []
        for glyph in glyphs:
            if glyph.outline:
                data = outline_to_path_data(glyph.outline, glyph.x, glyph.y, self.precision)
                if data:
                    parts.append(data)
        if not parts:
            return
        attrs = {"d": " ".join(parts)}
        attrs.update(self._paint(settings))
        ET.SubElement(root, _tag("path"), attrs)

    def _emit_glyphs(self, root: ET.Element, glyphs: Sequence[PositionedGlyph], settings: RenderSettings) -> None:
        group = ET.SubElement(root, _tag("g"), self._paint(settings))
        for glyph in glyphs:
            if not glyph.outline:
                continue
            data = outline_to_path_data(glyph.outline, precision=self.precision)
            if not data:
                continue
            wrapper = ET.SubElement(
                group,
                _tag("g"),
                {"transform": f"translate({self._num(glyph.x)}, {self._num(glyph.y)})"},
            )
            ET.SubElement(wrapper, _tag("path"), {"d": data})
