"""Safe SVG reading (defusedxml) for inspection and comparison."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from xml.etree.ElementTree import Element, ElementTree

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from svg_laser_text.exceptions import SVGParseError

_LENGTH_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)\s*([a-z%]*)\s*$")
_TRANSLATE_RE = re.compile(r"translate\(\s*([^,\s)]+)[\s,]+([^)\s]+)\s*\)")


def parse_svg(path: Path | str) -> ElementTree:
    """Parse an SVG file, rejecting entity expansion and external references."""
    try:
        return ET.parse(str(path))
    except FileNotFoundError as e:
        raise SVGParseError(f"SVG file not found: {path}") from e
    except (ET.ParseError, DefusedXmlException) as e:
        raise SVGParseError(f"Failed to parse {path}: {e}") from e


def parse_svg_string(content: str) -> Element:
    try:
        return ET.fromstring(content)
    except (ET.ParseError, DefusedXmlException) as e:
        raise SVGParseError(f"Failed to parse SVG string: {e}") from e


def local_name(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


@dataclass(frozen=True)
class CanvasInfo:
    """Physical size and user coordinate box of an SVG root."""

    width: float
    height: float
    unit: str
    view_box: tuple[float, float, float, float] | None

    @property
    def units_per_user_unit(self) -> tuple[float, float] | None:
        if not self.view_box or self.view_box[2] == 0 or self.view_box[3] == 0:
            return None
        return (self.width / self.view_box[2], self.height / self.view_box[3])


def _length(value: str | None, attr: str) -> tuple[float, str]:
    if value is None:
        raise SVGParseError(f"SVG root has no '{attr}' attribute")
    match = _LENGTH_RE.match(value)
    if not match:
        raise SVGParseError(f"Cannot read {attr}={value!r}")
    return float(match.group(1)), match.group(2)


def read_canvas(root: Element | ElementTree) -> CanvasInfo:
    if isinstance(root, ElementTree):
        root = root.getroot()
    if local_name(root.tag) != "svg":
        raise SVGParseError(f"Root element is <{local_name(root.tag)}>, not <svg>")

    width, width_unit = _length(root.get("width"), "width")
    height, height_unit = _length(root.get("height"), "height")
    if width_unit != height_unit:
        raise SVGParseError(f"Width and height use different units ({width_unit!r}, {height_unit!r})")

    view_box = None
    raw = root.get("viewBox")
    if raw:
        try:
            parts = tuple(float(p) for p in raw.replace(",", " ").split())
        except ValueError as e:
            raise SVGParseError(f"Cannot read viewBox={raw!r}") from e
        if len(parts) != 4:
            raise SVGParseError(f"viewBox needs 4 numbers, got {raw!r}")
        view_box = parts
    return CanvasInfo(width=width, height=height, unit=width_unit, view_box=view_box)


def find_text_elements(root: Element) -> list[Element]:
    return [elem for elem in root.iter() if local_name(elem.tag) == "text"]


def find_glyph_paths(root: Element) -> list[tuple[tuple[float, float], Element]]:
    """Every ``<path>`` with the accumulated translation of its ancestors."""
    found: list[tuple[tuple[float, float], Element]] = []

    def walk(elem: Element, dx: float, dy: float) -> None:
        transform = elem.get("transform")
        if transform:
            match = _TRANSLATE_RE.search(transform)
            if match:
                dx += float(match.group(1))
                dy += float(match.group(2))
        if local_name(elem.tag) == "path":
            found.append(((dx, dy), elem))
        for child in elem:
            walk(child, dx, dy)

    walk(root, 0.0, 0.0)
    return found
