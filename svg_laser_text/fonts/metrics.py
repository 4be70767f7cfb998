"""Glyph metrics and outlines from fontTools."""

from __future__ import annotations

import logging
from typing import Protocol

from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.recordingPen import RecordingPen
from fontTools.pens.transformPen import TransformPen

from svg_laser_text.exceptions import GlyphUnavailableError
from svg_laser_text.fonts.cache import FontCache, LoadedFont
from svg_laser_text.models import Outline
from svg_laser_text.shaping.scripts import classify

log = logging.getLogger(__name__)


class MetricsProvider(Protocol):
    """Per-font glyph data used by the advance-only positioner."""

    @property
    def units_per_em(self) -> int: ...

    def has_glyph(self, codepoint: int) -> bool: ...

    def glyph_id(self, codepoint: int) -> int: ...

    def advance_width(self, codepoint: int) -> float: ...

    def outline(self, codepoint: int, x: float, y: float, font_size: float) -> Outline: ...

    def extents(self, codepoint: int) -> tuple[float, float, float, float] | None: ...


class MetricsResolver(Protocol):
    """Chooses the metrics provider responsible for a character."""

    def metrics_for(self, char: str) -> MetricsProvider: ...


class FontToolsMetrics:
    """:class:`MetricsProvider` over one fontTools ``TTFont``."""

    def __init__(self, font: LoadedFont) -> None:
        self.font = font
        self._glyph_set = font.ttfont.getGlyphSet()
        self._hmtx = font.ttfont["hmtx"]

    @property
    def units_per_em(self) -> int:
        return self.font.units_per_em

    def _glyph_name(self, codepoint: int) -> str:
        name = self.font.cmap.get(codepoint)
        if not name or name not in self._glyph_set:
            raise GlyphUnavailableError(chr(codepoint))
        return name

    def has_glyph(self, codepoint: int) -> bool:
        name = self.font.cmap.get(codepoint)
        return bool(name) and name in self._glyph_set

    def glyph_id(self, codepoint: int) -> int:
        return self.font.ttfont.getGlyphID(self._glyph_name(codepoint))

    def advance_width(self, codepoint: int) -> float:
        """Advance in font units (``hmtx``)."""
        advance, _lsb = self._hmtx[self._glyph_name(codepoint)]
        return float(advance)

    def outline(self, codepoint: int, x: float, y: float, font_size: float) -> Outline:
        """Outline scaled to ``font_size`` with its origin at ``(x, y)``, y-down."""
        scale = font_size / self.units_per_em
        pen = RecordingPen()
        self._glyph_set[self._glyph_name(codepoint)].draw(TransformPen(pen, (scale, 0, 0, -scale, x, y)))
        return tuple((op, tuple(args)) for op, args in pen.value)

    def extents(self, codepoint: int) -> tuple[float, float, float, float] | None:
        """``(x_min, y_min, x_max, y_max)`` in font units, ``None`` for empty glyphs."""
        pen = BoundsPen(self._glyph_set)
        self._glyph_set[self._glyph_name(codepoint)].draw(pen)
        return pen.bounds

    def metrics_for(self, char: str) -> FontToolsMetrics:
        if not self.has_glyph(ord(char)):
            raise GlyphUnavailableError(char)
        return self


class FontCacheMetrics:
    """:class:`MetricsResolver` that picks fonts from a :class:`FontCache` by script."""

    def __init__(self, fonts: FontCache) -> None:
        self.fonts = fonts
        self._providers: dict[str, FontToolsMetrics] = {}

    def metrics_for(self, char: str) -> FontToolsMetrics:
        font = self.fonts.font_for_char(char, classify(char))
        if font is None:
            raise GlyphUnavailableError(char)
        provider = self._providers.get(font.key)
        if provider is None or provider.font is not font:
            provider = FontToolsMetrics(font)
            self._providers[font.key] = provider
        return provider
