"""HarfBuzz text shaping.

Every engine object (blob, face, font, buffer) lives in a
:class:`HarfBuzzSession` that is opened for a single :meth:`ShapingAdapter.shape`
call and closed on every exit path.

The engine font scale is pinned to the face's units-per-em
(``reference_units``). All advances and offsets come back in those units and
are converted with ``scale = font_size / reference_units``; the requested font
size itself is never changed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from fontTools.pens.recordingPen import RecordingPen

from svg_laser_text.exceptions import DependencyUnavailableError
from svg_laser_text.layout.aligner import baseline_y
from svg_laser_text.models import Direction, PositionedGlyph, ScriptTag
from svg_laser_text.shaping.scripts import hb_language, hb_script, is_rtl_script
from svg_laser_text.svg.path import scale_recording

if TYPE_CHECKING:
    from svg_laser_text.fonts.cache import FontCache

log = logging.getLogger(__name__)

DEFAULT_PLACEHOLDER_ADVANCE = 0.5


@dataclass(frozen=True)
class ShapedGlyph:
    """One glyph as returned by the engine, in engine units."""

    glyph_id: int
    cluster: int
    x_advance: float
    y_advance: float = 0.0
    x_offset: float = 0.0
    y_offset: float = 0.0


class ShapingSession(Protocol):
    reference_units: int

    def shape(
        self,
        codepoints: Sequence[int],
        *,
        direction: str,
        script: str | None = None,
        language: str | None = None,
        features: dict[str, Any] | None = None,
    ) -> list[ShapedGlyph]: ...

    def glyph_outline(self, glyph_id: int) -> list[tuple[str, tuple]]: ...

    def glyph_extents(self, glyph_id: int) -> tuple[float, float, float, float] | None: ...

    def close(self) -> None: ...

    def __enter__(self) -> ShapingSession: ...

    def __exit__(self, *exc_info: object) -> None: ...


class ShapingEngine(Protocol):
    def open(self, font_data: bytes, face_index: int = 0) -> ShapingSession: ...


class HarfBuzzSession:
    """Blob/face/font/buffer for one shaping call."""

    def __init__(self, hb: Any, font_data: bytes, face_index: int = 0) -> None:
        self._hb = hb
        self.blob = hb.Blob(font_data)
        self.face = hb.Face(self.blob, face_index)
        self.font = hb.Font(self.face)
        self.reference_units = self.face.upem
        self.font.scale = (self.reference_units, self.reference_units)
        self.buffer = None
        self.closed = False

    def __enter__(self) -> HarfBuzzSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _check_open(self) -> None:
        if self.closed:
            raise RuntimeError("HarfBuzz session already closed")

    def shape(
        self,
        codepoints: Sequence[int],
        *,
        direction: str,
        script: str | None = None,
        language: str | None = None,
        features: dict[str, Any] | None = None,
    ) -> list[ShapedGlyph]:
        self._check_open()
        buf = self._hb.Buffer()
        self.buffer = buf
        # Codepoint input keeps clusters as character indices.
        buf.add_codepoints(list(codepoints))
        buf.direction = direction
        if script:
            buf.script = script
        if language:
            buf.language = language
        buf.guess_segment_properties()
        self._hb.shape(self.font, buf, features or {})
        return [
            ShapedGlyph(
                glyph_id=info.codepoint,
                cluster=info.cluster,
                x_advance=pos.x_advance,
                y_advance=pos.y_advance,
                x_offset=pos.x_offset,
                y_offset=pos.y_offset,
            )
            for info, pos in zip(buf.glyph_infos, buf.glyph_positions)
        ]

    def glyph_outline(self, glyph_id: int) -> list[tuple[str, tuple]]:
        """Pen recording of a glyph in reference units, y-up."""
        self._check_open()
        pen = RecordingPen()
        self.font.draw_glyph_with_pen(glyph_id, pen)
        return pen.value

    def glyph_extents(self, glyph_id: int) -> tuple[float, float, float, float] | None:
        """``(x_min, y_min, x_max, y_max)`` in reference units, y-up."""
        self._check_open()
        ext = self.font.get_glyph_extents(glyph_id)
        if ext is None or (ext.width == 0 and ext.height == 0):
            return None
        x_min = ext.x_bearing
        x_max = ext.x_bearing + ext.width
        y_max = ext.y_bearing
        y_min = ext.y_bearing + ext.height
        return (min(x_min, x_max), min(y_min, y_max), max(x_min, x_max), max(y_min, y_max))

    def close(self) -> None:
        self.buffer = None
        self.font = None
        self.face = None
        self.blob = None
        self.closed = True


class HarfBuzzEngine:
    """Opens :class:`HarfBuzzSession` objects through uharfbuzz."""

    def __init__(self) -> None:
        try:
            import uharfbuzz as hb
        except ImportError as e:
            raise DependencyUnavailableError(
                "uharfbuzz is required for shaped rendering. Install with: pip install uharfbuzz"
            ) from e
        self._hb = hb

    def open(self, font_data: bytes, face_index: int = 0) -> HarfBuzzSession:
        return HarfBuzzSession(self._hb, font_data, face_index)


def parse_features(specs: Iterable[str] | str | None) -> dict[str, bool | int]:
    """Parse ``"kern,-liga,ss01=2"`` style OpenType feature toggles."""
    if not specs:
        return {}
    if isinstance(specs, str):
        specs = specs.split(",")
    features: dict[str, bool | int] = {}
    for raw in specs:
        spec = raw.strip()
        if not spec:
            continue
        if "=" in spec:
            tag, _, value = spec.partition("=")
            try:
                features[tag.strip()] = int(value)
            except ValueError:
                log.warning("Ignoring malformed feature '%s'", spec)
        elif spec[0] in "+-":
            features[spec[1:]] = spec[0] == "+"
        else:
            features[spec] = True
    return features


class ShapingAdapter:
    """Shape one script-homogeneous run into :class:`PositionedGlyph` objects."""

    def __init__(
        self,
        engine: ShapingEngine,
        fonts: FontCache,
        placeholder_advance: float = DEFAULT_PLACEHOLDER_ADVANCE,
    ) -> None:
        self.engine = engine
        self.fonts = fonts
        self.placeholder_advance = placeholder_advance

    def shape(
        self,
        text: str,
        script_tag: ScriptTag,
        font_size: float,
        features: Iterable[str] | str | None = None,
        *,
        direction: Direction | str | None = None,
        baseline: float | None = None,
        letter_spacing: float = 0.0,
        index_map: Sequence[int] | None = None,
        logical_start: int = 0,
        visual_start: int = 0,
        line: int = 0,
        with_outlines: bool = True,
    ) -> list[PositionedGlyph]:
        """Shape ``text`` with the font registered for ``script_tag``.

        Glyphs come back in visual (left to right) order with ``x`` starting
        at 0. ``index_map`` maps a character index of ``text`` to its logical
        index in the line; by default that is ``logical_start + i``.
        """
        if not text:
            return []
        if direction is None or Direction(direction) is Direction.AUTO:
            direction = Direction.RTL if is_rtl_script(script_tag) else Direction.LTR
        direction = Direction(direction)
        if baseline is None:
            baseline = baseline_y(font_size)

        def logical(i: int) -> int:
            return index_map[i] if index_map is not None else logical_start + i

        font = self.fonts.resolve(script_tag)
        if font is None:
            log.warning("No font loaded for script '%s'; using placeholder advances", script_tag)
            return self._placeholders(text, script_tag, font_size, direction, baseline,
                                      letter_spacing, logical, visual_start, line)

        with self.engine.open(font.data, font.face_index) as session:
            scale = font_size / session.reference_units
            shaped = session.shape(
                [ord(ch) for ch in text],
                direction=direction.value,
                script=hb_script(script_tag),
                language=hb_language(script_tag),
                features=parse_features(features),
            )

            glyphs = []
            cursor = 0.0
            for n, sg in enumerate(shaped):
                cluster = min(max(sg.cluster, 0), len(text) - 1)
                char = text[cluster]
                if sg.glyph_id == 0:
                    log.warning("Font '%s' has no glyph for %r; skipping outline", font.key, char)
                    advance = font_size * self.placeholder_advance
                    glyphs.append(PositionedGlyph(
                        logical_index=logical(cluster),
                        visual_index=visual_start + n,
                        char=char,
                        x=cursor,
                        y=baseline,
                        advance_width=advance,
                        script_tag=script_tag,
                        glyph_id=0,
                        line=line,
                        missing=True,
                    ))
                    cursor += advance + letter_spacing
                    continue

                advance = sg.x_advance * scale
                outline = None
                ink_box = None
                if with_outlines:
                    outline = scale_recording(session.glyph_outline(sg.glyph_id), scale)
                    extents = session.glyph_extents(sg.glyph_id)
                    if extents is not None:
                        x_min, y_min, x_max, y_max = extents
                        ink_box = (x_min * scale, -y_max * scale, x_max * scale, -y_min * scale)
                glyphs.append(PositionedGlyph(
                    logical_index=logical(cluster),
                    visual_index=visual_start + n,
                    char=char,
                    x=cursor + sg.x_offset * scale,
                    y=baseline - sg.y_offset * scale,
                    advance_width=advance,
                    script_tag=script_tag,
                    glyph_id=sg.glyph_id,
                    outline=outline,
                    ink_box=ink_box,
                    line=line,
                ))
                cursor += advance + letter_spacing

        log.debug("shaped %r script=%s dir=%s glyphs=%d scale=%.5f",
                  text, script_tag, direction.value, len(glyphs), scale)
        return glyphs

    def _placeholders(self, text, script_tag, font_size, direction, baseline,
                      letter_spacing, logical, visual_start, line) -> list[PositionedGlyph]:
        advance = font_size * self.placeholder_advance
        indices = range(len(text) - 1, -1, -1) if direction is Direction.RTL else range(len(text))
        glyphs = []
        cursor = 0.0
        for n, i in enumerate(indices):
            glyphs.append(PositionedGlyph(
                logical_index=logical(i),
                visual_index=visual_start + n,
                char=text[i],
                x=cursor,
                y=baseline,
                advance_width=advance,
                script_tag=script_tag,
                line=line,
                missing=True,
            ))
            cursor += advance + letter_spacing
        return glyphs
