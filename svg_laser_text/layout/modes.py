"""Render modes: one variant per display mode, all producing :class:`LineLayout`.

The aligner and the SVG writer never look at which mode produced a layout;
the only thing a mode tells them is the SVG ``style`` it wants.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from svg_laser_text.exceptions import DependencyUnavailableError
from svg_laser_text.fonts.cache import FontCache
from svg_laser_text.fonts.metrics import MetricsResolver
from svg_laser_text.layout.positioner import GlyphPositioner, line_width
from svg_laser_text.models import Direction, DisplayMode, LineLayout, RenderSettings, ScriptTag
from svg_laser_text.shaping.bidi import visual_text
from svg_laser_text.shaping.harfbuzz import ShapingAdapter
from svg_laser_text.shaping.scripts import DEFAULT_SCRIPT, classify_text, is_rtl_script, resolve_neutrals

log = logging.getLogger(__name__)


@dataclass
class LayoutTools:
    """Collaborators a mode may use; ``shaper`` is only set for shaping modes."""

    positioner: GlyphPositioner
    metrics: MetricsResolver
    shaper: ShapingAdapter | None = None
    features: tuple[str, ...] = ()


class RenderMode(ABC):
    display_mode: DisplayMode
    style: str
    needs_shaper = False

    @abstractmethod
    def layout_line(
        self,
        text: str,
        order: Sequence[int],
        settings: RenderSettings,
        tools: LayoutTools,
        line: int = 0,
    ) -> LineLayout:
        """Lay out one line. ``x`` starts at 0, ``y`` is the first baseline."""

    def _shaper(self, tools: LayoutTools) -> ShapingAdapter:
        if tools.shaper is None:
            raise DependencyUnavailableError(f"The shaping engine is required for {self.display_mode.value} mode.")
        return tools.shaper


class TextMode(RenderMode):
    display_mode = DisplayMode.TEXT
    style = "text"

    def layout_line(self, text, order, settings, tools, line=0):
        glyphs = tools.positioner.position(
            text, order, settings.font_size, settings.letter_spacing, tools.metrics, line=line
        )
        return LineLayout(tuple(glyphs), line_width(glyphs, settings.letter_spacing))


class OutlineMode(RenderMode):
    display_mode = DisplayMode.OUTLINE
    style = "combined"

    def layout_line(self, text, order, settings, tools, line=0):
        glyphs = tools.positioner.position(
            text, order, settings.font_size, settings.letter_spacing, tools.metrics,
            line=line, with_outlines=True,
        )
        return LineLayout(tuple(glyphs), line_width(glyphs, settings.letter_spacing))


def covering_tag(char: str, tag: ScriptTag, fonts: FontCache) -> ScriptTag:
    """Tag of the font that draws ``char``: the run's own, else the fallback's."""
    font = fonts.resolve(tag)
    if font is not None and font.covers(char):
        return tag
    fallback = fonts.font_for_char(char, tag)
    return fallback.key if fallback is not None else tag


def visual_runs(
    text: str, order: Sequence[int], fonts: FontCache | None = None
) -> list[tuple[list[int], ScriptTag]]:
    """Group visual positions into runs that one shaping call can handle.

    A run shares a script tag (neutrals resolved) and covers consecutive
    logical indices, either ascending (left-to-right) or descending
    (right-to-left). With ``fonts``, characters the run's font lacks move to
    the tag of the font that covers them. Returns the logical indices of each
    run in visual order.
    """
    tags = resolve_neutrals(classify_text(text))
    if fonts is not None:
        tags = [covering_tag(char, tag, fonts) for char, tag in zip(text, tags)]
    runs: list[tuple[list[int], ScriptTag]] = []
    for logical_index in order:
        tag = tags[logical_index]
        if runs:
            indices, run_tag = runs[-1]
            step = logical_index - indices[-1]
            if run_tag == tag and abs(step) == 1 and (len(indices) == 1 or step == indices[1] - indices[0]):
                indices.append(logical_index)
                continue
        runs.append(([logical_index], tag))
    return runs


class ShapedMode(RenderMode):
    display_mode = DisplayMode.SHAPED
    style = "glyphs"
    needs_shaper = True

    def layout_line(self, text, order, settings, tools, line=0):
        shaper = self._shaper(tools)
        spacing = settings.letter_spacing
        glyphs = []
        cursor = 0.0
        for indices, tag in visual_runs(text, order, shaper.fonts):
            if len(indices) > 1:
                direction = Direction.LTR if indices[1] > indices[0] else Direction.RTL
            else:
                direction = Direction.RTL if is_rtl_script(tag) else Direction.LTR
            start = min(indices)
            run_glyphs = shaper.shape(
                text[start:start + len(indices)],
                tag,
                settings.font_size,
                tools.features,
                direction=direction,
                letter_spacing=spacing,
                logical_start=start,
                visual_start=len(glyphs),
                line=line,
            )
            glyphs.extend(glyph.moved(cursor) for glyph in run_glyphs)
            cursor += line_width(run_glyphs, spacing)
        return LineLayout(tuple(glyphs), line_width(glyphs, spacing))


class WholeLineMode(RenderMode):
    """Shape the reordered display string as one left-to-right run.

    Display only: contextual forms that depend on logical order may differ
    from :class:`ShapedMode`.
    """

    display_mode = DisplayMode.WHOLE_LINE
    style = "glyphs"
    needs_shaper = True

    def layout_line(self, text, order, settings, tools, line=0):
        shaper = self._shaper(tools)
        glyphs = shaper.shape(
            visual_text(text, order),
            DEFAULT_SCRIPT,
            settings.font_size,
            tools.features,
            direction=Direction.LTR,
            letter_spacing=settings.letter_spacing,
            index_map=order,
            line=line,
        )
        return LineLayout(tuple(glyphs), line_width(glyphs, settings.letter_spacing))


_MODES: dict[DisplayMode, RenderMode] = {
    mode.display_mode: mode for mode in (TextMode(), OutlineMode(), ShapedMode(), WholeLineMode())
}


def mode_for(display_mode: DisplayMode | str) -> RenderMode:
    return _MODES[DisplayMode(display_mode)]
