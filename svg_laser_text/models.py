"""Value types shared by every stage of the render pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum

from svg_laser_text.exceptions import InvalidSettingsError

ScriptTag = str

# Pen operations ("moveTo", "lineTo", "qCurveTo", "curveTo", "closePath")
# with their points, in canvas units, y-down, relative to the glyph origin.
PenOp = tuple[str, tuple[tuple[float, float], ...]]
Outline = tuple[PenOp, ...]

# (x_min, y_min, x_max, y_max) relative to the glyph origin, y-down.
InkBox = tuple[float, float, float, float]


def _as_float(value: object, label: str) -> float:
    if isinstance(value, bool):
        raise InvalidSettingsError(f"{label} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise InvalidSettingsError(f"{label} must be a number, got {value!r}") from e


class Direction(str, Enum):
    """Paragraph direction requested for bidi reordering."""

    LTR = "ltr"
    RTL = "rtl"
    AUTO = "auto"


class DisplayMode(str, Enum):
    """Which rendering backend produces the glyph geometry."""

    TEXT = "text"
    OUTLINE = "outline"
    SHAPED = "shaped"
    WHOLE_LINE = "whole-line"


@dataclass(frozen=True)
class RenderSettings:
    """Immutable inputs of a single render call."""

    text: str
    font_size: float = 30.0
    fill_color: str = "#000000"
    stroke_color: str = "none"
    stroke_width: float = 0.0
    letter_spacing: float = 0.0
    direction: Direction = Direction.AUTO
    display_mode: DisplayMode = DisplayMode.TEXT
    features: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "direction", Direction(self.direction))
            object.__setattr__(self, "display_mode", DisplayMode(self.display_mode))
        except ValueError as e:
            raise InvalidSettingsError(str(e)) from e
        if isinstance(self.features, str):
            feats = tuple(f.strip() for f in self.features.split(",") if f.strip())
            object.__setattr__(self, "features", feats)
        else:
            object.__setattr__(self, "features", tuple(self.features))

        size = _as_float(self.font_size, "Font size")
        if not math.isfinite(size) or size <= 0:
            raise InvalidSettingsError(f"Font size must be a positive number, got {self.font_size!r}")
        stroke = _as_float(self.stroke_width, "Stroke width")
        if not math.isfinite(stroke) or stroke < 0:
            raise InvalidSettingsError(f"Stroke width must be zero or positive, got {self.stroke_width!r}")
        spacing = _as_float(self.letter_spacing, "Letter spacing")
        if not math.isfinite(spacing):
            raise InvalidSettingsError(f"Letter spacing must be finite, got {self.letter_spacing!r}")
        object.__setattr__(self, "font_size", size)
        object.__setattr__(self, "stroke_width", stroke)
        object.__setattr__(self, "letter_spacing", spacing)

    @property
    def lines(self) -> list[str]:
        """Text split on explicit newlines (the only line breaking supported)."""
        return self.text.split("\n") if self.text else []


@dataclass(frozen=True)
class PositionedGlyph:
    """One glyph placed on the canvas.

    ``logical_index`` points into the line's text, ``visual_index`` is the
    glyph's slot in display order. ``x``/``y`` are the pen origin on the
    baseline.
    """

    logical_index: int
    visual_index: int
    char: str
    x: float
    y: float
    advance_width: float
    script_tag: ScriptTag
    glyph_id: int | None = None
    outline: Outline | None = None
    ink_box: InkBox | None = None
    line: int = 0
    missing: bool = False

    def moved(self, dx: float, dy: float = 0.0) -> PositionedGlyph:
        return replace(self, x=self.x + dx, y=self.y + dy)

    @property
    def is_blank(self) -> bool:
        return not self.char.strip()


@dataclass(frozen=True)
class LayoutFrame:
    """Canvas geometry shared by every rendering backend."""

    baseline_y: float
    canvas_width: float
    canvas_height: float
    line_pitch: float = 0.0
    line_count: int = 1

    @classmethod
    def empty(cls) -> LayoutFrame:
        return cls(baseline_y=0.0, canvas_width=0.0, canvas_height=0.0, line_pitch=0.0, line_count=0)

    @property
    def is_empty(self) -> bool:
        return self.canvas_width <= 0 or self.canvas_height <= 0

    def baseline_for(self, line: int) -> float:
        return self.baseline_y + line * self.line_pitch


@dataclass(frozen=True)
class Bounds:
    """Typographic (advance based) and actual (ink) extents of a render."""

    typographic_width: float = 0.0
    typographic_height: float = 0.0
    actual_min_x: float = 0.0
    actual_max_x: float = 0.0
    actual_min_y: float = 0.0
    actual_max_y: float = 0.0

    @classmethod
    def zero(cls, origin: tuple[float, float] = (0.0, 0.0)) -> Bounds:
        ox, oy = origin
        return cls(0.0, 0.0, ox, ox, oy, oy)

    @property
    def actual_width(self) -> float:
        return self.actual_max_x - self.actual_min_x

    @property
    def actual_height(self) -> float:
        return self.actual_max_y - self.actual_min_y

    def as_dict(self) -> dict[str, float]:
        return {
            "typographic_width": self.typographic_width,
            "typographic_height": self.typographic_height,
            "actual_min_x": self.actual_min_x,
            "actual_max_x": self.actual_max_x,
            "actual_min_y": self.actual_min_y,
            "actual_max_y": self.actual_max_y,
        }


@dataclass(frozen=True)
class LineLayout:
    """Glyphs of one line before alignment, plus its typographic width."""

    glyphs: tuple[PositionedGlyph, ...] = ()
    width: float = 0.0
    warnings: tuple[str, ...] = field(default_factory=tuple)
