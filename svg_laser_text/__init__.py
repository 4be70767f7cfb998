"""svg-laser-text: Unicode text to physically sized SVG glyph geometry.

This library provides:
- BiDi reordering for mixed LTR/RTL text (python-bidi)
- Per-script font selection and advance-based positioning (fontTools)
- HarfBuzz shaping for complex scripts with pinned scale
- One shared canvas frame so live text and outlines line up exactly

Example:
    >>> from svg_laser_text import RenderContext, RenderSettings
    >>> with RenderContext.from_config() as context:
    ...     result = context.render(RenderSettings("Hi שלום", display_mode="outline"))
    >>> result.success
    True
"""

from svg_laser_text.api import RenderContext, RenderResult, render
from svg_laser_text.config import Config
from svg_laser_text.exceptions import (
    ConfigError,
    DependencyUnavailableError,
    ErrorKind,
    FontNotFoundError,
    GlyphUnavailableError,
    InvalidSettingsError,
    LaserTextError,
    ReorderError,
    SVGParseError,
)
from svg_laser_text.fonts.cache import FontCache
from svg_laser_text.models import (
    Bounds,
    Direction,
    DisplayMode,
    LayoutFrame,
    PositionedGlyph,
    RenderSettings,
)

__version__ = "0.1.0"

__all__ = [
    # Main API
    "RenderContext",
    "RenderResult",
    "RenderSettings",
    "render",
    "Config",
    # Values
    "Bounds",
    "Direction",
    "DisplayMode",
    "LayoutFrame",
    "PositionedGlyph",
    # Font handling
    "FontCache",
    # Exceptions
    "ErrorKind",
    "LaserTextError",
    "DependencyUnavailableError",
    "ReorderError",
    "GlyphUnavailableError",
    "FontNotFoundError",
    "InvalidSettingsError",
    "ConfigError",
    "SVGParseError",
    # Metadata
    "__version__",
]
