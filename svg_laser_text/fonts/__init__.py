"""Font handling for svg-laser-text.

This subpackage provides:
- Per-script font registration and lazy loading (fontTools)
- System font lookup through fontconfig
- Glyph metrics, outlines and extents for the advance-only positioner
"""

from svg_laser_text.exceptions import FontNotFoundError
from svg_laser_text.fonts.cache import FontCache, LoadedFont
from svg_laser_text.fonts.metrics import (
    FontCacheMetrics,
    FontToolsMetrics,
    MetricsProvider,
    MetricsResolver,
)

__all__ = [
    "FontCache",
    "LoadedFont",
    "FontNotFoundError",
    "FontToolsMetrics",
    "FontCacheMetrics",
    "MetricsProvider",
    "MetricsResolver",
]
