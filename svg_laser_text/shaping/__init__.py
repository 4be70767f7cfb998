"""Text shaping for svg-laser-text.

This subpackage provides:
- Script classification of characters into font buckets
- BiDi (bidirectional) reordering through python-bidi
- HarfBuzz shaping of script runs with pinned scale
"""

from svg_laser_text.shaping.scripts import (
    DEFAULT_SCRIPT,
    ScriptClassifier,
    classify,
    is_rtl_script,
    script_runs,
)
from svg_laser_text.shaping.bidi import (
    BidiReorderer,
    PythonBidiEngine,
    ReorderResult,
    apply_segments,
    logical_text,
    visual_text,
)
from svg_laser_text.shaping.harfbuzz import (
    HarfBuzzEngine,
    HarfBuzzSession,
    ShapedGlyph,
    ShapingAdapter,
    parse_features,
)

__all__ = [
    "DEFAULT_SCRIPT",
    "ScriptClassifier",
    "classify",
    "is_rtl_script",
    "script_runs",
    "BidiReorderer",
    "PythonBidiEngine",
    "ReorderResult",
    "apply_segments",
    "logical_text",
    "visual_text",
    "HarfBuzzEngine",
    "HarfBuzzSession",
    "ShapedGlyph",
    "ShapingAdapter",
    "parse_features",
]
