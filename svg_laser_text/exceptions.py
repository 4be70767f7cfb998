"""Exception hierarchy and error kinds for svg-laser-text."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Categories reported on a :class:`~svg_laser_text.api.RenderResult`."""

    DEPENDENCY_UNAVAILABLE = "DependencyUnavailable"
    REORDER_FAILURE = "ReorderFailure"
    GLYPH_UNAVAILABLE = "GlyphUnavailable"
    EMPTY_INPUT = "EmptyInput"
    INVALID_SETTINGS = "InvalidSettings"


class LaserTextError(Exception):
    """Base class for all svg-laser-text errors."""

    kind: ErrorKind | None = None


class DependencyUnavailableError(LaserTextError):
    """A font, the bidi engine or the shaping engine is not available."""

    kind = ErrorKind.DEPENDENCY_UNAVAILABLE


class ReorderError(LaserTextError):
    """The bidi engine failed or returned unusable reorder segments."""

    kind = ErrorKind.REORDER_FAILURE


class GlyphUnavailableError(LaserTextError):
    """No font provides an advance or outline for a character."""

    kind = ErrorKind.GLYPH_UNAVAILABLE

    def __init__(self, char: str, message: str | None = None) -> None:
        self.char = char
        super().__init__(message or f"No glyph available for {char!r} (U+{ord(char):04X})")


class FontNotFoundError(LaserTextError):
    """A font file or family could not be located or loaded."""

    kind = ErrorKind.DEPENDENCY_UNAVAILABLE


class InvalidSettingsError(LaserTextError, ValueError):
    """Render settings failed validation."""

    kind = ErrorKind.INVALID_SETTINGS


class ConfigError(LaserTextError):
    """Configuration file is malformed or holds invalid values."""


class SVGParseError(LaserTextError):
    """An SVG document could not be parsed."""
