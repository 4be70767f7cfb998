"""Pytest configuration and shared fixtures for svg-laser-text tests.

Fonts are generated with fontTools' FontBuilder so the suite never depends
on what is installed on the machine. Every inked glyph is a rectangle from
(50, 0) to (advance - 50, 700) in font units.
"""

from collections.abc import Generator
from io import BytesIO
from pathlib import Path
from textwrap import dedent

import pytest
from click.testing import CliRunner
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from svg_laser_text.api import RenderContext
from svg_laser_text.config import Config
from svg_laser_text.fonts import FontCache

LATIN_ADVANCE = 600
HEBREW_ADVANCE = 500
SPACE_ADVANCE = 250
DIGIT_ADVANCE = 550

LATIN_CHARS = (
    {chr(c): LATIN_ADVANCE for c in range(ord("A"), ord("Z") + 1)}
    | {chr(c): LATIN_ADVANCE for c in range(ord("a"), ord("z") + 1)}
    | {str(d): DIGIT_ADVANCE for d in range(10)}
    | {" ": SPACE_ADVANCE}
)
HEBREW_CHARS = (
    {chr(c): HEBREW_ADVANCE for c in range(0x05D0, 0x05EB)}
    | {str(d): DIGIT_ADVANCE for d in range(10)}
    | {" ": SPACE_ADVANCE}
)


def build_font(chars: dict[str, int], family: str = "Test Sans", units_per_em: int = 1000) -> bytes:
    """Build a TrueType font mapping each char to a rectangle glyph."""
    names = {char: f"uni{ord(char):04X}" for char in chars}
    fb = FontBuilder(units_per_em, isTTF=True)
    fb.setupGlyphOrder([".notdef"] + list(names.values()))
    fb.setupCharacterMap({ord(char): name for char, name in names.items()})

    def rect(advance: int):
        pen = TTGlyphPen(None)
        pen.moveTo((50, 0))
        pen.lineTo((50, 700))
        pen.lineTo((advance - 50, 700))
        pen.lineTo((advance - 50, 0))
        pen.closePath()
        return pen.glyph()

    glyphs = {".notdef": rect(500)}
    metrics = {".notdef": (500, 50)}
    for char, name in names.items():
        advance = chars[char]
        if char.strip():
            glyphs[name] = rect(advance)
            metrics[name] = (advance, 50)
        else:
            glyphs[name] = TTGlyphPen(None).glyph()
            metrics[name] = (advance, 0)

    fb.setupGlyf(glyphs)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=800, descent=-200)
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})
    fb.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    fb.setupPost()

    buf = BytesIO()
    fb.save(buf)
    return buf.getvalue()


@pytest.fixture(scope="session")
def latin_font_bytes() -> bytes:
    """Latin letters, digits and space."""
    return build_font(LATIN_CHARS, family="Test Latin")


@pytest.fixture(scope="session")
def hebrew_font_bytes() -> bytes:
    """Hebrew letters (U+05D0..U+05EA), digits and space."""
    return build_font(HEBREW_CHARS, family="Test Hebrew")


@pytest.fixture(scope="session")
def hebrew_letters_font_bytes() -> bytes:
    """Hebrew letters and space, no digits."""
    chars = {char: advance for char, advance in HEBREW_CHARS.items() if not char.isdigit()}
    return build_font(chars, family="Test Hebrew Letters")


@pytest.fixture(scope="session")
def latin_2048_font_bytes() -> bytes:
    """The Latin font at 2048 units per em ('A' advances 1228 units)."""
    chars = {char: advance * 2048 // 1000 for char, advance in LATIN_CHARS.items()}
    return build_font(chars, family="Test Latin 2048", units_per_em=2048)


@pytest.fixture
def font_cache(latin_font_bytes: bytes, hebrew_font_bytes: bytes) -> FontCache:
    """Latin font as the default, Hebrew font for the hebrew script."""
    cache = FontCache()
    cache.register("default", latin_font_bytes)
    cache.register("hebrew", hebrew_font_bytes)
    return cache


@pytest.fixture
def context(font_cache: FontCache) -> Generator[RenderContext, None, None]:
    """A started RenderContext over the synthetic fonts."""
    ctx = RenderContext(font_cache, Config(default_family=None))
    ctx.start()
    yield ctx
    ctx.close()


@pytest.fixture
def font_files(tmp_path: Path, latin_font_bytes: bytes, hebrew_font_bytes: bytes) -> dict[str, Path]:
    """The synthetic fonts written to disk."""
    latin = tmp_path / "fonts" / "TestLatin.ttf"
    hebrew = tmp_path / "fonts" / "TestHebrew.ttf"
    latin.parent.mkdir()
    latin.write_bytes(latin_font_bytes)
    hebrew.write_bytes(hebrew_font_bytes)
    return {"latin": latin, "hebrew": hebrew}


@pytest.fixture
def config_file(tmp_path: Path, font_files: dict[str, Path]) -> Path:
    """A YAML config pointing at the synthetic fonts."""
    path = tmp_path / "config.yaml"
    path.write_text(
        dedent(f"""
            default_family: null
            default_font: {font_files["latin"]}
            fonts:
              hebrew: {font_files["hebrew"]}
        """),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def runner() -> CliRunner:
    """Create a CliRunner instance for testing CLI commands."""
    return CliRunner()
