"""Font loading and per-script font assignment."""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path

from fontTools.ttLib import TTFont, TTLibError

from svg_laser_text.config import Config
from svg_laser_text.exceptions import FontNotFoundError
from svg_laser_text.models import ScriptTag
from svg_laser_text.shaping.scripts import DEFAULT_SCRIPT, classify

log = logging.getLogger(__name__)


@dataclass
class LoadedFont:
    """A parsed font plus the raw bytes the shaping engine needs."""

    key: str
    data: bytes
    face_index: int
    ttfont: TTFont
    path: Path | None = None
    _cmap: dict[int, str] | None = field(default=None, repr=False)

    @property
    def units_per_em(self) -> int:
        upem = self.ttfont["head"].unitsPerEm
        return upem if upem > 0 else 1000

    @property
    def cmap(self) -> dict[int, str]:
        if self._cmap is None:
            self._cmap = self.ttfont.getBestCmap() or {}
        return self._cmap

    def covers(self, char: str) -> bool:
        name = self.cmap.get(ord(char))
        return bool(name) and name != ".notdef"

    @property
    def family(self) -> str:
        name = self.ttfont["name"].getBestFamilyName() if "name" in self.ttfont else None
        return name or (self.path.stem if self.path else self.key)


class FontCache:
    """Fonts keyed by script tag, loaded lazily from disk or bytes.

    The ``default`` font covers any character whose script font is missing
    or lacks the glyph.
    """

    def __init__(self) -> None:
        self._sources: dict[ScriptTag, tuple[Path | bytes, int]] = {}
        self._fonts: dict[ScriptTag, LoadedFont] = {}
        self._coverage_cache: dict[tuple[str, ScriptTag], LoadedFont | None] = {}

    @classmethod
    def from_config(cls, config: Config) -> FontCache:
        cache = cls()
        for tag, entry in config.fonts.items():
            cache.register(tag, entry.path, entry.face_index)
        if config.default_font is not None:
            cache.register(DEFAULT_SCRIPT, config.default_font.path, config.default_font.face_index)
        elif config.default_family:
            match = cache.find_system_font(config.default_family)
            if match is not None:
                cache.register(DEFAULT_SCRIPT, *match)
            else:
                log.warning("No system font found for default family '%s'", config.default_family)
        return cache

    def register(self, script: ScriptTag, source: Path | str | bytes, face_index: int = 0) -> None:
        """Assign a font file (or raw font bytes) to a script tag."""
        script = script.lower()
        if not isinstance(source, bytes):
            source = Path(source)
        self._sources[script] = (source, face_index)
        self._fonts.pop(script, None)
        self._coverage_cache.clear()

    def scripts(self) -> list[ScriptTag]:
        return sorted(self._sources)

    def source_of(self, script: ScriptTag) -> Path | None:
        source = self._sources.get(script)
        if source is None or isinstance(source[0], bytes):
            return None
        return source[0]

    def get(self, script: ScriptTag) -> LoadedFont | None:
        """Font registered for exactly this script, loading it on first use."""
        script = script.lower()
        if script in self._fonts:
            return self._fonts[script]
        if script not in self._sources:
            return None
        source, face_index = self._sources[script]
        font = self._load(script, source, face_index)
        self._fonts[script] = font
        return font

    @property
    def default(self) -> LoadedFont | None:
        return self.get(DEFAULT_SCRIPT)

    def resolve(self, script: ScriptTag) -> LoadedFont | None:
        """Font for a script, falling back to the default font.

        A script font that cannot be read or parsed is logged and skipped.
        """
        try:
            font = self.get(script)
        except FontNotFoundError as e:
            log.warning("%s; using the default font for '%s'", e, script)
            font = None
        return font or self.default

    def font_for_char(self, char: str, script: ScriptTag | None = None) -> LoadedFont | None:
        """Pick the font that draws ``char``.

        Order: the font of the character's script, the default font, then
        any other registered font that covers it. ``None`` if nothing does.
        """
        script = script or classify(char)
        key = (char, script)
        if key in self._coverage_cache:
            return self._coverage_cache[key]

        candidates = [script, DEFAULT_SCRIPT] + [s for s in self.scripts() if s not in (script, DEFAULT_SCRIPT)]
        found = None
        for candidate in candidates:
            try:
                font = self.get(candidate)
            except FontNotFoundError as e:
                log.warning("%s", e)
                continue
            if font is not None and font.covers(char):
                found = font
                break
        self._coverage_cache[key] = found
        return found

    def preload(self) -> int:
        """Load every registered font; returns how many loaded."""
        count = 0
        for script in self.scripts():
            if self.get(script) is not None:
                count += 1
        return count

    def _load(self, key: str, source: Path | bytes, face_index: int) -> LoadedFont:
        if isinstance(source, bytes):
            data = source
            path = None
        else:
            path = source
            try:
                data = path.read_bytes()
            except OSError as e:
                raise FontNotFoundError(f"Cannot read font file {path}: {e}") from e
        try:
            if face_index > 0 or (path is not None and path.suffix.lower() in (".ttc", ".otc")):
                ttfont = TTFont(BytesIO(data), fontNumber=face_index, lazy=True)
            else:
                ttfont = TTFont(BytesIO(data), lazy=True)
        except (TTLibError, OSError, ValueError) as e:
            where = path if path is not None else f"<{len(data)} bytes>"
            raise FontNotFoundError(f"Cannot parse font {where}: {e}") from e

        log.debug("Loaded font for '%s' from %s (face %d)", key, path or "bytes", face_index)
        return LoadedFont(key=key, data=data, face_index=face_index, ttfont=ttfont, path=path)

    @staticmethod
    def _font_dirs() -> list[Path]:
        """Platform font directories that exist on this machine."""
        home = Path.home()
        if sys.platform == "darwin":
            dirs = [Path("/System/Library/Fonts"), Path("/Library/Fonts"), home / "Library" / "Fonts"]
        elif sys.platform.startswith("win"):
            dirs = [Path("C:/Windows/Fonts"), home / "AppData" / "Local" / "Microsoft" / "Windows" / "Fonts"]
        else:
            dirs = [Path("/usr/share/fonts"), Path("/usr/local/share/fonts"), home / ".fonts", home / ".local" / "share" / "fonts"]
        return [d for d in dirs if d.exists()]

    def find_system_font(self, family: str) -> tuple[Path, int] | None:
        """Locate an installed font by family name.

        Uses fontconfig's ``fc-match`` when available, then falls back to a
        file-name scan of the platform font directories.
        """
        try:
            result = subprocess.run(
                ["fc-match", "--format=%{file}\\n%{index}", f"{family}:style=Regular"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            if result.returncode == 0:
                lines = result.stdout.strip().split("\n")
                if lines and lines[0]:
                    font_file = Path(lines[0])
                    face_index = int(lines[1]) if len(lines) > 1 and lines[1].isdigit() else 0
                    if font_file.exists():
                        return font_file, face_index
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            log.debug("fc-match unavailable: %s", e)

        wanted = family.lower().replace(" ", "")
        for font_dir in self._font_dirs():
            for suffix in ("*.ttf", "*.otf", "*.ttc"):
                for candidate in font_dir.rglob(suffix):
                    if candidate.stem.lower().replace(" ", "").replace("-", "").startswith(wanted):
                        return candidate, 0
        return None
