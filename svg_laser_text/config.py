"""Configuration loading for svg-laser-text.

Configuration is read from YAML. Lookup order for :meth:`Config.load`:

1. explicit ``path`` argument
2. ``$SVG_LASER_TEXT_CONFIG``
3. ``~/.config/svg-laser-text/config.yaml``
4. built-in defaults

Example::

    fonts:
      latin: /usr/share/fonts/truetype/dejavu/DejaVuSans.ttf
      hebrew:
        path: /usr/share/fonts/opentype/noto/NotoSansHebrew-Regular.ttf
        face_index: 0
    default_font: /usr/share/fonts/truetype/dejavu/DejaVuSans.ttf
    unit: mm
    precision: 3
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from svg_laser_text.exceptions import ConfigError

CONFIG_ENV_VAR = "SVG_LASER_TEXT_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "svg-laser-text" / "config.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class FontEntry:
    """A font file assigned to a script tag."""

    path: Path
    face_index: int = 0


@dataclass
class Config:
    """Runtime configuration (fonts, output units, layout tolerances)."""

    fonts: dict[str, FontEntry] = field(default_factory=dict)
    default_font: FontEntry | None = None
    default_family: str | None = "DejaVu Sans"
    font_family: str = "LaserText"
    unit: str = "mm"
    precision: int = 3
    padding: float = 0.0
    minimum_width: float = 1.0
    placeholder_advance: float = 0.5
    init_timeout: float | None = 30.0
    features: list[str] = field(default_factory=list)
    log_level: str = "WARNING"

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from ``path`` or the default locations."""
        if path is not None:
            config_path = Path(path)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_path}")
            return cls.from_file(config_path)

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return cls.from_file(Path(env_path))

        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_file(DEFAULT_CONFIG_PATH)
        return cls()

    @classmethod
    def from_file(cls, path: Path) -> Config:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML syntax in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")
        return cls.from_dict(data, base_dir=path.parent)

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> Config:
        """Build a Config from parsed YAML, validating each key."""
        config = cls()

        fonts = data.get("fonts") or {}
        if not isinstance(fonts, dict):
            raise ConfigError("'fonts' must map script tags to font paths")
        config.fonts = {
            str(tag).lower(): _font_entry(value, base_dir, f"fonts.{tag}")
            for tag, value in fonts.items()
        }

        if data.get("default_font") is not None:
            config.default_font = _font_entry(data["default_font"], base_dir, "default_font")
        if "default_family" in data:
            family = data["default_family"]
            config.default_family = str(family) if family else None
        if "font_family" in data:
            config.font_family = str(data["font_family"])

        if "unit" in data:
            unit = str(data["unit"])
            if unit not in ("mm", "cm", "in", "pt", "px"):
                raise ConfigError(f"Unsupported unit '{unit}'")
            config.unit = unit

        if "precision" in data:
            precision = data["precision"]
            if not isinstance(precision, int) or isinstance(precision, bool) or not 0 <= precision <= 12:
                raise ConfigError("'precision' must be an integer between 0 and 12")
            config.precision = precision

        config.padding = _number(data, "padding", config.padding, minimum=0.0)
        config.minimum_width = _number(data, "minimum_width", config.minimum_width, minimum=0.0)
        config.placeholder_advance = _number(
            data, "placeholder_advance", config.placeholder_advance, minimum=0.0
        )

        if "init_timeout" in data:
            timeout = data["init_timeout"]
            config.init_timeout = None if timeout is None else _number(data, "init_timeout", 0.0, minimum=0.0)

        features = data.get("features") or []
        if isinstance(features, str):
            features = [f.strip() for f in features.split(",") if f.strip()]
        if not isinstance(features, list):
            raise ConfigError("'features' must be a list or comma separated string")
        config.features = [str(f) for f in features]

        if "log_level" in data:
            level = str(data["log_level"]).upper()
            if level not in _LOG_LEVELS:
                raise ConfigError(f"Invalid log_level '{data['log_level']}'")
            config.log_level = level

        return config


def _font_entry(value: Any, base_dir: Path | None, key: str) -> FontEntry:
    if isinstance(value, (str, Path)):
        raw_path, face_index = value, 0
    elif isinstance(value, dict) and "path" in value:
        raw_path = value["path"]
        face_index = value.get("face_index", 0)
        if not isinstance(face_index, int) or face_index < 0:
            raise ConfigError(f"'{key}.face_index' must be a non-negative integer")
    else:
        raise ConfigError(f"'{key}' must be a path or a mapping with 'path'")

    path = Path(str(raw_path)).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return FontEntry(path=path, face_index=face_index)


def _number(data: dict[str, Any], key: str, default: float, minimum: float | None = None) -> float:
    if key not in data:
        return default
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be a number")
    if minimum is not None and value < minimum:
        raise ConfigError(f"'{key}' must be >= {minimum}")
    return float(value)
