"""CLI commands for svg-laser-text."""

from svg_laser_text.cli.commands.render import render
from svg_laser_text.cli.commands.batch import batch
from svg_laser_text.cli.commands.fonts import fonts
from svg_laser_text.cli.commands.compare import compare

__all__ = ["render", "batch", "fonts", "compare"]
