"""Command line interface for svg-laser-text."""

from svg_laser_text.cli.main import cli, main

__all__ = ["cli", "main"]
