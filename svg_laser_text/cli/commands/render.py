"""Render command - text to SVG."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from svg_laser_text.api import RenderContext, RenderResult
from svg_laser_text.config import Config, FontEntry
from svg_laser_text.exceptions import InvalidSettingsError
from svg_laser_text.models import Direction, DisplayMode, RenderSettings

console = Console()
err_console = Console(stderr=True)


def parse_script_fonts(values: tuple[str, ...]) -> dict[str, FontEntry]:
    """Parse repeated ``TAG=PATH`` options."""
    fonts = {}
    for value in values:
        tag, sep, path = value.partition("=")
        if not sep or not tag.strip() or not path.strip():
            raise click.BadParameter(f"expected TAG=PATH, got '{value}'", param_hint="--script-font")
        fonts[tag.strip().lower()] = FontEntry(Path(path.strip()).expanduser())
    return fonts


def with_font_overrides(config: Config, font: Path | None, script_fonts: tuple[str, ...]) -> Config:
    fonts = dict(config.fonts)
    fonts.update(parse_script_fonts(script_fonts))
    changes: dict = {"fonts": fonts}
    if font is not None:
        changes["default_font"] = FontEntry(font)
    return dataclasses.replace(config, **changes)


def print_bounds(result: RenderResult, unit: str) -> None:
    table = Table(title="Layout")
    table.add_column("Measure", style="cyan")
    table.add_column("Value", style="green", justify="right")
    frame, bounds = result.frame, result.bounds
    rows = [
        ("Canvas width", frame.canvas_width),
        ("Canvas height", frame.canvas_height),
        ("Baseline", frame.baseline_y),
        ("Typographic width", bounds.typographic_width),
        ("Typographic height", bounds.typographic_height),
        ("Ink min x", bounds.actual_min_x),
        ("Ink max x", bounds.actual_max_x),
        ("Ink min y", bounds.actual_min_y),
        ("Ink max y", bounds.actual_max_y),
    ]
    for name, value in rows:
        table.add_row(name, f"{value:.3f} {unit}")
    err_console.print(table)


@click.command()
@click.argument("text")
@click.option("--font-size", "-s", type=float, default=30.0, show_default=True, help="Font size in output units")
@click.option("--fill", "fill_color", default="#000000", show_default=True, help="Fill color")
@click.option("--stroke", "stroke_color", default="none", show_default=True, help="Stroke color")
@click.option("--stroke-width", type=float, default=0.0, show_default=True, help="Stroke width")
@click.option("--letter-spacing", type=float, default=0.0, show_default=True, help="Extra space after each glyph")
@click.option(
    "--direction",
    type=click.Choice([d.value for d in Direction]),
    default=Direction.AUTO.value,
    show_default=True,
    help="Paragraph direction",
)
@click.option(
    "--mode",
    "display_mode",
    type=click.Choice([m.value for m in DisplayMode]),
    default=DisplayMode.TEXT.value,
    show_default=True,
    help="Rendering backend",
)
@click.option("--features", help="OpenType features for shaped modes, e.g. 'kern,-liga'")
@click.option("--font", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Default font file")
@click.option("--script-font", multiple=True, metavar="TAG=PATH", help="Font for one script (repeatable)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Output SVG (stdout if omitted)")
@click.option("--show-bounds", is_flag=True, help="Print canvas and ink bounds")
@click.pass_context
def render(
    ctx: click.Context,
    text: str,
    font_size: float,
    fill_color: str,
    stroke_color: str,
    stroke_width: float,
    letter_spacing: float,
    direction: str,
    display_mode: str,
    features: str | None,
    font: Path | None,
    script_font: tuple[str, ...],
    output: Path | None,
    show_bounds: bool,
) -> None:
    """Render TEXT to SVG.

    A literal "\\n" in TEXT starts a new line.
    """
    config = with_font_overrides(ctx.obj.get("config") or Config(), font, script_font)

    try:
        settings = RenderSettings(
            text=text.replace("\\n", "\n"),
            font_size=font_size,
            fill_color=fill_color,
            stroke_color=stroke_color,
            stroke_width=stroke_width,
            letter_spacing=letter_spacing,
            direction=direction,
            display_mode=display_mode,
            features=features or (),
        )
    except InvalidSettingsError as e:
        err_console.print(f"[red]Invalid settings:[/red] {e}")
        raise SystemExit(1) from e

    with RenderContext.from_config(config) as context:
        result = context.render(settings)

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")

    if not result.success:
        err_console.print(f"[red]Error ({result.error_kind.value}):[/red] {result.message}")
        raise SystemExit(1)

    if show_bounds:
        print_bounds(result, config.unit)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(result.svg, encoding="utf-8")
        console.print(f"[green]Wrote[/green] {output}")
    else:
        click.echo(result.svg)
