"""Compare command - check that two renders share one canvas."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from svg_laser_text.exceptions import SVGParseError
from svg_laser_text.svg.parser import find_glyph_paths, find_text_elements, parse_svg, read_canvas

console = Console()


def _same(a: float, b: float, tolerance: float) -> bool:
    return abs(a - b) <= tolerance


@click.command()
@click.argument("reference", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("other", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--tolerance", type=float, default=1e-6, show_default=True, help="Allowed numeric difference")
def compare(reference: Path, other: Path, tolerance: float) -> None:
    """Compare the canvas of two SVG renders.

    REFERENCE and OTHER are typically the live-text and outline renders of
    the same text. Width, height, unit and viewBox must agree.
    """
    try:
        canvases = [read_canvas(parse_svg(path)) for path in (reference, other)]
        roots = [parse_svg(path).getroot() for path in (reference, other)]
    except SVGParseError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e

    a, b = canvases
    checks = [
        ("width", f"{a.width:g}", f"{b.width:g}", _same(a.width, b.width, tolerance)),
        ("height", f"{a.height:g}", f"{b.height:g}", _same(a.height, b.height, tolerance)),
        ("unit", a.unit or "-", b.unit or "-", a.unit == b.unit),
    ]
    if a.view_box is None or b.view_box is None:
        vb_ok = a.view_box == b.view_box
    else:
        vb_ok = all(_same(x, y, tolerance) for x, y in zip(a.view_box, b.view_box))
    fmt_vb = lambda vb: " ".join(f"{v:g}" for v in vb) if vb else "-"  # noqa: E731
    checks.append(("viewBox", fmt_vb(a.view_box), fmt_vb(b.view_box), vb_ok))

    table = Table(title="Canvas comparison")
    table.add_column("Property", style="cyan")
    table.add_column(reference.name, style="blue")
    table.add_column(other.name, style="blue")
    table.add_column("Match")
    for name, left, right, ok in checks:
        table.add_row(name, left, right, "[green]yes[/green]" if ok else "[red]no[/red]")
    console.print(table)

    for path, root in zip((reference, other), roots):
        console.print(
            f"  [dim]{path.name}:[/dim] {len(find_text_elements(root))} text, "
            f"{len(find_glyph_paths(root))} path elements"
        )

    if not all(ok for *_rest, ok in checks):
        console.print("[red]Canvas mismatch[/red]")
        raise SystemExit(1)
    console.print("[green]Canvas match[/green]")
