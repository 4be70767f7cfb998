"""Fonts command - font assignment utilities."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from svg_laser_text.config import Config
from svg_laser_text.exceptions import FontNotFoundError
from svg_laser_text.fonts import FontCache
from svg_laser_text.shaping.scripts import classify

console = Console()


@click.group()
def fonts() -> None:
    """Font management commands."""
    pass


@fonts.command("list")
@click.pass_context
def list_fonts(ctx: click.Context) -> None:
    """List the font assigned to each script."""
    config = ctx.obj.get("config") or Config()
    cache = FontCache.from_config(config)

    table = Table(title="Configured Fonts")
    table.add_column("Script", style="cyan")
    table.add_column("Family", style="green")
    table.add_column("Glyphs", style="yellow", justify="right")
    table.add_column("Path", style="dim")

    failed = 0
    for script in cache.scripts():
        path = cache.source_of(script)
        try:
            font = cache.get(script)
        except FontNotFoundError as e:
            table.add_row(script, "[red]unreadable[/red]", "-", str(path))
            console.print(f"[yellow]Warning:[/yellow] {e}")
            failed += 1
            continue
        table.add_row(script, font.family, str(len(font.cmap)), str(path) if path else "<bytes>")

    console.print(table)
    console.print(f"\n[bold]Total:[/bold] {len(cache.scripts())} fonts")
    if failed:
        raise SystemExit(1)


@fonts.command("coverage")
@click.argument("text")
@click.pass_context
def coverage(ctx: click.Context, text: str) -> None:
    """Show which font draws each character of TEXT."""
    config = ctx.obj.get("config") or Config()
    cache = FontCache.from_config(config)

    table = Table(title="Coverage")
    table.add_column("Char", style="cyan")
    table.add_column("Codepoint", style="dim")
    table.add_column("Script", style="green")
    table.add_column("Font", style="yellow")

    missing = 0
    for char in dict.fromkeys(text):
        script = classify(char)
        font = cache.font_for_char(char, script)
        if font is None:
            name = "[red]missing[/red]"
            if char.strip():
                missing += 1
        else:
            name = f"{font.family} ({font.key})"
        table.add_row(repr(char), f"U+{ord(char):04X}", script, name)

    console.print(table)
    if missing:
        console.print(f"[yellow]{missing} character(s) have no font[/yellow]")


@fonts.command("find")
@click.argument("name")
def find_font(name: str) -> None:
    """Find an installed font by family name."""
    cache = FontCache()

    with console.status(f"[bold green]Searching for '{name}'..."):
        match = cache.find_system_font(name)

    if match is None:
        console.print(f"[red]Not found:[/red] {name}")
        raise SystemExit(1)
    font_path, face_index = match
    console.print(f"[green]Found:[/green] {font_path}")
    console.print(f"[dim]Face index:[/dim] {face_index}")
