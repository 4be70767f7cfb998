"""Batch command - render many texts from a YAML job list."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.progress import Progress

from svg_laser_text.api import RenderContext
from svg_laser_text.config import Config
from svg_laser_text.exceptions import InvalidSettingsError
from svg_laser_text.models import Direction, DisplayMode, RenderSettings

console = Console()

DEFAULT_TEMPLATE_NAME = "batch_config.yaml"

BATCH_TEMPLATE = """\
# svg-laser-text batch configuration
#
# Every job renders one text to one SVG file. Keys under 'settings' apply
# to all jobs; a job may override any of them.

settings:
  font_size: 30            # output units (mm by default)
  display_mode: outline    # text | outline | shaped | whole-line
  direction: auto          # ltr | rtl | auto
  letter_spacing: 0
  fill_color: "#000000"
  stroke_color: none
  stroke_width: 0
  features: []             # e.g. [kern, -liga] for shaped modes
  output_dir: output       # relative to this file
  continue_on_error: true

jobs:
  - text: "Hello"
    output: hello.svg
  - text: "שלום"
    output: shalom.svg
    direction: rtl
"""


class BatchConfigError(Exception):
    """Invalid batch YAML."""


@dataclass
class BatchSettings:
    """Defaults shared by every job of a batch."""

    font_size: float = 30.0
    display_mode: str = DisplayMode.OUTLINE.value
    direction: str = Direction.AUTO.value
    letter_spacing: float = 0.0
    fill_color: str = "#000000"
    stroke_color: str = "none"
    stroke_width: float = 0.0
    features: list[str] = field(default_factory=list)
    output_dir: Path = Path(".")
    continue_on_error: bool = True


# Job keys that map straight onto RenderSettings
RENDER_KEYS = (
    "font_size",
    "display_mode",
    "direction",
    "letter_spacing",
    "fill_color",
    "stroke_color",
    "stroke_width",
    "features",
)


@dataclass
class BatchJob:
    text: str
    output: Path
    overrides: dict[str, Any] = field(default_factory=dict)

    def settings(self, defaults: BatchSettings) -> RenderSettings:
        values = {key: getattr(defaults, key) for key in RENDER_KEYS}
        values.update(self.overrides)
        features = values.pop("features") or ()
        if isinstance(features, list):
            features = tuple(str(f) for f in features)
        return RenderSettings(text=self.text, features=features, **values)


@dataclass
class BatchConfig:
    settings: BatchSettings
    jobs: list[BatchJob]


def load_batch_config(path: Path) -> BatchConfig:
    """Read and validate a batch YAML file."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise BatchConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise BatchConfigError(f"Invalid YAML syntax: {e}") from e
    if not isinstance(data, dict):
        raise BatchConfigError("Batch config root must be a mapping")

    raw_settings = data.get("settings") or {}
    if not isinstance(raw_settings, dict):
        raise BatchConfigError("'settings' must be a mapping")
    known = {f.name for f in fields(BatchSettings)}
    unknown = sorted(set(raw_settings) - known)
    if unknown:
        raise BatchConfigError(f"Unknown settings: {', '.join(unknown)}")

    settings = BatchSettings(**{k: v for k, v in raw_settings.items() if k != "output_dir"})
    output_dir = Path(str(raw_settings.get("output_dir", ".")))
    if not output_dir.is_absolute():
        output_dir = path.parent / output_dir
    settings.output_dir = output_dir

    raw_jobs = data.get("jobs")
    if not isinstance(raw_jobs, list) or not raw_jobs:
        raise BatchConfigError("'jobs' must be a non-empty list")

    jobs = []
    for index, entry in enumerate(raw_jobs, start=1):
        if isinstance(entry, str):
            entry = {"text": entry}
        if not isinstance(entry, dict) or "text" not in entry:
            raise BatchConfigError(f"Job {index} needs a 'text' key")
        overrides = {k: v for k, v in entry.items() if k not in ("text", "output")}
        bad = sorted(set(overrides) - set(RENDER_KEYS))
        if bad:
            raise BatchConfigError(f"Job {index} has unknown keys: {', '.join(bad)}")
        output = Path(str(entry.get("output", f"text_{index:03d}.svg")))
        if not output.is_absolute():
            output = output_dir / output
        jobs.append(BatchJob(text=str(entry["text"]), output=output, overrides=overrides))

    return BatchConfig(settings=settings, jobs=jobs)


@click.group()
def batch() -> None:
    """Render many texts from a YAML job list."""
    pass


@batch.command("run")
@click.argument("config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def run(ctx: click.Context, config_file: Path) -> None:
    """Render every job in CONFIG_FILE, one after another."""
    try:
        batch_config = load_batch_config(config_file)
    except BatchConfigError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise SystemExit(1) from e

    config = ctx.obj.get("config") or Config()
    settings = batch_config.settings
    success_count = 0
    error_count = 0

    with RenderContext.from_config(config) as context, Progress(console=console) as progress:
        task = progress.add_task("[green]Rendering...", total=len(batch_config.jobs))
        for job in batch_config.jobs:
            try:
                try:
                    result = context.render(job.settings(settings))
                except InvalidSettingsError as e:
                    error = str(e)
                else:
                    error = None if result.success else result.message
                    if error is None:
                        job.output.parent.mkdir(parents=True, exist_ok=True)
                        job.output.write_text(result.svg, encoding="utf-8")

                if error is None:
                    success_count += 1
                else:
                    error_count += 1
                    console.print(f"[red]Error in {job.output.name}:[/red] {error}")
                    if not settings.continue_on_error:
                        raise SystemExit(1)
            finally:
                progress.advance(task)

    console.print()
    console.print("[bold]Batch complete:[/bold]")
    console.print(f"  [green]Success:[/green] {success_count}")
    console.print(f"  [red]Failed:[/red] {error_count}")
    console.print(f"  [blue]Output:[/blue] {settings.output_dir}")


@batch.command("template")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path), default=DEFAULT_TEMPLATE_NAME)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
def template(output: Path, force: bool) -> None:
    """Write a commented batch config template to OUTPUT."""
    if output.exists() and not force:
        if not click.confirm(f"{output} exists. Overwrite?", default=False):
            console.print("Aborted")
            return
    output.write_text(BATCH_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Template written:[/green] {output}")
