"""Render entry point.

Example:
    >>> from svg_laser_text import RenderContext, RenderSettings
    >>> with RenderContext.from_config() as context:
    ...     result = context.render(RenderSettings("Hello", display_mode="outline"))
    >>> result.frame.baseline_y
    36.0
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import Any

from svg_laser_text.config import Config
from svg_laser_text.exceptions import DependencyUnavailableError, ErrorKind, LaserTextError
from svg_laser_text.fonts.cache import FontCache
from svg_laser_text.fonts.metrics import FontCacheMetrics
from svg_laser_text.layout.aligner import LayoutAligner
from svg_laser_text.layout.bounds import BoundsCalculator
from svg_laser_text.layout.modes import LayoutTools, mode_for
from svg_laser_text.layout.positioner import GlyphPositioner
from svg_laser_text.models import Bounds, LayoutFrame, PositionedGlyph, RenderSettings
from svg_laser_text.shaping.bidi import BidiEngine, BidiReorderer, PythonBidiEngine, visual_text
from svg_laser_text.shaping.harfbuzz import HarfBuzzEngine, ShapingAdapter, ShapingEngine
from svg_laser_text.svg.writer import SVGAssembler

log = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """Outcome of a render: markup on success, an error kind and message otherwise."""

    success: bool
    svg: str = ""
    frame: LayoutFrame = field(default_factory=LayoutFrame.empty)
    bounds: Bounds = field(default_factory=Bounds)
    glyphs: list[PositionedGlyph] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    visual_text: str = ""
    error_kind: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, warnings: list[str] | None = None) -> RenderResult:
        return cls(success=False, error_kind=kind, message=message, warnings=list(warnings or []))


def join_futures(*futures: Future) -> Future:
    """A future that completes once every input future has completed.

    Its result is the tuple of results; if any input failed, it carries the
    first failure in argument order.
    """
    joined: Future = Future()
    remaining = [len(futures)]
    lock = threading.Lock()

    def on_done(_future: Future) -> None:
        with lock:
            remaining[0] -= 1
            if remaining[0]:
                return
        for future in futures:
            if future.cancelled():
                joined.cancel()
                return
            error = future.exception()
            if error is not None:
                joined.set_exception(error)
                return
        joined.set_result(tuple(future.result() for future in futures))

    if not futures:
        joined.set_result(())
    for future in futures:
        future.add_done_callback(on_done)
    return joined


class RenderContext:
    """Holds fonts and engine handles for a session of renders.

    The bidi engine and the shaping engine initialize independently on a
    thread pool once :meth:`start` is called (``render`` calls it lazily).
    Modes that do not shape only wait for the bidi engine, so they keep
    working when HarfBuzz is unavailable.

    Renders must be serialized by the caller.
    """

    def __init__(
        self,
        fonts: FontCache,
        config: Config | None = None,
        *,
        bidi_factory: Callable[[], BidiEngine] = PythonBidiEngine,
        shaping_factory: Callable[[], ShapingEngine] = HarfBuzzEngine,
        executor: Executor | None = None,
    ) -> None:
        self.fonts = fonts
        self.config = config or Config()
        self._bidi_factory = bidi_factory
        self._shaping_factory = shaping_factory
        self._executor = executor
        self._owns_executor = executor is None
        self._bidi_future: Future | None = None
        self._shaper_future: Future | None = None
        self._ready: Future | None = None

        self.metrics = FontCacheMetrics(fonts)
        self.positioner = GlyphPositioner(self.config.placeholder_advance)
        self.aligner = LayoutAligner(self.config.padding, self.config.minimum_width)
        self.bounds_calculator = BoundsCalculator()
        self.assembler = SVGAssembler(self.config.precision, self.config.unit, self.config.font_family)

    @classmethod
    def from_config(cls, config: Config | None = None, **kwargs: Any) -> RenderContext:
        config = config or Config.load()
        return cls(FontCache.from_config(config), config, **kwargs)

    def __enter__(self) -> RenderContext:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self) -> Future:
        """Begin both engine initializations; returns the joined readiness future."""
        if self._ready is not None:
            return self._ready
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="svg-laser-text-init")
        self._bidi_future = self._executor.submit(self._bidi_factory)
        self._shaper_future = self._executor.submit(self._shaping_factory)
        self._ready = join_futures(self._bidi_future, self._shaper_future)
        return self._ready

    def ready(self) -> Future:
        """Future resolving to ``(bidi_engine, shaping_engine)`` when both are up."""
        return self.start()

    def close(self) -> None:
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def _wait(self, future: Future, name: str) -> Any:
        timeout = self.config.init_timeout
        try:
            return future.result(timeout=timeout)
        except FuturesTimeoutError as e:
            raise DependencyUnavailableError(f"The {name} did not become ready within {timeout:g} seconds.") from e
        except DependencyUnavailableError:
            raise
        except Exception as e:
            raise DependencyUnavailableError(f"The {name} failed to initialize: {e}") from e

    def bidi_engine(self) -> BidiEngine:
        self.start()
        return self._wait(self._bidi_future, "bidi engine")

    def shaping_engine(self) -> ShapingEngine:
        self.start()
        return self._wait(self._shaper_future, "shaping engine")

    def render(self, settings: RenderSettings) -> RenderResult:
        """Render ``settings`` to SVG. Never raises for recoverable conditions."""
        if not settings.text:
            log.debug("Empty input, nothing to render")
            return RenderResult(
                success=True,
                bounds=Bounds.zero(),
                error_kind=ErrorKind.EMPTY_INPUT,
                message="Nothing to render.",
            )

        mode = mode_for(settings.display_mode)
        try:
            if self.fonts.default is None:
                raise DependencyUnavailableError("No default font is loaded.")
            reorderer = BidiReorderer(self.bidi_engine())
            shaper = None
            if mode.needs_shaper:
                shaper = ShapingAdapter(self.shaping_engine(), self.fonts, self.config.placeholder_advance)
        except LaserTextError as e:
            log.error("Render aborted: %s", e)
            return RenderResult.failure(ErrorKind.DEPENDENCY_UNAVAILABLE, str(e))

        tools = LayoutTools(
            positioner=self.positioner,
            metrics=self.metrics,
            shaper=shaper,
            features=settings.features or tuple(self.config.features),
        )

        warnings: list[str] = []
        layouts = []
        visual_lines = []
        try:
            for line_no, line in enumerate(settings.lines):
                reordered = reorderer.analyze(line, settings.direction)
                if reordered.warning:
                    warnings.append(reordered.warning)
                visual_lines.append(visual_text(line, reordered.order))
                layout = mode.layout_line(line, reordered.order, settings, tools, line=line_no)
                warnings.extend(layout.warnings)
                layouts.append(layout)
        except LaserTextError as e:
            log.error("Render aborted: %s", e)
            return RenderResult.failure(e.kind or ErrorKind.DEPENDENCY_UNAVAILABLE, str(e), warnings)

        line_widths = [layout.width for layout in layouts]
        frame = self.aligner.frame(settings, max(line_widths, default=0.0), len(layouts))
        glyphs = self.aligner.place((g for layout in layouts for g in layout.glyphs), frame, line_widths)

        drawable = [g for g in glyphs if not g.is_blank]
        missing = [g for g in drawable if g.missing]
        if drawable and len(missing) == len(drawable):
            return RenderResult.failure(
                ErrorKind.GLYPH_UNAVAILABLE, "No loaded font can draw this text.", warnings
            )
        if missing:
            chars = "".join(sorted({g.char for g in missing}))
            warnings.append(f"{len(missing)} character(s) without a glyph were skipped: {chars}")

        bounds = self.bounds_calculator.bounds(glyphs, frame, settings.font_size, line_widths)
        svg = self.assembler.assemble(glyphs, frame, settings, mode.style)
        log.debug(
            "Rendered %d line(s) mode=%s canvas=%.3fx%.3f",
            len(layouts), mode.display_mode.value, frame.canvas_width, frame.canvas_height,
        )
        return RenderResult(
            success=True,
            svg=svg,
            frame=frame,
            bounds=bounds,
            glyphs=glyphs,
            warnings=warnings,
            visual_text="\n".join(visual_lines),
        )


def render(settings: RenderSettings, context: RenderContext) -> RenderResult:
    return context.render(settings)
