"""Glyph outlines as pen recordings and their SVG path serialization."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from fontTools.pens.basePen import decomposeQuadraticSegment, decomposeSuperBezierSegment

from svg_laser_text.models import InkBox, Outline


def format_number(value: float, precision: int = 3) -> str:
    """Fixed precision with trailing zeros trimmed (``12.500`` -> ``12.5``)."""
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def scale_recording(
    recording: Iterable[tuple[str, Sequence]], scale: float, dx: float = 0.0, dy: float = 0.0
) -> Outline:
    """Map font-unit pen operations (y-up) into canvas units (y-down).

    Each point becomes ``(dx + x * scale, dy - y * scale)``.
    """
    ops = []
    for op, args in recording:
        points = tuple(None if pt is None else (dx + pt[0] * scale, dy - pt[1] * scale) for pt in args)
        ops.append((op, points))
    return tuple(ops)


def outline_extents(outline: Outline) -> InkBox | None:
    """Control-point box of an outline; ``None`` when it has no points."""
    points = [pt for _op, args in outline for pt in args if pt is not None]
    xs = [x for x, _y in points]
    ys = [y for _x, y in points]
    if not xs:
        return None
    return (min(xs), min(ys), max(xs), max(ys))


def outline_to_path_data(outline: Outline, dx: float = 0.0, dy: float = 0.0, precision: int = 3) -> str:
    """Serialize pen operations to SVG path commands, offset by ``(dx, dy)``.

    TrueType quadratic runs and cubic runs with more than three points are
    split with fontTools' segment decomposition, so implied on-curve points
    are kept.
    """
    fmt = lambda v: format_number(v, precision)  # noqa: E731
    pt = lambda p: f"{fmt(p[0] + dx)} {fmt(p[1] + dy)}"  # noqa: E731
    commands = []

    for op, args in outline:
        if op == "moveTo":
            commands.append(f"M{pt(args[0])}")
        elif op == "lineTo":
            commands.append(f"L{pt(args[0])}")
        elif op == "qCurveTo":
            points = list(args)
            if points[-1] is None:
                # Contour of off-curve points only: it starts and ends on the
                # implied point between the last and first off-curve points.
                first, last = points[0], points[-2]
                start = ((first[0] + last[0]) / 2, (first[1] + last[1]) / 2)
                commands.append(f"M{pt(start)}")
                points = points[:-1] + [start]
            if len(points) == 1:
                commands.append(f"L{pt(points[0])}")
                continue
            for control, on_curve in decomposeQuadraticSegment(points):
                commands.append(f"Q{pt(control)} {pt(on_curve)}")
        elif op == "curveTo":
            if len(args) == 1:
                commands.append(f"L{pt(args[0])}")
            elif len(args) == 2:
                commands.append(f"Q{pt(args[0])} {pt(args[1])}")
            else:
                for c1, c2, on_curve in decomposeSuperBezierSegment(list(args)):
                    commands.append(f"C{pt(c1)} {pt(c2)} {pt(on_curve)}")
        elif op == "closePath":
            commands.append("Z")

    return " ".join(commands)
