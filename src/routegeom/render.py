"""SVG rendering of drawings: path data, line-end decorations, file export.

Everything here works in pixels. Drawings are stored in feet and go through
``FieldCoordinateSystem.feet_to_pixels`` on the way out.
"""

from __future__ import annotations

import math
from typing import Iterable, NamedTuple

import numpy as np
import svgwrite  # type: ignore[reportMissingTypeStubs]

from ..utils import debug
from .chaikin import smoothed_points
from .coordinates import FieldCoordinateSystem
from .curves import drawing_polyline, resolve_segments
from .field import (
    ARROW_ANGLE_RADIANS,
    ARROW_LENGTH_MULTIPLIER,
    DASH_PATTERN_GAP_MULTIPLIER,
    DASH_PATTERN_LENGTH_MULTIPLIER,
    LINE_OF_SCRIMMAGE,
    PLAYER_RADIUS_FEET,
    TSHAPE_LENGTH_MULTIPLIER,
)
from .model import (
    Coordinate,
    Drawing,
    LineEnd,
    LineStyle,
    PathStyle,
    Player,
    SegmentType,
)

LINKED_INDICATOR_RADIUS_PX = 4.0
LINKED_INDICATOR_COLOR = "#3b82f6"
# Path ids let load_drawings_svg tell routes from their decorations.
ROUTE_ID_PREFIX = "route-"
LINE_END_ID_PREFIX = "line-end-"


class EndDirection(NamedTuple):
    angle: float  # radians, pixel space (y down)
    point: Coordinate


class RenderedPath(NamedTuple):
    d: str
    end_points: list[Coordinate]
    end_direction: EndDirection | None


def format_number(value: float, precision: int = 3) -> str:
    """Fixed-point with trailing zeros trimmed: 12.5, 3, -0.125."""
    text = f"{float(value):.{precision}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def _xy(c: Coordinate) -> str:
    return f"{format_number(c.x)} {format_number(c.y)}"


def _direction(points: list[Coordinate]) -> EndDirection | None:
    """Heading into the last point, skipping coincident predecessors."""
    if len(points) < 2:
        return None
    end = points[-1]
    for prev in reversed(points[:-1]):
        if prev != end:
            return EndDirection(math.atan2(end.y - prev.y, end.x - prev.x), end)
    return None


def build_path(drawing: Drawing, coord_system: FieldCoordinateSystem) -> RenderedPath:
    """Pixel-space SVG path data for a drawing.

    Curve-mode line drawings are drawn as the Chaikin polyline. Everything else
    emits one ``L``/``Q``/``C`` command per segment after an initial ``M``.
    """
    if not drawing.segments:
        return RenderedPath("", [], None)

    def to_px(c: Coordinate) -> Coordinate:
        return coord_system.feet_to_pixels(c.x, c.y)

    smoothed = smoothed_points(drawing, lambda p: to_px(p.coordinate))
    if smoothed is not None:
        if len(smoothed) < 2:
            return RenderedPath("", [], None)
        parts = [f"M {_xy(smoothed[0])}"]
        parts.extend(f"L {_xy(c)}" for c in smoothed[1:])
        return RenderedPath(
            " ".join(parts),
            [smoothed[0], smoothed[-1]],
            _direction(smoothed),
        )

    commands: list[str] = []
    end_points: list[Coordinate] = []
    last_run: list[Coordinate] = []
    for segment in resolve_segments(drawing):
        start = to_px(segment.start)
        controls = [to_px(c) for c in segment.controls]
        end = to_px(segment.end)
        if not commands:
            commands.append(f"M {_xy(start)}")
        if segment.type == SegmentType.CUBIC:
            commands.append(f"C {_xy(controls[0])} {_xy(controls[1])} {_xy(end)}")
        elif segment.type == SegmentType.QUADRATIC:
            commands.append(f"Q {_xy(controls[0])} {_xy(end)}")
        else:
            commands.append(f"L {_xy(end)}")
        end_points.append(end)
        last_run = [start, *controls, end]
    return RenderedPath(" ".join(commands), end_points, _direction(last_run))


def build_path_d(drawing: Drawing, coord_system: FieldCoordinateSystem) -> str:
    return build_path(drawing, coord_system).d


def build_arrow(end_point: Coordinate, angle: float, stroke_width_px: float) -> str:
    """Two barbs of ``3.5 x stroke`` at +-30 degrees, drawn back from the tip."""
    length = stroke_width_px * ARROW_LENGTH_MULTIPLIER
    parts = []
    for a in (angle - ARROW_ANGLE_RADIANS, angle + ARROW_ANGLE_RADIANS):
        barb = Coordinate(
            end_point.x - length * math.cos(a),
            end_point.y - length * math.sin(a),
        )
        parts.append(f"M {_xy(end_point)} L {_xy(barb)}")
    return " ".join(parts)


def build_t_shape(end_point: Coordinate, angle: float, stroke_width_px: float) -> str:
    """Perpendicular bar of half-length ``2.5 x stroke`` centred on the end."""
    length = stroke_width_px * TSHAPE_LENGTH_MULTIPLIER
    perp = angle + math.pi / 2.0
    dx = length * math.cos(perp)
    dy = length * math.sin(perp)
    left = Coordinate(end_point.x - dx, end_point.y - dy)
    right = Coordinate(end_point.x + dx, end_point.y + dy)
    return f"M {_xy(left)} L {_xy(right)}"


def line_end_path_d(
    line_end: LineEnd, end_direction: EndDirection | None, stroke_width_px: float
) -> str | None:
    if end_direction is None or line_end == LineEnd.NONE:
        return None
    if line_end == LineEnd.ARROW:
        return build_arrow(end_direction.point, end_direction.angle, stroke_width_px)
    return build_t_shape(end_direction.point, end_direction.angle, stroke_width_px)


def stroke_width_px(style: PathStyle, coord_system: FieldCoordinateSystem) -> float:
    return coord_system.feet_to_pixel_length(style.stroke_width)


def dash_array(style: PathStyle, coord_system: FieldCoordinateSystem) -> list[float]:
    """Empty for solid lines, ``[3w, 2w]`` (w = stroke in px) for dashed ones."""
    if style.line_style != LineStyle.DASHED:
        return []
    w = stroke_width_px(style, coord_system)
    return [w * DASH_PATTERN_LENGTH_MULTIPLIER, w * DASH_PATTERN_GAP_MULTIPLIER]


def export_drawings_svg(
    out_path: str,
    drawings: Iterable[Drawing],
    coord_system: FieldCoordinateSystem,
    players: Iterable[Player] = (),
    *,
    background: str | None = "#ffffff",
    show_line_of_scrimmage: bool = True,
) -> None:
    width, height = coord_system.get_dimensions()
    dwg = svgwrite.Drawing(out_path, profile="tiny", size=(width, height))
    dwg.attribs["viewBox"] = f"0 0 {format_number(width)} {format_number(height)}"

    if background is not None:
        dwg.add(dwg.rect(insert=(0, 0), size=(width, height), fill=background))
    if show_line_of_scrimmage:
        _, los_y = coord_system.feet_to_pixels(0.0, LINE_OF_SCRIMMAGE)
        dwg.add(
            dwg.line(
                start=(0, los_y),
                end=(width, los_y),
                stroke="#777777",
                stroke_width=1,
            )
        )

    count = 0
    for drawing in drawings:
        rendered = build_path(drawing, coord_system)
        if not rendered.d:
            continue
        w = stroke_width_px(drawing.style, coord_system)
        kwargs: dict[str, object] = {
            "stroke": drawing.style.color,
            "fill": "none",
            "stroke_width": w,
            "stroke_linecap": "round",
            "stroke_linejoin": "round",
        }
        dashes = dash_array(drawing.style, coord_system)
        if dashes:
            kwargs["stroke_dasharray"] = ",".join(format_number(v) for v in dashes)
        group = dwg.g()
        group.add(dwg.path(d=rendered.d, id=f"{ROUTE_ID_PREFIX}{drawing.id}", **kwargs))

        ending = line_end_path_d(drawing.style.line_end, rendered.end_direction, w)
        if ending is not None:
            group.add(
                dwg.path(
                    d=ending,
                    id=f"{LINE_END_ID_PREFIX}{drawing.id}",
                    stroke=drawing.style.color,
                    fill="none",
                    stroke_width=w,
                    stroke_linecap="round",
                    stroke_linejoin="round",
                )
            )
        linked = (
            drawing.points.get(drawing.linked_point_id)
            if drawing.player_id and drawing.linked_point_id
            else None
        )
        if linked is not None:
            cx, cy = coord_system.feet_to_pixels(linked.x, linked.y)
            group.add(
                dwg.circle(
                    center=(cx, cy),
                    r=LINKED_INDICATOR_RADIUS_PX,
                    fill=LINKED_INDICATOR_COLOR,
                    stroke="white",
                    stroke_width=1,
                )
            )
        dwg.add(group)
        count += 1

    radius = coord_system.feet_to_pixel_length(PLAYER_RADIUS_FEET)
    for player in players:
        cx, cy = coord_system.feet_to_pixels(player.x, player.y)
        dwg.add(
            dwg.circle(
                center=(cx, cy),
                r=radius,
                fill=player.color,
                fill_opacity=0.4 if player.is_ghost else 1.0,
                stroke="#000000",
                stroke_width=1,
            )
        )

    dwg.save()
    debug.log(f"wrote {count} drawings to {out_path}", scope="svg")


def pixel_polyline(
    drawing: Drawing, coord_system: FieldCoordinateSystem
) -> np.ndarray:
    P = drawing_polyline(drawing)
    if P.shape[0] == 0:
        return P
    s = coord_system.scale
    _, height = coord_system.get_dimensions()
    return np.stack([P[:, 0] * s, height - P[:, 1] * s], axis=1)
