from __future__ import annotations

import numpy as np
from svgpathtools import (  # type: ignore[reportMissingTypeStubs]
    CubicBezier,
    Line,
    Path,
    QuadraticBezier,
    parse_path,
    svg2paths2,
)

from ..utils import debug
from .coordinates import FieldCoordinateSystem
from .curves import BEZIER_SAMPLE_POINTS
from .model import (
    ControlPoint,
    Coordinate,
    Drawing,
    LineStyle,
    PathSegment,
    PathStyle,
    PointType,
    SegmentType,
    new_drawing_id,
    retag_points,
)
from .render import LINE_END_ID_PREFIX, ROUTE_ID_PREFIX


def _to_feet(z: complex, coord_system: FieldCoordinateSystem) -> Coordinate:
    return coord_system.pixels_to_feet(float(z.real), float(z.imag))


def drawing_from_path(
    path: Path,
    coord_system: FieldCoordinateSystem,
    style: PathStyle | None = None,
    drawing_id: str | None = None,
) -> Drawing:
    """Build a drawing from an svgpathtools path in pixel space.

    Only the first continuous subpath is used. Lines and Bezier curves map to
    the matching segment types (cubics get inline handles); anything else,
    such as arcs, is flattened into line segments.
    """
    drawing = Drawing(
        id=new_drawing_id() if drawing_id is None else drawing_id,
        style=PathStyle() if style is None else style,
    )
    subpaths = path.continuous_subpaths()
    if not subpaths:
        return drawing
    if len(subpaths) > 1:
        debug.log(
            f"{drawing.id}: ignoring {len(subpaths) - 1} extra subpaths", scope="svg"
        )
    sub = subpaths[0]

    counter = 0

    def add_point(c: Coordinate, ptype: PointType = PointType.CORNER) -> ControlPoint:
        nonlocal counter
        pid = f"p-{counter}"
        counter += 1
        point = ControlPoint(id=pid, x=c.x, y=c.y, type=ptype)
        drawing.points[pid] = point
        return point

    current = add_point(_to_feet(sub.start, coord_system))
    for seg in sub:
        if isinstance(seg, Line):
            end = add_point(_to_feet(seg.end, coord_system))
            drawing.segments.append(
                PathSegment(type=SegmentType.LINE, point_ids=[current.id, end.id])
            )
        elif isinstance(seg, QuadraticBezier):
            control = add_point(_to_feet(seg.control, coord_system), PointType.CURVE)
            end = add_point(_to_feet(seg.end, coord_system))
            drawing.segments.append(
                PathSegment(
                    type=SegmentType.QUADRATIC,
                    point_ids=[current.id, control.id, end.id],
                )
            )
        elif isinstance(seg, CubicBezier):
            c1 = _to_feet(seg.control1, coord_system)
            c2 = _to_feet(seg.control2, coord_system)
            end = add_point(_to_feet(seg.end, coord_system))
            current.handle_out = Coordinate(c1.x - current.x, c1.y - current.y)
            end.handle_in = Coordinate(c2.x - end.x, c2.y - end.y)
            drawing.segments.append(
                PathSegment(type=SegmentType.CUBIC, point_ids=[current.id, end.id])
            )
        else:
            ts = np.linspace(0.0, 1.0, BEZIER_SAMPLE_POINTS + 1)[1:]
            for t in ts:
                end = add_point(_to_feet(seg.point(float(t)), coord_system))
                drawing.segments.append(
                    PathSegment(type=SegmentType.LINE, point_ids=[current.id, end.id])
                )
                current = end
            continue
        current = end
    return retag_points(drawing)


def drawing_from_path_d(
    d: str,
    coord_system: FieldCoordinateSystem,
    style: PathStyle | None = None,
    drawing_id: str | None = None,
) -> Drawing:
    """Inverse of ``render.build_path_d`` for non-smoothed drawings."""
    return drawing_from_path(parse_path(d), coord_system, style, drawing_id)


def style_from_attributes(
    attributes: dict[str, str], coord_system: FieldCoordinateSystem
) -> PathStyle:
    style = PathStyle()
    stroke = attributes.get("stroke")
    if stroke and stroke != "none":
        style.color = stroke
    width = _parse_float(attributes.get("stroke-width"))
    if width is not None and width > 0:
        # Stored in feet.
        style.stroke_width = coord_system.pixel_length_to_feet(width)
    dashes = attributes.get("stroke-dasharray")
    if dashes and dashes.strip() != "none":
        style.line_style = LineStyle.DASHED
    return style


def load_drawings_svg(
    svg_path: str, coord_system: FieldCoordinateSystem
) -> list[Drawing]:
    """Read route paths from an SVG file written in pixel space.

    Line-end decorations written by ``export_drawings_svg`` are skipped, and
    route ids are recovered from the path ids when present.
    """
    paths, attributes, _svg_attributes = svg2paths2(
        svg_path,
        convert_circles_to_paths=False,
        convert_ellipses_to_paths=False,
        convert_lines_to_paths=False,
        convert_polylines_to_paths=True,
        convert_polygons_to_paths=False,
        convert_rectangles_to_paths=False,
    )
    drawings: list[Drawing] = []
    for path, attrs in zip(paths, attributes):
        raw_id = attrs.get("id")
        if raw_id and raw_id.startswith(LINE_END_ID_PREFIX):
            continue
        drawing_id = None
        if raw_id:
            drawing_id = (
                raw_id[len(ROUTE_ID_PREFIX) :]
                if raw_id.startswith(ROUTE_ID_PREFIX)
                else raw_id
            )
        drawing = drawing_from_path(
            path, coord_system, style_from_attributes(attrs, coord_system), drawing_id
        )
        if drawing.segments:
            drawings.append(drawing)
    debug.log(f"loaded {len(drawings)} drawings from {svg_path}", scope="svg")
    return drawings


def _parse_float(value: str | None) -> float | None:
    if value is None:
        return None
    text = value.strip()
    if text.endswith("px"):
        text = text[:-2]
    try:
        return float(text)
    except ValueError:
        return None
