from __future__ import annotations

import math
from typing import NamedTuple, Sequence

import numpy as np
from shapely.geometry import LineString, Point

from .coordinates import FieldCoordinateSystem
from .field import DEFAULT_ERASE_SIZE_FEET, NODE_HIT_PADDING_PX
from .model import ControlPoint, Coordinate, Drawing, path_point_ids
from .render import pixel_polyline, stroke_width_px


class ClosestPoint(NamedTuple):
    point: Coordinate  # pixels
    distance: float  # pixels
    vertex_index: int  # nearest vertex of the displayed polyline


def point_to_segment_distance(p: Coordinate, a: Coordinate, b: Coordinate) -> float:
    dx = b.x - a.x
    dy = b.y - a.y
    length2 = dx * dx + dy * dy
    if length2 == 0.0:
        return math.hypot(p.x - a.x, p.y - a.y)
    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length2
    t = max(0.0, min(1.0, t))
    return math.hypot(p.x - (a.x + t * dx), p.y - (a.y + t * dy))


def _geometry(polyline: np.ndarray) -> LineString | Point | None:
    if polyline.shape[0] == 0:
        return None
    if polyline.shape[0] == 1:
        return Point(float(polyline[0, 0]), float(polyline[0, 1]))
    return LineString([(float(x), float(y)) for x, y in polyline])


def distance_to_drawing(
    drawing: Drawing, pixel: Coordinate, coord_system: FieldCoordinateSystem
) -> float:
    """Pixel distance from ``pixel`` to the drawing as displayed (inf if empty)."""
    geom = _geometry(pixel_polyline(drawing, coord_system))
    if geom is None:
        return math.inf
    return float(geom.distance(Point(pixel.x, pixel.y)))


def is_point_near_drawing(
    drawing: Drawing,
    coord_system: FieldCoordinateSystem,
    pixel: Coordinate,
    padding_px: float,
) -> bool:
    return distance_to_drawing(drawing, pixel, coord_system) <= padding_px


def nearest_node(
    drawing: Drawing,
    coord_system: FieldCoordinateSystem,
    pixel: Coordinate,
    padding_px: float = NODE_HIT_PADDING_PX,
    *,
    on_path_only: bool = True,
) -> ControlPoint | None:
    """Closest node within ``padding_px`` of the pointer, or None."""
    ids = path_point_ids(drawing) if on_path_only else list(drawing.points)
    best: ControlPoint | None = None
    best_d = math.inf
    for pid in ids:
        point = drawing.points[pid]
        px, py = coord_system.feet_to_pixels(point.x, point.y)
        d = math.hypot(pixel.x - px, pixel.y - py)
        if d <= padding_px and d < best_d:
            best, best_d = point, d
    return best


def is_point_near_control_point(
    drawing: Drawing,
    coord_system: FieldCoordinateSystem,
    pixel: Coordinate,
    padding_px: float = NODE_HIT_PADDING_PX,
) -> bool:
    """True if any pooled point is within ``padding_px``; a press there grabs a node."""
    return (
        nearest_node(drawing, coord_system, pixel, padding_px, on_path_only=False)
        is not None
    )


def closest_point_on_drawing(
    drawing: Drawing, pixel: Coordinate, coord_system: FieldCoordinateSystem
) -> ClosestPoint | None:
    polyline = pixel_polyline(drawing, coord_system)
    geom = _geometry(polyline)
    if geom is None:
        return None
    target = Point(pixel.x, pixel.y)
    if isinstance(geom, Point):
        return ClosestPoint(
            Coordinate(geom.x, geom.y), float(geom.distance(target)), 0
        )
    along = geom.project(target)
    snapped = geom.interpolate(along)
    d = polyline - np.array([snapped.x, snapped.y])
    vertex_index = int(np.argmin(np.hypot(d[:, 0], d[:, 1])))
    return ClosestPoint(
        Coordinate(float(snapped.x), float(snapped.y)),
        float(snapped.distance(target)),
        vertex_index,
    )


def find_drawing_at(
    drawings: Sequence[Drawing],
    pixel: Coordinate,
    coord_system: FieldCoordinateSystem,
    padding_px: float = NODE_HIT_PADDING_PX,
) -> Drawing | None:
    """Topmost (last drawn) drawing whose stroke plus padding covers the pointer."""
    for drawing in reversed(drawings):
        reach = stroke_width_px(drawing.style, coord_system) / 2.0 + padding_px
        if distance_to_drawing(drawing, pixel, coord_system) <= reach:
            return drawing
    return None


def drawings_under_eraser(
    drawings: Sequence[Drawing],
    position: Coordinate,
    coord_system: FieldCoordinateSystem,
    erase_size_feet: float = DEFAULT_ERASE_SIZE_FEET,
) -> list[str]:
    """Ids of drawings touched by a round eraser at ``position`` (feet).

    The eraser size is stored in feet like stroke widths and converted with the
    current scale.
    """
    pixel = coord_system.feet_to_pixels(position.x, position.y)
    radius_px = coord_system.feet_to_pixel_length(erase_size_feet) / 2.0
    hit: list[str] = []
    for drawing in drawings:
        reach = radius_px + stroke_width_px(drawing.style, coord_system) / 2.0
        if distance_to_drawing(drawing, pixel, coord_system) <= reach:
            hit.append(drawing.id)
    return hit
