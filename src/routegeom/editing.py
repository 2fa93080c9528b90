from __future__ import annotations

import copy
from dataclasses import replace
from typing import NamedTuple, Sequence

import numpy as np
from shapely.geometry import LineString, Point

from ..utils import debug
from .chaikin import should_smooth, smoothed_index_to_segment
from .coordinates import FieldCoordinateSystem
from .curves import (
    convert_to_sharp,
    has_inline_curves,
    migrate_legacy_segments,
    resolve_segments,
    segment_polyline,
    smooth_path_to_curves,
)
from .field import CENTER_X
from .hit_test import closest_point_on_drawing
from .model import (
    ControlPoint,
    Coordinate,
    Drawing,
    PathMode,
    PathSegment,
    Player,
    PointType,
    SegmentType,
    chain_line_segments,
    clone_drawing,
    next_point_id,
    path_coordinates,
    path_point_ids,
    retag_points,
    segment_endpoint_ids,
)


class InsertionPoint(NamedTuple):
    segment_index: int
    position: Coordinate  # feet


def _drop_unreferenced(drawing: Drawing, keep: set[str]) -> None:
    used = {pid for s in drawing.segments for pid in s.point_ids} | keep
    for pid in [pid for pid in drawing.points if pid not in used]:
        del drawing.points[pid]


def insert_point(
    drawing: Drawing, segment_index: int, position: Coordinate
) -> Drawing:
    """Split one segment into two lines through a new corner node at ``position`` (feet)."""
    out = migrate_legacy_segments(drawing)
    if not 0 <= segment_index < len(out.segments):
        raise ValueError(
            f"segment_index {segment_index} out of range for {len(out.segments)} segments"
        )
    start_id, end_id = segment_endpoint_ids(out.segments[segment_index])
    if start_id is None or end_id is None:
        raise ValueError(f"segment {segment_index} has no endpoints")
    new_id = next_point_id(out.points)
    out.points[new_id] = ControlPoint(
        id=new_id, x=float(position[0]), y=float(position[1]), type=PointType.CORNER
    )
    out.segments[segment_index : segment_index + 1] = [
        PathSegment(type=SegmentType.LINE, point_ids=[start_id, new_id]),
        PathSegment(type=SegmentType.LINE, point_ids=[new_id, end_id]),
    ]
    _drop_unreferenced(out, set())
    return retag_points(out)


def find_insertion_point(
    drawing: Drawing, pixel: Coordinate, coord_system: FieldCoordinateSystem
) -> InsertionPoint | None:
    """Where a click at ``pixel`` would add a node.

    Smoothed drawings are matched against the curve as displayed and mapped
    back to a stored segment. Others use the nearest segment and the
    projection onto it.
    """
    if not drawing.segments:
        return None
    if should_smooth(drawing):
        closest = closest_point_on_drawing(drawing, pixel, coord_system)
        if closest is None:
            return None
        index = smoothed_index_to_segment(closest.vertex_index, len(drawing.segments))
        return InsertionPoint(
            index, coord_system.pixels_to_feet(closest.point.x, closest.point.y)
        )

    target = Point(*coord_system.pixels_to_feet(pixel.x, pixel.y))
    best: InsertionPoint | None = None
    best_d = np.inf
    # Distances are compared in feet; the mapping is a uniform scale.
    for segment in resolve_segments(drawing):
        poly = segment_polyline(segment)
        line = LineString([(float(x), float(y)) for x, y in poly])
        d = float(line.distance(target))
        if d < best_d:
            snapped = line.interpolate(line.project(target))
            best_d = d
            best = InsertionPoint(
                segment.index, Coordinate(float(snapped.x), float(snapped.y))
            )
    return best


def delete_point(drawing: Drawing, point_id: str) -> Drawing | None:
    """Remove an on-path node and re-chain the rest with lines.

    Returns None when fewer than 2 nodes would remain; the caller deletes the
    drawing. Handles on surviving nodes are kept as they are.
    """
    on_path = path_point_ids(drawing)
    if point_id not in on_path:
        debug.log(f"{drawing.id}: {point_id} is not on the path", scope="edit")
        return clone_drawing(drawing)
    remaining = [pid for pid in on_path if pid != point_id]
    if len(remaining) < 2:
        return None
    out = clone_drawing(drawing)
    out.segments = chain_line_segments(remaining)
    _drop_unreferenced(out, set())
    if out.linked_point_id == point_id:
        out.player_id = None
        out.linked_point_id = None
    motion = out.pre_snap_motion
    if motion is not None and motion.snap_point_id == point_id:
        out.pre_snap_motion = None
    return retag_points(out)


def _flip_x(x: float) -> float:
    return 2.0 * CENTER_X - x


def _flip_handle(handle: Coordinate | None) -> Coordinate | None:
    # Handles are offsets, so they mirror by negation.
    if handle is None:
        return None
    return Coordinate(-handle.x, handle.y)


def flip_drawing(drawing: Drawing) -> Drawing:
    out = clone_drawing(drawing)
    for point in out.points.values():
        point.x = _flip_x(point.x)
        point.handle_in = _flip_handle(point.handle_in)
        point.handle_out = _flip_handle(point.handle_out)
    return out


def flip_player(player: Player) -> Player:
    return replace(player, x=_flip_x(player.x))


def flip_play(
    players: Sequence[Player], drawings: Sequence[Drawing]
) -> tuple[list[Player], list[Drawing]]:
    return [flip_player(p) for p in players], [flip_drawing(d) for d in drawings]


def set_path_mode(
    drawing: Drawing, mode: PathMode, *, with_handles: bool = False
) -> Drawing:
    """Switch a drawing between sharp and curve mode.

    Going to sharp drops any curve data. Going to curve keeps the stored lines
    (smoothed at render time) unless ``with_handles`` asks for editable
    Catmull-Rom cubics.
    """
    if mode == PathMode.SHARP:
        out = convert_to_sharp(drawing) if has_inline_curves(drawing) else clone_drawing(drawing)
        out.style = replace(out.style, path_mode=PathMode.SHARP)
        return out

    if not with_handles:
        out = clone_drawing(drawing)
        out.style = replace(out.style, path_mode=PathMode.CURVE)
        return out

    old_ids = path_point_ids(drawing)
    geometry = smooth_path_to_curves(path_coordinates(drawing))
    remap = dict(zip(old_ids, geometry.points))
    out = clone_drawing(drawing)
    out.points = geometry.points
    out.segments = geometry.segments
    out.style = replace(out.style, path_mode=PathMode.CURVE)
    if out.linked_point_id is not None:
        out.linked_point_id = remap.get(out.linked_point_id)
        if out.linked_point_id is None:
            out.player_id = None
    if out.pre_snap_motion is not None and out.pre_snap_motion.snap_point_id is not None:
        motion = copy.copy(out.pre_snap_motion)
        motion.snap_point_id = remap.get(motion.snap_point_id)
        out.pre_snap_motion = motion
    return out
