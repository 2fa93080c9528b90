from __future__ import annotations

from typing import NamedTuple, Sequence

import numpy as np
from beartype import beartype
from jaxtyping import Float, jaxtyped

from ..utils import debug
from .chaikin import apply_chaikin, ordered_unique_points, should_smooth
from .model import (
    ControlPoint,
    Coordinate,
    Drawing,
    PathGeometry,
    PathSegment,
    SegmentType,
    clone_drawing,
    geometry_from_coordinates,
    is_legacy_segment,
    path_point_ids,
    retag_points,
)
from .simplify import as_points

BEZIER_SAMPLE_POINTS = 10


class ResolvedSegment(NamedTuple):
    """A segment with its ids resolved to absolute coordinates (feet)."""

    type: SegmentType
    start: Coordinate
    controls: tuple[Coordinate, ...]
    end: Coordinate
    index: int = -1  # position in drawing.segments


def catmull_rom_to_bezier(
    p0: Coordinate,
    p1: Coordinate,
    p2: Coordinate,
    p3: Coordinate,
    tension: float = 0.5,
) -> tuple[Coordinate, Coordinate, Coordinate, Coordinate]:
    """Cubic Bezier (start, cp1, cp2, end) for the Catmull-Rom span p1 -> p2."""
    cp1 = Coordinate(
        p1[0] + (p2[0] - p0[0]) / 6.0 * tension,
        p1[1] + (p2[1] - p0[1]) / 6.0 * tension,
    )
    cp2 = Coordinate(
        p2[0] - (p3[0] - p1[0]) / 6.0 * tension,
        p2[1] - (p3[1] - p1[1]) / 6.0 * tension,
    )
    return Coordinate(p1[0], p1[1]), cp1, cp2, Coordinate(p2[0], p2[1])


@jaxtyped(typechecker=beartype)
def catmull_rom_tangents(points: Float[np.ndarray, "N 2"]) -> Float[np.ndarray, "N 2"]:
    """Central-difference tangents with the end points duplicated.

    ``tangent_i = (P[i+1] - P[i-1]) / 2`` where P[-1] = P[0] and P[N] = P[N-1].
    """
    extended = np.concatenate([points[:1], points, points[-1:]], axis=0)
    return 0.5 * (extended[2:] - extended[:-2])


def smooth_path_to_curves(coords: Sequence[Coordinate]) -> PathGeometry:
    """Through-points -> inline-handle cubic segments.

    Handles are tangent / 6. The first point has no ``handle_in`` and the last
    has no ``handle_out``. Fewer than 3 points fall back to line segments.
    """
    if len(coords) < 3:
        return geometry_from_coordinates(
            [Coordinate(float(c[0]), float(c[1])) for c in coords]
        )
    P = as_points(coords)
    handles = catmull_rom_tangents(P) / 6.0
    geometry = geometry_from_coordinates(
        [Coordinate(float(x), float(y)) for x, y in P]
    )
    ids = list(geometry.points)
    last = len(ids) - 1
    for i, pid in enumerate(ids):
        point = geometry.points[pid]
        h = Coordinate(float(handles[i, 0]), float(handles[i, 1]))
        if i > 0:
            point.handle_in = Coordinate(-h.x, -h.y)
        if i < last:
            point.handle_out = h
    geometry.segments = [
        PathSegment(type=SegmentType.CUBIC, point_ids=[a, b])
        for a, b in zip(ids, ids[1:])
    ]
    return geometry


def convert_to_sharp(drawing: Drawing) -> Drawing:
    """Keep only on-path points, joined by lines. Ids become ``p-0..p-n``.

    A player link or motion snap point that sat on the path follows its node.
    """
    old_ids = path_point_ids(drawing)
    geometry = geometry_from_coordinates(
        [drawing.points[pid].coordinate for pid in old_ids]
    )
    remap = dict(zip(old_ids, geometry.points))
    out = clone_drawing(drawing)
    out.points = geometry.points
    out.segments = geometry.segments
    if out.linked_point_id is not None:
        out.linked_point_id = remap.get(out.linked_point_id)
        if out.linked_point_id is None:
            out.player_id = None
    motion = out.pre_snap_motion
    if motion is not None and motion.snap_point_id is not None:
        motion.snap_point_id = remap.get(motion.snap_point_id)
    return out


def migrate_legacy_segments(drawing: Drawing) -> Drawing:
    """Rewrite legacy cubic/quadratic segments with an explicit start id.

    3-id and 4-id cubics become ``[from, to]`` with the control points folded
    into the endpoint handles; control points no other segment uses are
    dropped. 2-id quadratics become ``[start, control, end]``.
    """
    if not any(is_legacy_segment(s) for s in drawing.segments):
        return clone_drawing(drawing)
    out = clone_drawing(drawing)
    on_path = path_point_ids(out)
    prev_end: str | None = on_path[0] if on_path else None
    segments: list[PathSegment] = []
    folded: set[str] = set()
    for segment in out.segments:
        ids = segment.point_ids
        if segment.type == SegmentType.CUBIC and len(ids) in (3, 4):
            if len(ids) == 4:
                start_id, cp1_id, cp2_id, end_id = ids
            else:
                start_id = prev_end
                cp1_id, cp2_id, end_id = ids
            if start_id is None or any(
                pid not in out.points for pid in (start_id, cp1_id, cp2_id, end_id)
            ):
                debug.log(
                    f"drawing {out.id}: dropping unresolved legacy cubic {ids}",
                    scope="legacy",
                )
                continue
            start = out.points[start_id]
            end = out.points[end_id]
            cp1 = out.points[cp1_id]
            cp2 = out.points[cp2_id]
            start.handle_out = Coordinate(cp1.x - start.x, cp1.y - start.y)
            end.handle_in = Coordinate(cp2.x - end.x, cp2.y - end.y)
            folded.update((cp1_id, cp2_id))
            segments.append(
                PathSegment(type=SegmentType.CUBIC, point_ids=[start_id, end_id])
            )
            prev_end = end_id
        elif segment.type == SegmentType.QUADRATIC and len(ids) == 2:
            if prev_end is None:
                continue
            segments.append(
                PathSegment(
                    type=SegmentType.QUADRATIC, point_ids=[prev_end, ids[0], ids[1]]
                )
            )
            prev_end = ids[1]
        else:
            segments.append(segment)
            if ids:
                prev_end = ids[-1]
    out.segments = segments

    still_used = {pid for s in segments for pid in s.point_ids}
    for pid in folded - still_used:
        del out.points[pid]
    debug.log(
        f"drawing {out.id}: migrated legacy segments, dropped {len(folded - still_used)} control points",
        scope="legacy",
    )
    return retag_points(out)


def _coord(point: ControlPoint) -> Coordinate:
    return Coordinate(point.x, point.y)


def _offset(point: ControlPoint, handle: Coordinate | None) -> Coordinate:
    if handle is None:
        return _coord(point)
    return Coordinate(point.x + handle.x, point.y + handle.y)


def resolve_segments(drawing: Drawing) -> list[ResolvedSegment]:
    """Absolute geometry of every drawable segment, in path order.

    Segments that reference missing ids are skipped.
    """
    pts = drawing.points
    on_path = path_point_ids(drawing)
    prev_end: Coordinate | None = pts[on_path[0]].coordinate if on_path else None
    out: list[ResolvedSegment] = []
    for index, segment in enumerate(drawing.segments):
        ids = segment.point_ids
        if any(pid not in pts for pid in ids):
            continue
        resolved: ResolvedSegment | None = None
        if segment.type == SegmentType.LINE and len(ids) >= 2:
            resolved = ResolvedSegment(
                SegmentType.LINE, _coord(pts[ids[0]]), (), _coord(pts[ids[-1]])
            )
        elif segment.type == SegmentType.QUADRATIC:
            if len(ids) == 3:
                resolved = ResolvedSegment(
                    SegmentType.QUADRATIC,
                    _coord(pts[ids[0]]),
                    (_coord(pts[ids[1]]),),
                    _coord(pts[ids[2]]),
                )
            elif len(ids) == 2 and prev_end is not None:
                resolved = ResolvedSegment(
                    SegmentType.QUADRATIC,
                    prev_end,
                    (_coord(pts[ids[0]]),),
                    _coord(pts[ids[1]]),
                )
        elif segment.type == SegmentType.CUBIC:
            if len(ids) == 2:
                a, b = pts[ids[0]], pts[ids[1]]
                resolved = ResolvedSegment(
                    SegmentType.CUBIC,
                    _coord(a),
                    (_offset(a, a.handle_out), _offset(b, b.handle_in)),
                    _coord(b),
                )
            elif len(ids) == 4:
                resolved = ResolvedSegment(
                    SegmentType.CUBIC,
                    _coord(pts[ids[0]]),
                    (_coord(pts[ids[1]]), _coord(pts[ids[2]])),
                    _coord(pts[ids[3]]),
                )
            elif len(ids) == 3 and prev_end is not None:
                resolved = ResolvedSegment(
                    SegmentType.CUBIC,
                    prev_end,
                    (_coord(pts[ids[0]]), _coord(pts[ids[1]])),
                    _coord(pts[ids[2]]),
                )
        if resolved is None:
            continue
        out.append(resolved._replace(index=index))
        prev_end = resolved.end
    return out


@jaxtyped(typechecker=beartype)
def sample_cubic_bezier(
    p0: Float[np.ndarray, "2"],
    c1: Float[np.ndarray, "2"],
    c2: Float[np.ndarray, "2"],
    p3: Float[np.ndarray, "2"],
    samples: int = BEZIER_SAMPLE_POINTS,
) -> Float[np.ndarray, "M 2"]:
    """``samples + 1`` points on the curve, both ends included."""
    if samples < 1:
        raise ValueError("samples must be >= 1")
    t = np.linspace(0.0, 1.0, samples + 1)[:, None]
    mt = 1.0 - t
    return (
        (mt**3) * p0
        + 3.0 * (mt**2) * t * c1
        + 3.0 * mt * (t**2) * c2
        + (t**3) * p3
    )


@jaxtyped(typechecker=beartype)
def sample_quadratic_bezier(
    p0: Float[np.ndarray, "2"],
    c: Float[np.ndarray, "2"],
    p2: Float[np.ndarray, "2"],
    samples: int = BEZIER_SAMPLE_POINTS,
) -> Float[np.ndarray, "M 2"]:
    if samples < 1:
        raise ValueError("samples must be >= 1")
    t = np.linspace(0.0, 1.0, samples + 1)[:, None]
    mt = 1.0 - t
    return (mt**2) * p0 + 2.0 * mt * t * c + (t**2) * p2


def segment_polyline(
    segment: ResolvedSegment, samples: int = BEZIER_SAMPLE_POINTS
) -> np.ndarray:
    start = np.asarray(segment.start, dtype=np.float64)
    end = np.asarray(segment.end, dtype=np.float64)
    if segment.type == SegmentType.CUBIC:
        c1, c2 = (np.asarray(c, dtype=np.float64) for c in segment.controls)
        return sample_cubic_bezier(start, c1, c2, end, samples)
    if segment.type == SegmentType.QUADRATIC:
        c = np.asarray(segment.controls[0], dtype=np.float64)
        return sample_quadratic_bezier(start, c, end, samples)
    return np.stack([start, end])


def drawing_polyline(
    drawing: Drawing, samples: int = BEZIER_SAMPLE_POINTS
) -> np.ndarray:
    """The drawing as it is displayed, flattened to an (M,2) polyline in feet.

    Curve-mode line drawings are Chaikin-smoothed, curves are sampled.
    """
    if should_smooth(drawing):
        P = as_points([p.coordinate for p in ordered_unique_points(drawing)])
        if P.shape[0] < 2:
            return P
        return apply_chaikin(P)
    parts: list[np.ndarray] = []
    for i, segment in enumerate(resolve_segments(drawing)):
        poly = segment_polyline(segment, samples)
        parts.append(poly if i == 0 else poly[1:])
    if not parts:
        ids = path_point_ids(drawing)
        return as_points([drawing.points[pid].coordinate for pid in ids])
    return np.concatenate(parts, axis=0)


def has_inline_curves(drawing: Drawing) -> bool:
    return any(s.type != SegmentType.LINE for s in drawing.segments)
