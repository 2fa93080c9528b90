from __future__ import annotations

from typing import Callable, Sequence

import numpy as np
from beartype import beartype
from jaxtyping import Float, jaxtyped

from .model import (
    ControlPoint,
    Coordinate,
    Drawing,
    PathMode,
    SegmentType,
)
from .simplify import as_points, to_coordinates

CHAIKIN_ITERATIONS = 3
# Each pass roughly doubles the vertex count.
CHAIKIN_POINT_MULTIPLIER = 2


@jaxtyped(typechecker=beartype)
def chaikin_subdivide(
    points: Float[np.ndarray, "N 2"],
    preserve_endpoints: bool = False,
) -> Float[np.ndarray, "M 2"]:
    """One Chaikin pass.

    Every pair (P0, P1) becomes Q = 0.75 P0 + 0.25 P1 and R = 0.25 P0 + 0.75 P1.
    With ``preserve_endpoints`` the first pair only emits R, the last pair only
    emits Q, and the original first/last points are kept as-is.
    """
    N = points.shape[0]
    if N < 2:
        return points.copy()
    P0 = points[:-1]
    P1 = points[1:]
    Q = 0.75 * P0 + 0.25 * P1
    R = 0.25 * P0 + 0.75 * P1

    if not preserve_endpoints:
        out = np.empty((2 * (N - 1), 2), dtype=points.dtype)
        out[0::2] = Q
        out[1::2] = R
        return out

    parts: list[np.ndarray] = [points[:1], R[:1]]
    if N > 2:
        middle = np.empty((2 * (N - 3), 2), dtype=points.dtype)
        middle[0::2] = Q[1:-1]
        middle[1::2] = R[1:-1]
        parts.append(middle)
        parts.append(Q[-1:])
    parts.append(points[-1:])
    return np.concatenate(parts, axis=0)


@jaxtyped(typechecker=beartype)
def apply_chaikin(
    points: Float[np.ndarray, "N 2"],
    iterations: int = CHAIKIN_ITERATIONS,
) -> Float[np.ndarray, "M 2"]:
    """Endpoint-preserving Chaikin smoothing, ``iterations`` passes."""
    if iterations < 0:
        raise ValueError("iterations must be >= 0")
    result = points
    for _ in range(iterations):
        result = chaikin_subdivide(result, preserve_endpoints=True)
    return result.copy() if result is points else result


def should_smooth(drawing: Drawing) -> bool:
    """Only all-line drawings in curve mode are smoothed."""
    if not drawing.segments:
        return False
    if drawing.style.path_mode != PathMode.CURVE:
        return False
    return all(s.type == SegmentType.LINE for s in drawing.segments)


def ordered_unique_points(drawing: Drawing) -> list[ControlPoint]:
    seen: set[str] = set()
    out: list[ControlPoint] = []
    for segment in drawing.segments:
        for pid in segment.point_ids:
            if pid in seen:
                continue
            seen.add(pid)
            point = drawing.points.get(pid)
            if point is not None:
                out.append(point)
    return out


def smoothed_points(
    drawing: Drawing,
    transform: Callable[[ControlPoint], Coordinate] | None = None,
    iterations: int = CHAIKIN_ITERATIONS,
) -> list[Coordinate] | None:
    """Dense polyline for a curve-mode drawing, or None if it is not smoothed.

    ``transform`` maps each stored point (feet) into the output space, e.g.
    pixels for rendering. Smoothing happens after the transform.
    """
    if not should_smooth(drawing):
        return None
    points = ordered_unique_points(drawing)
    if transform is None:
        coords: Sequence[Coordinate] = [p.coordinate for p in points]
    else:
        coords = [transform(p) for p in points]
    if len(coords) < 2:
        return list(coords)
    return to_coordinates(apply_chaikin(as_points(coords), iterations))


def smoothed_index_to_segment(
    index: int, segment_count: int, iterations: int = CHAIKIN_ITERATIONS
) -> int:
    """Approximate stored segment index for a vertex of the smoothed polyline."""
    if segment_count <= 0:
        raise ValueError("drawing has no segments")
    multiplier = CHAIKIN_POINT_MULTIPLIER**iterations
    return max(0, min(index // multiplier, segment_count - 1))
