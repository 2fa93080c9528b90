from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from beartype import beartype
from jaxtyping import Float, jaxtyped

from .model import Coordinate


def as_points(coords: Sequence[Coordinate] | Sequence[tuple[float, float]]) -> np.ndarray:
    P = np.asarray([(float(c[0]), float(c[1])) for c in coords], dtype=np.float64)
    if P.size == 0:
        return np.zeros((0, 2), dtype=np.float64)
    if not np.isfinite(P).all():
        raise ValueError("coordinates contain non-finite values")
    return P


def to_coordinates(points: np.ndarray) -> list[Coordinate]:
    return [Coordinate(float(x), float(y)) for x, y in points]


def distance(a: Coordinate, b: Coordinate) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


@jaxtyped(typechecker=beartype)
def perpendicular_distances(
    points: Float[np.ndarray, "N 2"],
    line_start: Float[np.ndarray, "2"],
    line_end: Float[np.ndarray, "2"],
) -> Float[np.ndarray, "N"]:
    """
    Distance from each point to the infinite line through start and end.
    Falls back to the distance to ``line_start`` when the line is degenerate.
    """
    d = line_end - line_start
    base = float(np.hypot(d[0], d[1]))
    rel = points - line_start
    if base == 0.0:
        return np.hypot(rel[:, 0], rel[:, 1])
    cross = d[0] * rel[:, 1] - d[1] * rel[:, 0]
    return np.abs(cross) / base


def perpendicular_distance(
    point: Coordinate, line_start: Coordinate, line_end: Coordinate
) -> float:
    dists = perpendicular_distances(
        as_points([point]), as_points([line_start])[0], as_points([line_end])[0]
    )
    return float(dists[0])


@jaxtyped(typechecker=beartype)
def simplify_polyline(
    points: Float[np.ndarray, "N 2"],
    tolerance: float | int,
) -> Float[np.ndarray, "M 2"]:
    """Ramer-Douglas-Peucker simplification of an open polyline.

    Iterative (explicit stack) so long traces cannot hit the recursion limit.
    The first and last points are always kept and the output is a subsequence
    of the input, in order.
    """
    tolerance = float(tolerance)
    if not math.isfinite(tolerance) or tolerance < 0:
        raise ValueError("tolerance must be finite and >= 0")
    N = points.shape[0]
    if N <= 2:
        return points.copy()

    keep = np.zeros(N, dtype=bool)
    keep[0] = True
    keep[N - 1] = True
    stack: list[tuple[int, int]] = [(0, N - 1)]
    while stack:
        start, end = stack.pop()
        if end - start < 2:
            continue
        dists = perpendicular_distances(
            points[start + 1 : end], points[start], points[end]
        )
        k = int(np.argmax(dists))
        if float(dists[k]) > tolerance:
            index = start + 1 + k
            keep[index] = True
            stack.append((start, index))
            stack.append((index, end))
    return points[keep]


def simplify_path(coords: Sequence[Coordinate], tolerance: float) -> list[Coordinate]:
    tolerance = float(tolerance)
    if len(coords) <= 2:
        return [Coordinate(float(c[0]), float(c[1])) for c in coords]
    return to_coordinates(simplify_polyline(as_points(coords), tolerance))


def _turn_angles(points: np.ndarray) -> np.ndarray:
    """Absolute heading change (radians, in [0, pi]) at each interior vertex."""
    d = np.diff(points, axis=0)
    headings = np.arctan2(d[:, 1], d[:, 0])
    delta = headings[1:] - headings[:-1]
    delta = (delta + np.pi) % (2.0 * np.pi) - np.pi
    return np.abs(delta)


@jaxtyped(typechecker=beartype)
def detect_corners(
    points: Float[np.ndarray, "N 2"],
    angle_threshold: float | int,
) -> list[int]:
    """Indices of interior vertices where the heading turns by >= threshold (radians)."""
    if points.shape[0] < 3:
        return []
    turns = _turn_angles(points)
    return [int(i) + 1 for i in np.nonzero(turns >= angle_threshold)[0]]


@jaxtyped(typechecker=beartype)
def straighten_segments(
    points: Float[np.ndarray, "N 2"],
    angle_threshold: float | int,
) -> Float[np.ndarray, "M 2"]:
    if points.shape[0] < 3:
        return points.copy()
    turns = _turn_angles(points)
    keep = np.ones(points.shape[0], dtype=bool)
    keep[1:-1] = turns >= angle_threshold
    return points[keep]


@jaxtyped(typechecker=beartype)
def polyline_length(points: Float[np.ndarray, "N 2"]) -> float:
    if points.shape[0] < 2:
        return 0.0
    seg = np.diff(points, axis=0)
    return float(np.sum(np.hypot(seg[:, 0], seg[:, 1])))
