"""Smooth path pipeline.

Only thins the trace down to a few through-points. The visible curve is built
at render time (see ``chaikin.smoothed_points``), nothing curved is stored.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from ..utils import debug, debug_helpers
from .model import (
    Coordinate,
    Drawing,
    PathGeometry,
    PathMode,
    PathStyle,
    geometry_from_coordinates,
)
from .sharp_path import SHARP_SIMPLIFICATION_TOLERANCE, process_sharp_path
from .simplify import as_points, simplify_polyline, to_coordinates

# Tighter than the sharp pipeline: shape fidelity matters more than point count.
SMOOTH_SIMPLIFICATION_TOLERANCE = 0.5  # feet


def process_smooth_path(
    coords: Sequence[Coordinate],
    tolerance: float = SMOOTH_SIMPLIFICATION_TOLERANCE,
) -> PathGeometry:
    tolerance = float(tolerance)
    if len(coords) == 0:
        return PathGeometry()
    P = as_points(coords)
    if P.shape[0] == 1:
        return geometry_from_coordinates(to_coordinates(P))

    simplified = simplify_polyline(P, tolerance)
    # Consecutive duplicates would create zero-length segments.
    keep = [0]
    for i in range(1, simplified.shape[0]):
        if not (simplified[i] == simplified[keep[-1]]).all():
            keep.append(i)
    simplified = simplified[keep]
    debug_helpers.log_points("smooth through-points", simplified, scope="smooth")
    return geometry_from_coordinates(to_coordinates(simplified))


def create_drawing(
    coords: Sequence[Coordinate],
    style: PathStyle,
    drawing_id: str | None = None,
    tolerance: float | None = None,
) -> Drawing:
    """Build a drawing from a raw trace with the pipeline chosen by ``style.path_mode``.

    ``tolerance`` overrides the RDP tolerance (feet) of that pipeline.
    """
    if tolerance is not None:
        tolerance = float(tolerance)
    if style.path_mode == PathMode.CURVE:
        geometry = process_smooth_path(
            coords,
            SMOOTH_SIMPLIFICATION_TOLERANCE if tolerance is None else tolerance,
        )
    else:
        geometry = process_sharp_path(
            coords,
            SHARP_SIMPLIFICATION_TOLERANCE if tolerance is None else tolerance,
        )
    drawing = geometry.to_drawing(replace(style), drawing_id)
    debug.log(
        f"created {drawing.id} ({style.path_mode.value}) from {len(coords)} samples",
        scope="pipeline",
    )
    return drawing
