"""Sharp path pipeline.

Turns a raw pointer trace (feet) into a few straight segments whose
directions are snapped to 15 degree increments.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

from ..utils import debug
from .model import Coordinate, PathGeometry, geometry_from_coordinates
from .simplify import simplify_path

SHARP_SIMPLIFICATION_TOLERANCE = 1.5  # feet
SHARP_MIN_ANGLE_THRESHOLD = 15.0  # degrees
SHARP_ANGLE_SNAP_INCREMENT = 15.0  # degrees


class LineSegment(NamedTuple):
    start: Coordinate
    end: Coordinate
    angle: float  # degrees in [0, 360)

    @property
    def length(self) -> float:
        return math.hypot(self.end.x - self.start.x, self.end.y - self.start.y)


def normalize_angle(degrees: float) -> float:
    angle = degrees % 360.0
    if angle < 0:
        angle += 360.0
    return angle


def calculate_angle(start: Coordinate, end: Coordinate) -> float:
    return normalize_angle(math.degrees(math.atan2(end.y - start.y, end.x - start.x)))


def angle_difference(a: float, b: float) -> float:
    """Smallest difference between two headings, in degrees."""
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def snap_angle(angle: float, increment: float = SHARP_ANGLE_SNAP_INCREMENT) -> float:
    return round(angle / increment) * increment


def detect_line_segments(
    coords: Sequence[Coordinate],
    tolerance: float = SHARP_SIMPLIFICATION_TOLERANCE,
) -> list[LineSegment]:
    if len(coords) < 2:
        return []
    simplified = simplify_path(coords, tolerance)
    segments: list[LineSegment] = []
    for start, end in zip(simplified, simplified[1:]):
        if start == end:
            continue
        segments.append(LineSegment(start, end, calculate_angle(start, end)))
    return segments


def analyze_corners(
    segments: list[LineSegment],
    min_angle: float = SHARP_MIN_ANGLE_THRESHOLD,
) -> list[LineSegment]:
    """Fold jitter: neighbours turning by less than ``min_angle`` become one segment."""
    if len(segments) < 2:
        return list(segments)
    merged: list[LineSegment] = []
    current = segments[0]
    for nxt in segments[1:]:
        if angle_difference(current.angle, nxt.angle) < min_angle:
            current = LineSegment(
                current.start, nxt.end, calculate_angle(current.start, nxt.end)
            )
        else:
            merged.append(current)
            current = nxt
    merged.append(current)
    return merged


def snap_angles(
    segments: list[LineSegment],
    increment: float = SHARP_ANGLE_SNAP_INCREMENT,
) -> list[LineSegment]:
    """Quantize directions, keeping lengths and chaining from the first point."""
    if not segments:
        return []
    snapped: list[LineSegment] = []
    current_start = segments[0].start
    for segment in segments:
        angle = snap_angle(segment.angle, increment)
        rad = math.radians(angle)
        length = segment.length
        end = Coordinate(
            current_start.x + length * math.cos(rad),
            current_start.y + length * math.sin(rad),
        )
        snapped.append(LineSegment(current_start, end, normalize_angle(angle)))
        current_start = end
    return snapped


def segments_to_geometry(segments: list[LineSegment]) -> PathGeometry:
    if not segments:
        return PathGeometry()
    coords = [segments[0].start] + [s.end for s in segments]
    return geometry_from_coordinates(coords)


def process_sharp_path(
    coords: Sequence[Coordinate],
    tolerance: float = SHARP_SIMPLIFICATION_TOLERANCE,
    min_angle: float = SHARP_MIN_ANGLE_THRESHOLD,
    snap_increment: float = SHARP_ANGLE_SNAP_INCREMENT,
) -> PathGeometry:
    if len(coords) == 0:
        return PathGeometry()
    first = Coordinate(float(coords[0][0]), float(coords[0][1]))
    if len(coords) == 1:
        return geometry_from_coordinates([first])

    segments = detect_line_segments(coords, tolerance)
    if not segments:
        # Every sample landed on the same spot.
        return geometry_from_coordinates([first])
    segments = analyze_corners(segments, min_angle)
    segments = snap_angles(segments, snap_increment)
    debug.log(
        f"sharp: {len(coords)} samples -> {len(segments)} segments", scope="sharp"
    )
    return segments_to_geometry(segments)
