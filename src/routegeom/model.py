"""Drawing data model: a shared point pool plus an ordered segment list.

Segments only hold point ids. Every coordinate lives once in
``Drawing.points`` so dragging a node moves it for both segments that share it.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, NamedTuple

from ..utils import debug_helpers
from .field import DEFAULT_STROKE_WIDTH_FEET


class Coordinate(NamedTuple):
    """An (x, y) pair. Feet or pixels depending on where it came from."""

    x: float
    y: float


class PointType(str, Enum):
    START = "start"
    END = "end"
    CORNER = "corner"
    CURVE = "curve"


class SegmentType(str, Enum):
    LINE = "line"
    QUADRATIC = "quadratic"
    CUBIC = "cubic"


class LineStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"


class LineEnd(str, Enum):
    NONE = "none"
    ARROW = "arrow"
    TSHAPE = "tShape"


class PathMode(str, Enum):
    SHARP = "sharp"
    CURVE = "curve"


class PreSnapType(str, Enum):
    SHIFT = "shift"
    MOTION = "motion"


@dataclass
class ControlPoint:
    id: str
    x: float
    y: float
    type: PointType = PointType.CORNER
    # Relative offsets in feet, only used by inline-handle cubic segments.
    handle_in: Coordinate | None = None
    handle_out: Coordinate | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "type": self.type.value,
        }
        if self.handle_in is not None:
            out["handleIn"] = _coord_to_dict(self.handle_in)
        if self.handle_out is not None:
            out["handleOut"] = _coord_to_dict(self.handle_out)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ControlPoint:
        return cls(
            id=str(data["id"]),
            x=float(data["x"]),
            y=float(data["y"]),
            type=PointType(data.get("type", PointType.CORNER.value)),
            handle_in=_coord_from_dict(data.get("handleIn")),
            handle_out=_coord_from_dict(data.get("handleOut")),
        )


@dataclass
class PathSegment:
    """A run of the path between point ids.

    ``line`` uses ``[from, to]``. ``cubic`` uses ``[from, to]`` with the handles
    stored on the points; the legacy ``[cp1, cp2, end]`` and
    ``[start, cp1, cp2, end]`` forms are still read. ``quadratic`` uses
    ``[start, control, end]``, legacy data may carry ``[control, end]``.
    """

    type: SegmentType
    point_ids: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "pointIds": list(self.point_ids)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PathSegment:
        return cls(
            type=SegmentType(data["type"]),
            point_ids=[str(pid) for pid in data.get("pointIds", [])],
        )


@dataclass
class PathStyle:
    color: str = "#000000"
    stroke_width: float = DEFAULT_STROKE_WIDTH_FEET  # feet, never pixels
    line_style: LineStyle = LineStyle.SOLID
    line_end: LineEnd = LineEnd.NONE
    path_mode: PathMode = PathMode.SHARP

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": self.color,
            "strokeWidth": self.stroke_width,
            "lineStyle": self.line_style.value,
            "lineEnd": self.line_end.value,
            "pathMode": self.path_mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PathStyle:
        return cls(
            color=str(data.get("color", "#000000")),
            stroke_width=float(data.get("strokeWidth", DEFAULT_STROKE_WIDTH_FEET)),
            line_style=LineStyle(data.get("lineStyle", LineStyle.SOLID.value)),
            line_end=LineEnd(data.get("lineEnd", LineEnd.NONE.value)),
            path_mode=PathMode(data.get("pathMode", PathMode.SHARP.value)),
        )


@dataclass
class PreSnapMotion:
    type: PreSnapType
    snap_point_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type.value}
        if self.snap_point_id is not None:
            out["snapPointId"] = self.snap_point_id
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreSnapMotion:
        snap_point_id = data.get("snapPointId")
        return cls(
            type=PreSnapType(data["type"]),
            snap_point_id=None if snap_point_id is None else str(snap_point_id),
        )


@dataclass
class Drawing:
    id: str
    points: dict[str, ControlPoint] = field(default_factory=dict)
    segments: list[PathSegment] = field(default_factory=list)
    style: PathStyle = field(default_factory=PathStyle)
    annotations: list[dict[str, Any]] = field(default_factory=list)
    player_id: str | None = None
    linked_point_id: str | None = None
    pre_snap_motion: PreSnapMotion | None = None
    template_id: str | None = None
    template_params: dict[str, float] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "points": {pid: p.to_dict() for pid, p in self.points.items()},
            "segments": [s.to_dict() for s in self.segments],
            "style": self.style.to_dict(),
            "annotations": copy.deepcopy(self.annotations),
        }
        if self.player_id is not None:
            out["playerId"] = self.player_id
        if self.linked_point_id is not None:
            out["linkedPointId"] = self.linked_point_id
        if self.pre_snap_motion is not None:
            out["preSnapMotion"] = self.pre_snap_motion.to_dict()
        if self.template_id is not None:
            out["templateId"] = self.template_id
        if self.template_params is not None:
            out["templateParams"] = dict(self.template_params)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Drawing:
        raw_points = data.get("points", {})
        if isinstance(raw_points, dict):
            point_items = list(raw_points.values())
        else:
            point_items = list(raw_points)
        points = {}
        for item in point_items:
            point = ControlPoint.from_dict(item)
            points[point.id] = point
        motion = data.get("preSnapMotion")
        params = data.get("templateParams")
        return cls(
            id=str(data["id"]),
            points=points,
            segments=[PathSegment.from_dict(s) for s in data.get("segments", [])],
            style=PathStyle.from_dict(data.get("style", {})),
            annotations=copy.deepcopy(list(data.get("annotations", []))),
            player_id=data.get("playerId"),
            linked_point_id=data.get("linkedPointId"),
            pre_snap_motion=None if motion is None else PreSnapMotion.from_dict(motion),
            template_id=data.get("templateId"),
            template_params=None
            if params is None
            else {str(k): float(v) for k, v in params.items()},
        )


@dataclass
class Player:
    """A player token. Owned by the caller; the engine only reads positions."""

    id: str
    x: float
    y: float
    label: str = ""
    color: str = "#000000"
    is_lineman: bool = False
    is_ghost: bool = False
    source_player_id: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.x, self.y)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "label": self.label,
            "color": self.color,
        }
        if self.is_lineman:
            out["isLineman"] = True
        if self.is_ghost:
            out["isGhost"] = True
        if self.source_player_id is not None:
            out["sourcePlayerId"] = self.source_player_id
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        return cls(
            id=str(data["id"]),
            x=float(data["x"]),
            y=float(data["y"]),
            label=str(data.get("label", "")),
            color=str(data.get("color", "#000000")),
            is_lineman=bool(data.get("isLineman", False)),
            is_ghost=bool(data.get("isGhost", False)),
            source_player_id=data.get("sourcePlayerId"),
        )


@dataclass
class PathGeometry:
    """Point pool and segments produced by a pipeline, before styling."""

    points: dict[str, ControlPoint] = field(default_factory=dict)
    segments: list[PathSegment] = field(default_factory=list)

    def to_drawing(self, style: PathStyle, drawing_id: str | None = None) -> Drawing:
        return Drawing(
            id=new_drawing_id() if drawing_id is None else drawing_id,
            points=copy.deepcopy(self.points),
            segments=copy.deepcopy(self.segments),
            style=replace(style),
        )


def _coord_to_dict(c: Coordinate) -> dict[str, float]:
    return {"x": c.x, "y": c.y}


def _coord_from_dict(data: Any) -> Coordinate | None:
    if data is None:
        return None
    if isinstance(data, dict):
        return Coordinate(float(data["x"]), float(data["y"]))
    x, y = data
    return Coordinate(float(x), float(y))


def new_drawing_id(prefix: str = "drawing") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def next_point_id(existing: Iterable[str], prefix: str = "p") -> str:
    """Smallest ``{prefix}-{n}`` with n >= len(existing) that is not taken."""
    taken = set(existing)
    counter = len(taken)
    while f"{prefix}-{counter}" in taken:
        counter += 1
    return f"{prefix}-{counter}"


def clone_drawing(drawing: Drawing) -> Drawing:
    return copy.deepcopy(drawing)


def get_point(drawing: Drawing, point_id: str) -> ControlPoint | None:
    return drawing.points.get(point_id)


def get_segment_points(drawing: Drawing, segment: PathSegment) -> list[ControlPoint]:
    """Resolve a segment's ids, skipping ids missing from the pool."""
    return [drawing.points[pid] for pid in segment.point_ids if pid in drawing.points]


def segment_endpoint_ids(segment: PathSegment) -> tuple[str | None, str | None]:
    """(start id, end id) of a segment; start is None for legacy forms."""
    ids = segment.point_ids
    if not ids:
        return None, None
    if segment.type == SegmentType.CUBIC:
        if len(ids) == 3:
            return None, ids[2]
        return ids[0], ids[-1]
    if segment.type == SegmentType.QUADRATIC and len(ids) == 2:
        return None, ids[1]
    return ids[0], ids[-1]


def is_legacy_segment(segment: PathSegment) -> bool:
    if segment.type == SegmentType.CUBIC:
        return len(segment.point_ids) not in (0, 2)
    if segment.type == SegmentType.QUADRATIC:
        return len(segment.point_ids) == 2
    return False


def path_point_ids(drawing: Drawing) -> list[str]:
    """On-path point ids in traversal order (control points excluded).

    Ids missing from the pool are skipped. A legacy first segment without an
    explicit start falls back to the first pool entry it does not reference.
    """
    ids: list[str] = []
    for segment in drawing.segments:
        start, end = segment_endpoint_ids(segment)
        if end is None:
            continue
        if start is None and not ids:
            start = _implicit_start_id(drawing, segment)
        if start is not None and start in drawing.points:
            if not ids or ids[-1] != start:
                ids.append(start)
        if end in drawing.points and (not ids or ids[-1] != end):
            ids.append(end)
    return ids


def _implicit_start_id(drawing: Drawing, segment: PathSegment) -> str | None:
    debug_helpers.log_once(
        f"legacy-start:{drawing.id}",
        f"drawing {drawing.id}: legacy segment without start id, "
        "using pool order for the first point",
    )
    referenced = set(segment.point_ids)
    for pid in drawing.points:
        if pid not in referenced:
            return pid
    return None


def path_coordinates(drawing: Drawing) -> list[Coordinate]:
    return [drawing.points[pid].coordinate for pid in path_point_ids(drawing)]


def get_drawing_start_point(drawing: Drawing) -> ControlPoint | None:
    ids = path_point_ids(drawing)
    return drawing.points[ids[0]] if ids else None


def get_drawing_end_point(drawing: Drawing) -> ControlPoint | None:
    ids = path_point_ids(drawing)
    return drawing.points[ids[-1]] if ids else None


def is_start_point(drawing: Drawing, point_id: str) -> bool:
    start = get_drawing_start_point(drawing)
    return start is not None and start.id == point_id


def is_end_point(drawing: Drawing, point_id: str) -> bool:
    end = get_drawing_end_point(drawing)
    return end is not None and end.id == point_id


def is_terminal_point(drawing: Drawing, point_id: str) -> bool:
    return is_start_point(drawing, point_id) or is_end_point(drawing, point_id)


def check_shared_endpoints(drawing: Drawing) -> bool:
    for prev, nxt in zip(drawing.segments, drawing.segments[1:]):
        _, prev_end = segment_endpoint_ids(prev)
        next_start, _ = segment_endpoint_ids(nxt)
        if next_start is None:
            # Legacy segment: the start is implied by the previous end.
            continue
        if prev_end != next_start:
            return False
    return True


def retag_points(drawing: Drawing) -> Drawing:
    out = clone_drawing(drawing)
    on_path = path_point_ids(out)
    if not on_path:
        return out
    on_path_set = set(on_path)
    for pid, point in out.points.items():
        if pid not in on_path_set and point.type != PointType.CURVE:
            point.type = PointType.CURVE
    for i, pid in enumerate(on_path):
        if i == 0:
            out.points[pid].type = PointType.START
        elif i == len(on_path) - 1:
            out.points[pid].type = PointType.END
        else:
            out.points[pid].type = PointType.CORNER
    return out


def reverse_drawing(drawing: Drawing) -> Drawing:
    """Same path walked backwards.

    Segment order and the id order inside each segment are reversed, and the
    in/out handles of every point swap roles.
    """
    if any(is_legacy_segment(s) for s in drawing.segments):
        from .curves import migrate_legacy_segments

        drawing = migrate_legacy_segments(drawing)
    out = clone_drawing(drawing)
    out.segments = [
        PathSegment(type=s.type, point_ids=list(reversed(s.point_ids)))
        for s in reversed(out.segments)
    ]
    for point in out.points.values():
        point.handle_in, point.handle_out = point.handle_out, point.handle_in
    return retag_points(out)


def translate_drawing(drawing: Drawing, dx: float, dy: float) -> Drawing:
    """Shift every point; relative handles are unaffected."""
    out = clone_drawing(drawing)
    for point in out.points.values():
        point.x += dx
        point.y += dy
    return out


def move_point(drawing: Drawing, point_id: str, x: float, y: float) -> Drawing:
    """Drawing with one node moved (feet). Unknown ids leave it unchanged."""
    out = clone_drawing(drawing)
    point = out.points.get(point_id)
    if point is None:
        return out
    point.x = x
    point.y = y
    return out


def chain_line_segments(point_ids: list[str]) -> list[PathSegment]:
    return [
        PathSegment(type=SegmentType.LINE, point_ids=[a, b])
        for a, b in zip(point_ids, point_ids[1:])
    ]


def geometry_from_coordinates(coords: list[Coordinate]) -> PathGeometry:
    """``p-0..p-n`` start/corner/end points chained by line segments."""
    points: dict[str, ControlPoint] = {}
    last = len(coords) - 1
    for i, (x, y) in enumerate(coords):
        pid = f"p-{i}"
        if i == 0:
            ptype = PointType.START
        elif i == last:
            ptype = PointType.END
        else:
            ptype = PointType.CORNER
        points[pid] = ControlPoint(id=pid, x=float(x), y=float(y), type=ptype)
    return PathGeometry(points=points, segments=chain_line_segments(list(points)))
