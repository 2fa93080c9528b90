"""Snap detection and player linking. All positions and thresholds are feet."""

from __future__ import annotations

import math
from typing import Iterable, NamedTuple, Sequence

from ..utils import debug
from .field import LINE_OF_SCRIMMAGE, PLAYER_RADIUS_FEET, UNLINK_DISTANCE_FEET
from .model import (
    ControlPoint,
    Coordinate,
    Drawing,
    Player,
    clone_drawing,
    get_drawing_end_point,
    get_drawing_start_point,
    is_terminal_point,
    path_point_ids,
    translate_drawing,
)


class SnapTarget(NamedTuple):
    drawing_id: str
    point_id: str
    point: ControlPoint
    distance: float


class PlayerSnapTarget(NamedTuple):
    player_id: str
    point: Coordinate
    distance: float


def _dist(a: Coordinate, b: Coordinate) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def find_snap_target(
    position: Coordinate,
    drawings: Iterable[Drawing],
    exclude_drawing_id: str | None,
    threshold: float,
) -> SnapTarget | None:
    """Nearest start/end node of another drawing within ``threshold`` (inclusive).

    Interior nodes are never candidates.
    """
    closest: SnapTarget | None = None
    for drawing in drawings:
        if drawing.id == exclude_drawing_id:
            continue
        candidates = [get_drawing_start_point(drawing), get_drawing_end_point(drawing)]
        for point in candidates:
            if point is None:
                continue
            d = _dist(position, point.coordinate)
            if d > threshold:
                continue
            if closest is None or d < closest.distance:
                closest = SnapTarget(drawing.id, point.id, point, d)
    return closest


def find_player_snap_target(
    position: Coordinate,
    players: Iterable[Player],
    threshold: float,
) -> PlayerSnapTarget | None:
    closest: PlayerSnapTarget | None = None
    for player in players:
        d = _dist(position, player.coordinate)
        if d > threshold:
            continue
        if closest is None or d < closest.distance:
            closest = PlayerSnapTarget(player.id, player.coordinate, d)
    return closest


def resolve_snap(
    position: Coordinate,
    drawings: Iterable[Drawing],
    players: Iterable[Player],
    exclude_drawing_id: str | None,
    drawing_threshold: float,
    player_threshold: float = PLAYER_RADIUS_FEET,
) -> SnapTarget | PlayerSnapTarget | None:
    """Snap target for a dragged node. A player in range beats any drawing."""
    player_target = find_player_snap_target(position, players, player_threshold)
    if player_target is not None:
        return player_target
    return find_snap_target(position, drawings, exclude_drawing_id, drawing_threshold)


def check_link(
    drawing: Drawing,
    point_id: str,
    player: Player,
    drawings: Sequence[Drawing] = (),
) -> str | None:
    """Reason the node cannot be linked to the player, or None if it can."""
    if point_id not in drawing.points:
        return "Point does not exist on drawing"
    if not is_terminal_point(drawing, point_id):
        return "Only a start or end point can be linked to a player"
    if drawing.player_id is not None and drawing.player_id != player.id:
        return "Drawing is already linked to another player"
    for other in drawings:
        if other.id != drawing.id and other.player_id == player.id:
            return "Player is already linked to another drawing"
    return None


def link_point_to_player(
    drawing: Drawing,
    point_id: str,
    player: Player,
    drawings: Sequence[Drawing] = (),
) -> tuple[Drawing, str | None]:
    """Move one terminal node onto the player and record the link.

    Returns the linked drawing and None, or the unchanged drawing and a reason.
    """
    reason = check_link(drawing, point_id, player, drawings)
    if reason is not None:
        return drawing, reason
    out = clone_drawing(drawing)
    point = out.points[point_id]
    point.x = player.x
    point.y = player.y
    out.player_id = player.id
    out.linked_point_id = point_id
    return out, None


def nearest_terminal(drawing: Drawing, position: Coordinate) -> ControlPoint | None:
    """Start or end node closest to ``position``; the start wins ties."""
    best: ControlPoint | None = None
    best_d = math.inf
    for point in (get_drawing_start_point(drawing), get_drawing_end_point(drawing)):
        if point is None:
            continue
        d = _dist(position, point.coordinate)
        if d < best_d:
            best, best_d = point, d
    return best


def link_drawing_to_player(
    drawing: Drawing,
    player: Player,
    drawings: Sequence[Drawing] = (),
) -> tuple[Drawing, str | None]:
    """Translate the whole drawing so its nearest terminal sits on the player.

    Every point moves by the same delta, so the shape is preserved exactly.
    """
    terminal = nearest_terminal(drawing, player.coordinate)
    if terminal is None:
        return drawing, "Drawing has no points"
    reason = check_link(drawing, terminal.id, player, drawings)
    if reason is not None:
        return drawing, reason
    out = translate_drawing(
        drawing, player.x - terminal.x, player.y - terminal.y
    )
    # Land exactly on the player rather than on terminal + (player - terminal).
    out.points[terminal.id].x = player.x
    out.points[terminal.id].y = player.y
    out.player_id = player.id
    out.linked_point_id = terminal.id
    return out, None


def link_new_drawing(
    drawing: Drawing,
    players: Iterable[Player],
    drawings: Sequence[Drawing] = (),
    radius: float = PLAYER_RADIUS_FEET,
) -> Drawing:
    """Link a freshly drawn route whose start (else end) lies on a player."""
    players = list(players)
    start = get_drawing_start_point(drawing)
    end = get_drawing_end_point(drawing)
    for point in (start, end):
        if point is None:
            continue
        if point is end and start is not None and end.id == start.id:
            continue
        target = find_player_snap_target(point.coordinate, players, radius)
        if target is None:
            continue
        player = next(p for p in players if p.id == target.player_id)
        linked, reason = link_point_to_player(drawing, point.id, player, drawings)
        if reason is None:
            return linked
        debug.log(f"{drawing.id}: not linked to {player.id}: {reason}", scope="link")
    return drawing


def calculate_unlink_position(
    player_position: Coordinate,
    neighbour: Coordinate,
    distance: float = UNLINK_DISTANCE_FEET,
) -> Coordinate:
    """Point ``distance`` feet from the player toward its neighbour node.

    If the neighbour sits on the player, step straight down the field.
    """
    dx = neighbour[0] - player_position[0]
    dy = neighbour[1] - player_position[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return Coordinate(player_position[0], player_position[1] - distance)
    return Coordinate(
        player_position[0] + dx / length * distance,
        player_position[1] + dy / length * distance,
    )


def _neighbour_of(drawing: Drawing, point_id: str) -> ControlPoint | None:
    ids = path_point_ids(drawing)
    if point_id not in ids or len(ids) < 2:
        return None
    i = ids.index(point_id)
    return drawing.points[ids[i - 1] if i > 0 else ids[i + 1]]


def unlink_drawing(
    drawing: Drawing,
    player_position: Coordinate,
    distance: float = UNLINK_DISTANCE_FEET,
) -> Drawing:
    out = clone_drawing(drawing)
    pid = out.linked_point_id
    out.player_id = None
    out.linked_point_id = None
    if pid is None or pid not in out.points:
        return out
    neighbour = _neighbour_of(out, pid)
    if neighbour is None:
        target = Coordinate(player_position[0], player_position[1] - distance)
    else:
        target = calculate_unlink_position(
            player_position, neighbour.coordinate, distance
        )
    out.points[pid].x = target.x
    out.points[pid].y = target.y
    return out


def is_in_los_snap_zone(y: float) -> bool:
    return (
        LINE_OF_SCRIMMAGE - PLAYER_RADIUS_FEET
        <= y
        <= LINE_OF_SCRIMMAGE + PLAYER_RADIUS_FEET
    )


def apply_los_snap(x: float, y: float) -> tuple[float, float, bool]:
    """Snap a player so its edge touches the line of scrimmage.

    Offense (y <= LOS) lands at LOS - radius, defense at LOS + radius. Returns
    ``(x, y, snapped)``.
    """
    if not is_in_los_snap_zone(y):
        return x, y, False
    if y <= LINE_OF_SCRIMMAGE:
        return x, LINE_OF_SCRIMMAGE - PLAYER_RADIUS_FEET, True
    return x, LINE_OF_SCRIMMAGE + PLAYER_RADIUS_FEET, True
