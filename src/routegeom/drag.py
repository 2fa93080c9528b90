"""Pointer drag gestures over drawings, wired through explicit callbacks.

Sessions take pixel positions, work in feet internally and never touch
drawing state directly: every change goes through a ``DragCallbacks``.
``PlayDrawings`` is an in-memory implementation of those callbacks.
"""

from __future__ import annotations

from typing import Callable, Protocol, Sequence

from ..utils import debug
from .coordinates import FieldCoordinateSystem
from .field import DEFAULT_SNAP_THRESHOLD_PX, MAX_HISTORY_SIZE, PLAYER_RADIUS_FEET
from .history import DrawingHistory
from .merge import apply_merge
from .model import (
    Coordinate,
    Drawing,
    Player,
    get_drawing_end_point,
    get_drawing_start_point,
    move_point,
    translate_drawing,
)
from .snap import (
    PlayerSnapTarget,
    SnapTarget,
    find_player_snap_target,
    link_drawing_to_player,
    link_point_to_player,
    resolve_snap,
)


class DragCallbacks(Protocol):
    def on_drag_point(self, drawing_id: str, point_id: str, x: float, y: float) -> None: ...

    def on_merge(
        self,
        source_drawing_id: str,
        source_point_id: str,
        target_drawing_id: str,
        target_point_id: str,
    ) -> None: ...

    def on_link_to_player(self, drawing_id: str, point_id: str, player_id: str) -> None: ...

    def on_drag_drawing(self, drawing_id: str, dx: float, dy: float) -> None: ...

    def on_link_drawing_to_player(self, drawing_id: str, player_id: str) -> None: ...

    def on_gesture_end(self) -> None: ...


class NodeDragSession:
    """Dragging one node. On release it links, merges, or just stays put."""

    def __init__(
        self,
        drawing_id: str,
        point_id: str,
        coord_system: FieldCoordinateSystem,
        callbacks: DragCallbacks,
        get_drawings: Callable[[], Sequence[Drawing]],
        get_players: Callable[[], Sequence[Player]],
        snap_threshold_px: float = DEFAULT_SNAP_THRESHOLD_PX,
    ) -> None:
        self.drawing_id = drawing_id
        self.point_id = point_id
        self.coord_system = coord_system
        self.callbacks = callbacks
        self._get_drawings = get_drawings
        self._get_players = get_players
        self.snap_threshold_px = snap_threshold_px
        self.target: SnapTarget | PlayerSnapTarget | None = None
        self.active = True

    def move(self, pixel_x: float, pixel_y: float) -> SnapTarget | PlayerSnapTarget | None:
        if not self.active:
            return None
        feet = self.coord_system.pixels_to_feet(pixel_x, pixel_y)
        self.callbacks.on_drag_point(self.drawing_id, self.point_id, feet.x, feet.y)
        # Threshold is set in pixels and must follow the current zoom level.
        threshold_feet = self.snap_threshold_px / self.coord_system.scale
        self.target = resolve_snap(
            feet,
            self._get_drawings(),
            self._get_players(),
            self.drawing_id,
            threshold_feet,
            PLAYER_RADIUS_FEET,
        )
        return self.target

    def release(self) -> SnapTarget | PlayerSnapTarget | None:
        """Fire at most one of link/merge for the pending target and end the gesture."""
        if not self.active:
            return None
        target = self.target
        if isinstance(target, PlayerSnapTarget):
            self.callbacks.on_link_to_player(
                self.drawing_id, self.point_id, target.player_id
            )
        elif isinstance(target, SnapTarget):
            self.callbacks.on_merge(
                self.drawing_id, self.point_id, target.drawing_id, target.point_id
            )
        self._finish()
        self.callbacks.on_gesture_end()
        return target

    def cancel(self) -> None:
        self._finish()

    def _finish(self) -> None:
        self.active = False
        self.target = None


class DrawingDragSession:
    """Dragging a whole drawing; a terminal landing on a player links it."""

    def __init__(
        self,
        drawing_id: str,
        start_pixel: Coordinate,
        coord_system: FieldCoordinateSystem,
        callbacks: DragCallbacks,
        get_drawings: Callable[[], Sequence[Drawing]],
        get_players: Callable[[], Sequence[Player]],
    ) -> None:
        self.drawing_id = drawing_id
        self.coord_system = coord_system
        self.callbacks = callbacks
        self._get_drawings = get_drawings
        self._get_players = get_players
        self._last = coord_system.pixels_to_feet(start_pixel.x, start_pixel.y)
        self.target: PlayerSnapTarget | None = None
        self.active = True

    def _drawing(self) -> Drawing | None:
        for drawing in self._get_drawings():
            if drawing.id == self.drawing_id:
                return drawing
        return None

    def move(self, pixel_x: float, pixel_y: float) -> PlayerSnapTarget | None:
        if not self.active:
            return None
        feet = self.coord_system.pixels_to_feet(pixel_x, pixel_y)
        dx = feet.x - self._last.x
        dy = feet.y - self._last.y
        self._last = feet
        self.callbacks.on_drag_drawing(self.drawing_id, dx, dy)

        self.target = None
        drawing = self._drawing()
        if drawing is None or drawing.player_id is not None:
            return None
        players = self._get_players()
        for terminal in (get_drawing_start_point(drawing), get_drawing_end_point(drawing)):
            if terminal is None:
                continue
            hit = find_player_snap_target(terminal.coordinate, players, PLAYER_RADIUS_FEET)
            if hit is not None and (self.target is None or hit.distance < self.target.distance):
                self.target = hit
        return self.target

    def release(self) -> PlayerSnapTarget | None:
        if not self.active:
            return None
        target = self.target
        if target is not None:
            self.callbacks.on_link_drawing_to_player(self.drawing_id, target.player_id)
        self.active = False
        self.target = None
        self.callbacks.on_gesture_end()
        return target

    def cancel(self) -> None:
        self.active = False
        self.target = None


class PlayDrawings:
    """Drawings and players of one play, edited through drag callbacks.

    Refused links are kept in ``last_error`` for the caller to show.
    """

    def __init__(
        self,
        drawings: Sequence[Drawing] = (),
        players: Sequence[Player] = (),
        max_history: int = MAX_HISTORY_SIZE,
    ) -> None:
        self.drawings: list[Drawing] = list(drawings)
        self.players: list[Player] = list(players)
        self.history = DrawingHistory(max_history)
        self.history.push(self.drawings)
        self.last_error: str | None = None

    def get(self, drawing_id: str) -> Drawing | None:
        for drawing in self.drawings:
            if drawing.id == drawing_id:
                return drawing
        return None

    def player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def _replace(self, drawing: Drawing) -> None:
        self.drawings = [drawing if d.id == drawing.id else d for d in self.drawings]

    def on_drag_point(self, drawing_id: str, point_id: str, x: float, y: float) -> None:
        drawing = self.get(drawing_id)
        if drawing is not None:
            self._replace(move_point(drawing, point_id, x, y))

    def on_merge(
        self,
        source_drawing_id: str,
        source_point_id: str,
        target_drawing_id: str,
        target_point_id: str,
    ) -> None:
        self.drawings = apply_merge(
            self.drawings,
            source_drawing_id,
            source_point_id,
            target_drawing_id,
            target_point_id,
        )

    def on_link_to_player(self, drawing_id: str, point_id: str, player_id: str) -> None:
        drawing = self.get(drawing_id)
        player = self.player(player_id)
        if drawing is None or player is None:
            debug.log(f"link skipped: {drawing_id} -> {player_id}", scope="link")
            return
        linked, reason = link_point_to_player(drawing, point_id, player, self.drawings)
        self._apply_link(linked, reason)

    def on_drag_drawing(self, drawing_id: str, dx: float, dy: float) -> None:
        drawing = self.get(drawing_id)
        if drawing is not None:
            self._replace(translate_drawing(drawing, dx, dy))

    def on_link_drawing_to_player(self, drawing_id: str, player_id: str) -> None:
        drawing = self.get(drawing_id)
        player = self.player(player_id)
        if drawing is None or player is None:
            debug.log(f"link skipped: {drawing_id} -> {player_id}", scope="link")
            return
        linked, reason = link_drawing_to_player(drawing, player, self.drawings)
        self._apply_link(linked, reason)

    def _apply_link(self, drawing: Drawing, reason: str | None) -> None:
        self.last_error = reason
        if reason is not None:
            debug.log(f"link refused for {drawing.id}: {reason}", scope="link")
            return
        self._replace(drawing)

    def on_gesture_end(self) -> None:
        self.history.push(self.drawings)

    def start_node_drag(
        self,
        drawing_id: str,
        point_id: str,
        coord_system: FieldCoordinateSystem,
        snap_threshold_px: float = DEFAULT_SNAP_THRESHOLD_PX,
    ) -> NodeDragSession:
        return NodeDragSession(
            drawing_id,
            point_id,
            coord_system,
            self,
            lambda: self.drawings,
            lambda: self.players,
            snap_threshold_px,
        )

    def start_drawing_drag(
        self,
        drawing_id: str,
        start_pixel: Coordinate,
        coord_system: FieldCoordinateSystem,
    ) -> DrawingDragSession:
        return DrawingDragSession(
            drawing_id,
            start_pixel,
            coord_system,
            self,
            lambda: self.drawings,
            lambda: self.players,
        )

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.drawings = snapshot
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.drawings = snapshot
        return True
