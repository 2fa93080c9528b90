import pytest

from src.routegeom.coordinates import FieldCoordinateSystem
from src.routegeom.drag import NodeDragSession, PlayDrawings
from src.routegeom.model import (
    Coordinate,
    Drawing,
    PathStyle,
    Player,
    geometry_from_coordinates,
    path_coordinates,
)
from src.routegeom.snap import PlayerSnapTarget, SnapTarget

CS = FieldCoordinateSystem(1600.0, 900.0)


def _route(drawing_id: str, *coords: tuple[float, float]) -> Drawing:
    return geometry_from_coordinates([Coordinate(*c) for c in coords]).to_drawing(
        PathStyle(), drawing_id
    )


class RecordingCallbacks:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def on_drag_point(self, drawing_id: str, point_id: str, x: float, y: float) -> None:
        self.calls.append(("drag_point", drawing_id, point_id))

    def on_merge(self, sd: str, sp: str, td: str, tp: str) -> None:
        self.calls.append(("merge", sd, sp, td, tp))

    def on_link_to_player(self, drawing_id: str, point_id: str, player_id: str) -> None:
        self.calls.append(("link", drawing_id, point_id, player_id))

    def on_drag_drawing(self, drawing_id: str, dx: float, dy: float) -> None:
        self.calls.append(("drag_drawing", drawing_id))

    def on_link_drawing_to_player(self, drawing_id: str, player_id: str) -> None:
        self.calls.append(("link_drawing", drawing_id, player_id))

    def on_gesture_end(self) -> None:
        self.calls.append(("end",))


def test_node_drag_release_merges() -> None:
    play = PlayDrawings([_route("a", (0, 0), (10, 0)), _route("b", (10.5, 0), (20, 0))])
    session = play.start_node_drag("a", "p-1", CS)
    target = session.move(102.0, 900.0)
    assert isinstance(target, SnapTarget)
    assert (target.drawing_id, target.point_id) == ("b", "p-0")
    assert play.get("a").points["p-1"].x == 10.2

    session.release()
    assert len(play.drawings) == 1
    merged = play.drawings[0]
    assert [(c.x, c.y) for c in path_coordinates(merged)] == [(0, 0), (10.5, 0), (20, 0)]
    assert play.history.can_undo()


def test_player_target_links_instead_of_merging() -> None:
    play = PlayDrawings(
        [_route("a", (0, 0), (10, 0)), _route("b", (10.5, 0), (20, 0))],
        [Player("wr", 10.4, 0.0)],
    )
    session = play.start_node_drag("a", "p-1", CS)
    assert isinstance(session.move(102.0, 900.0), PlayerSnapTarget)
    session.release()
    assert len(play.drawings) == 2
    linked = play.get("a")
    assert linked.player_id == "wr"
    assert linked.points["p-1"].coordinate == Coordinate(10.4, 0.0)


def test_release_fires_at_most_one_action() -> None:
    drawings = [_route("a", (0, 0), (10, 0)), _route("b", (10.5, 0), (20, 0))]
    callbacks = RecordingCallbacks()
    session = NodeDragSession(
        "a", "p-1", CS, callbacks, lambda: drawings, lambda: [Player("wr", 10.4, 0.0)]
    )
    session.move(102.0, 900.0)
    session.release()
    assert callbacks.calls == [
        ("drag_point", "a", "p-1"),
        ("link", "a", "p-1", "wr"),
        ("end",),
    ]
    assert session.release() is None


def test_drag_without_target_only_moves() -> None:
    play = PlayDrawings([_route("a", (0, 0), (10, 0)), _route("b", (50, 0), (60, 0))])
    session = play.start_node_drag("a", "p-1", CS)
    assert session.move(200.0, 800.0) is None
    assert session.release() is None
    assert len(play.drawings) == 2
    assert play.get("a").points["p-1"].coordinate == Coordinate(20.0, 10.0)

    assert play.undo()
    assert play.get("a").points["p-1"].coordinate == Coordinate(10.0, 0.0)
    assert play.redo()
    assert play.get("a").points["p-1"].coordinate == Coordinate(20.0, 10.0)


def test_snap_threshold_follows_scale() -> None:
    drawings = [_route("a", (0, 0), (10, 0)), _route("b", (11.5, 0), (20, 0))]
    callbacks = RecordingCallbacks()
    # 20 px is 2 ft at 10 px/ft but only 1 ft at 20 px/ft.
    wide = NodeDragSession("a", "p-1", CS, callbacks, lambda: drawings, lambda: [])
    assert wide.move(100.0, 900.0) is not None
    zoomed = FieldCoordinateSystem(3200.0, 1800.0)
    narrow = NodeDragSession("a", "p-1", zoomed, callbacks, lambda: drawings, lambda: [])
    assert narrow.move(200.0, 1800.0) is None


def test_drawing_drag_links_whole_route() -> None:
    play = PlayDrawings([_route("a", (5, 5), (5, 15))], [Player("wr", 0.0, 0.0)])
    session = play.start_drawing_drag("a", Coordinate(50.0, 850.0), CS)
    target = session.move(1.0, 899.0)
    assert target is not None and target.player_id == "wr"
    session.release()
    linked = play.get("a")
    assert linked.player_id == "wr"
    assert linked.linked_point_id == "p-0"
    start, end = path_coordinates(linked)
    assert start == Coordinate(0.0, 0.0)
    assert end == pytest.approx((0.0, 10.0))


def test_refused_link_is_reported() -> None:
    other = _route("b", (30, 0), (40, 0))
    other.player_id = "wr"
    other.linked_point_id = "p-0"
    play = PlayDrawings([_route("a", (0, 0), (10, 0)), other], [Player("wr", 10.4, 0.0)])
    session = play.start_node_drag("a", "p-1", CS)
    session.move(102.0, 900.0)
    session.release()
    assert play.last_error == "Player is already linked to another drawing"
    assert play.get("a").player_id is None
