import math

import pytest

from src.routegeom.model import Coordinate, Drawing, PathStyle, Player, geometry_from_coordinates, path_coordinates
from src.routegeom.snap import (
    PlayerSnapTarget,
    SnapTarget,
    apply_los_snap,
    calculate_unlink_position,
    check_link,
    find_player_snap_target,
    find_snap_target,
    is_in_los_snap_zone,
    link_drawing_to_player,
    link_new_drawing,
    link_point_to_player,
    resolve_snap,
    unlink_drawing,
)


def _route(drawing_id: str, *coords: tuple[float, float]) -> Drawing:
    return geometry_from_coordinates([Coordinate(*c) for c in coords]).to_drawing(
        PathStyle(), drawing_id
    )


def test_only_terminal_nodes_are_snap_targets() -> None:
    a = _route("a", (0, 0), (10, 0), (20, 0))
    assert find_snap_target(Coordinate(10, 0), [a], None, 1.0) is None
    hit = find_snap_target(Coordinate(20.5, 0), [a], None, 1.0)
    assert hit is not None
    assert (hit.drawing_id, hit.point_id) == ("a", "p-2")
    assert hit.distance == pytest.approx(0.5)
    # Threshold is inclusive.
    assert find_snap_target(Coordinate(21, 0), [a], None, 1.0) is not None
    assert find_snap_target(Coordinate(20.5, 0), [a], "a", 1.0) is None


def test_nearest_target_across_drawings() -> None:
    a = _route("a", (0, 0), (10, 0))
    b = _route("b", (10.4, 0), (20, 0))
    hit = find_snap_target(Coordinate(10.3, 0), [a, b], None, 2.0)
    assert hit is not None and hit.drawing_id == "b"


def test_player_beats_drawing() -> None:
    a = _route("a", (0, 0.5), (10, 0))
    players = [Player("wr", 0.0, 1.0), Player("te", 30.0, 0.0)]
    target = resolve_snap(Coordinate(0, 0), [a], players, None, 2.0)
    assert isinstance(target, PlayerSnapTarget)
    assert target.player_id == "wr"
    target = resolve_snap(Coordinate(0, 0), [a], [], None, 2.0)
    assert isinstance(target, SnapTarget)
    assert find_player_snap_target(Coordinate(0, 0), players, 0.5) is None


def test_link_point_moves_node_onto_player() -> None:
    a = _route("a", (1, 1), (10, 0))
    wr = Player("wr", 0.0, 0.0)
    linked, reason = link_point_to_player(a, "p-0", wr)
    assert reason is None
    assert linked.player_id == "wr"
    assert linked.linked_point_id == "p-0"
    assert linked.points["p-0"].coordinate == Coordinate(0.0, 0.0)
    assert a.player_id is None


def test_link_refusals() -> None:
    a = _route("a", (0, 0), (10, 0), (20, 0))
    wr = Player("wr", 0.0, 0.0)
    assert check_link(a, "p-9", wr) == "Point does not exist on drawing"
    assert check_link(a, "p-1", wr) == "Only a start or end point can be linked to a player"
    other = _route("b", (5, 5), (6, 6))
    other.player_id = "wr"
    same, reason = link_point_to_player(a, "p-0", wr, [a, other])
    assert reason == "Player is already linked to another drawing"
    assert same is a
    a.player_id = "te"
    assert check_link(a, "p-0", wr) == "Drawing is already linked to another player"


def test_link_drawing_translates_whole_shape() -> None:
    a = _route("a", (0, 0), (10, 0), (10, 10))
    player = Player("wr", 11.0, 1.0)
    linked, reason = link_drawing_to_player(a, player)
    assert reason is None
    # The end is closer to the player than the start.
    assert linked.linked_point_id == "p-2"
    assert linked.points["p-2"].coordinate == Coordinate(11.0, 1.0)
    before = path_coordinates(a)
    after = path_coordinates(linked)
    for i in range(len(before) - 1):
        assert math.dist(after[i], after[i + 1]) == pytest.approx(
            math.dist(before[i], before[i + 1])
        )


def test_new_drawing_links_when_it_starts_on_a_player() -> None:
    a = _route("a", (1, 0), (1, 10))
    linked = link_new_drawing(a, [Player("wr", 0.0, 0.0)])
    assert linked.player_id == "wr"
    assert linked.points["p-0"].coordinate == Coordinate(0.0, 0.0)
    untouched = link_new_drawing(a, [Player("wr", 50.0, 50.0)])
    assert untouched.player_id is None


def test_unlink_pulls_node_off_player() -> None:
    assert calculate_unlink_position(Coordinate(0, 0), Coordinate(3, 4)) == pytest.approx((3.0, 4.0))
    assert calculate_unlink_position(Coordinate(0, 0), Coordinate(0, 0)) == pytest.approx((0.0, -5.0))

    a = _route("a", (0, 0), (0, 10))
    a.player_id = "wr"
    a.linked_point_id = "p-0"
    out = unlink_drawing(a, Coordinate(0.0, 0.0))
    assert out.player_id is None
    assert out.linked_point_id is None
    assert out.points["p-0"].coordinate == pytest.approx((0.0, 5.0))


def test_line_of_scrimmage_snap() -> None:
    assert is_in_los_snap_zone(28.0)
    assert is_in_los_snap_zone(32.0)
    assert not is_in_los_snap_zone(27.9)
    assert apply_los_snap(5.0, 30.0) == (5.0, 28.0, True)
    assert apply_los_snap(5.0, 31.0) == (5.0, 32.0, True)
    assert apply_los_snap(5.0, 40.0) == (5.0, 40.0, False)
