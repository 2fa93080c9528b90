from src.routegeom.model import (
    Coordinate,
    Drawing,
    PathStyle,
    PointType,
    PreSnapMotion,
    PreSnapType,
    geometry_from_coordinates,
)
from src.routegeom.presnap import (
    MULTIPLE_TERMINALS,
    MUST_BE_LINKED,
    ONE_MOTION_PER_PLAY,
    PLAYER_HAS_MOVEMENT,
    ClickType,
    apply_pre_snap_movement,
    classify_click,
    clear_pre_snap_movement,
    count_motions,
    count_shifts,
    has_multiple_terminal_nodes,
    validate_motion,
    validate_pre_snap_movement,
    validate_shift,
)


def _linked(drawing_id: str, player_id: str | None) -> Drawing:
    d = geometry_from_coordinates(
        [Coordinate(0, 0), Coordinate(0, 10), Coordinate(10, 10)]
    ).to_drawing(PathStyle(), drawing_id)
    d.player_id = player_id
    d.linked_point_id = None if player_id is None else "p-0"
    return d


def test_unlinked_drawing_is_refused() -> None:
    d = _linked("a", None)
    assert validate_shift(d, [d]) == MUST_BE_LINKED
    assert validate_motion(d, [d]) == MUST_BE_LINKED


def test_branching_route_cannot_shift() -> None:
    d = _linked("a", "wr")
    d.points["p-1"].type = PointType.END
    assert has_multiple_terminal_nodes(d)
    assert validate_shift(d, [d]) == MULTIPLE_TERMINALS


def test_one_movement_per_player() -> None:
    shifted = _linked("a", "wr")
    shifted.pre_snap_motion = PreSnapMotion(PreSnapType.SHIFT)
    other = _linked("b", "wr")
    assert validate_shift(other, [shifted, other]) == PLAYER_HAS_MOVEMENT
    assert validate_motion(other, [shifted, other]) == PLAYER_HAS_MOVEMENT
    # Re-validating the drawing that holds the movement is fine.
    assert validate_shift(shifted, [shifted, other]) is None


def test_one_motion_per_play_but_many_shifts() -> None:
    moving = _linked("a", "wr")
    moving.pre_snap_motion = PreSnapMotion(PreSnapType.MOTION, snap_point_id="p-1")
    other = _linked("b", "te")
    assert validate_motion(other, [moving, other]) == ONE_MOTION_PER_PLAY
    assert validate_shift(other, [moving, other]) is None

    s1 = _linked("c", "rb")
    s1.pre_snap_motion = PreSnapMotion(PreSnapType.SHIFT)
    s2 = _linked("d", "fb")
    assert validate_shift(s2, [moving, s1, s2]) is None
    assert count_motions([moving, s1, s2]) == 1
    assert count_shifts([moving, s1, s2]) == 1


def test_click_type_picks_movement() -> None:
    d = _linked("a", "wr")
    assert classify_click(d, "p-2") == ClickType.TERMINAL
    assert classify_click(d, "p-1") == ClickType.PATH
    assert validate_pre_snap_movement(d, [d], "terminal") is None

    shifted, reason = apply_pre_snap_movement(d, [d], "p-2")
    assert reason is None
    assert shifted.pre_snap_motion == PreSnapMotion(PreSnapType.SHIFT)

    moving, reason = apply_pre_snap_movement(d, [d], "p-1")
    assert reason is None
    assert moving.pre_snap_motion == PreSnapMotion(PreSnapType.MOTION, "p-1")
    assert d.pre_snap_motion is None

    other = _linked("b", "te")
    same, reason = apply_pre_snap_movement(other, [moving, other], "p-1")
    assert reason == ONE_MOTION_PER_PLAY
    assert same is other

    assert clear_pre_snap_movement(moving).pre_snap_motion is None
