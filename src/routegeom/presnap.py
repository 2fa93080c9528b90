"""Rules for assigning pre-snap movement (shifts and motions) to drawings.

A shift relocates a player before the snap; a motion sends the player along
part of its route. Shifts are unlimited, a play holds at most one motion, and
a player carries at most one pre-snap movement.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from .model import (
    Drawing,
    PointType,
    PreSnapMotion,
    PreSnapType,
    clone_drawing,
    is_terminal_point,
)

MUST_BE_LINKED = "Drawing must be linked to a player"
MULTIPLE_TERMINALS = "Cannot apply shift to drawing with multiple terminal nodes"
PLAYER_HAS_MOVEMENT = "Player already has pre-snap movement on another drawing"
ONE_MOTION_PER_PLAY = "Only one motion is allowed per play"


class ClickType(str, Enum):
    TERMINAL = "terminal"
    PATH = "path"


def has_multiple_terminal_nodes(drawing: Drawing) -> bool:
    """More than one ``end`` point means the route branches."""
    return sum(1 for p in drawing.points.values() if p.type == PointType.END) > 1


def player_has_pre_snap_movement(
    player_id: str,
    drawings: Sequence[Drawing],
    exclude_drawing_id: str | None = None,
) -> bool:
    return any(
        d.player_id == player_id
        and d.pre_snap_motion is not None
        and d.id != exclude_drawing_id
        for d in drawings
    )


def count_motions(drawings: Sequence[Drawing]) -> int:
    return sum(
        1
        for d in drawings
        if d.pre_snap_motion is not None and d.pre_snap_motion.type == PreSnapType.MOTION
    )


def count_shifts(drawings: Sequence[Drawing]) -> int:
    return sum(
        1
        for d in drawings
        if d.pre_snap_motion is not None and d.pre_snap_motion.type == PreSnapType.SHIFT
    )


def validate_shift(drawing: Drawing, drawings: Sequence[Drawing]) -> str | None:
    if drawing.player_id is None:
        return MUST_BE_LINKED
    if has_multiple_terminal_nodes(drawing):
        return MULTIPLE_TERMINALS
    if player_has_pre_snap_movement(drawing.player_id, drawings, drawing.id):
        return PLAYER_HAS_MOVEMENT
    return None


def validate_motion(drawing: Drawing, drawings: Sequence[Drawing]) -> str | None:
    if drawing.player_id is None:
        return MUST_BE_LINKED
    if player_has_pre_snap_movement(drawing.player_id, drawings, drawing.id):
        return PLAYER_HAS_MOVEMENT
    if count_motions([d for d in drawings if d.id != drawing.id]) >= 1:
        return ONE_MOTION_PER_PLAY
    return None


def validate_pre_snap_movement(
    drawing: Drawing,
    drawings: Sequence[Drawing],
    click_type: ClickType | str,
) -> str | None:
    """Terminal clicks ask for a shift, clicks on the path ask for a motion."""
    if ClickType(click_type) == ClickType.TERMINAL:
        return validate_shift(drawing, drawings)
    return validate_motion(drawing, drawings)


def classify_click(drawing: Drawing, point_id: str) -> ClickType:
    return ClickType.TERMINAL if is_terminal_point(drawing, point_id) else ClickType.PATH


def apply_pre_snap_movement(
    drawing: Drawing,
    drawings: Sequence[Drawing],
    point_id: str,
) -> tuple[Drawing, str | None]:
    """Attach a shift or motion depending on which node was clicked.

    Returns the updated drawing and None, or the unchanged drawing and the
    reason the movement was refused.
    """
    click_type = classify_click(drawing, point_id)
    reason = validate_pre_snap_movement(drawing, drawings, click_type)
    if reason is not None:
        return drawing, reason
    out = clone_drawing(drawing)
    if click_type == ClickType.TERMINAL:
        out.pre_snap_motion = PreSnapMotion(type=PreSnapType.SHIFT)
    else:
        out.pre_snap_motion = PreSnapMotion(
            type=PreSnapType.MOTION, snap_point_id=point_id
        )
    return out, None


def clear_pre_snap_movement(drawing: Drawing) -> Drawing:
    out = clone_drawing(drawing)
    out.pre_snap_motion = None
    return out
