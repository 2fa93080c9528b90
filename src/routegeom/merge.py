from __future__ import annotations

import copy
from dataclasses import replace
from typing import Sequence

from ..utils import debug, debug_helpers
from .curves import migrate_legacy_segments
from .model import (
    Drawing,
    LineEnd,
    PathSegment,
    is_end_point,
    is_start_point,
    is_terminal_point,
    new_drawing_id,
    next_point_id,
    retag_points,
    reverse_drawing,
)

_LINE_END_RANK = {LineEnd.NONE: 0, LineEnd.TSHAPE: 1, LineEnd.ARROW: 2}


class MergeError(ValueError):
    """Raised when two drawings cannot be merged at the requested nodes."""


def strongest_line_end(*ends: LineEnd) -> LineEnd:
    """``arrow`` > ``tShape`` > ``none``."""
    best = LineEnd.NONE
    for end in ends:
        if _LINE_END_RANK[end] > _LINE_END_RANK[best]:
            best = end
    return best


def check_merge(
    source: Drawing,
    target: Drawing,
    source_point_id: str,
    target_point_id: str,
) -> str | None:
    """Reason the merge is not allowed, or None."""
    if source.id == target.id:
        return "Cannot merge a drawing with itself"
    if not is_terminal_point(source, source_point_id):
        return "Source point must be a start or end point"
    if not is_terminal_point(target, target_point_id):
        return "Target point must be a start or end point"
    if source.player_id is not None and target.player_id is not None:
        return "Cannot merge two drawings that are both linked to players"
    if source.player_id is not None and source.linked_point_id == source_point_id:
        return "Cannot merge at a point linked to a player"
    if target.player_id is not None and target.linked_point_id == target_point_id:
        return "Cannot merge at a point linked to a player"
    return None


def merge_drawings(
    source: Drawing,
    target: Drawing,
    source_point_id: str,
    target_point_id: str,
    drawing_id: str | None = None,
) -> Drawing:
    """Join ``source`` and ``target`` so the path runs source far end ->
    junction -> target far end.

    The source junction id survives but takes the target junction's
    coordinates (the dragged node moves onto the stationary one). Other target
    points are copied under fresh ids.
    """
    reason = check_merge(source, target, source_point_id, target_point_id)
    if reason is not None:
        raise MergeError(reason)

    source_was_end = is_end_point(source, source_point_id)
    src = migrate_legacy_segments(source)
    tgt = migrate_legacy_segments(target)
    if not source_was_end:
        src = reverse_drawing(src)
    if not is_start_point(tgt, target_point_id):
        tgt = reverse_drawing(tgt)

    points = copy.deepcopy(src.points)
    junction = points[source_point_id]
    target_junction = tgt.points[target_point_id]
    junction.x = target_junction.x
    junction.y = target_junction.y
    junction.handle_out = copy.copy(target_junction.handle_out)

    id_map = {target_point_id: source_point_id}
    taken = set(points)
    for old_id, point in tgt.points.items():
        if old_id == target_point_id:
            continue
        new_id = next_point_id(taken)
        taken.add(new_id)
        id_map[old_id] = new_id
        points[new_id] = replace(copy.deepcopy(point), id=new_id)

    segments = [copy.deepcopy(s) for s in src.segments]
    segments.extend(
        PathSegment(type=s.type, point_ids=[id_map.get(pid, pid) for pid in s.point_ids])
        for s in tgt.segments
    )

    # The source decoration is consumed when the source junction was its end.
    # The target decoration is either consumed or now sits on the merged end.
    candidates = [target.style.line_end]
    if source_was_end:
        candidates.append(source.style.line_end)
    style = replace(source.style, line_end=strongest_line_end(*candidates))

    merged = Drawing(
        id=new_drawing_id() if drawing_id is None else drawing_id,
        points=points,
        segments=segments,
        style=style,
        annotations=copy.deepcopy(source.annotations) + copy.deepcopy(target.annotations),
    )
    if source.player_id is not None:
        merged.player_id = source.player_id
        merged.linked_point_id = source.linked_point_id
    elif target.player_id is not None:
        merged.player_id = target.player_id
        merged.linked_point_id = (
            None
            if target.linked_point_id is None
            else id_map.get(target.linked_point_id)
        )
    if source.pre_snap_motion is not None:
        merged.pre_snap_motion = copy.deepcopy(source.pre_snap_motion)
    elif target.pre_snap_motion is not None:
        motion = copy.deepcopy(target.pre_snap_motion)
        if motion.snap_point_id is not None:
            motion.snap_point_id = id_map.get(motion.snap_point_id)
        merged.pre_snap_motion = motion

    merged = retag_points(merged)
    debug_helpers.log_drawing(merged, scope="merge")
    return merged


def apply_merge(
    drawings: Sequence[Drawing],
    source_drawing_id: str,
    source_point_id: str,
    target_drawing_id: str,
    target_point_id: str,
) -> list[Drawing]:
    """Replace source and target by their merge, in the source's slot.

    A missing drawing or a refused merge is logged and the list is returned
    unchanged.
    """
    out = list(drawings)
    by_id = {d.id: d for d in out}
    source = by_id.get(source_drawing_id)
    target = by_id.get(target_drawing_id)
    if source is None or target is None:
        debug.log(
            f"merge skipped: missing drawing {source_drawing_id if source is None else target_drawing_id}",
            scope="merge",
        )
        return out
    try:
        merged = merge_drawings(source, target, source_point_id, target_point_id)
    except MergeError as exc:
        debug.log(f"merge skipped: {exc}", scope="merge")
        return out
    result: list[Drawing] = []
    for drawing in out:
        if drawing.id == source_drawing_id:
            result.append(merged)
        elif drawing.id != target_drawing_id:
            result.append(drawing)
    return result
