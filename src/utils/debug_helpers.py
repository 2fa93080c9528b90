from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from . import debug

if TYPE_CHECKING:
    from ..routegeom.model import Drawing

_seen: set[str] = set()


def log_once(key: str, message: str) -> None:
    if debug.is_verbose() and key not in _seen:
        _seen.add(key)
        debug.log(message)


def log_points(name: str, arr: np.ndarray, *, scope: str | None = None) -> None:
    if not debug.is_verbose():
        return
    if arr.size == 0:
        debug.log(f"{name}: empty", scope=scope)
        return
    finite_all = bool(np.isfinite(arr).all())
    lo = np.nanmin(arr, axis=0)
    hi = np.nanmax(arr, axis=0)
    debug.log(
        f"{name}: n={arr.shape[0]} finite_all={finite_all} "
        f"bbox=({lo[0]:.4g},{lo[1]:.4g})-({hi[0]:.4g},{hi[1]:.4g})",
        scope=scope,
    )


def log_drawing(drawing: Drawing, *, scope: str | None = None) -> None:
    if not debug.is_verbose():
        return
    kinds: dict[str, int] = {}
    for segment in drawing.segments:
        kinds[segment.type.value] = kinds.get(segment.type.value, 0) + 1
    linked = f" player={drawing.player_id}" if drawing.player_id else ""
    debug.log(
        f"drawing {drawing.id}: points={len(drawing.points)} segments={kinds} "
        f"mode={drawing.style.path_mode.value}{linked}",
        scope=scope,
    )
