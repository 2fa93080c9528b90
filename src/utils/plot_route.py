from __future__ import annotations

from pathlib import Path
from typing import Sequence

import numpy as np

from ..routegeom.curves import drawing_polyline
from ..routegeom.field import FIELD_WIDTH_FEET, LINE_OF_SCRIMMAGE, PLAYER_RADIUS_FEET
from ..routegeom.model import Coordinate, Drawing, LineStyle, Player, path_coordinates


def plot_route(
    out_path: Path,
    raw: Sequence[Coordinate],
    drawing: Drawing,
    players: Sequence[Player] = (),
    title: str | None = None,
) -> None:
    """Raw trace vs stored nodes vs the path as displayed, in feet."""
    import matplotlib.pyplot as plt
    from matplotlib.patches import Circle

    fig, ax = plt.subplots(figsize=(8.5, 6.0), dpi=120)
    ax.axhline(LINE_OF_SCRIMMAGE, color="#777777", linewidth=1.0, linestyle="--")

    if len(raw) > 0:
        R = np.asarray(raw, dtype=np.float64)
        ax.plot(R[:, 0], R[:, 1], color="#bbbbbb", linewidth=1.0, label="trace")

    shown = drawing_polyline(drawing)
    if shown.shape[0] > 0:
        ax.plot(
            shown[:, 0],
            shown[:, 1],
            color=drawing.style.color,
            linewidth=2.0,
            linestyle="--" if drawing.style.line_style == LineStyle.DASHED else "-",
            label=f"{drawing.style.path_mode.value} path",
        )

    nodes = path_coordinates(drawing)
    if nodes:
        N = np.asarray(nodes, dtype=np.float64)
        ax.scatter(N[:, 0], N[:, 1], s=18, color="#d62728", zorder=3, label="nodes")

    for player in players:
        ax.add_patch(
            Circle(
                (player.x, player.y),
                PLAYER_RADIUS_FEET,
                facecolor=player.color,
                edgecolor="#000000",
                alpha=0.4 if player.is_ghost else 0.9,
            )
        )
        if player.label:
            ax.annotate(player.label, (player.x, player.y), ha="center", va="center")

    ax.set_xlim(0.0, FIELD_WIDTH_FEET)
    ax.set_aspect("equal", adjustable="datalim")
    ax.set_xlabel("x (ft)")
    ax.set_ylabel("y (ft)")
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    if title:
        fig.suptitle(title, fontsize=12)
    fig.tight_layout()
    fig.savefig(out_path, dpi=160)
