from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Protocol, cast

from .routegeom.coordinates import FieldCoordinateSystem
from .routegeom.field import DEFAULT_STROKE_WIDTH_FEET, FIELD_WIDTH_FEET
from .routegeom.model import (
    Coordinate,
    LineEnd,
    LineStyle,
    PathMode,
    PathStyle,
    Player,
)
from .routegeom.render import build_path_d, export_drawings_svg
from .routegeom.smooth_path import create_drawing
from .routegeom.snap import link_new_drawing
from .utils import debug, debug_helpers


class CliArgs(Protocol):
    input: str
    output: str
    mode: str
    tolerance: float | None
    players: str | None
    svg: str | None
    plot: str | None
    width: float
    height: float
    field_width: float
    color: str
    stroke_width: float
    line_style: str
    line_end: str
    verbose: bool


def load_trace(path: Path) -> list[Coordinate]:
    """JSON list of ``[x, y]`` pairs or ``{"x": .., "y": ..}`` objects, in feet."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "points" in data:
        data = data["points"]
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of samples")
    coords: list[Coordinate] = []
    for item in data:
        if isinstance(item, dict):
            coords.append(Coordinate(float(item["x"]), float(item["y"])))
        else:
            x, y = item
            coords.append(Coordinate(float(x), float(y)))
    return coords


def load_players(path: Path) -> list[Player]:
    data: list[dict[str, Any]] = json.loads(path.read_text(encoding="utf-8"))
    return [Player.from_dict(item) for item in data]


def main() -> None:
    ap = argparse.ArgumentParser(
        description="Turn a freehand route trace (feet) into an editable drawing"
    )
    ap.add_argument("--input", required=True, help="JSON trace of [x, y] samples in feet")
    ap.add_argument("--output", required=True, help="Output drawing JSON")
    ap.add_argument(
        "--mode",
        choices=[m.value for m in PathMode],
        default=PathMode.SHARP.value,
        help="Path pipeline: sharp (snapped lines) or curve (smoothed at render)",
    )
    ap.add_argument(
        "--tolerance",
        type=float,
        default=None,
        help="Override the simplification tolerance (ft)",
    )
    ap.add_argument(
        "--players",
        default=None,
        help="Optional JSON list of players to link the route to",
    )
    ap.add_argument("--svg", default=None, help="Also write an SVG rendering")
    ap.add_argument("--plot", default=None, help="Also write a debug PNG plot")
    ap.add_argument("--width", type=float, default=800.0, help="Canvas width (px)")
    ap.add_argument("--height", type=float, default=600.0, help="Canvas height (px)")
    ap.add_argument(
        "--field_width",
        type=float,
        default=FIELD_WIDTH_FEET,
        help="Field width mapped onto the canvas width (ft)",
    )
    ap.add_argument("--color", default="#000000")
    ap.add_argument(
        "--stroke_width",
        type=float,
        default=DEFAULT_STROKE_WIDTH_FEET,
        help="Stroke width (ft)",
    )
    ap.add_argument(
        "--line_style",
        choices=[s.value for s in LineStyle],
        default=LineStyle.SOLID.value,
    )
    ap.add_argument(
        "--line_end",
        choices=[e.value for e in LineEnd],
        default=LineEnd.NONE.value,
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logs")

    args = cast(CliArgs, ap.parse_args())
    debug.set_verbose(args.verbose)

    if args.stroke_width <= 0:
        raise ValueError("stroke_width must be positive")
    if args.tolerance is not None and args.tolerance < 0:
        raise ValueError("tolerance must be >= 0")

    coord_system = FieldCoordinateSystem(args.width, args.height, args.field_width)
    debug.log(f"coords: {coord_system!r}")

    raw = load_trace(Path(args.input))
    style = PathStyle(
        color=args.color,
        stroke_width=args.stroke_width,
        line_style=LineStyle(args.line_style),
        line_end=LineEnd(args.line_end),
        path_mode=PathMode(args.mode),
    )
    drawing = create_drawing(raw, style, tolerance=args.tolerance)

    players: list[Player] = []
    if args.players is not None:
        players = load_players(Path(args.players))
        drawing = link_new_drawing(drawing, players)
    debug_helpers.log_drawing(drawing, scope="cli")
    debug.log(f"d: {build_path_d(drawing, coord_system)}", scope="cli")

    out_path = Path(args.output)
    out_path.write_text(
        json.dumps(drawing.to_dict(), indent=2, sort_keys=True), encoding="utf-8"
    )

    if args.svg is not None:
        export_drawings_svg(args.svg, [drawing], coord_system, players)
    if args.plot is not None:
        from .utils.plot_route import plot_route

        plot_route(Path(args.plot), raw, drawing, players, title=str(args.input))

    print(
        f"Saved: {out_path}  points={len(drawing.points)} "
        f"segments={len(drawing.segments)}"
    )


if __name__ == "__main__":
    main()
