import math

import pytest

from src.routegeom.coordinates import FieldCoordinateSystem
from src.routegeom.model import (
    ControlPoint,
    Coordinate,
    Drawing,
    LineEnd,
    LineStyle,
    PathMode,
    PathSegment,
    PathStyle,
    Player,
    PointType,
    SegmentType,
    geometry_from_coordinates,
)
from src.routegeom.render import (
    LINE_END_ID_PREFIX,
    ROUTE_ID_PREFIX,
    build_arrow,
    build_path,
    build_path_d,
    build_t_shape,
    dash_array,
    export_drawings_svg,
    format_number,
    line_end_path_d,
    stroke_width_px,
)

CS = FieldCoordinateSystem(1600.0, 900.0)


def _route(*coords: tuple[float, float], style: PathStyle | None = None) -> Drawing:
    return geometry_from_coordinates([Coordinate(*c) for c in coords]).to_drawing(
        PathStyle() if style is None else style, "a"
    )


def test_format_number() -> None:
    assert format_number(1.0 / 3.0) == "0.333"
    assert format_number(2.5) == "2.5"
    assert format_number(100.0) == "100"
    assert format_number(-0.0001) == "0"


def test_sharp_path_d() -> None:
    d = _route((0, 0), (10, 0), (10, 10))
    assert build_path_d(d, CS) == "M 0 900 L 100 900 L 100 800"


def test_inline_cubic_and_quadratic_path_d() -> None:
    cubic = Drawing(
        id="c",
        points={
            "p-0": ControlPoint("p-0", 0, 0, PointType.START, handle_out=Coordinate(1, 0)),
            "p-1": ControlPoint("p-1", 10, 0, PointType.END, handle_in=Coordinate(-1, 0)),
        },
        segments=[PathSegment(SegmentType.CUBIC, ["p-0", "p-1"])],
    )
    assert build_path_d(cubic, CS) == "M 0 900 C 10 900 90 900 100 900"

    quad = Drawing(
        id="q",
        points={
            "p-0": ControlPoint("p-0", 0, 0, PointType.START),
            "p-1": ControlPoint("p-1", 5, 5, PointType.CURVE),
            "p-2": ControlPoint("p-2", 10, 0, PointType.END),
        },
        segments=[PathSegment(SegmentType.QUADRATIC, ["p-0", "p-1", "p-2"])],
    )
    assert build_path_d(quad, CS) == "M 0 900 Q 50 850 100 900"


def test_missing_point_segment_is_skipped() -> None:
    d = _route((0, 0), (10, 0))
    d.segments.append(PathSegment(SegmentType.LINE, ["p-1", "p-9"]))
    assert build_path_d(d, CS) == "M 0 900 L 100 900"
    assert build_path_d(Drawing(id="empty"), CS) == ""


def test_curve_mode_renders_chaikin_polyline() -> None:
    d = _route((0, 0), (10, 0), (10, 10), style=PathStyle(path_mode=PathMode.CURVE))
    path = build_path_d(d, CS)
    assert path.startswith("M 0 900 ")
    assert path.endswith("L 100 800")
    assert path.count("L") > 6
    assert "C" not in path


def test_end_direction_follows_last_segment() -> None:
    rendered = build_path(_route((0, 0), (10, 0), (10, 10)), CS)
    assert rendered.end_direction is not None
    assert rendered.end_direction.point == Coordinate(100.0, 800.0)
    assert rendered.end_direction.angle == pytest.approx(-math.pi / 2)


def test_line_end_decorations() -> None:
    tip = Coordinate(100.0, 800.0)
    arrow = build_arrow(tip, -math.pi / 2, 3.0)
    assert arrow.count("M 100 800 L") == 2
    assert build_t_shape(tip, 0.0, 2.0) == "M 100 795 L 100 805"
    rendered = build_path(_route((0, 0), (10, 0)), CS)
    assert line_end_path_d(LineEnd.NONE, rendered.end_direction, 3.0) is None
    assert line_end_path_d(LineEnd.TSHAPE, rendered.end_direction, 2.0) == (
        "M 100 895 L 100 905"
    )


def test_stroke_width_and_dashes_scale_with_container() -> None:
    style = PathStyle(stroke_width=0.3, line_style=LineStyle.DASHED)
    assert stroke_width_px(style, CS) == pytest.approx(3.0)
    assert dash_array(style, CS) == pytest.approx([9.0, 6.0])
    assert dash_array(PathStyle(), CS) == []
    big = FieldCoordinateSystem(3200.0, 1800.0)
    assert stroke_width_px(style, big) == pytest.approx(6.0)


def test_export_svg(tmp_path) -> None:
    style = PathStyle(line_style=LineStyle.DASHED, line_end=LineEnd.ARROW)
    d = _route((80, 28), (80, 40), style=style)
    d.player_id = "wr"
    d.linked_point_id = "p-0"
    out = tmp_path / "play.svg"
    export_drawings_svg(str(out), [d], CS, [Player("wr", 80.0, 28.0)])
    text = out.read_text(encoding="utf-8")
    assert f'id="{ROUTE_ID_PREFIX}a"' in text
    assert f'id="{LINE_END_ID_PREFIX}a"' in text
    assert "stroke-dasharray" in text
    assert "<circle" in text
