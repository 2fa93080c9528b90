import json
import sys

import pytest

from src import run_route
from src.routegeom.model import Drawing, PathMode, SegmentType


def _write_trace(path) -> None:
    trace = [[float(x), 28.0] for x in range(0, 11)]
    trace += [[10.0, 28.0 + float(y)] for y in range(1, 11)]
    path.write_text(json.dumps(trace), encoding="utf-8")


def test_sharp_route_with_player_and_svg(tmp_path, monkeypatch, capsys) -> None:
    trace = tmp_path / "trace.json"
    _write_trace(trace)
    players = tmp_path / "players.json"
    players.write_text(
        json.dumps([{"id": "wr", "x": 0.5, "y": 28.0, "label": "X"}]), encoding="utf-8"
    )
    out = tmp_path / "route.json"
    svg = tmp_path / "route.svg"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "run_route",
            "--input", str(trace),
            "--output", str(out),
            "--players", str(players),
            "--svg", str(svg),
            "--line_end", "arrow",
        ],
    )
    run_route.main()

    drawing = Drawing.from_dict(json.loads(out.read_text(encoding="utf-8")))
    assert drawing.style.path_mode == PathMode.SHARP
    assert len(drawing.segments) == 2
    assert drawing.player_id == "wr"
    assert drawing.points[drawing.linked_point_id].coordinate == (0.5, 28.0)
    assert svg.exists()
    assert "Saved:" in capsys.readouterr().out


def test_curve_mode_accepts_point_objects(tmp_path, monkeypatch) -> None:
    trace = tmp_path / "trace.json"
    points = [{"x": float(x), "y": float(x) ** 2 / 10.0} for x in range(20)]
    trace.write_text(json.dumps({"points": points}), encoding="utf-8")
    out = tmp_path / "route.json"
    monkeypatch.setattr(
        sys,
        "argv",
        ["run_route", "--input", str(trace), "--output", str(out), "--mode", "curve"],
    )
    run_route.main()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["style"]["pathMode"] == "curve"
    assert all(s["type"] == SegmentType.LINE.value for s in data["segments"])


def test_rejects_bad_stroke_width(tmp_path, monkeypatch) -> None:
    trace = tmp_path / "trace.json"
    _write_trace(trace)
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "run_route",
            "--input", str(trace),
            "--output", str(tmp_path / "out.json"),
            "--stroke_width", "0",
        ],
    )
    with pytest.raises(ValueError):
        run_route.main()
