from . import (
    chaikin,
    coordinates,
    curves,
    drag,
    editing,
    field,
    hit_test,
    history,
    merge,
    model,
    presnap,
    render,
    sharp_path,
    simplify,
    smooth_path,
    snap,
    svg_io,
    templates,
)

__all__ = [
    "field",
    "coordinates",
    "model",
    "simplify",
    "sharp_path",
    "smooth_path",
    "chaikin",
    "curves",
    "render",
    "svg_io",
    "hit_test",
    "snap",
    "merge",
    "editing",
    "presnap",
    "drag",
    "templates",
    "history",
]
