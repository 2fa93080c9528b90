from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Mapping

from .model import (
    Coordinate,
    Drawing,
    PathStyle,
    geometry_from_coordinates,
    new_drawing_id,
)

# Length of the post route's stem past the break.
POST_STEM_LENGTH_FEET = 15.0


@dataclass(frozen=True)
class TemplateParam:
    name: str
    default: float
    min: float
    max: float
    unit: str  # "feet" | "degrees"

    def clamp(self, value: float) -> float:
        return min(self.max, max(self.min, float(value)))


@dataclass(frozen=True)
class DrawingTemplate:
    id: str
    name: str
    params: tuple[TemplateParam, ...]
    # Resolved params -> route points in feet, relative to the player.
    build: Callable[[Mapping[str, float]], list[Coordinate]]


def _slant(params: Mapping[str, float]) -> list[Coordinate]:
    depth = params["depth"]
    angle = math.radians(params["angle"])
    return [Coordinate(0.0, 0.0), Coordinate(depth * math.tan(angle), depth)]


def _post(params: Mapping[str, float]) -> list[Coordinate]:
    depth = params["breakDepth"]
    angle = math.radians(params["breakAngle"])
    return [
        Coordinate(0.0, 0.0),
        Coordinate(0.0, depth),
        Coordinate(
            POST_STEM_LENGTH_FEET * math.sin(angle),
            depth + POST_STEM_LENGTH_FEET * math.cos(angle),
        ),
    ]


DRAWING_TEMPLATES: tuple[DrawingTemplate, ...] = (
    DrawingTemplate(
        id="slant",
        name="Slant",
        params=(
            TemplateParam("depth", 5.0, 3.0, 10.0, "feet"),
            TemplateParam("angle", 45.0, 30.0, 60.0, "degrees"),
        ),
        build=_slant,
    ),
    DrawingTemplate(
        id="post",
        name="Post",
        params=(
            TemplateParam("breakDepth", 12.0, 8.0, 18.0, "feet"),
            TemplateParam("breakAngle", 35.0, 20.0, 45.0, "degrees"),
        ),
        build=_post,
    ),
)


def get_template(template_id: str) -> DrawingTemplate | None:
    for template in DRAWING_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def resolve_params(
    template: DrawingTemplate, params: Mapping[str, float] | None = None
) -> dict[str, float]:
    """Defaults overridden by ``params``, each clamped to its range. Unknown names are ignored."""
    given = {} if params is None else params
    return {p.name: p.clamp(given.get(p.name, p.default)) for p in template.params}


def instantiate_template(
    template_id: str,
    style: PathStyle,
    params: Mapping[str, float] | None = None,
    origin: Coordinate = Coordinate(0.0, 0.0),
) -> Drawing | None:
    template = get_template(template_id)
    if template is None:
        return None
    resolved = resolve_params(template, params)
    coords = [
        Coordinate(origin[0] + c.x, origin[1] + c.y) for c in template.build(resolved)
    ]
    drawing = geometry_from_coordinates(coords).to_drawing(
        replace(style), new_drawing_id(f"drawing-{template.id}")
    )
    drawing.template_id = template.id
    drawing.template_params = resolved
    return drawing
