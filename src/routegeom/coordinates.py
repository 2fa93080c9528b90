from __future__ import annotations

import math

from .field import FIELD_WIDTH_FEET
from .model import Coordinate


class FieldCoordinateSystem:
    """Maps field feet to container pixels and back.

    Feet: origin at the bottom-left corner, y grows upward, the field is
    ``FIELD_WIDTH_FEET`` wide.
    Pixels: origin at the top-left corner of the container, y grows downward.

    The scale is always derived from the current container width, so callers
    must read ``scale`` from the instance instead of caching it across resizes.
    """

    def __init__(
        self,
        container_width: float,
        container_height: float,
        field_width_feet: float = FIELD_WIDTH_FEET,
    ) -> None:
        _check_dimensions(container_width, container_height)
        if not math.isfinite(field_width_feet) or field_width_feet <= 0:
            raise ValueError("field_width_feet must be a finite positive number")
        self._width = float(container_width)
        self._height = float(container_height)
        self._field_width_feet = float(field_width_feet)

    @property
    def scale(self) -> float:
        """Pixels per foot."""
        return self._width / self._field_width_feet

    def feet_to_pixels(self, feet_x: float, feet_y: float) -> Coordinate:
        s = self.scale
        return Coordinate(feet_x * s, self._height - feet_y * s)

    def pixels_to_feet(self, pixel_x: float, pixel_y: float) -> Coordinate:
        s = self.scale
        return Coordinate(pixel_x / s, (self._height - pixel_y) / s)

    def screen_to_feet(
        self,
        screen_x: float,
        screen_y: float,
        zoom: float = 1.0,
        pan_x: float = 0.0,
        pan_y: float = 0.0,
    ) -> Coordinate:
        """Feet under a pointer on a zoomed/panned canvas.

        The canvas transform is a uniform scale about the origin followed by a
        translation, so it is undone before the regular pixel conversion.
        """
        if not math.isfinite(zoom) or zoom <= 0:
            raise ValueError("zoom must be a finite positive number")
        canvas_x = (screen_x - pan_x) / zoom
        canvas_y = (screen_y - pan_y) / zoom
        return self.pixels_to_feet(canvas_x, canvas_y)

    def feet_to_pixel_length(self, feet: float) -> float:
        """Length in feet (stroke width, erase size) -> on-screen pixels."""
        return feet * self.scale

    def pixel_length_to_feet(self, pixels: float) -> float:
        """On-screen pixel length (e.g. a brush preset) -> feet for storage."""
        return pixels / self.scale

    def update_dimensions(self, width: float, height: float) -> None:
        _check_dimensions(width, height)
        self._width = float(width)
        self._height = float(height)

    def get_dimensions(self) -> tuple[float, float]:
        return self._width, self._height

    def height_in_feet(self) -> float:
        return self._height / self.scale

    def __repr__(self) -> str:
        return (
            f"FieldCoordinateSystem(width={self._width:g}, height={self._height:g}, "
            f"scale={self.scale:.6g})"
        )


def create_coordinate_system(
    container_width: float, container_height: float
) -> FieldCoordinateSystem:
    return FieldCoordinateSystem(container_width, container_height)


def _check_dimensions(width: float, height: float) -> None:
    if not math.isfinite(width) or width <= 0:
        raise ValueError("container width must be a finite positive number")
    if not math.isfinite(height) or height < 0:
        raise ValueError("container height must be finite and >= 0")
