"""Football field dimensions and drawing constants.

All measurements are in feet unless the name says otherwise.
"""

from __future__ import annotations

import math

# Field dimensions
FIELD_WIDTH_FEET = 160.0
CENTER_X = 80.0

# Line of scrimmage (y position)
LINE_OF_SCRIMMAGE = 30.0

# Players
PLAYER_RADIUS_FEET = 2.0
UNLINK_DISTANCE_FEET = 5.0

# Line endings, as multiples of the stroke width in pixels
ARROW_LENGTH_MULTIPLIER = 3.5
TSHAPE_LENGTH_MULTIPLIER = 2.5
ARROW_ANGLE_RADIANS = math.pi / 6.0
DASH_PATTERN_LENGTH_MULTIPLIER = 3.0
DASH_PATTERN_GAP_MULTIPLIER = 2.0

DEFAULT_STROKE_WIDTH_FEET = 0.3
DEFAULT_ERASE_SIZE_FEET = 2.0

# Pixel distances used by pointer interaction
DEFAULT_SNAP_THRESHOLD_PX = 20.0
NODE_HIT_PADDING_PX = 12.0

MAX_HISTORY_SIZE = 10
