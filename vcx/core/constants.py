"""Defaults, reference orientations and validation ranges."""
from __future__ import annotations

import math
from typing import Literal

from vcx.core.states.orientation_state import Quaternion

TargetOrientation = Literal['portrait', 'landscape']
AngleFormat = Literal['degrees', 'radians']

# Device indicator colours
DEFAULT_MODEL_COLOR = "#FFFFFF"
DEFAULT_ALIGNED_COLOR = "#00FF00"

# Alignment detection
DEFAULT_TARGET_ORIENTATION: TargetOrientation = 'portrait'
DEFAULT_ALIGNMENT_TOLERANCE = 2.0  # degrees
DEFAULT_ALIGNMENT_EXIT_MULTIPLIER = 2.0  # exit threshold = tolerance * multiplier
DEFAULT_MIN_STABLE_DURATION_MS = 150.0

# Orientation sampling
DEFAULT_UPDATE_INTERVAL = 33  # ms, ~30 FPS
DEFAULT_ORIENTATION_CHANGE_THROTTLE_MS = 100
DEFAULT_ENABLED = True
DEFAULT_SMOOTHING_FACTOR = 0.2  # 0 = frozen, 1 = no smoothing

# Angle display
DEFAULT_ANGLE_PRECISION = 1
DEFAULT_ANGLE_FORMAT: AngleFormat = 'degrees'

# Bubble level
DEFAULT_LEVEL_THRESHOLD = 1.0  # degrees
DEFAULT_LEVEL_UPDATE_INTERVAL = 50  # ms
DEFAULT_ANGLE_CHANGE_THROTTLE_MS = 100
ANGLE_TEXT_UPDATE_THRESHOLD = 0.1  # degrees

# Validation ranges (inclusive)
ALIGNMENT_TOLERANCE_RANGE = (0.1, 45.0)
UPDATE_INTERVAL_RANGE = (8, 100)
THROTTLE_MS_RANGE = (0, 1000)
ANGLE_PRECISION_RANGE = (0, 3)

_HALF_SQRT2 = math.sqrt(0.5)

PORTRAIT_REFERENCE = Quaternion(1.0, 0.0, 0.0, 0.0)
# +90 deg about z
LANDSCAPE_RIGHT_REFERENCE = Quaternion(_HALF_SQRT2, 0.0, 0.0, _HALF_SQRT2)
# -90 deg about z
LANDSCAPE_LEFT_REFERENCE = Quaternion(_HALF_SQRT2, 0.0, 0.0, -_HALF_SQRT2)

REFERENCES: dict[str, Quaternion] = {
    'portrait': PORTRAIT_REFERENCE,
    'landscape': LANDSCAPE_RIGHT_REFERENCE,
}


def reference_for(target: str) -> Quaternion:
    """
    Return the reference quaternion for a target orientation.

    :param target: 'portrait' or 'landscape' (landscape-right)
    :return: Reference quaternion
    """
    key = str(target).strip().lower()
    if key not in REFERENCES:
        raise ValueError(f"Invalid target orientation: {target}")
    return REFERENCES[key]
