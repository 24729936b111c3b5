"""Roll angle math for the bubble level."""
from __future__ import annotations

import math


def calculate_roll_angle(x: float, y: float) -> float:
    """
    Roll angle from a gravity vector.

    abs(y) makes forward and backward tilt give the same angle, so the
    result only depends on the sideways tilt.

    :param x: Lateral gravity component
    :param y: Vertical gravity component
    :return: Roll angle in degrees (-90 to 90)
    """
    return math.degrees(math.atan2(x, abs(y)))


def is_within_threshold(angle: float, threshold: float) -> bool:
    return abs(angle) <= threshold
