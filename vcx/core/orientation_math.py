"""
Orientation math: angle conversion, quaternion to Euler, angular distance.

All functions are pure and total for finite input, so they can run on
every polling tick.
"""
from __future__ import annotations

import math
import time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from numbers import Real

from vcx.core.constants import ANGLE_PRECISION_RANGE
from vcx.core.states.orientation_state import EulerAngles, Quaternion

NORMALIZED_TOLERANCE = 0.01


def now_ms() -> float:
    """Current wall clock time in epoch milliseconds."""
    return time.time() * 1000.0


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def radians_to_degrees(radians: float) -> float:
    return radians * 180.0 / math.pi


def degrees_to_radians(degrees: float) -> float:
    return degrees * math.pi / 180.0


def normalize_angle(degrees: float) -> float:
    """
    Fold an angle into [-180, 180].

    fmod keeps the sign of the input, so a single correction step is
    enough. 180 and -180 are both returned unchanged.

    :param degrees: Angle in degrees
    :return: Equivalent angle in [-180, 180]
    """
    normalized = math.fmod(degrees, 360.0)
    if normalized > 180.0:
        normalized -= 360.0
    elif normalized < -180.0:
        normalized += 360.0
    return normalized


def quaternion_to_euler(q: Quaternion, timestamp: float | None = None) -> EulerAngles:
    """
    Convert a quaternion to Euler angles using ZYX order.

    The asin argument is clamped, so at gimbal lock (|pitch| = 90) and for
    unnormalized quaternions all three angles stay finite.

    :param q: Rotation quaternion
    :param timestamp: Epoch ms to stamp the result with (defaults to now)
    :return: Euler angles in degrees
    """
    w, x, y, z = q.w, q.x, q.y, q.z

    # roll (x axis)
    sinr_cosp = 2.0 * (w * x + y * z)
    cosr_cosp = 1.0 - 2.0 * (x * x + y * y)
    roll = math.atan2(sinr_cosp, cosr_cosp)

    # pitch (y axis)
    sinp = 2.0 * (w * y - z * x)
    pitch = math.asin(clamp(sinp, -1.0, 1.0))

    # yaw (z axis)
    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    yaw = math.atan2(siny_cosp, cosy_cosp)

    return EulerAngles(
        pitch=normalize_angle(radians_to_degrees(pitch)),
        roll=normalize_angle(radians_to_degrees(roll)),
        yaw=normalize_angle(radians_to_degrees(yaw)),
        timestamp=now_ms() if timestamp is None else timestamp,
    )


def quaternion_dot_product(q1: Quaternion, q2: Quaternion) -> float:
    return q1.w * q2.w + q1.x * q2.x + q1.y * q2.y + q1.z * q2.z


def quaternion_angular_distance(current: Quaternion, reference: Quaternion) -> float:
    """
    Angle in degrees of the rotation taking one orientation to the other.

    The absolute dot product makes q and -q equivalent.

    :param current: Current orientation
    :param reference: Reference orientation
    :return: Distance in [0, 180]
    """
    dot = abs(quaternion_dot_product(current, reference))
    return radians_to_degrees(2.0 * math.acos(clamp(dot, 0.0, 1.0)))


def format_angle(angle: float, precision: int = 1, fmt: str = 'degrees') -> str:
    """
    Format an angle for display.

    Precision is clamped to [0, 3]. Ties round away from zero.

    :param angle: Angle in degrees
    :param precision: Decimal places
    :param fmt: 'degrees' or 'radians'
    :return: e.g. "45.0°" or "0.79 rad"
    """
    if fmt == 'radians':
        value = degrees_to_radians(angle)
        suffix = " rad"
    else:
        value = angle
        suffix = "°"

    lo, hi = ANGLE_PRECISION_RANGE
    try:
        digits = int(clamp(int(precision), lo, hi))
    except (TypeError, ValueError):
        digits = 1

    if not math.isfinite(value):
        return f"{value}{suffix}"
    quantum = Decimal(1).scaleb(-digits)
    try:
        text = str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # more digits than the decimal context holds
        text = f"{value:.{digits}f}"
    return f"{text}{suffix}"


def is_normalized_quaternion(q: Quaternion) -> bool:
    return abs(q.magnitude() - 1.0) < NORMALIZED_TOLERANCE


def is_finite_number(value: object) -> bool:
    """True for a real number that is neither NaN nor +/-inf. None and strings are False."""
    return isinstance(value, Real) and math.isfinite(value)


def is_valid_sensor_reading(pitch: float, roll: float, yaw: float) -> bool:
    """True if all three values are finite numbers."""
    return is_finite_number(pitch) and is_finite_number(roll) and is_finite_number(yaw)


def is_valid_quaternion(q: Quaternion) -> bool:
    """True if all four components are finite numbers."""
    return is_valid_sensor_reading(q.x, q.y, q.z) and is_finite_number(q.w)


def shortest_arc(from_deg: float, to_deg: float) -> float:
    """Signed difference to_deg - from_deg folded into [-180, 180]."""
    return normalize_angle(to_deg - from_deg)
