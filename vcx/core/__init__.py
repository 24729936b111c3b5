"""Core components layer - pure orientation math and detectors."""

from vcx.core.alignment_detector import AlignmentDetector
from vcx.core.orientation_math import (
    degrees_to_radians,
    format_angle,
    is_finite_number,
    is_normalized_quaternion,
    is_valid_quaternion,
    is_valid_sensor_reading,
    normalize_angle,
    quaternion_angular_distance,
    quaternion_dot_product,
    quaternion_to_euler,
    radians_to_degrees,
)
from vcx.core.roll_math import calculate_roll_angle, is_within_threshold
from vcx.core.states.orientation_state import (
    AlignmentState,
    EulerAngles,
    GravitySample,
    HysteresisConfig,
    OrientationState,
    Quaternion,
    RotationSample,
)

__all__ = [
    "AlignmentDetector",
    "AlignmentState",
    "EulerAngles",
    "GravitySample",
    "HysteresisConfig",
    "OrientationState",
    "Quaternion",
    "RotationSample",
    "calculate_roll_angle",
    "degrees_to_radians",
    "format_angle",
    "is_finite_number",
    "is_normalized_quaternion",
    "is_valid_quaternion",
    "is_valid_sensor_reading",
    "is_within_threshold",
    "normalize_angle",
    "quaternion_angular_distance",
    "quaternion_dot_product",
    "quaternion_to_euler",
    "radians_to_degrees",
]
