"""Value types shared by the orientation and alignment code."""
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Quaternion:
    """
    Rotation quaternion (w, x, y, z).

    Key points:
    - A valid orientation sample has unit magnitude (tolerance 0.01),
      but unnormalized values are accepted everywhere.
    - q and -q describe the same rotation.
    """
    w: float
    x: float
    y: float
    z: float

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.w, -self.x, -self.y, -self.z)

    def magnitude(self) -> float:
        return math.sqrt(self.w * self.w + self.x * self.x + self.y * self.y + self.z * self.z)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.w, self.x, self.y, self.z

    @staticmethod
    def identity() -> Quaternion:
        return Quaternion(1.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class OrientationState:
    """
    Device orientation in degrees, each angle in [-180, 180].

    pitch: rotation about the lateral axis
    roll: rotation about the depth axis
    yaw: rotation about the vertical axis
    timestamp: epoch milliseconds at computation time
    """
    pitch: float
    roll: float
    yaw: float
    timestamp: float

    def __str__(self) -> str:
        return f"Pitch: {self.pitch:.1f}, Roll: {self.roll:.1f}, Yaw: {self.yaw:.1f}"

    @staticmethod
    def zero(timestamp: float = 0.0) -> OrientationState:
        return OrientationState(0.0, 0.0, 0.0, timestamp)


EulerAngles = OrientationState


@dataclass(frozen=True)
class AlignmentState:
    "Snapshot of an AlignmentDetector."
    is_aligned: bool = False
    deviation_angle: float = 0.0
    last_transition_time: float = 0.0


@dataclass(frozen=True)
class HysteresisConfig:
    """
    Thresholds for alignment detection.

    exit_threshold >= enter_threshold is a precondition on the caller and is
    not checked here.
    """
    enter_threshold: float
    exit_threshold: float
    min_stable_duration_ms: float

    @classmethod
    def from_tolerance(
            cls,
            tolerance: float,
            multiplier: float = 2.0,
            min_stable_duration_ms: float = 150.0,
    ) -> HysteresisConfig:
        """
        Build a config whose exit threshold is tolerance * multiplier.

        :param tolerance: Enter threshold in degrees
        :param multiplier: Factor applied to get the exit threshold
        :param min_stable_duration_ms: Debounce window
        """
        return cls(
            enter_threshold=tolerance,
            exit_threshold=tolerance * multiplier,
            min_stable_duration_ms=min_stable_duration_ms,
        )


@dataclass(frozen=True)
class RotationSample:
    """Raw rotation-vector reading as delivered by a sensor source."""
    qw: float
    qx: float
    qy: float
    qz: float

    def to_quaternion(self) -> Quaternion:
        return Quaternion(self.qw, self.qx, self.qy, self.qz)


@dataclass(frozen=True)
class GravitySample:
    """Gravity vector in device-local coordinates (g units)."""
    x: float
    y: float
    z: float = 0.0
