"""
Device orientation indicator controller.

Connects an OrientationSampler to an AlignmentDetector and keeps the state
the 3D indicator widget displays: the aligned colour and the formatted
pitch/roll/yaw values. Rendering itself lives in the UI layer.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from vcx.core import constants
from vcx.core.alignment_detector import AlignmentDetector
from vcx.core.orientation_math import clamp, format_angle, quaternion_angular_distance
from vcx.core.states.orientation_state import (
    AlignmentState,
    HysteresisConfig,
    OrientationState,
    Quaternion,
    RotationSample,
)
from vcx.sensors.orientation_sampler import OrientationSampler
from vcx.sensors.sources import SampleSource

if TYPE_CHECKING:
    from vcx.app.app_settings_manager import AppSettingsManager

logger = logging.getLogger(__name__)


class DeviceIndicator:
    """
    Orientation + alignment state for one indicator instance.

    - Every valid sample is measured against the reference orientation and
      fed to the detector, so debouncing sees the full sample rate.
    - alignment_changed fires only on transitions.
    - orientation_changed is the sampler's throttled notification.
    - Changing the target or tolerance builds a fresh detector.
    """

    def __init__(
            self,
            source: SampleSource[RotationSample],
            *,
            target_orientation: str = constants.DEFAULT_TARGET_ORIENTATION,
            alignment_tolerance: float = constants.DEFAULT_ALIGNMENT_TOLERANCE,
            exit_multiplier: float = constants.DEFAULT_ALIGNMENT_EXIT_MULTIPLIER,
            min_stable_duration_ms: float = constants.DEFAULT_MIN_STABLE_DURATION_MS,
            update_interval: float = constants.DEFAULT_UPDATE_INTERVAL,
            enabled: bool = constants.DEFAULT_ENABLED,
            orientation_change_throttle_ms: float = constants.DEFAULT_ORIENTATION_CHANGE_THROTTLE_MS,
            angle_precision: int = constants.DEFAULT_ANGLE_PRECISION,
            angle_format: str = constants.DEFAULT_ANGLE_FORMAT,
            model_color: str = constants.DEFAULT_MODEL_COLOR,
            aligned_color: str = constants.DEFAULT_ALIGNED_COLOR,
            clock: Callable[[], float] | None = None,
    ) -> None:
        self.sampler = OrientationSampler(
            source,
            update_interval=update_interval,
            enabled=enabled,
            orientation_change_throttle_ms=orientation_change_throttle_ms,
            clock=clock,
        )
        self.angle_precision = angle_precision
        self.angle_format = angle_format
        self.model_color = model_color
        self.aligned_color = aligned_color

        self._exit_multiplier = exit_multiplier
        self._min_stable_duration_ms = min_stable_duration_ms
        self._target_orientation = str(target_orientation).lower()
        self._reference = constants.reference_for(self._target_orientation)
        self._tolerance = float(clamp(alignment_tolerance, *constants.ALIGNMENT_TOLERANCE_RANGE))
        self._detector = self._make_detector()
        self._is_aligned = False

        self._on_alignment_changed: list[Callable[[bool], None]] = []
        self.sampler.add_sample_callback(self._on_sample)

    @classmethod
    def from_settings(cls, source: SampleSource[RotationSample],
                      settings: AppSettingsManager, **kwargs) -> DeviceIndicator:
        """Build an indicator from the orientation/alignment/display settings."""
        data = settings.data
        return cls(
            source,
            target_orientation=data.alignment.target_orientation,
            alignment_tolerance=data.alignment.alignment_tolerance,
            exit_multiplier=data.alignment.exit_multiplier,
            min_stable_duration_ms=data.alignment.min_stable_duration_ms,
            update_interval=data.orientation.update_interval,
            enabled=data.orientation.enabled,
            orientation_change_throttle_ms=data.orientation.orientation_change_throttle_ms,
            angle_precision=data.display.angle_precision,
            angle_format=data.display.angle_format,
            **kwargs,
        )

    # ---------- properties ---------------
    @property
    def update_interval(self) -> int:
        return self.sampler.update_interval

    @property
    def enabled(self) -> bool:
        return self.sampler.enabled

    @property
    def target_orientation(self) -> str:
        return self._target_orientation

    @property
    def reference(self) -> Quaternion:
        return self._reference

    @property
    def alignment_tolerance(self) -> float:
        return self._tolerance

    @property
    def detector(self) -> AlignmentDetector:
        return self._detector

    @property
    def is_aligned(self) -> bool:
        return self._is_aligned

    @property
    def deviation_angle(self) -> float:
        return self._detector.get_state().deviation_angle

    @property
    def alignment_state(self) -> AlignmentState:
        return self._detector.get_state()

    @property
    def orientation(self) -> OrientationState:
        return self.sampler.orientation

    @property
    def current_color(self) -> str:
        return self.aligned_color if self._is_aligned else self.model_color

    # ---------- callbacks ---------------
    def add_orientation_changed_callback(self, callback: Callable[[OrientationState], None]) -> None:
        self.sampler.add_orientation_changed_callback(callback)

    def add_alignment_changed_callback(self, callback: Callable[[bool], None]) -> None:
        """Callback signature: callback(is_aligned: bool) -> None"""
        self._on_alignment_changed.append(callback)

    # ---------- configuration ---------------
    def set_target_orientation(self, target: str) -> None:
        """Switch the reference orientation; alignment starts over."""
        self._reference = constants.reference_for(target)
        self._target_orientation = str(target).lower()
        self._rebuild_detector()

    def set_alignment_tolerance(self, tolerance: float) -> None:
        """Change the tolerance; alignment starts over."""
        self._tolerance = float(clamp(tolerance, *constants.ALIGNMENT_TOLERANCE_RANGE))
        self._rebuild_detector()

    # ---------- lifecycle ---------------
    def set_enabled(self, enabled: bool) -> None:
        self.sampler.set_enabled(enabled)

    def tick(self, now: float | None = None) -> OrientationState | None:
        return self.sampler.tick(now)

    def close(self) -> None:
        self.sampler.close()
        self._on_alignment_changed.clear()

    def formatted_angles(self, orientation: OrientationState | None = None) -> dict[str, str]:
        """
        Pitch/roll/yaw strings for the numeric readout.

        :param orientation: Orientation to format (defaults to the smoothed display value)
        """
        o = orientation or self.sampler.display_orientation
        return {
            "pitch": format_angle(o.pitch, self.angle_precision, self.angle_format),
            "roll": format_angle(o.roll, self.angle_precision, self.angle_format),
            "yaw": format_angle(o.yaw, self.angle_precision, self.angle_format),
        }

    # ---------- internal ---------------
    def _make_detector(self) -> AlignmentDetector:
        return AlignmentDetector(HysteresisConfig.from_tolerance(
            self._tolerance,
            multiplier=self._exit_multiplier,
            min_stable_duration_ms=self._min_stable_duration_ms,
        ))

    def _rebuild_detector(self) -> None:
        self._detector = self._make_detector()
        self._is_aligned = False
        logger.info(
            "Alignment reconfigured: target=%s, tolerance=%.2f",
            self._target_orientation, self._tolerance,
        )

    def _on_sample(self, q: Quaternion, orientation: OrientationState) -> None:
        distance = quaternion_angular_distance(q, self._reference)
        state = self._detector.check(distance, orientation.timestamp)
        if state.is_aligned == self._is_aligned:
            return
        self._is_aligned = state.is_aligned
        logger.info("Alignment changed: %s (deviation=%.2f)", state.is_aligned, distance)
        for callback in list(self._on_alignment_changed):
            try:
                callback(state.is_aligned)
            except Exception:
                logger.exception("Error in alignment callback")
