"""Bubble-level adapter: gravity vector -> roll angle -> level callbacks."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from vcx.core import constants
from vcx.core.orientation_math import clamp, is_finite_number, now_ms
from vcx.core.roll_math import calculate_roll_angle, is_within_threshold
from vcx.core.states.orientation_state import GravitySample
from vcx.sensors.sources import SampleSource

if TYPE_CHECKING:
    from vcx.app.app_settings_manager import AppSettingsManager

logger = logging.getLogger(__name__)

SENSOR_NOT_AVAILABLE = "Gravity sensor not available on this device"


class LevelSensor:
    """
    Roll-only level detection.

    Unlike the 3D alignment detector there is a single threshold and no
    debounce: level_reached / level_lost fire on every crossing.
    """

    def __init__(
            self,
            source: SampleSource[GravitySample],
            *,
            level_threshold: float = constants.DEFAULT_LEVEL_THRESHOLD,
            update_interval: float = constants.DEFAULT_LEVEL_UPDATE_INTERVAL,
            angle_change_throttle_ms: float = constants.DEFAULT_ANGLE_CHANGE_THROTTLE_MS,
            enabled: bool = True,
            show_angle_text: bool = False,
            clock: Callable[[], float] | None = None,
    ) -> None:
        self._source = source
        self.level_threshold = float(level_threshold)
        self._update_interval = int(clamp(update_interval, *constants.UPDATE_INTERVAL_RANGE))
        self._throttle_ms = float(clamp(angle_change_throttle_ms, *constants.THROTTLE_MS_RANGE))
        self.show_angle_text = bool(show_angle_text)
        self._clock = clock or now_ms

        self._enabled = bool(enabled)
        self._closed = False

        self._angle = 0.0
        self._was_level = False
        self._last_callback_time: float | None = None
        self._last_displayed_angle = 0.0
        self._angle_text = "0.0"
        self._sensor_error: str | None = None

        self._on_angle_changed: list[Callable[[float], None]] = []
        self._on_level_reached: list[Callable[[], None]] = []
        self._on_level_lost: list[Callable[[], None]] = []

    @classmethod
    def from_settings(cls, source: SampleSource[GravitySample],
                      settings: AppSettingsManager, **kwargs) -> LevelSensor:
        """Build a level sensor from the `level` settings section."""
        level = settings.data.level
        return cls(
            source,
            level_threshold=level.level_threshold,
            update_interval=level.update_interval,
            angle_change_throttle_ms=level.angle_change_throttle_ms,
            show_angle_text=level.show_angle_text,
            **kwargs,
        )

    # ---------- properties ---------------
    @property
    def update_interval(self) -> int:
        return self._update_interval

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def angle(self) -> float:
        return self._angle

    @property
    def is_level(self) -> bool:
        return self._was_level

    @property
    def angle_text(self) -> str:
        return self._angle_text

    @property
    def sensor_error(self) -> str | None:
        return self._sensor_error

    # ---------- callbacks ---------------
    def add_angle_changed_callback(self, callback: Callable[[float], None]) -> None:
        """Callback signature: callback(angle: float) -> None, throttled."""
        self._on_angle_changed.append(callback)

    def add_level_reached_callback(self, callback: Callable[[], None]) -> None:
        self._on_level_reached.append(callback)

    def add_level_lost_callback(self, callback: Callable[[], None]) -> None:
        self._on_level_lost.append(callback)

    # ---------- lifecycle ---------------
    def set_enabled(self, enabled: bool) -> None:
        """Disabling forgets the level state without firing level_lost."""
        enabled = bool(enabled)
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if not enabled:
            self._was_level = False
        else:
            self._last_callback_time = None

    def close(self) -> None:
        self._closed = True
        self._on_angle_changed.clear()
        self._on_level_reached.clear()
        self._on_level_lost.clear()

    def check_sensor(self) -> str | None:
        """
        Probe the gravity source once and record an error message if it
        cannot deliver usable values.

        :return: The error message, or None if the sensor works
        """
        try:
            sample = self._source.latest()
        except Exception as e:
            self._sensor_error = f"Sensor initialization failed: {e}"
        else:
            if sample is None or not isinstance(sample.x, (int, float)) \
                    or not isinstance(sample.y, (int, float)):
                self._sensor_error = SENSOR_NOT_AVAILABLE
            else:
                self._sensor_error = None
        if self._sensor_error:
            logger.warning(self._sensor_error)
        return self._sensor_error

    # ---------- sampling ---------------
    def tick(self, now: float | None = None) -> float | None:
        """
        Run one polling step.

        :param now: Tick time in ms (defaults to the sensor clock)
        :return: The roll angle, or None if nothing was updated
        """
        if self._closed or not self._enabled:
            return None

        try:
            sample = self._source.latest()
        except Exception:
            logger.warning("Gravity sensor read failed", exc_info=True)
            return None
        if sample is None:
            return None
        if not (is_finite_number(sample.x) and is_finite_number(sample.y)):
            logger.debug("Discarding invalid gravity sample: %s", sample)
            return None

        angle = calculate_roll_angle(sample.x, sample.y)
        is_level = is_within_threshold(angle, self.level_threshold)
        self._angle = angle

        timestamp = self._clock() if now is None else now
        if self._on_angle_changed and (
                self._last_callback_time is None
                or timestamp - self._last_callback_time >= self._throttle_ms):
            self._last_callback_time = timestamp
            self._notify(self._on_angle_changed, angle)

        if self.show_angle_text and abs(angle - self._last_displayed_angle) >= constants.ANGLE_TEXT_UPDATE_THRESHOLD:
            self._last_displayed_angle = angle
            self._angle_text = f"{angle:.1f}"

        if is_level and not self._was_level:
            self._was_level = True
            logger.debug("Level reached at %.2f deg", angle)
            self._notify(self._on_level_reached)
        elif not is_level and self._was_level:
            self._was_level = False
            logger.debug("Level lost at %.2f deg", angle)
            self._notify(self._on_level_lost)

        return angle

    def _notify(self, callbacks: list[Callable], *args) -> None:
        for callback in list(callbacks):
            if self._closed:
                return
            try:
                callback(*args)
            except Exception:
                logger.exception("Error in level callback")
