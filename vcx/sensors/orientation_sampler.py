"""
Orientation sampling adapter.

Turns a pull-style rotation source into Euler angles and throttled
orientation-change notifications. It is independent of any UI toolkit:
the host calls tick() on its own timer (see sensor_poller.SensorPoller).
"""
from __future__ import annotations

import logging
from typing import Callable

from vcx.core import constants
from vcx.core.orientation_math import (
    clamp,
    is_valid_quaternion,
    normalize_angle,
    now_ms,
    quaternion_to_euler,
    shortest_arc,
)
from vcx.core.states.orientation_state import OrientationState, Quaternion, RotationSample
from vcx.sensors.sources import SampleSource

logger = logging.getLogger(__name__)

OrientationCallback = Callable[[OrientationState], None]
SampleCallback = Callable[[Quaternion, OrientationState], None]


class OrientationSampler:
    """
    Polls a rotation source and tracks the device orientation.

    Responsible for:
    - Discarding non-finite samples (last good state is kept).
    - Falling back to the last good state (identity at start) when the
      source is unavailable.
    - Keeping the target orientation (latest computed angles) and a
      smoothed display orientation.
    - Notifying orientation callbacks at most once per throttle window with
      the freshly computed target.
    - Notifying sample callbacks on every valid sample (unthrottled).

    Timing state lives on the instance; create one sampler per consumer.
    """

    def __init__(
            self,
            source: SampleSource[RotationSample],
            *,
            update_interval: float = constants.DEFAULT_UPDATE_INTERVAL,
            enabled: bool = constants.DEFAULT_ENABLED,
            orientation_change_throttle_ms: float = constants.DEFAULT_ORIENTATION_CHANGE_THROTTLE_MS,
            smoothing_factor: float = constants.DEFAULT_SMOOTHING_FACTOR,
            clock: Callable[[], float] | None = None,
    ) -> None:
        self._source = source
        self._update_interval = int(clamp(update_interval, *constants.UPDATE_INTERVAL_RANGE))
        self._throttle_ms = float(clamp(orientation_change_throttle_ms, *constants.THROTTLE_MS_RANGE))
        self._smoothing_factor = float(clamp(smoothing_factor, 0.0, 1.0))
        self._clock = clock or now_ms

        self._enabled = bool(enabled)
        self._closed = False
        self._sensor_available = True

        self._quaternion = Quaternion.identity()
        self._target = OrientationState.zero()
        self._display = OrientationState.zero()
        self._last_callback_time: float | None = None

        self._on_orientation_changed_callbacks: list[OrientationCallback] = []
        self._on_sample_callbacks: list[SampleCallback] = []

    # ---------- properties ---------------
    @property
    def update_interval(self) -> int:
        """Polling interval in ms, clamped to the supported range."""
        return self._update_interval

    @property
    def throttle_ms(self) -> float:
        return self._throttle_ms

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sensor_available(self) -> bool:
        return self._sensor_available

    @property
    def quaternion(self) -> Quaternion:
        return self._quaternion

    @property
    def orientation(self) -> OrientationState:
        """Latest computed orientation (the animation target)."""
        return self._target

    @property
    def display_orientation(self) -> OrientationState:
        """Smoothed orientation for on-screen values."""
        return self._display

    # ---------- callbacks ---------------
    def add_orientation_changed_callback(self, callback: OrientationCallback) -> None:
        """
        Add a throttled orientation callback.

        Callback signature: callback(orientation: OrientationState) -> None
        """
        self._on_orientation_changed_callbacks.append(callback)

    def remove_orientation_changed_callback(self, callback: OrientationCallback) -> None:
        self._on_orientation_changed_callbacks.remove(callback)

    def add_sample_callback(self, callback: SampleCallback) -> None:
        """
        Add a callback fired for every valid sample.

        Callback signature: callback(quaternion: Quaternion, orientation: OrientationState) -> None
        """
        self._on_sample_callbacks.append(callback)

    def remove_sample_callback(self, callback: SampleCallback) -> None:
        self._on_sample_callbacks.remove(callback)

    # ---------- lifecycle ---------------
    def set_enabled(self, enabled: bool) -> None:
        """
        Pause or resume sampling.

        While disabled tick() does nothing. After re-enabling, the next tick
        reads a fresh sample and the throttle window starts over.
        """
        enabled = bool(enabled)
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if enabled:
            self._last_callback_time = None
        logger.debug("OrientationSampler enabled=%s", enabled)

    def close(self) -> None:
        """Tear down. No callback fires after this returns."""
        self._closed = True
        self._on_orientation_changed_callbacks.clear()
        self._on_sample_callbacks.clear()
        logger.debug("OrientationSampler closed")

    # ---------- sampling ---------------
    def tick(self, now: float | None = None) -> OrientationState | None:
        """
        Run one polling step.

        :param now: Tick time in epoch ms (defaults to the sampler clock)
        :return: The new orientation, or None if nothing was updated
        """
        if self._closed or not self._enabled:
            return None

        sample = self._read_sample()
        if sample is None:
            return None

        q = sample.to_quaternion()
        if not is_valid_quaternion(q):
            logger.debug("Discarding invalid rotation sample: %s", sample)
            return None

        timestamp = self._clock() if now is None else now
        euler = quaternion_to_euler(q, timestamp=timestamp)

        self._quaternion = q
        self._target = euler
        self._display = self._smooth(self._display, euler)

        self._notify_sample(q, euler)
        if self._should_notify(timestamp):
            self._last_callback_time = timestamp
            self._notify_orientation_changed(euler)
        return euler

    def _read_sample(self) -> RotationSample | None:
        try:
            sample = self._source.latest()
        except Exception as e:
            self._mark_unavailable(f"{type(e).__name__}: {e}")
            return None
        if sample is None:
            self._mark_unavailable("no sample")
            return None
        if not self._sensor_available:
            self._sensor_available = True
            logger.info("Rotation sensor available again")
        return sample

    def _mark_unavailable(self, reason: str) -> None:
        # warn once per outage, not on every tick
        if self._sensor_available:
            logger.warning("Rotation sensor unavailable (%s); keeping last orientation", reason)
        self._sensor_available = False

    def _should_notify(self, timestamp: float) -> bool:
        if not self._on_orientation_changed_callbacks:
            return False
        if self._last_callback_time is None:
            return True
        return timestamp - self._last_callback_time >= self._throttle_ms

    def _smooth(self, current: OrientationState, target: OrientationState) -> OrientationState:
        """Exponential moving average along the shortest arc."""
        k = self._smoothing_factor

        def step(a: float, b: float) -> float:
            return normalize_angle(a + shortest_arc(a, b) * k)

        return OrientationState(
            pitch=step(current.pitch, target.pitch),
            roll=step(current.roll, target.roll),
            yaw=step(current.yaw, target.yaw),
            timestamp=target.timestamp,
        )

    def _notify_sample(self, q: Quaternion, orientation: OrientationState) -> None:
        for callback in list(self._on_sample_callbacks):
            if self._closed:
                return
            try:
                callback(q, orientation)
            except Exception:
                logger.exception("Error in sample callback")

    def _notify_orientation_changed(self, orientation: OrientationState) -> None:
        for callback in list(self._on_orientation_changed_callbacks):
            if self._closed:
                return
            try:
                callback(orientation)
            except Exception:
                logger.exception("Error in orientation callback")
