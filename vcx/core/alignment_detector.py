"""Hysteresis based alignment detection with time debouncing."""
from __future__ import annotations

import logging
from dataclasses import replace

from vcx.core.states.orientation_state import AlignmentState, HysteresisConfig

logger = logging.getLogger(__name__)


class AlignmentDetector:
    """
    Two-state (aligned / not aligned) detector.

    Hysteresis:
    - To enter the aligned state the distance must be <= enter_threshold.
    - To leave it the distance must be > exit_threshold.
    - A verdict that differs from the current state is applied only once
      min_stable_duration_ms has passed since the last time the verdict
      agreed with the state. Until then the change is pending.

    One instance per consumer. Not safe for concurrent check() calls.
    Configuration is not validated (exit_threshold >= enter_threshold is
    expected from the caller).
    """

    def __init__(self, config: HysteresisConfig) -> None:
        self._config = config
        self._state = AlignmentState()

    @property
    def config(self) -> HysteresisConfig:
        return self._config

    @property
    def is_aligned(self) -> bool:
        return self._state.is_aligned

    def check(self, angular_distance: float, current_time_ms: float) -> AlignmentState:
        """
        Feed one distance measurement.

        :param angular_distance: Distance to the reference in degrees
        :param current_time_ms: Measurement time in ms
        :return: Snapshot of the state after this measurement
        """
        state = self._state
        threshold = (
            self._config.exit_threshold if state.is_aligned
            else self._config.enter_threshold
        )
        within = angular_distance <= threshold

        if within != state.is_aligned:
            elapsed = current_time_ms - state.last_transition_time
            if elapsed >= self._config.min_stable_duration_ms:
                logger.debug(
                    "Alignment transition: %s -> %s (distance=%.3f, elapsed=%.1f ms)",
                    state.is_aligned, within, angular_distance, elapsed,
                )
                state = AlignmentState(
                    is_aligned=within,
                    deviation_angle=angular_distance,
                    last_transition_time=current_time_ms,
                )
            else:
                state = replace(state, deviation_angle=angular_distance)
        else:
            # stable in current state, restart the debounce window
            state = replace(
                state,
                deviation_angle=angular_distance,
                last_transition_time=current_time_ms,
            )

        self._state = state
        return state

    def reset(self) -> None:
        """Return to the initial (not aligned) state."""
        self._state = AlignmentState()

    def get_state(self) -> AlignmentState:
        return self._state
