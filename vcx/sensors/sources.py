"""
Sensor sample sources.

The adapters never subscribe to a sensor themselves. They pull the most
recent value from anything exposing `latest()`, on a schedule owned by
their host (a QTimer, a test, ...).
"""
from __future__ import annotations

import math
import time
from typing import Callable, Generic, Optional, Protocol, TypeVar

from vcx.core.states.orientation_state import GravitySample, RotationSample

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class SampleSource(Protocol[T_co]):
    def latest(self) -> Optional[T_co]: ...


class LatestValueSource(Generic[T]):
    """
    Holds the last value pushed by an external subscription.

    Use this to bridge a push-style sensor binding to the pull interface.
    """

    def __init__(self, initial: T | None = None) -> None:
        self._value: T | None = initial

    def push(self, value: T | None) -> None:
        self._value = value

    def latest(self) -> T | None:
        return self._value


class SimulatedRotationSource:
    """
    Slowly rocking device used by the demo window.

    Yaw sweeps through +/- yaw_amplitude and roll through +/- roll_amplitude
    with the given periods.
    """

    def __init__(
            self,
            *,
            yaw_amplitude: float = 10.0,
            roll_amplitude: float = 5.0,
            period_s: float = 8.0,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.yaw_amplitude = yaw_amplitude
        self.roll_amplitude = roll_amplitude
        self.period_s = period_s
        self._clock = clock
        self._t0 = clock()

    def latest(self) -> RotationSample:
        phase = 2.0 * math.pi * (self._clock() - self._t0) / self.period_s
        yaw = math.radians(self.yaw_amplitude * math.sin(phase))
        roll = math.radians(self.roll_amplitude * math.sin(phase * 0.5))
        # roll about x, then yaw about z (ZYX with zero pitch)
        cr, sr = math.cos(roll / 2.0), math.sin(roll / 2.0)
        cy, sy = math.cos(yaw / 2.0), math.sin(yaw / 2.0)
        return RotationSample(qw=cy * cr, qx=cy * sr, qy=sy * sr, qz=sy * cr)


class SimulatedGravitySource:
    """Gravity vector of a device swaying sideways by +/- amplitude degrees."""

    def __init__(
            self,
            *,
            amplitude: float = 3.0,
            period_s: float = 6.0,
            clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.amplitude = amplitude
        self.period_s = period_s
        self._clock = clock
        self._t0 = clock()

    def latest(self) -> GravitySample:
        phase = 2.0 * math.pi * (self._clock() - self._t0) / self.period_s
        tilt = math.radians(self.amplitude * math.sin(phase))
        return GravitySample(x=math.sin(tilt), y=math.cos(tilt), z=0.0)
