"""QTimer host that drives a sampling adapter."""
from __future__ import annotations

import logging
from typing import Protocol

from PySide6 import QtCore

logger = logging.getLogger(__name__)


class Tickable(Protocol):
    @property
    def update_interval(self) -> int: ...

    @property
    def enabled(self) -> bool: ...

    def set_enabled(self, enabled: bool) -> None: ...

    def tick(self, now: float | None = None) -> object | None: ...

    def close(self) -> None: ...


class SensorPoller(QtCore.QObject):
    """
    Polls an adapter (OrientationSampler, LevelSensor, DeviceIndicator) on
    the Qt event loop.

    - The timer runs only while the adapter is enabled.
    - stop() cancels the timer and closes the adapter; nothing is emitted
      afterwards.
    """

    # Emitted with the result of every tick that produced an update.
    sampled = QtCore.Signal(object)

    def __init__(self, adapter: Tickable, parent: QtCore.QObject | None = None) -> None:
        super().__init__(parent)
        self._adapter = adapter
        self._stopped = False

        self._timer = QtCore.QTimer(self)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.setInterval(adapter.update_interval)
        self._timer.timeout.connect(self._on_timeout)

        if adapter.enabled:
            self._timer.start()
        logger.debug(
            "SensorPoller created for %s (interval=%d ms, enabled=%s)",
            type(adapter).__name__, adapter.update_interval, adapter.enabled,
        )

    @property
    def adapter(self) -> Tickable:
        return self._adapter

    @property
    def is_active(self) -> bool:
        return self._timer.isActive()

    def set_enabled(self, enabled: bool) -> None:
        """Start or stop polling together with the adapter."""
        if self._stopped:
            return
        self._adapter.set_enabled(enabled)
        if enabled:
            if not self._timer.isActive():
                self._timer.start()
        else:
            self._timer.stop()

    def stop(self) -> None:
        """Tear down: stop the timer and close the adapter."""
        if self._stopped:
            return
        self._stopped = True
        self._timer.stop()
        self._adapter.close()
        logger.debug("SensorPoller stopped")

    def _on_timeout(self) -> None:
        if self._stopped:
            return
        result = self._adapter.tick()
        if result is not None and not self._stopped:
            self.sampled.emit(result)
