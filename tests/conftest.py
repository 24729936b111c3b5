import math
import os
from pathlib import Path

# Qt must not need a display during tests.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QSettings

from vcx.app.app_settings_manager import APP_NAME, ORG_DOMAIN
from vcx.core.states.orientation_state import RotationSample

IDENTITY = RotationSample(1.0, 0.0, 0.0, 0.0)


def rotation_about(axis: str, degrees: float) -> RotationSample:
    """Rotation sample for a single-axis rotation ('x', 'y' or 'z')."""
    half = math.radians(degrees) / 2.0
    c, s = math.cos(half), math.sin(half)
    return RotationSample(
        qw=c,
        qx=s if axis == "x" else 0.0,
        qy=s if axis == "y" else 0.0,
        qz=s if axis == "z" else 0.0,
    )


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock(1_000.0)


@pytest.fixture
def tmp_settings(tmp_path: Path):
    """Point QSettings at an INI file under tmp_path so tests never touch user settings."""
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path))
    s = QSettings(ORG_DOMAIN, APP_NAME)
    s.clear()
    yield s
    s.clear()
