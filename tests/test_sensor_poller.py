import pytest

from vcx.core.states.orientation_state import OrientationState
from vcx.sensors.level_sensor import LevelSensor
from vcx.sensors.orientation_sampler import OrientationSampler
from vcx.sensors.sensor_poller import SensorPoller
from vcx.sensors.sources import LatestValueSource, SimulatedGravitySource

from conftest import IDENTITY


@pytest.fixture
def sampler():
    return OrientationSampler(LatestValueSource(IDENTITY), update_interval=10)


def test_poller_emits_samples(qtbot, sampler):
    poller = SensorPoller(sampler)
    assert poller.is_active
    with qtbot.waitSignal(poller.sampled, timeout=1000) as blocker:
        pass
    assert isinstance(blocker.args[0], OrientationState)
    poller.stop()


def test_timer_uses_adapter_interval(qtbot, sampler):
    poller = SensorPoller(sampler)
    assert poller._timer.interval() == 10
    poller.stop()


def test_disabled_adapter_does_not_start_timer(qtbot):
    sampler = OrientationSampler(LatestValueSource(IDENTITY), enabled=False)
    poller = SensorPoller(sampler)
    assert poller.is_active is False
    poller.set_enabled(True)
    assert poller.is_active is True
    assert sampler.enabled is True
    poller.stop()


def test_set_enabled_false_stops_polling(qtbot, sampler):
    poller = SensorPoller(sampler)
    poller.set_enabled(False)
    assert poller.is_active is False
    assert sampler.enabled is False
    with qtbot.assertNotEmitted(poller.sampled, wait=100):
        pass
    poller.stop()


def test_stop_closes_adapter_and_is_idempotent(qtbot, sampler):
    poller = SensorPoller(sampler)
    poller.stop()
    poller.stop()
    assert sampler.closed is True
    assert poller.is_active is False
    poller.set_enabled(True)
    assert poller.is_active is False


def test_level_sensor_can_be_polled(qtbot):
    level = LevelSensor(SimulatedGravitySource(), update_interval=10)
    poller = SensorPoller(level)
    with qtbot.waitSignal(poller.sampled, timeout=1000) as blocker:
        pass
    assert isinstance(blocker.args[0], float)
    poller.stop()
