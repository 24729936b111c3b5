import pytest

from vcx.core.alignment_detector import AlignmentDetector
from vcx.core.states.orientation_state import AlignmentState, HysteresisConfig


@pytest.fixture
def detector():
    return AlignmentDetector(HysteresisConfig(enter_threshold=2.0, exit_threshold=4.0, min_stable_duration_ms=150.0))


def test_initial_state(detector):
    assert detector.get_state() == AlignmentState(is_aligned=False, deviation_angle=0.0, last_transition_time=0.0)
    assert detector.is_aligned is False


def test_config_is_exposed(detector):
    assert detector.config.enter_threshold == 2.0
    assert detector.config.exit_threshold == 4.0
    assert detector.config.min_stable_duration_ms == 150.0


def test_worked_scenario(detector):
    assert detector.check(1.5, 0).is_aligned is False        # pending, 0 ms elapsed
    s = detector.check(1.5, 200)
    assert s.is_aligned is True
    assert s.last_transition_time == 200
    s = detector.check(3.0, 250)                              # within exit threshold
    assert s.is_aligned is True
    assert s.last_transition_time == 250
    s = detector.check(5.0, 260)                              # pending exit
    assert s.is_aligned is True
    assert s.deviation_angle == 5.0
    assert s.last_transition_time == 250
    assert detector.check(5.0, 399).is_aligned is True
    s = detector.check(5.0, 400)
    assert s.is_aligned is False
    assert s.last_transition_time == 400


def test_enter_threshold_is_inclusive(detector):
    assert detector.check(2.0, 1000).is_aligned is True


def test_just_over_enter_threshold_stays_unaligned(detector):
    assert detector.check(2.01, 1000).is_aligned is False


def test_exit_threshold_is_inclusive(detector):
    detector.check(1.0, 1000)
    assert detector.check(4.0, 2000).is_aligned is True
    assert detector.check(4.01, 3000).is_aligned is False


def test_hysteresis_band_keeps_current_state(detector):
    # not aligned: 3 deg is outside enter threshold
    assert detector.check(3.0, 1000).is_aligned is False
    detector.check(1.0, 2000)
    # aligned: 3 deg is inside exit threshold
    assert detector.check(3.0, 3000).is_aligned is True


def test_brief_spike_is_ignored(detector):
    detector.check(1.0, 1000)
    assert detector.is_aligned
    for t in (1010, 1050, 1100):
        assert detector.check(10.0, t).is_aligned is True
    # back inside before the window elapses restarts it
    detector.check(1.0, 1140)
    assert detector.check(10.0, 1280).is_aligned is True
    assert detector.check(10.0, 1290).is_aligned is False


def test_deviation_angle_always_updated(detector):
    assert detector.check(7.5, 10).deviation_angle == 7.5
    assert detector.check(0.25, 20).deviation_angle == 0.25
    assert detector.get_state().deviation_angle == 0.25


def test_zero_stability_transitions_immediately():
    d = AlignmentDetector(HysteresisConfig(2.0, 4.0, 0.0))
    assert d.check(1.0, 5).is_aligned is True
    assert d.check(5.0, 5).is_aligned is False


def test_states_are_immutable_snapshots(detector):
    first = detector.check(1.0, 1000)
    detector.check(10.0, 2000)
    assert first.is_aligned is True
    assert first.deviation_angle == 1.0


def test_reset(detector):
    detector.check(1.0, 1000)
    detector.reset()
    assert detector.get_state() == AlignmentState()


def test_from_tolerance():
    cfg = HysteresisConfig.from_tolerance(3.0)
    assert cfg.enter_threshold == 3.0
    assert cfg.exit_threshold == 6.0
    assert cfg.min_stable_duration_ms == 150.0
