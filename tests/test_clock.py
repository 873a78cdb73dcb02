import pytest

from constellation.clock import FixedStepClock, SimulationClock


class FakeTime:
    def __init__(self, *times):
        self._times = iter(times)

    def __call__(self):
        return next(self._times)


def test_tick_scales_elapsed_seconds():
    clock = SimulationClock(time_scale=30.0, max_frame_seconds=0.25, time_source=FakeTime(0.0, 0.1, 0.2))
    assert clock.tick() == pytest.approx(3.0)
    assert clock.tick() == pytest.approx(3.0)


def test_long_frames_are_clamped():
    clock = SimulationClock(time_scale=30.0, max_frame_seconds=0.25, time_source=FakeTime(0.0, 5.0))
    assert clock.tick() == pytest.approx(7.5)


def test_reset_discards_paused_time():
    clock = SimulationClock(time_scale=10.0, max_frame_seconds=1.0, time_source=FakeTime(0.0, 100.0, 100.05))
    clock.reset()
    assert clock.tick() == pytest.approx(0.5)


def test_time_never_runs_backwards():
    clock = SimulationClock(time_scale=30.0, time_source=FakeTime(1.0, 0.5))
    assert clock.tick() == 0.0


def test_fixed_step_clock():
    clock = FixedStepClock(0.5)
    clock.reset()
    assert [clock.tick() for _ in range(3)] == [0.5, 0.5, 0.5]
