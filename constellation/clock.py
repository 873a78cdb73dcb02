#!/usr/bin/env python3
"""
Frame clocks that supply the per-tick time delta.

SimulationClock turns real elapsed time into simulation time: with the default
time scale of REFERENCE_FPS, one frame at that rate is dt = 1. Long stalls
(window drags, breakpoints) are clamped to max_frame_seconds so a single tick
never jumps far. FixedStepClock always returns the same dt and is used for
headless runs.
"""
import time
from typing import Callable

from .constants import MAX_FRAME_SECONDS, REFERENCE_FPS
from .vector_utils import clamp


class SimulationClock:
    def __init__(
        self,
        time_scale: float = REFERENCE_FPS,
        max_frame_seconds: float = MAX_FRAME_SECONDS,
        time_source: Callable[[], float] = time.perf_counter,
    ):
        self.time_scale = float(time_scale)
        self.max_frame_seconds = float(max_frame_seconds)
        self._time_source = time_source
        self._last = time_source()

    def reset(self) -> None:
        """Restart timing from now, e.g. when resuming from pause."""
        self._last = self._time_source()

    def tick(self) -> float:
        now = self._time_source()
        real_dt = clamp(now - self._last, 0.0, self.max_frame_seconds)
        self._last = now
        return real_dt * self.time_scale


class FixedStepClock:
    def __init__(self, dt: float = 1.0):
        self.dt = float(dt)

    def reset(self) -> None:
        pass

    def tick(self) -> float:
        return self.dt
