#!/usr/bin/env python3
"""
Fading motion trails.

A Trail keeps the last L admitted positions of one body in a fixed ring of L
slots. The ring is pre-filled with the starting position, so consumers always
see exactly L samples. Sampling is gated: a position is only admitted once the
body has moved farther than the sample width from the last admitted sample, or
has turned by more than the angle threshold. Straight flight therefore leaves
sparse samples and turns leave dense ones.

render_sequence() is the only thing the render layer needs: L segments from
the newest sample to the oldest, each with width and opacity factors that
taper linearly from 1.0 down to the width floor.
"""
from typing import Iterator, List, NamedTuple

from .constants import TRAIL_ANGLE_THRESHOLD, TRAIL_LENGTH, TRAIL_WIDTH_FLOOR
from .vector_utils import ZERO, Vector3


class TrailSegment(NamedTuple):
    start: Vector3
    end: Vector3
    width_factor: float
    opacity_factor: float


def taper(index: int, count: int, floor: float) -> float:
    """Linear strength for segment `index` of `count`, 1.0 down to `floor`."""
    if count <= 1:
        return 1.0
    return 1.0 - (1.0 - floor) * index / (count - 1)


class TrailSegments:
    """
    Restartable view over a trail's segments, newest first.

    The samples are captured when the view is created; each iteration walks
    them again from the start.
    """

    def __init__(self, head: Vector3, samples: List[Vector3], width_floor: float):
        self._head = head
        self._samples = tuple(samples)
        self._floor = width_floor

    def __iter__(self) -> Iterator[TrailSegment]:
        count = len(self._samples)
        previous = self._head
        for i, current in enumerate(self._samples):
            strength = taper(i, count, self._floor)
            yield TrailSegment(previous, current, strength, strength)
            previous = current

    def __len__(self) -> int:
        return len(self._samples)


class Trail:
    def __init__(
        self,
        initial_position: Vector3,
        sample_width: float,
        capacity: int = TRAIL_LENGTH,
        angle_threshold: float = TRAIL_ANGLE_THRESHOLD,
        width_floor: float = TRAIL_WIDTH_FLOOR,
    ):
        self.capacity = int(capacity)
        self.sample_width = float(sample_width)
        self.angle_threshold = float(angle_threshold)
        self.width_floor = float(width_floor)
        self.samples: List[Vector3] = [initial_position] * self.capacity
        self.write_index = 0
        self.head = initial_position
        self._last_motion = ZERO

    @property
    def last_admitted(self) -> Vector3:
        return self.samples[(self.write_index - 1) % self.capacity]

    def admit_sample(self, current: Vector3, previous_admitted: Vector3) -> bool:
        """Write `current` into the ring if it passes the spacing or turn gate."""
        motion = current.sub(previous_admitted)
        if motion.magnitude() == 0:
            return False
        moved_far = motion.magnitude() > self.sample_width
        turned = self._last_motion.angle_to(motion) > self.angle_threshold
        if not (moved_far or turned):
            return False
        self.samples[self.write_index] = current
        self.write_index = (self.write_index + 1) % self.capacity
        self._last_motion = motion
        return True

    def update(self, current: Vector3) -> bool:
        self.head = current
        return self.admit_sample(current, self.last_admitted)

    def ordered_samples(self) -> List[Vector3]:
        """Samples from newest to oldest."""
        newest = self.write_index - 1
        return [self.samples[(newest - i) % self.capacity] for i in range(self.capacity)]

    def render_sequence(self) -> TrailSegments:
        return TrailSegments(self.head, self.ordered_samples(), self.width_floor)
