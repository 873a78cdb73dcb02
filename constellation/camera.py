#!/usr/bin/env python3
"""
Perspective camera for drawing the 3D swarm on a 2D viewport.

The camera orbits the origin: yaw and pitch rotate the world, offset slides
the view sideways, distance moves the eye along the view axis. It holds only
view state and never touches the simulation.
"""
import math
from typing import NamedTuple, Optional, Tuple

from .constants import (
    CAM_DEAD_ZONE,
    CAM_FOCAL_LENGTH,
    CAM_MAX_DISTANCE,
    CAM_MAX_PITCH,
    CAM_MIN_DISTANCE,
    CAM_NEAR_CLIP,
    CAM_ROTATE_SPEED,
    CAM_START_DISTANCE,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from .vector_utils import Vector3, clamp


class Projection(NamedTuple):
    x: float
    y: float
    scale: float  # pixels per world unit at this depth
    depth: float


class Camera3D:
    def __init__(self, distance: float = CAM_START_DISTANCE, focal_length: float = CAM_FOCAL_LENGTH):
        self.focal_length = focal_length
        self.viewport_size = (VIEW_WIDTH, VIEW_HEIGHT)
        self._start_distance = distance
        self.reset()

    def reset(self) -> None:
        self.yaw = 0.0
        self.pitch = 0.0
        self.offset = [0.0, 0.0]
        self.distance = self._start_distance

    def set_viewport_size(self, w: int, h: int) -> None:
        self.viewport_size = (w, h)

    def pan(self, angle: float) -> None:
        self.yaw = (self.yaw + angle) % (2 * math.pi)

    def tilt(self, angle: float) -> None:
        self.pitch = clamp(self.pitch + angle, -CAM_MAX_PITCH, CAM_MAX_PITCH)

    def translate(self, dx: float, dy: float) -> None:
        self.offset[0] += dx
        self.offset[1] += dy

    def zoom(self, delta: float) -> None:
        self.distance = clamp(self.distance + delta, CAM_MIN_DISTANCE, CAM_MAX_DISTANCE)

    def steer(self, mouse: Tuple[int, int]) -> None:
        """
        Turn toward the mouse while a button is held.

        The turn rate grows with the distance from the viewport center; a small
        dead zone around the center keeps the view still.
        """
        w, h = self.viewport_size
        pan = (mouse[0] - w / 2) / w / 2
        tilt = (mouse[1] - h / 2) / h / 2
        if abs(pan) <= CAM_DEAD_ZONE:
            pan = 0.0
        if abs(tilt) <= CAM_DEAD_ZONE:
            tilt = 0.0
        self.pan(-pan * CAM_ROTATE_SPEED)
        self.tilt(tilt * CAM_ROTATE_SPEED)

    def to_view(self, p: Vector3) -> Vector3:
        cy, sy = math.cos(self.yaw), math.sin(self.yaw)
        cp, sp = math.cos(self.pitch), math.sin(self.pitch)
        # yaw about the vertical axis, then pitch about the horizontal one
        x = p.x * cy + p.z * sy
        z = -p.x * sy + p.z * cy
        y = p.y * cp - z * sp
        z = p.y * sp + z * cp
        return Vector3(x + self.offset[0], y + self.offset[1], z + self.distance)

    def project(self, p: Vector3) -> Optional[Projection]:
        """Screen position, scale and depth of a world point, or None if behind the eye."""
        v = self.to_view(p)
        if v.z <= CAM_NEAR_CLIP:
            return None
        scale = self.focal_length / v.z
        w, h = self.viewport_size
        return Projection(w / 2 + v.x * scale, h / 2 + v.y * scale, scale, v.z)
