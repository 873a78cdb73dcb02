#!/usr/bin/env python3
"""
Data models for the Constellation Simulator.

This module defines the engine settings, the Body dataclass with its per-tick
force accumulation and integration, and the read-only snapshot handed to the
render layer.

Units and usage
- positions are in world units, velocities in world units per reference frame.
- mass is derived from the radius (shape_constant * r^3) and never stored.
- force is an accumulator: filled during the force pass, consumed and reset by
  integrate() exactly once per tick.
- trail is owned by the body and only advanced from integrate().
"""
import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple

from .constants import (
    ANCHOR_VARIANT,
    DEFAULT_BODY_COLOR,
    G,
    INTERACTION_RADIUS,
    MAX_PAIR_FORCE,
    PLANET_VARIANT,
    SPHERE_RATIO,
    TRAIL_ACCELERATION_THRESHOLD,
    TRAIL_ANGLE_THRESHOLD,
    TRAIL_LENGTH,
    TRAIL_WIDTH_FACTOR,
    TRAIL_WIDTH_FLOOR,
    WORLD_BOUND,
)
from .trail import Trail, TrailSegment
from .vector_utils import ZERO, Vector3


@dataclass(frozen=True)
class SimulationSettings:
    """
    Engine parameters, fixed for the lifetime of a swarm.

    Fields:
    - gravity: G in the inverse-square law
    - shape_constant: k in mass = k * r^3
    - interaction_radius: pairs at or beyond this distance do not interact
    - world_bound: half-size of the reflecting cube
    - max_pair_force: magnitude clamp for a single pair's force
    - trail_*: trail capacity, spacing and fade parameters
    """
    gravity: float = G
    shape_constant: float = SPHERE_RATIO
    interaction_radius: float = INTERACTION_RADIUS
    world_bound: float = WORLD_BOUND
    max_pair_force: float = MAX_PAIR_FORCE
    trail_length: int = TRAIL_LENGTH
    trail_width_factor: float = TRAIL_WIDTH_FACTOR
    trail_angle_threshold: float = TRAIL_ANGLE_THRESHOLD
    trail_width_floor: float = TRAIL_WIDTH_FLOOR
    trail_acceleration_threshold: float = TRAIL_ACCELERATION_THRESHOLD

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SimulationSettings":
        """
        Build settings from a JSON mapping.

        Unknown keys and non-numeric values are logged and ignored, leaving the
        default in place. trail_length is at least 1.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logging.warning(f"Ignoring unknown simulation setting '{key}'.")
                continue
            try:
                kwargs[key] = max(1, int(value)) if key == "trail_length" else float(value)
            except (TypeError, ValueError):
                logging.warning(f"Ignoring simulation setting '{key}' with bad value {value!r}.")
        return cls(**kwargs)


@dataclass(eq=False)
class Body:
    """
    A massive sphere in the swarm.

    Fields:
    - id: unique within the owning swarm, used only for self-exclusion
    - radius: sphere radius; mass follows from it
    - position, velocity: current state
    - color: RGB tuple used by the render layer
    - settings: shared engine parameters
    - variant: "planet" or "anchor"
    - emits_trail / reflects_at_boundary: capability flags
    - force: accumulated force for the current tick
    - acceleration: velocity change applied by the last integrate()
    - trail_visible: render hint computed by the last integrate()
    """
    id: int
    radius: float
    position: Vector3
    velocity: Vector3 = ZERO
    color: Tuple[int, int, int] = DEFAULT_BODY_COLOR
    settings: SimulationSettings = field(default_factory=SimulationSettings)
    variant: str = PLANET_VARIANT
    emits_trail: bool = True
    reflects_at_boundary: bool = True
    force: Vector3 = ZERO
    acceleration: Vector3 = ZERO
    trail_visible: bool = False
    trail: Trail = field(init=False, repr=False)

    def __post_init__(self):
        s = self.settings
        self.trail = Trail(
            self.position,
            self.radius * s.trail_width_factor,
            capacity=s.trail_length,
            angle_threshold=s.trail_angle_threshold,
            width_floor=s.trail_width_floor,
        )

    @property
    def mass(self) -> float:
        return self.settings.shape_constant * self.radius ** 3

    @property
    def momentum(self) -> Vector3:
        return self.velocity.scale(self.mass)

    @property
    def is_anchor(self) -> bool:
        return self.variant == ANCHOR_VARIANT

    def accumulate_force_from(self, other: "Body") -> None:
        """
        Deposit this body's pull onto `other`.

        The force on `other` points from `other` toward this body, so a full
        sweep over ordered pairs gives both bodies of a pair their share.
        Pairs beyond the interaction radius, or closer than the sum of their
        radii, are skipped; the latter keeps the distance well away from zero
        before normalizing.
        """
        if other.id == self.id:
            return
        d = self.position.distance(other.position)
        if d >= self.settings.interaction_radius:
            return
        if d < self.radius + other.radius:
            return
        strength = self.settings.gravity * self.mass * other.mass / (d * d)
        direction = self.position.sub(other.position).normalize()
        pull = direction.scale(strength).limit(self.settings.max_pair_force)
        other.force = other.force.add(pull)

    def _reflected_velocity(self) -> Vector3:
        bound = self.settings.world_bound
        p, v = self.position, self.velocity
        return Vector3(
            -v.x if abs(p.x) >= bound else v.x,
            -v.y if abs(p.y) >= bound else v.y,
            -v.z if abs(p.z) >= bound else v.z,
        )

    def integrate(self, dt: float) -> None:
        """
        Advance one tick with semi-implicit Euler.

        Reflection uses the velocity from the previous tick and happens before
        the new acceleration is applied. A zero dt moves nothing.
        """
        if self.reflects_at_boundary and dt > 0:
            self.velocity = self._reflected_velocity()

        self.acceleration = self.force.scale(dt / self.mass)
        self.velocity = self.velocity.add(self.acceleration)
        self.position = self.position.add(self.velocity.scale(dt))
        self.force = ZERO

        self.trail_visible = (
            self.emits_trail
            and self.acceleration.magnitude() > self.settings.trail_acceleration_threshold
        )
        if self.emits_trail:
            self.trail.update(self.position)

    def snapshot(self) -> "BodySnapshot":
        segments = tuple(self.trail.render_sequence()) if self.trail_visible else None
        return BodySnapshot(
            self.id, self.position, self.radius, self.color, self.variant,
            self.trail.sample_width, segments,
        )


class BodySnapshot(NamedTuple):
    """What the render layer sees of one body for one frame."""
    id: int
    position: Vector3
    radius: float
    color: Tuple[int, int, int]
    variant: str
    trail_width: float
    trail: Optional[Tuple[TrailSegment, ...]]
