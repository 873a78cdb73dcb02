#!/usr/bin/env python3
"""
Core physics engine for the Constellation Simulator.

Responsibilities
- Own the bodies of one run and hand out their ids.
- Advance the whole swarm one tick at a time with a two-phase update:
  first every ordered pair deposits its pull (force pass), then every body
  integrates the force it collected (integration pass).
- Provide read-only snapshots and conservation diagnostics.

Ordering
- The two passes never interleave. If a body integrated while others were
  still accumulating, bodies later in the list would see positions from the
  next tick and the result would depend on list order.
- Ticks are strictly sequential; the caller drives them from one thread.

Numerical notes
- Complexity is O(N^2) per tick (direct summation over all ordered pairs).
- The near-field cutoff (distance below the sum of radii) and the per-pair
  force clamp keep accelerations bounded. Pairs beyond the interaction radius
  are ignored, so momentum is conserved exactly only while every pair is
  either fully inside or fully outside the cutoffs, and no body reflects.
"""
import itertools
from typing import Iterator, List, Optional, Tuple

from .constants import ANCHOR_VARIANT, DEFAULT_BODY_COLOR, PLANET_VARIANT
from .data_models import Body, BodySnapshot, SimulationSettings
from .vector_utils import ZERO, Vector3


class Swarm:
    """
    The set of bodies simulated together.

    Bodies are added while the swarm is being built and are never removed;
    insertion order is kept for the whole run.
    """

    def __init__(self, settings: Optional[SimulationSettings] = None):
        self.settings = settings if settings is not None else SimulationSettings()
        self._bodies: List[Body] = []
        self._ids = itertools.count()
        self.tick_count = 0
        self.elapsed = 0.0

    def spawn(
        self,
        position: Vector3,
        velocity: Vector3 = ZERO,
        radius: float = 1.0,
        color: Tuple[int, int, int] = DEFAULT_BODY_COLOR,
        variant: str = PLANET_VARIANT,
    ) -> Body:
        """Create a body with the next id and add it to the swarm."""
        body = Body(
            id=next(self._ids),
            radius=float(radius),
            position=position,
            velocity=velocity,
            color=color,
            settings=self.settings,
            variant=variant,
            emits_trail=variant != ANCHOR_VARIANT,
        )
        self._bodies.append(body)
        return body

    @property
    def bodies(self) -> Tuple[Body, ...]:
        return tuple(self._bodies)

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def accumulate_forces(self) -> None:
        """Force pass: every body deposits its pull on every other body."""
        bodies = self._bodies
        for body in bodies:
            for other in bodies:
                body.accumulate_force_from(other)

    def integrate(self, dt: float) -> None:
        """Integration pass: every body consumes its accumulated force."""
        for body in self._bodies:
            body.integrate(dt)

    def tick(self, dt: float) -> None:
        """Advance the swarm by one tick of length dt."""
        self.accumulate_forces()
        self.integrate(dt)
        self.tick_count += 1
        self.elapsed += dt

    def snapshots(self) -> List[BodySnapshot]:
        return [body.snapshot() for body in self._bodies]

    def total_mass(self) -> float:
        return sum(b.mass for b in self._bodies)

    def total_momentum(self) -> Vector3:
        total = ZERO
        for b in self._bodies:
            total = total.add(b.momentum)
        return total

    def kinetic_energy(self) -> float:
        return sum(0.5 * b.mass * b.velocity.dot(b.velocity) for b in self._bodies)

    def center_of_mass(self) -> Vector3:
        m_total = self.total_mass()
        if m_total <= 0:
            return ZERO
        weighted = ZERO
        for b in self._bodies:
            weighted = weighted.add(b.position.scale(b.mass))
        return weighted.scale(1.0 / m_total)


def circular_orbit_speed(gravity: float, central_mass: float, orbital_radius: float) -> float:
    """
    Speed for a circular orbit around a much heavier body.

    Gravity supplies the centripetal force, G * M / r = v^2 / r, so
    v = sqrt(G * M / r). Returns 0 for a non-positive radius.
    """
    if orbital_radius <= 0:
        return 0.0
    return (gravity * central_mass / orbital_radius) ** 0.5
