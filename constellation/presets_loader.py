#!/usr/bin/env python3
"""
Scene preset loading and random constellation generation.

Presets live in presets/*.json and describe how to build a Swarm. A preset
may carry explicit bodies, a generator block, or both (explicit bodies are
spawned first).

Schema
======
{
  "name": "Human-friendly preset name",
  "description": "Optional description",
  "settings": {                       # optional SimulationSettings overrides
    "gravity": 0.667,
    "interaction_radius": 5000.0
  },
  "bodies": [                         # optional explicit bodies
    {
      "position": [0.0, 0.0, 0.0],
      "velocity": [0.0, 0.0, 0.0],    # optional, default zero
      "radius": 50.0,
      "color": [255, 255, 230],       # optional
      "variant": "anchor"             # optional, "planet" | "anchor"
    }
  ],
  "generator": {                      # optional random constellation
    "count": 100,
    "spawn_range": 5000.0,
    "start_speed": 5.0,
    "min_radius": 3,
    "max_radius": 20,
    "anchor": true,
    "anchor_radius": 50.0,
    "orbiting": false,                # planets start on circular orbits around the anchor
    "seed": 7                         # optional; omitted means a fresh layout each run
  }
}

Unreadable files yield None; malformed body entries are skipped. Both are
logged as warnings so a bad preset never stops the viewer.
"""
import json
import logging
import os
import random
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
  ANCHOR_COLOR,
  ANCHOR_RADIUS,
  ANCHOR_VARIANT,
  DEFAULT_BODY_COLOR,
  MAX_PLANET_RADIUS,
  MIN_PLANET_RADIUS,
  N_PARTICLES,
  PLANET_VARIANT,
  SPAWN_RANGE,
  START_SPEED,
)
from .data_models import SimulationSettings
from .physics import Swarm, circular_orbit_speed
from .utils import try_float
from .vector_utils import ZERO, Vector3

PRESETS_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "presets")
VARIANTS = (PLANET_VARIANT, ANCHOR_VARIANT)
GENERATOR_KEYS = (
  "count", "spawn_range", "start_speed", "min_radius", "max_radius",
  "anchor", "anchor_radius", "orbiting", "seed",
)


def _read_json(path: str) -> Optional[dict]:
  try:
    with open(path, "r", encoding="utf-8") as f:
      return json.load(f)
  except (OSError, json.JSONDecodeError) as e:
    logging.warning(f"Could not read preset {path}: {e}")
    return None


def _coerce_color(c, default=DEFAULT_BODY_COLOR) -> Tuple[int, int, int]:
  try:
    r, g, b = int(c[0]), int(c[1]), int(c[2])
  except (TypeError, ValueError, IndexError):
    return default
  r = max(0, min(255, r)); g = max(0, min(255, g)); b = max(0, min(255, b))
  return (r, g, b)


def weighted_random(rng: random.Random, low: int, high: int) -> int:
  """
  Integer radius skewed toward `low`.

  high / (u * high + low) falls from high / low toward high / (high + low) as
  u grows, so most draws land near `low` and only a few reach the large end.
  """
  return (low - 1) + round(high / (rng.random() * high + low))


def random_vector(rng: random.Random, spread: float) -> Vector3:
  return Vector3(rng.uniform(-spread, spread), rng.uniform(-spread, spread), rng.uniform(-spread, spread))


def _orbital_velocity(swarm: Swarm, anchor, position: Vector3) -> Vector3:
  offset = position.sub(anchor.position)
  tangent = Vector3(offset.z, 0.0, -offset.x)
  r = offset.magnitude()
  if r == 0 or tangent.magnitude() == 0:
    return ZERO
  speed = circular_orbit_speed(swarm.settings.gravity, anchor.mass, r)
  return anchor.velocity.add(tangent.normalize().scale(speed))


def generate_constellation(
  swarm: Swarm,
  count: int = N_PARTICLES,
  spawn_range: float = SPAWN_RANGE,
  start_speed: float = START_SPEED,
  min_radius: int = MIN_PLANET_RADIUS,
  max_radius: int = MAX_PLANET_RADIUS,
  anchor: bool = True,
  anchor_radius: float = ANCHOR_RADIUS,
  orbiting: bool = False,
  seed: Optional[int] = None,
) -> None:
  """
  Spawn `count` random planets and, optionally, one anchor near the origin.

  Planets get uniform positions in [-spawn_range, spawn_range]^3, uniform
  velocities in [-start_speed, start_speed]^3 and pale bluish colors. The
  anchor is placed within spawn_range / 10 of the origin with zero velocity.
  With `orbiting`, planets instead start on circular orbits around the anchor.
  """
  count, min_radius, max_radius = int(count), int(min_radius), int(max_radius)
  spawn_range, start_speed, anchor_radius = float(spawn_range), float(start_speed), float(anchor_radius)

  rng = random.Random(seed)
  anchor_position = random_vector(rng, spawn_range / 10) if anchor else None

  planets = []
  for _ in range(count):
    radius = weighted_random(rng, min_radius, max_radius)
    color = (rng.randint(120, 220), rng.randint(140, 190), rng.randint(140, 190))
    position = random_vector(rng, spawn_range)
    velocity = random_vector(rng, start_speed)
    planets.append(swarm.spawn(position, velocity, radius, color, PLANET_VARIANT))

  if anchor_position is None:
    logging.info(f"Generated constellation of {len(planets)} planets without anchor.")
    return

  star = swarm.spawn(anchor_position, ZERO, anchor_radius, ANCHOR_COLOR, ANCHOR_VARIANT)
  if orbiting:
    for planet in planets:
      planet.velocity = _orbital_velocity(swarm, star, planet.position)
  logging.info(
    f"Generated constellation of {len(planets)} planets around an anchor "
    f"of radius {anchor_radius} (seed={seed})."
  )


def _spawn_body_entry(swarm: Swarm, entry: Dict[str, Any]) -> bool:
  try:
    position = Vector3.from_sequence(entry["position"])
    velocity = Vector3.from_sequence(entry.get("velocity", (0.0, 0.0, 0.0)))
  except (KeyError, TypeError, ValueError, IndexError) as e:
    logging.warning(f"Skipping body with bad position/velocity: {e}")
    return False
  radius = try_float(entry.get("radius"))
  if radius is None or radius <= 0:
    logging.warning(f"Skipping body with bad radius: {entry.get('radius')!r}")
    return False
  variant = entry.get("variant", PLANET_VARIANT)
  if variant not in VARIANTS:
    logging.warning(f"Skipping body with unknown variant: {variant!r}")
    return False
  default_color = ANCHOR_COLOR if variant == ANCHOR_VARIANT else DEFAULT_BODY_COLOR
  color = _coerce_color(entry.get("color", default_color), default_color)
  swarm.spawn(position, velocity, radius, color, variant)
  return True


def build_swarm(data: Dict[str, Any], seed: Optional[int] = None) -> Swarm:
  """
  Build a Swarm from an already-parsed preset mapping.

  `seed` overrides the generator's seed when given.
  """
  swarm = Swarm(SimulationSettings.from_dict(data.get("settings")))
  for entry in data.get("bodies", []):
    _spawn_body_entry(swarm, entry)

  generator = data.get("generator")
  if generator:
    params = {}
    for key, value in generator.items():
      if key not in GENERATOR_KEYS:
        logging.warning(f"Ignoring unknown generator option '{key}'.")
        continue
      params[key] = value
    if seed is not None:
      params["seed"] = seed
    try:
      generate_constellation(swarm, **params)
    except (TypeError, ValueError) as e:
      logging.warning(f"Skipping generator block with bad value: {e}")
  return swarm


def build_default_swarm(seed: Optional[int] = None) -> Swarm:
  """The classic scene: N_PARTICLES random planets around one anchor."""
  swarm = Swarm()
  generate_constellation(swarm, seed=seed)
  return swarm


def list_presets(directory: str = PRESETS_DIR) -> List[Tuple[str, str]]:
  """Return list of (file_name, display_name) for available presets."""
  items: List[Tuple[str, str]] = []
  if not os.path.isdir(directory):
    return items
  for fn in sorted(os.listdir(directory)):
    if not fn.lower().endswith(".json"):
      continue
    data = _read_json(os.path.join(directory, fn))
    if not isinstance(data, dict):
      data = {}
    display = data.get("name") or os.path.splitext(fn)[0]
    items.append((fn, display))
  return items


def load_preset(file_name: str, seed: Optional[int] = None, directory: str = PRESETS_DIR) -> Optional[Tuple[Swarm, str]]:
  """
  Load a preset JSON by file name.
  Returns (swarm, display_name), or None if the file cannot be read.
  """
  data = _read_json(os.path.join(directory, file_name))
  if data is None:
    return None
  if not isinstance(data, dict):
    logging.warning(f"Preset {file_name} is not a JSON object; ignoring it.")
    return None
  display_name = data.get("name") or os.path.splitext(file_name)[0]
  swarm = build_swarm(data, seed=seed)
  logging.info(f"Loaded preset '{display_name}' with {len(swarm)} bodies.")
  return swarm, display_name
