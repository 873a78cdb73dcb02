#!/usr/bin/env python3
"""
Shared constants for the Constellation Simulator.

Units are abstract "world units" for distance and reference frames for time:
one frame at REFERENCE_FPS advances the simulation by dt = 1. Keeping the
defaults in one place makes tuning easier; presets may override the
simulation values through their "settings" block.
"""
import math

# Force law
G = 0.667
SPHERE_RATIO = 4.0 / 3.0 * math.pi  # mass = SPHERE_RATIO * r^3
INTERACTION_RADIUS = 5000.0  # pairs farther apart than this never interact
MAX_PAIR_FORCE = 5.0e4  # per-pair force clamp

# World
WORLD_BOUND = 10000.0  # half-size of the reflecting cube centered at the origin
SPAWN_RANGE = 5000.0
START_SPEED = 5.0
N_PARTICLES = 100

# Bodies
MIN_PLANET_RADIUS = 3
MAX_PLANET_RADIUS = 20
ANCHOR_RADIUS = 50.0
PLANET_VARIANT = "planet"
ANCHOR_VARIANT = "anchor"
ANCHOR_COLOR = (255, 255, 230)
DEFAULT_BODY_COLOR = (200, 200, 255)

# Trails
TRAIL_LENGTH = 10
TRAIL_WIDTH_FACTOR = 0.5  # sample spacing and stroke width, as a fraction of the radius
TRAIL_ANGLE_THRESHOLD = 1.0  # radians
TRAIL_WIDTH_FLOOR = 0.2  # strength of the oldest segment
TRAIL_ACCELERATION_THRESHOLD = 0.0
TRAIL_COLOR = (80, 80, 255)

# Timing
REFERENCE_FPS = 30
MAX_FRAME_SECONDS = 0.25  # clamp after stalls so one tick cannot jump too far
LOG_THROTTLE_TICKS = 100

# Logging
LOG_FILE = "logs/constellation.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 5

# Rendering (viewport)
VIEW_WIDTH = 1100
VIEW_HEIGHT = 800
BACKGROUND_COLOR = (2, 2, 2)
HUD_COLOR = (200, 200, 200)

# Camera
CAM_START_DISTANCE = 3000.0
CAM_MIN_DISTANCE = 100.0
CAM_MAX_DISTANCE = 60000.0
CAM_FOCAL_LENGTH = 800.0
CAM_NEAR_CLIP = 1.0
CAM_ROTATE_SPEED = 0.05  # radians per frame at full mouse deflection
CAM_DEAD_ZONE = 0.05
CAM_TRANSLATE_STEP = 5.0
CAM_MAX_PITCH = math.pi / 2 - 0.01

# Safety: avoid drawing outside reasonable integer pixel ranges
SAFE_COORD_LIMIT = 30000
