#!/usr/bin/env python3
"""
Constellation Simulator application entry point and UI/renderer coordination.

What this module does
- Loads config.json, sets up logging and builds the swarm from a preset.
- Starts two event loops: a Pygame rendering thread (viewport) and the Dear PyGui
  control panel (running on the main thread).
- Or, with --headless N, ticks the swarm N times with a fixed step and only logs.

Threading model
- PygameRenderer runs in a background thread and performs input handling for the
  viewport, ticking the swarm, and drawing. It is the only thread that ticks.
- The UI class runs in the main thread via Dear PyGui. It reads diagnostics and
  flips viewer flags (play/pause, trails, camera reset) under the controller lock;
  restarting builds a brand-new swarm and swaps it in under the same lock.

Running
1) Install dependencies: `pip install -e .`
2) Run this module: `python constellation_sim.py [--config config.json] [--preset constellation.json]`
3) Headless: `python constellation_sim.py --headless 500`

Viewport controls
- Hold the left mouse button and move away from the center to pan/tilt.
- Mouse wheel: move the camera in/out. W/A/S/D: slide the view.
- Space: play/pause. T: trails on/off. R: reset camera.
"""

import argparse
import logging
import sys
import threading
import time
from typing import Any, Dict, List, Optional, Tuple

# GUI and Rendering libs
import pygame
from pygame import gfxdraw
import dearpygui.dearpygui as dpg

from constellation.camera import Camera3D
from constellation.clock import FixedStepClock, SimulationClock
from constellation.constants import (
    BACKGROUND_COLOR,
    CAM_TRANSLATE_STEP,
    HUD_COLOR,
    LOG_THROTTLE_TICKS,
    MAX_FRAME_SECONDS,
    REFERENCE_FPS,
    SAFE_COORD_LIMIT,
    TRAIL_COLOR,
    VIEW_HEIGHT,
    VIEW_WIDTH,
)
from constellation.data_models import BodySnapshot
from constellation.physics import Swarm
from constellation.presets_loader import build_default_swarm, list_presets, load_preset
from constellation.utils import load_config, setup_logging

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_PRESET = "constellation.json"
MAX_SPHERE_PIXELS = 400

# ============================================================
# Simulation Controller (Shared State)
# ============================================================

class SimulationController:
    """
    Shared state between UI thread (DearPyGui) and rendering thread (Pygame).
    Includes thread-safe operations guarded by a lock.
    """
    def __init__(self, swarm: Swarm, clock, preset_name: str = "", log_throttle: int = LOG_THROTTLE_TICKS):
        self.lock = threading.RLock()
        self.swarm = swarm
        self.clock = clock
        self.preset_name = preset_name
        self.log_throttle = max(1, int(log_throttle))
        self.running = True  # app running
        self.playing = True  # simulation running
        self.show_trails = True

    def step(self, dt: Optional[float] = None) -> float:
        """Tick the swarm once; dt defaults to the clock's next delta."""
        with self.lock:
            if dt is None:
                dt = self.clock.tick()
            self.swarm.tick(dt)
            n = self.swarm.tick_count
            if n % self.log_throttle == 0:
                self._log_diagnostics()
        return dt

    def _log_diagnostics(self) -> None:
        swarm = self.swarm
        p = swarm.total_momentum()
        logging.info(f"Tick {swarm.tick_count} | t={swarm.elapsed:.1f} | bodies={len(swarm)}")
        logging.debug(
            f"Tick {swarm.tick_count} | momentum=({p.x:.4e}, {p.y:.4e}, {p.z:.4e}) "
            f"| kinetic energy={swarm.kinetic_energy():.4e}"
        )

    def set_playing(self, playing: bool) -> None:
        with self.lock:
            if playing and not self.playing:
                # a long pause must not turn into one huge step
                self.clock.reset()
            self.playing = playing

    def toggle_play(self) -> bool:
        with self.lock:
            self.set_playing(not self.playing)
            return self.playing

    def set_show_trails(self, show: bool) -> None:
        with self.lock:
            self.show_trails = bool(show)

    def replace_swarm(self, swarm: Swarm, preset_name: str) -> None:
        with self.lock:
            self.swarm = swarm
            self.preset_name = preset_name
            self.clock.reset()
        logging.info(f"Swarm replaced by preset '{preset_name}' ({len(swarm)} bodies).")

    def frame(self) -> Tuple[List[BodySnapshot], bool]:
        """Snapshots for one frame plus whether trails should be drawn."""
        with self.lock:
            return self.swarm.snapshots(), self.show_trails

    def stats(self) -> Dict[str, Any]:
        with self.lock:
            swarm = self.swarm
            p = swarm.total_momentum()
            return {
                "preset": self.preset_name,
                "ticks": swarm.tick_count,
                "elapsed": swarm.elapsed,
                "bodies": len(swarm),
                "momentum": (p.x, p.y, p.z),
                "kinetic_energy": swarm.kinetic_energy(),
                "playing": self.playing,
            }


def run_headless(controller: SimulationController, ticks: int) -> Dict[str, Any]:
    """Tick `ticks` times without a window and return the final stats."""
    logging.info(f"Running headless for {ticks} ticks.")
    start = time.perf_counter()
    for _ in range(ticks):
        controller.step()
    took = time.perf_counter() - start
    stats = controller.stats()
    logging.info(
        f"Headless run finished: {stats['ticks']} ticks in {took:.2f}s, "
        f"kinetic energy {stats['kinetic_energy']:.4e}"
    )
    return stats

# ============================================================
# Pygame Renderer Thread
# ============================================================

class PygameRenderer(threading.Thread):
    """
    Pygame loop: draws spheres and fading trails, handles camera input,
    and ticks the swarm while playing.
    """
    def __init__(self, sim: SimulationController, fps: int = REFERENCE_FPS, size: Tuple[int, int] = (VIEW_WIDTH, VIEW_HEIGHT)):
        super().__init__(daemon=True)
        self.sim = sim
        self.fps = fps
        self.size = size
        self.camera = Camera3D()
        self.surface = None
        self.clock = None
        self.steering = False
        self.running = True

    def run(self):
        pygame.init()
        pygame.display.set_caption("Constellation Simulator - Viewport")
        self.surface = pygame.display.set_mode(self.size, pygame.RESIZABLE)
        self.camera.set_viewport_size(*self.size)
        self.clock = pygame.time.Clock()
        self.sim.clock.reset()

        while self.running and self.sim.running:
            self.handle_events()

            with self.sim.lock:
                playing = self.sim.playing
            if playing:
                self.sim.step()

            self.draw()
            self.clock.tick(self.fps)

        pygame.quit()

    def handle_events(self):
        keys = pygame.key.get_pressed()
        if keys[pygame.K_a]:
            self.camera.translate(CAM_TRANSLATE_STEP, 0)
        if keys[pygame.K_d]:
            self.camera.translate(-CAM_TRANSLATE_STEP, 0)
        if keys[pygame.K_w]:
            self.camera.translate(0, CAM_TRANSLATE_STEP)
        if keys[pygame.K_s]:
            self.camera.translate(0, -CAM_TRANSLATE_STEP)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.sim.running = False
                self.running = False

            elif event.type == pygame.VIDEORESIZE:
                self.surface = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)
                self.camera.set_viewport_size(event.w, event.h)

            elif event.type == pygame.MOUSEWHEEL:
                self.camera.zoom(-event.y * 100.0)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.steering = True

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.steering = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_SPACE:
                    self.sim.toggle_play()
                elif event.key == pygame.K_t:
                    with self.sim.lock:
                        self.sim.set_show_trails(not self.sim.show_trails)
                elif event.key == pygame.K_r:
                    self.camera.reset()

        if self.steering:
            self.camera.steer(pygame.mouse.get_pos())

    def draw_trail(self, surf, snap: BodySnapshot):
        for seg in snap.trail:
            a = self.camera.project(seg.start)
            b = self.camera.project(seg.end)
            if a is None or b is None:
                continue
            start_s = _safe_point((a.x, a.y))
            end_s = _safe_point((b.x, b.y))
            if not start_s or not end_s or start_s == end_s:
                continue
            width = max(1, int(snap.trail_width * seg.width_factor * (a.scale + b.scale) / 2))
            color = _fade(TRAIL_COLOR, seg.opacity_factor)
            try:
                pygame.draw.line(surf, color, start_s, end_s, width)
            except (TypeError, ValueError):
                pass

    def draw(self):
        surf = self.surface
        surf.fill(BACKGROUND_COLOR)

        snapshots, show_trails = self.sim.frame()

        if show_trails:
            for snap in snapshots:
                if snap.trail:
                    self.draw_trail(surf, snap)

        # Far spheres first so near ones overlap them
        projected = []
        for snap in snapshots:
            proj = self.camera.project(snap.position)
            if proj is not None:
                projected.append((proj, snap))
        projected.sort(key=lambda item: item[0].depth, reverse=True)

        for proj, snap in projected:
            center = _safe_point((proj.x, proj.y))
            if not center:
                continue
            vis_r = min(MAX_SPHERE_PIXELS, max(1, int(snap.radius * proj.scale)))
            try:
                gfxdraw.filled_circle(surf, center[0], center[1], vis_r, snap.color)
                gfxdraw.aacircle(surf, center[0], center[1], vis_r, snap.color)
            except (OverflowError, ValueError):
                pass

        stats = self.sim.stats()
        draw_text(surf, "Hold LMB: pan/tilt | Wheel: zoom | WASD: move | Space: Pause/Play | T: trails | R: reset view", 10, 10, HUD_COLOR)
        draw_text(surf, f"{stats['preset']}  ticks: {stats['ticks']}  bodies: {stats['bodies']}  "
                        f"[{'Playing' if stats['playing'] else 'Paused'}]  fps: {self.clock.get_fps():.0f}", 10, 30, HUD_COLOR)

        pygame.display.flip()

_cached_font = None

def draw_text(surface, text, x, y, color):
    global _cached_font
    if not pygame.font.get_init():
        pygame.font.init()
    if _cached_font is None:
        try:
            _cached_font = pygame.font.SysFont("consolas", 16)
        except (OSError, pygame.error):
            _cached_font = pygame.font.Font(None, 16)
    img = _cached_font.render(text, True, color)
    surface.blit(img, (x, y))

def _safe_point(pt):
    try:
        x, y = int(pt[0]), int(pt[1])
    except (OverflowError, ValueError):
        return None
    if -SAFE_COORD_LIMIT <= x <= SAFE_COORD_LIMIT and -SAFE_COORD_LIMIT <= y <= SAFE_COORD_LIMIT:
        return (x, y)
    return None

def _fade(color, strength):
    """Blend `color` toward the background by `strength` in [0, 1]."""
    return tuple(
        int(bg + (c - bg) * strength) for c, bg in zip(color, BACKGROUND_COLOR)
    )

# ============================================================
# Dear PyGui UI
# ============================================================

class UI:
    """
    Dear PyGui interface: presets, playback controls, diagnostics readout.
    """
    def __init__(self, sim: SimulationController, renderer: PygameRenderer, seed: Optional[int] = None):
        self.sim = sim
        self.renderer = renderer
        self.seed = seed

        self.status_msg_id = None
        self.stats_ids: Dict[str, int] = {}
        self._preset_map: Dict[str, str] = {}

        self._build_ui()
        self._schedule_sync()

    def _schedule_sync(self):
        """Reschedule the periodic sync callback using frame callbacks (approx ~10Hz)."""
        dpg.set_frame_callback(dpg.get_frame_count() + 6, self._sync_ui_with_sim)

    def _build_ui(self):
        dpg.create_context()
        dpg.create_viewport(title='Constellation Simulator - Controls', width=440, height=360)

        with dpg.window(label="Controls", width=420, height=340, pos=(10, 10), tag="main_window"):
            with dpg.group(horizontal=True):
                dpg.add_text("Preset:")
                for fn, display in list_presets():
                    self._preset_map[display] = fn
                preset_items = list(self._preset_map.keys())
                if self.sim.preset_name in self._preset_map:
                    default_item = self.sim.preset_name
                else:
                    default_item = preset_items[0] if preset_items else ""
                dpg.add_combo(preset_items,
                              default_value=default_item,
                              width=200,
                              tag="preset_combo")
                dpg.add_button(label="Restart", callback=lambda: self.restart(dpg.get_value("preset_combo")))

            dpg.add_separator()

            dpg.add_text("Simulation Controls")
            with dpg.group(horizontal=True):
                dpg.add_button(label="Play/Pause", callback=self._toggle_play)
                dpg.add_checkbox(label="Trails", default_value=True, callback=self._toggle_trails, tag="trails_checkbox")
                dpg.add_button(label="Reset Camera", callback=self.renderer.camera.reset)

            dpg.add_separator()

            dpg.add_text("Diagnostics")
            for key in ("ticks", "elapsed", "bodies", "momentum", "kinetic_energy"):
                self.stats_ids[key] = dpg.add_text("")
            self.status_msg_id = dpg.add_text("")

        dpg.setup_dearpygui()
        dpg.show_viewport()
        dpg.set_primary_window("main_window", True)

    # -----------------------
    # UI Callbacks
    # -----------------------

    def _set_status(self, msg: str, color=(180, 220, 180)):
        dpg.set_value(self.status_msg_id, msg)
        dpg.configure_item(self.status_msg_id, color=color)

    def _set_error(self, msg: str):
        self._set_status(msg, color=(255, 120, 120))

    def _toggle_play(self):
        playing = self.sim.toggle_play()
        self._set_status(f"Simulation {'Playing' if playing else 'Paused'}.")

    def _toggle_trails(self, sender, value, user_data=None):
        self.sim.set_show_trails(value)
        self._set_status(f"Trails {'ON' if value else 'OFF'}.")

    def restart(self, name: str):
        fn = self._preset_map.get(name)
        if fn is None:
            self._set_error(f"Unknown preset: {name}")
            return
        loaded = load_preset(fn, seed=self.seed)
        if loaded is None:
            self._set_error(f"Could not load preset: {fn}")
            return
        swarm, display_name = loaded
        self.sim.replace_swarm(swarm, display_name)
        self.renderer.camera.reset()
        self._set_status(f"Restarted with preset: {display_name}")

    def _sync_ui_with_sim(self):
        """Periodic UI update of the diagnostics readout."""
        stats = self.sim.stats()
        px, py, pz = stats["momentum"]
        dpg.set_value(self.stats_ids["ticks"], f"Ticks: {stats['ticks']}")
        dpg.set_value(self.stats_ids["elapsed"], f"Elapsed: {stats['elapsed']:.1f} frames")
        dpg.set_value(self.stats_ids["bodies"], f"Bodies: {stats['bodies']}")
        dpg.set_value(self.stats_ids["momentum"], f"Momentum: ({px:.3e}, {py:.3e}, {pz:.3e})")
        dpg.set_value(self.stats_ids["kinetic_energy"], f"Kinetic energy: {stats['kinetic_energy']:.3e}")
        dpg.set_value("trails_checkbox", self.sim.show_trails)
        self._schedule_sync()

# ============================================================
# Application Entry
# ============================================================

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Gravitational constellation simulator.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="path to config.json")
    parser.add_argument("--preset", default=None, help="preset file name under presets/")
    parser.add_argument("--seed", type=int, default=None, help="seed for generated constellations")
    parser.add_argument("--headless", type=int, default=None, metavar="TICKS",
                        help="run TICKS fixed-step ticks without a window")
    return parser.parse_args(argv)

def build_swarm_from_config(run_params: Dict[str, Any], preset: Optional[str], seed: Optional[int]) -> Tuple[Swarm, str]:
    preset = preset or run_params.get("preset", DEFAULT_PRESET)
    loaded = load_preset(preset, seed=seed)
    if loaded is not None:
        return loaded
    logging.warning(f"Preset '{preset}' unavailable; falling back to the default constellation.")
    return build_default_swarm(seed=seed), "Default constellation"

def main(argv=None) -> int:
    args = parse_args(argv)

    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"FATAL: Could not load {args.config}. Error: {e}")
        return 1

    setup_logging(config)
    logging.info("--- Constellation Simulator Starting ---")

    run_params = config.get("run_control", {})
    view_params = config.get("view", {})
    seed = args.seed if args.seed is not None else run_params.get("seed")

    swarm, preset_name = build_swarm_from_config(run_params, args.preset, seed)
    log_throttle = run_params.get("log_throttle_ticks", LOG_THROTTLE_TICKS)

    headless_ticks = args.headless if args.headless is not None else run_params.get("headless_ticks")
    if headless_ticks:
        sim = SimulationController(swarm, FixedStepClock(run_params.get("fixed_dt", 1.0)), preset_name, log_throttle)
        run_headless(sim, int(headless_ticks))
        logging.info("--- Constellation Simulator Shutting Down ---")
        return 0

    clock = SimulationClock(
        time_scale=run_params.get("time_scale", REFERENCE_FPS),
        max_frame_seconds=run_params.get("max_frame_seconds", MAX_FRAME_SECONDS),
    )
    sim = SimulationController(swarm, clock, preset_name, log_throttle)
    size = (view_params.get("width", VIEW_WIDTH), view_params.get("height", VIEW_HEIGHT))
    renderer = PygameRenderer(sim, fps=run_params.get("fps", REFERENCE_FPS), size=size)

    # Start Pygame renderer thread
    renderer.start()

    ui = UI(sim, renderer, seed=seed)

    # Keyboard shortcut in UI window to toggle play/pause (Space)
    with dpg.handler_registry():
        def key_down(sender, app_data):
            if app_data == dpg.mvKey_Spacebar:
                ui._toggle_play()
        dpg.add_key_press_handler(callback=key_down)

    # Run Dear PyGui event loop
    try:
        dpg.start_dearpygui()
    finally:
        # Stop simulation and renderer
        sim.running = False
        renderer.running = False
        renderer.join(timeout=2.0)
        dpg.destroy_context()
        logging.info("--- Constellation Simulator Shutting Down ---")
    return 0

if __name__ == "__main__":
    sys.exit(main())
