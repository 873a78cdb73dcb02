import math
from dataclasses import replace

import pytest

from constellation.constants import ANCHOR_VARIANT, SPHERE_RATIO
from constellation.data_models import SimulationSettings
from constellation.vector_utils import ZERO, Vector3


def test_mass_is_derived_from_radius(make_body):
    body = make_body(radius=2.0, settings=SimulationSettings())
    assert body.mass == pytest.approx(SPHERE_RATIO * 8.0)
    assert body.mass == pytest.approx(4.0 / 3.0 * math.pi * 8.0)


def test_self_exclusion(make_body):
    body = make_body()
    body.accumulate_force_from(body)
    assert body.force == ZERO


def test_force_is_deposited_on_other_toward_self(make_body):
    a = make_body(position=(0.0, 0.0, 0.0))
    b = make_body(position=(10.0, 0.0, 0.0))
    a.accumulate_force_from(b)
    assert a.force == ZERO
    assert b.force.x == pytest.approx(-0.01)
    assert b.force.y == 0.0 and b.force.z == 0.0


def test_inverse_square_law(make_body):
    a = make_body(position=(0.0, 0.0, 0.0), radius=2.0)
    b = make_body(position=(0.0, 20.0, 0.0), radius=1.0)
    a.accumulate_force_from(b)
    # G * 8 * 1 / 400
    assert b.force.magnitude() == pytest.approx(0.02)
    assert b.force.y < 0


def test_forces_accumulate(make_body):
    a = make_body(position=(-10.0, 0.0, 0.0))
    c = make_body(position=(10.0, 0.0, 0.0))
    b = make_body(position=(0.0, 0.0, 0.0))
    a.accumulate_force_from(b)
    c.accumulate_force_from(b)
    assert b.force.magnitude() == pytest.approx(0.0, abs=1e-15)


def test_interaction_radius_cutoff(make_body, ideal_settings):
    settings = replace(ideal_settings, interaction_radius=5.0)
    a = make_body(position=(0.0, 0.0, 0.0), radius=0.1, settings=settings)
    b = make_body(position=(5.0, 0.0, 0.0), radius=0.1, settings=settings)
    a.accumulate_force_from(b)
    b.accumulate_force_from(a)
    assert a.force == ZERO
    assert b.force == ZERO


def test_near_field_exclusion_regardless_of_mass(make_body):
    a = make_body(position=(0.0, 0.0, 0.0), radius=1.0)
    b = make_body(position=(1.5, 0.0, 0.0), radius=1000.0)
    a.accumulate_force_from(b)
    b.accumulate_force_from(a)
    assert a.force == ZERO
    assert b.force == ZERO


def test_touching_bodies_still_interact(make_body):
    a = make_body(position=(0.0, 0.0, 0.0), radius=1.0)
    b = make_body(position=(2.0, 0.0, 0.0), radius=1.0)
    a.accumulate_force_from(b)
    assert b.force.x == pytest.approx(-0.25)


def test_pair_force_is_limited(make_body, ideal_settings):
    settings = replace(ideal_settings, gravity=1e6, max_pair_force=5.0)
    a = make_body(position=(0.0, 0.0, 0.0), settings=settings)
    b = make_body(position=(0.0, 0.0, 10.0), settings=settings)
    a.accumulate_force_from(b)
    assert b.force.magnitude() == pytest.approx(5.0)
    assert b.force.z == pytest.approx(-5.0)


def test_integrate_applies_force_and_resets_it(make_body):
    body = make_body(velocity=(1.0, 0.0, 0.0), radius=1.0)
    body.force = Vector3(0.0, 2.0, 0.0)
    body.integrate(0.5)
    assert body.acceleration == Vector3(0.0, 1.0, 0.0)
    assert body.velocity == Vector3(1.0, 1.0, 0.0)
    assert body.position == Vector3(0.5, 0.5, 0.0)
    assert body.force == ZERO


def test_boundary_reflection(make_body, ideal_settings):
    settings = replace(ideal_settings, world_bound=100.0)
    body = make_body(position=(100.5, 0.0, 0.0), velocity=(2.0, 1.0, 0.0), settings=settings)
    body.integrate(1.0)
    assert body.velocity == Vector3(-2.0, 1.0, 0.0)
    assert body.position == Vector3(98.5, 1.0, 0.0)


def test_reflection_happens_before_acceleration(make_body, ideal_settings):
    settings = replace(ideal_settings, world_bound=100.0)
    body = make_body(position=(0.0, 0.0, -101.0), velocity=(0.0, 0.0, -1.0), settings=settings)
    body.force = Vector3(0.0, 0.0, -0.5)
    body.integrate(1.0)
    assert body.velocity.z == pytest.approx(0.5)


def test_no_reflection_when_flag_is_off(make_body, ideal_settings):
    settings = replace(ideal_settings, world_bound=100.0)
    body = make_body(position=(150.0, 0.0, 0.0), velocity=(1.0, 0.0, 0.0), settings=settings,
                     reflects_at_boundary=False)
    body.integrate(1.0)
    assert body.velocity.x == 1.0


def test_zero_dt_changes_nothing(make_body, ideal_settings):
    settings = replace(ideal_settings, world_bound=100.0)
    body = make_body(position=(120.0, 3.0, 0.0), velocity=(1.0, 2.0, 3.0), settings=settings)
    body.force = Vector3(5.0, 5.0, 5.0)
    body.integrate(0.0)
    assert body.position == Vector3(120.0, 3.0, 0.0)
    assert body.velocity == Vector3(1.0, 2.0, 3.0)
    assert body.force == ZERO


def test_trail_follows_admitted_positions(make_body):
    body = make_body(velocity=(5.0, 0.0, 0.0), radius=2.0)
    body.force = Vector3(1.0, 0.0, 0.0)
    body.integrate(1.0)
    assert body.trail_visible is True
    assert body.trail.last_admitted == body.position
    assert len(body.trail.samples) == body.settings.trail_length


def test_force_free_body_hides_trail(make_body):
    body = make_body(velocity=(5.0, 0.0, 0.0))
    body.integrate(1.0)
    assert body.trail_visible is False
    assert body.snapshot().trail is None


def test_anchor_never_emits_trail(make_body):
    star = make_body(velocity=(50.0, 0.0, 0.0), radius=5.0, variant=ANCHOR_VARIANT, emits_trail=False)
    star.force = Vector3(100.0, 0.0, 0.0)
    for _ in range(5):
        star.integrate(1.0)
    assert star.is_anchor
    assert star.trail.write_index == 0
    assert star.trail_visible is False
    assert star.position.x > 250.0


def test_snapshot(make_body):
    body = make_body(position=(1.0, 2.0, 3.0), radius=4.0, color=(10, 20, 30))
    body.force = Vector3(0.0, 0.0, 1.0)
    body.integrate(1.0)
    snap = body.snapshot()
    assert snap.id == body.id
    assert snap.position == body.position
    assert snap.radius == 4.0
    assert snap.color == (10, 20, 30)
    assert snap.trail_width == pytest.approx(4.0 * body.settings.trail_width_factor)
    assert len(snap.trail) == body.settings.trail_length
    assert snap.trail[0].width_factor == pytest.approx(1.0)


def test_settings_from_dict(caplog):
    settings = SimulationSettings.from_dict({"gravity": "2.5", "trail_length": 4.0, "bogus": 1})
    assert settings.gravity == 2.5
    assert settings.trail_length == 4
    assert isinstance(settings.trail_length, int)
    assert "bogus" in caplog.text
    assert SimulationSettings.from_dict(None) == SimulationSettings()


def test_settings_from_dict_skips_bad_values(caplog):
    settings = SimulationSettings.from_dict({"gravity": None, "max_pair_force": "lots", "trail_length": -3})
    assert settings.gravity == SimulationSettings().gravity
    assert settings.max_pair_force == SimulationSettings().max_pair_force
    assert settings.trail_length == 1
    assert "gravity" in caplog.text and "max_pair_force" in caplog.text
