from __future__ import annotations

import math

import pymunk
import pytest

from sea_drone.boat import Boat, propeller_forces
from sea_drone.config import BoatConfig, BottleConfig, PoolConfig, SimConfig
from sea_drone.simulation import Simulation
from sea_drone.world import Pool, damped_velocity


def _approx(vec, expected) -> None:
    assert vec[0] == pytest.approx(expected[0], abs=1e-9)
    assert vec[1] == pytest.approx(expected[1], abs=1e-9)


def test_propeller_forces_straight_ahead() -> None:
    thrust, lateral = propeller_forces(0.0, 1.0, 0.0, 100.0)
    _approx(thrust, (100.0, 0.0))
    _approx(lateral, (0.0, 0.0))


def test_propeller_forces_full_rudder() -> None:
    thrust, lateral = propeller_forces(0.0, 1.0, 1.0, 100.0, lateral_ratio=0.8)
    _approx(thrust, (0.0, 100.0))
    _approx(lateral, (0.0, -80.0))


def test_propeller_forces_negative_rudder_and_throttle() -> None:
    thrust, lateral = propeller_forces(0.0, 0.5, -0.5, 100.0, lateral_ratio=0.8)
    h = 50.0 / math.sqrt(2.0)
    _approx(thrust, (h, -h))
    _approx(lateral, (0.0, 20.0))

    # Astern throttle reverses both forces.
    thrust, lateral = propeller_forces(math.pi / 2.0, -1.0, 0.0, 10.0)
    _approx(thrust, (0.0, -10.0))


def test_boat_propeller_sits_at_stern() -> None:
    pool = Pool(PoolConfig())
    boat = Boat(pool.space, BoatConfig(), (500.0, 500.0))
    px, py = boat.propeller_position()
    assert px < 500.0
    assert py == pytest.approx(500.0, abs=1e-9)
    assert boat.length == 35.0
    assert Boat.start_position(BoatConfig(), 1000.0, 1000.0) == (479.0, 500.0)


def _quiet_config() -> SimConfig:
    return SimConfig(bottles=BottleConfig(count=0))


def test_full_throttle_moves_boat_forward() -> None:
    def loop(ctx) -> None:
        ctx.control.set_velocity(1.0)
        ctx.control.set_rudder(0.0)

    sim = Simulation(config=_quiet_config(), loop=loop)
    start = sim.boat.get_state()
    sim.run(max_ticks=60)
    end = sim.boat.get_state()

    assert end.x - start.x > 5.0
    assert end.y == pytest.approx(start.y, abs=1e-6)
    assert sim.context.position.get_heading() == pytest.approx(90.0, abs=1e-6)
    assert sim.context.position.get_velocity() > 0.0


def test_positive_rudder_turns_to_port() -> None:
    def loop(ctx) -> None:
        ctx.control.set_velocity(1.0)
        ctx.control.set_rudder(0.5)

    sim = Simulation(config=_quiet_config(), loop=loop)
    sim.run(max_ticks=30)
    heading = sim.context.position.get_heading()
    assert 0.0 < 90.0 - heading < 45.0


def test_wind_pushes_idle_boat() -> None:
    cfg = SimConfig(bottles=BottleConfig(count=0), wind=(0.0, 20000.0))
    sim = Simulation(config=cfg)
    start = sim.boat.get_state()
    sim.run(max_ticks=60)
    end = sim.boat.get_state()
    assert end.y > start.y
    assert end.x == pytest.approx(start.x, abs=1e-6)


def _coast(friction_air: float, dt: float, steps: int) -> float:
    space = pymunk.Space()
    body = pymunk.Body(1.0, 1.0)
    body.velocity = (100.0, 0.0)
    body.velocity_func = damped_velocity(friction_air)
    space.add(body)
    for _ in range(steps):
        space.step(dt)
    return body.velocity.x


def test_air_friction_loses_fraction_per_frame() -> None:
    assert _coast(0.01, 1.0 / 60.0, 1) == pytest.approx(99.0)
    assert _coast(0.01, 1.0 / 60.0, 60) == pytest.approx(100.0 * 0.99**60)
    # Smaller steps lose the same amount per second.
    assert _coast(0.01, 1.0 / 120.0, 120) == pytest.approx(100.0 * 0.99**60)
    assert _coast(0.0, 1.0 / 60.0, 60) == pytest.approx(100.0)


def test_boat_coasts_after_throttle_cut() -> None:
    sim = Simulation(config=_quiet_config())
    sim.boat.body.velocity = (60.0, 0.0)
    sim.run(max_ticks=60)
    assert sim.boat.speed() == pytest.approx(60.0 * 0.99**60, rel=1e-6)
