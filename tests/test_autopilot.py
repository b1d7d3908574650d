from __future__ import annotations

import pytest

from sea_drone.autopilot import AutopilotConfig, BottleSeeker
from sea_drone.boat import Boat
from sea_drone.config import BottleConfig, SimConfig
from sea_drone.sensors import GeoPoint
from sea_drone.simulation import Simulation
from sea_drone.world import Pool


def _sim_with_bottles(offsets, loop=None) -> Simulation:
    cfg = SimConfig(bottles=BottleConfig(count=0))
    sx, sy = Boat.start_position(cfg.boat, cfg.pool.width, cfg.pool.height)
    data = {"bottles": [{"x": sx + dx, "y": sy + dy, "weight": 1.0} for dx, dy in offsets]}
    pool = Pool.from_map_dict(cfg.pool, data)
    return Simulation(config=cfg, loop=loop, pool=pool)


def test_steers_toward_starboard_bottle() -> None:
    sim = _sim_with_bottles([(100.0, 40.0)])
    seeker = BottleSeeker()
    seeker(sim.context)

    bearing = sim.context.detector.detect()[0].bearing
    assert bearing > 0.0
    assert seeker.last_mode == "seek"
    assert sim.control.rudder == pytest.approx(-bearing / 45.0)
    assert sim.control.velocity == AutopilotConfig().cruise_velocity


def test_slows_for_sharp_turn() -> None:
    sim = _sim_with_bottles([(60.0, -45.0)])
    seeker = BottleSeeker()
    seeker(sim.context)

    assert sim.control.rudder > 0.0
    assert sim.control.velocity == AutopilotConfig().turn_velocity


def test_patrols_without_detections() -> None:
    sim = _sim_with_bottles([(-150.0, 0.0)])
    seeker = BottleSeeker()
    seeker(sim.context)

    assert seeker.last_mode == "patrol"
    assert sim.control.velocity == AutopilotConfig().patrol_velocity
    assert sim.control.rudder == AutopilotConfig().patrol_rudder


def test_collects_bottle_dead_ahead() -> None:
    sim = _sim_with_bottles([(80.0, 0.0)], loop=BottleSeeker())
    sim.run(max_ticks=600)
    assert sim.context.cargo.get_count() == 1


def test_returns_to_centre_near_fence() -> None:
    cfg = SimConfig(bottles=BottleConfig(count=0))
    sim = Simulation(config=cfg, pool=Pool(cfg.pool))
    # Park the boat near the east wall, still facing east.
    sim.boat.body.position = (950.0, 500.0)
    seeker = BottleSeeker()
    seeker(sim.context)

    assert seeker.last_mode == "return"
    # The centre is dead astern: full rudder, slow ahead.
    assert abs(sim.control.rudder) == 1.0
    assert sim.control.velocity == AutopilotConfig().turn_velocity


def test_bearing_to_geo_point() -> None:
    sim = _sim_with_bottles([])
    ctx = sim.context
    pos = ctx.position.get_position()
    east = GeoPoint(pos.longitude + 100.0, pos.latitude)
    south = GeoPoint(pos.longitude, pos.latitude + 100.0)
    assert ctx.position.get_bearing_to(east) == pytest.approx(90.0)
    assert ctx.position.get_bearing_to(south) == pytest.approx(180.0)
