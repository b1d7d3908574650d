from __future__ import annotations

import pytest

from sea_drone.api import Control
from sea_drone.config import BottleConfig, SimConfig
from sea_drone.simulation import Simulation


def test_control_accepts_unit_range() -> None:
    control = Control()
    control.set_velocity(1.0)
    control.set_rudder(-1.0)
    assert control.velocity == 1.0
    assert control.rudder == -1.0

    control.set_velocity(-0.25)
    control.set_rudder(0.5)
    assert control.velocity == -0.25
    assert control.rudder == 0.5


def test_control_rejects_out_of_range_and_keeps_value() -> None:
    control = Control()
    control.set_velocity(0.4)
    control.set_rudder(0.2)

    with pytest.raises(ValueError, match="Invalid velocity value."):
        control.set_velocity(1.01)
    with pytest.raises(ValueError, match="Invalid rudder value."):
        control.set_rudder(-3.0)
    with pytest.raises(ValueError):
        control.set_velocity(float("nan"))

    assert control.velocity == 0.4
    assert control.rudder == 0.2


def test_loop_errors_propagate_from_tick() -> None:
    def bad_loop(ctx) -> None:
        ctx.control.set_velocity(2.0)

    sim = Simulation(config=SimConfig(bottles=BottleConfig(count=0)), loop=bad_loop)
    with pytest.raises(ValueError):
        sim.tick()


def test_non_callable_loop_rejected() -> None:
    with pytest.raises(TypeError):
        Simulation(config=SimConfig(bottles=BottleConfig(count=0)), loop="not a function")
