"""
Control and telemetry surface handed to the per-tick loop callback.

A loop receives one LoopContext per tick and talks to the boat only through
these facades: it reads position, heading, detections and cargo, and sets
throttle and rudder, which the simulation turns into propeller forces after
the loop returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List

from .geometry_utils import bearing_to, compass_heading
from .sensors import Detection, GeoPoint

if TYPE_CHECKING:
    from .simulation import Simulation


class Control:
    """Throttle and rudder commands, each in [-1.0, 1.0]."""

    def __init__(self) -> None:
        self.velocity = 0.0
        self.rudder = 0.0

    def set_velocity(self, value: float) -> None:
        """Set thruster power; negative values run the propeller astern."""
        if not -1.0 <= value <= 1.0:
            raise ValueError("Invalid velocity value.")
        self.velocity = float(value)

    def set_rudder(self, value: float) -> None:
        """Set rudder deflection; negative values turn to starboard."""
        if not -1.0 <= value <= 1.0:
            raise ValueError("Invalid rudder value.")
        self.rudder = float(value)

    def reset(self) -> None:
        self.velocity = 0.0
        self.rudder = 0.0

    def to_dict(self) -> dict:
        return {"velocity": self.velocity, "rudder": self.rudder}


class Position:
    def __init__(self, sim: "Simulation") -> None:
        self._sim = sim

    def get_position(self) -> GeoPoint:
        """Boat centre of mass in geo coordinates."""
        state = self._sim.boat.get_state()
        return self._sim.geo.to_geo(state.x, state.y)

    def get_velocity(self) -> float:
        """Speed over ground (pixels/s)."""
        return self._sim.boat.speed()

    def get_heading(self) -> float:
        """Compass heading in degrees, 0 = screen-up, 90 = +x."""
        return compass_heading(self._sim.boat.body.angle)

    def get_bearing_to(self, point: GeoPoint) -> float:
        """Compass bearing from the boat to a geo point."""
        state = self._sim.boat.get_state()
        tx, ty = self._sim.geo.to_world(point)
        return bearing_to(state.x, state.y, tx, ty)


class Map:
    def __init__(self, sim: "Simulation") -> None:
        self._sim = sim

    def get_fence(self) -> List[GeoPoint]:
        """Opposite corners of the navigable area inside the walls."""
        (x1, y1), (x2, y2) = self._sim.pool.fence()
        return [self._sim.geo.to_geo(x1, y1), self._sim.geo.to_geo(x2, y2)]


class DetectorReadout:
    def __init__(self, sim: "Simulation") -> None:
        self._sim = sim

    def detect(self) -> List[Detection]:
        """Bottles currently in the detector's field of view, nearest first."""
        return self._sim.detect()


class Cargo:
    def __init__(self, sim: "Simulation") -> None:
        self._sim = sim

    def get_weight(self) -> float:
        """Total weight of the bottles collected so far."""
        return self._sim.pool.collected_weight

    def get_count(self) -> int:
        return self._sim.pool.collected_count


@dataclass
class LoopContext:
    """Everything a control loop may touch during one tick."""

    control: Control
    position: Position
    map: Map
    detector: DetectorReadout
    cargo: Cargo
    tick: int = 0
    time: float = 0.0
