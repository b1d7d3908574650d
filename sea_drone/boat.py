from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple
import math

import pymunk

from .config import BoatConfig
from .geometry_utils import (
    hull_vertices,
    polygon_area,
    polygon_centroid,
    transom_midpoint,
    translate,
)
from .world import damped_velocity


Vector = Tuple[float, float]


@dataclass
class BoatState:
    """State of the boat in pool coordinates.

    Attributes
    ----------
    x : float
        X position of the centre of mass (pixels).
    y : float
        Y position of the centre of mass (pixels, downward).
    angle : float
        Body angle (radians), clockwise on screen from +x.
    vx : float
        Velocity along x (pixels/s).
    vy : float
        Velocity along y (pixels/s).
    angular_velocity : float
        Angular velocity (rad/s).
    """

    x: float
    y: float
    angle: float
    vx: float
    vy: float
    angular_velocity: float

    @property
    def speed(self) -> float:
        return math.hypot(self.vx, self.vy)


def propeller_forces(
    angle: float,
    velocity: float,
    rudder: float,
    max_force: float,
    lateral_ratio: float = 0.8,
) -> Tuple[Vector, Vector]:
    """Split a throttle/rudder command into thrust and lateral forces.

    The thrust is turned away from the hull axis by up to a quarter turn at
    full rudder. The lateral force pushes the stern perpendicular to the hull
    and scales with |rudder|; negative rudder pushes toward +pi/2, positive
    rudder toward -pi/2.
    """
    force = max_force * velocity
    thrust_angle = angle + (math.pi / 2.0) * rudder
    thrust = (math.cos(thrust_angle) * force, math.sin(thrust_angle) * force)

    side = 1.0 if rudder < 0.0 else -1.0
    lateral_angle = angle + side * math.pi / 2.0
    lateral_mag = force * lateral_ratio * abs(rudder)
    lateral = (math.cos(lateral_angle) * lateral_mag, math.sin(lateral_angle) * lateral_mag)
    return thrust, lateral


class Boat:
    """Drone boat: a rigid hull with a stern-mounted steerable propeller.

    The hull is a convex polygon built from the configured silhouette. The
    body origin is the polygon centroid, so `body.position` is the centre of
    mass.
    """

    def __init__(
        self,
        space: pymunk.Space,
        config: BoatConfig,
        position: Vector,
        angle: float = 0.0,
    ) -> None:
        self.space = space
        self.config = config

        outline = hull_vertices(config.silhouette, config.stretch)
        cx, cy = polygon_centroid(outline)
        self.vertices: List[Vector] = translate(outline, -cx, -cy)
        self.propeller_local: Vector = transom_midpoint(self.vertices)
        self.length = (len(config.silhouette) - 1) * config.stretch

        mass = config.density * polygon_area(self.vertices)
        moment = pymunk.moment_for_poly(mass, self.vertices)
        self.body = pymunk.Body(mass, moment)
        self.body.position = position
        self.body.angle = angle
        self.body.velocity_func = damped_velocity(config.friction_air)

        self.shape = pymunk.Poly(self.body, self.vertices)
        self.shape.elasticity = 0.1
        self.shape.friction = 0.4

        self.space.add(self.body, self.shape)

    @staticmethod
    def start_position(config: BoatConfig, width: float, height: float) -> Vector:
        """Pool-centred start, shifted back by half the silhouette length."""
        return (width / 2.0 - len(config.silhouette) / 2.0 * config.stretch, height / 2.0)

    # ------------------------------------------------------------------
    # Forces
    # ------------------------------------------------------------------
    def propeller_position(self) -> Vector:
        """World position of the propeller (transom midpoint)."""
        p = self.body.local_to_world(self.propeller_local)
        return float(p.x), float(p.y)

    def apply_propulsion(self, velocity: float, rudder: float) -> None:
        """Apply thrust and lateral rudder force at the propeller."""
        thrust, lateral = propeller_forces(
            self.body.angle,
            velocity,
            rudder,
            self.config.max_force,
            self.config.lateral_force_ratio,
        )
        point = self.propeller_position()
        self.body.apply_force_at_world_point(thrust, point)
        self.body.apply_force_at_world_point(lateral, point)

    def apply_wind(self, wind: Vector) -> None:
        """Constant wind force at the centre of mass."""
        if wind[0] == 0.0 and wind[1] == 0.0:
            return
        self.body.apply_force_at_world_point(wind, self.body.position)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def get_state(self) -> BoatState:
        """Return a copy of current state."""
        b = self.body
        return BoatState(
            x=float(b.position.x),
            y=float(b.position.y),
            angle=float(b.angle),
            vx=float(b.velocity.x),
            vy=float(b.velocity.y),
            angular_velocity=float(b.angular_velocity),
        )

    def speed(self) -> float:
        return float(self.body.velocity.length)

    def world_vertices(self) -> List[Vector]:
        """Hull outline in world coordinates, for rendering."""
        out = []
        for v in self.vertices:
            p = self.body.local_to_world(v)
            out.append((float(p.x), float(p.y)))
        return out

    def to_dict(self) -> Dict[str, Any]:
        """Serialize current boat state to a dict for telemetry."""
        s = self.get_state()
        return {
            "x": s.x,
            "y": s.y,
            "angle": s.angle,
            "vx": s.vx,
            "vy": s.vy,
            "angular_velocity": s.angular_velocity,
        }
