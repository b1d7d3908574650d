from __future__ import annotations

from dataclasses import dataclass

from .api import LoopContext
from .geometry_utils import clamp, relative_bearing
from .sensors import GeoPoint


@dataclass
class AutopilotConfig:
    """Gains for the bottle-seeking autopilot."""

    cruise_velocity: float = 0.8
    turn_velocity: float = 0.4
    rudder_gain: float = 1.0 / 45.0
    sharp_turn_deg: float = 30.0
    patrol_velocity: float = 0.5
    patrol_rudder: float = -0.3
    fence_margin_ratio: float = 0.08


class BottleSeeker:
    """Loop callback that steers toward the nearest detected bottle.

    Strategy:
    - If a bottle is detected, steer proportionally to its bearing. A bottle
      to starboard (positive bearing) needs negative rudder.
    - Slow down while the bearing is larger than `sharp_turn_deg`.
    - With nothing in view, head back to the middle of the pool when close
      to the fence, otherwise circle slowly to sweep the detector.
    """

    def __init__(self, cfg: AutopilotConfig | None = None) -> None:
        self.cfg = cfg or AutopilotConfig()
        self.last_mode = "idle"

    def __call__(self, ctx: LoopContext) -> None:
        detections = ctx.detector.detect()
        if detections:
            self.last_mode = "seek"
            self._steer(ctx, detections[0].bearing)
            return

        lo, hi = ctx.map.get_fence()
        pos = ctx.position.get_position()
        if self._near_fence(pos, lo, hi):
            self.last_mode = "return"
            centre = GeoPoint(
                longitude=(lo.longitude + hi.longitude) / 2.0,
                latitude=(lo.latitude + hi.latitude) / 2.0,
            )
            bearing = relative_bearing(ctx.position.get_heading(), ctx.position.get_bearing_to(centre))
            self._steer(ctx, bearing)
            return

        self.last_mode = "patrol"
        ctx.control.set_velocity(self.cfg.patrol_velocity)
        ctx.control.set_rudder(self.cfg.patrol_rudder)

    def _steer(self, ctx: LoopContext, bearing: float) -> None:
        rudder = clamp(-bearing * self.cfg.rudder_gain, -1.0, 1.0)
        if abs(bearing) > self.cfg.sharp_turn_deg:
            velocity = self.cfg.turn_velocity
        else:
            velocity = self.cfg.cruise_velocity
        ctx.control.set_rudder(rudder)
        ctx.control.set_velocity(velocity)

    def _near_fence(self, pos: GeoPoint, lo: GeoPoint, hi: GeoPoint) -> bool:
        margin_x = abs(hi.longitude - lo.longitude) * self.cfg.fence_margin_ratio
        margin_y = abs(hi.latitude - lo.latitude) * self.cfg.fence_margin_ratio
        return (
            abs(pos.longitude - lo.longitude) < margin_x
            or abs(hi.longitude - pos.longitude) < margin_x
            or abs(pos.latitude - lo.latitude) < margin_y
            or abs(hi.latitude - pos.latitude) < margin_y
        )
