from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import json
import math
import random

import pymunk

from .config import BottleConfig, PoolConfig
from .geometry_utils import distance


# Collision types shared by the pool and the boat.
COLLISION_BOAT = 1
COLLISION_BOTTLE = 2
COLLISION_WALL = 3


def damped_velocity(friction_air: float, base_dt: float = 1.0 / 60.0):
    """Velocity update that loses `friction_air` of the velocity every `base_dt`.

    pymunk expects the fraction of velocity kept over the step being
    integrated, so the loss is rescaled from `base_dt` to the actual `dt`.
    """

    def update_velocity(body: pymunk.Body, gravity, damping: float, dt: float) -> None:
        retention = (1.0 - friction_air) ** (dt / base_dt)
        pymunk.Body.update_velocity(body, gravity, retention, dt)

    return update_velocity


@dataclass(eq=False)
class Bottle:
    """Floating bottle in pool coordinates.

    Attributes
    ----------
    x : float
        X coordinate of the bottle centre (pixels).
    y : float
        Y coordinate of the bottle centre (pixels, downward).
    weight : float
        Weight added to the boat's cargo when collected.
    radius : float
        Radius of the bottle's collision circle.
    """

    x: float
    y: float
    weight: float
    radius: float = 6.0
    body: Optional[pymunk.Body] = field(default=None, repr=False)
    shape: Optional[pymunk.Circle] = field(default=None, repr=False)

    @property
    def position(self) -> Tuple[float, float]:
        """Live position once spawned, the initial one otherwise."""
        if self.body is not None:
            return float(self.body.position.x), float(self.body.position.y)
        return self.x, self.y


class Pool:
    """Walled rectangular pool holding the floating bottles.

    Parameters
    ----------
    config : PoolConfig
        Pool size, wall thickness and time step.
    bottle_config : BottleConfig
        Size, weight range and damping of generated bottles.
    """

    def __init__(
        self,
        config: PoolConfig,
        bottle_config: Optional[BottleConfig] = None,
    ) -> None:
        self.config = config
        self.bottle_config = bottle_config or BottleConfig()
        self.width = float(config.width)
        self.height = float(config.height)
        self.wall_thickness = float(config.wall_thickness)

        self.space = pymunk.Space()
        self.space.gravity = (0.0, 0.0)

        self.walls = self._create_walls()
        self.bottles: List[Bottle] = []
        self.collected_weight = 0.0
        self.collected_count = 0
        self._pending: List[Bottle] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def _create_walls(self) -> List[pymunk.Segment]:
        """Static walls of `wall_thickness` flush with the pool edges."""
        static_body = self.space.static_body
        w, h = self.width, self.height
        r = self.wall_thickness / 2.0
        walls = [
            pymunk.Segment(static_body, (0.0, r), (w, r), r),  # top
            pymunk.Segment(static_body, (0.0, h - r), (w, h - r), r),  # bottom
            pymunk.Segment(static_body, (r, 0.0), (r, h), r),  # left
            pymunk.Segment(static_body, (w - r, 0.0), (w - r, h), r),  # right
        ]
        for wall in walls:
            wall.elasticity = 0.2
            wall.friction = 0.5
            wall.collision_type = COLLISION_WALL
        self.space.add(*walls)
        return walls

    def fence(self) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Inner corners of the walls: ((xmin, ymin), (xmax, ymax))."""
        t = self.wall_thickness
        return (t, t), (self.width - t, self.height - t)

    # ------------------------------------------------------------------
    # Bottles
    # ------------------------------------------------------------------
    def add_bottle(self, bottle: Bottle) -> Bottle:
        """Spawn a bottle as a dynamic circle in the space."""
        cfg = self.bottle_config
        mass = max(cfg.density * math.pi * bottle.radius * bottle.radius, 1e-3)
        moment = pymunk.moment_for_circle(mass, 0.0, bottle.radius)
        body = pymunk.Body(mass, moment)
        body.position = (bottle.x, bottle.y)
        body.velocity_func = damped_velocity(cfg.friction_air)
        shape = pymunk.Circle(body, bottle.radius)
        shape.elasticity = 0.3
        shape.friction = 0.2
        shape.collision_type = COLLISION_BOTTLE
        self.space.add(body, shape)
        bottle.body = body
        bottle.shape = shape
        self.bottles.append(bottle)
        return bottle

    def clear_bottles(self) -> None:
        """Remove all live bottles."""
        for bottle in self.bottles:
            self.space.remove(bottle.body, bottle.shape)
        self.bottles.clear()
        self._pending.clear()

    def generate_random_bottles(
        self,
        count: int,
        rng: random.Random,
        keep_clear: Optional[Tuple[float, float, float]] = None,
    ) -> None:
        """Scatter `count` bottles uniformly inside the fence.

        Bottles stay `margin` away from the walls; `keep_clear` is an optional
        (x, y, radius) zone left empty, typically the boat's start. Raises
        `ValueError` when a bottle cannot be placed outside that zone.
        """
        self.clear_bottles()
        cfg = self.bottle_config
        (xmin, ymin), (xmax, ymax) = self.fence()
        inset = cfg.margin + cfg.radius
        if xmax - xmin <= 2.0 * inset or ymax - ymin <= 2.0 * inset:
            raise ValueError("bottles.margin leaves no room inside the fence")
        for _ in range(count):
            for _attempt in range(100):
                x = rng.uniform(xmin + inset, xmax - inset)
                y = rng.uniform(ymin + inset, ymax - inset)
                if keep_clear is None:
                    break
                cx, cy, cr = keep_clear
                if distance(x, y, cx, cy) > cr + cfg.radius:
                    break
            else:
                raise ValueError("keep_clear zone leaves no room for bottles inside the fence")
            weight = rng.uniform(cfg.weight_min, cfg.weight_max)
            self.add_bottle(Bottle(x=x, y=y, weight=weight, radius=cfg.radius))

    @classmethod
    def from_map_dict(
        cls,
        config: PoolConfig,
        data: Dict[str, Any],
        bottle_config: Optional[BottleConfig] = None,
    ) -> "Pool":
        """Create a pool from a dict describing bottles."""
        pool = cls(config, bottle_config)
        for b in data.get("bottles", []):
            pool.add_bottle(
                Bottle(
                    x=float(b["x"]),
                    y=float(b["y"]),
                    weight=float(b["weight"]),
                    radius=float(b.get("radius", pool.bottle_config.radius)),
                )
            )
        return pool

    @classmethod
    def from_map_file(
        cls,
        config: PoolConfig,
        path: str,
        bottle_config: Optional[BottleConfig] = None,
    ) -> "Pool":
        """Create a pool from a JSON bottle layout."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_map_dict(config, data, bottle_config)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the pool and its live bottles."""
        bottles = []
        for b in self.bottles:
            x, y = b.position
            bottles.append({"x": x, "y": y, "weight": b.weight, "radius": b.radius})
        return {"width": self.width, "height": self.height, "bottles": bottles}

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    def watch_collector(self, shape: pymunk.Shape) -> None:
        """Consume bottles touched by `shape` (the boat hull)."""
        shape.collision_type = COLLISION_BOAT
        self.space.on_collision(COLLISION_BOAT, COLLISION_BOTTLE, begin=self._on_bottle_contact)

    def _on_bottle_contact(self, arbiter: pymunk.Arbiter, space: pymunk.Space, data: Any) -> None:
        # Bottles are picked up, not pushed.
        arbiter.process_collision = False
        _, bottle_shape = arbiter.shapes
        for bottle in self.bottles:
            if bottle.shape is bottle_shape and bottle not in self._pending:
                self._pending.append(bottle)
                break

    def _consume_pending(self) -> List[Bottle]:
        consumed = self._pending
        self._pending = []
        for bottle in consumed:
            self.space.remove(bottle.body, bottle.shape)
            self.bottles.remove(bottle)
            self.collected_weight += bottle.weight
            self.collected_count += 1
        return consumed

    def step(self, dt: float) -> List[Bottle]:
        """Advance physics by dt and return the bottles collected during the step."""
        self.space.step(dt)
        return self._consume_pending()
