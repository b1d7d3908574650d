from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def as_bool(value: Any, key: str) -> bool:
    """Read a YAML flag; quoted "true"/"false" strings are accepted too."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "on", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "off", "0"):
        return False
    if isinstance(value, int):
        return value != 0
    raise ValueError(f"{key} must be a boolean, got {value!r}")


@dataclass
class PoolConfig:
    """Pool geometry and stepping.

    Coordinates follow the screen convention: origin at the top-left
    corner, x to the right, y downward. Units are pixels.
    """

    width: float = 1000.0
    height: float = 1000.0
    wall_thickness: float = 10.0
    dt: float = 1.0 / 60.0
    fps: int = 60


@dataclass
class BoatConfig:
    """Hull and propulsion parameters of the drone boat."""

    silhouette: Tuple[float, ...] = (2.0, 4.0, 5.0, 5.0, 3.0, 0.0)
    stretch: float = 7.0
    density: float = 3.0
    friction_air: float = 0.01
    max_force: float = 25000.0
    lateral_force_ratio: float = 0.8


@dataclass
class BottleConfig:
    """Floating bottles scattered in the pool."""

    count: int = 12
    radius: float = 6.0
    weight_min: float = 0.5
    weight_max: float = 1.5
    margin: float = 40.0
    density: float = 0.5
    friction_air: float = 0.05


@dataclass
class DetectorConfig:
    """Bearing/range detector mounted at the bow."""

    range: float = 200.0
    angle_deg: float = 45.0
    noise_std: float = 0.0


@dataclass
class GeoReference:
    """Maps pool coordinates to longitude/latitude.

    The default is the identity mapping (longitude = x, latitude = y).
    """

    origin_longitude: float = 0.0
    origin_latitude: float = 0.0
    units_per_degree: float = 1.0


@dataclass
class RenderConfig:
    window_width: int = 1000
    window_height: int = 1000
    show_velocity: bool = True
    show_detector: bool = True
    show_trail: bool = True
    trail_max_length: int = 500


@dataclass
class SimConfig:
    pool: PoolConfig = field(default_factory=PoolConfig)
    boat: BoatConfig = field(default_factory=BoatConfig)
    bottles: BottleConfig = field(default_factory=BottleConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    geo: GeoReference = field(default_factory=GeoReference)
    render: RenderConfig = field(default_factory=RenderConfig)
    wind: Tuple[float, float] = (0.0, 0.0)
    seed: int = 0
    telemetry_path: Optional[str] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimConfig":
        """Build a config from a parsed YAML document.

        Missing sections and keys keep their defaults.
        """
        pool_cfg = data.get("pool", {}) or {}
        boat_cfg = data.get("boat", {}) or {}
        bottle_cfg = data.get("bottles", {}) or {}
        detector_cfg = data.get("detector", {}) or {}
        geo_cfg = data.get("geo", {}) or {}
        render_cfg = data.get("render", {}) or {}
        wind_cfg = data.get("wind", {}) or {}
        logging_cfg = data.get("logging", {}) or {}

        pool_defaults = PoolConfig()
        pool = PoolConfig(
            width=float(pool_cfg.get("width", pool_defaults.width)),
            height=float(pool_cfg.get("height", pool_defaults.height)),
            wall_thickness=float(pool_cfg.get("wall_thickness", pool_defaults.wall_thickness)),
            dt=float(pool_cfg.get("dt", pool_defaults.dt)),
            fps=int(pool_cfg.get("fps", pool_defaults.fps)),
        )

        boat_defaults = BoatConfig()
        boat = BoatConfig(
            silhouette=tuple(float(s) for s in boat_cfg.get("silhouette", boat_defaults.silhouette)),
            stretch=float(boat_cfg.get("stretch", boat_defaults.stretch)),
            density=float(boat_cfg.get("density", boat_defaults.density)),
            friction_air=float(boat_cfg.get("friction_air", boat_defaults.friction_air)),
            max_force=float(boat_cfg.get("max_force", boat_defaults.max_force)),
            lateral_force_ratio=float(
                boat_cfg.get("lateral_force_ratio", boat_defaults.lateral_force_ratio)
            ),
        )

        bottle_defaults = BottleConfig()
        weight_range = bottle_cfg.get(
            "weight_range", [bottle_defaults.weight_min, bottle_defaults.weight_max]
        )
        bottles = BottleConfig(
            count=int(bottle_cfg.get("count", bottle_defaults.count)),
            radius=float(bottle_cfg.get("radius", bottle_defaults.radius)),
            weight_min=float(weight_range[0]),
            weight_max=float(weight_range[1]),
            margin=float(bottle_cfg.get("margin", bottle_defaults.margin)),
            density=float(bottle_cfg.get("density", bottle_defaults.density)),
            friction_air=float(bottle_cfg.get("friction_air", bottle_defaults.friction_air)),
        )

        detector_defaults = DetectorConfig()
        detector = DetectorConfig(
            range=float(detector_cfg.get("range", detector_defaults.range)),
            angle_deg=float(detector_cfg.get("angle_deg", detector_defaults.angle_deg)),
            noise_std=float(detector_cfg.get("noise_std", detector_defaults.noise_std)),
        )

        geo_defaults = GeoReference()
        geo = GeoReference(
            origin_longitude=float(geo_cfg.get("origin_longitude", geo_defaults.origin_longitude)),
            origin_latitude=float(geo_cfg.get("origin_latitude", geo_defaults.origin_latitude)),
            units_per_degree=float(geo_cfg.get("units_per_degree", geo_defaults.units_per_degree)),
        )

        render_defaults = RenderConfig()
        render = RenderConfig(
            window_width=int(render_cfg.get("window_width", pool.width)),
            window_height=int(render_cfg.get("window_height", pool.height)),
            show_velocity=as_bool(
                render_cfg.get("show_velocity", render_defaults.show_velocity), "render.show_velocity"
            ),
            show_detector=as_bool(
                render_cfg.get("show_detector", render_defaults.show_detector), "render.show_detector"
            ),
            show_trail=as_bool(
                render_cfg.get("show_trail", render_defaults.show_trail), "render.show_trail"
            ),
            trail_max_length=int(
                render_cfg.get("trail_max_length", render_defaults.trail_max_length)
            ),
        )

        cfg = cls(
            pool=pool,
            boat=boat,
            bottles=bottles,
            detector=detector,
            geo=geo,
            render=render,
            wind=(float(wind_cfg.get("x", 0.0)), float(wind_cfg.get("y", 0.0))),
            seed=int(data.get("seed", 0)),
            telemetry_path=logging_cfg.get("telemetry_path"),
        )
        cfg.validate()
        return cfg

    def validate(self) -> None:
        """Raise ValueError on settings the simulation cannot run with."""
        if self.pool.width <= 0.0 or self.pool.height <= 0.0:
            raise ValueError(
                f"pool size must be positive, got {self.pool.width}x{self.pool.height}"
            )
        if self.pool.wall_thickness < 0.0:
            raise ValueError(f"pool.wall_thickness must be >= 0, got {self.pool.wall_thickness}")
        if 2.0 * self.pool.wall_thickness >= min(self.pool.width, self.pool.height):
            raise ValueError("pool.wall_thickness leaves no room inside the fence")
        if self.pool.dt <= 0.0:
            raise ValueError(f"pool.dt must be positive, got {self.pool.dt}")
        if len(self.boat.silhouette) < 2:
            raise ValueError("boat.silhouette needs at least 2 samples")
        if self.boat.stretch <= 0.0 or self.boat.density <= 0.0:
            raise ValueError("boat.stretch and boat.density must be positive")
        if not 0.0 <= self.boat.friction_air < 1.0:
            raise ValueError(f"boat.friction_air must be in [0, 1), got {self.boat.friction_air}")
        if self.bottles.count < 0:
            raise ValueError(f"bottles.count must be >= 0, got {self.bottles.count}")
        if self.bottles.weight_min > self.bottles.weight_max:
            raise ValueError(
                f"bottles.weight_range is inverted: {self.bottles.weight_min} > {self.bottles.weight_max}"
            )
        if self.detector.range < 0.0:
            raise ValueError(f"detector.range must be >= 0, got {self.detector.range}")
        if self.geo.units_per_degree == 0.0:
            raise ValueError("geo.units_per_degree must be non-zero")


def load_config(path: str) -> SimConfig:
    """Load a SimConfig from a YAML file."""
    return SimConfig.from_dict(load_yaml(path))
