from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple
import random

import numpy as np

from .boat import BoatState
from .config import DetectorConfig, GeoReference
from .geometry_utils import compass_heading
from .world import Bottle


class GeoPoint(NamedTuple):
    longitude: float
    latitude: float


@dataclass
class Detection:
    """A bottle seen by the detector.

    Attributes
    ----------
    bearing : float
        Degrees relative to the boat heading, positive to starboard.
    distance : float
        Centre-to-centre distance (pixels).
    """

    bearing: float
    distance: float

    def to_dict(self) -> dict:
        return {"bearing": self.bearing, "distance": self.distance}


class GeoMapper:
    """Linear mapping between pool coordinates and longitude/latitude."""

    def __init__(self, reference: Optional[GeoReference] = None) -> None:
        self.reference = reference or GeoReference()

    def to_geo(self, x: float, y: float) -> GeoPoint:
        ref = self.reference
        return GeoPoint(
            longitude=ref.origin_longitude + x / ref.units_per_degree,
            latitude=ref.origin_latitude + y / ref.units_per_degree,
        )

    def to_world(self, point: GeoPoint) -> Tuple[float, float]:
        ref = self.reference
        return (
            (point.longitude - ref.origin_longitude) * ref.units_per_degree,
            (point.latitude - ref.origin_latitude) * ref.units_per_degree,
        )


class Detector:
    """Bearing/range bottle detector with a symmetric field of view.

    A bottle is reported when it is closer than `range` and its bearing
    off the bow is strictly inside +/- `angle_deg`.
    """

    def __init__(self, config: DetectorConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng or random.Random(0)

    def scan(
        self,
        state: BoatState,
        bottles: Sequence[Bottle],
    ) -> List[Detection]:
        """Detect bottles from the given boat state.

        Parameters
        ----------
        state : BoatState
            Pose of the boat in pool coordinates.
        bottles : sequence of Bottle
            Live bottles in the pool.

        Returns
        -------
        list[Detection]
            Detections ordered nearest first.
        """
        if len(bottles) == 0:
            return []
        positions = np.asarray([b.position for b in bottles], dtype=np.float64)
        dx = positions[:, 0] - state.x
        dy = positions[:, 1] - state.y
        distances = np.hypot(dx, dy)
        bearings = _relative_bearings(compass_heading(state.angle), np.arctan2(dy, dx))

        visible = (distances < self.config.range) & (np.abs(bearings) < self.config.angle_deg)
        distances = distances[visible]
        bearings = bearings[visible]

        if self.config.noise_std > 0.0 and distances.size > 0:
            std = self.config.noise_std
            distances = np.maximum(
                0.0, distances + np.asarray([self.rng.gauss(0.0, std) for _ in distances])
            )
            bearings = bearings + np.asarray([self.rng.gauss(0.0, std) for _ in bearings])

        order = np.argsort(distances, kind="stable")
        return [Detection(bearing=float(bearings[i]), distance=float(distances[i])) for i in order]


def _relative_bearings(heading: float, angles: np.ndarray) -> np.ndarray:
    """Vectorized compass_heading + relative_bearing for an array of angles."""
    degrees = np.fmod(np.degrees(angles), 360.0)
    normalized = np.where(degrees < 0.0, np.abs(degrees), 360.0 - degrees)
    compass = (450.0 - normalized) % 360.0
    return (compass - heading + 180.0) % 360.0 - 180.0
