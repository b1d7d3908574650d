"""
Top-level package for the 2D sea drone simulator.

Components:
- config: YAML-backed dataclass configuration
- world: walled pool, floating bottles, bottle collection
- boat: hull construction and propeller force model
- sensors: bottle detector and geo-coordinate mapping
- api: control/telemetry facades handed to the control loop
- simulation: tick loop, lifecycle and the create_simulation factory
- autopilot: reference bottle-seeking control loop
- render: pygame-based visualization
- geometry_utils: hull outline, heading and bearing helpers
"""

from .config import SimConfig, load_config
from .world import Bottle, Pool
from .boat import Boat, BoatState
from .sensors import Detection, Detector, GeoMapper, GeoPoint
from .api import Control, LoopContext
from .simulation import Simulation, create_simulation

__all__ = [
    "SimConfig",
    "load_config",
    "Bottle",
    "Pool",
    "Boat",
    "BoatState",
    "Detection",
    "Detector",
    "GeoMapper",
    "GeoPoint",
    "Control",
    "LoopContext",
    "Simulation",
    "create_simulation",
]
