"""
Geometry utilities for the sea drone simulation.

Provides hull outline construction, polygon helpers, compass heading
normalization and bearing arithmetic used by the boat model, the
detector, the control API and the autopilot.

All angles handed in from the physics engine are radians measured in screen
coordinates (x right, y down), so a positive rotation turns clockwise on
screen. Compass values are degrees with 0 pointing screen-up and 90 pointing
along +x.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple
import math


Point = Tuple[float, float]


# ---------------------------------------------------------------------------
# Angle and heading helpers
# ---------------------------------------------------------------------------


def compass_heading(angle: float) -> float:
    """Convert a body angle (radians, screen frame) to a compass heading in [0, 360).

    The remainder keeps the sign of the angle, negative remainders are
    mirrored and non-negative ones are counted back from 360 before the
    quarter-turn offset moves 0 degrees to screen-up.
    """
    degrees = math.fmod(angle * 180.0 / math.pi, 360.0)
    normalized = abs(degrees) if degrees < 0.0 else 360.0 - degrees
    return (450.0 - normalized) % 360.0


def relative_bearing(heading: float, target: float) -> float:
    """Signed compass difference from heading to target, in [-180, 180).

    Positive values are to starboard (clockwise), negative to port.
    """
    return (target - heading + 180.0) % 360.0 - 180.0


def bearing_to(ox: float, oy: float, tx: float, ty: float) -> float:
    """Compass bearing from (ox, oy) toward (tx, ty)."""
    return compass_heading(math.atan2(ty - oy, tx - ox))


# ---------------------------------------------------------------------------
# Hull outline
# ---------------------------------------------------------------------------


def hull_vertices(silhouette: Sequence[float], stretch: float) -> List[Point]:
    """Symmetric hull outline from half-width samples taken stern to bow.

    The upper edge is walked stern to bow, then the mirrored lower edge bow to
    stern, so the first and last vertices sit on the transom. Consecutive
    duplicates (a pointed bow) are dropped.
    """
    n = len(silhouette)
    upper = [(i * stretch, float(value)) for i, value in enumerate(silhouette)]
    lower = [
        ((n - 1 - i) * stretch, -float(value))
        for i, value in enumerate(reversed(silhouette))
    ]
    vertices: List[Point] = []
    for p in upper + lower:
        if vertices and math.isclose(p[0], vertices[-1][0]) and math.isclose(p[1], vertices[-1][1]):
            continue
        vertices.append(p)
    return vertices


def transom_midpoint(vertices: Sequence[Point]) -> Point:
    """Midpoint between the first and last hull vertices (the stern)."""
    x1, y1 = vertices[0]
    x2, y2 = vertices[-1]
    return (x1 + x2) / 2.0, (y1 + y2) / 2.0


def translate(vertices: Sequence[Point], dx: float, dy: float) -> List[Point]:
    return [(x + dx, y + dy) for x, y in vertices]


# ---------------------------------------------------------------------------
# Polygon helpers
# ---------------------------------------------------------------------------


def polygon_area(vertices: Sequence[Point]) -> float:
    """Unsigned area of a simple polygon (shoelace formula)."""
    n = len(vertices)
    if n < 3:
        return 0.0
    signed_area = 0.0
    for i in range(n):
        j = (i + 1) % n
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        signed_area += xi * yj - xj * yi
    return abs(signed_area) * 0.5


def polygon_centroid(vertices: Sequence[Point]) -> Point:
    """Compute centroid of a simple polygon (list of (x,y) vertices)."""
    n = len(vertices)
    if n == 0:
        return 0.0, 0.0
    if n == 1:
        return vertices[0][0], vertices[0][1]
    ax = 0.0
    ay = 0.0
    signed_area = 0.0
    for i in range(n):
        j = (i + 1) % n
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        cross = xi * yj - xj * yi
        signed_area += cross
        ax += (xi + xj) * cross
        ay += (yi + yj) * cross
    if abs(signed_area) < 1e-10:
        return vertices[0][0], vertices[0][1]
    signed_area *= 0.5
    ax /= 6.0 * signed_area
    ay /= 6.0 * signed_area
    return ax, ay


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


def clamp(value: float, vmin: float, vmax: float) -> float:
    """Clamp value to [vmin, vmax]."""
    return max(vmin, min(vmax, value))


def distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Euclidean distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)
