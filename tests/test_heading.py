from __future__ import annotations

import math

from sea_drone.geometry_utils import (
    bearing_to,
    compass_heading,
    hull_vertices,
    polygon_area,
    polygon_centroid,
    relative_bearing,
    transom_midpoint,
)


def test_compass_heading_cardinal_angles() -> None:
    # Screen frame: +x is east, +y (down) is south.
    assert math.isclose(compass_heading(0.0), 90.0)
    assert math.isclose(compass_heading(math.pi / 2.0), 180.0)
    assert math.isclose(compass_heading(-math.pi / 2.0), 0.0, abs_tol=1e-9)
    assert math.isclose(compass_heading(math.pi), 270.0)


def test_compass_heading_wraps_full_turns() -> None:
    assert math.isclose(compass_heading(2.0 * math.pi), 90.0)
    assert math.isclose(compass_heading(-2.0 * math.pi), 90.0)
    assert math.isclose(compass_heading(5.0 * math.pi / 2.0), 180.0)
    for angle in (-7.0, -1.0, 0.3, 4.0, 12.5):
        h = compass_heading(angle)
        assert 0.0 <= h < 360.0


def test_relative_bearing_sign() -> None:
    assert math.isclose(relative_bearing(350.0, 10.0), 20.0)
    assert math.isclose(relative_bearing(10.0, 350.0), -20.0)
    assert math.isclose(relative_bearing(90.0, 90.0), 0.0)


def test_bearing_to_points() -> None:
    assert math.isclose(bearing_to(0.0, 0.0, 10.0, 0.0), 90.0)
    assert math.isclose(bearing_to(0.0, 0.0, 0.0, 10.0), 180.0)
    assert math.isclose(bearing_to(0.0, 0.0, 0.0, -10.0), 0.0, abs_tol=1e-9)


def test_hull_outline_from_silhouette() -> None:
    vertices = hull_vertices([2, 4, 5, 5, 3, 0], 7.0)
    # Pointed bow sample appears once.
    assert len(vertices) == 11
    assert vertices[0] == (0.0, 2.0)
    assert vertices[5] == (35.0, 0.0)
    assert vertices[-1] == (0.0, -2.0)
    assert transom_midpoint(vertices) == (0.0, 0.0)
    assert math.isclose(polygon_area(vertices), 252.0)
    cx, cy = polygon_centroid(vertices)
    assert 0.0 < cx < 35.0
    assert math.isclose(cy, 0.0, abs_tol=1e-9)
