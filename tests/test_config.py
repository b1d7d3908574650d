from __future__ import annotations

from pathlib import Path

import pytest

from sea_drone.config import SimConfig, load_config

CONFIG_PATH = Path(__file__).resolve().parent.parent / "configs" / "sim.yaml"


def test_load_default_yaml() -> None:
    cfg = load_config(str(CONFIG_PATH))

    assert cfg.pool.width == 1000.0
    assert cfg.pool.wall_thickness == 10.0
    assert cfg.boat.silhouette == (2.0, 4.0, 5.0, 5.0, 3.0, 0.0)
    assert cfg.boat.stretch == 7.0
    assert cfg.boat.density == 3.0
    assert cfg.boat.friction_air == 0.01
    assert (cfg.bottles.weight_min, cfg.bottles.weight_max) == (0.5, 1.5)
    assert cfg.detector.angle_deg == 45.0
    assert cfg.wind == (0.0, 0.0)
    assert cfg.telemetry_path == "telemetry_logs/sim.jsonl"


def test_missing_sections_use_defaults() -> None:
    cfg = SimConfig.from_dict({"pool": {"width": 640}, "wind": {"x": 3}})
    defaults = SimConfig()

    assert cfg.pool.width == 640.0
    assert cfg.pool.height == defaults.pool.height
    assert cfg.render.window_width == 640
    assert cfg.boat == defaults.boat
    assert cfg.detector == defaults.detector
    assert cfg.wind == (3.0, 0.0)
    assert cfg.telemetry_path is None


@pytest.mark.parametrize(
    "data, message",
    [
        ({"pool": {"width": 0}}, "pool size"),
        ({"pool": {"dt": 0}}, "pool.dt"),
        ({"pool": {"wall_thickness": 600}}, "wall_thickness"),
        ({"boat": {"silhouette": [3]}}, "silhouette"),
        ({"bottles": {"weight_range": [2.0, 1.0]}}, "weight_range"),
        ({"detector": {"range": -1}}, "detector.range"),
        ({"render": {"show_trail": "maybe"}}, "render.show_trail"),
    ],
)
def test_invalid_settings_rejected(data, message) -> None:
    with pytest.raises(ValueError, match=message):
        SimConfig.from_dict(data)


def test_render_flags_parse_quoted_strings() -> None:
    cfg = SimConfig.from_dict({"render": {"show_trail": "false", "show_detector": "Yes", "show_velocity": False}})
    assert cfg.render.show_trail is False
    assert cfg.render.show_detector is True
    assert cfg.render.show_velocity is False
