from __future__ import annotations

import json

from sea_drone.config import BottleConfig, SimConfig
from sea_drone.simulation import Simulation, create_simulation
from telemetry.logger import TelemetryLogger, read_records


def test_logger_appends_jsonl(tmp_path) -> None:
    path = tmp_path / "logs" / "run.jsonl"
    with TelemetryLogger(str(path)) as logger:
        logger.log_step({"tick": 0, "pose": {"x": 1.0}})
        logger.log_step({"tick": 1, "wall_time": 5.0})

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["pose"] == {"x": 1.0}
    assert "wall_time" in first
    assert json.loads(lines[1])["wall_time"] == 5.0

    # Closed loggers drop records silently.
    logger.log_step({"tick": 2})
    assert len(read_records(str(path))) == 2


def test_read_records_skips_garbage(tmp_path) -> None:
    path = tmp_path / "mixed.jsonl"
    path.write_text('{"tick": 0}\nnot json\n\n{"tick": 1}\n', encoding="utf-8")
    assert [r["tick"] for r in read_records(str(path))] == [0, 1]
    assert read_records(str(tmp_path / "missing.jsonl")) == []


def test_simulation_logs_every_tick(tmp_path) -> None:
    path = tmp_path / "sim.jsonl"
    logger = TelemetryLogger(str(path))

    def loop(ctx) -> None:
        ctx.control.set_velocity(0.5)

    sim = Simulation(config=SimConfig(bottles=BottleConfig(count=2)), loop=loop, telemetry=logger)
    sim.run(max_ticks=10)
    logger.close()

    records = read_records(str(path))
    assert [r["tick"] for r in records] == list(range(1, 11))
    assert records[-1]["control"]["velocity"] == 0.5
    assert records[-1]["bottles_remaining"] + records[-1]["collected_count"] == 2


def test_create_simulation_with_telemetry_path(tmp_path) -> None:
    path = tmp_path / "factory.jsonl"
    with create_simulation(config=SimConfig(bottles=BottleConfig(count=0)), telemetry_path=str(path)) as sim:
        sim.run(max_ticks=3)
    assert len(read_records(str(path))) == 3

    # Closing the simulation closed its log.
    sim.telemetry.log_step({"tick": 99})
    assert len(read_records(str(path))) == 3
