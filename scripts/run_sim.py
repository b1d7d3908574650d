from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Ensure project root is on path when running this script directly
_script_dir = Path(__file__).resolve().parent
_project_root = _script_dir.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pygame

from sea_drone.api import LoopContext
from sea_drone.autopilot import BottleSeeker
from sea_drone.config import load_config
from sea_drone.geometry_utils import clamp
from sea_drone.render import PygameRenderer
from sea_drone.simulation import Simulation
from sea_drone.world import Pool
from telemetry.logger import TelemetryLogger


class KeyboardPilot:
    """Teleop loop: keys nudge throttle/rudder, the loop applies them each tick."""

    def __init__(self) -> None:
        self.velocity = 0.0
        self.rudder = 0.0

    def on_key(self, key: int) -> None:
        if key == pygame.K_SPACE:
            self.velocity = 0.0
            self.rudder = 0.0
        elif key == pygame.K_w:
            self.velocity = clamp(self.velocity + 0.1, -1.0, 1.0)
        elif key == pygame.K_s:
            self.velocity = clamp(self.velocity - 0.1, -1.0, 1.0)
        elif key == pygame.K_a:
            self.rudder = clamp(self.rudder + 0.1, -1.0, 1.0)
        elif key == pygame.K_d:
            self.rudder = clamp(self.rudder - 0.1, -1.0, 1.0)

    def __call__(self, ctx: LoopContext) -> None:
        ctx.control.set_velocity(self.velocity)
        ctx.control.set_rudder(self.rudder)


def main() -> None:
    parser = argparse.ArgumentParser(description="Sea drone pool simulation.")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/sim.yaml",
        help="Path to sim YAML config.",
    )
    parser.add_argument(
        "--mode",
        choices=["teleop", "autopilot"],
        default="autopilot",
        help="Keyboard teleop or the bottle-seeking autopilot.",
    )
    parser.add_argument("--ticks", type=int, default=None, help="Stop after this many ticks.")
    parser.add_argument("--headless", action="store_true", help="Run without a window.")
    parser.add_argument("--telemetry", type=str, default=None, help="JSONL telemetry output path.")
    parser.add_argument("--seed", type=int, default=None, help="Override the config seed.")
    parser.add_argument(
        "--map",
        type=str,
        default=None,
        help="JSON bottle layout (e.g. configs/maps/zigzag.json) instead of random bottles.",
    )
    args = parser.parse_args()

    cfg = load_config(args.config)
    if args.seed is not None:
        cfg = replace(cfg, seed=args.seed)
    if args.headless and args.mode == "teleop":
        parser.error("teleop needs a window; drop --headless")

    telemetry_path = args.telemetry or cfg.telemetry_path
    telemetry_logger = TelemetryLogger(telemetry_path) if telemetry_path else None

    pilot = KeyboardPilot() if args.mode == "teleop" else BottleSeeker()
    renderer = None
    if not args.headless:
        renderer = PygameRenderer(
            cfg.render,
            cfg.pool.width,
            cfg.pool.height,
            on_key=pilot.on_key if isinstance(pilot, KeyboardPilot) else None,
        )

    pool = Pool.from_map_file(cfg.pool, args.map, cfg.bottles) if args.map else None
    sim = Simulation(config=cfg, loop=pilot, pool=pool, renderer=renderer, telemetry=telemetry_logger)

    if args.mode == "teleop":
        print("Keyboard teleop: W/S throttle, A/D rudder, SPACE stop, ESC to quit.")
    else:
        print(f"Autopilot: collecting {len(sim.pool.bottles)} bottles. Close the window or Ctrl+C to quit.")

    try:
        ticks = sim.run(max_ticks=args.ticks, realtime=args.ticks is None)
        print(
            f"Stopped after {ticks} ticks: collected {sim.pool.collected_count} bottles "
            f"({sim.pool.collected_weight:.2f} weight)."
        )
    except KeyboardInterrupt:
        print("Stopping simulation (KeyboardInterrupt).")
    except Exception as exc:  # noqa: BLE001
        print(f"Exception in control loop: {exc}", file=sys.stderr)
    finally:
        sim.close()


if __name__ == "__main__":
    main()
