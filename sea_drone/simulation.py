from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple
import random
import threading
import time

from .api import Cargo, Control, DetectorReadout, LoopContext, Map, Position
from .boat import Boat
from .config import SimConfig
from .geometry_utils import compass_heading
from .sensors import Detection, Detector, GeoMapper
from .world import Bottle, Pool


LoopFn = Callable[[LoopContext], Any]


class Simulation:
    """Drone boat in a walled pool, driven by a per-tick control loop.

    Each tick calls the loop with a LoopContext, converts the resulting
    throttle/rudder to propeller forces, applies wind and advances the
    physics space by one fixed step. Bottles touched by the hull during the
    step are collected.

    Parameters
    ----------
    config : SimConfig
        Pool, boat, bottle, detector and geo settings.
    loop : callable, optional
        Called once per tick with the LoopContext. Exceptions propagate.
    pool : Pool, optional
        Pre-built pool (for fixed bottle layouts). Random bottles are
        generated when omitted.
    renderer : object, optional
        PygameRenderer used by `run()`.
    telemetry : object, optional
        Anything with `log_step(dict)`, called after every tick.
    rng : random.Random, optional
        Source for bottle placement and detector noise.
    """

    def __init__(
        self,
        config: Optional[SimConfig] = None,
        loop: Optional[LoopFn] = None,
        pool: Optional[Pool] = None,
        renderer: Any = None,
        telemetry: Any = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if loop is not None and not callable(loop):
            raise TypeError(f"loop must be callable, got {type(loop).__name__}")
        self.config = config or SimConfig()
        self.config.validate()
        self.loop = loop
        self.renderer = renderer
        self.telemetry = telemetry
        self.rng = rng or random.Random(int(self.config.seed))

        pool_cfg = self.config.pool
        self.pool = pool or Pool(pool_cfg, self.config.bottles)
        start = Boat.start_position(self.config.boat, self.pool.width, self.pool.height)
        self.boat = Boat(self.pool.space, self.config.boat, start)
        self.pool.watch_collector(self.boat.shape)
        if pool is None:
            self.pool.generate_random_bottles(
                self.config.bottles.count,
                self.rng,
                keep_clear=(start[0], start[1], self.boat.length),
            )

        self.geo = GeoMapper(self.config.geo)
        self.detector = Detector(self.config.detector, rng=self.rng)
        self.control = Control()
        self.context = LoopContext(
            control=self.control,
            position=Position(self),
            map=Map(self),
            detector=DetectorReadout(self),
            cargo=Cargo(self),
        )

        self.tick_count = 0
        self.time = 0.0
        self._running = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None
        self._detections: List[Detection] = self._scan()

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def tick(self) -> List[Bottle]:
        """Run one loop call and one physics step; return bottles collected."""
        self.context.tick = self.tick_count
        self.context.time = self.time
        if self.loop is not None:
            self.loop(self.context)

        self.boat.apply_propulsion(self.control.velocity, self.control.rudder)
        self.boat.apply_wind(self.config.wind)

        dt = self.config.pool.dt
        collected = self.pool.step(dt)
        self.tick_count += 1
        self.time += dt
        self._detections = self._scan()

        if self.telemetry is not None:
            self.telemetry.log_step(self.snapshot(collected))
        return collected

    def detect(self) -> List[Detection]:
        """Detections as of the last physics step.

        The detector is sampled once per step, so the loop, telemetry and the
        renderer all see the same noisy readings.
        """
        return list(self._detections)

    def _scan(self) -> List[Detection]:
        return self.detector.scan(self.boat.get_state(), self.pool.bottles)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def run(self, max_ticks: Optional[int] = None, realtime: bool = False) -> int:
        """Tick until `stop()`, `max_ticks` or the render window closes.

        Blocks the caller and returns the number of ticks run. With a renderer
        every tick is drawn and paced to the configured FPS; without one,
        `realtime` paces ticks to `dt`.
        """
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Simulation already running")
        self.stop()
        self._running.set()
        return self._loop(max_ticks, realtime, render=True)

    def start(self) -> None:
        """Run headless on a background thread until `stop()`."""
        if self._running.is_set():
            raise RuntimeError("Simulation already running")
        # Reap a previous background run; re-raises its error if it crashed.
        self.stop()
        self._running.set()
        self._thread = threading.Thread(
            target=self._run_background, name="sea-drone-sim", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop ticking; re-raise any exception the background loop hit."""
        self._running.clear()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return
        thread.join()
        self._thread = None
        error, self._error = self._error, None
        if error is not None:
            raise error

    def _run_background(self) -> None:
        try:
            self._loop(None, realtime=True, render=False)
        except Exception as exc:  # noqa: BLE001
            self._error = exc

    def _loop(self, max_ticks: Optional[int], realtime: bool, render: bool) -> int:
        dt = self.config.pool.dt
        ticks = 0
        try:
            while self._running.is_set():
                if max_ticks is not None and ticks >= max_ticks:
                    break
                t_start = time.time()
                self.tick()
                ticks += 1

                if render and self.renderer is not None:
                    if not self.renderer.process_events():
                        break
                    fps = self.renderer.tick(self.config.pool.fps)
                    self.renderer.draw(self, fps=fps)
                elif realtime:
                    sleep_time = dt - (time.time() - t_start)
                    if sleep_time > 0:
                        time.sleep(sleep_time)
        finally:
            self._running.clear()
        return ticks

    def close(self) -> None:
        """Stop the simulation and release the telemetry log and render window."""
        try:
            self.stop()
        finally:
            if self.telemetry is not None and hasattr(self.telemetry, "close"):
                self.telemetry.close()
            if self.renderer is not None:
                self.renderer.close()

    def __enter__(self) -> "Simulation":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------
    def snapshot(self, collected: Optional[List[Bottle]] = None) -> Dict[str, Any]:
        """Structured record of the current tick for telemetry."""
        state = self.boat.get_state()
        geo = self.geo.to_geo(state.x, state.y)
        return {
            "tick": self.tick_count,
            "time": self.time,
            "pose": dict(
                self.boat.to_dict(),
                heading=compass_heading(state.angle),
                speed=state.speed,
            ),
            "geo": {"longitude": geo.longitude, "latitude": geo.latitude},
            "control": self.control.to_dict(),
            "collected_weight": self.pool.collected_weight,
            "collected_count": self.pool.collected_count,
            "collected": [b.weight for b in collected or []],
            "bottles_remaining": len(self.pool.bottles),
            "detections": [d.to_dict() for d in self.detect()],
        }


def create_simulation(
    loop: Optional[LoopFn] = None,
    width: Optional[float] = None,
    height: Optional[float] = None,
    wind: Optional[Tuple[float, float]] = None,
    config: Optional[SimConfig] = None,
    render: bool = False,
    telemetry_path: Optional[str] = None,
) -> Simulation:
    """Build a ready-to-run simulation.

    `width`, `height` and `wind` override the matching config values. With
    `render=True` a pygame window is opened; `telemetry_path` (or the
    config's) enables JSONL telemetry.
    """
    cfg = config or SimConfig()
    if width is not None or height is not None:
        cfg = replace(
            cfg,
            pool=replace(
                cfg.pool,
                width=float(width if width is not None else cfg.pool.width),
                height=float(height if height is not None else cfg.pool.height),
            ),
        )
    if wind is not None:
        cfg = replace(cfg, wind=(float(wind[0]), float(wind[1])))

    renderer = None
    if render:
        from .render import PygameRenderer

        renderer = PygameRenderer(cfg.render, cfg.pool.width, cfg.pool.height)

    telemetry = None
    path = telemetry_path or cfg.telemetry_path
    if path:
        from telemetry.logger import TelemetryLogger

        telemetry = TelemetryLogger(path)

    return Simulation(config=cfg, loop=loop, renderer=renderer, telemetry=telemetry)
