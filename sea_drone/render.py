from __future__ import annotations

from typing import TYPE_CHECKING, Callable, List, Optional, Tuple
import math

import pygame

from .config import RenderConfig
from .geometry_utils import compass_heading

if TYPE_CHECKING:
    from .simulation import Simulation


# Pool palette
THEME = {
    "water": (14, 42, 66),
    "grid": (20, 54, 82),
    "wall_fill": (70, 78, 92),
    "wall_edge": (110, 120, 138),
    "bottle_fill": (120, 230, 160),
    "bottle_edge": (40, 150, 90),
    "boat_fill": (235, 235, 240),
    "boat_outline": (150, 160, 180),
    "propeller": (255, 170, 60),
    "velocity": (255, 90, 90),
    "detector": (255, 230, 120),
    "trail_start": (40, 90, 130),
    "trail_end": (120, 200, 255),
    "hud_bg": (10, 26, 40),
    "hud_border": (55, 85, 110),
    "hud_text": (200, 225, 255),
}


class PygameRenderer:
    """Top-down view of the pool, bottles and boat.

    Pool coordinates already use the screen convention (y downward), so the
    transform is a plain scale.
    """

    def __init__(
        self,
        config: RenderConfig,
        pool_width: float,
        pool_height: float,
        on_key: Optional[Callable[[int], None]] = None,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Sea Drone Simulation")
        self.config = config
        self.screen = pygame.display.set_mode((config.window_width, config.window_height))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 13)
        self.on_key = on_key

        self.trail: List[Tuple[float, float]] = []
        self.scale_x = config.window_width / pool_width
        self.scale_y = config.window_height / pool_height

    # ------------------------------------------------------------------
    # Coordinate transforms
    # ------------------------------------------------------------------
    def _to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(x * self.scale_x), int(y * self.scale_y)

    def _to_pixels(self, r: float) -> int:
        return int(r * 0.5 * (self.scale_x + self.scale_y))

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def process_events(self) -> bool:
        """Drain the event queue; False once the window is closed or ESC pressed."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                if self.on_key is not None:
                    self.on_key(event.key)
        return True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def _draw_grid(self, width: float, height: float) -> None:
        step = 100.0
        x = 0.0
        while x <= width:
            pygame.draw.line(self.screen, THEME["grid"], self._to_screen(x, 0.0), self._to_screen(x, height), 1)
            x += step
        y = 0.0
        while y <= height:
            pygame.draw.line(self.screen, THEME["grid"], self._to_screen(0.0, y), self._to_screen(width, y), 1)
            y += step

    def draw(self, sim: "Simulation", fps: float = 0.0) -> None:
        """Render one frame."""
        pool = sim.pool
        self.screen.fill(THEME["water"])
        self._draw_grid(pool.width, pool.height)

        # Walls as the band outside the fence
        (fx1, fy1), (fx2, fy2) = pool.fence()
        sw, sh = self._to_screen(pool.width, pool.height)
        left, top = self._to_screen(fx1, fy1)
        right, bottom = self._to_screen(fx2, fy2)
        for rect in (
            pygame.Rect(0, 0, sw, top),
            pygame.Rect(0, bottom, sw, sh - bottom),
            pygame.Rect(0, 0, left, sh),
            pygame.Rect(right, 0, sw - right, sh),
        ):
            pygame.draw.rect(self.screen, THEME["wall_fill"], rect)
        pygame.draw.rect(self.screen, THEME["wall_edge"], pygame.Rect(left, top, right - left, bottom - top), 1)

        for bottle in pool.bottles:
            bx, by = bottle.position
            center = self._to_screen(bx, by)
            r = max(2, self._to_pixels(bottle.radius))
            pygame.draw.circle(self.screen, THEME["bottle_fill"], center, r)
            pygame.draw.circle(self.screen, THEME["bottle_edge"], center, r, 1)

        state = sim.boat.get_state()
        if self.config.show_trail:
            self.trail.append((state.x, state.y))
            if len(self.trail) > self.config.trail_max_length:
                self.trail = self.trail[-self.config.trail_max_length :]
            if len(self.trail) >= 2:
                pts = [self._to_screen(p[0], p[1]) for p in self.trail]
                n = len(pts) - 1
                start, end = THEME["trail_start"], THEME["trail_end"]
                for i in range(n):
                    t = (i + 1) / max(n, 1)
                    color = tuple(int(start[k] + t * (end[k] - start[k])) for k in range(3))
                    pygame.draw.line(self.screen, color, pts[i], pts[i + 1], 1)

        if self.config.show_detector:
            self._draw_detector(sim)

        self._draw_boat(sim)

        if self.config.show_velocity:
            tip = (state.x + state.vx * 0.5, state.y + state.vy * 0.5)
            pygame.draw.line(
                self.screen, THEME["velocity"], self._to_screen(state.x, state.y), self._to_screen(*tip), 2
            )

        self._draw_hud(sim, fps)
        pygame.display.flip()

    def _draw_boat(self, sim: "Simulation") -> None:
        pts = [self._to_screen(x, y) for x, y in sim.boat.world_vertices()]
        pygame.draw.polygon(self.screen, THEME["boat_fill"], pts)
        pygame.draw.polygon(self.screen, THEME["boat_outline"], pts, 1)
        px, py = sim.boat.propeller_position()
        pygame.draw.circle(self.screen, THEME["propeller"], self._to_screen(px, py), 2)

    def _draw_detector(self, sim: "Simulation") -> None:
        """Field-of-view wedge plus a line to each detected bottle."""
        state = sim.boat.get_state()
        cfg = sim.detector.config
        half = math.radians(cfg.angle_deg)
        origin = self._to_screen(state.x, state.y)
        steps = 12
        wedge = [origin]
        for i in range(steps + 1):
            a = state.angle - half + 2.0 * half * i / steps
            wedge.append(self._to_screen(state.x + cfg.range * math.cos(a), state.y + cfg.range * math.sin(a)))
        wedge.append(origin)
        pygame.draw.lines(self.screen, THEME["detector"], False, wedge, 1)

        for det in sim.detect():
            # Starboard bearings turn clockwise, same as screen angles.
            a = state.angle + math.radians(det.bearing)
            end = (state.x + det.distance * math.cos(a), state.y + det.distance * math.sin(a))
            pygame.draw.line(self.screen, THEME["detector"], origin, self._to_screen(*end), 1)

    def _draw_hud(self, sim: "Simulation", fps: float) -> None:
        pad = 10
        state = sim.boat.get_state()
        lines = [
            f"heading={compass_heading(state.angle):6.1f}  speed={state.speed:6.1f}",
            f"throttle={sim.control.velocity:+.2f}  rudder={sim.control.rudder:+.2f}",
            f"cargo={sim.pool.collected_weight:.2f} ({sim.pool.collected_count})  "
            f"bottles={len(sim.pool.bottles)}",
            f"t={sim.time:7.2f}s  FPS={fps:5.1f}",
        ]
        surfs = [self.font.render(text, True, THEME["hud_text"]) for text in lines]
        width = max(s.get_width() for s in surfs)
        height = sum(s.get_height() for s in surfs)
        panel = pygame.Rect(pad, pad, width + 2 * pad, height + pad)
        pygame.draw.rect(self.screen, THEME["hud_bg"], panel)
        pygame.draw.rect(self.screen, THEME["hud_border"], panel, 1)
        y = panel.y + pad // 2
        for surf in surfs:
            self.screen.blit(surf, (panel.x + pad, y))
            y += surf.get_height()

    def tick(self, target_fps: int) -> float:
        """Cap frame rate and return achieved FPS."""
        fps = self.clock.get_fps()
        self.clock.tick(target_fps)
        return fps

    def close(self) -> None:
        pygame.quit()
