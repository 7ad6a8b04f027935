"""Top-down pygame preview of a generated layout.

Track x runs left to right, track z runs bottom to top (start line at the
bottom of the image). Only needs pygame surfaces, so it works headless.
"""

from typing import Optional, Tuple

import pygame

from .entities import Entity
from .track_gen import TrackLayout

# Colors
COLOR_BG = (40, 44, 52)
COLOR_GROUND = (62, 68, 81)
COLOR_WALL = (171, 178, 191)
COLOR_LANE = (92, 99, 112)
COLOR_OBSTACLE = (224, 108, 117)
COLOR_STAR = (255, 215, 0)  # Gold for collectibles
COLOR_FINISH = (229, 192, 123)

MARGIN_METRES = 2.0


def _footprint(entity: Entity) -> Optional[Tuple[float, float, float, float]]:
    """(left, back, right, front) of an entity, from colliders or else its meshes."""
    if entity.bounds is not None:
        return entity.bounds
    if not entity.meshes:
        return None
    lows = [m.bounds[0] for m in entity.meshes]
    highs = [m.bounds[1] for m in entity.meshes]
    return (
        entity.x + min(lo[0] for lo in lows),
        entity.z + min(lo[2] for lo in lows),
        entity.x + max(hi[0] for hi in highs),
        entity.z + max(hi[2] for hi in highs),
    )


class PreviewRenderer:
    """Draws a TrackLayout onto a pygame Surface."""

    def __init__(self, layout: TrackLayout, pixels_per_metre: float = 4.0):
        self.layout = layout
        self.ppm = pixels_per_metre

        cfg = layout.config
        self.half_width = cfg.half_track_width + cfg.wall_thickness + MARGIN_METRES
        self.length = max(cfg.track_length, cfg.track_length + cfg.finish_z_offset) + 2 * MARGIN_METRES
        self.width_px = max(1, int(self.half_width * 2 * self.ppm))
        self.height_px = max(1, int(self.length * self.ppm))

    def _world_to_screen(self, x: float, z: float) -> Tuple[int, int]:
        """Convert track (x, z) to screen coordinates (flip z)."""
        screen_x = int((x + self.half_width) * self.ppm)
        screen_y = int(self.height_px - (z + MARGIN_METRES) * self.ppm)
        return screen_x, screen_y

    def _draw_footprint(self, surface: pygame.Surface, entity: Entity, color, width: int = 0) -> None:
        bounds = _footprint(entity)
        if bounds is None:
            return
        left, back, right, front = bounds
        screen_left, screen_top = self._world_to_screen(left, front)
        w = max(1, int((right - left) * self.ppm))
        h = max(1, int((front - back) * self.ppm))
        pygame.draw.rect(surface, color, (screen_left, screen_top, w, h), width)

    def render(self) -> pygame.Surface:
        """Render the layout and return the surface."""
        layout = self.layout
        cfg = layout.config
        surface = pygame.Surface((self.width_px, self.height_px))
        surface.fill(COLOR_BG)

        # Ground
        if layout.ground is not None:
            self._draw_footprint(surface, layout.ground, COLOR_GROUND)

        # Lane center lines
        for x in layout.lane_xs:
            start = self._world_to_screen(x, 0.0)
            end = self._world_to_screen(x, cfg.track_length)
            pygame.draw.line(surface, COLOR_LANE, start, end, 1)

        # Walls
        for wall in layout.walls:
            self._draw_footprint(surface, wall, COLOR_WALL)

        # Obstacles
        for obstacle in layout.obstacles:
            if obstacle.entity is not None:
                self._draw_footprint(surface, obstacle.entity, COLOR_OBSTACLE)

        # Stars
        radius = max(2, int(0.3 * self.ppm))
        for star in layout.stars:
            pygame.draw.circle(surface, COLOR_STAR, self._world_to_screen(star.x, star.z), radius)

        # Finish gate (outline so the stretched posts stay visible)
        if layout.finish is not None and layout.finish.entity is not None:
            self._draw_footprint(surface, layout.finish.entity, COLOR_FINISH, width=2)

        return surface


def render_preview(layout: TrackLayout, pixels_per_metre: float = 4.0) -> pygame.Surface:
    return PreviewRenderer(layout, pixels_per_metre).render()


def save_preview(surface: pygame.Surface, path: str) -> None:
    """Write the preview image (format from the file extension)."""
    pygame.image.save(surface, path)
