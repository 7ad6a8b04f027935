"""Ground and wall geometry.

The ground is a single quad of width 2*half_track_width and length
track_length at ground_y. The walls are thin boxes centered on
x = +/-half_track_width. Both get box colliders whose horizontal footprints
are registered with pymunk (ground as a sensor, walls solid).
"""

import logging
from typing import List

import numpy as np

from .config import TrackConfig
from .entities import Box3, Entity, Mesh
from .physics import TrackPhysics, COLLISION_GROUND, COLLISION_WALL
from .scene import EntityGroup

logger = logging.getLogger(__name__)

# Quad order for the 24-vertex wall box: inner, outer, left, right, top, bottom
_WALL_QUADS = [
    (0, 1, 2, 3),
    (5, 4, 7, 6),
    (8, 9, 10, 11),
    (13, 12, 15, 14),
    (16, 17, 18, 19),
    (22, 21, 23, 20),
]


def build_ground_mesh(config: TrackConfig) -> Mesh:
    """Flat ground quad with upward normals and tiled UVs."""
    h = config.half_track_width
    width = h * 2.0
    length = max(0.0, config.track_length)

    vertices = np.array([
        [-h, 0.0, 0.0],
        [h, 0.0, 0.0],
        [-h, 0.0, length],
        [h, 0.0, length],
    ])
    triangles = np.array([0, 2, 1, 2, 3, 1])
    normals = np.tile([0.0, 1.0, 0.0], (4, 1))

    tiles_u, tiles_v = config.ground_uv_tiles_per_unit
    u_max = width * max(0.0, tiles_u)
    v_max = length * max(0.0, tiles_v)
    uvs = np.array([
        [0.0, 0.0],
        [u_max, 0.0],
        [0.0, v_max],
        [u_max, v_max],
    ])
    return Mesh("GroundAutoMesh", vertices, triangles, normals, uvs)


def build_wall_mesh(name: str, side: int, config: TrackConfig) -> Mesh:
    """Closed box mesh for one wall.

    Args:
        name: Mesh name
        side: -1 for the left wall, +1 for the right
        config: Track config (length, thickness, height, ground_y)
    """
    length = max(0.0, config.track_length)
    x_center = side * config.half_track_width
    x0 = x_center - config.wall_thickness * 0.5
    x1 = x_center + config.wall_thickness * 0.5
    y0 = config.ground_y
    y1 = config.ground_y + config.wall_height

    vertices = np.array([
        # Front (z = 0)
        [x0, y0, 0.0], [x1, y0, 0.0], [x0, y1, 0.0], [x1, y1, 0.0],
        # Back (z = length)
        [x0, y0, length], [x1, y0, length], [x0, y1, length], [x1, y1, length],
        # Face at x0
        [x0, y0, 0.0], [x0, y0, length], [x0, y1, 0.0], [x0, y1, length],
        # Face at x1
        [x1, y0, 0.0], [x1, y0, length], [x1, y1, 0.0], [x1, y1, length],
        # Top
        [x0, y1, 0.0], [x1, y1, 0.0], [x0, y1, length], [x1, y1, length],
        # Bottom
        [x0, y0, 0.0], [x1, y0, 0.0], [x0, y0, length], [x1, y0, length],
    ])
    triangles = []
    for a, b, c, d in _WALL_QUADS:
        triangles.extend([a, c, b, c, d, b])
    return Mesh(f"{name}_Mesh", vertices, np.array(triangles))


class GeometryBuilder:
    """Builds the ground strip and the two bounding walls.

    Pure function of the config: no randomness. Each build clears its
    group first, so rebuilding never leaves stale geometry behind.
    """

    def __init__(self, config: TrackConfig, physics: TrackPhysics):
        self.config = config
        self.physics = physics

    def build_ground(self, group: EntityGroup) -> Entity:
        cfg = self.config
        group.clear()

        ground = Entity(self.physics, "Ground", tags=frozenset({"ground"}))
        ground.add_mesh(build_ground_mesh(cfg))
        ground.set_local_position(0.0, cfg.ground_y, 0.0)

        if cfg.add_ground_collider:
            length = max(0.0, cfg.track_length)
            t = cfg.ground_collider_thickness
            ground.add_box_collider(
                Box3(center=(0.0, -t * 0.5, length * 0.5), size=(cfg.half_track_width * 2.0, t, length)),
                collision_type=COLLISION_GROUND,
                sensor=True,
            )

        group.add(ground)
        ground.spawn()
        return ground

    def build_walls(self, group: EntityGroup) -> List[Entity]:
        group.clear()
        walls = [
            self._build_wall("Wall_Left", -1, group),
            self._build_wall("Wall_Right", +1, group),
        ]
        return walls

    def _build_wall(self, name: str, side: int, group: EntityGroup) -> Entity:
        cfg = self.config
        wall = Entity(self.physics, name, tags=frozenset({"wall"}))
        wall.add_mesh(build_wall_mesh(name, side, cfg))

        if cfg.add_wall_colliders:
            length = max(0.0, cfg.track_length)
            wall.add_box_collider(
                Box3(
                    center=(side * cfg.half_track_width, cfg.ground_y + cfg.wall_height * 0.5, length * 0.5),
                    size=(cfg.wall_thickness, cfg.wall_height, length),
                ),
                collision_type=COLLISION_WALL,
            )

        group.add(wall)
        wall.spawn()
        return wall
