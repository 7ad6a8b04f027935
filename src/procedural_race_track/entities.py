"""Track entities: templates, meshes, and live entity handles.

An EntityTemplate is the authored description of an instantiable object
(an obstacle prefab, the star pickup, the finish gate): a handful of box
parts, some of which carry collision. An Entity is a live instance of a
template (or a hand-built piece of geometry such as the ground) with a
settable local position, yaw, and scale. Each entity owns one static pymunk
body whose shapes mirror its collider parts in the track plane.
"""

import math
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

import numpy as np
import pymunk

from .physics import TrackPhysics, COLLISION_OBSTACLE


Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class TemplatePart:
    """One box of a template, relative to the template pivot.

    Collider parts become pymunk shapes; visual parts only contribute to
    measured bounds.
    """
    center: Vec3 = (0.0, 0.5, 0.0)
    size: Vec3 = (1.0, 1.0, 1.0)
    collider: bool = True
    sensor: bool = False

    @property
    def half_size(self) -> Vec3:
        return (self.size[0] / 2, self.size[1] / 2, self.size[2] / 2)


@dataclass(frozen=True)
class EntityTemplate:
    """Authored, instantiable object description."""
    name: str
    parts: Tuple[TemplatePart, ...] = ()
    tags: FrozenSet[str] = frozenset()
    collision_type: int = COLLISION_OBSTACLE

    @property
    def collider_parts(self) -> Tuple[TemplatePart, ...]:
        return tuple(p for p in self.parts if p.collider)

    @property
    def visual_parts(self) -> Tuple[TemplatePart, ...]:
        return tuple(p for p in self.parts if not p.collider)


@dataclass
class Box3:
    """Axis-aligned box collider in entity-local space."""
    center: Vec3
    size: Vec3

    @property
    def min_y(self) -> float:
        return self.center[1] - self.size[1] / 2

    @property
    def max_y(self) -> float:
        return self.center[1] + self.size[1] / 2


@dataclass
class Mesh:
    """Minimal triangle mesh (vertices in entity-local space)."""
    name: str
    vertices: np.ndarray  # (N, 3) float
    triangles: np.ndarray  # (M,) int, three indices per triangle
    normals: Optional[np.ndarray] = None  # (N, 3) float
    uvs: Optional[np.ndarray] = None  # (N, 2) float

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    @property
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """(min_xyz, max_xyz) of the vertices."""
        return self.vertices.min(axis=0), self.vertices.max(axis=0)


def yaw_rotation(yaw_degrees: float) -> np.ndarray:
    """2x2 rotation acting on (x, z) pairs for a yaw about the up axis.

    Positive yaw turns +z toward +x (clockwise seen from above), which is a
    negative angle in pymunk's counter-clockwise (x, z) plane.
    """
    a = math.radians(yaw_degrees)
    c, s = math.cos(a), math.sin(a)
    return np.array([[c, s], [-s, c]])


class Entity:
    """Live instance placed in the track's local frame.

    Position, yaw, and scale are applied to the pymunk body and to the
    collider shapes (shapes are rebuilt when the scale changes, since pymunk
    polygons carry their vertices).
    """

    def __init__(
        self,
        physics: TrackPhysics,
        name: str,
        template: Optional[EntityTemplate] = None,
        tags: FrozenSet[str] = frozenset(),
    ):
        """Create an entity (not yet added to the physics space).

        Args:
            physics: The physics layer owning collision shapes
            name: Entity name (unique within its group by convention)
            template: Template to build collider shapes from, if any
            tags: Discovery tags; template tags are merged in
        """
        self.physics = physics
        self.name = name
        self.template = template
        self.tags = set(tags) | (set(template.tags) if template else set())

        self._position: Vec3 = (0.0, 0.0, 0.0)
        self._yaw_degrees = 0.0
        self._scale: Vec3 = (1.0, 1.0, 1.0)

        self.body = pymunk.Body(body_type=pymunk.Body.STATIC)
        self.shapes: List[pymunk.Shape] = []
        self.meshes: List[Mesh] = []
        self.box_colliders: List[Box3] = []
        self._box_specs: List[Tuple[Box3, int, bool]] = []

        self.live = False
        self.group = None  # Set by EntityGroup.add

        if template is not None:
            self._rebuild_shapes()

    # === TRANSFORM ===

    @property
    def position(self) -> Vec3:
        """Local position (x, y, z)."""
        return self._position

    @property
    def x(self) -> float:
        return self._position[0]

    @property
    def y(self) -> float:
        return self._position[1]

    @property
    def z(self) -> float:
        return self._position[2]

    @property
    def yaw_degrees(self) -> float:
        return self._yaw_degrees

    @property
    def scale(self) -> Vec3:
        return self._scale

    def set_local_position(self, x: float, y: float, z: float) -> None:
        self._position = (float(x), float(y), float(z))
        self.body.position = (self._position[0], self._position[2])
        self.physics.reindex(self.body)

    def translate_y(self, dy: float) -> None:
        """Nudge the entity straight up/down."""
        x, y, z = self._position
        self.set_local_position(x, y + dy, z)

    def set_yaw(self, yaw_degrees: float) -> None:
        self._yaw_degrees = float(yaw_degrees)
        self.body.angle = -math.radians(self._yaw_degrees)
        self.physics.reindex(self.body)

    def set_scale(self, sx: float, sy: float, sz: float) -> None:
        self._scale = (float(sx), float(sy), float(sz))
        self._rebuild_shapes()

    def set_uniform_scale(self, s: float) -> None:
        self.set_scale(s, s, s)

    # === GEOMETRY ===

    def add_mesh(self, mesh: Mesh) -> None:
        self.meshes.append(mesh)

    def add_box_collider(self, box: Box3, collision_type: int, sensor: bool = False) -> None:
        """Attach a box collider; its (x, z) footprint becomes a pymunk shape."""
        self.box_colliders.append(box)
        self._box_specs.append((box, collision_type, sensor))
        self._rebuild_shapes()

    def _rebuild_shapes(self) -> None:
        """Recreate pymunk shapes from template colliders and box colliders."""
        old = list(self.shapes)
        if old:
            self.physics.remove_shapes(*old)
        self.shapes = []

        sx, _, sz = self._scale
        if self.template is not None:
            for part in self.template.collider_parts:
                shape = self.physics.create_static_box(
                    self.body,
                    center=(part.center[0] * sx, part.center[2] * sz),
                    size=(abs(part.size[0] * sx), abs(part.size[2] * sz)),
                    collision_type=self.template.collision_type,
                    sensor=part.sensor,
                )
                self.shapes.append(shape)
        for box, collision_type, sensor in self._box_specs:
            shape = self.physics.create_static_box(
                self.body,
                center=(box.center[0] * sx, box.center[2] * sz),
                size=(abs(box.size[0] * sx), abs(box.size[2] * sz)),
                collision_type=collision_type,
                sensor=sensor,
            )
            self.shapes.append(shape)

        for shape in self.shapes:
            self.physics.register_shape(shape, self)
        if self.live:
            self.physics.add_shapes(*self.shapes)

    # === LIFECYCLE ===

    def spawn(self) -> None:
        """Add the body and shapes to the physics space."""
        if self.live:
            return
        self.physics.add_body(self.body, *self.shapes)
        self.live = True

    def destroy(self) -> None:
        """Remove the entity's body and shapes from the physics space."""
        if self.live:
            self.physics.remove_body(self.body, *self.shapes)
        else:
            for shape in self.shapes:
                self.physics.unregister_shape(shape)
        self.live = False

    @property
    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """Get (left, back, right, front) footprint of the collider shapes in (x, z)."""
        if not self.shapes:
            return None
        bbs = [shape.cache_bb() for shape in self.shapes]
        return (
            min(bb.left for bb in bbs),
            min(bb.bottom for bb in bbs),
            max(bb.right for bb in bbs),
            max(bb.top for bb in bbs),
        )

    def __repr__(self) -> str:
        x, y, z = self._position
        return f"Entity({self.name!r}, pos=({x:.2f}, {y:.2f}, {z:.2f}), yaw={self._yaw_degrees:.1f})"
