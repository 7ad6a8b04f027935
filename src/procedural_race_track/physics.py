"""Physics layer using pymunk for the track's horizontal plane.

The generator works in a 3D track-local frame (x lateral, y up, z forward).
Collision volumes only need the horizontal footprint, so pymunk sees the
plane (x, z): pymunk x = track x, pymunk y = track z. Gravity is zero; the
vertical axis is tracked on the entities themselves.

This module owns the pymunk.Space, the collision categories, and the
host-wired gameplay hooks (obstacle hit, star collected, finish reached).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

import pymunk

if TYPE_CHECKING:
    from .entities import Entity

logger = logging.getLogger(__name__)


# Collision types for different entity categories
COLLISION_PLAYER = 1
COLLISION_GROUND = 2
COLLISION_WALL = 3
COLLISION_OBSTACLE = 4
COLLISION_STAR = 5
COLLISION_FINISH = 6


@dataclass
class GameplayHooks:
    """Callbacks a host wires up to react to player contacts.

    Each callback receives the generated Entity that was touched. The
    generator never calls these itself; they fire from pymunk collision
    handlers while the host steps the simulation.
    """
    on_obstacle_hit: Optional[Callable[["Entity"], None]] = None
    on_star_collected: Optional[Callable[["Entity"], None]] = None
    on_finish_reached: Optional[Callable[["Entity"], None]] = None


class TrackPhysics:
    """Manages the pymunk space holding every generated collision shape.

    Wraps pymunk.Space with a shape -> entity registry so collision
    callbacks can report which generated entity was touched.
    """

    def __init__(self):
        self.space = pymunk.Space()
        self.space.gravity = (0, 0)  # Top-down plane, no gravity

        self._entity_by_shape: Dict[pymunk.Shape, "Entity"] = {}
        self._hooks: Optional[GameplayHooks] = None

        # Stars and finish fire once per entity
        self._consumed: set = set()

    def add_body(self, body: pymunk.Body, *shapes: pymunk.Shape) -> None:
        """Add a body and its shapes to the space."""
        self.space.add(body, *shapes)

    def add_shapes(self, *shapes: pymunk.Shape) -> None:
        """Add shapes whose body is already in the space."""
        self.space.add(*shapes)

    def remove_body(self, body: pymunk.Body, *shapes: pymunk.Shape) -> None:
        """Remove a body, the given shapes, and any other shapes on the body."""
        for shape in set(shapes) | set(body.shapes):
            self.unregister_shape(shape)
            if shape.space is not None:
                self.space.remove(shape)
        if body.space is not None:
            self.space.remove(body)

    def remove_shapes(self, *shapes: pymunk.Shape) -> None:
        """Remove individual shapes (used when an entity rebuilds its shapes)."""
        for shape in shapes:
            self.unregister_shape(shape)
            if shape.space is not None:
                self.space.remove(shape)

    def reindex(self, body: pymunk.Body) -> None:
        """Refresh the spatial index after a static body was moved."""
        if body.space is not None:
            self.space.reindex_shapes_for_body(body)

    def register_shape(self, shape: pymunk.Shape, entity: "Entity") -> None:
        self._entity_by_shape[shape] = entity

    def unregister_shape(self, shape: pymunk.Shape) -> None:
        entity = self._entity_by_shape.pop(shape, None)
        if entity is not None:
            self._consumed.discard(id(entity))

    def entity_for_shape(self, shape: pymunk.Shape) -> Optional["Entity"]:
        """Look up the entity owning a shape."""
        return self._entity_by_shape.get(shape)

    def query_point(self, x: float, z: float) -> List["Entity"]:
        """Entities whose collision footprint contains the track point (x, z)."""
        hits = self.space.point_query((x, z), 0.0, pymunk.ShapeFilter())
        found = []
        for hit in hits:
            entity = self._entity_by_shape.get(hit.shape)
            if entity is not None and entity not in found:
                found.append(entity)
        return found

    def step(self, dt: float) -> None:
        """Advance the simulation by dt seconds (host-driven)."""
        self.space.step(dt)

    def create_static_box(
        self,
        body: pymunk.Body,
        center: Tuple[float, float],
        size: Tuple[float, float],
        collision_type: int,
        sensor: bool = False,
        friction: float = 1.0,
    ) -> pymunk.Poly:
        """Create an axis-aligned box shape on a body (not yet added to the space).

        Args:
            body: Body the shape is attached to
            center: Box center in body-local (x, z)
            size: Box (width, depth)
            collision_type: Collision category
            sensor: Whether the shape only reports contacts
            friction: Surface friction coefficient

        Returns:
            The created shape
        """
        # Degenerate boxes (zero length or thickness) still get a valid polygon
        half_w, half_d = max(size[0], 1e-4) / 2, max(size[1], 1e-4) / 2
        vertices = [
            (-half_w, -half_d),
            (half_w, -half_d),
            (half_w, half_d),
            (-half_w, half_d),
        ]
        shape = pymunk.Poly(body, vertices, transform=pymunk.Transform.translation(*center))
        shape.collision_type = collision_type
        shape.sensor = sensor
        shape.friction = friction
        return shape

    # === GAMEPLAY HOOKS ===

    def connect_hooks(self, hooks: GameplayHooks) -> None:
        """Wire host callbacks onto player collisions with generated entities."""
        self._hooks = hooks
        self.space.on_collision(
            collision_type_a=COLLISION_PLAYER,
            collision_type_b=COLLISION_OBSTACLE,
            begin=self._player_obstacle_begin,
        )
        self.space.on_collision(
            collision_type_a=COLLISION_PLAYER,
            collision_type_b=COLLISION_STAR,
            begin=self._player_star_begin,
        )
        self.space.on_collision(
            collision_type_a=COLLISION_PLAYER,
            collision_type_b=COLLISION_FINISH,
            begin=self._player_finish_begin,
        )

    def _touched_entity(self, arbiter: pymunk.Arbiter) -> Optional["Entity"]:
        # shapes[1] is the generated entity (collision_type_b)
        return self._entity_by_shape.get(arbiter.shapes[1])

    def _player_obstacle_begin(
        self, arbiter: pymunk.Arbiter, _space: pymunk.Space, _data
    ) -> None:
        entity = self._touched_entity(arbiter)
        if entity is None or self._hooks is None:
            return
        if self._hooks.on_obstacle_hit is not None:
            self._hooks.on_obstacle_hit(entity)

    def _player_star_begin(
        self, arbiter: pymunk.Arbiter, _space: pymunk.Space, _data
    ) -> None:
        arbiter.process_collision = False
        entity = self._touched_entity(arbiter)
        if entity is None or self._hooks is None or id(entity) in self._consumed:
            return
        self._consumed.add(id(entity))
        if self._hooks.on_star_collected is not None:
            self._hooks.on_star_collected(entity)

    def _player_finish_begin(
        self, arbiter: pymunk.Arbiter, _space: pymunk.Space, _data
    ) -> None:
        arbiter.process_collision = False
        entity = self._touched_entity(arbiter)
        if entity is None or self._hooks is None or id(entity) in self._consumed:
            return
        self._consumed.add(id(entity))
        logger.debug(f"Finish gate reached: {entity.name}")
        if self._hooks.on_finish_reached is not None:
            self._hooks.on_finish_reached(entity)
