"""Bounds estimation for live entities in the track's local frame.

The generator only needs two geometry queries:
- the horizontal (x) extent of an entity after yaw/scale, to keep it clear
  of the walls
- the lowest point of an entity, to rest it on the ground plane

Collider footprints come straight from pymunk (shape.cache_bb()); visual-only
parts and meshes are transformed with numpy.
"""

from typing import Optional, Protocol, Tuple

import numpy as np

from .entities import Entity, TemplatePart, yaw_rotation


class BoundsEstimator(Protocol):
    """Geometry query capability provided by the host."""

    def horizontal_extent(self, entity: Entity) -> Optional[Tuple[float, float]]:
        """(min_dx, max_dx) of the entity relative to its x, or None if unmeasurable."""
        ...

    def lowest_point(self, entity: Entity, prefer_colliders: bool = True) -> Optional[float]:
        """Lowest y of the entity's geometry, or None if unmeasurable."""
        ...


def _part_corners_xz(part: TemplatePart, entity: Entity) -> np.ndarray:
    """Footprint corners of a part in track-local (x, z), relative to the entity position."""
    sx, _, sz = entity.scale
    cx, _, cz = part.center
    hx, _, hz = part.half_size
    local = np.array([
        [cx - hx, cz - hz],
        [cx + hx, cz - hz],
        [cx + hx, cz + hz],
        [cx - hx, cz + hz],
    ]) * np.array([sx, sz])
    return local @ yaw_rotation(entity.yaw_degrees).T


class GeometryBoundsEstimator:
    """Default estimator over template parts, box colliders, and meshes."""

    def horizontal_extent(self, entity: Entity) -> Optional[Tuple[float, float]]:
        xs = []

        # Collider footprints as pymunk sees them
        for shape in entity.shapes:
            bb = shape.cache_bb()
            xs.extend([bb.left - entity.x, bb.right - entity.x])

        # Visual-only parts
        if entity.template is not None:
            for part in entity.template.visual_parts:
                xs.extend(_part_corners_xz(part, entity)[:, 0].tolist())

        for mesh in entity.meshes:
            if len(mesh.vertices):
                pts = mesh.vertices[:, [0, 2]] * np.array([entity.scale[0], entity.scale[2]])
                xs.extend((pts @ yaw_rotation(entity.yaw_degrees).T)[:, 0].tolist())

        if not xs:
            return None
        return float(min(xs)), float(max(xs))

    def lowest_point(self, entity: Entity, prefer_colliders: bool = True) -> Optional[float]:
        sy = entity.scale[1]
        collider_ys = []
        visual_ys = []

        if entity.template is not None:
            for part in entity.template.parts:
                bottom = min(
                    (part.center[1] - part.half_size[1]) * sy,
                    (part.center[1] + part.half_size[1]) * sy,
                )
                (collider_ys if part.collider else visual_ys).append(bottom)
        for box in entity.box_colliders:
            collider_ys.append(min(box.min_y * sy, box.max_y * sy))
        for mesh in entity.meshes:
            if len(mesh.vertices):
                visual_ys.append(float(mesh.vertices[:, 1].min()) * sy)

        if prefer_colliders:
            ys = collider_ys or visual_ys
        else:
            ys = visual_ys + collider_ys
        if not ys:
            return None
        return entity.y + min(ys)


def rest_on_ground(
    entity: Entity,
    estimator: BoundsEstimator,
    ground_level: float,
    prefer_colliders: bool = True,
) -> bool:
    """Translate an entity vertically so its lowest point touches ground_level.

    Returns:
        False if the entity has no measurable geometry (left where it was).
    """
    bottom = estimator.lowest_point(entity, prefer_colliders=prefer_colliders)
    if bottom is None:
        return False
    entity.translate_y(ground_level - bottom)
    return True


def measure_half_width(estimator: BoundsEstimator, entity: Entity) -> Optional[float]:
    """Largest lateral reach of the entity from its pivot, or None if unmeasurable."""
    extent = estimator.horizontal_extent(entity)
    if extent is None:
        return None
    lo, hi = extent
    return max(-lo, hi, 0.0)
