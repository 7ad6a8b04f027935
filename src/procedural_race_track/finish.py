"""Finish gate placement."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .bounds import BoundsEstimator, rest_on_ground
from .config import TrackConfig
from .entities import Entity, EntityTemplate
from .scene import EntityGroup, Instantiator

logger = logging.getLogger(__name__)


@dataclass
class PlacedFinish:
    z: float
    scale_x: float
    yaw_degrees: float
    entity: Optional[Entity] = field(default=None, repr=False, compare=False)

    @property
    def y(self) -> float:
        return self.entity.y if self.entity is not None else 0.0


def finish_scale_x(config: TrackConfig) -> float:
    """Width stretch mapping the gate's reference width onto the inner wall span."""
    if not config.auto_scale_finish_to_track_width or config.finish_prefab_approx_width <= 0.001:
        return 1.0
    return config.usable_track_width / config.finish_prefab_approx_width


def place_finish_gate(
    config: TrackConfig,
    template: EntityTemplate,
    instantiator: Instantiator,
    estimator: BoundsEstimator,
    group: EntityGroup,
) -> PlacedFinish:
    """Instantiate the gate at the end of the track, facing back down it.

    Clears the group first so repeated calls leave exactly one gate.
    Grounding prefers collider bounds and falls back to visual bounds.
    """
    group.clear()

    z = config.track_length + config.finish_z_offset
    gate = instantiator.instantiate(template, group)
    gate.set_local_position(0.0, config.ground_y, z)
    gate.set_yaw(config.finish_yaw_degrees)

    scale_x = finish_scale_x(config)
    if scale_x != 1.0:
        sx, sy, sz = gate.scale
        gate.set_scale(scale_x, sy, sz)

    if not rest_on_ground(gate, estimator, config.ground_y + config.finish_y_offset, prefer_colliders=True):
        logger.debug(f"Finish gate {template.name} has no measurable bounds; left at ground height")

    return PlacedFinish(z=z, scale_x=scale_x, yaw_degrees=config.finish_yaw_degrees, entity=gate)
