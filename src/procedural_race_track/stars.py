"""Star (collectible) placement pass.

Runs on its own random stream after the obstacle pass. Each row places at
most one star, on a uniformly chosen lane center, and is refused when an
obstacle in that lane sits within star_clearance_z.
"""

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Dict, List, Optional, Sequence

from .bounds import BoundsEstimator, rest_on_ground
from .config import TrackConfig
from .entities import Entity, EntityTemplate
from .rng import random_gaps
from .scene import EntityGroup, Instantiator

logger = logging.getLogger(__name__)


@dataclass
class PlacedStar:
    lane: int
    z: float
    x: float
    entity: Optional[Entity] = field(default=None, repr=False, compare=False)


class StarPlacer:
    """Places star rows along the track."""

    def __init__(
        self,
        config: TrackConfig,
        template: EntityTemplate,
        instantiator: Instantiator,
        estimator: BoundsEstimator,
        lane_xs: Sequence[float],
        group: EntityGroup,
    ):
        self.config = config
        self.template = template
        self.instantiator = instantiator
        self.estimator = estimator
        self.lane_xs = list(lane_xs)
        self.group = group
        self.blocked_rows = 0

    def lane_is_clear(self, lane: int, z: float, obstacle_zs: Dict[int, List[float]]) -> bool:
        """Whether no obstacle in the lane lies within star_clearance_z of z."""
        if not self.config.prevent_star_obstacle_overlap:
            return True
        clearance = self.config.star_clearance_z
        return all(abs(oz - z) >= clearance for oz in obstacle_zs.get(lane, ()))

    def run(self, rng: Random, obstacle_zs: Dict[int, List[float]]) -> List[PlacedStar]:
        """Place stars along the whole track.

        Args:
            rng: The star stream
            obstacle_zs: Obstacle z-positions per lane from the obstacle pass

        Returns:
            Placed stars in z order
        """
        cfg = self.config
        stars = []
        for z in random_gaps(rng, cfg.track_length, cfg.star_gap_min, cfg.star_gap_max):
            if rng.random() > cfg.star_row_probability:
                continue

            lane = rng.randrange(len(self.lane_xs))
            if not self.lane_is_clear(lane, z, obstacle_zs):
                self.blocked_rows += 1
                continue

            x = self.lane_xs[lane]
            entity = self.instantiator.instantiate(self.template, self.group)
            entity.set_local_position(x, cfg.ground_y, z)
            rest_on_ground(entity, self.estimator, cfg.ground_y + cfg.star_y_offset, prefer_colliders=False)
            stars.append(PlacedStar(lane=lane, z=z, x=x, entity=entity))

        logger.debug(f"Placed {len(stars)} stars ({self.blocked_rows} rows blocked by obstacles)")
        return stars
