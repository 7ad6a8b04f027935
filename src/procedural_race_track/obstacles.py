"""Obstacle placement pass.

Walks the track in randomized steps on the obstacle stream. At each step a
spawn roll decides whether to attempt a placement; an attempt samples an
obstacle type, applies yaw/scale jitter, measures the instance, picks a
lane, and grounds it. Lanes that would violate the per-lane forward gap are
never candidates, and every resolved x keeps the measured geometry inside
the wall clearance.
"""

import logging
from dataclasses import dataclass, field
from random import Random
from typing import Dict, List, Optional, Sequence

from .bounds import BoundsEstimator, measure_half_width, rest_on_ground
from .catalog import ObstacleCatalog
from .config import TrackConfig
from .entities import Entity
from .lanes import MIN_USABLE_HALF_WIDTH
from .rng import fixed_steps, lerp_sample, random_gaps
from .scene import EntityGroup, Instantiator
from .variety import (
    LaneCandidate,
    LaneChoice,
    PlacementHistory,
    VarietyParams,
    candidates_inside_band,
    clamp,
    select_lane,
)

logger = logging.getLogger(__name__)


@dataclass
class PlacedObstacle:
    """Record of one placed obstacle, used for spacing/clearance within a pass."""
    lane: int
    z: float
    x: float
    half_width: float
    template_name: str
    yaw_degrees: float = 0.0
    scale: float = 1.0
    entity: Optional[Entity] = field(default=None, repr=False, compare=False)

    @property
    def y(self) -> float:
        return self.entity.y if self.entity is not None else 0.0


class ObstaclePlacer:
    """Runs one obstacle pass over a fixed lane layout.

    All per-pass state (last z per lane, placed z per lane, history) lives
    on the placer, so a fresh placer is used for every pass.
    """

    def __init__(
        self,
        config: TrackConfig,
        catalog: ObstacleCatalog,
        instantiator: Instantiator,
        estimator: BoundsEstimator,
        lane_xs: Sequence[float],
        group: EntityGroup,
    ):
        self.config = config
        self.catalog = catalog
        self.instantiator = instantiator
        self.estimator = estimator
        self.lane_xs = list(lane_xs)
        self.group = group
        self.params = VarietyParams.from_config(config)

        lanes = len(self.lane_xs)
        self.last_z: List[float] = [float("-inf")] * lanes
        self.placed_zs: Dict[int, List[float]] = {i: [] for i in range(lanes)}
        self.history = PlacementHistory(config.history_window)
        self.skipped_slots = 0

    def run(self, rng: Random) -> List[PlacedObstacle]:
        """Place obstacles along the whole track.

        Args:
            rng: The obstacle stream (consumed in a fixed order)

        Returns:
            Placed obstacles in z order
        """
        if self.catalog.is_empty:
            logger.warning("Obstacle catalog is empty or has no positive weights; no obstacles placed")
            return []

        cfg = self.config
        if cfg.use_random_gaps:
            slots = random_gaps(rng, cfg.track_length, cfg.gap_min, cfg.gap_max)
        else:
            slots = fixed_steps(cfg.track_length, cfg.step)

        placed = []
        for z in slots:
            if not (cfg.always_spawn_at_gap and cfg.use_random_gaps):
                if rng.random() > cfg.spawn_probability:
                    continue
            obstacle = self.try_place(rng, z)
            if obstacle is not None:
                placed.append(obstacle)

        logger.debug(f"Placed {len(placed)} obstacles ({self.skipped_slots} slots skipped)")
        return placed

    def band_for(self, half_width: float) -> float:
        """Usable half-span for the center of an obstacle with this half-width."""
        return max(MIN_USABLE_HALF_WIDTH, self.config.wall_clearance_half_width - half_width)

    def candidates_at(self, z: float) -> List[LaneCandidate]:
        """Lanes whose previous obstacle is at least min_forward_gap behind z."""
        return [
            LaneCandidate(lane, x)
            for lane, x in enumerate(self.lane_xs)
            if z - self.last_z[lane] >= self.config.min_forward_gap
        ]

    def measure(self, entity: Entity) -> float:
        half = measure_half_width(self.estimator, entity)
        if half is None:
            logger.debug(f"No measurable geometry on {entity.name}; using approximate half-width")
            return max(0.0, self.config.obstacle_approx_half_width)
        return half

    def try_place(self, rng: Random, z: float) -> Optional[PlacedObstacle]:
        """Attempt one placement at z. Returns None if no lane is available."""
        cfg = self.config

        entry = self.catalog.sample(rng)
        if entry is None:
            return None

        yaw = lerp_sample(rng, -cfg.max_yaw_degrees, cfg.max_yaw_degrees) if cfg.random_yaw else 0.0
        scale = lerp_sample(rng, *cfg.scale_range) if cfg.random_uniform_scale else 1.0

        entity = self.instantiator.instantiate(entry.template, self.group)
        entity.set_yaw(yaw)
        if not cfg.defer_scale_until_after_lane:
            entity.set_uniform_scale(scale)

        half_width = self.measure(entity)
        band = self.band_for(half_width)

        candidates = self.candidates_at(z)
        choice = select_lane(candidates, self.history, self.params, rng, band, cfg.lane_selection)
        if choice is None:
            self.instantiator.destroy(entity)
            self.skipped_slots += 1
            return None

        if cfg.defer_scale_until_after_lane and scale != 1.0:
            entity.set_uniform_scale(scale)
            half_width = self.measure(entity)
            band = self.band_for(half_width)
            if abs(choice.x) > band:
                choice = self._reresolve(candidates, choice, rng, band)

        entity.set_local_position(choice.x, cfg.ground_y, z)
        rest_on_ground(entity, self.estimator, cfg.ground_y + cfg.y_offset, prefer_colliders=False)

        self.last_z[choice.lane] = z
        self.placed_zs[choice.lane].append(z)
        self.history.record(choice.x, choice.lane)

        return PlacedObstacle(
            lane=choice.lane,
            z=z,
            x=choice.x,
            half_width=half_width,
            template_name=entry.template.name,
            yaw_degrees=yaw,
            scale=scale,
            entity=entity,
        )

    def _reresolve(
        self,
        candidates: Sequence[LaneCandidate],
        original: LaneChoice,
        rng: Random,
        band: float,
    ) -> LaneChoice:
        """Pick again after a late scale change shrank the band.

        Only lanes whose nominal offset fits the new band are considered. If
        none fit (or the selector declines), the original lane is kept and
        its offset clamped into the new band.
        """
        fitting = candidates_inside_band(candidates, band)
        choice = select_lane(fitting, self.history, self.params, rng, band, self.config.lane_selection)
        if choice is not None:
            return choice
        return LaneChoice(original.lane, clamp(original.x, -band, band), original.score)
