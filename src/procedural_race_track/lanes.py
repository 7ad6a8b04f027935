"""Lane layout: evenly spaced lane centers inside the wall clearance."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from .bounds import BoundsEstimator, measure_half_width
from .catalog import ObstacleCatalog
from .config import TrackConfig, LaneMarginMode
from .scene import Instantiator

logger = logging.getLogger(__name__)

# Floor for every usable half-width, so degenerate widths still yield a band
MIN_USABLE_HALF_WIDTH = 0.05


@dataclass(frozen=True)
class LaneSlot:
    """A lane's index and nominal x-offset."""
    index: int
    x: float


def compute_lane_xs(lane_count: int, usable_half_width: float) -> List[float]:
    """Evenly spaced lane centers spanning [-usable, +usable].

    A single lane (or a non-positive count) maps to [0.0].
    """
    lane_count = max(1, lane_count)
    if lane_count == 1:
        return [0.0]

    step = usable_half_width * 2.0 / (lane_count - 1)
    return [-usable_half_width + i * step for i in range(lane_count)]


def lane_slots(lane_count: int, usable_half_width: float) -> List[LaneSlot]:
    return [LaneSlot(i, x) for i, x in enumerate(compute_lane_xs(lane_count, usable_half_width))]


def usable_half_width(config: TrackConfig, margin: float = 0.0) -> float:
    """Half-span for entity centers: inner wall face minus padding minus margin, floored."""
    return max(
        MIN_USABLE_HALF_WIDTH,
        config.half_track_width
        - config.wall_thickness * 0.5
        - config.obstacle_padding_from_wall
        - max(0.0, margin),
    )


def catalog_max_half_width(
    catalog: ObstacleCatalog,
    config: TrackConfig,
    instantiator: Instantiator,
    estimator: BoundsEstimator,
) -> Optional[float]:
    """Worst-case measured half-width over the sampleable catalog.

    Each template is probed detached (never added to the scene) at the
    extreme yaw and scale the config allows. Templates without measurable
    geometry count as obstacle_approx_half_width.
    """
    active = catalog.active_entries
    if not active:
        return None

    yaws = [0.0]
    if config.random_yaw and config.max_yaw_degrees != 0:
        yaws += [config.max_yaw_degrees, -config.max_yaw_degrees]
    scale = max(config.scale_range) if config.random_uniform_scale else 1.0

    worst = 0.0
    for entry in active:
        probe = instantiator.instantiate(entry.template, None)
        try:
            probe.set_uniform_scale(scale)
            for yaw in yaws:
                probe.set_yaw(yaw)
                half = measure_half_width(estimator, probe)
                if half is None:
                    half = config.obstacle_approx_half_width
                worst = max(worst, half)
        finally:
            instantiator.destroy(probe)
    return worst


def lane_margin(
    config: TrackConfig,
    catalog: Optional[ObstacleCatalog] = None,
    instantiator: Optional[Instantiator] = None,
    estimator: Optional[BoundsEstimator] = None,
) -> float:
    """Margin to subtract from the usable half-width according to lane_margin_mode."""
    mode = config.lane_margin_mode
    if mode == LaneMarginMode.NONE:
        return 0.0
    if mode == LaneMarginMode.APPROX:
        return max(0.0, config.obstacle_approx_half_width)

    if catalog is None or instantiator is None or estimator is None:
        return max(0.0, config.obstacle_approx_half_width)
    worst = catalog_max_half_width(catalog, config, instantiator, estimator)
    if worst is None:
        return max(0.0, config.obstacle_approx_half_width)
    logger.debug(f"Widest catalog obstacle half-width: {worst:.3f}")
    return worst
