"""Track generation orchestrator.

Generates a complete track layout from a TrackConfig:
1. Clear the previously generated groups
2. Build ground and walls
3. Place the finish gate
4. Lay out lanes and run the obstacle pass
5. Run the star pass on its own stream

Everything is reproducible from config.seed and the catalog: the same
inputs always yield the same sequence of placements.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .bounds import BoundsEstimator, GeometryBoundsEstimator
from .catalog import ObstacleCatalog
from .config import TrackConfig, get_preset
from .constraints import TrackConstraints
from .entities import Entity, EntityTemplate
from .finish import PlacedFinish, place_finish_gate
from .geometry import GeometryBuilder
from .lanes import compute_lane_xs, lane_margin, usable_half_width
from .obstacles import ObstaclePlacer, PlacedObstacle
from .rng import GenerationStreams
from .scene import Instantiator, SceneInstantiator, TrackScene
from .stars import PlacedStar, StarPlacer
from .templates import FINISH_GATE, STAR, default_obstacle_catalog

logger = logging.getLogger(__name__)


# Groups owned by the generator; nothing else in the scene is touched
GROUND_GROUP = "Ground_Auto"
WALLS_GROUP = "Walls_Auto"
OBSTACLES_GROUP = "Obstacles_Auto"
STARS_GROUP = "Stars_Auto"
FINISH_GROUP = "Finish_Auto"
GENERATED_GROUPS = (GROUND_GROUP, WALLS_GROUP, OBSTACLES_GROUP, STARS_GROUP, FINISH_GROUP)


@dataclass
class TrackLayout:
    """Record of one generation pass."""
    config: TrackConfig
    lane_xs: List[float]
    usable_half_width: float
    obstacles: List[PlacedObstacle] = field(default_factory=list)
    stars: List[PlacedStar] = field(default_factory=list)
    finish: Optional[PlacedFinish] = None
    ground: Optional[Entity] = field(default=None, repr=False)
    walls: List[Entity] = field(default_factory=list, repr=False)

    def signature(self) -> Tuple[Tuple[str, int, float, float, float, float], ...]:
        """Obstacle placements as (template, lane, z, x, yaw, scale) tuples."""
        return tuple(
            (o.template_name, o.lane, float(o.z), float(o.x), float(o.yaw_degrees), float(o.scale))
            for o in self.obstacles
        )

    def star_signature(self) -> Tuple[Tuple[int, float, float], ...]:
        return tuple((s.lane, float(s.z), float(s.x)) for s in self.stars)

    def obstacles_in_lane(self, lane: int) -> List[PlacedObstacle]:
        return [o for o in self.obstacles if o.lane == lane]

    def summary(self) -> str:
        """Human-readable one-block description of the layout."""
        cfg = self.config
        lines = [
            f"seed={cfg.seed} length={cfg.track_length:.1f} lanes={len(self.lane_xs)} "
            f"mode={cfg.lane_selection.value}",
            f"lane centers: {', '.join(f'{x:+.2f}' for x in self.lane_xs)}",
            f"obstacles: {len(self.obstacles)}",
        ]
        for lane in range(len(self.lane_xs)):
            lines.append(f"  lane {lane}: {len(self.obstacles_in_lane(lane))}")
        lines.append(f"stars: {len(self.stars)}")
        if self.finish is not None:
            lines.append(f"finish: z={self.finish.z:.1f} scale_x={self.finish.scale_x:.2f}")
        return "\n".join(lines)


class TrackGenerator:
    """Builds and rebuilds a track inside a TrackScene.

    Usage:
        gen = TrackGenerator(TrackConfig(seed=12345))
        layout = gen.generate()
        print(layout.summary())

    The caller's config is never modified: each pass runs on a sanitized
    copy. Only the five generator groups are ever cleared.
    """

    def __init__(
        self,
        config: Optional[TrackConfig] = None,
        catalog: Optional[ObstacleCatalog] = None,
        star_template: Optional[EntityTemplate] = STAR,
        finish_template: Optional[EntityTemplate] = FINISH_GATE,
        scene: Optional[TrackScene] = None,
        instantiator: Optional[Instantiator] = None,
        estimator: Optional[BoundsEstimator] = None,
    ):
        self.config = config or TrackConfig()
        self.catalog = catalog if catalog is not None else default_obstacle_catalog()
        self.star_template = star_template
        self.finish_template = finish_template
        self.scene = scene or TrackScene()
        self.instantiator = instantiator or SceneInstantiator(self.scene)
        self.estimator = estimator or GeometryBoundsEstimator()

        self.layout: Optional[TrackLayout] = None
        self._generating = False

    @classmethod
    def from_preset(cls, name: str, **kwargs) -> "TrackGenerator":
        """Create a generator for a named preset from config.CONFIGS."""
        return cls(get_preset(name), **kwargs)

    @property
    def physics(self):
        return self.scene.physics

    def clear_generated(self) -> int:
        """Remove every generated group. Returns how many entities were destroyed."""
        removed = 0
        for name in GENERATED_GROUPS:
            group = self.scene.find_group(name)
            if group is None:
                continue
            removed += len(group)
            self.scene.remove_group(name)
        self.layout = None
        return removed

    def generate(self) -> TrackLayout:
        """Run one full generation pass.

        Returns:
            The layout record for this pass

        Raises:
            RuntimeError: If called while a pass on this generator is running.
        """
        if self._generating:
            raise RuntimeError("TrackGenerator.generate() is already running on this instance")
        self._generating = True
        try:
            return self._generate()
        finally:
            self._generating = False

    def _generate(self) -> TrackLayout:
        cfg, result = TrackConstraints.sanitize(self.config)
        for violation in result.violations:
            logger.warning(f"Config {violation.param}: {violation.message} ({violation.severity})")

        if cfg.clear_before_generate:
            removed = self.clear_generated()
            if removed:
                logger.debug(f"Cleared {removed} previously generated entities")

        scene = self.scene
        geometry = GeometryBuilder(cfg, scene.physics)
        ground = geometry.build_ground(scene.get_or_create_group(GROUND_GROUP)) if cfg.build_ground else None
        walls = geometry.build_walls(scene.get_or_create_group(WALLS_GROUP)) if cfg.build_walls else []

        finish = None
        if cfg.place_finish_line and self.finish_template is not None:
            finish = place_finish_gate(
                cfg,
                self.finish_template,
                self.instantiator,
                self.estimator,
                scene.get_or_create_group(FINISH_GROUP),
            )

        margin = lane_margin(cfg, self.catalog, self.instantiator, self.estimator)
        usable = usable_half_width(cfg, margin)
        lane_xs = compute_lane_xs(cfg.lane_count, usable)

        layout = TrackLayout(
            config=cfg,
            lane_xs=lane_xs,
            usable_half_width=usable,
            finish=finish,
            ground=ground,
            walls=walls,
        )

        streams = GenerationStreams.from_seed(cfg.seed)

        placer = ObstaclePlacer(
            cfg,
            self.catalog,
            self.instantiator,
            self.estimator,
            lane_xs,
            scene.get_or_create_group(OBSTACLES_GROUP),
        )
        layout.obstacles = placer.run(streams.obstacles)

        if cfg.place_stars and self.star_template is not None:
            star_placer = StarPlacer(
                cfg,
                self.star_template,
                self.instantiator,
                self.estimator,
                lane_xs,
                scene.get_or_create_group(STARS_GROUP),
            )
            layout.stars = star_placer.run(streams.stars, placer.placed_zs)
        else:
            logger.info("Star pass skipped (disabled or no star template)")

        logger.info(
            f"Generated track seed={cfg.seed}: {len(layout.obstacles)} obstacles, "
            f"{len(layout.stars)} stars across {len(lane_xs)} lanes"
        )
        self.layout = layout
        return layout
