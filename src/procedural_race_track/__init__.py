"""procedural-race-track: seeded lane-based racing track layout generator.

Builds the playable layout of a racing level from a seed and a TrackConfig:
ground strip, bounding walls, weighted obstacles spread across lanes with a
blue-noise variety heuristic, collectible star rows, and a finish gate.
Collision footprints live in a pymunk space so hosts can wire gameplay hooks.
"""

from .config import TrackConfig, LaneSelectionMode, LaneMarginMode, CONFIGS, get_preset
from .constraints import TrackConstraints, ConstraintResult, ConstraintViolation
from .physics import TrackPhysics, GameplayHooks
from .entities import Entity, EntityTemplate, TemplatePart
from .scene import TrackScene, SceneInstantiator
from .bounds import GeometryBoundsEstimator
from .catalog import ObstacleCatalog, WeightedEntry
from .templates import default_obstacle_catalog
from .track_gen import TrackGenerator, TrackLayout

__all__ = [
    "TrackConfig",
    "LaneSelectionMode",
    "LaneMarginMode",
    "CONFIGS",
    "get_preset",
    "TrackConstraints",
    "ConstraintResult",
    "ConstraintViolation",
    "TrackPhysics",
    "GameplayHooks",
    "Entity",
    "EntityTemplate",
    "TemplatePart",
    "TrackScene",
    "SceneInstantiator",
    "GeometryBoundsEstimator",
    "ObstacleCatalog",
    "WeightedEntry",
    "default_obstacle_catalog",
    "TrackGenerator",
    "TrackLayout",
]
