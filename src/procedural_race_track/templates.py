"""Built-in entity templates and the default obstacle catalog.

Dimensions are in metres with the pivot at the template's base center.
"""

from .catalog import ObstacleCatalog, WeightedEntry
from .entities import EntityTemplate, TemplatePart
from .physics import COLLISION_OBSTACLE, COLLISION_STAR, COLLISION_FINISH


# Single tall column
COLUMN = EntityTemplate(
    name="column",
    parts=(TemplatePart(center=(0.0, 1.5, 0.0), size=(0.5, 3.0, 0.5)),),
    tags=frozenset({"obstacle"}),
    collision_type=COLLISION_OBSTACLE,
)

# Low wide barrier
BARRIER = EntityTemplate(
    name="barrier",
    parts=(TemplatePart(center=(0.0, 0.4, 0.0), size=(1.6, 0.8, 0.4)),),
    tags=frozenset({"obstacle"}),
    collision_type=COLLISION_OBSTACLE,
)

# Central pivot with two orbiting hazards; the orbs' sweep is visual only
ORBIT_HAZARD = EntityTemplate(
    name="orbit_hazard",
    parts=(
        TemplatePart(center=(0.0, 0.6, 0.0), size=(0.3, 1.2, 0.3)),
        TemplatePart(center=(-0.9, 1.0, 0.0), size=(0.35, 0.35, 0.35), collider=False),
        TemplatePart(center=(0.9, 1.0, 0.0), size=(0.35, 0.35, 0.35), collider=False),
    ),
    tags=frozenset({"obstacle", "moving"}),
    collision_type=COLLISION_OBSTACLE,
)

# Two panels that slide apart, plus a visual frame
SLIDING_GATE = EntityTemplate(
    name="sliding_gate",
    parts=(
        TemplatePart(center=(-0.6, 0.75, 0.0), size=(1.0, 1.5, 0.2)),
        TemplatePart(center=(0.6, 0.75, 0.0), size=(1.0, 1.5, 0.2)),
        TemplatePart(center=(0.0, 1.65, 0.0), size=(2.2, 0.2, 0.3), collider=False),
    ),
    tags=frozenset({"obstacle", "moving"}),
    collision_type=COLLISION_OBSTACLE,
)

# Pickup: a small trigger volume
STAR = EntityTemplate(
    name="star",
    parts=(TemplatePart(center=(0.0, 0.25, 0.0), size=(0.5, 0.5, 0.5), sensor=True),),
    tags=frozenset({"star"}),
    collision_type=COLLISION_STAR,
)

# Finish gate: 3 m reference width, two posts, trigger plane, banner
FINISH_GATE = EntityTemplate(
    name="finish_gate",
    parts=(
        TemplatePart(center=(-1.4, 1.5, 0.0), size=(0.2, 3.0, 0.2)),
        TemplatePart(center=(1.4, 1.5, 0.0), size=(0.2, 3.0, 0.2)),
        TemplatePart(center=(0.0, 1.25, 0.0), size=(2.6, 2.5, 0.1), sensor=True),
        TemplatePart(center=(0.0, 2.8, 0.0), size=(3.0, 0.4, 0.1), collider=False),
    ),
    tags=frozenset({"finish"}),
    collision_type=COLLISION_FINISH,
)


def default_obstacle_catalog() -> ObstacleCatalog:
    """The standard obstacle mix: mostly columns, some barriers and moving hazards."""
    return ObstacleCatalog([
        WeightedEntry(COLUMN, 3.0),
        WeightedEntry(BARRIER, 2.0),
        WeightedEntry(ORBIT_HAZARD, 1.0),
        WeightedEntry(SLIDING_GATE, 1.0),
    ])
