"""Scene graph and the instantiation capability.

A TrackScene is a flat set of named EntityGroups over one TrackPhysics.
The generator owns a fixed set of groups (see track_gen) and clears them by
name; anything a host places in other groups is never touched.
"""

import logging
from typing import Dict, Iterator, List, Optional, Protocol

from .entities import Entity, EntityTemplate
from .physics import TrackPhysics

logger = logging.getLogger(__name__)


class EntityGroup:
    """Named collection of entities removable as a unit."""

    def __init__(self, name: str):
        self.name = name
        self.entities: List[Entity] = []

    def add(self, entity: Entity) -> None:
        entity.group = self
        self.entities.append(entity)

    def remove(self, entity: Entity) -> None:
        if entity in self.entities:
            self.entities.remove(entity)
            entity.group = None

    def clear(self) -> int:
        """Destroy every entity in the group. Returns how many were removed."""
        count = len(self.entities)
        for entity in self.entities:
            entity.destroy()
            entity.group = None
        self.entities = []
        return count

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)


class TrackScene:
    """Host scene holding generated and hand-placed entity groups."""

    def __init__(self, physics: Optional[TrackPhysics] = None):
        self.physics = physics or TrackPhysics()
        self._groups: Dict[str, EntityGroup] = {}

    @property
    def group_names(self) -> List[str]:
        return list(self._groups)

    def find_group(self, name: str) -> Optional[EntityGroup]:
        return self._groups.get(name)

    def get_or_create_group(self, name: str) -> EntityGroup:
        group = self._groups.get(name)
        if group is None:
            group = EntityGroup(name)
            self._groups[name] = group
        return group

    def remove_group(self, name: str) -> bool:
        """Destroy a group and all its entities. Returns False if it did not exist."""
        group = self._groups.pop(name, None)
        if group is None:
            return False
        removed = group.clear()
        logger.debug(f"Removed group {name} ({removed} entities)")
        return True

    def add_entity(self, group_name: str, entity: Entity) -> Entity:
        """Place an already-built entity (e.g. hand-authored content) into a group."""
        self.get_or_create_group(group_name).add(entity)
        entity.spawn()
        return entity

    def entities(self) -> List[Entity]:
        return [e for group in self._groups.values() for e in group]

    def entities_with_tag(self, tag: str) -> List[Entity]:
        return [e for e in self.entities() if tag in e.tags]


class Instantiator(Protocol):
    """Capability that turns a template into a live entity handle."""

    def instantiate(self, template: EntityTemplate, group: Optional[EntityGroup]) -> Entity:
        ...

    def destroy(self, entity: Entity) -> None:
        ...


class SceneInstantiator:
    """Instantiates templates into a TrackScene's physics space.

    With group=None the entity is detached: it has shapes for measurement
    but is not added to the space (used for catalog width probes).
    """

    def __init__(self, scene: TrackScene):
        self.scene = scene

    def instantiate(self, template: EntityTemplate, group: Optional[EntityGroup]) -> Entity:
        index = len(group) if group is not None else "probe"
        entity = Entity(
            self.scene.physics,
            name=f"{template.name}_{index}",
            template=template,
        )
        if group is not None:
            group.add(entity)
            entity.spawn()
        return entity

    def destroy(self, entity: Entity) -> None:
        if entity.group is not None:
            entity.group.remove(entity)
        entity.destroy()
