"""Weighted obstacle catalog and discrete type sampling."""

from dataclasses import dataclass
from random import Random
from typing import Dict, Iterable, List, Optional

from .entities import EntityTemplate


@dataclass(frozen=True)
class WeightedEntry:
    """A template plus its relative spawn weight. Weight <= 0 disables it."""
    template: EntityTemplate
    weight: float = 1.0


class ObstacleCatalog:
    """Defines the obstacle-type distribution.

    Usage:
        catalog = ObstacleCatalog([WeightedEntry(COLUMN, 3.0), WeightedEntry(BARRIER, 1.0)])
        entry = catalog.sample(rng)
    """

    def __init__(self, entries: Iterable[WeightedEntry] = ()):
        self.entries: List[WeightedEntry] = list(entries)

    @classmethod
    def uniform(cls, templates: Iterable[EntityTemplate]) -> "ObstacleCatalog":
        """Catalog where every template has weight 1."""
        return cls(WeightedEntry(t, 1.0) for t in templates)

    @property
    def active_entries(self) -> List[WeightedEntry]:
        """Entries that can actually be sampled (weight > 0)."""
        return [e for e in self.entries if e.weight > 0]

    @property
    def total_weight(self) -> float:
        return sum(e.weight for e in self.active_entries)

    @property
    def is_empty(self) -> bool:
        """True when nothing can be sampled (no entries or all weights <= 0)."""
        return self.total_weight <= 0

    def __len__(self) -> int:
        return len(self.entries)

    def sample(self, rng: Random) -> Optional[WeightedEntry]:
        """Draw one entry with probability weight / total_weight.

        Draws u ~ Uniform(0, total) and returns the first entry whose
        cumulative weight reaches u. Returns None for an empty catalog
        without consuming randomness.
        """
        active = self.active_entries
        total = sum(e.weight for e in active)
        if total <= 0:
            return None

        u = rng.random() * total
        cumulative = 0.0
        for entry in active:
            cumulative += entry.weight
            if cumulative >= u:
                return entry
        # Float round-off can leave u a hair above the final cumulative sum
        return active[-1]

    def probabilities(self) -> Dict[str, float]:
        """Expected sampling frequency per template name."""
        total = self.total_weight
        if total <= 0:
            return {}
        probs: Dict[str, float] = {}
        for entry in self.active_entries:
            probs[entry.template.name] = probs.get(entry.template.name, 0.0) + entry.weight / total
        return probs
