"""Deterministic random streams for a generation pass.

Each placement pass draws from its own random.Random derived from the
config seed, so toggling one pass (e.g. stars off) never shifts the
sequence another pass sees. Streams are created fresh per pass and thrown
away afterwards.
"""

from dataclasses import dataclass
from random import Random
from typing import Iterator

# Stars use seed + offset so the obstacle stream is left untouched
STAR_SEED_OFFSET = 7919


@dataclass
class GenerationStreams:
    """The independent streams used by one pass."""
    obstacles: Random
    stars: Random

    @classmethod
    def from_seed(cls, seed: int) -> "GenerationStreams":
        return cls(
            obstacles=Random(seed),
            stars=Random(seed + STAR_SEED_OFFSET),
        )


def lerp_sample(rng: Random, lo: float, hi: float) -> float:
    """Uniform sample in [lo, hi] as lo + (hi - lo) * u."""
    return lo + (hi - lo) * rng.random()


def random_gaps(rng: Random, length: float, gap_min: float, gap_max: float) -> Iterator[float]:
    """Yield z from 0 while z <= length, advancing by a random gap after each yield.

    The gap is drawn only when the consumer asks for the next z, so any
    draws the consumer makes at the current z happen first.
    """
    g_min = max(0.01, gap_min)
    g_max = max(g_min, gap_max)
    z = 0.0
    while z <= length:
        yield z
        z += lerp_sample(rng, g_min, g_max)


def fixed_steps(length: float, step: float) -> Iterator[float]:
    """Yield z = 0, step, 2*step, ... while z <= length."""
    s = max(0.001, step)
    z = 0.0
    while z <= length:
        yield z
        z += s
