"""Lane selection: uniform pick and the variety-scored ("blue-noise") pick.

Both strategies are pure functions of (candidates, history, params, rng,
band) so they can be exercised without any scene or geometry.

Variety score for a candidate lane with clamped offset x:

    score = u * tie_break_jitter
          + sum_k blue_noise_weight * recency_decay**k * |x - x_k|   (k = 0 newest)
          + unused_lane_bonus   if the lane is absent from the history
          + in_band_bonus       if the nominal offset needs no clamping
          - same_lane_penalty   if the lane repeats the previous one and the
                                streak has reached max_same_lane_streak

The highest score wins; on an exact tie the lowest lane index wins.
"""

from collections import deque
from dataclasses import dataclass
from random import Random
from typing import Deque, Iterator, List, Optional, Sequence, Tuple

from .config import TrackConfig, LaneSelectionMode


@dataclass(frozen=True)
class LaneCandidate:
    """A lane that satisfies the forward-gap rule at the current z."""
    lane: int
    nominal_x: float


@dataclass(frozen=True)
class LaneChoice:
    """Chosen lane and its resolved x-offset."""
    lane: int
    x: float
    score: float = 0.0


@dataclass(frozen=True)
class VarietyParams:
    """The subset of TrackConfig the lane selectors read."""
    use_blue_noise: bool = True
    blue_noise_weight: float = 1.0
    recency_decay: float = 0.65
    unused_lane_bonus: float = 0.5
    in_band_bonus: float = 0.1
    tie_break_jitter: float = 0.01
    max_same_lane_streak: int = 2
    same_lane_penalty: float = 1000.0
    lane_jitter: float = 0.0

    @classmethod
    def from_config(cls, config: TrackConfig) -> "VarietyParams":
        return cls(
            use_blue_noise=config.use_blue_noise,
            blue_noise_weight=config.blue_noise_weight,
            recency_decay=config.recency_decay,
            unused_lane_bonus=config.unused_lane_bonus,
            in_band_bonus=config.in_band_bonus,
            tie_break_jitter=config.tie_break_jitter,
            max_same_lane_streak=config.max_same_lane_streak,
            same_lane_penalty=config.same_lane_penalty,
            lane_jitter=config.lane_jitter,
        )


class PlacementHistory:
    """Bounded FIFO of recent (x, lane) placements plus the same-lane streak.

    The window only bounds what the blue-noise term sees; the streak counter
    tracks the full run of the most recent lane.
    """

    def __init__(self, window: int = 6):
        self.window = max(0, window)
        self._entries: Deque[Tuple[float, int]] = deque(maxlen=self.window)
        self.last_lane: Optional[int] = None
        self.streak = 0

    def record(self, x: float, lane: int) -> None:
        if self.window > 0:
            self._entries.append((x, lane))
        if lane == self.last_lane:
            self.streak += 1
        else:
            self.last_lane = lane
            self.streak = 1

    def clear(self) -> None:
        self._entries.clear()
        self.last_lane = None
        self.streak = 0

    def newest_first(self) -> Iterator[Tuple[float, int]]:
        return reversed(self._entries)

    @property
    def lanes(self) -> set:
        return {lane for _, lane in self._entries}

    def __len__(self) -> int:
        return len(self._entries)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def streak_capped(lane: int, history: PlacementHistory, params: VarietyParams) -> bool:
    """Whether placing in this lane would exceed the same-lane streak cap."""
    return (
        params.max_same_lane_streak > 0
        and lane == history.last_lane
        and history.streak >= params.max_same_lane_streak
    )


def score_lane(
    candidate: LaneCandidate,
    x: float,
    history: PlacementHistory,
    params: VarietyParams,
    band: float,
    tie_break: float,
) -> float:
    """Variety score of one candidate (see module docstring)."""
    score = tie_break * params.tie_break_jitter

    if params.use_blue_noise:
        weight = params.blue_noise_weight
        for hx, _ in history.newest_first():
            score += weight * abs(x - hx)
            weight *= params.recency_decay

    if candidate.lane not in history.lanes:
        score += params.unused_lane_bonus
    if abs(candidate.nominal_x) <= band:
        score += params.in_band_bonus
    if streak_capped(candidate.lane, history, params):
        score -= params.same_lane_penalty
    return score


def select_lane_uniform(
    candidates: Sequence[LaneCandidate],
    params: VarietyParams,
    rng: Random,
    band: float,
) -> Optional[LaneChoice]:
    """Uniform pick; the nominal offset is clamped into the band, then optionally jittered."""
    if not candidates:
        return None
    candidate = candidates[rng.randrange(len(candidates))]
    x = clamp(candidate.nominal_x, -band, band)
    if params.lane_jitter > 0:
        x = clamp(x + (rng.random() * 2.0 - 1.0) * params.lane_jitter, -band, band)
    return LaneChoice(candidate.lane, x)


def select_lane_scored(
    candidates: Sequence[LaneCandidate],
    history: PlacementHistory,
    params: VarietyParams,
    rng: Random,
    band: float,
) -> Optional[LaneChoice]:
    """Max-score pick. Returns None when the only winner would break the streak cap."""
    if not candidates:
        return None

    best: Optional[LaneChoice] = None
    for candidate in candidates:
        # One tie-break draw per candidate keeps the stream aligned
        tie_break = rng.random()
        x = clamp(candidate.nominal_x, -band, band)
        score = score_lane(candidate, x, history, params, band, tie_break)
        if best is None or score > best.score:
            best = LaneChoice(candidate.lane, x, score)

    if best is not None and streak_capped(best.lane, history, params):
        return None
    return best


def select_lane(
    candidates: Sequence[LaneCandidate],
    history: PlacementHistory,
    params: VarietyParams,
    rng: Random,
    band: float,
    mode: LaneSelectionMode = LaneSelectionMode.VARIETY,
) -> Optional[LaneChoice]:
    """Dispatch to the configured lane selection strategy."""
    if mode == LaneSelectionMode.UNIFORM:
        return select_lane_uniform(candidates, params, rng, band)
    return select_lane_scored(candidates, history, params, rng, band)


def candidates_inside_band(candidates: Sequence[LaneCandidate], band: float) -> List[LaneCandidate]:
    """Candidates whose nominal offset fits the band without clamping."""
    return [c for c in candidates if abs(c.nominal_x) <= band]
