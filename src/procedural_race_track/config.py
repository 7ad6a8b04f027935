"""Configuration system for procedural track generation.

TrackConfig holds every tunable parameter of a generation pass:
- Track shape (length, lanes, half width)
- Ground and wall geometry
- Obstacle spawning, spacing, and wall clearance
- Lane selection strategy and variety heuristic weights
- Star (collectible) rows
- Finish gate placement
- Lifecycle flags

A config is supplied by the caller and treated as read-only for the duration
of one pass; the generator works on a sanitized copy.
"""

from dataclasses import dataclass, fields, asdict, replace
from enum import Enum
from typing import Tuple, Dict, Any, ClassVar, Optional
import random


class LaneSelectionMode(Enum):
    """How a lane is picked among the candidates at a given z."""
    UNIFORM = "uniform"  # Uniform pick among valid lanes
    VARIETY = "variety"  # Blue-noise scored pick with streak cap


class LaneMarginMode(Enum):
    """Extra margin subtracted from the usable half-width when laying out lanes."""
    NONE = "none"  # Lane centers span the full usable half-width
    APPROX = "approx"  # Subtract obstacle_approx_half_width
    CATALOG = "catalog"  # Subtract the widest measured obstacle in the catalog


@dataclass
class TrackConfig:
    """All parameters of one track generation pass.

    Distances are in metres along the track's local frame: x is lateral
    (negative = left wall), y is up, z runs forward from the start line.
    """

    # === DETERMINISM ===
    seed: int = 12345

    # === TRACK ===
    track_length: float = 500.0
    lane_count: int = 3
    half_track_width: float = 4.0  # Wall centers live at +/- this offset
    step: float = 5.0  # Z increment when use_random_gaps is False

    # === GROUND (auto-built) ===
    build_ground: bool = True
    ground_y: float = 0.0
    add_ground_collider: bool = True
    ground_collider_thickness: float = 0.2
    ground_uv_tiles_per_unit: Tuple[float, float] = (0.1, 0.1)

    # === WALLS (auto-built) ===
    build_walls: bool = True
    wall_height: float = 2.5
    wall_thickness: float = 0.25
    add_wall_colliders: bool = True

    # === OBSTACLE SPAWNING ===
    spawn_probability: float = 0.35
    always_spawn_at_gap: bool = False  # Skip the spawn roll at every gap
    min_forward_gap: float = 8.0  # Minimum z distance between obstacles in the same lane
    y_offset: float = 0.0  # Extra lift after grounding obstacles

    # === SPACING RANDOMIZATION ===
    use_random_gaps: bool = True
    gap_min: float = 6.0
    gap_max: float = 14.0

    # === X BOUNDS SAFETY ===
    obstacle_padding_from_wall: float = 0.25  # Margin from the inner wall face
    obstacle_approx_half_width: float = 0.25  # Fallback when an obstacle has no measurable geometry
    lane_margin_mode: LaneMarginMode = LaneMarginMode.CATALOG
    lane_jitter: float = 0.0  # Max lateral jitter in uniform lane mode

    # === LANE SELECTION / VARIETY ===
    lane_selection: LaneSelectionMode = LaneSelectionMode.VARIETY
    use_blue_noise: bool = True
    blue_noise_weight: float = 1.0
    history_window: int = 6  # Recent placements remembered by the variety heuristic
    recency_decay: float = 0.65  # Per-step weight decay for older history entries
    unused_lane_bonus: float = 0.5
    in_band_bonus: float = 0.1
    tie_break_jitter: float = 0.01
    max_same_lane_streak: int = 2  # 0 disables the cap
    same_lane_penalty: float = 1000.0

    # === ROTATION / SCALE VARIATION (deterministic) ===
    random_yaw: bool = True
    max_yaw_degrees: float = 12.0
    random_uniform_scale: bool = False
    scale_range: Tuple[float, float] = (0.9, 1.1)
    defer_scale_until_after_lane: bool = False  # Apply scale after lane choice (forces re-measure)

    # === STARS ===
    place_stars: bool = True
    star_gap_min: float = 4.0
    star_gap_max: float = 10.0
    star_row_probability: float = 0.5
    prevent_star_obstacle_overlap: bool = True
    star_clearance_z: float = 3.0
    star_y_offset: float = 0.5

    # === FINISH LINE ===
    place_finish_line: bool = True
    finish_z_offset: float = 0.0
    finish_y_offset: float = 0.0
    finish_yaw_degrees: float = 180.0  # Faces back toward the start when racing +z
    auto_scale_finish_to_track_width: bool = True
    finish_prefab_approx_width: float = 3.0

    # === LIFECYCLE ===
    clear_before_generate: bool = True

    # === DERIVED VALUES ===

    @property
    def inner_half_width(self) -> float:
        """Distance from track center to the inner face of a wall."""
        return self.half_track_width - self.wall_thickness * 0.5

    @property
    def usable_track_width(self) -> float:
        """Width between the inner wall faces."""
        return self.half_track_width * 2.0 - max(0.0, self.wall_thickness)

    @property
    def wall_clearance_half_width(self) -> float:
        """Half-span an obstacle's geometry may occupy without entering wall padding."""
        return self.inner_half_width - self.obstacle_padding_from_wall

    # === SAMPLING RANGES ===

    TRACK_LENGTH_RANGE: ClassVar[Tuple[float, float]] = (200.0, 1200.0)
    LANE_COUNT_RANGE: ClassVar[Tuple[int, int]] = (1, 5)
    HALF_TRACK_WIDTH_RANGE: ClassVar[Tuple[float, float]] = (3.0, 8.0)
    SPAWN_PROBABILITY_RANGE: ClassVar[Tuple[float, float]] = (0.2, 0.8)
    MIN_FORWARD_GAP_RANGE: ClassVar[Tuple[float, float]] = (4.0, 14.0)
    MAX_YAW_RANGE: ClassVar[Tuple[float, float]] = (0.0, 25.0)
    STAR_ROW_PROBABILITY_RANGE: ClassVar[Tuple[float, float]] = (0.2, 0.8)

    @classmethod
    def sample(cls, seed: Optional[int] = None) -> "TrackConfig":
        """Sample a random but well-formed config.

        Args:
            seed: Seed for the sampler itself. The sampled config gets its own
                generation seed drawn from the same stream.
        """
        rng = random.Random(seed)
        return cls(
            seed=rng.randint(0, 2**31 - 1),
            track_length=rng.uniform(*cls.TRACK_LENGTH_RANGE),
            lane_count=rng.randint(*cls.LANE_COUNT_RANGE),
            half_track_width=rng.uniform(*cls.HALF_TRACK_WIDTH_RANGE),
            spawn_probability=rng.uniform(*cls.SPAWN_PROBABILITY_RANGE),
            min_forward_gap=rng.uniform(*cls.MIN_FORWARD_GAP_RANGE),
            max_yaw_degrees=rng.uniform(*cls.MAX_YAW_RANGE),
            star_row_probability=rng.uniform(*cls.STAR_ROW_PROBABILITY_RANGE),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a flat dictionary of plain values (enums by value)."""
        d = asdict(self)
        d["lane_margin_mode"] = self.lane_margin_mode.value
        d["lane_selection"] = self.lane_selection.value
        d["ground_uv_tiles_per_unit"] = list(self.ground_uv_tiles_per_unit)
        d["scale_range"] = list(self.scale_range)
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackConfig":
        """Create from dictionary. Unknown keys are ignored, missing keys keep defaults."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in d.items() if k in known}
        if "lane_margin_mode" in kwargs:
            kwargs["lane_margin_mode"] = LaneMarginMode(kwargs["lane_margin_mode"])
        if "lane_selection" in kwargs:
            kwargs["lane_selection"] = LaneSelectionMode(kwargs["lane_selection"])
        for pair in ("ground_uv_tiles_per_unit", "scale_range"):
            if pair in kwargs:
                kwargs[pair] = tuple(kwargs[pair])
        return cls(**kwargs)


# Predefined configurations for authoring/demo
CONFIGS = {
    # Default three-lane sprint
    "default": TrackConfig(),

    # Shared daily challenge: fixed seed, denser obstacles
    "daily": TrackConfig(
        seed=20240101,
        track_length=800.0,
        spawn_probability=0.5,
    ),

    # Dense: every gap spawns, tight forward spacing
    "dense": TrackConfig(
        always_spawn_at_gap=True,
        min_forward_gap=5.0,
        gap_min=3.0,
        gap_max=7.0,
    ),

    # Wide: five lanes with scale variation
    "wide": TrackConfig(
        lane_count=5,
        half_track_width=7.0,
        random_uniform_scale=True,
        scale_range=(0.8, 1.3),
    ),

    # Single lane: a corridor run, stars dodge every obstacle
    "single_lane": TrackConfig(
        lane_count=1,
        half_track_width=2.0,
        max_same_lane_streak=0,
        star_clearance_z=5.0,
    ),

    # Classic: plain uniform lane pick with a fixed approximate margin
    "classic": TrackConfig(
        lane_selection=LaneSelectionMode.UNIFORM,
        lane_margin_mode=LaneMarginMode.APPROX,
        always_spawn_at_gap=True,
    ),
}


def get_preset(name: str) -> TrackConfig:
    """Look up a preset by name.

    Raises:
        ValueError: If no preset has that name.
    """
    if name not in CONFIGS:
        raise ValueError(f"Unknown preset: {name} (choose from {', '.join(sorted(CONFIGS))})")
    return replace(CONFIGS[name])
