"""Config validation and sanitizing.

Ensures a generation pass never runs on a degenerate config by:
1. Validating individual parameter ranges (counts, lengths, probabilities)
2. Checking cross-parameter consistency (gap ranges ordered, track wide
   enough for the approximate obstacle)
3. Producing a clamped copy the generator can run on

A "valid" config means generation is well-defined, not that the resulting
track is easy or interesting.
"""

from dataclasses import dataclass, replace
from typing import List, Tuple

from .config import TrackConfig
from .lanes import MIN_USABLE_HALF_WIDTH


@dataclass
class ConstraintViolation:
    """Describes a constraint violation."""
    param: str
    message: str
    severity: str  # "error" = would break generation, "warning" = generation degrades


@dataclass
class ConstraintResult:
    """Result of constraint validation."""
    valid: bool
    violations: List[ConstraintViolation]

    def __bool__(self) -> bool:
        return self.valid

    @property
    def errors(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> List[ConstraintViolation]:
        return [v for v in self.violations if v.severity == "warning"]


class TrackConstraints:
    """Defines and checks constraints on track parameters.

    Errors mark values the generator cannot use as-is (they are clamped by
    sanitize). Warnings mark values that are usable but produce a degraded
    track, e.g. no room between the walls for any obstacle.
    """

    MIN_GAP = 0.01
    MIN_STEP = 0.001
    MIN_SCALE = 0.01

    @classmethod
    def validate(cls, config: TrackConfig) -> ConstraintResult:
        """Validate a config without changing it."""
        violations = []

        if config.lane_count < 1:
            violations.append(ConstraintViolation(
                "lane_count",
                f"Lane count {config.lane_count} < 1",
                "error"
            ))
        if config.track_length < 0:
            violations.append(ConstraintViolation(
                "track_length",
                f"Track length {config.track_length} is negative",
                "error"
            ))
        if config.half_track_width < MIN_USABLE_HALF_WIDTH:
            violations.append(ConstraintViolation(
                "half_track_width",
                f"Half track width {config.half_track_width} < min {MIN_USABLE_HALF_WIDTH}",
                "error"
            ))
        if config.wall_thickness < 0:
            violations.append(ConstraintViolation(
                "wall_thickness",
                f"Wall thickness {config.wall_thickness} is negative",
                "error"
            ))

        # Gap ranges
        for lo_name, hi_name in (("gap_min", "gap_max"), ("star_gap_min", "star_gap_max")):
            lo, hi = getattr(config, lo_name), getattr(config, hi_name)
            if lo < cls.MIN_GAP:
                violations.append(ConstraintViolation(
                    lo_name,
                    f"{lo_name} {lo} < min {cls.MIN_GAP}",
                    "error"
                ))
            if hi < lo:
                violations.append(ConstraintViolation(
                    hi_name,
                    f"{hi_name} {hi} < {lo_name} {lo}",
                    "error"
                ))
        if not config.use_random_gaps and config.step < cls.MIN_STEP:
            violations.append(ConstraintViolation(
                "step",
                f"Step {config.step} < min {cls.MIN_STEP}",
                "error"
            ))

        # Probabilities
        for name in ("spawn_probability", "star_row_probability"):
            p = getattr(config, name)
            if not (0.0 <= p <= 1.0):
                violations.append(ConstraintViolation(
                    name,
                    f"{name} {p} outside [0, 1]",
                    "error"
                ))

        # Non-negative counts and distances
        for name in ("min_forward_gap", "history_window", "max_same_lane_streak", "star_clearance_z"):
            value = getattr(config, name)
            if value < 0:
                violations.append(ConstraintViolation(
                    name,
                    f"{name} {value} is negative",
                    "error"
                ))

        lo, hi = config.scale_range
        if lo > hi or lo < cls.MIN_SCALE:
            violations.append(ConstraintViolation(
                "scale_range",
                f"Scale range {config.scale_range} must be ordered and >= {cls.MIN_SCALE}",
                "error"
            ))

        # Cross-parameter: room for at least the approximate obstacle
        if config.wall_clearance_half_width <= config.obstacle_approx_half_width:
            violations.append(ConstraintViolation(
                "half_track_width",
                f"Wall clearance {config.wall_clearance_half_width:.3f} leaves no room for "
                f"obstacles of half-width {config.obstacle_approx_half_width}",
                "warning"
            ))
        if config.min_forward_gap > config.track_length > 0 and config.lane_count == 1:
            violations.append(ConstraintViolation(
                "min_forward_gap",
                f"Forward gap {config.min_forward_gap} exceeds track length; at most one obstacle fits",
                "warning"
            ))

        errors = [v for v in violations if v.severity == "error"]
        return ConstraintResult(valid=len(errors) == 0, violations=violations)

    @classmethod
    def sanitize(cls, config: TrackConfig) -> Tuple[TrackConfig, ConstraintResult]:
        """Return a clamped copy of the config plus the validation result.

        The input config is never modified.
        """
        result = cls.validate(config)

        gap_min = max(cls.MIN_GAP, config.gap_min)
        star_gap_min = max(cls.MIN_GAP, config.star_gap_min)
        scale_lo, scale_hi = sorted(config.scale_range)
        scale_lo = max(cls.MIN_SCALE, scale_lo)

        clean = replace(
            config,
            lane_count=max(1, int(config.lane_count)),
            track_length=max(0.0, config.track_length),
            half_track_width=max(MIN_USABLE_HALF_WIDTH, config.half_track_width),
            wall_thickness=max(0.0, config.wall_thickness),
            gap_min=gap_min,
            gap_max=max(gap_min, config.gap_max),
            star_gap_min=star_gap_min,
            star_gap_max=max(star_gap_min, config.star_gap_max),
            step=max(cls.MIN_STEP, config.step),
            spawn_probability=min(1.0, max(0.0, config.spawn_probability)),
            star_row_probability=min(1.0, max(0.0, config.star_row_probability)),
            min_forward_gap=max(0.0, config.min_forward_gap),
            history_window=max(0, int(config.history_window)),
            max_same_lane_streak=max(0, int(config.max_same_lane_streak)),
            star_clearance_z=max(0.0, config.star_clearance_z),
            scale_range=(scale_lo, max(scale_lo, scale_hi)),
        )
        return clean, result
