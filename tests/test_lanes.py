"""Tests for lane layout and wall margins."""

import pytest

from procedural_race_track.catalog import ObstacleCatalog
from procedural_race_track.config import LaneMarginMode, TrackConfig
from procedural_race_track.lanes import (
    MIN_USABLE_HALF_WIDTH,
    catalog_max_half_width,
    compute_lane_xs,
    lane_margin,
    lane_slots,
    usable_half_width,
)
from procedural_race_track.templates import COLUMN, default_obstacle_catalog


class TestComputeLaneXs:
    def test_three_lanes(self):
        assert compute_lane_xs(3, 3.0) == pytest.approx([-3.0, 0.0, 3.0])

    def test_two_lanes(self):
        assert compute_lane_xs(2, 1.0) == pytest.approx([-1.0, 1.0])

    def test_single_lane_is_centered(self):
        assert compute_lane_xs(1, 3.0) == [0.0]

    def test_non_positive_count_is_one_lane(self):
        assert compute_lane_xs(0, 3.0) == [0.0]
        assert compute_lane_xs(-4, 3.0) == [0.0]

    def test_even_spacing(self):
        xs = compute_lane_xs(5, 2.0)
        gaps = [b - a for a, b in zip(xs, xs[1:])]
        assert gaps == pytest.approx([1.0] * 4)

    def test_lane_slots(self):
        slots = lane_slots(3, 1.0)
        assert [s.index for s in slots] == [0, 1, 2]
        assert slots[2].x == pytest.approx(1.0)


class TestUsableHalfWidth:
    def test_default(self):
        # 4.0 - 0.25 / 2 - 0.25
        assert usable_half_width(TrackConfig()) == pytest.approx(3.625)

    def test_margin_subtracted(self):
        assert usable_half_width(TrackConfig(), margin=0.5) == pytest.approx(3.125)

    def test_floored(self):
        assert usable_half_width(TrackConfig(half_track_width=0.2)) == MIN_USABLE_HALF_WIDTH


class TestLaneMargin:
    def test_none(self):
        assert lane_margin(TrackConfig(lane_margin_mode=LaneMarginMode.NONE)) == 0.0

    def test_approx(self):
        config = TrackConfig(lane_margin_mode=LaneMarginMode.APPROX, obstacle_approx_half_width=0.4)
        assert lane_margin(config) == pytest.approx(0.4)

    def test_catalog_without_inputs_falls_back(self):
        assert lane_margin(TrackConfig()) == pytest.approx(0.25)

    def test_catalog_single_column(self, instantiator, estimator):
        config = TrackConfig(random_yaw=False)
        catalog = ObstacleCatalog.uniform([COLUMN])
        assert lane_margin(config, catalog, instantiator, estimator) == pytest.approx(0.25)

    def test_catalog_accounts_for_scale(self, instantiator, estimator):
        config = TrackConfig(random_yaw=False, random_uniform_scale=True, scale_range=(1.0, 2.0))
        catalog = ObstacleCatalog.uniform([COLUMN])
        assert lane_margin(config, catalog, instantiator, estimator) == pytest.approx(0.5)

    def test_catalog_widest_entry_with_yaw(self, instantiator, estimator):
        config = TrackConfig()
        worst = catalog_max_half_width(default_obstacle_catalog(), config, instantiator, estimator)
        # The sliding gate reaches 1.1 unrotated; yaw only widens it
        assert worst > 1.1

    def test_probes_leave_no_trace(self, scene, instantiator, estimator):
        catalog_max_half_width(default_obstacle_catalog(), TrackConfig(), instantiator, estimator)
        assert len(scene.physics.space.shapes) == 0
        assert scene.entities() == []

    def test_empty_catalog(self, instantiator, estimator):
        config = TrackConfig()
        assert catalog_max_half_width(ObstacleCatalog(), config, instantiator, estimator) is None
        assert lane_margin(config, ObstacleCatalog(), instantiator, estimator) == pytest.approx(0.25)
