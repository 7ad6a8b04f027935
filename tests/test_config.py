"""Tests for the configuration system."""

import pytest

from procedural_race_track.config import (
    CONFIGS,
    LaneMarginMode,
    LaneSelectionMode,
    TrackConfig,
    get_preset,
)


class TestTrackConfig:
    def test_defaults(self, track_config):
        config = track_config
        assert config.seed == 12345
        assert config.lane_count == 3
        assert config.lane_selection == LaneSelectionMode.VARIETY
        assert config.lane_margin_mode == LaneMarginMode.CATALOG
        assert config.finish_yaw_degrees == 180.0

    def test_derived_widths(self):
        config = TrackConfig(half_track_width=4.0, wall_thickness=0.5, obstacle_padding_from_wall=0.25)
        assert config.inner_half_width == pytest.approx(3.75)
        assert config.usable_track_width == pytest.approx(7.5)
        assert config.wall_clearance_half_width == pytest.approx(3.5)

    def test_usable_width_ignores_negative_thickness(self):
        config = TrackConfig(half_track_width=4.0, wall_thickness=-1.0)
        assert config.usable_track_width == pytest.approx(8.0)

    def test_to_dict_uses_plain_values(self):
        d = TrackConfig(lane_selection=LaneSelectionMode.UNIFORM).to_dict()
        assert d["lane_selection"] == "uniform"
        assert d["lane_margin_mode"] == "catalog"
        assert d["scale_range"] == [0.9, 1.1]

    def test_from_dict_roundtrip(self):
        original = TrackConfig(seed=99, lane_count=5, lane_margin_mode=LaneMarginMode.NONE, scale_range=(0.5, 2.0))
        restored = TrackConfig.from_dict(original.to_dict())
        assert restored == original

    def test_from_dict_ignores_unknown_keys(self):
        config = TrackConfig.from_dict({"seed": 7, "not_a_field": 1})
        assert config.seed == 7
        assert config.track_length == TrackConfig().track_length


class TestSampling:
    def test_sample_within_ranges(self):
        for seed in range(20):
            config = TrackConfig.sample(seed)
            lo, hi = TrackConfig.LANE_COUNT_RANGE
            assert lo <= config.lane_count <= hi
            lo, hi = TrackConfig.TRACK_LENGTH_RANGE
            assert lo <= config.track_length <= hi
            assert 0.0 <= config.spawn_probability <= 1.0

    def test_sample_is_reproducible(self):
        assert TrackConfig.sample(3) == TrackConfig.sample(3)

    def test_sample_varies_with_seed(self):
        assert TrackConfig.sample(3) != TrackConfig.sample(4)


class TestPresets:
    def test_expected_presets_exist(self):
        for name in ("default", "daily", "dense", "wide", "single_lane"):
            assert name in CONFIGS

    def test_get_preset_returns_copy(self):
        config = get_preset("daily")
        config.seed = 1
        assert CONFIGS["daily"].seed == 20240101

    def test_unknown_preset_raises(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset("nope")

    def test_single_lane_preset(self):
        config = get_preset("single_lane")
        assert config.lane_count == 1
        assert config.max_same_lane_streak == 0
