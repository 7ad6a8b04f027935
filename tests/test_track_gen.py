"""Tests for the track generation orchestrator."""

import logging

import pytest

from procedural_race_track.catalog import ObstacleCatalog
from procedural_race_track.config import TrackConfig
from procedural_race_track.entities import Entity
from procedural_race_track.scene import SceneInstantiator, TrackScene
from procedural_race_track.templates import COLUMN
from procedural_race_track.track_gen import (
    FINISH_GROUP,
    GENERATED_GROUPS,
    OBSTACLES_GROUP,
    STARS_GROUP,
    TrackGenerator,
    TrackLayout,
)


class ReentrantInstantiator(SceneInstantiator):
    """Instantiator that tries to start a second pass mid-generation."""

    generator = None

    def instantiate(self, template, group):
        if self.generator is not None:
            self.generator.generate()
        return super().instantiate(template, group)


class TestTrackGenerator:
    def test_generate_returns_layout(self):
        gen = TrackGenerator(TrackConfig())
        layout = gen.generate()

        assert isinstance(layout, TrackLayout)
        assert gen.layout is layout
        assert len(layout.lane_xs) == 3
        assert layout.obstacles
        assert layout.ground is not None
        assert len(layout.walls) == 2
        assert layout.finish is not None

    def test_groups_created(self):
        gen = TrackGenerator(TrackConfig())
        gen.generate()
        for name in GENERATED_GROUPS:
            assert gen.scene.find_group(name) is not None

    def test_tags(self):
        gen = TrackGenerator(TrackConfig())
        layout = gen.generate()
        scene = gen.scene
        assert len(scene.entities_with_tag("ground")) == 1
        assert len(scene.entities_with_tag("wall")) == 2
        assert len(scene.entities_with_tag("finish")) == 1
        assert len(scene.entities_with_tag("obstacle")) == len(layout.obstacles)
        assert len(scene.entities_with_tag("star")) == len(layout.stars)

    def test_from_preset(self):
        gen = TrackGenerator.from_preset("wide")
        layout = gen.generate()
        assert len(layout.lane_xs) == 5

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            TrackGenerator.from_preset("missing")

    def test_config_not_mutated(self):
        config = TrackConfig(lane_count=0)
        layout = TrackGenerator(config).generate()
        assert config.lane_count == 0
        assert layout.config.lane_count == 1
        assert layout.lane_xs == [0.0]

    def test_degenerate_config_logs_warnings(self, caplog):
        with caplog.at_level(logging.WARNING):
            TrackGenerator(TrackConfig(lane_count=0, spawn_probability=3.0)).generate()
        assert "lane_count" in caplog.text
        assert "spawn_probability" in caplog.text

    def test_empty_catalog_still_builds_track(self, caplog):
        gen = TrackGenerator(TrackConfig(), catalog=ObstacleCatalog())
        with caplog.at_level(logging.WARNING):
            layout = gen.generate()
        assert layout.obstacles == []
        assert layout.ground is not None
        assert len(layout.walls) == 2
        assert layout.finish is not None
        assert "catalog is empty" in caplog.text

    def test_optional_parts_disabled(self):
        config = TrackConfig(build_ground=False, build_walls=False, place_finish_line=False, place_stars=False)
        layout = TrackGenerator(config).generate()
        assert layout.ground is None
        assert layout.walls == []
        assert layout.finish is None
        assert layout.stars == []
        assert layout.obstacles

    def test_reentrant_generate_raises(self, scene):
        instantiator = ReentrantInstantiator(scene)
        gen = TrackGenerator(TrackConfig(), scene=scene, instantiator=instantiator)
        instantiator.generator = gen
        with pytest.raises(RuntimeError, match="already running"):
            gen.generate()

        # The guard resets once the pass unwinds
        instantiator.generator = None
        assert gen.generate().obstacles


class TestDeterminism:
    def test_same_seed_same_layout(self):
        a = TrackGenerator(TrackConfig(seed=777)).generate()
        b = TrackGenerator(TrackConfig(seed=777)).generate()
        assert a.signature() == b.signature()
        assert a.star_signature() == b.star_signature()

    def test_seed_scenario(self):
        """Three lanes, 500 m, one column type: 12345 repeats and 12346 differs but stays valid."""

        def build(seed):
            config = TrackConfig(seed=seed, lane_count=3, track_length=500.0)
            return TrackGenerator(config, catalog=ObstacleCatalog.uniform([COLUMN])).generate()

        first = build(12345)
        again = build(12345)
        other = build(12346)

        assert first.obstacles and other.obstacles
        assert first.signature() == again.signature()
        assert first.signature() != other.signature()
        assert all(o.template_name == "column" for o in other.obstacles)

        cfg = other.config
        for lane in range(3):
            zs = [o.z for o in other.obstacles_in_lane(lane)]
            for a, b in zip(zs, zs[1:]):
                assert b - a >= cfg.min_forward_gap
        for obstacle in other.obstacles:
            assert abs(obstacle.x) + obstacle.half_width <= cfg.wall_clearance_half_width + 1e-6

    def test_signature_values(self):
        layout = TrackGenerator(TrackConfig()).generate()
        for name, lane, z, x, yaw, scale in layout.signature():
            assert isinstance(name, str)
            assert 0 <= lane < 3
            assert 0.0 <= z <= layout.config.track_length
            assert abs(yaw) <= layout.config.max_yaw_degrees
            assert scale == 1.0


class TestRegeneration:
    def test_regenerate_is_idempotent(self):
        gen = TrackGenerator(TrackConfig())
        first = gen.generate()
        shapes = len(gen.physics.space.shapes)
        bodies = len(gen.physics.space.bodies)
        obstacle_count = len(gen.scene.find_group(OBSTACLES_GROUP))

        second = gen.generate()
        assert first.signature() == second.signature()
        assert len(gen.physics.space.shapes) == shapes
        assert len(gen.physics.space.bodies) == bodies
        assert len(gen.scene.find_group(OBSTACLES_GROUP)) == obstacle_count
        assert len(gen.scene.find_group(FINISH_GROUP)) == 1

    def test_hand_placed_content_untouched(self):
        scene = TrackScene()
        prop = scene.add_entity("Props", Entity(scene.physics, "HandPlaced", template=COLUMN))
        gen = TrackGenerator(TrackConfig(), scene=scene)

        gen.generate()
        gen.generate()
        gen.clear_generated()

        assert scene.group_names == ["Props"]
        assert prop.live
        assert prop.body in scene.physics.space.bodies
        assert len(scene.physics.space.shapes) == 1

    def test_clear_generated(self):
        gen = TrackGenerator(TrackConfig())
        layout = gen.generate()
        removed = gen.clear_generated()

        expected = len(layout.obstacles) + len(layout.stars) + 1 + 2 + 1
        assert removed == expected
        assert gen.layout is None
        assert not any(name in gen.scene.group_names for name in GENERATED_GROUPS)
        assert len(gen.physics.space.bodies) == 0

    def test_without_clear_before_generate(self):
        gen = TrackGenerator(TrackConfig(clear_before_generate=False))
        layout = gen.generate()
        gen.generate()

        assert len(gen.scene.find_group(OBSTACLES_GROUP)) == 2 * len(layout.obstacles)
        assert len(gen.scene.find_group(STARS_GROUP)) == 2 * len(layout.stars)
        assert len(gen.scene.entities_with_tag("finish")) == 1
        assert len(gen.scene.entities_with_tag("wall")) == 2


class TestLayoutInvariants:
    @pytest.mark.parametrize("preset", ["default", "daily", "dense", "wide", "single_lane", "classic"])
    def test_spacing_and_bounds(self, preset):
        layout = TrackGenerator.from_preset(preset).generate()
        cfg = layout.config
        clearance = cfg.wall_clearance_half_width

        for lane in range(len(layout.lane_xs)):
            zs = [o.z for o in layout.obstacles_in_lane(lane)]
            for a, b in zip(zs, zs[1:]):
                assert b - a >= cfg.min_forward_gap

        for obstacle in layout.obstacles:
            assert abs(obstacle.x) + obstacle.half_width <= clearance + 1e-6

    def test_single_lane_preset(self):
        layout = TrackGenerator.from_preset("single_lane").generate()
        assert layout.lane_xs == [0.0]
        assert all(o.lane == 0 for o in layout.obstacles)
        assert all(s.lane == 0 for s in layout.stars)

    def test_summary(self):
        layout = TrackGenerator(TrackConfig(seed=5)).generate()
        text = layout.summary()
        assert "seed=5" in text
        assert f"obstacles: {len(layout.obstacles)}" in text
        assert "finish:" in text
