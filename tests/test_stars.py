"""Tests for star placement."""

import random

import pytest

from procedural_race_track.config import TrackConfig
from procedural_race_track.entities import EntityTemplate, TemplatePart
from procedural_race_track.physics import COLLISION_STAR
from procedural_race_track.stars import StarPlacer
from procedural_race_track.templates import STAR
from procedural_race_track.track_gen import TrackGenerator


LANE_XS = [-3.0, 0.0, 3.0]

# Pickup trigger floating above a visual-only pedestal
PEDESTAL_STAR = EntityTemplate(
    name="pedestal_star",
    parts=(
        TemplatePart(center=(0.0, 1.25, 0.0), size=(0.5, 0.5, 0.5), sensor=True),
        TemplatePart(center=(0.0, 0.4, 0.0), size=(0.2, 0.8, 0.2), collider=False),
    ),
    tags=frozenset({"star"}),
    collision_type=COLLISION_STAR,
)


def make_placer(config, scene, instantiator, estimator, template=STAR):
    return StarPlacer(config, template, instantiator, estimator, LANE_XS, scene.get_or_create_group("Stars_Auto"))


class TestStarPlacer:
    def test_lane_is_clear(self, scene, instantiator, estimator):
        placer = make_placer(TrackConfig(star_clearance_z=3.0), scene, instantiator, estimator)
        obstacle_zs = {0: [10.0], 1: [], 2: []}
        assert not placer.lane_is_clear(0, 12.0, obstacle_zs)
        assert placer.lane_is_clear(0, 13.0, obstacle_zs)
        assert placer.lane_is_clear(1, 10.0, obstacle_zs)

    def test_overlap_check_can_be_disabled(self, scene, instantiator, estimator):
        config = TrackConfig(prevent_star_obstacle_overlap=False)
        placer = make_placer(config, scene, instantiator, estimator)
        assert placer.lane_is_clear(0, 10.0, {0: [10.0]})

    def test_stars_on_lane_centers(self, scene, instantiator, estimator):
        config = TrackConfig(star_row_probability=1.0)
        stars = make_placer(config, scene, instantiator, estimator).run(random.Random(1), {})
        assert stars
        for star in stars:
            assert star.x == LANE_XS[star.lane]
            assert star.entity.x == star.x

    def test_one_star_per_row(self, scene, instantiator, estimator):
        config = TrackConfig(star_row_probability=1.0)
        stars = make_placer(config, scene, instantiator, estimator).run(random.Random(1), {})
        zs = [s.z for s in stars]
        assert zs == sorted(set(zs))

    def test_grounded_with_offset(self, scene, instantiator, estimator):
        config = TrackConfig(ground_y=2.0, star_y_offset=0.5, star_row_probability=1.0)
        stars = make_placer(config, scene, instantiator, estimator).run(random.Random(1), {})
        assert all(s.entity.y == pytest.approx(2.5) for s in stars)

    def test_lowest_visual_part_touches_ground(self, scene, instantiator, estimator):
        config = TrackConfig(ground_y=2.0, star_y_offset=0.5, star_row_probability=1.0)
        placer = make_placer(config, scene, instantiator, estimator, template=PEDESTAL_STAR)
        stars = placer.run(random.Random(1), {})
        assert stars
        for star in stars:
            assert estimator.lowest_point(star.entity, prefer_colliders=False) == pytest.approx(2.5)
            assert estimator.lowest_point(star.entity) == pytest.approx(3.5)

    def test_blocked_rows_counted(self, scene, instantiator, estimator):
        config = TrackConfig(star_row_probability=1.0, star_clearance_z=1000.0)
        placer = make_placer(config, scene, instantiator, estimator)
        stars = placer.run(random.Random(1), {0: [0.0], 1: [0.0], 2: [0.0]})
        assert stars == []
        assert placer.blocked_rows > 0


class TestStarPass:
    def test_clearance_from_obstacles(self):
        layout = TrackGenerator(TrackConfig(star_row_probability=1.0, spawn_probability=0.8)).generate()
        clearance = layout.config.star_clearance_z
        assert layout.stars
        for star in layout.stars:
            for obstacle in layout.obstacles_in_lane(star.lane):
                assert abs(obstacle.z - star.z) >= clearance

    def test_star_stream_independent_of_obstacles(self):
        sparse = TrackConfig(spawn_probability=0.2, prevent_star_obstacle_overlap=False)
        dense = TrackConfig(spawn_probability=0.8, prevent_star_obstacle_overlap=False)
        a = TrackGenerator(sparse).generate()
        b = TrackGenerator(dense).generate()
        assert a.signature() != b.signature()
        assert a.star_signature() == b.star_signature()

    def test_disabling_stars_keeps_obstacles(self):
        with_stars = TrackGenerator(TrackConfig()).generate()
        without = TrackGenerator(TrackConfig(place_stars=False)).generate()
        assert without.stars == []
        assert with_stars.signature() == without.signature()
