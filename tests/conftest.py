"""Pytest configuration and shared fixtures."""

import os

# Ensure headless pygame for all tests
os.environ['SDL_VIDEODRIVER'] = 'dummy'

import random

import pytest

from procedural_race_track.bounds import GeometryBoundsEstimator
from procedural_race_track.config import TrackConfig
from procedural_race_track.physics import TrackPhysics
from procedural_race_track.scene import SceneInstantiator, TrackScene


@pytest.fixture
def physics():
    """Fresh physics space for each test."""
    return TrackPhysics()


@pytest.fixture
def scene(physics):
    return TrackScene(physics)


@pytest.fixture
def instantiator(scene):
    return SceneInstantiator(scene)


@pytest.fixture
def estimator():
    return GeometryBoundsEstimator()


@pytest.fixture
def track_config():
    """Default track configuration."""
    return TrackConfig()


@pytest.fixture
def rng():
    return random.Random(1234)
