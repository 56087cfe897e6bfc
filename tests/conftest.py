"""
pytest configuration and shared fixtures.
"""

import logging

import pytest
import numpy as np

from pytendency.core.statistics import STATISTICS_LOGGER_NAME


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def uniform_data(rng):
    """1000 points uniform in the unit square."""
    return rng.random((1000, 2))


@pytest.fixture
def clustered_data(rng):
    """1000 points in four tight Gaussian clusters (sd 0.01)."""
    centers = np.array([
        [0.2, 0.2],
        [0.8, 0.2],
        [0.2, 0.8],
        [0.8, 0.8],
    ])
    labels = rng.integers(0, 4, size=1000)
    return centers[labels] + rng.normal(scale=0.01, size=(1000, 2))


@pytest.fixture
def statistics_disabled():
    """Statistics channel explicitly switched off for the test."""
    logger = logging.getLogger(STATISTICS_LOGGER_NAME)
    previous = logger.level
    logger.setLevel(logging.WARNING)
    yield logger
    logger.setLevel(previous)
