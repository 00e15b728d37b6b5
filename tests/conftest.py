"""
Pytest configuration and shared fixtures.

Provides small signal models, synthetic traces and a deterministic random
state for unit and integration tests.
"""

import random

import numpy as np
import pytest

from src.core.config import Config
from src.core.observability import EventRecorder
from src.data.synthetic import sine_wave
from src.reconstruction.models import WindowedClusteringModel


@pytest.fixture(autouse=True)
def seeded_random():
    """
    The t-digest breaks ties between equidistant centroids with the stdlib
    random module; seed it so repeated runs agree.
    """
    random.seed(1234)
    yield


@pytest.fixture
def test_config(tmp_path) -> Config:
    """
    Test configuration writing logs and artefacts under tmp_path.
    
    Returns:
        Config: small windows and codebook so fits stay fast
    """
    return Config(
        log_level="WARNING",
        logs_dir=tmp_path / "logs",
        windowing={"window": 32, "step": 2, "samples": 20000},
        codebook={"clusters": 64, "iterations": 10, "random_state": 0},
        detection={"anomaly_fraction": 0.01, "compression": 100.0},
        output={"output_dir": tmp_path / "out"},
    )


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def slow_sine() -> np.ndarray:
    """Clean sine whose period is much longer than a window."""
    return sine_wave(4000, period=400.0)


@pytest.fixture
def small_model(recorder) -> WindowedClusteringModel:
    return WindowedClusteringModel(
        window=32,
        step=4,
        samples=5000,
        clusters=32,
        iterations=10,
        hook=recorder,
    )


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


def pytest_configure(config):
    """
    Pytest hook for custom configuration.
    
    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
