"""
Unit tests for taper functions.
"""

import numpy as np
import pytest

from src.core.exceptions import ConfigurationError
from src.reconstruction.taper import hann_taper, make_taper, sine_squared_taper


def test_sine_squared_taper_shape():
    taper = sine_squared_taper(32)

    assert taper.shape == (32,)
    assert taper[0] == pytest.approx(0.0)
    assert taper[-1] == pytest.approx(0.0, abs=1e-12)
    assert np.allclose(taper, taper[::-1])
    assert taper.max() <= 1.0


def test_hann_halves_sum_to_one():
    taper = hann_taper(32)
    assert np.allclose(taper[:16] + taper[16:], 1.0)


def test_taper_is_read_only():
    taper = make_taper("sine_squared", 16)
    with pytest.raises(ValueError):
        taper[0] = 1.0


def test_unknown_taper_rejected():
    with pytest.raises(ConfigurationError):
        make_taper("triangle", 16)
