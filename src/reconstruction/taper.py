"""
Taper functions applied to every window before normalisation.

A taper is defined once per run and shared read-only by all windows, so the
arrays returned here are marked non-writeable.
"""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from src.core.exceptions import ConfigurationError


def _freeze(values: np.ndarray) -> np.ndarray:
    values.setflags(write=False)
    return values


def sine_squared_taper(length: int) -> np.ndarray:
    """
    Symmetric sine-squared taper, zero at both ends.

    w[i] = sin(pi * i / (length - 1)) ** 2
    """
    if length < 2:
        raise ConfigurationError(f"Taper length must be >= 2, got {length}")
    positions = np.arange(length, dtype=float)
    return _freeze(np.sin(np.pi * positions / (length - 1.0)) ** 2)


def hann_taper(length: int) -> np.ndarray:
    """
    Periodic Hann taper.

    w[i] = sin(pi * i / length) ** 2, so that w[j] + w[j + length / 2] == 1
    and two half-overlapped windows blend to unit gain.
    """
    if length < 2:
        raise ConfigurationError(f"Taper length must be >= 2, got {length}")
    positions = np.arange(length, dtype=float)
    return _freeze(np.sin(np.pi * positions / length) ** 2)


TAPERS: Dict[str, Callable[[int], np.ndarray]] = {
    "sine_squared": sine_squared_taper,
    "hann": hann_taper,
}


def make_taper(name: str, length: int) -> np.ndarray:
    try:
        factory = TAPERS[name]
    except KeyError:
        raise ConfigurationError(f"Unknown taper: {name}") from None
    return factory(length)
