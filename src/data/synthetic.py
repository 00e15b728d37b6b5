"""
Synthetic traces for demos and tests.
"""

from typing import Optional, Tuple

import numpy as np


def sine_wave(length: int, period: float = 50.0, amplitude: float = 1.0) -> np.ndarray:
    """Clean sine wave sampled at integer positions."""
    positions = np.arange(length, dtype=float)
    return amplitude * np.sin(2.0 * np.pi * positions / period)


def sine_with_spikes(
    length: int = 10000,
    period: float = 50.0,
    amplitude: float = 1.0,
    n_spikes: int = 20,
    spike_scale: float = 10.0,
    margin: int = 64,
    min_gap: int = 64,
    seed: Optional[int] = 0,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sine wave with isolated point spikes.

    Each spike adds ``spike_scale`` times the clean signal's standard
    deviation, with a random sign. Spikes keep ``margin`` samples away from
    both ends and at least ``min_gap`` samples from each other.

    Returns:
        (series, sorted spike indices)
    """
    clean = sine_wave(length, period, amplitude)
    rng = np.random.default_rng(seed)

    candidates = np.arange(margin, length - margin)
    chosen = []
    while len(chosen) < n_spikes:
        if len(candidates) == 0:
            raise ValueError(
                f"Cannot place {n_spikes} spikes {min_gap} apart in {length} samples"
            )
        pick = int(rng.choice(candidates))
        chosen.append(pick)
        candidates = candidates[np.abs(candidates - pick) >= min_gap]

    spikes = np.sort(np.array(chosen, dtype=int))
    signs = rng.choice([-1.0, 1.0], size=n_spikes)
    series = clean.copy()
    series[spikes] += signs * spike_scale * clean.std()
    return series, spikes
