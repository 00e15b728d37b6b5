"""
Windowing engine: slicing, tapering, normalisation and overlap-add.

Forward direction
    A 1-D series is cut into fixed-length windows starting every ``step``
    samples. Each window is multiplied pointwise by the taper, then scaled to
    unit Euclidean norm so that clustering and lookup act on waveform shape
    rather than energy. The norm is kept as the window's scale factor.

Inverse direction
    Reconstruction walks the series at half-window stride. Output sample
    ``j`` of step ``k`` is the second half of codeword ``k - 1`` plus the
    first half of codeword ``k``, each already rescaled. Every output sample
    therefore blends two adjacent window estimates.

Boundary policy
    The walk only emits steps whose two half-windows are complete within
    ``floor(n / half) * half`` samples, so the output covers
    ``floor(n / half) * half - window`` samples. The trailing partial window
    is dropped, not padded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from src.core.exceptions import DataValidationError


@dataclass(frozen=True)
class Window:
    """A tapered excerpt of a series, tagged with where it came from."""

    offset: int
    index: int
    values: np.ndarray
    weight: float = 1.0


@dataclass(frozen=True)
class WindowSet:
    """
    Windows stored as one (count, window) matrix.

    Row ``i`` starts at ``offsets[i]`` in the source series.
    """

    offsets: np.ndarray
    values: np.ndarray

    def __len__(self) -> int:
        return len(self.offsets)

    def __iter__(self) -> Iterator[Window]:
        for index, (offset, values) in enumerate(zip(self.offsets, self.values)):
            yield Window(offset=int(offset), index=index, values=values)


def as_trace(data) -> np.ndarray:
    """Return ``data`` as a 1-D float array, rejecting multi-feature series."""
    trace = np.asarray(data, dtype=float)
    if trace.ndim == 2 and trace.shape[1] == 1:
        trace = trace[:, 0]
    if trace.ndim != 1:
        raise DataValidationError(
            f"Windowed reconstruction needs a 1-D series, got shape {trace.shape}"
        )
    return trace


def training_window_count(n: int, window: int, step: int, samples: int) -> int:
    """Number of training windows: floor((n - window) / step), capped at samples."""
    if n < window:
        return 0
    return min(samples, (n - window) // step)


def slice_windows(
    data,
    window: int,
    step: int,
    taper: np.ndarray,
    samples: int,
) -> WindowSet:
    """
    Cut tapered windows starting at ``i * step`` for ``i < count``.

    Raises:
        DataValidationError: if the taper length does not match the window
    """
    trace = as_trace(data)
    if len(taper) != window:
        raise DataValidationError(
            f"Taper has {len(taper)} points, window has {window}"
        )
    count = training_window_count(len(trace), window, step, samples)
    if count == 0:
        return WindowSet(offsets=np.empty(0, dtype=int), values=np.empty((0, window)))

    offsets = np.arange(count) * step
    views = sliding_window_view(trace, window)[offsets]
    return WindowSet(offsets=offsets, values=views * taper)


def normalize(window: np.ndarray, floor: float = 0.0) -> Tuple[np.ndarray, float]:
    """
    Scale a window to unit norm.

    Returns the unit vector and the norm. A window whose norm is at or below
    ``floor`` is silent: it maps to the zero vector with scale 0.
    """
    scale = float(np.linalg.norm(window))
    if scale <= floor:
        return np.zeros_like(window, dtype=float), 0.0
    return window / scale, scale


def normalize_rows(windows: np.ndarray, floor: float = 0.0) -> Tuple[np.ndarray, np.ndarray]:
    """Row-wise version of normalize() for a (count, window) matrix."""
    scales = np.linalg.norm(windows, axis=1)
    silent = scales <= floor
    divisor = np.where(silent, 1.0, scales)
    units = windows / divisor[:, None]
    units[silent] = 0.0
    scales = np.where(silent, 0.0, scales)
    return units, scales


def reconstructed_length(n: int, window: int) -> int:
    """Samples covered by the half-window walk over a series of length n."""
    half = window // 2
    return max(0, (n // half) * half - window)


def reconstruction_offsets(n: int, window: int) -> np.ndarray:
    """Start offsets of the windows visited during reconstruction."""
    return np.arange(0, reconstructed_length(n, window), window // 2)


def reconstruction_windows(data, window: int, taper: np.ndarray) -> WindowSet:
    """Tapered windows at half-window stride, one per reconstruction step."""
    trace = as_trace(data)
    offsets = reconstruction_offsets(len(trace), window)
    if len(offsets) == 0:
        return WindowSet(offsets=offsets, values=np.empty((0, window)))
    views = sliding_window_view(trace, window)[offsets]
    return WindowSet(offsets=offsets, values=views * taper)


def overlap_add(codewords: np.ndarray) -> np.ndarray:
    """
    Resynthesise a series from rescaled codewords at half-window stride.

    Args:
        codewords: (steps, window) matrix, one rescaled codeword per step

    Returns:
        Array of ``steps * window / 2`` samples. The first half-window only
        receives the first codeword's leading half.
    """
    codewords = np.asarray(codewords, dtype=float)
    if codewords.ndim != 2 or codewords.shape[1] % 2:
        raise DataValidationError(
            f"Codewords must form a (steps, even window) matrix, got {codewords.shape}"
        )
    steps, window = codewords.shape
    half = window // 2
    if steps == 0:
        return np.empty(0)

    leading = codewords[:, :half]
    trailing = np.vstack([np.zeros((1, half)), codewords[:-1, half:]])
    return (leading + trailing).ravel()
