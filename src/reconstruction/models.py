"""
Signal models: the fit/reconstruct lifecycle.

Callers depend only on the SignalModel protocol. Concrete strategies are
picked at construction time through create_model():

- "windowed": dictionary of tapered window shapes learned by k-means, with
  overlap-add resynthesis (the strategy used for EKG traces)
- "identity": returns the input unchanged (useful as a scoring baseline)
- "lowpass": centred rolling mean, for smooth multi-feature series
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Tuple, runtime_checkable

import numpy as np
import pandas as pd

from src.core.config import Config, config
from src.core.exceptions import ConfigurationError, DataValidationError, ModelNotFittedError
from src.core.observability import EventHook, logging_hook, timed
from src.data.writers import write_dictionary

from .codebook import Codebook, KMeansCodebookBuilder
from .taper import make_taper
from .windowing import (
    as_trace,
    normalize_rows,
    overlap_add,
    reconstructed_length,
    reconstruction_windows,
    slice_windows,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class SignalModel(Protocol):
    """Capability set shared by every reconstruction strategy."""

    def build_model(self, data) -> None:
        ...

    def reconstruct_signal(self, data) -> np.ndarray:
        ...

    def reconstructed_length(self, n: int) -> int:
        ...


class IdentityModel:
    """Reconstruction equals the input."""

    def build_model(self, data) -> None:
        return None

    def reconstruct_signal(self, data) -> np.ndarray:
        return np.array(data, dtype=float)

    def reconstructed_length(self, n: int) -> int:
        return n


@dataclass
class LowPassModel:
    """
    Centred rolling-mean reconstruction.

    Works on scalar series and on (n, features) matrices; each feature is
    smoothed independently. Edges use the available part of the window.
    """

    span: int = 5

    def __post_init__(self) -> None:
        if self.span < 1:
            raise ConfigurationError(f"span must be >= 1, got {self.span}")

    def build_model(self, data) -> None:
        return None

    def reconstruct_signal(self, data) -> np.ndarray:
        values = np.asarray(data, dtype=float)
        frame = pd.DataFrame(values.reshape(len(values), -1))
        smoothed = frame.rolling(window=self.span, center=True, min_periods=1).mean()
        return smoothed.to_numpy().reshape(values.shape)

    def reconstructed_length(self, n: int) -> int:
        return n


@dataclass
class WindowedClusteringModel:
    """
    Dictionary-of-shapes reconstruction.

    build_model() slices the series into tapered windows every ``step``
    samples, scales each to unit norm and clusters them into a Codebook.

    reconstruct_signal() walks the series at half-window stride. Each tapered
    window is normalised, replaced by its nearest codeword, rescaled by the
    window's own norm, and the codewords are overlap-added. Neighbouring
    windows approximate whatever part of the signal the current window's
    taper leaves out, which is why windows can be matched independently.
    """

    window: int = 32
    step: int = 2
    samples: int = 200000
    clusters: int = 400
    iterations: int = 10
    taper_name: str = "sine_squared"
    norm_floor: float = 1e-12
    builder: KMeansCodebookBuilder = field(default_factory=KMeansCodebookBuilder)
    hook: Optional[EventHook] = logging_hook
    codebook: Optional[Codebook] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.window < 4 or self.window % 2:
            raise ConfigurationError(f"window must be an even number >= 4, got {self.window}")
        if self.step < 1:
            raise ConfigurationError(f"step must be >= 1, got {self.step}")
        self.taper = make_taper(self.taper_name, self.window)

    @classmethod
    def from_config(cls, settings: Optional[Config] = None, **overrides) -> "WindowedClusteringModel":
        settings = settings or config
        params = dict(
            window=settings.windowing.window,
            step=settings.windowing.step,
            samples=settings.windowing.samples,
            norm_floor=settings.windowing.norm_floor,
            taper_name=settings.windowing.taper,
            clusters=settings.codebook.clusters,
            iterations=settings.codebook.iterations,
            builder=KMeansCodebookBuilder(random_state=settings.codebook.random_state),
        )
        params.update(overrides)
        return cls(**params)

    @property
    def is_fitted(self) -> bool:
        return self.codebook is not None

    def build_model(self, data) -> None:
        with timed("window", self.hook) as details:
            windows = slice_windows(data, self.window, self.step, self.taper, self.samples)
            if len(windows) == 0:
                raise DataValidationError(
                    f"Series of {len(as_trace(data))} samples is too short for "
                    f"window={self.window}, step={self.step}"
                )
            units, _ = normalize_rows(windows.values, self.norm_floor)
            details["windows"] = len(windows)

        with timed("cluster", self.hook) as details:
            self.codebook = self.builder.cluster(units, self.clusters, self.iterations)
            details["codewords"] = len(self.codebook)

    def reconstructed_length(self, n: int) -> int:
        return reconstructed_length(n, self.window)

    def reconstruct_with_indices(self, data) -> Tuple[np.ndarray, np.ndarray]:
        """
        Reconstruct and also report which codeword produced each sample.

        Returns:
            (reconstruction, cluster index per reconstructed sample)
        """
        if self.codebook is None:
            raise ModelNotFittedError("build_model() must run before reconstruct_signal()")

        with timed("reconstruct", self.hook) as details:
            windows = reconstruction_windows(data, self.window, self.taper)
            units, scales = normalize_rows(windows.values, self.norm_floor)
            indices = self.codebook.nearest_many(units)
            rescaled = self.codebook.centroids[indices] * scales[:, None]
            reconstruction = overlap_add(rescaled)
            details["steps"] = len(indices)
            details["samples"] = len(reconstruction)

        return reconstruction, np.repeat(indices, self.window // 2)

    def reconstruct_signal(self, data) -> np.ndarray:
        reconstruction, _ = self.reconstruct_with_indices(data)
        return reconstruction

    def dump_codebook(self, path: Path, float_format: str = "%.3f") -> Path:
        """Write one tab-separated line per codeword."""
        if self.codebook is None:
            raise ModelNotFittedError("No codebook to dump; call build_model() first")
        return write_dictionary(self.codebook, path, float_format=float_format)


def create_model(
    strategy: Optional[str] = None,
    settings: Optional[Config] = None,
    **overrides,
) -> SignalModel:
    """
    Build the signal model named by ``strategy`` (defaults to config).
    """
    settings = settings or config
    strategy = strategy or settings.detection.strategy

    if strategy == "windowed":
        return WindowedClusteringModel.from_config(settings, **overrides)
    if strategy == "identity":
        return IdentityModel()
    if strategy == "lowpass":
        return LowPassModel(span=overrides.get("span", settings.detection.lowpass_span))
    raise ConfigurationError(f"Unknown signal model strategy: {strategy}")
