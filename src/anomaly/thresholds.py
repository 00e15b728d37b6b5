"""
Threshold policies for residual series.

QuantileFractionPolicy
    The supported policy. Residual magnitudes go into a fresh digest and the
    cut-off is the ``1 - anomaly_fraction`` quantile. A sample is flagged iff
    its magnitude is strictly above the cut-off, so roughly
    ``anomaly_fraction`` of the samples are reported whatever the sign of
    their residual.

TwoSidedQuantilePolicy
    An alternative kept under its own name. Signed residuals go into the
    digest; the ``q`` and ``1 - q`` quantiles bound an acceptance band and
    anything outside it is flagged. ``q`` is fixed (0.9 by default), so the
    requested anomaly fraction is ignored. Scalar series only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from src.core.exceptions import ConfigurationError

from .digest import QuantileDigest, TDigestEstimator

logger = logging.getLogger(__name__)

DigestFactory = Callable[[float], QuantileDigest]


@dataclass
class ThresholdDecision:
    """
    Cut-offs and the resulting per-sample verdict.

    ``tested`` holds the value each sample was compared against the cut-offs
    with (magnitude or signed residual).
    """

    upper: float
    mask: np.ndarray
    tested: np.ndarray
    lower: Optional[float] = None


def _fill_digest(factory: DigestFactory, compression: float, values: np.ndarray) -> QuantileDigest:
    digest = factory(compression)
    for value in values:
        digest.add(float(value))
    return digest


@dataclass
class QuantileFractionPolicy:
    """One-sided, fraction-driven cut-off on residual magnitudes."""

    digest_factory: DigestFactory = TDigestEstimator
    name: str = "quantile_fraction"
    signed: bool = False

    def decide(self, residuals: np.ndarray, anomaly_fraction: float, compression: float) -> ThresholdDecision:
        if not 0.0 < anomaly_fraction < 1.0:
            raise ConfigurationError(
                f"anomaly_fraction must be within (0, 1), got {anomaly_fraction}"
            )
        magnitudes = np.abs(np.asarray(residuals, dtype=float))
        digest = _fill_digest(self.digest_factory, compression, magnitudes)
        threshold = digest.quantile(1.0 - anomaly_fraction)
        return ThresholdDecision(upper=threshold, mask=magnitudes > threshold, tested=magnitudes)


@dataclass
class TwoSidedQuantilePolicy:
    """Fixed-quantile acceptance band on signed residuals."""

    quantile: float = 0.9
    digest_factory: DigestFactory = TDigestEstimator
    name: str = "two_sided_quantile"
    signed: bool = True

    def __post_init__(self) -> None:
        if not 0.5 < self.quantile < 1.0:
            raise ConfigurationError(f"quantile must be within (0.5, 1), got {self.quantile}")

    def decide(self, residuals: np.ndarray, anomaly_fraction: float, compression: float) -> ThresholdDecision:
        logger.debug(
            f"Two-sided policy uses fixed quantile {self.quantile}; "
            f"anomaly_fraction={anomaly_fraction} is not used"
        )
        signed = np.asarray(residuals, dtype=float)
        digest = _fill_digest(self.digest_factory, compression, signed)
        upper = digest.quantile(self.quantile)
        lower = digest.quantile(1.0 - self.quantile)
        mask = (signed > upper) | (signed < lower)
        return ThresholdDecision(upper=upper, lower=lower, mask=mask, tested=signed)
