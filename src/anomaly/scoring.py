"""
Residual scoring.

Compares an observed series with its reconstruction sample by sample and
turns the residuals into AnomalyRecords through a threshold policy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

from src.core.config import config
from src.core.exceptions import (
    ConfigurationError,
    DataValidationError,
    LengthMismatchError,
)
from src.core.observability import EventHook, timed

from .schema import AnomalyRecord, ScoringResult
from .thresholds import QuantileFractionPolicy, TwoSidedQuantilePolicy

logger = logging.getLogger(__name__)

ThresholdPolicy = Union[QuantileFractionPolicy, TwoSidedQuantilePolicy]


def check_lengths(data: np.ndarray, reconstructed: np.ndarray) -> None:
    if len(data) != len(reconstructed):
        raise LengthMismatchError(expected=len(data), actual=len(reconstructed))
    if np.shape(data) != np.shape(reconstructed):
        raise DataValidationError(
            f"Sample shape differs: data {np.shape(data)}, reconstruction {np.shape(reconstructed)}"
        )


def residual_magnitudes(data, reconstructed) -> np.ndarray:
    """
    Per-sample residual size.

    Absolute difference for scalar samples, Euclidean norm of the difference
    vector for multi-feature samples.
    """
    observed = np.asarray(data, dtype=float)
    approx = np.asarray(reconstructed, dtype=float)
    check_lengths(observed, approx)
    delta = observed - approx
    if delta.ndim == 1:
        return np.abs(delta)
    return np.linalg.norm(delta.reshape(len(delta), -1), axis=1)


def signed_residuals(data, reconstructed) -> np.ndarray:
    """Observed minus reconstructed, for scalar series only."""
    observed = np.asarray(data, dtype=float)
    approx = np.asarray(reconstructed, dtype=float)
    check_lengths(observed, approx)
    if observed.ndim == 2 and observed.shape[1] == 1:
        observed, approx = observed[:, 0], approx[:, 0]
    if observed.ndim != 1:
        raise DataValidationError("Signed residuals are only defined for scalar series")
    return observed - approx


def _sample_value(row) -> Union[float, list]:
    if np.ndim(row) == 0:
        return float(row)
    return [float(v) for v in np.ravel(row)]


@dataclass
class AnomalyScorer:
    """
    Scores a reconstruction against the observed series.

    The length check runs before anything else; a mismatch raises
    LengthMismatchError and nothing is scored.
    """

    policy: ThresholdPolicy = field(default_factory=QuantileFractionPolicy)
    hook: Optional[EventHook] = None

    def score(
        self,
        data,
        reconstructed,
        anomaly_fraction: Optional[float] = None,
        compression: Optional[float] = None,
    ) -> ScoringResult:
        anomaly_fraction = (
            config.detection.anomaly_fraction if anomaly_fraction is None else anomaly_fraction
        )
        compression = config.detection.compression if compression is None else compression
        if compression <= 0:
            raise ConfigurationError(f"compression must be > 0, got {compression}")

        observed = np.asarray(data, dtype=float)
        approx = np.asarray(reconstructed, dtype=float)
        check_lengths(observed, approx)
        if len(observed) == 0:
            raise DataValidationError("Nothing to score: the series is empty")

        with timed("score", self.hook, policy=self.policy.name) as details:
            if self.policy.signed:
                residuals = signed_residuals(observed, approx)
            else:
                residuals = residual_magnitudes(observed, approx)
            decision = self.policy.decide(residuals, anomaly_fraction, compression)

            anomalies = [
                AnomalyRecord(
                    value=_sample_value(observed[i]),
                    residual=float(decision.tested[i]),
                    index=int(i),
                )
                for i in np.flatnonzero(decision.mask)
            ]
            details["threshold"] = round(decision.upper, 6)
            details["anomalies"] = len(anomalies)

        return ScoringResult(
            policy=self.policy.name,
            threshold=decision.upper,
            lower_threshold=decision.lower,
            scored_samples=len(observed),
            anomalies=anomalies,
        )
