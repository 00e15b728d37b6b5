"""
Two-pass detection pipeline.

fit() trains the signal model on a reference series. detect_anomalies()
reconstructs a (possibly different) series, scores the covered samples and
returns the flagged ones. The stages run strictly one after another; the
model is never written to once reconstruction has started.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from src.core.config import Config, config
from src.core.exceptions import ConfigurationError, DataValidationError, LengthMismatchError
from src.core.observability import EventHook, logging_hook
from src.reconstruction.models import SignalModel, create_model

from .schema import DetectionReport
from .scoring import AnomalyScorer
from .thresholds import QuantileFractionPolicy, TwoSidedQuantilePolicy

logger = logging.getLogger(__name__)


def create_scorer(
    policy: str = "quantile_fraction",
    settings: Optional[Config] = None,
    hook: Optional[EventHook] = logging_hook,
) -> AnomalyScorer:
    """Scorer for a named threshold policy."""
    settings = settings or config
    if policy == "quantile_fraction":
        return AnomalyScorer(policy=QuantileFractionPolicy(), hook=hook)
    if policy == "two_sided_quantile":
        return AnomalyScorer(
            policy=TwoSidedQuantilePolicy(quantile=settings.detection.two_sided_quantile),
            hook=hook,
        )
    raise ConfigurationError(f"Unknown threshold policy: {policy}")


class AnomalyDetector:
    """
    Fit a signal model, reconstruct, and flag out-of-threshold residuals.

    Models that drop trailing samples (the windowed dictionary) only cover a
    prefix of the series. The detector scores exactly that prefix and reports
    how many samples were left out; the scorer itself never trims.
    """

    def __init__(
        self,
        model: Optional[SignalModel] = None,
        scorer: Optional[AnomalyScorer] = None,
        hook: Optional[EventHook] = logging_hook,
        settings: Optional[Config] = None,
    ):
        self.settings = settings or config
        self.hook = hook
        self.model = model if model is not None else create_model(settings=self.settings, hook=hook)
        self.scorer = scorer if scorer is not None else AnomalyScorer(hook=hook)

    def fit(self, data) -> "AnomalyDetector":
        self.model.build_model(data)
        return self

    def reconstruct(self, data):
        """Return (reconstruction, cluster indices or None) for ``data``."""
        reconstruct_with_indices = getattr(self.model, "reconstruct_with_indices", None)
        if reconstruct_with_indices is not None:
            return reconstruct_with_indices(data)
        return self.model.reconstruct_signal(data), None

    def detect_anomalies(
        self,
        data,
        anomaly_fraction: Optional[float] = None,
        compression: Optional[float] = None,
    ) -> DetectionReport:
        """
        Score ``data`` against the fitted model.

        Raises:
            ModelNotFittedError: if the model needs fit() and has not had it
            LengthMismatchError: if the model returns a different number of
                samples than it declares it covers
            DataValidationError: if the series is too short to reconstruct
        """
        observed = np.asarray(data, dtype=float)
        reconstructed, cluster_indices = self.reconstruct(observed)

        covered = self.model.reconstructed_length(len(observed))
        if len(reconstructed) != covered:
            raise LengthMismatchError(expected=covered, actual=len(reconstructed))
        if covered == 0:
            raise DataValidationError(
                f"Series of {len(observed)} samples is too short to reconstruct"
            )

        dropped = len(observed) - covered
        if dropped:
            logger.info(f"Scoring first {covered} samples; {dropped} trailing samples not reconstructed")

        scoring = self.scorer.score(
            observed[:covered],
            reconstructed,
            anomaly_fraction=anomaly_fraction,
            compression=compression,
        )
        return DetectionReport(
            scoring=scoring,
            reconstructed=reconstructed,
            dropped_samples=dropped,
            cluster_indices=cluster_indices,
        )
