"""
Anomaly module: residual scoring against a model reconstruction.

Implements the quantile-digest threshold policies, anomaly records and the
fit -> reconstruct -> score pipeline.
"""

from .detector import AnomalyDetector, create_scorer
from .digest import QuantileDigest, TDigestEstimator
from .schema import AnomalyRecord, DetectionReport, ScoringResult
from .scoring import AnomalyScorer, residual_magnitudes, signed_residuals
from .thresholds import QuantileFractionPolicy, ThresholdDecision, TwoSidedQuantilePolicy

__all__ = [
	"AnomalyDetector",
	"create_scorer",
	"AnomalyScorer",
	"AnomalyRecord",
	"DetectionReport",
	"ScoringResult",
	"QuantileDigest",
	"TDigestEstimator",
	"QuantileFractionPolicy",
	"TwoSidedQuantilePolicy",
	"ThresholdDecision",
	"residual_magnitudes",
	"signed_residuals",
]
