"""
Schema definitions for residual-based anomaly detection.

All outputs are deterministic given the digest's estimate. Each anomaly
references its observed value, the residual that was tested, and its
position in the scored series.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


class AnomalyRecord(BaseModel):
    """
    A single flagged sample.

    Fields:
    - value: observed sample (float, or list of floats for multi-feature series)
    - residual: the residual the threshold was tested against (magnitude for
      the fraction policy, signed for the two-sided policy)
    - index: position of the sample in the scored series
    """

    model_config = ConfigDict(frozen=True)

    value: Union[float, List[float]]
    residual: float
    index: int = Field(ge=0)


class ScoringResult(BaseModel):
    """
    Outcome of thresholding one residual series.

    Fields:
    - policy: name of the threshold policy used
    - threshold: upper cut-off
    - lower_threshold: lower cut-off (two-sided policy only)
    - scored_samples: number of residuals fed to the digest
    - anomalies: flagged samples ordered by index
    """

    policy: str
    threshold: float
    lower_threshold: Optional[float] = None
    scored_samples: int = Field(ge=0)
    anomalies: List[AnomalyRecord] = Field(default_factory=list)

    @property
    def fraction(self) -> float:
        if self.scored_samples == 0:
            return 0.0
        return len(self.anomalies) / self.scored_samples

    @property
    def indices(self) -> List[int]:
        return [a.index for a in self.anomalies]


@dataclass
class DetectionReport:
    """
    Full result of a detection run.

    ``reconstructed`` and ``cluster_indices`` cover the scored prefix only;
    ``dropped_samples`` counts trailing samples the model could not
    reconstruct.
    """

    scoring: ScoringResult
    reconstructed: np.ndarray
    dropped_samples: int = 0
    cluster_indices: Optional[np.ndarray] = None

    @property
    def anomalies(self) -> List[AnomalyRecord]:
        return self.scoring.anomalies

    @property
    def threshold(self) -> float:
        return self.scoring.threshold
