"""
Streaming quantile estimation.

The scorer only needs ``add(value)`` and ``quantile(q)``. TDigestEstimator
adapts the ``tdigest`` package to that interface; its accuracy is governed by
``compression`` (the package's ``delta`` is ``1 / compression``).
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from tdigest import TDigest

from src.core.exceptions import ConfigurationError, DataValidationError


@runtime_checkable
class QuantileDigest(Protocol):
    def add(self, value: float) -> None:
        ...

    def quantile(self, q: float) -> float:
        ...


class TDigestEstimator:
    """t-digest backed quantile estimator."""

    def __init__(self, compression: float = 100.0):
        if compression <= 0:
            raise ConfigurationError(f"compression must be > 0, got {compression}")
        self.compression = float(compression)
        self._digest = TDigest(delta=1.0 / self.compression)

    def __len__(self) -> int:
        return int(self._digest.n)

    def add(self, value: float) -> None:
        self._digest.update(float(value))

    def add_many(self, values: Iterable[float]) -> None:
        for value in values:
            self.add(value)

    def quantile(self, q: float) -> float:
        """
        Estimated value below which a fraction ``q`` of the inputs fall.

        Raises:
            ValueError: if q is outside [0, 1]
            DataValidationError: if nothing has been added yet
        """
        if not 0.0 <= q <= 1.0:
            raise ValueError(f"quantile must be within [0, 1], got {q}")
        if self._digest.n == 0:
            raise DataValidationError("Cannot estimate a quantile of an empty digest")
        return float(self._digest.percentile(100.0 * q))
