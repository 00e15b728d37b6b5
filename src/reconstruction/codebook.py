"""
Window dictionary built by k-means clustering.

The codebook is the set of centroid shapes learned from unit-norm training
windows. It is written once by the builder and read-only afterwards, so
lookups can be shared freely.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np
from sklearn.cluster import KMeans
from sklearn.metrics import pairwise_distances_argmin

from src.core.exceptions import DataValidationError

logger = logging.getLogger(__name__)


class Codebook:
    """
    Read-only (K, window) matrix of codewords with nearest-neighbour lookup.
    """

    def __init__(self, centroids: np.ndarray):
        centroids = np.array(centroids, dtype=float)
        if centroids.ndim != 2 or len(centroids) == 0:
            raise DataValidationError(
                f"Codebook needs a non-empty (K, window) matrix, got shape {centroids.shape}"
            )
        centroids.setflags(write=False)
        self._centroids = centroids

    @classmethod
    def from_centroids(cls, *centroids) -> "Codebook":
        return cls(np.vstack([np.asarray(c, dtype=float) for c in centroids]))

    @property
    def centroids(self) -> np.ndarray:
        return self._centroids

    @property
    def window(self) -> int:
        return self._centroids.shape[1]

    def __len__(self) -> int:
        return len(self._centroids)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._centroids)

    def nearest(self, query: np.ndarray) -> Tuple[np.ndarray, int]:
        """Return the closest codeword (Euclidean) and its index."""
        index = int(self.nearest_many(np.asarray(query, dtype=float)[None, :])[0])
        return self._centroids[index], index

    def nearest_many(self, queries: np.ndarray) -> np.ndarray:
        """Index of the closest codeword for each row of ``queries``."""
        queries = np.asarray(queries, dtype=float)
        if queries.ndim != 2 or queries.shape[1] != self.window:
            raise DataValidationError(
                f"Queries must have shape (n, {self.window}), got {queries.shape}"
            )
        if len(queries) == 0:
            return np.empty(0, dtype=int)
        return pairwise_distances_argmin(queries, self._centroids)


@dataclass
class KMeansCodebookBuilder:
    """
    Builds a Codebook with scikit-learn's KMeans.

    A single initialisation is run for ``iterations`` Lloyd steps. The number
    of clusters is capped to the number of distinct training windows.
    """

    random_state: Optional[int] = 0

    def cluster(self, points: np.ndarray, target_count: int, iterations: int) -> Codebook:
        points = np.asarray(points, dtype=float)
        if points.ndim != 2 or len(points) == 0:
            raise DataValidationError("Cannot build a codebook from an empty window set")
        if target_count < 1:
            raise DataValidationError(f"target_count must be >= 1, got {target_count}")

        distinct = len(np.unique(points, axis=0))
        clusters = min(target_count, distinct)
        if clusters < target_count:
            logger.info(
                f"Only {distinct} distinct windows; reducing codebook from "
                f"{target_count} to {clusters} entries"
            )

        km = KMeans(
            n_clusters=clusters,
            max_iter=iterations,
            n_init=1,
            random_state=self.random_state,
        )
        km.fit(points)
        return Codebook(km.cluster_centers_)
