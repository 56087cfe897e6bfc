"""
CPU nearest-neighbor oracles.

KDTreeOracle: scipy.spatial.cKDTree queries for Minkowski p-norms.
BruteForceOracle: scipy.spatial.distance.cdist for any metric cdist knows.

Both are adapters around scipy search primitives that satisfy the
NeighborOracle protocol; the Hopkins engine never depends on either class
directly.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial import cKDTree
from scipy.spatial.distance import cdist

from pytendency.core.capabilities import CAPABILITY_BATCH_QUERY, CAPABILITY_THREAD_SAFE
from pytendency.core.exceptions import OracleFailureError
from pytendency.core.validation import check_points

logger = logging.getLogger(__name__)

# Metric names answered by the KD-tree, mapped to their Minkowski p
KDTREE_METRICS: dict[str, float] = {
    'euclidean': 2.0,
    'manhattan': 1.0,
    'cityblock': 1.0,
    'chebyshev': np.inf,
}


def check_rank(rank: int, n_points: int) -> int:
    """Validate a neighbor rank against the corpus size."""
    rank = int(rank)
    if rank < 1:
        raise OracleFailureError(f"rank must be >= 1, got {rank}", rank=rank)
    if rank > n_points:
        raise OracleFailureError(
            f"rank {rank} exceeds corpus size {n_points}",
            rank=rank,
        )
    return rank


def as_queries(points: ArrayLike, dim: int) -> NDArray[np.float64]:
    """Coerce a single point or a block of points to shape (m, dim)."""
    queries = np.asarray(points, dtype=np.float64)
    if queries.ndim == 1:
        queries = queries.reshape(1, -1)
    if queries.ndim != 2 or queries.shape[1] != dim:
        raise OracleFailureError(
            f"query has shape {queries.shape}, expected (m, {dim})"
        )
    return queries


class KDTreeOracle:
    """
    k-th nearest neighbor distances from a KD-tree.

    Args:
        data: Corpus, shape (n, D)
        p: Minkowski norm (2 = Euclidean, 1 = Manhattan, inf = Chebyshev)
        leafsize: cKDTree leaf size
    """

    def __init__(self, data: ArrayLike, p: float = 2.0, leafsize: int = 16):
        points = check_points(data, 'data')
        self._n, self._dim = points.shape
        self._p = float(p)
        self._tree = cKDTree(points, leafsize=leafsize)
        logger.debug("Built KD-tree over %d points in %d dimensions", self._n, self._dim)

    @property
    def name(self) -> str:
        return 'kdtree'

    @property
    def n_points(self) -> int:
        return self._n

    def supports(self, capability: str) -> bool:
        return capability in (CAPABILITY_BATCH_QUERY, CAPABILITY_THREAD_SAFE)

    def knn_distance(self, point: ArrayLike, rank: int) -> float:
        return float(self.knn_distances(point, rank)[0])

    def knn_distances(self, points: ArrayLike, rank: int) -> NDArray[np.float64]:
        rank = check_rank(rank, self._n)
        queries = as_queries(points, self._dim)
        distances, _ = self._tree.query(queries, k=[rank], p=self._p)
        return np.asarray(distances[:, 0], dtype=np.float64)


class BruteForceOracle:
    """
    k-th nearest neighbor distances by exhaustive pairwise computation.

    Works with every metric scipy.spatial.distance.cdist supports,
    including ones a KD-tree cannot index (e.g. 'cosine', 'mahalanobis').

    Args:
        data: Corpus, shape (n, D)
        metric: cdist metric name or callable
        **metric_kwargs: Extra arguments for cdist (e.g. VI for mahalanobis)
    """

    def __init__(self, data: ArrayLike, metric: Any = 'euclidean', **metric_kwargs: Any):
        self._corpus = check_points(data, 'data')
        self._n, self._dim = self._corpus.shape
        self._metric = metric
        self._metric_kwargs = metric_kwargs

    @property
    def name(self) -> str:
        metric = self._metric if isinstance(self._metric, str) else 'callable'
        return f'brute_{metric}'

    @property
    def n_points(self) -> int:
        return self._n

    def supports(self, capability: str) -> bool:
        return capability in (CAPABILITY_BATCH_QUERY, CAPABILITY_THREAD_SAFE)

    def knn_distance(self, point: ArrayLike, rank: int) -> float:
        return float(self.knn_distances(point, rank)[0])

    def knn_distances(self, points: ArrayLike, rank: int) -> NDArray[np.float64]:
        rank = check_rank(rank, self._n)
        queries = as_queries(points, self._dim)
        distances = cdist(queries, self._corpus, metric=self._metric, **self._metric_kwargs)
        return np.partition(distances, rank - 1, axis=1)[:, rank - 1]


def build_oracle(data: ArrayLike, metric: Any = 'euclidean', **metric_kwargs: Any):
    """
    Default oracle for a metric.

    Minkowski-type metrics get a KD-tree; everything else falls back to
    brute force through cdist.
    """
    if isinstance(metric, str) and metric in KDTREE_METRICS and not metric_kwargs:
        return KDTreeOracle(data, p=KDTREE_METRICS[metric])
    if metric == 'minkowski' and set(metric_kwargs) <= {'p'}:
        return KDTreeOracle(data, p=metric_kwargs.get('p', 2.0))
    return BruteForceOracle(data, metric=metric, **metric_kwargs)
