"""
Real-data and uniform-reference samplers for the Hopkins statistic.

Both samplers query the neighbor oracle once per sampled point and sum
the distances raised to the data dimensionality D. Sums use math.fsum,
which is exactly rounded and independent of summation order, so batched
and point-by-point oracles give identical aggregates.

Random consumption per repetition (fixed): sample_real_data draws its
subsample indices first, then sample_uniform_data draws its (S, D) block
of uniforms, both from the same repetition generator.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from pytendency.core.capabilities import CAPABILITY_BATCH_QUERY, supports
from pytendency.core.exceptions import OracleFailureError
from pytendency.core.protocols import NeighborOracle
from pytendency.hopkins._common import BoundingBox, TrialResult


def query_distances(
    oracle: NeighborOracle,
    points: NDArray[np.float64],
    rank: int,
) -> NDArray[np.float64]:
    """
    rank-th neighbor distance for every row of points.

    Any oracle error is surfaced as OracleFailureError; so is a distance
    that is negative or not finite. Nothing is skipped or defaulted.
    """
    m = points.shape[0]
    if supports(oracle, CAPABILITY_BATCH_QUERY):
        try:
            distances = np.asarray(oracle.knn_distances(points, rank), dtype=np.float64)
        except OracleFailureError:
            raise
        except Exception as e:
            raise OracleFailureError(
                f"Neighbor oracle failed on a batch of {m} queries at rank {rank}: {e}",
                rank=rank,
            ) from e
        if distances.shape != (m,):
            raise OracleFailureError(
                f"Neighbor oracle returned shape {distances.shape} for {m} queries",
                rank=rank,
            )
    else:
        distances = np.empty(m, dtype=np.float64)
        for i in range(m):
            try:
                distances[i] = float(oracle.knn_distance(points[i], rank))
            except OracleFailureError as e:
                if e.query_index is None:
                    e.query_index = i
                if e.rank is None:
                    e.rank = rank
                raise
            except Exception as e:
                raise OracleFailureError(
                    f"Neighbor oracle failed on query {i} at rank {rank}: {e}",
                    rank=rank,
                    query_index=i,
                ) from e

    invalid = ~np.isfinite(distances) | (distances < 0.0)
    if invalid.any():
        i = int(np.flatnonzero(invalid)[0])
        raise OracleFailureError(
            f"Neighbor oracle returned invalid distance {distances[i]!r} "
            f"for query {i} at rank {rank}",
            rank=rank,
            query_index=i,
        )
    return distances


def aggregate_distances(distances: NDArray[np.float64], dim: int) -> float:
    """Sum of distance**dim, exactly rounded."""
    return math.fsum(np.power(distances, dim).tolist())


def sample_real_data(
    oracle: NeighborOracle,
    data: NDArray[np.float64],
    sample_size: int,
    k: int,
    rng: np.random.Generator,
) -> float:
    """
    Aggregated neighbor distances of a random subsample of the data (w).

    Draws sample_size distinct points without replacement and queries
    rank k + 1 for each, since the point itself is in the corpus at
    distance 0.

    Returns:
        w = sum over the sample of d_{k+1}^D
    """
    indices = rng.choice(data.shape[0], size=sample_size, replace=False)
    distances = query_distances(oracle, data[indices], k + 1)
    return aggregate_distances(distances, data.shape[1])


def sample_uniform_data(
    oracle: NeighborOracle,
    box: BoundingBox,
    sample_size: int,
    k: int,
    rng: np.random.Generator,
) -> float:
    """
    Aggregated neighbor distances of uniform points in the box (u).

    Synthetic points are not part of the corpus, so rank k is queried.

    Returns:
        u = sum over the synthetic points of d_k^D
    """
    points = box.sample(rng, sample_size)
    distances = query_distances(oracle, points, k)
    return aggregate_distances(distances, box.dim)


def run_trial(
    oracle: NeighborOracle,
    data: NDArray[np.float64],
    box: BoundingBox,
    sample_size: int,
    k: int,
    rng: np.random.Generator,
) -> TrialResult:
    """One repetition: real sample first, then uniform sample."""
    w = sample_real_data(oracle, data, sample_size, k, rng)
    u = sample_uniform_data(oracle, box, sample_size, k, rng)
    return TrialResult.from_sums(u, w)
