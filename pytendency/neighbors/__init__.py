"""
Nearest-neighbor oracles.

Strategy objects satisfying pytendency.core.protocols.NeighborOracle:

    KDTreeOracle(data, p=2.0)           scipy cKDTree, Minkowski norms
    BruteForceOracle(data, metric=...)  scipy cdist, any cdist metric
    TorchOracle(data, device='auto')    torch.cdist on CUDA/MPS (optional)

Any object with a knn_distance(point, rank) method can be used instead.
"""

from pytendency.neighbors.oracles import (
    KDTREE_METRICS,
    BruteForceOracle,
    KDTreeOracle,
    build_oracle,
)

__all__ = [
    "KDTREE_METRICS",
    "KDTreeOracle",
    "BruteForceOracle",
    "build_oracle",
]
