"""
Core protocols for PyTendency.

These define structural interfaces that implementations must satisfy.
We use Protocol (structural typing) rather than ABC (nominal typing) so
that any index or brute-force search can be injected as a strategy object
without inheriting from a library class.

Design Principles:
    - Minimal contracts: prescribe only what's truly universal
    - Capability-driven: use supports() for optional features
    - Type-safe: use generics to preserve type information through pipelines
"""

from typing import Protocol, TypeVar, Any, runtime_checkable

import numpy as np
from numpy.typing import NDArray

P = TypeVar('P')  # Parameter payload type
D = TypeVar('D')  # Design type


@runtime_checkable
class NeighborOracle(Protocol):
    """
    Minimal nearest-neighbor capability consumed by the Hopkins engine.

    The oracle owns a fixed corpus (the dataset) and a fixed distance
    metric, both chosen at construction time. It answers a single kind of
    question: the distance from a query point to its rank-th nearest
    corpus member.

    Optional extensions are discovered through supports() with the
    constants in pytendency.core.capabilities; an oracle advertising
    CAPABILITY_BATCH_QUERY must also implement

        knn_distances(points: NDArray, rank: int) -> NDArray

    returning one distance per row of points.
    """

    def knn_distance(self, point: NDArray[np.floating[Any]], rank: int) -> float:
        """
        Distance from point to its rank-th nearest corpus member.

        Args:
            point: Query coordinates, shape (D,)
            rank: Neighbor rank, >= 1. A corpus member identical to the
                query counts as a neighbor at distance 0.

        Returns:
            Non-negative distance

        Raises:
            OracleFailureError: If the query cannot be answered
        """
        ...


@runtime_checkable
class Backend(Protocol[D, P]):
    """
    Protocol for computational backends.

    Each backend knows how to take a domain-specific design and produce
    a domain-specific parameter payload. Backends are stateless apart from
    construction-time options, which makes them easy to test and swap.

    Type Parameters:
        D: The design type this backend accepts
        P: The parameter payload type this backend produces
    """

    @property
    def name(self) -> str:
        """
        Backend identifier.

        Convention: '{device}_{algorithm}'
        Examples: 'cpu_hopkins', 'gpu_cuda_hopkins'
        """
        ...

    def solve(self, design: D) -> 'Result[P]':
        """
        Execute the statistical computation.

        Args:
            design: Validated, immutable design

        Returns:
            Result envelope containing parameter payload and metadata

        Raises:
            OracleFailureError: If a neighbor query fails
        """
        ...
