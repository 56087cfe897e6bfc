"""
Solver dispatch for the Hopkins statistic.

Provides hopkins(), the entry point that validates the configuration,
runs a backend, publishes the named statistics and hands the solution to
an optional result hierarchy.
"""

from __future__ import annotations

import dataclasses
import warnings
from typing import Any, Literal

from numpy.typing import ArrayLike

from pytendency.core.exceptions import ValidationError
from pytendency.core.hierarchy import ResultHierarchy
from pytendency.core.protocols import NeighborOracle
from pytendency.core.statistics import StatisticsChannelWarning, statistics_enabled
from pytendency.hopkins.backends.cpu import CPUHopkinsBackend
from pytendency.hopkins.design import HopkinsDesign
from pytendency.hopkins.solution import HopkinsSolution

BackendChoice = Literal['cpu', 'gpu', 'auto']

STATISTICS_DISABLED_MESSAGE = (
    "The Hopkins statistic reports through the statistics channel, which is "
    "disabled; enable level STATISTICS on the 'pytendency.statistics' logger "
    "or read the returned solution"
)


def _get_backend(
    backend: str,
    oracle: NeighborOracle | None,
    metric: Any,
    metric_kwargs: dict[str, Any],
):
    """
    Select backend.

    An injected oracle always runs on the CPU backend; 'gpu' builds a
    torch oracle, 'auto' does so only when a GPU is present and the
    metric is Euclidean.
    """
    if backend not in ('cpu', 'gpu', 'auto'):
        raise ValidationError(
            f"Unknown backend: {backend!r}. Use 'cpu', 'gpu' or 'auto'."
        )
    if oracle is not None or backend == 'cpu':
        return CPUHopkinsBackend(oracle=oracle, metric=metric, **metric_kwargs)

    if backend == 'auto':
        from pytendency.core.compute.device import detect_gpu
        if detect_gpu() is None or metric != 'euclidean' or metric_kwargs:
            return CPUHopkinsBackend(metric=metric, **metric_kwargs)

    if metric != 'euclidean' or metric_kwargs:
        raise ValidationError(
            f"backend='gpu' supports only the euclidean metric, got {metric!r}"
        )
    from pytendency.hopkins.backends.gpu import GPUHopkinsBackend
    return GPUHopkinsBackend()


def hopkins(
    data: ArrayLike | HopkinsDesign,
    sample_size: int | None = None,
    *,
    repetitions: int = 1,
    k: int = 1,
    seed: int | None = None,
    minima: ArrayLike | None = None,
    maxima: ArrayLike | None = None,
    oracle: NeighborOracle | None = None,
    metric: Any = 'euclidean',
    metric_kwargs: dict[str, Any] | None = None,
    n_jobs: int = 1,
    emit_statistics: bool = True,
    hierarchy: ResultHierarchy | None = None,
    parent: Any = None,
    backend: BackendChoice = 'cpu',
) -> HopkinsSolution:
    """
    Hopkins statistic of clustering tendency.

    Compares nearest-neighbor distances of sample_size real points with
    those of sample_size points drawn uniformly in the data's bounding box:
    h = u / (u + w), with u and w the sums of the k-th neighbor distances
    raised to the dimensionality. h is averaged over repetitions and
    tested against its Beta(S, S) null distribution.

    Parameters
    ----------
    data : array-like or HopkinsDesign
        Points, shape (n, D); 1D input is treated as n points in one
        dimension. Can also be a pre-built HopkinsDesign, in which case
        sample_size, repetitions, k, seed, minima, maxima and n_jobs must
        be left at their defaults (ValidationError otherwise).
    sample_size : int or None
        Sample size S (1 <= S <= n). Default 10% of n.
    repetitions : int
        Number of independent repetitions R. Default 1.
    k : int
        Neighbor rank. Default 1 (nearest neighbor).
    seed : int or None
        Random seed. With a fixed seed the solution is bit-for-bit
        reproducible. None draws fresh entropy, recorded in
        solution.info['seed_entropy'].
    minima, maxima : array-like or None
        Bounds of the uniform sampling box, each of length D or 1.
        Must be given together; default is the data's extent.
    oracle : NeighborOracle or None
        Object with knn_distance(point, rank) over the same data. Default
        is a KD-tree (Minkowski metrics) or brute force (other metrics).
    metric : str or callable
        Distance metric of the default oracle. Default 'euclidean'.
    metric_kwargs : dict or None
        Extra arguments for the metric (e.g. {'p': 3} for 'minkowski').
    n_jobs : int
        Threads for the repetition loop; -1 uses all CPUs. Results do not
        depend on n_jobs apart from rounding in the merged moments.
    emit_statistics : bool
        Publish the named statistics on the 'pytendency.statistics'
        logger. Issues StatisticsChannelWarning if that channel is off.
    hierarchy : ResultHierarchy or None
        If given, the solution is attached to it, notifying subscribers.
    parent : object or None
        Node to attach under; default is the hierarchy root.
    backend : str
        'cpu' (default), 'gpu' (torch neighbor queries) or 'auto'.

    Returns
    -------
    HopkinsSolution
    """
    if isinstance(data, HopkinsDesign):
        overrides = {
            'sample_size': sample_size is not None,
            'repetitions': repetitions != 1,
            'k': k != 1,
            'seed': seed is not None,
            'minima': minima is not None,
            'maxima': maxima is not None,
            'n_jobs': n_jobs != 1,
        }
        given = [name for name, set_ in overrides.items() if set_]
        if given:
            raise ValidationError(
                f"{', '.join(given)}: already fixed by the HopkinsDesign; "
                f"build a new design with HopkinsDesign.for_hopkins instead"
            )
        design = data
    else:
        design = HopkinsDesign.for_hopkins(
            data,
            sample_size,
            repetitions=repetitions,
            k=k,
            minima=minima,
            maxima=maxima,
            seed=seed,
            n_jobs=n_jobs,
        )

    if hierarchy is not None and parent is not None and parent not in hierarchy:
        raise ValidationError("parent: node is not part of the given hierarchy")

    be = _get_backend(backend, oracle, metric, metric_kwargs or {})

    channel_warning = emit_statistics and not statistics_enabled()
    if channel_warning:
        warnings.warn(STATISTICS_DISABLED_MESSAGE, StatisticsChannelWarning, stacklevel=2)

    result = be.solve(design)
    if channel_warning:
        result = dataclasses.replace(
            result, warnings=result.warnings + (STATISTICS_DISABLED_MESSAGE,)
        )

    solution = HopkinsSolution(_result=result, _design=design)
    if emit_statistics:
        solution.emit_statistics()
    if hierarchy is not None:
        hierarchy.attach(solution, parent)
    return solution
