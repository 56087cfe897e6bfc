"""
Repetition loop of the Hopkins statistic.

Each repetition j draws from its own generator, default_rng(children[j]),
where children = SeedSequence(entropy).spawn(R). Because every
repetition owns a substream, the per-trial values do not depend on how
the repetitions are scheduled: the sequential loop and the threaded loop
produce identical h, u, w arrays.

The threaded loop splits repetitions into contiguous chunks, accumulates
private RunningMoments per chunk and merges them in chunk order.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from pytendency.core.compute.moments import RunningMoments
from pytendency.core.protocols import NeighborOracle
from pytendency.hopkins._common import BoundingBox
from pytendency.hopkins._sampling import run_trial

logger = logging.getLogger(__name__)


@dataclass
class TrialSummary:
    """Moments and per-trial values of all repetitions."""
    h_moments: RunningMoments
    u_moments: RunningMoments
    w_moments: RunningMoments
    h: NDArray[np.float64]
    u: NDArray[np.float64]
    w: NDArray[np.float64]


def resolve_n_jobs(n_jobs: int, repetitions: int) -> int:
    """Number of worker threads actually used (never more than R)."""
    if n_jobs < 0:
        n_jobs = os.cpu_count() or 1
    return max(1, min(n_jobs, repetitions))


def _run_chunk(
    indices: Sequence[int],
    children: Sequence[np.random.SeedSequence],
    oracle: NeighborOracle,
    data: NDArray[np.float64],
    box: BoundingBox,
    sample_size: int,
    k: int,
    h: NDArray[np.float64],
    u: NDArray[np.float64],
    w: NDArray[np.float64],
) -> tuple[RunningMoments, RunningMoments, RunningMoments]:
    h_mv, u_mv, w_mv = RunningMoments(), RunningMoments(), RunningMoments()
    for j in indices:
        rng = np.random.default_rng(children[j])
        trial = run_trial(oracle, data, box, sample_size, k, rng)
        h[j], u[j], w[j] = trial.h, trial.u, trial.w
        h_mv.push(trial.h)
        u_mv.push(trial.u)
        w_mv.push(trial.w)
    return h_mv, u_mv, w_mv


def run_trials(
    oracle: NeighborOracle,
    data: NDArray[np.float64],
    box: BoundingBox,
    sample_size: int,
    repetitions: int,
    k: int,
    entropy: Any,
    n_jobs: int = 1,
) -> TrialSummary:
    """
    Run all repetitions and accumulate h, u and w.

    Args:
        oracle: Neighbor oracle over data
        data: Points, shape (n, D)
        box: Uniform sampling domain
        sample_size: Points per sample (S)
        repetitions: Number of repetitions (R)
        k: Neighbor rank
        entropy: SeedSequence entropy of the run
        n_jobs: Worker threads; 1 runs sequentially, -1 uses all CPUs

    Returns:
        TrialSummary
    """
    children = np.random.SeedSequence(entropy).spawn(repetitions)
    h = np.empty(repetitions, dtype=np.float64)
    u = np.empty(repetitions, dtype=np.float64)
    w = np.empty(repetitions, dtype=np.float64)
    args = (children, oracle, data, box, sample_size, k, h, u, w)

    workers = resolve_n_jobs(n_jobs, repetitions)
    if workers == 1:
        h_mv, u_mv, w_mv = _run_chunk(range(repetitions), *args)
    else:
        chunks = np.array_split(np.arange(repetitions), workers)
        logger.debug("Running %d repetitions on %d threads", repetitions, workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_run_chunk, chunk.tolist(), *args) for chunk in chunks]
            partials = [f.result() for f in futures]

        h_mv, u_mv, w_mv = RunningMoments(), RunningMoments(), RunningMoments()
        for ph, pu, pw in partials:
            h_mv.merge(ph)
            u_mv.merge(pu)
            w_mv.merge(pw)

    return TrialSummary(
        h_moments=h_mv,
        u_moments=u_mv,
        w_moments=w_mv,
        h=h,
        u=u,
        w=w,
    )
