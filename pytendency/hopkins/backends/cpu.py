"""
CPU backend for the Hopkins statistic.

CPUHopkinsBackend runs one complete evaluation: sampling box, R paired
repetitions, p-value. The neighbor oracle is injected or built from the
metric at solve time.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from pytendency.core.capabilities import CAPABILITY_THREAD_SAFE, supports
from pytendency.core.compute.timing import Timer
from pytendency.core.exceptions import OracleFailureError
from pytendency.core.protocols import NeighborOracle
from pytendency.core.result import Result
from pytendency.hopkins._common import HopkinsParams
from pytendency.hopkins._extent import estimate_extent
from pytendency.hopkins._significance import hopkins_p_value
from pytendency.hopkins._trials import resolve_n_jobs, run_trials
from pytendency.hopkins.design import HopkinsDesign
from pytendency.neighbors.oracles import build_oracle


def oracle_name(oracle: Any) -> str:
    return getattr(oracle, 'name', type(oracle).__name__)


class CPUHopkinsBackend:
    """
    CPU backend for the Hopkins statistic.

    Args:
        oracle: Neighbor oracle over the design's data. If None, one is
            built per solve with build_oracle(data, metric, **metric_kwargs).
        metric: Distance metric for the default oracle.
        **metric_kwargs: Extra metric arguments for the default oracle.
    """

    def __init__(
        self,
        oracle: NeighborOracle | None = None,
        metric: Any = 'euclidean',
        **metric_kwargs: Any,
    ):
        self._oracle = oracle
        self._metric = metric
        self._metric_kwargs = metric_kwargs

    @property
    def name(self) -> str:
        return 'cpu_hopkins'

    def solve(self, design: HopkinsDesign) -> Result[HopkinsParams]:
        """Run the Hopkins statistic and return Result[HopkinsParams]."""
        n, S, R, k = design.n_observations, design.sample_size, design.repetitions, design.k
        warnings_list: list[str] = []

        # Real points query rank k + 1 against a corpus of n points
        if k + 1 > n:
            raise OracleFailureError(
                f"k={k} needs at least {k + 1} data points, got {n}",
                rank=k + 1,
            )

        timer = Timer(sync=getattr(self._oracle, 'synchronize', None))
        timer.start()

        with timer.section('oracle'):
            oracle = self._oracle
            if oracle is None:
                oracle = build_oracle(design.data, self._metric, **self._metric_kwargs)

        n_jobs = design.n_jobs
        if n_jobs != 1 and not supports(oracle, CAPABILITY_THREAD_SAFE):
            warnings_list.append(
                f"oracle {oracle_name(oracle)!r} is not thread safe; "
                f"running repetitions sequentially"
            )
            n_jobs = 1

        if design.seed is None:
            entropy = np.random.SeedSequence().entropy
        else:
            entropy = design.seed

        with timer.section('extent'):
            box = estimate_extent(design.data, design.minima, design.maxima)

        with timer.section('trials'):
            summary = run_trials(
                oracle, design.data, box, S, R, k, entropy, n_jobs=n_jobs,
            )

        with timer.section('significance'):
            h_mean = summary.h_moments.mean
            p_value = hopkins_p_value(h_mean, S)

        timer.stop()

        params = HopkinsParams(
            sample_size=S,
            dim=design.dim,
            k=k,
            repetitions=R,
            h_mean=h_mean,
            u_mean=summary.u_moments.mean,
            w_mean=summary.w_moments.mean,
            h_var=summary.h_moments.sample_variance,
            u_var=summary.u_moments.sample_variance,
            w_var=summary.w_moments.sample_variance,
            p_value=p_value,
            h=summary.h,
            u=summary.u,
            w=summary.w,
            bounding_box=box,
        )

        return Result(
            params=params,
            info={
                'n': n,
                'oracle': oracle_name(oracle),
                'seed_entropy': entropy,
                'n_jobs': resolve_n_jobs(n_jobs, R),
                'extent_source': box.source,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
