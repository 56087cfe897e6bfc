"""
Solution wrapper for Hopkins statistic results.

HopkinsSolution wraps Result[HopkinsParams] and provides convenient
accessors, the named statistics records and a summary printout.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pytendency.core.result import Result
from pytendency.core.statistics import emit_statistic
from pytendency.hopkins._common import BoundingBox, HopkinsParams

if TYPE_CHECKING:
    from pytendency.hopkins.design import HopkinsDesign

STATISTICS_PREFIX = 'pytendency.hopkins'


def _sqrt_or_none(var: float | None) -> float | None:
    return None if var is None else math.sqrt(var)


@dataclass
class HopkinsSolution:
    """
    User-facing Hopkins statistic results.

    h close to 0.5 is expected for uniformly random data; values towards 1
    indicate clustering (real points are closer to their neighbors than
    random locations are), values towards 0 indicate regular spacing.
    """
    _result: Result[HopkinsParams]
    _design: 'HopkinsDesign'

    # --- Statistic ---

    @property
    def statistic(self) -> float:
        """Mean Hopkins statistic over repetitions."""
        return self._result.params.h_mean

    @property
    def p_value(self) -> float:
        """Beta(S, S) tail probability of the mean statistic."""
        return self._result.params.p_value

    @property
    def sample_size(self) -> int:
        return self._result.params.sample_size

    @property
    def dim(self) -> int:
        return self._result.params.dim

    @property
    def k(self) -> int:
        return self._result.params.k

    @property
    def repetitions(self) -> int:
        return self._result.params.repetitions

    # --- Moments ---

    @property
    def h_mean(self) -> float:
        return self._result.params.h_mean

    @property
    def u_mean(self) -> float:
        return self._result.params.u_mean

    @property
    def w_mean(self) -> float:
        return self._result.params.w_mean

    @property
    def h_var(self) -> float | None:
        """Sample variance of h; None for a single repetition."""
        return self._result.params.h_var

    @property
    def u_var(self) -> float | None:
        return self._result.params.u_var

    @property
    def w_var(self) -> float | None:
        return self._result.params.w_var

    @property
    def h_std(self) -> float | None:
        """Sample standard deviation of h; None for a single repetition."""
        return _sqrt_or_none(self._result.params.h_var)

    @property
    def u_std(self) -> float | None:
        return _sqrt_or_none(self._result.params.u_var)

    @property
    def w_std(self) -> float | None:
        return _sqrt_or_none(self._result.params.w_var)

    # --- Per-trial values ---

    @property
    def h(self) -> NDArray[np.floating[Any]]:
        """Per-repetition h, shape (R,)."""
        return self._result.params.h

    @property
    def u(self) -> NDArray[np.floating[Any]]:
        return self._result.params.u

    @property
    def w(self) -> NDArray[np.floating[Any]]:
        return self._result.params.w

    @property
    def bounding_box(self) -> BoundingBox:
        return self._result.params.bounding_box

    # --- Metadata ---

    @property
    def seed(self) -> int | None:
        """Random seed used."""
        return self._design.seed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Statistics channel ---

    def statistics(self) -> list[tuple[str, float | int]]:
        """
        Named numeric records in emission order.

        Standard deviations are omitted when only one repetition was run.
        """
        prefix = STATISTICS_PREFIX
        records: list[tuple[str, float | int]] = [
            (f"{prefix}.samplesize", self.sample_size),
            (f"{prefix}.dim", self.dim),
            (f"{prefix}.nearest-neighbor", self.k),
            (f"{prefix}.h.mean", self.h_mean),
            (f"{prefix}.u.mean", self.u_mean),
            (f"{prefix}.w.mean", self.w_mean),
        ]
        if self.repetitions > 1:
            records += [
                (f"{prefix}.h.std", self.h_std),
                (f"{prefix}.u.std", self.u_std),
                (f"{prefix}.w.std", self.w_std),
            ]
        records.append((f"{prefix}.p", self.p_value))
        return records

    def emit_statistics(self, logger: logging.Logger | None = None) -> None:
        """Publish statistics() on the statistics channel."""
        for name, value in self.statistics():
            emit_statistic(name, value, logger=logger)

    # --- Display ---

    def summary(self) -> str:
        """
        Hopkins statistic summary.

        Produces:
            HOPKINS STATISTIC OF CLUSTERING TENDENCY

            Sample size: 50   Dimensions: 2   k: 1   Repetitions: 5

                  mean        std. dev.
            H     0.51234     0.02345
            U     0.01234     0.00123
            W     0.01187     0.00111

            p-value: 0.4321
        """
        lines = [
            "\nHOPKINS STATISTIC OF CLUSTERING TENDENCY\n",
            f"Sample size: {self.sample_size}   Dimensions: {self.dim}   "
            f"k: {self.k}   Repetitions: {self.repetitions}",
            "",
            f"{'':>4s} {'mean':>14s} {'std. dev.':>14s}",
        ]
        for label, mean, std in (
            ("H", self.h_mean, self.h_std),
            ("U", self.u_mean, self.u_std),
            ("W", self.w_mean, self.w_std),
        ):
            std_str = f"{std:14.5g}" if std is not None else f"{'NA':>14s}"
            lines.append(f"{label:>4s} {mean:14.5g} {std_str}")
        lines.append("")
        lines.append(f"p-value: {self.p_value:.4g}")
        if self.warnings:
            lines.append("")
            lines.extend(f"Warning: {w}" for w in self.warnings)
        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"HopkinsSolution(statistic={self.statistic:.4g}, "
            f"p_value={self.p_value:.4g}, S={self.sample_size}, "
            f"R={self.repetitions}, backend={self.backend_name!r})"
        )
