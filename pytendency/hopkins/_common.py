"""
Common data structures for the Hopkins statistic.

BoundingBox is the uniform sampling domain, TrialResult one repetition's
(u, w, h), and HopkinsParams the parameter payload wrapped by Result[P]
and exposed through HopkinsSolution.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned uniform sampling domain.

    Attributes:
        min: Lower corner, shape (D,)
        extend: Side lengths (max - min), shape (D,). Non-negative when
            derived from data; caller overrides are not sign-checked.
        source: "data" or "override"
    """
    min: NDArray[np.float64]
    extend: NDArray[np.float64]
    source: str = "data"

    @property
    def dim(self) -> int:
        return int(self.min.shape[0])

    @property
    def max(self) -> NDArray[np.float64]:
        """Upper corner, min + extend."""
        return self.min + self.extend

    def sample(self, rng: np.random.Generator, size: int) -> NDArray[np.float64]:
        """
        Draw size points uniformly inside the box, shape (size, D).

        Coordinates are min[d] + U[0, 1) * extend[d]; the (size, D) block
        is filled row by row, i.e. point after point. An axis with
        extend[d] == 0 yields exactly min[d].
        """
        return self.min + rng.random((size, self.dim)) * self.extend


@dataclass(frozen=True)
class TrialResult:
    """
    One repetition of the Hopkins experiment.

    - u: sum of d^D over synthetic uniform points
    - w: sum of d^D over sampled real points
    - h: u / (u + w), 0.5 when both sums are zero
    """
    u: float
    w: float
    h: float

    @classmethod
    def from_sums(cls, u: float, w: float) -> TrialResult:
        total = u + w
        h = u / total if total > 0.0 else 0.5
        return cls(u=float(u), w=float(w), h=float(h))


@dataclass(frozen=True)
class HopkinsParams:
    """
    Parameter payload for Hopkins statistic results.

    Means are over repetitions; variances are sample variances and are
    None when only one repetition was run. h, u and w hold the per-trial
    values in repetition order, shape (R,).
    """
    sample_size: int
    dim: int
    k: int
    repetitions: int
    h_mean: float
    u_mean: float
    w_mean: float
    h_var: float | None
    u_var: float | None
    w_var: float | None
    p_value: float
    h: NDArray[np.floating[Any]]                 # shape (R,)
    u: NDArray[np.floating[Any]]                 # shape (R,)
    w: NDArray[np.floating[Any]]                 # shape (R,)
    bounding_box: BoundingBox
