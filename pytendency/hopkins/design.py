"""
Design class for the Hopkins statistic.

HopkinsDesign encapsulates all inputs needed by a backend to run the
statistic. Immutable, validated at construction: every configuration
error surfaces here, before any random number is drawn.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pytendency.core.exceptions import SampleSizeExceedsDataError, ValidationError
from pytendency.core.validation import check_points, check_positive_int
from pytendency.hopkins._extent import check_overrides


def default_sample_size(n_observations: int) -> int:
    """Ten percent of the data, at least one point."""
    return max(1, int(round(0.1 * n_observations)))


@dataclass(frozen=True)
class HopkinsDesign:
    """
    Frozen design for the Hopkins statistic.

    Attributes:
        data: Points, shape (n, D), read-only float64 copy.
        sample_size: Points per real and per uniform sample (S).
        repetitions: Number of independent repetitions (R).
        k: Neighbor rank used for the distances.
        minima: Lower sampling bounds broadcast to D, or None (from data).
        maxima: Upper sampling bounds broadcast to D, or None (from data).
        seed: Random seed for reproducibility; None draws fresh entropy.
        n_jobs: Worker threads for the repetition loop (-1: all CPUs).
    """
    data: NDArray[np.float64]
    sample_size: int
    repetitions: int
    k: int
    minima: NDArray[np.float64] | None
    maxima: NDArray[np.float64] | None
    seed: int | None
    n_jobs: int

    @property
    def n_observations(self) -> int:
        return int(self.data.shape[0])

    @property
    def dim(self) -> int:
        return int(self.data.shape[1])

    @property
    def has_overrides(self) -> bool:
        return self.minima is not None

    @classmethod
    def for_hopkins(
        cls,
        data: Any,
        sample_size: int | None = None,
        *,
        repetitions: int = 1,
        k: int = 1,
        minima: ArrayLike | None = None,
        maxima: ArrayLike | None = None,
        seed: int | None = None,
        n_jobs: int = 1,
    ) -> HopkinsDesign:
        """
        Create a Hopkins design with validation.

        Args:
            data: Points: 2D array-like (n, D), 1D array-like (n points in
                one dimension) or pandas DataFrame.
            sample_size: Sample size S, 1 <= S <= n. None uses 10% of n.
            repetitions: Number of repetitions R >= 1.
            k: Neighbor rank k >= 1.
            minima: Lower bounds of the uniform sampling box, length D or 1.
            maxima: Upper bounds of the uniform sampling box, length D or 1.
            seed: Random seed.
            n_jobs: Worker threads (>= 1, or -1 for all CPUs).

        Returns:
            Validated HopkinsDesign.

        Raises:
            ValidationError: If an argument is invalid.
            SampleSizeExceedsDataError: If S > n.
            IncompleteOverrideError: If only one of minima/maxima is given.
            InvalidDimensionalityError: If an override length is not D or 1.
        """
        points = check_points(data, 'data')
        points.setflags(write=False)
        n, dim = points.shape

        if sample_size is None:
            sample_size = default_sample_size(n)
        sample_size = check_positive_int(sample_size, 'sample_size')
        repetitions = check_positive_int(repetitions, 'repetitions')
        k = check_positive_int(k, 'k')

        if sample_size > n:
            raise SampleSizeExceedsDataError(
                f"sample_size ({sample_size}) exceeds the number of data "
                f"points ({n})",
                sample_size=sample_size,
                n_observations=n,
            )

        overrides = check_overrides(minima, maxima, dim)
        lo, hi = overrides if overrides is not None else (None, None)

        if isinstance(n_jobs, bool) or not isinstance(n_jobs, (int, np.integer)):
            raise ValidationError(f"n_jobs: expected an integer, got {n_jobs!r}")
        if n_jobs == 0 or n_jobs < -1:
            raise ValidationError(f"n_jobs: must be >= 1 or -1, got {n_jobs}")

        if seed is not None:
            if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
                raise ValidationError(f"seed: expected an integer or None, got {seed!r}")
            if seed < 0:
                raise ValidationError(f"seed: must be non-negative, got {seed}")
            seed = int(seed)

        return cls(
            data=points,
            sample_size=sample_size,
            repetitions=repetitions,
            k=k,
            minima=lo,
            maxima=hi,
            seed=seed,
            n_jobs=int(n_jobs),
        )
