"""
Online mean and variance accumulation.

RunningMoments implements Welford's update for a stream of scalars and
the Chan-Golub-LeVeque combination for merging two partial accumulators,
so that repetitions run on separate threads can be reduced without
summing sample variances.

References:
    Welford, B. P. (1962). Note on a method for calculating corrected
    sums of squares and products. Technometrics 4(3), 419-420.

    Chan, T. F., Golub, G. H., LeVeque, R. J. (1979). Updating formulae
    and a pairwise algorithm for computing sample variances.
"""

from __future__ import annotations

import math


class RunningMoments:
    """
    Numerically stable running count, mean and sample variance.

    Usage:
        mv = RunningMoments()
        for value in stream:
            mv.push(value)
        mv.mean, mv.sample_variance

    The sample variance is undefined (None) until two values have been
    seen; it is never reported as 0 for a single observation.
    """

    __slots__ = ('_n', '_mean', '_m2')

    def __init__(self) -> None:
        self._n = 0
        self._mean = 0.0
        self._m2 = 0.0

    def push(self, value: float) -> None:
        """Add one observation."""
        value = float(value)
        self._n += 1
        delta = value - self._mean
        self._mean += delta / self._n
        self._m2 += delta * (value - self._mean)

    def merge(self, other: RunningMoments) -> RunningMoments:
        """
        Fold another accumulator into this one, in place.

        Uses the pairwise combination of Chan et al.:
            M2 = M2_a + M2_b + delta^2 * n_a * n_b / n

        Returns:
            self, to allow chaining
        """
        if other._n == 0:
            return self
        if self._n == 0:
            self._n, self._mean, self._m2 = other._n, other._mean, other._m2
            return self

        n = self._n + other._n
        delta = other._mean - self._mean
        self._mean += delta * other._n / n
        self._m2 += other._m2 + delta * delta * self._n * other._n / n
        self._n = n
        return self

    def copy(self) -> RunningMoments:
        """Independent copy of the current state."""
        clone = RunningMoments()
        clone._n, clone._mean, clone._m2 = self._n, self._mean, self._m2
        return clone

    @property
    def count(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def mean(self) -> float:
        """Arithmetic mean; NaN when empty."""
        if self._n == 0:
            return float('nan')
        return self._mean

    @property
    def sample_variance(self) -> float | None:
        """Unbiased variance (n - 1 denominator); None for fewer than 2 values."""
        if self._n < 2:
            return None
        return self._m2 / (self._n - 1)

    @property
    def sample_stddev(self) -> float | None:
        """Square root of the sample variance; None for fewer than 2 values."""
        var = self.sample_variance
        if var is None:
            return None
        return math.sqrt(var)

    def __repr__(self) -> str:
        return (
            f"RunningMoments(count={self._n}, mean={self.mean:.6g}, "
            f"sample_variance={self.sample_variance!r})"
        )
