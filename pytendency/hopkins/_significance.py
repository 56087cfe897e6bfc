"""
Significance of the Hopkins statistic.

Under the null hypothesis of complete spatial randomness, Hopkins and
Skellam showed the statistic is Beta(S, S) distributed, S being the
sample size. The p-value takes the tail on the side of 0.5 that x falls
on, so symmetric deviations give the same p-value.
"""

from __future__ import annotations

from pytendency.core.compute.special import regularized_incomplete_beta


def hopkins_p_value(x: float, sample_size: int) -> float:
    """
    p-value of a mean Hopkins statistic x for sample size S.

    ix = I_x(S, S); p = 1 - ix if x > 0.5 else ix. The upper tail is
    evaluated directly rather than as 1 - ix, so small p-values of
    strongly clustered data keep their precision.

    Returns:
        p in [0, 0.5], with p(x) == p(1 - x)
    """
    if x > 0.5:
        return regularized_incomplete_beta(x, sample_size, sample_size, upper=True)
    return regularized_incomplete_beta(x, sample_size, sample_size)
