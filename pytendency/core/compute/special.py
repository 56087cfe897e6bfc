"""
Special functions used for significance evaluation.

regularized_incomplete_beta wraps scipy.special.betainc and betaincc.
Either tail can be requested directly, which avoids the cancellation of
computing 1 - I_x when I_x is close to one.
"""

from __future__ import annotations

import math

from scipy import special

from pytendency.core.exceptions import ValidationError


def regularized_incomplete_beta(
    x: float,
    a: float,
    b: float,
    *,
    upper: bool = False,
) -> float:
    """
    Regularized incomplete beta function I_x(a, b).

    Args:
        x: Evaluation point. Values <= 0 and >= 1 are clamped to the
            distribution's support ends.
        a: First shape parameter, > 0
        b: Second shape parameter, > 0
        upper: If True, return the upper tail 1 - I_x(a, b), evaluated
            by betaincc rather than by subtraction from one.

    Returns:
        I_x(a, b), or its complement if upper=True; always in [0, 1]

    Raises:
        ValidationError: If a or b is not positive and finite, or x is NaN
    """
    x = float(x)
    a = float(a)
    b = float(b)
    if math.isnan(x):
        raise ValidationError("x: must not be NaN")
    if not (a > 0.0 and math.isfinite(a)):
        raise ValidationError(f"a: must be positive and finite, got {a}")
    if not (b > 0.0 and math.isfinite(b)):
        raise ValidationError(f"b: must be positive and finite, got {b}")

    x = min(max(x, 0.0), 1.0)
    if upper:
        return float(special.betaincc(a, b, x))
    return float(special.betainc(a, b, x))
