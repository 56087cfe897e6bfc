"""
Hopkins statistic of clustering tendency.

Usage:
    from pytendency.hopkins import hopkins

    result = hopkins(X, sample_size=50, repetitions=5, seed=42)
    result.statistic, result.p_value
    print(result.summary())

Reference:
    B. Hopkins and J. G. Skellam (1954). A new method for determining the
    type of distribution of plant individuals. Annals of Botany 18(2),
    213-227.
"""

from pytendency.hopkins.solvers import hopkins
from pytendency.hopkins.design import HopkinsDesign
from pytendency.hopkins._common import BoundingBox, HopkinsParams, TrialResult
from pytendency.hopkins._extent import estimate_extent
from pytendency.hopkins._significance import hopkins_p_value
from pytendency.hopkins.solution import HopkinsSolution

__all__ = [
    "hopkins",
    "hopkins_p_value",
    "estimate_extent",
    "HopkinsDesign",
    "HopkinsParams",
    "HopkinsSolution",
    "BoundingBox",
    "TrialResult",
]
