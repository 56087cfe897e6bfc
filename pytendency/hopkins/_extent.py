"""
Sampling-domain estimation for the Hopkins statistic.

The uniform reference points are drawn from an axis-aligned box that is
either the data's own min/max extent or a caller-supplied override.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pytendency.core.exceptions import (
    IncompleteOverrideError,
    InvalidDimensionalityError,
)
from pytendency.core.validation import check_1d, check_array, check_finite
from pytendency.hopkins._common import BoundingBox


def _is_unset(values: ArrayLike | None) -> bool:
    return values is None or np.size(values) == 0


def check_overrides(
    minima: ArrayLike | None,
    maxima: ArrayLike | None,
    dim: int,
) -> tuple[NDArray[np.float64], NDArray[np.float64]] | None:
    """
    Validate sampling-box overrides and broadcast them to dim entries.

    Returns:
        (minima, maxima) as length-dim arrays, or None if neither is set

    Raises:
        IncompleteOverrideError: If exactly one of minima/maxima is set
        InvalidDimensionalityError: If a length is neither dim nor 1
    """
    min_unset, max_unset = _is_unset(minima), _is_unset(maxima)
    if min_unset and max_unset:
        return None
    if min_unset or max_unset:
        provided, missing = ('maxima', 'minima') if min_unset else ('minima', 'maxima')
        raise IncompleteOverrideError(
            f"{provided} given without {missing}: both sampling bounds must be "
            f"supplied together",
            provided=provided,
            missing=missing,
        )

    return (
        _broadcast(minima, dim, 'minima'),
        _broadcast(maxima, dim, 'maxima'),
    )


def _broadcast(values: Any, dim: int, name: str) -> NDArray[np.float64]:
    arr = check_array(np.atleast_1d(values), name).astype(np.float64)
    check_1d(arr, name)
    check_finite(arr, name)
    if arr.shape[0] == dim:
        return arr.copy()
    if arr.shape[0] == 1:
        return np.full(dim, arr[0], dtype=np.float64)
    raise InvalidDimensionalityError(
        f"Invalid {name} specified: expected {dim} got {name} "
        f"dimensionality: {arr.shape[0]}",
        parameter=name,
        expected=dim,
        actual=int(arr.shape[0]),
    )


def estimate_extent(
    data: NDArray[np.float64],
    minima: ArrayLike | None = None,
    maxima: ArrayLike | None = None,
) -> BoundingBox:
    """
    Bounding box for the uniform reference sample.

    Without overrides, min and extend (max - min) are taken per dimension
    from data. With overrides, both minima and maxima must be given, each
    either of length D or of length 1 (broadcast); extend = maxima - minima
    and is not sign-checked.

    Args:
        data: Points, shape (n, D)
        minima: Optional lower bounds
        maxima: Optional upper bounds

    Returns:
        BoundingBox
    """
    dim = data.shape[1]
    overrides = check_overrides(minima, maxima, dim)
    if overrides is None:
        lo = data.min(axis=0)
        hi = data.max(axis=0)
        return BoundingBox(min=lo, extend=hi - lo, source="data")

    lo, hi = overrides
    return BoundingBox(min=lo, extend=hi - lo, source="override")
