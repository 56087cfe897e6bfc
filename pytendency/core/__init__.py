"""
Core infrastructure for PyTendency.

This module provides shared abstractions and utilities used by the
domain-specific submodules (hopkins, neighbors).

Key components:
    protocols: NeighborOracle, Backend protocols
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    statistics: Named-record statistics channel on top of logging
    hierarchy: Result tree with attach notifications
    compute: Timing, running moments, special functions, device detection
"""

from pytendency.core.protocols import NeighborOracle, Backend
from pytendency.core.result import Result
from pytendency.core.hierarchy import ResultHierarchy, EvaluationPipeline
from pytendency.core.exceptions import (
    PyTendencyError,
    ValidationError,
    DimensionError,
    InvalidDimensionalityError,
    IncompleteOverrideError,
    SampleSizeExceedsDataError,
    OracleFailureError,
)

__all__ = [
    # Protocols
    "NeighborOracle",
    "Backend",
    # Result
    "Result",
    "ResultHierarchy",
    "EvaluationPipeline",
    # Exceptions
    "PyTendencyError",
    "ValidationError",
    "DimensionError",
    "InvalidDimensionalityError",
    "IncompleteOverrideError",
    "SampleSizeExceedsDataError",
    "OracleFailureError",
]
