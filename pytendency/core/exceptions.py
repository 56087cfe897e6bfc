"""
Exception hierarchy for PyTendency.

All exceptions inherit from PyTendencyError to allow catching any
library-specific error. Domain-specific exceptions should inherit from
the appropriate base class here.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PyTendencyError(Exception):
    """Base exception for all PyTendency errors."""
    pass


class ValidationError(PyTendencyError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks. All
    configuration errors are raised before any random draw is made.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class InvalidDimensionalityError(DimensionError):
    """
    A per-dimension override has the wrong length.

    Sampling-box overrides must have either one entry per data dimension
    or a single entry that is broadcast to every dimension.

    Attributes:
        parameter: Name of the offending override ('minima' or 'maxima')
        expected: Dimensionality of the data
        actual: Length that was supplied
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.expected = expected
        self.actual = actual


class IncompleteOverrideError(ValidationError):
    """
    Only one side of the sampling-box override was supplied.

    Attributes:
        provided: Name of the override that was given
        missing: Name of the override that is missing
    """

    def __init__(
        self,
        message: str,
        provided: str | None = None,
        missing: str | None = None,
    ):
        super().__init__(message)
        self.provided = provided
        self.missing = missing


class SampleSizeExceedsDataError(ValidationError):
    """
    Requested sample size is larger than the number of data points.

    Attributes:
        sample_size: Requested sample size
        n_observations: Number of points available
    """

    def __init__(
        self,
        message: str,
        sample_size: int | None = None,
        n_observations: int | None = None,
    ):
        super().__init__(message)
        self.sample_size = sample_size
        self.n_observations = n_observations


class OracleFailureError(PyTendencyError):
    """
    A nearest-neighbor query failed.

    Raised when the neighbor oracle cannot answer a query (e.g. the corpus
    has fewer points than the requested rank) or returns an invalid
    distance. Aborts the whole run: a partial aggregate would bias the
    statistic.

    Attributes:
        rank: Neighbor rank that was requested
        query_index: Position of the failing query within its sample,
            None if the failure is not tied to one query
    """

    def __init__(
        self,
        message: str,
        rank: int | None = None,
        query_index: int | None = None,
    ):
        super().__init__(message)
        self.rank = rank
        self.query_index = query_index
