"""Exception types for GeoClassKit.

No I/O. Only depends on: typing.
"""

from typing import Any, Tuple


class GeoClassKitError(Exception):
    """Base class for all GeoClassKit errors."""
    pass


class InvalidConfigurationError(GeoClassKitError, ValueError):
    """Raised for bad allocator bounds, empty histograms or bad parameters.

    Fatal: raised before any sampling begins.
    """
    pass


class InsufficientSamplesError(GeoClassKitError):
    """Raised when a class has fewer locations than its allocation."""

    def __init__(self, class_value: int, requested: int, available: int):
        self.class_value = class_value
        self.requested = requested
        self.available = available
        super().__init__(
            f"Class {class_value}: {requested} samples requested but only "
            f"{available} location(s) available."
        )


class TrainingFailureError(GeoClassKitError):
    """A single grid point failed to train or predict.

    Recorded on the grid search result; never raised out of the search.
    """

    def __init__(self, point: Any, cause: BaseException):
        self.point = point
        self.cause = cause
        super().__init__(
            f"Grid point {point.index} {point.as_dict()} failed: "
            f"{type(cause).__name__}: {cause}"
        )


class NoViableModelError(GeoClassKitError):
    """Raised when every grid point failed."""

    def __init__(self, failures: Tuple[Any, ...]):
        self.failures = failures
        details = "; ".join(str(f.error) for f in failures)
        super().__init__(
            f"All {len(failures)} grid point(s) failed. {details}"
        )


class DegenerateMatrixError(GeoClassKitError, ValueError):
    """Raised when Kappa is undefined (expected agreement equals 1)."""
    pass
