"""
Error kinds for the KNN core.

Every error aborts the current leave-one-out run; nothing here is retried
or downgraded to a partial result.
"""


class KNNError(Exception):
    """Base class for all errors raised by the classifier and its loaders."""


class DimensionMismatch(KNNError, ValueError):
    """Two feature vectors of different length were compared."""

    def __init__(self, left_dim: int, right_dim: int):
        self.left_dim = left_dim
        self.right_dim = right_dim
        super().__init__(
            f"Cannot compare feature vectors of dimension {left_dim} and {right_dim}"
        )


class InsufficientNeighbors(KNNError, ValueError):
    """Fewer candidates remain in the pool than the requested K."""

    def __init__(self, k: int, available: int):
        self.k = k
        self.available = available
        super().__init__(
            f"K={k} neighbors requested but only {available} candidates are available"
        )


class DatasetLoadError(KNNError, OSError):
    """The dataset source could not be read or parsed."""


class EmptyDatasetMetric(KNNError, ZeroDivisionError):
    """A rate metric was requested from a summary with no evaluated instances."""

    def __init__(self, metric: str = "accuracy"):
        self.metric = metric
        super().__init__(f"Cannot compute {metric}: no instances were evaluated")
