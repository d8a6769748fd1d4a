"""
Distance Measures

Symmetric, non-negative dissimilarity functions between feature vectors.
Each measure is a plain value (name + functions) picked by name from
DISTANCE_MEASURES at configuration time, so callers never depend on a
concrete measure.
"""

import numpy as np
import scipy.spatial.distance
from typing import Callable, Dict, Optional

from .errors import DimensionMismatch


def _check_dimensions(a: np.ndarray, b: np.ndarray) -> None:
    if a.ndim != 1 or b.ndim != 1:
        raise ValueError(
            f"Feature vectors must be 1-dimensional, got shapes {a.shape} and {b.shape}"
        )
    if a.shape[0] != b.shape[0]:
        raise DimensionMismatch(a.shape[0], b.shape[0])


def euclidean(a: np.ndarray, b: np.ndarray) -> float:
    """L2 norm of the difference."""
    return float(np.sqrt(np.sum((a - b) ** 2)))


def manhattan(a: np.ndarray, b: np.ndarray) -> float:
    """L1 norm of the difference (city block)."""
    return float(scipy.spatial.distance.cityblock(a, b))


def chebyshev(a: np.ndarray, b: np.ndarray) -> float:
    """Largest absolute coordinate difference."""
    return float(scipy.spatial.distance.chebyshev(a, b))


def canberra(a: np.ndarray, b: np.ndarray) -> float:
    """Weighted L1 distance; coordinates where both values are 0 contribute 0."""
    return float(scipy.spatial.distance.canberra(a, b))


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    """
    One minus the cosine similarity, clipped to [0, 2].

    A zero vector has no direction: it is at distance 0 from another zero
    vector and at distance 1 from everything else.
    """
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0 if norm_a == norm_b else 1.0
    similarity = np.dot(a, b) / (norm_a * norm_b)
    return float(np.clip(1.0 - similarity, 0.0, 2.0))


def _euclidean_many(query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    return np.sqrt(np.sum((candidates - query) ** 2, axis=1))


def _manhattan_many(query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    return np.sum(np.abs(candidates - query), axis=1)


def _chebyshev_many(query: np.ndarray, candidates: np.ndarray) -> np.ndarray:
    return np.max(np.abs(candidates - query), axis=1)


class DistanceMeasure:
    """
    A named distance function.

    Args:
        name: Identifier used in configuration and reports
        compute: Function (a, b) -> float for two 1-D vectors of equal length
        compute_many: Optional vectorized function (query, candidates) -> distances,
            where candidates has shape (n, d). Falls back to calling ``compute``
            once per row when not given.
    """

    def __init__(
        self,
        name: str,
        compute: Callable[[np.ndarray, np.ndarray], float],
        compute_many: Optional[Callable[[np.ndarray, np.ndarray], np.ndarray]] = None
    ):
        self.name = name
        self._compute = compute
        self._compute_many = compute_many

    def __call__(self, a, b) -> float:
        """
        Distance between two feature vectors.

        Raises:
            DimensionMismatch: If the vectors have different lengths
        """
        a = np.asarray(a, dtype=np.float64)
        b = np.asarray(b, dtype=np.float64)
        _check_dimensions(a, b)
        return float(self._compute(a, b))

    def to_many(self, query, candidates) -> np.ndarray:
        """
        Distances from one query vector to every row of ``candidates``.

        Args:
            query: Array-like of shape (d,)
            candidates: Array-like of shape (n, d)

        Returns:
            Array of shape (n,) with the distance to each row, in row order

        Raises:
            DimensionMismatch: If d differs between query and candidates
        """
        query = np.asarray(query, dtype=np.float64)
        candidates = np.asarray(candidates, dtype=np.float64)
        if candidates.ndim != 2:
            raise ValueError(f"candidates must be 2-dimensional, got shape {candidates.shape}")
        _check_dimensions(query, np.empty(candidates.shape[1]))

        if candidates.shape[0] == 0:
            return np.empty(0, dtype=np.float64)
        if self._compute_many is None:
            return np.array([self._compute(query, row) for row in candidates], dtype=np.float64)
        return np.asarray(self._compute_many(query, candidates), dtype=np.float64)

    def __repr__(self) -> str:
        return f"DistanceMeasure({self.name!r})"


DISTANCE_MEASURES: Dict[str, DistanceMeasure] = {
    'euclidean': DistanceMeasure('euclidean', euclidean, _euclidean_many),
    'manhattan': DistanceMeasure('manhattan', manhattan, _manhattan_many),
    'chebyshev': DistanceMeasure('chebyshev', chebyshev, _chebyshev_many),
    'canberra': DistanceMeasure('canberra', canberra),
    'cosine': DistanceMeasure('cosine', cosine),
}

DEFAULT_DISTANCE = 'euclidean'


def get_distance_measure(name: str = DEFAULT_DISTANCE) -> DistanceMeasure:
    """
    Look up a distance measure by name (case-insensitive).

    Raises:
        ValueError: If no measure is registered under ``name``
    """
    key = name.strip().lower()
    if key not in DISTANCE_MEASURES:
        raise ValueError(
            f"Unknown distance measure: {name}. Available: {sorted(DISTANCE_MEASURES)}"
        )
    return DISTANCE_MEASURES[key]
