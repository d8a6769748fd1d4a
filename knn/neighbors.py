"""
Neighbor Selection

Brute-force K-nearest search. Candidates are ordered by ascending distance
with a stable sort, so equal distances keep their original pool order and
the selection is deterministic.
"""

import numpy as np
from typing import Any, List, NamedTuple, Optional

from .dataset import Dataset
from .distance import DistanceMeasure
from .errors import InsufficientNeighbors


class NeighborCandidate(NamedTuple):
    distance: float
    index: int
    label: Any


def validate_k(k) -> int:
    """Return ``k`` if it is a positive integer, else raise ValueError."""
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise ValueError(f"k must be a positive integer, got {k!r}")
    return int(k)


def _to_python(value):
    return value.item() if isinstance(value, np.generic) else value


def nearest_neighbors(
    query,
    features: np.ndarray,
    labels: np.ndarray,
    k: int,
    measure: DistanceMeasure,
    exclude_index: Optional[int] = None
) -> List[NeighborCandidate]:
    """
    Find the k rows of ``features`` closest to ``query``.

    Args:
        query: Feature vector of shape (d,)
        features: Candidate pool of shape (n, d)
        labels: Labels of the pool, shape (n,)
        k: Number of neighbors to return
        measure: Distance measure
        exclude_index: Pool index to leave out, used when the query is itself
            a member of the pool. Only that index is dropped; other rows with
            identical features stay candidates.

    Returns:
        Exactly k NeighborCandidate tuples, ascending by distance

    Raises:
        ValueError: If k is not a positive integer
        InsufficientNeighbors: If fewer than k candidates remain
        DimensionMismatch: If the query and pool dimensionality differ
    """
    k = validate_k(k)

    distances = measure.to_many(query, features)
    candidate_indices = np.arange(distances.shape[0])
    if exclude_index is not None:
        candidate_indices = candidate_indices[candidate_indices != exclude_index]

    if candidate_indices.shape[0] < k:
        raise InsufficientNeighbors(k, int(candidate_indices.shape[0]))

    order = np.argsort(distances[candidate_indices], kind='stable')[:k]
    nearest = candidate_indices[order]

    return [
        NeighborCandidate(float(distances[i]), int(i), _to_python(labels[i]))
        for i in nearest
    ]


def select_neighbors(
    dataset: Dataset,
    query_index: int,
    k: int,
    measure: DistanceMeasure
) -> List[NeighborCandidate]:
    """
    Leave-one-out neighbor selection: the k nearest instances of
    ``dataset[query_index]`` among all other instances of the dataset.
    """
    if not 0 <= query_index < len(dataset):
        raise IndexError(f"query_index {query_index} out of range for {len(dataset)} instances")

    return nearest_neighbors(
        dataset.features[query_index],
        dataset.features,
        dataset.labels,
        k,
        measure,
        exclude_index=query_index
    )
