"""
Majority Vote

Turns the K nearest neighbors into a single predicted label.
"""

from collections import Counter
from typing import Any, Sequence

from .dataset import Dataset
from .distance import DistanceMeasure
from .neighbors import NeighborCandidate, nearest_neighbors


def majority_vote(neighbors: Sequence[NeighborCandidate]) -> Any:
    """
    Most frequent label among ``neighbors``.

    Votes are counted per label. When several labels share the highest count,
    the winner is the first of them met while scanning the neighbors in the
    order given, which is ascending distance for the output of the neighbor
    selector, so the closest tied neighbor decides.

    Args:
        neighbors: Non-empty sequence of NeighborCandidate, closest first

    Returns:
        The predicted label

    Raises:
        ValueError: If ``neighbors`` is empty
    """
    if len(neighbors) == 0:
        raise ValueError("Cannot vote without neighbors")

    counts = Counter(neighbor.label for neighbor in neighbors)
    top = max(counts.values())

    for neighbor in neighbors:
        if counts[neighbor.label] == top:
            return neighbor.label


def classify(vector, dataset: Dataset, k: int, measure: DistanceMeasure) -> Any:
    """Predict the label of an unlabeled feature vector against ``dataset``."""
    neighbors = nearest_neighbors(vector, dataset.features, dataset.labels, k, measure)
    return majority_vote(neighbors)
