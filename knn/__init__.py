"""
K-nearest-neighbors classification core with leave-one-out evaluation
"""

from .dataset import Dataset
from .distance import DISTANCE_MEASURES, DistanceMeasure, get_distance_measure
from .errors import (
    KNNError,
    DimensionMismatch,
    InsufficientNeighbors,
    DatasetLoadError,
    EmptyDatasetMetric
)
from .neighbors import NeighborCandidate, nearest_neighbors, select_neighbors
from .vote import majority_vote, classify
from .evaluate import leave_one_out
from .results import EvaluationSummary, build_report

__all__ = [
    'Dataset',
    'DISTANCE_MEASURES', 'DistanceMeasure', 'get_distance_measure',
    'KNNError', 'DimensionMismatch', 'InsufficientNeighbors', 'DatasetLoadError', 'EmptyDatasetMetric',
    'NeighborCandidate', 'nearest_neighbors', 'select_neighbors',
    'majority_vote', 'classify',
    'leave_one_out',
    'EvaluationSummary', 'build_report',
]
