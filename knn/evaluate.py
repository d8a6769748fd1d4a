"""
Leave-One-Out Evaluation

Runs every instance of a dataset through the classifier, using all other
instances as the neighbor pool, and aggregates the outcomes into an
EvaluationSummary. KNN is a lazy learner, so there is no training step:
the dataset itself is the model.
"""

import time
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Optional, Tuple, Union

from .dataset import Dataset
from .distance import DistanceMeasure, get_distance_measure
from .errors import InsufficientNeighbors
from .neighbors import select_neighbors, validate_k
from .results import EvaluationSummary
from .vote import majority_vote


ProgressCallback = Callable[[int, int], None]


def predict_held_out(dataset: Dataset, index: int, k: int, measure: DistanceMeasure) -> Any:
    """Predict the label of instance ``index`` from the remaining instances."""
    neighbors = select_neighbors(dataset, index, k, measure)
    return majority_vote(neighbors)


def _resolve_measure(measure) -> DistanceMeasure:
    if measure is None:
        return get_distance_measure()
    if isinstance(measure, str):
        return get_distance_measure(measure)
    return measure


def leave_one_out(
    dataset: Dataset,
    k: int = 5,
    measure: Union[DistanceMeasure, str, None] = None,
    n_jobs: int = 1,
    progress: Optional[ProgressCallback] = None
) -> Tuple[EvaluationSummary, np.ndarray]:
    """
    Leave-one-out validation of a KNN classifier over ``dataset``.

    Instances are evaluated in dataset order. With n_jobs > 1 the neighbor
    searches run on a thread pool, but the results are consumed here, in
    dataset order, so the summary is only ever touched by the calling thread
    and the outcome is identical to a serial run.

    Args:
        dataset: Labeled dataset, read-only for the duration of the run
        k: Number of neighbors that vote (default: 5)
        measure: DistanceMeasure or its registered name (default: euclidean)
        n_jobs: Number of worker threads (default: 1, serial)
        progress: Optional callback receiving (instances_done, instances_total)

    Returns:
        Tuple of (summary, predictions) where:
            - summary: Finalized EvaluationSummary; elapsed_seconds is the
              wall-clock span of the whole loop
            - predictions: Array of predicted labels, shape (n_instances,)

    Raises:
        ValueError: If k or n_jobs is not a positive integer
        InsufficientNeighbors: If the dataset has fewer than k + 1 instances
        DimensionMismatch: If feature dimensionality is inconsistent
    """
    k = validate_k(k)
    measure = _resolve_measure(measure)
    if isinstance(n_jobs, bool) or not isinstance(n_jobs, int) or n_jobs < 1:
        raise ValueError(f"n_jobs must be a positive integer, got {n_jobs!r}")

    n_instances = len(dataset)
    if n_instances - 1 < k:
        raise InsufficientNeighbors(k, max(n_instances - 1, 0))

    summary = EvaluationSummary()
    predictions = []
    predict = partial(predict_held_out, dataset, k=k, measure=measure)

    start_time = time.perf_counter()

    if n_jobs == 1:
        _consume(map(predict, range(n_instances)), dataset, summary, predictions, progress)
    else:
        executor = ThreadPoolExecutor(max_workers=n_jobs)
        try:
            _consume(executor.map(predict, range(n_instances)), dataset, summary, predictions, progress)
        finally:
            # an error aborts the run; drop whatever is still queued
            executor.shutdown(wait=True, cancel_futures=True)

    end_time = time.perf_counter()
    summary.finalize(end_time - start_time)

    return summary, np.array(predictions, dtype=dataset.labels.dtype)


def _consume(outcomes, dataset: Dataset, summary: EvaluationSummary, predictions: list,
             progress: Optional[ProgressCallback]) -> None:
    n_instances = len(dataset)
    for index, predicted in enumerate(outcomes):
        actual = dataset.labels[index]
        summary.record_outcome(bool(predicted == actual))
        predictions.append(predicted)

        if progress is not None:
            progress(index + 1, n_instances)
