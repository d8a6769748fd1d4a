"""
Evaluation Results

Counters for a leave-one-out run and the read-only report record handed to
whatever renders the outcome.
"""

from typing import Dict, Optional

from .dataset import Dataset
from .distance import DistanceMeasure
from .errors import EmptyDatasetMetric


class EvaluationSummary:
    """
    Correct/total counts and elapsed wall-clock time of one run.

    Counters only grow while the run is open. ``finalize`` closes the
    summary; after that it is read-only.
    """

    def __init__(self):
        self.total = 0
        self.correct = 0
        self.elapsed_seconds: Optional[float] = None

    @property
    def finalized(self) -> bool:
        return self.elapsed_seconds is not None

    def record_outcome(self, correct: bool) -> None:
        if self.finalized:
            raise RuntimeError("Cannot record outcomes on a finalized summary")
        self.total += 1
        if correct:
            self.correct += 1

    def finalize(self, elapsed_seconds: float) -> None:
        if self.finalized:
            raise RuntimeError("Summary is already finalized")
        if elapsed_seconds < 0:
            raise ValueError(f"elapsed_seconds must be non-negative, got {elapsed_seconds}")
        self.elapsed_seconds = float(elapsed_seconds)

    @property
    def incorrect(self) -> int:
        return self.total - self.correct

    @property
    def accuracy(self) -> float:
        """
        Fraction of instances classified correctly.

        Raises:
            EmptyDatasetMetric: If no instance was evaluated
        """
        if self.total == 0:
            raise EmptyDatasetMetric("accuracy")
        return self.correct / self.total

    @property
    def error_rate(self) -> float:
        if self.total == 0:
            raise EmptyDatasetMetric("error rate")
        return 1.0 - self.accuracy

    def __eq__(self, other) -> bool:
        if not isinstance(other, EvaluationSummary):
            return NotImplemented
        return (self.total, self.correct) == (other.total, other.correct)

    def __repr__(self) -> str:
        return (
            f"EvaluationSummary(correct={self.correct}, total={self.total}, "
            f"elapsed_seconds={self.elapsed_seconds})"
        )


def build_report(
    dataset: Dataset,
    k: int,
    measure: DistanceMeasure,
    summary: EvaluationSummary,
    n_jobs: int = 1,
    normalize: bool = False
) -> Dict:
    """
    Assemble the report record of a finished run.

    Returns:
        Dictionary containing:
            - dataset: name, instance_count, attribute_count, class_count
            - configuration: k, distance_measure, n_jobs, normalize
            - result: correct, incorrect, total, accuracy_percent,
              error_percent, elapsed_seconds

    Raises:
        ValueError: If the summary has not been finalized
        EmptyDatasetMetric: If the summary holds no outcomes
    """
    if not summary.finalized:
        raise ValueError("Cannot report on a run that has not finished")

    return {
        'dataset': {
            'name': dataset.name,
            'instance_count': len(dataset),
            'attribute_count': dataset.n_features,
            'class_count': dataset.n_classes
        },
        'configuration': {
            'k': k,
            'distance_measure': measure.name,
            'n_jobs': n_jobs,
            'normalize': normalize
        },
        'result': {
            'correct': summary.correct,
            'incorrect': summary.incorrect,
            'total': summary.total,
            'accuracy_percent': summary.accuracy * 100,
            'error_percent': summary.error_rate * 100,
            'elapsed_seconds': summary.elapsed_seconds
        }
    }
