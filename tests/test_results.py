"""
Unit tests for the result aggregator and the report record.
"""

import pytest
import numpy as np

from knn.dataset import Dataset
from knn.distance import get_distance_measure
from knn.errors import EmptyDatasetMetric, KNNError
from knn.results import EvaluationSummary, build_report


@pytest.fixture
def finished_summary():
    summary = EvaluationSummary()
    for correct in (True, True, True, False):
        summary.record_outcome(correct)
    summary.finalize(1.5)
    return summary


def test_new_summary_is_empty():
    summary = EvaluationSummary()

    assert summary.total == 0
    assert summary.correct == 0
    assert summary.elapsed_seconds is None
    assert not summary.finalized


def test_empty_summary_has_no_accuracy():
    """A zero-instance run must not report a silent zero."""
    summary = EvaluationSummary()
    summary.finalize(0.0)

    with pytest.raises(EmptyDatasetMetric):
        summary.accuracy
    with pytest.raises(EmptyDatasetMetric):
        summary.error_rate


def test_empty_dataset_metric_kinds():
    error = EmptyDatasetMetric()
    assert isinstance(error, KNNError)
    assert isinstance(error, ZeroDivisionError)


def test_record_outcome_counts(finished_summary):
    assert finished_summary.total == 4
    assert finished_summary.correct == 3
    assert finished_summary.incorrect == 1
    assert finished_summary.accuracy == pytest.approx(0.75)
    assert finished_summary.error_rate == pytest.approx(0.25)
    assert finished_summary.elapsed_seconds == 1.5


def test_record_after_finalize(finished_summary):
    with pytest.raises(RuntimeError):
        finished_summary.record_outcome(True)

    assert finished_summary.total == 4


def test_finalize_twice(finished_summary):
    with pytest.raises(RuntimeError):
        finished_summary.finalize(2.0)


def test_negative_elapsed():
    with pytest.raises(ValueError):
        EvaluationSummary().finalize(-0.1)


def test_accuracy_bounds():
    """0 <= accuracy <= 1 and accuracy + error_rate == 1 for any non-empty run."""
    rng = np.random.RandomState(42)

    for _ in range(50):
        summary = EvaluationSummary()
        for correct in rng.rand(rng.randint(1, 200)) < rng.rand():
            summary.record_outcome(bool(correct))

        assert 0.0 <= summary.accuracy <= 1.0
        assert summary.accuracy + summary.error_rate == pytest.approx(1.0)


def test_summary_equality(finished_summary):
    other = EvaluationSummary()
    for correct in (False, True, True, True):
        other.record_outcome(correct)

    assert other == finished_summary
    other.record_outcome(True)
    assert other != finished_summary


def test_build_report(finished_summary):
    dataset = Dataset(
        [[0, 0], [0, 1], [10, 10], [10, 11]],
        ['A', 'A', 'B', 'B'],
        name='toy'
    )

    report = build_report(dataset, 3, get_distance_measure('manhattan'), finished_summary)

    assert report['dataset'] == {
        'name': 'toy',
        'instance_count': 4,
        'attribute_count': 2,
        'class_count': 2
    }
    assert report['configuration'] == {
        'k': 3,
        'distance_measure': 'manhattan',
        'n_jobs': 1,
        'normalize': False
    }
    assert report['result']['correct'] == 3
    assert report['result']['incorrect'] == 1
    assert report['result']['total'] == 4
    assert report['result']['accuracy_percent'] == pytest.approx(75.0)
    assert report['result']['error_percent'] == pytest.approx(25.0)
    assert report['result']['elapsed_seconds'] == 1.5


def test_build_report_requires_finished_run():
    dataset = Dataset([[0], [1]], ['a', 'b'])
    summary = EvaluationSummary()
    summary.record_outcome(True)

    with pytest.raises(ValueError):
        build_report(dataset, 1, get_distance_measure(), summary)
