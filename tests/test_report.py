"""
Unit tests for report rendering and the confusion matrix plot.
"""

import pytest
import logging
import os
import tempfile
import shutil

from runner.report import log_report, make_progress_logger
from runner.utils import LOGGER_NAME, format_duration, setup_logging
from runner.visualization import create_confusion_matrix, save_confusion_matrix


@pytest.fixture
def report():
    return {
        'dataset': {'name': 'toy', 'instance_count': 4, 'attribute_count': 2, 'class_count': 2},
        'configuration': {'k': 3, 'distance_measure': 'euclidean', 'n_jobs': 4, 'normalize': True},
        'result': {
            'correct': 3,
            'incorrect': 1,
            'total': 4,
            'accuracy_percent': 75.0,
            'error_percent': 25.0,
            'elapsed_seconds': 0.25
        }
    }


@pytest.fixture
def temp_dir():
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    if os.path.exists(temp_dir):
        shutil.rmtree(temp_dir)


def test_log_report(report, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    log_report(report, logging.getLogger(LOGGER_NAME))

    messages = [record.getMessage() for record in caplog.records]

    assert messages[0] == "=== Dataset info ==="
    assert "Dataset name = toy" in messages
    assert "Number of instances = 4" in messages
    assert "K = 3" in messages
    assert "Features = z-score normalized" in messages
    assert "Worker threads = 4" in messages
    assert "Correctly Classified Instances \t\t3 (75.0000%)" in messages
    assert "Incorrectly Classified Instances \t\t1 (25.0000%)" in messages
    assert "Time taken to classify \t\t0.250 s" in messages


def test_progress_logger(caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    progress = make_progress_logger(logging.getLogger(LOGGER_NAME), every=2)

    for done in range(1, 6):
        progress(done, 5)

    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "Classified 2/5 instances...",
        "Classified 4/5 instances...",
        "Classified 5/5 instances...",
    ]


def test_setup_logging_no_duplicate_handlers():
    logger = setup_logging("INFO")
    handler_count = len(logger.handlers)

    logger = setup_logging("DEBUG")

    assert len(logger.handlers) == handler_count
    assert logger.level == logging.DEBUG


def test_format_duration():
    assert format_duration(1.5) == "1.500 s"
    assert format_duration(125.0) == "2 min 5.0 s"


def test_create_confusion_matrix():
    image = create_confusion_matrix(['A', 'A', 'B', 'B'], ['A', 'B', 'B', 'B'], ['A', 'B'])
    assert image.startswith("data:image/png;base64,")


def test_save_confusion_matrix(temp_dir):
    path = os.path.join(temp_dir, 'plots', 'cm.png')

    written = save_confusion_matrix([0, 1, 2, 1], [0, 1, 1, 1], [0, 1, 2], path)

    assert written == path
    assert os.path.getsize(path) > 0
