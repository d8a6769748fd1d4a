"""
End-to-end tests for the leave-one-out runner.

Tests the complete path from command-line arguments through dataset
loading, evaluation, reporting, metrics and plot output, and the exit
status on configuration and run errors.
"""

import pytest
import tempfile
import os
import shutil
import json
import logging
import pandas as pd

from runner.main import build_config, main, parse_args, run
from runner.state import default_config, save_config
from runner.utils import LOGGER_NAME


@pytest.fixture
def temp_dir(monkeypatch):
    """Create temporary directory for tests and run from inside it."""
    temp_dir = tempfile.mkdtemp()
    monkeypatch.chdir(temp_dir)
    yield temp_dir
    if os.path.exists(temp_dir):
        shutil.rmtree(temp_dir)


@pytest.fixture
def separable_csv(temp_dir):
    path = os.path.join(temp_dir, 'separable.csv')
    pd.DataFrame({
        'x': [0, 0, 10, 10],
        'y': [0, 1, 10, 11],
        'class': ['A', 'A', 'B', 'B'],
    }).to_csv(path, index=False)
    return path


def test_parse_args_defaults():
    args = parse_args([])

    assert args.k is None
    assert args.distance is None
    assert args.dataset is None
    assert args.normalize is None
    assert args.log_level is None


def test_build_config_defaults(temp_dir):
    config = build_config(parse_args([]))

    assert config['k'] == 5
    assert config['distance_measure'] == 'euclidean'
    assert config['dataset'] == 'digits'
    assert config['n_jobs'] == 1
    assert config['normalize'] is False


def test_build_config_flags_override_file(temp_dir):
    config_path = os.path.join(temp_dir, 'custom.json')
    config = default_config()
    config['k'] = 7
    config['distance_measure'] = 'manhattan'
    save_config(config, config_path)

    resolved = build_config(parse_args([
        '--config', config_path,
        '--k', '2',
        '--normalize',
        '--log-level', 'debug',
        '--metrics-out', 'out.json',
    ]))

    assert resolved['k'] == 2
    assert resolved['distance_measure'] == 'manhattan'
    assert resolved['normalize'] is True
    assert resolved['log_level'] == 'DEBUG'
    assert resolved['output']['metrics_path'] == 'out.json'


def test_build_config_reads_default_path(temp_dir):
    config = default_config()
    config['k'] = 4
    save_config(config, os.path.join(temp_dir, 'config.json'))

    assert build_config(parse_args([]))['k'] == 4


def test_build_config_rejects_bad_k(temp_dir):
    with pytest.raises(ValueError):
        build_config(parse_args(['--k', '0']))


def test_main_separable_run(separable_csv, temp_dir):
    metrics_path = os.path.join(temp_dir, 'results', 'metrics.json')
    plot_path = os.path.join(temp_dir, 'results', 'confusion.png')

    status = main([
        '--dataset', separable_csv,
        '--k', '1',
        '--metrics-out', metrics_path,
        '--confusion-matrix', plot_path,
    ])

    assert status == 0
    assert os.path.exists(plot_path)
    assert os.path.getsize(plot_path) > 0

    with open(metrics_path) as f:
        metrics = json.load(f)

    assert metrics['dataset']['name'] == 'separable'
    assert metrics['dataset']['instance_count'] == 4
    assert metrics['configuration']['k'] == 1
    assert metrics['result']['correct'] == 4
    assert metrics['result']['accuracy_percent'] == pytest.approx(100.0)
    assert 'timestamp' in metrics


def test_main_logs_report(separable_csv, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)

    assert main(['--dataset', separable_csv, '--k', '1', '--distance', 'chebyshev']) == 0

    messages = [record.getMessage() for record in caplog.records]
    assert "Distance measure = chebyshev" in messages
    assert any(m.startswith("Correctly Classified Instances") and "4 (100.0000%)" in m for m in messages)


def test_main_insufficient_neighbors(separable_csv, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)

    assert main(['--dataset', separable_csv, '--k', '5']) == 1
    assert any("InsufficientNeighbors" in record.getMessage() for record in caplog.records)


def test_main_missing_dataset(temp_dir, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)

    assert main(['--dataset', os.path.join(temp_dir, 'missing.csv')]) == 1
    assert any("DatasetLoadError" in record.getMessage() for record in caplog.records)


def test_main_unwritable_metrics_path(separable_csv, temp_dir, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER_NAME)
    blocker = os.path.join(temp_dir, 'blocker')
    open(blocker, 'w').close()

    status = main([
        '--dataset', separable_csv,
        '--k', '1',
        '--metrics-out', os.path.join(blocker, 'metrics.json'),
    ])

    assert status == 1
    assert any(record.getMessage().startswith("Run aborted") for record in caplog.records)


def test_main_missing_config(temp_dir):
    assert main(['--config', os.path.join(temp_dir, 'nope.json')]) == 1


def test_main_invalid_distance_exits(temp_dir):
    with pytest.raises(SystemExit):
        main(['--distance', 'mahalanobis'])


def test_run_default_digits(temp_dir):
    """The builtin digits dataset is near-perfectly separable by 5-NN."""
    config = default_config()
    config['n_jobs'] = 2

    report = run(config, logging.getLogger(LOGGER_NAME))

    assert report['dataset']['instance_count'] == 1797
    assert report['dataset']['attribute_count'] == 64
    assert report['dataset']['class_count'] == 10
    assert report['result']['total'] == 1797
    assert report['result']['accuracy_percent'] > 95.0
    assert report['result']['accuracy_percent'] + report['result']['error_percent'] == pytest.approx(100.0)


def test_run_normalized(separable_csv):
    config = default_config()
    config.update({'dataset': separable_csv, 'k': 1, 'normalize': True})

    report = run(config, logging.getLogger(LOGGER_NAME))

    assert report['configuration']['normalize'] is True
    assert report['result']['correct'] == 4
