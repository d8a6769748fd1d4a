"""
Leave-One-Out KNN Runner

Loads a dataset, classifies every instance with K-nearest-neighbors using
all other instances as the neighbor pool, and reports accuracy and timing.

Usage:
    knn-loo
    knn-loo --k 3 --distance manhattan
    knn-loo --dataset data/optdigits.arff --k 5 --metrics-out results/metrics.json
    knn-loo --dataset data/samples.csv --class-column label --normalize --n-jobs 4
"""

import argparse
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from knn.distance import DISTANCE_MEASURES, get_distance_measure
from knn.errors import KNNError
from knn.evaluate import leave_one_out
from knn.results import build_report
from runner.dataset_loader import BUILTIN_DATASETS, get_dataset_info, load_dataset, normalize_dataset
from runner.report import log_report, make_progress_logger
from runner.state import (
    DEFAULT_CONFIG_PATH,
    LOG_LEVELS,
    default_config,
    load_config,
    save_metrics,
    update_config_value,
    validate_config
)
from runner.utils import setup_logging
from runner.visualization import save_confusion_matrix


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Leave-one-out evaluation of a K-nearest-neighbors classifier",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Builtin datasets: {', '.join(sorted(BUILTIN_DATASETS))}

Examples:
  # Default run: digits dataset, K=5, euclidean distance
  knn-loo

  # ARFF file whose class is the last attribute
  knn-loo --dataset data/optdigits.arff --k 3

  # CSV file with a named class column, 4 worker threads
  knn-loo --dataset data/samples.csv --class-column label --n-jobs 4
        """
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to a JSON configuration file (default: {DEFAULT_CONFIG_PATH} if present)'
    )

    parser.add_argument(
        '--k',
        type=int,
        default=None,
        help='Number of nearest neighbors that vote (default: 5)'
    )

    parser.add_argument(
        '--distance',
        type=str,
        choices=sorted(DISTANCE_MEASURES),
        default=None,
        help='Distance measure (default: euclidean)'
    )

    parser.add_argument(
        '--dataset',
        type=str,
        default=None,
        help='Builtin dataset name or path to a .arff/.csv file (default: digits)'
    )

    parser.add_argument(
        '--class-column',
        type=str,
        default=None,
        help='Name or position of the class column in a file (default: last column)'
    )

    parser.add_argument(
        '--n-jobs',
        type=int,
        default=None,
        help='Number of worker threads (default: 1)'
    )

    parser.add_argument(
        '--normalize',
        action='store_true',
        default=None,
        help='Z-score normalize features before evaluation'
    )

    parser.add_argument(
        '--metrics-out',
        type=str,
        default=None,
        help='Write the run report as JSON to this path'
    )

    parser.add_argument(
        '--confusion-matrix',
        type=str,
        default=None,
        help='Write the confusion matrix plot as PNG to this path'
    )

    parser.add_argument(
        '--log-level',
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help='Logging level (default: INFO)'
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Dict:
    """
    Resolve the run configuration: defaults, then the config file, then
    command-line flags.

    Raises:
        FileNotFoundError: If an explicitly given config file does not exist
        ValueError: If the resulting configuration is invalid
    """
    if args.config is not None:
        config = load_config(args.config)
    elif os.path.exists(DEFAULT_CONFIG_PATH):
        config = load_config(DEFAULT_CONFIG_PATH)
    else:
        config = default_config()

    overrides = {
        'k': args.k,
        'distance_measure': args.distance,
        'dataset': args.dataset,
        'class_column': args.class_column,
        'n_jobs': args.n_jobs,
        'normalize': args.normalize,
        'log_level': args.log_level,
        'output.metrics_path': args.metrics_out,
        'output.confusion_matrix_path': args.confusion_matrix,
    }
    for key, value in overrides.items():
        if value is not None:
            update_config_value(config, key, value)

    validate_config(config)
    return config


def run(config: Dict, logger: logging.Logger) -> Dict:
    """
    Execute one leave-one-out run described by ``config``.

    Returns:
        The report record of the run

    Raises:
        KNNError: If the dataset cannot be loaded or the run aborts
    """
    measure = get_distance_measure(config['distance_measure'])
    k = config['k']
    n_jobs = config.get('n_jobs', 1)
    normalize = config.get('normalize', False)

    logger.info(f"Loading dataset: {config['dataset']}")
    dataset = load_dataset(config['dataset'], class_column=config.get('class_column'))

    info = get_dataset_info(dataset)
    logger.info(
        f"Dataset loaded: {info['instance_count']} instances, "
        f"{info['attribute_count']} attributes, {info['class_count']} classes"
    )

    if normalize:
        dataset = normalize_dataset(dataset)

    logger.info(f"Running leave-one-out validation (K={k}, distance={measure.name})")
    summary, predictions = leave_one_out(
        dataset,
        k=k,
        measure=measure,
        n_jobs=n_jobs,
        progress=make_progress_logger(logger)
    )

    report = build_report(dataset, k, measure, summary, n_jobs=n_jobs, normalize=normalize)
    log_report(report, logger)

    metrics_path = config.get('output', {}).get('metrics_path')
    if metrics_path:
        save_metrics(report, metrics_path)
        logger.info(f"Metrics saved to {metrics_path}")

    confusion_matrix_path = config.get('output', {}).get('confusion_matrix_path')
    if confusion_matrix_path:
        save_confusion_matrix(dataset.labels, predictions, dataset.class_names, confusion_matrix_path)
        logger.info(f"Confusion matrix saved to {confusion_matrix_path}")

    return report


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the leave-one-out runner.

    Returns:
        Process exit status: 0 on success, 1 on any configuration, run or output error
    """
    args = parse_args(argv)

    try:
        config = build_config(args)
    except (FileNotFoundError, json.JSONDecodeError, ValueError) as e:
        logger = setup_logging(args.log_level or "INFO")
        logger.error(f"Invalid configuration: {str(e)}")
        return 1

    logger = setup_logging(config.get('log_level', 'INFO'))

    try:
        run(config, logger)
    # OSError also covers failures writing the metrics or plot
    except (KNNError, OSError) as e:
        logger.error(f"Run aborted ({type(e).__name__}): {str(e)}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
