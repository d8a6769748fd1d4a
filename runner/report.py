"""
Run Reporter

Renders the report record of a leave-one-out run through logging. The
classification core never logs; the logger is passed in by the caller.
"""

import logging
from typing import Dict, Optional

from runner.utils import LOGGER_NAME, format_duration


def log_report(report: Dict, logger: Optional[logging.Logger] = None) -> None:
    """
    Log dataset statistics, configuration and outcome of a finished run.

    Args:
        report: Record produced by knn.results.build_report
        logger: Logger to write to (default: the runner logger)
    """
    if logger is None:
        logger = logging.getLogger(LOGGER_NAME)

    dataset = report['dataset']
    configuration = report['configuration']
    result = report['result']

    logger.info("=== Dataset info ===")
    logger.info(f"Dataset name = {dataset['name']}")
    logger.info(f"Number of instances = {dataset['instance_count']}")
    logger.info(f"Number of attributes = {dataset['attribute_count']}")
    logger.info(f"Number of classes = {dataset['class_count']}")

    logger.info("=== Configuration ===")
    logger.info(f"K = {configuration['k']}")
    logger.info(f"Distance measure = {configuration['distance_measure']}")
    if configuration.get('normalize'):
        logger.info("Features = z-score normalized")
    if configuration.get('n_jobs', 1) > 1:
        logger.info(f"Worker threads = {configuration['n_jobs']}")

    logger.info("=== Result ===")
    logger.info(
        f"Correctly Classified Instances \t\t{result['correct']} "
        f"({result['accuracy_percent']:.4f}%)"
    )
    logger.info(
        f"Incorrectly Classified Instances \t\t{result['incorrect']} "
        f"({result['error_percent']:.4f}%)"
    )
    logger.info(f"Time taken to classify \t\t{format_duration(result['elapsed_seconds'])}")


def make_progress_logger(logger: logging.Logger, every: int = 500):
    """
    Build a progress callback for knn.evaluate.leave_one_out that logs at
    DEBUG level every ``every`` instances and on the last one.
    """
    def progress(done: int, total: int) -> None:
        if done % every == 0 or done == total:
            logger.debug(f"Classified {done}/{total} instances...")

    return progress
