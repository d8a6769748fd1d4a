"""
State Management for the Leave-One-Out Runner

This module handles configuration management and metrics persistence for
KNN evaluation runs. It provides functions to load/save configuration and
to save the report of a finished run.
"""

import copy
import json
import os
from datetime import datetime
from typing import Dict, Any, Optional

from knn.distance import DISTANCE_MEASURES, DEFAULT_DISTANCE
from runner.dataset_loader import DEFAULT_DATASET


DEFAULT_CONFIG_PATH = "./config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "k": 5,
    "distance_measure": DEFAULT_DISTANCE,
    "dataset": DEFAULT_DATASET,
    "class_column": None,
    "n_jobs": 1,
    "normalize": False,
    "log_level": "INFO",
    "output": {
        "metrics_path": None,
        "confusion_matrix_path": None
    }
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def default_config() -> Dict:
    """Return a fresh copy of DEFAULT_CONFIG."""
    return copy.deepcopy(DEFAULT_CONFIG)


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict:
    """
    Load configuration from a JSON file.

    Keys missing from the file are filled in from DEFAULT_CONFIG.

    Args:
        config_path (str): Path to the configuration file

    Returns:
        dict: Configuration dictionary with run settings

    Raises:
        FileNotFoundError: If config file does not exist
        json.JSONDecodeError: If config file is not valid JSON
        ValueError: If a configuration field is invalid
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        loaded = json.load(f)

    if not isinstance(loaded, dict):
        raise ValueError("Configuration file must contain a JSON object")

    config = default_config()
    for key, value in loaded.items():
        if key == 'output' and isinstance(value, dict):
            config['output'].update(value)
        else:
            config[key] = value

    validate_config(config)

    return config


def save_config(config: Dict, config_path: str = DEFAULT_CONFIG_PATH) -> None:
    """
    Save configuration to a JSON file.

    Args:
        config (dict): Configuration dictionary to save
        config_path (str): Path to the configuration file

    Raises:
        IOError: If the file cannot be written
        ValueError: If a configuration field is invalid
    """
    validate_config(config)

    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config, f, indent=2)


def save_metrics(metrics: Dict[str, Any], metrics_path: str) -> None:
    """
    Save the report of a run to a JSON file.

    Args:
        metrics (dict): Report record of a finished run
        metrics_path (str): Path to the metrics file

    Raises:
        IOError: If the file cannot be written
    """
    directory = os.path.dirname(metrics_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    if 'timestamp' not in metrics:
        metrics['timestamp'] = datetime.now().isoformat()

    with open(metrics_path, 'w') as f:
        json.dump(metrics, f, indent=2)


def load_metrics(metrics_path: str) -> Optional[Dict]:
    """
    Load a saved run report.

    Returns:
        dict or None: Metrics dictionary or None if file does not exist

    Raises:
        json.JSONDecodeError: If metrics file is not valid JSON
    """
    if not os.path.exists(metrics_path):
        return None

    with open(metrics_path, 'r') as f:
        metrics = json.load(f)

    return metrics


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_config(config: Dict) -> None:
    """
    Validate configuration fields.

    Args:
        config (dict): Configuration dictionary to validate

    Raises:
        ValueError: If fields are missing or invalid
    """
    required_fields = ['k', 'distance_measure', 'dataset']

    for field in required_fields:
        if field not in config:
            raise ValueError(f"Required configuration field missing: {field}")

    if not _is_positive_int(config['k']):
        raise ValueError("Configuration field 'k' must be a positive integer")

    if not isinstance(config['distance_measure'], str):
        raise ValueError("Configuration field 'distance_measure' must be a string")
    if config['distance_measure'].strip().lower() not in DISTANCE_MEASURES:
        raise ValueError(
            f"Unknown distance measure '{config['distance_measure']}'. "
            f"Available: {sorted(DISTANCE_MEASURES)}"
        )

    if not isinstance(config['dataset'], str) or not config['dataset'].strip():
        raise ValueError("Configuration field 'dataset' must be a non-empty string")

    class_column = config.get('class_column')
    if class_column is not None and (
        isinstance(class_column, bool) or not isinstance(class_column, (str, int))
    ):
        raise ValueError("Configuration field 'class_column' must be a string, an integer or null")

    if 'n_jobs' in config and not _is_positive_int(config['n_jobs']):
        raise ValueError("Configuration field 'n_jobs' must be a positive integer")

    if 'normalize' in config and not isinstance(config['normalize'], bool):
        raise ValueError("Configuration field 'normalize' must be a boolean")

    if 'log_level' in config:
        if not isinstance(config['log_level'], str) or config['log_level'].upper() not in LOG_LEVELS:
            raise ValueError(f"Configuration field 'log_level' must be one of {LOG_LEVELS}")

    if 'output' in config:
        output = config['output']

        if not isinstance(output, dict):
            raise ValueError("'output' configuration must be a dictionary")

        for field in ('metrics_path', 'confusion_matrix_path'):
            if output.get(field) is not None and not isinstance(output[field], str):
                raise ValueError(f"Output path '{field}' must be a string or null")


def get_config_value(config: Dict, key: str, default: Any = None) -> Any:
    """
    Get a configuration value with optional default.

    Args:
        config (dict): Configuration dictionary
        key (str): Configuration key (supports nested keys with dot notation)
        default: Default value if key is not found

    Returns:
        Configuration value or default

    Example:
        get_config_value(config, 'output.metrics_path', 'metrics.json')
    """
    keys = key.split('.')
    value = config

    for k in keys:
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default

    return value


def update_config_value(config: Dict, key: str, value: Any) -> Dict:
    """
    Update a configuration value (supports nested keys).

    Args:
        config (dict): Configuration dictionary
        key (str): Configuration key (supports nested keys with dot notation)
        value: New value to set

    Returns:
        dict: Updated configuration dictionary

    Example:
        update_config_value(config, 'k', 3)
    """
    keys = key.split('.')
    current = config

    for k in keys[:-1]:
        if k not in current:
            current[k] = {}
        current = current[k]

    current[keys[-1]] = value
    return config
