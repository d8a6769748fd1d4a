"""
Dataset Loader

This module loads labeled tabular datasets for leave-one-out evaluation.
Sources are either a builtin dataset name (shipped with scikit-learn) or a
path to an ARFF or CSV file. Unless told otherwise the last column holds
the class.
"""

import os
import numpy as np
import pandas as pd
from scipy.io import arff
from sklearn.datasets import load_breast_cancer, load_digits, load_iris, load_wine
from typing import Dict, Optional, Tuple, Union

from knn.dataset import Dataset
from knn.errors import DatasetLoadError


# UCI optical recognition of handwritten digits, 64 attributes, 10 classes
DEFAULT_DATASET = "digits"

BUILTIN_DATASETS = {
    "digits": load_digits,
    "iris": load_iris,
    "wine": load_wine,
    "breast_cancer": load_breast_cancer,
}


def load_dataset(
    source: str = DEFAULT_DATASET,
    class_column: Optional[Union[str, int]] = None
) -> Dataset:
    """
    Load a labeled dataset from a builtin name or a file path.

    Args:
        source: Builtin dataset name (see BUILTIN_DATASETS) or path to a
            .arff or .csv file (default: digits)
        class_column: Name or position of the class column in a file.
            Defaults to the last column. Ignored for builtin datasets.

    Returns:
        Dataset with numeric features and the class column as labels

    Raises:
        DatasetLoadError: If the file is missing, cannot be parsed, or does
            not have the expected layout
    """
    key = source.strip().lower()
    if key in BUILTIN_DATASETS:
        return load_builtin_dataset(key)

    if not os.path.exists(source):
        raise DatasetLoadError(f"Dataset file not found at {source}")

    extension = os.path.splitext(source)[1].lower()
    if extension == ".arff":
        frame, name = read_arff(source)
    elif extension == ".csv":
        frame, name = read_csv(source)
    else:
        raise DatasetLoadError(
            f"Unsupported dataset format '{extension}' for {source}; expected .arff or .csv"
        )

    return dataset_from_frame(frame, class_column=class_column, name=name)


def load_builtin_dataset(name: str) -> Dataset:
    """
    Load one of the scikit-learn bundled datasets.

    Raises:
        ValueError: If ``name`` is not a builtin dataset
    """
    if name not in BUILTIN_DATASETS:
        raise ValueError(
            f"Unknown builtin dataset: {name}. Available: {sorted(BUILTIN_DATASETS)}"
        )

    bunch = BUILTIN_DATASETS[name]()
    labels = np.asarray(bunch.target_names)[bunch.target]
    feature_names = getattr(bunch, "feature_names", None)

    return Dataset(
        bunch.data,
        labels,
        name=name,
        attribute_names=None if feature_names is None else [str(f) for f in feature_names]
    )


def _decode_nominal(value):
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return None if value == "?" else value


def read_arff(file_path: str) -> Tuple[pd.DataFrame, str]:
    """
    Parse an ARFF file into a DataFrame.

    Nominal attributes come back from scipy as bytes and are decoded to str.
    The ARFF missing-value marker "?" becomes None.

    Returns:
        Tuple of (frame, relation_name)

    Raises:
        DatasetLoadError: If the file is not valid ARFF
    """
    try:
        data, meta = arff.loadarff(file_path)
    # scipy runs off the end of the header with StopIteration when @data is missing
    # string and relational attributes raise NotImplementedError
    except (arff.ArffError, ValueError, UnicodeDecodeError, StopIteration, NotImplementedError,
            OSError) as e:
        raise DatasetLoadError(f"Failed to parse ARFF file {file_path}: {str(e)}") from e

    frame = pd.DataFrame(data)
    for column in frame.columns:
        if frame[column].dtype == object:
            frame[column] = frame[column].map(_decode_nominal)

    return frame, str(meta.name)


def read_csv(file_path: str) -> Tuple[pd.DataFrame, str]:
    """
    Parse a CSV file with a header row into a DataFrame.

    Returns:
        Tuple of (frame, name) where name is the file name without extension

    Raises:
        DatasetLoadError: If the file is empty or not valid CSV, or cannot be read
    """
    try:
        frame = pd.read_csv(file_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        raise DatasetLoadError(f"Failed to parse CSV file {file_path}: {str(e)}") from e

    name = os.path.splitext(os.path.basename(file_path))[0]
    return frame, name


def _resolve_class_column(frame: pd.DataFrame, class_column: Optional[Union[str, int]]):
    columns = list(frame.columns)

    if class_column is None:
        return columns[-1]

    if isinstance(class_column, str) and class_column not in columns:
        if class_column.lstrip("-").isdigit():
            class_column = int(class_column)
        else:
            raise DatasetLoadError(f"Class column '{class_column}' not found in {columns}")

    if isinstance(class_column, int):
        if not -len(columns) <= class_column < len(columns):
            raise DatasetLoadError(
                f"Class column index {class_column} out of range for {len(columns)} columns"
            )
        return columns[class_column]

    return class_column


def dataset_from_frame(
    frame: pd.DataFrame,
    class_column: Optional[Union[str, int]] = None,
    name: str = "dataset"
) -> Dataset:
    """
    Split a DataFrame into numeric features and a class column.

    Raises:
        DatasetLoadError: If there is no feature column, a feature column is
            not numeric, or any value is missing
    """
    if frame.shape[1] < 2:
        raise DatasetLoadError(
            f"Dataset '{name}' needs at least one feature column and a class column, "
            f"got {frame.shape[1]} column(s)"
        )

    label_column = _resolve_class_column(frame, class_column)
    labels = frame[label_column]
    features = frame.drop(columns=[label_column])

    non_numeric = [
        str(column) for column in features.columns
        if not pd.api.types.is_numeric_dtype(features[column])
    ]
    if non_numeric:
        raise DatasetLoadError(f"Non-numeric feature columns in '{name}': {non_numeric}")

    if features.isnull().values.any() or labels.isnull().any():
        raise DatasetLoadError(f"Dataset '{name}' contains missing values")

    return Dataset(
        features.to_numpy(dtype=np.float64),
        labels.to_numpy(),
        name=name,
        attribute_names=[str(column) for column in features.columns]
    )


def get_dataset_info(dataset: Dataset) -> Dict:
    """
    Extract statistics from a loaded dataset.

    Returns:
        Dictionary containing:
            - name: Dataset name
            - instance_count: Number of instances
            - attribute_count: Number of feature attributes (class excluded)
            - class_count: Number of distinct labels
            - class_names: Sorted distinct labels
            - samples_per_class: Number of instances per label
    """
    labels = dataset.labels.tolist()
    class_names = dataset.class_names

    return {
        "name": dataset.name,
        "instance_count": len(dataset),
        "attribute_count": dataset.n_features,
        "class_count": len(class_names),
        "class_names": class_names,
        "samples_per_class": {label: labels.count(label) for label in class_names}
    }


def normalize_features(features: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Normalize features using z-score normalization.

    Args:
        features: Feature array of shape (n_samples, n_features)

    Returns:
        Tuple of (normalized_features, mean, std) where:
            - normalized_features: Normalized feature array
            - mean: Mean values for each feature dimension
            - std: Standard deviation for each feature dimension
    """
    mean = np.mean(features, axis=0)
    std = np.std(features, axis=0)

    # constant columns would divide by zero
    std = np.where(std == 0, 1, std)

    normalized_features = (features - mean) / std

    return normalized_features, mean, std


def normalize_dataset(dataset: Dataset) -> Dataset:
    """Return a copy of ``dataset`` with z-score normalized features."""
    normalized, _, _ = normalize_features(dataset.features)
    return Dataset(
        normalized,
        dataset.labels,
        name=dataset.name,
        attribute_names=dataset.attribute_names
    )
