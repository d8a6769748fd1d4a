"""
Labeled Dataset

In-memory container for the instances a leave-one-out run evaluates.
Features are kept as a read-only (n_instances, n_features) matrix so every
instance shares the same dimensionality, and labels as an (n_instances,)
array of opaque class keys.
"""

import numpy as np
from typing import Any, List, Optional, Sequence


class Dataset:
    """
    Ordered, read-only collection of labeled instances.

    Args:
        features: Array-like of shape (n_instances, n_features)
        labels: Array-like of shape (n_instances,)
        name: Human-readable dataset name
        attribute_names: Optional names of the feature columns
    """

    def __init__(
        self,
        features,
        labels,
        name: str = "dataset",
        attribute_names: Optional[Sequence[str]] = None
    ):
        features = np.array(features, dtype=np.float64)
        labels = np.array(labels)

        if features.ndim == 1 and features.size == 0:
            features = features.reshape(0, 0)
        if features.ndim != 2:
            raise ValueError(f"features must be 2-dimensional, got shape {features.shape}")
        if labels.ndim != 1:
            raise ValueError(f"labels must be 1-dimensional, got shape {labels.shape}")
        if features.shape[0] != labels.shape[0]:
            raise ValueError(
                f"Got {features.shape[0]} feature rows but {labels.shape[0]} labels"
            )

        if attribute_names is None:
            attribute_names = [f"attr_{i}" for i in range(features.shape[1])]
        elif len(attribute_names) != features.shape[1]:
            raise ValueError(
                f"Got {len(attribute_names)} attribute names for {features.shape[1]} feature columns"
            )

        features.flags.writeable = False
        labels.flags.writeable = False

        self.features = features
        self.labels = labels
        self.name = name
        self.attribute_names = list(attribute_names)

    def __len__(self) -> int:
        return self.features.shape[0]

    def __getitem__(self, index: int):
        """Return instance ``index`` as a (features, label) pair."""
        return self.features[index], self.labels[index]

    def __iter__(self):
        for index in range(len(self)):
            yield self[index]

    @property
    def n_features(self) -> int:
        return self.features.shape[1]

    @property
    def class_names(self) -> List[Any]:
        values = set(self.labels.tolist())
        try:
            return sorted(values)
        except TypeError:
            # mixed label types have no natural order
            return sorted(values, key=str)

    @property
    def n_classes(self) -> int:
        return len(self.class_names)

    def __repr__(self) -> str:
        return (
            f"Dataset(name={self.name!r}, instances={len(self)}, "
            f"features={self.n_features}, classes={self.n_classes})"
        )
