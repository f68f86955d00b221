"""
Synthetic corpora for experiments and tests

Small generators of labeled feature matrices. Example indices are row
numbers, so the returned corpora work directly with the column feature
handlers.
"""

from typing import Optional, Tuple

import numpy as np


def generate_classification_data(n_samples: int = 500, n_features: int = 8, n_classes: int = 3,
                                 n_informative: int = 2, noise: float = 0.1,
                                 random_state: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Gaussian class blobs in a few informative columns, noise elsewhere

    Parameters:
    -----------
    n_samples : int, default=500
        Number of examples
    n_features : int, default=8
        Number of columns
    n_classes : int, default=3
        Number of classes
    n_informative : int, default=2
        Columns whose values depend on the class
    noise : float, default=0.1
        Standard deviation of the class blobs
    random_state : int, optional
        Random seed

    Returns:
    --------
    data_set : array-like, shape=(n_samples, n_features)
        Feature matrix
    examples : array-like, shape=(n_samples,)
        Example indices (row numbers)
    labels : array-like, shape=(n_samples,)
        Class ids in [0, n_classes)
    """
    if n_informative > n_features:
        raise ValueError(f"n_informative ({n_informative}) exceeds n_features ({n_features})")

    rng = np.random.default_rng(random_state)
    labels = rng.integers(0, n_classes, size=n_samples)
    centers = rng.uniform(-1.0, 1.0, size=(n_classes, n_informative))

    data_set = rng.uniform(-1.0, 1.0, size=(n_samples, n_features))
    data_set[:, :n_informative] = centers[labels] + rng.normal(0.0, noise, size=(n_samples, n_informative))

    return data_set, np.arange(n_samples), labels


def generate_regression_data(n_samples: int = 500, n_features: int = 6, n_targets: int = 1,
                             noise: float = 0.05,
                             random_state: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Piecewise-constant targets driven by the first two columns
    """
    rng = np.random.default_rng(random_state)
    data_set = rng.uniform(0.0, 1.0, size=(n_samples, n_features))

    targets = np.zeros((n_samples, n_targets))
    for t in range(n_targets):
        targets[:, t] = (
            np.where(data_set[:, 0] > 0.5, 1.0 + t, -1.0)
            + np.where(data_set[:, 1] > 0.3, 0.5, 0.0)
            + rng.normal(0.0, noise, size=n_samples)
        )

    labels = targets[:, 0] if n_targets == 1 else targets
    return data_set, np.arange(n_samples), labels


def generate_separable_data(n_samples: int = 100) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Two balanced classes separated by column 0 at 0.5

    Column 0 is 0.0 for class 0 and 1.0 for class 1; column 1 is constant.
    """
    labels = np.arange(n_samples) % 2
    data_set = np.zeros((n_samples, 2))
    data_set[:, 0] = labels
    data_set[:, 1] = 0.25
    return data_set, np.arange(n_samples), labels
