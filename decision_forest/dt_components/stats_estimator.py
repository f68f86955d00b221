"""
Statistics Estimators

This module contains the StatsEstimator interface used by the tree builder to
score candidate splits and to summarize the labels reaching a leaf, with a
classification and a regression implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence

import numpy as np

# gains below this are rounding noise, not an improvement
_MIN_GAIN = 1e-12


class StatsEstimator(ABC):
    """
    Split scoring and leaf statistics

    ``compute_split_quality`` returns an improvement score: higher is better
    and 0.0 means the split does not improve on keeping the node whole. The
    builder only accepts splits scoring strictly above 0.0.
    """

    def check_labels(self, labels: np.ndarray) -> None:
        """Validate a tree's labels before growth. Raises ValueError."""

    @abstractmethod
    def compute_node_stats(self, examples: Sequence[Any], labels: np.ndarray) -> np.ndarray:
        """Statistics stored at a leaf for the given examples."""

    @abstractmethod
    def compute_split_quality(
        self,
        left_examples: Sequence[Any],
        left_labels: np.ndarray,
        right_examples: Sequence[Any],
        right_labels: np.ndarray,
    ) -> float:
        """Score of the bipartition (left, right) of a node's examples."""

    @abstractmethod
    def get_label_of_node(self, values: np.ndarray) -> Any:
        """Prediction read from leaf statistics."""


class ClassificationStatsEstimator(StatsEstimator):
    """
    Class histogram statistics

    Attributes:
    -----------
    n_classes : int
        Number of classes; labels must be integers in [0, n_classes)
    criterion : str
        Impurity measure, "entropy" or "gini"
    """

    def __init__(self, n_classes: int, criterion: str = "entropy"):
        if n_classes < 1:
            raise ValueError(f"n_classes must be positive, got {n_classes}")
        if criterion not in ("entropy", "gini"):
            raise ValueError(f"Invalid criterion: {criterion}")
        self.n_classes = n_classes
        self.criterion = criterion

    def check_labels(self, labels: np.ndarray) -> None:
        labels = np.asarray(labels)
        if labels.ndim != 1:
            raise ValueError(f"Class labels must be 1D, got {labels.ndim}D")
        if labels.size == 0:
            return
        if not np.all(np.equal(np.mod(labels, 1), 0)):
            raise ValueError("Class labels must be integers")
        if labels.min() < 0 or labels.max() >= self.n_classes:
            raise ValueError(
                f"Class labels must lie in [0, {self.n_classes}), "
                f"got range [{labels.min()}, {labels.max()}]"
            )

    def _histogram(self, labels: np.ndarray) -> np.ndarray:
        return np.bincount(np.asarray(labels, dtype=np.intp), minlength=self.n_classes).astype(np.float64)

    def _impurity(self, histogram: np.ndarray) -> float:
        total = histogram.sum()
        if total <= 0:
            return 0.0
        p = histogram / total
        if self.criterion == "gini":
            return float(1.0 - np.sum(p ** 2))
        p = p[p > 0]
        return float(-np.sum(p * np.log2(p)))

    def compute_node_stats(self, examples: Sequence[Any], labels: np.ndarray) -> np.ndarray:
        histogram = self._histogram(labels)
        total = histogram.sum()
        return histogram / total if total > 0 else histogram

    def compute_split_quality(self, left_examples, left_labels, right_examples, right_labels) -> float:
        left_hist = self._histogram(left_labels)
        right_hist = self._histogram(right_labels)
        n_left = left_hist.sum()
        n_right = right_hist.sum()
        n_total = n_left + n_right
        if n_total == 0:
            return 0.0

        weighted = (n_left / n_total) * self._impurity(left_hist) + (n_right / n_total) * self._impurity(right_hist)
        gain = self._impurity(left_hist + right_hist) - weighted
        return gain if gain > _MIN_GAIN else 0.0

    def get_label_of_node(self, values: np.ndarray) -> int:
        return int(np.argmax(values))


class RegressionStatsEstimator(StatsEstimator):
    """
    Mean / variance statistics for scalar or vector targets

    Split quality is the reduction of the mean squared deviation, summed over
    target dimensions.
    """

    def check_labels(self, labels: np.ndarray) -> None:
        labels = np.asarray(labels, dtype=np.float64)
        if labels.ndim not in (1, 2):
            raise ValueError(f"Regression labels must be 1D or 2D, got {labels.ndim}D")
        if np.any(~np.isfinite(labels)):
            raise ValueError("Regression labels contain inf or NaN values")

    @staticmethod
    def _as_2d(labels: np.ndarray) -> np.ndarray:
        labels = np.asarray(labels, dtype=np.float64)
        return labels.reshape(-1, 1) if labels.ndim == 1 else labels

    @staticmethod
    def _sum_squared_deviation(labels: np.ndarray) -> float:
        if labels.shape[0] == 0:
            return 0.0
        return float(np.sum((labels - labels.mean(axis=0)) ** 2))

    def compute_node_stats(self, examples: Sequence[Any], labels: np.ndarray) -> np.ndarray:
        labels = self._as_2d(labels)
        if labels.shape[0] == 0:
            return np.zeros(labels.shape[1])
        return labels.mean(axis=0)

    def compute_split_quality(self, left_examples, left_labels, right_examples, right_labels) -> float:
        left = self._as_2d(left_labels)
        right = self._as_2d(right_labels)
        n_total = left.shape[0] + right.shape[0]
        if n_total == 0:
            return 0.0

        parent = np.vstack([left, right])
        gain = (
            self._sum_squared_deviation(parent)
            - self._sum_squared_deviation(left)
            - self._sum_squared_deviation(right)
        ) / n_total
        return gain if gain > _MIN_GAIN else 0.0

    def get_label_of_node(self, values: np.ndarray) -> Any:
        values = np.asarray(values)
        return float(values[0]) if values.shape == (1,) else values
