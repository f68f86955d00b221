"""
Feature Handlers

This module contains the FeatureHandler interface through which the tree
builder creates candidate features and evaluates them on examples, plus two
handlers for corpora stored as 2D numeric matrices.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence

import numpy as np

from .exceptions import CapabilityError


class FeatureHandler(ABC):
    """
    Creates and evaluates features

    The trainer never looks at example content. Every response it splits on
    comes from ``evaluate`` / ``evaluate_batch`` of a handler.
    """

    @abstractmethod
    def create_features(self, num_of_features: int, rng: np.random.Generator) -> List[Any]:
        """
        Create candidate features

        Parameters:
        -----------
        num_of_features : int
            Number of candidates requested
        rng : np.random.Generator
            Random stream of the tree or of the split node

        Returns:
        --------
        features : list
            Up to ``num_of_features`` candidates. Fewer are allowed; an empty
            list turns the current node into a leaf.
        """

    @abstractmethod
    def evaluate(self, feature: Any, data_set: Any, example: Any) -> float:
        """Response of ``feature`` on one example. Must be deterministic."""

    def evaluate_batch(self, feature: Any, data_set: Any, examples: Sequence[Any]) -> np.ndarray:
        """
        Responses of ``feature`` on a node's examples

        Parameters:
        -----------
        feature : object
            Feature created by this handler
        data_set : object
            Opaque corpus handle
        examples : sequence
            Example indices reaching the node

        Returns:
        --------
        responses : array-like, shape=(n_examples,)
            One float per example
        """
        return np.fromiter(
            (self.evaluate(feature, data_set, example) for example in examples),
            dtype=np.float64,
            count=len(examples),
        )

    def feature_to_dict(self, feature: Any) -> Dict[str, Any]:
        return asdict(feature)

    @abstractmethod
    def feature_from_dict(self, payload: Dict[str, Any]) -> Any:
        """Inverse of ``feature_to_dict``."""


@dataclass(frozen=True)
class ColumnFeature:
    column: int


@dataclass(frozen=True)
class ColumnPairFeature:
    first: int
    second: int


class _MatrixFeatureHandler(FeatureHandler):
    """Shared row access for corpora where ``data_set[example]`` is a feature row."""

    def __init__(self, n_columns: int):
        if n_columns <= 0:
            raise ValueError(f"n_columns must be positive, got {n_columns}")
        self.n_columns = n_columns

    def _rows(self, data_set: Any, examples: Sequence[Any]) -> np.ndarray:
        data = np.asarray(data_set, dtype=np.float64)
        if data.ndim != 2 or data.shape[1] != self.n_columns:
            raise CapabilityError(
                f"Expected a 2D corpus with {self.n_columns} columns, got shape {data.shape}"
            )
        return data[np.asarray(examples, dtype=np.intp)]


class ColumnFeatureHandler(_MatrixFeatureHandler):
    """
    Axis-aligned features: the response is one column of the example's row.

    Columns are drawn without replacement, so at most ``n_columns``
    candidates are created per call.
    """

    def create_features(self, num_of_features: int, rng: np.random.Generator) -> List[ColumnFeature]:
        n = min(num_of_features, self.n_columns)
        columns = rng.choice(self.n_columns, size=n, replace=False)
        return [ColumnFeature(int(c)) for c in columns]

    def evaluate(self, feature: ColumnFeature, data_set: Any, example: Any) -> float:
        return float(data_set[example][feature.column])

    def evaluate_batch(self, feature: ColumnFeature, data_set: Any, examples: Sequence[Any]) -> np.ndarray:
        return self._rows(data_set, examples)[:, feature.column]

    def feature_from_dict(self, payload: Dict[str, Any]) -> ColumnFeature:
        return ColumnFeature(**payload)


class ColumnPairFeatureHandler(_MatrixFeatureHandler):
    """
    Comparison features: the response is the difference of two columns.
    """

    def create_features(self, num_of_features: int, rng: np.random.Generator) -> List[ColumnPairFeature]:
        if self.n_columns < 2:
            return []
        features = []
        for _ in range(num_of_features):
            first, second = rng.choice(self.n_columns, size=2, replace=False)
            features.append(ColumnPairFeature(int(first), int(second)))
        return features

    def evaluate(self, feature: ColumnPairFeature, data_set: Any, example: Any) -> float:
        row = data_set[example]
        return float(row[feature.first]) - float(row[feature.second])

    def evaluate_batch(self, feature: ColumnPairFeature, data_set: Any, examples: Sequence[Any]) -> np.ndarray:
        rows = self._rows(data_set, examples)
        return rows[:, feature.first] - rows[:, feature.second]

    def feature_from_dict(self, payload: Dict[str, Any]) -> ColumnPairFeature:
        return ColumnPairFeature(**payload)
