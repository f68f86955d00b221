"""
Data Providers

This module contains the DataProvider interface the forest trainer calls once
per tree to obtain that tree's training data, and a bootstrap (bagging)
provider over a fixed training set.
"""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Sequence

import numpy as np


class TrainingData(NamedTuple):
    """Corpus handle, example indices and position-aligned labels of one tree."""

    data_set: Any
    examples: Sequence[Any]
    labels: np.ndarray


class DataProvider(ABC):
    """
    Supplies per-tree training data on demand

    Implementations may resample (bagging) or stream data from out-of-core
    storage. With ``n_jobs > 1`` the trainer calls ``get_dataset_and_labels``
    from several worker threads, one call per tree.
    """

    @abstractmethod
    def get_dataset_and_labels(self, tree_index: int, rng: np.random.Generator) -> TrainingData:
        """
        Training data of one tree

        Parameters:
        -----------
        tree_index : int
            Index of the tree about to be grown
        rng : np.random.Generator
            The tree's random stream

        Returns:
        --------
        training_data : TrainingData
            (data_set, examples, labels) for this tree
        """

    def __call__(self, tree_index: int, rng: np.random.Generator) -> TrainingData:
        return self.get_dataset_and_labels(tree_index, rng)


class BootstrapDataProvider(DataProvider):
    """
    Per-tree resampling of a fixed training set

    Attributes:
    -----------
    sample_fraction : float
        Size of each tree's sample relative to the full set
    replace : bool
        Sample with replacement (classic bagging) or without
    """

    def __init__(
        self,
        data_set: Any,
        examples: Sequence[Any],
        labels: Sequence[Any],
        sample_fraction: float = 1.0,
        replace: bool = True,
    ):
        if sample_fraction <= 0:
            raise ValueError(f"sample_fraction must be positive, got {sample_fraction}")
        if not replace and sample_fraction > 1.0:
            raise ValueError("sample_fraction above 1.0 requires sampling with replacement")
        if len(examples) != len(labels):
            raise ValueError(
                f"examples ({len(examples)}) and labels ({len(labels)}) have different lengths"
            )
        self.data_set = data_set
        self.examples = list(examples)
        self.labels = np.asarray(labels)
        self.sample_fraction = sample_fraction
        self.replace = replace

    def get_dataset_and_labels(self, tree_index: int, rng: np.random.Generator) -> TrainingData:
        n_examples = len(self.examples)
        if n_examples == 0:
            return TrainingData(self.data_set, [], self.labels[:0])

        n_samples = max(1, int(round(self.sample_fraction * n_examples)))
        positions = rng.choice(n_examples, size=n_samples, replace=self.replace)
        return TrainingData(
            self.data_set,
            [self.examples[p] for p in positions],
            self.labels[positions],
        )
