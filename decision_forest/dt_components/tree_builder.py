"""
Tree Builder

This module handles the construction of a single decision tree: candidate
feature generation, threshold search, best-split selection and recursive
partitioning of the examples.
"""

import threading
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from .config import ForestTrainerConfig
from .exceptions import CapabilityError, TrainingCancelledError
from .feature_handler import FeatureHandler
from .random_streams import node_rng
from .stats_estimator import StatsEstimator
from .tree_node import DecisionTree, DecisionTreeNode


def as_example_array(examples: Sequence[Any]) -> np.ndarray:
    """
    Object array of example indices. Keeps each index opaque (tuples stay
    tuples) while allowing boolean-mask partitioning.
    """
    array = np.empty(len(examples), dtype=object)
    for i, example in enumerate(examples):
        array[i] = example
    return array


def create_candidate_features(
    feature_handler: FeatureHandler, num_of_features: int, rng: np.random.Generator
) -> List[Any]:
    """
    Candidate features from a handler, as a list

    ``None`` counts as no candidates. A result that is not iterable raises
    CapabilityError.
    """
    features = feature_handler.create_features(num_of_features, rng)
    if features is None:
        return []
    try:
        return list(features)
    except TypeError as e:
        raise CapabilityError(f"Feature handler returned a non-iterable candidate set: {features!r}") from e


class TreeBuilder:
    """
    Grows one decision tree

    A builder holds no per-tree state, so one instance may grow several
    trees concurrently.

    Attributes:
    -----------
    feature_handler : FeatureHandler
        Creates candidate features and evaluates responses
    stats_estimator : StatsEstimator
        Scores splits and computes leaf statistics
    config : ForestTrainerConfig
        Validated training settings
    cancel_event : threading.Event, optional
        When set, growth stops with TrainingCancelledError at the next node
    """

    def __init__(
        self,
        feature_handler: FeatureHandler,
        stats_estimator: StatsEstimator,
        config: ForestTrainerConfig,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.feature_handler = feature_handler
        self.stats_estimator = stats_estimator
        self.config = config
        self.cancel_event = cancel_event

    def build_tree(
        self,
        data_set: Any,
        examples: Sequence[Any],
        labels: np.ndarray,
        tree_seq: np.random.SeedSequence,
        features: Optional[List[Any]] = None,
        tree_index: int = 0,
    ) -> DecisionTree:
        """
        Grow a decision tree

        Parameters:
        -----------
        data_set : object
            Opaque corpus handle passed to the feature handler
        examples : sequence
            Example indices of the tree's training set
        labels : array-like, shape=(n_examples, ...)
            Labels aligned by position with ``examples``
        tree_seq : np.random.SeedSequence
            Seed material of the tree; split nodes derive their own streams
            from it when features are drawn per node
        features : list, optional
            Candidate features shared by every node. Required unless
            ``random_features_at_split_node`` is set.
        tree_index : int
            Position of the tree in the forest

        Returns:
        --------
        tree : DecisionTree
            The grown tree, root at node 0
        """
        if features is None and not self.config.random_features_at_split_node:
            raise ValueError("Shared candidate features are required when features are not drawn per node")

        nodes: List[DecisionTreeNode] = []
        self._build_tree_recursive(
            nodes, data_set, as_example_array(examples), np.asarray(labels), 0, tree_seq, features
        )
        tree = DecisionTree(nodes, tree_index=tree_index, spawn_key=tuple(tree_seq.spawn_key))
        logger.debug(f"Tree {tree_index} grown: depth={tree.get_depth()}, nodes={tree.count_nodes()}")
        return tree

    def _build_tree_recursive(
        self,
        nodes: List[DecisionTreeNode],
        data_set: Any,
        examples: np.ndarray,
        labels: np.ndarray,
        depth: int,
        tree_seq: np.random.SeedSequence,
        shared_features: Optional[List[Any]],
    ) -> int:
        """Grow the subtree of one node and return the node's arena index."""
        self._check_cancelled()

        node = DecisionTreeNode(node_id=len(nodes), depth=depth, n_examples=len(examples))
        nodes.append(node)

        if self._should_stop_splitting(len(examples), depth):
            node.make_leaf(self._compute_leaf_values(examples, labels))
            return node.node_id

        try:
            if self.config.random_features_at_split_node:
                features = create_candidate_features(
                    self.feature_handler, self.config.num_of_features, node_rng(tree_seq, node.node_id)
                )
            else:
                features = shared_features
            best_split = self._search_best_split(data_set, examples, labels, features)
        except CapabilityError as e:
            logger.warning(f"Node {node.node_id} at depth {depth} finalized as leaf: {e}")
            best_split = None

        if best_split is None:
            node.make_leaf(self._compute_leaf_values(examples, labels))
            return node.node_id

        feature, threshold, information_gain, left_mask = best_split
        right_mask = ~left_mask

        left_id = self._build_tree_recursive(
            nodes, data_set, examples[left_mask], labels[left_mask], depth + 1, tree_seq, shared_features
        )
        right_id = self._build_tree_recursive(
            nodes, data_set, examples[right_mask], labels[right_mask], depth + 1, tree_seq, shared_features
        )
        node.make_split(feature, threshold, information_gain, left_id, right_id)
        return node.node_id

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise TrainingCancelledError("Decision tree training was cancelled")

    def _should_stop_splitting(self, n_examples: int, depth: int) -> bool:
        return (
            n_examples == 0 or
            depth >= self.config.max_tree_depth or
            n_examples < self.config.min_examples_for_split
        )

    def _search_best_split(
        self,
        data_set: Any,
        examples: np.ndarray,
        labels: np.ndarray,
        features: Optional[List[Any]],
    ) -> Optional[Tuple[Any, float, float, np.ndarray]]:
        """
        Find the best (feature, threshold) pair of a node

        Returns:
        --------
        best_split : tuple or None
            (feature, threshold, information_gain, left_mask), or None when
            no candidate improves on a leaf. Ties keep the first candidate in
            generation order.
        """
        if not features:
            logger.debug("No candidate features available")
            return None

        n_examples = len(examples)
        best_gain = 0.0
        best_split = None

        for feature in features:
            responses = self._evaluate_responses(feature, data_set, examples)

            for threshold in self._candidate_thresholds(responses):
                left_mask = responses <= threshold
                n_left = int(np.count_nonzero(left_mask))

                # a split with an empty side separates nothing
                if n_left == 0 or n_left == n_examples:
                    continue

                right_mask = ~left_mask
                gain = self.stats_estimator.compute_split_quality(
                    examples[left_mask], labels[left_mask], examples[right_mask], labels[right_mask]
                )
                if gain is None or not np.isfinite(gain):
                    raise CapabilityError(f"Split quality is not a finite number: {gain}")

                if gain > best_gain:
                    best_gain = float(gain)
                    best_split = (feature, float(threshold), best_gain, left_mask)

        return best_split

    def _evaluate_responses(self, feature: Any, data_set: Any, examples: np.ndarray) -> np.ndarray:
        responses = np.asarray(self.feature_handler.evaluate_batch(feature, data_set, examples), dtype=np.float64)
        if responses.shape != (len(examples),):
            raise CapabilityError(
                f"Feature {feature!r} produced responses of shape {responses.shape} for {len(examples)} examples"
            )
        return responses

    def _candidate_thresholds(self, responses: np.ndarray) -> np.ndarray:
        """
        Thresholds tested for one feature at one node

        Explicit thresholds are used as given. Otherwise ``num_of_thresholds``
        values are placed inside the range of the finite responses, evenly
        spaced (``uniform``) or at inner quantiles (``quantile``).
        """
        if self.config.uses_explicit_thresholds:
            return np.asarray(self.config.thresholds, dtype=np.float64)

        finite = responses[np.isfinite(responses)]
        n_thresholds = self.config.num_of_thresholds
        if finite.size == 0:
            return np.empty(0)

        min_value, max_value = finite.min(), finite.max()
        if min_value == max_value:
            return np.empty(0)

        if self.config.threshold_strategy == "quantile":
            return np.unique(np.quantile(finite, np.linspace(0.0, 1.0, n_thresholds + 2)[1:-1]))

        step = (max_value - min_value) / (n_thresholds + 2)
        return min_value + step * np.arange(1, n_thresholds + 1)

    def _compute_leaf_values(self, examples: np.ndarray, labels: np.ndarray) -> np.ndarray:
        values = self.stats_estimator.compute_node_stats(examples, labels)
        if values is None:
            raise CapabilityError("Statistics estimator returned no leaf statistics")
        return np.asarray(values)
