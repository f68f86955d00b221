"""
Decision Forest Trainer

This module contains the DecisionForestTrainer class that trains a
configurable number of independent decision trees, sequentially or on worker
threads, and assembles them into a DecisionForest.
"""

import concurrent.futures
import threading
import time
from typing import Any, Callable, List, Optional, Sequence, Union

import numpy as np
from loguru import logger

from .config import ForestTrainerConfig
from .data_provider import DataProvider, TrainingData
from .decision_forest import DecisionForest
from .exceptions import (
    CapabilityError,
    ConfigurationError,
    EmptyDatasetError,
    ProviderError,
    TrainingCancelledError,
)
from .feature_handler import FeatureHandler
from .random_streams import forest_seed_sequence, tree_rng, tree_seed_sequence
from .stats_estimator import StatsEstimator
from .tree_builder import TreeBuilder, create_candidate_features
from .tree_node import DecisionTree

ProviderLike = Union[DataProvider, Callable[[int, np.random.Generator], TrainingData]]


class DecisionForestTrainer:
    """
    Trainer for decision forests

    Trees only share read-only inputs, so they are grown independently, each
    with its own random stream derived from the forest seed. A call to
    ``train`` either returns a forest of exactly ``n_trees`` trees or raises.
    """

    def __init__(self,
                 feature_handler: FeatureHandler,
                 stats_estimator: StatsEstimator,
                 n_trees: int = 1,
                 max_tree_depth: int = 15,
                 num_of_features: int = 1000,
                 num_of_thresholds: int = 10,
                 min_examples_for_split: int = 1,
                 random_features_at_split_node: bool = False,
                 thresholds: Optional[Sequence[float]] = None,
                 threshold_strategy: str = "uniform",
                 seed: Optional[int] = None,
                 n_jobs: int = 1,
                 timeout: Optional[float] = None,
                 data_provider: Optional[ProviderLike] = None):
        """
        Initialize the trainer

        Parameters:
        -----------
        feature_handler : FeatureHandler
            Creates candidate features and evaluates responses
        stats_estimator : StatsEstimator
            Scores splits and computes leaf statistics
        n_trees : int
            Number of trees to train
        max_tree_depth : int
            Maximum depth of each tree
        num_of_features : int
            Number of candidate features per split search
        num_of_thresholds : int
            Number of synthesized thresholds per feature (0: explicit only)
        min_examples_for_split : int
            Minimum number of examples to keep splitting a node
        random_features_at_split_node : bool
            Draw candidate features afresh at every split node
        thresholds : sequence of float, optional
            Explicit thresholds tested against every feature
        threshold_strategy : str
            "uniform" or "quantile" threshold synthesis
        seed : int, optional
            Forest seed; training is reproducible for a fixed seed
        n_jobs : int
            Number of worker threads
        timeout : float, optional
            Seconds after which ``train`` gives up
        data_provider : DataProvider or callable, optional
            Supplies each tree's (data_set, examples, labels)
        """
        self.feature_handler = feature_handler
        self.stats_estimator = stats_estimator
        self.data_provider = data_provider
        self.params = {
            "n_trees": n_trees,
            "max_tree_depth": max_tree_depth,
            "num_of_features": num_of_features,
            "num_of_thresholds": num_of_thresholds,
            "min_examples_for_split": min_examples_for_split,
            "random_features_at_split_node": random_features_at_split_node,
            "thresholds": list(thresholds) if thresholds is not None else None,
            "threshold_strategy": threshold_strategy,
            "seed": seed,
            "n_jobs": n_jobs,
            "timeout": timeout,
        }

        self.data_set: Any = None
        self.examples: Optional[List[Any]] = None
        self.label_data: Optional[np.ndarray] = None

        self.forest: Optional[DecisionForest] = None
        self.training_time = 0.0
        self._cancel_event: Optional[threading.Event] = None
        self._cancel_lock = threading.Lock()

    def set_params(self, **params: Any) -> "DecisionForestTrainer":
        """Update settings; validation happens when ``train`` is called."""
        for key, value in params.items():
            if key not in self.params:
                raise ConfigurationError(f"Unknown trainer option: {key}")
            if key == "thresholds" and value is not None:
                value = list(value)
            self.params[key] = value
        return self

    def set_training_data(self, data_set: Any, examples: Sequence[Any], label_data: Sequence[Any]) -> "DecisionForestTrainer":
        """
        Set the training set shared by every tree

        Parameters:
        -----------
        data_set : object
            Opaque corpus handle passed to the feature handler
        examples : sequence
            Example indices into ``data_set``
        label_data : sequence
            Labels aligned by position with ``examples``
        """
        self.data_set = data_set
        self.examples = list(examples)
        self.label_data = np.asarray(label_data)
        return self

    def set_data_provider(self, data_provider: Optional[ProviderLike]) -> "DecisionForestTrainer":
        self.data_provider = data_provider
        return self

    def get_config(self) -> ForestTrainerConfig:
        return ForestTrainerConfig.from_params(self.params)

    def cancel(self) -> None:
        """Abandon the running ``train`` call; it raises TrainingCancelledError."""
        with self._cancel_lock:
            if self._cancel_event is not None:
                self._cancel_event.set()

    def train(self) -> DecisionForest:
        """
        Train a decision forest using the configured data and settings

        Returns:
        --------
        forest : DecisionForest
            Exactly ``n_trees`` trees, in tree-index order

        Raises:
        -------
        ConfigurationError
            Invalid settings, missing capabilities or missing training data
        EmptyDatasetError
            A tree's resolved example set is empty
        ProviderError
            The data provider failed for some tree
        TrainingCancelledError
            ``cancel`` was called or ``timeout`` expired
        """
        self.forest = None
        config = self.get_config()
        self._validate_inputs()

        # each call owns its event so workers abandoned by an earlier call stay cancelled
        cancel_event = threading.Event()
        with self._cancel_lock:
            self._cancel_event = cancel_event
        try:
            self.forest = self._train_forest(config, cancel_event)
        finally:
            with self._cancel_lock:
                if self._cancel_event is cancel_event:
                    self._cancel_event = None
        return self.forest

    def _train_forest(self, config: ForestTrainerConfig, cancel_event: threading.Event) -> DecisionForest:
        forest_seq = forest_seed_sequence(config.seed)
        shared_features = None
        if not config.random_features_at_split_node:
            try:
                shared_features = create_candidate_features(
                    self.feature_handler, config.num_of_features, np.random.default_rng(forest_seq)
                )
            except CapabilityError as e:
                logger.warning(f"Feature handler failed to create candidate features: {e}")
                shared_features = []
            if not shared_features:
                logger.warning("Feature handler created no candidate features; every tree will be a single leaf")

        builder = TreeBuilder(
            self.feature_handler, self.stats_estimator, config, cancel_event=cancel_event
        )

        logger.info(
            f"Training decision forest: n_trees={config.n_trees}, max_tree_depth={config.max_tree_depth}, "
            f"num_of_features={config.num_of_features}, n_jobs={config.n_jobs}"
        )
        start_time = time.time()

        if config.n_jobs == 1 and config.timeout is None:
            trees = [
                self._train_tree(builder, config, forest_seq, shared_features, i)
                for i in range(config.n_trees)
            ]
        else:
            trees = self._train_trees_concurrently(builder, config, forest_seq, shared_features)

        self.training_time = time.time() - start_time
        forest = DecisionForest(trees, seed_entropy=forest_seq.entropy)
        logger.info(f"Decision forest trained in {self.training_time:.2f}s ({len(trees)} trees)")
        return forest

    def _validate_inputs(self) -> None:
        if self.feature_handler is None:
            raise ConfigurationError("No feature handler configured")
        if self.stats_estimator is None:
            raise ConfigurationError("No statistics estimator configured")

        if self.data_provider is not None:
            if not callable(getattr(self.data_provider, "get_dataset_and_labels", self.data_provider)):
                raise ConfigurationError("data_provider must be a DataProvider or a callable")
            return

        if self.examples is None or self.label_data is None:
            raise ConfigurationError("No training data set and no data provider configured")
        if len(self.examples) == 0:
            raise EmptyDatasetError("The training example set is empty")
        if len(self.label_data) != len(self.examples):
            raise ConfigurationError(
                f"examples ({len(self.examples)}) and label_data ({len(self.label_data)}) have different lengths"
            )
        try:
            self.stats_estimator.check_labels(self.label_data)
        except ValueError as e:
            raise ConfigurationError(f"Invalid label data: {e}") from e

    def _train_trees_concurrently(
        self,
        builder: TreeBuilder,
        config: ForestTrainerConfig,
        forest_seq: np.random.SeedSequence,
        shared_features: Optional[List[Any]],
    ) -> List[DecisionTree]:
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=config.n_jobs, thread_name_prefix="decision-forest"
        )
        futures = [
            executor.submit(self._train_tree, builder, config, forest_seq, shared_features, i)
            for i in range(config.n_trees)
        ]
        try:
            for future in concurrent.futures.as_completed(futures, timeout=config.timeout):
                future.result()
        except concurrent.futures.TimeoutError as e:
            builder.cancel_event.set()
            raise TrainingCancelledError(f"Decision forest training timed out after {config.timeout}s") from e
        except BaseException:
            builder.cancel_event.set()
            raise
        finally:
            # running trees stop at their next node once the event is set
            executor.shutdown(wait=False, cancel_futures=True)

        return [future.result() for future in futures]

    def _train_tree(
        self,
        builder: TreeBuilder,
        config: ForestTrainerConfig,
        forest_seq: np.random.SeedSequence,
        shared_features: Optional[List[Any]],
        tree_index: int,
    ) -> DecisionTree:
        if builder.cancel_event is not None and builder.cancel_event.is_set():
            raise TrainingCancelledError("Decision forest training was cancelled")

        tree_seq = tree_seed_sequence(forest_seq, tree_index)
        data_set, examples, labels = self._resolve_training_data(tree_index, tree_rng(tree_seq))

        tree = builder.build_tree(
            data_set, examples, labels, tree_seq, features=shared_features, tree_index=tree_index
        )
        logger.info(
            f"Tree {tree_index + 1}/{config.n_trees} trained: {len(examples)} examples, "
            f"depth={tree.get_depth()}, nodes={tree.count_nodes()}, leaves={len(tree.leaves())}"
        )
        return tree

    def _resolve_training_data(self, tree_index: int, rng: np.random.Generator) -> TrainingData:
        """Training data of one tree, from the provider or the shared set."""
        if self.data_provider is None:
            return TrainingData(self.data_set, self.examples, self.label_data)

        provide = getattr(self.data_provider, "get_dataset_and_labels", self.data_provider)
        try:
            result = provide(tree_index, rng)
        except Exception as e:
            raise ProviderError(f"Data provider failed for tree {tree_index}: {e}") from e

        try:
            data_set, examples, labels = result
        except (TypeError, ValueError) as e:
            raise ProviderError(
                f"Data provider returned a malformed result for tree {tree_index}: {result!r}"
            ) from e

        examples = list(examples)
        labels = np.asarray(labels)
        if len(examples) == 0:
            raise EmptyDatasetError(f"Data provider returned no examples for tree {tree_index}")
        if len(labels) != len(examples):
            raise ProviderError(
                f"Data provider returned {len(examples)} examples and {len(labels)} labels for tree {tree_index}"
            )
        try:
            self.stats_estimator.check_labels(labels)
        except ValueError as e:
            raise ProviderError(f"Data provider returned invalid labels for tree {tree_index}: {e}") from e

        return TrainingData(data_set, examples, labels)

    def print_training_summary(self) -> None:
        """
        Print training summary
        """
        print(f"\n=== Decision Forest Training Summary ===")
        for key, value in self.params.items():
            print(f"{key}: {value}")
        print(f"Data provider: {type(self.data_provider).__name__ if self.data_provider is not None else None}")

        if self.forest is not None:
            depths = [tree.get_depth() for tree in self.forest]
            nodes = [tree.count_nodes() for tree in self.forest]
            print(f"Trees: {len(self.forest)}")
            print(f"Depth - Avg: {np.mean(depths):.2f}, Max: {max(depths)}")
            print(f"Nodes - Avg: {np.mean(nodes):.2f}, Total: {sum(nodes)}")
            print(f"Training time: {self.training_time:.2f}s")
