from typing import Any, Dict, List

import numpy as np
import pytest
from loguru import logger

from decision_forest import ClassificationStatsEstimator, ColumnFeatureHandler, FeatureHandler
from decision_forest.utils.synthetic import generate_classification_data, generate_separable_data


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


class ChannelFeatureHandler(FeatureHandler):
    """
    Corpus is a dict of patch id -> channel vector; example indices are the
    (tuple) patch ids and features are channel numbers.
    """

    def __init__(self, n_channels: int):
        self.n_channels = n_channels

    def create_features(self, num_of_features, rng):
        return [int(c) for c in rng.integers(0, self.n_channels, size=num_of_features)]

    def evaluate(self, feature, data_set, example):
        return float(data_set[example][feature])

    def feature_to_dict(self, feature):
        return {"channel": feature}

    def feature_from_dict(self, payload):
        return payload["channel"]


class FixedFeatureHandler(ColumnFeatureHandler):
    """Always proposes the same features, in the same order."""

    def __init__(self, n_columns: int, features: List[Any]):
        super().__init__(n_columns)
        self.features = list(features)

    def create_features(self, num_of_features, rng):
        return list(self.features[:num_of_features])


@pytest.fixture
def separable_data():
    return generate_separable_data(100)


@pytest.fixture
def blob_data():
    return generate_classification_data(n_samples=300, n_features=6, n_classes=3, random_state=7)


@pytest.fixture
def patch_corpus():
    rng = np.random.default_rng(3)
    corpus: Dict[Any, np.ndarray] = {}
    labels = []
    for i in range(12):
        for j in range(10):
            label = int(i >= 6)
            corpus[(i, j)] = np.array([label + rng.normal(0, 0.1), rng.uniform(), rng.uniform()])
            labels.append(label)
    return corpus, list(corpus.keys()), np.array(labels)


@pytest.fixture
def binary_estimator():
    return ClassificationStatsEstimator(n_classes=2)


def route_examples(tree, handler, data_set, examples):
    """Node id -> positions of the examples passing through it."""
    visits = {node.node_id: [] for node in tree}
    for position, example in enumerate(examples):
        node = tree.root
        visits[node.node_id].append(position)
        while not node.is_leaf:
            response = handler.evaluate(node.feature, data_set, example)
            node = tree.nodes[node.left if response <= node.threshold else node.right]
            visits[node.node_id].append(position)
    return visits


@pytest.fixture
def router():
    return route_examples


@pytest.fixture
def fixed_handler_cls():
    return FixedFeatureHandler


@pytest.fixture
def channel_handler_cls():
    return ChannelFeatureHandler
