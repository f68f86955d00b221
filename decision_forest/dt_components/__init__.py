"""
Decision Tree Components Package

This package contains the components of the decision forest trainer: the
feature handler and statistics estimator capabilities, the data provider
hook, the tree builder, and the forest trainer and container.
"""

from .exceptions import (
    DecisionForestError,
    ConfigurationError,
    EmptyDatasetError,
    CapabilityError,
    ProviderError,
    TrainingCancelledError
)
from .config import ForestTrainerConfig
from .feature_handler import (
    FeatureHandler,
    ColumnFeature,
    ColumnFeatureHandler,
    ColumnPairFeature,
    ColumnPairFeatureHandler
)
from .stats_estimator import StatsEstimator, ClassificationStatsEstimator, RegressionStatsEstimator
from .data_provider import DataProvider, BootstrapDataProvider, TrainingData
from .tree_node import DecisionTreeNode, DecisionTree
from .tree_builder import TreeBuilder
from .decision_forest import DecisionForest
from .forest_trainer import DecisionForestTrainer

__all__ = [
    'DecisionForestError',
    'ConfigurationError',
    'EmptyDatasetError',
    'CapabilityError',
    'ProviderError',
    'TrainingCancelledError',
    'ForestTrainerConfig',
    'FeatureHandler',
    'ColumnFeature',
    'ColumnFeatureHandler',
    'ColumnPairFeature',
    'ColumnPairFeatureHandler',
    'StatsEstimator',
    'ClassificationStatsEstimator',
    'RegressionStatsEstimator',
    'DataProvider',
    'BootstrapDataProvider',
    'TrainingData',
    'DecisionTreeNode',
    'DecisionTree',
    'TreeBuilder',
    'DecisionForest',
    'DecisionForestTrainer'
]
