"""
Decision forest training

Randomized decision forests over opaque corpora: examples are reached only
through a FeatureHandler, labels are scored through a StatsEstimator.
"""

from .dt_components import (
    BootstrapDataProvider,
    CapabilityError,
    ClassificationStatsEstimator,
    ColumnFeatureHandler,
    ColumnPairFeatureHandler,
    ConfigurationError,
    DataProvider,
    DecisionForest,
    DecisionForestError,
    DecisionForestTrainer,
    DecisionTree,
    EmptyDatasetError,
    FeatureHandler,
    ForestTrainerConfig,
    ProviderError,
    RegressionStatsEstimator,
    StatsEstimator,
    TrainingCancelledError,
    TrainingData,
)

__version__ = "0.1.0"
