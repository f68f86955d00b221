import pytest
from pydantic import ValidationError

from decision_forest import ConfigurationError, ForestTrainerConfig


def test_defaults():
    config = ForestTrainerConfig()

    assert config.n_trees == 1
    assert config.max_tree_depth == 15
    assert config.num_of_features == 1000
    assert config.num_of_thresholds == 10
    assert config.min_examples_for_split == 1
    assert config.random_features_at_split_node is False
    assert config.uses_explicit_thresholds is False


@pytest.mark.parametrize(
    "params",
    [
        {"n_trees": 0},
        {"max_tree_depth": 0},
        {"num_of_features": 0},
        {"num_of_thresholds": -1},
        {"min_examples_for_split": 0},
        {"n_jobs": 0},
        {"timeout": 0},
        {"seed": -3},
        {"threshold_strategy": "median"},
        {"num_of_thresholds": 0},
        {"num_of_thresholds": 0, "thresholds": []},
        {"thresholds": [0.5, float("nan")]},
        {"unknown_option": 1},
    ],
)
def test_invalid_settings_raise_configuration_error(params):
    with pytest.raises(ConfigurationError):
        ForestTrainerConfig.from_params(params)


def test_configuration_error_chains_validation_error():
    with pytest.raises(ConfigurationError) as excinfo:
        ForestTrainerConfig.from_params({"n_trees": 0})

    assert isinstance(excinfo.value.__cause__, ValidationError)
    assert isinstance(excinfo.value, ValueError)


def test_explicit_thresholds_replace_synthesized_ones():
    config = ForestTrainerConfig.from_params({"num_of_thresholds": 0, "thresholds": [0.1, 0.5]})

    assert config.uses_explicit_thresholds
    assert config.thresholds == [0.1, 0.5]


def test_config_is_frozen():
    config = ForestTrainerConfig()

    with pytest.raises(ValidationError):
        config.n_trees = 5
