import numpy as np
import pytest

from decision_forest import ClassificationStatsEstimator, RegressionStatsEstimator


@pytest.mark.parametrize("criterion, expected", [("entropy", 1.0), ("gini", 0.5)])
def test_perfect_split_of_balanced_classes(criterion, expected):
    estimator = ClassificationStatsEstimator(n_classes=2, criterion=criterion)
    left = np.zeros(10, dtype=int)
    right = np.ones(10, dtype=int)

    gain = estimator.compute_split_quality(list(range(10)), left, list(range(10, 20)), right)

    assert gain == pytest.approx(expected)


def test_split_keeping_class_proportions_has_no_gain():
    estimator = ClassificationStatsEstimator(n_classes=2)
    left = np.array([0, 1, 0, 1])
    right = np.array([1, 0, 1, 0, 0, 1])

    assert estimator.compute_split_quality([], left, [], right) == 0.0


def test_single_class_split_has_no_gain():
    estimator = ClassificationStatsEstimator(n_classes=3, criterion="gini")
    labels = np.full(5, 2)

    assert estimator.compute_split_quality([], labels[:2], [], labels[2:]) == 0.0


def test_partial_split_gain_is_between_zero_and_parent_entropy():
    estimator = ClassificationStatsEstimator(n_classes=2)
    left = np.array([0, 0, 0, 1])
    right = np.array([1, 1, 1, 0])

    gain = estimator.compute_split_quality([], left, [], right)

    assert 0.0 < gain < 1.0


def test_node_stats_are_class_probabilities():
    estimator = ClassificationStatsEstimator(n_classes=3)

    values = estimator.compute_node_stats([0, 1, 2, 3], np.array([0, 2, 2, 2]))

    np.testing.assert_allclose(values, [0.25, 0.0, 0.75])
    assert estimator.get_label_of_node(values) == 2


def test_classification_label_checks():
    estimator = ClassificationStatsEstimator(n_classes=2)
    estimator.check_labels(np.array([0, 1, 1]))
    estimator.check_labels(np.array([0.0, 1.0]))

    with pytest.raises(ValueError, match="lie in"):
        estimator.check_labels(np.array([0, 2]))
    with pytest.raises(ValueError, match="integers"):
        estimator.check_labels(np.array([0.5, 1.0]))
    with pytest.raises(ValueError, match="1D"):
        estimator.check_labels(np.zeros((2, 2)))


def test_invalid_estimator_arguments():
    with pytest.raises(ValueError):
        ClassificationStatsEstimator(n_classes=0)
    with pytest.raises(ValueError, match="criterion"):
        ClassificationStatsEstimator(n_classes=2, criterion="misclassification")


def test_variance_reduction_of_separated_targets():
    estimator = RegressionStatsEstimator()
    left = np.array([1.0, 1.0, 1.0])
    right = np.array([3.0, 3.0, 3.0])

    # parent variance around mean 2.0 is 1.0, children are constant
    assert estimator.compute_split_quality([], left, [], right) == pytest.approx(1.0)


def test_variance_reduction_sums_target_dimensions():
    estimator = RegressionStatsEstimator()
    left = np.array([[0.0, 0.0], [0.0, 0.0]])
    right = np.array([[2.0, 4.0], [2.0, 4.0]])

    assert estimator.compute_split_quality([], left, [], right) == pytest.approx(1.0 + 4.0)


def test_regression_node_stats_and_label():
    estimator = RegressionStatsEstimator()

    scalar = estimator.compute_node_stats([], np.array([1.0, 2.0, 6.0]))
    vector = estimator.compute_node_stats([], np.array([[1.0, 0.0], [3.0, 2.0]]))

    assert estimator.get_label_of_node(scalar) == pytest.approx(3.0)
    np.testing.assert_allclose(estimator.get_label_of_node(vector), [2.0, 1.0])


def test_regression_label_checks():
    estimator = RegressionStatsEstimator()

    with pytest.raises(ValueError, match="NaN"):
        estimator.check_labels(np.array([1.0, np.nan]))
    with pytest.raises(ValueError, match="1D or 2D"):
        estimator.check_labels(np.zeros((2, 2, 2)))
