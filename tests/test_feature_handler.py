import numpy as np
import pytest

from decision_forest import CapabilityError, ColumnFeatureHandler, ColumnPairFeatureHandler
from decision_forest.dt_components.feature_handler import ColumnFeature, ColumnPairFeature


def test_column_features_are_distinct_and_capped():
    handler = ColumnFeatureHandler(n_columns=4)

    features = handler.create_features(10, np.random.default_rng(0))

    assert len(features) == 4
    assert sorted(f.column for f in features) == [0, 1, 2, 3]


def test_column_feature_creation_is_deterministic_for_a_seed():
    handler = ColumnFeatureHandler(n_columns=20)

    first = handler.create_features(5, np.random.default_rng(11))
    second = handler.create_features(5, np.random.default_rng(11))

    assert first == second


def test_batch_responses_match_single_evaluations():
    data = np.arange(20, dtype=float).reshape(5, 4)
    examples = [4, 0, 2]

    column_handler = ColumnFeatureHandler(4)
    pair_handler = ColumnPairFeatureHandler(4)
    column = ColumnFeature(2)
    pair = ColumnPairFeature(3, 1)

    np.testing.assert_allclose(
        column_handler.evaluate_batch(column, data, examples),
        [column_handler.evaluate(column, data, e) for e in examples],
    )
    np.testing.assert_allclose(pair_handler.evaluate_batch(pair, data, examples), [2.0, 2.0, 2.0])


def test_pair_features_use_two_different_columns():
    handler = ColumnPairFeatureHandler(n_columns=3)

    features = handler.create_features(50, np.random.default_rng(1))

    assert len(features) == 50
    assert all(f.first != f.second for f in features)


def test_pair_handler_needs_two_columns():
    assert ColumnPairFeatureHandler(1).create_features(5, np.random.default_rng(0)) == []


def test_corpus_shape_mismatch_is_a_capability_error():
    handler = ColumnFeatureHandler(3)

    with pytest.raises(CapabilityError):
        handler.evaluate_batch(ColumnFeature(0), np.zeros((4, 2)), [0, 1])


def test_features_serialize_through_the_handler():
    handler = ColumnPairFeatureHandler(5)
    feature = ColumnPairFeature(4, 0)

    payload = handler.feature_to_dict(feature)

    assert payload == {"first": 4, "second": 0}
    assert handler.feature_from_dict(payload) == feature


def test_default_batch_evaluation_keeps_tuple_examples_opaque(patch_corpus, channel_handler_cls):
    corpus, examples, _ = patch_corpus
    handler = channel_handler_cls(n_channels=3)

    responses = handler.evaluate_batch(1, corpus, examples[:5])

    assert responses.shape == (5,)
    np.testing.assert_allclose(responses, [corpus[e][1] for e in examples[:5]])
