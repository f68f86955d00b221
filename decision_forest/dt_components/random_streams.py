"""
Random Stream Hierarchy

Forest seed -> tree seed -> node seed. Every tree and every split node gets
its own numpy Generator derived from the forest SeedSequence, so no two
training paths share mutable random state.
"""

from typing import Optional

import numpy as np


def forest_seed_sequence(seed: Optional[int] = None) -> np.random.SeedSequence:
    """Root of the hierarchy. ``seed=None`` draws fresh OS entropy."""
    return np.random.SeedSequence(seed)


def tree_seed_sequence(forest_seq: np.random.SeedSequence, tree_index: int) -> np.random.SeedSequence:
    """Child sequence of tree ``tree_index``; independent of training order."""
    return np.random.SeedSequence(
        forest_seq.entropy,
        spawn_key=tuple(forest_seq.spawn_key) + (tree_index,),
    )


def node_seed_sequence(tree_seq: np.random.SeedSequence, node_id: int) -> np.random.SeedSequence:
    return np.random.SeedSequence(
        tree_seq.entropy,
        spawn_key=tuple(tree_seq.spawn_key) + (node_id,),
    )


def tree_rng(tree_seq: np.random.SeedSequence) -> np.random.Generator:
    return np.random.default_rng(tree_seq)


def node_rng(tree_seq: np.random.SeedSequence, node_id: int) -> np.random.Generator:
    return np.random.default_rng(node_seed_sequence(tree_seq, node_id))
