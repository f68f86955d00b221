"""
Decision Forest Module

This module contains the DecisionForest class, the immutable result of a
training call: an ordered collection of decision trees with traversal,
node-log reporting and persistence helpers.
"""

import json
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Sequence

import joblib
import numpy as np
import pandas as pd

from .feature_handler import FeatureHandler
from .tree_node import DecisionTree

FOREST_FORMAT_VERSION = 1


class DecisionForest:
    """
    Ordered collection of decision trees

    Per-tree predictions are not aggregated here; callers combine the leaf
    values returned by ``evaluate`` with their own policy (majority vote,
    averaging, ...).

    Attributes:
    -----------
    trees : tuple of DecisionTree
        Trees in training order
    seed_entropy : int or None
        Entropy of the forest SeedSequence, enough to reproduce training
    """

    def __init__(self, trees: Sequence[DecisionTree], seed_entropy: Optional[int] = None):
        self.trees = tuple(trees)
        self.seed_entropy = seed_entropy

    @property
    def n_trees(self) -> int:
        return len(self.trees)

    def __len__(self) -> int:
        return len(self.trees)

    def __iter__(self) -> Iterator[DecisionTree]:
        return iter(self.trees)

    def __getitem__(self, index: int) -> DecisionTree:
        return self.trees[index]

    def evaluate(self, feature_handler: FeatureHandler, data_set: Any, example: Any) -> List[np.ndarray]:
        """
        Leaf statistics reached by one example in every tree

        Parameters:
        -----------
        feature_handler : FeatureHandler
            Handler the forest was trained with
        data_set : object
            Corpus holding ``example``
        example : object
            Example index to evaluate

        Returns:
        --------
        values : list of array-like
            One leaf ``values`` array per tree, in tree order
        """
        return [tree.evaluate(feature_handler, data_set, example) for tree in self.trees]

    def get_node_logs(self) -> List[Dict[str, Any]]:
        """
        One record per node of every tree

        Returns:
        --------
        all_logs : List[Dict]
            Combined node logs, each tagged with its ``tree_index``
        """
        all_logs = []
        for tree in self.trees:
            all_logs.extend(tree.get_node_logs())
        return all_logs

    def to_frame(self) -> pd.DataFrame:
        columns = [
            "tree_index", "node_id", "depth", "n_examples",
            "is_leaf", "feature", "threshold", "information_gain",
        ]
        return pd.DataFrame(self.get_node_logs(), columns=columns)

    def print_node_summary(self, tree_index: Optional[int] = None) -> None:
        """
        Print node summary statistics

        Parameters:
        -----------
        tree_index : int, optional
            Specific tree index (None for all trees)
        """
        df = self.to_frame()
        if tree_index is not None:
            if not 0 <= tree_index < len(self.trees):
                print(f"Tree index {tree_index} is out of range. Available trees: 0-{len(self.trees) - 1}")
                return
            df = df[df["tree_index"] == tree_index]
            print(f"\n=== Tree {tree_index} Node Summary ===")
        else:
            print(f"\n=== All Trees Node Summary ({len(self.trees)} trees) ===")

        if df.empty:
            print("No node logs available.")
            return

        split_nodes = df[~df["is_leaf"]]
        print(f"Total nodes: {len(df)}")
        print(f"Split nodes: {len(split_nodes)}")
        print(f"Leaf nodes: {int(df['is_leaf'].sum())}")
        if not split_nodes.empty:
            gains = split_nodes["information_gain"]
            print(f"Information gain - Avg: {gains.mean():.4f}, Min: {gains.min():.4f}, Max: {gains.max():.4f}")

        print("\nDepth-wise statistics:")
        for depth, group in df.groupby("depth"):
            splits = group[~group["is_leaf"]]
            avg_gain = splits["information_gain"].mean() if not splits.empty else 0.0
            print(f"  Depth {depth}: {len(group)} nodes, leaves={int(group['is_leaf'].sum())}, Gain={avg_gain:.4f}")

    def to_dict(self, feature_handler: FeatureHandler) -> Dict[str, Any]:
        return {
            "format_version": FOREST_FORMAT_VERSION,
            "seed_entropy": self.seed_entropy,
            "trees": [tree.to_dict(feature_handler) for tree in self.trees],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], feature_handler: FeatureHandler) -> "DecisionForest":
        version = payload.get("format_version")
        if version != FOREST_FORMAT_VERSION:
            raise ValueError(f"Unsupported forest format version: {version}")
        trees = [DecisionTree.from_dict(p, feature_handler) for p in payload["trees"]]
        return cls(trees, payload.get("seed_entropy"))

    def save_json(self, file_path: str, feature_handler: FeatureHandler) -> None:
        """
        Save the forest to a JSON file

        Features are written through ``feature_handler.feature_to_dict``.
        """
        payload = self.to_dict(feature_handler)
        payload["saved_at"] = datetime.now().isoformat()

        with open(file_path, "w") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    @classmethod
    def load_json(cls, file_path: str, feature_handler: FeatureHandler) -> "DecisionForest":
        with open(file_path, "r") as f:
            payload = json.load(f)
        return cls.from_dict(payload, feature_handler)

    def save(self, file_path: str) -> None:
        """Binary persistence through joblib; features must be picklable."""
        joblib.dump({"format_version": FOREST_FORMAT_VERSION, "forest": self}, file_path)

    @classmethod
    def load(cls, file_path: str) -> "DecisionForest":
        payload = joblib.load(file_path)
        if payload.get("format_version") != FOREST_FORMAT_VERSION:
            raise ValueError(f"Unsupported forest format version: {payload.get('format_version')}")
        return payload["forest"]

    def __str__(self) -> str:
        return f"DecisionForest(n_trees={self.n_trees})"

    def __repr__(self) -> str:
        return self.__str__()
