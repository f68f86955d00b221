"""
Decision Tree Node Implementation

This module contains the DecisionTreeNode class that represents individual
nodes of a decision tree, and the DecisionTree class that owns them. Nodes
live in a per-tree arena (a tuple indexed by node id) and reference their
children by index.
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .feature_handler import FeatureHandler


class DecisionTreeNode:
    """
    Node of a decision tree

    Attributes:
    -----------
    node_id : int
        Index of the node in its tree's arena (pre-order)
    depth : int
        Depth of the node (root is 0)
    n_examples : int
        Number of training examples that reached this node
    is_leaf : bool
        Whether the node is a leaf
    values : array-like or None
        Statistics of a leaf, as computed by the StatsEstimator
    feature : object or None
        Split feature of an internal node
    threshold : float or None
        Split threshold; examples with ``response <= threshold`` go left
    information_gain : float
        Split quality of the chosen split (internal nodes)
    left : int or None
        Arena index of the left child
    right : int or None
        Arena index of the right child
    """

    def __init__(self, node_id: int = 0, depth: int = 0, n_examples: int = 0):
        self.node_id = node_id
        self.depth = depth
        self.n_examples = n_examples
        self.is_leaf = False
        self.values: Optional[np.ndarray] = None
        self.feature: Any = None
        self.threshold: Optional[float] = None
        self.information_gain = 0.0
        self.left: Optional[int] = None
        self.right: Optional[int] = None

    def make_leaf(self, values: np.ndarray) -> None:
        self.is_leaf = True
        self.values = np.asarray(values)

    def make_split(self, feature: Any, threshold: float, information_gain: float, left: int, right: int) -> None:
        self.is_leaf = False
        self.feature = feature
        self.threshold = float(threshold)
        self.information_gain = float(information_gain)
        self.left = left
        self.right = right

    def to_dict(self, feature_handler: FeatureHandler) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "node_id": self.node_id,
            "depth": self.depth,
            "n_examples": self.n_examples,
            "is_leaf": self.is_leaf,
        }
        if self.is_leaf:
            payload["values"] = np.asarray(self.values).tolist()
        else:
            payload.update({
                "feature": feature_handler.feature_to_dict(self.feature),
                "threshold": self.threshold,
                "information_gain": self.information_gain,
                "left": self.left,
                "right": self.right,
            })
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], feature_handler: FeatureHandler) -> "DecisionTreeNode":
        node = cls(payload["node_id"], payload["depth"], payload["n_examples"])
        if payload["is_leaf"]:
            node.make_leaf(np.asarray(payload["values"]))
        else:
            node.make_split(
                feature_handler.feature_from_dict(payload["feature"]),
                payload["threshold"],
                payload["information_gain"],
                payload["left"],
                payload["right"],
            )
        return node

    def __str__(self) -> str:
        if self.is_leaf:
            return f"Leaf(id={self.node_id}, depth={self.depth}, examples={self.n_examples}, values={self.values})"
        else:
            return (
                f"Node(id={self.node_id}, depth={self.depth}, examples={self.n_examples}, "
                f"feature={self.feature}, threshold={self.threshold:.4f})"
            )

    def __repr__(self) -> str:
        return self.__str__()


class DecisionTree:
    """
    A trained decision tree: an arena of nodes with the root at index 0

    Attributes:
    -----------
    nodes : tuple of DecisionTreeNode
        Every node of the tree, indexed by ``node_id``
    tree_index : int
        Position of the tree in its forest
    spawn_key : tuple of int
        SeedSequence spawn key the tree was grown with
    """

    def __init__(self, nodes: Sequence[DecisionTreeNode], tree_index: int = 0, spawn_key: Tuple[int, ...] = ()):
        if len(nodes) == 0:
            raise ValueError("A decision tree needs at least a root node")
        self.nodes: Tuple[DecisionTreeNode, ...] = tuple(nodes)
        self.tree_index = tree_index
        self.spawn_key = tuple(spawn_key)

    @property
    def root(self) -> DecisionTreeNode:
        return self.nodes[0]

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[DecisionTreeNode]:
        return iter(self.nodes)

    def leaves(self) -> List[DecisionTreeNode]:
        return [node for node in self.nodes if node.is_leaf]

    def get_depth(self) -> int:
        """Depth of the deepest node."""
        return max(node.depth for node in self.nodes)

    def count_nodes(self) -> int:
        return len(self.nodes)

    def find_leaf(self, feature_handler: FeatureHandler, data_set: Any, example: Any) -> DecisionTreeNode:
        """
        Route one example from the root to its leaf

        Parameters:
        -----------
        feature_handler : FeatureHandler
            Handler that created the tree's features
        data_set : object
            Corpus holding ``example``
        example : object
            Example index to route

        Returns:
        --------
        leaf : DecisionTreeNode
            The leaf the example reaches
        """
        node = self.root
        while not node.is_leaf:
            response = feature_handler.evaluate(node.feature, data_set, example)
            node = self.nodes[node.left if response <= node.threshold else node.right]
        return node

    def evaluate(self, feature_handler: FeatureHandler, data_set: Any, example: Any) -> np.ndarray:
        return self.find_leaf(feature_handler, data_set, example).values

    def get_node_logs(self) -> List[Dict[str, Any]]:
        logs = []
        for node in self.nodes:
            logs.append({
                "tree_index": self.tree_index,
                "node_id": node.node_id,
                "depth": node.depth,
                "n_examples": node.n_examples,
                "is_leaf": node.is_leaf,
                "feature": None if node.is_leaf else repr(node.feature),
                "threshold": node.threshold,
                "information_gain": node.information_gain,
            })
        return logs

    def to_dict(self, feature_handler: FeatureHandler) -> Dict[str, Any]:
        return {
            "tree_index": self.tree_index,
            "spawn_key": list(self.spawn_key),
            "nodes": [node.to_dict(feature_handler) for node in self.nodes],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], feature_handler: FeatureHandler) -> "DecisionTree":
        nodes = [DecisionTreeNode.from_dict(p, feature_handler) for p in payload["nodes"]]
        return cls(nodes, payload["tree_index"], tuple(payload.get("spawn_key", ())))

    def __str__(self) -> str:
        return f"DecisionTree(index={self.tree_index}, depth={self.get_depth()}, nodes={self.count_nodes()})"

    def __repr__(self) -> str:
        return self.__str__()
