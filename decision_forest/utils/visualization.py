"""
Forest structure visualization utilities

Plots built from ``DecisionForest.to_frame()``: tree shape per tree, leaf
size distribution and feature usage across the forest.
"""

import os
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from ..dt_components.decision_forest import DecisionForest


def summarize_trees(forest: DecisionForest) -> pd.DataFrame:
    """
    Per-tree shape statistics

    Returns:
    --------
    summary : pd.DataFrame
        One row per tree: depth, n_nodes, n_leaves, mean_leaf_size
    """
    df = forest.to_frame()
    leaves = df[df["is_leaf"]]
    summary = pd.DataFrame({
        "depth": df.groupby("tree_index")["depth"].max(),
        "n_nodes": df.groupby("tree_index").size(),
        "n_leaves": leaves.groupby("tree_index").size(),
        "mean_leaf_size": leaves.groupby("tree_index")["n_examples"].mean(),
    })
    summary.index.name = "tree_index"
    return summary.reset_index()


def plot_tree_shapes(forest: DecisionForest,
                     title: str = "Decision Forest Tree Shapes",
                     save_path: Optional[str] = None) -> None:
    """
    Bar plots of depth and node count per tree

    Parameters:
    -----------
    forest : DecisionForest
        Trained forest
    title : str, default="Decision Forest Tree Shapes"
        Figure title
    save_path : str, optional
        Where to save the figure
    """
    summary = summarize_trees(forest)

    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    sns.barplot(data=summary, x="tree_index", y="depth", ax=axes[0], color="steelblue")
    axes[0].set_title("Depth")
    sns.barplot(data=summary, x="tree_index", y="n_nodes", ax=axes[1], color="seagreen")
    axes[1].set_title("Nodes")
    fig.suptitle(title)
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close(fig)


def plot_leaf_sizes(forest: DecisionForest,
                    title: str = "Leaf Size Distribution",
                    save_path: Optional[str] = None) -> None:
    df = forest.to_frame()
    leaves = df[df["is_leaf"]]

    plt.figure(figsize=(10, 6))
    sns.histplot(data=leaves, x="n_examples", hue="depth", multiple="stack", palette="viridis")
    plt.xlabel("Examples per leaf")
    plt.title(title)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()


def plot_feature_usage(forest: DecisionForest,
                       top_n: int = 20,
                       title: str = "Split Feature Usage",
                       save_path: Optional[str] = None) -> None:
    """
    Summed information gain per split feature (top ``top_n``)
    """
    df = forest.to_frame()
    splits = df[~df["is_leaf"]]
    if splits.empty:
        return

    usage = (
        splits.groupby("feature")["information_gain"].sum()
        .sort_values(ascending=False)
        .head(top_n)
    )

    plt.figure(figsize=(10, max(4, 0.4 * len(usage))))
    sns.barplot(x=usage.values, y=usage.index, color="darkorange")
    plt.xlabel("Total information gain")
    plt.ylabel("Feature")
    plt.title(title)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close()


def save_forest_report(forest: DecisionForest, results_dir: str) -> str:
    """
    Write the node table, tree summary and plots of a forest to a directory

    Returns:
    --------
    results_dir : str
        The directory written to
    """
    os.makedirs(os.path.join(results_dir, "figures"), exist_ok=True)

    forest.to_frame().to_csv(os.path.join(results_dir, "nodes.csv"), index=False)
    summarize_trees(forest).to_csv(os.path.join(results_dir, "trees.csv"), index=False)

    plot_tree_shapes(forest, save_path=os.path.join(results_dir, "figures", "tree_shapes.png"))
    plot_leaf_sizes(forest, save_path=os.path.join(results_dir, "figures", "leaf_sizes.png"))
    plot_feature_usage(forest, save_path=os.path.join(results_dir, "figures", "feature_usage.png"))

    return results_dir
