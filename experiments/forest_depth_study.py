"""
Forest depth study

Trains forests of increasing maximum depth on a synthetic classification
corpus, compares held-out accuracy (majority vote over the trees) and
training time, and writes the results and forest plots to a directory.
"""

import json
import os
import time
from typing import Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from decision_forest import (
    BootstrapDataProvider,
    ClassificationStatsEstimator,
    ColumnPairFeatureHandler,
    DecisionForest,
    DecisionForestTrainer,
)
from decision_forest.utils.logger import configure_logging
from decision_forest.utils.synthetic import generate_classification_data
from decision_forest.utils.visualization import save_forest_report


def majority_vote_accuracy(forest: DecisionForest, handler, estimator, data_set: np.ndarray,
                           examples: np.ndarray, labels: np.ndarray) -> float:
    correct = 0
    for example, label in zip(examples, labels):
        votes = [estimator.get_label_of_node(values) for values in forest.evaluate(handler, data_set, example)]
        correct += int(np.bincount(votes).argmax() == label)
    return correct / len(examples)


def run_depth_study(depths: List[int] = (2, 4, 6, 8),
                    n_trees: int = 10,
                    n_samples: int = 1000,
                    n_features: int = 8,
                    n_classes: int = 3,
                    n_jobs: int = 4,
                    random_state: int = 42,
                    output_dir: str = "results") -> Dict:
    """
    Train one forest per maximum depth and compare them

    Parameters:
    -----------
    depths : list of int
        Maximum tree depths to compare
    n_trees : int, default=10
        Trees per forest
    n_samples : int, default=1000
        Corpus size (80% train, 20% test)
    n_features : int, default=8
        Corpus columns
    n_classes : int, default=3
        Number of classes
    n_jobs : int, default=4
        Worker threads per training call
    random_state : int, default=42
        Seed of the corpus and of every forest
    output_dir : str, default="results"
        Output directory

    Returns:
    --------
    results : dict
        Per-depth accuracy, training time and tree shape
    """
    os.makedirs(output_dir, exist_ok=True)

    data_set, examples, labels = generate_classification_data(
        n_samples=n_samples, n_features=n_features, n_classes=n_classes, random_state=random_state
    )
    n_train = int(n_samples * 0.8)
    train_examples, test_examples = examples[:n_train], examples[n_train:]
    train_labels, test_labels = labels[:n_train], labels[n_train:]

    handler = ColumnPairFeatureHandler(n_features)
    estimator = ClassificationStatsEstimator(n_classes)
    provider = BootstrapDataProvider(data_set, train_examples, train_labels)

    results = {'n_train': n_train, 'n_test': n_samples - n_train, 'depths': {}}

    for depth in depths:
        print(f"\nTraining forest with max_tree_depth={depth}...")
        trainer = DecisionForestTrainer(
            handler, estimator,
            n_trees=n_trees,
            max_tree_depth=depth,
            num_of_features=20,
            num_of_thresholds=10,
            min_examples_for_split=5,
            random_features_at_split_node=True,
            seed=random_state,
            n_jobs=n_jobs,
            data_provider=provider,
        )

        start_time = time.time()
        forest = trainer.train()
        train_time = time.time() - start_time

        train_acc = majority_vote_accuracy(forest, handler, estimator, data_set, train_examples, train_labels)
        test_acc = majority_vote_accuracy(forest, handler, estimator, data_set, test_examples, test_labels)

        results['depths'][depth] = {
            'train_time': train_time,
            'train_accuracy': train_acc,
            'test_accuracy': test_acc,
            'mean_nodes': float(np.mean([tree.count_nodes() for tree in forest])),
        }
        print(f"  Train time: {train_time:.4f}s")
        print(f"  Train accuracy: {train_acc:.4f}")
        print(f"  Test accuracy: {test_acc:.4f}")

        save_forest_report(forest, os.path.join(output_dir, f"depth_{depth}"))

    with open(os.path.join(output_dir, "depth_study.json"), 'w') as f:
        json.dump(results, f, indent=2)

    plot_depth_study(results, save_path=os.path.join(output_dir, "depth_study.png"))
    return results


def plot_depth_study(results: Dict, save_path: Optional[str] = None) -> None:
    df = pd.DataFrame.from_dict(results['depths'], orient='index')
    df.index.name = 'max_tree_depth'
    df = df.reset_index()

    fig, axes = plt.subplots(1, 2, figsize=(14, 5))
    acc = df.melt(id_vars='max_tree_depth', value_vars=['train_accuracy', 'test_accuracy'],
                  var_name='split', value_name='accuracy')
    sns.lineplot(data=acc, x='max_tree_depth', y='accuracy', hue='split', marker='o', ax=axes[0])
    axes[0].set_title('Majority-vote accuracy')
    sns.barplot(data=df, x='max_tree_depth', y='train_time', ax=axes[1], color='steelblue')
    axes[1].set_title('Training time (s)')
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')

    plt.close(fig)


if __name__ == "__main__":
    configure_logging(level="INFO")
    run_depth_study(output_dir="results", random_state=42)
