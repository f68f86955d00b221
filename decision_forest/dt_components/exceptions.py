"""
Error Types

This module contains the exception hierarchy raised by the decision forest
trainer. Configuration, dataset and provider errors abort a training call;
capability errors are recovered by the tree builder.
"""


class DecisionForestError(Exception):
    """Base class of every error raised by the trainer."""


class ConfigurationError(DecisionForestError, ValueError):
    """Invalid or missing training settings. Training never starts."""


class EmptyDatasetError(DecisionForestError, ValueError):
    """The resolved example set of a tree is empty."""


class CapabilityError(DecisionForestError, RuntimeError):
    """
    A feature handler or statistics estimator returned an invalid result.

    The tree builder treats this as a signal to finalize the current node
    as a leaf.
    """


class ProviderError(DecisionForestError, RuntimeError):
    """The data provider failed to supply a tree's training data."""


class TrainingCancelledError(DecisionForestError, RuntimeError):
    """Training was cancelled or ran past its timeout."""
