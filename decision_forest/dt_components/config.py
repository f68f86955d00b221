"""
Trainer Configuration

This module contains the ForestTrainerConfig model holding every setting of
a forest training call. The model is frozen, so settings cannot change while
trees are being grown.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigurationError


class ForestTrainerConfig(BaseModel):
    """
    Settings of a decision forest training call

    Attributes:
    -----------
    n_trees : int
        Number of trees to train
    max_tree_depth : int
        Maximum depth of each tree (the root is at depth 0)
    num_of_features : int
        Number of candidate features drawn per split search
    num_of_thresholds : int
        Number of thresholds synthesized per feature from the response range;
        0 means only the explicit ``thresholds`` are tested
    min_examples_for_split : int
        Nodes with fewer examples become leaves
    random_features_at_split_node : bool
        Draw a fresh candidate set at every split node instead of using the
        set created once per training call and shared by every tree
    thresholds : list of float, optional
        Explicit thresholds tested against every feature
    threshold_strategy : {"uniform", "quantile"}
        How thresholds are synthesized when no explicit list is given
    seed : int, optional
        Forest-level seed; trees and nodes derive their streams from it
    n_jobs : int
        Number of worker threads training trees concurrently
    timeout : float, optional
        Seconds after which the training call is abandoned
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    n_trees: int = Field(default=1, gt=0)
    max_tree_depth: int = Field(default=15, gt=0)
    num_of_features: int = Field(default=1000, gt=0)
    num_of_thresholds: int = Field(default=10, ge=0)
    min_examples_for_split: int = Field(default=1, ge=1)
    random_features_at_split_node: bool = False
    thresholds: Optional[List[float]] = None
    threshold_strategy: Literal["uniform", "quantile"] = "uniform"
    seed: Optional[int] = Field(default=None, ge=0)
    n_jobs: int = Field(default=1, ge=1)
    timeout: Optional[float] = Field(default=None, gt=0)

    @field_validator("thresholds")
    @classmethod
    def _check_thresholds(cls, value: Optional[List[float]]) -> Optional[List[float]]:
        if value is not None and not all(math.isfinite(t) for t in value):
            raise ValueError("thresholds must be finite numbers")
        return value

    @model_validator(mode="after")
    def _check_threshold_source(self) -> "ForestTrainerConfig":
        if self.num_of_thresholds == 0 and not self.thresholds:
            raise ValueError(
                "num_of_thresholds is 0 but no explicit thresholds were given"
            )
        return self

    @property
    def uses_explicit_thresholds(self) -> bool:
        return bool(self.thresholds)

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "ForestTrainerConfig":
        """
        Build a config from keyword settings, raising ConfigurationError
        instead of pydantic's ValidationError.
        """
        try:
            return cls(**params)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid forest trainer configuration: {e}") from e
