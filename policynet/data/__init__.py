"""Datasets consumed by the training engine."""

from . import scenarios, synthetic  # noqa: F401  (register built-in datasets)
from .registry import (
    Dataset,
    batch_dataset,
    combine_datasets,
    dataset_names,
    get_dataset,
    make_dataset,
    register_dataset,
    shuffle_dataset,
)
from .scenarios import SCENARIO_NAMES, scenario_dataset

__all__ = [
    "Dataset",
    "SCENARIO_NAMES",
    "batch_dataset",
    "combine_datasets",
    "dataset_names",
    "get_dataset",
    "make_dataset",
    "register_dataset",
    "scenario_dataset",
    "shuffle_dataset",
]
