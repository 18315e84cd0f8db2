"""policynet public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.activations import ActivationKind
from .core.errors import ConfigurationError, DimensionMismatch, PolicyNetError
from .core.types import NetworkArchitecture, NetworkWeights, TrainingConfig, TrainingExample
from .data import Dataset, get_dataset, make_dataset
from .training import (
    SessionState,
    TrainingSession,
    evaluate,
    forward_pass,
    initialize_network,
    load_preset,
    presets,
    run_pipeline,
)

__all__ = [
    "ActivationKind",
    "ConfigurationError",
    "Dataset",
    "DimensionMismatch",
    "NetworkArchitecture",
    "NetworkWeights",
    "PolicyNetError",
    "SessionState",
    "TrainingConfig",
    "TrainingExample",
    "TrainingSession",
    "activations",
    "evaluate",
    "forward_pass",
    "get_dataset",
    "initialize_network",
    "load_preset",
    "make_dataset",
    "presets",
    "run_pipeline",
    "types",
]
