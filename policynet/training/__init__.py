"""Training engine, sessions and config-driven pipelines."""

from .checkpoint import load_weights, save_weights
from .engine import (
    backpropagate,
    evaluate,
    forward_pass,
    initialize_network,
    predict,
    train_batch,
    train_epoch,
    update_weights,
)
from .losses import REGISTRY as LOSSES
from .pipelines import load_preset, presets, run_pipeline
from .session import SessionState, TrainingSession

__all__ = [
    "LOSSES",
    "SessionState",
    "TrainingSession",
    "backpropagate",
    "evaluate",
    "forward_pass",
    "initialize_network",
    "load_preset",
    "load_weights",
    "predict",
    "presets",
    "run_pipeline",
    "save_weights",
    "train_batch",
    "train_epoch",
    "update_weights",
]
