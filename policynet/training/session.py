"""Explicit training session driving the epoch loop.

A :class:`TrainingSession` owns the only mutable state of a run: the current
weights, the lifecycle state, the epoch counter and the metrics history.  The
engine functions it calls stay pure.

Lifecycle::

    UNINITIALIZED --initialize--> INITIALIZED --start--> TRAINING <--pause/start--> PAUSED
    TRAINING/PAUSED --stop--> STOPPED --initialize--> INITIALIZED
    STOPPED --start--> TRAINING (fresh weights, cleared history)
    any --reset--> UNINITIALIZED
"""

from __future__ import annotations

import time
from enum import Enum
from typing import List, Sequence

import numpy as np

from ..core.errors import ConfigurationError
from ..core.linalg import Vector
from ..core.types import EpochMetrics, NetworkArchitecture, NetworkWeights, TrainingConfig
from ..data.registry import Dataset
from .engine import evaluate, forward_pass, initialize_network, predict, train_epoch
from .losses import REGISTRY as LOSS_REGISTRY
from .metrics import compute_metrics


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    TRAINING = "training"
    PAUSED = "paused"
    STOPPED = "stopped"


class TrainingSession:
    """Run epochs over ``dataset`` and notify callbacks after each one.

    Callbacks either expose ``on_epoch(epoch, metrics)`` or are plain
    callables with the same signature; ``metrics`` maps metric names to
    floats (``loss``, ``accuracy`` and any extra ``metric_names``).
    """

    def __init__(
        self,
        architecture: NetworkArchitecture | Sequence[int],
        config: TrainingConfig,
        dataset: Dataset,
        *,
        seed: int = 0,
        callbacks: Sequence[object] | None = None,
        metric_names: Sequence[str] = (),
        init_distribution: str = "uniform",
    ) -> None:
        if not isinstance(architecture, NetworkArchitecture):
            architecture = NetworkArchitecture.from_layer_sizes(architecture)
        self.architecture = architecture
        self.config = config
        self.dataset = dataset
        self.seed = seed
        self.callbacks = list(callbacks or [])
        self.metric_names = list(metric_names)
        self.init_distribution = init_distribution
        self._rng = np.random.default_rng(seed)
        self.state = SessionState.UNINITIALIZED
        self.weights: NetworkWeights | None = None
        self.current_epoch = 0
        self.history: List[EpochMetrics] = []
        self.last_activations: List[Vector] = []

    # ------------------------------------------------------------------
    # Lifecycle

    def initialize(self) -> NetworkWeights:
        if self.state in (SessionState.TRAINING, SessionState.PAUSED):
            raise RuntimeError(f"Cannot initialise a session that is {self.state.value}; stop it first")
        self._validate()
        self.weights = initialize_network(
            self.architecture, self._rng, distribution=self.init_distribution
        )
        self.current_epoch = 0
        self.history = []
        self.last_activations = []
        self.state = SessionState.INITIALIZED
        return self.weights

    def start(self) -> None:
        """Begin or resume training; a stopped session starts a fresh run."""

        if self.state in (SessionState.UNINITIALIZED, SessionState.STOPPED):
            self.initialize()
        if self.state in (SessionState.INITIALIZED, SessionState.PAUSED):
            self.state = SessionState.TRAINING

    def pause(self) -> None:
        if self.state is SessionState.TRAINING:
            self.state = SessionState.PAUSED

    def stop(self) -> None:
        if self.state in (SessionState.TRAINING, SessionState.PAUSED):
            self.state = SessionState.STOPPED
            self.current_epoch = 0

    def reset(self) -> None:
        self.weights = None
        self.current_epoch = 0
        self.history = []
        self.last_activations = []
        self.state = SessionState.UNINITIALIZED

    # ------------------------------------------------------------------
    # Training

    def step_epoch(self) -> EpochMetrics | None:
        """Train one epoch; a no-op unless the session is training."""

        if self.state is not SessionState.TRAINING or self.weights is None:
            return None
        examples = self.dataset.examples
        weights = train_epoch(examples, self.weights, self.config, self._rng)
        self.weights = weights
        result = evaluate(examples, weights, self.config)
        self.current_epoch += 1

        extras = {}
        if self.metric_names:
            predictions = np.stack([predict(ex.input, weights, self.config) for ex in examples])
            extras = dict(compute_metrics(self.metric_names, predictions, self.dataset.targets()))
        metrics = EpochMetrics(
            epoch=self.current_epoch,
            loss=result.loss,
            accuracy=result.accuracy,
            timestamp=time.time(),
            extras=extras,
        )
        self.history.append(metrics)
        first = forward_pass(examples[0].input, weights, self.config)
        self.last_activations = [layer.activated for layer in first.activations]
        self._emit_epoch(metrics)

        if self.current_epoch >= self.config.epochs:
            self.state = SessionState.STOPPED
        return metrics

    def run(self, max_epochs: int | None = None) -> List[EpochMetrics]:
        """Start (or resume) and step until the session stops.

        With ``max_epochs`` the session pauses after that many epochs.
        """

        self.start()
        steps = 0
        while self.state is SessionState.TRAINING:
            self.step_epoch()
            steps += 1
            if max_epochs is not None and steps >= max_epochs:
                self.pause()
        return list(self.history)

    # ------------------------------------------------------------------
    # Introspection

    @property
    def latest_metrics(self) -> EpochMetrics | None:
        return self.history[-1] if self.history else None

    @property
    def best_epoch(self) -> int | None:
        if not self.history:
            return None
        return min(self.history, key=lambda entry: entry.loss).epoch

    # ------------------------------------------------------------------
    # Internal helpers

    def _validate(self) -> None:
        self.config.validate(dataset_size=len(self.dataset))
        LOSS_REGISTRY.resolve(self.config.loss)
        sizes = self.architecture.layer_sizes
        if self.dataset.input_size != sizes[0] or self.dataset.output_size != sizes[-1]:
            raise ConfigurationError(
                f"Architecture {sizes} does not fit dataset "
                f"{self.dataset.input_size}->{self.dataset.output_size}"
            )

    def _emit_epoch(self, metrics: EpochMetrics) -> None:
        payload = metrics.as_dict()
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(metrics.epoch, payload)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(metrics.epoch, payload)


__all__ = ["SessionState", "TrainingSession"]
