"""Core typing contracts for policynet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from .activations import ActivationKind
from .errors import ConfigurationError, DimensionMismatch
from .linalg import Array, Matrix, Vector, as_matrix, as_vector


def _frozen(arr: Array) -> Array:
    out = np.array(arr, dtype=np.float64, copy=True)
    out.setflags(write=False)
    return out


@dataclass(frozen=True)
class NetworkArchitecture:
    """Layer widths ``[input_size, *hidden_layers, output_size]``."""

    input_size: int
    hidden_layers: Tuple[int, ...] = ()
    output_size: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "hidden_layers", tuple(self.hidden_layers))
        for size in self.layer_sizes:
            if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size < 1:
                raise ConfigurationError(
                    f"Layer widths must be positive integers, got {self.layer_sizes}"
                )

    @classmethod
    def from_layer_sizes(cls, sizes: Sequence[int]) -> "NetworkArchitecture":
        sizes = list(sizes)
        if len(sizes) < 2:
            raise ConfigurationError(
                "An architecture needs at least an input and an output layer"
            )
        return cls(input_size=sizes[0], hidden_layers=tuple(sizes[1:-1]), output_size=sizes[-1])

    @property
    def layer_sizes(self) -> List[int]:
        return [self.input_size, *self.hidden_layers, self.output_size]

    @property
    def num_transitions(self) -> int:
        return len(self.layer_sizes) - 1


@dataclass(frozen=True, eq=False)
class NetworkWeights:
    """Immutable parameter set: one matrix and one bias vector per transition.

    Matrix ``i`` has shape ``[layer_sizes[i + 1] × layer_sizes[i]]`` and bias
    ``i`` has length ``layer_sizes[i + 1]``.  Arrays are copied and made
    read-only on construction, so updates always produce a new value.
    """

    weights: Tuple[Matrix, ...]
    biases: Tuple[Vector, ...]

    def __post_init__(self) -> None:
        weights = tuple(_frozen(as_matrix(w, name=f"W{i}")) for i, w in enumerate(self.weights))
        biases = tuple(_frozen(as_vector(b, name=f"b{i}")) for i, b in enumerate(self.biases))
        if not weights:
            raise ConfigurationError("NetworkWeights needs at least one layer transition")
        if len(weights) != len(biases):
            raise DimensionMismatch(
                f"Got {len(weights)} weight matrices but {len(biases)} bias vectors",
                expected=len(weights),
                actual=len(biases),
            )
        for idx, (W, b) in enumerate(zip(weights, biases)):
            if W.shape[0] != b.shape[0]:
                raise DimensionMismatch(
                    f"W{idx} has {W.shape[0]} rows but b{idx} has length {b.shape[0]}",
                    expected=W.shape[0],
                    actual=b.shape[0],
                )
            if idx > 0 and W.shape[1] != weights[idx - 1].shape[0]:
                raise DimensionMismatch(
                    f"W{idx} expects {W.shape[1]} inputs but layer {idx} has "
                    f"{weights[idx - 1].shape[0]} units",
                    expected=weights[idx - 1].shape[0],
                    actual=W.shape[1],
                )
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "biases", biases)

    @property
    def layer_sizes(self) -> List[int]:
        return [int(self.weights[0].shape[1])] + [int(W.shape[0]) for W in self.weights]

    def __len__(self) -> int:
        return len(self.weights)

    def check_architecture(self, architecture: NetworkArchitecture) -> None:
        if self.layer_sizes != architecture.layer_sizes:
            raise DimensionMismatch(
                f"Weights describe layers {self.layer_sizes}, architecture is "
                f"{architecture.layer_sizes}",
                expected=architecture.layer_sizes,
                actual=self.layer_sizes,
            )

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))

    def state_dict(self) -> Dict[str, Array]:
        state: Dict[str, Array] = {}
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            state[f"W{idx}"] = W.copy()
            state[f"b{idx}"] = b.copy()
        return state

    @classmethod
    def from_state_dict(cls, state: Mapping[str, Array]) -> "NetworkWeights":
        weights: list[Array] = []
        biases: list[Array] = []
        idx = 0
        while f"W{idx}" in state:
            if f"b{idx}" not in state:
                raise KeyError(f"Missing bias b{idx} in state dict")
            weights.append(np.asarray(state[f"W{idx}"]))
            biases.append(np.asarray(state[f"b{idx}"]))
            idx += 1
        if not weights:
            raise KeyError("Missing weight W0 in state dict")
        return cls(weights=tuple(weights), biases=tuple(biases))


@dataclass(frozen=True, eq=False)
class TrainingExample:
    """A labelled example; ``input`` and ``target`` are read-only vectors."""

    input: Vector
    target: Vector
    label: str | None = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "input", _frozen(as_vector(self.input, name="input")))
        object.__setattr__(self, "target", _frozen(as_vector(self.target, name="target")))
        object.__setattr__(self, "metadata", dict(self.metadata))


@dataclass
class TrainingConfig:
    """Hyper-parameters of a training run; change only between runs."""

    learning_rate: float = 0.01
    batch_size: int = 5
    epochs: int = 100
    activation: ActivationKind = ActivationKind.RELU
    loss: str = "mse"

    def __post_init__(self) -> None:
        self.activation = ActivationKind.parse(self.activation)

    def validate(self, dataset_size: int | None = None) -> None:
        if not np.isfinite(self.learning_rate) or self.learning_rate <= 0:
            raise ConfigurationError(
                f"learning_rate must be a positive number, got {self.learning_rate}"
            )
        if int(self.batch_size) != self.batch_size or self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {self.batch_size}")
        if int(self.epochs) != self.epochs or self.epochs < 1:
            raise ConfigurationError(f"epochs must be >= 1, got {self.epochs}")
        if dataset_size is not None:
            if dataset_size < 1:
                raise ConfigurationError("Cannot train on an empty dataset")
            if self.batch_size > dataset_size:
                raise ConfigurationError(
                    f"batch_size {self.batch_size} exceeds dataset size {dataset_size}"
                )


@dataclass(frozen=True)
class LayerActivation:
    """Pre-activation (``raw``) and post-activation values of one layer."""

    raw: Vector
    activated: Vector


@dataclass(frozen=True)
class ForwardPassResult:
    activations: Tuple[LayerActivation, ...]
    predictions: Vector


@dataclass(frozen=True)
class Gradients:
    """Per-layer gradients shaped like the parameters they belong to."""

    weight_gradients: Tuple[Matrix, ...]
    bias_gradients: Tuple[Vector, ...]


@dataclass(frozen=True)
class EvaluationResult:
    loss: float
    accuracy: float

    def as_dict(self) -> Dict[str, float]:
        return {"loss": float(self.loss), "accuracy": float(self.accuracy)}


@dataclass(frozen=True)
class EpochMetrics:
    """History entry recorded by a training session after each epoch."""

    epoch: int
    loss: float
    accuracy: float
    timestamp: float
    extras: Mapping[str, float] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, float]:
        payload = {"loss": float(self.loss), "accuracy": float(self.accuracy)}
        payload.update({k: float(v) for k, v in self.extras.items()})
        return payload


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`policynet.training.pipelines.run_pipeline`."""

    epochs: int
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
    checkpoint_path: str = ""
