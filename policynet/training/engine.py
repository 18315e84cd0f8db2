"""Forward propagation, backpropagation and gradient-descent updates.

Every function in this module is pure: inputs are never mutated and each
call returns fresh values.  Intermediate results that can overflow are routed
through :func:`~policynet.core.linalg.clamp` or
:func:`~policynet.core.linalg.sanitize` before they are stored, so NumPy's
overflow/invalid warnings are silenced inside the numeric sections.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

import numpy as np

from ..core.activations import ActivationKind, get_activation
from ..core.errors import ConfigurationError, DimensionMismatch
from ..core.linalg import (
    Vector,
    as_vector,
    clamp,
    he_initialize,
    matrix_add,
    matrix_scale,
    matrix_subtract,
    matrix_vector_multiply,
    outer_product,
    resolve_rng,
    sanitize,
    transpose,
    vector_add,
    vector_multiply,
    vector_scale,
    vector_subtract,
    zeros_vector,
)
from ..core.types import (
    EvaluationResult,
    ForwardPassResult,
    Gradients,
    LayerActivation,
    NetworkArchitecture,
    NetworkWeights,
    TrainingConfig,
    TrainingExample,
)
from ..data.utils import batch_examples, shuffle_examples
from .losses import REGISTRY as LOSS_REGISTRY
from .metrics import is_correct

_QUIET = {"over": "ignore", "invalid": "ignore"}


def initialize_network(
    architecture: NetworkArchitecture | Sequence[int],
    rng: np.random.Generator | int | None = None,
    *,
    distribution: str = "uniform",
) -> NetworkWeights:
    """He-initialised weights and zero biases for every layer transition."""

    if not isinstance(architecture, NetworkArchitecture):
        architecture = NetworkArchitecture.from_layer_sizes(architecture)
    generator = resolve_rng(rng)
    sizes = architecture.layer_sizes
    weights = []
    biases = []
    for in_dim, out_dim in zip(sizes[:-1], sizes[1:]):
        weights.append(he_initialize(in_dim, out_dim, generator, distribution))
        biases.append(zeros_vector(out_dim))
    return NetworkWeights(weights=tuple(weights), biases=tuple(biases))


def forward_pass(
    input: Vector, weights: NetworkWeights, config: TrainingConfig
) -> ForwardPassResult:
    """Propagate ``input`` through the network.

    Hidden layers use ``config.activation``; the output layer always uses the
    logistic sigmoid so predictions stay in ``[0, 1]``.
    """

    hidden = get_activation(config.activation)
    output = get_activation(ActivationKind.SIGMOID)
    current = as_vector(input, name="input")
    last_idx = len(weights) - 1
    layers: List[LayerActivation] = []
    with np.errstate(**_QUIET):
        for idx, (W, b) in enumerate(zip(weights.weights, weights.biases)):
            raw = clamp(vector_add(matrix_vector_multiply(W, current), b))
            activation = output if idx == last_idx else hidden
            activated = activation.forward(raw)
            layers.append(LayerActivation(raw=raw, activated=activated))
            current = activated
    return ForwardPassResult(activations=tuple(layers), predictions=current)


def backpropagate(
    input: Vector,
    target: Vector,
    forward_result: ForwardPassResult,
    weights: NetworkWeights,
    config: TrainingConfig,
) -> Gradients:
    """Per-example gradients of the configured loss."""

    layers = forward_result.activations
    if len(layers) != len(weights):
        raise DimensionMismatch(
            f"Forward result has {len(layers)} layers but the network has {len(weights)}",
            expected=len(weights),
            actual=len(layers),
        )
    hidden = get_activation(config.activation)
    output = get_activation(ActivationKind.SIGMOID)
    loss = LOSS_REGISTRY.resolve(config.loss)
    inputs = as_vector(input, name="input")

    n_layers = len(weights)
    weight_grads: list = [None] * n_layers
    bias_grads: list = [None] * n_layers
    with np.errstate(**_QUIET):
        out_layer = layers[-1]
        delta = loss.derivative(out_layer.activated, target)
        delta = sanitize(vector_multiply(delta, output.derivative(out_layer.raw)))
        for idx in reversed(range(n_layers)):
            prev = layers[idx - 1].activated if idx > 0 else inputs
            weight_grads[idx] = sanitize(outer_product(delta, prev))
            bias_grads[idx] = sanitize(delta)
            if idx > 0:
                propagated = matrix_vector_multiply(transpose(weights.weights[idx]), delta)
                delta = sanitize(
                    vector_multiply(propagated, hidden.derivative(layers[idx - 1].raw))
                )
    return Gradients(weight_gradients=tuple(weight_grads), bias_gradients=tuple(bias_grads))


def update_weights(
    weights: NetworkWeights, gradients: Gradients, learning_rate: float
) -> NetworkWeights:
    """Return ``param - learning_rate * grad`` for every tensor."""

    if len(gradients.weight_gradients) != len(weights) or len(gradients.bias_gradients) != len(
        weights
    ):
        raise DimensionMismatch(
            f"Gradients cover {len(gradients.weight_gradients)} layers, network has {len(weights)}",
            expected=len(weights),
            actual=len(gradients.weight_gradients),
        )
    new_weights = []
    new_biases = []
    with np.errstate(**_QUIET):
        for W, b, gW, gb in zip(
            weights.weights, weights.biases, gradients.weight_gradients, gradients.bias_gradients
        ):
            new_weights.append(clamp(matrix_subtract(W, matrix_scale(gW, learning_rate))))
            new_biases.append(clamp(vector_subtract(b, vector_scale(gb, learning_rate))))
    return NetworkWeights(weights=tuple(new_weights), biases=tuple(new_biases))


def train_batch(
    batch: Iterable[TrainingExample], weights: NetworkWeights, config: TrainingConfig
) -> NetworkWeights:
    """Average the gradients of ``batch`` and apply one update."""

    examples = list(batch)
    if not examples:
        raise ConfigurationError("Cannot train on an empty batch")

    sum_w = [np.zeros_like(W) for W in weights.weights]
    sum_b = [np.zeros_like(b) for b in weights.biases]
    with np.errstate(**_QUIET):
        for example in examples:
            result = forward_pass(example.input, weights, config)
            grads = backpropagate(example.input, example.target, result, weights, config)
            sum_w = [matrix_add(acc, g) for acc, g in zip(sum_w, grads.weight_gradients)]
            sum_b = [vector_add(acc, g) for acc, g in zip(sum_b, grads.bias_gradients)]
        scale = 1.0 / len(examples)
        averaged = Gradients(
            weight_gradients=tuple(sanitize(matrix_scale(g, scale)) for g in sum_w),
            bias_gradients=tuple(sanitize(vector_scale(g, scale)) for g in sum_b),
        )
    return update_weights(weights, averaged, config.learning_rate)


def train_epoch(
    examples: Sequence[TrainingExample],
    weights: NetworkWeights,
    config: TrainingConfig,
    rng: np.random.Generator | int | None = None,
) -> NetworkWeights:
    """One pass over ``examples`` in ``config.batch_size`` batches.

    Examples are shuffled first when ``rng`` is given; the final batch may be
    smaller than the configured batch size.
    """

    examples = list(examples)
    if not examples:
        raise ConfigurationError("Cannot train on an empty dataset")
    if rng is not None:
        examples = shuffle_examples(examples, resolve_rng(rng))
    current = weights
    for batch in batch_examples(examples, config.batch_size):
        current = train_batch(batch, current, config)
    return current


def evaluate(
    examples: Iterable[TrainingExample], weights: NetworkWeights, config: TrainingConfig
) -> EvaluationResult:
    """Mean loss and all-outputs-within-tolerance accuracy."""

    examples = list(examples)
    if not examples:
        raise ConfigurationError("Cannot evaluate on an empty dataset")
    loss = LOSS_REGISTRY.resolve(config.loss)
    total_loss = 0.0
    correct = 0
    for example in examples:
        predictions = forward_pass(example.input, weights, config).predictions
        total_loss += loss(predictions, example.target)
        if is_correct(predictions, example.target):
            correct += 1
    return EvaluationResult(loss=total_loss / len(examples), accuracy=correct / len(examples))


def predict(input: Vector, weights: NetworkWeights, config: TrainingConfig) -> Vector:
    return forward_pass(input, weights, config).predictions


__all__ = [
    "initialize_network",
    "forward_pass",
    "backpropagate",
    "update_weights",
    "train_batch",
    "train_epoch",
    "evaluate",
    "predict",
]
