from __future__ import annotations

import numpy as np
import pytest

from policynet.core.activations import ActivationKind
from policynet.core.errors import DimensionMismatch
from policynet.core.linalg import has_invalid_values
from policynet.core.types import NetworkWeights, TrainingConfig, TrainingExample
from policynet.training.engine import (
    backpropagate,
    evaluate,
    forward_pass,
    initialize_network,
    predict,
    train_epoch,
)
from policynet.training.losses import REGISTRY, mean_squared_error, mean_squared_error_derivative


@pytest.mark.parametrize("activation", list(ActivationKind))
def test_forward_outputs_are_probabilities(activation):
    rng = np.random.default_rng(0)
    weights = initialize_network([8, 12, 8, 4], rng)
    config = TrainingConfig(activation=activation)
    for scale in (1.0, 1e3, 1e12):
        x = rng.standard_normal(8) * scale
        out = predict(x, weights, config)
        assert out.shape == (4,)
        assert np.all((out >= 0.0) & (out <= 1.0))


def test_mse_properties():
    p = np.array([0.2, 0.4, 0.9])
    assert mean_squared_error(p, p) == 0.0
    assert mean_squared_error([1.0, 0.0], [0.0, 0.0]) == 0.5
    assert np.allclose(mean_squared_error_derivative([1.0, 0.0], [0.0, 0.0]), [1.0, 0.0])
    with pytest.raises(DimensionMismatch):
        mean_squared_error([1.0], [1.0, 2.0])


def test_unknown_loss_lists_available():
    with pytest.raises(KeyError, match="mse"):
        REGISTRY.resolve("hinge")


def _loss_at(weights: NetworkWeights, x, t, config) -> float:
    return REGISTRY.resolve(config.loss)(forward_pass(x, weights, config).predictions, t)


def _perturbed(weights: NetworkWeights, key: str, index, delta: float) -> NetworkWeights:
    state = weights.state_dict()
    state[key][index] += delta
    return NetworkWeights.from_state_dict(state)


@pytest.mark.parametrize("activation", ["tanh", "sigmoid", "linear"])
@pytest.mark.parametrize("loss", ["mse", "cross_entropy"])
def test_backprop_matches_finite_differences(activation, loss):
    weights = initialize_network([2, 3, 1], np.random.default_rng(21))
    config = TrainingConfig(activation=activation, loss=loss)
    x = np.array([0.5, -0.3])
    t = np.array([0.7])
    grads = backpropagate(x, t, forward_pass(x, weights, config), weights, config)

    eps = 1e-6
    state = weights.state_dict()
    for layer in range(len(weights)):
        for key, analytic in (
            (f"W{layer}", grads.weight_gradients[layer]),
            (f"b{layer}", grads.bias_gradients[layer]),
        ):
            for index in np.ndindex(state[key].shape):
                plus = _loss_at(_perturbed(weights, key, index, eps), x, t, config)
                minus = _loss_at(_perturbed(weights, key, index, -eps), x, t, config)
                numeric = (plus - minus) / (2 * eps)
                assert abs(numeric - analytic[index]) < 1e-4


@pytest.mark.parametrize("activation", list(ActivationKind))
def test_training_stays_finite_for_adversarial_inputs(activation):
    examples = [
        TrainingExample(input=[1e12, -1e12, 1e15], target=[1.0]),
        TrainingExample(input=[-1e13, 1e12, 0.0], target=[0.0]),
        TrainingExample(input=[1e300, -1e300, 1e12], target=[0.5]),
    ]
    config = TrainingConfig(learning_rate=0.5, batch_size=2, activation=activation)
    weights = initialize_network([3, 4, 1], 0)
    for _ in range(5):
        weights = train_epoch(examples, weights, config, np.random.default_rng(1))
    for W, b in zip(weights.weights, weights.biases):
        assert not has_invalid_values(W)
        assert not has_invalid_values(b)
        assert np.all(np.abs(W) <= 1e10)
    result = evaluate(examples, weights, config)
    assert np.isfinite(result.loss)


def _zero_network() -> NetworkWeights:
    return NetworkWeights(weights=(np.zeros((2, 2)),), biases=(np.zeros(2),))


def test_accuracy_all_correct_and_all_wrong():
    config = TrainingConfig()
    # a zero network predicts exactly 0.5 everywhere
    right = [TrainingExample(input=[1.0, 2.0], target=[0.5, 0.5]) for _ in range(3)]
    result = evaluate(right, _zero_network(), config)
    assert result.accuracy == 1.0
    assert result.loss == 0.0

    wrong = [TrainingExample(input=[1.0, 2.0], target=[0.0, 1.0]) for _ in range(3)]
    assert evaluate(wrong, _zero_network(), config).accuracy == 0.0


def test_accuracy_requires_every_output_within_tolerance():
    config = TrainingConfig()
    examples = [
        TrainingExample(input=[0.0, 0.0], target=[0.5, 0.6]),
        TrainingExample(input=[0.0, 0.0], target=[0.5, 0.75]),
    ]
    result = evaluate(examples, _zero_network(), config)
    assert result.accuracy == 0.5
    assert result.as_dict()["accuracy"] == 0.5
