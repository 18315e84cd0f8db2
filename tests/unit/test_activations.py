import numpy as np
import pytest

from policynet.core import activations
from policynet.core.activations import ActivationKind, get_activation


def test_registry_covers_every_kind():
    for kind in ActivationKind:
        activation = get_activation(kind)
        assert activation.kind is kind


@pytest.mark.parametrize(
    "name, expected",
    [
        ("relu", ActivationKind.RELU),
        ("leaky_relu", ActivationKind.LEAKY_RELU),
        ("Sigmoid", ActivationKind.SIGMOID),
        ("tanh", ActivationKind.TANH),
        ("linear", ActivationKind.LINEAR),
    ],
)
def test_parse_names(name, expected):
    assert ActivationKind.parse(name) is expected


def test_unknown_activation_raises():
    with pytest.raises(ValueError, match="Available activations"):
        get_activation("swish")


def test_relu_family():
    x = np.array([-2.0, 0.0, 3.0])
    assert np.array_equal(activations.relu(x), [0.0, 0.0, 3.0])
    assert np.array_equal(get_activation("relu").derivative(x), [0.0, 0.0, 1.0])
    assert np.allclose(activations.leaky_relu(x), [-0.02, 0.0, 3.0])
    assert np.allclose(get_activation("leaky_relu").derivative(x), [0.01, 0.01, 1.0])


def test_sigmoid_saturates_without_overflow():
    with np.errstate(all="raise"):
        out = activations.sigmoid(np.array([-1000.0, -46.0, 0.0, 46.0, 1000.0]))
    assert out[0] == 0.0 and out[1] == 0.0
    assert out[2] == 0.5
    assert out[3] == 1.0 and out[4] == 1.0


def test_tanh_saturates():
    with np.errstate(all="raise"):
        out = activations.tanh(np.array([-50.0, 0.0, 50.0]))
    assert np.array_equal(out, [-1.0, 0.0, 1.0])


def test_derivatives_use_forward_values():
    x = np.array([-1.0, 0.0, 2.0])
    s = activations.sigmoid(x)
    assert np.allclose(get_activation("sigmoid").derivative(x), s * (1 - s))
    t = activations.tanh(x)
    assert np.allclose(get_activation("tanh").derivative(x), 1 - t * t)
    assert np.array_equal(get_activation("linear").derivative(x), np.ones(3))


def test_softmax():
    out = activations.softmax([1000.0, 1000.0])
    assert np.allclose(out, [0.5, 0.5])
    probs = activations.softmax([1.0, 2.0, 3.0])
    assert np.isclose(probs.sum(), 1.0)
    assert probs[2] > probs[1] > probs[0]
