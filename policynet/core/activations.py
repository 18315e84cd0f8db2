"""Activation functions and the closed activation registry."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict

import numpy as np

from .linalg import Array, as_vector

LEAKY_SLOPE = 0.01
SIGMOID_LIMIT = 45.0
TANH_LIMIT = 20.0


class ActivationKind(str, Enum):
    """Supported activation kinds."""

    RELU = "relu"
    LEAKY_RELU = "leaky_relu"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    LINEAR = "linear"

    @classmethod
    def parse(cls, value: "ActivationKind | str") -> "ActivationKind":
        """Resolve an enum member from its name, e.g. ``"leaky_relu"``."""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            available = ", ".join(kind.value for kind in cls)
            raise ValueError(
                f"Unknown activation {value!r}. Available activations: {available}"
            ) from exc


def _asarray(x) -> Array:
    return np.asarray(x, dtype=np.float64)


def relu(x: Array) -> Array:
    """Return the ReLU activation."""

    return np.maximum(_asarray(x), 0.0)


def relu_deriv(x: Array) -> Array:
    return (_asarray(x) > 0).astype(np.float64)


def leaky_relu(x: Array) -> Array:
    x = _asarray(x)
    return np.where(x > 0, x, LEAKY_SLOPE * x)


def leaky_relu_deriv(x: Array) -> Array:
    return np.where(_asarray(x) > 0, 1.0, LEAKY_SLOPE)


def sigmoid(x: Array) -> Array:
    """Logistic sigmoid saturating to exactly 0/1 beyond ±45."""

    x = _asarray(x)
    bounded = np.clip(x, -SIGMOID_LIMIT, SIGMOID_LIMIT)
    s = 1.0 / (1.0 + np.exp(-bounded))
    return np.where(x < -SIGMOID_LIMIT, 0.0, np.where(x > SIGMOID_LIMIT, 1.0, s))


def sigmoid_deriv(x: Array) -> Array:
    s = sigmoid(x)
    return s * (1.0 - s)


def tanh(x: Array) -> Array:
    """Hyperbolic tangent saturating to exactly ±1 beyond ±20."""

    x = _asarray(x)
    t = np.tanh(np.clip(x, -TANH_LIMIT, TANH_LIMIT))
    return np.where(x < -TANH_LIMIT, -1.0, np.where(x > TANH_LIMIT, 1.0, t))


def tanh_deriv(x: Array) -> Array:
    t = tanh(x)
    return 1.0 - t * t


def linear(x: Array) -> Array:
    return _asarray(x).copy()


def linear_deriv(x: Array) -> Array:
    return np.ones_like(_asarray(x))


@dataclass(frozen=True)
class Activation:
    """Forward/derivative pair; both take pre-activation values."""

    kind: ActivationKind
    forward: Callable[[Array], Array]
    derivative: Callable[[Array], Array]

    def __call__(self, x: Array) -> Array:
        return self.forward(x)


_REGISTRY: Dict[ActivationKind, Activation] = {
    ActivationKind.RELU: Activation(ActivationKind.RELU, relu, relu_deriv),
    ActivationKind.LEAKY_RELU: Activation(
        ActivationKind.LEAKY_RELU, leaky_relu, leaky_relu_deriv
    ),
    ActivationKind.SIGMOID: Activation(ActivationKind.SIGMOID, sigmoid, sigmoid_deriv),
    ActivationKind.TANH: Activation(ActivationKind.TANH, tanh, tanh_deriv),
    ActivationKind.LINEAR: Activation(ActivationKind.LINEAR, linear, linear_deriv),
}

_missing = set(ActivationKind) - set(_REGISTRY)
if _missing:  # pragma: no cover - import-time guardrail
    raise RuntimeError(f"Activation registry incomplete: {sorted(k.value for k in _missing)}")


def get_activation(kind: ActivationKind | str) -> Activation:
    """Return the activation registered for ``kind``."""

    return _REGISTRY[ActivationKind.parse(kind)]


def softmax(vector: Array) -> Array:
    """Max-shifted softmax; falls back to a uniform distribution."""

    v = as_vector(vector)
    if v.size == 0:
        return v
    exps = np.exp(v - np.max(v))
    total = float(np.sum(exps))
    if total == 0 or not np.isfinite(total):
        return np.full_like(v, 1.0 / v.size)
    return exps / total


__all__ = [
    "LEAKY_SLOPE",
    "Activation",
    "ActivationKind",
    "get_activation",
    "relu",
    "leaky_relu",
    "sigmoid",
    "tanh",
    "linear",
    "softmax",
]
