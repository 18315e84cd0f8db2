"""Loss registry used by the propagation engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable

import numpy as np

from ..core.errors import DimensionMismatch
from ..core.linalg import Vector, as_vector, vector_scale, vector_subtract

LossFn = Callable[[Vector, Vector], float]
LossGrad = Callable[[Vector, Vector], Vector]

PROB_EPS = 1e-7


@dataclass(frozen=True)
class Loss:
    """Loss wrapper exposing the scalar value and ``dL/dpredictions``."""

    name: str
    fn: LossFn
    grad: LossGrad

    def __call__(self, predictions: Vector, targets: Vector) -> float:
        return self.fn(predictions, targets)

    def derivative(self, predictions: Vector, targets: Vector) -> Vector:
        return self.grad(predictions, targets)


class LossRegistry:
    """Central registry for loss functions."""

    def __init__(self) -> None:
        self._registry: Dict[str, Loss] = {}

    def register(self, name: str, fn: LossFn, grad: LossGrad) -> None:
        self._registry[name] = Loss(name, fn, grad)

    def names(self) -> Iterable[str]:
        return sorted(self._registry)

    def resolve(self, name: str) -> Loss:
        if name not in self._registry:
            available = ", ".join(sorted(self._registry))
            raise KeyError(f"Unknown loss {name!r}. Available losses: {available}")
        return self._registry[name]


REGISTRY = LossRegistry()


def _check_lengths(pred: Vector, target: Vector) -> tuple[Vector, Vector]:
    pred, target = as_vector(pred, name="predictions"), as_vector(target, name="targets")
    if pred.shape != target.shape:
        raise DimensionMismatch(
            f"Predictions have length {pred.shape[0]} but targets have length {target.shape[0]}",
            expected=pred.shape,
            actual=target.shape,
        )
    if pred.size == 0:
        raise DimensionMismatch("Cannot compute a loss over empty vectors")
    return pred, target


def mean_squared_error(pred: Vector, target: Vector) -> float:
    """``mean((pred - target)²)``."""

    pred, target = _check_lengths(pred, target)
    diff = vector_subtract(pred, target)
    return float(np.mean(diff * diff))


def mean_squared_error_derivative(pred: Vector, target: Vector) -> Vector:
    """``2 (pred - target) / N`` with ``N`` the output width."""

    pred, target = _check_lengths(pred, target)
    return vector_scale(vector_subtract(pred, target), 2.0 / pred.size)


def binary_cross_entropy(pred: Vector, target: Vector) -> float:
    pred, target = _check_lengths(pred, target)
    p = np.clip(pred, PROB_EPS, 1.0 - PROB_EPS)
    return float(-np.mean(target * np.log(p) + (1.0 - target) * np.log(1.0 - p)))


def binary_cross_entropy_derivative(pred: Vector, target: Vector) -> Vector:
    pred, target = _check_lengths(pred, target)
    p = np.clip(pred, PROB_EPS, 1.0 - PROB_EPS)
    return (p - target) / (p * (1.0 - p)) / pred.size


REGISTRY.register("mse", mean_squared_error, mean_squared_error_derivative)
REGISTRY.register("cross_entropy", binary_cross_entropy, binary_cross_entropy_derivative)

__all__ = [
    "Loss",
    "LossRegistry",
    "REGISTRY",
    "mean_squared_error",
    "mean_squared_error_derivative",
    "binary_cross_entropy",
    "binary_cross_entropy_derivative",
]
