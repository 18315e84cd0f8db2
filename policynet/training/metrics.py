"""Metric helpers for evaluation and epoch reporting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping

import numpy as np

from ..core.errors import DimensionMismatch
from ..core.linalg import Array, Vector, as_vector

ACCURACY_TOLERANCE = 0.2


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def is_correct(prediction: Vector, target: Vector, tolerance: float = ACCURACY_TOLERANCE) -> bool:
    """An example counts as correct when every output is within ``tolerance``."""

    prediction, target = as_vector(prediction), as_vector(target)
    if prediction.shape != target.shape:
        raise DimensionMismatch(
            f"Prediction length {prediction.shape[0]} != target length {target.shape[0]}",
            expected=target.shape,
            actual=prediction.shape,
        )
    return bool(np.all(np.abs(prediction - target) < tolerance))


def _as_rows(values: Array, name: str) -> Array:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.ndim != 2:
        raise DimensionMismatch(f"{name} must be a 2-D array of examples, got {arr.shape}")
    return arr


def compute_metric(
    name: str,
    predictions: Array,
    targets: Array,
    *,
    tolerance: float = ACCURACY_TOLERANCE,
) -> MetricResult:
    """Compute ``name`` over row-stacked predictions and targets."""

    key = name.lower()
    preds = _as_rows(predictions, "predictions")
    targs = _as_rows(targets, "targets")
    if preds.shape != targs.shape:
        raise DimensionMismatch(
            f"Predictions {preds.shape} and targets {targs.shape} differ",
            expected=targs.shape,
            actual=preds.shape,
        )
    if key == "mae":
        value = float(np.mean(np.abs(preds - targs)))
    elif key == "rmse":
        value = float(np.sqrt(np.mean((preds - targs) ** 2)))
    elif key == "accuracy":
        value = float(np.mean(np.all(np.abs(preds - targs) < tolerance, axis=1)))
    elif key == "r2":
        mean = np.mean(targs, axis=0, keepdims=True)
        ss_res = float(np.sum((targs - preds) ** 2))
        ss_tot = float(np.sum((targs - mean) ** 2))
        value = 1.0 if ss_tot == 0 else float(1 - ss_res / (ss_tot + 1e-9))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str],
    predictions: Array,
    targets: Array,
    *,
    tolerance: float = ACCURACY_TOLERANCE,
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets, tolerance=tolerance)
        results[metric.name] = metric.value
    return results


__all__ = [
    "ACCURACY_TOLERANCE",
    "MetricResult",
    "is_correct",
    "compute_metric",
    "compute_metrics",
]
