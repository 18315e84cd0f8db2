"""Vector and matrix primitives with eager shape checking.

Vectors are 1-D ``float64`` arrays and matrices are 2-D ``float64`` arrays.
Every binary operation validates operand shapes up front and raises
:class:`~policynet.core.errors.DimensionMismatch` instead of relying on NumPy
broadcasting.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .errors import ConfigurationError, DimensionMismatch

Array = np.ndarray
Vector = np.ndarray
Matrix = np.ndarray

CLAMP_LIMIT = 1e10


def as_vector(values: Sequence[float] | Array, *, name: str = "vector") -> Vector:
    """Return ``values`` as a 1-D float64 array."""

    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1:
        raise DimensionMismatch(
            f"{name} must be one-dimensional, got shape {arr.shape}", actual=arr.shape
        )
    return arr


def as_matrix(values: Sequence[Sequence[float]] | Array, *, name: str = "matrix") -> Matrix:
    """Return ``values`` as a 2-D float64 array."""

    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 2:
        raise DimensionMismatch(
            f"{name} must be two-dimensional, got shape {arr.shape}", actual=arr.shape
        )
    return arr


def _require_same_shape(a: Array, b: Array, op: str) -> None:
    if a.shape != b.shape:
        raise DimensionMismatch(
            f"{op}: operand shapes {a.shape} and {b.shape} do not match",
            expected=a.shape,
            actual=b.shape,
        )


# ----------------------------------------------------------------------------
# Vector operations


def vector_add(a: Vector, b: Vector) -> Vector:
    a, b = as_vector(a), as_vector(b)
    _require_same_shape(a, b, "vector_add")
    return a + b


def vector_subtract(a: Vector, b: Vector) -> Vector:
    a, b = as_vector(a), as_vector(b)
    _require_same_shape(a, b, "vector_subtract")
    return a - b


def vector_multiply(a: Vector, b: Vector) -> Vector:
    """Element-wise (Hadamard) product."""

    a, b = as_vector(a), as_vector(b)
    _require_same_shape(a, b, "vector_multiply")
    return a * b


def vector_dot(a: Vector, b: Vector) -> float:
    a, b = as_vector(a), as_vector(b)
    _require_same_shape(a, b, "vector_dot")
    return float(np.dot(a, b))


def vector_scale(v: Vector, scalar: float) -> Vector:
    return as_vector(v) * float(scalar)


def vector_norm(v: Vector) -> float:
    """Euclidean length of ``v``."""

    v = as_vector(v)
    return float(np.sqrt(np.dot(v, v)))


def vector_normalize(v: Vector) -> Vector:
    """Scale ``v`` to unit length; the zero vector maps to zeros."""

    v = as_vector(v)
    norm = vector_norm(v)
    if norm == 0:
        return np.zeros_like(v)
    return vector_scale(v, 1.0 / norm)


def outer_product(u: Vector, v: Vector) -> Matrix:
    """Return ``u vᵀ`` with shape ``[len(u) × len(v)]``."""

    u, v = as_vector(u), as_vector(v)
    return np.outer(u, v)


# ----------------------------------------------------------------------------
# Matrix operations


def matrix_vector_multiply(m: Matrix, v: Vector) -> Vector:
    m, v = as_matrix(m), as_vector(v)
    if m.shape[0] == 0 or m.shape[1] != v.shape[0]:
        raise DimensionMismatch(
            f"matrix_vector_multiply: [{m.shape[0]}x{m.shape[1]}] * [{v.shape[0]}]",
            expected=(m.shape[1],),
            actual=v.shape,
        )
    return m @ v


def matrix_multiply(a: Matrix, b: Matrix) -> Matrix:
    a, b = as_matrix(a), as_matrix(b)
    if a.size == 0 or b.size == 0:
        raise DimensionMismatch("matrix_multiply: cannot multiply empty matrices")
    if a.shape[1] != b.shape[0]:
        raise DimensionMismatch(
            f"matrix_multiply: [{a.shape[0]}x{a.shape[1]}] * [{b.shape[0]}x{b.shape[1]}]",
            expected=(a.shape[1],),
            actual=(b.shape[0],),
        )
    return a @ b


def transpose(m: Matrix) -> Matrix:
    return np.ascontiguousarray(as_matrix(m).T)


def matrix_add(a: Matrix, b: Matrix) -> Matrix:
    a, b = as_matrix(a), as_matrix(b)
    _require_same_shape(a, b, "matrix_add")
    return a + b


def matrix_subtract(a: Matrix, b: Matrix) -> Matrix:
    a, b = as_matrix(a), as_matrix(b)
    _require_same_shape(a, b, "matrix_subtract")
    return a - b


def matrix_scale(m: Matrix, scalar: float) -> Matrix:
    return as_matrix(m) * float(scalar)


# ----------------------------------------------------------------------------
# Initialisation


def resolve_rng(rng: np.random.Generator | int | None = None) -> np.random.Generator:
    """Accept a generator, a seed or ``None`` and return a generator."""

    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def zeros_vector(size: int) -> Vector:
    return np.zeros(int(size), dtype=np.float64)


def zeros_matrix(rows: int, cols: int) -> Matrix:
    return np.zeros((int(rows), int(cols)), dtype=np.float64)


def random_vector(size: int, rng: np.random.Generator | int | None = None) -> Vector:
    """Uniform samples from ``[-1, 1)``."""

    return resolve_rng(rng).uniform(-1.0, 1.0, size=int(size))


def _check_dims(input_dim: int, output_dim: int) -> None:
    if input_dim < 1 or output_dim < 1:
        raise ConfigurationError(
            f"Layer dimensions must be positive, got {input_dim} -> {output_dim}"
        )


def xavier_initialize(
    input_dim: int,
    output_dim: int,
    rng: np.random.Generator | int | None = None,
) -> Matrix:
    """Glorot-style ``[output_dim × input_dim]`` matrix."""

    _check_dims(input_dim, output_dim)
    scale = math.sqrt(2.0 / (input_dim + output_dim))
    return resolve_rng(rng).uniform(-1.0, 1.0, size=(output_dim, input_dim)) * scale


def he_initialize(
    input_dim: int,
    output_dim: int,
    rng: np.random.Generator | int | None = None,
    distribution: str = "uniform",
) -> Matrix:
    """He initialisation scaled by ``sqrt(2 / input_dim)``.

    ``distribution`` selects uniform samples from ``[-1, 1)`` or standard
    normal samples before scaling.
    """

    _check_dims(input_dim, output_dim)
    generator = resolve_rng(rng)
    scale = math.sqrt(2.0 / input_dim)
    shape = (output_dim, input_dim)
    if distribution == "uniform":
        samples = generator.uniform(-1.0, 1.0, size=shape)
    elif distribution == "normal":
        samples = generator.standard_normal(size=shape)
    else:
        raise ValueError(
            f"Unknown initialisation distribution {distribution!r}; expected 'uniform' or 'normal'"
        )
    return samples * scale


# ----------------------------------------------------------------------------
# Numeric hygiene


def sanitize(values):
    """Replace NaN and infinities with zero.

    Scalars come back as ``float``; arrays come back as new float64 arrays.
    """

    if np.ndim(values) == 0:
        value = float(values)
        return value if math.isfinite(value) else 0.0
    arr = np.asarray(values, dtype=np.float64)
    return np.where(np.isfinite(arr), arr, 0.0)


def clamp(values, low: float = -CLAMP_LIMIT, high: float = CLAMP_LIMIT):
    """Sanitize ``values`` and bound them into ``[low, high]``."""

    if np.ndim(values) == 0:
        return min(high, max(low, sanitize(values)))
    return np.clip(sanitize(values), low, high)


def has_invalid_values(values) -> bool:
    """Return ``True`` when any entry is NaN or infinite."""

    return not bool(np.all(np.isfinite(np.asarray(values, dtype=np.float64))))


__all__ = [
    "Array",
    "Vector",
    "Matrix",
    "CLAMP_LIMIT",
    "as_vector",
    "as_matrix",
    "vector_add",
    "vector_subtract",
    "vector_multiply",
    "vector_dot",
    "vector_scale",
    "vector_norm",
    "vector_normalize",
    "outer_product",
    "matrix_vector_multiply",
    "matrix_multiply",
    "transpose",
    "matrix_add",
    "matrix_subtract",
    "matrix_scale",
    "resolve_rng",
    "zeros_vector",
    "zeros_matrix",
    "random_vector",
    "xavier_initialize",
    "he_initialize",
    "sanitize",
    "clamp",
    "has_invalid_values",
]
