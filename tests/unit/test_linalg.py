import numpy as np
import pytest

from policynet.core import linalg
from policynet.core.errors import ConfigurationError, DimensionMismatch


def test_vector_operations():
    a = np.array([1.0, 2.0, 3.0])
    b = np.array([4.0, 5.0, 6.0])
    assert np.array_equal(linalg.vector_add(a, b), [5.0, 7.0, 9.0])
    assert np.array_equal(linalg.vector_subtract(b, a), [3.0, 3.0, 3.0])
    assert np.array_equal(linalg.vector_multiply(a, b), [4.0, 10.0, 18.0])
    assert linalg.vector_dot(a, b) == 32.0
    assert np.array_equal(linalg.vector_scale(a, 2), [2.0, 4.0, 6.0])
    assert linalg.vector_norm([3.0, 4.0]) == 5.0


def test_vector_normalize_keeps_zero_vector():
    assert np.array_equal(linalg.vector_normalize([0.0, 0.0]), [0.0, 0.0])
    unit = linalg.vector_normalize([3.0, 4.0])
    assert np.allclose(unit, [0.6, 0.8])


@pytest.mark.parametrize(
    "op",
    [linalg.vector_add, linalg.vector_subtract, linalg.vector_multiply, linalg.vector_dot],
)
def test_vector_length_mismatch_raises(op):
    with pytest.raises(DimensionMismatch):
        op([1.0, 2.0], [1.0, 2.0, 3.0])


def test_outer_product_shape():
    out = linalg.outer_product([1.0, 2.0], [3.0, 4.0, 5.0])
    assert out.shape == (2, 3)
    assert out[1, 2] == 10.0


def test_matrix_vector_multiply():
    m = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])
    assert np.array_equal(linalg.matrix_vector_multiply(m, [1.0, 1.0]), [3.0, 7.0, 11.0])
    with pytest.raises(DimensionMismatch):
        linalg.matrix_vector_multiply(m, [1.0, 1.0, 1.0])
    with pytest.raises(DimensionMismatch):
        linalg.matrix_vector_multiply(np.zeros((0, 2)), [1.0, 1.0])


def test_matrix_operations():
    a = np.array([[1.0, 2.0], [3.0, 4.0]])
    b = np.eye(2)
    assert np.array_equal(linalg.matrix_multiply(a, b), a)
    assert np.array_equal(linalg.transpose(a), [[1.0, 3.0], [2.0, 4.0]])
    assert np.array_equal(linalg.matrix_add(a, b), [[2.0, 2.0], [3.0, 5.0]])
    assert np.array_equal(linalg.matrix_subtract(a, a), np.zeros((2, 2)))
    assert np.array_equal(linalg.matrix_scale(b, 3.0), 3.0 * np.eye(2))
    with pytest.raises(DimensionMismatch):
        linalg.matrix_multiply(a, np.ones((3, 2)))
    with pytest.raises(DimensionMismatch):
        linalg.matrix_multiply(np.zeros((0, 0)), b)
    with pytest.raises(DimensionMismatch):
        linalg.matrix_add(a, np.ones((2, 3)))


def test_he_initialize_shape_and_scale():
    W = linalg.he_initialize(8, 4, np.random.default_rng(0))
    assert W.shape == (4, 8)
    assert np.all(np.abs(W) <= np.sqrt(2.0 / 8))
    normal = linalg.he_initialize(8, 4, 0, distribution="normal")
    assert normal.shape == (4, 8)


def test_he_initialize_is_deterministic_per_seed():
    first = linalg.he_initialize(3, 2, np.random.default_rng(11))
    second = linalg.he_initialize(3, 2, np.random.default_rng(11))
    assert np.array_equal(first, second)


def test_initializers_reject_bad_arguments():
    with pytest.raises(ConfigurationError):
        linalg.he_initialize(0, 3)
    with pytest.raises(ConfigurationError):
        linalg.xavier_initialize(2, 0)
    with pytest.raises(ValueError):
        linalg.he_initialize(2, 2, distribution="laplace")


def test_zeros_and_random_helpers():
    assert np.array_equal(linalg.zeros_vector(3), [0.0, 0.0, 0.0])
    assert linalg.zeros_matrix(2, 3).shape == (2, 3)
    v = linalg.random_vector(50, 1)
    assert v.shape == (50,)
    assert np.all((v >= -1.0) & (v < 1.0))
    assert linalg.xavier_initialize(4, 2, 0).shape == (2, 4)


def test_sanitize_and_clamp():
    values = np.array([np.nan, np.inf, -np.inf, 1.5, 1e20, -1e20])
    assert np.array_equal(linalg.sanitize(values)[:4], [0.0, 0.0, 0.0, 1.5])
    clamped = linalg.clamp(values)
    assert np.array_equal(clamped, [0.0, 0.0, 0.0, 1.5, 1e10, -1e10])
    assert linalg.clamp(float("nan")) == 0.0
    assert linalg.clamp(5.0, -1.0, 1.0) == 1.0
    matrix = linalg.clamp(np.array([[np.inf, 2.0]]), -1.0, 1.0)
    assert np.array_equal(matrix, [[0.0, 1.0]])


def test_has_invalid_values():
    assert linalg.has_invalid_values([1.0, np.nan])
    assert linalg.has_invalid_values(np.array([[np.inf]]))
    assert not linalg.has_invalid_values([0.0, 1.0])
