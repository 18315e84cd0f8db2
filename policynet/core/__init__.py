"""Core numerical primitives for policynet."""

from . import activations, errors, linalg, types

__all__ = ["activations", "errors", "linalg", "types"]
