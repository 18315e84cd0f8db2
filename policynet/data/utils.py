"""Utility helpers for dataset handling."""

from __future__ import annotations

from typing import List, Sequence, TypeVar

import numpy as np

from ..core.errors import ConfigurationError

T = TypeVar("T")


def shuffle_examples(examples: Sequence[T], rng: np.random.Generator) -> List[T]:
    """Return a shuffled copy of ``examples``; the input is left untouched."""

    order = rng.permutation(len(examples))
    return [examples[int(i)] for i in order]


def batch_examples(examples: Sequence[T], batch_size: int) -> List[List[T]]:
    """Split ``examples`` into consecutive batches.

    The final batch is smaller when the length is not a multiple of
    ``batch_size``.
    """

    if int(batch_size) != batch_size or batch_size < 1:
        raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")
    batch_size = int(batch_size)
    items = list(examples)
    return [items[start : start + batch_size] for start in range(0, len(items), batch_size)]


__all__ = ["shuffle_examples", "batch_examples"]
