"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from ..core.errors import ConfigurationError
from ..core.types import TrainingExample
from .registry import Dataset, register_dataset


def _make_examples(
    n_examples: int, input_size: int, output_size: int, seed: int
) -> tuple[np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed)
    x = rng.integers(0, 2, size=(n_examples, input_size)).astype(np.float64)
    # each output thresholds a fixed random projection of the binary features
    projection = rng.standard_normal((input_size, output_size))
    scores = (x - 0.5) @ projection
    y = (scores > 0).astype(np.float64)
    return x, y


def _factory(
    n_examples: int = 16,
    input_size: int = 3,
    output_size: int = 1,
    seed: int = 0,
    **_: object,
) -> Dataset:
    if n_examples < 1 or input_size < 1 or output_size < 1:
        raise ConfigurationError(
            "synthetic dataset needs positive n_examples, input_size and output_size"
        )
    x, y = _make_examples(n_examples, input_size, output_size, seed)
    examples = tuple(
        TrainingExample(input=row, target=target, label=f"synthetic-{idx}")
        for idx, (row, target) in enumerate(zip(x, y))
    )
    provenance = {
        "type": "synthetic",
        "n_examples": n_examples,
        "input_size": input_size,
        "output_size": output_size,
        "seed": seed,
    }
    return Dataset(
        examples=examples,
        input_size=input_size,
        output_size=output_size,
        description="Binary features with thresholded random-projection targets",
        name="synthetic",
        provenance=provenance,
    )


register_dataset("synthetic", _factory)
