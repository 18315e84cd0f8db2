"""Dataset container, helpers and registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from ..core.errors import ConfigurationError, DimensionMismatch
from ..core.types import TrainingExample
from .utils import batch_examples, shuffle_examples


@dataclass(frozen=True, eq=False)
class Dataset:
    """A named, non-empty collection of equally shaped examples.

    Attributes
    ----------
    examples:
        The labelled examples in their canonical order.
    input_size / output_size:
        Widths every example's ``input``/``target`` must have.
    description:
        Human-readable summary shown in manifests.
    provenance:
        Free-form metadata (generator options, scenario name) recorded in run
        manifests so experiments stay reproducible.
    """

    examples: Tuple[TrainingExample, ...]
    input_size: int
    output_size: int
    description: str = ""
    name: str = ""
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        examples = tuple(self.examples)
        if not examples:
            raise ConfigurationError(f"Dataset {self.name or '<unnamed>'} has no examples")
        for idx, example in enumerate(examples):
            if example.input.shape[0] != self.input_size:
                raise DimensionMismatch(
                    f"Example {idx} has {example.input.shape[0]} inputs, expected {self.input_size}",
                    expected=self.input_size,
                    actual=example.input.shape[0],
                )
            if example.target.shape[0] != self.output_size:
                raise DimensionMismatch(
                    f"Example {idx} has {example.target.shape[0]} targets, expected {self.output_size}",
                    expected=self.output_size,
                    actual=example.target.shape[0],
                )
        object.__setattr__(self, "examples", examples)
        object.__setattr__(self, "provenance", dict(self.provenance))

    def __len__(self) -> int:
        return len(self.examples)

    def __iter__(self):
        return iter(self.examples)

    def inputs(self) -> np.ndarray:
        return np.stack([example.input for example in self.examples])

    def targets(self) -> np.ndarray:
        return np.stack([example.target for example in self.examples])

    def with_examples(self, examples: Iterable[TrainingExample]) -> "Dataset":
        return Dataset(
            examples=tuple(examples),
            input_size=self.input_size,
            output_size=self.output_size,
            description=self.description,
            name=self.name,
            provenance=self.provenance,
        )


def shuffle_dataset(dataset: Dataset, rng: np.random.Generator) -> Dataset:
    return dataset.with_examples(shuffle_examples(dataset.examples, rng))


def batch_dataset(dataset: Dataset, batch_size: int) -> List[List[TrainingExample]]:
    return batch_examples(dataset.examples, batch_size)


def combine_datasets(*datasets: Dataset) -> Dataset:
    """Concatenate datasets that share input/output widths."""

    if not datasets:
        raise ConfigurationError("combine_datasets needs at least one dataset")
    first = datasets[0]
    for other in datasets[1:]:
        if (other.input_size, other.output_size) != (first.input_size, first.output_size):
            raise DimensionMismatch(
                f"Cannot combine {first.name or 'dataset'} ({first.input_size}->{first.output_size}) "
                f"with {other.name or 'dataset'} ({other.input_size}->{other.output_size})",
                expected=(first.input_size, first.output_size),
                actual=(other.input_size, other.output_size),
            )
    examples = [example for dataset in datasets for example in dataset.examples]
    return Dataset(
        examples=tuple(examples),
        input_size=first.input_size,
        output_size=first.output_size,
        description=f"Combined dataset ({len(datasets)} sources)",
        name="+".join(d.name for d in datasets if d.name),
        provenance={"type": "combined", "sources": [d.name for d in datasets]},
    )


def make_dataset(
    rows: Sequence[Tuple[Sequence[float], Sequence[float]]],
    *,
    name: str = "",
    description: str = "",
) -> Dataset:
    """Build a dataset from ``(input, target)`` pairs."""

    examples = tuple(TrainingExample(input=x, target=y) for x, y in rows)
    if not examples:
        raise ConfigurationError("make_dataset needs at least one example")
    return Dataset(
        examples=examples,
        input_size=int(examples[0].input.shape[0]),
        output_size=int(examples[0].target.shape[0]),
        description=description,
        name=name,
        provenance={"type": "inline"},
    )


DatasetFactory = Callable[..., Dataset]

_REGISTRY: Dict[str, DatasetFactory] = {}


def register_dataset(name: str, factory: DatasetFactory) -> None:
    _REGISTRY[name] = factory


def dataset_names() -> List[str]:
    return sorted(_REGISTRY)


def get_dataset(name: str, **options: Any) -> Dataset:
    """Instantiate the dataset registered under ``name``."""

    try:
        factory = _REGISTRY[name]
    except KeyError as exc:
        available = ", ".join(dataset_names())
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}") from exc
    return factory(**options)


__all__ = [
    "Dataset",
    "shuffle_dataset",
    "batch_dataset",
    "combine_datasets",
    "make_dataset",
    "register_dataset",
    "dataset_names",
    "get_dataset",
]
