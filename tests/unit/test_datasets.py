import numpy as np
import pytest

from policynet.core.errors import ConfigurationError, DimensionMismatch
from policynet.core.types import TrainingExample
from policynet.data import (
    SCENARIO_NAMES,
    Dataset,
    batch_dataset,
    combine_datasets,
    dataset_names,
    get_dataset,
    make_dataset,
    register_dataset,
    scenario_dataset,
    shuffle_dataset,
)
from policynet.data.scenarios import INPUT_SIZE, OUTPUT_SIZE


def _rows(n):
    return [([float(i), 1.0], [float(i % 2)]) for i in range(n)]


def test_builtin_datasets_registered():
    names = dataset_names()
    for name in (*SCENARIO_NAMES, "combined", "synthetic"):
        assert name in names


@pytest.mark.parametrize("name", SCENARIO_NAMES)
def test_scenario_shapes(name):
    dataset = scenario_dataset(name)
    assert len(dataset) == 5
    assert dataset.input_size == INPUT_SIZE == 8
    assert dataset.output_size == OUTPUT_SIZE == 4
    assert dataset.provenance["scenario"] == name
    for example in dataset:
        assert example.metadata["scenario"] == name
        assert np.all((example.target >= 0) & (example.target <= 1))


def test_combined_dataset():
    combined = get_dataset("combined")
    assert len(combined) == 5 * len(SCENARIO_NAMES)
    assert combined.name == "combined"


def test_unknown_dataset_raises():
    with pytest.raises(KeyError, match="baseline"):
        get_dataset("mnist")
    with pytest.raises(KeyError):
        scenario_dataset("chaos")


def test_synthetic_dataset_is_seeded():
    first = get_dataset("synthetic", n_examples=10, input_size=4, output_size=2, seed=3)
    second = get_dataset("synthetic", n_examples=10, input_size=4, output_size=2, seed=3)
    assert len(first) == 10
    assert first.inputs().shape == (10, 4)
    assert np.array_equal(first.targets(), second.targets())
    assert set(np.unique(first.inputs())) <= {0.0, 1.0}
    with pytest.raises(ConfigurationError):
        get_dataset("synthetic", n_examples=0)


def test_dataset_validation():
    with pytest.raises(ConfigurationError):
        Dataset(examples=(), input_size=2, output_size=1)
    with pytest.raises(DimensionMismatch):
        Dataset(
            examples=(TrainingExample(input=[1.0], target=[0.0]),),
            input_size=2,
            output_size=1,
        )


def test_shuffle_returns_new_dataset():
    dataset = make_dataset(_rows(8), name="rows")
    shuffled = shuffle_dataset(dataset, np.random.default_rng(0))
    assert shuffled is not dataset
    assert len(shuffled) == len(dataset)
    assert sorted(ex.input[0] for ex in shuffled) == [float(i) for i in range(8)]
    assert [ex.input[0] for ex in dataset] == [float(i) for i in range(8)]


def test_batch_dataset_last_batch_smaller():
    batches = batch_dataset(make_dataset(_rows(7)), 3)
    assert [len(batch) for batch in batches] == [3, 3, 1]
    with pytest.raises(ConfigurationError):
        batch_dataset(make_dataset(_rows(2)), 0)


def test_combine_datasets():
    a = make_dataset(_rows(2), name="a")
    b = make_dataset(_rows(3), name="b")
    merged = combine_datasets(a, b)
    assert len(merged) == 5
    assert merged.provenance["sources"] == ["a", "b"]
    with pytest.raises(ConfigurationError):
        combine_datasets()
    wide = make_dataset([([1.0, 2.0, 3.0], [0.0])])
    with pytest.raises(DimensionMismatch):
        combine_datasets(a, wide)


def test_register_custom_dataset():
    register_dataset("unit-fixture", lambda **_: make_dataset(_rows(4), name="unit-fixture"))
    assert len(get_dataset("unit-fixture")) == 4
