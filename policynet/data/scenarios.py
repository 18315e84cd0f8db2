"""Regulatory-compliance scenario datasets.

Each scenario maps eight stakeholder/context features to four community
outcome scores (safety, economic opportunity, inclusion, sustainability).
Features 0-3 describe stakeholder capacity, features 4-7 the regulatory and
support context.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

from ..core.types import TrainingExample
from .registry import Dataset, combine_datasets, register_dataset

INPUT_SIZE = 8
OUTPUT_SIZE = 4

OUTCOMES = ("safety", "opportunity", "inclusion", "sustainability")

_Row = Tuple[str, str, Sequence[float], Sequence[float]]

_SCENARIOS: Dict[str, Tuple[str, Tuple[_Row, ...]]] = {
    "baseline": (
        "Baseline regulatory compliance with standard enforcement",
        (
            ("Compliant small business", "small_business",
             (1.0, 0.8, 0.9, 0.7, 0.6, 0.5, 0.4, 0.8), (0.9, 0.7, 0.6, 0.7)),
            ("Vulnerable worker, limited support", "vulnerable_worker",
             (0.3, 0.4, 0.5, 0.8, 0.7, 0.2, 0.3, 0.4), (0.6, 0.4, 0.3, 0.5)),
            ("Active community organization", "community_org",
             (0.7, 0.9, 0.8, 0.6, 0.9, 0.7, 0.8, 0.9), (0.8, 0.8, 0.9, 0.8)),
            ("Enforcement-focused regulator", "regulator",
             (0.9, 0.7, 0.6, 0.5, 0.8, 0.6, 0.5, 0.7), (0.9, 0.6, 0.5, 0.7)),
            ("Small business, compliance challenges", "small_business",
             (0.6, 0.4, 0.5, 0.6, 0.3, 0.4, 0.5, 0.3), (0.5, 0.5, 0.4, 0.4)),
        ),
    ),
    "targeted_support": (
        "Enhanced support for vulnerable populations and small operators",
        (
            ("Small business with support", "small_business",
             (1.0, 0.8, 0.9, 0.7, 0.6, 0.9, 0.8, 0.8), (0.9, 0.9, 0.8, 0.9)),
            ("Vulnerable worker with services", "vulnerable_worker",
             (0.3, 0.4, 0.5, 0.8, 0.7, 0.8, 0.9, 0.7), (0.8, 0.7, 0.8, 0.7)),
            ("Community hub model", "community_org",
             (0.7, 0.9, 0.8, 0.6, 0.9, 0.9, 0.9, 0.9), (0.9, 0.9, 0.9, 0.9)),
            ("Supportive regulator", "regulator",
             (0.9, 0.7, 0.6, 0.5, 0.8, 0.8, 0.7, 0.9), (0.9, 0.8, 0.7, 0.8)),
            ("Resident with resource access", "resident",
             (0.5, 0.6, 0.7, 0.8, 0.7, 0.8, 0.8, 0.7), (0.8, 0.7, 0.8, 0.8)),
        ),
    ),
    "high_enforcement": (
        "Punitive enforcement with minimal support infrastructure",
        (
            ("Small business, high pressure", "small_business",
             (1.0, 0.8, 0.9, 0.7, 0.6, 0.2, 0.3, 0.5), (0.7, 0.4, 0.3, 0.5)),
            ("Vulnerable worker excluded", "vulnerable_worker",
             (0.3, 0.4, 0.5, 0.8, 0.7, 0.1, 0.2, 0.2), (0.5, 0.2, 0.1, 0.3)),
            ("Enforcement-only regulator", "regulator",
             (0.9, 0.7, 0.6, 0.5, 0.8, 0.2, 0.3, 0.4), (0.8, 0.4, 0.3, 0.5)),
            ("Community org, limited resources", "community_org",
             (0.7, 0.9, 0.8, 0.6, 0.9, 0.3, 0.4, 0.5), (0.6, 0.5, 0.5, 0.5)),
            ("Resident with barriers", "resident",
             (0.5, 0.6, 0.7, 0.8, 0.7, 0.2, 0.3, 0.4), (0.6, 0.4, 0.4, 0.5)),
        ),
    ),
    "coordinated": (
        "Coordinated ecosystem with aligned incentives and support",
        (
            ("Small business, full ecosystem", "small_business",
             (1.0, 0.9, 0.9, 0.8, 0.8, 0.9, 0.9, 0.9), (0.95, 0.9, 0.9, 0.9)),
            ("Vulnerable worker, full support", "vulnerable_worker",
             (0.5, 0.6, 0.7, 0.9, 0.8, 0.9, 0.9, 0.8), (0.9, 0.8, 0.9, 0.8)),
            ("Community backbone organization", "community_org",
             (0.8, 0.95, 0.9, 0.7, 0.9, 0.95, 0.9, 0.95), (0.95, 0.95, 0.95, 0.95)),
            ("Supportive regulation", "regulator",
             (0.9, 0.8, 0.7, 0.6, 0.9, 0.9, 0.8, 0.9), (0.95, 0.85, 0.8, 0.9)),
            ("Empowered resident", "resident",
             (0.6, 0.7, 0.8, 0.9, 0.8, 0.9, 0.9, 0.8), (0.9, 0.85, 0.9, 0.85)),
        ),
    ),
}

SCENARIO_NAMES = tuple(_SCENARIOS)


def scenario_dataset(name: str) -> Dataset:
    try:
        description, rows = _SCENARIOS[name]
    except KeyError as exc:
        raise KeyError(
            f"Unknown scenario {name!r}. Available scenarios: {', '.join(SCENARIO_NAMES)}"
        ) from exc
    examples = tuple(
        TrainingExample(
            input=features,
            target=outcomes,
            label=label,
            metadata={"scenario": name, "stakeholder_type": stakeholder},
        )
        for label, stakeholder, features, outcomes in rows
    )
    return Dataset(
        examples=examples,
        input_size=INPUT_SIZE,
        output_size=OUTPUT_SIZE,
        description=description,
        name=name,
        provenance={"type": "scenario", "scenario": name},
    )


def _scenario_factory(name: str):
    def factory(**_: object) -> Dataset:
        return scenario_dataset(name)

    return factory


def _combined_factory(**_: object) -> Dataset:
    combined = combine_datasets(*(scenario_dataset(name) for name in SCENARIO_NAMES))
    return Dataset(
        examples=combined.examples,
        input_size=combined.input_size,
        output_size=combined.output_size,
        description="All regulatory scenarios combined",
        name="combined",
        provenance={"type": "scenario", "scenario": list(SCENARIO_NAMES)},
    )


for _name in SCENARIO_NAMES:
    register_dataset(_name, _scenario_factory(_name))
register_dataset("combined", _combined_factory)

__all__ = ["INPUT_SIZE", "OUTPUT_SIZE", "OUTCOMES", "SCENARIO_NAMES", "scenario_dataset"]
