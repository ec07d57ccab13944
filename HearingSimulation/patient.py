"""Patient inputs and genotype covariates.

A patient is described by a baseline hearing threshold (dB HL), the age at
which it was measured, a two-locus genotype code and gender. The genotype
code is mapped onto the two indicator covariates used by the progression
model: v7232 (copies of the 7232 allele, 0-2) and v919 (carrier of 919, 0/1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from HearingSimulation.errors import InvalidNumericInput, UnknownGenotype

GENOTYPE_COVARIATES: dict[str, tuple[int, int]] = {
    "G20": (2, 0),
    "G11": (1, 1),
    "G10": (1, 0),
    "G01": (0, 1),
    "G00": (0, 0),
}

GENDERS = ("Male", "Female")


@dataclass(frozen=True)
class Covariates:
    v7232: int
    v919: int


def resolve_covariates(genotype: str) -> Covariates:
    """Map a genotype code to its (v7232, v919) covariates."""
    try:
        v7232, v919 = GENOTYPE_COVARIATES[genotype]
    except (KeyError, TypeError):
        raise UnknownGenotype(genotype) from None
    return Covariates(v7232=v7232, v919=v919)


def _as_finite_float(name: str, value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidNumericInput(name, value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidNumericInput(name, value) from None
    if not math.isfinite(number):
        raise InvalidNumericInput(name, value)
    return number


def _as_age(value: Any) -> int:
    """Whole years of age; fractional input is truncated toward zero."""
    return int(_as_finite_float("baseline_age", value))


@dataclass(frozen=True)
class PatientInput:
    """Baseline measurement and characteristics of one individual.

    Numeric fields are coerced (so "20" or 10.0 are accepted) and checked for
    presence and finiteness. The genotype must be one of the known codes; any
    gender other than "Male" counts as female in the model.
    """
    baseline_threshold: float
    baseline_age: int
    genotype: str
    gender: str

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "baseline_threshold", _as_finite_float("baseline_threshold", self.baseline_threshold)
        )
        object.__setattr__(self, "baseline_age", _as_age(self.baseline_age))
        resolve_covariates(self.genotype)

    @property
    def covariates(self) -> Covariates:
        return resolve_covariates(self.genotype)

    @property
    def is_male(self) -> int:
        return 1 if self.gender == "Male" else 0
