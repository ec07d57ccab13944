"""Error types raised for invalid patient inputs."""

from __future__ import annotations

from typing import Any


class HearingSimulationError(ValueError):
    """Base class for input errors surfaced by the simulator."""


class UnknownGenotype(HearingSimulationError):
    def __init__(self, genotype: Any) -> None:
        super().__init__(f"Unknown genotype: {genotype}")
        self.genotype = genotype


class UnknownGender(HearingSimulationError):
    def __init__(self, gender: Any) -> None:
        super().__init__(f"gender must be 'Male' or 'Female'; got {gender!r}")
        self.gender = gender


class InvalidNumericInput(HearingSimulationError):
    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"{field} must be a finite number; got {value!r}")
        self.field = field
        self.value = value
