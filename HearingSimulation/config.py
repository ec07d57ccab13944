"""Model and simulation configuration for hearing-threshold trajectories.

Holds the fixed coefficients of the two-stage progression model (a logistic
zero-progression gate and a log-linear gamma rate model) and the simulation
grid: number of draws, simulated age range and threshold clamp bounds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from HearingSimulation.patient import PatientInput


@dataclass(frozen=True)
class LogisticParams:
    """Coefficients of the zero-progression logistic gate."""
    intercept: float
    coef_v919: float
    coef_gender: float
    coef_baseline: float

    def __post_init__(self) -> None:
        for name in ("intercept", "coef_v919", "coef_gender", "coef_baseline"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"logistic {name} must be finite")


@dataclass(frozen=True)
class GammaParams:
    """Log-linear rate model plus fixed shape/location of the gamma draw.

    coef_age belongs to the fitted model but does not enter the rate scale.
    """
    intercept: float
    coef_v7232: float
    coef_v919: float
    coef_age: float
    shape: float
    loc: float

    def __post_init__(self) -> None:
        for name in ("intercept", "coef_v7232", "coef_v919", "coef_age", "shape", "loc"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"gamma {name} must be finite")
        if self.shape <= 0:
            raise ValueError("gamma shape must be positive")


@dataclass(frozen=True)
class ModelParameters:
    logistic: LogisticParams
    gamma: GammaParams


DEFAULT_MODEL_PARAMETERS = ModelParameters(
    logistic=LogisticParams(
        intercept=-4.259485,
        coef_v919=0.33518,
        coef_gender=0.331033,
        coef_baseline=0.024602,
    ),
    gamma=GammaParams(
        intercept=3.219828,
        coef_v7232=-1.14074,
        coef_v919=-0.850773,
        coef_age=-0.038724,
        shape=1.2490949,
        loc=0.247527525556966,
    ),
)


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration parameters for the trajectory simulation."""
    n_simulations: int = 1000
    min_age: int = 0
    max_age: int = 40
    threshold_min: float = 0.0
    threshold_max: float = 120.0
    random_seed: int | None = None

    def __post_init__(self) -> None:
        if self.n_simulations <= 0:
            raise ValueError("n_simulations must be positive")
        if self.min_age < 0:
            raise ValueError("min_age must be non-negative")
        if self.max_age < self.min_age:
            raise ValueError("max_age must be greater than or equal to min_age")
        if not self.threshold_min < self.threshold_max:
            raise ValueError("threshold_min must be less than threshold_max")

    def age_grid(self) -> list[int]:
        """Integer simulated ages, ascending."""
        return list(range(self.min_age, self.max_age + 1))


@dataclass(frozen=True)
class RunConfig:
    """Batch run description: who to simulate, with which model, and where to write.

    Exactly one of ``patient`` (a single individual) or ``patients_path`` (a
    CSV table of individuals) must be set.
    """
    out_path: str
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    patient: PatientInput | None = None
    patients_path: str | None = None
    model_params_path: str | None = None

    def __post_init__(self) -> None:
        if self.patient is None and self.patients_path is None:
            raise ValueError("Provide one of patient or patients_path")
        if self.patient is not None and self.patients_path is not None:
            raise ValueError("Provide only one of patient or patients_path")
