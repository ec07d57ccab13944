"""Stochastic hearing-threshold trajectory prediction package.

This package predicts percentile bands of an individual's future hearing
threshold from a baseline measurement, age, genotype and gender.

Main entry points:
- HearingSimulation.simulator: simulate() and the TrajectorySimulator class
- HearingSimulation.patient: PatientInput and genotype covariate lookup
- HearingSimulation.config: model coefficients and simulation configuration
- HearingSimulation.io: YAML config loading and percentile CSV tables
"""

from HearingSimulation.config import (
    DEFAULT_MODEL_PARAMETERS,
    GammaParams,
    LogisticParams,
    ModelParameters,
    RunConfig,
    SimulationConfig,
)
from HearingSimulation.errors import (
    HearingSimulationError,
    InvalidNumericInput,
    UnknownGender,
    UnknownGenotype,
)
from HearingSimulation.io import (
    load_model_parameters,
    load_patient_table,
    load_percentile_csv,
    load_run_config,
    save_percentile_csv,
)
from HearingSimulation.patient import Covariates, PatientInput, resolve_covariates
from HearingSimulation.percentiles import (
    PercentileRecord,
    aggregate_percentiles,
    band_width,
    records_to_rows,
    records_to_series,
)
from HearingSimulation.simulator import TrajectorySimulator, simulate

__all__ = [
    # Core classes
    "Covariates",
    "GammaParams",
    "LogisticParams",
    "ModelParameters",
    "PatientInput",
    "PercentileRecord",
    "RunConfig",
    "SimulationConfig",
    "TrajectorySimulator",
    "DEFAULT_MODEL_PARAMETERS",
    # Errors
    "HearingSimulationError",
    "InvalidNumericInput",
    "UnknownGender",
    "UnknownGenotype",
    # Functions
    "simulate",
    "resolve_covariates",
    "aggregate_percentiles",
    "band_width",
    "records_to_rows",
    "records_to_series",
    "load_run_config",
    "load_model_parameters",
    "load_patient_table",
    "load_percentile_csv",
    "save_percentile_csv",
]
