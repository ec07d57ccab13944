"""Trajectory simulator for individual hearing-threshold progression.

Each draw picks a yearly progression rate from the zero/gamma mixture and
projects a straight line through the baseline measurement:
    threshold(a) = clamp(T0 + rate * (a - age0), 0, 120)
for every integer age a of the simulated horizon. Repeating the draw N times
and taking per-age percentiles gives the predicted percentile bands.
"""

from __future__ import annotations

import logging

import numpy as np

from HearingSimulation.config import DEFAULT_MODEL_PARAMETERS, ModelParameters, SimulationConfig
from HearingSimulation.patient import PatientInput
from HearingSimulation.percentiles import PercentileRecord, aggregate_percentiles
from HearingSimulation.stochastic import (
    draw_progression_rates,
    gamma_rate_scale,
    project_thresholds,
    zero_progression_probability,
)

logger = logging.getLogger(__name__)


class TrajectorySimulator:
    """Monte Carlo simulator of threshold trajectories for one model."""

    def __init__(
        self,
        sim_config: SimulationConfig | None = None,
        params: ModelParameters = DEFAULT_MODEL_PARAMETERS,
    ) -> None:
        self.sim_config = sim_config if sim_config is not None else SimulationConfig()
        self.params = params
        self.ages = np.asarray(self.sim_config.age_grid(), dtype=np.int64)

    def _make_rng(self, rng: np.random.Generator | None) -> np.random.Generator:
        if rng is not None:
            return rng
        return np.random.default_rng(self.sim_config.random_seed)

    def model_quantities(self, patient: PatientInput) -> tuple[float, float]:
        """Return (prob_zero, gamma scale) for a patient."""
        covariates = patient.covariates
        prob_zero = zero_progression_probability(
            self.params.logistic,
            covariates,
            patient.is_male,
            patient.baseline_threshold,
        )
        scale = gamma_rate_scale(self.params.gamma, covariates)
        return prob_zero, scale

    def draw_rates(self, patient: PatientInput, rng: np.random.Generator) -> np.ndarray:
        """Draw one progression rate per simulated trajectory."""
        prob_zero, scale = self.model_quantities(patient)
        rates = draw_progression_rates(
            self.sim_config.n_simulations,
            prob_zero,
            self.params.gamma,
            scale,
            rng,
        )
        logger.debug(
            "prob_zero=%.6f scale=%.6f zero-progression draws=%d/%d",
            prob_zero,
            scale,
            int(np.count_nonzero(rates == 0.0)),
            rates.size,
        )
        return rates

    def simulate_thresholds(
        self,
        patient: PatientInput,
        rng: np.random.Generator | None = None,
    ) -> np.ndarray:
        """Simulate trajectories as an (n_simulations, n_ages) threshold array."""
        rng = self._make_rng(rng)
        rates = self.draw_rates(patient, rng)
        return project_thresholds(
            rates,
            patient.baseline_threshold,
            patient.baseline_age,
            self.ages,
            self.sim_config.threshold_min,
            self.sim_config.threshold_max,
        )

    def run(
        self,
        patient: PatientInput,
        rng: np.random.Generator | None = None,
    ) -> list[PercentileRecord]:
        """Simulate trajectories and reduce them to per-age percentile records."""
        logger.info(
            "Simulating %d trajectories (threshold=%s, age=%s, genotype=%s, gender=%s)",
            self.sim_config.n_simulations,
            patient.baseline_threshold,
            patient.baseline_age,
            patient.genotype,
            patient.gender,
        )
        thresholds = self.simulate_thresholds(patient, rng)
        return aggregate_percentiles(thresholds, self.ages.tolist())


def simulate(
    baseline_threshold: float,
    baseline_age: int,
    genotype: str,
    gender: str,
    *,
    rng: np.random.Generator | None = None,
    seed: int | None = None,
    params: ModelParameters = DEFAULT_MODEL_PARAMETERS,
    config: SimulationConfig | None = None,
) -> list[PercentileRecord]:
    """Predict percentile bands of future hearing thresholds for one individual.

    Returns one record per simulated age (0..40 by default), ascending.
    Pass ``rng`` or ``seed`` for reproducible draws; ``rng`` wins if both given.
    """
    patient = PatientInput(
        baseline_threshold=baseline_threshold,
        baseline_age=baseline_age,
        genotype=genotype,
        gender=gender,
    )
    if rng is None and seed is not None:
        rng = np.random.default_rng(seed)
    return TrajectorySimulator(config, params).run(patient, rng)
