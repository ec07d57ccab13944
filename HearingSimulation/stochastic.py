"""Stochastic progression-rate utilities.

Two-stage mixture for the yearly threshold progression rate (dB/yr):
a logistic gate decides whether an individual shows no progression at all,
otherwise the rate is loc + Gamma(shape, scale) with a log-linear scale.
"""

from __future__ import annotations

import math

import numpy as np
from scipy.special import expit

from HearingSimulation.config import GammaParams, LogisticParams
from HearingSimulation.patient import Covariates


# -----------------------------------------------------------------------------
# Model quantities
# -----------------------------------------------------------------------------

def zero_progression_logit(
    params: LogisticParams,
    covariates: Covariates,
    is_male: int,
    baseline_threshold: float,
) -> float:
    return (
        params.intercept
        + params.coef_v919 * covariates.v919
        + params.coef_gender * is_male
        + params.coef_baseline * baseline_threshold
    )


def zero_progression_probability(
    params: LogisticParams,
    covariates: Covariates,
    is_male: int,
    baseline_threshold: float,
) -> float:
    """Probability that a draw has a progression rate of exactly zero.

    prob_0 = exp(logit) / (1 + exp(logit)), evaluated as the logistic sigmoid.
    """
    logit = zero_progression_logit(params, covariates, is_male, baseline_threshold)
    return float(expit(logit))


def gamma_rate_scale(params: GammaParams, covariates: Covariates) -> float:
    """Scale of the gamma rate draw: exp(linear predictor) / shape.

    The mean of the gamma component is therefore exp(linear predictor).
    """
    lambda_0 = math.exp(
        params.intercept
        + params.coef_v7232 * covariates.v7232
        + params.coef_v919 * covariates.v919
    )
    return lambda_0 / params.shape


# -----------------------------------------------------------------------------
# Rate draws
# -----------------------------------------------------------------------------

def draw_progression_rates(
    n: int,
    prob_zero: float,
    params: GammaParams,
    scale: float,
    rng: np.random.Generator,
) -> np.ndarray:
    """Draw n i.i.d. progression rates from the zero/gamma mixture.

    Each draw takes a uniform u in [0, 1); u < prob_zero gives rate 0,
    otherwise rate = loc + Gamma(shape, scale).
    """
    if n <= 0:
        raise ValueError("n must be positive")
    gate = rng.random(n)
    progressing = ~(gate < prob_zero)
    rates = np.zeros(n, dtype=np.float64)
    n_progressing = int(np.count_nonzero(progressing))
    if n_progressing:
        rates[progressing] = params.loc + rng.gamma(params.shape, scale, size=n_progressing)
    return rates


# -----------------------------------------------------------------------------
# Trajectory projection
# -----------------------------------------------------------------------------

def project_thresholds(
    rates: np.ndarray,
    baseline_threshold: float,
    baseline_age: int,
    ages: np.ndarray,
    threshold_min: float,
    threshold_max: float,
) -> np.ndarray:
    """Project linear trajectories pivoted at (baseline_age, baseline_threshold).

    Returns an (n_draws, n_ages) array clamped to [threshold_min, threshold_max].
    Ages before the baseline extrapolate backwards.
    """
    rates = np.asarray(rates, dtype=np.float64)
    ages = np.asarray(ages, dtype=np.float64)
    if rates.ndim != 1:
        raise ValueError("rates must be a 1-D array")
    if ages.ndim != 1:
        raise ValueError("ages must be a 1-D array")
    offsets = ages - float(baseline_age)
    thresholds = baseline_threshold + rates[:, None] * offsets[None, :]
    return np.clip(thresholds, threshold_min, threshold_max)
