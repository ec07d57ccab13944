"""I/O utilities for simulation input/output.

Handles loading run configurations, model parameter overrides and patient
tables, and saving/loading per-age percentile tables as CSV.
"""

from __future__ import annotations

import csv
import logging
import os
import pathlib
from typing import IO, Any, Mapping, Sequence

import yaml

from HearingSimulation.config import (
    GammaParams,
    LogisticParams,
    ModelParameters,
    RunConfig,
    SimulationConfig,
)
from HearingSimulation.errors import UnknownGender
from HearingSimulation.patient import GENDERS, PatientInput
from HearingSimulation.percentiles import PERCENTILE_FIELDS, PercentileRecord, records_to_rows

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Configuration loading
# -----------------------------------------------------------------------------

def _resolve_path(value: str, base_dir: pathlib.Path) -> pathlib.Path:
    path = pathlib.Path(value)
    if not path.is_absolute():
        path = base_dir / path
    return path.resolve()


def _check_readable(path: pathlib.Path, label: str) -> None:
    if not path.exists():
        raise ValueError(f"{label} not found: {path}")
    if not path.is_file():
        raise ValueError(f"{label} is not a file: {path}")
    if not os.access(path, os.R_OK):
        raise ValueError(f"{label} is not readable: {path}")


def _require(raw: Mapping[str, Any], key: str, section: str | None = None) -> Any:
    if key not in raw:
        name = f"{section}.{key}" if section else key
        raise ValueError(f"Missing required config field: {name}")
    return raw[key]


def _load_yaml_mapping(path: pathlib.Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a YAML mapping: {path}")
    return raw


def simulation_config_from_mapping(raw: Mapping[str, Any]) -> SimulationConfig:
    """Build a SimulationConfig from optional top-level keys, using defaults."""
    defaults = SimulationConfig()
    seed = raw.get("random_seed")
    return SimulationConfig(
        n_simulations=int(raw.get("n_simulations", defaults.n_simulations)),
        min_age=int(raw.get("min_age", defaults.min_age)),
        max_age=int(raw.get("max_age", defaults.max_age)),
        threshold_min=float(raw.get("threshold_min", defaults.threshold_min)),
        threshold_max=float(raw.get("threshold_max", defaults.threshold_max)),
        random_seed=int(seed) if seed is not None else None,
    )


def patient_from_mapping(raw: Mapping[str, Any]) -> PatientInput:
    """Build a PatientInput from a mapping of raw (possibly string) fields.

    File inputs must spell gender exactly "Male" or "Female".
    """
    genotype = _require(raw, "genotype", "patient")
    gender = _require(raw, "gender", "patient")
    if isinstance(gender, str):
        gender = gender.strip()
    if gender not in GENDERS:
        raise UnknownGender(gender)
    return PatientInput(
        baseline_threshold=_require(raw, "baseline_threshold", "patient"),
        baseline_age=_require(raw, "baseline_age", "patient"),
        genotype=genotype.strip() if isinstance(genotype, str) else genotype,
        gender=gender,
    )


def load_run_config(path: str | pathlib.Path) -> RunConfig:
    """Load and validate a run configuration from YAML."""
    path = pathlib.Path(path)
    raw = _load_yaml_mapping(path)
    base_dir = path.resolve().parent

    out_path = _resolve_path(str(_require(raw, "out_path")), base_dir)
    patients_path = raw.get("patients_path")
    model_params_path = raw.get("model_params_path")
    patient_raw = raw.get("patient")

    if patients_path is not None:
        patients_path = _resolve_path(str(patients_path), base_dir)
        _check_readable(patients_path, "patients_path")
    if model_params_path is not None:
        model_params_path = _resolve_path(str(model_params_path), base_dir)
        _check_readable(model_params_path, "model_params_path")
    patient = None
    if patient_raw is not None:
        if not isinstance(patient_raw, dict):
            raise ValueError("patient must be a YAML mapping")
        patient = patient_from_mapping(patient_raw)

    return RunConfig(
        out_path=str(out_path),
        simulation=simulation_config_from_mapping(raw),
        patient=patient,
        patients_path=str(patients_path) if patients_path is not None else None,
        model_params_path=str(model_params_path) if model_params_path is not None else None,
    )


def load_model_parameters(path: str | pathlib.Path) -> ModelParameters:
    """Load model coefficients from YAML with ``logistic`` and ``gamma`` mappings."""
    path = pathlib.Path(path)
    raw = _load_yaml_mapping(path)
    logistic = _require(raw, "logistic")
    gamma = _require(raw, "gamma")
    if not isinstance(logistic, dict) or not isinstance(gamma, dict):
        raise ValueError(f"logistic and gamma must be YAML mappings: {path}")
    return ModelParameters(
        logistic=LogisticParams(
            intercept=float(_require(logistic, "intercept", "logistic")),
            coef_v919=float(_require(logistic, "coef_v919", "logistic")),
            coef_gender=float(_require(logistic, "coef_gender", "logistic")),
            coef_baseline=float(_require(logistic, "coef_baseline", "logistic")),
        ),
        gamma=GammaParams(
            intercept=float(_require(gamma, "intercept", "gamma")),
            coef_v7232=float(_require(gamma, "coef_v7232", "gamma")),
            coef_v919=float(_require(gamma, "coef_v919", "gamma")),
            coef_age=float(_require(gamma, "coef_age", "gamma")),
            shape=float(_require(gamma, "shape", "gamma")),
            loc=float(_require(gamma, "loc", "gamma")),
        ),
    )


# -----------------------------------------------------------------------------
# Patient table loading
# -----------------------------------------------------------------------------

_PATIENT_FIELDS = {"baseline_threshold", "baseline_age", "genotype", "gender"}


def load_patient_table(path: str | pathlib.Path) -> list[tuple[str, PatientInput]]:
    """Read patients from CSV; rows without a patient_id are numbered from 1."""
    patients: list[tuple[str, PatientInput]] = []
    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = _PATIENT_FIELDS - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"Missing columns in patient CSV: {sorted(missing)}")
        for idx, row in enumerate(reader, start=1):
            patient_id = (row.get("patient_id") or "").strip() or str(idx)
            patients.append((patient_id, patient_from_mapping(row)))
    if not patients:
        raise ValueError(f"No patient rows found in {path}")
    ids = [pid for pid, _ in patients]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Duplicate patient_id values in {path}")
    return patients


# -----------------------------------------------------------------------------
# Percentile table I/O
# -----------------------------------------------------------------------------

_BASE_FIELDS = ["age", *PERCENTILE_FIELDS]


def write_percentile_csv(
    results: Mapping[str, Sequence[PercentileRecord]] | Sequence[PercentileRecord],
    f: IO[str],
) -> None:
    """Write percentile records as CSV to an open text stream.

    A plain sequence of records is written as ``age,P10,...,P90``; a mapping
    of patient_id -> records adds a leading ``patient_id`` column.
    """
    if isinstance(results, Mapping):
        writer = csv.DictWriter(f, fieldnames=["patient_id", *_BASE_FIELDS])
        writer.writeheader()
        for patient_id, records in results.items():
            for row in records_to_rows(records):
                writer.writerow({"patient_id": patient_id, **row})
    else:
        writer = csv.DictWriter(f, fieldnames=_BASE_FIELDS)
        writer.writeheader()
        writer.writerows(records_to_rows(results))


def save_percentile_csv(
    results: Mapping[str, Sequence[PercentileRecord]] | Sequence[PercentileRecord],
    path: str | pathlib.Path,
) -> None:
    """Save percentile records to CSV."""
    if not results:
        raise ValueError("No percentile records to write")
    path_obj = pathlib.Path(path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    with open(path_obj, "w", newline="", encoding="utf-8") as f:
        write_percentile_csv(results, f)
    logger.info("Wrote percentile table to %s", path_obj)


def _record_from_row(row: Mapping[str, str]) -> PercentileRecord:
    return PercentileRecord(
        age=int(row["age"]),
        **{name: float(row[name]) for name in PERCENTILE_FIELDS},
    )


def load_percentile_csv(path: str | pathlib.Path) -> dict[str, list[PercentileRecord]]:
    """Load a percentile table, grouped by patient_id.

    Single-patient tables (no patient_id column) are returned under key "".
    """
    grouped: dict[str, list[PercentileRecord]] = {}
    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = set(_BASE_FIELDS) - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"Missing columns in percentile CSV: {sorted(missing)}")
        for row in reader:
            grouped.setdefault(row.get("patient_id", ""), []).append(_record_from_row(row))
    if not grouped:
        raise ValueError(f"No percentile rows found in {path}")
    return grouped
