from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

import numpy as np

from HearingSimulation.config import DEFAULT_MODEL_PARAMETERS, SimulationConfig
from HearingSimulation.io import (
    load_model_parameters,
    load_patient_table,
    load_run_config,
    save_percentile_csv,
    write_percentile_csv,
)
from HearingSimulation.patient import GENDERS, GENOTYPE_COVARIATES, PatientInput
from HearingSimulation.simulator import TrajectorySimulator


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Predict hearing-threshold percentile bands.")
    parser.add_argument("--config", default=None, help="Path to run YAML config")
    parser.add_argument("--threshold", type=float, default=None, help="Baseline threshold (dB HL)")
    parser.add_argument("--age", type=int, default=None, help="Age at baseline measurement")
    parser.add_argument("--genotype", choices=sorted(GENOTYPE_COVARIATES), default=None, help="Genotype code")
    parser.add_argument("--gender", choices=GENDERS, default=None, help="Gender")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--n-simulations", type=int, default=None, help="Number of simulated trajectories")
    parser.add_argument("--out", default=None, help="Output CSV path (default: print to stdout)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    return parser.parse_args(argv)


_SINGLE_RUN_FLAGS = (
    ("--threshold", "threshold"),
    ("--age", "age"),
    ("--genotype", "genotype"),
    ("--gender", "gender"),
    ("--seed", "seed"),
    ("--n-simulations", "n_simulations"),
    ("--out", "out"),
)


def _run_from_config(args: argparse.Namespace) -> None:
    conflicting = [flag for flag, attr in _SINGLE_RUN_FLAGS if getattr(args, attr) is not None]
    if conflicting:
        raise ValueError(
            f"{', '.join(conflicting)} cannot be combined with --config; set them in the YAML config"
        )
    run_config = load_run_config(args.config)
    params = DEFAULT_MODEL_PARAMETERS
    if run_config.model_params_path is not None:
        params = load_model_parameters(run_config.model_params_path)
    simulator = TrajectorySimulator(run_config.simulation, params)
    rng = np.random.default_rng(run_config.simulation.random_seed)

    if run_config.patient is not None:
        records = simulator.run(run_config.patient, rng)
        save_percentile_csv(records, run_config.out_path)
        print(f"Wrote {len(records)} percentile rows to {run_config.out_path}")
        return

    patients = load_patient_table(run_config.patients_path)
    results = {patient_id: simulator.run(patient, rng) for patient_id, patient in patients}
    save_percentile_csv(results, run_config.out_path)
    print(f"Wrote percentiles for {len(results)} patients to {run_config.out_path}")


def _run_single(args: argparse.Namespace) -> None:
    missing = [
        flag
        for flag, value in (
            ("--threshold", args.threshold),
            ("--age", args.age),
            ("--genotype", args.genotype),
            ("--gender", args.gender),
        )
        if value is None
    ]
    if missing:
        raise ValueError(f"All fields are required without --config; missing {', '.join(missing)}")

    defaults = SimulationConfig()
    sim_config = SimulationConfig(
        n_simulations=args.n_simulations if args.n_simulations is not None else defaults.n_simulations,
        random_seed=args.seed,
    )
    patient = PatientInput(
        baseline_threshold=args.threshold,
        baseline_age=args.age,
        genotype=args.genotype,
        gender=args.gender,
    )
    records = TrajectorySimulator(sim_config).run(patient)
    if args.out is None:
        write_percentile_csv(records, sys.stdout)
    else:
        save_percentile_csv(records, args.out)
        print(f"Wrote {len(records)} percentile rows to {args.out}")


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.config is not None:
        _run_from_config(args)
    else:
        _run_single(args)


if __name__ == "__main__":
    main()
