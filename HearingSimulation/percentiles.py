"""Per-age percentile aggregation of simulated trajectories.

Percentiles use a nearest-rank floor rule: for N sorted draws the p-th
percentile is the value at 0-based index floor(N * p / 100). No interpolation
between adjacent ranks is performed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

import numpy as np

PERCENTILE_LEVELS: tuple[int, ...] = (10, 20, 30, 40, 50, 60, 70, 80, 90)
PERCENTILE_FIELDS: tuple[str, ...] = tuple(f"P{p}" for p in PERCENTILE_LEVELS)


@dataclass(frozen=True)
class PercentileRecord:
    """Nine percentile thresholds (dB HL) at one simulated age."""
    age: int
    P10: float
    P20: float
    P30: float
    P40: float
    P50: float
    P60: float
    P70: float
    P80: float
    P90: float

    def values(self) -> tuple[float, ...]:
        return tuple(getattr(self, name) for name in PERCENTILE_FIELDS)


def floor_rank_indices(n: int, levels: Sequence[int] = PERCENTILE_LEVELS) -> np.ndarray:
    """0-based sorted-array indices floor(n * p / 100) for each level."""
    if n <= 0:
        raise ValueError("n must be positive")
    return np.array([(n * int(p)) // 100 for p in levels], dtype=np.intp)


def aggregate_percentiles(thresholds: np.ndarray, ages: Sequence[int]) -> list[PercentileRecord]:
    """Reduce an (n_draws, n_ages) threshold array to one record per age.

    Records are returned in the order of ``ages``.
    """
    thresholds = np.asarray(thresholds, dtype=np.float64)
    if thresholds.ndim != 2:
        raise ValueError("thresholds must be a 2-D (n_draws, n_ages) array")
    n_draws, n_ages = thresholds.shape
    if len(ages) != n_ages:
        raise ValueError(f"ages length mismatch: expected {n_ages}, got {len(ages)}")

    ordered = np.sort(thresholds, axis=0)
    selected = ordered[floor_rank_indices(n_draws), :]

    records: list[PercentileRecord] = []
    for col, age in enumerate(ages):
        values = {name: float(selected[row, col]) for row, name in enumerate(PERCENTILE_FIELDS)}
        records.append(PercentileRecord(age=int(age), **values))
    return records


# -----------------------------------------------------------------------------
# Table/series views for downstream display
# -----------------------------------------------------------------------------

def records_to_rows(records: Iterable[PercentileRecord]) -> list[dict]:
    """Flatten records into table rows keyed age, P10, ..., P90."""
    return [asdict(record) for record in records]


def records_to_series(records: Sequence[PercentileRecord]) -> tuple[list[int], dict[str, list[float]]]:
    """Column view: the age axis plus one series per percentile level."""
    ages = [record.age for record in records]
    series = {name: [getattr(record, name) for record in records] for name in PERCENTILE_FIELDS}
    return ages, series


def band_width(record: PercentileRecord, low: str = "P10", high: str = "P90") -> float:
    """Spread between two percentile fields of a record."""
    for name in (low, high):
        if name not in PERCENTILE_FIELDS:
            raise ValueError(f"Unknown percentile field: {name}")
    return getattr(record, high) - getattr(record, low)
