# src/ranking/normalizer.py — v1
"""Request-scoped score normalization (z-score + logistic)."""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

import numpy as np


class PopulationStats(NamedTuple):
    mean: float
    std: float


def population_stats(values: Sequence[float]) -> PopulationStats:
    """Mean and population standard deviation; (0, 0) for an empty population."""
    if len(values) == 0:
        return PopulationStats(0.0, 0.0)
    arr = np.asarray(values, dtype=np.float64)
    return PopulationStats(float(arr.mean()), float(arr.std()))


def normalize_score(raw: float, mean: float, std: float) -> float:
    """Map a raw score onto (0, 1) relative to its population.

    A degenerate population (std == 0) maps positive scores to 1 and
    everything else to 0.
    """
    if std == 0:
        return 1.0 if raw > 0 else 0.0
    z = (raw - mean) / std
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


def normalize_against(raw: float, stats: PopulationStats) -> float:
    return normalize_score(raw, stats.mean, stats.std)
