# tests/unit/ranking/test_unit_normalizer.py — v1
"""Tests for ranking/normalizer.py."""

from __future__ import annotations

import math

import pytest

from candidaterank.ranking.normalizer import (
    PopulationStats,
    normalize_against,
    normalize_score,
    population_stats,
)


class TestPopulationStats:
    def test_mean_and_population_std(self):
        stats = population_stats([1.0, 3.0])
        assert stats == PopulationStats(2.0, 1.0)

    def test_empty(self):
        assert population_stats([]) == PopulationStats(0.0, 0.0)


class TestNormalizeScore:
    def test_mean_maps_to_half(self):
        assert normalize_score(2.0, 2.0, 1.0) == pytest.approx(0.5)

    def test_one_std_above(self):
        assert normalize_score(3.0, 2.0, 1.0) == pytest.approx(1 / (1 + math.exp(-1)))

    def test_monotonic(self):
        scores = [normalize_score(x, 0.0, 1.0) for x in (-2.0, -1.0, 0.0, 1.0, 2.0)]
        assert scores == sorted(scores)
        assert all(0.0 < s < 1.0 for s in scores)

    def test_extreme_z_does_not_overflow(self):
        assert normalize_score(-1e6, 0.0, 1.0) == pytest.approx(0.0)
        assert normalize_score(1e6, 0.0, 1.0) == pytest.approx(1.0)

    def test_zero_std_positive_raw(self):
        assert normalize_score(5.0, 5.0, 0.0) == 1.0

    def test_zero_std_zero_raw(self):
        assert normalize_score(0.0, 0.0, 0.0) == 0.0

    def test_normalize_against(self):
        assert normalize_against(2.0, PopulationStats(2.0, 4.0)) == pytest.approx(0.5)
