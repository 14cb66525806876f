# tests/unit/ranking/test_unit_aggregator.py — v1
"""Tests for ranking/aggregator.py — weight renormalization and scoring."""

from __future__ import annotations

import math

import pytest

from candidaterank.core.models import RankingCandidate, Signal
from candidaterank.ranking.aggregator import WeightedAggregator, renormalize_weights
from candidaterank.ranking.normalizer import PopulationStats

A = Signal.SKILLS
B = Signal.LOCATION


def _logistic(z: float) -> float:
    return 1 / (1 + math.exp(-z))


class TestRenormalizeWeights:
    def test_all_accepted(self):
        assert renormalize_weights({A: 0.3, B: 0.7}, {A, B}) == pytest.approx({A: 0.3, B: 0.7})

    def test_rejected_signal_dropped(self):
        assert renormalize_weights({A: 0.3, B: 0.7}, {A}) == {A: 1.0}

    def test_unweighted_accepted_signal_ignored(self):
        assert renormalize_weights({A: 2.0}, {A, B}) == {A: 1.0}

    def test_zero_weights_split_equally(self):
        assert renormalize_weights({A: 0.0, B: 0.0}, {A, B}) == {A: 0.5, B: 0.5}

    def test_nothing_accepted(self):
        assert renormalize_weights({A: 1.0}, set()) == {}


class TestWeightedAggregator:
    @pytest.fixture
    def aggregator(self):
        return WeightedAggregator({A: PopulationStats(0.5, 0.1), B: PopulationStats(0.2, 0.2)})

    def test_weighted_sum(self, aggregator):
        candidate = RankingCandidate(profile_id="p", raw_scores={A: 0.5, B: 0.4})
        score = aggregator.aggregate(candidate, {A, B}, {A: 0.3, B: 0.7})
        assert score == pytest.approx(0.3 * 0.5 + 0.7 * _logistic(1.0))

    def test_rejected_signal_gets_full_weight_elsewhere(self, aggregator):
        candidate = RankingCandidate(profile_id="p", raw_scores={A: 0.5, B: 0.4})
        score = aggregator.aggregate(candidate, {A}, {A: 0.3, B: 0.7})
        assert score == pytest.approx(0.5)

    def test_missing_raw_counts_as_zero(self):
        aggregator = WeightedAggregator({A: PopulationStats(0.0, 0.0)})
        candidate = RankingCandidate(profile_id="p")
        assert aggregator.aggregate(candidate, {A}, {A: 1.0}) == 0.0

    def test_unknown_signal_stats(self, aggregator):
        assert aggregator.stats_for(Signal.SCHOOLS) == PopulationStats(0.0, 0.0)

    def test_from_candidates_and_score_all(self):
        candidates = [
            RankingCandidate(profile_id="a", raw_scores={A: 1.0}),
            RankingCandidate(profile_id="b", raw_scores={A: 3.0}),
            RankingCandidate(profile_id="c"),
        ]
        aggregator = WeightedAggregator.from_candidates(candidates, [A])
        stats = aggregator.stats_for(A)
        assert stats.mean == pytest.approx(4 / 3)

        aggregator.score_all(candidates, [A], {A: 1.0})
        assert candidates[1].score > candidates[0].score > candidates[2].score
