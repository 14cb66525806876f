# src/ranking/aggregator.py — v1
"""Weighted aggregation of normalized per-signal scores."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from candidaterank.core.models import RankingCandidate, Signal
from candidaterank.ranking.normalizer import (
    PopulationStats,
    normalize_against,
    population_stats,
)

logger = logging.getLogger(__name__)


def renormalize_weights(
    weights: Mapping[Signal, float], accepted: Iterable[Signal]
) -> dict[Signal, float]:
    """Restrict weights to accepted signals and rescale them to sum to 1.

    Accepted signals without a weight are ignored. If every remaining
    weight is 0 the signals share the weight equally.
    """
    kept = {s: float(weights[s]) for s in accepted if s in weights}
    if not kept:
        return {}
    total = sum(kept.values())
    if total <= 0:
        return {s: 1.0 / len(kept) for s in kept}
    return {s: w / total for s, w in kept.items()}


class WeightedAggregator:
    """Combines raw per-signal scores using population stats of one request."""

    def __init__(self, stats: Mapping[Signal, PopulationStats]) -> None:
        self._stats = dict(stats)

    @classmethod
    def from_candidates(
        cls, candidates: Sequence[RankingCandidate], signals: Iterable[Signal]
    ) -> WeightedAggregator:
        """Build stats over the candidate pool; a missing raw score counts as 0."""
        stats = {
            signal: population_stats([c.raw_scores.get(signal, 0.0) for c in candidates])
            for signal in signals
        }
        return cls(stats)

    def stats_for(self, signal: Signal) -> PopulationStats:
        return self._stats.get(signal, PopulationStats(0.0, 0.0))

    def normalized(self, candidate: RankingCandidate, signal: Signal) -> float:
        return normalize_against(candidate.raw_scores.get(signal, 0.0), self.stats_for(signal))

    def aggregate(
        self,
        candidate: RankingCandidate,
        accepted: Iterable[Signal],
        weights: Mapping[Signal, float],
    ) -> float:
        """Final score: sum of renormalized weight x normalized score over accepted signals."""
        effective = renormalize_weights(weights, accepted)
        return sum(w * self.normalized(candidate, s) for s, w in effective.items())

    def score_all(
        self,
        candidates: Sequence[RankingCandidate],
        accepted: Iterable[Signal],
        weights: Mapping[Signal, float],
    ) -> None:
        """Set ``score`` on every candidate."""
        accepted = set(accepted)
        for candidate in candidates:
            candidate.score = self.aggregate(candidate, accepted, weights)
