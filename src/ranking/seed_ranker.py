# src/ranking/seed_ranker.py — v1
"""Ranking relative to a set of seed profiles.

Signals are gated on seed agreement first. For each accepted signal the
seeds' average embeddings are averaged into one centroid and matched
against every profile's average embedding. Seeds never rank themselves.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping, Sequence

from candidaterank.config.settings import Settings
from candidaterank.core.models import (
    EMBEDDING_SIGNALS,
    Profile,
    ProfileMatch,
    RankedProfile,
    RankingCandidate,
    Signal,
    SignalMatch,
)
from candidaterank.core.similarity import average_embedding
from candidaterank.index.vector_query import VectorSimilarityQuery
from candidaterank.logging.context import signal_context
from candidaterank.ranking.aggregator import WeightedAggregator
from candidaterank.ranking.merger import ranked_from_candidates
from candidaterank.ranking.signal_selector import select_valid_signals

logger = logging.getLogger(__name__)

SOURCE = "seeds"


def seed_embeddings(seeds: Sequence[Profile]) -> dict[Signal, list[list[float]]]:
    """Per-seed average embeddings of each embedding signal, skipping absent ones."""
    result: dict[Signal, list[list[float]]] = {}
    for signal in EMBEDDING_SIGNALS:
        vectors = [v for v in (s.average_embedding(signal) for s in seeds) if v is not None]
        if vectors:
            result[signal] = vectors
    return result


class SeedRanker:
    """Ranks the profile population by similarity to seed profiles."""

    def __init__(self, query: VectorSimilarityQuery, settings: Settings) -> None:
        self._query = query
        self._settings = settings

    def accepted_signals(self, seed_profiles: Sequence[Profile]) -> set[Signal]:
        return select_valid_signals(
            seed_embeddings(seed_profiles), self._settings.variance_threshold
        )

    async def _query_signal(
        self, signal: Signal, vectors: list[list[float]]
    ) -> list[ProfileMatch]:
        centroid = average_embedding(vectors)
        if centroid is None:
            return []
        with signal_context(signal.value):
            return await self._query.query_profiles(signal, centroid)

    async def rank(
        self,
        seed_profiles: Sequence[Profile],
        weights: Mapping[Signal, float] | None = None,
    ) -> list[RankedProfile]:
        """Rank profiles by similarity to the seeds.

        Args:
            seed_profiles: Resolved seed profiles.
            weights: Optional per-signal weights. Accepted signals share
                equal weight by default.

        Returns:
            Ranked profiles excluding the seeds, best first. Empty when no
            signal is accepted.
        """
        embeddings = seed_embeddings(seed_profiles)
        accepted = select_valid_signals(embeddings, self._settings.variance_threshold)
        if not accepted:
            logger.info("No signal accepted for %d seeds", len(seed_profiles))
            return []

        # Fixed order so equal inputs give equal logs and attributions.
        signals = [s for s in EMBEDDING_SIGNALS if s in accepted]
        results = await asyncio.gather(
            *(self._query_signal(s, embeddings[s]) for s in signals)
        )

        seed_ids = {p.id for p in seed_profiles}
        candidates: dict[str, RankingCandidate] = {}
        for signal, matches in zip(signals, results):
            for match in matches:
                if match.profile_id in seed_ids:
                    continue
                candidate = candidates.setdefault(
                    match.profile_id, RankingCandidate(profile_id=match.profile_id)
                )
                candidate.raw_scores[signal] = match.score
                candidate.add_match(signal, SignalMatch(value=signal.value, score=match.score))

        if not candidates:
            return []

        effective = dict(weights) if weights else {s: 1.0 for s in signals}
        pool = [candidates[pid] for pid in sorted(candidates)]
        aggregator = WeightedAggregator.from_candidates(pool, signals)
        aggregator.score_all(pool, signals, effective)

        logger.info(
            "Seeds ranked %d candidates on %s", len(pool), [s.value for s in signals]
        )
        return ranked_from_candidates(pool, SOURCE, self._settings.max_results)
