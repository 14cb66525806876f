# tests/unit/ranking/test_unit_seed_ranker.py — v1
"""Tests for ranking/seed_ranker.py — gating, centroid queries, seed exclusion."""

from __future__ import annotations

import pytest

from conftest import VOCABULARY

from candidaterank.core.models import Profile, Signal
from candidaterank.ranking.seed_ranker import SeedRanker, seed_embeddings


def _profile(pid: str, **averages: list[float]) -> Profile:
    return Profile(id=pid, average_embeddings={Signal(k): v for k, v in averages.items()})


@pytest.fixture
def ranker(vector_query, settings):
    return SeedRanker(vector_query, settings)


class TestSeedEmbeddings:
    def test_absent_signals_skipped(self):
        seeds = [
            _profile("s1", skills=VOCABULARY["rust"]),
            _profile("s2", skills=VOCABULARY["rust"], location=VOCABULARY["new york"]),
        ]
        result = seed_embeddings(seeds)
        assert len(result[Signal.SKILLS]) == 2
        assert len(result[Signal.LOCATION]) == 1
        assert Signal.SCHOOLS not in result


class TestSeedRanker:
    @pytest.mark.asyncio
    async def test_rust_seeds_rank_rust_profiles_first(self, store, ranker):
        seeds = [
            _profile("s1", skills=VOCABULARY["rust"]),
            _profile("s2", skills=VOCABULARY["rust"]),
        ]
        for profile in [
            *seeds,
            _profile("r1", skills=VOCABULARY["rust"]),
            _profile("r2", skills=VOCABULARY["rust programming"]),
            _profile("cpp", skills=VOCABULARY["c++"]),
            _profile("py", skills=VOCABULARY["python"]),
        ]:
            await store.upsert_profile(profile)

        assert ranker.accepted_signals(seeds) == {Signal.SKILLS}
        results = await ranker.rank(seeds)

        assert [r.profile_id for r in results] == ["r1", "r2", "cpp"]
        assert results[0].sources == ["seeds"]
        assert results[0].attributions[Signal.SKILLS][0].value == "skills"

    @pytest.mark.asyncio
    async def test_incoherent_signal_not_queried(self, store, ranker):
        seeds = [
            _profile("s1", skills=VOCABULARY["rust"], location=VOCABULARY["new york"]),
            _profile("s2", skills=VOCABULARY["rust"], location=VOCABULARY["san francisco"]),
        ]
        await store.upsert_profile(_profile("local", location=VOCABULARY["new york"]))
        await store.upsert_profile(_profile("dev", skills=VOCABULARY["rust"]))

        assert ranker.accepted_signals(seeds) == {Signal.SKILLS}
        results = await ranker.rank(seeds)
        assert [r.profile_id for r in results] == ["dev"]

    @pytest.mark.asyncio
    async def test_seeds_never_rank_themselves(self, store, ranker):
        seeds = [_profile("s1", skills=VOCABULARY["rust"])]
        await store.upsert_profile(seeds[0])
        assert await ranker.rank(seeds) == []

    @pytest.mark.asyncio
    async def test_no_accepted_signal(self, ranker):
        assert await ranker.rank([Profile(id="bare")]) == []

    @pytest.mark.asyncio
    async def test_custom_weights(self, store, ranker):
        seeds = [
            _profile("s1", skills=VOCABULARY["rust"], location=VOCABULARY["new york"]),
        ]
        await store.upsert_profile(
            _profile("skill_match", skills=VOCABULARY["rust"], location=VOCABULARY["designer"])
        )
        await store.upsert_profile(
            _profile("place_match", skills=VOCABULARY["c++"], location=VOCABULARY["new york"])
        )
        results = await ranker.rank(seeds, weights={Signal.LOCATION: 1.0, Signal.SKILLS: 0.0})
        assert results[0].profile_id == "place_match"
