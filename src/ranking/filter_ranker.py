# src/ranking/filter_ranker.py — v2
"""Ranking from declarative filter criteria.

Each criterion runs as a one-off query; queries run concurrently. Raw
scores per signal:
  - skills: each skill's matches are normalized against that skill's own
    match scores, weighted by the skill weight and summed;
  - location, job title: best match score, one attribution;
  - schools, fields of study: best match score, every match attributed;
  - companies: each similar company name score, summed, plus 1.0 per
    direct employer id not already covered by one of those names;
  - platform user: 1 or 0;
  - activeness: composite of activity metrics over the candidate pool.
Every raw score is then normalized over the candidate pool and combined
with the renormalized criterion weights.
"""

from __future__ import annotations

import asyncio
import logging

from candidaterank.config.settings import Settings
from candidaterank.core.models import (
    Profile,
    RankedProfile,
    RankingCandidate,
    Signal,
    SignalMatch,
    SimilarityMatch,
)
from candidaterank.index.vector_query import VectorSimilarityQuery
from candidaterank.logging.context import signal_context
from candidaterank.ranking.activeness import compute_activeness
from candidaterank.ranking.aggregator import WeightedAggregator
from candidaterank.ranking.criteria import FilterCriteria
from candidaterank.ranking.merger import ranked_from_candidates
from candidaterank.ranking.normalizer import normalize_against, population_stats
from candidaterank.store.base_store import BaseStore

logger = logging.getLogger(__name__)

SOURCE = "filter"


def _dedup_best(matches: list[SimilarityMatch]) -> list[SimilarityMatch]:
    """One match per value, keeping the highest score."""
    best: dict[str, SimilarityMatch] = {}
    for m in matches:
        if m.value not in best or m.score > best[m.value].score:
            best[m.value] = m
    return sorted(best.values(), key=lambda m: (-m.score, m.value))


class _Pool:
    """Candidates keyed by profile id, created on first touch."""

    def __init__(self) -> None:
        self.candidates: dict[str, RankingCandidate] = {}

    def get(self, profile_id: str) -> RankingCandidate:
        if profile_id not in self.candidates:
            self.candidates[profile_id] = RankingCandidate(profile_id=profile_id)
        return self.candidates[profile_id]

    def add_raw(self, profile_id: str, signal: Signal, amount: float) -> RankingCandidate:
        candidate = self.get(profile_id)
        candidate.raw_scores[signal] = candidate.raw_scores.get(signal, 0.0) + amount
        return candidate


class FilterRanker:
    """Ranks the profile population against FilterCriteria."""

    def __init__(
        self,
        store: BaseStore,
        query: VectorSimilarityQuery,
        settings: Settings,
    ) -> None:
        self._store = store
        self._query = query
        self._settings = settings

    async def _query_values(self, signal: Signal, texts: list[str]) -> list[SimilarityMatch]:
        if not texts:
            return []
        with signal_context(signal.value):
            results = await asyncio.gather(
                *(self._query.query_text(signal, text) for text in texts)
            )
        return _dedup_best([m for matches in results for m in matches])

    async def _query_skills(
        self, skill_weights: dict[str, float]
    ) -> list[tuple[float, list[SimilarityMatch]]]:
        with signal_context(Signal.SKILLS.value):
            results = await asyncio.gather(
                *(self._query.query_text(Signal.SKILLS, skill) for skill in skill_weights)
            )
        return list(zip(skill_weights.values(), results))

    # --- Raw score rules ---

    @staticmethod
    def _apply_skills(
        pool: _Pool, skill_results: list[tuple[float, list[SimilarityMatch]]]
    ) -> None:
        for weight, matches in skill_results:
            stats = population_stats([m.score for m in matches])
            best: dict[str, SimilarityMatch] = {}
            for m in matches:
                for pid in m.member_ids:
                    if pid not in best or m.score > best[pid].score:
                        best[pid] = m
            for pid, m in best.items():
                candidate = pool.add_raw(
                    pid, Signal.SKILLS, weight * normalize_against(m.score, stats)
                )
                candidate.add_match(
                    Signal.SKILLS, SignalMatch(value=m.value, score=m.score, weight=weight)
                )

    @staticmethod
    def _apply_best(
        pool: _Pool, signal: Signal, matches: list[SimilarityMatch], attribute_all: bool
    ) -> None:
        for m in matches:
            for pid in m.member_ids:
                candidate = pool.get(pid)
                current = candidate.raw_scores.get(signal)
                if current is None or m.score > current:
                    candidate.raw_scores[signal] = m.score
                    if not attribute_all:
                        candidate.matches[signal] = [SignalMatch(value=m.value, score=m.score)]
                if attribute_all:
                    candidate.add_match(signal, SignalMatch(value=m.value, score=m.score))

    @staticmethod
    def _apply_companies(
        pool: _Pool,
        company_ids: list[str],
        employees: list[Profile],
        name_matches: list[SimilarityMatch],
    ) -> None:
        """Credit direct employees and similar company names.

        An employee whose own company name is among the similar names joins
        that match instead of earning a separate direct-employee credit.
        """
        members = {m.value: list(m.member_ids) for m in name_matches}
        wanted = set(company_ids)
        for profile in employees:
            folded = [v for v in profile.attribute_values(Signal.COMPANIES) if v in members]
            if folded:
                if not any(profile.id in members[v] for v in folded):
                    members[folded[0]].append(profile.id)
                continue
            for company_id in sorted(wanted.intersection(profile.company_ids)):
                pool.add_raw(profile.id, Signal.COMPANIES, 1.0).add_match(
                    Signal.COMPANIES, SignalMatch(value=company_id, score=1.0)
                )
        for m in name_matches:
            for pid in dict.fromkeys(members[m.value]):
                pool.add_raw(pid, Signal.COMPANIES, m.score).add_match(
                    Signal.COMPANIES, SignalMatch(value=m.value, score=m.score)
                )

    async def _apply_profile_flags(self, pool: _Pool, criteria: FilterCriteria) -> None:
        profiles = await self._store.get_profiles(list(pool.candidates))
        if criteria.wants_platform_users():
            for profile in profiles:
                pool.get(profile.id).raw_scores[Signal.PLATFORM_USER] = (
                    1.0 if profile.is_platform_user else 0.0
                )
        if criteria.wants_active_contributors():
            activeness = compute_activeness(profiles, self._settings.activeness_threshold)
            for pid, result in activeness.items():
                candidate = pool.get(pid)
                candidate.raw_scores[Signal.ACTIVENESS] = result.score
                candidate.activeness_score = result.score
                candidate.is_active = result.is_active

    async def rank(self, criteria: FilterCriteria) -> list[RankedProfile]:
        """Rank profiles matching the criteria.

        Returns:
            Ranked profiles, best first, capped at ``max_results``. Empty
            when no criterion is present or nothing matched.
        """
        weights = criteria.weights()
        if not weights:
            logger.info("Filter has no criteria; nothing to rank")
            return []

        company_ids = criteria.company_ids()
        (
            skill_results,
            locations,
            job_titles,
            schools,
            fields,
            company_names,
            employees,
        ) = await asyncio.gather(
            self._query_skills(criteria.skill_weights()),
            self._query_values(Signal.LOCATION, _opt(criteria.location_value())),
            self._query_values(Signal.JOB_TITLES, _opt(criteria.job_title_value())),
            self._query_values(Signal.SCHOOLS, criteria.school_values()),
            self._query_values(Signal.FIELDS_OF_STUDY, criteria.field_of_study_values()),
            self._query_values(Signal.COMPANIES, criteria.company_names()),
            self._store.find_profiles_by_company(company_ids),
        )

        pool = _Pool()
        self._apply_skills(pool, skill_results)
        self._apply_best(pool, Signal.LOCATION, locations, attribute_all=False)
        self._apply_best(pool, Signal.JOB_TITLES, job_titles, attribute_all=False)
        self._apply_best(pool, Signal.SCHOOLS, schools, attribute_all=True)
        self._apply_best(pool, Signal.FIELDS_OF_STUDY, fields, attribute_all=True)
        self._apply_companies(pool, company_ids, employees, company_names)

        if not criteria.has_attribute_criteria():
            # Flag-only filters rank the whole population.
            for pid in await self._store.list_profile_ids():
                pool.get(pid)

        if criteria.wants_platform_users() or criteria.wants_active_contributors():
            await self._apply_profile_flags(pool, criteria)

        candidates = [pool.candidates[pid] for pid in sorted(pool.candidates)]
        if not candidates:
            logger.info("Filter matched no profiles")
            return []

        aggregator = WeightedAggregator.from_candidates(candidates, weights)
        aggregator.score_all(candidates, weights, weights)
        logger.info(
            "Filter ranked %d candidates on %s",
            len(candidates),
            sorted(s.value for s in weights),
        )
        return ranked_from_candidates(candidates, SOURCE, self._settings.max_results)


def _opt(text: str | None) -> list[str]:
    return [text] if text else []
