# src/ranking/merger.py — v1
"""Merge ranked lists from independent entry points.

Scores of a profile found by several entry points are summed. Attributions
are unioned per signal, deduplicated by value (the higher score is kept).
Output is sorted by score descending, then profile id ascending.
"""

from __future__ import annotations

from typing import Sequence

from candidaterank.core.models import (
    RankedProfile,
    RankingCandidate,
    Signal,
    SignalMatch,
    normalize_value,
)


def _merge_matches(
    existing: list[SignalMatch], incoming: list[SignalMatch]
) -> list[SignalMatch]:
    by_key: dict[str, SignalMatch] = {}
    for match in [*existing, *incoming]:
        key = normalize_value(match.value)
        kept = by_key.get(key)
        if kept is None or match.score > kept.score:
            by_key[key] = match
    return list(by_key.values())


def _combine(left: RankedProfile, right: RankedProfile) -> RankedProfile:
    attributions: dict[Signal, list[SignalMatch]] = {
        s: list(m) for s, m in left.attributions.items()
    }
    for signal, matches in right.attributions.items():
        attributions[signal] = _merge_matches(attributions.get(signal, []), matches)

    scores = [s for s in (left.activeness_score, right.activeness_score) if s is not None]
    flags = [f for f in (left.is_active, right.is_active) if f is not None]

    return RankedProfile(
        profile_id=left.profile_id,
        score=left.score + right.score,
        attributions=attributions,
        sources=list(dict.fromkeys([*left.sources, *right.sources])),
        is_active=any(flags) if flags else None,
        activeness_score=max(scores) if scores else None,
    )


def sort_ranked(results: list[RankedProfile]) -> list[RankedProfile]:
    return sorted(results, key=lambda r: (-r.score, r.profile_id))


def merge_results(
    *result_lists: Sequence[RankedProfile],
    max_results: int | None = None,
) -> list[RankedProfile]:
    """Merge ranked lists into one deduplicated list."""
    merged: dict[str, RankedProfile] = {}
    for results in result_lists:
        for item in results:
            current = merged.get(item.profile_id)
            merged[item.profile_id] = (
                item.model_copy(deep=True) if current is None else _combine(current, item)
            )

    ordered = sort_ranked(list(merged.values()))
    return ordered[:max_results] if max_results is not None else ordered


def ranked_from_candidates(
    candidates: Sequence[RankingCandidate],
    source: str,
    max_results: int | None = None,
) -> list[RankedProfile]:
    """Turn scored candidates of one entry point into a sorted ranked list."""
    ranked = [
        RankedProfile(
            profile_id=c.profile_id,
            score=c.score,
            attributions={s: list(m) for s, m in c.matches.items()},
            sources=[source],
            is_active=c.is_active,
            activeness_score=c.activeness_score,
        )
        for c in candidates
    ]
    ordered = sort_ranked(ranked)
    return ordered[:max_results] if max_results is not None else ordered
