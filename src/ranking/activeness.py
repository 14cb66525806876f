# src/ranking/activeness.py — v1
"""Composite activeness score from public activity metrics.

Each sub-metric is normalized against its own population, then combined
with fixed sub-weights. The "is active" flag thresholds the composite
before it is normalized as a signal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from candidaterank.core.models import Profile
from candidaterank.ranking.normalizer import normalize_against, population_stats

SUB_WEIGHTS: dict[str, float] = {
    "followers": 0.2,
    "total_contributions": 0.3,
    "total_stars": 0.3,
    "follower_to_following_ratio": 0.2,
}

DEFAULT_ACTIVE_THRESHOLD = 0.5


@dataclass(frozen=True)
class Activeness:
    score: float
    is_active: bool


def compute_activeness(
    profiles: Sequence[Profile],
    threshold: float = DEFAULT_ACTIVE_THRESHOLD,
) -> dict[str, Activeness]:
    """Composite activeness of each profile relative to the given population."""
    stats = {
        metric: population_stats([float(getattr(p, metric)) for p in profiles])
        for metric in SUB_WEIGHTS
    }
    result: dict[str, Activeness] = {}
    for profile in profiles:
        composite = sum(
            weight * normalize_against(float(getattr(profile, metric)), stats[metric])
            for metric, weight in SUB_WEIGHTS.items()
        )
        result[profile.id] = Activeness(score=composite, is_active=composite >= threshold)
    return result
